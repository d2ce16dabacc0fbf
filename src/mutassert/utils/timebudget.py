#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a cooperative time budget for one generation phase."""

from __future__ import annotations

import time


class TimeBudget:
    """A time budget that is polled, never blocked on.

    The budget starts when it is created or when `start` is called again.
    A non-positive maximum means the phase is unbounded.
    """

    def __init__(self, max_seconds: float) -> None:
        """Creates a new time budget.

        Args:
            max_seconds: The seconds available for the phase
        """
        self._max_ns = int(max_seconds * 1_000_000_000)
        self._start_time_ns = time.time_ns()

    def start(self) -> None:
        """Restart the phase."""
        self._start_time_ns = time.time_ns()

    @property
    def elapsed_ns(self) -> int:
        """Provides the nano seconds spent since the phase started.

        Returns:
            The elapsed nano seconds
        """
        return time.time_ns() - self._start_time_ns

    def is_there_still_time_in_phase(self) -> bool:
        """Is there time left in the current phase?

        Returns:
            Whether the phase has time left
        """
        if self._max_ns <= 0:
            return True
        return self.elapsed_ns < self._max_ns

    def phase_percentage(self) -> float:
        """Provides the elapsed share of the phase.

        Returns:
            A value between 0.0 and 1.0
        """
        if self._max_ns <= 0:
            return 0.0
        return min(1.0, self.elapsed_ns / self._max_ns)

    def __repr__(self) -> str:
        return f"TimeBudget({self._max_ns / 1_000_000_000}s)"
