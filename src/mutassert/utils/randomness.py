#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a singleton instance of Random that can be seeded."""

from __future__ import annotations

import random

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import MutableSequence


class Random(random.Random):  # noqa: S311
    """Override Random to allow querying for the seed value.

    It generates a seed if none was given from `time.time_ns()`.  This is NOT
    cryptographically safe, and this random-number generator should not be used for
    anything related to cryptography.  For shuffling mutants and tests, however, it is
    good enough to use the current time stamp in nano seconds as seed.
    """

    def __init__(self, x=None) -> None:  # noqa: D107
        super().__init__(x)
        self._current_seed: int | None = None
        self.seed(x)

    def seed(self, a=None, version: int = 2) -> None:  # noqa: D102
        if a is None:
            import time  # noqa: PLC0415

            a = time.time_ns()

        self._current_seed = a
        super().seed(a)

    def get_seed(self) -> int:
        """Provides the used seed for random-number generation.

        Returns:
            Provides the used seed
        """
        assert self._current_seed is not None
        return self._current_seed


RNG: Random = Random()
RNG.seed()


def shuffle(sequence: MutableSequence) -> None:
    """Shuffle the given sequence in place using the seeded generator.

    Args:
        sequence: The sequence to shuffle
    """
    RNG.shuffle(sequence)
