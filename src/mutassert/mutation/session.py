#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the counters that disable pathological mutants during one run."""

from __future__ import annotations

import logging

from collections import defaultdict


_LOGGER = logging.getLogger(__name__)


class MutationDiscoverySession:
    """Counts how often a mutant timed out or raised a new exception.

    The counters persist across the test cases of one generation run.  A mutant
    whose counter reached the threshold is no longer executed and is treated as
    killed.
    """

    def __init__(self) -> None:  # noqa: D107
        self.timed_out_mutations: dict[int, int] = defaultdict(int)
        self.exception_mutations: dict[int, int] = defaultdict(int)

    def record_timeout(self, mutation_id: int) -> None:
        """Count a timeout of a mutant.

        Args:
            mutation_id: The id of the mutant
        """
        self.timed_out_mutations[mutation_id] += 1
        _LOGGER.debug(
            "Mutant %d timed out (%d times)",
            mutation_id,
            self.timed_out_mutations[mutation_id],
        )

    def record_exception(self, mutation_id: int) -> None:
        """Count a new exception raised under a mutant.

        Args:
            mutation_id: The id of the mutant
        """
        self.exception_mutations[mutation_id] += 1
        _LOGGER.debug(
            "Mutant %d raised a new exception (%d times)",
            mutation_id,
            self.exception_mutations[mutation_id],
        )

    def is_disabled(self, mutation_id: int, threshold: int) -> bool:
        """Is the mutant no longer executed?

        Args:
            mutation_id: The id of the mutant
            threshold: The number of timeouts or exceptions that disables a mutant

        Returns:
            Whether one of the counters of the mutant reached the threshold
        """
        return (
            self.timed_out_mutations.get(mutation_id, 0) >= threshold
            or self.exception_mutations.get(mutation_id, 0) >= threshold
        )

    def reset(self) -> None:
        """Forget all counts, e.g., between two independent runs."""
        self.timed_out_mutations.clear()
        self.exception_mutations.clear()
