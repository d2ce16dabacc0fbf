#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the registry of mutants and the global fault-injection switch.

A unit under test declares its mutants by registering them and guards each faulty
variant with a probe::

    MUTANTS = MutationRegistry()
    GT_TO_GE = MUTANTS.register("is_positive", "replace > with >=")

    def is_positive(self) -> bool:
        if MUTANTS.touched(GT_TO_GE):
            return self.value >= 0
        return self.value > 0

A probe records that the mutant was reached and tells whether it is the active
one.  At most one mutant is active at any time.
"""

from __future__ import annotations

import contextlib
import dataclasses
import logging
import threading

from typing import TYPE_CHECKING

from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    from collections.abc import Iterator


_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Mutation:
    """A single fault that can be injected into the unit under test."""

    mutation_id: int
    target: str
    description: str = ""

    def __str__(self) -> str:
        if self.description:
            return f"Mutation {self.mutation_id} in {self.target}: {self.description}"
        return f"Mutation {self.mutation_id} in {self.target}"


class MutationRegistry:
    """Enumerates the mutants of a unit and switches them on and off.

    Besides the active mutant, the registry records which mutants were touched,
    i.e., whose probe was reached, since the last reset.  While an execution is
    running, `current_thread_identifier` holds the identity of its worker thread;
    a probe from any other thread, e.g., a worker that exceeded its timeout and
    still runs, is aborted with a `RuntimeError`.
    """

    def __init__(self) -> None:  # noqa: D107
        self._mutations: list[Mutation] = []
        self._active: Mutation | None = None
        self._touched: OrderedSet[int] = OrderedSet()
        self._lock = threading.RLock()
        self.current_thread_identifier: int | None = None

    def register(self, target: str, description: str = "") -> int:
        """Register a new mutant.

        Args:
            target: The name of the code element that is mutated
            description: What the mutant changes

        Returns:
            The id of the new mutant
        """
        with self._lock:
            mutation = Mutation(len(self._mutations), target, description)
            self._mutations.append(mutation)
            return mutation.mutation_id

    @property
    def mutations(self) -> list[Mutation]:
        """Provides all registered mutants, ordered by id.

        Returns:
            The registered mutants
        """
        with self._lock:
            return list(self._mutations)

    def get(self, mutation_id: int) -> Mutation:
        """Provides the mutant with the given id.

        Args:
            mutation_id: The id of the mutant

        Returns:
            The mutant
        """
        with self._lock:
            return self._mutations[mutation_id]

    def __len__(self) -> int:
        with self._lock:
            return len(self._mutations)

    @property
    def active_mutation(self) -> Mutation | None:
        """Provides the currently active mutant.

        Returns:
            The active mutant, if any
        """
        with self._lock:
            return self._active

    def activate(self, mutation: Mutation) -> None:
        """Inject the fault of a mutant.

        Args:
            mutation: The mutant to activate

        Raises:
            RuntimeError: If another mutant is still active
        """
        with self._lock:
            if self._active is not None and self._active != mutation:
                raise RuntimeError(
                    f"Cannot activate {mutation} while {self._active} is active"
                )
            _LOGGER.debug("Activating %s", mutation)
            self._active = mutation

    def deactivate(self) -> None:
        """Remove the injected fault, if any."""
        with self._lock:
            self._active = None

    @contextlib.contextmanager
    def activated(self, mutation: Mutation) -> Iterator[Mutation]:
        """Keep a mutant active for the duration of a with block.

        Args:
            mutation: The mutant to activate

        Yields:
            The active mutant
        """
        self.activate(mutation)
        try:
            yield mutation
        finally:
            self.deactivate()

    def touched(self, mutation_id: int) -> bool:
        """The probe that guards the faulty variant of a mutant.

        Args:
            mutation_id: The id of the mutant whose code is reached

        Returns:
            Whether the mutant is active, i.e., the faulty variant shall be used

        Raises:
            RuntimeError: If called from a thread other than the one executing
                the current test
        """
        with self._lock:
            if (
                self.current_thread_identifier is not None
                and threading.current_thread().ident != self.current_thread_identifier
            ):
                raise RuntimeError("The current thread shall not be executed any more")
            self._touched.add(mutation_id)
            return self._active is not None and self._active.mutation_id == mutation_id

    @property
    def touched_mutants(self) -> OrderedSet[int]:
        """Provides the ids of the mutants touched since the last reset.

        Returns:
            A copy of the touched mutant ids, in the order they were first touched
        """
        with self._lock:
            return self._touched.copy()

    def reset_touched(self) -> None:
        """Forget which mutants were touched."""
        with self._lock:
            self._touched.clear()
