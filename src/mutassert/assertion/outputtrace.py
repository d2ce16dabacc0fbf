#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides output traces, the per-execution record of observed facts."""

from __future__ import annotations

import dataclasses

from collections import defaultdict
from typing import TYPE_CHECKING
from typing import Any

import mutassert.assertion.assertion as ass

from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    from collections.abc import Iterator

    import mutassert.testcase.testcase as tc
    import mutassert.testcase.variablereference as vr


@dataclasses.dataclass
class OutputTraceEntry:
    """The facts one observer family recorded for one variable after one statement.

    The observations map a family-specific key (see
    `mutassert.assertion.assertion.observation_key`) to the observed value.
    """

    position: int
    var: vr.VariableReference
    observations: dict[Any, Any] = dataclasses.field(default_factory=dict)

    def differing_keys(self, other: OutputTraceEntry, float_precision: float) -> list[Any]:
        """Provides the keys observed in both entries with different values.

        Args:
            other: The entry of the other execution
            float_precision: The tolerance for floats

        Returns:
            The keys, in the order of this entry
        """
        return [
            key
            for key, value in self.observations.items()
            if key in other.observations
            and not ass.values_equal(value, other.observations[key], float_precision)
        ]

    def clone(self) -> OutputTraceEntry:
        """Clone this entry.

        Returns:
            A copy of this entry
        """
        return OutputTraceEntry(self.position, self.var, dict(self.observations))


class OutputTrace:
    """All facts one observer family recorded during one execution of a test.

    Entries are keyed by statement position and variable; there is at most one
    entry per key.
    """

    def __init__(self, kind: ass.AssertionKind, float_precision: float = 0.01) -> None:
        """Create a new, empty trace.

        Args:
            kind: The observer family this trace belongs to
            float_precision: The tolerance for floats when comparing observations
        """
        self._kind = kind
        self._float_precision = float_precision
        self._trace: dict[int, dict[vr.VariableReference, OutputTraceEntry]] = defaultdict(
            dict
        )

    @property
    def kind(self) -> ass.AssertionKind:
        """Provides the observer family of this trace.

        Returns:
            The kind of assertions this trace produces
        """
        return self._kind

    def add_entry(self, position: int, var: vr.VariableReference, key: Any, value: Any) -> None:
        """Record an observation, unless one was already recorded for its key.

        Args:
            position: The position of the executed statement
            var: The observed variable
            key: The family-specific key of the observation
            value: The observed value
        """
        entries = self._trace[position]
        if (entry := entries.get(var)) is None:
            entry = entries[var] = OutputTraceEntry(position, var)
        entry.observations.setdefault(key, value)

    def get_entry(self, position: int, var: vr.VariableReference) -> OutputTraceEntry | None:
        """Provides the entry for a statement position and a variable.

        Args:
            position: The statement position
            var: The variable

        Returns:
            The entry, if one was recorded
        """
        if position not in self._trace:
            return None
        return self._trace[position].get(var)

    def contains_entry(self, position: int, var: vr.VariableReference) -> bool:
        """Was something recorded for the statement position and the variable?

        Args:
            position: The statement position
            var: The variable

        Returns:
            Whether an entry exists
        """
        return self.get_entry(position, var) is not None

    def entries(self) -> Iterator[OutputTraceEntry]:
        """Iterates all entries, ordered by statement position.

        Yields:
            The entries of this trace
        """
        for position in sorted(self._trace):
            yield from self._trace[position].values()

    def differs(self, other: OutputTrace) -> bool:
        """Does the other trace disagree with this one at some common key?

        Args:
            other: The trace of another execution of the same test

        Returns:
            Whether at least one entry differs
        """
        return self.num_differ(other) > 0

    def num_differ(self, other: OutputTrace) -> int:
        """Counts the entries that disagree with the other trace.

        Entries that only exist in one of the traces are skipped.

        Args:
            other: The trace of another execution of the same test

        Returns:
            The number of differing entries
        """
        count = 0
        for entry in self.entries():
            other_entry = other.get_entry(entry.position, entry.var)
            if other_entry is not None and entry.differing_keys(
                other_entry, self._float_precision
            ):
                count += 1
        return count

    def get_assertions(
        self,
        test_case: tc.TestCase,
        other: OutputTrace,
        mutation_id: int | None = None,
    ) -> int:
        """Attach an assertion for every observation the other trace disagrees with.

        The expected values are taken from this trace, which is expected to stem
        from the unmodified execution.  An equal assertion that is already attached
        is not added again, it only gains the mutant.

        Args:
            test_case: The test case both traces stem from
            other: The trace of the execution with an active mutant
            mutation_id: The id of the active mutant

        Returns:
            The number of differing entries
        """
        num_differences = 0
        for entry in self.entries():
            other_entry = other.get_entry(entry.position, entry.var)
            if other_entry is None:
                continue
            keys = entry.differing_keys(other_entry, self._float_precision)
            if not keys:
                continue
            num_differences += 1
            statement = test_case.get_statement(entry.position)
            for key in keys:
                assertion = self._attach(
                    statement,
                    ass.create_assertion(
                        self._kind, statement, entry.var, key, entry.observations[key]
                    ),
                )
                if mutation_id is not None:
                    assertion.killed_mutants.add(mutation_id)
        return num_differences

    def get_all_assertions(self, test_case: tc.TestCase) -> list[ass.Assertion]:
        """Creates an assertion for every observation of this trace.

        The assertions are not attached to their statements.

        Args:
            test_case: The test case this trace stems from

        Returns:
            The assertions, ordered by statement position
        """
        assertions: list[ass.Assertion] = []
        for entry in self.entries():
            statement = test_case.get_statement(entry.position)
            assertions.extend(
                ass.create_assertion(self._kind, statement, entry.var, key, value)
                for key, value in entry.observations.items()
            )
        return assertions

    def is_detected_by(self, assertion: ass.Assertion) -> bool:
        """Would the assertion fail on the execution this trace stems from?

        Args:
            assertion: An attached assertion

        Returns:
            Whether the assertion is false for the recorded observation
        """
        if ass.kind_of(assertion) is not self._kind or assertion.statement is None:
            return False
        entry = self.get_entry(assertion.statement.get_position(), assertion.source)
        if entry is None:
            return False
        key = ass.observation_key(assertion)
        if key not in entry.observations:
            return False
        return not ass.holds(assertion, entry.observations[key], self._float_precision)

    def clone(self) -> OutputTrace:
        """Clone this trace.

        Returns:
            A deep copy of the entries of this trace
        """
        copy = OutputTrace(self._kind, self._float_precision)
        for position, entries in self._trace.items():
            copy._trace[position] = {var: entry.clone() for var, entry in entries.items()}  # noqa: SLF001
        return copy

    def clear(self) -> None:
        """Clear this trace."""
        self._trace.clear()

    def __len__(self) -> int:
        return sum(len(entries) for entries in self._trace.values())

    def __repr__(self) -> str:
        return f"OutputTrace({self._kind.value}, entries={len(self)})"

    @staticmethod
    def _attach(statement, assertion: ass.Assertion) -> ass.Assertion:
        for existing in statement.assertions:
            if existing == assertion:
                return existing
        statement.add_assertion(assertion)
        return assertion


@dataclasses.dataclass
class AssertionVerificationTrace:
    """Trace for assertion verification."""

    # Assertion that did not hold
    failed: dict[int, OrderedSet[int]] = dataclasses.field(
        default_factory=lambda: defaultdict(OrderedSet)
    )
    # Assertion whose execution raised an error
    error: dict[int, OrderedSet[int]] = dataclasses.field(
        default_factory=lambda: defaultdict(OrderedSet)
    )

    def merge(self, other: AssertionVerificationTrace) -> None:
        """Merge another trace into this trace.

        Args:
            other: The other trace

        """
        for pos, assertions in other.failed.items():
            self.failed[pos].update(assertions)
        for pos, assertions in other.error.items():
            self.error[pos].update(assertions)

    def was_violated(self, stmt_idx: int, assertion_idx: int) -> bool:
        """Was the assertion at the given position violated?

        This may happen because the assertion failed or another error occurred.

        Args:
            stmt_idx: The statement index.
            assertion_idx: The assertion index.

        Returns:
            True, if the assertion was violated.
        """
        if stmt_idx in self.failed and assertion_idx in self.failed[stmt_idx]:
            return True
        return bool(stmt_idx in self.error and assertion_idx in self.error[stmt_idx])
