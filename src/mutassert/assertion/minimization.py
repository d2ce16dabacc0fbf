#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides assertion minimization and the redundancy filters.

Minimization selects, greedily, a small subset of the candidate assertions of a
test that kills the same mutants as all candidates together.  The filters remove
assertions that are implied by other assertions or by the test code itself.
"""

from __future__ import annotations

import logging

from typing import TYPE_CHECKING

import mutassert.assertion.assertion as ass
import mutassert.testcase.statement as st

from mutassert.assertion.inspector import Inspector


if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Mapping
    from collections.abc import Sequence

    import mutassert.assertion.outputtrace as ot
    import mutassert.testcase.testcase as tc
    import mutassert.testcase.variablereference as vr


_LOGGER = logging.getLogger(__name__)

EMPTY_INSPECTOR_NAMES = frozenset({"is_empty", "isempty", "empty"})
SIZE_INSPECTOR_NAMES = frozenset({"size", "get_size", "length", "get_length", "len"})


def minimize(assertions: Sequence[ass.Assertion]) -> list[ass.Assertion]:
    """Select a subset of assertions that kills every mutant any of them kills.

    This is the greedy approximation of minimum set cover: repeatedly take the
    assertion that kills the most mutants not killed so far.  Ties go to the
    assertion with the higher priority, then to the one discovered later.  Finally,
    selected assertions whose mutants are all killed by the other selected ones
    are dropped again.

    Args:
        assertions: The candidates, in discovery order, with their killed mutants

    Returns:
        The selected assertions, in discovery order
    """
    covered: set[int] = set()
    selected: list[int] = []
    while True:
        best: tuple[int, int, int] | None = None
        for idx, assertion in enumerate(assertions):
            num_killed = sum(1 for mut in assertion.killed_mutants if mut not in covered)
            if num_killed == 0:
                continue
            key = (num_killed, ass.assertion_priority(assertion), idx)
            if best is None or key > best:
                best = key
        if best is None:
            break
        selected.append(best[2])
        covered.update(assertions[best[2]].killed_mutants)

    for idx in reversed(tuple(selected)):
        others: set[int] = set()
        for other in selected:
            if other != idx:
                others.update(assertions[other].killed_mutants)
        if others.issuperset(assertions[idx].killed_mutants):
            selected.remove(idx)

    _LOGGER.debug("Minimized assertions from %d to %d", len(assertions), len(selected))
    return [assertions[idx] for idx in sorted(selected)]


def killed_mutants(
    assertions: Iterable[ass.Assertion],
    mutation_traces: Mapping[int, Sequence[ot.OutputTrace]],
) -> set[int]:
    """Determine the mutants that at least one of the assertions detects.

    Args:
        assertions: The assertions
        mutation_traces: The traces recorded under each executed mutant

    Returns:
        The ids of the detected mutants
    """
    killed: set[int] = set()
    for assertion in assertions:
        for mutation_id, traces in mutation_traces.items():
            if mutation_id not in killed and any(
                trace.is_detected_by(assertion) for trace in traces
            ):
                killed.add(mutation_id)
    return killed


def replace_assertions(test_case: tc.TestCase, assertions: Sequence[ass.Assertion]) -> None:
    """Replace all assertions of a test case by the given ones.

    Args:
        test_case: The test case
        assertions: The attached assertions to keep
    """
    for statement in test_case.statements:
        statement.assertions.clear()
    for assertion in assertions:
        assert assertion.statement is not None
        assertion.statement.add_assertion(assertion)


def is_used_as_callee(test_case: tc.TestCase, var: vr.VariableReference) -> bool:
    """Is the variable used as a call target or field source after its definition?

    Args:
        test_case: The test case
        var: The variable

    Returns:
        Whether a later statement calls a method on or reads a field of it
    """
    for statement in test_case.statements[var.get_statement_position() + 1 :]:
        if isinstance(statement, st.MethodStatement) and statement.callee is var:
            return True
        if isinstance(statement, st.FieldStatement) and statement.source is var:
            return True
    return False


def filter_redundant_non_null_assertions(test_case: tc.TestCase) -> None:
    """Remove non-null assertions that are implied by the test itself.

    A null assertion on the result of a constructor or method call is redundant if
    another assertion on that result implies it is not None.  If the statement
    carries no other assertion, it is redundant when the result is used as a call
    target or field source later.

    Args:
        test_case: The test case
    """
    redundant: list[tuple[st.Statement, ass.Assertion]] = []
    for statement in test_case.statements:
        if not isinstance(statement, (st.ConstructorStatement, st.MethodStatement)):
            continue
        ret_val = statement.ret_val
        for assertion in statement.assertions:
            if not isinstance(assertion, ass.NullAssertion) or assertion.source is not ret_val:
                continue
            if len(statement.assertions) > 1:
                if any(
                    not isinstance(other, ass.NullAssertion) and other.source is ret_val
                    for other in statement.assertions
                ):
                    redundant.append((statement, assertion))
            elif is_used_as_callee(test_case, ret_val):
                redundant.append((statement, assertion))
    for statement, assertion in redundant:
        _LOGGER.debug("Removing redundant null assertion %s", assertion)
        statement.assertions.discard(assertion)


def filter_redundant_chained_inspector_assertions(test_case: tc.TestCase) -> None:
    """Remove chained inspector assertions whose outer call appears in the test.

    Args:
        test_case: The test case
    """
    redundant: list[tuple[st.Statement, ass.Assertion]] = []
    for position, statement in enumerate(test_case.statements):
        for assertion in statement.assertions:
            if not isinstance(assertion, ass.InspectorAssertion):
                continue
            outer_name = assertion.inspector.outer_name
            if outer_name is None:
                continue
            if any(
                isinstance(later, st.MethodStatement)
                and later.callee is assertion.source
                and later.method_name == outer_name
                for later in test_case.statements[position + 1 :]
            ):
                redundant.append((statement, assertion))
    for statement, assertion in redundant:
        _LOGGER.debug("Removing redundant chained inspector assertion %s", assertion)
        statement.assertions.discard(assertion)


def filter_redundant_is_empty_size_assertions(test_case: tc.TestCase) -> None:
    """Collapse pairs of emptiness and size assertions on the same object.

    If the size is zero, the emptiness assertion is kept, otherwise the size one.

    Args:
        test_case: The test case
    """
    for statement in test_case.statements:
        if len(statement.assertions) < 2:
            continue
        groups: dict[
            tuple[vr.VariableReference, str | None],
            dict[str, ass.InspectorAssertion],
        ] = {}
        for assertion in statement.assertions:
            if not isinstance(assertion, ass.InspectorAssertion):
                continue
            name = assertion.inspector.name.lower()
            group = groups.setdefault(
                (assertion.source, assertion.inspector.outer_name), {}
            )
            if name in EMPTY_INSPECTOR_NAMES:
                group["empty"] = assertion
            elif name in SIZE_INSPECTOR_NAMES:
                group["size"] = assertion
        for group in groups.values():
            if "empty" not in group or "size" not in group:
                continue
            size = group["size"].value
            if isinstance(size, int) and not isinstance(size, bool) and size == 0:
                statement.assertions.discard(group["size"])
            else:
                statement.assertions.discard(group["empty"])


def filter_inspector_primitive_duplication(statement: st.Statement) -> None:
    """Drop an inspector assertion that repeats the call of its own statement.

    For ``int_0 = stack_0.size()``, ``assert int_0 == 1`` makes
    ``assert stack_0.size() == 1`` redundant.

    Args:
        statement: The statement
    """
    if len(statement.assertions) < 2 or not isinstance(statement, st.MethodStatement):
        return
    if not any(
        isinstance(assertion, ass.PrimitiveAssertion)
        and assertion.source is statement.ret_val
        for assertion in statement.assertions
    ):
        return
    for assertion in statement.assertions:
        if (
            isinstance(assertion, ass.InspectorAssertion)
            and isinstance(assertion.inspector, Inspector)
            and assertion.inspector.name == statement.method_name
        ):
            statement.assertions.discard(assertion)
            return


def return_value_without_assertion(statement: st.Statement) -> bool:
    """Does the statement produce a value on which nothing but nullness is asserted?

    Args:
        statement: The statement

    Returns:
        Whether a non-void return value lacks a non-null assertion
    """
    ret_val = statement.ret_val
    if ret_val is None or ret_val.is_none_type():
        return False
    return not any(
        not isinstance(assertion, ass.NullAssertion)
        and ret_val in ass.referenced_variables(assertion)
        for assertion in statement.assertions
    )


def just_null_assertion(statement: st.Statement) -> bool:
    """Are all assertions on the statement's result or callee null assertions?

    Args:
        statement: The statement

    Returns:
        Whether the statement has assertions, but none of them states more than
        nullness of the result or the callee
    """
    if not statement.assertions:
        return False
    targets = [statement.ret_val]
    if isinstance(statement, st.MethodStatement):
        targets.append(statement.callee)
    return not any(
        not isinstance(assertion, ass.NullAssertion)
        and any(
            var is target
            for var in ass.referenced_variables(assertion)
            for target in targets
        )
        for assertion in statement.assertions
    )


def _own_inspector_name(statement: st.Statement) -> str | None:
    if isinstance(statement, st.MethodStatement) and not statement.args and not statement.kwargs:
        return statement.method_name
    return None


def _add_from_pool(statement: st.Statement, pool: Sequence[ass.Assertion]) -> bool:
    ret_val = statement.ret_val
    candidates = [
        assertion
        for assertion in pool
        if assertion.statement is statement
        and ret_val in ass.referenced_variables(assertion)
    ]
    for wanted in (ass.PrimitiveAssertion, ass.InspectorAssertion):
        for assertion in candidates:
            if isinstance(assertion, wanted):
                _LOGGER.debug("Adding pooled assertion %s", assertion)
                statement.add_assertion(assertion)
                return True
    for assertion in candidates:
        if not isinstance(assertion, ass.NullAssertion):
            _LOGGER.debug("Adding pooled assertion %s", assertion)
            statement.add_assertion(assertion)
            return True
    return False


def _add_from_trace(
    statement: st.Statement, trace_assertions: Sequence[ass.Assertion]
) -> bool:
    ret_val = statement.ret_val
    candidates = [
        assertion for assertion in trace_assertions if assertion.statement is statement
    ]
    if ret_val is not None and not ret_val.is_none_type():
        own_inspector = _own_inspector_name(statement)
        for assertion in candidates:
            if ret_val not in ass.referenced_variables(assertion) or isinstance(
                assertion, ass.NullAssertion
            ):
                continue
            if (
                isinstance(assertion, ass.InspectorAssertion)
                and isinstance(assertion.inspector, Inspector)
                and assertion.inspector.name == own_inspector
            ):
                continue
            statement.add_assertion(assertion)
            return True
        for assertion in candidates:
            if ret_val in ass.referenced_variables(assertion):
                statement.add_assertion(assertion)
                return True
        return False
    targets = statement.get_variable_references()
    for assertion in candidates:
        if any(var in targets for var in ass.referenced_variables(assertion)):
            statement.add_assertion(assertion)
            return True
    return False


def add_last_statement_fallback_assertion(
    test_case: tc.TestCase,
    pool: Sequence[ass.Assertion],
    trace_assertions: Sequence[ass.Assertion],
) -> None:
    """Make sure the result of the last statement is asserted on.

    If the last statement's result has no assertion beyond nullness, an assertion
    is taken from the pool of candidates (primitive first, then inspector, then
    any other non-null one), or else from all assertions the unmodified execution
    supports, with a null assertion as the last resort.

    Args:
        test_case: The test case
        pool: All candidate assertions of the test, including removed ones
        trace_assertions: Unattached assertions for every observation of the
            unmodified execution
    """
    if test_case.size() == 0:
        return
    last = test_case.get_statement(test_case.size() - 1)
    if (
        not return_value_without_assertion(last)
        and last.assertions
        and not just_null_assertion(last)
    ):
        return
    _LOGGER.debug("Last statement lacks a meaningful assertion")
    if not _add_from_pool(last, pool):
        _add_from_trace(last, trace_assertions)
    filter_inspector_primitive_duplication(last)


def remove_assertions_from(test_case: tc.TestCase, position: int) -> None:
    """Remove the assertions of the statement at position and all later ones.

    Args:
        test_case: The test case
        position: The first position whose assertions are removed
    """
    for statement in test_case.statements[position:]:
        statement.assertions.clear()
