#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
import itertools

from unittest.mock import MagicMock

import hypothesis.strategies as hst
import pytest

from hypothesis import given

import mutassert.assertion.assertion as ass
import mutassert.assertion.minimization as mini
import mutassert.testcase.statement as st
import mutassert.testcase.testcase as tc
import mutassert.testcase.variablereference as vr

from mutassert.assertion.inspector import ChainedInspector
from mutassert.assertion.inspector import Inspector
from tests.fixtures.examples.counter import Counter
from tests.fixtures.examples.stack import Box
from tests.fixtures.examples.stack import Stack
from tests.testutils import build_counter_test_case
from tests.testutils import build_stack_test_case


SIZE = Inspector(Stack, "size")
EMPTY = Inspector(Stack, "is_empty")
CHAINED_SIZE = ChainedInspector(Inspector(Box, "get_stack"), SIZE)
CHAINED_EMPTY = ChainedInspector(Inspector(Box, "get_stack"), EMPTY)


def _killing(assertion, *mutants):
    assertion.killed_mutants.update(mutants)
    return assertion


def _var():
    return vr.VariableReference(MagicMock(), int)


def _covered(assertions):
    return set().union(*(set(assertion.killed_mutants) for assertion in assertions))


def test_minimize_empty():
    assert mini.minimize([]) == []


def test_minimize_drops_assertions_without_mutants():
    assertion = ass.PrimitiveAssertion(_var(), 1)
    assert mini.minimize([assertion]) == []


def test_minimize_greedy():
    first = _killing(ass.PrimitiveAssertion(_var(), 1), 0, 1)
    second = _killing(ass.PrimitiveAssertion(_var(), 2), 1)
    third = _killing(ass.PrimitiveAssertion(_var(), 3), 2)
    assert mini.minimize([first, second, third]) == [first, third]


def test_minimize_prefers_priority():
    var = _var()
    inspector = _killing(ass.InspectorAssertion(var, SIZE, 1), 0)
    primitive = _killing(ass.PrimitiveAssertion(var, 1), 0)
    null = _killing(ass.NullAssertion(var, False), 0)
    assert mini.minimize([inspector, primitive, null]) == [primitive]


def test_minimize_prefers_later_on_equal_priority():
    first = _killing(ass.PrimitiveAssertion(_var(), 1), 0)
    second = _killing(ass.PrimitiveAssertion(_var(), 2), 0)
    assert mini.minimize([first, second]) == [second]


def test_minimize_prunes_assertions_covered_by_later_picks():
    large = _killing(ass.PrimitiveAssertion(_var(), 0), 0, 1, 2)
    first = _killing(ass.PrimitiveAssertion(_var(), 1), 0, 3)
    second = _killing(ass.PrimitiveAssertion(_var(), 2), 1, 4)
    third = _killing(ass.PrimitiveAssertion(_var(), 3), 2, 5)
    assert mini.minimize([large, first, second, third]) == [first, second, third]


@given(
    hst.lists(
        hst.frozensets(hst.integers(min_value=0, max_value=12), max_size=5),
        max_size=12,
    )
)
def test_minimize_keeps_killed_mutants(killed_sets):
    assertions = [
        _killing(ass.PrimitiveAssertion(_var(), idx), *sorted(killed))
        for idx, killed in enumerate(killed_sets)
    ]
    minimized = mini.minimize(assertions)
    assert _covered(minimized) == _covered(assertions)
    for assertion in minimized:
        others = [other for other in minimized if other is not assertion]
        assert _covered(others) != _covered(minimized)


def test_killed_mutants():
    detected = ass.PrimitiveAssertion(_var(), 1)
    undetected = ass.PrimitiveAssertion(_var(), 2)
    trace = MagicMock()
    trace.is_detected_by.side_effect = lambda assertion: assertion is detected
    assert mini.killed_mutants([detected, undetected], {3: [trace], 4: []}) == {3}


def test_replace_assertions(stack_test_case):
    statement = stack_test_case.get_statement(3)
    old = ass.PrimitiveAssertion(statement.ret_val, 1, statement)
    statement.add_assertion(old)
    stack_var = stack_test_case.get_statement(0).ret_val
    new = ass.InspectorAssertion(stack_var, SIZE, 1, statement)
    mini.replace_assertions(stack_test_case, [new])
    assert list(statement.assertions) == [new]


def test_is_used_as_callee(counter_test_case):
    int_0 = counter_test_case.get_statement(0).ret_val
    counter_0 = counter_test_case.get_statement(1).ret_val
    bool_0 = counter_test_case.get_statement(2).ret_val
    assert mini.is_used_as_callee(counter_test_case, counter_0)
    assert not mini.is_used_as_callee(counter_test_case, int_0)
    assert not mini.is_used_as_callee(counter_test_case, bool_0)


def test_is_used_as_field_source(counter_test_case):
    counter_0 = counter_test_case.get_statement(1).ret_val
    counter_test_case.add_variable_creating_statement(
        st.FieldStatement(counter_test_case, counter_0, "value")
    )
    counter_test_case.remove(2)
    assert mini.is_used_as_callee(counter_test_case, counter_0)


def test_null_filter_removes_assertion_on_callee(counter_test_case):
    statement = counter_test_case.get_statement(1)
    statement.add_assertion(ass.NullAssertion(statement.ret_val, False, statement))
    mini.filter_redundant_non_null_assertions(counter_test_case)
    assert len(statement.assertions) == 0


def test_null_filter_keeps_only_assertion():
    test_case = tc.TestCase()
    int_0 = test_case.add_variable_creating_statement(st.PrimitiveStatement(test_case, 1))
    test_case.add_variable_creating_statement(
        st.ConstructorStatement(test_case, Counter, [int_0])
    )
    statement = test_case.get_statement(1)
    null = ass.NullAssertion(statement.ret_val, False, statement)
    statement.add_assertion(null)
    mini.filter_redundant_non_null_assertions(test_case)
    assert list(statement.assertions) == [null]


def test_null_filter_removes_assertion_implied_by_other():
    test_case = tc.TestCase()
    stack_0 = test_case.add_variable_creating_statement(
        st.ConstructorStatement(test_case, Stack)
    )
    statement = test_case.get_statement(0)
    inspector = ass.InspectorAssertion(stack_0, SIZE, 0, statement)
    statement.add_assertion(ass.NullAssertion(stack_0, False, statement))
    statement.add_assertion(inspector)
    mini.filter_redundant_non_null_assertions(test_case)
    assert list(statement.assertions) == [inspector]


def test_null_filter_keeps_assertion_next_to_assertion_on_other_variable():
    test_case = tc.TestCase()
    box_0 = test_case.add_variable_creating_statement(st.ConstructorStatement(test_case, Box))
    stack_0 = test_case.add_variable_creating_statement(
        st.MethodStatement(test_case, box_0, "get_stack")
    )
    test_case.add_variable_creating_statement(st.MethodStatement(test_case, stack_0, "size"))
    statement = test_case.get_statement(1)
    null = ass.NullAssertion(stack_0, False, statement)
    chained = ass.InspectorAssertion(box_0, CHAINED_SIZE, 0, statement)
    statement.add_assertion(null)
    statement.add_assertion(chained)
    mini.filter_redundant_non_null_assertions(test_case)
    assert list(statement.assertions) == [null, chained]


def _box_test_case() -> tc.TestCase:
    test_case = tc.TestCase()
    box_0 = test_case.add_variable_creating_statement(st.ConstructorStatement(test_case, Box))
    stack_0 = test_case.add_variable_creating_statement(
        st.MethodStatement(test_case, box_0, "get_stack")
    )
    stack_1 = test_case.add_variable_creating_statement(
        st.ConstructorStatement(test_case, Stack)
    )
    box_stmt, get_stmt, stack_stmt = test_case.statements
    for assertion in (
        ass.NullAssertion(box_0, False, box_stmt),
        ass.InspectorAssertion(box_0, CHAINED_SIZE, 0, box_stmt),
        ass.InspectorAssertion(box_0, CHAINED_EMPTY, True, box_stmt),
        ass.NullAssertion(stack_0, False, get_stmt),
        ass.InspectorAssertion(stack_0, SIZE, 0, get_stmt),
        ass.InspectorAssertion(stack_0, EMPTY, True, get_stmt),
        ass.NullAssertion(stack_1, False, stack_stmt),
    ):
        assertion.statement.add_assertion(assertion)
    return test_case


def test_chained_filter():
    test_case = _box_test_case()
    mini.filter_redundant_chained_inspector_assertions(test_case)
    box_stmt = test_case.get_statement(0)
    assert [type(assertion) for assertion in box_stmt.assertions] == [ass.NullAssertion]


def test_chained_filter_keeps_without_outer_call():
    test_case = tc.TestCase()
    box_0 = test_case.add_variable_creating_statement(st.ConstructorStatement(test_case, Box))
    statement = test_case.get_statement(0)
    chained = ass.InspectorAssertion(box_0, CHAINED_SIZE, 0, statement)
    statement.add_assertion(chained)
    mini.filter_redundant_chained_inspector_assertions(test_case)
    assert list(statement.assertions) == [chained]


@pytest.mark.parametrize(
    "size,is_empty,kept",
    [(0, True, EMPTY), (1, False, SIZE), (3, False, SIZE)],
)
def test_empty_size_filter(size, is_empty, kept):
    test_case = tc.TestCase()
    stack_0 = test_case.add_variable_creating_statement(
        st.ConstructorStatement(test_case, Stack)
    )
    statement = test_case.get_statement(0)
    statement.add_assertion(ass.InspectorAssertion(stack_0, EMPTY, is_empty, statement))
    statement.add_assertion(ass.InspectorAssertion(stack_0, SIZE, size, statement))
    mini.filter_redundant_is_empty_size_assertions(test_case)
    assert [assertion.inspector for assertion in statement.assertions] == [kept]


def test_empty_size_filter_separates_chains():
    test_case = tc.TestCase()
    box_0 = test_case.add_variable_creating_statement(st.ConstructorStatement(test_case, Box))
    statement = test_case.get_statement(0)
    statement.add_assertion(ass.InspectorAssertion(box_0, CHAINED_EMPTY, True, statement))
    statement.add_assertion(ass.InspectorAssertion(box_0, SIZE, 0, statement))
    mini.filter_redundant_is_empty_size_assertions(test_case)
    assert len(statement.assertions) == 2


def _describe(assertion):
    return (
        type(assertion).__name__,
        assertion.source.get_statement_position(),
        getattr(assertion, "inspector", None),
        assertion.value,
    )


def test_filters_are_confluent():
    results = set()
    filters = (
        mini.filter_redundant_non_null_assertions,
        mini.filter_redundant_chained_inspector_assertions,
        mini.filter_redundant_is_empty_size_assertions,
    )
    for order in itertools.permutations(filters):
        test_case = _box_test_case()
        for assertion_filter in order:
            assertion_filter(test_case)
        results.add(
            tuple(
                tuple(_describe(assertion) for assertion in statement.assertions)
                for statement in test_case.statements
            )
        )
    assert results == {
        (
            (),
            (("InspectorAssertion", 1, EMPTY, True),),
            (("NullAssertion", 2, None, False),),
        )
    }


def test_inspector_primitive_duplication(stack_test_case):
    statement = stack_test_case.get_statement(3)
    stack_0 = stack_test_case.get_statement(0).ret_val
    primitive = ass.PrimitiveAssertion(statement.ret_val, 1, statement)
    statement.add_assertion(primitive)
    statement.add_assertion(ass.InspectorAssertion(stack_0, SIZE, 1, statement))
    statement.add_assertion(ass.InspectorAssertion(stack_0, EMPTY, False, statement))
    mini.filter_inspector_primitive_duplication(statement)
    assert list(statement.assertions) == [
        primitive,
        ass.InspectorAssertion(stack_0, EMPTY, False, statement),
    ]


def test_return_value_without_assertion(counter_test_case):
    statement = counter_test_case.get_statement(2)
    assert mini.return_value_without_assertion(statement)
    statement.add_assertion(ass.NullAssertion(statement.ret_val, False, statement))
    assert mini.return_value_without_assertion(statement)
    statement.add_assertion(ass.PrimitiveAssertion(statement.ret_val, False, statement))
    assert not mini.return_value_without_assertion(statement)


def test_return_value_without_assertion_void(stack_test_case):
    assert not mini.return_value_without_assertion(stack_test_case.get_statement(2))


def test_just_null_assertion(counter_test_case):
    statement = counter_test_case.get_statement(2)
    assert not mini.just_null_assertion(statement)
    statement.add_assertion(ass.NullAssertion(statement.ret_val, False, statement))
    assert mini.just_null_assertion(statement)
    counter_0 = counter_test_case.get_statement(1).ret_val
    statement.add_assertion(
        ass.FieldAssertion(counter_0, vr.FieldReference(counter_0, "value"), 0, statement)
    )
    assert not mini.just_null_assertion(statement)


def test_fallback_takes_primitive_from_pool(counter_test_case):
    statement = counter_test_case.get_statement(2)
    counter_0 = counter_test_case.get_statement(1).ret_val
    null = ass.NullAssertion(statement.ret_val, False, statement)
    primitive = ass.PrimitiveAssertion(statement.ret_val, False, statement)
    field = ass.FieldAssertion(counter_0, vr.FieldReference(counter_0, "value"), 0, statement)
    mini.add_last_statement_fallback_assertion(counter_test_case, [null, field, primitive], [])
    assert list(statement.assertions) == [primitive]


def test_fallback_takes_assertion_from_trace(counter_test_case):
    statement = counter_test_case.get_statement(2)
    null = ass.NullAssertion(statement.ret_val, False, statement)
    primitive = ass.PrimitiveAssertion(statement.ret_val, False, statement)
    mini.add_last_statement_fallback_assertion(counter_test_case, [], [null, primitive])
    assert list(statement.assertions) == [primitive]


def test_fallback_takes_null_assertion_as_last_resort(counter_test_case):
    statement = counter_test_case.get_statement(2)
    null = ass.NullAssertion(statement.ret_val, False, statement)
    mini.add_last_statement_fallback_assertion(counter_test_case, [], [null])
    assert list(statement.assertions) == [null]


def test_fallback_skips_own_inspector(stack_test_case):
    statement = stack_test_case.get_statement(3)
    stack_0 = stack_test_case.get_statement(0).ret_val
    own = ass.InspectorAssertion(stack_0, SIZE, 1, statement)
    primitive = ass.PrimitiveAssertion(statement.ret_val, 1, statement)
    mini.add_last_statement_fallback_assertion(stack_test_case, [], [own, primitive])
    assert list(statement.assertions) == [primitive]


def test_fallback_for_void_statement():
    test_case = build_stack_test_case()
    test_case.remove(3)
    statement = test_case.get_statement(2)
    stack_0 = test_case.get_statement(0).ret_val
    inspector = ass.InspectorAssertion(stack_0, SIZE, 1, statement)
    mini.add_last_statement_fallback_assertion(test_case, [], [inspector])
    assert list(statement.assertions) == [inspector]


def test_fallback_not_needed(counter_test_case):
    statement = counter_test_case.get_statement(2)
    primitive = ass.PrimitiveAssertion(statement.ret_val, False, statement)
    statement.add_assertion(primitive)
    other = ass.NullAssertion(statement.ret_val, False, statement)
    mini.add_last_statement_fallback_assertion(counter_test_case, [], [other])
    assert list(statement.assertions) == [primitive]


def test_fallback_empty_test_case():
    test_case = tc.TestCase()
    mini.add_last_statement_fallback_assertion(test_case, [], [])
    assert test_case.size() == 0


def test_remove_assertions_from():
    test_case = build_counter_test_case()
    for statement in test_case.statements[1:]:
        statement.add_assertion(ass.NullAssertion(statement.ret_val, False, statement))
    mini.remove_assertions_from(test_case, 2)
    assert len(test_case.get_statement(1).assertions) == 1
    assert len(test_case.get_statement(2).assertions) == 0
