#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest.mock import MagicMock

import mutassert.assertion.assertion as ass
import mutassert.assertion.assertiongenerator as ag
import mutassert.testcase.execution as ex
import mutassert.testcase.statement as st
import mutassert.testcase.testcase as tc

from mutassert.assertion.flakiness import AssertionVerificationObserver
from mutassert.assertion.flakiness import FlakyAssertionFilter
from mutassert.assertion.inspector import Inspector
from tests.fixtures.examples import values


def _ticker_test_case() -> tc.TestCase:
    test_case = tc.TestCase()
    ticker_0 = test_case.add_variable_creating_statement(
        st.ConstructorStatement(test_case, values.Ticker)
    )
    test_case.add_variable_creating_statement(
        st.MethodStatement(test_case, ticker_0, "get_label")
    )
    return test_case


def _field_names(test_case):
    return {
        assertion.field.field
        for assertion in test_case.get_assertions()
        if isinstance(assertion, ass.FieldAssertion)
    }


def test_verification_observer_records_failed_assertion(counter_executor, counter_test_case):
    statement = counter_test_case.get_statement(2)
    statement.add_assertion(ass.PrimitiveAssertion(statement.ret_val, False, statement))
    statement.add_assertion(ass.NullAssertion(statement.ret_val, True, statement))
    result = counter_executor.execute(counter_test_case, [AssertionVerificationObserver()])
    assert dict(result.assertion_verification_trace.failed) == {2: {1}}
    assert not result.assertion_verification_trace.error


def test_verification_observer_records_error():
    test_case = tc.TestCase()
    faulty_0 = test_case.add_variable_creating_statement(
        st.ConstructorStatement(test_case, values.Faulty)
    )
    statement = test_case.get_statement(0)
    statement.add_assertion(
        ass.InspectorAssertion(faulty_0, Inspector(values.Faulty, "get_value"), 1, statement)
    )
    executor = ex.TestCaseExecutor(values.MUTANTS)
    result = executor.execute(test_case, [AssertionVerificationObserver()])
    assert dict(result.assertion_verification_trace.error) == {0: {0}}
    assert not result.assertion_verification_trace.failed


def test_filter_keeps_stable_assertions(counter_executor, counter_test_case):
    statement = counter_test_case.get_statement(2)
    primitive = ass.PrimitiveAssertion(statement.ret_val, False, statement)
    statement.add_assertion(primitive)
    flaky_filter = FlakyAssertionFilter(counter_executor)
    assert flaky_filter.filter([counter_test_case]) == 0
    assert list(statement.assertions) == [primitive]


def test_filter_removes_assertion_on_changing_field(inspector_manager):
    executor = ex.TestCaseExecutor(values.MUTANTS)
    test_case = _ticker_test_case()
    assert ag.CompleteAssertionGenerator(executor, inspector_manager).add_assertions(test_case)
    assert _field_names(test_case) == {"created_at"}
    num_assertions = len(test_case.get_assertions())

    flaky_filter = FlakyAssertionFilter(executor)
    removed = flaky_filter.filter([test_case])
    assert removed > 0
    assert flaky_filter.removed == removed
    assert len(test_case.get_assertions()) == num_assertions - removed
    assert _field_names(test_case) == set()
    assert any(
        isinstance(assertion, ass.InspectorAssertion)
        and assertion.inspector.name == "get_label"
        for assertion in test_case.get_assertions()
    )
    assert flaky_filter.filter([test_case]) == 0
    assert flaky_filter.removed == removed


def test_filter_clears_assertions_on_timeout(counter_test_case):
    statement = counter_test_case.get_statement(2)
    statement.add_assertion(ass.PrimitiveAssertion(statement.ret_val, False, statement))
    statement.add_assertion(ass.NullAssertion(statement.ret_val, False, statement))
    executor = MagicMock()
    executor.execute_multiple.side_effect = lambda tests, observers: (
        ex.ExecutionResult(timeout=True) for _ in tests
    )
    assert FlakyAssertionFilter(executor).filter([counter_test_case]) == 2
    assert counter_test_case.get_assertions() == []
