#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest.mock import MagicMock

import pytest

import mutassert.assertion.assertion as ass
import mutassert.assertion.assertiongenerator as ag
import mutassert.configuration as config
import mutassert.testcase.execution as ex
import mutassert.testcase.statement as st
import mutassert.testcase.testcase as tc
import mutassert.utils.statistics.stats as stat

from mutassert.mutation.session import MutationDiscoverySession
from mutassert.utils.exceptions import GenerationException
from mutassert.utils.orderedset import OrderedSet
from mutassert.utils.statistics.runtimevariable import RuntimeVariable
from mutassert.utils.timebudget import TimeBudget
from tests.fixtures.examples import counter
from tests.fixtures.examples import stack
from tests.fixtures.examples import values
from tests.testutils import build_counter_test_case
from tests.testutils import build_raising_counter_test_case


def _baseline(*touched):
    result = ex.ExecutionResult()
    result.touched_mutants = OrderedSet(touched)
    return result


@pytest.fixture
def session():
    return MutationDiscoverySession()


@pytest.fixture
def mutation_generator(counter_executor, inspector_manager, session):
    return ag.MutationAssertionGenerator(
        counter_executor, inspector_manager, session, TimeBudget(0)
    )


def test_summary_for_registry():
    summary = ag.MutationSummary.for_registry(stack.MUTANTS)
    assert [info.mut_num for info in summary.mutant_information] == [0, 1, 2, 3]
    assert len(summary.get_survived()) == 4
    assert summary.get_score() == 0.0


def test_summary_without_mutants():
    assert ag.MutationSummary().get_score() == 1.0


def test_summary_record():
    summary = ag.MutationSummary.for_registry(stack.MUTANTS)
    summary.record(0, ag.MutationOutcome(killed={0, 1}, timed_out={1}))
    summary.record(1, ag.MutationOutcome(killed={0, 1}, timed_out={1}))
    assert summary.mutant_information[0].killed_by == [0, 1]
    assert summary.mutant_information[1].timed_out_by == [0]
    assert [info.mut_num for info in summary.get_killed()] == [0, 1]
    assert [info.mut_num for info in summary.get_timeout()] == [1]
    assert [info.mut_num for info in summary.get_survived()] == [2, 3]
    assert summary.get_score() == pytest.approx(0.5)


def test_summary_counts_timeout_as_killed():
    summary = ag.MutationSummary.for_registry(counter.MUTANTS)
    summary.record(0, ag.MutationOutcome(timed_out={0}))
    assert summary.get_score() == 1.0


def test_complete_generator(counter_executor, inspector_manager, counter_test_case):
    generator = ag.CompleteAssertionGenerator(counter_executor, inspector_manager)
    assert generator.add_assertions(counter_test_case)
    kinds = {ass.kind_of(assertion) for assertion in counter_test_case.get_assertions()}
    assert {
        ass.AssertionKind.PRIMITIVE,
        ass.AssertionKind.INSPECTOR,
        ass.AssertionKind.NULL,
        ass.AssertionKind.FIELD,
    } <= kinds
    assert ass.PrimitiveAssertion(
        counter_test_case.get_statement(2).ret_val, False
    ) in counter_test_case.get_statement(2).assertions


def test_complete_generator_empty_test(counter_executor, inspector_manager):
    generator = ag.CompleteAssertionGenerator(counter_executor, inspector_manager)
    assert generator.add_assertions(tc.TestCase())


def test_complete_generator_removes_assertions_after_exception(
    counter_executor, inspector_manager
):
    test_case = build_raising_counter_test_case()
    generator = ag.CompleteAssertionGenerator(counter_executor, inspector_manager)
    assert generator.add_assertions(test_case)
    assert test_case.get_statement(2).assertions
    assert not test_case.get_statement(3).assertions
    assert not test_case.get_statement(4).assertions


def test_baseline_with_unexpected_exception(inspector_manager):
    test_case = tc.TestCase()
    test_case.add_variable_creating_statement(st.FunctionStatement(test_case, values.leave))
    executor = ex.TestCaseExecutor(values.MUTANTS)
    generator = ag.CompleteAssertionGenerator(executor, inspector_manager)
    assert generator.execute_baseline(test_case) is None
    assert not generator.add_assertions(test_case)


def test_mutation_generator_kills_boundary_mutant(mutation_generator, counter_test_case):
    outcome = mutation_generator.generate(counter_test_case)
    assert outcome.baseline_usable
    assert outcome.killed == {counter.GT_TO_GE}
    assert outcome.timed_out == set()
    bool_stmt = counter_test_case.get_statement(2)
    assert counter_test_case.get_assertions() == [
        ass.PrimitiveAssertion(bool_stmt.ret_val, False, bool_stmt)
    ]
    assert list(counter_test_case.get_assertions()[0].killed_mutants) == [counter.GT_TO_GE]


def test_mutation_generator_survived_mutant(mutation_generator):
    test_case = build_counter_test_case(5)
    outcome = mutation_generator.generate(test_case)
    assert outcome.killed == set()
    bool_stmt = test_case.get_statement(2)
    # The last statement still gets an assertion.
    assert ass.PrimitiveAssertion(bool_stmt.ret_val, True) in bool_stmt.assertions


def test_mutation_generator_stops_at_exception(mutation_generator):
    test_case = build_raising_counter_test_case()
    outcome = mutation_generator.generate(test_case)
    assert outcome.killed == {counter.GT_TO_GE}
    assert test_case.get_statement(2).assertions
    for position in (3, 4):
        assert not test_case.get_statement(position).assertions


def test_mutation_generator_empty_test(mutation_generator):
    outcome = mutation_generator.generate(tc.TestCase())
    assert outcome == ag.MutationOutcome()


def test_mutation_generator_unusable_baseline(inspector_manager, session):
    test_case = tc.TestCase()
    test_case.add_variable_creating_statement(st.FunctionStatement(test_case, values.leave))
    generator = ag.MutationAssertionGenerator(
        ex.TestCaseExecutor(values.MUTANTS), inspector_manager, session, TimeBudget(0)
    )
    assert not generator.add_assertions(test_case)
    assert test_case.get_assertions() == []


def test_mutation_generator_disables_timing_out_mutant(inspector_manager, session):
    registry = counter.MUTANTS
    executor = MagicMock()
    executor.registry = registry
    executor.execute.side_effect = lambda test_case, observers, mutation=None: (
        _baseline(counter.GT_TO_GE) if mutation is None else ex.ExecutionResult(timeout=True)
    )
    generator = ag.MutationAssertionGenerator(
        executor, inspector_manager, session, TimeBudget(0)
    )
    outcomes = [generator.generate(build_counter_test_case()) for _ in range(4)]

    mutant_runs = [
        call for call in executor.execute.call_args_list if len(call.args) == 3
    ]
    assert len(mutant_runs) == 3
    assert session.timed_out_mutations[counter.GT_TO_GE] == 3
    assert session.is_disabled(counter.GT_TO_GE, 3)
    assert all(outcome.killed == {counter.GT_TO_GE} for outcome in outcomes)
    assert [outcome.timed_out for outcome in outcomes] == [
        {counter.GT_TO_GE},
        {counter.GT_TO_GE},
        {counter.GT_TO_GE},
        set(),
    ]


def test_mutation_generator_records_new_exception(inspector_manager, session):
    def raising_result():
        result = ex.ExecutionResult()
        result.report_new_thrown_exception(2, ValueError())
        return result

    executor = MagicMock()
    executor.registry = counter.MUTANTS
    executor.execute.side_effect = lambda test_case, observers, mutation=None: (
        _baseline(counter.GT_TO_GE) if mutation is None else raising_result()
    )
    generator = ag.MutationAssertionGenerator(
        executor, inspector_manager, session, TimeBudget(0)
    )
    outcome = generator.generate(build_counter_test_case())
    assert outcome.killed == {counter.GT_TO_GE}
    assert session.exception_mutations[counter.GT_TO_GE] == 1


def test_mutation_generator_limits_mutants_per_test(inspector_manager, session):
    config.configuration.assertion_generation.max_mutants_per_test = 1
    executor = MagicMock()
    executor.registry = stack.MUTANTS
    executor.execute.side_effect = lambda test_case, observers, mutation=None: (
        _baseline(stack.PUSH_SKIP, stack.SIZE_PLUS_ONE, stack.EMPTY_NEGATED)
        if mutation is None
        else ex.ExecutionResult()
    )
    generator = ag.MutationAssertionGenerator(
        executor, inspector_manager, session, TimeBudget(0)
    )
    outcome = generator.generate(build_counter_test_case())
    assert executor.execute.call_count == 2
    assert outcome.killed == set()


def test_mutation_generator_respects_time_budget(inspector_manager, session):
    executor = MagicMock()
    executor.registry = counter.MUTANTS
    executor.execute.side_effect = lambda test_case, observers, mutation=None: (
        _baseline(counter.GT_TO_GE)
    )
    budget = MagicMock(TimeBudget)
    budget.is_there_still_time_in_phase.return_value = False
    generator = ag.MutationAssertionGenerator(executor, inspector_manager, session, budget)
    generator.generate(build_counter_test_case())
    assert executor.execute.call_count == 1


def test_suite_generator(counter_executor, inspector_manager, session):
    test_cases = [build_counter_test_case(0), build_counter_test_case(5)]
    generator = ag.SuiteAssertionGenerator(
        counter_executor, inspector_manager, session, TimeBudget(0)
    )
    generator.generate(test_cases)

    assert generator.summary.mutant_information[0].killed_by == [0]
    assert generator.summary.get_score() == 1.0
    tracked = dict(stat.variables_generator())
    assert tracked[RuntimeVariable.MutationScore] == 1.0
    assert tracked[RuntimeVariable.NumberOfCreatedMutants] == 1
    assert tracked[RuntimeVariable.NumberOfKilledMutants] == 1
    assert tracked[RuntimeVariable.NumberOfTimedOutMutants] == 0
    assert tracked[RuntimeVariable.MinimizationFallbackTests] == 0
    assert tracked[RuntimeVariable.RemovedFlakyAssertions] == 0
    assert tracked[RuntimeVariable.AssertionCount] == sum(
        len(test_case.get_assertions()) for test_case in test_cases
    )
    assert tracked[RuntimeVariable.AssertionGenerationTime] >= 0


def test_suite_generator_complete_strategy(counter_executor, inspector_manager, session):
    config.configuration.test_case_output.assertion_generation = (
        config.AssertionGenerator.COMPLETE
    )
    test_cases = [build_counter_test_case(0), build_counter_test_case(5)]
    generator = ag.SuiteAssertionGenerator(
        counter_executor, inspector_manager, session, TimeBudget(0)
    )
    generator.generate(test_cases)
    tracked = dict(stat.variables_generator())
    assert tracked[RuntimeVariable.MinimizationFallbackTests] == 2
    assert generator.summary.get_score() == 0.0
    assert all(len(test_case.get_assertions()) > 1 for test_case in test_cases)


def test_suite_generator_falls_back_when_slow(counter_executor, inspector_manager, session):
    budget = MagicMock(TimeBudget)
    budget.is_there_still_time_in_phase.return_value = True
    budget.phase_percentage.return_value = 0.9
    test_cases = [build_counter_test_case(0), build_counter_test_case(5)]
    generator = ag.SuiteAssertionGenerator(
        counter_executor, inspector_manager, session, budget
    )
    generator.generate(test_cases)
    tracked = dict(stat.variables_generator())
    assert tracked[RuntimeVariable.MinimizationFallbackTests] == 2


def test_suite_generator_stops_without_time(counter_executor, inspector_manager, session):
    budget = MagicMock(TimeBudget)
    budget.is_there_still_time_in_phase.return_value = False
    test_case = build_counter_test_case(0)
    generator = ag.SuiteAssertionGenerator(
        counter_executor, inspector_manager, session, budget
    )
    generator.generate([test_case])
    assert test_case.get_assertions() == []
    assert generator.summary.get_score() == 0.0


def test_mutation_generator_unknown_mutant(inspector_manager, session):
    executor = MagicMock()
    executor.registry = counter.MUTANTS
    executor.execute.side_effect = lambda test_case, observers, mutation=None: _baseline(7)
    generator = ag.MutationAssertionGenerator(
        executor, inspector_manager, session, TimeBudget(0)
    )
    with pytest.raises(GenerationException, match="unregistered"):
        generator.generate(build_counter_test_case())
