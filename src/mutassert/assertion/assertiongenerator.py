#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the assertion generators.

The mutation-driven generator executes every test once on the unmodified unit and
once per mutant the test reaches.  Each observation that differs between the two
executions becomes a candidate assertion; the candidates are then minimized such
that they still kill the same mutants.
"""

from __future__ import annotations

import dataclasses
import logging
import time

from typing import TYPE_CHECKING

import mutassert.assertion.minimization as mini
import mutassert.assertion.traceobserver as to
import mutassert.configuration as config
import mutassert.utils.statistics.stats as stat

from mutassert.assertion.flakiness import FlakyAssertionFilter
from mutassert.utils import randomness
from mutassert.utils.exceptions import GenerationException
from mutassert.utils.statistics.runtimevariable import RuntimeVariable


if TYPE_CHECKING:
    from collections.abc import Sequence

    import mutassert.assertion.assertion as ass
    import mutassert.assertion.outputtrace as ot
    import mutassert.testcase.execution as ex
    import mutassert.testcase.testcase as tc

    from mutassert.assertion.inspector import InspectorManager
    from mutassert.mutation.registry import Mutation
    from mutassert.mutation.registry import MutationRegistry
    from mutassert.mutation.session import MutationDiscoverySession
    from mutassert.utils.timebudget import TimeBudget


_LOGGER = logging.getLogger(__name__)


@dataclasses.dataclass
class MutationOutcome:
    """What the mutant runs of one test revealed."""

    # Could the test be executed on the unmodified unit?
    baseline_usable: bool = True

    # Mutants that this test kills, including disabled and timed-out ones
    killed: set[int] = dataclasses.field(default_factory=set)

    # Mutants that timed out during this test
    timed_out: set[int] = dataclasses.field(default_factory=set)


@dataclasses.dataclass
class _MutantInfo:
    """Collect data about a single mutant."""

    # Number of the mutant.
    mut_num: int

    # Did the mutant cause a timeout?
    timed_out_by: list[int] = dataclasses.field(default_factory=list)

    # Was the mutant killed by any test?
    killed_by: list[int] = dataclasses.field(default_factory=list)


@dataclasses.dataclass
class MutationSummary:
    """Summary about mutation."""

    mutant_information: list[_MutantInfo] = dataclasses.field(default_factory=list)

    @classmethod
    def for_registry(cls, registry: MutationRegistry) -> MutationSummary:
        """Create an empty summary for all mutants of a registry.

        Args:
            registry: The mutation registry

        Returns:
            A summary in which no mutant is killed yet
        """
        return cls([_MutantInfo(mutation.mutation_id) for mutation in registry.mutations])

    def record(self, test_num: int, outcome: MutationOutcome) -> None:
        """Record which mutants a test killed.

        Args:
            test_num: The index of the test in the suite
            outcome: The outcome of the mutant runs of the test
        """
        for info in self.mutant_information:
            if info.mut_num in outcome.timed_out and not info.timed_out_by:
                info.timed_out_by.append(test_num)
            if info.mut_num in outcome.killed:
                info.killed_by.append(test_num)

    def get_survived(self) -> list[_MutantInfo]:
        """Get survived Mutants.

        Returns:
            The survived mutants
        """
        return [
            info
            for info in self.mutant_information
            if not info.killed_by and not info.timed_out_by
        ]

    def get_killed(self) -> list[_MutantInfo]:
        """Get killed Mutants.

        Returns:
            The killed mutants, timed out ones included
        """
        return [
            info for info in self.mutant_information if info.killed_by or info.timed_out_by
        ]

    def get_timeout(self) -> list[_MutantInfo]:
        """Get timed out Mutants.

        Returns:
            The timed out mutants
        """
        return [info for info in self.mutant_information if info.timed_out_by]

    def get_score(self) -> float:
        """Computes the mutation score.

        Returns:
            The mutation score
        """
        if not self.mutant_information:
            # No mutants -> all mutants covered.
            return 1.0
        return len(self.get_killed()) / len(self.mutant_information)


class CompleteAssertionGenerator:
    """Adds an assertion for every observation of the unmodified execution."""

    _logger = logging.getLogger(__name__)

    def __init__(
        self, executor: ex.TestCaseExecutor, inspector_manager: InspectorManager
    ) -> None:
        """Create new assertion generator.

        Args:
            executor: The executor for the unmodified unit
            inspector_manager: Provides the inspectors of a class
        """
        self._executor = executor
        self._inspector_manager = inspector_manager

    def execute_baseline(self, test_case: tc.TestCase) -> ex.ExecutionResult | None:
        """Execute the test on the unmodified unit with all observers attached.

        Args:
            test_case: The test case

        Returns:
            The result, or None if it can not serve as a reference
        """
        result = self._executor.execute(
            test_case, to.create_observers(self._inspector_manager)
        )
        if result.timeout or result.has_unexpected_exceptions():
            self._logger.debug("Skipping test, as it has timeouts or unexpected exceptions")
            return None
        return result

    @staticmethod
    def trace_assertions(
        test_case: tc.TestCase, result: ex.ExecutionResult
    ) -> list[ass.Assertion]:
        """Provides an unattached assertion for every observation of an execution.

        Args:
            test_case: The executed test case
            result: The result of the execution

        Returns:
            The assertions, grouped by observer family
        """
        assertions: list[ass.Assertion] = []
        for trace in result.output_traces.values():
            assertions.extend(trace.get_all_assertions(test_case))
        return assertions

    def add_assertions(self, test_case: tc.TestCase) -> bool:
        """Attach all assertions the unmodified execution supports.

        Args:
            test_case: The test case

        Returns:
            Whether the test could be executed
        """
        if test_case.size() == 0:
            return True
        result = self.execute_baseline(test_case)
        if result is None:
            return False
        for assertion in self.trace_assertions(test_case, result):
            assert assertion.statement is not None
            assertion.statement.add_assertion(assertion)
        if (position := result.get_first_position_of_thrown_exception()) is not None:
            mini.remove_assertions_from(test_case, position)
        return True


class MutationAssertionGenerator(CompleteAssertionGenerator):
    """Keeps the assertions that are needed to kill the reached mutants."""

    def __init__(
        self,
        executor: ex.TestCaseExecutor,
        inspector_manager: InspectorManager,
        session: MutationDiscoverySession,
        time_budget: TimeBudget,
    ) -> None:
        """Create new assertion generator.

        Args:
            executor: The executor, which also activates the mutants
            inspector_manager: Provides the inspectors of a class
            session: Counts timeouts and exceptions of mutants across tests
            time_budget: The budget that is polled before every mutant
        """
        super().__init__(executor, inspector_manager)
        self._session = session
        self._time_budget = time_budget

    def add_assertions(self, test_case: tc.TestCase) -> bool:  # noqa: D102
        return self.generate(test_case).baseline_usable

    def generate(self, test_case: tc.TestCase) -> MutationOutcome:
        """Attach a minimized set of assertions that kills the reached mutants.

        Args:
            test_case: The test case

        Raises:
            GenerationException: If the unit probed a mutant the registry does not
                know

        Returns:
            The mutants killed by the test
        """
        outcome = MutationOutcome()
        if test_case.size() == 0:
            return outcome

        baseline = self.execute_baseline(test_case)
        if baseline is None:
            outcome.baseline_usable = False
            return outcome

        registry = self._executor.registry
        if unknown := [
            mutation_id
            for mutation_id in baseline.touched_mutants
            if not 0 <= mutation_id < len(registry)
        ]:
            raise GenerationException(f"The unit probed unregistered mutant(s) {unknown}")
        executed_mutants = [registry.get(mutation_id) for mutation_id in baseline.touched_mutants]
        randomness.shuffle(executed_mutants)
        self._logger.debug(
            "Executed mutants: %s", [mutation.mutation_id for mutation in executed_mutants]
        )

        mutation_traces = self._run_mutants(test_case, baseline, executed_mutants, outcome)
        self._minimize(test_case, baseline, mutation_traces)
        return outcome

    def _run_mutants(
        self,
        test_case: tc.TestCase,
        baseline: ex.ExecutionResult,
        executed_mutants: Sequence[Mutation],
        outcome: MutationOutcome,
    ) -> dict[int, list[ot.OutputTrace]]:
        settings = config.configuration.assertion_generation
        mutation_traces: dict[int, list[ot.OutputTrace]] = {}
        num_executed_mutants = 0
        for mutation in executed_mutants:
            num_executed_mutants += 1
            if not self._time_budget.is_there_still_time_in_phase():
                self._logger.info("Reached maximum time to generate assertions!")
                break
            if self._session.is_disabled(mutation.mutation_id, settings.mutation_timeouts):
                self._logger.debug("Skipping disabled mutant %s", mutation)
                outcome.killed.add(mutation.mutation_id)
                continue
            if 0 < settings.max_mutants_per_test < num_executed_mutants:
                break

            self._logger.debug("Running test on mutation %s", mutation)
            mutant_result = self._executor.execute(
                test_case, to.create_observers(self._inspector_manager), mutation
            )

            num_killed = 0
            for kind, baseline_trace in baseline.output_traces.items():
                if (mutant_trace := mutant_result.get_trace(kind)) is None:
                    continue
                num_killed += baseline_trace.get_assertions(
                    test_case, mutant_trace, mutation.mutation_id
                )
            mutation_traces[mutation.mutation_id] = list(mutant_result.output_traces.values())

            new_exception = (
                mutant_result.has_test_exceptions() and not baseline.has_test_exceptions()
            )
            if mutant_result.timeout:
                self._session.record_timeout(mutation.mutation_id)
                outcome.timed_out.add(mutation.mutation_id)
            elif new_exception:
                self._session.record_exception(mutation.mutation_id)

            if num_killed > 0 or mutant_result.timeout or new_exception:
                outcome.killed.add(mutation.mutation_id)
        return mutation_traces

    def _minimize(
        self,
        test_case: tc.TestCase,
        baseline: ex.ExecutionResult,
        mutation_traces: dict[int, list[ot.OutputTrace]],
    ) -> None:
        assertions = test_case.get_assertions()
        self._logger.info("Got %d assertions", len(assertions))
        for assertion in assertions:
            assertion.killed_mutants.clear()
            for mutation_id, traces in mutation_traces.items():
                if any(trace.is_detected_by(assertion) for trace in traces):
                    assertion.killed_mutants.add(mutation_id)

        killed_before = mini.killed_mutants(assertions, mutation_traces)
        self._logger.debug("Need to kill mutants: %s", sorted(killed_before))
        minimized = mini.minimize(assertions)
        if minimized:
            mini.replace_assertions(test_case, minimized)
        killed_after = mini.killed_mutants(test_case.get_assertions(), mutation_traces)
        assert killed_before == killed_after, (
            f"Mutants killed before / after: {sorted(killed_before)} / {sorted(killed_after)}"
        )
        self._logger.info("Assertions in this test: %d", len(test_case.get_assertions()))

        mini.add_last_statement_fallback_assertion(
            test_case, assertions, self.trace_assertions(test_case, baseline)
        )
        if (position := baseline.get_first_position_of_thrown_exception()) is not None:
            self._logger.debug("Removing assertions after exception")
            mini.remove_assertions_from(test_case, position)

        mini.filter_redundant_non_null_assertions(test_case)
        mini.filter_redundant_chained_inspector_assertions(test_case)
        mini.filter_redundant_is_empty_size_assertions(test_case)


class SuiteAssertionGenerator:
    """Generates the assertions of a whole suite within a time budget."""

    def __init__(
        self,
        executor: ex.TestCaseExecutor,
        inspector_manager: InspectorManager,
        session: MutationDiscoverySession,
        time_budget: TimeBudget,
    ) -> None:
        """Create new suite assertion generator.

        Args:
            executor: The executor, which also activates the mutants
            inspector_manager: Provides the inspectors of a class
            session: Counts timeouts and exceptions of mutants across tests
            time_budget: The budget of the assertion generation phase
        """
        self._executor = executor
        self._time_budget = time_budget
        self._complete = CompleteAssertionGenerator(executor, inspector_manager)
        self._mutation = MutationAssertionGenerator(
            executor, inspector_manager, session, time_budget
        )
        self._summary = MutationSummary.for_registry(executor.registry)

    @property
    def summary(self) -> MutationSummary:
        """Provides the mutants killed by the suite so far.

        Returns:
            The mutation summary
        """
        return self._summary

    def generate(self, test_cases: Sequence[tc.TestCase]) -> None:
        """Generate assertions for all tests of a suite.

        Args:
            test_cases: The tests of the suite
        """
        start_time = time.time_ns()
        settings = config.configuration.assertion_generation
        strategy = config.configuration.test_case_output.assertion_generation
        time_is_short = strategy == config.AssertionGenerator.COMPLETE
        num_fallback = 0

        for num_test, test_case in enumerate(test_cases):
            if not self._time_budget.is_there_still_time_in_phase():
                _LOGGER.warning(
                    "Reached maximum time to generate assertions, "
                    "aborting assertion generation"
                )
                break
            if (
                not time_is_short
                and self._time_budget.phase_percentage() > settings.minimization_fallback_time
                and num_test < settings.minimization_fallback * len(test_cases)
            ):
                _LOGGER.warning(
                    "Assertion minimization is taking too long (%.0f%% of time used, "
                    "but only %d/%d tests minimized), falling back to using all assertions",
                    100 * self._time_budget.phase_percentage(),
                    num_test,
                    len(test_cases),
                )
                time_is_short = True

            if time_is_short:
                self._complete.add_assertions(test_case)
                num_fallback += 1
            else:
                self._summary.record(num_test, self._mutation.generate(test_case))

        if config.configuration.test_case_output.filter_flaky_assertions:
            removed = FlakyAssertionFilter(self._executor).filter(test_cases)
            stat.track_output_variable(RuntimeVariable.RemovedFlakyAssertions, removed)

        stat.track_output_variable(RuntimeVariable.MinimizationFallbackTests, num_fallback)
        stat.track_output_variable(
            RuntimeVariable.AssertionCount,
            sum(len(test_case.get_assertions()) for test_case in test_cases),
        )
        stat.track_output_variable(
            RuntimeVariable.AssertionGenerationTime, time.time_ns() - start_time
        )
        self._report_mutation_summary()

    def _report_mutation_summary(self) -> None:
        summary = self._summary
        stat.track_output_variable(
            RuntimeVariable.NumberOfCreatedMutants, len(summary.mutant_information)
        )
        stat.track_output_variable(
            RuntimeVariable.NumberOfKilledMutants, len(summary.get_killed())
        )
        stat.track_output_variable(
            RuntimeVariable.NumberOfTimedOutMutants, len(summary.get_timeout())
        )
        stat.track_output_variable(RuntimeVariable.MutationScore, summary.get_score())

        for info in summary.mutant_information:
            if info.killed_by:
                _LOGGER.info(
                    "Mutant %i killed by Test(s): %s",
                    info.mut_num,
                    ", ".join(map(str, info.killed_by)),
                )
            elif info.timed_out_by:
                _LOGGER.info(
                    "Mutant %i timed out. First time with test %i.",
                    info.mut_num,
                    info.timed_out_by[0],
                )
        survived = summary.get_survived()
        _LOGGER.info(
            "Number of Surviving Mutant(s): %i (Mutants: %s)",
            len(survived),
            ", ".join(str(x.mut_num) for x in survived),
        )
