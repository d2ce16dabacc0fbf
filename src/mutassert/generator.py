#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""mutassert adds regression assertions to given test cases.

The test cases and the mutants of the unit under test are provided by a harness
module, which exposes a `MUTANTS` registry and a `create_test_cases()` function.
mutassert executes the tests on the unmodified unit and on every mutant they reach
and keeps a small set of assertions that distinguishes the unit from its mutants.
The tests are then exported as a PyTest module.

mutassert is supposed to be used as a standalone command-line application but it
can also be used as a library by calling `run_mutassert` directly.
"""

from __future__ import annotations

import enum
import importlib
import logging
import sys

from pathlib import Path
from typing import TYPE_CHECKING

import mutassert.assertion.assertiongenerator as ag
import mutassert.configuration as config
import mutassert.utils.statistics.stats as stat

from mutassert.assertion.inspector import InspectorManager
from mutassert.mutation.registry import MutationRegistry
from mutassert.mutation.session import MutationDiscoverySession
from mutassert.testcase import export
from mutassert.testcase.execution import TestCaseExecutor
from mutassert.utils import randomness
from mutassert.utils.configuration_writer import write_configuration
from mutassert.utils.exceptions import ConfigurationException
from mutassert.utils.statistics.runtimevariable import RuntimeVariable
from mutassert.utils.timebudget import TimeBudget


if TYPE_CHECKING:
    from types import ModuleType

    import mutassert.testcase.testcase as tc


@enum.unique
class ReturnCode(enum.IntEnum):
    """Return codes for mutassert to signal result."""

    OK = 0
    """Symbolises that the execution ended as expected."""

    SETUP_FAILED = 1
    """Symbolises that the execution failed in the setup phase."""

    NO_TESTS_GENERATED = 2
    """Symbolises that the harness did not provide any test case."""

    EXPORT_FAILED = 3
    """Symbolises that the test cases could not be written."""


_LOGGER = logging.getLogger(__name__)


def set_configuration(configuration: config.Configuration) -> None:
    """Initialises the assertion generator with the given configuration.

    Args:
        configuration: The configuration to use.
    """
    config.configuration = configuration


def run_mutassert() -> ReturnCode:
    """Run the assertion generation.

    The result of the assertion generation is indicated by the resulting ReturnCode.

    Returns:
        See ReturnCode.
    """
    try:
        _LOGGER.info("Start mutassert Assertion Generation…")
        return _run()
    finally:
        _LOGGER.info("Stop mutassert Assertion Generation…")


def _setup_path() -> bool:
    """Set up the run-time path.

    Returns:
        Whether the project path is a directory
    """
    if not Path(config.configuration.project_path).is_dir():
        _LOGGER.error("%s is not a valid project path", config.configuration.project_path)
        return False
    _LOGGER.debug("Setting up path for %s", config.configuration.project_path)
    sys.path.insert(0, config.configuration.project_path)
    return True


def _setup_report_dir() -> bool:
    # Report dir only needs to be created when statistics are enabled.
    if config.configuration.statistics_output.statistics_backend != config.StatisticsBackend.NONE:
        report_dir = Path(config.configuration.statistics_output.report_dir).absolute()
        try:
            report_dir.mkdir(parents=True, exist_ok=True)
        except OSError:
            _LOGGER.exception(
                "Cannot create report dir %s",
                config.configuration.statistics_output.report_dir,
            )
            return False
    return True


def _setup_random_number_generator() -> None:
    """Setup RNG."""
    _LOGGER.info("Using seed %d", config.configuration.seeding.seed)
    randomness.RNG.seed(config.configuration.seeding.seed)


def _load_harness() -> ModuleType | None:
    module_name = config.configuration.module_name
    try:
        if module_name in sys.modules:
            return importlib.reload(sys.modules[module_name])
        return importlib.import_module(module_name)
    except Exception as ex:
        # A module could not be imported because some dependencies
        # are missing or it is malformed or any error is raised during the import
        _LOGGER.exception("Failed to load harness: %s", ex)
        return None


def _verify_harness(harness: ModuleType) -> tuple[MutationRegistry, list[tc.TestCase]]:
    registry = getattr(harness, "MUTANTS", None)
    if not isinstance(registry, MutationRegistry):
        raise ConfigurationException(
            f"{harness.__name__} does not provide a MUTANTS mutation registry"
        )
    create_test_cases = getattr(harness, "create_test_cases", None)
    if not callable(create_test_cases):
        raise ConfigurationException(
            f"{harness.__name__} does not provide a create_test_cases() function"
        )
    return registry, list(create_test_cases())


def _setup_and_check() -> tuple[TestCaseExecutor, list[tc.TestCase]] | None:
    """Load the harness and create the executor.

    Returns:
        The executor and the test cases, or None if the setup failed
    """
    if not _setup_path():
        return None
    if not _setup_report_dir():
        return None
    _setup_random_number_generator()
    if (harness := _load_harness()) is None:
        return None
    try:
        registry, test_cases = _verify_harness(harness)
    except ConfigurationException as ex:
        _LOGGER.error("Invalid harness: %s", ex)  # noqa: TRY400
        return None
    except Exception as ex:
        _LOGGER.exception("Failed to create the test cases: %s", ex)
        return None

    write_configuration()
    _track_setup_data(registry, test_cases)
    executor = TestCaseExecutor(
        registry,
        config.configuration.stopping.maximum_test_execution_timeout,
        config.configuration.stopping.test_execution_time_per_statement,
    )
    return executor, test_cases


def _track_setup_data(registry: MutationRegistry, test_cases: list[tc.TestCase]) -> None:
    stat.track_output_variable(RuntimeVariable.TargetModule, config.configuration.module_name)
    stat.track_output_variable(RuntimeVariable.RandomSeed, config.configuration.seeding.seed)
    stat.track_output_variable(RuntimeVariable.NumberOfTestCases, len(test_cases))
    stat.track_output_variable(
        RuntimeVariable.ConfigurationId,
        config.configuration.statistics_output.configuration_id,
    )
    stat.track_output_variable(
        RuntimeVariable.RunId, config.configuration.statistics_output.run_id
    )
    stat.track_output_variable(
        RuntimeVariable.ProjectName, config.configuration.statistics_output.project_name
    )
    _LOGGER.info("Harness provides %d test case(s) and %d mutant(s)", len(test_cases), len(registry))


def _collect_statistics() -> None:
    for runtime_variable, value in stat.variables_generator():
        stat.set_output_variable_for_runtime_variable(runtime_variable, value)


def _generate_assertions(executor: TestCaseExecutor, test_cases: list[tc.TestCase]) -> None:
    strategy = config.configuration.test_case_output.assertion_generation
    if strategy == config.AssertionGenerator.NONE:
        _LOGGER.info("Assertion generation is disabled")
        return
    _LOGGER.info("Start generating assertions")
    generator = ag.SuiteAssertionGenerator(
        executor,
        InspectorManager(config.configuration.assertion_generation.inspector_failure_threshold),
        MutationDiscoverySession(),
        TimeBudget(config.configuration.stopping.maximum_assertion_generation_time),
    )
    generator.generate(test_cases)
    _LOGGER.info(
        "Mutation score: %.2f",
        generator.summary.get_score(),
    )


def _export_test_cases(executor: TestCaseExecutor, test_cases: list[tc.TestCase]) -> Path:
    """Export the given test cases.

    Args:
        executor: The executor, used to find out which tests raise an exception
        test_cases: The test cases to export

    Returns:
        The name of the target file
    """
    module_name = config.configuration.module_name.replace(".", "_")
    target_file = (
        Path(config.configuration.test_case_output.output_path).resolve()
        / f"test_{module_name}.py"
    )
    exporter = export.PyTestExporter(config.configuration.assertion_generation.float_precision)
    for test_case, result in zip(
        test_cases, executor.execute_multiple(test_cases), strict=True
    ):
        exporter.add_test_case(test_case, result)
    export.save_module_to_file(
        exporter.to_module(),
        target_file,
        format_with_black=config.configuration.test_case_output.format_with_black,
    )
    _LOGGER.info("Written %i test cases to %s", len(test_cases), target_file)
    return target_file


def _run() -> ReturnCode:
    if (setup_result := _setup_and_check()) is None:
        return ReturnCode.SETUP_FAILED
    executor, test_cases = setup_result
    if not test_cases:
        _LOGGER.error("The harness did not provide any test case")
        return ReturnCode.NO_TESTS_GENERATED

    _generate_assertions(executor, test_cases)

    try:
        _export_test_cases(executor, test_cases)
    except Exception as ex:
        _LOGGER.exception("Export to PyTest failed: %s", ex)
        return ReturnCode.EXPORT_FAILED

    _collect_statistics()
    if not stat.write_statistics():
        _LOGGER.error("Failed to write statistics data")
    return ReturnCode.OK
