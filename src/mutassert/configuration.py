#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a configuration interface for the assertion generator."""

import dataclasses
import enum
import time

from mutassert.utils.statistics.runtimevariable import RuntimeVariable


class AssertionGenerator(str, enum.Enum):
    """Different approaches for assertion generation supported by mutassert."""

    MUTATION_ANALYSIS = "MUTATION_ANALYSIS"
    """Keep the assertions that distinguish the module from its mutants, minimized
    by a greedy set cover."""

    COMPLETE = "COMPLETE"
    """Keep every assertion that can be derived from an execution of the test."""

    NONE = "NONE"
    """Do not create any assertions."""


class StatisticsBackend(str, enum.Enum):
    """The different available statistics backends to write statistics."""

    NONE = "NONE"
    """Do not write any statistics."""

    CONSOLE = "CONSOLE"
    """Write statistics to the standard out."""

    CSV = "CSV"
    """Write statistics to a CSV file."""


@dataclasses.dataclass
class StatisticsOutputConfiguration:
    """Configuration related to output."""

    report_dir: str = "mutassert-report"
    """Directory in which to put CSV reports and the used configuration"""

    statistics_backend: StatisticsBackend = StatisticsBackend.CSV
    """Which backend to use to collect data"""

    output_variables: list[RuntimeVariable] = dataclasses.field(
        default_factory=lambda: [
            RuntimeVariable.TargetModule,
            RuntimeVariable.MutationScore,
            RuntimeVariable.AssertionCount,
        ]
    )
    """List of variables to output to the statistics backend."""

    configuration_id: str = ""
    """Label that identifies the used configuration of mutassert.  This is only done
    when running experiments."""

    run_id: str = ""
    """Id of the cluster run. Useful for finding the log entries that belong to a
    certain result."""

    project_name: str = ""
    """Label that identifies the project name of mutassert.  This is useful when
    running experiments."""


@dataclasses.dataclass
class TestCaseOutputConfiguration:
    """Configuration related to test case output."""

    output_path: str
    """Path to an output folder for the generated test cases."""

    assertion_generation: AssertionGenerator = AssertionGenerator.MUTATION_ANALYSIS
    """The generator that shall be used for assertion generation."""

    filter_flaky_assertions: bool = True
    """Re-execute the finished test suite and remove assertions that do not hold."""

    format_with_black: bool = True
    """Format the generated test cases using black."""


@dataclasses.dataclass
class SeedingConfiguration:
    """Configuration related to seeding."""

    seed: int = time.time_ns()
    """A predefined seed value for the random number generator that is used to
    shuffle mutants and tests."""


@dataclasses.dataclass
class StoppingConfiguration:
    """Configuration related to when mutassert should stop.

    Note that these are soft-limits rather than hard limits, because the time budget
    is only polled before each test and before each mutant execution.
    """

    maximum_assertion_generation_time: int = 600
    """Time (in seconds) that can be used for generating assertions."""

    maximum_test_execution_timeout: int = 5
    """The maximum time (in seconds) after which a test case times out."""

    test_execution_time_per_statement: int = 1
    """The time (in seconds) per statement that a test is allowed to run
    (up to maximum_test_execution_timeout)."""


@dataclasses.dataclass
class AssertionGenerationConfiguration:
    """Configuration of the mutation-driven assertion generation."""

    mutation_timeouts: int = 3
    """Number of timeouts (or new exceptions) a mutant may cause before it is
    treated as killed without executing it any further."""

    max_mutants_per_test: int = 0
    """Maximum number of mutants considered per test case; 0 means no limit."""

    max_string_length: int = 1000
    """Strings longer than this are not asserted on."""

    float_precision: float = 0.01
    """Precision to use in float comparisons and assertions"""

    minimization_fallback: float = 0.3
    """Fraction of the test suite that must have been processed once
    `minimization_fallback_time` of the time budget has elapsed.  Otherwise the
    remaining tests receive all assertions without minimization."""

    minimization_fallback_time: float = 0.6
    """Fraction of the time budget after which the minimization fallback is checked."""

    inspector_failure_threshold: int = 3
    """Number of failing calls after which an inspector is retired for a type."""

    inspector_timeout: float = 1.0
    """Time (in seconds) an inspector call may take before it is retired."""


@dataclasses.dataclass
class Configuration:
    """General configuration for the assertion generator."""

    project_path: str
    """Path to the project the generator shall create assertions for."""

    module_name: str
    """Name of the harness module.  It must provide a `MUTANTS` registry and a
    `create_test_cases()` function returning the test cases to complete."""

    test_case_output: TestCaseOutputConfiguration
    """Configuration for how test cases should be output."""

    statistics_output: StatisticsOutputConfiguration = dataclasses.field(
        default_factory=StatisticsOutputConfiguration
    )
    """Statistic Output configuration."""

    stopping: StoppingConfiguration = dataclasses.field(default_factory=StoppingConfiguration)
    """Stopping configuration."""

    seeding: SeedingConfiguration = dataclasses.field(default_factory=SeedingConfiguration)
    """Seeding configuration."""

    assertion_generation: AssertionGenerationConfiguration = dataclasses.field(
        default_factory=AssertionGenerationConfiguration
    )
    """Assertion generation configuration."""


# Singleton instance of the configuration.
configuration = Configuration(
    project_path="",
    module_name="",
    test_case_output=TestCaseOutputConfiguration(output_path=""),
)
