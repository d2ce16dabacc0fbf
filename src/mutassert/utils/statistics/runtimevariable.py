#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides runtime variables for output."""

import enum


@enum.unique
class RuntimeVariable(str, enum.Enum):
    """Defines all runtime variables we want to store in the result CSV files.

    A runtime variable is either an output of the generation (e.g., the mutation
    score) or something that can only be determined once the harness is loaded (e.g.,
    the number of mutants).

    It is perfectly fine to add new runtime variables in this enum, in any position, but
    it is essential to provide a unique name and a description for each new variable,
    because this description will become the text in the result.
    """

    # ========= Miscellaneous statistics =========

    # The module name for which we currently generate assertions
    TargetModule = "TargetModule"

    # An identifier for this configuration for benchmarking
    ConfigurationId = "ConfigurationId"

    # An identifier of the cluster job
    RunId = "RunId"

    # An identifier for the project's name for benchmarking
    ProjectName = "ProjectName"

    # Total run time of mutassert
    TotalTime = "TotalTime"

    # The random seed used for shuffling mutants and tests.
    # A random one was used if none was specified in the beginning
    RandomSeed = "RandomSeed"

    # Number of test cases handed to the assertion generation
    NumberOfTestCases = "NumberOfTestCases"

    # ========= Mutation analysis =========

    # Number of mutants known to the mutation registry
    NumberOfCreatedMutants = "NumberOfCreatedMutants"

    # Number of mutants killed by at least one generated test
    NumberOfKilledMutants = "NumberOfKilledMutants"

    # Number of mutants that caused a timeout
    NumberOfTimedOutMutants = "NumberOfTimedOutMutants"

    # Ratio of killed mutants over all mutants
    MutationScore = "MutationScore"

    # ========= Assertion generation =========

    # Number of assertions in the final test suite
    AssertionCount = "AssertionCount"

    # Number of assertions removed because they did not hold on re-execution
    RemovedFlakyAssertions = "RemovedFlakyAssertions"

    # Number of test cases that received all trace assertions without minimization
    MinimizationFallbackTests = "MinimizationFallbackTests"

    # Time (in nano seconds) spent for generating assertions
    AssertionGenerationTime = "AssertionGenerationTime"

    def __repr__(self):
        return f"{self.name}"
