#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
import pytest

import mutassert.configuration as config
import mutassert.utils.statistics.stats as stat

from mutassert.assertion.inspector import InspectorManager
from mutassert.testcase.execution import TestCaseExecutor
from mutassert.utils import randomness
from tests.fixtures.examples import counter
from tests.fixtures.examples import stack
from tests.testutils import build_counter_test_case
from tests.testutils import build_stack_test_case


@pytest.fixture(autouse=True)
def reset_configuration():
    """Automatically reset the configuration singleton."""
    config.configuration = config.Configuration(
        project_path="",
        module_name="",
        test_case_output=config.TestCaseOutputConfiguration(output_path=""),
    )
    stat.reset()
    randomness.RNG.seed(42)


@pytest.fixture
def inspector_manager():
    return InspectorManager()


@pytest.fixture
def counter_executor():
    return TestCaseExecutor(counter.MUTANTS)


@pytest.fixture
def stack_executor():
    return TestCaseExecutor(stack.MUTANTS)


@pytest.fixture
def counter_test_case():
    return build_counter_test_case()


@pytest.fixture
def stack_test_case():
    return build_stack_test_case()
