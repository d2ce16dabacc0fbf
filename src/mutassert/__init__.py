#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""mutassert adds mutation-driven regression assertions to test cases."""

import mutassert.configuration as config
import mutassert.generator as gen


set_configuration = gen.set_configuration
run_mutassert = gen.run_mutassert
Configuration = config.Configuration
AssertionGenerator = config.AssertionGenerator
StatisticsBackend = config.StatisticsBackend

__all__ = [
    "AssertionGenerator",
    "Configuration",
    "StatisticsBackend",
    "run_mutassert",
    "set_configuration",
]
