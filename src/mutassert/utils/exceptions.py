#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides custom exception types."""


class ConfigurationException(BaseException):
    """An exception type that's raised if mutassert has no proper configuration."""


class GenerationException(BaseException):
    """An exception during assertion generation.

    This type shall be used for all exceptions that occur during assertion generation
    and that are caused by the generation process itself, not by the code under test.
    """


class ExecutionFailedException(Exception):
    """Raised, if the execution machinery itself failed to execute a test case.

    This signals a problem with the environment and is not recovered from.
    """
