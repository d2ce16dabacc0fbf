#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides tracking of statistics for various variables and types."""

from __future__ import annotations

import logging
import queue
import time

from typing import TYPE_CHECKING
from typing import Any

import mutassert.configuration as config
import mutassert.utils.statistics.statisticsbackend as sb

from mutassert.utils.statistics.runtimevariable import RuntimeVariable


if TYPE_CHECKING:
    from collections.abc import Generator


class _StatisticsTracker:
    """A singleton tracker for statistics."""

    def __init__(self) -> None:
        self._variables: queue.Queue = queue.Queue()
        self._statistics: _RunStatistics = _RunStatistics()

    def reset(self) -> None:
        """Reset the tracker (necessary for testing only)."""
        self._variables = queue.Queue()
        self._statistics = _RunStatistics()

    def track_output_variable(self, runtime_variable: RuntimeVariable, value: Any):
        """Tracks a run-time variable for output.

        Args:
            runtime_variable: The run-time variable
            value: The value to track for the variable
        """
        self._variables.put((runtime_variable, value))

    @property
    def variables(self) -> queue.Queue:
        """Provides the queue of tracked variables.

        Returns:
            The queue of tracked variables
        """
        return self._variables

    @property
    def variables_generator(self) -> Generator[tuple[RuntimeVariable, Any]]:
        """Provides a generator.

        Yields:
            A generator for iteration
        """
        while not self._variables.empty():
            yield self._variables.get()

    def set_output_variable_for_runtime_variable(
        self, variable: RuntimeVariable, value: Any
    ) -> None:
        """Sets an output variable to a value directly.

        Args:
            variable: The variable to be set
            value: the value to be set
        """
        self._statistics.set_output_variable(sb.OutputVariable(name=variable.name, value=value))

    @property
    def output_variables(self) -> dict[str, sb.OutputVariable]:
        """Provides the output variables.

        Returns:
            The output variables
        """
        return self._statistics.output_variables

    def write_statistics(self) -> bool:
        """Write result to disk using selected backend.

        Returns:
            True if the writing was successful
        """
        return self._statistics.write_statistics()


class _RunStatistics:
    """Collects all the data values reported during one run.

    The only instance of this class that shall exist is held by the
    `_StatisticsTracker`, which delegates to it.
    """

    _logger = logging.getLogger(__name__)

    def __init__(self):
        self._backend: sb.AbstractStatisticsBackend | None = self._initialise_backend()
        self._output_variables: dict[str, sb.OutputVariable] = {}
        self._start_time = time.time_ns()

    @staticmethod
    def _initialise_backend() -> sb.AbstractStatisticsBackend | None:
        return sb.create_backend(config.configuration.statistics_output.statistics_backend)

    def set_output_variable(self, variable: sb.OutputVariable) -> None:
        """Sets an output variable to a value directly.

        Args:
            variable: The variable to be set
        """
        self._output_variables[variable.name] = variable

    @property
    def output_variables(self) -> dict[str, sb.OutputVariable]:
        """Provides the output variables.

        Returns:
            The output variables
        """
        return self._output_variables

    def _get_output_variables(self) -> dict[str, sb.OutputVariable]:
        output_variables_map: dict[str, sb.OutputVariable] = {}
        for variable in config.configuration.statistics_output.output_variables:
            variable_name = variable.name if hasattr(variable, "name") else str(variable)
            if variable_name in self._output_variables:
                output_variables_map[variable_name] = self._output_variables[variable_name]
            else:
                # if variable does not exist, return an empty value instead
                output_variables_map[variable_name] = sb.OutputVariable(
                    name=variable_name, value=""
                )
        return output_variables_map

    def write_statistics(self) -> bool:
        """Write result to disk using selected backend.

        Returns:
            True if the writing was successful
        """
        self._logger.info("Writing statistics")
        # reinitialise backend to be sure we got the correct one, prone to failure
        # due to global-object pattern otherwise.
        self._backend = self._initialise_backend()
        if not self._backend:
            return False

        self._output_variables[RuntimeVariable.TotalTime.name] = sb.OutputVariable(
            name=RuntimeVariable.TotalTime.name,
            value=time.time_ns() - self._start_time,
        )
        self._backend.write_data(self._get_output_variables())
        return True


statistics_tracker = _StatisticsTracker()
track_output_variable = statistics_tracker.track_output_variable
set_output_variable_for_runtime_variable = (
    statistics_tracker.set_output_variable_for_runtime_variable
)
write_statistics = statistics_tracker.write_statistics
reset = statistics_tracker.reset


def variables_generator() -> Generator[tuple[RuntimeVariable, Any]]:
    """Drains the tracked variables.

    Yields:
        Pairs of run-time variable and tracked value
    """
    yield from statistics_tracker.variables_generator


def output_variables() -> dict[str, sb.OutputVariable]:
    """Provides the output variables collected so far.

    Returns:
        The output variables
    """
    return statistics_tracker.output_variables
