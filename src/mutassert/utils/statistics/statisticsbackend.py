#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Backends that persist the tracked output variables of a run."""

from __future__ import annotations

import abc
import csv
import logging

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.table import Table

import mutassert.configuration as config


_LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputVariable:
    """A named value of the run statistics."""

    name: str
    value: Any


class AbstractStatisticsBackend(abc.ABC):
    """Writes one row of output variables."""

    @abc.abstractmethod
    def write_data(self, data: dict[str, OutputVariable]) -> None:
        """Write the given row.

        Args:
            data: The output variables by name, in column order
        """


class CSVStatisticsBackend(AbstractStatisticsBackend):
    """Appends rows to statistics.csv in the report directory."""

    def __init__(self, report_dir: Path | None = None) -> None:
        """Create a new CSV backend.

        Args:
            report_dir: The target directory; the configured report directory is
                used if it is not given
        """
        self._report_dir = report_dir

    @property
    def output_file(self) -> Path:
        """The CSV file that rows are appended to.

        Returns:
            The path of the CSV file
        """
        report_dir = self._report_dir or Path(config.configuration.statistics_output.report_dir)
        return report_dir.resolve() / "statistics.csv"

    def write_data(self, data: dict[str, OutputVariable]) -> None:  # noqa: D102
        output_file = self.output_file
        try:
            new_file = not output_file.exists() or output_file.stat().st_size == 0
            with output_file.open(mode="a", encoding="utf-8", newline="") as csv_file:
                writer = csv.writer(csv_file, quoting=csv.QUOTE_NONNUMERIC)
                if new_file:
                    writer.writerow(list(data))
                writer.writerow([str(variable.value) for variable in data.values()])
        except OSError:
            _LOGGER.exception("Error while writing statistics to %s", output_file)


class ConsoleStatisticsBackend(AbstractStatisticsBackend):
    """Shows the row as a table on standard output."""

    def write_data(self, data: dict[str, OutputVariable]) -> None:  # noqa: D102
        table = Table("Variable", "Value", title="Statistics")
        for name, variable in data.items():
            table.add_row(name, str(variable.value))
        Console().print(table)


def create_backend(
    backend: config.StatisticsBackend,
) -> AbstractStatisticsBackend | None:
    """Create the backend for the configured kind.

    Args:
        backend: The configured kind of backend

    Returns:
        The backend, or None if statistics shall not be written
    """
    match backend:
        case config.StatisticsBackend.CSV:
            return CSVStatisticsBackend()
        case config.StatisticsBackend.CONSOLE:
            return ConsoleStatisticsBackend()
        case _:
            return None
