#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Command line entry point of mutassert.

Parses the configuration from the command line, sets up logging and hands over to
`mutassert.generator.run_mutassert`.
"""

from __future__ import annotations

import contextlib
import logging
import sys

from pathlib import Path
from typing import TYPE_CHECKING

import simple_parsing

from rich.console import Console
from rich.logging import RichHandler
from rich.traceback import install

import mutassert.configuration as config

from mutassert.__version__ import __version__
from mutassert.generator import run_mutassert
from mutassert.generator import set_configuration


if TYPE_CHECKING:
    import argparse


_LOG_FORMAT = "%(asctime)s [%(levelname)s](%(name)s:%(funcName)s:%(lineno)d): %(message)s"
_LEVELS = (logging.WARNING, logging.INFO, logging.DEBUG)


def _create_argument_parser() -> argparse.ArgumentParser:
    parser = simple_parsing.ArgumentParser(
        add_option_string_dash_variants=simple_parsing.DashVariant.UNDERSCORE_AND_DASH,
        description="Select and minimize regression assertions by mutation analysis",
        fromfile_prefix_chars="@",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-v",
        "--verbose",
        dest="verbosity",
        action="count",
        default=0,
        help="log more details; -v for INFO, -vv for DEBUG",
    )
    parser.add_argument(
        "--no-rich",
        "--no_rich",
        dest="no_rich",
        action="store_true",
        help="log plain text instead of using rich",
    )
    parser.add_argument(
        "--log-file",
        "--log_file",
        type=Path,
        help="write the log to this file instead of the console",
    )
    parser.add_arguments(config.Configuration, dest="config")
    return parser


def _setup_output_path(output_path: str) -> None:
    Path(output_path).resolve().mkdir(parents=True, exist_ok=True)


def _log_level(verbosity: int, log_file: Path | None) -> int:
    # A log file is at least as detailed as -v.
    if log_file is not None:
        verbosity = max(verbosity, 1)
    return _LEVELS[min(verbosity, len(_LEVELS) - 1)]


def _setup_logging(
    verbosity: int,
    no_rich: bool,  # noqa: FBT001
    log_file: Path | None,
) -> Console | None:
    console = None
    if not no_rich:
        install()
        console = Console(tab_size=4)

    handler: logging.Handler
    if log_file is not None:
        handler = logging.FileHandler(log_file)
    elif console is not None:
        handler = RichHandler(rich_tracebacks=True, log_time_format="[%X]", console=console)
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler()

    logging.basicConfig(
        level=_log_level(verbosity, log_file),
        format=_LOG_FORMAT,
        datefmt="[%X]",
        handlers=[handler],
        force=True,
    )
    return console


def main(argv: list[str] | None = None) -> int:
    """Run mutassert from the command line.

    Args:
        argv: The command line, including the program name

    Returns:
        The value of the resulting `mutassert.generator.ReturnCode`, i.e., 0 on
        success
    """
    if argv is None:
        argv = sys.argv
    arguments = argv[1:] or ["--help"]

    parsed = _create_argument_parser().parse_args(arguments)
    _setup_output_path(parsed.config.test_case_output.output_path)
    console = _setup_logging(parsed.verbosity, parsed.no_rich, parsed.log_file)
    set_configuration(parsed.config)

    status = (
        console.status("Generating assertions...")
        if console is not None
        else contextlib.nullcontext()
    )
    with status:
        return run_mutassert().value


if __name__ == "__main__":
    sys.exit(main(sys.argv))
