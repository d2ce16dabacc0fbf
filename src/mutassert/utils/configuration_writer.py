#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Utility to write the current configuration to a TOML file."""

import json
import pprint

from pathlib import Path

import toml

import mutassert.configuration as config


MUTASSERT_CONFIG_TXT = "mutassert-config.txt"
MUTASSERT_CONFIG_TOML = "mutassert-config.toml"


def write_configuration() -> None:
    """Save the current configuration to a txt and a toml file."""
    if config.configuration.statistics_output.statistics_backend != config.StatisticsBackend.CSV:
        return
    report_dir = Path(config.configuration.statistics_output.report_dir).resolve()
    report_dir.mkdir(parents=True, exist_ok=True)

    toml_file = report_dir / MUTASSERT_CONFIG_TOML
    with toml_file.open("w", encoding="utf-8") as f:
        toml.dump(convert_config_to_dict(config.configuration), f)

    txt_file = report_dir / MUTASSERT_CONFIG_TXT
    txt_file.write_text(pprint.pformat(repr(config.configuration)), encoding="utf-8")


def convert_config_to_dict(config_obj: object) -> dict:
    """Converts a configuration object to a dictionary.

    Other than the built-in `dataclasses.asdict`, this function converts enum values
    to their string representation, which is required for the TOML format.

    Args:
        config_obj: The configuration object to convert.

    Returns:
        A dictionary representation of the configuration object.
    """
    return json.loads(json.dumps(config_obj, default=lambda o: o.__dict__))
