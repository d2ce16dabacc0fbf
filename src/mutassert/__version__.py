#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the version of mutassert."""

__version__ = "0.1.0"
