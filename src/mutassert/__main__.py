#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""mutassert adds mutation-driven regression assertions to test cases.

This module provides the main entry location for the program executions.
"""

import sys

from mutassert.cli import main


if __name__ == "__main__":
    sys.exit(main(sys.argv))
