#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
from unittest import mock

import pytest

from mutassert.utils.timebudget import TimeBudget


@pytest.mark.parametrize("max_seconds", [0, -1])
def test_unbounded_budget(max_seconds):
    budget = TimeBudget(max_seconds)
    assert budget.is_there_still_time_in_phase()
    assert budget.phase_percentage() == 0.0


def test_budget_with_time_left():
    with mock.patch("time.time_ns", return_value=0):
        budget = TimeBudget(10)
    with mock.patch("time.time_ns", return_value=4_000_000_000):
        assert budget.is_there_still_time_in_phase()
        assert budget.phase_percentage() == pytest.approx(0.4)


def test_budget_exhausted():
    with mock.patch("time.time_ns", return_value=0):
        budget = TimeBudget(1)
    with mock.patch("time.time_ns", return_value=2_000_000_000):
        assert not budget.is_there_still_time_in_phase()
        assert budget.phase_percentage() == 1.0


def test_budget_restart():
    with mock.patch("time.time_ns", return_value=0):
        budget = TimeBudget(1)
    with mock.patch("time.time_ns", return_value=5_000_000_000):
        budget.start()
        assert budget.elapsed_ns == 0
        assert budget.is_there_still_time_in_phase()
