#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
import hypothesis.strategies as st
from hypothesis import given

from mutassert.utils import randomness


def test_shuffle_keeps_elements():
    sequence = list(range(10))
    randomness.shuffle(sequence)
    assert sorted(sequence) == list(range(10))


def test_get_seed():
    rng = randomness.Random()
    assert isinstance(rng.get_seed(), int)


@given(st.integers())
def test_seeding(seed):
    rng = randomness.Random()
    rng.seed(seed)
    assert rng.get_seed() == seed


@given(st.integers())
def test_same_seed_same_shuffle(seed):
    first = list(range(20))
    second = list(range(20))
    randomness.RNG.seed(seed)
    randomness.shuffle(first)
    randomness.RNG.seed(seed)
    randomness.shuffle(second)
    assert first == second
