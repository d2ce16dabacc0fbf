#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
import threading

import pytest

from mutassert.mutation.registry import Mutation
from mutassert.mutation.registry import MutationRegistry


@pytest.fixture
def registry():
    registry = MutationRegistry()
    registry.register("foo", "replace + with -")
    registry.register("bar")
    return registry


def test_register_assigns_consecutive_ids(registry):
    assert [mutation.mutation_id for mutation in registry.mutations] == [0, 1]
    assert len(registry) == 2


def test_get(registry):
    assert registry.get(1) == Mutation(1, "bar")


@pytest.mark.parametrize(
    "mutation,text",
    [
        (Mutation(0, "foo", "replace + with -"), "Mutation 0 in foo: replace + with -"),
        (Mutation(1, "bar"), "Mutation 1 in bar"),
    ],
)
def test_mutation_str(mutation, text):
    assert str(mutation) == text


def test_touched_without_active_mutant(registry):
    assert not registry.touched(0)
    assert list(registry.touched_mutants) == [0]


def test_touched_records_order(registry):
    registry.touched(1)
    registry.touched(0)
    registry.touched(1)
    assert list(registry.touched_mutants) == [1, 0]


def test_touched_returns_copy(registry):
    registry.touched(0)
    touched = registry.touched_mutants
    registry.reset_touched()
    assert list(touched) == [0]
    assert len(registry.touched_mutants) == 0


def test_activated(registry):
    with registry.activated(registry.get(1)) as mutation:
        assert registry.active_mutation == mutation
        assert registry.touched(1)
        assert not registry.touched(0)
    assert registry.active_mutation is None
    assert not registry.touched(1)


def test_activated_is_reset_after_error(registry):
    with pytest.raises(ValueError, match="boom"), registry.activated(registry.get(0)):
        raise ValueError("boom")
    assert registry.active_mutation is None


def test_activate_twice_fails(registry):
    registry.activate(registry.get(0))
    with pytest.raises(RuntimeError):
        registry.activate(registry.get(1))
    registry.deactivate()


def test_activate_same_mutation_twice(registry):
    registry.activate(registry.get(0))
    registry.activate(registry.get(0))
    assert registry.active_mutation == registry.get(0)
    registry.deactivate()


def test_touched_from_foreign_thread_is_aborted(registry):
    registry.current_thread_identifier = threading.current_thread().ident + 1
    with pytest.raises(RuntimeError):
        registry.touched(0)
    registry.current_thread_identifier = None


def test_touched_from_executing_thread(registry):
    registry.current_thread_identifier = threading.current_thread().ident
    assert not registry.touched(0)
    registry.current_thread_identifier = None
