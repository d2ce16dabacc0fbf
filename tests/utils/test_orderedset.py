#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
import copy

import pytest

from mutassert.utils.orderedset import OrderedSet


@pytest.mark.parametrize("length, iterable", [(0, []), (3, [1, 2, 3]), (2, [1, 2, 2])])
def test_orderedset_len(length, iterable):
    assert len(OrderedSet(iterable)) == length


def test_orderedset_copy():
    ordered = OrderedSet([1, 2, 3])
    copied = copy.copy(ordered)
    assert ordered == copied
    copied.add(4)
    assert 4 not in ordered


@pytest.mark.parametrize("element, result", [(0, False), (3, True)])
def test_orderedset_contains(element, result):
    assert (element in OrderedSet([1, 2, 3])) == result


def test_orderedset_reversed():
    ordered = OrderedSet([1, 2, 3])
    assert tuple(reversed(ordered)) == (3, 2, 1)


def test_orderedset_keeps_insertion_order():
    ordered = OrderedSet([3, 1, 2])
    ordered.add(1)
    ordered.add(0)
    assert list(ordered) == [3, 1, 2, 0]


def test_orderedset_getitem():
    ordered = OrderedSet(["a", "b", "c"])
    assert ordered[0] == "a"
    assert ordered[2] == "c"


@pytest.mark.parametrize(
    "first,second,result",
    [
        ([1, 2, 3], [1, 2, 3], True),
        ([1, 2, 3], [1, 2], False),
        ([1, 2, None], [1, 2], False),
        ([1, 2, 3], [1, 3, 2], False),
    ],
)
def test_orderedset_eq(first, second, result):
    assert (OrderedSet(first) == OrderedSet(second)) == result


@pytest.mark.parametrize(
    "first, second, result",
    [([], [], []), ([1], [], [1]), ([], [1], [1]), ([1], [2], [1, 2])],
)
def test_ordereset_or_union(first, second, result):
    assert OrderedSet(first) | OrderedSet(second) == OrderedSet(result)
    assert OrderedSet(first).union(OrderedSet(second)) == OrderedSet(result)


@pytest.mark.parametrize(
    "first, second, result",
    [([], [], []), ([1], [], [1]), ([1, 2, 3], [2], [1, 3]), ([1], [1], [])],
)
def test_orderedset_difference(first, second, result):
    assert OrderedSet(first) - OrderedSet(second) == OrderedSet(result)
    assert OrderedSet(first).difference(OrderedSet(second)) == OrderedSet(result)


def test_orderedset_discard_missing():
    ordered = OrderedSet([1])
    ordered.discard(2)
    assert ordered == OrderedSet([1])


def test_orderedset_update_and_clear():
    ordered = OrderedSet([1])
    ordered.update([2, 3])
    assert list(ordered) == [1, 2, 3]
    ordered.clear()
    assert len(ordered) == 0


def test_orderedset_issubset():
    assert OrderedSet([1]).issubset(OrderedSet([1, 2]))
    assert not OrderedSet([1, 3]).issubset(OrderedSet([1, 2]))
