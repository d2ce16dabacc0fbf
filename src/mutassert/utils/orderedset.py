#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides an insertion-ordered set.

Assertions, killed-mutant identifiers and verification results are kept in
insertion order so that rendering, minimization and shuffling with a fixed seed
give reproducible results.
"""

from __future__ import annotations

from collections.abc import Hashable
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import MutableSet
from typing import Any
from typing import TypeVar

from typing_extensions import Self


T = TypeVar("T", bound=Hashable)


class OrderedSet(MutableSet[T]):
    """A mutable set that remembers the order in which its elements were added."""

    def __init__(self, iterable: Iterable[T] | None = None) -> None:  # noqa: D107
        self._items: dict[T, None] = dict.fromkeys(iterable or ())

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, key: Any) -> bool:
        return key in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __reversed__(self) -> Iterator[T]:
        return reversed(tuple(self._items))

    def __copy__(self) -> Self:
        return self.__class__(self)

    def __repr__(self) -> str:
        name = self.__class__.__name__
        if not self:
            return f"{name}()"
        return f"{name}({list(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, OrderedSet):
            return list(self._items) == list(other._items)
        if isinstance(other, (set, frozenset)):
            return set(self._items) == other
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __getitem__(self, index: int) -> T:
        """Lookup item at given position. Caution, as this runs in O(n).

        Args:
            index: The index whose value we want to retrieve.

        Returns:
            The value of the given index.

        Raises:
            IndexError: When the index is out of range.
        """
        if index < 0:
            index += len(self._items)
        for i, key in enumerate(self._items):
            if i == index:
                return key
        raise IndexError("Index out of range.")

    def add(self, value: T) -> None:
        """Add an element to the set, if it is not yet contained.

        Args:
            value: The element to add
        """
        self._items[value] = None

    def update(self, *iterables: Iterable[T]) -> None:
        """Add all elements of the given iterables.

        Args:
            *iterables: the iterables whose elements shall be added
        """
        for iterable in iterables:
            for item in iterable:
                self._items[item] = None

    def discard(self, value: T) -> None:
        """Remove an element, if it is contained.

        Args:
            value: The element to remove
        """
        self._items.pop(value, None)

    def clear(self) -> None:
        """Remove all elements."""
        self._items.clear()

    def copy(self) -> Self:
        """Create a shallow copy.

        Returns:
            A new ordered set with the same elements in the same order
        """
        return self.__class__(self)

    def union(self, *others: Iterable[T]) -> Self:
        """Combines all unique items, ordered by their first appearance.

        Args:
            *others: the iterables to union with

        Returns:
            A new ordered set containing the union.
        """
        result = self.copy()
        result.update(*others)
        return result

    def difference(self, *others: Iterable[T]) -> Self:
        """Returns the elements of this set that are in none of the others.

        Args:
            *others: the iterables whose elements are excluded

        Returns:
            A new ordered set containing the difference.
        """
        excluded: set[T] = set()
        for other in others:
            excluded.update(other)
        return self.__class__(item for item in self if item not in excluded)

    def issubset(self, other: Iterable[T]) -> bool:
        """Report whether another set contains this set.

        Args:
            other: the potential superset

        Returns:
            Whether all elements of this set are contained in other.
        """
        other_set = other if isinstance(other, (set, frozenset, OrderedSet)) else set(other)
        return all(item in other_set for item in self)

    def __or__(self, other: Iterable[T]) -> Self:  # type: ignore[override]
        return self.union(other)

    def __sub__(self, other: Iterable[T]) -> Self:  # type: ignore[override]
        return self.difference(other)
