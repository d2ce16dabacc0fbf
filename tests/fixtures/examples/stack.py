#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""A stack with a handful of mutants."""

from __future__ import annotations

from mutassert.mutation.registry import MutationRegistry


MUTANTS = MutationRegistry()
PUSH_SKIP = MUTANTS.register("Stack.push", "do not store the pushed item")
SIZE_PLUS_ONE = MUTANTS.register("Stack.size", "add one to the size")
EMPTY_NEGATED = MUTANTS.register("Stack.is_empty", "negate the emptiness check")
PEEK_NONE = MUTANTS.register("Stack.peek", "return None instead of the top item")


class Stack:
    def __init__(self) -> None:
        self._items: list[int] = []

    def push(self, item: int) -> None:
        if MUTANTS.touched(PUSH_SKIP):
            return
        self._items.append(item)

    def pop(self) -> int:
        return self._items.pop()

    def peek(self) -> int | None:
        if MUTANTS.touched(PEEK_NONE):
            return None
        return self._items[-1] if self._items else None

    def size(self) -> int:
        if MUTANTS.touched(SIZE_PLUS_ONE):
            return len(self._items) + 1
        return len(self._items)

    def is_empty(self) -> bool:
        if MUTANTS.touched(EMPTY_NEGATED):
            return bool(self._items)
        return not self._items

    def to_list(self) -> list[int]:
        return list(self._items)


class Box:
    def __init__(self) -> None:
        self._stack = Stack()

    def get_stack(self) -> Stack:
        return self._stack
