#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Plain values and helpers without mutants."""

import enum
import itertools

from mutassert.mutation.registry import MutationRegistry


MUTANTS = MutationRegistry()
LOOP_PROBE = MUTANTS.register("spin", "probe inside an endless loop")

_TICKS = itertools.count()


class Color(enum.Enum):
    RED = 1
    GREEN = 2


class Point:
    ORIGIN_NAME = "origin"
    dimensions = 2

    def __init__(self, x: int, y: int) -> None:
        self.x = x
        self.y = y
        self._secret = "hidden"

    def get_norm(self) -> float:
        return (self.x**2 + self.y**2) ** 0.5

    @property
    def is_origin(self) -> bool:
        return self.x == 0 and self.y == 0

    def get_color(self) -> Color:
        return Color.RED if self.x >= 0 else Color.GREEN

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Point) and (self.x, self.y) == (other.x, other.y)

    def __lt__(self, other: "Point") -> bool:
        return (self.x, self.y) < (other.x, other.y)

    def __gt__(self, other: "Point") -> bool:
        return (self.x, self.y) > (other.x, other.y)

    __hash__ = None  # type: ignore[assignment]


class Level:
    def __init__(self, rank: int) -> None:
        self.rank = rank

    def _ranks(self, other: "Level") -> tuple[int, int]:
        if 0 in (self.rank, other.rank):
            raise TypeError("unranked levels are not ordered")
        return self.rank, other.rank

    def __lt__(self, other: "Level") -> bool:
        mine, theirs = self._ranks(other)
        return mine < theirs

    def __gt__(self, other: "Level") -> bool:
        mine, theirs = self._ranks(other)
        return mine > theirs


class Ticker:
    def __init__(self) -> None:
        self.created_at = next(_TICKS)

    def get_label(self) -> str:
        return "ticker"


class Faulty:
    def get_value(self) -> int:
        raise RuntimeError("broken accessor")


def make_pair(first: int, second: int) -> tuple:
    return first, second


def spin() -> int:
    while True:
        MUTANTS.touched(LOOP_PROBE)


def leave() -> int:
    raise SystemExit(1)
