#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Names for the variables and module aliases of rendered test cases."""

from __future__ import annotations

import abc
import re
import typing

from collections import Counter


if typing.TYPE_CHECKING:
    from collections.abc import Callable
    from collections.abc import Iterator

    import mutassert.testcase.variablereference as vr


_UPPER = re.compile(r"(?<!^)(?=[A-Z])")


class AbstractNamingScope(abc.ABC):
    """Hands out one stable name per object.

    Subclasses only decide how a fresh name looks; the bookkeeping of already
    named objects is shared.
    """

    def __init__(self) -> None:  # noqa: D107
        self._names: dict[typing.Any, str] = {}

    @abc.abstractmethod
    def _fresh_name(self, obj: typing.Any) -> str:
        """Create the name of an object that was not named before."""

    def _named(self, obj: typing.Any, name: str) -> None:  # noqa: B027
        """Hook invoked once a new name was handed out."""

    def get_name(self, obj: typing.Any) -> str:
        """Provides the name of the object, naming it on first request.

        Args:
            obj: The object to name

        Returns:
            The name of the object within this scope
        """
        name = self._names.get(obj)
        if name is None:
            name = self._names[obj] = self._fresh_name(obj)
            self._named(obj, name)
        return name

    def is_known_name(self, obj: typing.Any) -> bool:
        """Was the object already named in this scope?

        Args:
            obj: The object

        Returns:
            Whether get_name was called for it before
        """
        return obj in self._names

    def __len__(self) -> int:
        return len(self._names)

    def __iter__(self) -> Iterator[tuple[typing.Any, str]]:
        return iter(self._names.items())


class NamingScope(AbstractNamingScope):
    """Numbers objects in the order they are named: var_0, var_1, ..."""

    def __init__(
        self,
        prefix: str = "var",
        new_name_callback: Callable[[typing.Any, str], None] | None = None,
    ) -> None:
        """Create a new scope.

        Args:
            prefix: The common prefix of all names
            new_name_callback: Notified with object and name for every new name
        """
        super().__init__()
        self._prefix = prefix
        self._callback = new_name_callback

    def _fresh_name(self, obj: typing.Any) -> str:
        return f"{self._prefix}_{len(self)}"

    def _named(self, obj: typing.Any, name: str) -> None:
        if self._callback is not None:
            self._callback(obj, name)


class VariableTypeNamingScope(AbstractNamingScope):
    """Names variables after their static type, e.g., stack_0 and int_1."""

    def __init__(self, *, prefix: str = "var") -> None:
        """Create a new scope.

        Args:
            prefix: The stem for variables of unknown type
        """
        super().__init__()
        self._prefix = prefix
        self._per_stem: Counter[str] = Counter()

    def _stem(self, var: vr.VariableReference) -> str:
        match var.type:
            case None:
                return self._prefix
            case typing.Any:
                return self._prefix
            case tp if tp is type(None):
                return "none_type"
            case tp:
                return snake_case(getattr(tp, "__name__", self._prefix))

    def _fresh_name(self, obj: vr.VariableReference) -> str:
        stem = self._stem(obj)
        index = self._per_stem[stem]
        self._per_stem[stem] += 1
        return f"{stem}_{index}"


def snake_case(name: str) -> str:
    """Convert a CamelCase name into snake_case.

    Args:
        name: A non-empty name

    Returns:
        The name in snake_case
    """
    assert name, "Cannot convert an empty name"
    return _UPPER.sub("_", name).lower()
