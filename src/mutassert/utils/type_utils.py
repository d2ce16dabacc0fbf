#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides utilities to check types and values."""

from __future__ import annotations

import builtins
import enum
import inspect
import typing

from typing import Any

from typing_inspect import is_union_type

from mutassert.utils.orderedset import OrderedSet


PRIMITIVES = OrderedSet([int, str, bytes, bool, float, complex])
ARRAYS = OrderedSet([list, tuple])


def is_primitive_type(typ: type | None) -> bool:
    """Check if the given type is a primitive.

    Args:
        typ: a given type

    Returns:
        Whether the type is a primitive type
    """
    return typ in PRIMITIVES


def is_none_type(typ: type | None) -> bool:
    """Is the given type NoneType?

    Args:
        typ: a type to check

    Returns:
        Whether the type is NoneType
    """
    return typ is type(None)


def is_enum(value: Any) -> bool:
    """Check if the given value is an enum.

    Args:
        value: an arbitrary value

    Returns:
        Whether the given value is of type enum.
    """
    return isinstance(value, type) and issubclass(value, enum.Enum)


def is_primitive_value(value: Any) -> bool:
    """Is the value a primitive or an enum member?

    Args:
        value: an arbitrary value

    Returns:
        Whether an exact value can be asserted for it
    """
    tp_ = type(value)
    return is_primitive_type(tp_) or is_enum(tp_)


def is_array(value: Any) -> bool:
    """Is the value an array-like sequence, i.e., a list or a tuple?

    Args:
        value: an arbitrary value

    Returns:
        Whether the value is a list or a tuple
    """
    return type(value) in ARRAYS


def is_primitive_array(value: Any) -> bool:
    """Is the value an array of primitives?

    Args:
        value: an arbitrary value

    Returns:
        Whether the value is a list or tuple of primitive values
    """
    return is_array(value) and all(is_primitive_value(elem) for elem in value)


def is_user_class(typ: Any) -> bool:
    """Is the given type a class that is neither built in nor from typing?

    Args:
        typ: a type

    Returns:
        Whether the type is a user-defined class
    """
    return (
        inspect.isclass(typ)
        and typ.__module__ not in {builtins.__name__, typing.__name__}
        and not is_enum(typ)
    )


def is_private_enum_member(value: Any) -> bool:
    """Is the value a member of an enum that is not publicly named?

    Args:
        value: an arbitrary value

    Returns:
        Whether the value is an enum member whose class name starts with ``_``
    """
    return isinstance(value, enum.Enum) and type(value).__name__.startswith("_")


def unwrap_optional(typ: Any) -> Any:
    """Provides the wrapped type of an optional type.

    Args:
        typ: a type

    Returns:
        X for ``X | None`` and ``Optional[X]``, otherwise the given type
    """
    if is_union_type(typ):
        args = [arg for arg in typing.get_args(typ) if arg is not type(None)]
        if len(args) == 1:
            return args[0]
    return typ
