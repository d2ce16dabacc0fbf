#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides inspectors, i.e., zero-argument accessors used to observe objects.

An inspector is either a public method without parameters or a property.  It is
only considered if its name looks like an accessor and its annotated return type,
if any, is a primitive or an enum.  A chained inspector calls an accessor whose
result is an instance of a user-defined class and then an inspector of that class;
chains are never longer than two.
"""

from __future__ import annotations

import dataclasses
import inspect
import logging
import threading
import typing

from collections import defaultdict
from typing import Any

from mutassert.utils.orderedset import OrderedSet
from mutassert.utils.type_utils import is_enum
from mutassert.utils.type_utils import is_none_type
from mutassert.utils.type_utils import is_primitive_type
from mutassert.utils.type_utils import is_user_class
from mutassert.utils.type_utils import unwrap_optional


_LOGGER = logging.getLogger(__name__)

ACCESSOR_PREFIXES = ("get", "is", "has", "size", "len", "length", "count", "empty")


@dataclasses.dataclass(frozen=True)
class Inspector:
    """A zero-argument accessor of a class."""

    owner: type
    name: str
    is_property: bool = False

    def get_value(self, obj: Any) -> Any:
        """Calls the accessor on the given object.

        Args:
            obj: The object to inspect

        Returns:
            The result of the accessor
        """
        attribute = getattr(obj, self.name)
        if self.is_property:
            return attribute
        return attribute()

    @property
    def method_call(self) -> str:
        """The source text of the access, without the receiver.

        Returns:
            E.g. ``size()`` or ``name``
        """
        return self.name if self.is_property else f"{self.name}()"

    @property
    def outer_name(self) -> str | None:
        """The name of the first accessor of a chain.

        Returns:
            None, as a plain inspector has no outer accessor
        """
        return None

    def __repr__(self) -> str:
        return f"Inspector({self.owner.__qualname__}.{self.method_call})"


@dataclasses.dataclass(frozen=True)
class ChainedInspector:
    """Two accessors called in sequence, e.g., ``obj.get_inner().size()``."""

    outer: Inspector
    inner: Inspector

    def get_value(self, obj: Any) -> Any:
        """Calls the outer and then the inner accessor.

        Args:
            obj: The object to inspect

        Returns:
            The result of the inner accessor, or None if the outer one returned None
        """
        intermediate = self.outer.get_value(obj)
        if intermediate is None:
            return None
        return self.inner.get_value(intermediate)

    @property
    def owner(self) -> type:
        """The class that declares the outer accessor.

        Returns:
            The owner of the outer accessor
        """
        return self.outer.owner

    @property
    def name(self) -> str:
        """The name of the inner accessor.

        Returns:
            The name of the inner accessor
        """
        return self.inner.name

    @property
    def outer_name(self) -> str | None:
        """The name of the outer accessor.

        Returns:
            The name of the outer accessor
        """
        return self.outer.name

    @property
    def method_call(self) -> str:
        """The source text of the access, without the receiver.

        Returns:
            E.g. ``get_inner().size()``
        """
        return f"{self.outer.method_call}.{self.inner.method_call}"

    def __repr__(self) -> str:
        return f"ChainedInspector({self.owner.__qualname__}.{self.method_call})"


def _looks_like_accessor(name: str) -> bool:
    lowered = name.lower()
    return any(lowered.startswith(prefix) for prefix in ACCESSOR_PREFIXES)


def _return_annotation(member: Any) -> Any:
    function = member.fget if isinstance(member, property) else member
    try:
        return typing.get_type_hints(function).get("return", None)
    except Exception:  # noqa: BLE001
        return None


def _takes_no_arguments(function: Any) -> bool:
    try:
        signature = inspect.signature(function)
    except (TypeError, ValueError):
        return False
    parameters = list(signature.parameters.values())[1:]
    return all(
        param.default is not inspect.Parameter.empty
        or param.kind in {inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD}
        for param in parameters
    )


class InspectorManager:
    """Provides the usable inspectors of a class and retires unreliable ones.

    Inspectors are computed once per class.  An inspector that fails often enough
    or is too slow is retired for that class and never offered again.
    """

    def __init__(self, failure_threshold: int = 3) -> None:
        """Creates a new manager.

        Args:
            failure_threshold: The number of failures after which an inspector is
                retired
        """
        self._failure_threshold = failure_threshold
        self._inspectors: dict[type, list[Inspector]] = {}
        self._chains: dict[type, list[ChainedInspector]] = {}
        self._retired: dict[type, set[Inspector | ChainedInspector]] = defaultdict(set)
        self._failures: dict[
            tuple[type, Inspector | ChainedInspector], int
        ] = defaultdict(int)
        self._lock = threading.Lock()

    def get_inspectors(self, cls: type) -> list[Inspector]:
        """Provides the plain inspectors of a class.

        Args:
            cls: The class

        Returns:
            The inspectors that have not been retired
        """
        with self._lock:
            if cls not in self._inspectors:
                self._inspectors[cls] = self._determine_inspectors(cls, primitive_only=True)
            retired = self._retired[cls]
            return [insp for insp in self._inspectors[cls] if insp not in retired]

    def get_chained_inspectors(self, cls: type) -> list[ChainedInspector]:
        """Provides the two-level inspector chains of a class.

        The outer accessor must be annotated to return a user-defined class, whose
        inspectors form the inner accessors.

        Args:
            cls: The class

        Returns:
            The chains that have not been retired
        """
        with self._lock:
            if cls not in self._chains:
                chains: list[ChainedInspector] = []
                for outer in self._determine_inspectors(cls, primitive_only=False):
                    target = unwrap_optional(_return_annotation(getattr(cls, outer.name)))
                    if target is cls or not is_user_class(target):
                        continue
                    chains.extend(
                        ChainedInspector(outer, inner)
                        for inner in self._determine_inspectors(target, primitive_only=True)
                    )
                self._chains[cls] = chains
            retired = self._retired[cls]
            return [chain for chain in self._chains[cls] if chain not in retired]

    def retire(self, cls: type, inspector: Inspector | ChainedInspector) -> None:
        """Permanently stop offering an inspector for a class.

        Args:
            cls: The class
            inspector: The inspector to retire
        """
        with self._lock:
            _LOGGER.debug("Retiring inspector %s for %s", inspector, cls.__qualname__)
            self._retired[cls].add(inspector)

    def report_failure(self, cls: type, inspector: Inspector | ChainedInspector) -> None:
        """Count a failing call, and retire the inspector once it failed too often.

        Args:
            cls: The class on whose instance the call failed
            inspector: The inspector that failed
        """
        with self._lock:
            self._failures[cls, inspector] += 1
            failures = self._failures[cls, inspector]
        if failures >= self._failure_threshold:
            self.retire(cls, inspector)

    def is_retired(self, cls: type, inspector: Inspector | ChainedInspector) -> bool:
        """Was the inspector retired for the class?

        Args:
            cls: The class
            inspector: The inspector

        Returns:
            Whether the inspector was retired
        """
        with self._lock:
            return inspector in self._retired[cls]

    def reset(self) -> None:
        """Forget all computed, failed and retired inspectors."""
        with self._lock:
            self._inspectors.clear()
            self._chains.clear()
            self._retired.clear()
            self._failures.clear()

    @staticmethod
    def _determine_inspectors(cls: type, *, primitive_only: bool) -> list[Inspector]:
        inspectors: OrderedSet[Inspector] = OrderedSet()
        seen: set[str] = set()
        for klass in inspect.getmro(cls):
            if klass is object:
                continue
            for name, member in vars(klass).items():
                if name in seen:
                    continue
                seen.add(name)
                if name.startswith("_") or not _looks_like_accessor(name):
                    continue
                if isinstance(member, property):
                    is_property = True
                elif inspect.isfunction(member) and _takes_no_arguments(member):
                    is_property = False
                else:
                    continue
                annotation = unwrap_optional(_return_annotation(member))
                if is_none_type(annotation):
                    continue
                if primitive_only and annotation is not None and not (
                    is_primitive_type(annotation) or is_enum(annotation)
                ):
                    continue
                inspectors.add(Inspector(cls, name, is_property))
        return sorted(inspectors, key=lambda insp: insp.name)
