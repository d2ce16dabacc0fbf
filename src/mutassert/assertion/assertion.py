#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the closed set of assertion variants.

Every assertion states one observable fact about the value of a variable after
the statement it is attached to was executed.  The variants are plain data
classes; their semantics (evaluation, synthesis, priority) are implemented by the
functions in this module, which dispatch over the variants with ``match``.

Two assertions are equal if they are of the same variant and agree on the
source variable, the variant-specific key (other variable, inspector or field) and
the expected value.  The set of killed mutants and the owning statement take no
part in equality.
"""

from __future__ import annotations

import dataclasses
import enum
import math

from typing import TYPE_CHECKING
from typing import Any

from typing_extensions import assert_never

from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    import mutassert.assertion.inspector as insp
    import mutassert.testcase.statement as st
    import mutassert.testcase.testcase as tc
    import mutassert.testcase.variablereference as vr


class AssertionKind(str, enum.Enum):
    """The observer families, one per kind of assertion."""

    PRIMITIVE = "PRIMITIVE"
    """The exact value of a primitive or enum."""

    INSPECTOR = "INSPECTOR"
    """The result of a zero-argument accessor, possibly chained."""

    NULL = "NULL"
    """Whether a value is None."""

    COMPARE = "COMPARE"
    """The sign of a three-way comparison between two values."""

    EQUALS = "EQUALS"
    """Whether two values are equal."""

    SAME = "SAME"
    """Whether two variables refer to the identical object."""

    CONTAINS = "CONTAINS"
    """Whether a container holds a given element."""

    ARRAY_LENGTH = "ARRAY_LENGTH"
    """The length of a list or tuple."""

    ARRAY_EQUALS = "ARRAY_EQUALS"
    """The contents of a list or tuple of primitives."""

    FIELD = "FIELD"
    """The value of a public instance or class attribute."""


def _killed_mutants() -> Any:
    return dataclasses.field(
        default_factory=OrderedSet, compare=False, hash=False, repr=False
    )


def _home_statement() -> Any:
    return dataclasses.field(default=None, compare=False, hash=False, repr=False)


@dataclasses.dataclass(unsafe_hash=True)
class PrimitiveAssertion:
    """Asserts the value of a primitive, e.g., ``assert int_0 == 42``."""

    source: vr.VariableReference
    value: Any = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class InspectorAssertion:
    """Asserts the result of an accessor, e.g., ``assert stack_0.size() == 1``."""

    source: vr.VariableReference
    inspector: insp.Inspector | insp.ChainedInspector
    value: Any = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class NullAssertion:
    """Asserts (non-)nullness, e.g., ``assert foo_0 is not None``.

    The value is True if the source is None.
    """

    source: vr.VariableReference
    value: bool = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class CompareAssertion:
    """Asserts the sign of comparing source with dest, e.g., ``assert int_0 < int_1``.

    The value is -1, 0 or 1.
    """

    source: vr.VariableReference
    dest: vr.VariableReference | None
    value: int = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class EqualsAssertion:
    """Asserts (in)equality of two values, e.g., ``assert foo_0 == foo_1``."""

    source: vr.VariableReference
    dest: vr.VariableReference
    value: bool = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class SameAssertion:
    """Asserts (non-)identity of two values, e.g., ``assert foo_0 is foo_1``."""

    source: vr.VariableReference
    dest: vr.VariableReference
    value: bool = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class ContainsAssertion:
    """Asserts that the source container holds dest, e.g., ``assert int_0 in list_0``."""

    source: vr.VariableReference
    dest: vr.VariableReference
    value: bool = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class ArrayLengthAssertion:
    """Asserts the length of a list or tuple, e.g., ``assert len(list_0) == 3``."""

    source: vr.VariableReference
    value: int = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class ArrayEqualsAssertion:
    """Asserts the contents of a list or tuple, e.g., ``assert list_0 == [1, 2]``."""

    source: vr.VariableReference
    value: list | tuple = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


@dataclasses.dataclass(unsafe_hash=True)
class FieldAssertion:
    """Asserts the value of an attribute, e.g., ``assert foo_0.bar == 3``.

    The field is either a field of the source or a class attribute of the source's
    type.
    """

    source: vr.VariableReference
    field: vr.FieldReference | vr.StaticFieldReference
    value: Any = dataclasses.field(hash=False)
    statement: st.Statement | None = _home_statement()
    killed_mutants: OrderedSet[int] = _killed_mutants()


Assertion = (
    PrimitiveAssertion
    | InspectorAssertion
    | NullAssertion
    | CompareAssertion
    | EqualsAssertion
    | SameAssertion
    | ContainsAssertion
    | ArrayLengthAssertion
    | ArrayEqualsAssertion
    | FieldAssertion
)


def kind_of(assertion: Assertion) -> AssertionKind:  # noqa: PLR0911
    """Provides the observer family an assertion belongs to.

    Args:
        assertion: The assertion

    Returns:
        The kind of the assertion
    """
    match assertion:
        case PrimitiveAssertion():
            return AssertionKind.PRIMITIVE
        case InspectorAssertion():
            return AssertionKind.INSPECTOR
        case NullAssertion():
            return AssertionKind.NULL
        case CompareAssertion():
            return AssertionKind.COMPARE
        case EqualsAssertion():
            return AssertionKind.EQUALS
        case SameAssertion():
            return AssertionKind.SAME
        case ContainsAssertion():
            return AssertionKind.CONTAINS
        case ArrayLengthAssertion():
            return AssertionKind.ARRAY_LENGTH
        case ArrayEqualsAssertion():
            return AssertionKind.ARRAY_EQUALS
        case FieldAssertion():
            return AssertionKind.FIELD
        case _:
            assert_never(assertion)


def observation_key(assertion: Assertion) -> Any:
    """Provides the key under which a trace entry stores the asserted observation.

    Args:
        assertion: The assertion

    Returns:
        The other variable, the inspector, the field reference, or None for
        assertions that observe the source alone
    """
    match assertion:
        case CompareAssertion(dest=dest) | EqualsAssertion(dest=dest) | SameAssertion(
            dest=dest
        ) | ContainsAssertion(dest=dest):
            return dest
        case InspectorAssertion(inspector=inspector):
            return inspector
        case FieldAssertion(field=field):
            return field
        case _:
            return None


def create_assertion(
    kind: AssertionKind,
    statement: st.Statement,
    source: vr.VariableReference,
    key: Any,
    value: Any,
) -> Assertion:
    """Creates the assertion of the given kind for an observation.

    Args:
        kind: The observer family that made the observation
        statement: The statement after which the observation was made
        source: The observed variable
        key: The family-specific key of the observation, see `observation_key`
        value: The observed value, which becomes the expected value

    Returns:
        A new assertion, without killed mutants
    """
    match kind:
        case AssertionKind.PRIMITIVE:
            return PrimitiveAssertion(source, value, statement)
        case AssertionKind.INSPECTOR:
            return InspectorAssertion(source, key, value, statement)
        case AssertionKind.NULL:
            return NullAssertion(source, value, statement)
        case AssertionKind.COMPARE:
            return CompareAssertion(source, key, value, statement)
        case AssertionKind.EQUALS:
            return EqualsAssertion(source, key, value, statement)
        case AssertionKind.SAME:
            return SameAssertion(source, key, value, statement)
        case AssertionKind.CONTAINS:
            return ContainsAssertion(source, key, value, statement)
        case AssertionKind.ARRAY_LENGTH:
            return ArrayLengthAssertion(source, value, statement)
        case AssertionKind.ARRAY_EQUALS:
            return ArrayEqualsAssertion(source, type(value)(value), statement)
        case AssertionKind.FIELD:
            return FieldAssertion(source, key, value, statement)
        case _:
            assert_never(kind)


def values_equal(expected: Any, observed: Any, float_precision: float) -> bool:
    """Compares an expected with an observed value.

    Floats are compared with the given absolute and relative tolerance, lists and
    tuples element-wise.

    Args:
        expected: The expected value
        observed: The observed value
        float_precision: The tolerance for floats

    Returns:
        Whether both values are considered equal
    """
    if isinstance(expected, float) or isinstance(observed, float):
        if not isinstance(expected, (int, float)) or not isinstance(observed, (int, float)):
            return False
        if isinstance(expected, bool) != isinstance(observed, bool):
            return False
        if math.isnan(expected) or math.isnan(observed):
            return math.isnan(expected) and math.isnan(observed)
        return math.isclose(
            expected, observed, rel_tol=float_precision, abs_tol=float_precision
        )
    if isinstance(expected, (list, tuple)) and isinstance(observed, (list, tuple)):
        return len(expected) == len(observed) and all(
            values_equal(exp, obs, float_precision)
            for exp, obs in zip(expected, observed, strict=True)
        )
    if type(expected) is not type(observed):
        return False
    return expected == observed


def holds(assertion: Assertion, observed: Any, float_precision: float = 0.01) -> bool:
    """Evaluates an assertion against an observation of its family.

    Args:
        assertion: The assertion to evaluate
        observed: What the family observed for the assertion's key, at the
            assertion's statement, for the assertion's source
        float_precision: The tolerance for floats

    Returns:
        Whether the assertion is true for the observation
    """
    match assertion:
        case PrimitiveAssertion() | InspectorAssertion() | FieldAssertion():
            return values_equal(assertion.value, observed, float_precision)
        case ArrayEqualsAssertion():
            return type(observed) is type(assertion.value) and values_equal(
                assertion.value, observed, float_precision
            )
        case NullAssertion() | EqualsAssertion() | SameAssertion() | ContainsAssertion():
            return bool(observed) == assertion.value
        case CompareAssertion() | ArrayLengthAssertion():
            return observed == assertion.value
        case _:
            assert_never(assertion)


def referenced_variables(assertion: Assertion) -> list[vr.VariableReference]:
    """Provides the variables an assertion refers to.

    Args:
        assertion: The assertion

    Returns:
        The source and, if present, the other variable
    """
    match assertion:
        case CompareAssertion(source=source, dest=dest):
            return [source] if dest is None else [source, dest]
        case EqualsAssertion(source=source, dest=dest) | SameAssertion(
            source=source, dest=dest
        ) | ContainsAssertion(source=source, dest=dest):
            return [source, dest]
        case _:
            return [assertion.source]


def is_valid(assertion: Assertion, test_case: tc.TestCase) -> bool:
    """Checks if an assertion can still be rendered in a test case.

    Args:
        assertion: The assertion
        test_case: The test case the assertion shall be part of

    Returns:
        Whether all referenced variables still exist and a comparison has its
        second operand
    """
    if isinstance(assertion, CompareAssertion) and assertion.dest is None:
        return False
    return all(
        var.test_case is test_case and var.is_declared()
        for var in referenced_variables(assertion)
    )


def assertion_priority(assertion: Assertion) -> int:
    """Provides the priority used to break ties during minimization.

    Args:
        assertion: The assertion

    Returns:
        A higher value for more specific assertions
    """
    match assertion:
        case PrimitiveAssertion():
            return 4
        case ArrayLengthAssertion():
            return 3
        case EqualsAssertion() | ContainsAssertion():
            return 2
        case NullAssertion():
            return 0
        case _:
            return 1
