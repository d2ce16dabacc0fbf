#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the observers that record output traces during an execution.

There is one observer per family of facts.  After each statement that did not
raise, an observer inspects the statement's return value and the values it depends
on, and records at most one entry per (statement position, variable).  Constants,
test doubles and the overwritten side of an assignment are never observed.
"""

from __future__ import annotations

import abc
import ast
import logging
import math
import re
import threading
import time

from typing import TYPE_CHECKING
from typing import Any
from typing import ClassVar
from unittest.mock import NonCallableMock

import mutassert.assertion.assertion as ass
import mutassert.assertion.outputtrace as ot
import mutassert.configuration as config
import mutassert.testcase.execution as ex
import mutassert.testcase.statement as st
import mutassert.testcase.variablereference as vr

from mutassert.utils.type_utils import is_array
from mutassert.utils.type_utils import is_primitive_array
from mutassert.utils.type_utils import is_primitive_value
from mutassert.utils.type_utils import is_private_enum_member
from mutassert.utils.type_utils import is_user_class


if TYPE_CHECKING:
    import mutassert.assertion.inspector as insp
    import mutassert.testcase.testcase as tc


_LOGGER = logging.getLogger(__name__)

_ADDRESS_PATTERN = re.compile(r"\b[A-Za-z_][\w.$]*@[0-9a-f]{4,}\b")
_MOCK_PATTERN = re.compile(r"<(NonCallable)?(Magic|Async)?Mock\b")
_CONTAINERS = (list, tuple, set, frozenset, dict)


def is_assertable_string(value: str, max_length: int) -> bool:
    """Can an exact assertion be made on the given string?

    Strings that are too long, that embed an object address, or that stem from a
    test double, would make brittle assertions.

    Args:
        value: The string
        max_length: The maximum length of an asserted string

    Returns:
        Whether the string is usable as an expected value
    """
    return (
        len(value) <= max_length
        and " at 0x" not in value
        and _MOCK_PATTERN.search(value) is None
        and _ADDRESS_PATTERN.search(value) is None
    )


def is_assertable_value(value: Any, max_length: int) -> bool:
    """Can an exact assertion be made on the given value?

    Args:
        value: The value
        max_length: The maximum length of an asserted string

    Returns:
        Whether the value is a primitive or public enum member that can be written
        down as an expected value
    """
    if not is_primitive_value(value) or is_private_enum_member(value):
        return False
    if isinstance(value, float) and math.isnan(value):
        return False
    if isinstance(value, str):
        return is_assertable_string(value, max_length)
    return True


def _is_opaque(value: Any) -> bool:
    return isinstance(value, NonCallableMock)


def _lookup(exec_ctx: ex.ExecutionContext, var: vr.VariableReference) -> tuple[bool, Any]:
    # Variables of calls whose result was not stored have no value.
    if not exec_ctx.variable_names.is_known_name(var):
        return False, None
    name = exec_ctx.variable_names.get_name(var)
    if name not in exec_ctx.local_namespace:
        return False, None
    return True, exec_ctx.local_namespace[name]


def _unobservable_variables(test_case: tc.TestCase) -> set[vr.VariableReference]:
    return {
        statement.ret_val
        for statement in test_case.statements
        if isinstance(statement, (st.PrimitiveStatement, st.MockStatement))
    }


class AssertionTraceObserver(ex.RemoteExecutionObserver, abc.ABC):
    """Base class of the observers that produce output traces.

    The trace is kept in thread-local state, as every execution happens in its own
    thread.
    """

    kind: ClassVar[ass.AssertionKind]

    class _LocalState(threading.local):
        """Stores the thread-local trace."""

        def __init__(self, kind: ass.AssertionKind, float_precision: float):  # noqa: D107
            super().__init__()
            self.trace = ot.OutputTrace(kind, float_precision)

    def __init__(self, float_precision: float = 0.01) -> None:
        """Create a new observer.

        Args:
            float_precision: The tolerance for floats when traces are compared
        """
        self._local_state = AssertionTraceObserver._LocalState(self.kind, float_precision)

    def get_trace(self) -> ot.OutputTrace:
        """Get a copy of the gathered trace.

        Returns:
            A copy of the gathered trace.
        """
        return self._local_state.trace.clone()

    def before_test_case_execution(self, test_case: tc.TestCase):  # noqa: D102
        self._local_state.trace.clear()

    def before_statement_execution(  # noqa: D102
        self, statement: st.Statement, node: ast.stmt, exec_ctx: ex.ExecutionContext
    ) -> ast.stmt:
        # Nothing to do before statement.
        return node

    def after_statement_execution(  # noqa: D102
        self,
        statement: st.Statement,
        executor: ex.TestCaseExecutor,
        exec_ctx: ex.ExecutionContext,
        exception: BaseException | None,
    ) -> None:
        if exception is not None or isinstance(
            statement, (st.PrimitiveStatement, st.MockStatement)
        ):
            return
        position = statement.get_position()
        for var in self._observed_variables(statement):
            found, value = _lookup(exec_ctx, var)
            if not found or _is_opaque(value):
                continue
            self._observe(statement, exec_ctx, position, var, value)

    def after_test_case_execution(  # noqa: D102
        self,
        executor: ex.TestCaseExecutor,
        test_case: tc.TestCase,
        result: ex.ExecutionResult,
    ) -> None:
        result.output_traces[self.kind] = self.get_trace()

    @property
    def trace(self) -> ot.OutputTrace:
        """The trace of the current thread.

        Returns:
            The trace that is being recorded
        """
        return self._local_state.trace

    @staticmethod
    def _observed_variables(statement: st.Statement) -> list[vr.VariableReference]:
        test_case = statement.test_case
        match statement:
            case st.FieldStatement(ret_val=ret_val):
                candidates = [ret_val]
            case st.AssignmentStatement(lhs=lhs, rhs=rhs):
                root = lhs.get_variable_reference()
                if root is None or root is lhs:
                    return []
                candidates = [var for var in test_case.get_dependencies(root) if var is not rhs]
            case _:
                assert statement.ret_val is not None
                candidates = list(test_case.get_dependencies(statement.ret_val))
        unobservable = _unobservable_variables(test_case)
        return [
            var
            for var in candidates
            if not var.is_none_type() and var not in unobservable
        ]

    @staticmethod
    def _scope(
        statement: st.Statement, exec_ctx: ex.ExecutionContext, var: vr.VariableReference
    ) -> list[tuple[vr.VariableReference, Any]]:
        """Provides the other variables that are alive after the statement.

        Args:
            statement: The executed statement
            exec_ctx: The execution context
            var: The observed variable, which is excluded

        Returns:
            Pairs of variable and value, in the order of definition
        """
        test_case = statement.test_case
        scope = []
        for other_stmt in test_case.statements[: statement.get_position() + 1]:
            other = other_stmt.ret_val
            if other is None or other is var or isinstance(other_stmt, st.MockStatement):
                continue
            found, value = _lookup(exec_ctx, other)
            if found and not _is_opaque(value):
                scope.append((other, value))
        return scope

    @abc.abstractmethod
    def _observe(
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        """Record the facts of this family about a value.

        Args:
            statement: The executed statement
            exec_ctx: The execution context
            position: The position of the executed statement
            var: The observed variable
            value: The current value of the variable
        """


def _compatible(value: Any, other: Any) -> bool:
    return isinstance(value, type(other)) or isinstance(other, type(value))


class PrimitiveTraceObserver(AssertionTraceObserver):
    """Records the exact value of primitives and enum members."""

    kind = ass.AssertionKind.PRIMITIVE

    def __init__(self, float_precision: float = 0.01, max_string_length: int = 1000):
        """Create a new observer.

        Args:
            float_precision: The tolerance for floats when traces are compared
            max_string_length: The maximum length of an asserted string
        """
        super().__init__(float_precision)
        self._max_string_length = max_string_length

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if var is statement.ret_val:
            # Constants and hash codes are not worth asserting.
            if isinstance(statement, st.FieldStatement) and statement.field.isupper():
                return
            if isinstance(statement, st.MethodStatement) and statement.method_name == "__hash__":
                return
        if is_assertable_value(value, self._max_string_length):
            self.trace.add_entry(position, var, None, value)


class InspectorTraceObserver(AssertionTraceObserver):
    """Records the results of the inspectors of an object's class.

    Inspectors that raise count as failures and are retired after enough of them;
    inspectors that take longer than the configured time are retired at once.
    """

    kind = ass.AssertionKind.INSPECTOR

    def __init__(
        self,
        inspector_manager: insp.InspectorManager,
        float_precision: float = 0.01,
        max_string_length: int = 1000,
        inspector_timeout: float = 1.0,
    ):
        """Create a new observer.

        Args:
            inspector_manager: Provides the inspectors of a class
            float_precision: The tolerance for floats when traces are compared
            max_string_length: The maximum length of an asserted string
            inspector_timeout: The time (in seconds) after which an inspector call
                is considered too slow
        """
        super().__init__(float_precision)
        self._inspector_manager = inspector_manager
        self._max_string_length = max_string_length
        self._inspector_timeout_ns = int(inspector_timeout * 1_000_000_000)

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        cls = type(value)
        if value is None or not is_user_class(cls):
            return
        inspectors: list[insp.Inspector | insp.ChainedInspector] = [
            *self._inspector_manager.get_inspectors(cls),
            *self._inspector_manager.get_chained_inspectors(cls),
        ]
        for inspector in inspectors:
            start = time.perf_counter_ns()
            try:
                result = inspector.get_value(value)
            except Exception:  # noqa: BLE001
                _LOGGER.debug("Inspector %s failed", inspector, exc_info=True)
                self._inspector_manager.report_failure(cls, inspector)
                continue
            if time.perf_counter_ns() - start > self._inspector_timeout_ns:
                self._inspector_manager.retire(cls, inspector)
                continue
            if is_assertable_value(result, self._max_string_length):
                self.trace.add_entry(position, var, inspector, result)


class NullTraceObserver(AssertionTraceObserver):
    """Records whether a value is None."""

    kind = ass.AssertionKind.NULL

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if is_primitive_value(value):
            return
        self.trace.add_entry(position, var, None, value is None)


class SameTraceObserver(AssertionTraceObserver):
    """Records whether two variables refer to the identical object."""

    kind = ass.AssertionKind.SAME

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if value is None or is_primitive_value(value):
            return
        for other, other_value in self._scope(statement, exec_ctx, var):
            if other_value is None or is_primitive_value(other_value):
                continue
            if _compatible(value, other_value):
                self.trace.add_entry(position, var, other, value is other_value)


class EqualsTraceObserver(AssertionTraceObserver):
    """Records whether two objects of compatible type are equal."""

    kind = ass.AssertionKind.EQUALS

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if value is None or is_primitive_value(value):
            return
        for other, other_value in self._scope(statement, exec_ctx, var):
            if other_value is None or is_primitive_value(other_value):
                continue
            if not _compatible(value, other_value):
                continue
            try:
                equal = bool(value == other_value)
            except Exception:  # noqa: BLE001
                _LOGGER.debug("Could not compare %s and %s", var, other, exc_info=True)
                continue
            self.trace.add_entry(position, var, other, equal)


class CompareTraceObserver(AssertionTraceObserver):
    """Records the sign of comparing two objects of the same type."""

    kind = ass.AssertionKind.COMPARE

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if value is None or is_primitive_value(value):
            return
        for other, other_value in self._scope(statement, exec_ctx, var):
            if type(other_value) is not type(value):
                continue
            try:
                sign = (value > other_value) - (value < other_value)
            except Exception:  # noqa: BLE001
                _LOGGER.debug("Could not order %s and %s", var, other, exc_info=True)
                continue
            if isinstance(sign, int):
                self.trace.add_entry(position, var, other, sign)


class ContainsTraceObserver(AssertionTraceObserver):
    """Records whether a container holds the values of other variables."""

    kind = ass.AssertionKind.CONTAINS

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if not isinstance(value, _CONTAINERS):
            return
        for other, other_value in self._scope(statement, exec_ctx, var):
            if other_value is None or isinstance(other_value, _CONTAINERS):
                continue
            try:
                contained = other_value in value
            except Exception:  # noqa: BLE001
                continue
            self.trace.add_entry(position, var, other, contained)


class ArrayLengthTraceObserver(AssertionTraceObserver):
    """Records the length of lists and tuples."""

    kind = ass.AssertionKind.ARRAY_LENGTH

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if is_array(value):
            self.trace.add_entry(position, var, None, len(value))


class ArrayEqualsTraceObserver(AssertionTraceObserver):
    """Records the contents of lists and tuples of primitives."""

    kind = ass.AssertionKind.ARRAY_EQUALS

    def __init__(self, float_precision: float = 0.01, max_string_length: int = 1000):
        """Create a new observer.

        Args:
            float_precision: The tolerance for floats when traces are compared
            max_string_length: The maximum length of an asserted string
        """
        super().__init__(float_precision)
        self._max_string_length = max_string_length

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        if not is_primitive_array(value):
            return
        if all(is_assertable_value(elem, self._max_string_length) for elem in value):
            # Later statements may modify the array.
            self.trace.add_entry(position, var, None, type(value)(value))


class FieldTraceObserver(AssertionTraceObserver):
    """Records the public instance attributes and class attributes of an object."""

    kind = ass.AssertionKind.FIELD

    def __init__(self, float_precision: float = 0.01, max_string_length: int = 1000):
        """Create a new observer.

        Args:
            float_precision: The tolerance for floats when traces are compared
            max_string_length: The maximum length of an asserted string
        """
        super().__init__(float_precision)
        self._max_string_length = max_string_length

    def _observe(  # noqa: D102
        self,
        statement: st.Statement,
        exec_ctx: ex.ExecutionContext,
        position: int,
        var: vr.VariableReference,
        value: Any,
    ) -> None:
        cls = type(value)
        if value is None or not is_user_class(cls):
            return
        for field, field_value in vars(value).items() if hasattr(value, "__dict__") else ():
            if self._should_observe(field, field_value):
                self.trace.add_entry(
                    position, var, vr.FieldReference(var, field), field_value
                )
        for field, field_value in vars(cls).items():
            # Constants cannot change.
            if field.isupper() or isinstance(field_value, (property, staticmethod, classmethod)):
                continue
            if self._should_observe(field, field_value):
                self.trace.add_entry(
                    position, var, vr.StaticFieldReference(cls, field), field_value
                )

    def _should_observe(self, field: str, value: Any) -> bool:
        return (
            not field.startswith("_")
            and not callable(value)
            and is_assertable_value(value, self._max_string_length)
        )


def create_observers(
    inspector_manager: insp.InspectorManager,
) -> list[AssertionTraceObserver]:
    """Create one observer per family, parametrised from the configuration.

    Args:
        inspector_manager: Provides the inspectors of a class

    Returns:
        The observers, in the order of `AssertionKind`
    """
    settings = config.configuration.assertion_generation
    precision = settings.float_precision
    max_length = settings.max_string_length
    return [
        PrimitiveTraceObserver(precision, max_length),
        InspectorTraceObserver(
            inspector_manager, precision, max_length, settings.inspector_timeout
        ),
        NullTraceObserver(precision),
        CompareTraceObserver(precision),
        EqualsTraceObserver(precision),
        SameTraceObserver(precision),
        ContainsTraceObserver(precision),
        ArrayLengthTraceObserver(precision),
        ArrayEqualsTraceObserver(precision, max_length),
        FieldTraceObserver(precision, max_length),
    ]
