#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the statements a test case is built of."""

from __future__ import annotations

import abc
import inspect
import logging
import typing

from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any

import mutassert.testcase.variablereference as vr

from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    from collections.abc import Callable

    import mutassert.assertion.assertion as ass
    import mutassert.testcase.testcase as tc


_LOGGER = logging.getLogger(__name__)


def infer_return_type(function: Callable | None) -> Any:
    """Infer the return type of a callable from its annotations.

    Args:
        function: The callable to inspect

    Returns:
        The annotated return type, ``type(None)`` for ``-> None``, or ``Any``
    """
    if function is None:
        return Any
    try:
        hints = typing.get_type_hints(function)
    except Exception:  # noqa: BLE001
        _LOGGER.debug("Could not resolve type hints of %s", function)
        return Any
    return hints.get("return", Any)


def infer_field_type(owner: Any, field: str) -> Any:
    """Infer the type of a field from the class annotations of its owner.

    Args:
        owner: The class defining the field
        field: The name of the field

    Returns:
        The annotated field type or ``Any``
    """
    if not inspect.isclass(owner):
        return Any
    try:
        hints = typing.get_type_hints(owner)
    except Exception:  # noqa: BLE001
        return Any
    return hints.get(field, Any)


class Statement(abc.ABC):
    """An abstract base class of a statement representation."""

    def __init__(self, test_case: tc.TestCase) -> None:
        """Constructs a new statement.

        Args:
            test_case: The test case the statement belongs to
        """
        self._test_case = test_case
        self._assertions: OrderedSet[ass.Assertion] = OrderedSet()

        # The variable defined by this statement, if any.
        # This is intentionally not named 'return_value' because that name is reserved
        # by the mocking framework which is used in our tests.
        self.ret_val: vr.VariableReference | None = None

    @property
    def test_case(self) -> tc.TestCase:
        """Provides the test case in which this statement is used.

        Returns:
            The containing test case
        """
        return self._test_case

    @abstractmethod
    def accept(self, visitor: StatementVisitor) -> None:
        """Accepts a visitor to visit this statement.

        Args:
            visitor: the statement visitor
        """

    @abstractmethod
    def get_variable_references(self) -> set[vr.VariableReference]:
        """Get all references that are used in this statement.

        Including return values.

        Returns:
            A set of references that are used in this statements  # noqa: DAR202
        """

    def references(self, var: vr.VariableReference) -> bool:
        """Check if this statement makes use of the given variable.

        Args:
            var: the given variable

        Returns:
            Whether this statement makes use of the given variable
        """
        return var in self.get_variable_references()

    def get_position(self) -> int:
        """Provides the position of this statement in the test case.

        Raises:
            RuntimeError: if the statement is not found in the test case

        Returns:
            The position of this statement

        """
        for idx, stmt in enumerate(self._test_case.statements):
            if stmt is self:
                return idx
        raise RuntimeError("Statement is not part of it's test case")

    def add_assertion(self, assertion: ass.Assertion) -> None:
        """Add the given assertion to this statement.

        Args:
            assertion: The assertion to add
        """
        self._assertions.add(assertion)

    @property
    def assertions(self) -> OrderedSet[ass.Assertion]:
        """Provides the assertions of this statement.

        The assertions are expected to hold after the execution of this statement.

        Returns:
            The set of assertions of this statements
        """
        return self._assertions

    @assertions.setter
    def assertions(self, assertions: OrderedSet[ass.Assertion]) -> None:
        self._assertions = assertions


class VariableCreatingStatement(Statement, abc.ABC):
    """Abstract superclass for statements that create new variables."""

    def __init__(self, test_case: tc.TestCase, ret_val: vr.VariableReference):
        """Constructs a variable-creating statement.

        Args:
            test_case: The test case the statement belongs to
            ret_val: The reference to the statement's return value
        """
        super().__init__(test_case)
        self.ret_val: vr.VariableReference = ret_val

    def get_variable_references(self) -> set[vr.VariableReference]:  # noqa: D102
        return {self.ret_val}


class StatementVisitor(abc.ABC):
    """An abstract statement visitor."""

    @abstractmethod
    def visit_primitive_statement(self, stmt: PrimitiveStatement) -> None:
        """Visit a primitive statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_list_statement(self, stmt: ListStatement) -> None:
        """Visit a list statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_constructor_statement(self, stmt: ConstructorStatement) -> None:
        """Visit a constructor statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_method_statement(self, stmt: MethodStatement) -> None:
        """Visit a method statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_function_statement(self, stmt: FunctionStatement) -> None:
        """Visit a function statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_field_statement(self, stmt: FieldStatement) -> None:
        """Visit a field statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_assignment_statement(self, stmt: AssignmentStatement) -> None:
        """Visit an assignment statement.

        Args:
            stmt: the statement to visit
        """

    @abstractmethod
    def visit_mock_statement(self, stmt: MockStatement) -> None:
        """Visit a mock statement.

        Args:
            stmt: the statement to visit
        """


class PrimitiveStatement(VariableCreatingStatement):
    """A constant, e.g., ``int_0 = 42``."""

    def __init__(self, test_case: tc.TestCase, value: Any) -> None:
        """Creates a new constant.

        Args:
            test_case: The test case the statement belongs to
            value: The constant value
        """
        super().__init__(test_case, vr.VariableReference(test_case, type(value)))
        self._value = value

    @property
    def value(self) -> Any:
        """Provides the constant value.

        Returns:
            The value
        """
        return self._value

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_primitive_statement(self)


class ListStatement(VariableCreatingStatement):
    """A list display built from earlier variables, e.g., ``list_0 = [int_0]``."""

    def __init__(
        self, test_case: tc.TestCase, elements: list[vr.VariableReference]
    ) -> None:
        """Creates a new list statement.

        Args:
            test_case: The test case the statement belongs to
            elements: The variables the list consists of
        """
        super().__init__(test_case, vr.VariableReference(test_case, list))
        self._elements = elements

    @property
    def elements(self) -> list[vr.VariableReference]:
        """Provides the elements.

        Returns:
            The elements of the list
        """
        return self._elements

    def get_variable_references(self) -> set[vr.VariableReference]:  # noqa: D102
        references = set(self._elements)
        references.add(self.ret_val)
        return references

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_list_statement(self)


class ParametrizedStatement(VariableCreatingStatement, abc.ABC):
    """An abstract statement that calls something with arguments."""

    def __init__(
        self,
        test_case: tc.TestCase,
        ret_type: Any,
        args: list[vr.VariableReference] | None = None,
        kwargs: dict[str, vr.VariableReference] | None = None,
    ) -> None:
        """Initializes a statement that has parameters.

        Args:
            test_case: The test case the statement belongs to
            ret_type: The type of the return value
            args: The positional arguments
            kwargs: The keyword arguments
        """
        super().__init__(test_case, vr.VariableReference(test_case, ret_type))
        self._args = args or []
        self._kwargs = kwargs or {}

    @property
    def args(self) -> list[vr.VariableReference]:
        """The positional arguments.

        Returns:
            The positional arguments
        """
        return self._args

    @property
    def kwargs(self) -> dict[str, vr.VariableReference]:
        """The keyword arguments.

        Returns:
            A dictionary from keyword to argument
        """
        return self._kwargs

    def get_variable_references(self) -> set[vr.VariableReference]:  # noqa: D102
        references = set(self._args)
        references.update(self._kwargs.values())
        references.add(self.ret_val)
        return references


class ConstructorStatement(ParametrizedStatement):
    """Instantiates a class, e.g., ``stack_0 = module_0.Stack(int_0)``."""

    def __init__(
        self,
        test_case: tc.TestCase,
        owner: type,
        args: list[vr.VariableReference] | None = None,
        kwargs: dict[str, vr.VariableReference] | None = None,
    ) -> None:
        """Creates a new constructor call.

        Args:
            test_case: The test case the statement belongs to
            owner: The class to instantiate
            args: The positional arguments
            kwargs: The keyword arguments
        """
        super().__init__(test_case, owner, args, kwargs)
        self._owner = owner

    @property
    def owner(self) -> type:
        """The instantiated class.

        Returns:
            The class
        """
        return self._owner

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_constructor_statement(self)


class MethodStatement(ParametrizedStatement):
    """Calls a method on an earlier variable, e.g., ``int_1 = stack_0.size()``."""

    def __init__(
        self,
        test_case: tc.TestCase,
        callee: vr.VariableReference,
        method_name: str,
        args: list[vr.VariableReference] | None = None,
        kwargs: dict[str, vr.VariableReference] | None = None,
    ) -> None:
        """Creates a new method call.

        Args:
            test_case: The test case the statement belongs to
            callee: The variable the method is called on
            method_name: The name of the method
            args: The positional arguments
            kwargs: The keyword arguments
        """
        method = getattr(callee.type, method_name, None)
        super().__init__(test_case, infer_return_type(method), args, kwargs)
        self._callee = callee
        self._method_name = method_name

    @property
    def callee(self) -> vr.VariableReference:
        """The variable the method is called on.

        Returns:
            The callee
        """
        return self._callee

    @property
    def method_name(self) -> str:
        """The name of the called method.

        Returns:
            The method name
        """
        return self._method_name

    def get_variable_references(self) -> set[vr.VariableReference]:  # noqa: D102
        references = super().get_variable_references()
        references.add(self._callee)
        return references

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_method_statement(self)


class FunctionStatement(ParametrizedStatement):
    """Calls a module-level function, e.g., ``int_0 = module_0.parse(str_0)``."""

    def __init__(
        self,
        test_case: tc.TestCase,
        function: Callable,
        args: list[vr.VariableReference] | None = None,
        kwargs: dict[str, vr.VariableReference] | None = None,
    ) -> None:
        """Creates a new function call.

        Args:
            test_case: The test case the statement belongs to
            function: The called function
            args: The positional arguments
            kwargs: The keyword arguments
        """
        super().__init__(test_case, infer_return_type(function), args, kwargs)
        self._function = function

    @property
    def function(self) -> Callable:
        """The called function.

        Returns:
            The function
        """
        return self._function

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_function_statement(self)


class FieldStatement(VariableCreatingStatement):
    """Reads a field of an earlier variable, e.g., ``int_0 = foo_0.bar``."""

    def __init__(self, test_case: tc.TestCase, source: vr.Reference, field: str) -> None:
        """Creates a new field read.

        Args:
            test_case: The test case the statement belongs to
            source: The reference the field is read from
            field: The name of the field
        """
        super().__init__(
            test_case,
            vr.VariableReference(test_case, infer_field_type(source.type, field)),
        )
        self._source = source
        self._field = field

    @property
    def source(self) -> vr.Reference:
        """The reference the field is read from.

        Returns:
            The source
        """
        return self._source

    @property
    def field(self) -> str:
        """The name of the field.

        Returns:
            The field name
        """
        return self._field

    def get_variable_references(self) -> set[vr.VariableReference]:  # noqa: D102
        references = {self.ret_val}
        if (source := self._source.get_variable_reference()) is not None:
            references.add(source)
        return references

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_field_statement(self)


class AssignmentStatement(Statement):
    """A statement that assigns the value of a variable to a reference.

    This statement does not create new variables, it only assigns values to
    possibly nested fields.

    For example:
    foo_0.baz = int_0
    """

    def __init__(
        self,
        test_case: tc.TestCase,
        lhs: vr.Reference,
        rhs: vr.VariableReference,
    ):
        """Initializes a new assignment statement.

        Args:
            test_case: The test case the statement belongs to
            lhs: The left-hand side of the assignment
            rhs: The right-hand side of the assignment
        """
        super().__init__(test_case)
        self._lhs = lhs
        self._rhs = rhs

    @property
    def lhs(self) -> vr.Reference:
        """The reference that is used on the left-hand side.

        Returns:
            The reference that is used on the left-hand side
        """
        return self._lhs

    @property
    def rhs(self) -> vr.VariableReference:
        """The variable that is used as the right-hand side.

        Returns:
            The variable used as the right-hand side
        """
        return self._rhs

    def get_variable_references(self) -> set[vr.VariableReference]:  # noqa: D102
        refs = {self._rhs}
        if (l_var := self._lhs.get_variable_reference()) is not None:
            refs.add(l_var)
        return refs

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_assignment_statement(self)


class MockStatement(VariableCreatingStatement):
    """Creates a test double, e.g., ``mock_0 = module_1.MagicMock(spec=module_0.Foo)``.

    Values created this way are opaque; nothing is asserted on them.
    """

    def __init__(self, test_case: tc.TestCase, spec: type) -> None:
        """Creates a new test double.

        Args:
            test_case: The test case the statement belongs to
            spec: The class the test double imitates
        """
        super().__init__(test_case, vr.VariableReference(test_case, spec))
        self._spec = spec

    @property
    def spec(self) -> type:
        """The imitated class.

        Returns:
            The class
        """
        return self._spec

    def accept(self, visitor: StatementVisitor) -> None:  # noqa: D102
        visitor.visit_mock_statement(self)
