#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a base implementation of a variable in a test case."""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from typing import TYPE_CHECKING
from typing import Any

from mutassert.utils.type_utils import is_none_type
from mutassert.utils.type_utils import is_primitive_type


if TYPE_CHECKING:
    import mutassert.testcase.testcase as tc
    import mutassert.utils.namingscope as ns


class Reference(ABC):
    """Represents something that can be referenced in a test case.

    For example:
        foo_0 = Foo()
        int_0 = 42
        foo_0.bar = int_0

    Here, foo_0, int_0 and foo_0.bar are references.
    """

    def __init__(self, typ: Any) -> None:
        """Constructs a new reference.

        Args:
            typ: The static type of the reference, ``typing.Any`` if unknown
        """
        self._type = typ

    @property
    def type(self) -> Any:
        """Provides the type of this reference.

        Returns:
            The type of this reference
        """
        return self._type

    def is_primitive(self) -> bool:
        """Does this variable reference represent a primitive type.

        Returns:
            True if the variable is a primitive
        """
        return is_primitive_type(self._type)

    def is_none_type(self) -> bool:
        """Is this variable reference of type none, i.e. it does not return anything.

        Returns:
            True if this variable is a none type
        """
        return is_none_type(self._type)

    @abstractmethod
    def get_names(
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        """Get the names involved when addressing this reference.

        Args:
            variable_names: Mapping for variable names.
            module_names: Mapping for modules.

        Returns:
            A list of the elements in the reference names, i.e.,
            resolving a reference that represents "module_0.Foo.bar" gives
            ["module_0", "Foo", "bar"]
        """

    @abstractmethod
    def get_variable_reference(self) -> VariableReference | None:
        """Provide the variable reference used in this reference.

        Returns: The variable reference used here, if any.
        """


class VariableReference(Reference):
    """A reference to a variable declared in a test case.

    For example:
        int_0 = 5

    Note that this class does NOT implement eq/hash because we use object identity
    to check for equality. The other references do implement eq/hash.
    """

    def __init__(self, test_case: tc.TestCase, typ: Any):
        """Constructs a new variable reference.

        Args:
            test_case: The test case, the reference belongs to
            typ: The type of the referenced variable
        """
        super().__init__(typ)
        self._test_case = test_case

    @property
    def test_case(self) -> tc.TestCase:
        """Provides the test case in which this variable reference is used.

        Returns:
            The containing test case
        """
        return self._test_case

    def get_names(  # noqa: D102
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        return [variable_names.get_name(self)]

    def get_statement_position(self) -> int:
        """Provides the position of the statement.

        The position defines this variable reference in the test case.

        Raises:
            RuntimeError: if the statement is not found in the test case

        Returns:
            The position  # noqa: DAR202
        """
        for idx, stmt in enumerate(self._test_case.statements):
            if stmt.ret_val is self:
                return idx
        raise RuntimeError(
            "Variable reference is not declared in the test case in which it is used"
        )

    def is_declared(self) -> bool:
        """Is this variable still produced by a statement of its test case?

        Returns:
            Whether some statement of the test case has this return value
        """
        return any(stmt.ret_val is self for stmt in self._test_case.statements)

    def get_variable_reference(self) -> VariableReference | None:  # noqa: D102
        return self

    def __repr__(self) -> str:
        name = getattr(self._type, "__name__", repr(self._type))
        return f"VariableReference({name})"


class FieldReference(Reference):
    """A reference to a non-static field, e.g., ``foo_0.bar``."""

    def __init__(self, source: Reference, field: str, typ: Any = Any):
        """Constructs a new reference to a non-static field.

        Args:
            source: The reference to call the field on
            field: The name of the field
            typ: The type of the field, if known
        """
        super().__init__(typ)
        self._source = source
        self._field = field

    @property
    def source(self) -> Reference:
        """Provide the source.

        Returns:
            The source.
        """
        return self._source

    @property
    def field(self) -> str:
        """Provide the field name.

        Returns:
            The field name
        """
        return self._field

    def get_names(  # noqa: D102
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        lst = self._source.get_names(variable_names, module_names)
        lst.append(self._field)
        return lst

    def get_variable_reference(self) -> VariableReference | None:  # noqa: D102
        return self._source.get_variable_reference()

    def __eq__(self, other):
        if not isinstance(other, FieldReference):
            return False
        return self._field == other._field and self._source == other._source

    def __hash__(self):
        return hash((self._field, self._source))

    def __repr__(self) -> str:
        return f"FieldReference({self._source!r}, {self._field})"


class StaticFieldReference(Reference):
    """A reference to a static field of a class, e.g., ``module_0.Foo.BAR``."""

    def __init__(self, owner: type, field: str, typ: Any = Any):
        """Constructs a new reference to a static field.

        Args:
            owner: The class that defines the field
            field: The name of the field
            typ: The type of the field, if known
        """
        super().__init__(typ)
        self._owner = owner
        self._field = field

    @property
    def owner(self) -> type:
        """Provide the owning class.

        Returns:
            The owning class
        """
        return self._owner

    @property
    def field(self) -> str:
        """Provide the field name.

        Returns:
            The field name
        """
        return self._field

    def get_names(  # noqa: D102
        self,
        variable_names: ns.AbstractNamingScope,
        module_names: ns.AbstractNamingScope,
    ) -> list[str]:
        return [
            module_names.get_name(self._owner.__module__),
            *self._owner.__qualname__.split("."),
            self._field,
        ]

    def get_variable_reference(self) -> VariableReference | None:  # noqa: D102
        return None

    def __eq__(self, other):
        if not isinstance(other, StaticFieldReference):
            return False
        return self._owner is other._owner and self._field == other._field

    def __hash__(self):
        return hash((self._owner, self._field))

    def __repr__(self) -> str:
        return f"StaticFieldReference({self._owner.__qualname__}.{self._field})"
