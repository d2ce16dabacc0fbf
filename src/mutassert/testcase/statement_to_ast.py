#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a visitor that transforms statements to AST."""

from __future__ import annotations

import ast
import enum

from typing import TYPE_CHECKING

import mutassert.utils.ast_util as au

from mutassert.testcase.statement import StatementVisitor


if TYPE_CHECKING:
    import mutassert.utils.namingscope as ns

    from mutassert.testcase.statement import AssignmentStatement
    from mutassert.testcase.statement import ConstructorStatement
    from mutassert.testcase.statement import FieldStatement
    from mutassert.testcase.statement import FunctionStatement
    from mutassert.testcase.statement import ListStatement
    from mutassert.testcase.statement import MethodStatement
    from mutassert.testcase.statement import MockStatement
    from mutassert.testcase.statement import ParametrizedStatement
    from mutassert.testcase.statement import PrimitiveStatement
    from mutassert.testcase.statement import VariableCreatingStatement


MOCK_MODULE = "unittest.mock"


class StatementToAstVisitor(StatementVisitor):
    """Visitor that transforms statements into a list of AST nodes."""

    def __init__(
        self,
        module_aliases: ns.AbstractNamingScope,
        variable_names: ns.AbstractNamingScope,
        *,
        store_call_return: bool = True,
    ) -> None:
        """Creates a new transformation visitor.

        The visitor transforms our internal statements to Python AST nodes.

        Args:
            module_aliases: A naming scope for module alias names.
            variable_names: A naming scope for variable names.
            store_call_return: Should the result of a call be stored in a variable?
                Calls without a return value are never stored.
        """
        self._ast_node: ast.stmt | None = None
        self._variable_names = variable_names
        self._module_aliases = module_aliases
        self._store_call_return = store_call_return

    @property
    def ast_node(self) -> ast.stmt:
        """Provide the generated ast statement.

        Returns:
            the generated ast statement
        """
        assert self._ast_node, "No statement visited"
        return self._ast_node

    def visit_primitive_statement(self, stmt: PrimitiveStatement) -> None:  # noqa: D102
        value = stmt.value
        if isinstance(value, enum.Enum):
            enum_type = type(value)
            value_node: ast.expr = au.create_dotted_name(
                [
                    self._module_aliases.get_name(enum_type.__module__),
                    *enum_type.__qualname__.split("."),
                    value.name,
                ]
            )
        else:
            value_node = au.create_ast_constant(value)
        self._ast_node = au.create_ast_assign(self._create_target(stmt), value_node)

    def visit_list_statement(self, stmt: ListStatement) -> None:  # noqa: D102
        self._ast_node = au.create_ast_assign(
            self._create_target(stmt),
            au.create_ast_list([self._create_name(elem) for elem in stmt.elements]),
        )

    def visit_constructor_statement(  # noqa: D102
        self, stmt: ConstructorStatement
    ) -> None:
        owner = stmt.owner
        func = au.create_dotted_name(
            [
                self._module_aliases.get_name(owner.__module__),
                *owner.__qualname__.split("."),
            ]
        )
        self._ast_node = self._create_call(stmt, func)

    def visit_method_statement(self, stmt: MethodStatement) -> None:  # noqa: D102
        func = au.create_ast_attribute(stmt.method_name, self._create_name(stmt.callee))
        self._ast_node = self._create_call(stmt, func)

    def visit_function_statement(self, stmt: FunctionStatement) -> None:  # noqa: D102
        func = au.create_ast_attribute(
            stmt.function.__name__,
            au.create_ast_name(self._module_aliases.get_name(stmt.function.__module__)),
        )
        self._ast_node = self._create_call(stmt, func)

    def visit_field_statement(self, stmt: FieldStatement) -> None:  # noqa: D102
        self._ast_node = au.create_ast_assign(
            self._create_target(stmt),
            au.create_ast_attribute(stmt.field, self._create_name(stmt.source)),
        )

    def visit_assignment_statement(  # noqa: D102
        self, stmt: AssignmentStatement
    ) -> None:
        self._ast_node = au.create_ast_assign(
            au.create_full_name(
                self._variable_names, self._module_aliases, stmt.lhs, load=False
            ),
            self._create_name(stmt.rhs),
        )

    def visit_mock_statement(self, stmt: MockStatement) -> None:  # noqa: D102
        spec = stmt.spec
        self._ast_node = au.create_ast_assign(
            self._create_target(stmt),
            au.create_ast_call(
                au.create_ast_attribute(
                    "MagicMock",
                    au.create_ast_name(self._module_aliases.get_name(MOCK_MODULE)),
                ),
                [],
                [
                    au.create_ast_keyword(
                        "spec",
                        au.create_dotted_name(
                            [
                                self._module_aliases.get_name(spec.__module__),
                                *spec.__qualname__.split("."),
                            ]
                        ),
                    )
                ],
            ),
        )

    def _create_call(self, stmt: ParametrizedStatement, func: ast.expr) -> ast.stmt:
        call = au.create_ast_call(
            func,
            [self._create_name(arg) for arg in stmt.args],
            [
                au.create_ast_keyword(name, self._create_name(arg))
                for name, arg in stmt.kwargs.items()
            ],
        )
        if not self._store_call_return or stmt.ret_val.is_none_type():
            return ast.Expr(value=call)
        return au.create_ast_assign(self._create_target(stmt), call)

    def _create_target(self, stmt: VariableCreatingStatement) -> ast.expr:
        return au.create_full_name(
            self._variable_names, self._module_aliases, stmt.ret_val, load=False
        )

    def _create_name(self, var) -> ast.expr:
        return au.create_full_name(
            self._variable_names, self._module_aliases, var, load=True
        )
