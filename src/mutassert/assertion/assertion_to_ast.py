#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Renders assertions as pytest-style ``assert`` statements."""

from __future__ import annotations

import ast
import enum

from typing import TYPE_CHECKING
from typing import Any

from typing_extensions import assert_never

import mutassert.assertion.assertion as ass
import mutassert.assertion.inspector as insp
import mutassert.utils.ast_util as au


if TYPE_CHECKING:
    import mutassert.testcase.variablereference as vr
    import mutassert.utils.namingscope as ns


class PyTestAssertionToAstVisitor:
    """Transforms assertions into AST nodes.

    The nodes of all visited assertions are collected in `nodes`, in the order the
    assertions were visited.
    """

    def __init__(
        self,
        variable_names: ns.AbstractNamingScope,
        module_aliases: ns.AbstractNamingScope,
        common_modules: set[str],
        float_precision: float = 0.01,
    ) -> None:
        """Create a new assertion visitor.

        Args:
            variable_names: the naming scope that is used to resolve the names
                of the variables used in the assertions.
            module_aliases: the naming scope that is used to resolve the aliases of
                the modules used in the assertions.
            common_modules: the set of common modules that are used. Modules may be
                added when transforming the assertions.
            float_precision: the tolerance used for float comparisons
        """
        self._common_modules = common_modules
        self._module_aliases = module_aliases
        self._variable_names = variable_names
        self._float_precision = float_precision
        self._nodes: list[ast.stmt] = []

    @property
    def nodes(self) -> list[ast.stmt]:
        """Provides the ast nodes generated by this visitor.

        Returns:
            the ast nodes generated by this visitor.
        """
        return self._nodes

    def visit(self, assertion: ass.Assertion) -> None:  # noqa: C901
        """Render an assertion and collect its node.

        Args:
            assertion: the assertion to render
        """
        match assertion:
            case ass.PrimitiveAssertion(source=source, value=value):
                node = self._create_equality(self._create_name(source), value)
            case ass.InspectorAssertion(source=source, inspector=inspector, value=value):
                node = self._create_equality(
                    self._create_inspector_access(self._create_name(source), inspector),
                    value,
                )
            case ass.NullAssertion(source=source, value=is_null):
                node = au.create_ast_compare(
                    self._create_name(source),
                    ast.Is() if is_null else ast.IsNot(),
                    au.create_ast_constant(None),
                )
            case ass.CompareAssertion(source=source, dest=dest, value=sign):
                assert dest is not None, "Cannot render a comparison without operand"
                node = self._create_comparison(source, dest, sign)
            case ass.EqualsAssertion(source=source, dest=dest, value=equal):
                node = au.create_ast_compare(
                    self._create_name(source),
                    ast.Eq() if equal else ast.NotEq(),
                    self._create_name(dest),
                )
            case ass.SameAssertion(source=source, dest=dest, value=same):
                node = au.create_ast_compare(
                    self._create_name(source),
                    ast.Is() if same else ast.IsNot(),
                    self._create_name(dest),
                )
            case ass.ContainsAssertion(source=source, dest=dest, value=contained):
                node = au.create_ast_compare(
                    self._create_name(dest),
                    ast.In() if contained else ast.NotIn(),
                    self._create_name(source),
                )
            case ass.ArrayLengthAssertion(source=source, value=length):
                node = au.create_ast_compare(
                    au.create_ast_call(
                        au.create_ast_name("len"), [self._create_name(source)], []
                    ),
                    ast.Eq(),
                    au.create_ast_constant(length),
                )
            case ass.ArrayEqualsAssertion(source=source, value=value):
                node = au.create_ast_compare(
                    self._create_name(source), ast.Eq(), self._create_value(value)
                )
            case ass.FieldAssertion(field=field, value=value):
                node = self._create_equality(self._create_name(field), value)
            case _:
                assert_never(assertion)
        self._nodes.append(au.create_ast_assert(node))

    def _create_name(self, var: vr.Reference) -> ast.Name | ast.Attribute:
        return au.create_full_name(
            self._variable_names, self._module_aliases, var, load=True
        )

    def _create_comparison(
        self, source: vr.VariableReference, dest: vr.VariableReference, sign: int
    ) -> ast.expr:
        if sign < 0:
            return au.create_ast_compare(
                self._create_name(source), ast.Lt(), self._create_name(dest)
            )
        if sign > 0:
            return au.create_ast_compare(
                self._create_name(source), ast.Gt(), self._create_name(dest)
            )
        return au.create_ast_not(
            au.create_ast_or(
                [
                    au.create_ast_compare(
                        self._create_name(source), ast.Lt(), self._create_name(dest)
                    ),
                    au.create_ast_compare(
                        self._create_name(source), ast.Gt(), self._create_name(dest)
                    ),
                ]
            )
        )

    def _create_inspector_access(
        self, receiver: ast.expr, inspector: insp.Inspector | insp.ChainedInspector
    ) -> ast.expr:
        match inspector:
            case insp.ChainedInspector(outer=outer, inner=inner):
                return self._create_inspector_access(
                    self._create_inspector_access(receiver, outer), inner
                )
            case insp.Inspector(name=name, is_property=True):
                return au.create_ast_attribute(name, receiver)
            case insp.Inspector(name=name):
                return au.create_ast_call(au.create_ast_attribute(name, receiver), [], [])
            case _:
                assert_never(inspector)

    def _create_equality(self, left: ast.expr, value: Any) -> ast.Compare:
        # Singletons are compared by identity, everything else by equality.
        if value is None or isinstance(value, bool):
            return au.create_ast_compare(left, ast.Is(), au.create_ast_constant(value))
        return au.create_ast_compare(left, ast.Eq(), self._create_value(value))

    def _create_value(self, value: Any) -> ast.expr:
        match value:
            case bool():
                return au.create_ast_constant(value)
            case float():
                self._common_modules.add("pytest")
                return au.create_ast_approx(
                    au.create_ast_constant(value), self._float_precision
                )
            case enum.Enum():
                enum_type = type(value)
                return au.create_dotted_name(
                    [
                        self._module_aliases.get_name(enum_type.__module__),
                        *enum_type.__qualname__.split("."),
                        value.name,
                    ]
                )
            case list():
                return au.create_ast_list([self._create_value(elem) for elem in value])
            case tuple():
                return au.create_ast_tuple([self._create_value(elem) for elem in value])
            case _:
                return au.create_ast_constant(value)
