#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides a visitor that transforms test cases to asts."""

from __future__ import annotations

from typing import TYPE_CHECKING

import mutassert.assertion.assertion_to_ast as ata
import mutassert.testcase.statement_to_ast as stmt_to_ast
import mutassert.utils.namingscope as ns


if TYPE_CHECKING:
    from ast import stmt

    import mutassert.testcase.execution as ex
    import mutassert.testcase.statement as statmt
    import mutassert.testcase.testcase as tc


def _used_in_future(statement: statmt.Statement, future_statements: list[statmt.Statement]) -> bool:
    """Checks if the return value of a statement is used in the given future statements."""
    ret_val = statement.ret_val
    if ret_val is None:
        return False
    return any(later_stmt.references(ret_val) for later_stmt in future_statements)


class TestCaseToAstVisitor:
    """Transforms an arbitrary number of test cases to AST statements.

    The modules that are required by the individual test cases are gathered and given
    an alias.
    """

    def __init__(
        self,
        module_aliases: ns.NamingScope,
        common_modules: set[str],
        exec_result: ex.ExecutionResult | None = None,
        float_precision: float = 0.01,
    ) -> None:
        """The module aliases are shared between test cases.

        Args:
            module_aliases: The aliases for used modules
            common_modules: The names of common modules that are not aliased
            exec_result: An optional execution result for the test case.
            float_precision: The tolerance used for float assertions
        """
        self._module_aliases: ns.NamingScope = module_aliases
        # Common modules (e.g. math) are not aliased.
        self._common_modules: set[str] = common_modules
        self._exec_result = exec_result
        self._float_precision = float_precision
        self._test_case_ast: list[stmt] = []

    def visit_test_case(self, test_case: tc.TestCase) -> None:
        """Transform the statements of a test case and their assertions.

        Args:
            test_case: The test case
        """
        variable_names = ns.VariableTypeNamingScope()
        self._test_case_ast = []
        for idx, statement in enumerate(test_case.statements):
            stmt_visitor = stmt_to_ast.StatementToAstVisitor(
                self._module_aliases,
                variable_names,
                store_call_return=bool(statement.assertions)
                or _used_in_future(statement, test_case.statements[idx + 1 :]),
            )
            statement.accept(stmt_visitor)
            self._test_case_ast.append(stmt_visitor.ast_node)

            assertion_visitor = ata.PyTestAssertionToAstVisitor(
                variable_names,
                self._module_aliases,
                self._common_modules,
                self._float_precision,
            )
            for assertion in statement.assertions:
                assertion_visitor.visit(assertion)
            self._test_case_ast.extend(assertion_visitor.nodes)

    @property
    def test_case_ast(self) -> list[stmt]:
        """Provides the generated statement asts for a test case.

        Returns:
            A list of the generated statement asts for a test case
        """
        return self._test_case_ast

    @property
    def is_failing_test(self) -> bool:
        """Whether this test is a failing test.

        A failing test raised an exception during execution, which is not guarded
        in the exported code.

        Returns:
            Whether this test is a failing test
        """
        return self._exec_result is not None and self._exec_result.has_test_exceptions()
