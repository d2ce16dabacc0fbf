#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides capabilities to export test cases."""

from __future__ import annotations

import ast
import dataclasses

from typing import TYPE_CHECKING

import mutassert.testcase.testcase_to_ast as tc_to_ast
import mutassert.utils.ast_util as au
import mutassert.utils.namingscope as ns


if TYPE_CHECKING:
    from pathlib import Path

    import mutassert.testcase.execution as ex
    import mutassert.testcase.testcase as tc


@dataclasses.dataclass
class _AstConversionResult:
    """Result of converting a test case and its assertions to AST."""

    test_case_ast_stmts: list[ast.stmt]
    """List of AST statement representing the converted test case"""

    exception_status: bool
    """Does the test case fail by default, i.e., raises an exception on execution?"""


class PyTestExporter:
    """Collects test cases and builds a PyTest module containing all of them."""

    def __init__(self, float_precision: float = 0.01) -> None:
        """The module aliases are shared between test cases.

        Args:
            float_precision: The tolerance used for float assertions
        """
        self._module_aliases = ns.NamingScope("module")
        # Common modules (e.g. pytest) are not aliased.
        self._common_modules: set[str] = set()
        self._conversion_results: list[_AstConversionResult] = []
        self._float_precision = float_precision

    @property
    def module_aliases(self) -> ns.NamingScope:
        """Provides the module aliases that were used when transforming all test cases.

        Returns:
            The module aliases
        """
        return self._module_aliases

    @property
    def common_modules(self) -> set[str]:
        """Provides the common modules that were used when transforming all test cases.

        Returns:
            A set of the modules names
        """
        return self._common_modules

    def add_test_case(
        self, test_case: tc.TestCase, exec_result: ex.ExecutionResult | None = None
    ) -> None:
        """Convert a test case and add it to the module.

        Args:
            test_case: The test case
            exec_result: The result of executing the test, used to mark failing tests
        """
        visitor = tc_to_ast.TestCaseToAstVisitor(
            module_aliases=self._module_aliases,
            common_modules=self._common_modules,
            exec_result=exec_result,
            float_precision=self._float_precision,
        )
        visitor.visit_test_case(test_case)
        if visitor.is_failing_test:
            self._common_modules.add("pytest")
        self._conversion_results.append(
            _AstConversionResult(visitor.test_case_ast, visitor.is_failing_test)
        )

    @staticmethod
    def __create_ast_imports(
        module_aliases: ns.NamingScope, common_modules: set[str]
    ) -> list[ast.stmt]:
        imports: list[ast.stmt] = [
            ast.Import(names=[ast.alias(name=module, asname=None)])
            for module in sorted(common_modules)
        ]
        imports.extend(
            ast.Import(names=[ast.alias(name=module_name, asname=alias)])
            for module_name, alias in module_aliases
        )
        return imports

    @staticmethod
    def __create_functions(results: list[_AstConversionResult]) -> list[ast.stmt]:
        functions: list[ast.stmt] = []
        for i, result in enumerate(results):
            nodes = result.test_case_ast_stmts
            if len(nodes) == 0:
                nodes = [ast.Pass()]
            functions.append(
                ast.FunctionDef(
                    name=f"test_case_{i}",
                    args=ast.arguments(
                        posonlyargs=[],
                        args=[],
                        vararg=None,
                        kwonlyargs=[],
                        kw_defaults=[],
                        kwarg=None,
                        defaults=[],
                    ),
                    body=nodes,
                    decorator_list=PyTestExporter.__create_decorator_list(
                        is_failing=result.exception_status
                    ),
                    returns=None,
                )
            )
        return functions

    @staticmethod
    def __create_decorator_list(*, is_failing: bool) -> list[ast.expr]:
        if is_failing:
            return [
                au.create_ast_call(
                    au.create_dotted_name(["pytest", "mark", "xfail"]),
                    [],
                    [au.create_ast_keyword("strict", au.create_ast_constant(True))],
                )
            ]
        return []

    def to_module(self) -> ast.Module:
        """Provides a module in PyTest style that contains all added test cases.

        Returns:
            An ast module containing all added test cases.
        """
        import_nodes = PyTestExporter.__create_ast_imports(
            self._module_aliases, self._common_modules
        )
        functions = PyTestExporter.__create_functions(self._conversion_results)
        return ast.Module(body=import_nodes + functions, type_ignores=[])


_MUTASSERT_FILE_HEADER = (
    "# Test cases with assertions automatically generated by mutassert.\n"
    "# Please check them before you use them.\n"
)


def save_module_to_file(
    module: ast.Module, target: Path, *, format_with_black: bool = True
) -> None:
    """Saves an AST module to a file.

    Args:
        target: Destination file
        module: The AST module
        format_with_black: ast.unparse is not PEP-8 compliant, so we apply black
            on the result.
    """
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open(mode="w", encoding="UTF-8") as file:
        file.write(_MUTASSERT_FILE_HEADER)
        output = ast.unparse(ast.fix_missing_locations(module))
        if format_with_black:
            # Import of black might cause problems if it is a dependency of the
            # unit under test, so we only import it if we need it.
            import black  # noqa: PLC0415

            output = black.format_str(output, mode=black.FileMode())
        file.write(output)
