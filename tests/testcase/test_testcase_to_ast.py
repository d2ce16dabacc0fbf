#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
import ast

import mutassert.assertion.assertion as ass
import mutassert.testcase.execution as ex
import mutassert.testcase.testcase_to_ast as tc_to_ast
import mutassert.utils.namingscope as ns

from tests.testutils import render_test_case


def test_render_without_assertions(counter_test_case):
    assert render_test_case(counter_test_case) == (
        "int_0 = 0\ncounter_0 = module_0.Counter(int_0)\ncounter_0.is_positive()"
    )


def test_render_with_assertion(counter_test_case):
    statement = counter_test_case.get_statement(2)
    statement.add_assertion(ass.PrimitiveAssertion(statement.ret_val, False, statement))
    assert render_test_case(counter_test_case) == (
        "int_0 = 0\n"
        "counter_0 = module_0.Counter(int_0)\n"
        "bool_0 = counter_0.is_positive()\n"
        "assert bool_0 is False"
    )


def test_render_void_call(stack_test_case):
    assert render_test_case(stack_test_case) == (
        "stack_0 = module_0.Stack()\nint_0 = 3\nstack_0.push(int_0)\nstack_0.size()"
    )


def test_module_aliases_are_shared(counter_test_case, stack_test_case):
    module_aliases = ns.NamingScope("module")
    for test_case in (counter_test_case, stack_test_case):
        tc_to_ast.TestCaseToAstVisitor(module_aliases, set()).visit_test_case(test_case)
    assert dict(module_aliases) == {
        "tests.fixtures.examples.counter": "module_0",
        "tests.fixtures.examples.stack": "module_1",
    }


def test_float_assertion_adds_common_module(counter_test_case):
    common_modules = set()
    statement = counter_test_case.get_statement(0)
    statement.add_assertion(ass.PrimitiveAssertion(statement.ret_val, 0.5, statement))
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), common_modules)
    visitor.visit_test_case(counter_test_case)
    assert common_modules == {"pytest"}
    assert "assert int_0 == pytest.approx(0.5, abs=0.01, rel=0.01)" in ast.unparse(
        ast.Module(body=visitor.test_case_ast, type_ignores=[])
    )


def test_is_failing_test(counter_test_case):
    result = ex.ExecutionResult()
    visitor = tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set(), result)
    assert not visitor.is_failing_test
    result.report_new_thrown_exception(2, ValueError())
    assert visitor.is_failing_test
    assert not tc_to_ast.TestCaseToAstVisitor(ns.NamingScope("module"), set()).is_failing_test
