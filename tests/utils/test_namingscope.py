#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
from typing import Any
from unittest.mock import MagicMock

import pytest

import mutassert.testcase.variablereference as vr
import mutassert.utils.namingscope as ns

from tests.fixtures.examples.stack import Stack


@pytest.fixture
def naming_scope():
    return ns.NamingScope()


@pytest.fixture
def variable_type_naming_scope():
    return ns.VariableTypeNamingScope()


def test_naming_scope_same(naming_scope):
    some_object = "something"
    name1 = naming_scope.get_name(some_object)
    name2 = naming_scope.get_name(some_object)
    assert name1 == name2


def test_naming_scope_different(naming_scope):
    name1 = naming_scope.get_name("one name")
    name2 = naming_scope.get_name("another")
    assert name1 != name2


def test_naming_scope_empty(naming_scope):
    assert len(naming_scope) == 0


def test_naming_scope_known_indices_not_empty(naming_scope):
    some_object = "something"
    naming_scope.get_name(some_object)
    assert dict(naming_scope) == {some_object: "var_0"}


def test_naming_scope_known_indices_has_name(naming_scope):
    some_object = "something"
    naming_scope.get_name(some_object)
    assert naming_scope.is_known_name(some_object)


def test_naming_scope_unknown_name(naming_scope):
    assert not naming_scope.is_known_name("unknown")


def test_naming_scope_callback():
    callback = MagicMock()
    scope = ns.NamingScope(prefix="module", new_name_callback=callback)
    scope.get_name("foo.bar")
    scope.get_name("foo.bar")
    callback.assert_called_once_with("foo.bar", "module_0")


@pytest.mark.parametrize(
    "tp,name",
    [
        (int, "int_0"),
        (str, "str_0"),
        (list, "list_0"),
        (type(None), "none_type_0"),
        (Stack, "stack_0"),
        (MagicMock, "magic_mock_0"),
        (Any, "var_0"),
    ],
)
def test_variable_type_conversion(variable_type_naming_scope, tp, name):
    var = vr.VariableReference(MagicMock(), tp)
    assert variable_type_naming_scope.get_name(var) == name


@pytest.mark.parametrize(
    "tp,name0,name1",
    [
        (int, "int_0", "int_1"),
        (Stack, "stack_0", "stack_1"),
    ],
)
def test_variable_type_counter(variable_type_naming_scope, tp, name0, name1):
    var0 = vr.VariableReference(MagicMock(), tp)
    var1 = vr.VariableReference(MagicMock(), tp)
    assert variable_type_naming_scope.get_name(var0) == name0
    assert variable_type_naming_scope.get_name(var1) == name1


@pytest.mark.parametrize(
    "name,result",
    [
        ("MagicMock", "magic_mock"),
        ("Stack", "stack"),
        ("TestCaseExecutor", "test_case_executor"),
    ],
)
def test_snake_case(name, result):
    assert ns.snake_case(name) == result
