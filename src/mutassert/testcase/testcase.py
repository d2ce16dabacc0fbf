#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides an implementation for a test case."""

from __future__ import annotations

from typing import TYPE_CHECKING

from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    import mutassert.assertion.assertion as ass
    import mutassert.testcase.statement as stmt
    import mutassert.testcase.variablereference as vr


class TestCase:
    """An ordered sequence of statements; a statement's position is its key."""

    def __init__(self, name: str = "") -> None:
        """Create a new, empty test case.

        Args:
            name: An optional name, used when exporting the test
        """
        self._statements: list[stmt.Statement] = []
        self.name = name

    @property
    def statements(self) -> list[stmt.Statement]:
        """Provides the list of statements in this test case.

        Returns:
            The list of statements in this test case
        """
        return self._statements

    def add_statement(
        self, statement: stmt.Statement, position: int = -1
    ) -> vr.VariableReference | None:
        """Adds a new statement to the test case.

        The optional position parameter specifies the position.  If it is not given,
        the statement will be added to the end of the test case.

        Args:
            statement: The new statement
            position: The optional position where to put the statement

        Returns:
            The return value of the statement.  Can be None, if this statement
            does not create a variable.
        """
        if position < 0:
            self._statements.append(statement)
        else:
            self._statements.insert(position, statement)
        return statement.ret_val

    def add_variable_creating_statement(
        self, statement: stmt.VariableCreatingStatement, position: int = -1
    ) -> vr.VariableReference:
        """Overloaded version of add_statement that adds a statement.

        Args:
            statement: The new statement
            position: The optional position where to put the statement

        Returns:
            The return value of the statement.
        """
        self.add_statement(statement, position)
        return statement.ret_val

    def remove(self, position: int) -> None:
        """Removes a statement at the given position.

        Args:
            position: The position of the statement that should be removed
        """
        del self._statements[position]

    def chop(self, pos: int) -> None:
        """Remove all statements after the given position.

        Args:
            pos: The last position to keep
        """
        self._statements = self._statements[: pos + 1]

    def get_statement(self, position: int) -> stmt.Statement:
        """Gets the statement at a given position.

        Args:
            position: The position of the statement

        Returns:
            The statement at the given position
        """
        assert 0 <= position < len(self._statements)
        return self._statements[position]

    def has_statement(self, position: int) -> bool:
        """Check if there is a statement at the given position.

        Args:
            position: The position to check

        Returns:
            Whether there is a statement at the given position
        """
        return 0 <= position < len(self._statements)

    def get_dependencies(self, var: vr.VariableReference) -> OrderedSet[vr.VariableReference]:
        """Provides all variables on which var depends, including var itself.

        Args:
            var: the variable whose dependencies we are looking for.

        Returns:
            a set of variables on which var depends on.
        """
        dependencies: OrderedSet[vr.VariableReference] = OrderedSet()

        dependent_stmts = {self.get_statement(var.get_statement_position())}
        for idx in range(var.get_statement_position(), -1, -1):
            new_stmts: OrderedSet[stmt.Statement] = OrderedSet()
            for statement in dependent_stmts:
                if (
                    ret_val := self.get_statement(idx).ret_val
                ) is not None and statement.references(ret_val):
                    new_stmts.add(self.get_statement(idx))
                    dependencies.add(ret_val)
                    break
            dependent_stmts.update(new_stmts)

        return dependencies

    def get_assertions(self) -> list[ass.Assertion]:
        """Provides all assertions contained in this test case.

        Returns:
            The assertions of all statements, in statement order
        """
        assertions = []
        for statement in self._statements:
            assertions.extend(statement.assertions)
        return assertions

    def remove_assertion(self, assertion: ass.Assertion) -> None:
        """Remove an assertion from the statement it is attached to.

        Args:
            assertion: The assertion to remove
        """
        if assertion.statement is not None:
            assertion.statement.assertions.discard(assertion)
            return
        for statement in self._statements:
            statement.assertions.discard(assertion)

    def size(self) -> int:
        """Provides the number of statements in the test case.

        Returns:
            The number of statements in the test case
        """
        return len(self._statements)

    def size_with_assertions(self) -> int:
        """Provides the number of statements plus the number of assertions.

        Returns:
            The number of statements and assertions
        """
        return self.size() + len(self.get_assertions())

    def __repr__(self) -> str:
        return f"TestCase({self.name!r}, size={self.size()})"
