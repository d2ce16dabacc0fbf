#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Provides the removal of assertions that do not hold on re-execution."""

from __future__ import annotations

import ast
import logging
import threading

from typing import TYPE_CHECKING

import mutassert.assertion.outputtrace as ot
import mutassert.testcase.execution as ex

from mutassert.utils import randomness
from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    from collections.abc import Sequence

    import mutassert.testcase.statement as st
    import mutassert.testcase.testcase as tc


_LOGGER = logging.getLogger(__name__)


class AssertionVerificationObserver(ex.RemoteExecutionObserver):
    """Checks the assertions of a statement right after it was executed."""

    class _LocalState(threading.local):
        def __init__(self):  # noqa: D107
            super().__init__()
            self.trace = ot.AssertionVerificationTrace()

    def __init__(self) -> None:  # noqa: D107
        self._state = AssertionVerificationObserver._LocalState()

    def before_test_case_execution(self, test_case: tc.TestCase):  # noqa: D102
        self._state.trace = ot.AssertionVerificationTrace()

    def after_test_case_execution(  # noqa: D102
        self,
        executor: ex.TestCaseExecutor,
        test_case: tc.TestCase,
        result: ex.ExecutionResult,
    ) -> None:
        result.assertion_verification_trace = self._state.trace

    def before_statement_execution(  # noqa: D102
        self, statement: st.Statement, node: ast.stmt, exec_ctx: ex.ExecutionContext
    ) -> ast.stmt:
        return node

    def after_statement_execution(  # noqa: D102
        self,
        statement: st.Statement,
        executor: ex.TestCaseExecutor,
        exec_ctx: ex.ExecutionContext,
        exception: BaseException | None,
    ) -> None:
        if exception is not None:
            return
        for idx, assertion in enumerate(statement.assertions):
            exc = executor.execute_ast(
                exec_ctx.wrap_node_in_module(exec_ctx.node_for_assertion(assertion)),
                exec_ctx,
            )
            if exc is None:
                continue
            if isinstance(exc, AssertionError):
                self._state.trace.failed[statement.get_position()].add(idx)
            else:
                self._state.trace.error[statement.get_position()].add(idx)


class FlakyAssertionFilter:
    """Re-executes finished tests and removes the assertions that do not hold.

    The tests are executed once in their given order and once in a shuffled
    order, so that assertions depending on state left behind by other tests are
    caught.
    """

    def __init__(self, executor: ex.TestCaseExecutor) -> None:
        """Create a new filter.

        Args:
            executor: The executor used for the re-executions
        """
        self._executor = executor
        self._removed = 0

    @property
    def removed(self) -> int:
        """Provides the number of assertions removed so far.

        Returns:
            The number of removed assertions
        """
        return self._removed

    def filter(self, test_cases: Sequence[tc.TestCase]) -> int:
        """Remove the assertions that do not hold on re-execution.

        Args:
            test_cases: The tests with their final assertions

        Returns:
            The number of assertions removed by this call
        """
        before = self._removed
        observer = AssertionVerificationObserver()
        shuffled = list(test_cases)
        randomness.shuffle(shuffled)
        for ordering in (list(test_cases), shuffled):
            for test, result in zip(
                ordering,
                self._executor.execute_multiple(ordering, [observer]),
                strict=True,
            ):
                self._remove_non_holding_assertions(test, result)
        removed = self._removed - before
        if removed > 0:
            _LOGGER.info("Removed %d flaky assertion(s)", removed)
        return removed

    def _remove_non_holding_assertions(
        self, test: tc.TestCase, result: ex.ExecutionResult
    ) -> None:
        if result.timeout:
            # Nothing was verified.
            for statement in test.statements:
                self._removed += len(statement.assertions)
                statement.assertions.clear()
            return
        trace = result.assertion_verification_trace
        for idx, statement in enumerate(test.statements):
            pos_to_assertion = dict(enumerate(statement.assertions))
            to_delete: OrderedSet[int] = OrderedSet()
            if idx in trace.failed:
                to_delete.update(trace.failed[idx])
            if idx in trace.error:
                to_delete.update(trace.error[idx])
            for pos in sorted(to_delete, reverse=True):
                _LOGGER.debug("Removing flaky assertion %s", pos_to_assertion[pos])
                statement.assertions.discard(pos_to_assertion[pos])
                self._removed += 1
