#  This file is part of mutassert.
#
#  SPDX-FileCopyrightText: 2019–2025 mutassert Contributors
#
#  SPDX-License-Identifier: MIT
#
"""Contains all code related to test-case execution."""

from __future__ import annotations

import abc
import ast
import contextlib
import dataclasses
import importlib
import logging
import os
import sys
import threading

from abc import abstractmethod
from queue import Empty
from queue import Queue
from typing import TYPE_CHECKING
from typing import Any

import mutassert.assertion.assertion_to_ast as ass_to_ast
import mutassert.assertion.outputtrace as ot
import mutassert.configuration as config
import mutassert.testcase.statement_to_ast as stmt_to_ast
import mutassert.utils.namingscope as ns

from mutassert.utils.exceptions import ExecutionFailedException
from mutassert.utils.orderedset import OrderedSet


if TYPE_CHECKING:
    from collections.abc import Iterable
    from collections.abc import Iterator
    from collections.abc import Sequence
    from types import ModuleType

    import mutassert.assertion.assertion as ass
    import mutassert.testcase.statement as stmt
    import mutassert.testcase.testcase as tc
    import mutassert.testcase.variablereference as vr

    from mutassert.mutation.registry import Mutation
    from mutassert.mutation.registry import MutationRegistry


_LOGGER = logging.getLogger(__name__)


class ExecutionContext:
    """Contains information required in the context of an execution.

    The context contains, e.g., the used variables, modules, and the AST representation
    of the statements that should be executed.
    """

    def __init__(self) -> None:
        """Create a new execution context."""
        self._local_namespace: dict[str, Any] = {}
        self._variable_names = ns.NamingScope()
        self._module_aliases = ns.NamingScope(
            prefix="module", new_name_callback=self.add_new_module_alias
        )
        self._global_namespace: dict[str, ModuleType] = {}

    @property
    def local_namespace(self) -> dict[str, Any]:
        """The local namespace.

        Returns:
            The local namespace
        """
        return self._local_namespace

    @property
    def module_aliases(self) -> ns.NamingScope:
        """The module aliases.

        Returns:
            A naming scope that maps the used modules to their alias.
        """
        return self._module_aliases

    @property
    def variable_names(self) -> ns.NamingScope:
        """The variable names.

        Returns:
            A naming scope that maps the used variables to their names.
        """
        return self._variable_names

    @property
    def global_namespace(self) -> dict[str, ModuleType]:
        """The global namespace.

        Returns:
            The global namespace
        """
        return self._global_namespace

    def get_reference_value(self, reference: vr.Reference) -> Any:
        """Resolve the given reference in this execution context.

        Args:
            reference: The reference to resolve.

        Raises:
            ValueError: If the root of the reference can not be resolved.

        Returns:
            The value that is resolved.
        """
        root, *attrs = reference.get_names(self._variable_names, self._module_aliases)
        if root in self._local_namespace:
            # Check local namespace first
            res = self._local_namespace[root]
        elif root in self._global_namespace:
            # Check global namespace after
            res = self._global_namespace[root]
        else:
            # Root name is not defined?
            raise ValueError("Root not found in this context: " + root)
        for attr in attrs:
            res = getattr(res, attr)
        return res

    def node_for_statement(self, statement: stmt.Statement) -> ast.stmt:
        """Transforms the given statement in an executable ast node.

        Args:
            statement: The statement that should be converted.

        Returns:
            An ast node.
        """
        stmt_visitor = stmt_to_ast.StatementToAstVisitor(
            self._module_aliases, self._variable_names
        )
        statement.accept(stmt_visitor)
        return stmt_visitor.ast_node

    def node_for_assertion(self, assertion: ass.Assertion) -> ast.stmt:
        """Transforms the given assertion in an executable ast node.

        Args:
            assertion: The assertion that should be converted.

        Returns:
            An ast node.
        """
        common_modules: set[str] = set()
        ass_visitor = ass_to_ast.PyTestAssertionToAstVisitor(
            self._variable_names,
            self._module_aliases,
            common_modules,
            config.configuration.assertion_generation.float_precision,
        )
        ass_visitor.visit(assertion)
        for common in common_modules:
            if common not in self._global_namespace:
                self.add_new_module_alias(common, common)
        assert len(ass_visitor.nodes) == 1
        return ass_visitor.nodes[0]

    @staticmethod
    def wrap_node_in_module(node: ast.stmt) -> ast.Module:
        """Wraps the given node in a module, such that it can be executed.

        Args:
            node: The node to wrap

        Returns:
            The module wrapping the nodes
        """
        ast.fix_missing_locations(node)
        return ast.Module(body=[node], type_ignores=[])

    def add_new_module_alias(self, module_name: str, alias: str) -> None:
        """Add a new module alias.

        Args:
            module_name: The name of the module
            alias: The alias
        """
        self._global_namespace[alias] = importlib.import_module(module_name)


class RemoteExecutionObserver(abc.ABC):
    """An observer that can be used to observe the execution of a test case.

    Important Note: If an observer is stateful, then this state must be encapsulated
    in a threading.local, i.e., be bound to a thread. Note that thread local data
    is initialized per thread, so there is no need to clear any pre-existing data
    (because there is none), as every thread gets its own instance.

    The only thing that should leave an observer are results when they are written
    to the execution result in `after_test_case_execution`.
    """

    @abstractmethod
    def before_test_case_execution(self, test_case: tc.TestCase):
        """Called before test case execution.

        Args:
            test_case: The test cases that will be executed.
        """

    @abstractmethod
    def after_test_case_execution(
        self,
        executor: TestCaseExecutor,
        test_case: tc.TestCase,
        result: ExecutionResult,
    ) -> None:
        """Called after test case execution.

        Note: When a timeout occurs, then this method might not be called at all.

        Args:
            executor: The executor that executed the test case
            test_case: The test cases that was executed
            result: The execution result
        """

    @abstractmethod
    def before_statement_execution(
        self, statement: stmt.Statement, node: ast.stmt, exec_ctx: ExecutionContext
    ) -> ast.stmt:
        """Called before a statement is executed.

        Args:
            statement: the statement about to be executed.
            node: the ast node representing the statement.
            exec_ctx: the current execution context.

        Returns:
            An ast node. You may choose to modify this node to change what is executed.
        """

    @abstractmethod
    def after_statement_execution(
        self,
        statement: stmt.Statement,
        executor: TestCaseExecutor,
        exec_ctx: ExecutionContext,
        exception: BaseException | None,
    ) -> None:
        """Called after a statement was executed.

        Args:
            statement: the statement that was executed.
            executor: the executor, in case you want to execute something.
            exec_ctx: the current execution context.
            exception: the exception that was thrown, if any.
        """


@dataclasses.dataclass
class ExecutionResult:
    """Result of an execution."""

    timeout: bool = False
    exceptions: dict[int, BaseException] = dataclasses.field(default_factory=dict, init=False)
    output_traces: dict[ass.AssertionKind, ot.OutputTrace] = dataclasses.field(
        default_factory=dict, init=False
    )
    assertion_verification_trace: ot.AssertionVerificationTrace = dataclasses.field(
        default_factory=ot.AssertionVerificationTrace, init=False
    )
    touched_mutants: OrderedSet[int] = dataclasses.field(
        default_factory=OrderedSet, init=False
    )

    def get_trace(self, kind: ass.AssertionKind) -> ot.OutputTrace | None:
        """Provides the trace an observer family recorded during this execution.

        Args:
            kind: The observer family

        Returns:
            The trace, or None if the family did not observe this execution
        """
        return self.output_traces.get(kind)

    def has_test_exceptions(self) -> bool:
        """Returns true if any exceptions were thrown during the execution.

        Returns:
            Whether the test has exceptions
        """
        return bool(self.exceptions)

    def has_unexpected_exceptions(self) -> bool:
        """Did the execution raise something that is not a regular exception?

        Raising, e.g., `SystemExit` or `KeyboardInterrupt` makes the execution
        unusable as a reference.

        Returns:
            Whether a raised exception is not an instance of `Exception`
        """
        return any(not isinstance(exc, Exception) for exc in self.exceptions.values())

    def report_new_thrown_exception(self, stmt_idx: int, ex: BaseException) -> None:
        """Report an exception that was thrown during execution.

        Args:
            stmt_idx: the index of the statement, that caused the exception
            ex: the exception
        """
        self.exceptions[stmt_idx] = ex

    def get_first_position_of_thrown_exception(self) -> int | None:
        """Provide the index of the first thrown exception or None.

        Returns:
            The index of the first thrown exception, if any
        """
        if self.has_test_exceptions():
            return min(self.exceptions.keys())
        return None

    def __str__(self) -> str:
        return (
            f"ExecutionResult(timeout: {self.timeout}, exceptions: {self.exceptions}, "
            f"touched: {list(self.touched_mutants)})"
        )

    def __repr__(self) -> str:
        return str(self)


class OutputSuppressionContext:
    """A context manager that suppress stdout and stderr."""

    # Repeatedly opening/closing devnull caused problems.
    # This is closed when the interpreter terminates.
    _null_file = open(os.devnull, mode="w")  # noqa: PLW1514, PTH123, SIM115

    def __init__(self) -> None:
        """Create a new context manager that suppress stdout and stderr."""
        self._restored = False
        self._restored_lock = threading.Lock()
        self._stdout = sys.stdout
        self._stderr = sys.stderr

    def restore(self) -> None:
        """Restore stdout and stderr."""
        with self._restored_lock:
            if self._restored:
                return
            self._restored = True
            sys.stdout = self._stdout
            sys.stderr = self._stderr

    def __enter__(self) -> None:
        self._stdout = sys.stdout
        self._stderr = sys.stderr
        sys.stdout = self._null_file
        sys.stderr = self._null_file

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.restore()


class TestCaseExecutor:
    """An executor that executes test cases, optionally with one active mutant.

    Every test case runs in its own daemon thread.  If the thread does not finish
    in time, the execution counts as a timeout and the thread is killed at its
    next statement or mutant probe.
    """

    def __init__(
        self,
        registry: MutationRegistry,
        maximum_test_execution_timeout: int = 5,
        test_execution_time_per_statement: int = 1,
    ) -> None:
        """Create new test case executor.

        Args:
            registry: The mutants of the unit under test
            maximum_test_execution_timeout: The maximum time (in seconds) before a
                test case execution times out.
            test_execution_time_per_statement: The amount of time (in seconds) that is
                added to the timeout per statement, up to maximum_test_execution_timeout
        """
        self._registry = registry
        self._maximum_test_execution_timeout = maximum_test_execution_timeout
        self._test_execution_time_per_statement = test_execution_time_per_statement

        def log_thread_exception(arg: threading.ExceptHookArgs) -> None:
            _LOGGER.debug(
                "Exception in Thread: %s",
                arg.thread,
                exc_info=(  # noqa: LOG014
                    arg.exc_type,
                    arg.exc_value,  # type: ignore[arg-type]
                    arg.exc_traceback,
                ),
            )

        # Set our own exception hook, so timeout related errors in executing threads
        # are not spilled out to stderr and clutter our formatted output but are send
        # to the logger
        threading.excepthook = log_thread_exception

    @property
    def registry(self) -> MutationRegistry:
        """The mutants of the unit under test.

        Returns:
            The mutation registry
        """
        return self._registry

    def execute(
        self,
        test_case: tc.TestCase,
        observers: Sequence[RemoteExecutionObserver] = (),
        mutation: Mutation | None = None,
    ) -> ExecutionResult:
        """Executes all statements of the given test case.

        Args:
            test_case: the test case that should be executed.
            observers: the observers that watch this execution
            mutation: the mutant that is active during the execution, if any

        Raises:
            ExecutionFailedException: If the worker thread ended without a result.

        Returns:
            Result of the execution
        """
        with (
            self._registry.activated(mutation)
            if mutation is not None
            else contextlib.nullcontext()
        ):
            return self._execute(test_case, tuple(observers))

    def execute_multiple(
        self,
        test_cases: Iterable[tc.TestCase],
        observers: Sequence[RemoteExecutionObserver] = (),
    ) -> Iterator[ExecutionResult]:
        """Executes multiple test cases.

        Args:
            test_cases: The test cases that should be executed.
            observers: the observers that watch the executions

        Yields:
            The results of the execution
        """
        for test_case in test_cases:
            yield self.execute(test_case, observers)

    def _execute(
        self, test_case: tc.TestCase, observers: tuple[RemoteExecutionObserver, ...]
    ) -> ExecutionResult:
        self._registry.reset_touched()
        output_suppression_context = OutputSuppressionContext()
        return_queue: Queue[ExecutionResult] = Queue()
        thread = threading.Thread(
            target=self._execute_test_case,
            args=(test_case, observers, output_suppression_context, return_queue),
            daemon=True,
        )
        thread.start()
        thread.join(
            timeout=min(
                self._maximum_test_execution_timeout,
                self._test_execution_time_per_statement * len(test_case.statements),
            )
        )
        if thread.is_alive():
            # Set thread ident to invalid value, such that the probes
            # kill the thread
            self._registry.current_thread_identifier = -1
            # Wait for the thread so that stdout/stderr is not redirected anymore
            _LOGGER.debug("Waiting for thread to finish")
            thread.join(timeout=self._maximum_test_execution_timeout)
            if not thread.is_alive():
                self._registry.current_thread_identifier = None
            # Restore stdout and stderr if it was not already done by the thread
            output_suppression_context.restore()
            _LOGGER.debug("Experienced timeout from test-case execution")
            return ExecutionResult(timeout=True)
        try:
            result = return_queue.get(block=False)
        except Empty as error:
            raise ExecutionFailedException(
                "Finished thread did not return a result"
            ) from error
        result.touched_mutants = self._registry.touched_mutants
        return result

    def _execute_test_case(
        self,
        test_case: tc.TestCase,
        observers: tuple[RemoteExecutionObserver, ...],
        output_suppression_context: OutputSuppressionContext,
        result_queue: Queue,
    ) -> None:
        ident = threading.current_thread().ident
        self._registry.current_thread_identifier = ident
        try:
            for observer in observers:
                observer.before_test_case_execution(test_case)
            result = ExecutionResult()
            exec_ctx = ExecutionContext()
            with output_suppression_context:
                for idx, statement in enumerate(test_case.statements):
                    ast_node = self._before_statement_execution(
                        statement, exec_ctx, observers
                    )
                    exception = self.execute_ast(ast_node, exec_ctx)
                    self._after_statement_execution(
                        statement, exec_ctx, exception, observers
                    )
                    if exception is not None:
                        result.report_new_thrown_exception(idx, exception)
                        break
            for observer in observers:
                observer.after_test_case_execution(self, test_case, result)
            result_queue.put(result)
        finally:
            if self._registry.current_thread_identifier == ident:
                self._registry.current_thread_identifier = None

    def _check_thread(self) -> None:
        # Check if the current thread is still the one that should be executing
        # Otherwise raise an exception to kill it.
        if self._registry.current_thread_identifier != threading.current_thread().ident:
            raise RuntimeError(
                "The current thread shall not be executed any more, thus I kill it."
            )

    def _before_statement_execution(
        self,
        statement: stmt.Statement,
        exec_ctx: ExecutionContext,
        observers: tuple[RemoteExecutionObserver, ...],
    ) -> ast.Module:
        self._check_thread()
        ast_node = exec_ctx.node_for_statement(statement)
        for observer in observers:
            ast_node = observer.before_statement_execution(statement, ast_node, exec_ctx)
        return ExecutionContext.wrap_node_in_module(ast_node)

    def execute_ast(
        self,
        ast_node: ast.Module,
        exec_ctx: ExecutionContext,
    ) -> BaseException | None:
        """Execute the given ast_node in the given context.

        You can use this in an observer if you also need to execute an AST Node.

        Args:
            ast_node: The node to execute.
            exec_ctx: The execution context

        Returns:
            The raised exception, if any.
        """
        if _LOGGER.isEnabledFor(logging.DEBUG):
            _LOGGER.debug("Executing %s", ast.unparse(ast_node))

        code = compile(ast_node, "<ast>", "exec")
        try:
            exec(  # noqa: S102
                code, exec_ctx.global_namespace, exec_ctx.local_namespace
            )
        except BaseException as err:  # noqa: BLE001
            failed_stmt = ast.unparse(ast_node)
            _LOGGER.debug("Failed to execute statement:\n%s%s", failed_stmt, err.args)
            return err

        return None

    def _after_statement_execution(
        self,
        statement: stmt.Statement,
        exec_ctx: ExecutionContext,
        exception: BaseException | None,
        observers: tuple[RemoteExecutionObserver, ...],
    ) -> None:
        # See comments in _before_statement_execution
        self._check_thread()
        for observer in reversed(observers):
            observer.after_statement_execution(statement, self, exec_ctx, exception)
