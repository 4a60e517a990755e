"""The handle a test body receives: assertions, subcases, messages, contexts."""

import threading
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from casewalk.assertions import Asserter, RequireFailure
from casewalk.decomposition import to_string
from casewalk.models.data import (
    AssertData,
    MessageData,
    SubcaseSignature,
    TestCaseData,
    TestCaseException,
)
from casewalk.models.options import RunOptions
from casewalk.models.types import Severity
from casewalk.reporters.base import Reporter
from casewalk.source import caller_frame
from casewalk.state import RunState
from casewalk.subcase import Subcase, SubcaseTracker


def _format(message: str, args: tuple[Any, ...]) -> str:
    return message % args if args else message


class TestContext:
    """Passed to every test body; safe to share with worker threads.

    Example::

        @test_case("parsing")
        def parsing(t: TestContext) -> None:
            data = setup()
            with t.subcase("empty") as entered:
                if entered:
                    t.check.eq(parse(""), [])
            with t.subcase("numbers") as entered:
                if entered:
                    t.require(expr(parse("1 2")) == [1, 2])
    """

    __test__ = False

    def __init__(
        self,
        *,
        state: RunState,
        reporter: Reporter,
        options: RunOptions,
        translate: Callable[[BaseException], str],
    ) -> None:
        self._state = state
        self._reporter = reporter
        self._options = options
        self._translate = translate
        self._local = threading.local()
        self.warn = Asserter(self, Severity.WARN)
        self.check = Asserter(self, Severity.CHECK)
        self.require = Asserter(self, Severity.REQUIRE)

    @property
    def options(self) -> RunOptions:
        return self._options

    @property
    def test_case(self) -> TestCaseData | None:
        return self._state.current_test

    @property
    def subcases(self) -> SubcaseTracker:
        return self._state.subcases

    def translate(self, exc: BaseException) -> str:
        return self._translate(exc)

    def subcase(self, name: str) -> Subcase:
        """Mark a subcase; see :class:`~casewalk.subcase.Subcase`."""
        frame = caller_frame()
        signature = SubcaseSignature(
            line=frame.f_lineno, file=frame.f_code.co_filename, name=name
        )
        return Subcase(self, signature)

    def subcase_started(self, signature: SubcaseSignature) -> None:
        self._reporter.subcase_start(signature)

    def subcase_ended(self) -> None:
        self._reporter.subcase_end()

    def exception_in_subcase(self, exc: Exception) -> None:
        """Report an exception leaving a subcase while its path is still known."""
        if not self._state.should_log_current_exception:
            return
        self._state.should_log_current_exception = False
        self._reporter.test_case_exception(
            TestCaseException(
                error_string=self.translate(exc),
                is_crash=False,
                contexts=(*self._state.stringified_contexts, *self.active_contexts()),
            )
        )

    def _context_stack(self) -> list[tuple[str, tuple[Any, ...]]]:
        stack: list[tuple[str, tuple[Any, ...]]] | None = getattr(
            self._local, "contexts", None
        )
        if stack is None:
            stack = self._local.contexts = []
        return stack

    @contextmanager
    def info(self, message: str, *args: Any) -> Iterator[None]:
        """Attach lazily %-formatted context to assertions made in the block."""
        stack = self._context_stack()
        stack.append((message, args))
        try:
            yield
        except BaseException:
            self._state.stringified_contexts.append(_format(message, args))
            raise
        finally:
            stack.pop()

    def capture(self, **values: Any) -> Any:
        """Shorthand for :meth:`info` showing ``name := value`` pairs."""
        text = ", ".join(f"{name} := {to_string(value)}" for name, value in values.items())
        return self.info("%s", text)

    def active_contexts(self) -> tuple[str, ...]:
        return tuple(_format(message, args) for message, args in self._context_stack())

    def record_assert(self, data: AssertData) -> None:
        """Deliver an assertion, count it and abort the invocation if required."""
        self._reporter.log_assert(data)
        self._state.add_assert(data.severity, data.failed)
        if data.failed and self._should_abort(data.severity):
            raise RequireFailure(data.expr)

    def _should_abort(self, severity: Severity) -> bool:
        if severity & Severity.REQUIRE:
            return True
        abort_after = self._options.abort_after
        return bool(
            severity & Severity.CHECK
            and abort_after > 0
            and self._state.failed_asserts_so_far() >= abort_after
        )

    def message(self, text: str) -> None:
        """Log a message; it does not affect the outcome of the test."""
        self._log_message(text, Severity.WARN)

    def fail_check(self, text: str) -> None:
        """Log a message and count it as a failed assertion."""
        self._log_message(text, Severity.CHECK)

    def fail(self, text: str) -> None:
        """Log a message, count it as failed and abort the invocation."""
        self._log_message(text, Severity.REQUIRE)
        raise RequireFailure(text)

    def _log_message(self, text: str, severity: Severity) -> None:
        frame = caller_frame()
        self._reporter.log_message(
            MessageData(
                string=text,
                file=frame.f_code.co_filename,
                line=frame.f_lineno,
                severity=severity,
                contexts=self.active_contexts(),
            )
        )
        if not severity & Severity.WARN:
            self._state.add_assert(severity, True)
