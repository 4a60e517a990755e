"""Assertion families bound to a severity: ``t.warn``, ``t.check``, ``t.require``.

Every assertion evaluates its operands once, records an :class:`AssertData`
event with the decomposed values and returns whether it passed. A failed
``require`` assertion aborts the current invocation of the test body.
"""

from collections.abc import Callable
from typing import Any, Protocol

from casewalk.decomposition import COMPARATORS, as_result, stringify_binary
from casewalk.models.data import AssertData, TestCaseData
from casewalk.models.options import RunOptions
from casewalk.models.types import AssertKind, Comparison, Severity
from casewalk.source import caller_frame, expression_text


class RequireFailure(BaseException):
    """Aborts the running invocation after a fatal assertion failure.

    Derives from :class:`BaseException` so that ``except Exception`` in test
    code does not swallow it.
    """


class AssertionHost(Protocol):
    """What an asserter needs from the running test."""

    @property
    def options(self) -> RunOptions: ...

    @property
    def test_case(self) -> TestCaseData | None: ...

    def translate(self, exc: BaseException) -> str: ...

    def active_contexts(self) -> tuple[str, ...]: ...

    def record_assert(self, data: AssertData) -> None: ...


def _quoted(text: str) -> str:
    return f'"{text}"' if text else ""


class Asserter:
    """All assertion kinds for one severity."""

    def __init__(self, host: AssertionHost, severity: Severity) -> None:
        self._host = host
        self.severity = severity

    def __repr__(self) -> str:
        return f"Asserter({self.severity.name})"

    def __call__(self, value: Any, /) -> bool:
        """Assert that ``value`` (a plain value, ``expr(...)`` or a comparison) is truthy."""
        return self._boolean(AssertKind.NORMAL, value, negate=False)

    def false(self, value: Any, /) -> bool:
        return self._boolean(AssertKind.FALSE, value, negate=True)

    def unary(self, value: Any, /) -> bool:
        return self._boolean(AssertKind.UNARY, value, negate=False)

    def unary_false(self, value: Any, /) -> bool:
        return self._boolean(AssertKind.UNARY_FALSE, value, negate=True)

    def eq(self, lhs: Any, rhs: Any, /) -> bool:
        return self._binary(AssertKind.EQ, Comparison.EQ, lhs, rhs)

    def ne(self, lhs: Any, rhs: Any, /) -> bool:
        return self._binary(AssertKind.NE, Comparison.NE, lhs, rhs)

    def gt(self, lhs: Any, rhs: Any, /) -> bool:
        return self._binary(AssertKind.GT, Comparison.GT, lhs, rhs)

    def lt(self, lhs: Any, rhs: Any, /) -> bool:
        return self._binary(AssertKind.LT, Comparison.LT, lhs, rhs)

    def ge(self, lhs: Any, rhs: Any, /) -> bool:
        return self._binary(AssertKind.GE, Comparison.GE, lhs, rhs)

    def le(self, lhs: Any, rhs: Any, /) -> bool:
        return self._binary(AssertKind.LE, Comparison.LE, lhs, rhs)

    def throws(self, func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> bool:
        """Assert that calling ``func(*args, **kwargs)`` raises anything."""
        return self._throws(AssertKind.THROWS, func, args, kwargs)

    def throws_as(
        self,
        exc_type: type[Exception],
        func: Callable[..., Any],
        /,
        *args: Any,
        **kwargs: Any,
    ) -> bool:
        """Assert that the call raises an instance of ``exc_type``."""
        return self._throws(AssertKind.THROWS_AS, func, args, kwargs, exc_type=exc_type)

    def throws_with(
        self, message: str, func: Callable[..., Any], /, *args: Any, **kwargs: Any
    ) -> bool:
        """Assert that the call raises an exception translated to ``message``."""
        return self._throws(AssertKind.THROWS_WITH, func, args, kwargs, message=message)

    def throws_with_as(
        self,
        message: str,
        exc_type: type[Exception],
        func: Callable[..., Any],
        /,
        *args: Any,
        **kwargs: Any,
    ) -> bool:
        return self._throws(
            AssertKind.THROWS_WITH_AS,
            func,
            args,
            kwargs,
            exc_type=exc_type,
            message=message,
        )

    def nothrow(self, func: Callable[..., Any], /, *args: Any, **kwargs: Any) -> bool:
        """Assert that the call returns normally."""
        return self._throws(AssertKind.NOTHROW, func, args, kwargs)

    def _boolean(self, kind: AssertKind, value: Any, negate: bool) -> bool:
        try:
            result = as_result(value)
        except Exception as exc:
            return self._record(kind, failed=True, threw=True, exception=exc)
        return self._record(kind, failed=result.passed == negate, decomp=result.decomp)

    def _binary(self, kind: AssertKind, comparison: Comparison, lhs: Any, rhs: Any) -> bool:
        try:
            passed = bool(COMPARATORS[comparison](lhs, rhs))
        except Exception as exc:
            return self._record(kind, failed=True, threw=True, exception=exc)
        return self._record(
            kind, failed=not passed, decomp=stringify_binary(lhs, ", ", rhs)
        )

    def _throws(
        self,
        kind: AssertKind,
        func: Callable[..., Any],
        args: tuple[Any, ...],
        kwargs: dict[str, Any],
        exc_type: type[Exception] | None = None,
        message: str | None = None,
    ) -> bool:
        if self._host.options.no_throw:
            return True

        raised: Exception | None = None
        try:
            func(*args, **kwargs)
        except Exception as exc:
            raised = exc

        threw = raised is not None
        threw_as = threw and exc_type is not None and isinstance(raised, exc_type)
        translated = self._host.translate(raised) if raised is not None else ""

        match kind:
            case AssertKind.THROWS:
                failed = not threw
            case AssertKind.THROWS_AS:
                failed = not threw_as
            case AssertKind.THROWS_WITH:
                failed = not threw or translated != message
            case AssertKind.THROWS_WITH_AS:
                failed = not threw_as or translated != message
            case _:
                failed = threw

        return self._record(
            kind,
            failed=failed,
            threw=threw,
            exception=translated,
            threw_as=threw_as,
            exception_type=exc_type.__name__ if exc_type is not None else None,
            exception_string=message,
        )

    def _record(
        self,
        kind: AssertKind,
        *,
        failed: bool,
        decomp: str = "",
        threw: bool = False,
        exception: BaseException | str = "",
        threw_as: bool = False,
        exception_type: str | None = None,
        exception_string: str | None = None,
    ) -> bool:
        if isinstance(exception, BaseException):
            exception = self._host.translate(exception)
        frame = caller_frame()
        self._host.record_assert(
            AssertData(
                test_case=self._host.test_case,
                severity=self.severity,
                kind=kind,
                file=frame.f_code.co_filename,
                line=frame.f_lineno,
                expr=expression_text(frame),
                failed=failed,
                threw=threw,
                exception=_quoted(exception),
                decomp=decomp,
                threw_as=threw_as,
                exception_type=exception_type,
                exception_string=exception_string,
                contexts=self._host.active_contexts(),
            )
        )
        return not failed
