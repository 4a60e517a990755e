"""Tests for assertions, messages and info contexts."""

import pytest

from casewalk.approx import Approx
from casewalk.context import TestContext
from casewalk.decomposition import expr
from casewalk.models.data import AssertData, TestRunStats
from casewalk.models.types import AssertKind, Severity, TestCaseFailureReason
from casewalk.registry import Registry
from casewalk.testing.recording import RecordingReporter, RunFn


class ParseError(Exception):
    """Error raised by the code under test."""


def _asserts(recorder: RecordingReporter) -> list[AssertData]:
    return list(recorder.payloads("log_assert"))


def test_failed_check_continues_the_test(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Records a failed CHECK_EQ with decomposed operands and keeps running."""
    reached: list[bool] = []

    @registry.test_case()
    def compare(t: TestContext) -> None:
        t.check.eq(3, 4)
        reached.append(True)

    assert run() == 1

    (data,) = _asserts(recorder)
    assert data.failed
    assert data.severity is Severity.CHECK
    assert data.kind is AssertKind.EQ
    assert data.expr == "3, 4"
    assert data.decomp == "3, 4"
    assert data.file == __file__
    assert reached == [True]


def test_failed_require_aborts_the_invocation(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Stops the body after a failed REQUIRE."""
    reached: list[bool] = []

    @registry.test_case()
    def required(t: TestContext) -> None:
        t.require(expr(1) == 2)
        reached.append(True)

    run()

    (data,) = _asserts(recorder)
    assert data.decomp == "1 == 2"
    assert data.expr == "expr(1) == 2"
    assert reached == []
    (stats,) = recorder.payloads("test_case_end")
    assert stats.failure_flags & TestCaseFailureReason.ASSERT_FAILURE


def test_require_is_not_swallowed_by_except_exception(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Aborts even when test code catches Exception."""
    reached: list[bool] = []

    @registry.test_case()
    def guarded(t: TestContext) -> None:
        try:
            t.require.false(True)
        except Exception:
            reached.append(True)
        reached.append(True)

    run()

    assert reached == []


def test_warnings_are_reported_but_not_counted(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Does not count WARN assertions in the statistics."""

    @registry.test_case()
    def warned(t: TestContext) -> None:
        t.warn(False)
        t.check(True)

    assert run() == 0

    assert len(_asserts(recorder)) == 2
    (stats,) = recorder.payloads("test_run_end")
    assert stats == TestRunStats(
        num_test_cases=1,
        num_test_cases_passing_filters=1,
        num_asserts=1,
    )


def test_assertions_return_verdict(registry: Registry, run: RunFn) -> None:
    """Returns whether each assertion passed."""
    verdicts: list[bool] = []

    @registry.test_case()
    def verdict(t: TestContext) -> None:
        verdicts.append(t.check.lt(1, 2))
        verdicts.append(t.check.ge(1, 2))
        verdicts.append(t.check.unary([1]))
        verdicts.append(t.check.unary_false([1]))
        verdicts.append(t.check(2.0 == Approx(2.0)))

    run()

    assert verdicts == [True, False, True, False, True]


def test_comparison_that_raises_fails_the_assertion(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Records the translated exception when comparing raises."""

    @registry.test_case()
    def incomparable(t: TestContext) -> None:
        t.check.lt(1, "a")

    run()

    (data,) = _asserts(recorder)
    assert data.failed
    assert data.threw
    assert "not supported" in data.exception


def test_exception_assertions(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Checks whether, what and which exception a call raises."""

    def parse(text: str) -> int:
        raise ParseError(f"bad input: {text}")

    @registry.test_case()
    def raising(t: TestContext) -> None:
        t.check.throws(parse, "x")
        t.check.throws_as(ParseError, parse, "x")
        t.check.throws_as(KeyError, parse, "x")
        t.check.throws_with("bad input: x", parse, "x")
        t.check.throws_with_as("bad input: y", ParseError, parse, "x")
        t.check.nothrow(parse, "x")
        t.check.throws(len, "x")

    run()

    failed = [(d.kind, d.failed) for d in _asserts(recorder)]
    assert failed == [
        (AssertKind.THROWS, False),
        (AssertKind.THROWS_AS, False),
        (AssertKind.THROWS_AS, True),
        (AssertKind.THROWS_WITH, False),
        (AssertKind.THROWS_WITH_AS, True),
        (AssertKind.NOTHROW, True),
        (AssertKind.THROWS, True),
    ]
    different = _asserts(recorder)[2]
    assert different.threw
    assert not different.threw_as
    assert different.exception == '"bad input: x"'
    assert different.exception_type == "KeyError"


def test_exception_assertions_use_translators(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Compares messages produced by registered translators."""

    @registry.exception_translator(ParseError)
    def describe(exc: ParseError) -> str:
        return "parse error"

    def parse() -> None:
        raise ParseError("details")

    @registry.test_case()
    def translated(t: TestContext) -> None:
        t.check.throws_with("parse error", parse)

    assert run() == 0


def test_no_throw_skips_exception_assertions(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Does not execute exception assertions when no_throw is set."""
    calls: list[bool] = []

    def call() -> None:
        calls.append(True)

    @registry.test_case()
    def skipped(t: TestContext) -> None:
        t.check.throws(call)

    assert run(no_throw=True) == 0

    assert calls == []
    assert _asserts(recorder) == []


def test_info_contexts_are_attached(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Attaches active contexts to assertions and messages."""

    @registry.test_case()
    def contexts(t: TestContext) -> None:
        t.check(True)
        with t.info("row %d", 7), t.capture(name="alice"):
            t.check(False)
            t.message("inspecting")

    run()

    assert [d.contexts for d in _asserts(recorder)] == [(), ("row 7", "name := 'alice'")]
    (message,) = recorder.payloads("log_message")
    assert message.string == "inspecting"
    assert message.contexts == ("row 7", "name := 'alice'")


def test_contexts_unwound_by_exception_are_reported(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Attaches contexts left by an exception to the exception event."""

    @registry.test_case()
    def unwound(t: TestContext) -> None:
        with t.info("outer"):
            with t.info("inner %s", "x"):
                raise KeyError("missing")

    run()

    (exception,) = recorder.payloads("test_case_exception")
    assert exception.error_string == "'missing'"
    assert exception.contexts == ("inner x", "outer")


def test_messages(registry: Registry, recorder: RecordingReporter, run: RunFn) -> None:
    """Counts failure messages and aborts on fail."""
    reached: list[bool] = []

    @registry.test_case()
    def messages(t: TestContext) -> None:
        t.message("just saying")
        t.fail_check("soft failure")
        t.fail("hard failure")
        reached.append(True)

    assert run() == 1

    assert [m.severity for m in recorder.payloads("log_message")] == [
        Severity.WARN,
        Severity.CHECK,
        Severity.REQUIRE,
    ]
    (stats,) = recorder.payloads("test_case_end")
    assert stats.num_asserts_failed == 2
    assert reached == []


@pytest.mark.parametrize("severity", ["warn", "check", "require"])
def test_severity_is_recorded(
    severity: str, registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Records the severity of the asserter used."""

    @registry.test_case()
    def severities(t: TestContext) -> None:
        getattr(t, severity).eq(1, 1)

    run()

    (data,) = _asserts(recorder)
    assert data.severity is Severity[severity.upper()]
    assert not data.failed


def test_expression_text_is_the_literal_source(
    registry: Registry, recorder: RecordingReporter, run: RunFn
) -> None:
    """Records the argument text of the assertion call itself."""

    def prepare(value: int) -> bool:
        return value > 0

    @registry.test_case()
    def literal(t: TestContext) -> None:
        x, y, s = 1, True, ")"
        ok = prepare(x) and t.check(y)
        t.check(s == ")")
        t.check.eq(
            x,
            ok,
        )

    run()

    assert [data.expr for data in _asserts(recorder)] == ["y", 's == ")"', "x, ok"]
