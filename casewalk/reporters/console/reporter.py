"""Plain-text console reporter."""

from collections.abc import Sequence
from typing import TextIO

from casewalk.models.data import (
    AssertData,
    CurrentTestCaseStats,
    MessageData,
    QueryData,
    SubcaseSignature,
    TestCaseData,
    TestCaseException,
    TestRunStats,
)
from casewalk.models.options import RunOptions
from casewalk.models.types import (
    AssertKind,
    Severity,
    TestCaseFailureReason,
    assert_string,
    failure_string,
)
from casewalk.reporters.base import Reporter
from casewalk.reporters.location import file_line
from casewalk.version import __version__

SEPARATOR = "=" * 79
PREFIX = "[casewalk] "


class ConsoleReporter(Reporter):
    """Write failures, messages and a run summary as plain text.

    The header of a test case (location, suite, name and subcase path) is
    written lazily, only before the first line that belongs to it.
    """

    def __init__(self, options: RunOptions, stream: TextIO) -> None:
        self.options = options
        self.stream = stream
        self.test_case: TestCaseData | None = None
        self.subcases: list[SubcaseSignature] = []
        self.header_written = False

    @classmethod
    def from_options(cls, options: RunOptions, stream: TextIO) -> "ConsoleReporter":
        return cls(options, stream)

    def _write(self, text: str) -> None:
        self.stream.write(text)

    def _separator(self) -> None:
        self._write(SEPARATOR + "\n")

    def _version(self) -> None:
        if not self.options.no_version:
            self._write(f'{PREFIX}casewalk version is "{__version__}"\n')

    def _header(self) -> None:
        if self.header_written or self.test_case is None:
            return
        tc = self.test_case
        self._separator()
        self._write(file_line(tc.file, tc.line, self.options) + "\n")
        if tc.description:
            self._write(f"DESCRIPTION: {tc.description}\n")
        if tc.test_suite:
            self._write(f"TEST SUITE: {tc.test_suite}\n")
        self._write(f"TEST CASE:  {tc.name}\n")
        for signature in self.subcases:
            if signature.name:
                self._write(f"  {signature.name}\n")
        self._write("\n")
        self.header_written = True

    def _contexts(self, contexts: Sequence[str]) -> None:
        for index, context in enumerate(contexts):
            self._write(("  logged: " if index == 0 else "          ") + context + "\n")
        self._write("\n")

    def report_query(self, query: QueryData) -> None:
        match query.kind:
            case "version":
                self._version()
            case "list_reporters":
                self._version()
                for is_listener, label in ((True, "listeners"), (False, "reporters")):
                    entries = [info for info in query.reporters if info.is_listener == is_listener]
                    if entries:
                        self._write(f"{PREFIX}listing all registered {label}\n")
                    for info in entries:
                        self._write(f"priority: {info.priority:>5} name: {info.name}\n")
            case "count" | "list_test_cases":
                if query.kind == "list_test_cases":
                    self._write(f"{PREFIX}listing all test case names\n")
                    self._separator()
                    for test_case in query.data:
                        self._write(test_case.name + "\n")
                self._separator()
                self._passing_filters(query)
            case "list_test_suites":
                self._write(f"{PREFIX}listing all test suites\n")
                self._separator()
                for test_case in query.data:
                    self._write(test_case.test_suite + "\n")
                self._separator()
                self._passing_filters(query)
                suites = query.run_stats.num_test_suites_passing_filters if query.run_stats else 0
                self._write(
                    f"{PREFIX}test suites with unskipped test cases passing "
                    f"the current filters: {suites}\n"
                )
        self.stream.flush()

    def _passing_filters(self, query: QueryData) -> None:
        passing = query.run_stats.num_test_cases_passing_filters if query.run_stats else 0
        self._write(
            f"{PREFIX}unskipped test cases passing the current filters: {passing}\n"
        )

    def test_run_start(self) -> None:
        if not self.options.no_intro:
            self._version()
            self._write(f'{PREFIX}run with "--help" for options\n')

    def test_run_end(self, stats: TestRunStats) -> None:
        self._separator()
        passing = stats.num_test_cases_passing_filters
        skipped = stats.num_test_cases - passing
        self._write(
            f"{PREFIX}test cases: {passing:>6} | "
            f"{passing - stats.num_test_cases_failed:>6} passed | "
            f"{stats.num_test_cases_failed:>6} failed | {skipped:>6} skipped\n"
        )
        self._write(
            f"{PREFIX}assertions: {stats.num_asserts:>6} | "
            f"{stats.num_asserts - stats.num_asserts_failed:>6} passed | "
            f"{stats.num_asserts_failed:>6} failed |\n"
        )
        status = "FAILURE!" if stats.num_test_cases_failed else "SUCCESS!"
        self._write(f"{PREFIX}Status: {status}\n")
        self.stream.flush()

    def test_case_start(self, test_case: TestCaseData) -> None:
        self.test_case = test_case
        self.subcases.clear()
        self.header_written = False

    def test_case_end(self, stats: CurrentTestCaseStats) -> None:
        tc = self.test_case
        flags = stats.failure_flags
        if self.options.duration or (
            flags and flags != TestCaseFailureReason.ASSERT_FAILURE
        ):
            self._header()
        if tc is None:
            return

        if self.options.duration:
            self._write(f"{stats.seconds:.6f} s: {tc.name}\n")
        if flags & TestCaseFailureReason.TIMEOUT:
            self._write(f"Test case exceeded time limit of {tc.timeout:.6f}!\n")

        if flags & TestCaseFailureReason.SHOULD_HAVE_FAILED_BUT_DIDNT:
            self._write("Should have failed but didn't! Marking it as failed!\n")
        elif flags & TestCaseFailureReason.SHOULD_HAVE_FAILED_AND_DID:
            self._write("Failed as expected so marking it as not failed\n")
        elif flags & TestCaseFailureReason.COULD_HAVE_FAILED_AND_DID:
            self._write("Allowed to fail so marking it as not failed\n")
        elif flags & TestCaseFailureReason.DIDNT_FAIL_EXACTLY_NUM_TIMES:
            self._write(
                f"Didn't fail exactly {tc.expected_failures} times so marking it as failed!\n"
            )
        elif flags & TestCaseFailureReason.FAILED_EXACTLY_NUM_TIMES:
            self._write(
                f"Failed exactly {tc.expected_failures} times as expected "
                "so marking it as not failed!\n"
            )
        if flags & TestCaseFailureReason.TOO_MANY_FAILED_ASSERTS:
            self._write("Aborting - too many failed asserts!\n")

    def test_case_exception(self, exception: TestCaseException) -> None:
        self._header()
        tc = self.test_case
        location = file_line(tc.file, tc.line, self.options) + " " if tc else ""
        severity = Severity.REQUIRE if exception.is_crash else Severity.CHECK
        what = "test case CRASHED: " if exception.is_crash else "test case THREW exception: "
        self._write(
            f"{location}{failure_string(severity)}: {what}{exception.error_string}\n"
        )
        self._contexts(exception.contexts)
        if exception.is_crash:
            self.stream.flush()

    def subcase_start(self, signature: SubcaseSignature) -> None:
        self.subcases.append(signature)
        self.header_written = False

    def subcase_end(self) -> None:
        if self.subcases:
            self.subcases.pop()
        self.header_written = False

    def log_assert(self, data: AssertData) -> None:
        if not data.failed and not self.options.success:
            return
        self._header()
        label = "SUCCESS" if not data.failed else failure_string(data.severity)
        self._write(f"{file_line(data.file, data.line, self.options)} {label}: ")
        self._write(describe_assert(data) + "\n")
        self._contexts(data.contexts)

    def log_message(self, data: MessageData) -> None:
        self._header()
        label = "MESSAGE" if data.severity & Severity.WARN else failure_string(data.severity)
        self._write(f"{file_line(data.file, data.line, self.options)} {label}: {data.string}\n")
        self._contexts(data.contexts)


def describe_assert(data: AssertData) -> str:
    """One-line description of an assertion outcome (without location)."""
    name = assert_string(data.severity, data.kind)
    threw = "threw as expected!"
    match data.kind:
        case AssertKind.THROWS:
            return f"{name}( {data.expr} ) " + (threw if data.threw else "did NOT throw at all!")
        case AssertKind.THROWS_WITH_AS:
            head = f'{name}( {data.expr}, "{data.exception_string}", {data.exception_type} ) '
            if not data.threw:
                return head + "did NOT throw at all!"
            if not data.failed:
                return head + threw
            return head + f"threw a DIFFERENT exception! (contents: {data.exception})"
        case AssertKind.THROWS_AS:
            head = f"{name}( {data.expr}, {data.exception_type} ) "
            if not data.threw:
                return head + "did NOT throw at all!"
            if data.threw_as:
                return head + threw
            return head + f"threw a DIFFERENT exception: {data.exception}"
        case AssertKind.THROWS_WITH:
            head = f'{name}( {data.expr}, "{data.exception_string}" ) '
            if not data.threw:
                return head + "did NOT throw at all!"
            if not data.failed:
                return head + threw
            return head + f"threw a DIFFERENT exception: {data.exception}"
        case AssertKind.NOTHROW:
            if data.threw:
                return f"{name}( {data.expr} ) THREW exception: {data.exception}"
            return f"{name}( {data.expr} ) didn't throw!"
        case _:
            head = f"{name}( {data.expr} ) "
            if data.threw:
                return head + f"THREW exception: {data.exception}"
            verdict = "is correct!" if not data.failed else "is NOT correct!"
            return head + f"{verdict}\n  values: {name}( {data.decomp} )"
