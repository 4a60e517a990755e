"""JSON summary reporter: one document per run, written when it ends."""

import json
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Literal, TextIO

from casewalk.models.data import (
    CurrentTestCaseStats,
    QueryData,
    TestCaseData,
    TestCaseException,
    TestRunStats,
)
from casewalk.models.options import RunOptions
from casewalk.models.types import TestCaseFailureReason
from casewalk.reporters.base import Reporter
from casewalk.reporters.location import display_file, display_line

type Status = Literal["success", "failure", "error", "timeout", "skipped"]


@dataclass(frozen=True, kw_only=True)
class CaseResult:
    """Outcome of one test case as listed in the summary."""

    test_case: TestCaseData
    status: Status
    duration: float
    message: str | None = None


def case_status(stats: CurrentTestCaseStats) -> Status:
    """Map the classification of a finished test case to a summary status."""
    if not stats.failed:
        return "success"
    flags = stats.failure_flags
    if flags & (TestCaseFailureReason.EXCEPTION | TestCaseFailureReason.CRASH):
        return "error"
    if flags & TestCaseFailureReason.TIMEOUT:
        return "timeout"
    return "failure"


def format_output(
    results: Sequence[CaseResult], stats: TestRunStats, options: RunOptions
) -> dict[str, Any]:
    """Format test case results and run totals for JSON output."""
    entries = [
        {
            "test_case": result.test_case.name,
            "test_suite": result.test_case.test_suite,
            "file": display_file(result.test_case.file, options),
            "line": display_line(result.test_case.line, options),
            "status": result.status,
            "duration": result.duration,
            "message": result.message,
        }
        for result in results
    ]
    return {
        "total": len(entries),
        "passed": sum(1 for e in entries if e["status"] == "success"),
        "failed": sum(1 for e in entries if e["status"] == "failure"),
        "errors": sum(1 for e in entries if e["status"] == "error"),
        "timeouts": sum(1 for e in entries if e["status"] == "timeout"),
        "skipped": sum(1 for e in entries if e["status"] == "skipped"),
        "asserts": {
            "total": stats.num_asserts,
            "failed": stats.num_asserts_failed,
        },
        "results": entries,
    }


def format_query(query: QueryData, options: RunOptions) -> Mapping[str, Any]:
    """Format the result of a query mode run for JSON output."""
    output: dict[str, Any] = {"query": query.kind}
    if query.run_stats is not None:
        output["test_cases_passing_filters"] = query.run_stats.num_test_cases_passing_filters
    if query.kind == "list_test_suites":
        output["test_suites"] = [tc.test_suite for tc in query.data]
    elif query.kind == "list_test_cases":
        output["test_cases"] = [
            {
                "name": tc.name,
                "test_suite": tc.test_suite,
                "file": display_file(tc.file, options),
                "line": display_line(tc.line, options),
            }
            for tc in query.data
        ]
    elif query.kind == "list_reporters":
        output["reporters"] = [
            {"name": info.name, "priority": info.priority, "listener": info.is_listener}
            for info in query.reporters
        ]
    return output


class JsonSummaryReporter(Reporter):
    """Collect one result per test case and print a JSON summary at the end."""

    def __init__(self, options: RunOptions, stream: TextIO) -> None:
        self.options = options
        self.stream = stream
        self.results: list[CaseResult] = []
        self.test_case: TestCaseData | None = None
        self.message: str | None = None

    @classmethod
    def from_options(cls, options: RunOptions, stream: TextIO) -> "JsonSummaryReporter":
        return cls(options, stream)

    def report_query(self, query: QueryData) -> None:
        self._dump(format_query(query, self.options))

    def test_case_start(self, test_case: TestCaseData) -> None:
        self.test_case = test_case
        self.message = None

    def test_case_exception(self, exception: TestCaseException) -> None:
        if self.message is None:
            self.message = exception.error_string

    def test_case_end(self, stats: CurrentTestCaseStats) -> None:
        if self.test_case is None:
            return
        self.results.append(
            CaseResult(
                test_case=self.test_case,
                status=case_status(stats),
                duration=stats.seconds,
                message=self.message,
            )
        )
        self.test_case = None

    def test_case_skipped(self, test_case: TestCaseData) -> None:
        self.results.append(CaseResult(test_case=test_case, status="skipped", duration=0.0))

    def test_run_end(self, stats: TestRunStats) -> None:
        self._dump(format_output(self.results, stats, self.options))

    def _dump(self, output: Mapping[str, Any]) -> None:
        self.stream.write(json.dumps(output, indent=2))
        self.stream.write("\n")
        self.stream.flush()
