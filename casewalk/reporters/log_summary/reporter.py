"""Listener writing a results summary through :mod:`logging`."""

import logging
from collections.abc import Sequence
from typing import TextIO

from casewalk.models.data import (
    CurrentTestCaseStats,
    TestCaseData,
    TestCaseException,
    TestRunStats,
)
from casewalk.models.options import RunOptions
from casewalk.reporters.base import Reporter
from casewalk.reporters.json_summary.reporter import CaseResult, case_status

log = logging.getLogger("casewalk")

STATUS_SYMBOLS = {
    "success": "✅",
    "failure": "❌",
    "error": "❗",
    "timeout": "⏱️",
}


def log_results_summary(
    log: logging.Logger, results: Sequence[CaseResult], stats: TestRunStats
) -> None:
    """Log a formatted summary of test case results."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for result in results:
        symbol = STATUS_SYMBOLS.get(result.status, "?")
        log.info(
            "%s %s: %s (%.2fs)",
            symbol,
            result.test_case.name,
            result.status,
            result.duration,
        )
        if result.message:
            log.info("  Message: %s", result.message)

    log.info(
        "%d test case(s), %d failed, %d skipped; %d assertion(s), %d failed",
        stats.num_test_cases_passing_filters,
        stats.num_test_cases_failed,
        stats.num_test_cases - stats.num_test_cases_passing_filters,
        stats.num_asserts,
        stats.num_asserts_failed,
    )


class LogSummaryListener(Reporter):
    """Remember every finished test case and log a summary when the run ends."""

    def __init__(self, options: RunOptions, logger: logging.Logger = log) -> None:
        self.options = options
        self.logger = logger
        self.results: list[CaseResult] = []
        self.test_case: TestCaseData | None = None
        self.message: str | None = None

    @classmethod
    def from_options(cls, options: RunOptions, stream: TextIO) -> "LogSummaryListener":
        return cls(options)

    def test_case_start(self, test_case: TestCaseData) -> None:
        self.test_case = test_case
        self.message = None

    def test_case_exception(self, exception: TestCaseException) -> None:
        if exception.is_crash:
            self.logger.error("Test case crashed: %s", exception.error_string)
        if self.message is None:
            self.message = exception.error_string

    def test_case_end(self, stats: CurrentTestCaseStats) -> None:
        if self.test_case is None:
            return
        result = CaseResult(
            test_case=self.test_case,
            status=case_status(stats),
            duration=stats.seconds,
            message=self.message,
        )
        self.results.append(result)
        self.logger.debug(
            "Test case completed: name=%s status=%s duration=%.3fs",
            self.test_case.name,
            result.status,
            result.duration,
        )
        self.test_case = None

    def test_run_end(self, stats: TestRunStats) -> None:
        log_results_summary(self.logger, self.results, stats)
