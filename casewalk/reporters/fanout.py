"""Delivery of every event to all attached sinks."""

import threading
from collections.abc import Sequence

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
from casewalk.reporters.base import Reporter


class ReporterFanout(Reporter):
    """Forward each event to listeners first, then to reporters.

    Delivery is serialized by one re-entrant lock, so an event raised from a
    worker thread reaches every sink completely before the next one starts.
    The lock is re-entrant: a crash handler may report from the thread that
    is in the middle of a delivery.
    """

    def __init__(
        self, listeners: Sequence[Reporter] = (), reporters: Sequence[Reporter] = ()
    ) -> None:
        self.sinks: tuple[Reporter, ...] = (*listeners, *reporters)
        self._lock = threading.RLock()

    def report_query(self, query: QueryData) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.report_query(query)

    def test_run_start(self) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_run_start()

    def test_run_end(self, stats: TestRunStats) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_run_end(stats)

    def test_case_start(self, test_case: TestCaseData) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_case_start(test_case)

    def test_case_reenter(self, test_case: TestCaseData) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_case_reenter(test_case)

    def test_case_end(self, stats: CurrentTestCaseStats) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_case_end(stats)

    def test_case_exception(self, exception: TestCaseException) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_case_exception(exception)

    def subcase_start(self, signature: SubcaseSignature) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.subcase_start(signature)

    def subcase_end(self) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.subcase_end()

    def log_assert(self, data: AssertData) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.log_assert(data)

    def log_message(self, data: MessageData) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.log_message(data)

    def test_case_skipped(self, test_case: TestCaseData) -> None:
        with self._lock:
            for sink in self.sinks:
                sink.test_case_skipped(test_case)
