"""Tests for event fan-out."""

import threading

from casewalk.reporters.fanout import ReporterFanout
from casewalk.testing.factories import TestCaseDataFactory, TestRunStatsFactory
from casewalk.testing.recording import RecordingReporter


class OrderedReporter(RecordingReporter):
    """Recorder that writes its label into a shared journal."""

    def __init__(self, label: str, journal: list[str]) -> None:
        super().__init__()
        self.label = label
        self.journal = journal

    def test_run_start(self) -> None:
        super().test_run_start()
        self.journal.append(self.label)


def test_listeners_are_notified_before_reporters() -> None:
    """Delivers each event to listeners first, then reporters."""
    journal: list[str] = []
    fanout = ReporterFanout(
        listeners=[OrderedReporter("listener", journal)],
        reporters=[OrderedReporter("r1", journal), OrderedReporter("r2", journal)],
    )

    fanout.test_run_start()

    assert journal == ["listener", "r1", "r2"]


def test_every_callback_reaches_every_sink() -> None:
    """Forwards every callback with its payload."""
    sink = RecordingReporter()
    fanout = ReporterFanout(reporters=[sink])
    test_case = TestCaseDataFactory.build()
    stats = TestRunStatsFactory.build()

    fanout.test_case_start(test_case)
    fanout.subcase_end()
    fanout.test_case_skipped(test_case)
    fanout.test_run_end(stats)

    assert sink.events == [
        ("test_case_start", test_case),
        ("subcase_end", None),
        ("test_case_skipped", test_case),
        ("test_run_end", stats),
    ]


class SlowReporter(RecordingReporter):
    """Recorder that yields between writing two halves of an event."""

    def subcase_end(self) -> None:
        self.events.append(("subcase_end", "begin"))
        threading.Event().wait(0.001)
        self.events.append(("subcase_end", "end"))


def test_delivery_is_serialized_across_threads() -> None:
    """Never interleaves two events delivered from different threads."""
    sink = SlowReporter()
    fanout = ReporterFanout(reporters=[sink])

    threads = [threading.Thread(target=fanout.subcase_end) for _ in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    payloads = [payload for _, payload in sink.events]
    assert payloads == ["begin", "end"] * 8
