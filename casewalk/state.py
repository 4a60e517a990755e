"""Mutable state of one run and failure classification of test cases."""

import threading
from dataclasses import dataclass, field

from casewalk.models.data import CurrentTestCaseStats, TestCaseData, TestRunStats
from casewalk.models.types import Severity, TestCaseFailureReason
from casewalk.subcase import SubcaseTracker


class AtomicCounter:
    """Integer counter that may be incremented from several threads."""

    def __init__(self) -> None:
        self._value = 0
        self._lock = threading.Lock()

    def increment(self) -> int:
        with self._lock:
            self._value += 1
            return self._value

    def reset(self) -> None:
        with self._lock:
            self._value = 0

    @property
    def value(self) -> int:
        with self._lock:
            return self._value


def classify(
    test_case: TestCaseData,
    failure_flags: TestCaseFailureReason,
    num_asserts_failed: int,
    seconds: float,
) -> TestCaseFailureReason:
    """Reconcile the observed failures with the test case decorators.

    ``should_fail`` inverts the verdict, ``may_fail`` tolerates any failure
    and ``expected_failures`` requires an exact number of failed assertions.
    A timeout is a failure like any other.
    """
    flags = failure_flags
    if num_asserts_failed:
        flags |= TestCaseFailureReason.ASSERT_FAILURE
    if test_case.timeout > 0 and seconds > test_case.timeout:
        flags |= TestCaseFailureReason.TIMEOUT

    if test_case.should_fail:
        if flags:
            flags |= TestCaseFailureReason.SHOULD_HAVE_FAILED_AND_DID
        else:
            flags |= TestCaseFailureReason.SHOULD_HAVE_FAILED_BUT_DIDNT
    elif flags and test_case.may_fail:
        flags |= TestCaseFailureReason.COULD_HAVE_FAILED_AND_DID
    elif test_case.expected_failures > 0:
        if num_asserts_failed == test_case.expected_failures:
            flags |= TestCaseFailureReason.FAILED_EXACTLY_NUM_TIMES
        else:
            flags |= TestCaseFailureReason.DIDNT_FAIL_EXACTLY_NUM_TIMES
    return flags


@dataclass(kw_only=True)
class RunState:
    """Everything that changes while a run is in progress."""

    num_test_cases: int = 0
    num_test_cases_passing_filters: int = 0
    num_test_suites_passing_filters: int = 0
    num_test_cases_failed: int = 0
    num_asserts: int = 0
    num_asserts_failed: int = 0

    current_test: TestCaseData | None = None
    failure_flags: TestCaseFailureReason = TestCaseFailureReason.NONE
    asserts_current_test: AtomicCounter = field(default_factory=AtomicCounter)
    asserts_failed_current_test: AtomicCounter = field(default_factory=AtomicCounter)

    subcases: SubcaseTracker = field(default_factory=SubcaseTracker)
    should_log_current_exception: bool = True
    stringified_contexts: list[str] = field(default_factory=list)

    def begin_test_case(self, test_case: TestCaseData) -> None:
        """Reset per-test data; the subcase memo starts empty."""
        self.current_test = test_case
        self.failure_flags = TestCaseFailureReason.NONE
        self.asserts_current_test.reset()
        self.asserts_failed_current_test.reset()
        self.subcases.reset_test_case()

    def begin_invocation(self) -> None:
        """Reset what must not survive a re-invocation of the same test."""
        self.subcases.reset_invocation()
        self.should_log_current_exception = True
        self.stringified_contexts.clear()

    def add_assert(self, severity: Severity, failed: bool) -> None:
        """Count an assertion of the running test; warnings are not counted."""
        if severity & Severity.WARN:
            return
        self.asserts_current_test.increment()
        if failed:
            self.asserts_failed_current_test.increment()

    def failed_asserts_so_far(self) -> int:
        """Failed assertions of the run including the running test case."""
        return self.num_asserts_failed + self.asserts_failed_current_test.value

    def finalize_test_case(self, seconds: float) -> CurrentTestCaseStats:
        """Fold the atomic counters into the run totals and classify."""
        test_case = self.current_test
        assert test_case is not None, "no test case is running"

        num_asserts = self.asserts_current_test.value
        num_failed = self.asserts_failed_current_test.value
        self.num_asserts += num_asserts
        self.num_asserts_failed += num_failed

        self.failure_flags = classify(test_case, self.failure_flags, num_failed, seconds)
        stats = CurrentTestCaseStats(
            num_asserts=num_asserts,
            num_asserts_failed=num_failed,
            seconds=seconds,
            failure_flags=self.failure_flags,
        )
        if stats.failed:
            self.num_test_cases_failed += 1
        return stats

    def run_stats(self) -> TestRunStats:
        """Snapshot of the run totals."""
        return TestRunStats(
            num_test_cases=self.num_test_cases,
            num_test_cases_passing_filters=self.num_test_cases_passing_filters,
            num_test_suites_passing_filters=self.num_test_suites_passing_filters,
            num_test_cases_failed=self.num_test_cases_failed,
            num_asserts=self.num_asserts,
            num_asserts_failed=self.num_asserts_failed,
        )
