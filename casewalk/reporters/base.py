"""Observer interface for the events of a test run."""

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


class Reporter:
    """Sink for run events; every callback defaults to doing nothing.

    For a full run the callbacks arrive in this order::

        test_run_start
          test_case_start
            (subcase_start | subcase_end | log_assert | log_message)*
            [test_case_reenter, ...]   between invocations of the same test
            test_case_exception?       uncaught exception or crash
          test_case_end
          test_case_skipped            instead of start/end for skipped tests
        test_run_end

    Query modes (listing, counting, version) only call ``report_query``.
    """

    def report_query(self, query: QueryData) -> None:
        """Report the result of a query mode run."""

    def test_run_start(self) -> None:
        """Called once before the first test case."""

    def test_run_end(self, stats: TestRunStats) -> None:
        """Called once after the last test case."""

    def test_case_start(self, test_case: TestCaseData) -> None:
        """Called before the first invocation of a test case."""

    def test_case_reenter(self, test_case: TestCaseData) -> None:
        """Called between invocations when subcases remain unexplored."""

    def test_case_end(self, stats: CurrentTestCaseStats) -> None:
        """Called after a test case finished, with its classification."""

    def test_case_exception(self, exception: TestCaseException) -> None:
        """Called for an uncaught exception or a crash."""

    def subcase_start(self, signature: SubcaseSignature) -> None:
        """Called when a subcase is entered."""

    def subcase_end(self) -> None:
        """Called when an entered subcase is left."""

    def log_assert(self, data: AssertData) -> None:
        """Called for every evaluated assertion, passed or not."""

    def log_message(self, data: MessageData) -> None:
        """Called for every message logged by a test body."""

    def test_case_skipped(self, test_case: TestCaseData) -> None:
        """Called for a test case that is filtered out, skipped or out of range."""
