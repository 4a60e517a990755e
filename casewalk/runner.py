"""Run driver: filtering, ordering and re-invocation of registered test cases."""

import asyncio
import inspect
import logging
import random
import sys
import time
from collections.abc import Sequence
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import TextIO

from casewalk.assertions import RequireFailure
from casewalk.context import TestContext
from casewalk.fatal import FatalConditionError, make_fatal_guard
from casewalk.filters import in_execution_range, passes_filters
from casewalk.models.data import QueryData, QueryKind, TestCaseData, TestCaseException
from casewalk.models.options import RunOptions
from casewalk.models.types import TestCaseFailureReason
from casewalk.reporters.base import Reporter
from casewalk.reporters.fanout import ReporterFanout
from casewalk.reporters.loading import describe_installed, load_listeners, select_reporters
from casewalk.registry import Registry
from casewalk.state import RunState

log = logging.getLogger(__name__)


def order_tests(
    tests: Sequence[TestCaseData], options: RunOptions
) -> Sequence[TestCaseData]:
    """Return the test cases in the order requested by ``options.order_by``."""
    ordered = list(tests)
    match options.order_by:
        case "file":
            ordered.sort(key=lambda tc: (tc.file, tc.line))
        case "suite":
            ordered.sort(key=lambda tc: (tc.test_suite, tc.file, tc.line))
        case "name":
            ordered.sort(key=lambda tc: (tc.name, tc.test_suite, tc.file, tc.line))
        case "rand":
            ordered.sort(key=lambda tc: (tc.file, tc.line))
            random.Random(options.rand_seed).shuffle(ordered)
    return ordered


def _query_kind(options: RunOptions) -> QueryKind | None:
    if options.version:
        return "version"
    if options.list_reporters:
        return "list_reporters"
    if options.no_run:
        return "no_run"
    if options.count:
        return "count"
    if options.list_test_cases:
        return "list_test_cases"
    if options.list_test_suites:
        return "list_test_suites"
    return None


@dataclass(frozen=True, kw_only=True)
class TestRunner:
    """Runs the test cases of a registry and reports to the attached sinks.

    Reporters and listeners default to the installed plugins selected by
    ``options.reporters``; passing them explicitly bypasses plugin loading
    (no listeners are attached unless given).
    """

    __test__ = False

    registry: Registry
    options: RunOptions = field(default_factory=RunOptions)
    reporters: Sequence[Reporter] | None = None
    listeners: Sequence[Reporter] | None = None
    stream: TextIO | None = None

    def run(self) -> int:
        """Execute the run and return the process exit code.

        Returns:
            1 when at least one test case failed (or crashed), 0 otherwise or
            when ``options.no_exitcode`` is set

        Raises:
            ReporterNotFoundError: If a requested reporter is not installed

        """
        with ExitStack() as stack:
            if self.options.out is not None:
                stream: TextIO = stack.enter_context(
                    self.options.out.open("w", encoding="utf-8")
                )
            else:
                stream = self.stream or sys.stdout

            session = RunSession(
                registry=self.registry,
                options=self.options,
                reporter=self._attach(stream),
            )
            state = session.execute()

        if state.num_test_cases_failed and not self.options.no_exitcode:
            return 1
        return 0

    def _attach(self, stream: TextIO) -> ReporterFanout:
        if self.reporters is not None:
            return ReporterFanout(
                reporters=self.reporters, listeners=self.listeners or ()
            )
        reporters = [
            manifest.reporter_factory(self.options, stream)
            for _, manifest in select_reporters(
                self.options.reporters, self.options.case_sensitive
            )
        ]
        if self.listeners is not None:
            listeners: Sequence[Reporter] = self.listeners
        else:
            listeners = [
                manifest.reporter_factory(self.options, stream)
                for _, manifest in load_listeners()
            ]
        return ReporterFanout(reporters=reporters, listeners=listeners)


class RunSession:
    """State machine of one run; created afresh by :meth:`TestRunner.run`."""

    def __init__(self, *, registry: Registry, options: RunOptions, reporter: Reporter) -> None:
        self.registry = registry
        self.options = options
        self.reporter = reporter
        self.state = RunState()
        self.crashed = False
        self._started = 0.0

    def execute(self) -> RunState:
        options = self.options
        kind = _query_kind(options)
        if kind in ("version", "list_reporters", "no_run"):
            self.reporter.report_query(
                QueryData(
                    kind=kind,
                    reporters=describe_installed() if kind == "list_reporters" else (),
                )
            )
            return self.state

        tests = order_tests(list(self.registry), options)
        self.state.num_test_cases = len(tests)
        listed: list[TestCaseData] = []
        suites_seen: set[str] = set()

        if kind is None:
            log.info("Running %d registered test case(s)", len(tests))
            self.reporter.test_run_start()

        for test_case in tests:
            skip = (test_case.skip and not options.no_skip) or not passes_filters(
                test_case, options
            )
            if not skip:
                self.state.num_test_cases_passing_filters += 1
            if not in_execution_range(self.state.num_test_cases_passing_filters, options):
                skip = True

            if skip:
                if kind is None:
                    self.reporter.test_case_skipped(test_case)
                continue

            if kind == "count":
                continue
            if kind == "list_test_cases":
                listed.append(test_case)
                continue
            if kind == "list_test_suites":
                if test_case.test_suite and test_case.test_suite not in suites_seen:
                    suites_seen.add(test_case.test_suite)
                    listed.append(test_case)
                    self.state.num_test_suites_passing_filters += 1
                continue

            self._run_test_case(test_case)
            if self.crashed:
                log.error("Run stopped after a fatal condition in %s", test_case.name)
                return self.state
            if 0 < options.abort_after <= self.state.num_asserts_failed:
                log.info("Aborting after %d failed assertion(s)", self.state.num_asserts_failed)
                break

        if kind is not None:
            self.reporter.report_query(
                QueryData(kind=kind, run_stats=self.state.run_stats(), data=listed)
            )
            return self.state

        self.reporter.test_run_end(self.state.run_stats())
        log.info(
            "Run finished: %d test case(s) failed, %d assertion(s) failed",
            self.state.num_test_cases_failed,
            self.state.num_asserts_failed,
        )
        return self.state

    def _run_test_case(self, test_case: TestCaseData) -> None:
        state = self.state
        state.begin_test_case(test_case)
        self.reporter.test_case_start(test_case)
        self._started = time.perf_counter()
        log.debug("Test case started: %s", test_case.name)

        run_test = True
        while run_test:
            state.begin_invocation()
            self._invoke(test_case)
            if self.crashed:
                return

            abort_after = self.options.abort_after
            if abort_after > 0 and state.failed_asserts_so_far() >= abort_after:
                run_test = False
                state.failure_flags |= TestCaseFailureReason.TOO_MANY_FAILED_ASSERTS

            if state.subcases.should_reenter and run_test:
                self.reporter.test_case_reenter(test_case)
            if not state.subcases.should_reenter:
                run_test = False

        stats = state.finalize_test_case(time.perf_counter() - self._started)
        self.reporter.test_case_end(stats)
        state.current_test = None
        log.debug(
            "Test case finished: %s failed=%s duration=%.3fs",
            test_case.name,
            stats.failed,
            stats.seconds,
        )

    def _invoke(self, test_case: TestCaseData) -> None:
        """Call the test body once, recording how it ended."""
        state = self.state
        context = TestContext(
            state=state,
            reporter=self.reporter,
            options=self.options,
            translate=self.registry.translate,
        )
        guard = make_fatal_guard(self._report_fatal, self.options.fatal_guard)
        try:
            with guard:
                result = test_case.body(context)
                if inspect.iscoroutine(result):
                    asyncio.run(result)
        except RequireFailure:
            state.failure_flags |= TestCaseFailureReason.ASSERT_FAILURE
        except FatalConditionError as exc:
            log.debug(
                "Test case %s stopped after a fatal condition: %s", test_case.name, exc
            )
        except Exception as exc:
            log.debug("Test case %s raised", test_case.name, exc_info=exc)
            if state.should_log_current_exception:
                state.should_log_current_exception = False
                self.reporter.test_case_exception(
                    TestCaseException(
                        error_string=self.registry.translate(exc),
                        is_crash=False,
                        contexts=tuple(state.stringified_contexts),
                    )
                )
            state.failure_flags |= TestCaseFailureReason.EXCEPTION

    def _report_fatal(self, message: str) -> None:
        """Finish the report of the running test case and the run after a crash."""
        state = self.state
        self.crashed = True
        state.failure_flags |= TestCaseFailureReason.CRASH
        self.reporter.test_case_exception(
            TestCaseException(
                error_string=message,
                is_crash=True,
                contexts=tuple(state.stringified_contexts),
            )
        )
        while state.subcases.stack:
            state.subcases.stack.pop()
            self.reporter.subcase_end()

        stats = state.finalize_test_case(time.perf_counter() - self._started)
        self.reporter.test_case_end(stats)
        self.reporter.test_run_end(state.run_stats())
