"""XML reporter building one document per run with :mod:`xml.etree.ElementTree`."""

import sys
import xml.etree.ElementTree as ET
from collections.abc import Sequence
from pathlib import PurePath
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
from casewalk.models.types import AssertKind, assert_string, failure_string
from casewalk.reporters.base import Reporter
from casewalk.reporters.location import display_file, display_line
from casewalk.version import __version__

DECLARATION = '<?xml version="1.0" encoding="UTF-8"?>\n'


def _text(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


class XmlReporter(Reporter):
    """Emit test suites, test cases, subcases and failed assertions as XML.

    Test cases are grouped under ``TestSuite`` elements in run order; a new
    suite element is opened whenever the suite name changes. The document is
    written when the run (or the query) ends.
    """

    def __init__(self, options: RunOptions, stream: TextIO) -> None:
        self.options = options
        self.stream = stream
        self.root: ET.Element | None = None
        self.open_elements: list[ET.Element] = []
        self.test_case: TestCaseData | None = None

    @classmethod
    def from_options(cls, options: RunOptions, stream: TextIO) -> "XmlReporter":
        return cls(options, stream)

    def _start(self, tag: str, **attributes: object) -> ET.Element:
        element = self._element(tag, **attributes)
        self.open_elements.append(element)
        return element

    def _element(self, tag: str, text: str | None = None, **attributes: object) -> ET.Element:
        parent = self.open_elements[-1]
        element = ET.SubElement(
            parent,
            tag,
            {key: _text(value) for key, value in attributes.items() if value is not None},
        )
        if text is not None:
            element.text = text
        return element

    def _end(self) -> None:
        self.open_elements.pop()

    def _location(self, file: str, line: int) -> dict[str, object]:
        return {
            "filename": display_file(file, self.options),
            "line": display_line(line, self.options),
        }

    def _contexts(self, contexts: Sequence[str]) -> None:
        for context in contexts:
            self._element("Info", context)

    def _flush(self) -> None:
        assert self.root is not None
        ET.indent(self.root)
        self.stream.write(DECLARATION)
        self.stream.write(ET.tostring(self.root, encoding="unicode"))
        self.stream.write("\n")
        self.stream.flush()
        self.root = None
        self.open_elements.clear()
        self.test_case = None

    def _open_test_case(self, test_case: TestCaseData) -> ET.Element:
        if self.test_case is None or self.test_case.test_suite != test_case.test_suite:
            if self.test_case is not None:
                self._end()
            self._start("TestSuite", name=test_case.test_suite)
        self.test_case = test_case

        element = self._start(
            "TestCase",
            name=test_case.name,
            **self._location(test_case.file, test_case.line),
            description=test_case.description,
        )
        if test_case.timeout:
            element.set("timeout", _text(test_case.timeout))
        if test_case.may_fail:
            element.set("may_fail", "true")
        if test_case.should_fail:
            element.set("should_fail", "true")
        return element

    def test_run_start(self) -> None:
        binary = PurePath(sys.argv[0]).name if sys.argv and sys.argv[0] else "casewalk"
        self.root = ET.Element("casewalk", {"binary": binary})
        if not self.options.no_version:
            self.root.set("version", __version__)
        self.open_elements = [self.root]
        opts = self.options
        self._element(
            "Options",
            order_by=opts.order_by,
            rand_seed=opts.rand_seed,
            first=opts.first,
            last=opts.last if opts.last is not None else "",
            abort_after=opts.abort_after,
            subcase_filter_levels=opts.subcase_filter_levels,
            case_sensitive=opts.case_sensitive,
            no_throw=opts.no_throw,
            no_skip=opts.no_skip,
        )

    def report_query(self, query: QueryData) -> None:
        self.test_run_start()
        match query.kind:
            case "list_reporters":
                for info in query.reporters:
                    self._element(
                        "Listener" if info.is_listener else "Reporter",
                        priority=info.priority,
                        name=info.name,
                    )
            case "count" | "list_test_cases":
                for test_case in query.data:
                    self._element(
                        "TestCase",
                        name=test_case.name,
                        testsuite=test_case.test_suite,
                        **self._location(test_case.file, test_case.line),
                    )
                self._overall_test_cases(query)
            case "list_test_suites":
                for test_case in query.data:
                    self._element("TestSuite", name=test_case.test_suite)
                self._overall_test_cases(query)
                suites = query.run_stats.num_test_suites_passing_filters if query.run_stats else 0
                self._element("OverallResultsTestSuites", unskipped=suites)
        self._flush()

    def _overall_test_cases(self, query: QueryData) -> None:
        passing = query.run_stats.num_test_cases_passing_filters if query.run_stats else 0
        self._element("OverallResultsTestCases", unskipped=passing)

    def test_run_end(self, stats: TestRunStats) -> None:
        if self.root is None:
            return
        # closes the open TestSuite element
        if self.test_case is not None:
            del self.open_elements[1:]
        self._element(
            "OverallResultsAsserts",
            successes=stats.num_asserts - stats.num_asserts_failed,
            failures=stats.num_asserts_failed,
        )
        self._element(
            "OverallResultsTestCases",
            successes=stats.num_test_cases_passing_filters - stats.num_test_cases_failed,
            failures=stats.num_test_cases_failed,
            skipped=stats.num_test_cases - stats.num_test_cases_passing_filters,
        )
        self._flush()

    def test_case_start(self, test_case: TestCaseData) -> None:
        self._open_test_case(test_case)

    def test_case_end(self, stats: CurrentTestCaseStats) -> None:
        element = self._element(
            "OverallResultsAsserts",
            successes=stats.num_asserts - stats.num_asserts_failed,
            failures=stats.num_asserts_failed,
        )
        if self.options.duration:
            element.set("duration", _text(stats.seconds))
        if self.test_case is not None and self.test_case.expected_failures:
            element.set("expected_failures", _text(self.test_case.expected_failures))
        self._end()

    def test_case_exception(self, exception: TestCaseException) -> None:
        self._element("Exception", exception.error_string, crash=exception.is_crash)

    def subcase_start(self, signature: SubcaseSignature) -> None:
        self._start(
            "SubCase", name=signature.name, **self._location(signature.file, signature.line)
        )

    def subcase_end(self) -> None:
        self._end()

    def log_assert(self, data: AssertData) -> None:
        if not data.failed and not self.options.success:
            return
        self._start(
            "Expression",
            success=not data.failed,
            type=assert_string(data.severity, data.kind),
            **self._location(data.file, data.line),
        )
        self._element("Original", data.expr)
        if data.threw:
            self._element("Exception", data.exception)
        if data.kind in (AssertKind.THROWS_AS, AssertKind.THROWS_WITH_AS):
            self._element("ExpectedException", data.exception_type or "")
        if data.kind in (AssertKind.THROWS_WITH, AssertKind.THROWS_WITH_AS):
            self._element("ExpectedExceptionString", data.exception_string or "")
        if not data.kind.is_throw_family and not data.threw:
            self._element("Expanded", data.decomp)
        self._contexts(data.contexts)
        self._end()

    def log_message(self, data: MessageData) -> None:
        self._start(
            "Message",
            type=failure_string(data.severity),
            **self._location(data.file, data.line),
        )
        self._element("Text", data.string)
        self._contexts(data.contexts)
        self._end()

    def test_case_skipped(self, test_case: TestCaseData) -> None:
        element = self._open_test_case(test_case)
        element.set("skipped", "true")
        self._end()
