"""Test descriptors and the payloads handed to reporters."""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Literal

from casewalk.models.types import (
    OK_TO_FAIL,
    AssertKind,
    Severity,
    TestCaseFailureReason,
)

type TestBody = Callable[[Any], Any]


@dataclass(frozen=True, kw_only=True)
class TestCaseData:
    """Registered test case: identity, decorators and the body to invoke."""

    __test__ = False

    file: str
    line: int
    name: str
    test_suite: str = ""
    description: str | None = None
    skip: bool = False
    may_fail: bool = False
    should_fail: bool = False
    expected_failures: int = 0
    timeout: float = 0.0
    body: Callable[[Any], Any] = field(compare=False, repr=False)

    @property
    def key(self) -> tuple[str, int, str]:
        """Identity used to ignore duplicate registrations."""
        return (self.file, self.line, self.name)


@dataclass(frozen=True, kw_only=True, order=True)
class SubcaseSignature:
    """Identity of one subcase occurrence, ordered by line, file, name."""

    line: int
    file: str
    name: str


@dataclass(frozen=True, kw_only=True)
class AssertData:
    """Outcome of one evaluated assertion."""

    test_case: TestCaseData | None
    severity: Severity
    kind: AssertKind
    file: str
    line: int
    expr: str
    failed: bool
    threw: bool = False
    exception: str = ""
    decomp: str = ""
    threw_as: bool = False
    exception_type: str | None = None
    exception_string: str | None = None
    contexts: Sequence[str] = ()


@dataclass(frozen=True, kw_only=True)
class MessageData:
    """A message logged from inside a test body."""

    string: str
    file: str
    line: int
    severity: Severity
    contexts: Sequence[str] = ()


@dataclass(frozen=True, kw_only=True)
class TestCaseException:
    """An uncaught exception or a crash inside a test case."""

    __test__ = False

    error_string: str
    is_crash: bool
    contexts: Sequence[str] = ()


@dataclass(frozen=True, kw_only=True)
class CurrentTestCaseStats:
    """Statistics of a finished test case, including its failure flags."""

    num_asserts: int
    num_asserts_failed: int
    seconds: float
    failure_flags: TestCaseFailureReason

    @property
    def failed(self) -> bool:
        """Whether the test case counts as failed once decorators are applied."""
        return bool(self.failure_flags) and not (self.failure_flags & OK_TO_FAIL)


@dataclass(frozen=True, kw_only=True)
class TestRunStats:
    """Totals for a whole run."""

    __test__ = False

    num_test_cases: int = 0
    num_test_cases_passing_filters: int = 0
    num_test_suites_passing_filters: int = 0
    num_test_cases_failed: int = 0
    num_asserts: int = 0
    num_asserts_failed: int = 0


@dataclass(frozen=True, kw_only=True)
class ReporterInfo:
    """An installed reporter or listener, as shown by ``--list-reporters``."""

    name: str
    priority: int
    is_listener: bool


QueryKind = Literal[
    "version",
    "list_reporters",
    "no_run",
    "count",
    "list_test_cases",
    "list_test_suites",
]


@dataclass(frozen=True, kw_only=True)
class QueryData:
    """Result of a query-mode run: nothing is executed."""

    kind: QueryKind
    run_stats: TestRunStats | None = None
    data: Sequence[TestCaseData] = ()
    reporters: Sequence[ReporterInfo] = ()
