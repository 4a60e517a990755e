"""Enumerations shared by assertions, events and failure classification."""

from enum import IntFlag, StrEnum


class Severity(IntFlag):
    """How a failed assertion or message affects the running test case."""

    WARN = 1
    CHECK = 2
    REQUIRE = 4


class AssertKind(StrEnum):
    """Assertion variant; the value is the suffix used in assertion names."""

    NORMAL = ""
    FALSE = "FALSE"
    UNARY = "UNARY"
    UNARY_FALSE = "UNARY_FALSE"
    EQ = "EQ"
    NE = "NE"
    GT = "GT"
    LT = "LT"
    GE = "GE"
    LE = "LE"
    THROWS = "THROWS"
    THROWS_AS = "THROWS_AS"
    THROWS_WITH = "THROWS_WITH"
    THROWS_WITH_AS = "THROWS_WITH_AS"
    NOTHROW = "NOTHROW"

    @property
    def is_throw_family(self) -> bool:
        """Whether the assertion is about an exception being raised or not."""
        return self in _THROW_FAMILY


_THROW_FAMILY = frozenset(
    {
        AssertKind.THROWS,
        AssertKind.THROWS_AS,
        AssertKind.THROWS_WITH,
        AssertKind.THROWS_WITH_AS,
        AssertKind.NOTHROW,
    }
)


class Comparison(StrEnum):
    """Binary comparison applied by a decomposed assertion."""

    EQ = "=="
    NE = "!="
    LT = "<"
    GT = ">"
    LE = "<="
    GE = ">="


class TestCaseFailureReason(IntFlag):
    """Flags accumulated while a test case runs and when it is finalized."""

    __test__ = False

    NONE = 0
    ASSERT_FAILURE = 1
    EXCEPTION = 2
    CRASH = 4
    TOO_MANY_FAILED_ASSERTS = 8
    TIMEOUT = 16
    SHOULD_HAVE_FAILED_BUT_DIDNT = 32
    SHOULD_HAVE_FAILED_AND_DID = 64
    DIDNT_FAIL_EXACTLY_NUM_TIMES = 128
    FAILED_EXACTLY_NUM_TIMES = 256
    COULD_HAVE_FAILED_AND_DID = 512


OK_TO_FAIL = (
    TestCaseFailureReason.SHOULD_HAVE_FAILED_AND_DID
    | TestCaseFailureReason.COULD_HAVE_FAILED_AND_DID
    | TestCaseFailureReason.FAILED_EXACTLY_NUM_TIMES
)


def assert_string(severity: Severity, kind: AssertKind) -> str:
    """Return the assertion name, e.g. ``CHECK_EQ`` or ``REQUIRE``."""
    if kind is AssertKind.NORMAL:
        return severity.name or ""
    return f"{severity.name}_{kind.value}"


def failure_string(severity: Severity) -> str:
    """Return the label used for a failed assertion of the given severity."""
    if severity & Severity.WARN:
        return "WARNING"
    if severity & Severity.CHECK:
        return "ERROR"
    if severity & Severity.REQUIRE:
        return "FATAL ERROR"
    return ""
