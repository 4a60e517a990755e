"""Tests for test case registration."""

import pytest

from casewalk.context import TestContext
from casewalk.registry import Registry
from casewalk.testing.factories import TestCaseDataFactory


def test_test_case_decorator_registers_declaration(registry: Registry) -> None:
    """Registers the function with its name and source location."""

    @registry.test_case(description="adds numbers", timeout=2.0)
    def addition(t: TestContext) -> None:
        pass

    (test_case,) = list(registry)
    assert test_case.name == "addition"
    assert test_case.file == __file__
    assert test_case.line == addition.__code__.co_firstlineno
    assert test_case.description == "adds numbers"
    assert test_case.timeout == 2.0
    assert test_case.body is addition


def test_test_case_decorator_accepts_name(registry: Registry) -> None:
    """Uses the given name instead of the function name."""

    @registry.test_case("vectors can be sized")
    def body(t: TestContext) -> None:
        pass

    assert [tc.name for tc in registry] == ["vectors can be sized"]


def test_register_ignores_duplicates(registry: Registry) -> None:
    """Registers the same declaration only once."""
    test_case = TestCaseDataFactory.build()

    registry.register(test_case)
    registry.register(test_case)

    assert len(registry) == 1


def test_test_suite_applies_defaults(registry: Registry) -> None:
    """Applies suite defaults and lets test cases override them."""
    suite = registry.test_suite("io", may_fail=True, timeout=1.0)

    @suite.test_case()
    def read(t: TestContext) -> None:
        pass

    @suite.test_case(may_fail=False)
    def write(t: TestContext) -> None:
        pass

    read_case, write_case = list(registry)
    assert read_case.test_suite == "io"
    assert read_case.may_fail
    assert read_case.timeout == 1.0
    assert write_case.test_suite == "io"
    assert not write_case.may_fail


def test_translate_uses_latest_matching_translator(registry: Registry) -> None:
    """Prefers the most recently registered translator for the exception."""

    @registry.exception_translator(Exception)
    def generic(exc: Exception) -> str:
        return "generic"

    @registry.exception_translator(LookupError)
    def lookup(exc: LookupError) -> str:
        return f"lookup: {exc}"

    assert registry.translate(KeyError("k")) == "lookup: 'k'"
    assert registry.translate(ValueError("v")) == "generic"


@pytest.mark.parametrize(
    ("exc", "expected"),
    [(ValueError("bad value"), "bad value"), (RuntimeError(), "RuntimeError")],
)
def test_translate_falls_back_to_message_or_type(
    registry: Registry, exc: Exception, expected: str
) -> None:
    """Uses the exception message, or the type name when it is empty."""
    assert registry.translate(exc) == expected
