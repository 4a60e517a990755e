"""Tests for operand stringification and decomposition."""

import ctypes
from dataclasses import dataclass

from casewalk.decomposition import (
    UNPRINTABLE,
    Expression,
    Result,
    as_result,
    decompose,
    expr,
    stringify_binary,
    to_string,
)
from casewalk.models.types import Comparison


class Opaque:
    """Type without a textual form of its own."""


class Label:
    """Type with only a ``__str__`` of its own."""

    def __init__(self, text: str) -> None:
        self.text = text

    def __str__(self) -> str:
        return f"label {self.text}"


class Point(ctypes.Structure):
    """Buffer-protocol type without a textual form of its own."""

    _fields_ = [("value", ctypes.c_uint32)]


@dataclass(frozen=True)
class Money:
    """Type with a custom conversion registered below."""

    cents: int


@to_string.register
def _(value: Money) -> str:
    return f"${value.cents / 100:.2f}"


class CountingInt:
    """Integer wrapper counting how often it is compared."""

    def __init__(self, value: int) -> None:
        self.value = value
        self.comparisons = 0

    def __eq__(self, other: object) -> bool:
        self.comparisons += 1
        return self.value == other

    def __repr__(self) -> str:
        return f"CountingInt({self.value})"


def test_to_string_uses_repr() -> None:
    """Renders values with their repr."""
    assert to_string(3) == "3"
    assert to_string("abc") == "'abc'"
    assert to_string([1, None]) == "[1, None]"


def test_to_string_falls_back_to_placeholder() -> None:
    """Renders objects without a textual form as the opaque placeholder."""
    assert to_string(Opaque()) == UNPRINTABLE


def test_to_string_uses_str_without_repr() -> None:
    """Renders types that only define __str__ with str()."""
    assert to_string(Label("north")) == "label north"


def test_to_string_dumps_raw_memory() -> None:
    """Renders buffer-protocol objects without a textual form as a byte dump."""
    assert to_string(Point(0x01020304)) == "0x01020304"


def test_to_string_accepts_registered_conversions() -> None:
    """Uses conversions registered for a type."""
    assert to_string(Money(cents=1250)) == "$12.50"


def test_decompose_renders_operator() -> None:
    """Decomposes a comparison into both operands and the operator."""
    assert decompose(1, Comparison.EQ, 2) == Result(passed=False, decomp="1 == 2")
    assert decompose("a", Comparison.LT, "b") == Result(passed=True, decomp="'a' < 'b'")


def test_decompose_evaluates_comparison_once() -> None:
    """Applies the comparison exactly once."""
    value = CountingInt(5)

    result = decompose(value, Comparison.EQ, 5)

    assert result.passed
    assert value.comparisons == 1
    assert result.decomp == "CountingInt(5) == 5"


def test_expr_captures_left_operand() -> None:
    """Chained comparisons on a captured operand decompose both sides."""
    assert (expr(3) == 4) == Result(passed=False, decomp="3 == 4")
    assert (expr(3) != 4) == Result(passed=True, decomp="3 != 4")
    assert (expr(2) >= 1) == Result(passed=True, decomp="2 >= 1")
    assert (expr(2) <= 1).passed is False


def test_expression_without_comparison_decomposes_value() -> None:
    """An unchained expression decomposes to its value."""
    assert as_result(expr([])) == Result(passed=False, decomp="[]")
    assert isinstance(expr(1), Expression)


def test_as_result_wraps_plain_values() -> None:
    """Plain values become results judged by truthiness."""
    assert as_result(0) == Result(passed=False, decomp="0")
    assert as_result("x") == Result(passed=True, decomp="'x'")


def test_stringify_binary() -> None:
    """Joins both operands with the separator."""
    assert stringify_binary(3, ", ", Money(cents=5)) == "3, $0.05"
