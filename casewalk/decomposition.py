"""Human-readable decomposition of assertion operands.

Operands are evaluated by the caller before they reach this module, so a
comparison is applied exactly once and the rendered text always shows the
values that produced the verdict.
"""

import operator
import sys
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from functools import singledispatch
from typing import Any

from casewalk.models.types import Comparison

UNPRINTABLE = "{?}"

COMPARATORS: Mapping[Comparison, Callable[[Any, Any], Any]] = {
    Comparison.EQ: operator.eq,
    Comparison.NE: operator.ne,
    Comparison.LT: operator.lt,
    Comparison.GT: operator.gt,
    Comparison.LE: operator.le,
    Comparison.GE: operator.ge,
}


def raw_memory_to_string(value: Any) -> str:
    """Render the bytes behind a buffer-protocol object, most significant first."""
    data = memoryview(value).tobytes()
    if sys.byteorder == "little":
        data = data[::-1]
    return "0x" + data.hex()


@singledispatch
def to_string(value: Any) -> str:
    """Convert an operand to text; extend with ``to_string.register``.

    Uses the repr, then ``str()`` for types that only define ``__str__``,
    then the raw bytes of buffer-protocol objects.
    """
    value_type = type(value)
    if value_type.__repr__ is not object.__repr__:
        return repr(value)
    if value_type.__str__ is not object.__str__:
        return str(value)
    try:
        return raw_memory_to_string(value)
    except TypeError:
        return UNPRINTABLE


@dataclass(frozen=True, kw_only=True)
class Result:
    """Verdict of an expression together with its decomposed text."""

    passed: bool
    decomp: str

    def __bool__(self) -> bool:
        return self.passed


def stringify_binary(lhs: Any, separator: str, rhs: Any) -> str:
    """Render ``lhs<separator>rhs`` using :func:`to_string` for both sides."""
    return f"{to_string(lhs)}{separator}{to_string(rhs)}"


def decompose(lhs: Any, comparison: Comparison, rhs: Any) -> Result:
    """Evaluate ``lhs <comparison> rhs`` once and describe the operands."""
    passed = bool(COMPARATORS[comparison](lhs, rhs))
    return Result(
        passed=passed, decomp=stringify_binary(lhs, f" {comparison.value} ", rhs)
    )


def decompose_unary(value: Any) -> Result:
    """Decompose a non-comparison expression to its stringified value."""
    return Result(passed=bool(value), decomp=to_string(value))


class Expression:
    """Captured left operand waiting for an optional comparison.

    ``expr(a) == b`` produces a :class:`Result` holding both values; using
    ``expr(a)`` on its own decomposes to ``a``.
    """

    __slots__ = ("lhs",)

    def __init__(self, lhs: Any) -> None:
        self.lhs = lhs

    def __eq__(self, rhs: object) -> Result:  # type: ignore[override]
        return decompose(self.lhs, Comparison.EQ, rhs)

    def __ne__(self, rhs: object) -> Result:  # type: ignore[override]
        return decompose(self.lhs, Comparison.NE, rhs)

    def __lt__(self, rhs: Any) -> Result:
        return decompose(self.lhs, Comparison.LT, rhs)

    def __gt__(self, rhs: Any) -> Result:
        return decompose(self.lhs, Comparison.GT, rhs)

    def __le__(self, rhs: Any) -> Result:
        return decompose(self.lhs, Comparison.LE, rhs)

    def __ge__(self, rhs: Any) -> Result:
        return decompose(self.lhs, Comparison.GE, rhs)

    __hash__ = None  # type: ignore[assignment]

    def result(self) -> Result:
        """Decompose the captured operand without a comparison."""
        return decompose_unary(self.lhs)


def expr(lhs: Any) -> Expression:
    """Capture ``lhs`` so that a chained comparison is decomposed."""
    return Expression(lhs)


def as_result(value: Any) -> Result:
    """Normalize what an assertion received into a :class:`Result`."""
    if isinstance(value, Result):
        return value
    if isinstance(value, Expression):
        return value.result()
    return decompose_unary(value)
