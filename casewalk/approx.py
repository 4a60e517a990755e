"""Approximate floating-point comparison."""

from dataclasses import dataclass, replace
from typing import Any

from casewalk.decomposition import to_string

FLOAT32_EPSILON = 2.0**-23
DEFAULT_EPSILON = FLOAT32_EPSILON * 100


@dataclass(frozen=True)
class Approx:
    """A value that compares equal to anything within a relative tolerance.

    ``a == Approx(b)`` holds when ``|a - b| < epsilon * (scale + max(|a|, |b|))``.
    The relation is symmetric, so the operand order never changes the verdict.
    """

    value: float
    epsilon: float = DEFAULT_EPSILON
    scale: float = 1.0

    def __call__(self, value: float) -> "Approx":
        """Return an approximation of another value with the same tolerance."""
        return replace(self, value=value)

    def with_epsilon(self, epsilon: float) -> "Approx":
        return replace(self, epsilon=epsilon)

    def with_scale(self, scale: float) -> "Approx":
        return replace(self, scale=scale)

    def matches(self, other: float) -> bool:
        margin = self.epsilon * (self.scale + max(abs(other), abs(self.value)))
        return abs(other - self.value) < margin

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Approx):
            return self.matches(other.value)
        if isinstance(other, int | float):
            return self.matches(float(other))
        return NotImplemented

    def __ne__(self, other: object) -> bool:
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    # self <= other / self >= other; the reflected forms come from Python
    # swapping the operands (a <= Approx(b) calls Approx(b).__ge__(a)).
    def __le__(self, other: Any) -> bool:
        if not isinstance(other, int | float):
            return NotImplemented
        return self.value < other or self.matches(float(other))

    def __ge__(self, other: Any) -> bool:
        if not isinstance(other, int | float):
            return NotImplemented
        return self.value > other or self.matches(float(other))

    def __repr__(self) -> str:
        return f"Approx( {to_string(self.value)} )"


@to_string.register
def _(value: Approx) -> str:
    return repr(value)
