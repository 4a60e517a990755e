"""Tests for approximate floating-point comparison."""

import pytest

from casewalk.approx import DEFAULT_EPSILON, Approx
from casewalk.decomposition import expr, to_string


def test_default_epsilon() -> None:
    """Uses one hundred single-precision epsilons by default."""
    assert Approx(1.0).epsilon == pytest.approx(1.1920928955078125e-05)
    assert DEFAULT_EPSILON == 100 * 2.0**-23


@pytest.mark.parametrize(
    ("value", "other", "expected"),
    [
        (1.0, 1.0, True),
        (1.0, 1.0 + 1e-7, True),
        (1.0, 1.1, False),
        (1000.0, 1000.001, True),
        (0.0, 1e-6, True),
        (0.0, 1e-3, False),
    ],
)
def test_equality_is_symmetric(value: float, other: float, expected: bool) -> None:
    """Gives the same verdict whichever side the approximation is on."""
    assert (Approx(value) == other) is expected
    assert (other == Approx(value)) is expected
    assert (Approx(value) != other) is not expected
    assert (other != Approx(value)) is not expected


def test_ordering_includes_approximate_equality() -> None:
    """Treats <= and >= as strict ordering or approximate equality."""
    close = 1.0 + 1e-7

    assert close <= Approx(1.0)
    assert close >= Approx(1.0)
    assert 0.5 <= Approx(1.0)
    assert not 1.5 <= Approx(1.0)
    assert Approx(1.0) <= 1.5
    assert not Approx(1.0) >= 1.5


def test_epsilon_and_scale() -> None:
    """Widens the tolerance with a larger epsilon or scale."""
    assert Approx(1.0).with_epsilon(0.1) == 1.15
    assert Approx(1.0) != 1.15
    assert Approx(0.0).with_scale(1000.0) == 0.01


def test_call_rebinds_value() -> None:
    """Keeps epsilon and scale when approximating another value."""
    loose = Approx(0.0, epsilon=0.1)

    assert loose(2.0) == 2.1
    assert loose(2.0).epsilon == 0.1


def test_rejects_non_numbers() -> None:
    """Does not compare equal to values that are not numbers."""
    assert Approx(1.0) != "1.0"


def test_repr_and_decomposition() -> None:
    """Renders as Approx( v ) in decomposed assertions."""
    assert repr(Approx(2.5)) == "Approx( 2.5 )"
    assert to_string(Approx(2.5)) == "Approx( 2.5 )"
    result = expr(2.5) == Approx(2.5)
    assert result.passed
    assert result.decomp == "2.5 == Approx( 2.5 )"
