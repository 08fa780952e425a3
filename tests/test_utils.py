from __future__ import annotations

import math

import pytest

from core.utils import round2, round4, round_half_up, to_float


def test_rounding_passes_infinities() -> None:
    assert round2(1.005001) == 1.01
    assert round4(0.123456) == 0.1235
    assert round2(math.inf) == math.inf
    assert round4(-math.inf) == -math.inf


def test_to_float_defaults() -> None:
    assert to_float("2.5") == 2.5
    assert to_float(None) == 0.0
    assert to_float("n/a", default=-1.0) == -1.0
    assert to_float(float("nan")) == 0.0


@pytest.mark.parametrize(
    "value,digits,expected",
    [
        (0.125, 2, 0.13),
        (-0.125, 2, -0.12),
        (2.5, 0, 3.0),
        (-2.5, 0, -2.0),
        (0.03125, 4, 0.0313),
    ],
)
def test_round_half_up_breaks_ties_upward(value: float, digits: int, expected: float) -> None:
    assert round_half_up(value, digits) == expected


def test_round2_rounds_halves_up() -> None:
    assert round2(0.125) == 0.13
    assert round2(-0.125) == -0.12
    assert round4(0.03125) == 0.0313
