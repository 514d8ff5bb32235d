import random

import pytest

from random_walk import clamp, next_value
from conftest import FixedSource


def test_next_value_is_drift_plus_centred_noise():
    assert next_value(100.0, 10.0, drift=1.0, rng=FixedSource(0.5)) == 101.0
    assert next_value(100.0, 10.0, drift=1.0, rng=FixedSource(1.0)) == 106.0
    assert next_value(100.0, 10.0, drift=1.0, rng=FixedSource(0.0)) == 96.0


def test_next_value_stays_within_half_spread():
    rng = random.Random(1)
    for _ in range(1000):
        assert abs(next_value(50.0, 4.0, rng=rng) - 50.0) <= 2.0


def test_next_value_reproducible_with_seed():
    first, second = random.Random(3), random.Random(3)
    a = [next_value(10.0, 1.0, rng=first) for _ in range(5)]
    b = [next_value(10.0, 1.0, rng=second) for _ in range(5)]
    assert a == b


@pytest.mark.parametrize("value,expected", [(-5.0, 0.0), (5.0, 5.0), (500.0, 100.0)])
def test_clamp(value, expected):
    assert clamp(value, 0.0, 100.0) == expected
