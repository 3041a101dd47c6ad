import math

import numpy as np
import pytest

from maize.errors import InvalidInputError
from maize.stats.intervals import (
    ConfidenceInterval,
    interval_from_se,
    normal_multiplier,
    t_interval,
    t_multiplier,
)


def test_two_se_interval_for_darwin_difference():
    ci = interval_from_se(2.6167, 1.2178, multiplier=2.0)
    assert isinstance(ci, ConfidenceInterval)
    assert np.isclose(ci.lower, 2.6167 - 2 * 1.2178)
    assert np.isclose(ci.upper, 2.6167 + 2 * 1.2178)
    assert ci.lower <= ci.estimate <= ci.upper
    assert np.isclose(ci.level, 0.9545, atol=1e-4)
    assert ci.contains(2.6167)
    assert not ci.contains(0.0)


def test_zero_se_gives_degenerate_interval():
    ci = interval_from_se(-1.5, 0.0)
    assert ci.lower == ci.upper == -1.5
    assert ci.width == 0.0


def test_interval_bounds_are_ordered_for_negative_estimates():
    ci = interval_from_se(-2.6167, 1.0737, multiplier=2.0)
    assert ci.lower <= ci.estimate <= ci.upper


@pytest.mark.parametrize(
    "kwargs",
    [
        {"estimate": math.nan, "se": 1.0},
        {"estimate": 1.0, "se": -0.1},
        {"estimate": 1.0, "se": math.nan},
        {"estimate": 1.0, "se": 1.0, "multiplier": -2.0},
    ],
)
def test_interval_from_se_rejects_bad_inputs(kwargs):
    with pytest.raises(InvalidInputError):
        interval_from_se(**kwargs)


def test_multipliers_match_reference_values():
    assert np.isclose(normal_multiplier(0.95), 1.959964, atol=1e-6)
    assert np.isclose(t_multiplier(0.95, 14), 2.144787, atol=1e-6)
    assert np.isclose(t_multiplier(0.95, 28), 2.048407, atol=1e-6)


def test_t_intervals_widen_with_level():
    widths = [t_interval(2.6167, 1.2178, 14, level).width for level in (0.90, 0.95, 0.99)]
    assert widths[0] < widths[1] < widths[2]


def test_t_interval_records_level():
    ci = t_interval(0.0, 1.0, 10, level=0.99)
    assert ci.level == 0.99
    assert np.isclose(ci.upper, t_multiplier(0.99, 10))


@pytest.mark.parametrize("level", [0.0, 1.0, 1.5, -0.2, math.nan])
def test_invalid_levels_raise(level):
    with pytest.raises(InvalidInputError, match="level"):
        t_multiplier(level, 10)


@pytest.mark.parametrize("df", [0, -3, math.inf, math.nan])
def test_invalid_degrees_of_freedom_raise(df):
    with pytest.raises(InvalidInputError, match="df"):
        t_multiplier(0.95, df)
