"""Confidence intervals built from a point estimate and its standard error.

The classroom approximation ``estimate ± 2 * SE`` and the exact
t-distribution interval share one constructor, :func:`interval_from_se`; the
only difference is the multiplier passed in.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from scipy.stats import norm
from scipy.stats import t as student_t

from ..errors import InvalidInputError


@dataclass(frozen=True)
class ConfidenceInterval:
    """Point estimate with symmetric lower/upper bounds at a confidence level."""

    estimate: float
    lower: float
    upper: float
    level: float

    @property
    def width(self) -> float:
        return self.upper - self.lower

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


def _require_level(level: float) -> float:
    lvl = float(level)
    if not (0.0 < lvl < 1.0):
        raise InvalidInputError("level", level, "a value strictly between 0 and 1")
    return lvl


def normal_multiplier(level: float = 0.95) -> float:
    """Return the two-sided standard-normal critical value for ``level``."""
    lvl = _require_level(level)
    return float(norm.ppf(0.5 + lvl / 2.0))


def t_multiplier(level: float, df: float) -> float:
    """Return the two-sided Student t critical value for ``level`` and ``df``.

    Raises:
        InvalidInputError: If ``level`` is outside (0, 1) or ``df`` is not a
            positive finite number.
    """
    lvl = _require_level(level)
    dof = float(df)
    if not math.isfinite(dof) or dof <= 0:
        raise InvalidInputError("df", df, "a positive number")
    return float(student_t.ppf(0.5 + lvl / 2.0, dof))


def interval_from_se(
    estimate: float,
    se: float,
    multiplier: float = 2.0,
    level: float | None = None,
) -> ConfidenceInterval:
    """Build ``estimate ± multiplier * se``.

    Args:
        estimate: Point estimate (any sign).
        se: Standard error, ``>= 0``.
        multiplier: Critical value, ``>= 0``. ``2`` gives the approximate 95%
            normal interval used in class.
        level: Confidence level to record. When omitted, the level implied by
            treating ``multiplier`` as a standard-normal quantile is stored
            (``2`` records about 0.954).

    Raises:
        InvalidInputError: If ``estimate`` is NaN, or ``se`` or ``multiplier``
            is NaN or negative.
    """
    est = float(estimate)
    if math.isnan(est):
        raise InvalidInputError("estimate", estimate, "a number")
    se_val = float(se)
    if math.isnan(se_val) or se_val < 0:
        raise InvalidInputError("se", se, "a non-negative number")
    mult = float(multiplier)
    if math.isnan(mult) or mult < 0:
        raise InvalidInputError("multiplier", multiplier, "a non-negative number")

    if level is None:
        recorded = float(2.0 * norm.cdf(mult) - 1.0)
    else:
        recorded = _require_level(level)

    half_width = mult * se_val
    return ConfidenceInterval(
        estimate=est,
        lower=est - half_width,
        upper=est + half_width,
        level=recorded,
    )


def t_interval(
    estimate: float, se: float, df: float, level: float = 0.95
) -> ConfidenceInterval:
    """Exact-coverage interval using a t critical value on ``df`` degrees of freedom."""
    return interval_from_se(estimate, se, multiplier=t_multiplier(level, df), level=level)
