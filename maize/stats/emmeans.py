"""Estimated marginal means from a fitted factor model.

Each level mean is the model prediction ``L @ beta`` for that level, with
standard error ``sqrt(L Σ Lᵀ)`` taken from the coefficient covariance matrix
``Σ``. The SEs therefore use the pooled residual variance of the model rather
than each group's own spread.
"""

from __future__ import annotations

import math

import numpy as np
import pandas as pd

from ..errors import InvalidInputError
from .intervals import t_multiplier
from .regression import INTERCEPT, LinearModel


def level_contrast(model: LinearModel, level: str) -> np.ndarray:
    """Return the row vector ``L`` that predicts the mean of ``level``."""
    if level not in model.levels:
        raise InvalidInputError("level", level, f"one of {list(model.levels)}")
    weights = {term: 0.0 for term in model.terms}
    weights[INTERCEPT] = 1.0
    if level != model.reference_level:
        weights[f"{model.factor}{level}"] = 1.0
    return np.array([weights[term] for term in model.terms], dtype=float)


def estimated_marginal_means(model: LinearModel, level: float = 0.95) -> pd.DataFrame:
    """Compute the model-implied mean and confidence interval for each factor level.

    Args:
        model: Model returned by :func:`maize.stats.regression.fit_with_factor`.
        level: Confidence level for the intervals. Defaults to 95%.

    Returns:
        pd.DataFrame: Columns ``<factor>``, ``emmean``, ``se``, ``df``,
        ``lower_cl``, ``upper_cl`` and ``level``, one row per factor level in
        model order (reference first).

    Raises:
        InvalidInputError: If ``model`` has no factor or ``level`` is invalid.
    """
    if not model.has_factor:
        raise InvalidInputError("model", model.formula, "a model fitted with a factor")

    beta = model.params.to_numpy(dtype=float)
    cov = model.cov_params.loc[list(model.terms), list(model.terms)].to_numpy(dtype=float)
    mult = t_multiplier(level, model.df_resid)

    rows = []
    for lvl in model.levels:
        contrast = level_contrast(model, lvl)
        emmean = float(contrast @ beta)
        se = float(math.sqrt(contrast @ cov @ contrast))
        rows.append(
            {
                model.factor: lvl,
                "emmean": emmean,
                "se": se,
                "df": model.df_resid,
                "lower_cl": emmean - mult * se,
                "upper_cl": emmean + mult * se,
                "level": float(level),
            }
        )
    return pd.DataFrame.from_records(rows)
