"""Ordinary least-squares models for the maize height comparison.

Two models are supported, both fitted with statsmodels on an explicitly
built design matrix:

- intercept-only (``height ~ 1``), whose single coefficient is the grand mean;
- one categorical factor in treatment coding (``height ~ type``), whose
  intercept is the mean of the reference level and whose slope(s) are the
  differences of the other level means from it.

The reference level is always explicit. Swapping it is done by
:func:`relevel`, which returns a new table; fitting that table returns a new
model and leaves the original untouched.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Dict

import numpy as np
import pandas as pd
import statsmodels.api as sm

from ..errors import DegenerateModelError, InvalidInputError
from ..schema import COLUMNS
from .intervals import ConfidenceInterval, interval_from_se, t_multiplier

logger = logging.getLogger(__name__)

INTERCEPT = "(Intercept)"


def _readonly(values) -> np.ndarray:
    arr = np.array(values, dtype=float, copy=True)
    arr.setflags(write=False)
    return arr


@dataclass(frozen=True)
class LinearModel:
    """Container for a fitted OLS model.

    Coefficient-level quantities are :class:`pandas.Series` indexed by term
    name; observation-level arrays are read-only and aligned with
    ``design.index`` (the row labels of the input table).
    """

    formula: str
    response: str
    design: pd.DataFrame
    y: np.ndarray
    params: pd.Series
    bse: pd.Series
    tvalues: pd.Series
    pvalues: pd.Series
    cov_params: pd.DataFrame
    fitted: np.ndarray
    resid: np.ndarray
    df_resid: int
    sigma: float
    r2: float
    factor: str | None = None
    reference_level: str | None = None
    levels: tuple[str, ...] = ()
    results: Any = field(default=None, repr=False, compare=False)

    @property
    def terms(self) -> tuple[str, ...]:
        return tuple(self.params.index)

    @property
    def nobs(self) -> int:
        return int(len(self.y))

    @property
    def n_params(self) -> int:
        return int(len(self.params))

    @property
    def has_factor(self) -> bool:
        return self.factor is not None


def _complete_rows(table: pd.DataFrame, columns: list[str]) -> pd.DataFrame:
    for col in columns:
        if col not in table.columns:
            raise InvalidInputError(
                "column", col, f"one of {list(table.columns)}"
            )
    data = table.dropna(subset=columns)
    dropped = len(table) - len(data)
    if dropped:
        logger.warning(
            "Dropped %d row(s) with missing %s before fitting", dropped, columns
        )
    return data


def _fit_ols(
    design: pd.DataFrame,
    data: pd.DataFrame,
    response: str,
    formula: str,
    **factor_info,
) -> LinearModel:
    n_obs, n_params = design.shape
    if n_obs <= n_params:
        raise DegenerateModelError(
            f"Model '{formula}' has {n_obs} observation(s) for {n_params} "
            "parameter(s); residual degrees of freedom must be positive."
        )

    y = data[response].astype(float)
    results = sm.OLS(y, design).fit()

    model = LinearModel(
        formula=formula,
        response=response,
        design=design.copy(),
        y=_readonly(y.to_numpy()),
        params=results.params.copy(),
        bse=results.bse.copy(),
        tvalues=results.tvalues.copy(),
        pvalues=results.pvalues.copy(),
        cov_params=results.cov_params().copy(),
        fitted=_readonly(results.fittedvalues.to_numpy()),
        resid=_readonly(results.resid.to_numpy()),
        df_resid=int(round(results.df_resid)),
        sigma=float(math.sqrt(results.scale)),
        r2=float(results.rsquared) if n_params > 1 else 0.0,
        results=results,
        **factor_info,
    )
    logger.info(
        "Fitted %s on %d observations (df_resid=%d, sigma=%.4f)",
        formula,
        model.nobs,
        model.df_resid,
        model.sigma,
    )
    return model


def fit_intercept_only(table: pd.DataFrame, response: str = COLUMNS.height) -> LinearModel:
    """Fit ``response ~ 1``; the coefficient is the mean of the response.

    Raises:
        DegenerateModelError: If fewer than two non-missing responses exist.
    """
    data = _complete_rows(table, [response])
    design = pd.DataFrame({INTERCEPT: np.ones(len(data))}, index=data.index)
    return _fit_ols(design, data, response, formula=f"{response} ~ 1")


def _factor_levels(series: pd.Series) -> list[str]:
    present = set(series.dropna())
    if isinstance(series.dtype, pd.CategoricalDtype):
        return [lvl for lvl in series.cat.categories if lvl in present]
    return sorted(present, key=str)


def fit_with_factor(
    table: pd.DataFrame,
    factor_column: str = COLUMNS.type,
    reference_level: str | None = None,
    response: str = COLUMNS.height,
) -> LinearModel:
    """Fit ``response ~ factor`` with treatment coding against ``reference_level``.

    Args:
        table: Observation table.
        factor_column: Categorical predictor column.
        reference_level: Baseline level absorbed into the intercept. May only
            be omitted when ``factor_column`` is a categorical produced by
            :func:`relevel`; its first category is then the reference.
        response: Continuous response column.

    Returns:
        LinearModel: Terms ``(Intercept)`` and ``<factor><level>`` for every
        non-reference level, e.g. ``typeSelf``.

    Raises:
        DegenerateModelError: If the factor has fewer than two distinct levels
            or there are not more observations than parameters.
        InvalidInputError: If the reference level is missing, unknown, or has
            no observations.
    """
    data = _complete_rows(table, [response, factor_column])
    series = data[factor_column]
    levels = _factor_levels(series)
    if len(levels) < 2:
        raise DegenerateModelError(
            f"Factor '{factor_column}' has {len(levels)} distinct level(s) "
            f"{levels}; at least 2 are required."
        )

    if reference_level is None:
        if not isinstance(series.dtype, pd.CategoricalDtype):
            raise InvalidInputError(
                "reference_level",
                None,
                f"one of {levels}, or a '{factor_column}' column set by relevel()",
            )
        reference_level = series.cat.categories[0]
    if reference_level not in levels:
        raise InvalidInputError(
            "reference_level", reference_level, f"a level with observations, one of {levels}"
        )

    ordered = [reference_level] + [lvl for lvl in levels if lvl != reference_level]
    columns: Dict[str, np.ndarray] = {INTERCEPT: np.ones(len(data))}
    for level in ordered[1:]:
        columns[f"{factor_column}{level}"] = (series == level).to_numpy(dtype=float)
    design = pd.DataFrame(columns, index=data.index)

    return _fit_ols(
        design,
        data,
        response,
        formula=f"{response} ~ {factor_column}",
        factor=factor_column,
        reference_level=str(reference_level),
        levels=tuple(str(lvl) for lvl in ordered),
    )


def relevel(table: pd.DataFrame, factor_column: str, new_reference: str) -> pd.DataFrame:
    """Return a copy of ``table`` whose factor lists ``new_reference`` first.

    The factor column becomes a :class:`pandas.Categorical`; the input table
    is not modified.

    Raises:
        InvalidInputError: If the column or the requested level does not
            exist, or the level has no observations.
    """
    if factor_column not in table.columns:
        raise InvalidInputError("factor_column", factor_column, f"one of {list(table.columns)}")
    current = table[factor_column]
    if isinstance(current.dtype, pd.CategoricalDtype):
        categories = list(current.cat.categories)
    else:
        categories = sorted(set(current.dropna()), key=str)
    if new_reference not in categories:
        raise InvalidInputError("new_reference", new_reference, f"one of {categories}")
    if not (current == new_reference).any():
        raise InvalidInputError(
            "new_reference", new_reference, "a level with at least one observation"
        )

    order = [new_reference] + [lvl for lvl in categories if lvl != new_reference]
    out = table.copy()
    out[factor_column] = pd.Categorical(current, categories=order)
    return out


def confidence_intervals(
    model: LinearModel, level: float = 0.95
) -> Dict[str, ConfidenceInterval]:
    """Wald intervals ``estimate ± t(level, df_resid) * SE`` for every term."""
    mult = t_multiplier(level, model.df_resid)
    return {
        term: interval_from_se(
            float(model.params[term]), float(model.bse[term]), multiplier=mult, level=level
        )
        for term in model.terms
    }


def coefficient_table(model: LinearModel, conf_level: float | None = None) -> pd.DataFrame:
    """Tidy coefficient table: ``term``, ``estimate``, ``std_error``, ``statistic``, ``p_value``.

    When ``conf_level`` is given, ``conf_low`` and ``conf_high`` are added.
    """
    table = pd.DataFrame(
        {
            "term": list(model.terms),
            "estimate": model.params.to_numpy(dtype=float),
            "std_error": model.bse.to_numpy(dtype=float),
            "statistic": model.tvalues.to_numpy(dtype=float),
            "p_value": model.pvalues.to_numpy(dtype=float),
        }
    )
    if conf_level is not None:
        intervals = confidence_intervals(model, conf_level)
        table["conf_low"] = [intervals[t].lower for t in model.terms]
        table["conf_high"] = [intervals[t].upper for t in model.terms]
        table["conf_level"] = float(conf_level)
    return table


def model_fit_summary(model: LinearModel) -> Dict[str, float]:
    """Whole-model statistics: R², adjusted R², sigma, F test, and degrees of freedom."""
    results = model.results
    has_slope = model.n_params > 1
    return {
        "nobs": model.nobs,
        "df_resid": model.df_resid,
        "sigma": model.sigma,
        "r_squared": model.r2,
        "adj_r_squared": float(results.rsquared_adj) if has_slope else 0.0,
        "f_statistic": float(results.fvalue) if has_slope else math.nan,
        "f_pvalue": float(results.f_pvalue) if has_slope else math.nan,
    }
