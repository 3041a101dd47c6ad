"""Assumption checks for a fitted linear model.

Three checks are available, each requestable by name:

- ``normality``: Shapiro-Wilk test on the residuals, with Q-Q coordinates of
  the standardized residuals for plotting.
- ``homogeneity``: Breusch-Pagan test of residual variance against the design
  matrix, reported together with the Spearman correlation between fitted
  values and sqrt(|standardized residual|) (the scale-location trend).
- ``outliers``: Cook's distance per observation; observations above the
  threshold (default ``4/n``) are flagged.

The checks only read the model.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Mapping

import numpy as np
import pandas as pd
from scipy import stats as scipy_stats
from statsmodels.stats.diagnostic import het_breuschpagan

from ..errors import InvalidInputError
from .regression import LinearModel

PASS = "pass"
FLAGGED = "flagged"

CHECK_NAMES: tuple[str, ...] = ("normality", "homogeneity", "outliers")
_ALIASES = {"qq": "normality", "heteroscedasticity": "homogeneity", "influence": "outliers"}
SHAPIRO_MIN_N = 3


@dataclass(frozen=True)
class DiagnosticResult:
    """Verdict and supporting statistics for one assumption check."""

    check: str
    verdict: str
    method: str
    statistic: float
    pvalue: float
    details: Mapping[str, Any] = field(default_factory=dict)

    @property
    def flagged(self) -> bool:
        return self.verdict == FLAGGED


def _standardized_residuals(model: LinearModel) -> np.ndarray:
    influence = model.results.get_influence()
    return np.asarray(influence.resid_studentized_internal, dtype=float)


def check_normality(model: LinearModel, alpha: float = 0.05) -> DiagnosticResult:
    """Shapiro-Wilk test of the residuals; flagged when ``p < alpha``."""
    resid = np.asarray(model.resid, dtype=float)
    std_resid = _standardized_residuals(model)
    (theoretical, sample), _ = scipy_stats.probplot(std_resid, dist="norm")
    details = {
        "theoretical_quantiles": np.asarray(theoretical, dtype=float),
        "sample_quantiles": np.asarray(sample, dtype=float),
        "alpha": alpha,
    }
    if len(resid) < SHAPIRO_MIN_N or np.allclose(resid, resid[0]):
        details["notes"] = "Too few distinct residuals for Shapiro-Wilk."
        return DiagnosticResult("normality", PASS, "Shapiro-Wilk", math.nan, math.nan, details)

    statistic, pvalue = scipy_stats.shapiro(resid)
    verdict = FLAGGED if float(pvalue) < alpha else PASS
    return DiagnosticResult(
        "normality", verdict, "Shapiro-Wilk", float(statistic), float(pvalue), details
    )


def check_homogeneity(model: LinearModel, alpha: float = 0.05) -> DiagnosticResult:
    """Breusch-Pagan test of constant residual variance; flagged when ``p < alpha``."""
    fitted = np.asarray(model.fitted, dtype=float)
    resid = np.asarray(model.resid, dtype=float)
    details: Dict[str, Any] = {"fitted": fitted, "alpha": alpha}

    # Zero residuals make the standardized residuals 0/0.
    if np.allclose(resid, 0.0):
        details["sqrt_abs_std_resid"] = np.zeros(len(resid))
        details["spearman_rho"] = math.nan
        details["notes"] = "Residuals are all zero; variance trend is undefined."
        return DiagnosticResult("homogeneity", PASS, "Breusch-Pagan", math.nan, math.nan, details)

    spread = np.sqrt(np.abs(_standardized_residuals(model)))
    details["sqrt_abs_std_resid"] = spread

    if model.n_params < 2 or np.allclose(fitted, fitted[0]):
        details["spearman_rho"] = math.nan
        details["notes"] = "Fitted values are constant; variance trend is undefined."
        return DiagnosticResult("homogeneity", PASS, "Breusch-Pagan", math.nan, math.nan, details)

    rho, _ = scipy_stats.spearmanr(fitted, spread)
    details["spearman_rho"] = float(rho)

    lm_stat, lm_pvalue, _, _ = het_breuschpagan(resid, model.design.to_numpy(dtype=float))
    verdict = FLAGGED if float(lm_pvalue) < alpha else PASS
    return DiagnosticResult(
        "homogeneity", verdict, "Breusch-Pagan", float(lm_stat), float(lm_pvalue), details
    )


def check_outliers(model: LinearModel, cooks_threshold: float | None = None) -> DiagnosticResult:
    """Flag observations whose Cook's distance exceeds the threshold (default ``4/n``).

    ``details["flagged"]`` holds the flagged row labels of the input table.
    """
    n = model.nobs
    threshold = 4.0 / n if cooks_threshold is None else float(cooks_threshold)
    if not math.isfinite(threshold) or threshold <= 0:
        raise InvalidInputError("cooks_threshold", cooks_threshold, "a positive number")

    influence = model.results.get_influence()
    cooks = np.asarray(influence.cooks_distance[0], dtype=float)
    leverage = np.asarray(influence.hat_matrix_diag, dtype=float)
    mask = cooks > threshold
    flagged = tuple(model.design.index[mask])

    details = {
        "cooks_distance": cooks,
        "leverage": leverage,
        "threshold": threshold,
        "flagged": flagged,
        "flagged_positions": tuple(int(i) for i in np.flatnonzero(mask)),
    }
    verdict = FLAGGED if flagged else PASS
    return DiagnosticResult(
        "outliers", verdict, "Cook's distance", float(np.max(cooks)), math.nan, details
    )


def _normalise_checks(check: str | Iterable[str]) -> list[str]:
    requested = [check] if isinstance(check, str) else list(check)
    names: list[str] = []
    for name in requested:
        key = _ALIASES.get(str(name).lower(), str(name).lower())
        if key not in CHECK_NAMES:
            raise InvalidInputError("check", name, f"one of {list(CHECK_NAMES)}")
        if key not in names:
            names.append(key)
    return names


def check_model(
    model: LinearModel,
    check: str | Iterable[str] = CHECK_NAMES,
    alpha: float = 0.05,
    cooks_threshold: float | None = None,
) -> Dict[str, DiagnosticResult]:
    """Run the requested assumption checks.

    Args:
        model: Fitted model.
        check: One check name or a sequence of names from ``CHECK_NAMES``
            (``"qq"`` is accepted for ``"normality"``).
        alpha: Significance level for the normality and homogeneity tests.
        cooks_threshold: Cook's distance cut-off; ``None`` means ``4/n``.

    Returns:
        dict[str, DiagnosticResult]: Results keyed by check name in request order.

    Raises:
        InvalidInputError: For unknown check names or ``alpha`` outside (0, 1).
    """
    if not (0.0 < float(alpha) < 1.0):
        raise InvalidInputError("alpha", alpha, "a value strictly between 0 and 1")

    results: Dict[str, DiagnosticResult] = {}
    for name in _normalise_checks(check):
        if name == "normality":
            results[name] = check_normality(model, alpha=alpha)
        elif name == "homogeneity":
            results[name] = check_homogeneity(model, alpha=alpha)
        else:
            results[name] = check_outliers(model, cooks_threshold=cooks_threshold)
    return results


def diagnostics_table(results: Mapping[str, DiagnosticResult]) -> pd.DataFrame:
    """Flatten diagnostic results into one row per check for reporting."""
    rows = []
    for res in results.values():
        row = {
            "check": res.check,
            "verdict": res.verdict,
            "method": res.method,
            "statistic": res.statistic,
            "pvalue": res.pvalue,
        }
        if res.check == "outliers":
            row["threshold"] = res.details["threshold"]
            row["n_flagged"] = len(res.details["flagged"])
        rows.append(row)
    return pd.DataFrame.from_records(rows)
