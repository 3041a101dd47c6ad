"""
Statistical routines for the maize height analysis.

This subpackage turns a validated observation table into summaries, interval
estimates, fitted models, and assumption checks. All functions take tables or
models as explicit arguments and return new plain records; nothing here
plots, formats, or writes files.

Modules:
    descriptive:
        Group mean/SD/count, pivot to paired differences, and the standard
        error of the mean difference.

    intervals:
        ``estimate ± multiplier * SE`` intervals with normal or t critical
        values.

    regression:
        Intercept-only and single-factor OLS models with an explicit
        reference level, tidy coefficient tables, and releveling.

    emmeans:
        Model-implied level means with SEs from the coefficient covariance.

    diagnostics:
        Shapiro-Wilk normality, Breusch-Pagan homogeneity, and Cook's
        distance outlier checks.

Design Principle:
    This subpackage has no dependencies on plotting/ or reporting modules.
"""

from .descriptive import (
    DifferenceSummary,
    difference_summary,
    group_summary,
    paired_differences,
)
from .diagnostics import DiagnosticResult, check_model, diagnostics_table
from .emmeans import estimated_marginal_means
from .intervals import (
    ConfidenceInterval,
    interval_from_se,
    normal_multiplier,
    t_interval,
    t_multiplier,
)
from .regression import (
    LinearModel,
    coefficient_table,
    confidence_intervals,
    fit_intercept_only,
    fit_with_factor,
    model_fit_summary,
    relevel,
)

__all__ = [
    "DifferenceSummary",
    "difference_summary",
    "group_summary",
    "paired_differences",
    "DiagnosticResult",
    "check_model",
    "diagnostics_table",
    "estimated_marginal_means",
    "ConfidenceInterval",
    "interval_from_se",
    "normal_multiplier",
    "t_interval",
    "t_multiplier",
    "LinearModel",
    "coefficient_table",
    "confidence_intervals",
    "fit_intercept_only",
    "fit_with_factor",
    "model_fit_summary",
    "relevel",
]
