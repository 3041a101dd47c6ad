"""Figures drawn from fitted models: coefficients, marginal means, and checks."""

from __future__ import annotations

from typing import Mapping

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd

from ..stats.diagnostics import DiagnosticResult
from ..stats.regression import INTERCEPT, LinearModel
from .group_plots import _require_columns
from .style import (
    LABEL_FITTED,
    LABEL_HEIGHT,
    LABEL_RESIDUAL,
    LABEL_SCALE_LOCATION,
    LABEL_STD_RESIDUAL,
    STYLE,
    add_panel_label,
    clean_axis,
    color_for_type,
    fig_size,
    finish_figure,
    panel_tag,
    set_axis_labels,
    set_category_axis,
    set_global_style,
    should_plot_qq,
    warn_skipped_qq,
)


def plot_coefficients(
    coef_table: pd.DataFrame,
    output_dir: str = "output",
    include_intercept: bool = False,
) -> str:
    """Plot each coefficient estimate with its confidence interval.

    Args:
        coef_table: Output of :func:`maize.stats.regression.coefficient_table`
            called with a ``conf_level``.
        output_dir: Directory for the figure bundle.
        include_intercept: Whether the ``(Intercept)`` row is drawn.

    Returns:
        str: Path to the saved PNG file.

    Raises:
        KeyError: If the interval columns are missing.
        ValueError: If no terms remain to plot.
    """
    _require_columns(coef_table, ["term", "estimate", "conf_low", "conf_high"], "coef_table")
    rows = coef_table
    if not include_intercept:
        rows = coef_table[coef_table["term"] != INTERCEPT]
    if rows.empty:
        raise ValueError("No coefficients to plot; the model has only an intercept.")
    set_global_style()

    positions = np.arange(len(rows))[::-1]
    estimates = rows["estimate"].to_numpy(dtype=float)
    lower = estimates - rows["conf_low"].to_numpy(dtype=float)
    upper = rows["conf_high"].to_numpy(dtype=float) - estimates

    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    ax.errorbar(
        estimates,
        positions,
        xerr=np.vstack([lower, upper]),
        fmt="o",
        color="black",
        markersize=7,
        linewidth=STYLE.LINEWIDTH,
        capsize=0,
    )
    ax.axvline(0.0, color="0.4", linestyle="--", linewidth=STYLE.LINEWIDTH_THIN)
    ax.set_yticks(positions)
    ax.set_yticklabels(list(rows["term"]))
    ax.set_ylim(-0.8, len(rows) - 0.2)
    level = rows["conf_level"].iloc[0] if "conf_level" in rows.columns else None
    xlabel = "Estimate / in"
    if level is not None and np.isfinite(level):
        xlabel = f"Estimate / in ({100 * float(level):.0f}% CI)"
    set_axis_labels(ax, xlabel, None)
    ax.tick_params(axis="both", which="major", labelsize=STYLE.FONTSIZE)
    ax.grid(True, axis="x", alpha=STYLE.GRID_ALPHA, linestyle=":", linewidth=0.7)
    return finish_figure(fig, output_dir, "coefficients")


def plot_emmeans(emmeans: pd.DataFrame, output_dir: str = "output") -> str:
    """Plot model-estimated level means with their confidence limits.

    The first column of ``emmeans`` names the factor levels.
    """
    _require_columns(emmeans, ["emmean", "lower_cl", "upper_cl"], "emmeans")
    set_global_style()
    factor = emmeans.columns[0]
    labels = [str(v) for v in emmeans[factor]]

    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    for pos, (_, row) in enumerate(emmeans.iterrows()):
        ax.errorbar(
            pos,
            row["emmean"],
            yerr=[[row["emmean"] - row["lower_cl"]], [row["upper_cl"] - row["emmean"]]],
            fmt="o",
            color=color_for_type(row[factor]),
            markersize=8,
            linewidth=STYLE.LINEWIDTH,
            capsize=0,
        )
    set_category_axis(ax, labels)
    set_axis_labels(ax, str(factor), f"Estimated mean {LABEL_HEIGHT.lower()}")
    clean_axis(ax, grid_axis="y", categorical_x=True)
    return finish_figure(fig, output_dir, "emmeans")


def plot_model_checks(
    model: LinearModel,
    diagnostics: Mapping[str, DiagnosticResult],
    output_dir: str = "output",
    stem: str = "model_checks",
) -> str:
    """Draw a 2x2 panel of residual diagnostics for ``model``.

    Panels: (a) residuals vs fitted, (b) normal Q-Q of standardized residuals,
    (c) scale-location, (d) Cook's distance with the outlier threshold.

    Args:
        model: Fitted model whose residuals are shown.
        diagnostics: Output of :func:`maize.stats.diagnostics.check_model`; must
            include ``normality``, ``homogeneity`` and ``outliers``.
        output_dir: Directory for the figure bundle.
        stem: Output filename stem.

    Returns:
        str: Path to the saved PNG file.

    Raises:
        KeyError: If one of the three checks is missing from ``diagnostics``.
    """
    normality = diagnostics["normality"]
    homogeneity = diagnostics["homogeneity"]
    outliers = diagnostics["outliers"]
    set_global_style()

    fitted = np.asarray(model.fitted, dtype=float)
    resid = np.asarray(model.resid, dtype=float)
    flagged = np.zeros(len(resid), dtype=bool)
    flagged[np.asarray(outliers.details["flagged_positions"], dtype=int)] = True

    fig, axes = plt.subplots(2, 2, figsize=fig_size("grid"), constrained_layout=True)
    ax_rf, ax_qq, ax_sl, ax_cd = axes.ravel()

    ax_rf.scatter(fitted[~flagged], resid[~flagged], s=24, color="0.25", alpha=0.8)
    ax_rf.scatter(fitted[flagged], resid[flagged], s=30, color="#d62728", label="flagged")
    ax_rf.axhline(0.0, color="0.4", linestyle="--", linewidth=STYLE.LINEWIDTH_THIN)
    set_axis_labels(ax_rf, LABEL_FITTED, LABEL_RESIDUAL)
    clean_axis(ax_rf, grid_axis="both")

    n = len(resid)
    if should_plot_qq(n):
        theo = np.asarray(normality.details["theoretical_quantiles"], dtype=float)
        sample = np.asarray(normality.details["sample_quantiles"], dtype=float)
        ax_qq.scatter(theo, sample, s=24, color="0.25", alpha=0.8)
        lim = [float(np.min(theo)), float(np.max(theo))]
        ax_qq.plot(lim, lim, color="#d62728", linewidth=STYLE.LINEWIDTH_THIN)
        set_axis_labels(ax_qq, "Theoretical quantile", LABEL_STD_RESIDUAL)
        clean_axis(ax_qq, grid_axis="both")
    else:
        warn_skipped_qq(n)
        ax_qq.text(0.5, 0.5, f"Q-Q omitted (n={n})", ha="center", va="center",
                   transform=ax_qq.transAxes, color="0.35")
        ax_qq.set_axis_off()

    spread = np.asarray(homogeneity.details["sqrt_abs_std_resid"], dtype=float)
    ax_sl.scatter(fitted, spread, s=24, color="0.25", alpha=0.8)
    set_axis_labels(ax_sl, LABEL_FITTED, LABEL_SCALE_LOCATION)
    clean_axis(ax_sl, grid_axis="both")

    cooks = np.asarray(outliers.details["cooks_distance"], dtype=float)
    index = np.arange(1, len(cooks) + 1)
    colors = np.where(flagged, "#d62728", "0.35")
    ax_cd.vlines(index, 0.0, cooks, colors=list(colors), linewidth=STYLE.LINEWIDTH)
    ax_cd.axhline(
        outliers.details["threshold"],
        color="0.4",
        linestyle="--",
        linewidth=STYLE.LINEWIDTH_THIN,
    )
    set_axis_labels(ax_cd, "Observation", "Cook's distance")
    clean_axis(ax_cd, grid_axis="y")

    titles = (
        "Residuals vs fitted",
        f"Normal Q-Q ({normality.verdict})",
        f"Scale-location ({homogeneity.verdict})",
        f"Influential observations ({outliers.verdict})",
    )
    for idx, (ax, title) in enumerate(zip(axes.ravel(), titles)):
        ax.set_title(title, fontsize=STYLE.AXIS_LABEL_FONTSIZE)
        add_panel_label(ax, panel_tag(idx))

    return finish_figure(fig, output_dir, stem)
