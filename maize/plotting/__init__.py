"""
Figures for the crossed vs selfed maize height analysis.

All plotting functions accept precomputed tables, models, or diagnostic
results and only render them; no statistics are computed here. Each figure is
written as PNG, PDF and SVG and the PNG path is returned.

Modules:
    group_plots:
        Raw heights by pollination type, mean ± SD point-ranges, the
        standard normal teaching curve, jittered heights with means, and
        the final summary figure with the fitted difference.

    model_plots:
        Coefficient estimates with confidence intervals, estimated marginal
        means, and the 2x2 residual diagnostic panel.

Design Principles:
    1. No statistics in plotting code.

    2. Input validation with explicit KeyError for missing required columns.
"""

from .group_plots import (
    plot_group_summary,
    plot_heights_by_type,
    plot_jitter_with_means,
    plot_model_summary,
    plot_normal_curve,
)
from .model_plots import plot_coefficients, plot_emmeans, plot_model_checks
from .style import apply_global_style, set_global_style

__all__ = [
    "plot_group_summary",
    "plot_heights_by_type",
    "plot_jitter_with_means",
    "plot_model_summary",
    "plot_normal_curve",
    "plot_coefficients",
    "plot_emmeans",
    "plot_model_checks",
    "apply_global_style",
    "set_global_style",
]
