"""Render group-comparison figures for the crossed vs selfed heights.

Every function receives precomputed tables (observations, group summary) and
only draws them.
"""

from __future__ import annotations

from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy.stats import norm

from ..schema import COLUMNS, TYPE_LEVELS
from .style import (
    LABEL_HEIGHT,
    LABEL_TYPE,
    STYLE,
    clean_axis,
    color_for_type,
    fig_size,
    finish_figure,
    jitter,
    set_axis_labels,
    set_category_axis,
    set_global_style,
)


def _require_columns(df: pd.DataFrame, required: Sequence[str], name: str) -> None:
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise KeyError(
            f"{name} missing required columns: {missing}. "
            f"Available columns: {list(df.columns)}"
        )


def _level_order(values: pd.Series) -> list[str]:
    present = [str(v) for v in pd.unique(values.dropna())]
    ordered = [lvl for lvl in TYPE_LEVELS if lvl in present]
    return ordered + sorted(lvl for lvl in present if lvl not in ordered)


def plot_heights_by_type(table: pd.DataFrame, output_dir: str = "output") -> str:
    """Plot every measured height against its pollination type.

    Returns:
        str: Path to the saved PNG file.

    Raises:
        KeyError: If ``type`` or ``height`` is missing from ``table``.
    """
    _require_columns(table, [COLUMNS.type, COLUMNS.height], "table")
    set_global_style()
    levels = _level_order(table[COLUMNS.type])

    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    for pos, level in enumerate(levels):
        heights = table.loc[table[COLUMNS.type] == level, COLUMNS.height].dropna()
        ax.scatter(
            np.full(len(heights), pos, dtype=float),
            heights,
            s=30,
            color="black",
            zorder=2,
        )
    set_category_axis(ax, levels)
    set_axis_labels(ax, LABEL_TYPE, LABEL_HEIGHT)
    clean_axis(ax, grid_axis="y", categorical_x=True)
    return finish_figure(fig, output_dir, "heights_by_type")


def plot_group_summary(group_stats: pd.DataFrame, output_dir: str = "output") -> str:
    """Plot each group mean with a ±1 SD point-range.

    Args:
        group_stats: Output of :func:`maize.stats.descriptive.group_summary`
            with ``type``, ``mean`` and ``sd`` columns.
        output_dir: Directory for the figure bundle.

    Returns:
        str: Path to the saved PNG file.
    """
    _require_columns(group_stats, ["type", "mean", "sd"], "group_stats")
    set_global_style()
    labels = [str(v) for v in group_stats["type"]]

    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    for pos, (_, row) in enumerate(group_stats.iterrows()):
        ax.errorbar(
            pos,
            row["mean"],
            yerr=row["sd"],
            fmt="o",
            color=color_for_type(row["type"]),
            markersize=8,
            capsize=0,
            linewidth=STYLE.LINEWIDTH,
        )
    set_category_axis(ax, labels)
    set_axis_labels(ax, LABEL_TYPE, r"Mean height $\pm$ SD / in")
    clean_axis(ax, grid_axis="both", categorical_x=True)
    return finish_figure(fig, output_dir, "group_summary")


def plot_normal_curve(output_dir: str = "output", n_points: int = 100) -> str:
    """Draw the standard normal density with the mean and ±1-3 SD marked.

    This is the teaching figure used to motivate the ``mean ± 2 SE`` interval.
    """
    set_global_style()
    x = np.linspace(-4.0, 4.0, int(n_points))
    y = norm.pdf(x)

    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    ax.plot(x, y, color="black", linewidth=STYLE.LINEWIDTH)
    for k in (1, 2):
        mask = np.abs(x) <= k
        ax.fill_between(x[mask], y[mask], color="0.6", alpha=0.18 if k == 2 else 0.25)
    ax.set_xticks(range(-3, 4))
    ax.set_xticklabels(["-3s", "-2s", "-1s", "mean", "1s", "2s", "3s"])
    ax.set_yticks([])
    ax.spines["left"].set_visible(False)
    ax.spines["top"].set_visible(False)
    ax.spines["right"].set_visible(False)
    return finish_figure(fig, output_dir, "normal_distribution")


def plot_jitter_with_means(
    table: pd.DataFrame, output_dir: str = "output", seed: int = 0
) -> str:
    """Plot jittered heights coloured by type with each group mean overlaid."""
    _require_columns(table, [COLUMNS.type, COLUMNS.height], "table")
    set_global_style()
    rng = np.random.default_rng(seed)
    levels = _level_order(table[COLUMNS.type])

    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    for pos, level in enumerate(levels):
        heights = table.loc[table[COLUMNS.type] == level, COLUMNS.height].dropna()
        color = color_for_type(level)
        ax.scatter(
            jitter(pos, len(heights), STYLE.JITTER_WIDTH, rng),
            heights,
            s=30,
            color=color,
            alpha=0.5,
            label=level,
            zorder=2,
        )
        ax.scatter([pos], [heights.mean()], s=110, color=color, edgecolor="black", zorder=3)
    set_category_axis(ax, levels)
    set_axis_labels(ax, LABEL_TYPE, LABEL_HEIGHT)
    clean_axis(ax, grid_axis="y", categorical_x=True)
    ax.legend(loc="lower left", title=LABEL_TYPE)
    return finish_figure(fig, output_dir, "heights_with_means")


def plot_model_summary(
    table: pd.DataFrame,
    reference_level: str,
    output_dir: str = "output",
    seed: int = 0,
) -> str:
    """Final summary: jittered heights, mean crossbars, and the fitted difference.

    A dashed segment joins the reference-level mean to the other level's mean,
    which is the slope estimated by the two-group linear model.

    Raises:
        KeyError: If ``reference_level`` is not present in ``table``.
    """
    _require_columns(table, [COLUMNS.type, COLUMNS.height], "table")
    set_global_style()
    levels = _level_order(table[COLUMNS.type])
    if reference_level not in levels:
        raise KeyError(f"reference_level {reference_level!r} not in {levels}")
    levels = [reference_level] + [lvl for lvl in levels if lvl != reference_level]
    rng = np.random.default_rng(seed)

    means = {}
    fig, ax = plt.subplots(figsize=fig_size("single"), constrained_layout=True)
    for pos, level in enumerate(levels):
        heights = table.loc[table[COLUMNS.type] == level, COLUMNS.height].dropna()
        means[level] = float(heights.mean())
        ax.scatter(
            jitter(pos, len(heights), STYLE.JITTER_WIDTH, rng),
            heights,
            s=36,
            facecolor=color_for_type(level),
            edgecolor="black",
            linewidth=0.8,
            label=level,
            zorder=2,
        )
        ax.hlines(means[level], pos - 0.2, pos + 0.2, color="black", linewidth=2.5, zorder=3)

    for pos, level in enumerate(levels[1:], start=1):
        ax.plot(
            [0, pos],
            [means[reference_level], means[level]],
            color="black",
            linestyle="--",
            linewidth=STYLE.LINEWIDTH_THIN,
            zorder=3,
        )
        ax.annotate(
            f"{means[level] - means[reference_level]:+.2f} in",
            xy=(pos / 2.0, (means[reference_level] + means[level]) / 2.0),
            xytext=(8, 8),
            textcoords="offset points",
            fontsize=STYLE.ANNOTATION_FONTSIZE,
            color="0.25",
        )
    set_category_axis(ax, levels)
    set_axis_labels(ax, LABEL_TYPE, LABEL_HEIGHT)
    clean_axis(ax, grid_axis="y", categorical_x=True)
    ax.legend(loc="lower left", title=LABEL_TYPE)
    return finish_figure(fig, output_dir, "model_summary")
