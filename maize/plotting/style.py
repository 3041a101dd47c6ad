"""Shared figure styling, axis labels, and the save-and-close helper."""

from __future__ import annotations

import os
import re
import warnings
from dataclasses import dataclass
from typing import Sequence

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.axes import Axes
from matplotlib.figure import Figure
from matplotlib.ticker import MaxNLocator

from ..schema import CROSS, SELF

FIGURE_FORMATS: tuple[str, ...] = ("png", "pdf", "svg")
PNG_DPI = 300

# Below this many residuals the normal Q-Q panel is not informative.
QQ_MIN_N = 8


@dataclass(frozen=True)
class StyleConfig:
    FONTSIZE: float = 11.0
    AXIS_LABEL_FONTSIZE: float = 12.0
    PANEL_FONTSIZE: float = 13.0
    ANNOTATION_FONTSIZE: float = 10.0
    LINEWIDTH: float = 1.8
    LINEWIDTH_THIN: float = 1.0
    GRID_ALPHA: float = 0.25
    JITTER_WIDTH: float = 0.1
    FIGSIZE_SINGLE: tuple[float, float] = (6.0, 4.5)
    FIGSIZE_GRID: tuple[float, float] = (9.0, 7.5)


STYLE = StyleConfig()

_STYLE_APPLIED = {"done": False}

TYPE_COLOR_MAP = {
    CROSS: "#1b9e77",
    SELF: "#d95f02",
}
FALLBACK_COLOR = "#4A4A4A"

LABEL_HEIGHT = "Height / in"
LABEL_TYPE = "Pollination type"
LABEL_FITTED = r"Fitted height $\hat{y}$ / in"
LABEL_RESIDUAL = r"Residual $y-\hat{y}$ / in"
LABEL_STD_RESIDUAL = "Standardized residual"
LABEL_SCALE_LOCATION = r"$\sqrt{|\mathrm{standardized\ residual}|}$"


def apply_global_style(font_scale: float = 1.0) -> None:
    """Update Matplotlib rcParams for the course figures."""
    scale = float(font_scale)
    plt.rcParams.update(
        {
            "font.size": STYLE.FONTSIZE * scale,
            "axes.labelsize": STYLE.AXIS_LABEL_FONTSIZE * scale,
            "axes.titlesize": STYLE.AXIS_LABEL_FONTSIZE * scale,
            "xtick.labelsize": STYLE.FONTSIZE * scale,
            "ytick.labelsize": STYLE.FONTSIZE * scale,
            "legend.fontsize": STYLE.FONTSIZE * scale,
            "legend.frameon": False,
            "axes.spines.top": False,
            "axes.spines.right": False,
            "lines.linewidth": STYLE.LINEWIDTH,
            "savefig.dpi": PNG_DPI,
            "savefig.bbox": "tight",
        }
    )


def set_global_style() -> None:
    """Apply :func:`apply_global_style` once per process."""
    if not _STYLE_APPLIED["done"]:
        apply_global_style()
        _STYLE_APPLIED["done"] = True


def color_for_type(label) -> str:
    """Return the fixed color of a pollination type (grey for other labels)."""
    return TYPE_COLOR_MAP.get(str(label), FALLBACK_COLOR)


def fig_size(kind: str = "single") -> tuple[float, float]:
    return STYLE.FIGSIZE_GRID if kind == "grid" else STYLE.FIGSIZE_SINGLE


def panel_tag(index: int) -> str:
    """Return ``(a)``, ``(b)``, ... for panel ``index``."""
    return f"({'abcdefghijklmnopqrstuvwxyz'[int(index)]})"


def add_panel_label(ax: Axes, label: str) -> None:
    ax.text(
        0.02,
        0.98,
        label,
        transform=ax.transAxes,
        ha="left",
        va="top",
        fontsize=STYLE.PANEL_FONTSIZE,
        fontweight="bold",
        color="0.2",
    )


def clean_axis(ax: Axes, *, grid_axis: str | None = "y", categorical_x: bool = False) -> None:
    """Limit tick counts and draw a light dotted grid on ``grid_axis``.

    Categorical x axes keep the ticks placed by :func:`set_category_axis`.
    """
    if not categorical_x:
        ax.xaxis.set_major_locator(MaxNLocator(nbins=6))
    ax.yaxis.set_major_locator(MaxNLocator(nbins=6))
    ax.grid(False)
    if grid_axis is not None:
        ax.grid(True, axis=grid_axis, alpha=STYLE.GRID_ALPHA, linestyle=":")


def set_axis_labels(ax: Axes, x: str | None = None, y: str | None = None) -> None:
    if x is not None:
        ax.set_xlabel(x, fontsize=STYLE.AXIS_LABEL_FONTSIZE)
    if y is not None:
        ax.set_ylabel(y, fontsize=STYLE.AXIS_LABEL_FONTSIZE)


def set_category_axis(ax: Axes, labels: Sequence[str]) -> None:
    """Place category labels at x = 0, 1, ..., k-1 with half-unit margins."""
    ax.set_xticks(np.arange(len(labels)))
    ax.set_xticklabels(list(labels))
    ax.set_xlim(-0.6, len(labels) - 0.4)


def jitter(position: float, n: int, width: float, rng: np.random.Generator) -> np.ndarray:
    """Return ``n`` x positions drawn uniformly from ``position ± width``."""
    return position + rng.uniform(-width, width, size=int(n))


def should_plot_qq(n: int) -> bool:
    return int(n) >= QQ_MIN_N


def warn_skipped_qq(n: int) -> None:
    warnings.warn(
        f"Q-Q panel omitted (n={int(n)} < {QQ_MIN_N}); too few residuals.",
        RuntimeWarning,
        stacklevel=3,
    )


def sanitize_filename(name: str) -> str:
    """Turn ``name`` into a filesystem-safe stem (``"figure"`` if nothing is left)."""
    text = re.sub(r"[^A-Za-z0-9._-]+", "_", str(name).strip())
    text = re.sub(r"_+", "_", text).strip("._")
    return text or "figure"


def finish_figure(fig: Figure, output_dir: str, stem: str) -> str:
    """Write ``fig`` as PNG, PDF and SVG under ``output_dir``, close it, return the PNG path."""
    os.makedirs(output_dir, exist_ok=True)
    base = os.path.join(output_dir, sanitize_filename(stem))
    for ext in FIGURE_FORMATS:
        fig.savefig(f"{base}.{ext}", dpi=PNG_DPI if ext == "png" else None)
    plt.close(fig)
    return f"{base}.png"
