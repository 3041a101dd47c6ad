"""Format summary records into report-ready text and table columns.

This module is presentation only: it receives the plain tables and records
produced by :mod:`maize.stats` and never computes statistics itself.
"""

from __future__ import annotations

import math
import os
from typing import Iterable, Mapping

import numpy as np
import pandas as pd

from .stats.intervals import ConfidenceInterval


def _round_spread(spread: float) -> tuple[float, int]:
    """Round a positive spread to one significant figure, or two if it starts with 1.

    Returns the rounded spread and the number of decimal places that rounding
    implies (never negative), e.g. ``1.2182 -> (1.2, 1)`` and
    ``3.617 -> (4.0, 0)``.

    Raises:
        ValueError: If spread is non-finite or non-positive.
    """
    value = float(spread)
    if not math.isfinite(value) or value <= 0:
        raise ValueError(f"Spread must be finite and > 0, got {spread!r}")

    mantissa, exponent = f"{value:e}".split("e")
    keep = 2 if mantissa[0] == "1" else 1
    decimals = keep - 1 - int(exponent)
    return round(value, decimals), max(decimals, 0)


def spread_decimal_places(spread: float) -> int:
    """Return decimal places implied by rounding ``spread`` to its significant figures.

    Args:
        spread (float): SD, SE, or interval half-width (same unit as the value
            it accompanies).

    Returns:
        int: Number of decimal places that the paired value should use.
    """
    rounded, ndigits = _round_spread(spread)
    if ndigits <= 0:
        return 0
    txt = f"{rounded:.12f}".rstrip("0")
    if "." not in txt:
        return 0
    return len(txt.split(".", 1)[1])


def format_value_to_spread_decimals(value: float, spread: float) -> str:
    """Format a value using the decimal places implied by its spread.

    Examples:
        ``format_value_to_spread_decimals(20.1917, 0.93)`` gives ``"20.2"``.
    """
    dp = spread_decimal_places(spread)
    return f"{float(value):.{dp}f}"


def format_mean_sd(mean: float, sd: float) -> str:
    """Return ``"mean ± sd"`` with both parts rounded consistently."""
    if not (np.isfinite(sd) and sd > 0):
        return f"{float(mean):.2f}"
    dp = spread_decimal_places(sd)
    return f"{float(mean):.{dp}f} ± {float(sd):.{dp}f}"


def format_pvalue(value: float) -> str:
    """Format p-values consistently for tables and figure annotations."""
    if not np.isfinite(value):
        return "NaN"
    if value < 1e-3:
        return "<0.001"
    return f"{value:.3f}"


def format_confidence_interval(ci: ConfidenceInterval, digits: int = 2) -> str:
    """Return ``"estimate [lower, upper] (level%)"``."""
    pct = f"{100.0 * ci.level:.0f}%"
    return (
        f"{ci.estimate:.{digits}f} [{ci.lower:.{digits}f}, {ci.upper:.{digits}f}] ({pct})"
    )


def add_formatted_reporting_columns(
    df: pd.DataFrame,
    value_spread_pairs: Iterable[tuple[str, str]],
    suffix: str = " (reported)",
) -> pd.DataFrame:
    """Add string columns with each value rounded to its spread's precision.

    Args:
        df (pandas.DataFrame): Input numeric table.
        value_spread_pairs (Iterable[tuple[str, str]]): Sequence of
            ``(value_column, spread_column)`` pairs, e.g. ``("mean", "sd")``.
        suffix (str, optional): Suffix appended to generated columns.

    Returns:
        pandas.DataFrame: Copy of ``df`` with formatted string columns added.
        Rows whose spread is missing or non-positive get an empty string.

    Raises:
        KeyError: If a named column is absent.
    """
    out = df.copy()
    for value_col, spread_col in value_spread_pairs:
        for col in (value_col, spread_col):
            if col not in out.columns:
                raise KeyError(f"Missing column '{col}' for reporting format.")

        values = pd.to_numeric(out[value_col], errors="coerce")
        spreads = pd.to_numeric(out[spread_col], errors="coerce")
        out[f"{value_col}{suffix}"] = [
            (
                format_value_to_spread_decimals(v, s)
                if (np.isfinite(v) and np.isfinite(s) and s > 0)
                else ""
            )
            for v, s in zip(values, spreads)
        ]
        out[f"{spread_col}{suffix}"] = [
            (
                f"{_round_spread(s)[0]:.{spread_decimal_places(s)}f}"
                if (np.isfinite(s) and s > 0)
                else ""
            )
            for s in spreads
        ]
    return out


def format_summary_table(
    df: pd.DataFrame,
    caption: str,
    float_digits: int = 2,
) -> str:
    """Render a table as captioned, striped plain text.

    Numeric columns are shown with ``float_digits`` decimals; alternate rows
    are prefixed with a shading marker so the layout survives copy/paste
    into a terminal or lab notebook.
    """
    body = df.to_string(
        index=False,
        float_format=lambda v: f"{v:.{float_digits}f}",
    ).splitlines()
    width = max([len(caption)] + [len(line) for line in body])
    rule = "=" * (width + 2)
    lines = [caption, rule, "  " + body[0], "-" * (width + 2)]
    for idx, line in enumerate(body[1:]):
        lines.append(("░ " if idx % 2 else "  ") + line)
    lines.append(rule)
    return "\n".join(lines)


def generate_caption_texts(
    group_stats: pd.DataFrame,
    difference: Mapping[str, float],
    slope_ci: ConfidenceInterval | None = None,
) -> dict[str, str]:
    """Generate figure caption text from the computed summaries."""
    counts = ", ".join(
        f"{row['type']} n={int(row['n'])}" for _, row in group_stats.iterrows()
    )
    captions: dict[str, str] = {}
    captions["group_summary"] = (
        "Figure 1. Mean height (± 1 SD) of crossed and selfed maize plants "
        f"({counts}). Heights in inches."
    )
    captions["paired_difference"] = (
        "Figure 2. Within-pair differences (Cross - Self): mean "
        f"{difference['mean']:.2f} in, SD {difference['sd']:.2f} in, "
        f"SE {difference['se']:.2f} in (n={int(difference['n'])})."
    )
    if slope_ci is not None and math.isfinite(slope_ci.estimate):
        captions["model_summary"] = (
            "Figure 3. Heights by pollination type with group means (crossbars). "
            "The dashed segment joins the reference mean to the comparison mean; "
            f"the fitted difference was {slope_ci.estimate:.2f} in "
            f"({100 * slope_ci.level:.0f}% CI {slope_ci.lower:.2f} to "
            f"{slope_ci.upper:.2f})."
        )
    return captions


def write_caption_files(captions: dict[str, str], output_dir: str) -> list[str]:
    """Write figure caption text files to the target directory."""
    os.makedirs(output_dir, exist_ok=True)
    written: list[str] = []
    for stem, text in captions.items():
        path = os.path.join(output_dir, f"{stem}_caption.txt")
        with open(path, "w", encoding="utf-8") as handle:
            handle.write(text.strip() + "\n")
        written.append(path)
    return written
