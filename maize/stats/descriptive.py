"""Group summaries and paired differences for the maize height table.

All standard deviations use the sample (n-1) denominator.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

import numpy as np
import pandas as pd

from ..errors import InvalidInputError, PairingError
from ..schema import COLUMNS, CROSS, SELF


@dataclass(frozen=True)
class DifferenceSummary:
    """Mean, spread, and standard error of the within-pair differences."""

    mean: float
    sd: float
    n: int
    se: float

    def to_frame(self) -> pd.DataFrame:
        return pd.DataFrame([{"mean": self.mean, "sd": self.sd, "n": self.n, "se": self.se}])


def group_summary(table: pd.DataFrame) -> pd.DataFrame:
    """Compute mean, sample SD, and count of height for each pollination type.

    Args:
        table: Observation table with ``type`` and ``height`` columns.

    Returns:
        pd.DataFrame: One row per type with columns ``type``, ``mean``, ``sd``
        and ``n``, sorted by type label. ``n`` counts non-missing heights so
        the counts sum to the number of measured rows.
    """
    grouped = table.groupby(COLUMNS.type, sort=True, observed=True)[COLUMNS.height]
    summary = grouped.agg(mean="mean", sd="std", n="count").reset_index()
    summary["n"] = summary["n"].astype(int)
    return summary


def paired_differences(table: pd.DataFrame) -> pd.DataFrame:
    """Pivot observations to one row per pair and subtract Self from Cross.

    Args:
        table: Observation table with ``pair``, ``type`` and ``height``.

    Returns:
        pd.DataFrame: Columns ``pair``, ``Cross``, ``Self`` and
        ``difference`` (``Cross - Self``), one row per pair id.

    Raises:
        PairingError: If a pair id appears more than once with the same type,
            or lacks its Cross or Self counterpart. The first offending pair
            id (in sorted order) is reported and no table is returned.
    """
    pair_col, type_col, height_col = COLUMNS.pair, COLUMNS.type, COLUMNS.height

    counts = table.groupby([pair_col, type_col], sort=True, observed=True).size()
    repeated = counts[counts > 1]
    if not repeated.empty:
        pair_id, label = repeated.index[0]
        raise PairingError(pair_id, f"{int(repeated.iloc[0])} rows labelled {label!r}")

    wide = table.pivot(index=pair_col, columns=type_col, values=height_col)
    wide = wide.reindex(columns=[CROSS, SELF])
    incomplete = wide[wide.isna().any(axis=1)]
    if not incomplete.empty:
        pair_id = incomplete.index[0]
        absent = [label for label in (CROSS, SELF) if pd.isna(incomplete.iloc[0][label])]
        raise PairingError(pair_id, f"no {' or '.join(absent)} value")

    out = pd.DataFrame(
        {
            pair_col: wide.index.to_numpy(),
            CROSS: wide[CROSS].to_numpy(dtype=float),
            SELF: wide[SELF].to_numpy(dtype=float),
        }
    )
    out["difference"] = out[CROSS] - out[SELF]
    return out


def difference_summary(wide: pd.DataFrame, column: str = "difference") -> DifferenceSummary:
    """Summarise the paired differences with ``se = sd / sqrt(n)``.

    Raises:
        InvalidInputError: If fewer than two differences are available.
    """
    values = pd.to_numeric(wide[column], errors="coerce").dropna().to_numpy(dtype=float)
    n = int(len(values))
    if n < 2:
        raise InvalidInputError("n", n, "at least 2 paired differences")
    mean = float(np.mean(values))
    sd = float(np.std(values, ddof=1))
    return DifferenceSummary(mean=mean, sd=sd, n=n, se=sd / math.sqrt(n))
