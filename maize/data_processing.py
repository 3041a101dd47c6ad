"""
Handles CSV parsing, header normalisation, and data-quality inspection.
"""

# Algorithm summary: read the comma-delimited export inside a scoped file
# handle, normalise headers to lower snake case, coerce heights to numbers,
# then report (never silently fix) duplicated rows, implausible heights, and
# missing cells so the analyst can decide what to do with them.

from __future__ import annotations

import logging
import math
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

import numpy as np
import pandas as pd

from .errors import InvalidInputError, LoadError
from .schema import COLUMNS, TYPE_LEVELS

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: tuple[str, ...] = (COLUMNS.pair, COLUMNS.type, COLUMNS.height)


@dataclass(frozen=True)
class DataQualityReport:
    """Container for the checks run on a freshly loaded observation table."""

    n_rows: int
    duplicate_rows: int
    height_min: float
    height_max: float
    missing_values: int
    out_of_range: tuple = ()
    height_bounds: tuple[float, float] | None = None
    pair_ids: tuple = field(default_factory=tuple)
    type_levels: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_issues(self) -> bool:
        return bool(self.duplicate_rows or self.missing_values or self.out_of_range)


def _snake_case(name) -> str:
    text = str(name).strip()
    text = re.sub(r"([a-z0-9])([A-Z])", r"\1_\2", text)
    text = re.sub(r"([A-Z]+)([A-Z][a-z])", r"\1_\2", text)
    text = re.sub(r"[^0-9A-Za-z]+", "_", text)
    return text.strip("_").lower()


def clean_names(columns: Iterable) -> list[str]:
    """Normalise column headers to unique lower snake case names.

    ``"Plant Height"``, ``"plantHeight"`` and ``" PLANT-height "`` all become
    ``"plant_height"``. Empty names become ``"x"`` and repeated names receive
    a numeric suffix (``"height"``, ``"height_2"``).

    Args:
        columns: Original header labels.

    Returns:
        list[str]: Normalised labels in the original order.
    """
    cleaned: list[str] = []
    seen: dict[str, int] = {}
    for col in columns:
        base = _snake_case(col) or "x"
        count = seen.get(base, 0) + 1
        seen[base] = count
        cleaned.append(base if count == 1 else f"{base}_{count}")
    return cleaned


def _coerce_pair_ids(series: pd.Series) -> pd.Series:
    numeric = pd.to_numeric(series, errors="coerce")
    if numeric.notna().all() and np.all(np.mod(numeric.to_numpy(dtype=float), 1) == 0):
        return numeric.astype(int)
    return series.astype(str).str.strip()


def load_observations(filepath) -> pd.DataFrame:
    """Load the paired maize-height table from a CSV file.

    Args:
        filepath (str | pathlib.Path): Path to a comma-delimited file whose
            header maps (case and format insensitive) onto ``pair``, ``type``
            and ``height``.

    Returns:
        pd.DataFrame: Table with normalised headers, whitespace-stripped
        ``type`` labels, and numeric ``height`` (unparseable cells become NaN).

    Raises:
        LoadError: If the file is missing, unreadable, or unparseable, if a
            required column is absent, or if ``type`` holds labels other than
            ``Cross`` and ``Self``.
    """
    path = Path(filepath)
    try:
        with open(path, newline="", encoding="utf-8") as handle:
            raw_df = pd.read_csv(handle)
    except (
        OSError,
        UnicodeDecodeError,
        pd.errors.ParserError,
        pd.errors.EmptyDataError,
    ) as exc:
        raise LoadError(path, exc) from exc

    raw_df.columns = clean_names(raw_df.columns)
    missing = [col for col in REQUIRED_COLUMNS if col not in raw_df.columns]
    if missing:
        raise LoadError(
            path,
            f"missing required columns {missing}; found {list(raw_df.columns)}",
        )

    df = raw_df.copy()
    labels = df[COLUMNS.type]
    df[COLUMNS.type] = labels.where(labels.isna(), labels.astype(str).str.strip())
    unknown = sorted(set(df[COLUMNS.type].dropna()) - set(TYPE_LEVELS))
    if unknown:
        raise LoadError(
            path,
            f"unexpected {COLUMNS.type} labels {unknown}; "
            f"expected only {list(TYPE_LEVELS)}",
        )

    if df[COLUMNS.pair].notna().all():
        df[COLUMNS.pair] = _coerce_pair_ids(df[COLUMNS.pair])

    heights = pd.to_numeric(df[COLUMNS.height], errors="coerce")
    n_malformed = int((heights.isna() & df[COLUMNS.height].notna()).sum())
    if n_malformed:
        logger.warning(
            "%d non-numeric %s value(s) in %s were treated as missing",
            n_malformed,
            COLUMNS.height,
            path,
        )
    df[COLUMNS.height] = heights.astype(float)

    logger.info("Loaded %d observations from %s", len(df), path)
    return df


def check_data_quality(
    table: pd.DataFrame,
    height_bounds: tuple[float, float] | None = None,
) -> DataQualityReport:
    """Report duplicates, height range, and missing cells without modifying data.

    Args:
        table: Observation table from :func:`load_observations`.
        height_bounds: Optional ``(low, high)`` plausible range in inches.
            Heights outside it are listed in ``out_of_range`` and logged. No
            bound is enforced when omitted; only the observed range is logged.

    Returns:
        DataQualityReport: Counts and ranges describing the table.

    Raises:
        InvalidInputError: If ``height_bounds`` is not an ordered finite pair.
    """
    if height_bounds is not None:
        low, high = (float(b) for b in height_bounds)
        if not (math.isfinite(low) and math.isfinite(high)) or low > high:
            raise InvalidInputError("height_bounds", height_bounds, "finite low <= high")
        height_bounds = (low, high)

    duplicate_rows = int(table.duplicated().sum())
    if duplicate_rows:
        logger.warning("Found %d duplicated row(s); they were kept", duplicate_rows)

    heights = table[COLUMNS.height]
    height_min = float(heights.min(skipna=True)) if heights.notna().any() else math.nan
    height_max = float(heights.max(skipna=True)) if heights.notna().any() else math.nan
    logger.info("Observed %s range: %.3f to %.3f", COLUMNS.height, height_min, height_max)

    out_of_range: tuple = ()
    if height_bounds is not None:
        low, high = height_bounds
        mask = heights.notna() & ((heights < low) | (heights > high))
        out_of_range = tuple(table.index[mask])
        for idx in out_of_range:
            logger.warning(
                "Row %s has %s %.3f outside plausible range [%.3f, %.3f]",
                idx,
                COLUMNS.height,
                float(heights.loc[idx]),
                low,
                high,
            )

    missing_values = int(table.isna().sum().sum())
    if missing_values:
        logger.warning("Table contains %d missing cell(s)", missing_values)

    return DataQualityReport(
        n_rows=int(len(table)),
        duplicate_rows=duplicate_rows,
        height_min=height_min,
        height_max=height_max,
        missing_values=missing_values,
        out_of_range=out_of_range,
        height_bounds=height_bounds,
        pair_ids=tuple(pd.unique(table[COLUMNS.pair].dropna())),
        type_levels=tuple(str(v) for v in pd.unique(table[COLUMNS.type].dropna())),
    )


def summarise_table(table: pd.DataFrame) -> pd.DataFrame:
    """Return a quick per-column summary (count, distinct values, spread)."""
    return table.describe(include="all")
