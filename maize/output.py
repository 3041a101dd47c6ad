"""Write analysis outputs to reproducible CSV files.

This module is the boundary between in-memory analysis records and the
tabular artifacts handed out with the course notes.
"""

from __future__ import annotations

import logging
import os
from typing import Dict, Mapping

import pandas as pd

from .reporting import add_formatted_reporting_columns

logger = logging.getLogger(__name__)


def save_tables_to_csv(
    tables: Mapping[str, pd.DataFrame], output_dir: str = "output"
) -> Dict[str, str]:
    """Save each named table as ``<name>.csv`` in ``output_dir``.

    Args:
        tables: Mapping of file stem to table. A ``group_summary`` table gains
            ``mean (reported)`` and ``sd (reported)`` columns rounded to the
            SD's significant figures; an ``emmeans`` table gains the same for
            ``emmean``/``se``.
        output_dir: Directory where CSV outputs are written.

    Returns:
        dict[str, str]: Mapping of file stem to written path.
    """
    os.makedirs(output_dir, exist_ok=True)
    formatted_pairs = {
        "group_summary": [("mean", "sd")],
        "emmeans": [("emmean", "se")],
    }

    written: Dict[str, str] = {}
    for stem, table in tables.items():
        report = table
        if stem in formatted_pairs:
            report = add_formatted_reporting_columns(table, formatted_pairs[stem])
        path = os.path.join(output_dir, f"{stem}.csv")
        report.to_csv(path, index=False)
        written[stem] = path
        logger.info("Saved %s to %s", stem, path)
    return written
