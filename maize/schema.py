"""Define standardized column names and category labels for observation tables."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ObservationColumns:
    """Container for standardized column labels.

    These names are produced by header normalisation in
    :func:`maize.data_processing.load_observations` and are used by every
    downstream summary, model, and plot.

    Attributes:
        pair: Identifier grouping one cross-pollinated and one
            self-pollinated plant grown in the same pot.

        type: Pollination treatment. Restricted to ``Cross`` and ``Self``.

        height: Plant height in inches, recorded to the nearest eighth.
    """

    pair: str = "pair"
    type: str = "type"
    height: str = "height"


COLUMNS = ObservationColumns()

CROSS = "Cross"
SELF = "Self"
TYPE_LEVELS: tuple[str, ...] = (CROSS, SELF)
