"""Run configuration for the maize analysis pipeline."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .schema import CROSS

DEFAULT_INPUT = Path("data") / "darwin.csv"
DEFAULT_OUTPUT_DIR = Path("output")
DEFAULT_CONF_LEVELS: tuple[float, ...] = (0.95, 0.99)
DEFAULT_ALPHA = 0.05


@dataclass(frozen=True)
class AnalysisConfig:
    """Parameters for one pipeline run.

    Attributes:
        input_path: Comma-delimited observation file.
        output_dir: Directory receiving CSV tables, figures, and the log file.
        height_bounds: Optional ``(low, high)`` plausible height range in
            inches. Values outside are reported, never dropped.
        conf_levels: Confidence levels for coefficient tables. The first entry
            is also used for estimated marginal means.
        reference_level: Baseline category of the ``type`` factor.
        alpha: Significance level for assumption checks.
        cooks_threshold: Cook's distance cut-off; ``None`` means ``4/n``.
        make_plots: Whether to render figures.
    """

    input_path: Path = DEFAULT_INPUT
    output_dir: Path = DEFAULT_OUTPUT_DIR
    height_bounds: tuple[float, float] | None = None
    conf_levels: tuple[float, ...] = DEFAULT_CONF_LEVELS
    reference_level: str = CROSS
    alpha: float = DEFAULT_ALPHA
    cooks_threshold: float | None = None
    make_plots: bool = True

    @property
    def primary_conf_level(self) -> float:
        return float(self.conf_levels[0]) if self.conf_levels else 0.95
