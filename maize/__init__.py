"""
A Python package for the crossed vs selfed maize height analysis.

Compares Darwin's paired heights of cross- and self-pollinated maize plants
with descriptive summaries, confidence intervals, simple linear models, and
assumption checks.

Modules:
    - data_processing: Loads the observation table and reports data quality.
    - stats: Group summaries, intervals, linear models, marginal means, and
      assumption checks.
    - reporting / output: Formats summaries and writes CSV and caption files.
    - plotting: Renders figures from precomputed records.
    - analysis: Runs the whole pipeline from an AnalysisConfig.
"""

__version__ = "1.0.0"

from .analysis import run_analysis
from .config import AnalysisConfig
from .data_processing import (
    DataQualityReport,
    check_data_quality,
    clean_names,
    load_observations,
    summarise_table,
)
from .errors import (
    DegenerateModelError,
    InvalidInputError,
    LoadError,
    MaizeError,
    PairingError,
)
from .stats import (
    ConfidenceInterval,
    DiagnosticResult,
    DifferenceSummary,
    LinearModel,
    check_model,
    coefficient_table,
    confidence_intervals,
    difference_summary,
    estimated_marginal_means,
    fit_intercept_only,
    fit_with_factor,
    group_summary,
    interval_from_se,
    paired_differences,
    relevel,
    t_interval,
)

__all__ = [
    # Pipeline
    "AnalysisConfig",
    "run_analysis",
    # Data processing
    "DataQualityReport",
    "check_data_quality",
    "clean_names",
    "load_observations",
    "summarise_table",
    # Errors
    "MaizeError",
    "LoadError",
    "PairingError",
    "DegenerateModelError",
    "InvalidInputError",
    # Statistics
    "DifferenceSummary",
    "group_summary",
    "paired_differences",
    "difference_summary",
    "ConfidenceInterval",
    "interval_from_se",
    "t_interval",
    "LinearModel",
    "fit_intercept_only",
    "fit_with_factor",
    "relevel",
    "confidence_intervals",
    "coefficient_table",
    "estimated_marginal_means",
    "DiagnosticResult",
    "check_model",
]
