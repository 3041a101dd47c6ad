"""
Pipeline driver for Darwin's crossed vs selfed maize height comparison.

Steps run strictly in order:

1. Load and normalise the observation table, then report data quality.
2. Summarise heights by pollination type and compute within-pair differences.
3. Build ``mean ± 2 SE`` and t intervals for the mean difference.
4. Fit the intercept-only and the two-group models (plus the releveled
   two-group model) and tabulate coefficients at every confidence level.
5. Compute estimated marginal means from the two-group model.
6. Run the assumption checks on the two-group model.
7. Hand the records to the reporting and plotting collaborators.
"""

from __future__ import annotations

import logging
import time
from dataclasses import asdict
from typing import Any, Dict

from .config import AnalysisConfig
from .data_processing import check_data_quality, load_observations
from .output import save_tables_to_csv
from .reporting import (
    format_confidence_interval,
    format_mean_sd,
    format_summary_table,
    generate_caption_texts,
    write_caption_files,
)
from .schema import COLUMNS
from .stats.descriptive import difference_summary, group_summary, paired_differences
from .stats.diagnostics import check_model, diagnostics_table
from .stats.emmeans import estimated_marginal_means
from .stats.intervals import interval_from_se, t_interval
from .stats.regression import (
    coefficient_table,
    confidence_intervals,
    fit_intercept_only,
    fit_with_factor,
    model_fit_summary,
    relevel,
)

logger = logging.getLogger(__name__)


def _timed(label: str, start: float) -> None:
    logger.info("%s completed in %.2f seconds", label, time.time() - start)


def _render_figures(records: Dict[str, Any], config: AnalysisConfig) -> Dict[str, str]:
    from .plotting import (
        plot_coefficients,
        plot_emmeans,
        plot_group_summary,
        plot_heights_by_type,
        plot_jitter_with_means,
        plot_model_checks,
        plot_model_summary,
        plot_normal_curve,
    )

    outdir = str(config.output_dir)
    table = records["table"]
    return {
        "heights_by_type": plot_heights_by_type(table, outdir),
        "group_summary": plot_group_summary(records["group_summary"], outdir),
        "normal_distribution": plot_normal_curve(outdir),
        "heights_with_means": plot_jitter_with_means(table, outdir),
        "coefficients": plot_coefficients(records["coefficients"][config.primary_conf_level], outdir),
        "emmeans": plot_emmeans(records["emmeans"], outdir),
        "model_checks": plot_model_checks(
            records["factor_model"], records["diagnostics"], outdir
        ),
        "model_summary": plot_model_summary(table, config.reference_level, outdir),
    }


def run_analysis(config: AnalysisConfig | None = None) -> Dict[str, Any]:
    """Run the full analysis and write its tables, captions, and figures.

    Args:
        config: Run parameters; defaults to :class:`AnalysisConfig()`.

    Returns:
        dict: Every intermediate record, keyed by name (``table``,
        ``quality``, ``group_summary``, ``paired``, ``difference``,
        ``difference_intervals``, ``intercept_model``, ``factor_model``,
        ``releveled_model``, ``coefficients``, ``releveled_coefficients``,
        ``model_fit``, ``emmeans``, ``diagnostics``, ``tables``, ``captions``,
        ``figures``).

    Raises:
        LoadError: If the input file cannot be read.
        PairingError: If a pair lacks its Cross or Self counterpart.
        InvalidInputError: If fewer than two pairs are available.
    """
    config = config or AnalysisConfig()
    pipeline_start = time.time()
    logger.info("Initializing maize height analysis for %s", config.input_path)
    records: Dict[str, Any] = {"config": config}

    step_start = time.time()
    table = load_observations(config.input_path)
    quality = check_data_quality(table, config.height_bounds)
    records["table"] = table
    records["quality"] = quality
    _timed("Loading and quality checks", step_start)

    step_start = time.time()
    groups = group_summary(table)
    paired = paired_differences(table)
    diff = difference_summary(paired)
    records["group_summary"] = groups
    records["paired"] = paired
    records["difference"] = diff
    for _, row in groups.iterrows():
        logger.info(
            "%s: mean ± SD = %s in (n=%d)",
            row[COLUMNS.type],
            format_mean_sd(row["mean"], row["sd"]),
            int(row["n"]),
        )
    logger.info(
        "Paired difference (Cross - Self): mean=%.4f, sd=%.4f, se=%.4f, n=%d",
        diff.mean,
        diff.sd,
        diff.se,
        diff.n,
    )
    _timed("Descriptive summaries", step_start)

    step_start = time.time()
    diff_intervals = {"normal_2se": interval_from_se(diff.mean, diff.se, multiplier=2.0)}
    for level in config.conf_levels:
        diff_intervals[f"t_{level:g}"] = t_interval(diff.mean, diff.se, diff.n - 1, level)
    records["difference_intervals"] = diff_intervals
    for name, ci in diff_intervals.items():
        logger.info("Difference interval %s: %s", name, format_confidence_interval(ci))
    _timed("Interval estimation", step_start)

    step_start = time.time()
    intercept_model = fit_intercept_only(table)
    factor_model = fit_with_factor(table, COLUMNS.type, config.reference_level)
    other_levels = [lvl for lvl in factor_model.levels if lvl != config.reference_level]
    releveled_model = fit_with_factor(
        relevel(table, COLUMNS.type, other_levels[0]), COLUMNS.type
    )
    conf_levels = tuple(config.conf_levels) or (config.primary_conf_level,)
    coefficients = {
        level: coefficient_table(factor_model, conf_level=level) for level in conf_levels
    }
    releveled_coefficients = coefficient_table(
        releveled_model, conf_level=config.primary_conf_level
    )
    records["intercept_model"] = intercept_model
    records["factor_model"] = factor_model
    records["releveled_model"] = releveled_model
    records["coefficients"] = coefficients
    records["releveled_coefficients"] = releveled_coefficients
    records["model_fit"] = model_fit_summary(factor_model)
    logger.info(
        "\n%s",
        format_summary_table(
            coefficients[config.primary_conf_level],
            f"Coefficients for {factor_model.formula} (reference: {factor_model.reference_level})",
            float_digits=3,
        ),
    )
    logger.info(
        "\n%s",
        format_summary_table(
            releveled_coefficients,
            f"Coefficients for {releveled_model.formula} "
            f"(reference: {releveled_model.reference_level})",
            float_digits=3,
        ),
    )
    _timed("Model fitting", step_start)

    step_start = time.time()
    emm = estimated_marginal_means(factor_model, level=config.primary_conf_level)
    records["emmeans"] = emm
    _timed("Estimated marginal means", step_start)

    step_start = time.time()
    diagnostics = check_model(
        factor_model, alpha=config.alpha, cooks_threshold=config.cooks_threshold
    )
    records["diagnostics"] = diagnostics
    for result in diagnostics.values():
        if result.flagged:
            logger.warning("Assumption check %s flagged (%s)", result.check, result.method)
        else:
            logger.info("Assumption check %s passed (%s)", result.check, result.method)
    _timed("Assumption checks", step_start)

    step_start = time.time()
    tables = {
        "group_summary": groups,
        "paired_differences": paired,
        "difference_summary": diff.to_frame(),
        "coefficients_intercept_only": coefficient_table(
            intercept_model, conf_level=config.primary_conf_level
        ),
        "coefficients_releveled": releveled_coefficients,
        "emmeans": emm,
        "diagnostics": diagnostics_table(diagnostics),
    }
    for level, coef in coefficients.items():
        tables[f"coefficients_{int(round(level * 100))}"] = coef
    records["tables"] = save_tables_to_csv(tables, str(config.output_dir))

    slope_term = f"{COLUMNS.type}{other_levels[0]}"
    slope_ci = confidence_intervals(factor_model, config.primary_conf_level)[slope_term]
    captions = generate_caption_texts(groups, asdict(diff), slope_ci)
    records["captions"] = captions
    write_caption_files(captions, str(config.output_dir))
    _timed("Writing tables and captions", step_start)

    records["figures"] = {}
    if config.make_plots:
        step_start = time.time()
        records["figures"] = _render_figures(records, config)
        _timed("Figure generation", step_start)

    logger.info(
        "Analysis pipeline completed in %.2f seconds", time.time() - pipeline_start
    )
    return records
