#!/usr/bin/env python3
"""
Main script for running the maize height analysis.
"""

# Pipeline overview (README-style):
# 1) Load Darwin's paired heights, normalise headers, and report data quality
#    (duplicates, implausible heights, missing cells) without dropping rows.
# 2) Summarise heights by pollination type and pivot to within-pair
#    differences (Cross - Self).
# 3) Build mean ± 2 SE and t intervals for the mean difference.
# 4) Fit height ~ 1 and height ~ type with an explicit reference level, plus
#    the releveled model, and tabulate coefficients with CIs.
# 5) Derive estimated marginal means and run the assumption checks.
# 6) Export CSV tables, caption text, and figures into the output directory.

import argparse
import logging
import os
import sys
import time
from pathlib import Path

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

from maize.analysis import run_analysis
from maize.config import (
    DEFAULT_ALPHA,
    DEFAULT_CONF_LEVELS,
    DEFAULT_INPUT,
    DEFAULT_OUTPUT_DIR,
    AnalysisConfig,
)
from maize.errors import MaizeError
from maize.schema import CROSS, TYPE_LEVELS

LOG_FILENAME = "analysis.log"


def _probability(text: str) -> float:
    value = float(text)
    if not (0.0 < value < 1.0):
        raise argparse.ArgumentTypeError(f"expected a value strictly between 0 and 1, got {text}")
    return value


def _configure_logging(output_dir: Path) -> None:
    output_dir.mkdir(parents=True, exist_ok=True)
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout),
            logging.FileHandler(output_dir / LOG_FILENAME, mode="w"),
        ],
        force=True,
    )


def _build_arg_parser() -> argparse.ArgumentParser:
    """Build command-line parser for the analysis pipeline."""
    parser = argparse.ArgumentParser(
        description="Crossed vs selfed maize height analysis (Darwin's paired data)."
    )
    parser.add_argument(
        "--input",
        default=str(DEFAULT_INPUT),
        help=f"Path to input CSV file (default: {DEFAULT_INPUT}).",
    )
    parser.add_argument(
        "--outdir",
        default=str(DEFAULT_OUTPUT_DIR),
        help=f"Output directory (default: {DEFAULT_OUTPUT_DIR}).",
    )
    parser.add_argument(
        "--height-min",
        type=float,
        default=None,
        help="Lower plausible height in inches; values below are reported.",
    )
    parser.add_argument(
        "--height-max",
        type=float,
        default=None,
        help="Upper plausible height in inches; values above are reported.",
    )
    parser.add_argument(
        "--conf-level",
        type=_probability,
        action="append",
        default=None,
        help="Confidence level for coefficient tables; repeat for several "
        f"(default: {', '.join(str(c) for c in DEFAULT_CONF_LEVELS)}).",
    )
    parser.add_argument(
        "--reference-level",
        default=CROSS,
        choices=list(TYPE_LEVELS),
        help=f"Reference level of the type factor (default: {CROSS}).",
    )
    parser.add_argument(
        "--alpha",
        type=_probability,
        default=DEFAULT_ALPHA,
        help=f"Significance level for assumption checks (default: {DEFAULT_ALPHA}).",
    )
    parser.add_argument(
        "--no-plots",
        action="store_true",
        help="Skip figure generation.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint; returns 1 when the analysis raises a :class:`MaizeError`."""
    parser = _build_arg_parser()
    args = parser.parse_args(argv)

    bounds = None
    if (args.height_min is None) != (args.height_max is None):
        parser.error("--height-min and --height-max must be given together")
    if args.height_min is not None:
        if args.height_min > args.height_max:
            parser.error("--height-min must not exceed --height-max")
        bounds = (args.height_min, args.height_max)

    config = AnalysisConfig(
        input_path=Path(args.input),
        output_dir=Path(args.outdir),
        height_bounds=bounds,
        conf_levels=tuple(args.conf_level) if args.conf_level else DEFAULT_CONF_LEVELS,
        reference_level=args.reference_level,
        alpha=args.alpha,
        make_plots=not args.no_plots,
    )
    _configure_logging(config.output_dir)

    start_time = time.time()
    try:
        records = run_analysis(config)
    except MaizeError as exc:
        logging.error("%s", exc)
        return 1

    logging.info("Total execution time: %.2f seconds", time.time() - start_time)
    logging.info("Generated output files:")
    for stem, path in records["tables"].items():
        logging.info("  - %s table: %s", stem, path)
    for stem, path in records["figures"].items():
        logging.info("  - %s figure: %s", stem, path)
    return 0


if __name__ == "__main__":
    sys.exit(main())
