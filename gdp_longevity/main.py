#!/usr/bin/env python3
"""
Main Execution Script for the GDP and Longevity Pipeline

Runs the cleaning pipeline on the two wide-format tables, then the
regression and cross-validation, and optionally the plots.

Usage:
    $ gdp-longevity --life data/life_expectancy_years.csv --gdp data/gdp_per_capita.csv
    $ gdp-longevity --include_projections --min_fold_size 5 --seed 7 --plot
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from gdp_longevity.analysis import export_results, run_analysis
from gdp_longevity.config import PipelineConfig
from gdp_longevity.exceptions import PipelineError
from gdp_longevity.logging_config import create_logger, log_exception, set_log_level
from gdp_longevity.paths import (
    FIGURES_DIR, GDP_PER_CAPITA_FILE, LIFE_EXPECTANCY_FILE, OUTPUT_DIR, CommonPaths
)
from gdp_longevity.preprocess import DataProcessor

logger = create_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    defaults = PipelineConfig()
    parser = argparse.ArgumentParser(description="GDP per capita and life expectancy analysis")
    parser.add_argument("--life", type=Path, default=LIFE_EXPECTANCY_FILE, help="Wide life expectancy CSV")
    parser.add_argument("--gdp", type=Path, default=GDP_PER_CAPITA_FILE, help="Wide GDP per capita CSV")
    parser.add_argument("--output_dir", type=Path, default=OUTPUT_DIR, help="Directory for output CSV files")
    parser.add_argument("--figures_dir", type=Path, default=FIGURES_DIR, help="Directory for figures")
    cutoff = parser.add_mutually_exclusive_group()
    cutoff.add_argument("--cutoff", type=int, default=defaults.historical_cutoff,
                        help="Last historical year to keep")
    cutoff.add_argument("--include_projections", action="store_true",
                        help="Keep projected years after the cutoff")
    parser.add_argument("--min_fold_size", type=int, default=defaults.min_fold_size,
                        help="Target countries per cross-validation fold")
    parser.add_argument("--seed", type=int, default=defaults.seed, help="Seed for fold assignment")
    parser.add_argument("--clean_only", action="store_true", help="Only write the cleaned panel")
    parser.add_argument("--plot", action="store_true", help="Create regression and cross-validation plots")
    parser.add_argument("--progress", action="store_true", help="Show a progress bar over folds")
    parser.add_argument("--log_level", default="INFO",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"], help="Logging level")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main function"""
    args = build_parser().parse_args(argv)
    set_log_level(args.log_level)

    config = PipelineConfig(
        historical_cutoff=None if args.include_projections else args.cutoff,
        min_fold_size=args.min_fold_size,
        seed=args.seed,
    )

    try:
        processor = DataProcessor(config, args.life, args.gdp, args.output_dir)
        clean_df = processor.run_all_processing()
        if args.clean_only:
            return 0

        results = run_analysis(clean_df, config, progress=args.progress)
        export_results(results, args.output_dir)
    except PipelineError as e:
        log_exception(logger, e, context=f"life={args.life}, gdp={args.gdp}")
        return 1

    if args.plot:
        # Imported here so that matplotlib is only loaded when plotting
        from gdp_longevity.plot import create_cv_plot, create_regression_plot

        paths = CommonPaths(args.output_dir, args.figures_dir)
        create_regression_plot(results['aggregates'], results['fit'], paths.regression_plot)
        create_cv_plot(results['cv'].scores, paths.cv_plot)

    logger.info("Analysis completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())
