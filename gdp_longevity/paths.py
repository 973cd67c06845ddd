#!/usr/bin/env python3
"""Centralized Path Management for the GDP and Longevity Pipeline.

This module provides a single source of truth for the default file paths
used across the project. Every path can be overridden from the command line
or by passing explicit paths to `DataProcessor`.

Directory Structure:
    project_root/
    ├── gdp_longevity/  # Python source code
    ├── data/           # Raw wide-format input tables
    ├── output/         # Cleaned panel and analysis results
    └── figures/        # Generated plots

Usage:
    >>> from gdp_longevity.paths import OUTPUT_DIR, paths
    >>> clean_df.to_csv(paths.cleaned_panel, index=False)
"""

from pathlib import Path

# ============================================================================
# Root Directory
# ============================================================================

# Project root is parent of gdp_longevity/ directory
PROJECT_ROOT = Path(__file__).parent.parent

# ============================================================================
# Input Data
# ============================================================================

DATA_DIR = PROJECT_ROOT / "data"
"""Root directory for the raw wide-format tables."""

LIFE_EXPECTANCY_FILE = DATA_DIR / "life_expectancy_years.csv"
"""Life expectancy at birth, one row per country, one column per year."""

GDP_PER_CAPITA_FILE = DATA_DIR / "gdp_per_capita.csv"
"""GDP per capita with 'k'-suffixed thousands shorthand, same layout."""

# ============================================================================
# Output Directories
# ============================================================================

OUTPUT_DIR = PROJECT_ROOT / "output"
"""Cleaned panel and analysis results."""

FIGURES_DIR = PROJECT_ROOT / "figures"
"""Generated plots."""


# ============================================================================
# Common File Paths
# ============================================================================

class CommonPaths:
    """Commonly used output file paths, resolved against an output directory."""

    def __init__(self, output_dir: Path = OUTPUT_DIR, figures_dir: Path = FIGURES_DIR):
        self.output_dir = Path(output_dir)
        self.figures_dir = Path(figures_dir)

    @property
    def cleaned_panel(self) -> Path:
        """Merged and filtered country-year records (the stable output contract)."""
        return self.output_dir / "cleaned_panel.csv"

    @property
    def country_aggregates(self) -> Path:
        """One row per country with mean life expectancy and GDP per capita."""
        return self.output_dir / "country_aggregates.csv"

    @property
    def cv_scores(self) -> Path:
        """Per-fold cross-validation scores."""
        return self.output_dir / "cv_scores.csv"

    @property
    def regression_summary(self) -> Path:
        """Full-sample OLS coefficients and cross-validation summary."""
        return self.output_dir / "regression_summary.csv"

    @property
    def regression_plot(self) -> Path:
        return self.figures_dir / "life_expectancy_vs_log_gdp.pdf"

    @property
    def cv_plot(self) -> Path:
        return self.figures_dir / "cv_scores.pdf"


# Default instance for easy imports
paths = CommonPaths()


if __name__ == "__main__":
    print("=" * 80)
    print("Configured Paths for GDP and Longevity Pipeline")
    print("=" * 80)
    print(f"\nProject Root: {PROJECT_ROOT}")
    print(f"\n  Inputs:")
    print(f"    Life expectancy: {LIFE_EXPECTANCY_FILE}")
    print(f"    GDP per capita:  {GDP_PER_CAPITA_FILE}")
    print(f"\n  Outputs:")
    print(f"    Results: {OUTPUT_DIR}")
    print(f"    Figures: {FIGURES_DIR}")
