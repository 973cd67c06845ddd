"""Pytest configuration and shared fixtures for the GDP and longevity pipeline tests.

This module provides fixtures for:
- Small hand-written wide tables
- Synthetic country aggregates for cross-validation
- Synthetic wide CSV files for end-to-end runs
"""

from pathlib import Path
from typing import Dict

import numpy as np
import pandas as pd
import pytest


# ============================================================================
# Wide Table Fixtures
# ============================================================================

@pytest.fixture
def life_wide() -> pd.DataFrame:
    """Life expectancy table with a malformed 2100 cell for Afghanistan."""
    return pd.DataFrame({
        "country": ["Afghanistan", "Albania"],
        "1800": ["28.2", "35.4"],
        "1801": ["28.2", ""],
        "2100": ["85k", "88.1"],
    })


@pytest.fixture
def gdp_wide() -> pd.DataFrame:
    """GDP per capita table mixing plain numerals and 'k' shorthand."""
    return pd.DataFrame({
        "country": ["Afghanistan", "Albania"],
        "1800": ["2k", "667"],
        "1801": ["2k", "1.1k"],
        "2100": ["5.5k", "40k"],
    })


# ============================================================================
# Cross-Validation Fixtures
# ============================================================================

def _make_aggregates(n_countries: int, seed: int = 0) -> pd.DataFrame:
    """Country aggregates with life expectancy roughly linear in log10 GDP."""
    rng = np.random.default_rng(seed)
    log10_gdp = rng.uniform(2.7, 5.0, n_countries)
    mean_le = 20 + 12 * log10_gdp + rng.normal(0, 3, n_countries)
    return pd.DataFrame({
        "country": [f"Country {i:02d}" for i in range(n_countries)],
        "mean_life_expectancy": mean_le,
        "mean_gdp_per_capita": 10 ** log10_gdp,
        "log10_gdp": log10_gdp,
        "n_years": 1,
    })


@pytest.fixture
def aggregates() -> pd.DataFrame:
    return _make_aggregates(34)


# ============================================================================
# File Fixtures
# ============================================================================

def _make_wide_tables(n_countries: int = 30, years=range(2000, 2030), seed: int = 1) -> Dict[str, pd.DataFrame]:
    """Synthetic wide tables with blank, malformed and 'k'-suffixed cells."""
    rng = np.random.default_rng(seed)
    years = list(years)
    countries = [f"Country {i:02d}" for i in range(n_countries)]

    life_rows, gdp_rows = [], []
    for i, country in enumerate(countries):
        base_gdp = 10 ** rng.uniform(2.7, 5.0)
        life = {"country": country}
        gdp = {"country": country}
        for j, year in enumerate(years):
            gdp_value = base_gdp * (1.02 ** j)
            le_value = 20 + 12 * np.log10(gdp_value) + rng.normal(0, 2)
            life[str(year)] = f"{le_value:.1f}"
            gdp[str(year)] = f"{gdp_value / 1000:.2f}k" if gdp_value >= 10000 else f"{gdp_value:.0f}"
        life_rows.append(life)
        gdp_rows.append(gdp)

    life_df = pd.DataFrame(life_rows)
    gdp_df = pd.DataFrame(gdp_rows)
    # A few cells the pipeline has to absorb
    life_df.loc[0, str(years[0])] = ""
    life_df.loc[1, str(years[1])] = "n/a"
    life_df.loc[2, str(years[2])] = "250"
    gdp_df.loc[3, str(years[3])] = "12K"
    return {"life": life_df, "gdp": gdp_df}


@pytest.fixture
def wide_csv_files(tmp_path: Path) -> Dict[str, Path]:
    """Write synthetic wide tables to CSV and return their paths."""
    tables = _make_wide_tables()
    life_path = tmp_path / "life_expectancy_years.csv"
    gdp_path = tmp_path / "gdp_per_capita.csv"
    tables["life"].to_csv(life_path, index=False)
    tables["gdp"].to_csv(gdp_path, index=False)
    return {"life": life_path, "gdp": gdp_path, "output_dir": tmp_path / "output"}


@pytest.fixture
def aggregates_factory():
    """Build synthetic aggregates for a given number of countries and seed."""
    return _make_aggregates


@pytest.fixture
def wide_tables_factory():
    """Build synthetic wide tables for a given number of countries and years."""
    return _make_wide_tables
