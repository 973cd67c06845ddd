#!/usr/bin/env python3
"""
preprocess.py

This module turns the two raw wide-format tables in `data`:

1. Life expectancy at birth (one column per year, plain numerals)
2. GDP per capita (one column per year, numerals or "k"-suffixed thousands)

into the cleaned country-year panel written to `output/cleaned_panel.csv`,
and collapses that panel to one row per country for the regression.

Every stage is a pure function that returns a new DataFrame:

    reshape_wide_to_long -> normalize_values -> merge_panels
        -> apply_quality_filter -> aggregate_countries
"""

import re
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

import numpy as np
import pandas as pd

from gdp_longevity.config import PipelineConfig
from gdp_longevity.exceptions import DuplicateKey, EmptyGroup, MalformedHeader
from gdp_longevity.logging_config import create_logger
from gdp_longevity.paths import GDP_PER_CAPITA_FILE, LIFE_EXPECTANCY_FILE, OUTPUT_DIR, CommonPaths

logger = create_logger(__name__)

ID_COL = "country"
KEY_COLUMNS = [ID_COL, "year"]
VALUE_COLUMNS = ["life_expectancy", "gdp_per_capita"]
PANEL_COLUMNS = KEY_COLUMNS + VALUE_COLUMNS
AGGREGATE_COLUMNS = [
    "country", "mean_life_expectancy", "mean_gdp_per_capita", "log10_gdp", "n_years"
]
THOUSANDS_SUFFIX = "k"

# Signed decimal with optional exponent; no digit grouping, no "nan" or "inf"
DECIMAL_PATTERN = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


@dataclass(frozen=True)
class FilterReport:
    """Row counts removed by each quality filter predicate, in order."""
    input_rows: int
    dropped_missing: int
    dropped_implausible: int
    dropped_projected: int
    output_rows: int


@dataclass(frozen=True)
class CountryAggregate:
    """Means over all retained years for one country."""
    country: str
    mean_life_expectancy: float
    mean_gdp_per_capita: float
    log10_gdp: float
    n_years: int


# ============================================================================
# Wide-to-long Reshaping
# ============================================================================

def read_wide_csv(path: Union[str, Path], id_col: str = ID_COL) -> pd.DataFrame:
    """Read a wide table keeping every cell as a raw text token.

    Empty cells stay as "" so that the normalizer, not the reader, decides
    what counts as missing.
    """
    wide = pd.read_csv(path, dtype=str, keep_default_na=False)
    if id_col not in wide.columns:
        raise MalformedHeader(id_col, f"{path} has no {id_col!r} column")
    logger.info(f"Read {path}: {len(wide)} countries x {len(wide.columns) - 1} years")
    return wide


def parse_year_header(header) -> int:
    """Parse a year column header, raising MalformedHeader if it is not an integer."""
    try:
        return int(str(header).strip())
    except ValueError:
        raise MalformedHeader(header) from None


def reshape_wide_to_long(wide: pd.DataFrame, value_name: str = "value",
                         id_col: str = ID_COL) -> pd.DataFrame:
    """
    Convert a country-by-year table into (country, year, value) rows.

    Every cell becomes a row, including empty ones. Only rows without a
    country name are dropped, with a warning.

    Args:
        wide: Table with one id column and one column per year
        value_name: Name of the value column in the result
        id_col: Name of the country column

    Returns:
        Long DataFrame with columns [id_col, 'year', value_name]

    Raises:
        MalformedHeader: If the id column is missing, or a year header is
            not an integer or appears twice.
    """
    if id_col not in wide.columns:
        raise MalformedHeader(id_col, f"Table has no {id_col!r} column")

    year_cols = [col for col in wide.columns if col != id_col]
    years = {col: parse_year_header(col) for col in year_cols}
    if len(set(years.values())) != len(year_cols):
        duplicated = pd.Index(year_cols)[pd.Index([years[c] for c in year_cols]).duplicated()]
        raise MalformedHeader(duplicated[0], f"Year column {duplicated[0]!r} appears more than once")

    unnamed = wide[id_col].isna() | (wide[id_col].astype(str).str.strip() == "")
    if unnamed.any():
        logger.warning(f"Dropped {int(unnamed.sum())} rows with a blank {id_col!r} cell")
        wide = wide[~unnamed]

    long_df = pd.melt(
        wide,
        id_vars=[id_col],
        value_vars=year_cols,
        var_name='year',
        value_name=value_name
    )
    long_df['year'] = long_df['year'].map(years).astype('int64')
    return long_df


def reshape_long_to_wide(long_df: pd.DataFrame, value_name: str = "value",
                         id_col: str = ID_COL) -> pd.DataFrame:
    """Pivot (country, year, value) rows back to one column per year.

    Countries and years keep their order of first appearance, and year
    headers are written back as strings.
    """
    countries = pd.Index(pd.unique(long_df[id_col]), name=id_col)
    years = pd.unique(long_df['year'])

    wide = long_df.pivot(index=id_col, columns='year', values=value_name)
    wide = wide.reindex(index=countries, columns=years)
    wide.columns = [str(year) for year in wide.columns]
    return wide.reset_index()


# ============================================================================
# Value Normalization
# ============================================================================

def _is_missing(token) -> bool:
    if token is None:
        return True
    if isinstance(token, str):
        return not token.strip()
    return bool(pd.isna(token))


def parse_decimal(token) -> Optional[float]:
    """Parse a plain numeral token; blank, unparseable or non-finite tokens give None."""
    if _is_missing(token):
        return None
    text = str(token).strip()
    if not DECIMAL_PATTERN.fullmatch(text):
        return None
    value = float(text)
    return value if np.isfinite(value) else None


def normalize_token(token, thousands_suffix: bool = True) -> Optional[float]:
    """
    Normalize one raw cell token to a float, or None when it is missing.

    With `thousands_suffix`, a token ending in a lowercase "k" is read as
    thousands ("2k" -> 2000.0). The suffix check is case-sensitive.
    """
    if thousands_suffix and isinstance(token, str):
        text = token.strip()
        if text.endswith(THOUSANDS_SUFFIX):
            value = parse_decimal(text[:-len(THOUSANDS_SUFFIX)])
            return None if value is None else value * 1000
    return parse_decimal(token)


def normalize_values(long_df: pd.DataFrame, value_name: str,
                     source_col: str = "value",
                     thousands_suffix: bool = False) -> pd.DataFrame:
    """
    Replace the raw token column with a nullable Float64 column.

    Missing values are pd.NA. Unparseable tokens are counted and logged,
    never raised.

    Args:
        long_df: Output of reshape_wide_to_long
        value_name: Name of the numeric column to create
        source_col: Name of the raw token column to replace
        thousands_suffix: Whether "k"-suffixed tokens are read as thousands

    Returns:
        New DataFrame without `source_col` and with `value_name`
    """
    raw = long_df[source_col]
    parsed = [normalize_token(token, thousands_suffix) for token in raw]
    values = pd.array(parsed, dtype="Float64")

    blank = np.array([_is_missing(token) for token in raw], dtype=bool)
    n_unparseable = int((np.asarray(values.isna()) & ~blank).sum())
    if n_unparseable:
        logger.info(f"{n_unparseable} unparseable {value_name} tokens treated as missing")

    return long_df.drop(columns=[source_col]).assign(**{value_name: values})


# ============================================================================
# Merging
# ============================================================================

def _check_unique_keys(df: pd.DataFrame, source: str) -> None:
    duplicated = df.duplicated(subset=KEY_COLUMNS, keep=False)
    if duplicated.any():
        keys = df.loc[duplicated, KEY_COLUMNS].drop_duplicates()
        raise DuplicateKey(list(keys.itertuples(index=False, name=None)), source)


def merge_panels(life_df: pd.DataFrame, gdp_df: pd.DataFrame) -> pd.DataFrame:
    """
    Inner-join life expectancy and GDP observations on (country, year).

    A key is kept when it is present in both tables, whether or not its
    values are missing; missing values are left to the quality filter.

    Raises:
        DuplicateKey: If either table repeats a (country, year) key.
    """
    _check_unique_keys(life_df, "life expectancy")
    _check_unique_keys(gdp_df, "GDP per capita")

    merged_df = pd.merge(
        life_df[KEY_COLUMNS + ['life_expectancy']],
        gdp_df[KEY_COLUMNS + ['gdp_per_capita']],
        on=KEY_COLUMNS,
        how='inner',
        validate='one_to_one'
    )
    merged_df = merged_df.sort_values(KEY_COLUMNS, kind='mergesort').reset_index(drop=True)

    logger.info(
        f"Merged {len(life_df)} life expectancy and {len(gdp_df)} GDP observations "
        f"into {len(merged_df)} country-year records"
    )
    return merged_df[PANEL_COLUMNS]


# ============================================================================
# Quality Filter
# ============================================================================

def apply_quality_filter(records: pd.DataFrame,
                         config: Optional[PipelineConfig] = None) -> Tuple[pd.DataFrame, FilterReport]:
    """
    Drop incomplete, implausible and (optionally) projected records.

    Predicates, applied in order:
        1. life_expectancy or gdp_per_capita missing
        2. life_expectancy outside config.life_expectancy_bounds (inclusive)
        3. year > config.historical_cutoff, when a cutoff is set

    The predicates commute, so the order only affects the counts in the
    returned FilterReport. Applying the filter to its own output is a no-op.

    Returns:
        Tuple of (filtered records with float64 values, FilterReport)
    """
    config = config or PipelineConfig()
    lower, upper = config.life_expectancy_bounds

    complete = records.dropna(subset=VALUE_COLUMNS)
    complete = complete.astype({col: 'float64' for col in VALUE_COLUMNS})

    plausible = complete[complete['life_expectancy'].between(lower, upper)]

    if config.historical_cutoff is not None:
        kept = plausible[plausible['year'] <= config.historical_cutoff]
    else:
        kept = plausible

    report = FilterReport(
        input_rows=len(records),
        dropped_missing=len(records) - len(complete),
        dropped_implausible=len(complete) - len(plausible),
        dropped_projected=len(plausible) - len(kept),
        output_rows=len(kept),
    )
    logger.info(f"Dropped {report.dropped_missing} records with missing values")
    logger.info(f"Dropped {report.dropped_implausible} records with life expectancy outside [{lower}, {upper}]")
    if config.historical_cutoff is not None:
        logger.info(f"Dropped {report.dropped_projected} records after {config.historical_cutoff}")
    logger.info(f"Kept {report.output_rows}/{report.input_rows} records")

    return kept.reset_index(drop=True), report


# ============================================================================
# Aggregation
# ============================================================================

def aggregate_country(country: str, rows: pd.DataFrame) -> CountryAggregate:
    """Average one country's retained years.

    Raises:
        EmptyGroup: If `rows` is empty.
    """
    if rows.empty:
        raise EmptyGroup(country)

    mean_gdp = float(rows['gdp_per_capita'].mean())
    return CountryAggregate(
        country=country,
        mean_life_expectancy=float(rows['life_expectancy'].mean()),
        mean_gdp_per_capita=mean_gdp,
        log10_gdp=float(np.log10(mean_gdp)) if mean_gdp > 0 else float('nan'),
        n_years=len(rows),
    )


def aggregate_countries(records: pd.DataFrame) -> pd.DataFrame:
    """
    Collapse cleaned records to one row per country, sorted by country.

    Countries whose mean GDP per capita is not positive have no log10 GDP
    and are left out of the regression sample with a warning.
    """
    aggregates = [
        aggregate_country(country, group)
        for country, group in records.groupby(ID_COL, sort=True)
    ]
    aggregates_df = pd.DataFrame([asdict(a) for a in aggregates], columns=AGGREGATE_COLUMNS)

    no_log = ~(aggregates_df['mean_gdp_per_capita'] > 0)
    if no_log.any():
        logger.warning(
            f"Skipping {int(no_log.sum())} countries with non-positive mean GDP per capita: "
            f"{', '.join(aggregates_df.loc[no_log, 'country'])}"
        )
        aggregates_df = aggregates_df[~no_log].reset_index(drop=True)

    logger.info(f"Aggregated {len(records)} records into {len(aggregates_df)} countries")
    return aggregates_df


# ============================================================================
# Full Cleaning Pipeline
# ============================================================================

def build_clean_panel(life_wide: pd.DataFrame, gdp_wide: pd.DataFrame,
                      config: Optional[PipelineConfig] = None) -> Tuple[pd.DataFrame, FilterReport]:
    """Reshape, normalize, merge and filter the two wide tables."""
    life_long = normalize_values(
        reshape_wide_to_long(life_wide), 'life_expectancy', thousands_suffix=False
    )
    gdp_long = normalize_values(
        reshape_wide_to_long(gdp_wide), 'gdp_per_capita', thousands_suffix=True
    )
    merged_df = merge_panels(life_long, gdp_long)
    return apply_quality_filter(merged_df, config)


class DataProcessor:
    """Reads the raw tables, builds the cleaned panel and writes it out."""

    def __init__(self, config: Optional[PipelineConfig] = None,
                 life_path: Union[str, Path] = LIFE_EXPECTANCY_FILE,
                 gdp_path: Union[str, Path] = GDP_PER_CAPITA_FILE,
                 output_dir: Union[str, Path] = OUTPUT_DIR):
        self.config = config or PipelineConfig()
        self.life_path = Path(life_path)
        self.gdp_path = Path(gdp_path)
        self.paths = CommonPaths(output_dir=Path(output_dir))
        self.filter_report: Optional[FilterReport] = None

    def load_panels(self) -> Dict[str, pd.DataFrame]:
        """Read both wide tables as raw tokens."""
        return {
            'life_expectancy': read_wide_csv(self.life_path),
            'gdp_per_capita': read_wide_csv(self.gdp_path),
        }

    def run_all_processing(self) -> pd.DataFrame:
        """
        Build the cleaned panel and write it to `cleaned_panel.csv`.

        Returns:
            The cleaned country-year records
        """
        logger.info("Starting data processing...")
        panels = self.load_panels()
        clean_df, self.filter_report = build_clean_panel(
            panels['life_expectancy'], panels['gdp_per_capita'], self.config
        )

        self.paths.output_dir.mkdir(parents=True, exist_ok=True)
        clean_df.to_csv(self.paths.cleaned_panel, index=False)
        logger.info(f"Saved {len(clean_df)} records to {self.paths.cleaned_panel}")
        return clean_df
