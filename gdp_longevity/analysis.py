#!/usr/bin/env python3
"""Analysis Module.

This module evaluates the regression of mean life expectancy on log10 mean
GDP per capita by k-fold cross-validation over countries.

Each country is assigned to one of k = floor(N / min_fold_size) folds by a
seeded random permutation. For every fold, the model is fitted on the other
folds and scored on the held-out one with the holdout variance ratio

    score = var(predictions) / var(observed)

This ratio is NOT the usual out-of-sample R^2 (1 - SS_res / SS_tot) and can
exceed 1; the conventional R^2 is reported next to it for comparison.

Example:
    >>> from gdp_longevity.analysis import assign_folds, cross_validate
    >>> folds = assign_folds(aggregates['country'], min_fold_size=10, seed=42)
    >>> result = cross_validate(aggregates, folds)
    >>> print(f"Mean holdout score: {result.mean_score:.2f}")
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

import numpy as np
import pandas as pd
from tqdm import tqdm

from gdp_longevity.config import PipelineConfig
from gdp_longevity.exceptions import DegenerateFold, DuplicateKey, InsufficientData
from gdp_longevity.logging_config import create_logger
from gdp_longevity.model import LinearFit, fit_full_sample, fit_ols
from gdp_longevity.paths import OUTPUT_DIR, CommonPaths
from gdp_longevity.preprocess import aggregate_countries

logger = create_logger(__name__)

CV_COLUMNS = ['fold', 'n_train', 'n_test', 'intercept', 'slope', 'score', 'r_squared']


@dataclass(frozen=True, eq=False)
class CrossValidationResult:
    """Per-fold scores, one row per fold in fold order."""
    scores: pd.DataFrame
    seed: Optional[int] = None

    @property
    def k(self) -> int:
        return len(self.scores)

    @property
    def mean_score(self) -> float:
        return float(self.scores['score'].mean())

    @property
    def std_score(self) -> float:
        return float(self.scores['score'].std())


def assign_folds(countries: Sequence[str], min_fold_size: int = 10,
                 seed: Optional[int] = 42) -> pd.Series:
    """
    Randomly partition countries into k roughly equal folds.

    The labels 1..k are tiled to the number of countries and shuffled, so
    every fold holds floor(N / k) or ceil(N / k) countries.

    Args:
        countries: Distinct country identifiers
        min_fold_size: Target countries per fold; k = N // min_fold_size
        seed: Seed for numpy's default_rng; the same seed gives the same folds

    Returns:
        Series of fold ids in [1, k], indexed by country, named 'fold'

    Raises:
        InsufficientData: If there are fewer countries than min_fold_size.
        DuplicateKey: If a country appears more than once.
    """
    if min_fold_size < 1:
        raise ValueError(f"min_fold_size must be >= 1, got {min_fold_size}")

    countries = pd.Index(countries, name='country')
    if countries.has_duplicates:
        raise DuplicateKey(countries[countries.duplicated()].unique().tolist(), "fold assignment")

    n_countries = len(countries)
    if n_countries < min_fold_size:
        raise InsufficientData(
            n_countries, min_fold_size,
            f"Cannot build folds of {min_fold_size} countries from {n_countries} countries"
        )

    k = n_countries // min_fold_size
    labels = np.resize(np.arange(1, k + 1), n_countries)
    rng = np.random.default_rng(seed)
    folds = pd.Series(rng.permutation(labels), index=countries, name='fold')

    logger.info(f"Assigned {n_countries} countries to {k} folds (seed={seed})")
    return folds


def _score_fold(fold: int, train: pd.DataFrame, test: pd.DataFrame,
                fit: Callable[[Sequence[float], Sequence[float]], Any]) -> Dict[str, float]:
    """Fit on `train`, predict `test` and compute the holdout scores."""
    if len(test) < 2:
        raise DegenerateFold(fold, len(test))
    if len(train) < 2:
        raise InsufficientData(
            len(train), 2,
            f"Fold {fold} leaves {len(train)} countries to train on; "
            "cross-validation needs at least 2 folds"
        )

    model = fit(train['log10_gdp'].to_numpy(), train['mean_life_expectancy'].to_numpy())
    predictions = np.asarray(model.predict(test['log10_gdp'].to_numpy()), dtype=float)
    observed = test['mean_life_expectancy'].to_numpy(dtype=float)

    observed_var = np.var(observed, ddof=1)
    if observed_var == 0:
        raise DegenerateFold(fold, len(test), "observed life expectancy has zero variance")

    ss_res = np.sum((observed - predictions) ** 2)
    ss_tot = np.sum((observed - observed.mean()) ** 2)

    return {
        'fold': fold,
        'n_train': len(train),
        'n_test': len(test),
        'intercept': float(model.intercept),
        'slope': float(model.slope),
        'score': float(np.var(predictions, ddof=1) / observed_var),
        'r_squared': float(1 - ss_res / ss_tot),
    }


def cross_validate(aggregates: pd.DataFrame, folds: pd.Series,
                   fit: Callable[[Sequence[float], Sequence[float]], Any] = fit_ols,
                   progress: bool = False) -> CrossValidationResult:
    """
    Leave-one-fold-out evaluation of mean_life_expectancy ~ log10_gdp.

    Folds are independent: each is fitted from scratch on its own training
    partition and the results are collected in fold order.

    Args:
        aggregates: Country aggregates with 'country', 'log10_gdp' and
            'mean_life_expectancy' columns
        folds: Fold id per country, as returned by assign_folds
        fit: OLS routine returning an object with intercept, slope and predict
        progress: Whether to show a progress bar

    Returns:
        CrossValidationResult with one row per fold

    Raises:
        DegenerateFold: If a holdout fold has fewer than 2 countries or no
            variance in life expectancy.
        InsufficientData: If a training partition has fewer than 2 countries.
    """
    data = aggregates.set_index('country')
    unassigned = data.index.difference(folds.index)
    if len(unassigned):
        raise ValueError(f"No fold assigned for {len(unassigned)} countries: {', '.join(map(str, unassigned[:5]))}")

    fold_ids = folds.reindex(data.index).to_numpy()
    k = int(fold_ids.max())

    rows = []
    for fold in tqdm(range(1, k + 1), desc="Cross-validating folds", disable=not progress):
        in_test = fold_ids == fold
        row = _score_fold(fold, data[~in_test], data[in_test], fit)
        logger.debug(f"Fold {fold}: n_test={row['n_test']}, score={row['score']:.3f}")
        rows.append(row)

    result = CrossValidationResult(pd.DataFrame(rows, columns=CV_COLUMNS))
    logger.info(
        f"Cross-validation over {k} folds: mean score {result.mean_score:.3f} "
        f"(min {result.scores['score'].min():.3f}, max {result.scores['score'].max():.3f})"
    )
    return result


def run_analysis(clean_df: pd.DataFrame, config: Optional[PipelineConfig] = None,
                 progress: bool = False) -> Dict[str, Any]:
    """
    Aggregate the cleaned panel, fit the full-sample model and cross-validate it.

    Returns:
        Dictionary with 'aggregates', 'fit', 'folds' and 'cv'
    """
    config = config or PipelineConfig()
    logger.info("Running regression and cross-validation...")

    aggregates = aggregate_countries(clean_df)

    # Too few countries must surface as InsufficientData, not as an OLS error
    folds = assign_folds(aggregates['country'], config.min_fold_size, config.seed)
    cv = cross_validate(aggregates, folds, progress=progress)

    fit = fit_full_sample(aggregates)
    logger.info(
        f"Full sample: life_expectancy = {fit.intercept:.2f} + {fit.slope:.2f} * log10(gdp), "
        f"R^2 = {fit.r_squared:.3f}, n = {fit.n}"
    )

    return {
        'aggregates': aggregates.assign(fold=folds.reindex(aggregates['country']).to_numpy()),
        'fit': fit,
        'folds': folds,
        'cv': CrossValidationResult(cv.scores, seed=config.seed),
    }


def summarize_results(fit: LinearFit, cv: CrossValidationResult) -> pd.DataFrame:
    """One-row table of the full-sample fit and the cross-validation summary."""
    return pd.DataFrame([{
        'n_countries': fit.n,
        'intercept': fit.intercept,
        'slope': fit.slope,
        'r_squared': fit.r_squared,
        'pvalue': fit.pvalue,
        'k': cv.k,
        'seed': cv.seed,
        'mean_score': cv.mean_score,
        'std_score': cv.std_score,
        'mean_r_squared': float(cv.scores['r_squared'].mean()),
    }])


def export_results(results: Dict[str, Any], output_dir: Union[str, Path] = OUTPUT_DIR) -> CommonPaths:
    """Write aggregates, per-fold scores and the summary to CSV files."""
    paths = CommonPaths(output_dir=Path(output_dir))
    paths.output_dir.mkdir(parents=True, exist_ok=True)

    results['aggregates'].to_csv(paths.country_aggregates, index=False)
    results['cv'].scores.to_csv(paths.cv_scores, index=False)
    summarize_results(results['fit'], results['cv']).to_csv(paths.regression_summary, index=False)

    logger.info(f"Results exported to {paths.output_dir}")
    return paths
