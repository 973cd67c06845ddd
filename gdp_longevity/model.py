#!/usr/bin/env python3
"""Ordinary Least Squares Model.

The regression of mean life expectancy on log10 mean GDP per capita is a
plain two-parameter OLS fit, delegated to `scipy.stats.linregress`. The
rest of the pipeline only relies on `intercept`, `slope` and `predict`.

Example:
    >>> from gdp_longevity.model import fit_ols
    >>> fit = fit_ols([3.0, 4.0, 5.0], [55.0, 68.0, 80.0])
    >>> fit.predict([4.5])
"""

from dataclasses import dataclass
from typing import Sequence

import numpy as np
import pandas as pd
from scipy.stats import linregress


@dataclass(frozen=True)
class LinearFit:
    """Coefficients and statistics of a fitted line y = intercept + slope * x."""
    intercept: float
    slope: float
    rvalue: float
    pvalue: float
    stderr: float
    intercept_stderr: float
    n: int

    @property
    def r_squared(self) -> float:
        return self.rvalue ** 2

    def predict(self, x: Sequence[float]) -> np.ndarray:
        """Apply the fitted coefficients to new x values."""
        return self.intercept + self.slope * np.asarray(x, dtype=float)


def fit_ols(x: Sequence[float], y: Sequence[float]) -> LinearFit:
    """Fit y on x by ordinary least squares.

    Args:
        x: Predictor values
        y: Response values, same length as x

    Returns:
        LinearFit with coefficients, correlation, p-value and standard errors

    Raises:
        ValueError: If x and y differ in length, have fewer than 2 points,
            or all x values are identical.
    """
    x = np.asarray(x, dtype=float)
    y = np.asarray(y, dtype=float)
    if x.shape != y.shape:
        raise ValueError(f"x and y must have the same length, got {len(x)} and {len(y)}")
    if len(x) < 2:
        raise ValueError(f"OLS needs at least 2 points, got {len(x)}")

    result = linregress(x, y)
    return LinearFit(
        intercept=float(result.intercept),
        slope=float(result.slope),
        rvalue=float(result.rvalue),
        pvalue=float(result.pvalue),
        stderr=float(result.stderr),
        intercept_stderr=float(result.intercept_stderr),
        n=len(x),
    )


def fit_full_sample(aggregates: pd.DataFrame) -> LinearFit:
    """Fit mean life expectancy on log10 mean GDP per capita over every country."""
    return fit_ols(aggregates['log10_gdp'], aggregates['mean_life_expectancy'])
