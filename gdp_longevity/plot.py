#!/usr/bin/env python3
"""Plotting Utilities for the GDP and Longevity Pipeline.

Functions:
    create_regression_plot: Mean life expectancy against log10 mean GDP per
        capita, one point per country, with the fitted OLS line.
    create_cv_plot: Holdout score for each cross-validation fold.

Plots are saved in high-resolution PDF format.
"""

from pathlib import Path
from typing import Union

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns

from gdp_longevity.logging_config import create_logger
from gdp_longevity.model import LinearFit

logger = create_logger(__name__)

# Plotting parameters
DPI = 300  # High resolution for publications
FIGSIZE_LARGE = (12, 8)  # For detailed plots
FIGSIZE_MEDIUM = (10, 3.5)  # For compact comparisons


def create_regression_plot(aggregates: pd.DataFrame, fit: LinearFit,
                           save_path: Union[str, Path]) -> Path:
    """Scatter countries by log10 GDP per capita and life expectancy with the OLS line.

    Points are colored by cross-validation fold when a 'fold' column is present.
    """
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=FIGSIZE_LARGE)
    if 'fold' in aggregates.columns:
        sns.scatterplot(data=aggregates.assign(fold=aggregates['fold'].astype(str)),
                        x='log10_gdp', y='mean_life_expectancy', hue='fold',
                        palette='husl', alpha=0.8)
    else:
        sns.scatterplot(data=aggregates, x='log10_gdp', y='mean_life_expectancy', alpha=0.8)

    x_line = np.linspace(aggregates['log10_gdp'].min(), aggregates['log10_gdp'].max(), 100)
    plt.plot(x_line, fit.predict(x_line), color='black', linewidth=1.5,
             label=f'OLS: {fit.intercept:.1f} + {fit.slope:.1f} log10(GDP), R² = {fit.r_squared:.2f}')

    plt.xlabel('log10 mean GDP per capita')
    plt.ylabel('Mean life expectancy (years)')
    plt.title('Life Expectancy and GDP per Capita by Country')
    plt.legend()
    plt.grid(True, alpha=0.3)

    plt.savefig(save_path, dpi=DPI, bbox_inches='tight')
    plt.close()
    logger.info(f"Regression plot saved to: {save_path}")
    return save_path


def create_cv_plot(cv_scores: pd.DataFrame, save_path: Union[str, Path]) -> Path:
    """Bar chart of the holdout variance ratio per fold, with the mean as a dashed line."""
    save_path = Path(save_path)
    save_path.parent.mkdir(parents=True, exist_ok=True)

    plt.figure(figsize=FIGSIZE_MEDIUM)
    sns.barplot(data=cv_scores, x='fold', y='score', color='steelblue')
    plt.axhline(cv_scores['score'].mean(), color='black', linestyle='--', linewidth=1,
                label=f"Mean = {cv_scores['score'].mean():.2f}")
    plt.axhline(1.0, color='gray', linestyle=':', linewidth=1)

    plt.xlabel('Fold')
    plt.ylabel('var(predicted) / var(observed)')
    plt.title('Cross-Validation Holdout Scores')
    plt.legend()

    plt.savefig(save_path, dpi=DPI, bbox_inches='tight')
    plt.close()
    logger.info(f"Cross-validation plot saved to: {save_path}")
    return save_path
