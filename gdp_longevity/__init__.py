"""Cleaning, merging and cross-validating a country-year panel of life
expectancy and GDP per capita."""

__version__ = "0.1.0"
