"""
Custom exceptions for the GDP and longevity pipeline.

Unparseable cell values are never errors: they become missing values and
are removed by the quality filter. The exceptions below cover the cases
that must abort a run.
"""


class PipelineError(Exception):
    """
    Base exception for all pipeline-related errors.

    Provides a common base for catching and handling pipeline-specific errors.
    """

    pass


class MalformedHeader(PipelineError):
    """
    Raised when a wide table cannot be reshaped.

    Covers:
    - A year column header that is not an integer
    - A missing country column
    """

    def __init__(self, header, message=None):
        self.header = header
        super().__init__(message or f"Year column header {header!r} is not an integer")


class DuplicateKey(PipelineError):
    """
    Raised when a (country, year) key, or a country in a fold assignment,
    appears more than once. Ambiguous keys are never resolved silently.
    """

    def __init__(self, keys, source=None):
        self.keys = list(keys)
        self.source = source
        where = f" in {source}" if source else ""
        sample = ", ".join(repr(k) for k in self.keys[:5])
        more = f" (and {len(self.keys) - 5} more)" if len(self.keys) > 5 else ""
        super().__init__(f"Duplicate key{where}: {sample}{more}")


class InsufficientData(PipelineError):
    """
    Raised when there are too few countries for the requested fold
    granularity, or too few to fit a model on a training partition.
    """

    def __init__(self, n_countries: int, required: int, message=None):
        self.n_countries = n_countries
        self.required = required
        super().__init__(
            message
            or f"Need at least {required} countries, got {n_countries}"
        )


class DegenerateFold(PipelineError):
    """
    Raised when a holdout fold cannot be scored: fewer than two countries,
    or no variance in the observed values.
    """

    def __init__(self, fold: int, size: int, reason=None):
        self.fold = fold
        self.size = size
        detail = reason or "variance is undefined for fewer than 2 countries"
        super().__init__(f"Fold {fold} has {size} countries: {detail}")


class EmptyGroup(PipelineError):
    """Raised when a country is aggregated from zero rows."""

    def __init__(self, country):
        self.country = country
        super().__init__(f"No rows to aggregate for country {country!r}")
