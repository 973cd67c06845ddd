#!/usr/bin/env python3
"""Pipeline Configuration and Parameter Documentation.

This module centralizes the tunable settings of the cleaning and
cross-validation pipeline, using Pydantic for validation and documentation.

Key features:
- Type validation and coercion
- Immutable configuration (frozen=True)
- Rich metadata with units and interpretation
- Programmatic access to documentation

Usage:
    >>> from gdp_longevity.config import PipelineConfig
    >>> config = PipelineConfig(historical_cutoff=None)
    >>> config.describe('min_fold_size')
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator


class PipelineConfig(BaseModel):
    """Settings consumed by the quality filter and the fold assigner."""

    model_config = {'frozen': True, 'extra': 'forbid'}

    historical_cutoff: Optional[int] = Field(
        default=2024,
        description="Last year kept when restricting the panel to historical (non-projected) data. None keeps every year.",
        json_schema_extra={
            'units': 'calendar year',
            'interpretation': 'Rows with year > cutoff are dropped by the quality filter',
            'notes': 'Source tables run to 2100; later years are model projections',
        }
    )

    life_expectancy_bounds: tuple[float, float] = Field(
        default=(0.0, 120.0),
        description="Inclusive plausibility bounds for life expectancy at birth. Values outside are treated as data errors.",
        json_schema_extra={
            'units': 'years',
            'interpretation': 'Rows with life expectancy outside [min, max] are dropped',
        }
    )

    min_fold_size: int = Field(
        default=10,
        ge=1,
        description="Target number of countries per cross-validation fold. The fold count is k = floor(N / min_fold_size).",
        json_schema_extra={
            'units': 'countries',
            'interpretation': 'Fewer countries than this raises InsufficientData',
        }
    )

    seed: int = Field(
        default=42,
        description="Seed for the fold assignment permutation. The same seed reproduces the same folds and scores.",
    )

    @field_validator('life_expectancy_bounds')
    @classmethod
    def validate_bounds(cls, v):
        """Ensure bounds are valid (min < max)."""
        if v[0] >= v[1]:
            raise ValueError(f"life_expectancy_bounds must have min < max, got {v}")
        return v

    @property
    def historical_only(self) -> bool:
        return self.historical_cutoff is not None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()

    def describe(self, param_name: str) -> None:
        """Print comprehensive documentation for a parameter.

        Args:
            param_name: Name of the parameter to describe
        """
        fields = type(self).model_fields
        if param_name not in fields:
            raise ValueError(f"Unknown parameter: {param_name}")

        field_info = fields[param_name]
        value = getattr(self, param_name)
        extra = field_info.json_schema_extra or {}

        print(f"\n{'=' * 70}")
        print(f"Parameter: {param_name}")
        print(f"{'=' * 70}")
        print(f"Value: {value}")
        if 'units' in extra:
            print(f"Units: {extra['units']}")
        print(f"\nDescription:")
        print(f"  {field_info.description}")
        if 'interpretation' in extra:
            print(f"\nInterpretation:")
            print(f"  {extra['interpretation']}")
        if 'notes' in extra:
            print(f"\nNotes:")
            print(f"  {extra['notes']}")
        print(f"{'=' * 70}\n")

    def describe_all(self) -> None:
        """Print documentation for all parameters."""
        for param_name in type(self).model_fields:
            self.describe(param_name)


if __name__ == "__main__":
    config = PipelineConfig()

    print("=" * 80)
    print("PIPELINE PARAMETERS")
    print("=" * 80)
    for param_name, value in config.model_dump().items():
        print(f"  {param_name:25s} = {value}")
    print("\nFor detailed documentation, use:")
    print("  >>> from gdp_longevity.config import PipelineConfig")
    print("  >>> PipelineConfig().describe_all()")
    print("=" * 80)
