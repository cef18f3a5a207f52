"""
Analysis module for weighted trend computations on the survey extract.
"""

from .aggregation import (
    endpoint_change_by_group,
    resolve_end_year,
    stacked_endpoint_change,
    weighted_mean_over_time,
    weighted_proportion_over_time,
)
from .categories import ORDERED_DOMAINS, normalize_categories, ordered_categorical
from .indicators import add_cohort_flag, derive_indicators
from .subsets import SubsetRegistry, build_standard_subsets

__all__ = [
    "ORDERED_DOMAINS",
    "normalize_categories",
    "ordered_categorical",
    "derive_indicators",
    "add_cohort_flag",
    "SubsetRegistry",
    "build_standard_subsets",
    "weighted_mean_over_time",
    "weighted_proportion_over_time",
    "endpoint_change_by_group",
    "stacked_endpoint_change",
    "resolve_end_year",
]
