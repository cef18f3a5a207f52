"""
Named, reusable row subsets.

Subsets are pure filters composed before any aggregation. A subset used by
several analyses is computed once, cached by Spark and handed out again on
every later request.
"""

from dataclasses import dataclass

from pyspark.sql import Column, DataFrame
from pyspark.sql import functions as f

from ..data.schema import FEMALE
from ..utils.logger import get_logger
from .categories import AGE_GROUPS, age_lower_bound


def is_female(column: str = "sex") -> Column:
    """Predicate selecting women."""
    return f.col(column) == FEMALE


def age_at_least(threshold: int, column: str = "age_group") -> Column:
    """
    Predicate selecting age brackets whose lower bound is at least ``threshold``.

    Args:
        threshold: Minimum age in years
        column: Age bracket column

    Returns:
        Spark Column expression (false for missing brackets)
    """
    brackets = [label for label in AGE_GROUPS if age_lower_bound(label) >= threshold]
    return f.coalesce(f.col(column).isin(brackets), f.lit(False))


def not_missing(column: str) -> Column:
    """Predicate selecting rows where a column is present."""
    return f.col(column).isNotNull()


def positive(column: str) -> Column:
    """Predicate selecting rows where a numeric column is strictly positive."""
    return f.coalesce(f.col(column) > 0, f.lit(False))


@dataclass
class _SubsetDefinition:
    predicate: Column
    base: str | None


class SubsetRegistry:
    """
    Registry of named subsets over one read-only DataFrame.

    Definitions are cheap; a subset is filtered and cached the first time
    it is requested and the same DataFrame object is returned afterwards.
    """

    def __init__(self, df: DataFrame) -> None:
        """
        Initialize the registry.

        Args:
            df: Full survey DataFrame every subset derives from
        """
        self.df = df
        self.logger = get_logger()
        self._definitions: dict[str, _SubsetDefinition] = {}
        self._cache: dict[str, DataFrame] = {}

    def define(self, name: str, predicate: Column, base: str | None = None) -> "SubsetRegistry":
        """
        Register a named subset.

        Args:
            name: Subset name
            predicate: Boolean filter expression
            base: Name of a registered subset to filter further (None for the full data)

        Returns:
            SubsetRegistry: self, for chaining

        Raises:
            ValueError: If the name is taken or the base is unknown
        """
        if name in self._definitions:
            raise ValueError(f"Subset '{name}' is already defined")
        if base is not None and base not in self._definitions:
            raise ValueError(f"Unknown base subset: {base}")
        self._definitions[name] = _SubsetDefinition(predicate=predicate, base=base)
        return self

    def get(self, name: str) -> DataFrame:
        """
        Get a subset, computing and caching it on first use.

        Args:
            name: Subset name

        Returns:
            DataFrame: The filtered, cached subset

        Raises:
            KeyError: If the subset isn't defined
        """
        if name in self._cache:
            return self._cache[name]
        if name not in self._definitions:
            raise KeyError(f"Unknown subset: {name}")

        definition = self._definitions[name]
        source = self.get(definition.base) if definition.base is not None else self.df
        subset = source.filter(definition.predicate).cache()

        self.logger.info(f"Subset '{name}' materialized: {subset.count():,} rows")
        self._cache[name] = subset
        return subset

    @property
    def names(self) -> list[str]:
        """Names of all defined subsets."""
        return list(self._definitions)

    def is_materialized(self, name: str) -> bool:
        """Whether a subset has already been computed."""
        return name in self._cache

    def release(self) -> None:
        """Unpersist every cached subset."""
        for subset in self._cache.values():
            subset.unpersist()
        self._cache.clear()
        self.logger.info("Cached subsets released")


def build_standard_subsets(df: DataFrame, adult_age: int = 25) -> SubsetRegistry:
    """
    Register the subsets used by the report.

    Args:
        df: Survey DataFrame with indicator columns
        adult_age: Lower age bound of the adult subsets

    Returns:
        SubsetRegistry: Registry with the standard subsets defined
    """
    registry = SubsetRegistry(df)
    (
        registry.define("female", is_female())
        .define("female_adult", age_at_least(adult_age), base="female")
        .define("lfp_known", not_missing("lfp_flag"))
        .define("female_lfp_known", not_missing("lfp_flag"), base="female")
        .define("female_adult_lfp_known", not_missing("lfp_flag"), base="female_adult")
        .define("female_positive_income", positive("income"), base="female")
        .define("telework_cohort_known", not_missing("cohort_telework_flag"))
    )
    return registry
