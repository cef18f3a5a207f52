"""
Ordered categorical domains.

Several survey fields are strings whose display and aggregation order is
fixed (education from least to most attainment, age from youngest to
oldest bracket, quintiles from lowest to highest). The order is data, not
inferred from the extract:

- Values outside a declared label set are rejected at normalization.
- A ``<column>_rank`` integer column carries the order through Spark;
  aggregations sort their results by it.
- Collected results use ordered pandas categoricals for presentation.
"""

import re

import pandas as pd
from pyspark.sql import Column, DataFrame
from pyspark.sql import functions as f

from ..errors import DomainError
from ..utils.logger import get_logger

EDUCATION_LEVELS = (
    "Less than high school",
    "High school diploma",
    "Some college",
    "Associate's degree",
    "Bachelor's degree",
    "Advanced degree",
)

AGE_GROUPS = (
    "16-19",
    "20-24",
    "25-34",
    "35-44",
    "45-54",
    "55-64",
    "65+",
)

QUINTILES = (
    "Bottom quintile",
    "Second quintile",
    "Middle quintile",
    "Fourth quintile",
    "Top quintile",
)

SEXES = ("Male", "Female")

ORDERED_DOMAINS: dict[str, tuple[str, ...]] = {
    "education": EDUCATION_LEVELS,
    "age_group": AGE_GROUPS,
    "income_quintile": QUINTILES,
    "wage_quintile": QUINTILES,
    "sex": SEXES,
}

RANK_SUFFIX = "_rank"


def rank_column_name(column: str) -> str:
    """Name of the rank column for a categorical column."""
    return f"{column}{RANK_SUFFIX}"


def category_rank(column: str, label: str) -> int:
    """
    Position of a label within its column's declared order.

    Args:
        column: Categorical column name
        label: Label to look up

    Returns:
        int: Zero-based rank

    Raises:
        DomainError: If the column has no declared domain or the label is unknown
    """
    if column not in ORDERED_DOMAINS:
        raise DomainError(f"No ordered domain declared for column '{column}'")
    labels = ORDERED_DOMAINS[column]
    if label not in labels:
        raise DomainError(f"Value '{label}' is not in the domain of '{column}': {list(labels)}")
    return labels.index(label)


def age_lower_bound(label: str) -> int:
    """
    Lower bound in years of an age bracket label ("25-34" -> 25, "65+" -> 65).

    Raises:
        DomainError: If the label is not a declared age bracket
    """
    category_rank("age_group", label)
    match = re.match(r"(\d+)", label)
    if match is None:
        raise DomainError(f"Age bracket '{label}' has no numeric lower bound")
    return int(match.group(1))


def rank_expression(column: str, labels: tuple[str, ...]) -> Column:
    """Spark expression mapping each label to its rank (null for null or unknown labels)."""
    rank = f.when(f.col(column) == labels[0], 0)
    for position, label in enumerate(labels[1:], start=1):
        rank = rank.when(f.col(column) == label, position)
    return rank


def find_out_of_domain(
    df: DataFrame, column: str, labels: tuple[str, ...]
) -> dict[str, int]:
    """
    Count values of a column that fall outside its label set.

    Args:
        df: Spark DataFrame
        column: Categorical column to check
        labels: Declared label set

    Returns:
        Dict[str, int]: Offending value -> row count (empty when clean)
    """
    rows = (
        df.filter(f.col(column).isNotNull() & ~f.col(column).isin(list(labels)))
        .groupBy(column)
        .count()
        .collect()
    )
    return {row[column]: int(row["count"]) for row in rows}


def normalize_categories(
    df: DataFrame,
    domains: dict[str, tuple[str, ...]] | None = None,
    strict: bool = True,
) -> DataFrame:
    """
    Constrain declared columns to their ordered label sets and add rank columns.

    Missing values are allowed and stay missing (rank null). Labels are
    not reinterpreted; only a companion rank column is added.

    Args:
        df: Input Spark DataFrame
        domains: Column -> ordered labels (default: ORDERED_DOMAINS)
        strict: If True, raise on out-of-domain values; otherwise drop the
            offending rows with a warning

    Returns:
        DataFrame with one ``<column>_rank`` column per declared column

    Raises:
        ValueError: If a declared column doesn't exist in DataFrame
        DomainError: If strict and any value is outside its label set
    """
    logger = get_logger()
    domains = domains if domains is not None else ORDERED_DOMAINS

    for column in domains:
        if column not in df.columns:
            raise ValueError(f"Column '{column}' not found in dataset")

    logger.info(f"Normalizing categorical columns: {', '.join(domains)}")

    for column, labels in domains.items():
        invalid = find_out_of_domain(df, column, labels)
        if invalid:
            message = f"Values outside the domain of '{column}': {invalid}"
            if strict:
                raise DomainError(message)
            logger.warning(f"{message}; dropping {sum(invalid.values()):,} rows")
            df = df.filter(f.col(column).isNull() | f.col(column).isin(list(labels)))

        df = df.withColumn(rank_column_name(column), rank_expression(column, labels))

    logger.info("Categorical columns normalized")
    return df


def ordered_categorical(series: pd.Series, column: str) -> pd.Series:
    """
    Convert a collected label column to an ordered pandas categorical.

    Columns without a declared domain are returned unchanged. Missing
    labels stay missing; any other label outside the domain is rejected.

    Args:
        series: Collected labels
        column: Source column name (selects the domain)

    Returns:
        pd.Series: Ordered categorical series (or the input series)

    Raises:
        DomainError: If a present label is not in the column's domain
    """
    if column not in ORDERED_DOMAINS:
        return series
    labels = ORDERED_DOMAINS[column]
    unknown = sorted(set(series.dropna()) - set(labels))
    if unknown:
        raise DomainError(f"Values outside the domain of '{column}': {unknown}")
    return pd.Series(
        pd.Categorical(series, categories=list(labels), ordered=True),
        index=series.index,
        name=series.name,
    )
