"""
Indicator derivation module.

Derives boolean labor-market flags from the string-coded survey fields:
- lfp_flag: in the labor force (missing when status is missing)
- self_employed_flag: exactly "Self-employed" (missing counts as false)
- lfp_excl_self: in the labor force and not self-employed
- employed_flag: employed (missing when status is missing)
- college_flag: holds a college degree (missing when status is missing)
- covid_telework_flag: teleworked in 2021-2022 due to COVID (may be missing)

Also rolls the per-year telework flag up to a per-person cohort flag.
"""

from pyspark.sql import Column, DataFrame, Window
from pyspark.sql import functions as f

from ..data.schema import (
    COVID_TELEWORK,
    EMPLOYED,
    HAS_COLLEGE_DEGREE,
    ID_COLUMN,
    LABOR_FORCE_IN,
    SELF_EMPLOYED,
)
from ..utils.logger import get_logger

INDICATOR_COLUMNS = [
    "lfp_flag",
    "self_employed_flag",
    "lfp_excl_self",
    "employed_flag",
    "college_flag",
    "covid_telework_flag",
    "cohort_telework_flag",
]


def equals_flag(column: str, value: str) -> Column:
    """
    Boolean expression ``column == value`` that stays null when the column is null.

    Args:
        column: String-coded source column
        value: Coded value meaning "true"

    Returns:
        Spark Column expression (boolean, nullable)
    """
    return f.when(f.col(column).isNull(), f.lit(None).cast("boolean")).otherwise(
        f.col(column) == value
    )


def self_employed_expr(column: str = "self_employed") -> Column:
    """Self-employment flag; any value other than exactly "Self-employed" is false."""
    return f.coalesce(f.col(column) == SELF_EMPLOYED, f.lit(False))


def lfp_excl_self_expr(
    lfp_column: str = "lfp_flag", self_employed_column: str = "self_employed_flag"
) -> Column:
    """In the labor force and not self-employed; null when participation is unknown."""
    return f.when(f.col(lfp_column).isNull(), f.lit(None).cast("boolean")).otherwise(
        f.col(lfp_column) & ~f.col(self_employed_column)
    )


def add_cohort_flag(
    df: DataFrame,
    flag_column: str = "covid_telework_flag",
    id_column: str = ID_COLUMN,
    output_column: str = "cohort_telework_flag",
) -> DataFrame:
    """
    Broadcast a per-identifier "ever true" roll-up of a flag to every row.

    For each identifier the cohort flag is missing when every row's flag is
    missing, and otherwise the logical OR of the non-missing flags. The
    aggregate is computed once per identifier over a hash partition and
    written back to each of its rows, so the cost is linear in row count.

    Rows may represent weighted aggregates rather than literal individuals,
    so this is an approximation of person-level cohort tracking.

    Args:
        df: Input Spark DataFrame
        flag_column: Per-row boolean flag (nullable)
        id_column: Identifier shared by a person's rows across years
        output_column: Name of the cohort flag column

    Returns:
        DataFrame with the cohort flag column added

    Raises:
        ValueError: If a column doesn't exist in DataFrame
    """
    logger = get_logger()

    for col in [flag_column, id_column]:
        if col not in df.columns:
            raise ValueError(f"Column '{col}' not found in dataset")

    logger.info(f"Rolling up {flag_column} by {id_column} into {output_column}")

    # max() skips nulls and returns null only when the whole partition is null
    by_person = Window.partitionBy(id_column)
    ever = f.max(f.col(flag_column).cast("int")).over(by_person)
    return df.withColumn(output_column, (ever == 1))


def derive_indicators(df: DataFrame) -> DataFrame:
    """
    Add every indicator flag and the telework cohort flag.

    Args:
        df: Normalized survey DataFrame

    Returns:
        DataFrame with the columns in INDICATOR_COLUMNS added

    Raises:
        ValueError: If a source column doesn't exist in DataFrame
    """
    logger = get_logger()

    required = ["labor_force", "self_employed", "employment", "college", "telework", ID_COLUMN]
    missing = [col for col in required if col not in df.columns]
    if missing:
        raise ValueError(f"Missing required columns for indicators: {missing}")

    logger.info("Deriving indicator flags")

    derived = (
        df.withColumn("lfp_flag", equals_flag("labor_force", LABOR_FORCE_IN))
        .withColumn("self_employed_flag", self_employed_expr("self_employed"))
        .withColumn("lfp_excl_self", lfp_excl_self_expr())
        .withColumn("employed_flag", equals_flag("employment", EMPLOYED))
        .withColumn("college_flag", equals_flag("college", HAS_COLLEGE_DEGREE))
        .withColumn("covid_telework_flag", equals_flag("telework", COVID_TELEWORK))
    )

    derived = add_cohort_flag(derived)

    logger.info(f"Indicators derived: {', '.join(INDICATOR_COLUMNS)}")
    return derived
