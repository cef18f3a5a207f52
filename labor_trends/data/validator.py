"""
Data validation module.

Provides validation checks for the survey extract: required columns,
numeric column shape and survey weight integrity.
"""

from pyspark.sql import DataFrame
from pyspark.sql import functions as f

from ..utils.logger import get_logger
from .schema import NUMERIC_COLUMNS, REQUIRED_COLUMNS, WEIGHT_COLUMN


class DataValidator:
    """Validator for the loaded survey extract."""

    def __init__(self) -> None:
        """Initialize the validator."""
        self.logger = get_logger()

    def validate_columns(
        self, df: DataFrame, required_columns: list[str] | None = None
    ) -> tuple[bool, str | None]:
        """
        Check that every required column is present.

        Args:
            df: Spark DataFrame as read from disk
            required_columns: Columns to require (default: full extract schema)

        Returns:
            Tuple[bool, Optional[str]]: (is_valid, error_message)
        """
        required = required_columns if required_columns is not None else REQUIRED_COLUMNS
        missing = [col for col in required if col not in df.columns]
        if missing:
            return False, f"Missing required columns: {missing}"

        self.logger.info(f"Column validation passed: {len(required)} required columns present")
        return True, None

    def validate_numeric_shape(
        self, raw_df: DataFrame, numeric_columns: dict[str, str] | None = None
    ) -> tuple[bool, str | None]:
        """
        Check that numeric columns hold values castable to their type.

        A value is malformed when the raw string is present but the cast
        yields null.

        Args:
            raw_df: DataFrame with all columns still read as strings
            numeric_columns: Column -> Spark SQL type (default: extract schema)

        Returns:
            Tuple[bool, Optional[str]]: (is_valid, error_message)
        """
        columns = numeric_columns if numeric_columns is not None else NUMERIC_COLUMNS

        counts = raw_df.select(
            *[
                f.sum(
                    f.when(
                        f.col(col).isNotNull()
                        & f.expr(f"try_cast(`{col}` AS {sql_type})").isNull(),
                        1,
                    ).otherwise(0)
                ).alias(col)
                for col, sql_type in columns.items()
            ]
        ).collect()[0]

        bad = {col: int(counts[col] or 0) for col in columns if counts[col]}
        if bad:
            return False, f"Non-numeric values in numeric columns: {bad}"

        return True, None

    def validate_weights(
        self, df: DataFrame, weight_column: str = WEIGHT_COLUMN
    ) -> tuple[bool, str | None]:
        """
        Check that every survey weight is present, finite and strictly positive.

        Args:
            df: DataFrame with a numeric weight column
            weight_column: Name of the sampling weight column

        Returns:
            Tuple[bool, Optional[str]]: (is_valid, error_message)
        """
        if weight_column not in df.columns:
            return False, f"Column '{weight_column}' not found in dataset"

        weight = f.col(weight_column)
        row = df.select(
            f.sum(f.when(weight.isNull(), 1).otherwise(0)).alias("missing"),
            f.sum(f.when(weight <= 0, 1).otherwise(0)).alias("non_positive"),
            f.sum(f.when(f.isnan(weight) | (weight == float("inf")), 1).otherwise(0)).alias(
                "non_finite"
            ),
            f.min(weight).alias("min_weight"),
        ).collect()[0]

        missing = int(row["missing"] or 0)
        non_positive = int(row["non_positive"] or 0)
        non_finite = int(row["non_finite"] or 0)

        if missing or non_positive or non_finite:
            return False, (
                f"Invalid survey weights in '{weight_column}': {missing:,} missing, "
                f"{non_positive:,} zero or negative, {non_finite:,} NaN or infinite "
                f"(min={row['min_weight']})"
            )

        self.logger.info(f"Weight validation passed (min weight {row['min_weight']:,.2f})")
        return True, None
