"""
CSV loader for the survey extract.

Reads every column as a string first so malformed numeric values can be
reported instead of silently becoming null, then casts the numeric
columns and checks weight integrity.
"""

from pyspark.sql import DataFrame, SparkSession
from pyspark.sql import functions as f

from ..errors import SchemaError, WeightIntegrityError
from ..utils.file_utils import check_input_file, get_file_size
from ..utils.logger import get_logger
from .schema import NUMERIC_COLUMNS, REQUIRED_COLUMNS, WEIGHT_COLUMN
from .validator import DataValidator


def read_raw_csv(spark: SparkSession, csv_path: str, null_value: str = "NA") -> DataFrame:
    """
    Read the extract with every column typed as string.

    Args:
        spark: Active Spark session
        csv_path: Path to the delimited input file
        null_value: Literal that marks a missing value (besides empty fields)

    Returns:
        DataFrame: Raw string-typed DataFrame
    """
    return (
        spark.read.option("header", "true")
        .option("inferSchema", "false")
        .option("nullValue", null_value)
        .option("mode", "FAILFAST")
        .csv(csv_path)
    )


def cast_numeric_columns(
    df: DataFrame, numeric_columns: dict[str, str] | None = None
) -> DataFrame:
    """
    Cast numeric columns to their declared Spark SQL types.

    Args:
        df: Raw string-typed DataFrame
        numeric_columns: Column -> Spark SQL type (default: extract schema)

    Returns:
        DataFrame with numeric columns cast
    """
    columns = numeric_columns if numeric_columns is not None else NUMERIC_COLUMNS
    for col, sql_type in columns.items():
        df = df.withColumn(col, f.expr(f"try_cast(`{col}` AS {sql_type})"))
    return df


def load_survey_data(
    spark: SparkSession,
    csv_path: str,
    null_value: str = "NA",
    required_columns: list[str] | None = None,
) -> DataFrame:
    """
    Load and validate the survey extract.

    Args:
        spark: Active Spark session
        csv_path: Path to the delimited input file
        null_value: Literal that marks a missing value
        required_columns: Columns to require (default: full extract schema)

    Returns:
        DataFrame: Typed survey data, one row per person-year

    Raises:
        FileNotFoundError: If the input file doesn't exist
        SchemaError: If a required column is missing or malformed
        WeightIntegrityError: If any weight is missing, zero or negative
    """
    logger = get_logger()
    validator = DataValidator()

    check_input_file(csv_path)
    logger.info(f"Loading survey extract: {csv_path} ({get_file_size(csv_path)})")

    raw_df = read_raw_csv(spark, csv_path, null_value=null_value)

    valid, error = validator.validate_columns(raw_df, required_columns)
    if not valid:
        raise SchemaError(error)

    numeric_columns = {
        col: sql_type for col, sql_type in NUMERIC_COLUMNS.items() if col in raw_df.columns
    }
    valid, error = validator.validate_numeric_shape(raw_df, numeric_columns)
    if not valid:
        raise SchemaError(error)

    df = cast_numeric_columns(raw_df, numeric_columns)

    valid, error = validator.validate_weights(df, WEIGHT_COLUMN)
    if not valid:
        raise WeightIntegrityError(error)

    required = required_columns if required_columns is not None else REQUIRED_COLUMNS
    df = df.select(*required, *[col for col in df.columns if col not in required])

    logger.info(f"Survey data loaded: {df.count():,} rows, {len(df.columns)} columns")
    return df
