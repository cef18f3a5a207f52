"""
Shared fixtures: a local Spark session and a survey-row factory.
"""

from collections.abc import Callable
from typing import Any

import pytest
from pyspark.sql import DataFrame, SparkSession

SURVEY_SCHEMA = """cpsidp STRING,
                   asecwt DOUBLE,
                   year INT,
                   income DOUBLE,
                   sex STRING,
                   race STRING,
                   age_group STRING,
                   education STRING,
                   college STRING,
                   income_quintile STRING,
                   wage_quintile STRING,
                   self_employed STRING,
                   labor_force STRING,
                   employment STRING,
                   telework STRING"""

SURVEY_FIELDS = [line.strip().split()[0] for line in SURVEY_SCHEMA.split(",")]

DEFAULT_ROW: dict[str, Any] = {
    "cpsidp": "P001",
    "asecwt": 1.0,
    "year": 1994,
    "income": 30000.0,
    "sex": "Female",
    "race": "White",
    "age_group": "25-34",
    "education": "High school diploma",
    "college": "No college degree",
    "income_quintile": "Middle quintile",
    "wage_quintile": "Middle quintile",
    "self_employed": "Not self-employed",
    "labor_force": "In labor force",
    "employment": "Employed",
    "telework": None,
}


@pytest.fixture(scope="session")  # type: ignore[misc]
def spark() -> SparkSession:
    """Create a Spark session for testing."""
    return (
        SparkSession.builder.master("local[1]")
        .appName("test-labor-trends")
        .config("spark.driver.memory", "1g")
        .config("spark.executor.memory", "1g")
        .config("spark.sql.shuffle.partitions", "2")
        .getOrCreate()
    )


@pytest.fixture  # type: ignore[misc]
def survey_df(spark: SparkSession) -> Callable[..., DataFrame]:
    """
    Factory building a full-schema survey DataFrame.

    Each argument is a dict overriding DEFAULT_ROW fields for one row.
    """

    def _build(*rows: dict[str, Any]) -> DataFrame:
        records = [tuple({**DEFAULT_ROW, **row}[name] for name in SURVEY_FIELDS) for row in rows]
        return spark.createDataFrame(records, schema=SURVEY_SCHEMA)

    return _build
