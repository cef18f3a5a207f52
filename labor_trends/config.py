"""
Configuration module for the Labor Trends application.

Contains all configuration settings for data paths, Spark parameters,
and the analysis window.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path


def _detect_environment() -> str:
    """Detect execution environment (docker cluster or local)."""
    if os.environ.get("SPARK_MASTER"):
        return "docker_cluster"
    return "local"


@dataclass
class DataConfig:
    """Configuration for data paths and files."""

    # Input extract
    INPUT_CSV: str = "data/cps_extract.csv"
    NULL_VALUE: str = "NA"

    # Output directories
    OUTPUT_DIR: str = "artifacts/report"
    LOG_DIR: str = "artifacts/logs"


def _get_spark_master() -> str:
    """Get appropriate Spark master URL based on environment."""
    if _detect_environment() == "docker_cluster":
        return os.environ.get("SPARK_MASTER", "spark://spark-master:7077")
    return "local[4]"


@dataclass
class SparkConfig:
    """Configuration for Spark session parameters."""

    # The extract is tens of thousands of rows, small memory is enough
    DRIVER_MEMORY: str = "2g"
    EXECUTOR_MEMORY: str = "2g"
    EXECUTOR_CORES: int = 2

    SQL_SHUFFLE_PARTITIONS: int = 4
    MAX_RESULT_SIZE: str = "1g"

    ADAPTIVE_ENABLED: bool = True
    ADAPTIVE_COALESCE_PARTITIONS: bool = True

    # Arrow-backed transfers between Spark and pandas
    ARROW_ENABLED: bool = True

    MASTER: str = field(default_factory=_get_spark_master)
    APP_NAME: str = "LaborTrends"


@dataclass
class AnalysisConfig:
    """Configuration for the analysis window and column metadata."""

    START_YEAR: int = 1994
    END_YEAR: int = 2024

    # Lower bound of the "adult" age filter
    ADULT_AGE_THRESHOLD: int = 25

    # Latest survey year with usable data, per column
    LATEST_VALID_YEAR: dict[str, int] = field(default_factory=dict)

    # Display names used in stacked endpoint-change tables
    DIMENSION_LABELS: dict[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Initialize column metadata after dataclass creation."""
        if not self.LATEST_VALID_YEAR:
            self.LATEST_VALID_YEAR = {
                "income": 2023,
                "income_quintile": 2023,
            }
        if not self.DIMENSION_LABELS:
            self.DIMENSION_LABELS = {
                "age_group": "Age",
                "education": "Education",
                "race": "Race",
                "sex": "Sex",
                "income_quintile": "Income",
                "wage_quintile": "Wage",
                "college": "College",
            }

    def latest_year_for(self, column: str) -> int:
        """Latest valid year for a column, defaulting to END_YEAR."""
        return self.LATEST_VALID_YEAR.get(column, self.END_YEAR)


@dataclass
class AppConfig:
    """Main application configuration combining all config sections."""

    data: DataConfig
    spark: SparkConfig
    analysis: AnalysisConfig

    def __init__(self) -> None:
        """Initialize all configuration sections."""
        self.data = DataConfig()
        self.spark = SparkConfig()
        self.analysis = AnalysisConfig()

    def get_artifact_path(self, artifact_type: str = "charts") -> str:
        """
        Get full path to an artifacts directory (charts, tables, etc.).

        Args:
            artifact_type: Type of artifact (charts, tables, etc.)

        Returns:
            Full path to the artifact directory
        """
        return str(Path(self.data.OUTPUT_DIR) / artifact_type)


class _ConfigCache:  # noqa: N801
    """Cache for application configuration."""

    _instance: AppConfig | None = None

    @classmethod
    def get(cls) -> AppConfig:
        """Get or create the global configuration instance."""
        if cls._instance is None:
            cls._instance = AppConfig()
        return cls._instance


def get_config() -> AppConfig:
    """Get the global configuration instance (singleton pattern)."""
    return _ConfigCache.get()


def load_config(input_csv: str | None = None) -> AppConfig:
    """
    Load configuration from environment variables (if any) and return config instance.

    Environment variables can override default values:
    - LT_INPUT_CSV: Override input CSV path
    - LT_OUTPUT_DIR: Override report output directory
    - LT_LOG_DIR: Override log directory
    - LT_START_YEAR / LT_END_YEAR: Override the analysis window
    - LT_SPARK_DRIVER_MEMORY: Override Spark driver memory
    - SPARK_MASTER: Override Spark master URL (for cluster mode)

    Args:
        input_csv: Explicit input path (e.g. from the command line); wins
            over the environment

    Returns:
        AppConfig: The application configuration instance
    """
    config = get_config()

    if "LT_INPUT_CSV" in os.environ:
        config.data.INPUT_CSV = os.environ["LT_INPUT_CSV"]

    if "LT_OUTPUT_DIR" in os.environ:
        config.data.OUTPUT_DIR = os.environ["LT_OUTPUT_DIR"]

    if "LT_LOG_DIR" in os.environ:
        config.data.LOG_DIR = os.environ["LT_LOG_DIR"]

    if "LT_START_YEAR" in os.environ:
        config.analysis.START_YEAR = int(os.environ["LT_START_YEAR"])

    if "LT_END_YEAR" in os.environ:
        config.analysis.END_YEAR = int(os.environ["LT_END_YEAR"])

    if "LT_SPARK_DRIVER_MEMORY" in os.environ:
        config.spark.DRIVER_MEMORY = os.environ["LT_SPARK_DRIVER_MEMORY"]

    if input_csv is not None:
        config.data.INPUT_CSV = input_csv

    # Refresh Spark master based on updated environment
    config.spark.MASTER = _get_spark_master()

    return config


# Convenience access to configuration
def get_spark_config() -> SparkConfig:
    """Get Spark configuration."""
    return get_config().spark
