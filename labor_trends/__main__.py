"""
Main application entry point for the Labor Trends report.

This module orchestrates the complete workflow:
1. Load and validate the survey extract
2. Normalize categories and derive indicators
3. Answer each report question with a weighted aggregation
4. Save charts and tables, print the narrative
"""

import sys
import warnings

from .config import load_config
from .data.loader import load_survey_data
from .data.spark_manager import SparkSessionManager
from .errors import DomainError, SchemaError, WeightIntegrityError
from .report import QUESTIONS, build_report_tables, prepare_dataset, print_question_report
from .utils.file_utils import ensure_directory_exists
from .utils.logger import log_section, setup_logger
from .visualization.trend_viz import create_question_artifacts


def main(input_csv: str | None = None) -> None:
    """
    Main application entrypoint.

    Args:
        input_csv: Path to the survey extract. Defaults to the configured path.
    """
    # Suppress Java/Spark warnings for cleaner output
    warnings.filterwarnings("ignore")

    print("\n" + "=" * 70)
    print("Labor Trends Report")
    print("=" * 70 + "\n", flush=True)

    config = load_config(input_csv)
    logger = setup_logger(log_dir=config.data.LOG_DIR)

    logger.info("=" * 70)
    logger.info("Labor Trends Report Started")
    logger.info("=" * 70)

    try:
        output_directory = config.get_artifact_path("questions")
        ensure_directory_exists(output_directory)
        logger.info(f"Report output directory: {output_directory}")

        with SparkSessionManager(config.spark) as spark:
            logger.info("Spark session initialized")

            log_section("PHASE 1: Load and prepare survey extract")
            raw_df = load_survey_data(spark, config.data.INPUT_CSV, config.data.NULL_VALUE)
            df = prepare_dataset(raw_df).cache()
            logger.info(f"Prepared dataset: {df.count():,} rows")

            log_section("PHASE 2: Weighted aggregations")
            tables = build_report_tables(df, config.analysis)

            log_section("PHASE 3: Narrative, charts and tables")
            for question in QUESTIONS:
                table = tables[question.key]
                print_question_report(question, table)
                artifacts = create_question_artifacts(
                    question.key,
                    question.kind,
                    table,
                    question.label_column,
                    question.title,
                    output_directory,
                    percent=question.percent,
                )
                for name, path in artifacts.items():
                    logger.info(f"  {name}: {path}")

            df.unpersist()

        print(f"\n✓ Report saved to: {output_directory}", flush=True)

    except KeyboardInterrupt:
        logger.info("\nApplication interrupted by user")
        print("\n\n⚠ Application interrupted by user")
        sys.exit(1)

    except (FileNotFoundError, SchemaError, DomainError, WeightIntegrityError) as e:
        logger.error("Input data rejected: %s", e, exc_info=True)
        print(f"\n✗ Input data rejected: {e}", flush=True)
        sys.exit(1)

    except Exception as e:  # noqa: BLE001
        logger.error("Application failed with error: %s", e, exc_info=True)
        print(f"\n✗ Error: {e}", flush=True)
        sys.exit(1)


def cli() -> None:
    """Console entry point; the only argument is the input CSV path."""
    path = sys.argv[1] if len(sys.argv) > 1 else None
    main(input_csv=path)


if __name__ == "__main__":
    cli()
