"""
Labor Trends Report Package

Loads a person-year survey extract into Spark, derives labor-force
indicators and produces weighted trend summaries, charts and tables.
"""

__version__ = "0.1.0"
__author__ = "Labor Trends Team"

# Package metadata
__all__ = ["config", "errors", "data", "analysis", "visualization", "utils"]
