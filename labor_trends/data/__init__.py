"""
Data module for loading the survey extract and managing Spark sessions.
"""

from .loader import load_survey_data
from .spark_manager import SparkSessionManager
from .validator import DataValidator

__all__ = [
    "load_survey_data",
    "SparkSessionManager",
    "DataValidator",
]
