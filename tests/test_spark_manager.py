"""
Unit tests for the Spark session manager singleton.

No session is created here; the shared test session stays untouched.
"""

from collections.abc import Iterator

import pytest

from labor_trends.config import SparkConfig
from labor_trends.data.spark_manager import SparkSessionManager


@pytest.fixture(autouse=True)  # type: ignore[misc]
def clean_manager() -> Iterator[None]:
    """Drop any manager instance before and after each test."""
    SparkSessionManager.reset()
    yield
    SparkSessionManager.reset()


class TestSparkSessionManager:
    """Tests for singleton construction and reset."""

    def test_single_instance(self) -> None:
        """Later constructions return the first manager and keep its settings."""
        first = SparkSessionManager(SparkConfig(MASTER="local[1]", APP_NAME="first"))
        second = SparkSessionManager(SparkConfig(MASTER="local[2]", APP_NAME="second"))

        assert first is second
        assert second.config.APP_NAME == "first"
        assert second.config.MASTER == "local[1]"

    def test_reset_allows_new_settings(self) -> None:
        """After reset the next manager is built from the new settings."""
        first = SparkSessionManager(SparkConfig(APP_NAME="first"))
        SparkSessionManager.reset()
        second = SparkSessionManager(SparkConfig(APP_NAME="second"))

        assert second is not first
        assert second.config.APP_NAME == "second"

    def test_reset_without_instance(self) -> None:
        """Reset is a no-op when no manager exists."""
        SparkSessionManager.reset()
        assert SparkSessionManager._instance is None
