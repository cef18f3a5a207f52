"""
Unit tests for the application logger.
"""

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from labor_trends.utils import logger as logger_module
from labor_trends.utils.logger import get_logger, log_section, set_log_level, setup_logger


@pytest.fixture  # type: ignore[misc]
def fresh_logger() -> Iterator[None]:
    """Run with no configured global logger, then restore the previous one."""
    previous = logger_module._logger
    logger_module._logger = None
    yield
    logger_module._logger = previous


@pytest.mark.usefixtures("fresh_logger")  # type: ignore[misc]
class TestLogger:
    """Tests for setup_logger and helpers."""

    def test_setup_writes_log_file(self, tmp_path: Path) -> None:
        logger = setup_logger(name="labor_trends_test_file", log_dir=str(tmp_path))
        log_section("PHASE 1: Load")
        for handler in logger.handlers:
            handler.flush()

        log_files = list(tmp_path.glob("labor_trends_*.log"))
        assert len(log_files) == 1
        assert "PHASE 1: Load" in log_files[0].read_text(encoding="utf-8")

    def test_get_logger_returns_configured_instance(self, tmp_path: Path) -> None:
        logger = setup_logger(
            name="labor_trends_test_singleton", log_dir=str(tmp_path), console_output=False
        )
        assert get_logger() is logger
        assert setup_logger(name="other") is logger

    def test_set_log_level(self, tmp_path: Path) -> None:
        logger = setup_logger(name="labor_trends_test_level", log_dir=str(tmp_path))
        set_log_level(logging.WARNING)
        assert logger.level == logging.WARNING
        assert all(handler.level == logging.WARNING for handler in logger.handlers)
