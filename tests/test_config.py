"""
Unit tests for configuration defaults and environment overrides.
"""

from collections.abc import Iterator

import pytest

from labor_trends import config as config_module
from labor_trends.config import AnalysisConfig, get_config, load_config


@pytest.fixture(autouse=True)  # type: ignore[misc]
def fresh_config() -> Iterator[None]:
    """Reset the cached configuration around each test."""
    config_module._ConfigCache._instance = None
    yield
    config_module._ConfigCache._instance = None


class TestDefaults:
    """Tests for default configuration values."""

    def test_analysis_window(self) -> None:
        cfg = AnalysisConfig()
        assert cfg.START_YEAR == 1994
        assert cfg.END_YEAR == 2024
        assert cfg.ADULT_AGE_THRESHOLD == 25

    def test_latest_year_for(self) -> None:
        cfg = AnalysisConfig()
        assert cfg.latest_year_for("income") == 2023
        assert cfg.latest_year_for("lfp_flag") == 2024

    def test_singleton(self) -> None:
        assert get_config() is get_config()

    def test_artifact_path(self) -> None:
        cfg = get_config()
        cfg.data.OUTPUT_DIR = "out"
        assert cfg.get_artifact_path("questions").replace("\\", "/") == "out/questions"


class TestEnvironmentOverrides:
    """Tests for load_config."""

    def test_env_overrides(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LT_INPUT_CSV", "/data/extract.csv")
        monkeypatch.setenv("LT_START_YEAR", "2000")
        monkeypatch.setenv("LT_END_YEAR", "2020")
        monkeypatch.setenv("LT_OUTPUT_DIR", "/tmp/report")
        monkeypatch.delenv("SPARK_MASTER", raising=False)

        cfg = load_config()

        assert cfg.data.INPUT_CSV == "/data/extract.csv"
        assert cfg.data.OUTPUT_DIR == "/tmp/report"
        assert cfg.analysis.START_YEAR == 2000
        assert cfg.analysis.END_YEAR == 2020
        assert cfg.spark.MASTER == "local[4]"

    def test_explicit_path_wins(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LT_INPUT_CSV", "/data/extract.csv")
        cfg = load_config("cli.csv")
        assert cfg.data.INPUT_CSV == "cli.csv"

    def test_spark_master_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("SPARK_MASTER", "spark://cluster:7077")
        assert load_config().spark.MASTER == "spark://cluster:7077"
