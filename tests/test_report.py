"""
Tests for the report question list, narration and artifacts.

Tests:
- Dataset preparation (domains and indicators)
- Whole-report determinism
- A single respondent leaving the labor force
- Narrative sentences
- Chart and table files
"""

from collections.abc import Callable
from pathlib import Path

import pandas as pd
import pytest
from pyspark.sql import DataFrame

from labor_trends.analysis.aggregation import stacked_endpoint_change
from labor_trends.config import AnalysisConfig
from labor_trends.errors import DomainError
from labor_trends.report import (
    QUESTIONS,
    build_report_tables,
    describe_change,
    describe_trend,
    narrate,
    prepare_dataset,
)
from labor_trends.visualization.trend_viz import create_question_artifacts, export_table

TELEWORK = "Telework from 2021-2022 due to COVID"


@pytest.fixture  # type: ignore[misc]
def sample(survey_df: Callable[..., DataFrame]) -> DataFrame:
    """Small panel across the analysis window."""
    return survey_df(
        {"cpsidp": "A", "year": 1994, "education": "Some college"},
        {"cpsidp": "B", "year": 1994, "labor_force": "Not in labor force", "asecwt": 2.0},
        {"cpsidp": "C", "year": 1994, "sex": "Male", "age_group": "45-54"},
        {"cpsidp": "D", "year": 2021, "telework": TELEWORK},
        {"cpsidp": "D", "year": 2022, "employment": "Unemployed"},
        {"cpsidp": "E", "year": 2021, "telework": "Did not telework"},
        {"cpsidp": "A", "year": 2023, "education": "Some college", "income": 45000.0},
        {"cpsidp": "F", "year": 2024, "education": "Bachelor's degree", "age_group": "55-64"},
        {"cpsidp": "G", "year": 2024, "age_group": "20-24", "income": 0.0},
    )


class TestPrepareDataset:
    """Tests for prepare_dataset."""

    def test_adds_ranks_and_indicators(self, sample: DataFrame) -> None:
        prepared = prepare_dataset(sample)
        assert "education_rank" in prepared.columns
        assert "lfp_flag" in prepared.columns
        assert "cohort_telework_flag" in prepared.columns
        assert prepared.count() == sample.count()

    def test_out_of_domain_rejected(self, survey_df: Callable[..., DataFrame]) -> None:
        df = survey_df({"education": "Trade school"})
        with pytest.raises(DomainError):
            prepare_dataset(df)

    def test_out_of_domain_dropped_when_lenient(
        self, survey_df: Callable[..., DataFrame]
    ) -> None:
        df = survey_df({"cpsidp": "A", "education": "Trade school"}, {"cpsidp": "B"})
        assert prepare_dataset(df, strict=False).count() == 1


class TestBuildReportTables:
    """Tests for build_report_tables."""

    def test_every_question_answered(self, sample: DataFrame) -> None:
        tables = build_report_tables(prepare_dataset(sample), AnalysisConfig())
        assert set(tables) == {question.key for question in QUESTIONS}
        for question in QUESTIONS:
            assert question.label_column in tables[question.key].columns

    def test_deterministic(self, sample: DataFrame) -> None:
        """Two runs over the same data produce identical tables."""
        prepared = prepare_dataset(sample)
        first = build_report_tables(prepared, AnalysisConfig())
        second = build_report_tables(prepared, AnalysisConfig())
        for key, table in first.items():
            pd.testing.assert_frame_equal(table, second[key])

    def test_income_trend_stops_at_latest_valid_year(self, sample: DataFrame) -> None:
        """Income tables never include a year past the last valid income year."""
        tables = build_report_tables(prepare_dataset(sample), AnalysisConfig())
        assert tables["female_income_by_college"]["year"].max() == 2023

    def test_income_change_uses_latest_valid_year(self, sample: DataFrame) -> None:
        """The income comparison ends in 2023, where respondent A reports income."""
        tables = build_report_tables(prepare_dataset(sample), AnalysisConfig())
        result = tables["female_income_change_by_education"]
        row = result[result["education"] == "Some college"].iloc[0]
        assert row["initial"] == 30000.0
        assert row["final"] == 45000.0
        assert row["change"] == 15000.0

    def test_telework_cohort(self, sample: DataFrame) -> None:
        """The COVID cohort flag marks both of D's rows, including 2022."""
        tables = build_report_tables(prepare_dataset(sample), AnalysisConfig())
        result = tables["employment_by_telework_cohort"]
        cohort = result[result["cohort_telework_flag"] == True]  # noqa: E712
        assert set(cohort["year"]) == {2021, 2022}
        assert cohort[cohort["year"] == 2022]["value"].iloc[0] == 0.0

    def test_subset_questions_only(self, sample: DataFrame) -> None:
        """A custom question list computes only those questions."""
        questions = [q for q in QUESTIONS if q.key == "female_lfp_by_education"]
        tables = build_report_tables(prepare_dataset(sample), AnalysisConfig(), questions)
        assert list(tables) == ["female_lfp_by_education"]


class TestSingleRespondent:
    """A respondent in the labor force in 1994 and out of it in 2024."""

    def test_left_labor_force(self, survey_df: Callable[..., DataFrame]) -> None:
        df = prepare_dataset(
            survey_df(
                {"cpsidp": "A001", "year": 1994, "asecwt": 500.0},
                {
                    "cpsidp": "A001",
                    "year": 2024,
                    "asecwt": 500.0,
                    "labor_force": "Not in labor force",
                    "employment": "Not in labor force",
                },
            )
        )
        result = stacked_endpoint_change(
            df, "lfp_flag", ["age_group"], 1994, 2024, dimension_labels={"age_group": "Age"}
        )

        row = result[result["group"] == "Age: 25-34"].iloc[0]
        assert row["initial"] == 1.0
        assert row["final"] == 0.0
        assert row["change"] == -1.0


class TestNarration:
    """Tests for narrative sentences."""

    def test_describe_trend(self) -> None:
        result = pd.DataFrame(
            {
                "year": [1994, 1994, 2024, 2024],
                "education": ["Some college", "Advanced degree"] * 2,
                "value": [0.5, 0.7, 0.6, 0.8],
            }
        )
        sentence = describe_trend(result, "education", percent=True)
        assert sentence == (
            "In 2024, Advanced degree was highest at 80.0% and Some college lowest at 60.0%."
        )

    def test_describe_trend_empty(self) -> None:
        result = pd.DataFrame({"year": [2024], "education": ["Some college"], "value": [None]})
        assert describe_trend(result, "education", percent=True) == (
            "No data available for this question."
        )

    def test_describe_change(self) -> None:
        result = pd.DataFrame(
            {
                "group": ["Age: 55-64", "Age: 16-19", "Age: 65+"],
                "initial": [0.4, 0.6, None],
                "final": [0.6, 0.5, 0.2],
                "change": [0.2, -0.1, None],
            }
        )
        sentence = describe_change(result, "group", percent=True)
        assert sentence == "Largest change: Age: 55-64 (+20.0 pts); smallest: Age: 16-19 (-10.0 pts)."

    def test_narrate_dispatches_by_kind(self) -> None:
        question = next(q for q in QUESTIONS if q.key == "female_income_change_by_education")
        result = pd.DataFrame(
            {"education": ["Some college"], "initial": [100.0], "final": [1100.0], "change": [1000.0]}
        )
        assert narrate(question, result) == "Some college changed by +1,000."


class TestArtifacts:
    """Tests for chart and table files."""

    def test_trend_artifacts(self, tmp_path: Path) -> None:
        table = pd.DataFrame(
            {
                "year": [1994, 2024, 1994, 2024],
                "education": ["Some college", "Some college", "Advanced degree", "Advanced degree"],
                "value": [0.5, 0.6, 0.7, 0.8],
            }
        )
        paths = create_question_artifacts(
            "lfp", "trend", table, "education", "Participation", str(tmp_path)
        )
        assert Path(paths["chart"]).exists()
        assert Path(paths["table"]).exists()
        assert pd.read_csv(paths["table"]).shape == (4, 3)

    def test_change_artifacts(self, tmp_path: Path) -> None:
        table = pd.DataFrame(
            {
                "group": ["Age: 55-64", "Age: 16-19"],
                "initial": [0.4, 0.6],
                "final": [0.6, 0.5],
                "change": [0.2, -0.1],
            }
        )
        paths = create_question_artifacts(
            "change", "change", table, "group", "Change", str(tmp_path / "out")
        )
        assert paths["chart"].endswith("change.png")
        assert Path(paths["chart"]).exists()

    def test_export_parquet(self, tmp_path: Path) -> None:
        table = pd.DataFrame({"year": [1994], "value": [0.5]})
        path = export_table(table, str(tmp_path / "table.parquet"))
        pd.testing.assert_frame_equal(pd.read_parquet(path), table)

    def test_export_unknown_format(self, tmp_path: Path) -> None:
        with pytest.raises(ValueError, match="Unsupported"):
            export_table(pd.DataFrame({"a": [1]}), str(tmp_path / "table.xlsx"))
