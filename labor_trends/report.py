"""
Report question list.

Each question pairs a named subset with one aggregation primitive. The
tables are computed once per run and handed to the visualization layer;
the narration helpers turn a table into the one-line answer printed under
each question.
"""

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import pandas as pd
from pyspark.sql import DataFrame

from .analysis.aggregation import (
    endpoint_change_by_group,
    resolve_end_year,
    stacked_endpoint_change,
    weighted_mean_over_time,
    weighted_proportion_over_time,
)
from .analysis.categories import normalize_categories
from .analysis.indicators import derive_indicators
from .analysis.subsets import SubsetRegistry, build_standard_subsets
from .config import AnalysisConfig
from .data.schema import YEAR_COLUMN
from .utils.logger import get_logger


@dataclass(frozen=True)
class ReportQuestion:
    """One report question and how to answer it."""

    key: str
    title: str
    kind: str  # "trend" or "change"
    label_column: str
    percent: bool
    compute: Callable[[SubsetRegistry, AnalysisConfig], pd.DataFrame]


def _lfp_change(registry: SubsetRegistry, cfg: AnalysisConfig) -> pd.DataFrame:
    return stacked_endpoint_change(
        registry.get("female_lfp_known"),
        "lfp_flag",
        ["age_group", "education", "race"],
        cfg.START_YEAR,
        cfg.END_YEAR,
        dimension_labels=cfg.DIMENSION_LABELS,
    )


def _income_change(registry: SubsetRegistry, cfg: AnalysisConfig) -> pd.DataFrame:
    end = resolve_end_year("income", cfg.END_YEAR, cfg.LATEST_VALID_YEAR)
    return endpoint_change_by_group(
        registry.get("female_positive_income"), "income", "education", cfg.START_YEAR, end
    )


QUESTIONS: list[ReportQuestion] = [
    ReportQuestion(
        key="female_lfp_by_education",
        title="How has women's labor force participation changed by education?",
        kind="trend",
        label_column="education",
        percent=True,
        compute=lambda reg, cfg: weighted_mean_over_time(
            reg.get("female_lfp_known"), "lfp_flag", "education"
        ),
    ),
    ReportQuestion(
        key="female_adult_lfp_by_age",
        title="How has participation of women 25 and older changed by age group?",
        kind="trend",
        label_column="age_group",
        percent=True,
        compute=lambda reg, cfg: weighted_mean_over_time(
            reg.get("female_adult_lfp_known"), "lfp_flag", "age_group"
        ),
    ),
    ReportQuestion(
        key="female_lfp_excl_self_by_education",
        title="Does the trend hold once self-employment is excluded?",
        kind="trend",
        label_column="education",
        percent=True,
        compute=lambda reg, cfg: weighted_mean_over_time(
            reg.get("female_lfp_known"), "lfp_excl_self", "education"
        ),
    ),
    ReportQuestion(
        key="female_adult_education_shares",
        title="How has the education mix of women 25 and older shifted?",
        kind="trend",
        label_column="education",
        percent=True,
        compute=lambda reg, cfg: weighted_proportion_over_time(
            reg.get("female_adult"), "education"
        ),
    ),
    ReportQuestion(
        key="female_income_by_income_quintile",
        title="How has mean income of earning women moved within each income quintile?",
        kind="trend",
        label_column="income_quintile",
        percent=False,
        compute=lambda reg, cfg: weighted_mean_over_time(
            reg.get("female_positive_income"),
            "income",
            "income_quintile",
            max_year=cfg.latest_year_for("income"),
        ),
    ),
    ReportQuestion(
        key="female_income_by_college",
        title="How does mean income of earning women differ by college attainment?",
        kind="trend",
        label_column="college",
        percent=False,
        compute=lambda reg, cfg: weighted_mean_over_time(
            reg.get("female_positive_income"),
            "income",
            "college",
            max_year=cfg.latest_year_for("income"),
        ),
    ),
    ReportQuestion(
        key="employment_by_telework_cohort",
        title="Did people who teleworked during COVID have different employment paths?",
        kind="trend",
        label_column="cohort_telework_flag",
        percent=True,
        compute=lambda reg, cfg: weighted_mean_over_time(
            reg.get("telework_cohort_known"), "employed_flag", "cohort_telework_flag"
        ),
    ),
    ReportQuestion(
        key="female_lfp_change",
        title="Which groups of women saw the largest change in participation?",
        kind="change",
        label_column="group",
        percent=True,
        compute=_lfp_change,
    ),
    ReportQuestion(
        key="female_income_change_by_education",
        title="Which education groups saw the largest change in mean income?",
        kind="change",
        label_column="education",
        percent=False,
        compute=_income_change,
    ),
]


def prepare_dataset(df: DataFrame, strict: bool = True) -> DataFrame:
    """
    Normalize categorical columns and derive indicator flags.

    Args:
        df: Loaded survey DataFrame
        strict: Reject the load on out-of-domain categorical values

    Returns:
        DataFrame ready for subsetting and aggregation
    """
    return derive_indicators(normalize_categories(df, strict=strict))


def build_report_tables(
    df: DataFrame,
    config: AnalysisConfig,
    questions: list[ReportQuestion] | None = None,
) -> dict[str, pd.DataFrame]:
    """
    Compute the tidy table answering every report question.

    Args:
        df: Prepared survey DataFrame (see prepare_dataset)
        config: Analysis window and column metadata
        questions: Questions to answer (default: QUESTIONS)

    Returns:
        Dict[str, pd.DataFrame]: Question key -> tidy result table
    """
    logger = get_logger()
    questions = questions if questions is not None else QUESTIONS

    registry = build_standard_subsets(df, adult_age=config.ADULT_AGE_THRESHOLD)
    tables: dict[str, pd.DataFrame] = {}
    try:
        for question in questions:
            logger.info(f"Answering: {question.title}")
            tables[question.key] = question.compute(registry, config)
    finally:
        registry.release()

    return tables


def _format_value(value: float, percent: bool) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "n/a"
    return f"{value * 100:.1f}%" if percent else f"{value:,.0f}"


def _format_change(value: float, percent: bool) -> str:
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return "n/a"
    return f"{value * 100:+.1f} pts" if percent else f"{value:+,.0f}"


def describe_trend(
    result: pd.DataFrame, label_column: str, percent: bool, time_column: str = YEAR_COLUMN
) -> str:
    """
    One-sentence summary of the latest period of a trend table.

    Args:
        result: Tidy trend table (time, group, value)
        label_column: Group column to name
        percent: Whether values are rates/shares
        time_column: Time axis column

    Returns:
        str: Narrative sentence
    """
    latest_rows = result[result["value"].notna()]
    if latest_rows.empty:
        return "No data available for this question."

    latest_year = latest_rows[time_column].max()
    latest = latest_rows[latest_rows[time_column] == latest_year]
    top = latest.loc[latest["value"].idxmax()]
    bottom = latest.loc[latest["value"].idxmin()]

    if len(latest) == 1:
        return f"In {latest_year}, {top[label_column]}: {_format_value(top['value'], percent)}."
    return (
        f"In {latest_year}, {top[label_column]} was highest at "
        f"{_format_value(top['value'], percent)} and {bottom[label_column]} lowest at "
        f"{_format_value(bottom['value'], percent)}."
    )


def describe_change(result: pd.DataFrame, label_column: str, percent: bool) -> str:
    """
    One-sentence summary of a ranked endpoint-change table.

    Args:
        result: Ranked table with initial/final/change columns
        label_column: Group column to name
        percent: Whether values are rates

    Returns:
        str: Narrative sentence
    """
    ranked = result[result["change"].notna()]
    if ranked.empty:
        return "No group has data at both endpoints."

    first = ranked.iloc[0]
    last = ranked.iloc[-1]
    if len(ranked) == 1:
        return f"{first[label_column]} changed by {_format_change(first['change'], percent)}."
    return (
        f"Largest change: {first[label_column]} ({_format_change(first['change'], percent)}); "
        f"smallest: {last[label_column]} ({_format_change(last['change'], percent)})."
    )


def narrate(question: ReportQuestion, result: pd.DataFrame) -> str:
    """Narrative answer for a question's table."""
    if question.kind == "change":
        return describe_change(result, question.label_column, question.percent)
    return describe_trend(result, question.label_column, question.percent)


def print_question_report(question: ReportQuestion, result: pd.DataFrame) -> None:
    """
    Print a question header, its narrative answer and (for changes) the table.

    Args:
        question: Report question
        result: Tidy table answering it
    """
    print("\n" + "=" * 80, flush=True)
    print(question.title, flush=True)
    print("=" * 80, flush=True)
    print(narrate(question, result), flush=True)

    if question.kind == "change" and not result.empty:
        display: dict[str, Any] = {question.label_column: result[question.label_column]}
        for col in ["initial", "final"]:
            display[col] = [_format_value(v, question.percent) for v in result[col]]
        display["change"] = [_format_change(v, question.percent) for v in result["change"]]
        print("-" * 80, flush=True)
        print(pd.DataFrame(display).to_string(index=False), flush=True)
