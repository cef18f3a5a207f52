"""
Visualization module for weighted trend results.

Provides line charts for tidy (time, group, value) tables, horizontal bar
charts for ranked endpoint changes, and CSV/Parquet table export.
"""

from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
import seaborn as sns
from matplotlib import rcParams
from matplotlib.ticker import FuncFormatter, PercentFormatter

from ..data.schema import YEAR_COLUMN
from ..utils.logger import get_logger

# Configure matplotlib and seaborn for better-looking plots
rcParams["font.family"] = "DejaVu Sans"
rcParams["figure.figsize"] = (12, 6)
rcParams["axes.labelsize"] = 11
rcParams["xtick.labelsize"] = 10
rcParams["ytick.labelsize"] = 10
rcParams["legend.fontsize"] = 10
sns.set_style("whitegrid")
sns.set_palette("husl")


def _group_order(result: pd.DataFrame, group_column: str) -> list:
    """Groups in declared domain order when categorical, else first appearance."""
    series = result[group_column]
    if isinstance(series.dtype, pd.CategoricalDtype):
        present = set(series.dropna().unique())
        return [label for label in series.cat.categories if label in present]
    return list(series.dropna().unique())


def plot_trend(
    result: pd.DataFrame,
    group_column: str,
    title: str,
    output_path: str,
    percent: bool = True,
    time_column: str = YEAR_COLUMN,
    value_column: str = "value",
) -> str:
    """
    Create a line chart with one line per group.

    Missing cells break the line instead of being drawn as zero.

    Args:
        result: Tidy trend table from an aggregation primitive
        group_column: Column holding the group labels
        title: Chart title
        output_path: Output file path for PNG
        percent: Format the y axis as percentages
        time_column: Time axis column
        value_column: Value column to plot

    Returns:
        Path to saved PNG file
    """
    logger = get_logger()

    fig, ax = plt.subplots(figsize=(12, 6))

    for group in _group_order(result, group_column):
        series = result[result[group_column] == group].sort_values(time_column)
        ax.plot(
            series[time_column],
            series[value_column],
            marker="o",
            markersize=3,
            linewidth=2,
            label=str(group),
        )

    if percent:
        ax.yaxis.set_major_formatter(PercentFormatter(xmax=1.0, decimals=0))
    else:
        ax.yaxis.set_major_formatter(FuncFormatter(lambda v, _pos: f"{v:,.0f}"))

    ax.set_xlabel(time_column.capitalize(), fontsize=12, weight="bold")
    ax.set_title(title, fontsize=14, weight="bold", pad=20)
    ax.grid(axis="y", alpha=0.3, linestyle="--")
    ax.legend(title=group_column.replace("_", " ").title(), loc="best")

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    logger.info(f"Trend chart saved to: {output_path}")
    plt.close(fig)

    return output_path


def plot_endpoint_change(
    table: pd.DataFrame,
    label_column: str,
    title: str,
    output_path: str,
    percent: bool = True,
) -> str:
    """
    Create a horizontal bar chart of ranked endpoint changes.

    Groups with a missing change are left out of the chart.

    Args:
        table: Ranked endpoint-change table
        label_column: Column holding the group labels
        title: Chart title
        output_path: Output file path for PNG
        percent: Show changes as percentage points

    Returns:
        Path to saved PNG file
    """
    logger = get_logger()

    data = table[table["change"].notna()]
    # Largest change at the top
    data = data.iloc[::-1]
    values = data["change"] * 100 if percent else data["change"]
    colors = ["#4ECDC4" if v >= 0 else "#FF6B6B" for v in values]

    fig, ax = plt.subplots(figsize=(10, max(4, 0.4 * len(data) + 1)))
    y = np.arange(len(data))
    bars = ax.barh(
        y,
        values,
        color=colors,
        edgecolor="black",
        linewidth=1,
        alpha=0.8,
    )

    for bar, value in zip(bars, values):
        ax.text(
            bar.get_width(),
            bar.get_y() + bar.get_height() / 2.0,
            f" {value:+.1f}" if percent else f" {value:+,.0f}",
            ha="left" if value >= 0 else "right",
            va="center",
            fontsize=9,
        )

    ax.set_yticks(y)
    ax.set_yticklabels(data[label_column].astype(str))
    ax.axvline(0, color="black", linewidth=1)
    ax.set_xlabel("Change (percentage points)" if percent else "Change", fontsize=11)
    ax.set_title(title, fontsize=14, weight="bold", pad=20)
    ax.grid(axis="x", alpha=0.3, linestyle="--")

    plt.tight_layout()
    plt.savefig(output_path, dpi=150, bbox_inches="tight")
    logger.info(f"Change chart saved to: {output_path}")
    plt.close(fig)

    return output_path


def export_table(table: pd.DataFrame, output_path: str) -> str:
    """
    Export a result table to CSV or Parquet (chosen by file suffix).

    Args:
        table: Tidy result table
        output_path: Output file path (.csv or .parquet)

    Returns:
        Path to saved file

    Raises:
        ValueError: If the suffix is not supported
    """
    logger = get_logger()

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    if path.suffix == ".csv":
        table.to_csv(path, index=False)
    elif path.suffix == ".parquet":
        table.to_parquet(path, index=False, engine="pyarrow")
    else:
        raise ValueError(f"Unsupported table format: {path.suffix}")

    logger.info(f"Table exported to: {output_path}")
    return str(path)


def create_question_artifacts(
    key: str,
    kind: str,
    table: pd.DataFrame,
    label_column: str,
    title: str,
    output_directory: str,
    percent: bool = True,
) -> dict[str, str]:
    """
    Generate the chart and table files for one report question.

    Args:
        key: Question key (used as the file stem)
        kind: "trend" or "change"
        table: Tidy result table
        label_column: Group column
        title: Chart title
        output_directory: Directory to save the artifacts
        percent: Whether values are rates/shares

    Returns:
        Dictionary mapping artifact names to their file paths
    """
    output_path = Path(output_directory)
    output_path.mkdir(parents=True, exist_ok=True)

    chart_path = str(output_path / f"{key}.png")
    if kind == "change":
        chart = plot_endpoint_change(table, label_column, title, chart_path, percent=percent)
    else:
        chart = plot_trend(table, label_column, title, chart_path, percent=percent)

    return {
        "chart": chart,
        "table": export_table(table, str(output_path / f"{key}.csv")),
    }
