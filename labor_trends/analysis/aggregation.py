"""
Weighted aggregation primitives.

Three reusable shapes over a (possibly filtered) survey DataFrame, each
returning a tidy pandas DataFrame ready for charting or tabulation:

- weighted_mean_over_time: sum(w * v) / sum(w) per (year, group) cell,
  counting only rows where the value is present.
- weighted_proportion_over_time: each group's share of the period's total
  weight; shares sum to 1 within every period.
- endpoint_change_by_group: weighted mean at a start and an end year and
  their difference, ranked by the difference.

Heavy lifting happens in Spark; the collected cells are small and are
assembled with pandas. Cells are sorted in Spark by the ``<column>_rank``
columns, so groups follow their declared domain, not the alphabet, and
come back as ordered categoricals. Empty cells and missing endpoints are
reported as missing (NaN), never as zero.
"""

from typing import Any

import pandas as pd
from pyspark.sql import Column, DataFrame, Row
from pyspark.sql import functions as f

from ..data.schema import WEIGHT_COLUMN, YEAR_COLUMN
from ..errors import WeightIntegrityError
from ..utils.logger import get_logger
from .categories import ORDERED_DOMAINS, ordered_categorical, rank_column_name, rank_expression

VALUE_COLUMN = "value"
ENDPOINT_COLUMNS = ["initial", "final", "change"]


def _as_list(group_columns: str | list[str] | None) -> list[str]:
    if group_columns is None:
        return []
    if isinstance(group_columns, str):
        return [group_columns]
    return list(group_columns)


def _validate_columns(df: DataFrame, columns: list[str]) -> None:
    for col in columns:
        if col not in df.columns:
            raise ValueError(f"Column '{col}' not found in dataset")


def _weight_checks(weight_column: str) -> list:
    """Aggregate expressions used to surface bad weights in the same pass."""
    w = f.col(weight_column)
    return [
        f.min(w).alias("_min_weight"),
        f.sum(f.when(w.isNull(), 1).otherwise(0)).alias("_missing_weights"),
        f.sum(f.when(f.isnan(w) | (w == float("inf")), 1).otherwise(0)).alias(
            "_non_finite_weights"
        ),
    ]


def _raise_on_bad_weights(rows: list[Row], weight_column: str) -> None:
    missing = sum(int(row["_missing_weights"] or 0) for row in rows)
    non_finite = sum(int(row["_non_finite_weights"] or 0) for row in rows)
    minimums = [row["_min_weight"] for row in rows if row["_min_weight"] is not None]
    if missing:
        raise WeightIntegrityError(f"{missing:,} rows have a missing '{weight_column}'")
    if non_finite:
        raise WeightIntegrityError(
            f"{non_finite:,} rows have a NaN or infinite '{weight_column}'"
        )
    if minimums and min(minimums) <= 0:
        raise WeightIntegrityError(
            f"Non-positive survey weight in '{weight_column}': min={min(minimums)}"
        )


def _tidy_frame(
    records: list[dict[str, Any]], key_columns: list[str], value_columns: list[str]
) -> pd.DataFrame:
    """Build a tidy frame; group columns become ordered categoricals."""
    frame = pd.DataFrame.from_records(records, columns=key_columns + value_columns)
    for col in key_columns:
        frame[col] = ordered_categorical(frame[col], col)
    for col in value_columns:
        frame[col] = frame[col].astype("int64" if col == "n" else "float64")
    return frame


def _ordering(df: DataFrame, keys: list[str]) -> tuple[list[str], list[Column]]:
    """
    Rank columns to carry through a groupBy, and sort expressions for the keys.

    A key with a ``<key>_rank`` column sorts by it; a key with a declared
    domain but no rank column sorts by its rank computed on the fly; any
    other key sorts by value. Missing keys sort last.
    """
    rank_columns = []
    order = []
    for key in keys:
        rank = rank_column_name(key)
        if rank in df.columns:
            rank_columns.append(rank)
            order.append(f.col(rank).asc_nulls_last())
        elif key in ORDERED_DOMAINS:
            order.append(rank_expression(key, ORDERED_DOMAINS[key]).asc_nulls_last())
        else:
            order.append(f.col(key).asc_nulls_last())
    return rank_columns, order


def weighted_mean_over_time(
    df: DataFrame,
    value_column: str,
    group_columns: str | list[str] | None = None,
    time_column: str = YEAR_COLUMN,
    weight_column: str = WEIGHT_COLUMN,
    max_year: int | None = None,
) -> pd.DataFrame:
    """
    Weighted mean of a value per (time, group) cell.

    Rows whose value is missing are excluded from both numerator and
    denominator of their cell. Boolean values count as 0/1, so the mean of
    a flag is a weighted rate. A cell with no present values is missing.

    Args:
        df: Input Spark DataFrame (usually an already-filtered subset)
        value_column: Numeric or boolean column to average
        group_columns: Column or columns defining groups (None for overall)
        time_column: Time axis column (default: year)
        weight_column: Name of the sampling weight column
        max_year: Drop periods after this year (latest valid year of the value)

    Returns:
        pd.DataFrame: Columns [time, *groups, value, weight_total, n]

    Raises:
        ValueError: If a column doesn't exist in DataFrame
        WeightIntegrityError: If a weight is missing or non-positive
    """
    logger = get_logger()
    groups = _as_list(group_columns)
    keys = [time_column] + groups
    _validate_columns(df, keys + [value_column, weight_column])

    logger.info(
        f"Weighted mean of {value_column} by {', '.join(keys)}"
        + (f" through {max_year}" if max_year is not None else "")
    )

    if max_year is not None:
        df = df.filter(f.col(time_column) <= max_year)

    value = f.col(value_column).cast("double")
    weight = f.col(weight_column)
    present = value.isNotNull()

    rank_columns, order = _ordering(df, keys)
    rows = (
        df.groupBy(*keys, *rank_columns)
        .agg(
            f.sum(f.when(present, weight * value)).alias("_weighted_sum"),
            f.sum(f.when(present, weight)).alias("weight_total"),
            f.count(value).alias("n"),
            *_weight_checks(weight_column),
        )
        .orderBy(*order)
        .collect()
    )
    _raise_on_bad_weights(rows, weight_column)

    records = []
    for row in rows:
        weight_total = row["weight_total"]
        records.append(
            {
                **{key: row[key] for key in keys},
                VALUE_COLUMN: (row["_weighted_sum"] / weight_total if weight_total else None),
                "weight_total": weight_total,
                "n": row["n"],
            }
        )

    result = _tidy_frame(records, keys, [VALUE_COLUMN, "weight_total", "n"])
    logger.info(f"Weighted means computed for {len(result):,} cells")
    return result


def weighted_proportion_over_time(
    df: DataFrame,
    group_columns: str | list[str],
    time_column: str = YEAR_COLUMN,
    weight_column: str = WEIGHT_COLUMN,
    max_year: int | None = None,
) -> pd.DataFrame:
    """
    Weighted share of each group within each time period.

    Rows with a missing group label are excluded before shares are
    computed, so the shares of every period sum to 1.

    Args:
        df: Input Spark DataFrame
        group_columns: Column or columns defining groups
        time_column: Time axis column (default: year)
        weight_column: Name of the sampling weight column
        max_year: Drop periods after this year

    Returns:
        pd.DataFrame: Columns [time, *groups, value, weight_total, n]

    Raises:
        ValueError: If a column doesn't exist or no group column is given
        WeightIntegrityError: If a weight is missing or non-positive
    """
    logger = get_logger()
    groups = _as_list(group_columns)
    if not groups:
        raise ValueError("At least one group column is required for proportions")
    keys = [time_column] + groups
    _validate_columns(df, keys + [weight_column])

    logger.info(f"Weighted proportions of {', '.join(groups)} by {time_column}")

    if max_year is not None:
        df = df.filter(f.col(time_column) <= max_year)
    for col in groups:
        df = df.filter(f.col(col).isNotNull())

    rank_columns, order = _ordering(df, keys)
    rows = (
        df.groupBy(*keys, *rank_columns)
        .agg(
            f.sum(f.col(weight_column)).alias("weight_total"),
            f.count(f.lit(1)).alias("n"),
            *_weight_checks(weight_column),
        )
        .orderBy(*order)
        .collect()
    )
    _raise_on_bad_weights(rows, weight_column)

    period_totals: dict[Any, float] = {}
    for row in rows:
        period_totals[row[time_column]] = (
            period_totals.get(row[time_column], 0.0) + row["weight_total"]
        )

    records = [
        {
            **{key: row[key] for key in keys},
            VALUE_COLUMN: row["weight_total"] / period_totals[row[time_column]],
            "weight_total": row["weight_total"],
            "n": row["n"],
        }
        for row in rows
    ]

    result = _tidy_frame(records, keys, [VALUE_COLUMN, "weight_total", "n"])
    logger.info(f"Weighted proportions computed for {len(result):,} cells")
    return result


def _rank_by_change(frame: pd.DataFrame, order_columns: list[str]) -> pd.DataFrame:
    """Sort descending by change (missing last); ties keep the given or current order."""
    if frame.empty:
        return frame.reset_index(drop=True)
    if order_columns:
        frame = frame.sort_values(order_columns, na_position="last", kind="mergesort")
    frame = frame.sort_values("change", ascending=False, na_position="last", kind="mergesort")
    return frame.reset_index(drop=True)


def endpoint_change_by_group(
    df: DataFrame,
    value_column: str,
    group_column: str,
    start: int,
    end: int,
    time_column: str = YEAR_COLUMN,
    weight_column: str = WEIGHT_COLUMN,
) -> pd.DataFrame:
    """
    Change in a group's weighted mean between two periods.

    For every group seen at either endpoint, computes the weighted mean at
    ``start`` (initial), at ``end`` (final) and ``final - initial``
    (change). A group with no present values at an endpoint reports that
    endpoint and the change as missing. Rows are ranked by change,
    largest first, with missing changes last.

    Args:
        df: Input Spark DataFrame
        value_column: Numeric or boolean column to average
        group_column: Column defining groups
        start: Initial period
        end: Final period
        time_column: Time axis column (default: year)
        weight_column: Name of the sampling weight column

    Returns:
        pd.DataFrame: Columns [group_column, initial, final, change]

    Raises:
        ValueError: If a column doesn't exist in DataFrame
        WeightIntegrityError: If a weight is missing or non-positive
    """
    logger = get_logger()
    _validate_columns(df, [time_column, group_column, value_column, weight_column])

    logger.info(f"Endpoint change of {value_column} by {group_column}: {start} -> {end}")

    value = f.col(value_column).cast("double")
    weight = f.col(weight_column)
    present = value.isNotNull()

    rank_columns, order = _ordering(df, [group_column])
    rows = (
        df.filter(f.col(time_column).isin([start, end]) & f.col(group_column).isNotNull())
        .groupBy(group_column, time_column, *rank_columns)
        .agg(
            f.sum(f.when(present, weight * value)).alias("_weighted_sum"),
            f.sum(f.when(present, weight)).alias("_weight_total"),
            *_weight_checks(weight_column),
        )
        .orderBy(*order, f.col(time_column))
        .collect()
    )
    _raise_on_bad_weights(rows, weight_column)

    endpoints: dict[str, dict[str, float | None]] = {}
    for row in rows:
        group = row[group_column]
        entry = endpoints.setdefault(group, {"initial": None, "final": None})
        weight_total = row["_weight_total"]
        mean = row["_weighted_sum"] / weight_total if weight_total else None
        if row[time_column] == start:
            entry["initial"] = mean
        if row[time_column] == end:
            entry["final"] = mean

    records = []
    for group, entry in endpoints.items():
        initial, final = entry["initial"], entry["final"]
        change = final - initial if initial is not None and final is not None else None
        records.append(
            {group_column: group, "initial": initial, "final": final, "change": change}
        )

    result = _tidy_frame(records, [group_column], ENDPOINT_COLUMNS)
    result = _rank_by_change(result, [])

    logger.info(f"Endpoint changes computed for {len(result):,} groups")
    return result


def stacked_endpoint_change(
    df: DataFrame,
    value_column: str,
    group_columns: list[str],
    start: int,
    end: int,
    dimension_labels: dict[str, str] | None = None,
    time_column: str = YEAR_COLUMN,
    weight_column: str = WEIGHT_COLUMN,
) -> pd.DataFrame:
    """
    Endpoint change over several grouping dimensions in one ranked table.

    Each group is labelled "<Dimension>: <label>", e.g. "Age: 25-34".

    Args:
        df: Input Spark DataFrame
        value_column: Numeric or boolean column to average
        group_columns: Grouping dimensions to stack
        start: Initial period
        end: Final period
        dimension_labels: Column -> display name (default: column name)
        time_column: Time axis column (default: year)
        weight_column: Name of the sampling weight column

    Returns:
        pd.DataFrame: Columns [dimension, group, initial, final, change]
    """
    labels = dimension_labels or {}
    frames = []
    for position, col in enumerate(group_columns):
        single = endpoint_change_by_group(
            df, value_column, col, start, end, time_column=time_column, weight_column=weight_column
        )
        display = labels.get(col, col)
        frames.append(
            pd.DataFrame(
                {
                    "dimension": display,
                    "group": [f"{display}: {label}" for label in single[col].astype(str)],
                    "_dimension_order": position,
                    "_group_order": range(len(single)),
                    "initial": single["initial"],
                    "final": single["final"],
                    "change": single["change"],
                }
            )
        )

    if not frames:
        return pd.DataFrame(columns=["dimension", "group", *ENDPOINT_COLUMNS])

    stacked = pd.concat(frames, ignore_index=True)
    stacked = _rank_by_change(stacked, ["_dimension_order", "_group_order"])
    return stacked.drop(columns=["_dimension_order", "_group_order"])


def resolve_end_year(
    value_column: str, requested_end: int, latest_valid_years: dict[str, int]
) -> int:
    """
    Clamp a requested end year to the latest year with usable data for a column.

    Args:
        value_column: Column being compared across endpoints
        requested_end: End year asked for by the analysis
        latest_valid_years: Column -> latest valid survey year

    Returns:
        int: The end year to use
    """
    latest = latest_valid_years.get(value_column)
    if latest is None or latest >= requested_end:
        return requested_end

    get_logger().info(
        f"{value_column} has no data after {latest}; using {latest} instead of {requested_end}"
    )
    return latest
