"""
DataFrame conversion for record ingestion.

Turns a wide DataFrame (one time column, some dimension columns, some
measure columns) into Records ready for WriteRecords:

    time                       region     hostname  cpu_utilization  memory_utilization
    2025-01-01 12:00:00+00:00  us-east-1  host1     13.5             40.0

becomes one record per (row, measure column), skipping missing values and
rows without a time.
"""
from itertools import islice
from typing import Iterable, Iterator, List, Optional, Sequence

import numpy as np
import pandas as pd

from .models import MAX_RECORDS_PER_WRITE, Dimension, MeasureValueType, Record, TimeUnit

# Divisors from epoch nanoseconds to each time unit
_NS_PER_UNIT = {
    TimeUnit.NANOSECONDS: 1,
    TimeUnit.MICROSECONDS: 1_000,
    TimeUnit.MILLISECONDS: 1_000_000,
    TimeUnit.SECONDS: 1_000_000_000,
}


def measure_type_for(dtype) -> MeasureValueType:
    """Infer the measure value type from a pandas column dtype."""
    if pd.api.types.is_bool_dtype(dtype):
        return MeasureValueType.BOOLEAN
    if pd.api.types.is_integer_dtype(dtype):
        return MeasureValueType.BIGINT
    if pd.api.types.is_float_dtype(dtype):
        return MeasureValueType.DOUBLE
    return MeasureValueType.VARCHAR


def _epoch_times(series: pd.Series, time_unit: TimeUnit) -> List[Optional[str]]:
    """
    Convert a timezone-aware time column to epoch strings in time_unit.

    Missing times (NaT/None) come back as None. Object and string columns are
    checked value by value, so a naive value anywhere in the column is refused.
    """
    if hasattr(series.dtype, 'tz'):
        if series.dtype.tz is None:
            raise ValueError("time column must be timezone-aware. Found timezone-naive datetime.")
    else:
        for value in series.dropna():
            if pd.Timestamp(value).tzinfo is None:
                raise ValueError(f"time column must be timezone-aware. Found timezone-naive value {value!r}.")

    parsed = pd.to_datetime(series, utc=True).dt.as_unit("ns")
    missing = parsed.isna().to_numpy()
    ns = parsed.fillna(pd.Timestamp(0, tz="UTC")).astype("int64").to_numpy()
    return [None if gap else str(v) for v, gap in zip(ns // _NS_PER_UNIT[time_unit], missing)]


def _measure_string(value, measure_type: MeasureValueType) -> str:
    if measure_type is MeasureValueType.BOOLEAN:
        return "true" if value else "false"
    if measure_type is MeasureValueType.BIGINT:
        return str(int(value))
    if isinstance(value, (float, np.floating)):
        return repr(float(value))
    return str(value)


def records_from_dataframe(
    df: pd.DataFrame,
    measure_columns: Sequence[str],
    dimension_columns: Sequence[str] = (),
    time_column: str = "time",
    time_unit: TimeUnit = TimeUnit.MILLISECONDS,
) -> List[Record]:
    """
    Convert a DataFrame into Records, one per row and measure column.

    Args:
        df: Source DataFrame
        measure_columns: Columns written as measures (column name = measure name)
        dimension_columns: Columns written as dimensions on every record of a row
        time_column: Timezone-aware datetime column; rows with no time are skipped
        time_unit: Unit of the epoch timestamps sent to the service

    Returns:
        List of Records, row-major order

    Raises:
        ValueError: If columns are missing, no measure column is given, or
            the time column is timezone-naive
    """
    if not measure_columns:
        raise ValueError("At least one measure column is required")

    missing = [c for c in [time_column, *dimension_columns, *measure_columns] if c not in df.columns]
    if missing:
        raise ValueError(f"DataFrame is missing columns: {missing}. Found: {list(df.columns)}")

    overlap = set(measure_columns) & set(dimension_columns)
    if overlap:
        raise ValueError(f"Columns cannot be both dimensions and measures: {sorted(overlap)}")

    times = _epoch_times(df[time_column], time_unit)
    measure_types = {c: measure_type_for(df[c].dtype) for c in measure_columns}

    # Column-wise arrays once, instead of repeated .iloc access
    dim_arrays = {c: df[c].to_numpy() for c in dimension_columns}
    measure_arrays = {c: df[c].to_numpy() for c in measure_columns}

    records: List[Record] = []
    for i, t in enumerate(times):
        if t is None:
            continue
        dimensions = tuple(
            Dimension(name=c, value=str(dim_arrays[c][i]))
            for c in dimension_columns
            if not pd.isna(dim_arrays[c][i])
        )
        for c in measure_columns:
            value = measure_arrays[c][i]
            if pd.isna(value):
                continue
            records.append(Record(
                dimensions=dimensions,
                measure_name=c,
                measure_value=_measure_string(value, measure_types[c]),
                measure_value_type=measure_types[c],
                time=t,
                time_unit=time_unit,
            ))
    return records


def chunked(records: Iterable[Record], size: Optional[int] = None) -> Iterator[List[Record]]:
    """Split records into lists of at most ``size`` (default: the service limit of 100)."""
    size = size or MAX_RECORDS_PER_WRITE
    if size < 1 or size > MAX_RECORDS_PER_WRITE:
        raise ValueError(f"Chunk size must be between 1 and {MAX_RECORDS_PER_WRITE}, got {size}")
    it = iter(records)
    while True:
        chunk = list(islice(it, size))
        if not chunk:
            return
        yield chunk
