"""
Metrics aggregation — pure functions with no side effects.

Reduces a chronologically ordered list of metric records to one summary for
the dashboard: the latest (or a requested) period in single-period view, or
the mean of ratio fields and the sum of count fields across a multi-period
window.
"""

import logging
from typing import Iterable, Sequence

import pandas as pd

from .config import WINDOW_MONTHS
from .models import AggregatedSummary, MetricRecord, ViewMode

logger = logging.getLogger(__name__)


def metrics_to_frame(records: Iterable, schema: type = MetricRecord) -> pd.DataFrame:
    """Tabulate records, one row per record.

    Fields of ``schema`` missing from a record (older schema) are filled
    with zero.

    Returns
    -------
    DataFrame with columns: client_id, period_type, date, <schema fields>
    """
    columns = ["client_id", "period_type", "date", *schema.metric_fields()]
    rows = []
    for record in records:
        row = {
            "client_id": record.client_id,
            "period_type": record.period_type,
            "date": record.date,
        }
        for name in schema.metric_fields():
            row[name] = getattr(record, name, 0)
        rows.append(row)

    if not rows:
        return pd.DataFrame(columns=columns)

    df = pd.DataFrame(rows, columns=columns)
    df[list(schema.RATIO_FIELDS)] = df[list(schema.RATIO_FIELDS)].fillna(0.0).astype(float)
    df[list(schema.COUNT_FIELDS)] = df[list(schema.COUNT_FIELDS)].fillna(0).astype("int64")
    return df


def _summary_from_record(record, view_mode: ViewMode, schema: type) -> AggregatedSummary:
    values = {}
    for name in schema.RATIO_FIELDS:
        values[name] = float(getattr(record, name, 0.0))
    for name in schema.COUNT_FIELDS:
        values[name] = int(getattr(record, name, 0))
    return AggregatedSummary(
        client_id=record.client_id,
        view_mode=view_mode,
        periods=(record.period_type,),
        record_count=1,
        values=values,
    )


def aggregate_metrics(
    records: Sequence,
    view_mode: ViewMode,
    *,
    period: str | None = None,
    schema: type = MetricRecord,
) -> AggregatedSummary | None:
    """Summarise records for the dashboard.

    Rules
    -----
    - Empty input: None ("no data"), never an all-zero summary.
    - SINGLE_PERIOD: the last record as given; with ``period``, the record
      whose period_type equals it exactly (None if there is none).
    - MULTI_PERIOD: ratio fields are the arithmetic mean over all records,
      count fields are the sum. Missing fields count as zero.

    The input list is not modified.
    """
    view_mode = ViewMode(view_mode)

    if not records:
        logger.warning("No metric records to aggregate (%s)", view_mode.value)
        return None

    if view_mode is ViewMode.SINGLE_PERIOD:
        if period is None:
            return _summary_from_record(records[-1], view_mode, schema)

        matches = [r for r in records if r.period_type == period]
        if not matches:
            logger.warning("No metric record for period '%s'", period)
            return None
        return _summary_from_record(matches[-1], view_mode, schema)

    df = metrics_to_frame(records, schema)

    values = {}
    for name in schema.RATIO_FIELDS:
        values[name] = float(df[name].sum() / len(df))
    for name in schema.COUNT_FIELDS:
        values[name] = int(df[name].sum())

    client_ids = df["client_id"].unique().tolist()
    periods = tuple(dict.fromkeys(df["period_type"].tolist()))

    return AggregatedSummary(
        client_id=client_ids[0] if len(client_ids) == 1 else None,
        view_mode=view_mode,
        periods=periods,
        record_count=len(df),
        values=values,
    )


# ---------------------------------------------------------------------------
# Reporting windows
# ---------------------------------------------------------------------------

def view_mode_for_window(window: str) -> ViewMode:
    """Map a window name to its view mode: one month is a single period."""
    if window not in WINDOW_MONTHS:
        raise ValueError(f"Unknown window '{window}'")
    return ViewMode.SINGLE_PERIOD if WINDOW_MONTHS[window] == 1 else ViewMode.MULTI_PERIOD


def window_periods(reference_period: str, months: int) -> list[str]:
    """Return the ``months`` period keys ending at ``reference_period``, ascending."""
    if months < 1:
        raise ValueError("months must be at least 1")
    end = pd.Period(reference_period, freq="M")
    return [str(p) for p in pd.period_range(end=end, periods=months, freq="M")]


def filter_window(records: Iterable, reference_period: str, months: int) -> list:
    """Records inside the window, ordered by period then creation date."""
    keys = set(window_periods(reference_period, months))
    selected = [r for r in records if r.period_type in keys]
    return sorted(selected, key=lambda r: (r.period_type, r.date))
