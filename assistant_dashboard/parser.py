"""
Metrics text parser — extracts metric values from free text pasted by an
administrator.

Each field is located independently by its keyword stem (see
config.FIELD_PATTERNS), so fields may appear in any order and surrounded by
unrelated text. Only the first occurrence of a keyword counts. Fields that
cannot be found come back as zero; the preview step flags them for review.
"""

import logging
import math
import re
from datetime import date

import pandas as pd

from .config import (
    FIELD_PATTERNS,
    FIELD_REGISTRY,
    MAX_TEXT_LENGTH,
    NUMBER_PATTERN,
    SEPARATOR_PATTERN,
)
from .models import MetricRecord

logger = logging.getLogger(__name__)


class MetricsTextError(ValueError):
    """Raised by validate_metrics_text for input the parser should not see."""


_COMPILED_PATTERNS: dict[str, re.Pattern] = {
    name: re.compile(stem + SEPARATOR_PATTERN + NUMBER_PATTERN, re.IGNORECASE)
    for name, stem in FIELD_PATTERNS.items()
}


def validate_metrics_text(text) -> str:
    """Check raw input before parsing and return it stripped.

    Raises MetricsTextError for non-string, blank, or oversized input.
    """
    if not isinstance(text, str):
        raise MetricsTextError(f"Expected text, got {type(text).__name__}")
    stripped = text.strip()
    if not stripped:
        raise MetricsTextError("Text is empty")
    if len(stripped) > MAX_TEXT_LENGTH:
        raise MetricsTextError(
            f"Text is {len(stripped)} characters long, limit is {MAX_TEXT_LENGTH}"
        )
    return stripped


def _extract_number(text: str, field_name: str) -> str | None:
    """Return the number token following the first keyword match, or None.

    The token keeps its digits as written, with a decimal comma turned into
    a point.
    """
    pattern = _COMPILED_PATTERNS.get(field_name)
    if pattern is None:
        return None
    match = pattern.search(text)
    if match is None:
        return None
    return match.group(1).replace(",", ".")


def _ratio_value(token: str) -> float | None:
    try:
        number = float(token)
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    return number / 100


def _count_value(token: str) -> int | None:
    # Fractional part is dropped; digits are converted exactly
    try:
        return int(token.split(".")[0])
    except ValueError:
        # Digit runs past the interpreter's int conversion limit
        return None


def parse_metrics_text(
    text: str,
    period_type: str,
    client_id: str,
    *,
    record_date: date | None = None,
    schema: type = MetricRecord,
):
    """Parse free text into a candidate record of the given schema.

    Parameters
    ----------
    text : Raw text, validated by the caller.
    period_type : Reporting period key ("YYYY-MM") the values belong to.
    client_id : Client the record is for.
    record_date : Creation date. Defaults to today.
    schema : Record class to build (MetricRecord or LegacyMetricRecord).

    Returns
    -------
    A fully populated record. Ratio fields are percentages in the text and
    are divided by 100; count fields are taken as integers. Missing or
    unparseable fields are zero.
    """
    text = text or ""
    values: dict = {}
    missing = []

    for name in schema.RATIO_FIELDS:
        token = _extract_number(text, name)
        number = _ratio_value(token) if token is not None else None
        if number is None:
            missing.append(name)
            values[name] = 0.0
        else:
            values[name] = number

    for name in schema.COUNT_FIELDS:
        token = _extract_number(text, name)
        number = _count_value(token) if token is not None else None
        if number is None:
            missing.append(name)
            values[name] = 0
        else:
            values[name] = number

    if missing:
        logger.debug(
            "Fields not recognised for client %s period %s: %s",
            client_id, period_type, ", ".join(missing),
        )

    return schema(
        client_id=client_id,
        period_type=period_type,
        date=record_date or date.today(),
        **values,
    )


def find_unrecognised_fields(record) -> list[str]:
    """Return schema fields whose value is zero (not recognised in the text)."""
    return [name for name in record.metric_fields() if not getattr(record, name)]


def build_preview(record) -> pd.DataFrame:
    """Tabulate a candidate record for human review before it is saved.

    Returns
    -------
    DataFrame with columns:
        field, label, kind, value, display, recognised, in_range
    """
    unrecognised = set(find_unrecognised_fields(record))
    rows = []

    for name in record.metric_fields():
        registry = FIELD_REGISTRY.get(name, {})
        kind = registry.get("kind", "count")
        value = getattr(record, name)

        if kind == "ratio":
            display = f"{value * 100:.1f}%"
            in_range = 0.0 <= value <= 1.0
        else:
            unit = registry.get("unit", "")
            display = f"{value:,}".replace(",", " ") + (f" {unit}" if unit else "")
            in_range = value >= 0

        rows.append({
            "field": name,
            "label": registry.get("label", name),
            "kind": kind,
            "value": value,
            "display": display,
            "recognised": name not in unrecognised,
            "in_range": in_range,
        })

    return pd.DataFrame(rows)
