"""
Shared utilities for data ingestion: value coercion, date and period
normalisation.
"""

import logging
import math
from datetime import date
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)


def normalise_date(val: Any) -> date | None:
    """Convert an Excel serial number, string or datetime to a date.

    Excel serial numbers use the 1899-12-30 epoch. Returns None for
    unparseable values.
    """
    if val is None or (isinstance(val, str) and not val.strip()):
        return None
    if isinstance(val, pd.Timestamp):
        return val.date()
    if isinstance(val, (int, float)):
        try:
            return (pd.Timestamp("1899-12-30") + pd.Timedelta(days=int(val))).date()
        except (ValueError, OverflowError):
            logger.warning("Could not convert serial number %s to date", val)
            return None
    try:
        return pd.Timestamp(val).date()
    except (ValueError, TypeError):
        logger.warning("Could not parse date value: %s", val)
        return None


def normalise_period(val: Any) -> str | None:
    """Return a "YYYY-MM" period key for a date-like or period-like value."""
    if val is None:
        return None
    if isinstance(val, str):
        val = val.strip()
        if not val:
            return None
    try:
        return str(pd.Period(val, freq="M"))
    except (ValueError, TypeError):
        logger.warning("Could not parse period value: %s", val)
        return None


def safe_float(val: Any) -> float | None:
    """Coerce a value to float, returning None for non-numeric values."""
    if val is None:
        return None
    if isinstance(val, str):
        val = val.strip().replace(",", ".")
        if val.startswith("=") or not val:
            return None
        # Percentage strings like "78%" become fractions
        if val.endswith("%"):
            try:
                return float(val[:-1]) / 100
            except ValueError:
                return None
        try:
            return float(val)
        except ValueError:
            return None
    try:
        return float(val)
    except (ValueError, TypeError):
        return None


def safe_int(val: Any) -> int | None:
    """Coerce a value to int, returning None for non-numeric values."""
    number = safe_float(val)
    # NaN and overflowed values such as "1e400" have no integer form
    if number is None or not math.isfinite(number):
        return None
    return int(number)
