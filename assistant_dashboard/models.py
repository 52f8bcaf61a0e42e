"""
Record types shared by the parser, aggregator, storage and dashboard layers.

Two metric schemas coexist. ``MetricRecord`` is the current one;
``LegacyMetricRecord`` is the earlier shape that reported savings as a
currency amount. They are kept as separate classes and converted with
``upgrade_legacy_record``.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, ClassVar, Mapping

logger = logging.getLogger(__name__)


class ViewMode(str, Enum):
    SINGLE_PERIOD = "single-period"
    MULTI_PERIOD = "multi-period"


class Role(str, Enum):
    ADMIN = "admin"
    CLIENT = "client"


# ---------------------------------------------------------------------------
# Metric schemas
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MetricRecord:
    """One reporting period's measurements for one client (schema v2)."""

    SCHEMA_VERSION: ClassVar[int] = 2
    RATIO_FIELDS: ClassVar[tuple[str, ...]] = (
        "conversion",
        "autonomy",
        "satisfaction",
        "retention_share",
    )
    COUNT_FIELDS: ClassVar[tuple[str, ...]] = (
        "time_saved_hours",
        "confirmed_appointments",
        "business_hours_appointments",
        "non_business_hours_appointments",
        "short_dialogs",
        "medium_dialogs",
        "long_dialogs",
    )

    client_id: str
    period_type: str
    date: date
    conversion: float = 0.0
    autonomy: float = 0.0
    satisfaction: float = 0.0
    retention_share: float = 0.0
    time_saved_hours: int = 0
    confirmed_appointments: int = 0
    business_hours_appointments: int = 0
    non_business_hours_appointments: int = 0
    short_dialogs: int = 0
    medium_dialogs: int = 0
    long_dialogs: int = 0

    @classmethod
    def metric_fields(cls) -> tuple[str, ...]:
        return cls.RATIO_FIELDS + cls.COUNT_FIELDS

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["schema_version"] = self.SCHEMA_VERSION
        return data


@dataclass(frozen=True)
class LegacyMetricRecord:
    """Schema v1: savings reported as a currency amount."""

    SCHEMA_VERSION: ClassVar[int] = 1
    RATIO_FIELDS: ClassVar[tuple[str, ...]] = (
        "conversion",
        "autonomy",
        "retention_share",
    )
    COUNT_FIELDS: ClassVar[tuple[str, ...]] = ("financial_equiv",)

    client_id: str
    period_type: str
    date: date
    conversion: float = 0.0
    autonomy: float = 0.0
    retention_share: float = 0.0
    financial_equiv: int = 0

    @classmethod
    def metric_fields(cls) -> tuple[str, ...]:
        return cls.RATIO_FIELDS + cls.COUNT_FIELDS

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["date"] = self.date.isoformat()
        data["schema_version"] = self.SCHEMA_VERSION
        return data


SCHEMAS: dict[int, type] = {
    LegacyMetricRecord.SCHEMA_VERSION: LegacyMetricRecord,
    MetricRecord.SCHEMA_VERSION: MetricRecord,
}


def upgrade_legacy_record(record: LegacyMetricRecord) -> MetricRecord:
    """Convert a v1 record into the current schema.

    Shared ratio fields are copied. ``financial_equiv`` has no counterpart in
    v2 and is dropped; fields introduced in v2 start at zero.
    """
    if record.financial_equiv:
        logger.info(
            "Dropping financial_equiv=%d for client %s period %s during upgrade",
            record.financial_equiv, record.client_id, record.period_type,
        )
    return MetricRecord(
        client_id=record.client_id,
        period_type=record.period_type,
        date=record.date,
        conversion=record.conversion,
        autonomy=record.autonomy,
        retention_share=record.retention_share,
    )


def validate_record(record) -> list[str]:
    """Return a list of invariant violations; empty when the record is valid."""
    problems = []
    for name in record.RATIO_FIELDS:
        value = getattr(record, name)
        if not 0.0 <= value <= 1.0:
            problems.append(f"{name} must be between 0 and 1, got {value}")
    for name in record.COUNT_FIELDS:
        value = getattr(record, name)
        if value < 0:
            problems.append(f"{name} must be non-negative, got {value}")
    if not _is_period_key(record.period_type):
        problems.append(f"period_type must look like YYYY-MM, got {record.period_type!r}")
    return problems


def _is_period_key(value: str) -> bool:
    try:
        datetime.strptime(value, "%Y-%m")
    except (TypeError, ValueError):
        return False
    return len(value) == 7


# ---------------------------------------------------------------------------
# Aggregated output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class AggregatedSummary:
    """Summary of one or more metric records.

    ``values`` holds one entry per schema field: the mean for ratio fields,
    the sum for count fields. An absent summary (``None``) means "no data";
    a summary whose values are all zero is a reported zero.
    """

    client_id: str | None
    view_mode: ViewMode
    periods: tuple[str, ...]
    record_count: int
    values: Mapping[str, float] = field(default_factory=dict)

    def __getitem__(self, name: str) -> float:
        return self.values[name]

    def get(self, name: str, default: float = 0) -> float:
        return self.values.get(name, default)


# ---------------------------------------------------------------------------
# Accounts
# ---------------------------------------------------------------------------

@dataclass
class Client:
    id: str
    user_id: str
    company_name: str
    client_name: str | None = None
    manager_name: str | None = None
    phone: str | None = None
    email: str | None = None
    status: str = "active"
    ai_status: str | None = None
    created_at: datetime = field(default_factory=datetime.now)
    updated_at: datetime = field(default_factory=datetime.now)


@dataclass
class Manager:
    id: str
    name: str
    email: str | None = None
    phone: str | None = None
    created_at: datetime = field(default_factory=datetime.now)


@dataclass
class User:
    id: str
    email: str
    full_name: str | None = None
    password_hash: str = field(default="", repr=False)


@dataclass(frozen=True)
class Session:
    token: str
    user_id: str
    created_at: datetime
