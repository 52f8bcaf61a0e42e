"""
KPI presentation functions — pure functions with no side effects.

Turns an aggregated summary into the values the dashboard cards and charts
display: formatted KPI cards, the dialog-length distribution and the
business-hours appointment split.
"""

import logging

from .config import FIELD_REGISTRY
from .models import AggregatedSummary

logger = logging.getLogger(__name__)

NO_DATA = "—"

# Fields shown as the four top-level KPI cards, with their card colour
KPI_CARDS = [
    ("conversion", "purple"),
    ("autonomy", "cyan"),
    ("time_saved_hours", "salmon"),
    ("retention_share", "green"),
]


def format_ratio(value: float | None) -> str:
    """0.755 -> '75.5%'."""
    if value is None:
        return NO_DATA
    return f"{value * 100:.1f}%"


def format_count(value: int | None, unit: str = "") -> str:
    """50000, '₽' -> '50 000 ₽'. Thousands are separated by a space."""
    if value is None:
        return NO_DATA
    text = f"{int(value):,}".replace(",", " ")
    return f"{text} {unit}" if unit else text


def format_field(name: str, value) -> str:
    registry = FIELD_REGISTRY.get(name, {})
    if registry.get("kind") == "ratio":
        return format_ratio(value)
    return format_count(value, registry.get("unit", ""))


def build_kpi_cards(
    summary: AggregatedSummary | None,
    cards: list[tuple[str, str]] | None = None,
) -> list[dict]:
    """Return one dict per KPI card.

    A missing summary yields cards with the NO_DATA placeholder and
    ``has_data`` False, so "no data" never renders as a reported zero.

    Returns
    -------
    List of dicts: {"field", "title", "value", "display", "gradient", "has_data"}
    """
    cards = cards or KPI_CARDS
    result = []
    for name, gradient in cards:
        registry = FIELD_REGISTRY.get(name, {})
        value = summary.get(name) if summary is not None else None
        result.append({
            "field": name,
            "title": registry.get("label", name),
            "value": value,
            "display": format_field(name, value) if value is not None else NO_DATA,
            "gradient": gradient,
            "has_data": summary is not None,
        })
    return result


def get_dialog_distribution(summary: AggregatedSummary | None) -> dict[str, int]:
    """Dialog counts by length for the doughnut chart; empty without data."""
    if summary is None:
        return {}
    return {
        FIELD_REGISTRY[name]["label"]: int(summary.get(name, 0))
        for name in ("short_dialogs", "medium_dialogs", "long_dialogs")
    }


def get_appointment_breakdown(summary: AggregatedSummary | None) -> dict[str, int]:
    """Appointments made inside vs outside business hours, plus confirmed."""
    if summary is None:
        return {}
    return {
        FIELD_REGISTRY[name]["label"]: int(summary.get(name, 0))
        for name in (
            "business_hours_appointments",
            "non_business_hours_appointments",
            "confirmed_appointments",
        )
    }


def non_business_share(summary: AggregatedSummary | None) -> float | None:
    """Share of appointments booked outside business hours, or None."""
    if summary is None:
        return None
    inside = summary.get("business_hours_appointments", 0)
    outside = summary.get("non_business_hours_appointments", 0)
    total = inside + outside
    if total == 0:
        return None
    return outside / total
