import pytest

from assistant_dashboard.kpis import (
    NO_DATA,
    build_kpi_cards,
    format_count,
    format_ratio,
    get_appointment_breakdown,
    get_dialog_distribution,
    non_business_share,
)
from assistant_dashboard.models import AggregatedSummary, ViewMode


def summary(**values):
    return AggregatedSummary(
        client_id="client-1",
        view_mode=ViewMode.SINGLE_PERIOD,
        periods=("2025-10",),
        record_count=1,
        values=values,
    )


def test_format_ratio():
    assert format_ratio(0.755) == "75.5%"
    assert format_ratio(0) == "0.0%"
    assert format_ratio(None) == NO_DATA


def test_format_count():
    assert format_count(50000, "₽") == "50 000 ₽"
    assert format_count(7) == "7"
    assert format_count(None) == NO_DATA


def test_cards_with_data():
    cards = build_kpi_cards(summary(conversion=0.4, autonomy=0.8, time_saved_hours=1200, retention_share=0.0))
    by_field = {c["field"]: c for c in cards}
    assert by_field["conversion"]["display"] == "40.0%"
    assert by_field["time_saved_hours"]["display"] == "1 200 ч"
    # a reported zero is shown as zero
    assert by_field["retention_share"]["display"] == "0.0%"
    assert all(c["has_data"] for c in cards)


def test_cards_without_data_use_placeholder():
    cards = build_kpi_cards(None)
    assert len(cards) == 4
    assert all(c["display"] == NO_DATA and not c["has_data"] for c in cards)


def test_dialog_distribution():
    dist = get_dialog_distribution(summary(short_dialogs=10, medium_dialogs=5, long_dialogs=1))
    assert list(dist.values()) == [10, 5, 1]
    assert get_dialog_distribution(None) == {}


def test_appointment_breakdown():
    breakdown = get_appointment_breakdown(summary(
        business_hours_appointments=30,
        non_business_hours_appointments=10,
        confirmed_appointments=35,
    ))
    assert list(breakdown.values()) == [30, 10, 35]


def test_non_business_share():
    assert non_business_share(summary(business_hours_appointments=30, non_business_hours_appointments=10)) == pytest.approx(0.25)
    assert non_business_share(summary()) is None
    assert non_business_share(None) is None
