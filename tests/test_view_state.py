import json
from datetime import date

import pytest

from assistant_dashboard.models import LegacyMetricRecord, MetricRecord, Role, ViewMode
from assistant_dashboard.view_state import (
    CandidateDiscarded,
    CandidateParsed,
    CandidateSaved,
    ClientSelected,
    PeriodSelected,
    SignedIn,
    SignedOut,
    TextEdited,
    ViewState,
    WindowSelected,
    reduce_view_state,
)


def candidate():
    return MetricRecord("client-1", "2025-10", date(2025, 10, 31), conversion=0.75)


def test_default_state():
    state = ViewState()
    assert state.user_id is None
    assert state.window == "month"
    assert state.view_mode is ViewMode.SINGLE_PERIOD
    assert not state.is_admin


def test_sign_in_and_out():
    state = reduce_view_state(ViewState(), SignedIn("user-1", Role.ADMIN))
    assert state.user_id == "user-1"
    assert state.is_admin

    state = reduce_view_state(state, WindowSelected("year"))
    state = reduce_view_state(state, SignedOut())
    assert state == ViewState()


def test_sign_in_keeps_reference_period():
    state = ViewState(reference_period="2024-12")
    state = reduce_view_state(state, SignedIn("user-1", "client"))
    assert state.reference_period == "2024-12"
    assert state.role is Role.CLIENT


def test_window_switch_changes_view_mode():
    state = reduce_view_state(ViewState(), WindowSelected("half_year"))
    assert state.view_mode is ViewMode.MULTI_PERIOD


def test_unknown_window_is_rejected():
    with pytest.raises(ValueError):
        reduce_view_state(ViewState(), WindowSelected("week"))


def test_selecting_another_client_clears_entry_form():
    state = ViewState(selected_client_id="a", raw_text="конверсия 75", candidate=candidate())
    state = reduce_view_state(state, ClientSelected("b"))
    assert state.selected_client_id == "b"
    assert state.raw_text == ""
    assert state.candidate is None


def test_reselecting_same_client_is_a_no_op():
    state = ViewState(selected_client_id="a", raw_text="конверсия 75")
    assert reduce_view_state(state, ClientSelected("a")) is state


def test_entry_flow():
    state = ViewState(selected_client_id="client-1")
    state = reduce_view_state(state, TextEdited("конверсия 75"))
    state = reduce_view_state(state, CandidateParsed(candidate()))
    assert state.candidate.conversion == 0.75

    discarded = reduce_view_state(state, CandidateDiscarded())
    assert discarded.candidate is None
    assert discarded.raw_text == "конверсия 75"

    saved = reduce_view_state(state, CandidateSaved("2025-10"))
    assert saved.candidate is None
    assert saved.raw_text == ""
    assert "2025-10" in saved.notice


def test_reducer_does_not_modify_previous_state():
    state = ViewState()
    after = reduce_view_state(state, PeriodSelected("2025-09"))
    assert state.selected_period is None
    assert after.selected_period == "2025-09"


def test_unknown_action_returns_same_state():
    state = ViewState()
    assert reduce_view_state(state, object()) is state


@pytest.mark.parametrize("record", [
    candidate(),
    LegacyMetricRecord("client-1", "2024-12", date(2024, 12, 31), financial_equiv=50000),
    None,
])
def test_round_trip_through_json(record):
    state = ViewState(
        user_id="user-1",
        role=Role.ADMIN,
        selected_client_id="client-1",
        window="year",
        raw_text="конверсия 75",
        candidate=record,
    )
    restored = ViewState.from_dict(json.loads(json.dumps(state.to_dict())))
    assert restored == state
