import pytest

from assistant_dashboard.dashboard import (
    get_admin_overview,
    get_available_periods,
    get_client_overview,
    get_metric_trend,
    save_client_profile,
)
from assistant_dashboard.identity import AuthError, PermissionDeniedError, UserExistsError
from assistant_dashboard.models import ViewMode
from assistant_dashboard.simulator import build_demo_services
from assistant_dashboard.storage import StorageError
from assistant_dashboard.view_state import ViewState


@pytest.fixture
def seeded(store, client, record_factory):
    for period, conversion, confirmed in (
        ("2025-05", 0.2, 5),
        ("2025-08", 0.5, 10),
        ("2025-09", 0.6, 20),
        ("2025-10", 0.7, 30),
    ):
        store.create_metric(record_factory(
            period, client_id=client.id, conversion=conversion, confirmed_appointments=confirmed,
        ))
    return store


def test_month_view_shows_latest_period(seeded, client):
    overview = get_client_overview(seeded, client.id, ViewState())
    assert overview["view_mode"] is ViewMode.SINGLE_PERIOD
    assert overview["summary"]["conversion"] == pytest.approx(0.7)
    assert overview["summary"].periods == ("2025-10",)


def test_month_view_with_selected_period(seeded, client):
    overview = get_client_overview(seeded, client.id, ViewState(selected_period="2025-08"))
    assert overview["summary"]["conversion"] == pytest.approx(0.5)


def test_half_year_view_aggregates(seeded, client):
    overview = get_client_overview(seeded, client.id, ViewState(window="half_year"))
    summary = overview["summary"]
    assert summary.record_count == 4
    assert summary["conversion"] == pytest.approx((0.2 + 0.5 + 0.6 + 0.7) / 4)
    assert summary["confirmed_appointments"] == 65


def test_month_without_data(seeded, client):
    overview = get_client_overview(seeded, client.id, ViewState(selected_period="2025-07"))
    assert overview["has_data"] is False
    assert overview["summary"] is None
    assert overview["dialogs"] == {}


def test_trend_covers_year_for_month_view(seeded, client):
    trend = get_metric_trend(seeded, client.id, ViewState())
    assert trend["period_type"].tolist() == ["2025-05", "2025-08", "2025-09", "2025-10"]


def test_trend_keeps_latest_entry_per_month(seeded, client, record_factory):
    seeded.create_metric(record_factory("2025-10", client_id=client.id, conversion=0.9))
    trend = get_metric_trend(seeded, client.id, ViewState(window="year"))
    assert trend["period_type"].tolist().count("2025-10") == 1
    assert trend.iloc[-1]["conversion"] == pytest.approx(0.9)


def test_admin_overview(seeded, client):
    seeded.create_client(user_id="user-2", company_name="Без метрик")
    df = get_admin_overview(seeded)
    rows = df.set_index("client_id")
    assert rows.loc[client.id, "latest_period"] == "2025-10"
    assert rows.loc[client.id, "conversion"] == pytest.approx(0.7)
    assert df["latest_period"].isna().sum() == 1


def test_available_periods(seeded, client):
    assert get_available_periods(seeded, client.id) == ["2025-05", "2025-08", "2025-09", "2025-10"]


def test_demo_services_are_consistent():
    store, identity = build_demo_services(end_period="2025-10", n_months=12)
    clients = store.list_clients()
    assert len(clients) == 3
    for client in clients:
        assert len(store.list_metrics(client.id, "year")) == 12
        overview = get_client_overview(store, client.id, ViewState(window="year"))
        assert overview["has_data"]
        assert 0.0 <= overview["summary"]["conversion"] <= 1.0


# ---------------------------------------------------------------------------
# Profile save
# ---------------------------------------------------------------------------

@pytest.fixture
def login_client(store, identity):
    user = identity.sign_up("salon@example.com", "pw")
    return store.create_client(user_id=user.id, company_name="Салон", email="salon@example.com")


def test_profile_save_updates_client_and_login(store, identity, admin_session, login_client):
    updated = save_client_profile(store, identity, admin_session.token, login_client.id, {
        "phone": "+7 (900) 000-00-00",
        "email": "New@Example.com",
    })
    assert updated.email == "new@example.com"
    assert updated.phone == "+7 (900) 000-00-00"
    assert identity.sign_in("new@example.com", "pw").user_id == login_client.user_id


def test_rejected_patch_leaves_login_unchanged(store, identity, admin_session, login_client):
    with pytest.raises(StorageError):
        save_client_profile(store, identity, admin_session.token, login_client.id, {
            "status": "deleted",
            "email": "new@example.com",
        })
    assert identity.sign_in("salon@example.com", "pw").user_id == login_client.user_id
    with pytest.raises(AuthError):
        identity.sign_in("new@example.com", "pw")


def test_rejected_email_leaves_client_unchanged(store, identity, admin_session, login_client):
    identity.sign_up("taken@example.com", "pw")
    with pytest.raises(UserExistsError):
        save_client_profile(store, identity, admin_session.token, login_client.id, {
            "company_name": "Другое имя",
            "email": "taken@example.com",
        })
    stored = store.get_client(login_client.id)
    assert stored.company_name == "Салон"
    assert stored.email == "salon@example.com"


def test_profile_save_needs_admin(store, identity, login_client):
    session = identity.sign_in("salon@example.com", "pw")
    with pytest.raises(PermissionDeniedError):
        save_client_profile(store, identity, session.token, login_client.id, {"email": "x@example.com"})
    assert store.get_client(login_client.id).email == "salon@example.com"


def test_unchanged_email_skips_identity(store, identity, login_client):
    # no admin session needed when the login is not touched
    updated = save_client_profile(store, identity, "no-token", login_client.id, {
        "email": "salon@example.com",
        "client_name": "Ольга",
    })
    assert updated.client_name == "Ольга"
