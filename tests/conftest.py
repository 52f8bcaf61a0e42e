"""
Shared fixtures for the assistant dashboard tests.
"""

from datetime import date

import pytest

from assistant_dashboard.identity import IdentityService
from assistant_dashboard.models import MetricRecord, Role
from assistant_dashboard.storage import MetricStore


def make_record(period: str, client_id: str = "client-1", **values) -> MetricRecord:
    year, month = (int(p) for p in period.split("-"))
    return MetricRecord(
        client_id=client_id,
        period_type=period,
        date=date(year, month, 28),
        **values,
    )


@pytest.fixture
def record_factory():
    return make_record


@pytest.fixture
def three_months():
    """Three consecutive months with known conversion and appointment values."""
    return [
        make_record("2025-08", conversion=0.5, confirmed_appointments=10),
        make_record("2025-09", conversion=0.6, confirmed_appointments=20),
        make_record("2025-10", conversion=0.7, confirmed_appointments=30),
    ]


@pytest.fixture
def store():
    return MetricStore(reference_period="2025-10")


@pytest.fixture
def client(store):
    return store.create_client(
        user_id="user-1",
        company_name="Красота и Здоровье",
        client_name="Мария Иванова",
        manager_name="Анна Смирнова",
        phone="+7 (999) 123-45-67",
    )


@pytest.fixture
def identity():
    return IdentityService()


@pytest.fixture
def admin_session(identity):
    identity.sign_up("admin@example.com", "secret", role=Role.ADMIN)
    return identity.sign_in("admin@example.com", "secret")
