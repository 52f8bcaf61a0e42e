"""
Simulated data generator for the assistant analytics dashboard.

Generates plausible clients, managers and monthly metrics for demos.
All values are synthetic.
"""

import numpy as np
import pandas as pd

from .config import REFERENCE_PERIOD
from .identity import IdentityService
from .models import MetricRecord, Role
from .storage import MetricStore

# ---------------------------------------------------------------------------
# Typical monthly values (realistic ranges)
# ---------------------------------------------------------------------------
_RATIO_PARAMS = {
    "conversion": {"mean": 0.32, "std": 0.05},
    "autonomy": {"mean": 0.78, "std": 0.06},
    "satisfaction": {"mean": 0.88, "std": 0.04},
    "retention_share": {"mean": 0.45, "std": 0.07},
}

_COUNT_PARAMS = {
    "time_saved_hours": {"mean": 160, "std": 30},
    "confirmed_appointments": {"mean": 140, "std": 25},
    "business_hours_appointments": {"mean": 110, "std": 20},
    "non_business_hours_appointments": {"mean": 45, "std": 12},
    "short_dialogs": {"mean": 420, "std": 60},
    "medium_dialogs": {"mean": 260, "std": 40},
    "long_dialogs": {"mean": 90, "std": 20},
}

_MANAGERS = [
    ("Анна Смирнова", "anna@example.com", "+7 (999) 111-22-33"),
    ("Игорь Петров", "igor@example.com", "+7 (999) 444-55-66"),
]

_CLIENTS = [
    ("Красота и Здоровье", "Мария Иванова", "Анна Смирнова", "+7 (999) 123-45-67", "client1@example.com"),
    ("Техно Сервис", "Олег Сидоров", "Игорь Петров", "+7 (999) 765-43-21", "client2@example.com"),
    ("Стоматология Улыбка", "Елена Орлова", "Анна Смирнова", "+7 (999) 222-33-44", "client3@example.com"),
]

DEMO_ADMIN_EMAIL = "admin@example.com"
DEMO_PASSWORD = "demo-password"


def generate_monthly_metrics(
    client_id: str,
    end_period: str = REFERENCE_PERIOD,
    n_months: int = 12,
    seed: int = 42,
) -> list[MetricRecord]:
    """Generate ``n_months`` of records ending at ``end_period``."""
    rng = np.random.default_rng(seed)
    periods = pd.period_range(end=pd.Period(end_period, freq="M"), periods=n_months, freq="M")
    records = []

    for i, period in enumerate(periods):
        # Gentle upward trend as the assistant learns
        trend = 1 + 0.01 * i
        values = {}
        for name, params in _RATIO_PARAMS.items():
            value = rng.normal(params["mean"], params["std"]) * trend
            values[name] = round(float(np.clip(value, 0.0, 1.0)), 3)
        for name, params in _COUNT_PARAMS.items():
            value = rng.normal(params["mean"], params["std"]) * trend
            values[name] = int(max(value, 0))

        records.append(MetricRecord(
            client_id=client_id,
            period_type=str(period),
            date=period.end_time.date(),
            **values,
        ))

    return records


def build_demo_services(
    end_period: str = REFERENCE_PERIOD,
    n_months: int = 12,
) -> tuple[MetricStore, IdentityService]:
    """Return a store and identity service seeded with demo accounts.

    All demo users share DEMO_PASSWORD; the administrator signs in as
    DEMO_ADMIN_EMAIL.
    """
    store = MetricStore(reference_period=end_period)
    identity = IdentityService()

    identity.sign_up(DEMO_ADMIN_EMAIL, DEMO_PASSWORD, "Администратор", role=Role.ADMIN)

    for name, email, phone in _MANAGERS:
        store.create_manager(name, email=email, phone=phone)

    for seed, (company, contact, manager, phone, email) in enumerate(_CLIENTS):
        user = identity.sign_up(email, DEMO_PASSWORD, contact, role=Role.CLIENT)
        client = store.create_client(
            user_id=user.id,
            company_name=company,
            client_name=contact,
            manager_name=manager,
            phone=phone,
            email=email,
        )
        for record in generate_monthly_metrics(client.id, end_period, n_months, seed=seed):
            store.create_metric(record)

    return store, identity


def sample_report_text(record: MetricRecord) -> str:
    """Render a record as the kind of free text an administrator pastes."""
    return (
        f"Отчёт за {record.period_type}.\n"
        f"Конверсия: {record.conversion * 100:.1f}%\n"
        f"Автономность - {record.autonomy * 100:.1f}%\n"
        f"Удовлетворённость {record.satisfaction * 100:.0f}%\n"
        f"Повторные клиенты: {record.retention_share * 100:.0f}%\n"
        f"Сэкономлено часов: {record.time_saved_hours}\n"
        f"Подтверждённые записи: {record.confirmed_appointments}\n"
        f"В рабочее время: {record.business_hours_appointments}, "
        f"в нерабочее время: {record.non_business_hours_appointments}\n"
        f"Короткие диалоги {record.short_dialogs}, средние диалоги {record.medium_dialogs}, "
        f"длинные диалоги {record.long_dialogs}"
    )
