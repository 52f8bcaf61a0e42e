"""
Dashboard-ready output functions.

These are the entry points for the Streamlit front end. Each function
returns plain dicts or DataFrames suitable for rendering cards, charts and
tables.
"""

import logging

import pandas as pd

from .aggregator import aggregate_metrics, metrics_to_frame
from .identity import IdentityService
from .kpis import (
    build_kpi_cards,
    get_appointment_breakdown,
    get_dialog_distribution,
    non_business_share,
)
from .models import Client, ViewMode
from .storage import MetricStore
from .view_state import ViewState

logger = logging.getLogger(__name__)


def _period_filter(state: ViewState) -> str:
    # A picked month overrides the window in single-period view
    if state.selected_period and state.window == "month":
        return state.selected_period
    return state.window


def get_client_overview(store: MetricStore, client_id: str, state: ViewState) -> dict:
    """Single entry point the app calls to populate a client's dashboard.

    Returns
    -------
    Dict with structure:
    {
        "client": Client,
        "window": "half_year",
        "view_mode": ViewMode.MULTI_PERIOD,
        "has_data": True,
        "summary": AggregatedSummary | None,
        "cards": [...],
        "dialogs": {"Короткие диалоги": 120, ...},
        "appointments": {...},
        "non_business_share": 0.31,
    }
    """
    client = store.get_client(client_id)
    records = store.list_metrics(client_id, _period_filter(state))
    period = state.selected_period if state.window == "month" else None
    summary = aggregate_metrics(records, state.view_mode, period=period)

    if summary is None:
        logger.info("No metrics for client %s in window '%s'", client_id, state.window)

    return {
        "client": client,
        "window": state.window,
        "view_mode": state.view_mode,
        "has_data": summary is not None,
        "summary": summary,
        "cards": build_kpi_cards(summary),
        "dialogs": get_dialog_distribution(summary),
        "appointments": get_appointment_breakdown(summary),
        "non_business_share": non_business_share(summary),
    }


def get_metric_trend(store: MetricStore, client_id: str, state: ViewState) -> pd.DataFrame:
    """Per-period rows for trend charts over the selected window.

    A single-month window still shows the full year so the line has context.
    """
    window = state.window if state.window != "month" else "year"
    records = store.list_metrics(client_id, window)
    df = metrics_to_frame(records)
    if df.empty:
        return df
    # Several entries for one month: keep the latest, as single-period view does
    return df.drop_duplicates(subset=["period_type"], keep="last").reset_index(drop=True)


def get_admin_overview(store: MetricStore) -> pd.DataFrame:
    """Client table for the admin view with each client's latest period.

    Returns
    -------
    DataFrame with columns:
        client_id, company_name, client_name, manager_name, status,
        latest_period, conversion, autonomy
    """
    columns = [
        "client_id", "company_name", "client_name", "manager_name", "status",
        "latest_period", "conversion", "autonomy",
    ]
    rows = []
    for client in store.list_clients():
        records = store.list_all_metrics(client.id)
        latest = aggregate_metrics(records, ViewMode.SINGLE_PERIOD)
        rows.append({
            "client_id": client.id,
            "company_name": client.company_name,
            "client_name": client.client_name,
            "manager_name": client.manager_name,
            "status": client.status,
            "latest_period": latest.periods[0] if latest else None,
            "conversion": latest.get("conversion") if latest else None,
            "autonomy": latest.get("autonomy") if latest else None,
        })

    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame(rows, columns=columns)


def get_available_periods(store: MetricStore, client_id: str) -> list[str]:
    """Sorted period keys with data for a client, for the month dropdown."""
    return sorted({r.period_type for r in store.list_all_metrics(client_id)})


def save_client_profile(
    store: MetricStore,
    identity: IdentityService,
    token: str,
    client_id: str,
    patch: dict,
) -> Client:
    """Save the admin's profile form for one client.

    A changed ``email`` is also the client's login, so it goes to the
    identity service as well. Both sides are checked before either is
    written; a rejected patch or e-mail leaves client and login untouched.

    Raises StorageError or AuthError from the failing check.
    """
    client = store.get_client(client_id)
    patch = store.validate_client_patch(patch)

    new_email = patch.get("email")
    if new_email and new_email != client.email:
        user = identity.update_user_email(token, client.user_id, new_email)
        patch = {**patch, "email": user.email}

    logger.info("Saving profile for client %s", client_id)
    return store.update_client(client_id, patch)
