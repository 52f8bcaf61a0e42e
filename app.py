"""
AI Assistant Analytics — Interactive Dashboard

Run with:  streamlit run app.py
"""

import sys
from pathlib import Path

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go
import streamlit as st

sys.path.insert(0, str(Path(__file__).resolve().parent))

from assistant_dashboard.config import (
    CLIENT_STATUSES,
    FIELD_REGISTRY,
    MAX_TEXT_LENGTH,
    SERVICE_NAME,
    WINDOW_LABELS,
    WINDOW_MONTHS,
)
from assistant_dashboard.dashboard import (
    get_admin_overview,
    get_available_periods,
    get_client_overview,
    get_metric_trend,
    save_client_profile,
)
from assistant_dashboard.identity import AuthError
from assistant_dashboard.loaders import load_report_text
from assistant_dashboard.models import Role
from assistant_dashboard.parser import (
    MetricsTextError,
    build_preview,
    parse_metrics_text,
    validate_metrics_text,
)
from assistant_dashboard.simulator import build_demo_services
from assistant_dashboard.storage import StorageError
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

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title=SERVICE_NAME,
    page_icon="🤖",
    layout="wide",
    initial_sidebar_state="expanded",
)

CARD_COLORS = {
    "purple": "#8a2be2",
    "cyan": "#00bcd4",
    "salmon": "#fa8072",
    "green": "#2ecc71",
}

CHART_COLORS = ["#8a2be2", "#00bcd4", "#fa8072"]


# ---------------------------------------------------------------------------
# Services and view state (one set per browser session)
# ---------------------------------------------------------------------------
if "store" not in st.session_state:
    store, identity = build_demo_services()
    st.session_state["store"] = store
    st.session_state["identity"] = identity
    st.session_state["view_state"] = ViewState(reference_period=store.reference_period).to_dict()
    st.session_state["token"] = None

store = st.session_state["store"]
identity = st.session_state["identity"]
state = ViewState.from_dict(st.session_state["view_state"])


def dispatch(action) -> None:
    global state
    state = reduce_view_state(state, action)
    st.session_state["view_state"] = state.to_dict()


# ---------------------------------------------------------------------------
# Helper: KPI card
# ---------------------------------------------------------------------------
def kpi_card(title: str, display: str, gradient: str):
    color = CARD_COLORS.get(gradient, CARD_COLORS["purple"])
    st.markdown(
        f"""
        <div style="background: linear-gradient(135deg, {color}, {color}aa);
                    border-radius: 12px; padding: 20px; margin-bottom: 8px; color: white;">
            <div style="font-size: 13px; opacity: 0.9;">{title}</div>
            <div style="font-size: 30px; font-weight: 300; margin-top: 8px;">{display}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def render_client_dashboard(client_id: str):
    overview = get_client_overview(store, client_id, state)

    cols = st.columns(4)
    for i, card in enumerate(overview["cards"]):
        with cols[i % 4]:
            kpi_card(card["title"], card["display"], card["gradient"])

    if not overview["has_data"]:
        st.info("Нет данных за выбранный период.")
        return

    trend = get_metric_trend(store, client_id, state)
    if not trend.empty:
        fig = go.Figure()
        for name, color in zip(("conversion", "autonomy", "retention_share"), CHART_COLORS):
            fig.add_trace(go.Scatter(
                x=trend["period_type"],
                y=trend[name] * 100,
                name=FIELD_REGISTRY[name]["label"],
                mode="lines+markers",
                line=dict(color=color, width=2),
            ))
        fig.update_layout(
            title="Динамика показателей",
            yaxis_title="%",
            height=380,
            plot_bgcolor="rgba(0,0,0,0)",
        )
        st.plotly_chart(fig, use_container_width=True)

    col1, col2 = st.columns(2)

    with col1:
        dialogs = overview["dialogs"]
        if sum(dialogs.values()) > 0:
            fig = px.pie(
                names=list(dialogs.keys()),
                values=list(dialogs.values()),
                hole=0.55,
                color_discrete_sequence=CHART_COLORS,
                title="Длина диалогов",
            )
            st.plotly_chart(fig, use_container_width=True)

    with col2:
        appointments = overview["appointments"]
        fig = go.Figure(go.Bar(
            x=list(appointments.keys()),
            y=list(appointments.values()),
            marker_color=CHART_COLORS,
        ))
        fig.update_layout(title="Записи", height=380, plot_bgcolor="rgba(0,0,0,0)")
        st.plotly_chart(fig, use_container_width=True)

    share = overview["non_business_share"]
    if share is not None:
        st.caption(f"Доля записей в нерабочее время: {share * 100:.1f}%")


def window_selector():
    windows = list(WINDOW_MONTHS)
    choice = st.sidebar.selectbox(
        "Период",
        windows,
        index=windows.index(state.window),
        format_func=lambda w: WINDOW_LABELS.get(w, w),
    )
    if choice != state.window:
        dispatch(WindowSelected(choice))


# ===========================================================================
# PAGE: Sign in
# ===========================================================================
if state.user_id is None:
    st.title(SERVICE_NAME)
    with st.form("sign_in"):
        email = st.text_input("Email")
        password = st.text_input("Пароль", type="password")
        submitted = st.form_submit_button("Войти")

    if submitted:
        try:
            session = identity.sign_in(email, password)
        except AuthError as e:
            st.error(str(e))
        else:
            role = identity.get_role(session.user_id)
            if role is None:
                st.error("Роль пользователя не назначена. Обратитесь к администратору.")
            else:
                st.session_state["token"] = session.token
                dispatch(SignedIn(session.user_id, role))
                st.rerun()
    st.stop()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title(SERVICE_NAME)
st.sidebar.caption("Администратор" if state.is_admin else "Личный кабинет")
window_selector()
if st.sidebar.button("Выйти"):
    identity.sign_out(st.session_state["token"])
    st.session_state["token"] = None
    dispatch(SignedOut())
    st.rerun()


# ===========================================================================
# PAGE: Client dashboard
# ===========================================================================
if state.role is Role.CLIENT:
    client = store.get_client_by_user_id(state.user_id)
    if client is None:
        st.warning("Клиент не найден. Обратитесь к администратору.")
        st.stop()

    st.title(client.company_name)
    st.caption(WINDOW_LABELS.get(state.window, state.window))
    render_client_dashboard(client.id)
    st.stop()


# ===========================================================================
# PAGE: Admin dashboard
# ===========================================================================
st.title("Клиенты")

overview_df = get_admin_overview(store)
if overview_df.empty:
    st.info("Клиентов пока нет.")
    st.stop()

display_df = overview_df.drop(columns=["client_id"]).copy()
for col in ("conversion", "autonomy"):
    display_df[col] = display_df[col].apply(lambda x: f"{x * 100:.1f}%" if pd.notna(x) else "—")
st.dataframe(display_df, use_container_width=True, hide_index=True)

client_ids = overview_df["client_id"].tolist()
names = dict(zip(overview_df["client_id"], overview_df["company_name"]))
current = state.selected_client_id if state.selected_client_id in client_ids else client_ids[0]
selected = st.selectbox(
    "Клиент",
    client_ids,
    index=client_ids.index(current),
    format_func=lambda cid: names[cid],
)
if selected != state.selected_client_id:
    dispatch(ClientSelected(selected))

client = store.get_client(state.selected_client_id)

tab_dash, tab_entry, tab_profile = st.tabs(["Дашборд", "Ввод метрик", "Профиль"])

with tab_dash:
    if state.window == "month":
        periods = get_available_periods(store, client.id)
        if periods:
            default = state.selected_period if state.selected_period in periods else periods[-1]
            period = st.selectbox("Месяц", periods, index=periods.index(default))
            if period != state.selected_period:
                dispatch(PeriodSelected(period))
    render_client_dashboard(client.id)

with tab_entry:
    period_key = st.text_input("Период отчёта (YYYY-MM)", value=store.reference_period)

    uploaded = st.file_uploader("Отчёт в формате .docx", type=["docx"])
    if uploaded is not None and not state.raw_text:
        dispatch(TextEdited(load_report_text(uploaded)))

    text = st.text_area(
        "Текст с метриками",
        value=state.raw_text,
        height=200,
        max_chars=MAX_TEXT_LENGTH,
    )
    if text != state.raw_text:
        dispatch(TextEdited(text))

    if st.button("Распознать"):
        try:
            cleaned = validate_metrics_text(state.raw_text)
        except MetricsTextError as e:
            st.error(str(e))
        else:
            dispatch(CandidateParsed(parse_metrics_text(cleaned, period_key, client.id)))

    if state.candidate is not None:
        preview = build_preview(state.candidate)
        st.subheader(f"Предпросмотр — {state.candidate.period_type}")
        st.dataframe(
            preview[["label", "display", "recognised", "in_range"]],
            use_container_width=True,
            hide_index=True,
        )
        unrecognised = preview.loc[~preview["recognised"], "label"].tolist()
        if unrecognised:
            st.warning("Не распознано: " + ", ".join(unrecognised))

        col_save, col_discard = st.columns(2)
        with col_save:
            if st.button("Сохранить", type="primary"):
                try:
                    store.create_metric(state.candidate)
                except StorageError as e:
                    st.error(str(e))
                else:
                    dispatch(CandidateSaved(state.candidate.period_type))
                    st.rerun()
        with col_discard:
            if st.button("Отменить"):
                dispatch(CandidateDiscarded())
                st.rerun()

    if state.notice:
        st.success(state.notice)

with tab_profile:
    with st.form("client_profile"):
        company_name = st.text_input("Компания", value=client.company_name)
        client_name = st.text_input("Контакт", value=client.client_name or "")
        manager_names = [m.name for m in store.list_managers()]
        manager_name = st.selectbox(
            "Менеджер",
            manager_names,
            index=manager_names.index(client.manager_name) if client.manager_name in manager_names else 0,
        )
        phone = st.text_input("Телефон", value=client.phone or "")
        status = st.selectbox("Статус", CLIENT_STATUSES, index=CLIENT_STATUSES.index(client.status))
        email = st.text_input("Email", value=client.email or "")
        saved = st.form_submit_button("Сохранить")

    if saved:
        try:
            save_client_profile(store, identity, st.session_state["token"], client.id, {
                "company_name": company_name,
                "client_name": client_name or None,
                "manager_name": manager_name,
                "phone": phone or None,
                "status": status,
                "email": email or None,
            })
        except (AuthError, StorageError) as e:
            st.error(str(e))
        else:
            st.success("Данные клиента обновлены")
