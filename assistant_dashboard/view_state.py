"""
Dashboard view state and its reducer.

The Streamlit app keeps a single ``ViewState`` in the session and replaces it
with ``reduce_view_state(state, action)`` on every user event. The state is
immutable and round-trips through plain dicts.
"""

import logging
from dataclasses import asdict, dataclass, replace
from datetime import date
from typing import Any

from .aggregator import view_mode_for_window
from .config import DEFAULT_WINDOW, REFERENCE_PERIOD, WINDOW_MONTHS
from .models import SCHEMAS, MetricRecord, Role, ViewMode

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ViewState:
    user_id: str | None = None
    role: Role | None = None
    selected_client_id: str | None = None
    window: str = DEFAULT_WINDOW
    reference_period: str = REFERENCE_PERIOD
    selected_period: str | None = None
    raw_text: str = ""
    candidate: Any = None
    notice: str | None = None

    @property
    def view_mode(self) -> ViewMode:
        return view_mode_for_window(self.window)

    @property
    def is_admin(self) -> bool:
        return self.role is Role.ADMIN

    def to_dict(self) -> dict:
        data = asdict(self)
        data["role"] = self.role.value if self.role else None
        data["candidate"] = self.candidate.to_dict() if self.candidate else None
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "ViewState":
        data = dict(data)
        role = data.get("role")
        data["role"] = Role(role) if role else None
        candidate = data.get("candidate")
        if candidate:
            candidate = dict(candidate)
            schema = SCHEMAS.get(candidate.pop("schema_version", MetricRecord.SCHEMA_VERSION), MetricRecord)
            candidate["date"] = date.fromisoformat(candidate["date"])
            data["candidate"] = schema(**candidate)
        return cls(**data)


# ---------------------------------------------------------------------------
# Actions
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class SignedIn:
    user_id: str
    role: Role


@dataclass(frozen=True)
class SignedOut:
    pass


@dataclass(frozen=True)
class ClientSelected:
    client_id: str | None


@dataclass(frozen=True)
class WindowSelected:
    window: str


@dataclass(frozen=True)
class PeriodSelected:
    period: str | None


@dataclass(frozen=True)
class TextEdited:
    text: str


@dataclass(frozen=True)
class CandidateParsed:
    candidate: Any


@dataclass(frozen=True)
class CandidateDiscarded:
    pass


@dataclass(frozen=True)
class CandidateSaved:
    period: str


def reduce_view_state(state: ViewState, action) -> ViewState:
    """Return the state that follows ``action``. ``state`` is not modified."""
    if isinstance(action, SignedIn):
        return ViewState(
            user_id=action.user_id,
            role=Role(action.role),
            reference_period=state.reference_period,
        )

    if isinstance(action, SignedOut):
        return ViewState(reference_period=state.reference_period)

    if isinstance(action, ClientSelected):
        if action.client_id == state.selected_client_id:
            return state
        return replace(
            state,
            selected_client_id=action.client_id,
            raw_text="",
            candidate=None,
            notice=None,
        )

    if isinstance(action, WindowSelected):
        if action.window not in WINDOW_MONTHS:
            raise ValueError(f"Unknown window '{action.window}'")
        return replace(state, window=action.window)

    if isinstance(action, PeriodSelected):
        return replace(state, selected_period=action.period)

    if isinstance(action, TextEdited):
        return replace(state, raw_text=action.text, notice=None)

    if isinstance(action, CandidateParsed):
        return replace(state, candidate=action.candidate, notice=None)

    if isinstance(action, CandidateDiscarded):
        return replace(state, candidate=None)

    if isinstance(action, CandidateSaved):
        return replace(
            state,
            raw_text="",
            candidate=None,
            notice=f"Метрики за {action.period} сохранены",
        )

    logger.warning("Ignoring unknown action %r", action)
    return state
