"""
In-process storage for clients, managers and metric records.

Stands in for the hosted tables the dashboard reads and writes. Metric
listing returns records in ascending chronological order, already filtered
to the requested month or window, which is what the aggregator expects.
"""

import logging
import uuid
from dataclasses import fields, replace
from datetime import datetime

from .aggregator import filter_window
from .config import CLIENT_STATUSES, REFERENCE_PERIOD, WINDOW_MONTHS
from .models import Client, Manager, validate_record

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Base class for storage failures."""


class RecordNotFoundError(StorageError):
    pass


class MetricValidationError(StorageError):
    def __init__(self, problems: list[str]):
        self.problems = problems
        super().__init__("; ".join(problems))


_CLIENT_READONLY = {"id", "user_id", "created_at", "updated_at"}


class MetricStore:
    """Clients, managers and metric records held in memory."""

    def __init__(self, reference_period: str = REFERENCE_PERIOD):
        self.reference_period = reference_period
        self._clients: dict[str, Client] = {}
        self._managers: dict[str, Manager] = {}
        self._metrics: list = []

    # ------------------------------------------------------------------
    # Metrics
    # ------------------------------------------------------------------

    def create_metric(self, record):
        """Persist a confirmed metric record and return it."""
        if record.client_id not in self._clients:
            raise RecordNotFoundError(f"Unknown client '{record.client_id}'")

        problems = validate_record(record)
        if problems:
            logger.warning(
                "Rejected metric for client %s period %s: %s",
                record.client_id, record.period_type, problems,
            )
            raise MetricValidationError(problems)

        self._metrics.append(record)
        logger.info(
            "Stored metric for client %s period %s", record.client_id, record.period_type
        )
        return record

    def list_metrics(self, client_id: str, period_filter: str) -> list:
        """Return a client's records for one month or a named window.

        Parameters
        ----------
        client_id : Client whose records to return.
        period_filter : A "YYYY-MM" key, or a window name from
            config.WINDOW_MONTHS counted back from the reference period.

        Returns
        -------
        Records in ascending order of period, then creation date.
        """
        own = [r for r in self._metrics if r.client_id == client_id]

        if period_filter in WINDOW_MONTHS:
            return filter_window(own, self.reference_period, WINDOW_MONTHS[period_filter])

        return sorted(
            (r for r in own if r.period_type == period_filter),
            key=lambda r: r.date,
        )

    def list_all_metrics(self, client_id: str) -> list:
        return sorted(
            (r for r in self._metrics if r.client_id == client_id),
            key=lambda r: (r.period_type, r.date),
        )

    # ------------------------------------------------------------------
    # Clients
    # ------------------------------------------------------------------

    def create_client(
        self,
        user_id: str,
        company_name: str,
        client_name: str | None = None,
        manager_name: str | None = None,
        phone: str | None = None,
        email: str | None = None,
    ) -> Client:
        company_name = (company_name or "").strip()
        if not company_name:
            raise StorageError("company_name is required")

        client = Client(
            id=str(uuid.uuid4()),
            user_id=user_id,
            company_name=company_name,
            client_name=client_name,
            manager_name=manager_name,
            phone=phone,
            email=email,
        )
        self._clients[client.id] = client
        logger.info("Created client %s (%s)", client.id, company_name)
        return client

    def list_clients(self) -> list[Client]:
        """All clients, newest first."""
        return sorted(self._clients.values(), key=lambda c: c.created_at, reverse=True)

    def get_client(self, client_id: str) -> Client:
        try:
            return self._clients[client_id]
        except KeyError:
            raise RecordNotFoundError(f"Unknown client '{client_id}'") from None

    def get_client_by_user_id(self, user_id: str) -> Client | None:
        for client in self._clients.values():
            if client.user_id == user_id:
                return client
        return None

    def validate_client_patch(self, patch: dict) -> dict:
        """Check a partial client update and return it normalised.

        Raises StorageError for unknown or read-only fields, an unknown
        status, or a blank company name. Nothing is stored.
        """
        allowed = {f.name for f in fields(Client)} - _CLIENT_READONLY
        unknown = set(patch) - allowed
        if unknown:
            raise StorageError(f"Cannot update fields: {', '.join(sorted(unknown))}")
        if "status" in patch and patch["status"] not in CLIENT_STATUSES:
            raise StorageError(f"Unknown client status '{patch['status']}'")
        if "company_name" in patch:
            company_name = (patch["company_name"] or "").strip()
            if not company_name:
                raise StorageError("company_name is required")
            patch = {**patch, "company_name": company_name}
        return patch

    def update_client(self, client_id: str, patch: dict) -> Client:
        """Apply a partial update and return the updated client."""
        client = self.get_client(client_id)
        patch = self.validate_client_patch(patch)

        updated = replace(client, **patch, updated_at=datetime.now())
        self._clients[client_id] = updated
        logger.info("Updated client %s: %s", client_id, ", ".join(sorted(patch)))
        return updated

    # ------------------------------------------------------------------
    # Managers
    # ------------------------------------------------------------------

    def create_manager(
        self,
        name: str,
        email: str | None = None,
        phone: str | None = None,
    ) -> Manager:
        manager = Manager(id=str(uuid.uuid4()), name=name, email=email, phone=phone)
        self._managers[manager.id] = manager
        return manager

    def list_managers(self) -> list[Manager]:
        """All managers, by name."""
        return sorted(self._managers.values(), key=lambda m: m.name)
