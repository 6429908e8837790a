from __future__ import annotations

import json
import logging
from datetime import date, datetime, timezone
from pathlib import Path
from threading import RLock
from typing import Any

from hr_portal.core.config import settings
from hr_portal.models.analytics import ExpenseStats, RequestStatsResponse, StatusCounts
from hr_portal.models.workflow import RequestStatus
from hr_portal.repositories.data_store import (
    EXPENSE_REQUESTS,
    LEAVE_REQUESTS,
    ROLE_PROMOTIONS,
    DataStore,
)

logger = logging.getLogger(__name__)


class EventLogger:
    """Append-only JSON-lines audit trail of workflow actions."""

    def __init__(self, event_path: Path | None = None) -> None:
        self.event_path = event_path or settings.event_log_path
        self.event_path.parent.mkdir(parents=True, exist_ok=True)
        self.lock = RLock()

    def log_event(
        self,
        event_type: str,
        actor_id: str,
        actor_role: str,
        details: dict[str, Any],
    ) -> None:
        payload = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "event_type": event_type,
            "actor_id": actor_id,
            "actor_role": str(getattr(actor_role, "value", actor_role)),
            "details": details,
        }
        line = json.dumps(payload, default=str)
        with self.lock:
            with self.event_path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")

    def read_events(self) -> list[dict[str, Any]]:
        """All readable audit entries, oldest first; corrupt lines are skipped."""
        with self.lock:
            if not self.event_path.exists():
                return []
            lines = self.event_path.read_text(encoding="utf-8").splitlines()

        events: list[dict[str, Any]] = []
        for line_no, raw in enumerate(lines, start=1):
            if not raw.strip():
                continue
            try:
                events.append(json.loads(raw))
            except json.JSONDecodeError:
                logger.warning("Skipping corrupt audit entry at %s:%d", self.event_path, line_no)
        return events

    def recent_events(
        self,
        limit: int = 100,
        event_type: str | None = None,
        actor_id: str | None = None,
    ) -> list[dict[str, Any]]:
        events = self.read_events()
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]
        if actor_id:
            events = [e for e in events if e.get("actor_id") == actor_id]
        return events[-limit:]


def _month_key(value: date) -> tuple[int, int]:
    return value.year, value.month


def _previous_month(today: date) -> tuple[int, int]:
    if today.month == 1:
        return today.year - 1, 12
    return today.year, today.month - 1


class AnalyticsService:
    def __init__(self, store: DataStore, event_logger: EventLogger) -> None:
        self.store = store
        self.event_logger = event_logger

    @staticmethod
    def _count(rows: list[dict[str, Any]], counts: StatusCounts) -> None:
        for row in rows:
            counts.total += 1
            if row["status"] == RequestStatus.PENDING:
                counts.pending += 1
            elif row["status"] == RequestStatus.APPROVED:
                counts.approved += 1
            elif row["status"] == RequestStatus.REJECTED:
                counts.rejected += 1

    def get_request_stats(
        self,
        visible_employee_ids: set[str] | None,
        today: date | None = None,
    ) -> RequestStatsResponse:
        """Status counts over the requests of ``visible_employee_ids`` (None = everyone)."""

        def visible(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
            if visible_employee_ids is None:
                return rows
            return [r for r in rows if r["employee_id"] in visible_employee_ids]

        leave_rows = visible(self.store.all(LEAVE_REQUESTS))
        expense_rows = visible(self.store.all(EXPENSE_REQUESTS))
        promotion_rows = visible(self.store.all(ROLE_PROMOTIONS))

        leave = StatusCounts()
        self._count(leave_rows, leave)
        promotions = StatusCounts()
        self._count(promotion_rows, promotions)

        expenses = ExpenseStats()
        self._count(expense_rows, expenses)
        today = today or datetime.now(timezone.utc).date()
        this_month = _month_key(today)
        last_month = _previous_month(today)
        for row in expense_rows:
            submitted = _month_key(datetime.fromisoformat(row["created_at"]).date())
            if submitted == this_month:
                expenses.this_month += 1
            elif submitted == last_month:
                expenses.last_month += 1
            if row["status"] == RequestStatus.APPROVED:
                expenses.amount_approved += float(row["amount"])
        expenses.amount_approved = round(expenses.amount_approved, 2)

        return RequestStatsResponse(leave=leave, expenses=expenses, promotions=promotions)

    def get_recent_events(
        self,
        limit: int = 100,
        event_type: str | None = None,
        actor_id: str | None = None,
    ) -> list[dict[str, Any]]:
        return self.event_logger.recent_events(limit=limit, event_type=event_type, actor_id=actor_id)
