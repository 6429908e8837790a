from __future__ import annotations

import copy
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from threading import RLock
from typing import Any

EMPLOYEES = "employees"
DEPARTMENTS = "departments"
LEAVE_REQUESTS = "leaveRequests"
EXPENSE_REQUESTS = "expenseRequests"
ROLES = "roles"
ROLE_HISTORY = "employee_role_history"
ROLE_PROMOTIONS = "rolePromotions"
LEAVE_BALANCES = "leaveBalances"
NOTIFICATIONS = "notifications"
USERS = "users"
SUCCESSIONS = "successions"

COLLECTIONS: tuple[str, ...] = (
    EMPLOYEES,
    DEPARTMENTS,
    LEAVE_REQUESTS,
    EXPENSE_REQUESTS,
    ROLES,
    ROLE_HISTORY,
    ROLE_PROMOTIONS,
    LEAVE_BALANCES,
    NOTIFICATIONS,
    USERS,
    SUCCESSIONS,
)


class DataStore:
    """In-memory document store keyed by collection name and document id.

    Reads hand out copies, so callers can only change stored state through
    ``insert``, ``update`` and ``update_if``. ``update_if`` is a
    compare-and-swap on top-level fields; ``transaction`` groups several
    writes and rolls all of them back if the block raises.
    """

    def __init__(self) -> None:
        self.lock = RLock()
        self._collections: dict[str, dict[str, dict[str, Any]]] = {name: {} for name in COLLECTIONS}

    def _collection(self, name: str) -> dict[str, dict[str, Any]]:
        try:
            return self._collections[name]
        except KeyError as exc:
            raise KeyError(f"Unknown collection: {name}") from exc

    def get(self, collection: str, doc_id: str) -> dict[str, Any] | None:
        with self.lock:
            row = self._collection(collection).get(doc_id)
            return copy.deepcopy(row) if row is not None else None

    def find(self, collection: str, **filters: Any) -> list[dict[str, Any]]:
        with self.lock:
            rows = list(self._collection(collection).values())
            return [
                copy.deepcopy(row)
                for row in rows
                if all(row.get(field) == value for field, value in filters.items())
            ]

    def all(self, collection: str) -> list[dict[str, Any]]:
        return self.find(collection)

    def exists(self, collection: str, doc_id: str) -> bool:
        with self.lock:
            return doc_id in self._collection(collection)

    def insert(self, collection: str, doc_id: str, row: dict[str, Any]) -> dict[str, Any]:
        with self.lock:
            docs = self._collection(collection)
            if doc_id in docs:
                raise KeyError(f"{collection}/{doc_id} already exists")
            docs[doc_id] = copy.deepcopy(row)
            return copy.deepcopy(docs[doc_id])

    def put(self, collection: str, doc_id: str, row: dict[str, Any]) -> dict[str, Any]:
        with self.lock:
            self._collection(collection)[doc_id] = copy.deepcopy(row)
            return copy.deepcopy(row)

    def update(self, collection: str, doc_id: str, changes: dict[str, Any]) -> dict[str, Any]:
        with self.lock:
            row = self._collection(collection).get(doc_id)
            if row is None:
                raise KeyError(f"{collection}/{doc_id} not found")
            row.update(copy.deepcopy(changes))
            return copy.deepcopy(row)

    def update_if(
        self,
        collection: str,
        doc_id: str,
        expected: dict[str, Any],
        changes: dict[str, Any],
    ) -> dict[str, Any] | None:
        """Apply ``changes`` only if every ``expected`` field still matches.

        Returns the updated document, or None when the document is missing or
        one of the expected fields has changed since the caller read it.
        """
        with self.lock:
            row = self._collection(collection).get(doc_id)
            if row is None:
                return None
            if any(row.get(field) != value for field, value in expected.items()):
                return None
            row.update(copy.deepcopy(changes))
            return copy.deepcopy(row)

    @contextmanager
    def transaction(self) -> Iterator[DataStore]:
        with self.lock:
            saved = copy.deepcopy(self._collections)
            try:
                yield self
            except BaseException:
                self._collections = saved
                raise

    def snapshot(self) -> dict[str, dict[str, dict[str, Any]]]:
        with self.lock:
            return copy.deepcopy(self._collections)

    def restore(self, snapshot: dict[str, dict[str, dict[str, Any]]]) -> None:
        with self.lock:
            self._collections = {name: copy.deepcopy(snapshot.get(name, {})) for name in COLLECTIONS}


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def iso_now() -> str:
    return utcnow().isoformat()
