from __future__ import annotations

from datetime import date, datetime
from typing import Any

from fastapi import HTTPException

from hr_portal.core.config import settings
from hr_portal.models.leave import LeaveAllotmentUpdate, LeaveBalanceRecord, LeaveType, LeaveUsage
from hr_portal.repositories.data_store import LEAVE_BALANCES, DataStore, iso_now


class LeaveBalanceLedger:
    """Per-employee, per-year leave counters.

    Each document holds the yearly totals per leave type and the days used so
    far; remaining = total - used and may never drop below zero. Records are
    created with default allotments the first time a year is touched.
    """

    def __init__(self, store: DataStore, defaults: dict[LeaveType, int] | None = None) -> None:
        self.store = store
        self.defaults = defaults or {
            LeaveType.CASUAL: settings.default_casual_days,
            LeaveType.SICK: settings.default_sick_days,
            LeaveType.ANNUAL: settings.default_annual_days,
        }

    @staticmethod
    def balance_id(employee_id: str, year: int) -> str:
        return f"{employee_id}-{year}"

    def _default_row(self, employee_id: str, year: int) -> dict[str, Any]:
        now = iso_now()
        return {
            "employee_id": employee_id,
            "year": year,
            **{leave_type.value: days for leave_type, days in self.defaults.items()},
            "used": {leave_type.value: 0 for leave_type in LeaveType},
            "created_at": now,
            "updated_at": now,
        }

    def _get_or_create(self, employee_id: str, year: int) -> dict[str, Any]:
        balance_id = self.balance_id(employee_id, year)
        with self.store.lock:
            row = self.store.get(LEAVE_BALANCES, balance_id)
            if row is None:
                row = self.store.insert(LEAVE_BALANCES, balance_id, self._default_row(employee_id, year))
        return row

    def get_balance(self, employee_id: str, year: int | None = None) -> LeaveBalanceRecord:
        year = year or date.today().year
        return self._to_model(self._get_or_create(employee_id, year))

    def decrement(
        self,
        employee_id: str,
        leave_type: LeaveType,
        days: int,
        year: int | None = None,
    ) -> LeaveBalanceRecord:
        if days <= 0:
            raise HTTPException(status_code=400, detail="Days to deduct must be positive")

        year = year or date.today().year
        key = LeaveType(leave_type).value
        with self.store.lock:
            row = self._get_or_create(employee_id, year)
            remaining = row[key] - row["used"].get(key, 0)
            if remaining - days < 0:
                raise HTTPException(
                    status_code=409,
                    detail=f"Insufficient {key} leave balance: {remaining} day(s) left, {days} requested",
                )

            used = {**row["used"], key: row["used"].get(key, 0) + days}
            updated = self.store.update_if(
                LEAVE_BALANCES,
                self.balance_id(employee_id, year),
                {"used": row["used"]},
                {"used": used, "updated_at": iso_now()},
            )
        if updated is None:
            raise HTTPException(status_code=409, detail="Leave balance changed concurrently, retry")
        return self._to_model(updated)

    def set_allotment(self, employee_id: str, payload: LeaveAllotmentUpdate) -> LeaveBalanceRecord:
        year = payload.year or date.today().year
        totals = payload.model_dump(exclude_none=True, exclude={"year"})
        with self.store.lock:
            row = self._get_or_create(employee_id, year)
            for key, total in totals.items():
                if total < row["used"].get(key, 0):
                    raise HTTPException(
                        status_code=409,
                        detail=f"{key} allotment cannot be lower than the {row['used'][key]} day(s) already used",
                    )
            updated = self.store.update(
                LEAVE_BALANCES,
                self.balance_id(employee_id, year),
                {**totals, "updated_at": iso_now()},
            )
        return self._to_model(updated)

    @staticmethod
    def _to_model(row: dict[str, Any]) -> LeaveBalanceRecord:
        used = LeaveUsage(**row["used"])
        return LeaveBalanceRecord(
            employee_id=row["employee_id"],
            year=row["year"],
            casual=row["casual"],
            sick=row["sick"],
            annual=row["annual"],
            used=used,
            remaining=LeaveUsage(
                casual=row["casual"] - used.casual,
                sick=row["sick"] - used.sick,
                annual=row["annual"] - used.annual,
            ),
            updated_at=datetime.fromisoformat(row["updated_at"]),
        )
