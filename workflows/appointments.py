"""
workflows/appointments.py

Appointment status workflow: list/count with filters, status updates,
deletion and booking, against ``appointments`` and the denormalised
``appointments_view``.

Every backend call follows the same contract: on failure it is logged, a
notice is pushed and a safe default comes back (``[]``, ``0``, ``False`` or
``None``).  Nothing here raises to the page that called it.

Status changes are deliberately permissive: any status may be set from any
other, including moving a completed appointment back to scheduled.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timedelta
from typing import Iterable

from pydantic import ValidationError

from storage.backend import Backend
from storage.query import Query
from workflows import status as _status
from workflows.notifications import NoticeBoard
from workflows.schemas import (
    DEFAULT_FILTERS,
    Appointment,
    AppointmentDraft,
    AppointmentFilters,
    AppointmentStatus,
    utcnow,
)

logger = logging.getLogger(__name__)

VIEW = "appointments_view"
TABLE = "appointments"

CLOSED_STATUSES = frozenset({
    AppointmentStatus.completed,
    AppointmentStatus.cancelled_by_patient,
    AppointmentStatus.cancelled_by_practitioner,
    AppointmentStatus.no_show,
})


def upcoming(appointments: Iterable[Appointment], now: datetime | None = None) -> list[Appointment]:
    """Open appointments that have not started yet, soonest first."""
    now = now or utcnow()
    items = [a for a in appointments if a.start_time >= now and a.status not in CLOSED_STATUSES]
    return sorted(items, key=lambda a: a.start_time)


def past(appointments: Iterable[Appointment], now: datetime | None = None) -> list[Appointment]:
    now = now or utcnow()
    return [a for a in appointments if a.start_time < now]


def _plain_date(value: str) -> date | None:
    """``"2025-03-01"`` -> date; anything with a time part -> None."""
    if len(value) != 10:
        return None
    try:
        return date.fromisoformat(value)
    except ValueError:
        return None


def apply_filters(query: Query, filters: AppointmentFilters) -> Query:
    """Add the filter conditions shared by :meth:`list` and :meth:`count`."""
    if filters.status != "all":
        query.eq("status", AppointmentStatus(filters.status).value)

    if filters.date_from:
        query.gte("start_time", filters.date_from)

    if filters.date_to:
        day = _plain_date(filters.date_to)
        if day is not None:
            # Inclusive of the whole day
            query.lt("start_time", (day + timedelta(days=1)).isoformat())
        else:
            query.lte("start_time", filters.date_to)

    if filters.center_id:
        query.eq("center_id", filters.center_id)

    if filters.practitioner_id:
        query.eq("practitioner_id", filters.practitioner_id)

    name = (filters.patient_name or "").strip()
    if name:
        query.ilike_any(["patient_first_name", "patient_last_name"], name)

    return query


class AppointmentService:
    def __init__(self, backend: Backend, notices: NoticeBoard):
        self._backend = backend
        self._notices = notices
        # Read-through copy per filter set; dropped after any successful mutation
        self._cache: dict[AppointmentFilters, list[Appointment]] = {}

    # -------------------------
    # Presentation
    # -------------------------
    @staticmethod
    def label_for(status: AppointmentStatus | str | None) -> str:
        return _status.label_for(status)

    @staticmethod
    def color_for(status: AppointmentStatus | str | None) -> str:
        return _status.color_for(status)

    @staticmethod
    def status_options() -> list[tuple[AppointmentStatus, str]]:
        return _status.status_options()

    # -------------------------
    # Reads
    # -------------------------
    async def list(self, filters: AppointmentFilters = DEFAULT_FILTERS) -> list[Appointment]:
        query = apply_filters(Query(VIEW), filters).order("start_time", desc=True)
        result = await self._backend.select(query)
        if not result.ok:
            logger.error("Error fetching appointments: %s", result.error_message)
            self._notices.error("Appointments could not be loaded.")
            return []

        appointments: list[Appointment] = []
        for row in result.rows():
            try:
                appointments.append(Appointment.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping malformed appointment row %s: %s", row.get("id"), e)

        logger.info("Appointments retrieved: %d", len(appointments))
        self._cache[filters] = appointments
        return appointments

    async def cached(self, filters: AppointmentFilters = DEFAULT_FILTERS) -> list[Appointment]:
        if filters in self._cache:
            return list(self._cache[filters])
        return await self.list(filters)

    async def count(self, filters: AppointmentFilters = DEFAULT_FILTERS) -> int:
        result = await self._backend.count(apply_filters(Query(VIEW), filters))
        if not result.ok:
            logger.error("Error counting appointments: %s", result.error_message)
            self._notices.error("Appointments could not be counted.")
            return 0
        return result.count or 0

    def invalidate(self) -> None:
        self._cache.clear()

    # -------------------------
    # Mutations
    # -------------------------
    async def update_status(self, appointment_id: str, status: AppointmentStatus | str) -> bool:
        try:
            new_status = AppointmentStatus(status)
        except ValueError:
            logger.error("Refusing unknown appointment status %r", status)
            self._notices.error("Unknown appointment status.")
            return False

        result = await self._backend.update(
            TABLE,
            {"status": new_status.value, "updated_at": utcnow().isoformat()},
            {"id": appointment_id},
        )
        if not result.ok:
            logger.error("Error updating appointment %s status: %s", appointment_id, result.error_message)
            self._notices.error("The appointment status could not be updated.")
            return False

        self.invalidate()
        self._notices.success("Appointment status updated.")
        return True

    async def delete(self, appointment_id: str) -> bool:
        result = await self._backend.delete(TABLE, {"id": appointment_id})
        if not result.ok:
            logger.error("Error deleting appointment %s: %s", appointment_id, result.error_message)
            self._notices.error("The appointment could not be deleted.")
            return False

        self.invalidate()
        self._notices.success("Appointment deleted.")
        return True

    async def create(self, draft: AppointmentDraft) -> str | None:
        """Book an appointment; returns the new id, or None on failure."""
        result = await self._backend.insert(TABLE, draft.model_dump(mode="json"))
        row = result.first() if result.ok else None
        if row is None:
            logger.error("Error creating appointment: %s", result.error_message)
            self._notices.error("The appointment could not be booked.")
            return None

        self.invalidate()
        self._notices.success("Appointment booked.")
        return str(row.get("id"))
