"""
workflows/status.py

Display label and badge class for each appointment status.

Both lookups are total: a value outside the enumeration (backend/client
drift) gets the neutral presentation instead of an error.
"""

from __future__ import annotations

from workflows.schemas import AppointmentStatus

NEUTRAL_CLASS = "pill-gray"

_LABELS: dict[str, str] = {
    AppointmentStatus.scheduled.value: "Scheduled",
    AppointmentStatus.confirmed.value: "Confirmed",
    AppointmentStatus.arrived.value: "Patient arrived",
    AppointmentStatus.in_progress.value: "In consultation",
    AppointmentStatus.completed.value: "Completed",
    AppointmentStatus.cancelled_by_patient.value: "Cancelled by patient",
    AppointmentStatus.cancelled_by_practitioner.value: "Cancelled by practitioner",
    AppointmentStatus.no_show.value: "No-show",
}

_CLASSES: dict[str, str] = {
    AppointmentStatus.scheduled.value: "pill-yellow",
    AppointmentStatus.confirmed.value: "pill-blue",
    AppointmentStatus.arrived.value: "pill-indigo",
    AppointmentStatus.in_progress.value: "pill-purple",
    AppointmentStatus.completed.value: "pill-green",
    AppointmentStatus.cancelled_by_patient.value: "pill-red",
    AppointmentStatus.cancelled_by_practitioner.value: "pill-red",
    AppointmentStatus.no_show.value: NEUTRAL_CLASS,
}


def _key(status: AppointmentStatus | str | None) -> str:
    if isinstance(status, AppointmentStatus):
        return status.value
    return str(status or "")


def label_for(status: AppointmentStatus | str | None) -> str:
    key = _key(status)
    return _LABELS.get(key) or key or "Unknown"


def color_for(status: AppointmentStatus | str | None) -> str:
    return _CLASSES.get(_key(status), NEUTRAL_CLASS)


def status_options() -> list[tuple[AppointmentStatus, str]]:
    """Every status with its label, in lifecycle order."""
    return [(s, _LABELS[s.value]) for s in AppointmentStatus]
