import pytest

from workflows.schemas import AppointmentStatus
from workflows.status import NEUTRAL_CLASS, color_for, label_for, status_options


@pytest.mark.parametrize(
    "status, label, css",
    [
        (AppointmentStatus.scheduled, "Scheduled", "pill-yellow"),
        (AppointmentStatus.confirmed, "Confirmed", "pill-blue"),
        (AppointmentStatus.arrived, "Patient arrived", "pill-indigo"),
        (AppointmentStatus.in_progress, "In consultation", "pill-purple"),
        (AppointmentStatus.completed, "Completed", "pill-green"),
        (AppointmentStatus.cancelled_by_patient, "Cancelled by patient", "pill-red"),
        (AppointmentStatus.cancelled_by_practitioner, "Cancelled by practitioner", "pill-red"),
        (AppointmentStatus.no_show, "No-show", "pill-gray"),
    ],
)
def test_every_status_has_label_and_color(status, label, css):
    assert label_for(status) == label
    assert color_for(status) == css
    # Raw strings from the backend behave the same as enum members
    assert label_for(status.value) == label
    assert color_for(status.value) == css


def test_unknown_status_is_neutral():
    assert label_for("on_hold") == "on_hold"
    assert color_for("on_hold") == NEUTRAL_CLASS


def test_empty_status():
    assert label_for(None) == "Unknown"
    assert label_for("") == "Unknown"
    assert color_for(None) == NEUTRAL_CLASS


def test_status_options_cover_the_lifecycle_in_order():
    options = status_options()
    assert [s for s, _ in options] == list(AppointmentStatus)
    assert options[0] == (AppointmentStatus.scheduled, "Scheduled")
    assert len(options) == 8
