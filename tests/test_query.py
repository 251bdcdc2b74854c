from datetime import date, datetime, timezone

from storage.query import Query, format_value
from workflows.schemas import AppointmentStatus


def test_format_value():
    assert format_value(None) == "null"
    assert format_value(True) == "true"
    assert format_value(False) == "false"
    assert format_value(3) == "3"
    assert format_value(date(2025, 3, 1)) == "2025-03-01"
    assert format_value(datetime(2025, 3, 1, 9, 30, tzinfo=timezone.utc)) == "2025-03-01T09:30:00+00:00"
    assert format_value(AppointmentStatus.no_show) == "no_show"


def test_params_in_order():
    q = (
        Query("appointments_view")
        .eq("status", "scheduled")
        .gte("start_time", "2025-01-01")
        .lt("start_time", "2025-02-01")
        .order("start_time", desc=True)
        .limit(20)
    )

    assert q.to_params() == [
        ("select", "*"),
        ("status", "eq.scheduled"),
        ("start_time", "gte.2025-01-01"),
        ("start_time", "lt.2025-02-01"),
        ("order", "start_time.desc"),
        ("limit", "20"),
    ]


def test_select_columns_and_in():
    q = Query("profiles").select("id,first_name").in_("id", ["a", "b"]).neq("user_type", "admin")
    assert q.to_params() == [
        ("select", "id,first_name"),
        ("id", "in.(a,b)"),
        ("user_type", "neq.admin"),
    ]


def test_or_group_quotes_reserved_characters():
    q = Query("appointments_view").ilike_any(["patient_first_name", "patient_last_name"], "van der, jr.")
    [(key, value)] = q.to_params()[1:]

    assert key == "or"
    assert value == '(patient_first_name.ilike."*van der, jr.*",patient_last_name.ilike."*van der, jr.*")'


def test_multiple_orderings():
    q = Query("practitioners").order("speciality").order("experience_years", desc=True)
    assert ("order", "speciality.asc,experience_years.desc") in q.to_params()
