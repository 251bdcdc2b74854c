from datetime import datetime, timezone

from workflows.profile import merge_profile, normalize_user_type
from workflows.schemas import UserType

NOW = datetime(2025, 5, 1, 12, 0, tzinfo=timezone.utc)


def test_record_wins_over_metadata():
    profile = merge_profile(
        "u1",
        metadata={"first_name": "Meta", "last_name": "Data", "user_type": "doctor"},
        record={"first_name": "Rec", "user_type": "facility", "created_at": "2024-01-01T00:00:00+00:00"},
        now=NOW,
    )

    assert profile.id == "u1"
    assert profile.first_name == "Rec"
    assert profile.last_name == "Data"
    assert profile.user_type == UserType.facility
    assert profile.created_at == datetime(2024, 1, 1, tzinfo=timezone.utc)
    assert profile.updated_at == NOW


def test_empty_strings_fall_through():
    profile = merge_profile("u1", metadata={"first_name": "Meta"}, record={"first_name": "  "}, now=NOW)
    assert profile.first_name == "Meta"


def test_defaults_without_any_source():
    profile = merge_profile("u1", now=NOW)

    assert profile.user_type == UserType.patient
    assert profile.first_name is None
    assert profile.created_at == NOW
    assert profile.display_name == "User"


def test_unknown_role_becomes_patient():
    assert normalize_user_type("superuser") == UserType.patient
    assert normalize_user_type(None) == UserType.patient
    assert normalize_user_type(" Doctor ") == UserType.doctor
    assert normalize_user_type(UserType.admin) == UserType.admin


def test_display_name():
    assert merge_profile("u1", metadata={"first_name": "Ana", "last_name": "Diallo"}).display_name == "Ana Diallo"
