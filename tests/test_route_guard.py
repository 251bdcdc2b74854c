from datetime import datetime, timezone

import pytest

from conftest import make_session
from workflows.route_guard import (
    ADMIN_MENU,
    Outcome,
    Requirement,
    guard,
    landing_view,
    menu_for,
    nav_options,
)
from workflows.schemas import UserProfile, UserType
from workflows.session_resolver import AuthState, AuthStatus

_NOW = datetime(2025, 1, 1, tzinfo=timezone.utc)


def _state(user_type=UserType.patient, is_admin=False, loading=False, signed_in=True):
    if not signed_in:
        return AuthState(status=AuthStatus.anonymous, is_loading=loading)
    session = make_session("user-1")
    profile = UserProfile(id="user-1", user_type=user_type, created_at=_NOW, updated_at=_NOW)
    return AuthState(
        status=AuthStatus.loading if loading else AuthStatus.authenticated,
        session=session,
        profile=None if loading else profile,
        is_admin=is_admin,
        is_loading=loading,
    )


@pytest.mark.parametrize("requirement", [Requirement.authenticated, Requirement.admin])
def test_loading_never_redirects(requirement):
    for state in (_state(loading=True), _state(loading=True, signed_in=False), AuthState()):
        decision = guard(state, requirement, "appointments")
        assert decision.outcome == Outcome.loading
        assert decision.target is None


def test_public_view_always_renders():
    assert guard(AuthState(), Requirement.none, "auth").renders
    assert guard(_state(signed_in=False), Requirement.none, "auth").renders


def test_anonymous_goes_to_login_and_remembers_destination():
    decision = guard(_state(signed_in=False), Requirement.authenticated, "appointments")

    assert decision.outcome == Outcome.redirect
    assert decision.target == "auth"
    assert decision.return_to == "appointments"


def test_anonymous_on_admin_view_goes_to_login():
    decision = guard(_state(signed_in=False), Requirement.admin, "admin_patients")
    assert decision.target == "auth"
    assert decision.return_to == "admin_patients"


def test_authenticated_view_renders_for_any_signed_in_user():
    assert guard(_state(), Requirement.authenticated, "profile").renders
    assert guard(_state(is_admin=True), Requirement.authenticated, "profile").renders


@pytest.mark.parametrize(
    "user_type, expected",
    [
        (UserType.patient, "dashboard"),
        (UserType.doctor, "doctor_dashboard"),
        (UserType.facility, "facility_dashboard"),
        (UserType.admin, "dashboard"),
    ],
)
def test_non_admin_is_sent_to_own_landing_view(user_type, expected):
    decision = guard(_state(user_type=user_type, is_admin=False), Requirement.admin, "admin_settings")

    assert decision.outcome == Outcome.redirect
    assert decision.target == expected
    assert decision.return_to is None


def test_admin_renders_admin_view():
    assert guard(_state(is_admin=True), Requirement.admin, "admin_settings").renders


@pytest.mark.parametrize(
    "user_type, expected",
    [
        (UserType.patient, "dashboard"),
        (UserType.doctor, "doctor_dashboard"),
        (UserType.facility, "facility_dashboard"),
        (UserType.admin, "dashboard"),
    ],
)
def test_landing_view_by_role(user_type, expected):
    assert landing_view(_state(user_type=user_type)) == expected


def test_landing_view_prefers_admin_flag():
    assert landing_view(_state(user_type=UserType.patient, is_admin=True)) == "admin_dashboard"


def test_landing_view_without_session_or_profile():
    assert landing_view(_state(signed_in=False)) == "auth"
    state = _state()
    assert landing_view(AuthState(status=state.status, session=state.session, is_loading=False)) == "dashboard"


def test_menus():
    assert menu_for(_state(signed_in=False)) == ["auth"]
    assert menu_for(_state(is_admin=True)) == list(ADMIN_MENU)
    assert menu_for(_state(user_type=UserType.doctor)) == ["doctor_dashboard", "appointments", "doctors", "profile"]


def test_nav_options_keep_same_labelled_views_distinct():
    state = _state(user_type=UserType.doctor)

    keys = nav_options(state, "dashboard")

    assert keys == ["dashboard", "doctor_dashboard", "appointments", "doctors", "profile"]
    assert keys.index("doctor_dashboard") == 1
    assert len(set(keys)) == len(keys)


def test_nav_options_do_not_repeat_a_listed_view():
    state = _state(is_admin=True)

    assert nav_options(state, "admin_appointments") == list(ADMIN_MENU)
    assert nav_options(state, "appointments") == ["appointments", *ADMIN_MENU]
