"""
workflows/route_guard.py

Render-or-redirect decision for a requested view, plus the one place that
decides where an authenticated user lands.

The guard is a pure function of the resolver snapshot and the view's
declared requirement.  Being redirected for lacking privilege is ordinary
control flow: no notice is produced here.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from workflows.schemas import UserType
from workflows.session_resolver import AuthState

LOGIN_VIEW = "auth"
DEFAULT_VIEW = "dashboard"
ADMIN_LANDING_VIEW = "admin_dashboard"

_ROLE_LANDING: dict[UserType, str] = {
    UserType.patient: "dashboard",
    UserType.doctor: "doctor_dashboard",
    UserType.facility: "facility_dashboard",
    UserType.admin: "dashboard",
}


class Requirement(str, Enum):
    none = "none"
    authenticated = "authenticated"
    admin = "admin"


class Outcome(str, Enum):
    render = "render"
    loading = "loading"
    redirect = "redirect"


@dataclass(frozen=True)
class GuardDecision:
    outcome: Outcome
    target: str | None = None     # view to go to when redirecting
    return_to: str | None = None  # originally requested view, kept for after sign-in

    @property
    def renders(self) -> bool:
        return self.outcome == Outcome.render


def guard(state: AuthState, requirement: Requirement, requested: str) -> GuardDecision:
    if requirement == Requirement.none:
        return GuardDecision(Outcome.render)

    # Never redirect before the resolver has settled
    if state.is_loading:
        return GuardDecision(Outcome.loading)

    if state.session is None:
        return GuardDecision(Outcome.redirect, target=LOGIN_VIEW, return_to=requested)

    if requirement == Requirement.admin and not state.is_admin:
        return GuardDecision(Outcome.redirect, target=landing_view(state))

    return GuardDecision(Outcome.render)


ADMIN_MENU = (
    "admin_dashboard",
    "admin_appointments",
    "admin_patients",
    "admin_practitioners",
    "admin_centers",
    "admin_affiliations",
    "admin_settings",
)
COMMON_MENU = ("appointments", "doctors", "profile")


def menu_for(state: AuthState) -> list[str]:
    """Views offered in the navigation for *state*, landing view first."""
    if state.session is None:
        return [LOGIN_VIEW]
    if state.is_admin:
        return list(ADMIN_MENU)
    return [landing_view(state), *COMMON_MENU]


def landing_view(state: AuthState) -> str:
    """Where an authenticated user should be sent after sign-in or from the dashboard."""
    if state.session is None:
        return LOGIN_VIEW
    if state.is_admin:
        return ADMIN_LANDING_VIEW
    if state.profile is None:
        return DEFAULT_VIEW
    return _ROLE_LANDING.get(state.profile.user_type, DEFAULT_VIEW)


def nav_options(state: AuthState, requested: str) -> list[str]:
    """Menu keys for the sidebar, with *requested* in front when the menu lacks it."""
    keys = menu_for(state)
    if requested not in keys:
        keys = [requested, *keys]
    return keys
