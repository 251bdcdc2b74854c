"""
app/main.py

MediSync — Streamlit entry point.
- Per-session backend + auth resolver (app/context.py)
- Every view declares a Requirement and passes through the route guard
- Role-based sidebar navigation (admin section vs. common section)
- Notices raised by the workflow layer are shown as toasts
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import NamedTuple

import streamlit as st

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from storage.config import get_settings  # noqa: E402
from workflows.route_guard import (  # noqa: E402
    DEFAULT_VIEW,
    LOGIN_VIEW,
    Outcome,
    Requirement,
    guard,
    nav_options,
)

logging.basicConfig(
    level=get_settings().log_level.upper(),
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Page config
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="MediSync",
    page_icon="🏥",
    layout="wide",
    initial_sidebar_state="expanded",
)

from app.context import get_context  # noqa: E402
from app.ui import inject_theme  # noqa: E402


class View(NamedTuple):
    label: str
    module: str
    requirement: Requirement


VIEWS: dict[str, View] = {
    "auth": View("Sign in", "auth", Requirement.none),
    "dashboard": View("Dashboard", "dashboard", Requirement.authenticated),
    "doctor_dashboard": View("Dashboard", "doctor_dashboard", Requirement.authenticated),
    "facility_dashboard": View("Dashboard", "facility_dashboard", Requirement.authenticated),
    "appointments": View("Appointments", "appointments", Requirement.authenticated),
    "doctors": View("Doctors", "doctors", Requirement.authenticated),
    "profile": View("Profile", "profile", Requirement.authenticated),
    "admin_dashboard": View("Admin dashboard", "admin.dashboard", Requirement.admin),
    "admin_appointments": View("Appointments", "admin.appointments", Requirement.admin),
    "admin_patients": View("Patients", "admin.patients", Requirement.admin),
    "admin_practitioners": View("Practitioners", "admin.practitioners", Requirement.admin),
    "admin_centers": View("Health centers", "admin.centers", Requirement.admin),
    "admin_affiliations": View("Affiliations", "admin.affiliations", Requirement.admin),
    "admin_settings": View("Settings", "admin.settings", Requirement.admin),
}


# ---------------------------------------------------------------------------
# Import helper
# ---------------------------------------------------------------------------
def _import_render(module_name: str):
    mod = __import__(f"app.pages.{module_name}", fromlist=["render"])
    return mod.render


# ---------------------------------------------------------------------------
# Auth state
# ---------------------------------------------------------------------------
ctx = get_context()
ctx.refresh()
ctx.flush_notices()
state = ctx.resolver.state

inject_theme()

if "current_page" not in st.session_state:
    st.session_state["current_page"] = st.query_params.get("page", LOGIN_VIEW)

requested = st.session_state["current_page"]
if requested not in VIEWS:
    logger.info("Unknown view %r requested", requested)
    requested = DEFAULT_VIEW
    st.session_state["current_page"] = requested

# ---------------------------------------------------------------------------
# Route guard
# ---------------------------------------------------------------------------
decision = guard(state, VIEWS[requested].requirement, requested)

if decision.outcome == Outcome.loading:
    st.info("Checking your session...")
    st.stop()

if decision.outcome == Outcome.redirect:
    logger.info("Redirecting %s -> %s", requested, decision.target)
    if decision.return_to:
        st.session_state["return_to"] = decision.return_to
    st.session_state["current_page"] = decision.target
    st.rerun()

# ---------------------------------------------------------------------------
# Sidebar
# ---------------------------------------------------------------------------
st.sidebar.title("🩺 MediSync")
st.sidebar.markdown("Appointments, practitioners and health centers in one place.")
st.sidebar.divider()

if state.session is not None:
    profile = state.profile
    display = profile.display_name if profile else (state.user.email if state.user else "User")
    role = "administrator" if state.is_admin else (profile.user_type.value if profile else "unknown")
    st.sidebar.success(f"**{display}**\n\nRole: **{role}**")
    if st.sidebar.button("↩️ Sign out"):
        ctx.run(ctx.resolver.sign_out())
        st.rerun()
else:
    st.sidebar.info("Not logged in")

st.sidebar.divider()

nav_keys = nav_options(state, requested)
page_key = st.sidebar.radio(
    "Navigate",
    options=nav_keys,
    index=nav_keys.index(requested),
    format_func=lambda k: VIEWS[k].label,
)
if page_key != requested:
    st.session_state["current_page"] = page_key
    st.rerun()

# ---------------------------------------------------------------------------
# Page routing
# ---------------------------------------------------------------------------
_import_render(VIEWS[page_key].module)()

ctx.flush_notices()
