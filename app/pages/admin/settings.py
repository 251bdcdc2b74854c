"""
app/pages/admin/settings.py

Platform-wide settings.  The loaded values are kept in session state so the
page can tell whether anything was changed before saving.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context
from workflows.platform_settings import has_changes


def render() -> None:
    ctx = get_context()
    st.title("Platform settings")

    if "platform_settings_original" not in st.session_state:
        st.session_state["platform_settings_original"] = ctx.run(ctx.settings.load())
    original = st.session_state["platform_settings_original"]

    tab_general, tab_appointments, tab_notifications = st.tabs(["General", "Appointments", "Notifications"])
    current = dict(original)

    with tab_general:
        current["platform_name"] = st.text_input("Platform name", value=original["platform_name"])
        current["platform_description"] = st.text_area("Description", value=original["platform_description"])
        current["contact_email"] = st.text_input("Contact email", value=original["contact_email"])
        current["contact_phone"] = st.text_input("Contact phone", value=original["contact_phone"])
        current["registration_enabled"] = st.toggle("Registration open", value=bool(original["registration_enabled"]))
        current["maintenance_mode"] = st.toggle("Maintenance mode", value=bool(original["maintenance_mode"]))

    with tab_appointments:
        current["max_appointments_per_day"] = int(st.number_input(
            "Maximum appointments per day", min_value=1, step=1, value=int(original["max_appointments_per_day"])
        ))
        current["appointment_duration_minutes"] = int(st.number_input(
            "Default duration (minutes)", min_value=5, step=5, value=int(original["appointment_duration_minutes"])
        ))

    with tab_notifications:
        current["notification_enabled"] = st.toggle("Notifications", value=bool(original["notification_enabled"]))
        current["reminder_hours_before"] = int(st.number_input(
            "Reminder (hours before)", min_value=0, step=1, value=int(original["reminder_hours_before"])
        ))

    changed = has_changes(current, original)
    if st.button("Save settings", type="primary", disabled=not changed):
        if ctx.run(ctx.settings.save(current)):
            st.session_state.pop("platform_settings_original", None)
            st.rerun()
