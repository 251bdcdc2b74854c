"""
app/pages/admin/dashboard.py

Administration overview: headline counts and the latest appointments.
"""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from app.context import get_context
from app.ui import appointment_lines, card_close, card_open, metric_card
from workflows.stats import admin_stats


def render() -> None:
    ctx = get_context()
    st.title("Administration")
    st.caption(datetime.now().strftime("%A, %d %B %Y"))

    stats = ctx.run(admin_stats(ctx.backend, ctx.notices))
    appointments = ctx.run(ctx.appointments.count())

    c1, c2, c3, c4 = st.columns(4)
    with c1:
        metric_card("Patients", str(stats.patients))
    with c2:
        metric_card("Practitioners", str(stats.practitioners))
    with c3:
        metric_card("Health centers", str(stats.centers))
    with c4:
        metric_card("Appointments", str(appointments))

    st.divider()

    card_open("Latest appointments")
    appointment_lines(ctx.run(ctx.appointments.cached())[:8], who="patient")
    card_close()

    st.divider()
    shortcuts = [
        ("Manage appointments", "admin_appointments"),
        ("Manage practitioners", "admin_practitioners"),
        ("Manage health centers", "admin_centers"),
    ]
    for col, (label, view) in zip(st.columns(len(shortcuts)), shortcuts):
        if col.button(label, use_container_width=True):
            st.session_state["current_page"] = view
            st.rerun()
