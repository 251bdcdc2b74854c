"""
app/pages/doctor_dashboard.py

Practitioner dashboard: today's and upcoming consultations for the
practitioner record linked to the signed-in account.
"""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from app.context import get_context
from app.ui import appointment_lines, card_close, card_open, metric_card
from workflows.appointments import upcoming
from workflows.schemas import AppointmentFilters, utcnow


def render() -> None:
    ctx = get_context()
    state = ctx.resolver.state

    st.title("Practitioner dashboard")
    st.caption(datetime.now().strftime("%A, %d %B %Y"))

    practitioner = ctx.run(ctx.practitioners.for_user(state.subject)) if state.subject else None
    if practitioner is None:
        st.info("Your account is not linked to a practitioner record yet. Ask an administrator to create it.")
        return

    today = utcnow().date().isoformat()
    mine = AppointmentFilters(practitioner_id=practitioner.id)
    appointments = ctx.run(ctx.appointments.cached(mine))
    todays = ctx.run(ctx.appointments.count(AppointmentFilters(
        practitioner_id=practitioner.id, date_from=today, date_to=today,
    )))
    coming = upcoming(appointments)

    c1, c2, c3 = st.columns(3)
    with c1:
        metric_card("Patients today", str(todays))
    with c2:
        metric_card("Upcoming consultations", str(len(coming)))
    with c3:
        metric_card("Speciality", practitioner.speciality, foot=f"{practitioner.experience_years} years of experience")

    st.divider()

    card_open("Next consultations", "Your scheduled consultations")
    appointment_lines(coming[:8], empty="No upcoming consultations.", who="patient")
    card_close()

    if st.button("See all appointments"):
        st.session_state["current_page"] = "appointments"
        st.rerun()
