"""
app/pages/facility_dashboard.py

Health-facility dashboard: appointment counts per status and the next
consultations visible to the facility account.
"""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from app.context import get_context
from app.ui import appointment_lines, card_close, card_open, metric_card
from workflows.appointments import upcoming
from workflows.schemas import AppointmentFilters, AppointmentStatus, utcnow

_HEADLINE = (
    AppointmentStatus.scheduled,
    AppointmentStatus.confirmed,
    AppointmentStatus.completed,
    AppointmentStatus.no_show,
)


def render() -> None:
    ctx = get_context()

    st.title("Facility dashboard")
    st.caption(datetime.now().strftime("%A, %d %B %Y"))

    today = utcnow().date().isoformat()
    todays = ctx.run(ctx.appointments.count(AppointmentFilters(date_from=today, date_to=today)))
    metric_card("Appointments today", str(todays))

    cols = st.columns(len(_HEADLINE))
    for col, status in zip(cols, _HEADLINE):
        with col:
            n = ctx.run(ctx.appointments.count(AppointmentFilters(status=status)))
            metric_card(ctx.appointments.label_for(status), str(n))

    st.divider()

    card_open("Next consultations")
    appointment_lines(upcoming(ctx.run(ctx.appointments.cached()))[:10], who="patient")
    card_close()
