"""
app/pages/dashboard.py

Patient dashboard (also the fallback landing view).
- Administrators are sent on to their own landing view
- Metrics: upcoming / past appointments, practitioners consulted
- Next appointments
"""

from __future__ import annotations

from datetime import datetime

import streamlit as st

from app.context import get_context
from app.ui import appointment_lines, card_close, card_open, metric_card
from workflows.appointments import past, upcoming
from workflows.route_guard import landing_view


def render() -> None:
    ctx = get_context()
    state = ctx.resolver.state

    if state.is_admin:
        st.session_state["current_page"] = landing_view(state)
        st.rerun()

    name = state.profile.display_name if state.profile else "there"
    st.title("Dashboard")
    st.caption(f"Welcome, {name} · {datetime.now().strftime('%A, %d %B %Y')}")

    mine = [a for a in ctx.run(ctx.appointments.cached()) if a.patient_id == state.subject]
    coming = upcoming(mine)
    done = past(mine)

    c1, c2, c3 = st.columns(3)
    with c1:
        metric_card("Upcoming appointments", str(len(coming)))
    with c2:
        metric_card("Past appointments", str(len(done)))
    with c3:
        metric_card("Practitioners consulted", str(len({a.practitioner_id for a in done})))

    st.divider()

    card_open("Next appointments", "Your upcoming consultations")
    appointment_lines(coming[:5], empty="No upcoming appointments.")
    card_close()

    if st.button("Book an appointment", type="primary"):
        st.session_state["current_page"] = "appointments"
        st.rerun()
