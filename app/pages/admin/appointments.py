"""
app/pages/admin/appointments.py

Every appointment on the platform, with filters, the status drop-down and
deletion behind a confirmation.
"""

from __future__ import annotations

import streamlit as st

from app.context import AppContext, get_context
from app.ui import card_close, card_open, fmt_dt, status_badge
from workflows.schemas import Appointment, AppointmentFilters

_ALL = "all"


def _filters(ctx: AppContext) -> AppointmentFilters:
    centers = ctx.run(ctx.centers.options())
    practitioners = ctx.run(ctx.practitioners.options())
    statuses = [_ALL, *(s for s, _ in ctx.appointments.status_options())]

    with st.expander("Filters", expanded=True):
        c1, c2, c3 = st.columns(3)
        status = c1.selectbox(
            "Status",
            options=statuses,
            format_func=lambda s: "All statuses" if s == _ALL else ctx.appointments.label_for(s),
        )
        date_from = c2.date_input("From", value=None)
        date_to = c3.date_input("To", value=None)

        c4, c5, c6 = st.columns(3)
        center = c4.selectbox(
            "Health center", options=[None, *centers], format_func=lambda c: c.name if c else "All centers"
        )
        practitioner = c5.selectbox(
            "Practitioner",
            options=[None, *practitioners],
            format_func=lambda p: f"Dr. {p.name}" if p else "All practitioners",
        )
        patient_name = c6.text_input("Patient name")

    return AppointmentFilters(
        status=status,
        date_from=date_from.isoformat() if date_from else None,
        date_to=date_to.isoformat() if date_to else None,
        center_id=center.id if center else None,
        practitioner_id=practitioner.id if practitioner else None,
        patient_name=patient_name.strip() or None,
    )


def _row(ctx: AppContext, a: Appointment) -> None:
    cols = st.columns([2, 2, 2, 2, 1.6, 1.2])
    cols[0].markdown(f"**{a.patient_name}**  \n{a.reason or '—'}")
    cols[1].markdown(f"{a.practitioner_name}  \n{a.practitioner_speciality or ''}")
    cols[2].write(f"{a.center_name or '—'} · {a.center_city or ''}")
    cols[3].markdown(f"{fmt_dt(a.start_time)}<br>{status_badge(a.status)}", unsafe_allow_html=True)

    options = [s for s, _ in ctx.appointments.status_options()]
    with cols[4]:
        chosen = st.selectbox(
            "Status",
            options=options,
            index=options.index(a.status) if a.status in options else 0,
            format_func=ctx.appointments.label_for,
            key=f"admin_status_{a.id}",
            label_visibility="collapsed",
        )
        if chosen != a.status and ctx.run(ctx.appointments.update_status(a.id, chosen)):
            st.rerun()

    with cols[5]:
        if st.button("Delete", key=f"admin_delete_{a.id}"):
            st.session_state["confirm_delete_appointment"] = a.id
            st.rerun()


def render() -> None:
    ctx = get_context()
    st.title("Appointments")

    filters = _filters(ctx)
    appointments = ctx.run(ctx.appointments.cached(filters))
    total = ctx.run(ctx.appointments.count(filters))

    pending = st.session_state.get("confirm_delete_appointment")
    if pending:
        st.warning("Delete this appointment? This cannot be undone.")
        yes, no = st.columns(2)
        if yes.button("Delete", type="primary"):
            ctx.run(ctx.appointments.delete(pending))
            st.session_state.pop("confirm_delete_appointment", None)
            st.rerun()
        if no.button("Keep it"):
            st.session_state.pop("confirm_delete_appointment", None)
            st.rerun()

    card_open("Appointments", f"{total} matching appointment(s)")
    if not appointments:
        st.caption("No appointment matches these filters.")
    for a in appointments:
        _row(ctx, a)
    card_close()
