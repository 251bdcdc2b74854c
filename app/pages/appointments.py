"""
app/pages/appointments.py

The signed-in user's own appointments.
- Patients see what they booked, can book a new one and cancel open ones
- Practitioners see their consultations and can move them through the
  status workflow
"""

from __future__ import annotations

from datetime import date, datetime, time, timedelta, timezone

import streamlit as st
from pydantic import ValidationError

from app.context import AppContext, get_context
from app.ui import card_close, card_open, fmt_dt, status_badge
from workflows.appointments import CLOSED_STATUSES
from workflows.schemas import (
    AppointmentDraft,
    AppointmentFilters,
    AppointmentStatus,
    UserType,
    validation_message,
)


def _booking_form(ctx: AppContext, patient_id: str) -> None:
    practitioners = ctx.run(ctx.practitioners.options())
    centers = ctx.run(ctx.centers.options())
    if not practitioners or not centers:
        st.info("Booking is unavailable until practitioners and health centers are registered.")
        return

    duration = int(ctx.run(ctx.settings.load()).get("appointment_duration_minutes") or 30)

    with st.form("book_appointment", clear_on_submit=True):
        doctor = st.selectbox(
            "Practitioner",
            options=practitioners,
            format_func=lambda p: f"Dr. {p.name} · {p.speciality}",
        )
        center = st.selectbox("Health center", options=centers, format_func=lambda c: f"{c.name} · {c.city}")
        c1, c2 = st.columns(2)
        day = c1.date_input("Date", value=date.today() + timedelta(days=1), min_value=date.today())
        at = c2.time_input("Time", value=time(9, 0), step=timedelta(minutes=15))
        reason = st.text_area("Reason for the visit")

        if st.form_submit_button("Book", type="primary"):
            start = datetime.combine(day, at).replace(tzinfo=timezone.utc)
            try:
                draft = AppointmentDraft(
                    start_time=start,
                    end_time=start + timedelta(minutes=duration),
                    patient_id=patient_id,
                    practitioner_id=doctor.id,
                    center_id=center.id,
                    reason=reason or None,
                )
            except ValidationError as e:
                st.error(validation_message(e))
                return
            if ctx.run(ctx.appointments.create(draft)):
                st.rerun()


def render() -> None:
    ctx = get_context()
    state = ctx.resolver.state
    role = state.profile.user_type if state.profile else UserType.patient

    st.title("Appointments")

    filters = AppointmentFilters()
    practitioner = None
    if role == UserType.doctor and state.subject:
        practitioner = ctx.run(ctx.practitioners.for_user(state.subject))
        if practitioner is not None:
            filters = AppointmentFilters(practitioner_id=practitioner.id)

    rows = ctx.run(ctx.appointments.cached(filters))
    if role == UserType.patient:
        rows = [a for a in rows if a.patient_id == state.subject]
        with st.expander("➕ Book an appointment", expanded=not rows):
            _booking_form(ctx, state.subject or "")

    card_open("Your appointments", f"{len(rows)} appointment(s)")
    if not rows:
        st.caption("No appointments yet.")

    for a in rows:
        cols = st.columns([2, 2, 2, 1.4, 1.6])
        counterpart = a.patient_name if practitioner is not None else a.practitioner_name
        cols[0].markdown(f"**{counterpart}**  \n{a.reason or '—'}")
        cols[1].write(fmt_dt(a.start_time))
        cols[2].write(f"{a.center_name or '—'} · {a.center_city or ''}")
        cols[3].markdown(status_badge(a.status), unsafe_allow_html=True)

        with cols[4]:
            if practitioner is not None:
                options = [s for s, _ in ctx.appointments.status_options()]
                current = options.index(a.status) if a.status in options else 0
                chosen = st.selectbox(
                    "Status",
                    options=options,
                    index=current,
                    format_func=ctx.appointments.label_for,
                    key=f"status_{a.id}",
                    label_visibility="collapsed",
                )
                if chosen != a.status and ctx.run(ctx.appointments.update_status(a.id, chosen)):
                    st.rerun()
            elif a.status not in CLOSED_STATUSES:
                if st.button("Cancel", key=f"cancel_{a.id}"):
                    if ctx.run(ctx.appointments.update_status(a.id, AppointmentStatus.cancelled_by_patient)):
                        st.rerun()
    card_close()
