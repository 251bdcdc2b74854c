"""
app/pages/admin/patients.py

Patient profiles: search, edit personal details, deactivate.
"""

from __future__ import annotations

import streamlit as st
from pydantic import ValidationError

from app.context import AppContext, get_context
from app.ui import card_close, card_open
from workflows.schemas import PatientRecord, PatientUpdate, validation_message


def _edit_form(ctx: AppContext, p: PatientRecord) -> None:
    with st.form(f"patient_{p.id}"):
        c1, c2 = st.columns(2)
        first_name = c1.text_input("First name", value=p.first_name or "")
        last_name = c2.text_input("Last name", value=p.last_name or "")
        gender = c1.text_input("Gender", value=p.gender or "")
        date_of_birth = c2.text_input("Date of birth", value=p.date_of_birth or "", placeholder="YYYY-MM-DD")
        address = st.text_area("Address", value=p.address or "")
        if st.form_submit_button("Save", type="primary"):
            try:
                changes = PatientUpdate(
                    first_name=first_name,
                    last_name=last_name,
                    gender=gender,
                    date_of_birth=date_of_birth,
                    address=address,
                )
            except ValidationError as e:
                st.error(validation_message(e))
                return
            if ctx.run(ctx.patients.update(p.id, changes)):
                st.rerun()


def render() -> None:
    ctx = get_context()
    st.title("Patients")

    c1, c2 = st.columns([3, 1])
    term = c1.text_input("Search", placeholder="Name...").strip().lower()
    if c2.button("➕ Add patient", use_container_width=True):
        ctx.patients.create()
        st.rerun()

    patients = ctx.run(ctx.patients.list())
    shown = [
        p for p in patients
        if not term or term in f"{p.first_name or ''} {p.last_name or ''}".lower()
    ]

    card_open("Registered patients", f"{len(shown)} of {len(patients)}")
    if not shown:
        st.caption("No patient found.")
    for p in shown:
        name = f"{p.first_name or ''} {p.last_name or ''}".strip() or p.id
        with st.expander(name):
            registered = f"{p.created_at:%d %b %Y}" if p.created_at else "—"
            st.caption(f"Gender: {p.gender or '—'} · Born: {p.date_of_birth or '—'} · Registered: {registered}")
            _edit_form(ctx, p)
            if st.button("Deactivate", key=f"deactivate_{p.id}"):
                if ctx.run(ctx.patients.deactivate(p.id)):
                    st.rerun()
    card_close()
