"""
app/pages/admin/practitioners.py

Practitioner records: create from an existing account, edit, delete.
"""

from __future__ import annotations

import streamlit as st

from app.context import AppContext, get_context
from app.ui import card_close, card_open
from workflows.schemas import Practitioner


def _form(ctx: AppContext, existing: Practitioner | None = None) -> None:
    key = existing.id if existing else "new"
    with st.form(f"practitioner_{key}", clear_on_submit=existing is None):
        user_id = existing.user_id if existing else None
        if existing is None:
            users = ctx.run(ctx.practitioners.available_users())
            if not users:
                st.caption("Every eligible account already has a practitioner record.")
            user = st.selectbox("Account", options=[None, *users], format_func=lambda u: u.name if u else "—")
            user_id = user.id if user else ""

        speciality = st.text_input("Speciality", value=existing.speciality if existing else "")
        experience = st.number_input(
            "Years of experience", min_value=0, step=1, value=existing.experience_years if existing else 0
        )
        description = st.text_area("Description", value=(existing.description or "") if existing else "")

        if st.form_submit_button("Save" if existing else "Create", type="primary"):
            values = {
                "user_id": user_id,
                "speciality": speciality,
                "experience_years": int(experience),
                "description": description or None,
            }
            if ctx.run(ctx.practitioners.save(values, existing.id if existing else None)):
                st.rerun()


def render() -> None:
    ctx = get_context()
    st.title("Practitioners")

    with st.expander("➕ New practitioner"):
        _form(ctx)

    practitioners = ctx.run(ctx.practitioners.list())
    card_open("Practitioners", f"{len(practitioners)} registered")
    if not practitioners:
        st.caption("No practitioner yet.")
    for p in practitioners:
        with st.expander(f"Dr. {p.name} · {p.speciality}"):
            _form(ctx, p)
            if st.button("Delete", key=f"delete_practitioner_{p.id}"):
                if ctx.run(ctx.practitioners.delete(p.id)):
                    st.rerun()
    card_close()
