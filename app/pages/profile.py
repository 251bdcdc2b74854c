"""
app/pages/profile.py

The signed-in user's profile: identity and editable personal details.
"""

from __future__ import annotations

import streamlit as st
from pydantic import ValidationError

from app.context import get_context
from app.ui import card_close, card_open
from workflows.schemas import PatientUpdate, validation_message

_GENDERS = ["", "female", "male", "other"]


def render() -> None:
    ctx = get_context()
    state = ctx.resolver.state
    profile = state.profile

    st.title("Profile")
    if profile is None:
        st.warning("Your profile could not be loaded.")
        return

    card_open(profile.display_name, state.user.email if state.user else "")
    st.caption(f"Role: {profile.user_type.value} · member since {profile.created_at:%d %b %Y}")
    card_close()

    st.divider()

    with st.form("profile"):
        c1, c2 = st.columns(2)
        first_name = c1.text_input("First name", value=profile.first_name or "")
        last_name = c2.text_input("Last name", value=profile.last_name or "")
        gender = c1.selectbox("Gender", options=_GENDERS, format_func=lambda g: g.title() or "—")
        date_of_birth = c2.text_input("Date of birth", placeholder="YYYY-MM-DD")
        address = st.text_area("Address")

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
            if ctx.run(ctx.patients.update(profile.id, changes)):
                ctx.run(ctx.resolver.reload())
                st.rerun()
