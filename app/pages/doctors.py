"""
app/pages/doctors.py

Practitioner directory with free-text and speciality filters.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context
from app.ui import card_close, card_open


def render() -> None:
    ctx = get_context()
    st.title("Doctors")
    st.caption("Find a practitioner by name or speciality.")

    practitioners = ctx.run(ctx.practitioners.list())

    c1, c2 = st.columns([2, 1])
    term = c1.text_input("Search", placeholder="Name, speciality...").strip().lower()
    specialities = sorted({p.speciality for p in practitioners})
    speciality = c2.selectbox("Speciality", options=["All", *specialities])

    shown = [
        p for p in practitioners
        if (speciality == "All" or p.speciality == speciality)
        and (not term or term in p.name.lower() or term in p.speciality.lower())
    ]

    if not shown:
        st.info("No practitioner matches your search.")
        return

    cols = st.columns(3)
    for i, p in enumerate(shown):
        with cols[i % 3]:
            card_open(f"Dr. {p.name}", p.speciality)
            st.caption(f"{p.experience_years} years of experience")
            if p.description:
                st.write(p.description)
            card_close()
