"""
app/pages/admin/affiliations.py

Which practitioner works at which health center.
"""

from __future__ import annotations

import streamlit as st

from app.context import get_context
from app.ui import card_close, card_open


def render() -> None:
    ctx = get_context()
    st.title("Practitioner affiliations")

    practitioners = ctx.run(ctx.practitioners.options())
    centers = ctx.run(ctx.centers.options())

    with st.form("new_affiliation", clear_on_submit=True):
        c1, c2 = st.columns(2)
        practitioner = c1.selectbox(
            "Practitioner",
            options=[None, *practitioners],
            format_func=lambda p: f"Dr. {p.name} · {p.speciality}" if p else "—",
        )
        center = c2.selectbox(
            "Health center", options=[None, *centers], format_func=lambda c: f"{c.name} · {c.city}" if c else "—"
        )
        if st.form_submit_button("Affiliate", type="primary"):
            created = ctx.run(ctx.affiliations.create(
                practitioner.id if practitioner else "",
                center.id if center else "",
            ))
            if created:
                st.rerun()

    affiliations = ctx.run(ctx.affiliations.list())
    card_open("Affiliations", f"{len(affiliations)} link(s)")
    if not affiliations:
        st.caption("No affiliation yet.")
    for a in affiliations:
        cols = st.columns([3, 3, 1])
        cols[0].markdown(f"**Dr. {a.practitioner_name}**  \n{a.practitioner_speciality or ''}")
        cols[1].write(f"{a.center_name or '—'} · {a.center_city or ''}")
        if cols[2].button("Remove", key=f"delete_affiliation_{a.id}"):
            if ctx.run(ctx.affiliations.delete(a.id)):
                st.rerun()
    card_close()
