"""
app/pages/admin/centers.py

Health centers: create, edit, delete (refused while practitioners are
affiliated).
"""

from __future__ import annotations

import streamlit as st

from app.context import AppContext, get_context
from app.ui import card_close, card_open
from workflows.schemas import HealthCenter


def _form(ctx: AppContext, existing: HealthCenter | None = None) -> None:
    key = existing.id if existing else "new"
    with st.form(f"center_{key}", clear_on_submit=existing is None):
        name = st.text_input("Name", value=existing.name if existing else "")
        address = st.text_input("Address", value=existing.address if existing else "")
        c1, c2 = st.columns(2)
        city = c1.text_input("City", value=existing.city if existing else "")
        country = c2.text_input("Country", value=existing.country if existing else "")
        phone = c1.text_input("Phone", value=(existing.phone or "") if existing else "")
        email = c2.text_input("Email", value=(existing.email or "") if existing else "")

        if st.form_submit_button("Save" if existing else "Create", type="primary"):
            values = {
                "name": name,
                "address": address,
                "city": city,
                "country": country,
                "phone": phone,
                "email": email,
            }
            saved = ctx.run(ctx.centers.save(
                values,
                center_id=existing.id if existing else None,
                created_by=ctx.resolver.state.subject,
            ))
            if saved:
                st.rerun()


def render() -> None:
    ctx = get_context()
    st.title("Health centers")

    with st.expander("➕ New health center"):
        _form(ctx)

    centers = ctx.run(ctx.centers.list())
    card_open("Health centers", f"{len(centers)} registered")
    if not centers:
        st.caption("No health center yet.")
    for c in centers:
        with st.expander(f"{c.name} · {c.city}, {c.country}"):
            _form(ctx, c)
            if st.button("Delete", key=f"delete_center_{c.id}"):
                if ctx.run(ctx.centers.delete(c.id)):
                    st.rerun()
    card_close()
