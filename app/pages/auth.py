"""
app/pages/auth.py

Sign-in landing page:
- Left hero panel (raw HTML via components.html)
- Right: Sign in / Create account / Administrator portal tabs

After a successful sign-in the resolver is settled before deciding where to
go, so the admin flag and profile are known.  The administrator portal signs
non-admins straight back out.
"""

from __future__ import annotations

import logging

import streamlit as st
import streamlit.components.v1 as components
from pydantic import ValidationError

from app.context import AppContext, get_context
from app.ui import portal_choice
from workflows.route_guard import landing_view
from workflows.schemas import Credentials, Registration, UserType, validation_message

logger = logging.getLogger(__name__)

_HERO_HTML = """
<div style="
  box-sizing: border-box;
  height: 560px;
  padding: 32px;
  border-radius: 16px;
  background: linear-gradient(160deg, #1363DF 0%, #0A3D91 55%, #082B66 100%);
  color: #FFFFFF;
  font-family: Inter, 'Segoe UI', Helvetica, Arial, sans-serif;
  display: flex;
  flex-direction: column;
  justify-content: space-between;
">
  <div style="font-size: 22px; font-weight: 800;">🩺 MediSync</div>

  <div>
    <div style="font-size: 44px; font-weight: 800; line-height: 1.08;">
      Your appointments,<br>in sync.
    </div>
    <p style="margin-top: 14px; max-width: 460px; font-size: 15px; opacity: 0.8;">
      Book and follow consultations with practitioners across every affiliated health center.
    </p>
    <ul style="margin: 18px 0 0; padding-left: 18px; font-size: 14px; opacity: 0.85; line-height: 1.8;">
      <li>Patients book and cancel their own visits</li>
      <li>Practitioners follow each consultation from arrival to completion</li>
      <li>Administrators manage centers, practitioners and affiliations</li>
    </ul>
  </div>
</div>
"""

_ROLE_LABELS = {
    "Patient": UserType.patient,
    "Practitioner": UserType.doctor,
    "Health facility": UserType.facility,
}


def _go(view: str) -> None:
    st.session_state["current_page"] = view
    st.rerun()


def _sign_in(ctx: AppContext, email: str, password: str, admin_portal: bool) -> None:
    try:
        creds = Credentials(email=email, password=password)
    except ValidationError as e:
        st.error(validation_message(e))
        return

    result = ctx.run(ctx.resolver.sign_in(creds.email, creds.password))
    if not result.ok:
        return
    ctx.run(ctx.resolver.settle())
    state = ctx.resolver.state

    if admin_portal:
        if not state.is_admin:
            logger.warning("Administrator portal sign-in without admin rights (subject=%s)", state.subject)
            ctx.notices.error("You do not have administrator rights.")
            ctx.run(ctx.resolver.sign_out())
            st.rerun()
        ctx.notices.success("Welcome to the administration area.")
        _go(landing_view(state))

    return_to = st.session_state.pop("return_to", None)
    _go(return_to or landing_view(state))


def _sign_up(ctx: AppContext, values: dict) -> None:
    try:
        reg = Registration.model_validate(values)
    except ValidationError as e:
        st.error(validation_message(e))
        return

    result = ctx.run(
        ctx.resolver.sign_up(
            reg.email,
            reg.password,
            {"first_name": reg.first_name, "last_name": reg.last_name, "user_type": reg.user_type.value},
        )
    )
    if not result.ok:
        return
    ctx.run(ctx.resolver.settle())
    if ctx.resolver.state.session is not None:
        _go(landing_view(ctx.resolver.state))


def render() -> None:
    ctx = get_context()
    state = ctx.resolver.state
    if state.session is not None:
        _go(landing_view(state))

    colL, colR = st.columns([1.15, 1], gap="large")

    with colL:
        components.html(_HERO_HTML, height=580)

    with colR:
        st.markdown(
            """
<div style="padding: 10px 4px;">
  <div style="font-weight:1000; font-size:36px; color: rgba(15,23,42,0.92);">Welcome</div>
  <div style="margin-top:6px; color: rgba(15,23,42,0.55); font-size:15px;">Sign in or create an account to continue</div>
</div>
            """,
            unsafe_allow_html=True,
        )

        tab_in, tab_up, tab_admin = st.tabs(["Sign in", "Create account", "Administrator"])

        with tab_in:
            portal_choice("Patients & practitioners", "Manage your appointments", icon_text="👤")
            with st.form("sign_in"):
                email = st.text_input("Email")
                password = st.text_input("Password", type="password")
                if st.form_submit_button("Sign in", type="primary", use_container_width=True):
                    _sign_in(ctx, email, password, admin_portal=False)

        with tab_up:
            with st.form("sign_up"):
                c1, c2 = st.columns(2)
                first_name = c1.text_input("First name")
                last_name = c2.text_input("Last name")
                role = st.selectbox("I am a", options=list(_ROLE_LABELS))
                email = st.text_input("Email", key="sign_up_email")
                password = st.text_input("Password", type="password", key="sign_up_password")
                if st.form_submit_button("Create account", type="primary", use_container_width=True):
                    _sign_up(
                        ctx,
                        {
                            "first_name": first_name,
                            "last_name": last_name,
                            "user_type": _ROLE_LABELS[role],
                            "email": email,
                            "password": password,
                        },
                    )

        with tab_admin:
            portal_choice("Administration", "Restricted to platform administrators", icon_text="🔒")
            with st.form("admin_sign_in"):
                email = st.text_input("Email", key="admin_email")
                password = st.text_input("Password", type="password", key="admin_password")
                if st.form_submit_button("Sign in as administrator", use_container_width=True):
                    _sign_in(ctx, email, password, admin_portal=True)
