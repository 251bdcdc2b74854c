"""
app/ui.py

Theme and small HTML widgets shared by every page.
"""

from __future__ import annotations

import html
from datetime import datetime

import streamlit as st

from workflows.status import color_for, label_for


def inject_theme() -> None:
    st.markdown(
        """
<style>
[data-testid="stSidebarNav"] { display: none !important; }

:root{
  --ms-ink: #0B2545;
  --ms-ink-soft: #5B6B82;
  --ms-brand: #1363DF;
  --ms-brand-dark: #0A3D91;
  --ms-surface: #FFFFFF;
  --ms-backdrop: #EEF3FA;
  --ms-line: #D7E1EE;
}

.stApp { background: var(--ms-backdrop); }
div.block-container { padding-top: 1.6rem; max-width: 1280px; }
h1, h2, h3 { color: var(--ms-ink) !important; letter-spacing: -0.01em; }

section[data-testid="stSidebar"]{
  background: linear-gradient(180deg, var(--ms-brand-dark), #082B66) !important;
}
section[data-testid="stSidebar"] *{ color: #E6EEFA !important; }
section[data-testid="stSidebar"] div[role="radiogroup"] > label{
  border-radius: 10px;
  padding: 8px 10px;
  margin-bottom: 4px;
}
section[data-testid="stSidebar"] div[role="radiogroup"] > label:hover{
  background: rgba(255,255,255,0.08);
}

.stButton>button, .stFormSubmitButton>button{ border-radius: 10px; }
.stButton>button[kind="primary"], .stFormSubmitButton>button[kind="primary"]{
  background: var(--ms-brand) !important;
  border-color: var(--ms-brand) !important;
  color: #FFFFFF !important;
}

/* cards */
.ms-card{
  background: var(--ms-surface);
  border: 1px solid var(--ms-line);
  border-left: 4px solid var(--ms-brand);
  border-radius: 12px;
  padding: 14px 18px;
  margin-bottom: 12px;
}
.ms-card-title{ font-weight: 700; font-size: 17px; color: var(--ms-ink); }
.ms-card-sub{ font-size: 13px; color: var(--ms-ink-soft); }

.ms-metric{ text-align: left; }
.ms-metric-label{ font-size: 12px; text-transform: uppercase; color: var(--ms-ink-soft); }
.ms-metric-value{ font-size: 32px; font-weight: 800; color: var(--ms-brand-dark); }
.ms-metric-foot{ font-size: 12px; color: var(--ms-ink-soft); }

/* appointment status */
.pill{
  display: inline-block;
  padding: 2px 9px;
  border-radius: 6px;
  font-size: 12px;
  font-weight: 700;
}
.pill-yellow{ background: #FEF3C7; color: #92400E; }
.pill-blue{ background: #DBEAFE; color: #1D4ED8; }
.pill-indigo{ background: #E0E7FF; color: #4338CA; }
.pill-purple{ background: #EDE9FE; color: #6D28D9; }
.pill-green{ background: #D1FAE5; color: #047857; }
.pill-red{ background: #FEE2E2; color: #B91C1C; }
.pill-gray{ background: #E5E7EB; color: #374151; }

/* sign-in portals */
.ms-portal{
  display: flex;
  align-items: center;
  gap: 12px;
  margin: 6px 0 14px;
  padding: 12px 14px;
  background: var(--ms-surface);
  border: 1px dashed var(--ms-line);
  border-radius: 12px;
}
.ms-portal-icon{ font-size: 22px; }
.ms-portal-title{ font-weight: 700; color: var(--ms-ink); }
.ms-portal-sub{ font-size: 13px; color: var(--ms-ink-soft); }
</style>
        """,
        unsafe_allow_html=True,
    )


def _esc(x: object) -> str:
    """Escape any user/DB-provided strings before injecting into HTML."""
    return html.escape(str(x or ""), quote=True)


def fmt_dt(value: datetime | None) -> str:
    if value is None:
        return "—"
    return value.strftime("%a %d %b %Y · %H:%M")


def card_open(title: str, subtitle: str = "") -> None:
    sub = f'<div class="ms-card-sub">{_esc(subtitle)}</div>' if subtitle else ""
    st.markdown(
        f'<div class="ms-card"><div class="ms-card-title">{_esc(title)}</div>{sub}',
        unsafe_allow_html=True,
    )


def card_close() -> None:
    st.markdown("</div>", unsafe_allow_html=True)


def status_badge(status: object) -> str:
    """HTML pill for an appointment status; unknown values get the neutral pill."""
    return f'<span class="pill {color_for(status)}">{_esc(label_for(status))}</span>'


def appointment_lines(appointments: list, empty: str = "No appointments.", who: str = "practitioner") -> None:
    """Compact list: counterpart name, reason, time and status pill."""
    if not appointments:
        st.caption(empty)
        return
    for a in appointments:
        name = a.practitioner_name if who == "practitioner" else a.patient_name
        left, right = st.columns([2, 1])
        left.markdown(f"**{name}**  \n{a.reason or '—'}")
        right.markdown(
            f"{_esc(fmt_dt(a.start_time))}<br>{status_badge(a.status)}",
            unsafe_allow_html=True,
        )


def metric_card(label: str, value: str, foot: str | None = None) -> None:
    """Plain-text metric card; render HTML such as status_badge outside of it."""
    foot_html = f'<div class="ms-metric-foot">{_esc(foot)}</div>' if foot else ""
    st.markdown(
        f"""
<div class="ms-card ms-metric">
  <div class="ms-metric-label">{_esc(label)}</div>
  <div class="ms-metric-value">{_esc(value)}</div>
  {foot_html}
</div>
        """,
        unsafe_allow_html=True,
    )


def portal_choice(title: str, subtitle: str, icon_text: str = "•") -> None:
    st.markdown(
        f"""
<div class="ms-portal">
  <div class="ms-portal-icon">{_esc(icon_text)}</div>
  <div>
    <div class="ms-portal-title">{_esc(title)}</div>
    <div class="ms-portal-sub">{_esc(subtitle)}</div>
  </div>
</div>
        """,
        unsafe_allow_html=True,
    )
