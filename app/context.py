"""
app/context.py

Per-browser-session service wiring.

Streamlit reruns the script top to bottom on every interaction, so anything
that must survive between reruns (the backend client with its session, the
resolver, the notice board) lives in one ``AppContext`` stored in
``st.session_state``.  Each browser session gets its own context, and so its
own signed-in identity.

The workflow layer is async; pages call it through :meth:`AppContext.run`,
which drives the context's private event loop to completion.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, TypeVar

import streamlit as st

from storage.client import SupabaseClient
from storage.config import get_settings
from workflows.appointments import AppointmentService
from workflows.centers import AffiliationService, HealthCenterService
from workflows.notifications import NoticeBoard
from workflows.patients import PatientService
from workflows.platform_settings import PlatformSettingsService
from workflows.practitioners import PractitionerService
from workflows.route_guard import LOGIN_VIEW
from workflows.session_resolver import SessionResolver

logger = logging.getLogger(__name__)

T = TypeVar("T")

_CONTEXT_KEY = "medisync_context"


def navigate(view: str) -> None:
    st.session_state["current_page"] = view


@dataclass
class AppContext:
    loop: asyncio.AbstractEventLoop
    backend: SupabaseClient
    notices: NoticeBoard
    resolver: SessionResolver
    appointments: AppointmentService
    practitioners: PractitionerService
    centers: HealthCenterService
    affiliations: AffiliationService
    patients: PatientService
    settings: PlatformSettingsService
    started: bool = field(default=False)

    @classmethod
    def create(cls) -> "AppContext":
        backend = SupabaseClient.from_settings(get_settings())
        notices = NoticeBoard()
        logger.info("New browser session context")
        return cls(
            loop=asyncio.new_event_loop(),
            backend=backend,
            notices=notices,
            resolver=SessionResolver(backend, notices, navigate=navigate, login_view=LOGIN_VIEW),
            appointments=AppointmentService(backend, notices),
            practitioners=PractitionerService(backend, notices),
            centers=HealthCenterService(backend, notices),
            affiliations=AffiliationService(backend, notices),
            patients=PatientService(backend, notices),
            settings=PlatformSettingsService(backend, notices),
        )

    def run(self, coro: Awaitable[T]) -> T:
        return self.loop.run_until_complete(coro)

    async def _refresh(self) -> None:
        if not self.started:
            await self.resolver.init()
            self.started = True
        else:
            # Renews the access token when it is close to expiry
            await self.backend.get_current_session()
        await self.resolver.settle()

    def refresh(self) -> None:
        """Bring the auth state up to date; called once at the top of every rerun."""
        self.run(self._refresh())

    def flush_notices(self) -> None:
        icons = {"success": "✅", "info": "ℹ️", "warning": "⚠️", "error": "❌"}
        for notice in self.notices.drain():
            st.toast(notice.message, icon=icons.get(notice.level.value))


def get_context() -> AppContext:
    ctx: Any = st.session_state.get(_CONTEXT_KEY)
    if ctx is None:
        ctx = AppContext.create()
        st.session_state[_CONTEXT_KEY] = ctx
    return ctx
