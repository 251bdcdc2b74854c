"""
storage/backend.py

The interface the workflow layer consumes from the hosted backend.

``SupabaseClient`` (storage/client.py) is the production implementation; the
test suite ships an in-memory one.  Every coroutine returns a
:class:`~storage.models.BackendResult` and never raises.
"""

from __future__ import annotations

from typing import Any, Callable, Protocol, runtime_checkable

from storage.models import AuthEvent, BackendResult, Session
from storage.query import Query

SessionListener = Callable[[AuthEvent, "Session | None"], None]


@runtime_checkable
class Backend(Protocol):
    # -------------------------
    # Auth
    # -------------------------
    async def get_current_session(self) -> BackendResult:
        """``data`` is the current :class:`Session` or ``None``."""
        ...

    def on_session_change(self, listener: SessionListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unsubscribes it."""
        ...

    async def sign_in_with_password(self, email: str, password: str) -> BackendResult:
        ...

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> BackendResult:
        ...

    async def sign_out(self) -> BackendResult:
        ...

    async def get_user(self) -> BackendResult:
        """``data`` is the :class:`AuthUser` of the current session."""
        ...

    async def check_privilege(self, subject_id: str) -> BackendResult:
        """``data`` is ``True`` when *subject_id* holds administrator rights."""
        ...

    # -------------------------
    # Tables
    # -------------------------
    async def select(self, query: Query) -> BackendResult:
        ...

    async def count(self, query: Query) -> BackendResult:
        """``count`` holds the number of rows matching *query*."""
        ...

    async def insert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> BackendResult:
        ...

    async def upsert(
        self, table: str, rows: list[dict[str, Any]], on_conflict: str
    ) -> BackendResult:
        ...

    async def update(self, table: str, fields: dict[str, Any], match: dict[str, Any]) -> BackendResult:
        ...

    async def delete(self, table: str, match: dict[str, Any]) -> BackendResult:
        ...
