"""
Shared pytest fixtures.

``FakeBackend`` is an in-memory implementation of ``storage.backend.Backend``:
tables are lists of dicts, ``Query`` objects are evaluated against them, and
auth events are delivered synchronously from inside the call that caused
them, like the real client does.  Any operation can be made to fail with
``backend.fail("<operation>")``.
"""

from __future__ import annotations

import asyncio
import uuid
from collections import defaultdict
from typing import Any, Callable

import pytest

from storage.models import AuthEvent, AuthUser, BackendResult, Session
from storage.query import Filter, Query, format_value
from workflows.notifications import NoticeBoard


# ============================================================================
# QUERY EVALUATION
# ============================================================================


def _text(value: Any) -> str:
    return format_value(value)


def _matches(row: dict[str, Any], f: Filter) -> bool:
    value = row.get(f.column)
    if f.op == "eq":
        return value is not None and _text(value) == _text(f.value)
    if f.op == "neq":
        return value is not None and _text(value) != _text(f.value)
    if f.op == "in":
        return value is not None and _text(value) in {_text(v) for v in f.value}
    if f.op == "ilike":
        needle = _text(f.value).strip("%").lower()
        return value is not None and needle in _text(value).lower()
    if value is None:
        return False
    left, right = _text(value), _text(f.value)
    return {
        "gt": left > right,
        "gte": left >= right,
        "lt": left < right,
        "lte": left <= right,
    }[f.op]


def evaluate(rows: list[dict[str, Any]], query: Query) -> list[dict[str, Any]]:
    out = [
        r for r in rows
        if all(_matches(r, f) for f in query.filters)
        and all(any(_matches(r, f) for f in group) for group in query.any_of)
    ]
    for column, desc in reversed(query.order_by):
        out.sort(key=lambda r: _text(r.get(column)), reverse=desc)
    if query.limit_to is not None:
        out = out[: query.limit_to]
    return [dict(r) for r in out]


# ============================================================================
# FAKE BACKEND
# ============================================================================


def make_session(user_id: str = "user-1", email: str = "ana@example.com", **metadata: Any) -> Session:
    return Session(
        access_token=f"token-{user_id}-{uuid.uuid4().hex[:6]}",
        refresh_token="refresh",
        expires_in=3600,
        user=AuthUser(id=user_id, email=email, user_metadata=metadata),
    )


class FakeBackend:
    def __init__(self) -> None:
        self.tables: dict[str, list[dict[str, Any]]] = defaultdict(list)
        self.admins: set[str] = set()
        self.accounts: dict[str, tuple[str, AuthUser]] = {}
        self.session: Session | None = None
        self.listeners: list[Callable[[AuthEvent, Session | None], None]] = []
        self.failures: dict[str, BackendResult] = {}
        self.calls: list[str] = []
        self.auto_confirm = False
        # When set, check_privilege waits on it before answering
        self.privilege_gate: asyncio.Event | None = None
        # Views read straight from their base table
        self.views = {"appointments_view": "appointments"}

    # ---- helpers -----------------------------------------------------------
    def fail(self, op: str, code: str = "http_500", message: str = "backend exploded") -> None:
        self.failures[op] = BackendResult.failure(code, message)

    def heal(self, op: str | None = None) -> None:
        if op is None:
            self.failures.clear()
        else:
            self.failures.pop(op, None)

    def _call(self, op: str) -> BackendResult | None:
        self.calls.append(op)
        return self.failures.get(op)

    def _rows(self, table: str) -> list[dict[str, Any]]:
        return self.tables[self.views.get(table, table)]

    def add_account(self, email: str, password: str, user_id: str, **metadata: Any) -> AuthUser:
        user = AuthUser(id=user_id, email=email, user_metadata=metadata)
        self.accounts[email] = (password, user)
        return user

    def emit(self, event: AuthEvent, session: Session | None) -> None:
        for listener in list(self.listeners):
            listener(event, session)

    def start_session(self, session: Session, event: AuthEvent = AuthEvent.signed_in) -> None:
        self.session = session
        self.emit(event, session)

    # ---- auth ----------------------------------------------------------------
    async def get_current_session(self) -> BackendResult:
        return self._call("get_current_session") or BackendResult.success(self.session)

    def on_session_change(self, listener):
        self.listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self.listeners:
                self.listeners.remove(listener)

        return unsubscribe

    async def sign_in_with_password(self, email: str, password: str) -> BackendResult:
        failure = self._call("sign_in_with_password")
        if failure:
            return failure
        account = self.accounts.get(email)
        if account is None or account[0] != password:
            return BackendResult.failure("http_400", "Invalid login credentials")
        session = Session(access_token=f"token-{account[1].id}", user=account[1])
        self.start_session(session)
        return BackendResult.success(session)

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> BackendResult:
        failure = self._call("sign_up")
        if failure:
            return failure
        user = self.add_account(email, password, f"user-{uuid.uuid4().hex[:8]}", **metadata)
        if self.auto_confirm:
            session = Session(access_token=f"token-{user.id}", user=user)
            self.start_session(session)
            return BackendResult.success(session)
        return BackendResult.success(user)

    async def sign_out(self) -> BackendResult:
        failure = self._call("sign_out")
        self.session = None
        self.emit(AuthEvent.signed_out, None)
        return failure or BackendResult.success()

    async def get_user(self) -> BackendResult:
        failure = self._call("get_user")
        if failure:
            return failure
        if self.session is None:
            return BackendResult.failure("not_authenticated", "No active session.")
        return BackendResult.success(self.session.user)

    async def check_privilege(self, subject_id: str) -> BackendResult:
        failure = self._call("check_privilege")
        if self.privilege_gate is not None:
            await self.privilege_gate.wait()
        return failure or BackendResult.success(subject_id in self.admins)

    # ---- tables --------------------------------------------------------------
    async def select(self, query: Query) -> BackendResult:
        failure = self._call(f"select:{query.table}") or self._call("select")
        return failure or BackendResult.success(evaluate(self._rows(query.table), query))

    async def count(self, query: Query) -> BackendResult:
        failure = self._call(f"count:{query.table}") or self._call("count")
        if failure:
            return failure
        unlimited = Query(query.table, filters=query.filters, any_of=query.any_of)
        return BackendResult.success(None, count=len(evaluate(self._rows(query.table), unlimited)))

    async def insert(self, table: str, rows) -> BackendResult:
        failure = self._call(f"insert:{table}") or self._call("insert")
        if failure:
            return failure
        created = []
        for row in rows if isinstance(rows, list) else [rows]:
            row = {"id": str(uuid.uuid4()), **row}
            self.tables[table].append(row)
            created.append(dict(row))
        return BackendResult.success(created)

    async def upsert(self, table: str, rows: list[dict[str, Any]], on_conflict: str) -> BackendResult:
        failure = self._call(f"upsert:{table}") or self._call("upsert")
        if failure:
            return failure
        for row in rows:
            existing = next((r for r in self.tables[table] if r.get(on_conflict) == row.get(on_conflict)), None)
            if existing is None:
                self.tables[table].append({"id": str(uuid.uuid4()), **row})
            else:
                existing.update(row)
        return BackendResult.success(rows)

    async def update(self, table: str, fields: dict[str, Any], match: dict[str, Any]) -> BackendResult:
        failure = self._call(f"update:{table}") or self._call("update")
        if failure:
            return failure
        updated = []
        for row in self.tables[table]:
            if all(row.get(k) == v for k, v in match.items()):
                row.update(fields)
                updated.append(dict(row))
        return BackendResult.success(updated)

    async def delete(self, table: str, match: dict[str, Any]) -> BackendResult:
        failure = self._call(f"delete:{table}") or self._call("delete")
        if failure:
            return failure
        keep = [r for r in self.tables[table] if not all(r.get(k) == v for k, v in match.items())]
        removed = len(self.tables[table]) - len(keep)
        self.tables[table] = keep
        return BackendResult.success([], count=removed)


# ============================================================================
# ROW BUILDERS
# ============================================================================


def appointment_row(**overrides: Any) -> dict[str, Any]:
    row = {
        "id": str(uuid.uuid4()),
        "start_time": "2025-03-01T09:00:00+00:00",
        "end_time": "2025-03-01T09:30:00+00:00",
        "reason": "Check-up",
        "notes": None,
        "status": "scheduled",
        "created_at": "2025-02-01T08:00:00+00:00",
        "updated_at": "2025-02-01T08:00:00+00:00",
        "patient_id": "patient-1",
        "practitioner_id": "pract-1",
        "center_id": "center-1",
        "patient_first_name": "Ana",
        "patient_last_name": "Diallo",
        "practitioner_first_name": "Moussa",
        "practitioner_last_name": "Konate",
        "practitioner_speciality": "Cardiology",
        "center_name": "Clinique du Port",
        "center_city": "Dakar",
    }
    row.update(overrides)
    return row


# ============================================================================
# FIXTURES
# ============================================================================


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def notices() -> NoticeBoard:
    return NoticeBoard()
