"""
storage/client.py

Async Supabase client (auth + PostgREST + RPC) built on httpx.

Responsibilities
----------------
- Hold the current session in memory and refresh it shortly before expiry.
- Broadcast session changes (SIGNED_IN, SIGNED_OUT, TOKEN_REFRESHED, ...) to
  registered listeners, synchronously, from inside the call that caused them.
- Translate every HTTP or decoding problem into a failed
  :class:`~storage.models.BackendResult`; nothing here raises to callers.

Only the endpoints MediSync needs are covered:

    POST   /auth/v1/token?grant_type=password|refresh_token
    POST   /auth/v1/signup
    POST   /auth/v1/logout
    GET    /auth/v1/user
    POST   /rest/v1/rpc/is_admin
    GET | HEAD | POST | PATCH | DELETE   /rest/v1/<table>
"""

from __future__ import annotations

import logging
from typing import Any, Callable

import httpx
from pydantic import ValidationError

from storage.backend import SessionListener
from storage.config import BackendSettings, get_settings
from storage.models import AuthEvent, AuthUser, BackendResult, Session
from storage.query import Query, format_value

logger = logging.getLogger(__name__)


def _error_message(response: httpx.Response) -> str:
    """Best-effort extraction of the error text from an auth/REST error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text or f"HTTP {response.status_code}"
    if isinstance(body, dict):
        for key in ("msg", "message", "error_description", "error"):
            if body.get(key):
                return str(body[key])
    return f"HTTP {response.status_code}"


def _parse_content_range(header: str | None) -> int | None:
    """``"0-24/573"`` or ``"*/573"`` -> 573."""
    if not header or "/" not in header:
        return None
    total = header.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else None


def _match_params(match: dict[str, Any]) -> list[tuple[str, str]]:
    return [(col, f"eq.{format_value(val)}") for col, val in match.items()]


class SupabaseClient:
    """Implements :class:`storage.backend.Backend` over HTTP."""

    def __init__(
        self,
        url: str,
        anon_key: str,
        timeout: float = 15.0,
        refresh_margin: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url.rstrip("/")
        self.anon_key = anon_key
        self.timeout = timeout
        self.refresh_margin = refresh_margin

        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._session: Session | None = None
        self._listeners: list[SessionListener] = []

    @classmethod
    def from_settings(cls, settings: BackendSettings | None = None) -> "SupabaseClient":
        settings = settings or get_settings()
        if not settings.configured:
            logger.warning("SUPABASE_URL / SUPABASE_ANON_KEY are not set; backend calls will fail.")
        return cls(
            settings.supabase_url,
            settings.supabase_anon_key,
            timeout=settings.http_timeout,
            refresh_margin=settings.token_refresh_margin,
        )

    # -------------------------
    # HTTP plumbing
    # -------------------------
    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.url,
                timeout=httpx.Timeout(self.timeout),
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    def _headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        token = self._session.access_token if self._session else self.anon_key
        headers = {"apikey": self.anon_key, "Authorization": f"Bearer {token}"}
        if extra:
            headers.update(extra)
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: list[tuple[str, str]] | dict[str, str] | None = None,
        json: Any = None,
        headers: dict[str, str] | None = None,
    ) -> BackendResult:
        if not self.url:
            return BackendResult.failure("not_configured", "Backend URL is not configured.")

        client = await self._get_client()
        try:
            response = await client.request(
                method, path, params=params, json=json, headers=self._headers(headers)
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            logger.error("%s %s failed: HTTP %s", method, path, status)
            return BackendResult.failure(f"http_{status}", _error_message(e.response))
        except httpx.RequestError as e:
            logger.error("%s %s failed: %s", method, path, e)
            return BackendResult.failure("network_error", str(e) or "Network error")

        count = _parse_content_range(response.headers.get("content-range"))
        if method == "HEAD" or not response.content:
            return BackendResult.success(None, count=count)
        try:
            data = response.json()
        except ValueError:
            logger.error("%s %s returned a non-JSON body", method, path)
            return BackendResult.failure("invalid_response", "Backend returned an unreadable response.")
        return BackendResult.success(data, count=count)

    # -------------------------
    # Session-change channel
    # -------------------------
    def on_session_change(self, listener: SessionListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: AuthEvent, session: Session | None) -> None:
        logger.info("Auth event %s", event.value)
        for listener in list(self._listeners):
            try:
                listener(event, session)
            except Exception:
                logger.exception("Session listener failed on %s", event.value)

    def _store_session(self, payload: Any) -> Session | None:
        try:
            return Session.model_validate(payload)
        except ValidationError:
            logger.error("Auth response did not contain a usable session")
            return None

    # -------------------------
    # Auth
    # -------------------------
    async def get_current_session(self) -> BackendResult:
        if self._session is None:
            return BackendResult.success(None)
        if self._session.expires_within(self.refresh_margin):
            return await self._refresh(self._session)
        return BackendResult.success(self._session)

    async def _refresh(self, current: Session) -> BackendResult:
        result = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "refresh_token"},
            json={"refresh_token": current.refresh_token},
        )
        session = self._store_session(result.data) if result.ok else None
        if session is None:
            logger.warning("Session refresh failed (%s); signing out locally", result.error_code)
            self._session = None
            self._emit(AuthEvent.signed_out, None)
            return BackendResult.success(None)

        self._session = session
        self._emit(AuthEvent.token_refreshed, session)
        return BackendResult.success(session)

    async def sign_in_with_password(self, email: str, password: str) -> BackendResult:
        self._session = None
        result = await self._request(
            "POST",
            "/auth/v1/token",
            params={"grant_type": "password"},
            json={"email": email, "password": password},
        )
        if not result.ok:
            return result

        session = self._store_session(result.data)
        if session is None:
            return BackendResult.failure("invalid_response", "Sign-in response did not include a session.")
        self._session = session
        self._emit(AuthEvent.signed_in, session)
        return BackendResult.success(session)

    async def sign_up(self, email: str, password: str, metadata: dict[str, Any]) -> BackendResult:
        result = await self._request(
            "POST",
            "/auth/v1/signup",
            json={"email": email, "password": password, "data": metadata},
        )
        if not result.ok:
            return result

        body = result.data if isinstance(result.data, dict) else {}
        if body.get("access_token"):
            session = self._store_session(body)
            if session is not None:
                # Auto-confirmed projects sign the new account in immediately
                self._session = session
                self._emit(AuthEvent.signed_in, session)
                return BackendResult.success(session)

        raw_user = body.get("user") if isinstance(body.get("user"), dict) else body
        try:
            return BackendResult.success(AuthUser.model_validate(raw_user))
        except ValidationError:
            return BackendResult.failure("invalid_response", "Sign-up response did not include a user.")

    async def sign_out(self) -> BackendResult:
        result = BackendResult.success()
        if self._session is not None:
            result = await self._request("POST", "/auth/v1/logout")
        self._session = None
        self._emit(AuthEvent.signed_out, None)
        return result

    async def get_user(self) -> BackendResult:
        if self._session is None:
            return BackendResult.failure("not_authenticated", "No active session.")
        result = await self._request("GET", "/auth/v1/user")
        if not result.ok:
            return result
        try:
            return BackendResult.success(AuthUser.model_validate(result.data))
        except ValidationError:
            return BackendResult.failure("invalid_response", "User response was malformed.")

    async def check_privilege(self, subject_id: str) -> BackendResult:
        result = await self._request("POST", "/rest/v1/rpc/is_admin", json={"uid": subject_id})
        if not result.ok:
            return result
        if not isinstance(result.data, bool):
            return BackendResult.failure("invalid_response", "is_admin did not return a boolean.")
        return BackendResult.success(result.data)

    # -------------------------
    # Tables
    # -------------------------
    async def select(self, query: Query) -> BackendResult:
        return await self._request("GET", f"/rest/v1/{query.table}", params=query.to_params())

    async def count(self, query: Query) -> BackendResult:
        result = await self._request(
            "HEAD",
            f"/rest/v1/{query.table}",
            params=query.to_params(),
            headers={"Prefer": "count=exact"},
        )
        if result.ok and result.count is None:
            return BackendResult.failure("invalid_response", "Count header missing from response.")
        return result

    async def insert(self, table: str, rows: dict[str, Any] | list[dict[str, Any]]) -> BackendResult:
        return await self._request(
            "POST",
            f"/rest/v1/{table}",
            json=rows,
            headers={"Prefer": "return=representation"},
        )

    async def upsert(self, table: str, rows: list[dict[str, Any]], on_conflict: str) -> BackendResult:
        return await self._request(
            "POST",
            f"/rest/v1/{table}",
            params={"on_conflict": on_conflict},
            json=rows,
            headers={"Prefer": "resolution=merge-duplicates,return=representation"},
        )

    async def update(self, table: str, fields: dict[str, Any], match: dict[str, Any]) -> BackendResult:
        return await self._request(
            "PATCH",
            f"/rest/v1/{table}",
            params=_match_params(match),
            json=fields,
            headers={"Prefer": "return=representation"},
        )

    async def delete(self, table: str, match: dict[str, Any]) -> BackendResult:
        return await self._request("DELETE", f"/rest/v1/{table}", params=_match_params(match))
