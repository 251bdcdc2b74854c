"""
workflows/session_resolver.py

Single source of truth for "who is using the application".

States
------
    UNINITIALIZED -> LOADING -> AUTHENTICATED | ANONYMOUS

``AUTHENTICATED`` carries the session, the merged ``UserProfile`` and the
derived admin flag.  Readers get immutable :class:`AuthState` snapshots,
either through :attr:`SessionResolver.state` or by subscribing.

Two paths feed the resolver:

- ``init()`` asks the backend for an existing session and resolves it inline.
- The backend's session-change channel calls ``_on_session_change``.  That
  callback runs inside the backend client's own call, so it must not call
  back into the client: the profile resolution is posted to the next turn of
  the event loop with ``loop.call_soon`` and runs as a separate task.

Every resolution is tagged with the subject id and a generation number.
Only the newest generation may write its result; anything older, or for a
subject that is no longer signed in, is dropped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Any, Callable, Mapping

from storage.backend import Backend
from storage.models import AuthEvent, AuthUser, BackendResult, Session
from storage.query import Query
from workflows.notifications import NoticeBoard
from workflows.profile import merge_profile, normalize_user_type
from workflows.schemas import UserProfile

logger = logging.getLogger(__name__)


class AuthStatus(str, Enum):
    uninitialized = "uninitialized"
    loading = "loading"
    authenticated = "authenticated"
    anonymous = "anonymous"


@dataclass(frozen=True)
class AuthState:
    status: AuthStatus = AuthStatus.uninitialized
    session: Session | None = None
    profile: UserProfile | None = None
    is_admin: bool = False
    is_loading: bool = True

    @property
    def user(self) -> AuthUser | None:
        return self.session.user if self.session else None

    @property
    def subject(self) -> str | None:
        return self.session.subject if self.session else None


Observer = Callable[[AuthState], None]


class SessionResolver:
    def __init__(
        self,
        backend: Backend,
        notices: NoticeBoard,
        navigate: Callable[[str], None] | None = None,
        login_view: str = "auth",
    ):
        self._backend = backend
        self._notices = notices
        self._navigate = navigate
        self._login_view = login_view

        self._state = AuthState()
        self._observers: list[Observer] = []
        self._unsubscribe: Callable[[], None] | None = None
        self._loop: asyncio.AbstractEventLoop | None = None

        self._generation = 0
        self._handoffs = 0
        self._tasks: set[asyncio.Task] = set()

    # -------------------------
    # Observation
    # -------------------------
    @property
    def state(self) -> AuthState:
        return self._state

    def subscribe(self, observer: Observer) -> Callable[[], None]:
        self._observers.append(observer)

        def unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return unsubscribe

    def _set(self, **changes: Any) -> None:
        self._state = replace(self._state, **changes)
        for observer in list(self._observers):
            observer(self._state)

    # -------------------------
    # Lifecycle
    # -------------------------
    async def init(self) -> None:
        """Subscribe to session changes, then resolve any existing session."""
        if self._unsubscribe is not None:
            return
        self._loop = asyncio.get_running_loop()
        self._unsubscribe = self._backend.on_session_change(self._on_session_change)
        self._set(status=AuthStatus.loading, is_loading=True)

        result = await self._backend.get_current_session()
        if not result.ok:
            logger.error("Could not read the current session: %s", result.error_message)
            self._notices.error("Authentication could not be initialised.")

        session = result.data if result.ok else None
        if session is None:
            # A session-change event may have signed someone in meanwhile
            if self._state.session is None:
                self._clear()
            return

        generation = self._begin(session)
        await self._resolve(session.subject, generation)

    async def reload(self) -> None:
        """Re-resolve the current subject, e.g. after its profile was edited."""
        session = self._state.session
        if session is None:
            return
        generation = self._begin(session)
        await self._resolve(session.subject, generation)

    def dispose(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._observers.clear()

    async def settle(self) -> None:
        """Wait until every posted or running profile resolution has finished."""
        while self._handoffs or self._tasks:
            pending = list(self._tasks)
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)
            else:
                await asyncio.sleep(0)

    # -------------------------
    # Session-change channel
    # -------------------------
    def _on_session_change(self, event: AuthEvent, session: Session | None) -> None:
        logger.info("Auth state change: %s (subject=%s)", event.value, session.subject if session else None)

        if event == AuthEvent.signed_out or session is None:
            self._clear()
            return

        generation = self._begin(session)
        if self._loop is None:
            self._loop = asyncio.get_running_loop()
        self._handoffs += 1
        # Required deferral: never call into the backend from inside its own callback
        self._loop.call_soon(self._start_resolution, session.subject, generation)

    def _start_resolution(self, subject: str, generation: int) -> None:
        self._handoffs -= 1
        task = asyncio.get_running_loop().create_task(self._resolve(subject, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    # -------------------------
    # Resolution
    # -------------------------
    def _begin(self, session: Session) -> int:
        """Adopt *session* and open a new resolution generation."""
        self._generation += 1
        previous = self._state.subject
        if previous != session.subject:
            # New identity: nothing about the previous one may leak through
            self._set(
                status=AuthStatus.loading,
                session=session,
                profile=None,
                is_admin=False,
                is_loading=True,
            )
        else:
            self._set(session=session)
        return self._generation

    def _clear(self) -> None:
        self._generation += 1
        self._set(
            status=AuthStatus.anonymous,
            session=None,
            profile=None,
            is_admin=False,
            is_loading=False,
        )

    async def _resolve(self, subject: str, generation: int) -> None:
        is_admin = False
        profile: UserProfile | None = None
        try:
            is_admin = await self._check_admin(subject)
            profile = await self._load_profile(subject)
        except Exception:
            logger.exception("Profile resolution failed for %s", subject)
            self._notices.error("Your user profile could not be loaded.")

        if generation != self._generation or self._state.subject != subject:
            logger.debug("Discarding stale resolution for %s (generation %d)", subject, generation)
            return

        logger.info("Resolved %s (admin=%s, role=%s)", subject, is_admin, profile.user_type.value if profile else None)
        self._set(
            status=AuthStatus.authenticated,
            profile=profile,
            is_admin=is_admin,
            is_loading=False,
        )

    async def _check_admin(self, subject: str) -> bool:
        result = await self._backend.check_privilege(subject)
        if not result.ok:
            logger.error("Admin check failed for %s: %s", subject, result.error_message)
            self._notices.error("Administrator rights could not be verified.")
            return False
        return result.data is True

    async def _load_profile(self, subject: str) -> UserProfile | None:
        metadata: Mapping[str, Any] | None = None
        user_result = await self._backend.get_user()
        if user_result.ok and user_result.data is not None:
            metadata = user_result.data.user_metadata
        else:
            logger.warning("Could not fetch account for %s: %s", subject, user_result.error_message)
            session = self._state.session
            if session is not None and session.subject == subject:
                metadata = session.user.user_metadata or None

        record_result = await self._backend.select(Query("profiles").eq("id", subject).limit(1))
        if not record_result.ok:
            logger.warning("profiles lookup failed for %s: %s", subject, record_result.error_message)
        record = record_result.first() if record_result.ok else None

        if metadata is None and record is None:
            self._notices.error("Your user profile could not be loaded.")
            return None
        return merge_profile(subject, metadata, record)

    # -------------------------
    # Operations
    # -------------------------
    async def sign_up(self, email: str, password: str, attributes: Mapping[str, Any]) -> BackendResult:
        """Create an account; whether it is signed in right away is up to the backend."""
        metadata = {
            "first_name": attributes.get("first_name") or "",
            "last_name": attributes.get("last_name") or "",
            "user_type": normalize_user_type(attributes.get("user_type")).value,
        }
        result = await self._backend.sign_up(email, password, metadata)
        if result.ok:
            self._notices.success("Account created. Check your email to confirm it.")
        else:
            logger.error("Sign-up failed: %s", result.error_message)
            self._notices.error(result.error_message or "Sign-up failed.")
        return result

    async def sign_in(self, email: str, password: str) -> BackendResult:
        """
        Validate credentials.

        The resulting state change arrives through the session-change channel;
        await :meth:`settle` before making authorization decisions.
        """
        result = await self._backend.sign_in_with_password(email, password)
        if result.ok:
            self._notices.success("Signed in.")
        else:
            logger.error("Sign-in failed: %s", result.error_message)
            self._notices.error(result.error_message or "Sign-in failed.")
        return result

    async def sign_out(self) -> BackendResult:
        result = await self._backend.sign_out()
        if result.ok:
            self._notices.success("Signed out.")
        else:
            logger.error("Sign-out failed: %s", result.error_message)
            self._notices.error(result.error_message or "Sign-out failed.")
        if self._state.session is not None or self._state.status != AuthStatus.anonymous:
            self._clear()
        if self._navigate is not None:
            self._navigate(self._login_view)
        return result
