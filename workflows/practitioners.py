"""
workflows/practitioners.py

Admin directory of practitioners.

A practitioner row carries speciality/experience; the person's name and
avatar live on the linked ``profiles`` row and are merged in by ``user_id``.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from storage.backend import Backend
from storage.query import Query
from workflows.notifications import NoticeBoard
from workflows.schemas import (
    AvailableUser,
    Practitioner,
    PractitionerDraft,
    PractitionerOption,
    UserType,
    validation_message,
)

logger = logging.getLogger(__name__)

TABLE = "practitioners"


class PractitionerService:
    def __init__(self, backend: Backend, notices: NoticeBoard):
        self._backend = backend
        self._notices = notices

    async def _profiles_by_id(self, ids: list[str]) -> dict[str, dict[str, Any]] | None:
        if not ids:
            return {}
        result = await self._backend.select(
            Query("profiles", columns="id,first_name,last_name,avatar_url").in_("id", ids)
        )
        if not result.ok:
            logger.error("Error fetching practitioner profiles: %s", result.error_message)
            return None
        return {row["id"]: row for row in result.rows() if "id" in row}

    async def list(self) -> list[Practitioner]:
        result = await self._backend.select(Query(TABLE).order("speciality"))
        if not result.ok:
            logger.error("Error fetching practitioners: %s", result.error_message)
            self._notices.error("Practitioners could not be loaded.")
            return []

        rows = result.rows()
        profiles = await self._profiles_by_id(sorted({r["user_id"] for r in rows if r.get("user_id")}))
        if profiles is None:
            self._notices.error("Practitioners could not be loaded.")
            return []

        practitioners: list[Practitioner] = []
        for row in rows:
            profile = profiles.get(row.get("user_id"), {})
            merged = {
                **row,
                "first_name": profile.get("first_name"),
                "last_name": profile.get("last_name"),
                "avatar_url": profile.get("avatar_url"),
            }
            try:
                practitioners.append(Practitioner.model_validate(merged))
            except ValidationError as e:
                logger.warning("Skipping malformed practitioner row %s: %s", row.get("id"), e)
        return practitioners

    async def available_users(self) -> list[AvailableUser]:
        """Non-admin profiles not yet linked to a practitioner."""
        profiles = await self._backend.select(
            Query("profiles", columns="id,first_name,last_name,user_type").neq("user_type", UserType.admin.value)
        )
        linked = await self._backend.select(Query(TABLE, columns="user_id"))
        if not profiles.ok or not linked.ok:
            logger.error(
                "Error fetching available users: %s",
                profiles.error_message or linked.error_message,
            )
            self._notices.error("Available users could not be loaded.")
            return []

        taken = {r.get("user_id") for r in linked.rows()}
        users: list[AvailableUser] = []
        for row in profiles.rows():
            if row.get("id") in taken:
                continue
            name = f"{row.get('first_name') or ''} {row.get('last_name') or ''}".strip()
            users.append(AvailableUser(id=row["id"], name=name or row["id"]))
        return users

    async def for_user(self, user_id: str) -> Practitioner | None:
        """The practitioner record linked to account *user_id*, if any."""
        result = await self._backend.select(Query(TABLE).eq("user_id", user_id).limit(1))
        if not result.ok:
            logger.error("Error fetching practitioner for user %s: %s", user_id, result.error_message)
            self._notices.error("Your practitioner record could not be loaded.")
            return None
        row = result.first()
        if row is None:
            return None
        try:
            return Practitioner.model_validate(row)
        except ValidationError as e:
            logger.warning("Malformed practitioner row for user %s: %s", user_id, e)
            return None

    async def options(self) -> list[PractitionerOption]:
        return [
            PractitionerOption(id=p.id, name=p.name, speciality=p.speciality)
            for p in await self.list()
        ]

    async def save(self, values: dict[str, Any], practitioner_id: str | None = None) -> bool:
        """Update *practitioner_id* when given, otherwise create a practitioner."""
        try:
            draft = PractitionerDraft.model_validate(values)
        except ValidationError as e:
            self._notices.error(validation_message(e))
            return False

        if practitioner_id:
            result = await self._backend.update(
                TABLE,
                draft.model_dump(include={"speciality", "experience_years", "description"}),
                {"id": practitioner_id},
            )
            done, failed = "Practitioner updated.", "The practitioner could not be updated."
        else:
            result = await self._backend.insert(TABLE, draft.model_dump())
            done, failed = "Practitioner created.", "The practitioner could not be created."

        if not result.ok:
            logger.error("Error saving practitioner %s: %s", practitioner_id, result.error_message)
            self._notices.error(failed)
            return False
        self._notices.success(done)
        return True

    async def delete(self, practitioner_id: str) -> bool:
        result = await self._backend.delete(TABLE, {"id": practitioner_id})
        if not result.ok:
            logger.error("Error deleting practitioner %s: %s", practitioner_id, result.error_message)
            self._notices.error("The practitioner could not be deleted.")
            return False
        self._notices.success("Practitioner deleted.")
        return True
