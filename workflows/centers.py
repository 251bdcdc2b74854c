"""
workflows/centers.py

Health centers and the practitioner/center affiliations that link them.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from storage.backend import Backend
from storage.query import Query
from workflows.notifications import NoticeBoard
from workflows.schemas import (
    CenterOption,
    HealthCenter,
    HealthCenterDraft,
    PractitionerCenter,
    validation_message,
)

logger = logging.getLogger(__name__)

CENTERS = "health_centers"
AFFILIATIONS = "practitioner_centers"


def _parse(model, rows: list[dict[str, Any]], what: str) -> list:
    out = []
    for row in rows:
        try:
            out.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning("Skipping malformed %s row %s: %s", what, row.get("id"), e)
    return out


class HealthCenterService:
    def __init__(self, backend: Backend, notices: NoticeBoard):
        self._backend = backend
        self._notices = notices

    async def list(self) -> list[HealthCenter]:
        result = await self._backend.select(Query(CENTERS).order("name"))
        if not result.ok:
            logger.error("Error fetching health centers: %s", result.error_message)
            self._notices.error("Health centers could not be loaded.")
            return []
        return _parse(HealthCenter, result.rows(), "health center")

    async def options(self) -> list[CenterOption]:
        return [CenterOption(id=c.id, name=c.name, city=c.city) for c in await self.list()]

    async def save(
        self,
        values: dict[str, Any],
        center_id: str | None = None,
        created_by: str | None = None,
    ) -> bool:
        try:
            draft = HealthCenterDraft.model_validate(values)
        except ValidationError as e:
            self._notices.error(validation_message(e))
            return False

        fields = draft.model_dump()
        if center_id:
            result = await self._backend.update(CENTERS, fields, {"id": center_id})
            done, failed = "Health center updated.", "The health center could not be updated."
        else:
            result = await self._backend.insert(CENTERS, {**fields, "created_by": created_by})
            done, failed = "Health center created.", "The health center could not be created."

        if not result.ok:
            logger.error("Error saving health center %s: %s", center_id, result.error_message)
            self._notices.error(failed)
            return False
        self._notices.success(done)
        return True

    async def delete(self, center_id: str) -> bool:
        """Delete a center unless practitioners are still affiliated with it."""
        linked = await self._backend.count(Query(AFFILIATIONS).eq("center_id", center_id))
        if not linked.ok:
            logger.error("Error checking affiliations of center %s: %s", center_id, linked.error_message)
            self._notices.error("The health center could not be deleted.")
            return False
        if linked.count:
            self._notices.error(
                f"This health center still has {linked.count} affiliated practitioner(s); "
                "remove the affiliations first."
            )
            return False

        result = await self._backend.delete(CENTERS, {"id": center_id})
        if not result.ok:
            logger.error("Error deleting health center %s: %s", center_id, result.error_message)
            self._notices.error("The health center could not be deleted.")
            return False
        self._notices.success("Health center deleted.")
        return True


class AffiliationService:
    def __init__(self, backend: Backend, notices: NoticeBoard):
        self._backend = backend
        self._notices = notices

    async def _by_id(self, table: str, columns: str, ids: set[str]) -> dict[str, dict[str, Any]] | None:
        if not ids:
            return {}
        result = await self._backend.select(Query(table, columns=columns).in_("id", sorted(ids)))
        if not result.ok:
            logger.error("Error fetching %s: %s", table, result.error_message)
            return None
        return {row["id"]: row for row in result.rows() if "id" in row}

    async def list(self) -> list[PractitionerCenter]:
        result = await self._backend.select(Query(AFFILIATIONS))
        if not result.ok:
            logger.error("Error fetching affiliations: %s", result.error_message)
            self._notices.error("Affiliations could not be loaded.")
            return []
        rows = result.rows()

        practitioners = await self._by_id(
            "practitioners", "id,speciality,user_id", {r["practitioner_id"] for r in rows if r.get("practitioner_id")}
        )
        centers = await self._by_id(
            CENTERS, "id,name,city", {r["center_id"] for r in rows if r.get("center_id")}
        )
        if practitioners is None or centers is None:
            self._notices.error("Affiliations could not be loaded.")
            return []
        profiles = await self._by_id(
            "profiles",
            "id,first_name,last_name,avatar_url",
            {p["user_id"] for p in practitioners.values() if p.get("user_id")},
        )
        # Names are display-only; a failed profile lookup leaves them empty
        profiles = profiles or {}

        merged = []
        for row in rows:
            practitioner = practitioners.get(row.get("practitioner_id"), {})
            center = centers.get(row.get("center_id"), {})
            profile = profiles.get(practitioner.get("user_id"), {})
            merged.append({
                "id": row.get("id"),
                "practitioner_id": row.get("practitioner_id"),
                "center_id": row.get("center_id"),
                "practitioner_speciality": practitioner.get("speciality"),
                "practitioner_user_id": practitioner.get("user_id"),
                "center_name": center.get("name"),
                "center_city": center.get("city"),
                "practitioner_first_name": profile.get("first_name"),
                "practitioner_last_name": profile.get("last_name"),
                "practitioner_avatar_url": profile.get("avatar_url"),
            })
        return _parse(PractitionerCenter, merged, "affiliation")

    async def create(self, practitioner_id: str, center_id: str) -> bool:
        if not practitioner_id or not center_id:
            self._notices.error("Select both a practitioner and a health center.")
            return False

        existing = await self._backend.count(
            Query(AFFILIATIONS).eq("practitioner_id", practitioner_id).eq("center_id", center_id)
        )
        if not existing.ok:
            logger.error("Error checking affiliation: %s", existing.error_message)
            self._notices.error("The affiliation could not be created.")
            return False
        if existing.count:
            self._notices.error("This practitioner is already affiliated with this health center.")
            return False

        result = await self._backend.insert(
            AFFILIATIONS, {"practitioner_id": practitioner_id, "center_id": center_id}
        )
        if not result.ok:
            logger.error("Error creating affiliation: %s", result.error_message)
            self._notices.error("The affiliation could not be created.")
            return False
        self._notices.success("Affiliation created.")
        return True

    async def delete(self, affiliation_id: str) -> bool:
        result = await self._backend.delete(AFFILIATIONS, {"id": affiliation_id})
        if not result.ok:
            logger.error("Error deleting affiliation %s: %s", affiliation_id, result.error_message)
            self._notices.error("The affiliation could not be deleted.")
            return False
        self._notices.success("Affiliation deleted.")
        return True
