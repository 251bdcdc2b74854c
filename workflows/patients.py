"""
workflows/patients.py

Admin view of patient profiles.  Patients register themselves, so the admin
surface can edit and deactivate them but not create them.
"""

from __future__ import annotations

import logging

from pydantic import ValidationError

from storage.backend import Backend
from storage.query import Query
from workflows.notifications import NoticeBoard
from workflows.schemas import PatientRecord, PatientUpdate, UserType, utcnow

logger = logging.getLogger(__name__)

TABLE = "profiles"
INACTIVE = "inactive"


class PatientService:
    def __init__(self, backend: Backend, notices: NoticeBoard):
        self._backend = backend
        self._notices = notices

    async def list(self) -> list[PatientRecord]:
        result = await self._backend.select(
            Query(TABLE).eq("user_type", UserType.patient.value).order("created_at", desc=True)
        )
        if not result.ok:
            logger.error("Error fetching patients: %s", result.error_message)
            self._notices.error("Patients could not be loaded.")
            return []

        patients: list[PatientRecord] = []
        for row in result.rows():
            try:
                patients.append(PatientRecord.model_validate(row))
            except ValidationError as e:
                logger.warning("Skipping malformed profile row %s: %s", row.get("id"), e)
        return patients

    def create(self) -> bool:
        self._notices.info("Patients create their own accounts; they cannot be added here.")
        return False

    async def update(self, patient_id: str, changes: PatientUpdate) -> bool:
        fields = {**changes.model_dump(mode="json", exclude_none=True), "updated_at": utcnow().isoformat()}
        result = await self._backend.update(TABLE, fields, {"id": patient_id})
        if not result.ok:
            logger.error("Error updating patient %s: %s", patient_id, result.error_message)
            self._notices.error("The patient could not be updated.")
            return False
        self._notices.success("Patient updated.")
        return True

    async def deactivate(self, patient_id: str) -> bool:
        """Soft delete: the profile is kept but no longer counts as a patient."""
        result = await self._backend.update(
            TABLE, {"user_type": INACTIVE, "updated_at": utcnow().isoformat()}, {"id": patient_id}
        )
        if not result.ok:
            logger.error("Error deactivating patient %s: %s", patient_id, result.error_message)
            self._notices.error("The patient could not be deactivated.")
            return False
        self._notices.success("Patient deactivated.")
        return True
