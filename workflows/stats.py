"""
workflows/stats.py

Headline counts for the admin dashboard.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel

from storage.backend import Backend
from storage.query import Query
from workflows.notifications import NoticeBoard
from workflows.schemas import UserType

logger = logging.getLogger(__name__)


class AdminStats(BaseModel):
    patients: int = 0
    practitioners: int = 0
    centers: int = 0


async def admin_stats(backend: Backend, notices: NoticeBoard) -> AdminStats:
    queries = {
        "patients": Query("profiles").eq("user_type", UserType.patient.value),
        "practitioners": Query("practitioners"),
        "centers": Query("health_centers"),
    }
    counts: dict[str, int] = {}
    failed = False
    for name, query in queries.items():
        result = await backend.count(query)
        if result.ok:
            counts[name] = result.count or 0
        else:
            logger.error("Error counting %s: %s", name, result.error_message)
            counts[name] = 0
            failed = True

    if failed:
        notices.error("Some statistics could not be loaded.")
    return AdminStats(**counts)
