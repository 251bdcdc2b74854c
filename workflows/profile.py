"""
workflows/profile.py

Builds the application-level ``UserProfile`` from the two places profile data
lives: the account metadata attached to the session and the ``profiles``
table record.

Field precedence
----------------
    field        1st            2nd            default
    first_name   record         metadata       None
    last_name    record         metadata       None
    avatar_url   record         metadata       None
    user_type    record         metadata       patient
    created_at   record         -              now
    updated_at   record         -              now

Empty strings count as missing.  ``user_type`` values outside the four known
roles resolve to ``patient``.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping

from workflows.schemas import UserProfile, UserType, utcnow

_NAME_FIELDS = ("first_name", "last_name", "avatar_url")


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


def _first_present(*values: Any) -> Any:
    for v in values:
        if _present(v):
            return v
    return None


def normalize_user_type(value: Any) -> UserType:
    if isinstance(value, UserType):
        return value
    try:
        return UserType(str(value).strip().lower())
    except ValueError:
        return UserType.patient


def merge_profile(
    subject_id: str,
    metadata: Mapping[str, Any] | None = None,
    record: Mapping[str, Any] | None = None,
    now: datetime | None = None,
) -> UserProfile:
    metadata = metadata or {}
    record = record or {}
    now = now or utcnow()

    values: dict[str, Any] = {f: _first_present(record.get(f), metadata.get(f)) for f in _NAME_FIELDS}
    values["user_type"] = normalize_user_type(
        _first_present(record.get("user_type"), metadata.get("user_type"))
    )
    values["created_at"] = _first_present(record.get("created_at")) or now
    values["updated_at"] = _first_present(record.get("updated_at")) or now

    return UserProfile(id=subject_id, **values)
