"""
workflows/schemas.py

Pydantic models for MediSync workflow objects:
- User profiles and roles
- Appointments, their statuses and list filters
- Practitioners, health centers and practitioner/center affiliations
- Platform settings

Rows read from the backend are parsed into these models; drafts entered in
forms are validated by them before anything is sent.
"""

from __future__ import annotations

from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, ValidationError, field_validator, model_validator


def utcnow() -> datetime:
    return datetime.now(tz=timezone.utc)


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class UserType(str, Enum):
    """The four roles a profile can hold."""
    patient = "patient"
    doctor = "doctor"
    facility = "facility"
    admin = "admin"


class AppointmentStatus(str, Enum):
    """Lifecycle states of an appointment.  Any state may be set from any other."""
    scheduled = "scheduled"
    confirmed = "confirmed"
    arrived = "arrived"
    in_progress = "in_progress"
    completed = "completed"
    cancelled_by_patient = "cancelled_by_patient"
    cancelled_by_practitioner = "cancelled_by_practitioner"
    no_show = "no_show"


# ---------------------------------------------------------------------------
# Auth forms
# ---------------------------------------------------------------------------


class Credentials(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)


class Registration(Credentials):
    first_name: str = Field(min_length=2)
    last_name: str = Field(min_length=2)
    user_type: UserType = UserType.patient

    @field_validator("user_type")
    @classmethod
    def _no_self_made_admins(cls, v: UserType) -> UserType:
        if v == UserType.admin:
            raise ValueError("administrator accounts cannot be self-registered")
        return v


# ---------------------------------------------------------------------------
# Profiles
# ---------------------------------------------------------------------------


class UserProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None
    user_type: UserType = UserType.patient
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def display_name(self) -> str:
        name = f"{self.first_name or ''} {self.last_name or ''}".strip()
        return name or "User"


class PatientRecord(BaseModel):
    """A row of the profiles table as shown on the admin patients page."""
    model_config = ConfigDict(extra="ignore")

    id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[str] = None
    address: Optional[str] = None
    avatar_url: Optional[str] = None
    user_type: str = UserType.patient.value
    created_at: Optional[datetime] = None


class PatientUpdate(BaseModel):
    """Editable profile fields; blank values are left unchanged."""
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    gender: Optional[str] = None
    date_of_birth: Optional[date] = None
    address: Optional[str] = None

    @field_validator("*", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


# ---------------------------------------------------------------------------
# Appointments
# ---------------------------------------------------------------------------


class Appointment(BaseModel):
    """One row of appointments_view (appointment + patient/practitioner/center display fields)."""
    model_config = ConfigDict(extra="ignore")

    id: str
    start_time: datetime
    end_time: datetime
    reason: Optional[str] = None
    notes: Optional[str] = None
    # Values outside the enumeration are kept as plain strings
    status: AppointmentStatus | str = Field(default=AppointmentStatus.scheduled, union_mode="left_to_right")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    patient_id: str
    practitioner_id: str
    center_id: str

    patient_first_name: Optional[str] = None
    patient_last_name: Optional[str] = None
    practitioner_first_name: Optional[str] = None
    practitioner_last_name: Optional[str] = None
    practitioner_speciality: Optional[str] = None
    center_name: Optional[str] = None
    center_city: Optional[str] = None

    @model_validator(mode="after")
    def _start_before_end(self) -> "Appointment":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self

    @property
    def patient_name(self) -> str:
        return f"{self.patient_first_name or ''} {self.patient_last_name or ''}".strip() or "—"

    @property
    def practitioner_name(self) -> str:
        name = f"{self.practitioner_first_name or ''} {self.practitioner_last_name or ''}".strip()
        return f"Dr. {name}" if name else "—"


class AppointmentDraft(BaseModel):
    """Fields a patient or staff member supplies when booking."""
    start_time: datetime
    end_time: datetime
    patient_id: str
    practitioner_id: str
    center_id: str
    reason: Optional[str] = None
    notes: Optional[str] = None
    status: AppointmentStatus = AppointmentStatus.scheduled

    @model_validator(mode="after")
    def _start_before_end(self) -> "AppointmentDraft":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self


class AppointmentFilters(BaseModel):
    """Parameters of an appointment list query.  Hashable, so it can key a cache."""
    model_config = ConfigDict(frozen=True)

    status: AppointmentStatus | Literal["all"] = "all"
    date_from: Optional[str] = None  # ISO date or timestamp, inclusive
    date_to: Optional[str] = None    # ISO date or timestamp, inclusive
    center_id: Optional[str] = None
    practitioner_id: Optional[str] = None
    patient_name: Optional[str] = None


DEFAULT_FILTERS = AppointmentFilters()


# ---------------------------------------------------------------------------
# Practitioners / centers
# ---------------------------------------------------------------------------


class Practitioner(BaseModel):
    """A practitioner row merged with the display fields of its user profile."""
    model_config = ConfigDict(extra="ignore")

    id: str
    speciality: str
    experience_years: int = 0
    description: Optional[str] = None
    user_id: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    avatar_url: Optional[str] = None

    @property
    def name(self) -> str:
        return f"{self.first_name or ''} {self.last_name or ''}".strip() or "Unnamed"


class PractitionerDraft(BaseModel):
    speciality: str = Field(min_length=2)
    experience_years: int = Field(ge=0)
    description: Optional[str] = None
    user_id: str = Field(min_length=1)


class AvailableUser(BaseModel):
    id: str
    name: str


class PractitionerOption(BaseModel):
    id: str
    name: str
    speciality: str


class HealthCenter(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str
    name: str
    address: str
    city: str
    country: str
    phone: Optional[str] = None
    email: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None


class HealthCenterDraft(BaseModel):
    name: str = Field(min_length=2)
    address: str = Field(min_length=3)
    city: str = Field(min_length=2)
    country: str = Field(min_length=2)
    phone: Optional[str] = None
    email: Optional[EmailStr] = None

    @field_validator("phone", "email", mode="before")
    @classmethod
    def _blank_is_none(cls, v: Any) -> Any:
        if isinstance(v, str) and not v.strip():
            return None
        return v


class CenterOption(BaseModel):
    id: str
    name: str
    city: str


class PractitionerCenter(BaseModel):
    """An affiliation, with practitioner and center display fields."""
    id: str
    practitioner_id: str
    center_id: str
    practitioner_speciality: Optional[str] = None
    practitioner_user_id: Optional[str] = None
    center_name: Optional[str] = None
    center_city: Optional[str] = None
    practitioner_first_name: Optional[str] = None
    practitioner_last_name: Optional[str] = None
    practitioner_avatar_url: Optional[str] = None

    @property
    def practitioner_name(self) -> str:
        name = f"{self.practitioner_first_name or ''} {self.practitioner_last_name or ''}".strip()
        return name or "Unnamed"


# ---------------------------------------------------------------------------
# Platform settings
# ---------------------------------------------------------------------------


DEFAULT_PLATFORM_SETTINGS: dict[str, Any] = {
    "platform_name": "MediSync",
    "platform_description": "Medical appointment management platform",
    "registration_enabled": True,
    "max_appointments_per_day": 10,
    "appointment_duration_minutes": 30,
    "reminder_hours_before": 24,
    "notification_enabled": True,
    "maintenance_mode": False,
    "contact_email": "contact@medisync.example.com",
    "contact_phone": "",
}


def validation_message(err: ValidationError) -> str:
    """First error of *err* as a one-line message for a notice."""
    first = err.errors()[0]
    field = ".".join(str(p) for p in first.get("loc", ())) or "value"
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"
