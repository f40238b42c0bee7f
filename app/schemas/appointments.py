"""Appointment schemas for request/response validation."""

from datetime import UTC, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, field_validator


class AppointmentStatus(str, Enum):
    """Appointment status enumeration."""

    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

    @classmethod
    def _missing_(cls, value: object) -> "AppointmentStatus | None":
        """Accept lower-case values and the backend's legacy status names."""
        if not isinstance(value, str):
            return None
        normalized = value.upper()
        normalized = _LEGACY_STATUS_NAMES.get(normalized, normalized)
        for member in cls:
            if member.value == normalized:
                return member
        return None


_LEGACY_STATUS_NAMES = {
    "REQUESTED": "PENDING",
    "APPROVED": "CONFIRMED",
    "PAID": "COMPLETED",
}


class Role(str, Enum):
    """Viewer roles."""

    DOCTOR = "doctor"
    PATIENT = "patient"


class Appointment(BaseModel):
    """
    Appointment as returned by the backend listings.

    A status outside ``AppointmentStatus`` is kept as the raw string so that
    one unfamiliar row does not invalidate the whole listing.
    """

    id: int
    status: AppointmentStatus | str = Field(..., union_mode="left_to_right")
    slot_id: int | None = None
    doctor_id: int | None = None
    patient_id: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    doctor_name: str | None = None
    patient_name: str | None = None
    specialization: str | None = None
    slot_date: str | None = None
    slot_time: str | None = None

    model_config = {"extra": "allow"}

    @field_validator("created_at", "updated_at")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat naive backend timestamps as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class AppointmentListResponse(BaseModel):
    """Paginated appointment listing."""

    total: int = 0
    appointments: list[Appointment] = Field(default_factory=list)
    page: int | None = None
    page_size: int | None = None
    total_pages: int | None = None


class AppointmentRejectRequest(BaseModel):
    """Doctor rejection of an appointment request."""

    reason: str = Field(..., min_length=1, max_length=500)


class AppointmentActionResponse(BaseModel):
    """Backend acknowledgement of an appointment action."""

    appointment_id: int | None = None
    status: str | None = None
    message: str | None = None
    payment_url: str | None = None
    reason: str | None = None

    model_config = {"extra": "allow"}

    @classmethod
    def from_backend(cls, data: dict[str, Any]) -> "AppointmentActionResponse":
        """Build from a backend body that may name the id either way."""
        if "appointment_id" not in data and "id" in data:
            data = {**data, "appointment_id": data["id"]}
        return cls.model_validate(data)
