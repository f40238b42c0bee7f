"""Slot schemas."""

from datetime import date as date_type
from datetime import UTC, datetime, time
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator


class SlotStatus(str, Enum):
    """Slot availability states."""

    FREE = "FREE"
    HELD = "HELD"
    BOOKED = "BOOKED"
    BLOCKED = "BLOCKED"


class Slot(BaseModel):
    """A doctor's bookable time window as returned by the backend."""

    id: int
    doctor_id: int
    date: date_type
    start_time: time
    end_time: time
    status: SlotStatus
    held_until: datetime | None = None
    held_by: int | str | None = None
    held_by_current_user: bool = False

    model_config = {"extra": "ignore"}

    @field_validator("held_until")
    @classmethod
    def assume_utc(cls, v: datetime | None) -> datetime | None:
        """Treat naive backend timestamps as UTC."""
        if v is not None and v.tzinfo is None:
            return v.replace(tzinfo=UTC)
        return v


class SlotListResponse(BaseModel):
    """List of slots."""

    total: int
    slots: list[Slot]


class SlotActionRequest(BaseModel):
    """Identifies which listing a patient slot belongs to."""

    doctor_id: int
    date: date_type


class DoctorSlotActionRequest(BaseModel):
    """Identifies the calendar day of a doctor's slot."""

    date: date_type


class HoldResponse(BaseModel):
    """Result of a successful hold."""

    slot: Slot
    held_until: datetime
    time_remaining_seconds: int = Field(..., ge=0)


class DateOffRequest(BaseModel):
    """Take a whole day off."""

    date: date_type


class RecurringSundaysOffRequest(BaseModel):
    """Mark the next ``weeks`` Sundays from ``start_date`` as off."""

    start_date: date_type
    weeks: int = Field(8, ge=1, le=52)


class LeaveRangeRequest(BaseModel):
    """Leave over consecutive days, both ends inclusive."""

    start_date: date_type
    end_date: date_type

    @model_validator(mode="after")
    def check_order(self) -> "LeaveRangeRequest":
        if self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class DateSlotsCreateRequest(BaseModel):
    """Open slots on one day between two times of day."""

    date: date_type
    start_time: time
    end_time: time

    @model_validator(mode="after")
    def check_order(self) -> "DateSlotsCreateRequest":
        if self.start_time >= self.end_time:
            raise ValueError("start_time must be before end_time")
        return self
