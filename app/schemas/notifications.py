"""Appointment notification schemas."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from app.schemas.appointments import Role


class NotificationStatus(str, Enum):
    """Unseen appointment changes for a role."""

    NONE = "none"
    NEW = "new"
    UPDATED = "updated"


class NotificationSummary(BaseModel):
    """Notification status with the changes behind it."""

    role: Role
    status: NotificationStatus
    counts: dict[str, int] = Field(default_factory=dict)
    message: str = ""
    last_seen_at: datetime | None = None


class ViewArrivalRequest(BaseModel):
    """Path the viewer is currently on."""

    path: str = Field(..., min_length=1)


class ViewArrivalResponse(BaseModel):
    """Whether the arrival marked the list as seen."""

    marked_seen: bool
    last_seen_at: datetime | None = None
