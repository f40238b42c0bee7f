"""Appointment notification endpoints."""

from fastapi import APIRouter, status

from app.dependencies import AuthenticatedSession, NotificationServiceDep, OptionalSession
from app.schemas.appointments import Role
from app.schemas.notifications import (
    NotificationSummary,
    ViewArrivalRequest,
    ViewArrivalResponse,
)

router = APIRouter(prefix="/notifications")


@router.get(
    "/{role}",
    response_model=NotificationSummary,
    status_code=status.HTTP_200_OK,
    summary="Get notification status",
)
async def get_notification_status(
    role: Role,
    session: AuthenticatedSession,
    notification_service: NotificationServiceDep,
) -> NotificationSummary:
    """
    Compare the role's appointments with the viewer's last visit to the list.

    Args:
        role: doctor or patient
        session: Authenticated session
        notification_service: Notification service

    Returns:
        NEW, UPDATED or NONE with counts per appointment state
    """
    return await notification_service.get_summary(session, role)


@router.post(
    "/{role}/view",
    response_model=ViewArrivalResponse,
    status_code=status.HTTP_200_OK,
    summary="Report the page the viewer is on",
)
async def record_view(
    role: Role,
    data: ViewArrivalRequest,
    session: OptionalSession,
    notification_service: NotificationServiceDep,
) -> ViewArrivalResponse:
    """
    Report a navigation.

    Arriving on the role's appointment list marks it seen; staying on it
    does not move the marker again.
    """
    last_seen_at = notification_service.record_view(session, role, data.path)
    return ViewArrivalResponse(marked_seen=last_seen_at is not None, last_seen_at=last_seen_at)
