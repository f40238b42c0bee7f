"""Appointment endpoints."""

from typing import Any

from fastapi import APIRouter, Query, Request, status

from app.dependencies import AppointmentServiceDep, AuthenticatedSession
from app.schemas.appointments import (
    AppointmentActionResponse,
    AppointmentRejectRequest,
    Role,
)

router = APIRouter()


@router.get("/doctor", status_code=status.HTTP_200_OK, summary="List the doctor's appointments")
async def list_doctor_appointments(
    request: Request,
    session: AuthenticatedSession,
    appointment_service: AppointmentServiceDep,
) -> Any:
    """
    List appointments of the calling doctor.

    Query parameters (page, page_size, status, dates) are forwarded to the
    backend untouched and its body is returned as-is.
    """
    return await appointment_service.list_raw(
        session,
        Role.DOCTOR,
        request.query_params.multi_items(),
    )


@router.get("/patient", status_code=status.HTTP_200_OK, summary="List the patient's appointments")
async def list_patient_appointments(
    request: Request,
    session: AuthenticatedSession,
    appointment_service: AppointmentServiceDep,
) -> Any:
    """List appointments of the calling patient, forwarding query parameters."""
    return await appointment_service.list_raw(
        session,
        Role.PATIENT,
        request.query_params.multi_items(),
    )


@router.post(
    "/{appointment_id}/approve",
    response_model=AppointmentActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Approve appointment",
)
async def approve_appointment(
    appointment_id: int,
    session: AuthenticatedSession,
    appointment_service: AppointmentServiceDep,
    token: str | None = Query(None, description="Approval link token"),
) -> AppointmentActionResponse:
    """
    Approve a pending appointment.

    Args:
        appointment_id: Appointment ID
        session: Authenticated doctor session
        appointment_service: Appointment service
        token: Optional token from an emailed approval link

    Returns:
        Backend acknowledgement, with a payment link when one was issued
    """
    return await appointment_service.approve(session, appointment_id, token)


@router.post(
    "/{appointment_id}/reject",
    response_model=AppointmentActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Reject appointment",
)
async def reject_appointment(
    appointment_id: int,
    data: AppointmentRejectRequest,
    session: AuthenticatedSession,
    appointment_service: AppointmentServiceDep,
    token: str | None = Query(None, description="Rejection link token"),
) -> AppointmentActionResponse:
    """Reject a pending appointment with a reason."""
    return await appointment_service.reject(session, appointment_id, data.reason, token)


@router.post(
    "/{appointment_id}/cancel",
    response_model=AppointmentActionResponse,
    status_code=status.HTTP_200_OK,
    summary="Cancel appointment",
)
async def cancel_appointment(
    appointment_id: int,
    session: AuthenticatedSession,
    appointment_service: AppointmentServiceDep,
) -> AppointmentActionResponse:
    """Cancel one of the patient's appointments; its slot becomes FREE again."""
    return await appointment_service.cancel(session, appointment_id)
