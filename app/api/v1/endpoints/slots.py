"""Slot endpoints for patients and doctors."""

from datetime import date
from typing import Any

from fastapi import APIRouter, Query, status

from app.dependencies import AuthenticatedSession, SlotServiceDep
from app.schemas.appointments import AppointmentActionResponse
from app.schemas.slots import (
    DateOffRequest,
    DateSlotsCreateRequest,
    DoctorSlotActionRequest,
    HoldResponse,
    LeaveRangeRequest,
    RecurringSundaysOffRequest,
    Slot,
    SlotActionRequest,
    SlotListResponse,
    SlotStatus,
)

router = APIRouter()


# ============================================================================
# Patient
# ============================================================================


@router.get(
    "/slots",
    response_model=SlotListResponse,
    status_code=status.HTTP_200_OK,
    summary="List a doctor's slots",
)
async def list_slots(
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
    doctor_id: int = Query(..., ge=1),
    start_date: date | None = Query(None),
    end_date: date | None = Query(None),
    status_filter: SlotStatus | None = Query(None, alias="status"),
) -> SlotListResponse:
    """
    List a doctor's slots as the caller should see them.

    Lapsed holds are shown as FREE and the caller's own holds are flagged.

    Args:
        session: Authenticated session
        slot_service: Slot service
        doctor_id: Doctor whose calendar to show
        start_date: First day (inclusive)
        end_date: Last day (inclusive)
        status_filter: Only slots in this state

    Returns:
        Presented slots
    """
    return await slot_service.list_slots(session, doctor_id, start_date, end_date, status_filter)


@router.post(
    "/slots/{slot_id}/hold",
    response_model=HoldResponse,
    status_code=status.HTTP_200_OK,
    summary="Hold a slot",
)
async def hold_slot(
    slot_id: int,
    data: SlotActionRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> HoldResponse:
    """Reserve a FREE slot for a few minutes while the booking is confirmed."""
    return await slot_service.hold_slot(session, slot_id, data.doctor_id, data.date)


@router.post(
    "/slots/{slot_id}/release",
    response_model=Slot,
    status_code=status.HTTP_200_OK,
    summary="Release a held slot",
)
async def release_slot(
    slot_id: int,
    data: SlotActionRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Slot:
    """Give up the caller's hold."""
    return await slot_service.release_slot(session, slot_id, data.doctor_id, data.date)


@router.post(
    "/slots/{slot_id}/book",
    response_model=AppointmentActionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Book a held slot",
)
async def book_slot(
    slot_id: int,
    data: SlotActionRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> AppointmentActionResponse:
    """
    Turn the caller's hold into an appointment request.

    Returns 410 when the hold lapsed; the slot has to be held again.
    """
    return await slot_service.book_slot(session, slot_id, data.doctor_id, data.date)


# ============================================================================
# Doctor
# ============================================================================


@router.get(
    "/doctor/slots",
    response_model=SlotListResponse,
    status_code=status.HTTP_200_OK,
    summary="List the doctor's own slots",
)
async def list_doctor_slots(
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
    start_date: date = Query(...),
    end_date: date = Query(...),
) -> SlotListResponse:
    """List the calling doctor's calendar between two days."""
    return await slot_service.list_doctor_slots(session, start_date, end_date)


@router.post(
    "/doctor/slots/{slot_id}/block",
    response_model=Slot,
    status_code=status.HTTP_200_OK,
    summary="Block a slot",
)
async def block_slot(
    slot_id: int,
    data: DoctorSlotActionRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Slot:
    """Take a FREE slot out of availability."""
    return await slot_service.block_slot(session, slot_id, data.date)


@router.post(
    "/doctor/slots/{slot_id}/unblock",
    response_model=Slot,
    status_code=status.HTTP_200_OK,
    summary="Unblock a slot",
)
async def unblock_slot(
    slot_id: int,
    data: DoctorSlotActionRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Slot:
    """Return a BLOCKED slot to availability."""
    return await slot_service.unblock_slot(session, slot_id, data.date)


# ============================================================================
# Doctor calendar
# ============================================================================


@router.post(
    "/doctor/calendar/date-off",
    status_code=status.HTTP_200_OK,
    summary="Take a day off",
)
async def set_date_off(
    data: DateOffRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Any:
    """Block every slot of a day from tomorrow onwards."""
    return await slot_service.set_date_off(session, data.date)


@router.post(
    "/doctor/calendar/recurring-sundays-off",
    status_code=status.HTTP_200_OK,
    summary="Take upcoming Sundays off",
)
async def set_recurring_sundays_off(
    data: RecurringSundaysOffRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Any:
    """
    Mark Sundays off for a number of weeks.

    - **start_date**: first day considered, not in the past
    - **weeks**: 1 to 52, default 8
    """
    return await slot_service.set_recurring_sundays_off(session, data.start_date, data.weeks)


@router.post(
    "/doctor/calendar/leave-range",
    status_code=status.HTTP_200_OK,
    summary="Take leave over a date range",
)
async def set_leave_range(
    data: LeaveRangeRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Any:
    return await slot_service.set_leave_range(session, data.start_date, data.end_date)


@router.post(
    "/doctor/calendar/date-slots",
    status_code=status.HTTP_201_CREATED,
    summary="Open slots on a day",
)
async def create_date_slots(
    data: DateSlotsCreateRequest,
    session: AuthenticatedSession,
    slot_service: SlotServiceDep,
) -> Any:
    """Open FREE slots between two times of a day from tomorrow onwards."""
    return await slot_service.create_date_slots(
        session, data.date, data.start_time, data.end_time
    )
