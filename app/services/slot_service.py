"""Slot service: backend-facing side of the slot state machine."""

from datetime import UTC, date, datetime, time, timedelta
from typing import Any

import structlog
from pydantic import ValidationError

from app.core.exceptions import (
    AppException,
    BackendRejectedException,
    BadRequestException,
    HoldExpiredException,
    NotFoundException,
    SlotConflictException,
    TransientBackendException,
)
from app.core.session import SessionContext
from app.schemas.appointments import AppointmentActionResponse
from app.schemas.slots import HoldResponse, Slot, SlotListResponse, SlotStatus
from app.services.gateway import BackendGateway
from app.services.slot_state_machine import SlotStateMachine

logger = structlog.get_logger()

_CONFLICT_PHRASES = ("already held", "already booked", "not available", "unavailable")


class SlotService:
    """Service for slot listings and slot transitions."""

    def __init__(self, gateway: BackendGateway, machine: SlotStateMachine):
        """Initialize service with the backend gateway and the state machine."""
        self.gateway = gateway
        self.machine = machine

    # ------------------------------------------------------------------
    # Patient side
    # ------------------------------------------------------------------

    async def list_slots(
        self,
        session: SessionContext,
        doctor_id: int,
        start_date: date | None = None,
        end_date: date | None = None,
        status: SlotStatus | None = None,
    ) -> SlotListResponse:
        """
        List a doctor's slots as the viewer should see them.

        The status filter is applied after presentation so that a lapsed
        hold shows up as FREE.

        Args:
            session: Caller session
            doctor_id: Owning doctor
            start_date: First day (inclusive)
            end_date: Last day (inclusive)
            status: Only return slots in this state

        Returns:
            Presented slots
        """
        _check_range(start_date, end_date)
        params: dict[str, Any] = {"doctor_id": doctor_id}
        if start_date:
            params["start_date"] = start_date.isoformat()
        if end_date:
            params["end_date"] = end_date.isoformat()

        data = await self.gateway.call(session, "/patient/view/slots", params=params)
        now = session.now()
        actor = session.subject

        slots = [self.machine.present(slot, actor, now) for slot in _parse_slots(data)]
        if status is not None:
            slots = [slot for slot in slots if slot.status == status]

        return SlotListResponse(total=len(slots), slots=slots)

    async def hold_slot(
        self,
        session: SessionContext,
        slot_id: int,
        doctor_id: int,
        day: date,
    ) -> HoldResponse:
        """
        Reserve a FREE slot for the caller.

        Raises:
            SlotConflictException: If the slot is not FREE or the backend refuses the hold
        """
        snapshot = await self._find_patient_slot(session, slot_id, doctor_id, day)
        now = session.now()
        held = self.machine.hold(snapshot, session.subject, now)

        data = await self._transition(session, f"/patient/slots/{slot_id}/hold")

        held_until = _parse_datetime((data or {}).get("held_until")) or held.held_until
        slot = held.model_copy(update={"held_until": held_until})
        remaining = max(0, int((held_until - now).total_seconds())) if held_until else 0

        logger.info("slot_held", slot_id=slot_id, held_until=str(held_until))
        return HoldResponse(slot=slot, held_until=held_until, time_remaining_seconds=remaining)

    async def release_slot(
        self,
        session: SessionContext,
        slot_id: int,
        doctor_id: int,
        day: date,
    ) -> Slot:
        """
        Release the caller's hold; a slot that is already FREE is left alone.

        Raises:
            SlotConflictException: If another actor holds the slot or it is booked
        """
        snapshot = await self._find_patient_slot(session, slot_id, doctor_id, day)
        now = session.now()
        released = self.machine.release(snapshot, session.subject, now)

        if self.machine.present(snapshot, session.subject, now).status == SlotStatus.FREE:
            return released

        await self._transition(session, f"/patient/slots/{slot_id}/release")
        logger.info("slot_released", slot_id=slot_id)
        return released

    async def book_slot(
        self,
        session: SessionContext,
        slot_id: int,
        doctor_id: int,
        day: date,
    ) -> AppointmentActionResponse:
        """
        Confirm the caller's hold into an appointment request.

        Raises:
            HoldExpiredException: If the hold lapsed; the caller must hold again
            SlotConflictException: If the caller does not hold the slot
        """
        snapshot = await self._find_patient_slot(session, slot_id, doctor_id, day)
        self.machine.confirm_booking(snapshot, session.subject, session.now())

        data = await self._transition(
            session,
            "/appointments/request",
            params={"slot_id": slot_id},
        )

        logger.info("slot_booked", slot_id=slot_id)
        return AppointmentActionResponse.from_backend(data or {})

    # ------------------------------------------------------------------
    # Doctor side
    # ------------------------------------------------------------------

    async def list_doctor_slots(
        self,
        session: SessionContext,
        start_date: date,
        end_date: date,
    ) -> SlotListResponse:
        """List the calling doctor's own slots."""
        _check_range(start_date, end_date)
        params = {"start_date": start_date.isoformat(), "end_date": end_date.isoformat()}
        data = await self.gateway.call(session, "/doctor/availability/slots", params=params)
        now = session.now()

        slots = [self.machine.present(slot, None, now) for slot in _parse_slots(data)]
        return SlotListResponse(total=len(slots), slots=slots)

    async def block_slot(self, session: SessionContext, slot_id: int, day: date) -> Slot:
        """
        Block one of the calling doctor's FREE slots.

        Raises:
            SlotConflictException: If the slot is held or booked
        """
        snapshot = await self._find_doctor_slot(session, slot_id, day)
        blocked = self.machine.block(snapshot, session.now())

        if snapshot.status != SlotStatus.BLOCKED:
            await self._transition(session, f"/doctor/availability/slots/{slot_id}/block")
        return blocked

    async def unblock_slot(self, session: SessionContext, slot_id: int, day: date) -> Slot:
        """
        Return one of the calling doctor's BLOCKED slots to availability.

        Raises:
            SlotConflictException: If the slot is not blocked
        """
        snapshot = await self._find_doctor_slot(session, slot_id, day)
        freed = self.machine.unblock(snapshot, session.now())

        if snapshot.status == SlotStatus.BLOCKED:
            await self._transition(session, f"/doctor/availability/slots/{slot_id}/unblock")
        return freed

    # ------------------------------------------------------------------
    # Doctor calendar
    # ------------------------------------------------------------------

    async def set_date_off(self, session: SessionContext, day: date) -> Any:
        """
        Block every slot of one future day.

        Raises:
            BadRequestException: If the day is not after today
            SlotConflictException: If the backend refuses because of bookings
        """
        _check_editable(day, session.now())
        data = await self._transition(
            session, "/doctor/calendar/date-off", json_body={"date": day.isoformat()}
        )
        logger.info("calendar_date_off", date=day.isoformat())
        return data

    async def set_recurring_sundays_off(
        self,
        session: SessionContext,
        start_date: date,
        weeks: int,
    ) -> Any:
        """Mark the next ``weeks`` Sundays from ``start_date`` as off."""
        if start_date < session.now().date():
            raise BadRequestException("start_date must not be in the past")
        data = await self._transition(
            session,
            "/doctor/calendar/recurring-sundays-off",
            json_body={"start_date": start_date.isoformat(), "weeks": weeks},
        )
        logger.info("calendar_sundays_off", start_date=start_date.isoformat(), weeks=weeks)
        return data

    async def set_leave_range(
        self,
        session: SessionContext,
        start_date: date,
        end_date: date,
    ) -> Any:
        """Block every slot between two future days, both inclusive."""
        _check_range(start_date, end_date)
        _check_editable(start_date, session.now())
        data = await self._transition(
            session,
            "/doctor/calendar/leave-range",
            json_body={"start_date": start_date.isoformat(), "end_date": end_date.isoformat()},
        )
        logger.info(
            "calendar_leave_range",
            start_date=start_date.isoformat(),
            end_date=end_date.isoformat(),
        )
        return data

    async def create_date_slots(
        self,
        session: SessionContext,
        day: date,
        start_time: time,
        end_time: time,
    ) -> Any:
        """
        Open new FREE slots on a future day.

        The backend cuts the window into slots of its configured length.
        """
        if start_time >= end_time:
            raise BadRequestException("start_time must be before end_time")
        _check_editable(day, session.now())
        data = await self._transition(
            session,
            "/doctor/availability/date-slots/create",
            json_body={
                "date": day.isoformat(),
                "start_time": start_time.strftime("%H:%M"),
                "end_time": end_time.strftime("%H:%M"),
            },
        )
        logger.info("calendar_slots_created", date=day.isoformat())
        return data

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _find_patient_slot(
        self,
        session: SessionContext,
        slot_id: int,
        doctor_id: int,
        day: date,
    ) -> Slot:
        data = await self.gateway.call(
            session,
            "/patient/view/slots",
            params={
                "doctor_id": doctor_id,
                "start_date": day.isoformat(),
                "end_date": day.isoformat(),
            },
        )
        return _pick(_parse_slots(data), slot_id)

    async def _find_doctor_slot(self, session: SessionContext, slot_id: int, day: date) -> Slot:
        data = await self.gateway.call(
            session,
            "/doctor/availability/slots",
            params={"start_date": day.isoformat(), "end_date": day.isoformat()},
        )
        return _pick(_parse_slots(data), slot_id)

    async def _transition(
        self,
        session: SessionContext,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_body: dict[str, Any] | None = None,
    ) -> Any:
        """Issue a slot-affecting call exactly once; rejections are never retried."""
        try:
            return await self.gateway.call(
                session, endpoint, method="POST", params=params, json_body=json_body
            )
        except BackendRejectedException as e:
            translated = translate_slot_rejection(e)
            if isinstance(translated, SlotConflictException):
                logger.info("slot_conflict", endpoint=endpoint, detail=e.message)
            elif isinstance(translated, HoldExpiredException):
                logger.info("slot_hold_expired", endpoint=endpoint, detail=e.message)
            raise translated from e


def translate_slot_rejection(exc: BackendRejectedException) -> AppException:
    """
    Map a backend rejection of a slot operation onto the slot error taxonomy.

    Args:
        exc: Backend rejection

    Returns:
        SlotConflictException, HoldExpiredException, or the original exception
    """
    detail = exc.message.lower()
    if exc.status_code == 410 or "expired" in detail:
        return HoldExpiredException(exc.message)
    if exc.status_code == 409 or any(phrase in detail for phrase in _CONFLICT_PHRASES):
        return SlotConflictException(exc.message)
    return exc


def _parse_slots(data: Any) -> list[Slot]:
    if isinstance(data, dict):
        data = data.get("slots") or []
    if not isinstance(data, list):
        return []
    try:
        return [Slot.model_validate(item) for item in data]
    except ValidationError as e:
        raise TransientBackendException("Malformed slot data from backend API") from e


def _check_range(start_date: date | None, end_date: date | None) -> None:
    if start_date and end_date and start_date > end_date:
        raise BadRequestException("start_date must not be after end_date")


def _check_editable(day: date, now: datetime) -> None:
    if day < now.date() + timedelta(days=1):
        raise BadRequestException("Only dates from tomorrow onwards can be changed")


def _pick(slots: list[Slot], slot_id: int) -> Slot:
    for slot in slots:
        if slot.id == slot_id:
            return slot
    raise NotFoundException("Slot not found")


def _parse_datetime(value: Any) -> datetime | None:
    if not isinstance(value, str) or not value:
        return None
    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=UTC)
    return parsed
