"""Slot availability state machine."""

from datetime import datetime, timedelta

from app.core.exceptions import HoldExpiredException, SlotConflictException
from app.schemas.slots import Slot, SlotStatus


class SlotStateMachine:
    """
    Transitions of a slot between FREE, HELD, BOOKED and BLOCKED.

    Every transition is evaluated against the slot as presented at ``now``:
    a hold whose ``held_until`` has passed counts as FREE even if the backend
    has not persisted the expiry yet. Exclusivity itself is enforced by the
    backend; this class only decides what a caller may attempt and how the
    result is presented.
    """

    def __init__(self, hold_duration: timedelta):
        """Initialize with the fixed hold duration."""
        self.hold_duration = hold_duration

    @staticmethod
    def is_hold_expired(slot: Slot, now: datetime) -> bool:
        """Whether a HELD slot's reservation has lapsed."""
        return (
            slot.status == SlotStatus.HELD
            and slot.held_until is not None
            and slot.held_until <= now
        )

    @staticmethod
    def is_holder(slot: Slot, actor: str | None) -> bool:
        """Whether ``actor`` holds the slot."""
        if slot.status != SlotStatus.HELD:
            return False
        if slot.held_by is not None:
            return actor is not None and str(slot.held_by) == actor
        return slot.held_by_current_user

    def present(self, slot: Slot, actor: str | None, now: datetime) -> Slot:
        """
        Slot as it should be shown to ``actor`` at ``now``.

        Args:
            slot: Slot as stored by the backend
            actor: Viewer identity
            now: Evaluation time

        Returns:
            Slot with lapsed holds shown as FREE and held_by_current_user derived
        """
        if self.is_hold_expired(slot, now):
            return _freed(slot)

        return slot.model_copy(update={"held_by_current_user": self.is_holder(slot, actor)})

    def hold(self, slot: Slot, actor: str | None, now: datetime) -> Slot:
        """
        Reserve a FREE slot for ``actor``.

        Raises:
            SlotConflictException: If the slot is not FREE
        """
        current = self.present(slot, actor, now)
        if current.status != SlotStatus.FREE:
            raise SlotConflictException(_conflict_message(current))

        return current.model_copy(
            update={
                "status": SlotStatus.HELD,
                "held_until": now + self.hold_duration,
                "held_by": actor,
                "held_by_current_user": True,
            }
        )

    def release(self, slot: Slot, actor: str | None, now: datetime) -> Slot:
        """
        Give up a hold. Releasing a slot that is already FREE is a no-op.

        Raises:
            SlotConflictException: If someone else holds it, or it is booked or blocked
        """
        current = self.present(slot, actor, now)
        if current.status == SlotStatus.FREE:
            return current
        if current.status == SlotStatus.HELD and current.held_by_current_user:
            return _freed(current)

        raise SlotConflictException(_conflict_message(current))

    def confirm_booking(self, slot: Slot, actor: str | None, now: datetime) -> Slot:
        """
        Turn the actor's hold into a booking.

        Raises:
            HoldExpiredException: If the actor's hold lapsed before ``now``
            SlotConflictException: If the actor does not hold the slot
        """
        if self.is_hold_expired(slot, now) and self.is_holder(slot, actor):
            raise HoldExpiredException("Slot hold has expired, please select the slot again")

        current = self.present(slot, actor, now)
        if current.status == SlotStatus.FREE:
            raise HoldExpiredException("Slot is not held, please select the slot again")
        if current.status != SlotStatus.HELD or not current.held_by_current_user:
            raise SlotConflictException(_conflict_message(current))

        return current.model_copy(update={"status": SlotStatus.BOOKED, "held_until": None})

    def block(self, slot: Slot, now: datetime) -> Slot:
        """
        Take a FREE slot out of availability.

        Raises:
            SlotConflictException: If the slot is not FREE
        """
        current = self.present(slot, None, now)
        if current.status == SlotStatus.BLOCKED:
            return current
        if current.status != SlotStatus.FREE:
            raise SlotConflictException(_conflict_message(current))

        return current.model_copy(update={"status": SlotStatus.BLOCKED})

    def unblock(self, slot: Slot, now: datetime) -> Slot:
        """
        Return a BLOCKED slot to availability.

        Raises:
            SlotConflictException: If the slot is not BLOCKED
        """
        current = self.present(slot, None, now)
        if current.status == SlotStatus.FREE:
            return current
        if current.status != SlotStatus.BLOCKED:
            raise SlotConflictException(_conflict_message(current))

        return current.model_copy(update={"status": SlotStatus.FREE})

    def cancel_booking(self, slot: Slot) -> Slot:
        """
        Free a BOOKED slot after its appointment was cancelled.

        Raises:
            SlotConflictException: If the slot is not BOOKED
        """
        if slot.status != SlotStatus.BOOKED:
            raise SlotConflictException(_conflict_message(slot))
        return _freed(slot)


def _freed(slot: Slot) -> Slot:
    return slot.model_copy(
        update={
            "status": SlotStatus.FREE,
            "held_until": None,
            "held_by": None,
            "held_by_current_user": False,
        }
    )


def _conflict_message(slot: Slot) -> str:
    if slot.status == SlotStatus.HELD:
        return "This slot is currently held by someone else. Please select another slot."
    if slot.status == SlotStatus.BOOKED:
        return "This slot was just booked by someone else. Please select another slot."
    if slot.status == SlotStatus.BLOCKED:
        return "This slot is not available. Please select another slot."
    return "This slot is free and not held."
