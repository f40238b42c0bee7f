"""Tests for the slot state machine."""

from datetime import UTC, date, datetime, time, timedelta

import pytest

from app.core.exceptions import HoldExpiredException, SlotConflictException
from app.schemas.slots import Slot, SlotStatus
from app.services.slot_state_machine import SlotStateMachine

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)


@pytest.fixture
def machine() -> SlotStateMachine:
    return SlotStateMachine(timedelta(minutes=5))


def make_slot(status: SlotStatus = SlotStatus.FREE, **fields) -> Slot:
    return Slot(
        id=1,
        doctor_id=3,
        date=date(2026, 3, 2),
        start_time=time(10, 0),
        end_time=time(10, 15),
        status=status,
        **fields,
    )


def test_hold_free_slot(machine: SlotStateMachine):
    """Patient A holds a FREE slot for five minutes."""
    held = machine.hold(make_slot(), "A", NOW)

    assert held.status == SlotStatus.HELD
    assert held.held_until == NOW + timedelta(minutes=5)
    assert held.held_by == "A"
    assert held.held_by_current_user is True


def test_second_patient_cannot_hold_before_expiry(machine: SlotStateMachine):
    """Patient B gets a conflict while A's hold is still running."""
    held = machine.hold(make_slot(), "A", NOW)

    with pytest.raises(SlotConflictException) as exc_info:
        machine.hold(held, "B", NOW + timedelta(minutes=2))

    assert exc_info.value.status_code == 409


def test_expired_hold_can_be_taken_by_someone_else(machine: SlotStateMachine):
    """Once held_until passes the slot counts as FREE again."""
    held = machine.hold(make_slot(), "A", NOW)

    taken = machine.hold(held, "B", NOW + timedelta(minutes=6))

    assert taken.held_by == "B"
    assert taken.held_until == NOW + timedelta(minutes=11)


@pytest.mark.parametrize("status", [SlotStatus.BOOKED, SlotStatus.BLOCKED])
def test_hold_requires_free_slot(machine: SlotStateMachine, status: SlotStatus):
    with pytest.raises(SlotConflictException):
        machine.hold(make_slot(status), "A", NOW)


def test_present_shows_lapsed_hold_as_free(machine: SlotStateMachine):
    """A hold past held_until is presented FREE without waiting for the backend."""
    slot = make_slot(SlotStatus.HELD, held_until=NOW - timedelta(seconds=1), held_by=7)

    presented = machine.present(slot, "7", NOW)

    assert presented.status == SlotStatus.FREE
    assert presented.held_until is None
    assert presented.held_by is None
    assert presented.held_by_current_user is False


def test_present_flags_own_hold(machine: SlotStateMachine):
    slot = make_slot(SlotStatus.HELD, held_until=NOW + timedelta(minutes=3), held_by=7)

    assert machine.present(slot, "7", NOW).held_by_current_user is True
    assert machine.present(slot, "8", NOW).held_by_current_user is False


def test_present_trusts_backend_flag_without_holder(machine: SlotStateMachine):
    """Without held_by the backend's own held_by_current_user flag decides."""
    slot = make_slot(
        SlotStatus.HELD,
        held_until=NOW + timedelta(minutes=3),
        held_by_current_user=True,
    )

    assert machine.present(slot, None, NOW).held_by_current_user is True


def test_release_free_slot_is_noop(machine: SlotStateMachine):
    """Releasing an already FREE slot succeeds and changes nothing."""
    slot = make_slot()

    released = machine.release(slot, "A", NOW)

    assert released.status == SlotStatus.FREE
    assert released == machine.release(released, "A", NOW)


def test_release_own_hold(machine: SlotStateMachine):
    held = machine.hold(make_slot(), "A", NOW)

    released = machine.release(held, "A", NOW + timedelta(minutes=1))

    assert released.status == SlotStatus.FREE
    assert released.held_by is None


def test_release_someone_elses_hold_conflicts(machine: SlotStateMachine):
    held = machine.hold(make_slot(), "A", NOW)

    with pytest.raises(SlotConflictException):
        machine.release(held, "B", NOW + timedelta(minutes=1))


def test_confirm_booking_of_own_live_hold(machine: SlotStateMachine):
    held = machine.hold(make_slot(), "A", NOW)

    booked = machine.confirm_booking(held, "A", NOW + timedelta(minutes=4))

    assert booked.status == SlotStatus.BOOKED
    assert booked.held_until is None


def test_confirm_booking_after_expiry_is_expired(machine: SlotStateMachine):
    """A's hold lapsed: booking it is Expired, never a silent success."""
    slot = make_slot(SlotStatus.HELD, held_until=NOW - timedelta(minutes=1), held_by="A")

    with pytest.raises(HoldExpiredException) as exc_info:
        machine.confirm_booking(slot, "A", NOW)

    assert exc_info.value.status_code == 410


def test_confirm_booking_at_exact_expiry_is_expired(machine: SlotStateMachine):
    """now must be strictly before held_until."""
    held = machine.hold(make_slot(), "A", NOW)

    with pytest.raises(HoldExpiredException):
        machine.confirm_booking(held, "A", held.held_until)

    booked = machine.confirm_booking(held, "A", held.held_until - timedelta(microseconds=1))
    assert booked.status == SlotStatus.BOOKED


def test_confirm_booking_of_free_slot_is_expired(machine: SlotStateMachine):
    """Booking without a hold sends the caller back to holding the slot."""
    with pytest.raises(HoldExpiredException):
        machine.confirm_booking(make_slot(), "A", NOW)


def test_confirm_booking_of_someone_elses_hold_conflicts(machine: SlotStateMachine):
    held = machine.hold(make_slot(), "A", NOW)

    with pytest.raises(SlotConflictException):
        machine.confirm_booking(held, "B", NOW + timedelta(minutes=1))


def test_confirm_booking_of_booked_slot_conflicts(machine: SlotStateMachine):
    with pytest.raises(SlotConflictException):
        machine.confirm_booking(make_slot(SlotStatus.BOOKED), "A", NOW)


def test_block_and_unblock(machine: SlotStateMachine):
    blocked = machine.block(make_slot(), NOW)
    assert blocked.status == SlotStatus.BLOCKED

    # Blocking twice is harmless
    assert machine.block(blocked, NOW).status == SlotStatus.BLOCKED

    freed = machine.unblock(blocked, NOW)
    assert freed.status == SlotStatus.FREE
    assert machine.unblock(freed, NOW).status == SlotStatus.FREE


def test_block_held_or_booked_slot_conflicts(machine: SlotStateMachine):
    held = machine.hold(make_slot(), "A", NOW)

    with pytest.raises(SlotConflictException):
        machine.block(held, NOW)
    with pytest.raises(SlotConflictException):
        machine.block(make_slot(SlotStatus.BOOKED), NOW)


def test_block_lapsed_hold(machine: SlotStateMachine):
    """A lapsed hold no longer stands in the way of blocking."""
    slot = make_slot(SlotStatus.HELD, held_until=NOW - timedelta(minutes=1), held_by="A")

    assert machine.block(slot, NOW).status == SlotStatus.BLOCKED


def test_unblock_booked_slot_conflicts(machine: SlotStateMachine):
    with pytest.raises(SlotConflictException):
        machine.unblock(make_slot(SlotStatus.BOOKED), NOW)


def test_cancel_booking_frees_slot(machine: SlotStateMachine):
    freed = machine.cancel_booking(make_slot(SlotStatus.BOOKED))

    assert freed.status == SlotStatus.FREE
    with pytest.raises(SlotConflictException):
        machine.cancel_booking(freed)
