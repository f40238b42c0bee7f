"""Appointment notification tracking."""

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import datetime

import structlog

from app.core.exceptions import UnauthorizedException
from app.core.redis_client import CacheManager
from app.core.session import SessionContext
from app.schemas.appointments import Appointment, AppointmentStatus, Role
from app.schemas.notifications import NotificationStatus, NotificationSummary
from app.services.appointment_service import AppointmentService

logger = structlog.get_logger()

# Largest page the backend serves; notifications look at the most recent page only.
NOTIFICATION_PAGE_SIZE = 100


@dataclass(frozen=True)
class RolePolicy:
    """Which appointment states deserve attention from a role."""

    new_statuses: frozenset[AppointmentStatus]
    updated_statuses: frozenset[AppointmentStatus]


ROLE_POLICIES: dict[Role, RolePolicy] = {
    Role.DOCTOR: RolePolicy(
        new_statuses=frozenset({AppointmentStatus.PENDING}),
        updated_statuses=frozenset(
            {
                AppointmentStatus.REJECTED,
                AppointmentStatus.CANCELLED,
                AppointmentStatus.COMPLETED,
            }
        ),
    ),
    Role.PATIENT: RolePolicy(
        new_statuses=frozenset(),
        updated_statuses=frozenset(
            {
                AppointmentStatus.CONFIRMED,
                AppointmentStatus.REJECTED,
                AppointmentStatus.CANCELLED,
                AppointmentStatus.COMPLETED,
            }
        ),
    ),
}

STATUS_LABELS = {
    AppointmentStatus.PENDING: "pending approval",
    AppointmentStatus.CONFIRMED: "confirmed",
    AppointmentStatus.REJECTED: "rejected",
    AppointmentStatus.CANCELLED: "cancelled",
    AppointmentStatus.COMPLETED: "completed",
}


def default_list_key(role: Role) -> str:
    """Path of the appointment list a role's notifications point to."""
    return f"/{role.value}/appointments"


def _changed_since(timestamp: datetime | None, last_seen_at: datetime | None) -> bool:
    if timestamp is None:
        return False
    return last_seen_at is None or timestamp > last_seen_at


class NotificationTracker:
    """Derive a role's notification status from fetched appointments."""

    @staticmethod
    def new_appointments(
        role: Role,
        appointments: Iterable[Appointment],
        last_seen_at: datetime | None,
    ) -> list[Appointment]:
        """Actionable appointments created after the last visit."""
        policy = ROLE_POLICIES[role]
        return [
            a
            for a in appointments
            if a.status in policy.new_statuses and _changed_since(a.created_at, last_seen_at)
        ]

    @staticmethod
    def updated_appointments(
        role: Role,
        appointments: Iterable[Appointment],
        last_seen_at: datetime | None,
    ) -> list[Appointment]:
        """Appointments that moved into a state the role cares about after the last visit."""
        policy = ROLE_POLICIES[role]
        return [
            a
            for a in appointments
            if a.status in policy.updated_statuses
            and _changed_since(a.updated_at or a.created_at, last_seen_at)
        ]

    def status(
        self,
        role: Role,
        appointments: Iterable[Appointment],
        last_seen_at: datetime | None,
    ) -> NotificationStatus:
        """
        Compute the notification status of a role.

        Args:
            role: Viewer role
            appointments: Appointments already fetched for that role
            last_seen_at: When the role's list was last viewed, None if never

        Returns:
            NEW, UPDATED or NONE
        """
        appointments = list(appointments)
        if self.new_appointments(role, appointments, last_seen_at):
            return NotificationStatus.NEW
        if self.updated_appointments(role, appointments, last_seen_at):
            return NotificationStatus.UPDATED
        return NotificationStatus.NONE

    def summarize(
        self,
        role: Role,
        appointments: Iterable[Appointment],
        last_seen_at: datetime | None,
    ) -> NotificationSummary:
        """Status plus per-state counts and a short message."""
        appointments = list(appointments)
        status = self.status(role, appointments, last_seen_at)

        if status == NotificationStatus.NEW:
            changed = self.new_appointments(role, appointments, last_seen_at)
        elif status == NotificationStatus.UPDATED:
            changed = self.updated_appointments(role, appointments, last_seen_at)
        else:
            changed = []

        counts = Counter(a.status for a in changed)
        parts = [
            f"{count} appointment{'s' if count > 1 else ''} {STATUS_LABELS[state]}"
            for state, count in sorted(counts.items(), key=lambda item: item[0].value)
        ]

        return NotificationSummary(
            role=role,
            status=status,
            counts={state.value: count for state, count in counts.items()},
            message=", ".join(parts),
            last_seen_at=last_seen_at,
        )


class NotificationMarkerStore:
    """
    Last-seen markers per viewer, role and list, kept in Redis.

    Markers are per session subject, not server-confirmed read receipts:
    two tabs or devices of the same viewer race on them.
    """

    def __init__(self, cache: CacheManager, ttl_seconds: int):
        """Initialize store with cache manager and marker lifetime."""
        self.cache = cache
        self.ttl = ttl_seconds

    @staticmethod
    def _seen_key(subject: str, role: Role, list_key: str) -> str:
        return f"notifications:seen:{subject}:{role.value}:{list_key}"

    @staticmethod
    def _view_key(subject: str, role: Role) -> str:
        return f"notifications:view:{subject}:{role.value}"

    def get_last_seen(self, subject: str, role: Role, list_key: str) -> datetime | None:
        """When the viewer last looked at the list, None if never."""
        value = self.cache.get(self._seen_key(subject, role, list_key))
        if not value:
            return None
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            return None

    def mark_seen(self, subject: str, role: Role, list_key: str, now: datetime) -> datetime:
        """Set the list's last_seen_at to ``now``."""
        self.cache.set(self._seen_key(subject, role, list_key), now.isoformat(), ttl=self.ttl)
        logger.info("notifications_marked_seen", role=role.value, list_key=list_key)
        return now

    def record_view(
        self,
        subject: str,
        role: Role,
        list_key: str,
        current_path: str,
        now: datetime,
    ) -> datetime | None:
        """
        Record where the viewer is and mark the list seen on arrival.

        The list is marked only when the viewer moves onto it; reporting the
        same view again while staying on it does nothing.

        Args:
            subject: Viewer identity
            role: Viewer role
            list_key: Path of the appointment list
            current_path: Path the viewer is on now
            now: Current time

        Returns:
            The new last_seen_at if the list was marked, None otherwise
        """
        view_key = self._view_key(subject, role)
        previous_path = self.cache.get(view_key)
        self.cache.set(view_key, current_path, ttl=self.ttl)

        if current_path != list_key or previous_path == list_key:
            return None
        return self.mark_seen(subject, role, list_key, now)


class NotificationService:
    """Notification status of the calling session."""

    def __init__(
        self,
        appointments: AppointmentService,
        store: NotificationMarkerStore,
        tracker: NotificationTracker | None = None,
    ):
        """Initialize service with appointment source, marker store and tracker."""
        self.appointments = appointments
        self.store = store
        self.tracker = tracker or NotificationTracker()

    async def get_summary(
        self,
        session: SessionContext,
        role: Role,
        list_key: str | None = None,
    ) -> NotificationSummary:
        """
        Fetch the role's appointments and compare them with the last visit.

        Args:
            session: Caller session
            role: Viewer role
            list_key: Appointment list path, defaults to the role's list

        Returns:
            Notification summary
        """
        list_key = list_key or default_list_key(role)
        listing = await self.appointments.list_appointments(
            session,
            role,
            {"page": 1, "page_size": NOTIFICATION_PAGE_SIZE},
        )

        unknown = {
            a.status for a in listing.appointments if not isinstance(a.status, AppointmentStatus)
        }
        if unknown:
            logger.warning("unknown_appointment_status", role=role.value, statuses=sorted(unknown))

        subject = session.subject
        last_seen_at = self.store.get_last_seen(subject, role, list_key) if subject else None
        return self.tracker.summarize(role, listing.appointments, last_seen_at)

    def record_view(
        self,
        session: SessionContext,
        role: Role,
        current_path: str,
        list_key: str | None = None,
    ) -> datetime | None:
        """
        Mark the role's list seen if the viewer just arrived on it.

        Raises:
            UnauthorizedException: If the viewer cannot be identified
        """
        subject = session.subject
        if not subject:
            raise UnauthorizedException("Unauthorized - Unknown viewer")

        return self.store.record_view(
            subject,
            role,
            list_key or default_list_key(role),
            current_path,
            session.now(),
        )

