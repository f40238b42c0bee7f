"""Appointment service: role-scoped listings and lifecycle actions."""

from collections.abc import Mapping
from typing import Any

import structlog
from pydantic import ValidationError

from app.core.exceptions import TransientBackendException
from app.core.session import SessionContext
from app.schemas.appointments import (
    AppointmentActionResponse,
    AppointmentListResponse,
    Role,
)
from app.services.gateway import BackendGateway

logger = structlog.get_logger()

LISTING_ENDPOINTS = {
    Role.DOCTOR: "/appointments/doctor-appointments",
    Role.PATIENT: "/appointments/my-appointments",
}


class AppointmentService:
    """Service for appointments, backed by the authenticated gateway."""

    def __init__(self, gateway: BackendGateway):
        """Initialize service with the backend gateway."""
        self.gateway = gateway

    async def list_raw(
        self,
        session: SessionContext,
        role: Role,
        params: Mapping[str, Any] | list[tuple[str, Any]] | None = None,
    ) -> Any:
        """
        Fetch a role-scoped listing, forwarding query parameters untouched.

        Args:
            session: Caller session
            role: Whose listing to read
            params: Query parameters from the inbound request

        Returns:
            Backend body as-is
        """
        return await self.gateway.call(session, LISTING_ENDPOINTS[role], params=params)

    async def list_appointments(
        self,
        session: SessionContext,
        role: Role,
        params: Mapping[str, Any] | list[tuple[str, Any]] | None = None,
    ) -> AppointmentListResponse:
        """
        Fetch and parse a role-scoped listing.

        Raises:
            TransientBackendException: If the backend body is not a listing
        """
        data = await self.list_raw(session, role, params)
        try:
            if isinstance(data, list):
                return AppointmentListResponse(total=len(data), appointments=data)
            return AppointmentListResponse.model_validate(data or {})
        except ValidationError as e:
            logger.error("appointment_listing_malformed", role=role.value, error=str(e))
            raise TransientBackendException("Malformed appointment data from backend API") from e

    async def approve(
        self,
        session: SessionContext,
        appointment_id: int,
        token: str | None = None,
    ) -> AppointmentActionResponse:
        """Doctor approves a pending appointment."""
        params = {"token": token} if token else None
        data = await self.gateway.call(
            session,
            f"/appointments/{appointment_id}/approve",
            method="POST",
            params=params,
        )
        logger.info("appointment_approved", appointment_id=appointment_id)
        return AppointmentActionResponse.from_backend(
            data or {"appointment_id": appointment_id, "status": "CONFIRMED"}
        )

    async def reject(
        self,
        session: SessionContext,
        appointment_id: int,
        reason: str,
        token: str | None = None,
    ) -> AppointmentActionResponse:
        """Doctor rejects a pending appointment with a reason."""
        params = {"token": token} if token else None
        data = await self.gateway.call(
            session,
            f"/appointments/{appointment_id}/reject",
            method="POST",
            params=params,
            json_body={"reason": reason},
        )
        logger.info("appointment_rejected", appointment_id=appointment_id)
        return AppointmentActionResponse.from_backend(
            data or {"appointment_id": appointment_id, "status": "REJECTED", "reason": reason}
        )

    async def cancel(
        self,
        session: SessionContext,
        appointment_id: int,
    ) -> AppointmentActionResponse:
        """Patient cancels their appointment; the backend frees the slot."""
        data = await self.gateway.call(
            session,
            f"/appointments/{appointment_id}/cancel-patient",
            method="POST",
        )
        logger.info("appointment_cancelled", appointment_id=appointment_id)
        return AppointmentActionResponse.from_backend(
            data or {"appointment_id": appointment_id, "status": "CANCELLED"}
        )
