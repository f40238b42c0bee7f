"""Doctor search and lookup service."""

from typing import Any

from app.core.session import SessionContext
from app.schemas.doctors import DoctorSearchParams
from app.services.gateway import BackendGateway


class DoctorService:
    """Service for the doctor directory."""

    def __init__(self, gateway: BackendGateway):
        """Initialize service with the backend gateway."""
        self.gateway = gateway

    async def search(self, session: SessionContext, params: DoctorSearchParams) -> Any:
        """
        Search doctors by name, address and speciality.

        Args:
            session: Caller session
            params: Pagination, sorting and filters

        Returns:
            Backend search result
        """
        return await self.gateway.call(session, "/doctors", params=params.to_query())

    async def get_doctor(self, session: SessionContext, doctor_id: int) -> Any:
        """Public profile of one doctor, shown on the booking form."""
        return await self.gateway.call(session, f"/doctors/{doctor_id}")
