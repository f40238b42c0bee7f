"""Profile service."""

from typing import Any

from pydantic import BaseModel

from app.core.session import SessionContext
from app.schemas.appointments import Role
from app.services.gateway import BackendGateway


class ProfileService:
    """Read and update the caller's doctor or patient profile."""

    def __init__(self, gateway: BackendGateway):
        """Initialize service with the backend gateway."""
        self.gateway = gateway

    async def get_profile(self, session: SessionContext, role: Role) -> Any:
        """Get the caller's profile for ``role``."""
        return await self.gateway.call(session, f"/profile/{role.value}")

    async def update_profile(self, session: SessionContext, role: Role, updates: BaseModel) -> Any:
        """
        Update the caller's profile; only fields that were sent are forwarded.

        Args:
            session: Caller session
            role: Profile kind
            updates: Validated update payload

        Returns:
            Updated profile
        """
        return await self.gateway.call(
            session,
            f"/profile/{role.value}",
            method="PATCH",
            json_body=updates.model_dump(mode="json", exclude_unset=True),
        )
