"""Password reset flows, proxied to the backend without credentials."""

from typing import Any, TypeVar

import structlog
from pydantic import BaseModel, ValidationError

from app.core.exceptions import TransientBackendException
from app.schemas.auth import PasswordResetResponse, TokenValidationResponse
from app.services.gateway import BackendGateway

logger = structlog.get_logger()

ResponseModel = TypeVar("ResponseModel", bound=BaseModel)


class AuthService:
    """Authentication flows that sit in front of the backend API."""

    def __init__(self, gateway: BackendGateway):
        """Initialize auth service with the backend gateway."""
        self.gateway = gateway

    async def request_password_reset(self, email: str) -> PasswordResetResponse:
        """
        Ask the backend to email a password reset link.

        Args:
            email: Account email

        Returns:
            Backend acknowledgement

        Raises:
            TransientBackendException: If the acknowledgement is unreadable
        """
        data = await self.gateway.call_public(
            "/auth/forgot-password",
            method="POST",
            json_body={"email": email},
        )
        logger.info("password_reset_requested")
        return _parse(PasswordResetResponse, data or {"message": "Reset email sent"})

    async def validate_reset_token(self, token: str) -> TokenValidationResponse:
        """
        Check a reset token before the new password form is shown.

        The backend rejects tokens older than 15 minutes or already used.
        """
        data = await self.gateway.call_public(
            "/auth/validate-reset-token",
            method="POST",
            params={"token": token},
        )
        return _parse(TokenValidationResponse, data or {"message": "Token is valid"})

    async def reset_password(self, token: str, new_password: str) -> PasswordResetResponse:
        """Set a new password with a single-use reset token."""
        data = await self.gateway.call_public(
            "/auth/reset-password",
            method="POST",
            json_body={"token": token, "new_password": new_password},
        )
        logger.info("password_reset_completed")
        return _parse(PasswordResetResponse, data or {"message": "Password reset"})


def _parse(model: type[ResponseModel], data: Any) -> ResponseModel:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        logger.error("auth_response_malformed", model=model.__name__, error=str(e))
        raise TransientBackendException("Malformed response from backend API") from e
