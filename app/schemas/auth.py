"""Authentication and password reset schemas."""

from enum import Enum

from pydantic import BaseModel, EmailStr, Field


class ResolutionStatus(str, Enum):
    """Outcome of a token resolution."""

    AUTHENTICATED = "authenticated"
    UNAUTHENTICATED = "unauthenticated"
    TRANSIENT_ERROR = "transient_error"


class TokenResolution(BaseModel):
    """Result of resolving a usable access token for a session."""

    status: ResolutionStatus
    access_token: str | None = None
    refreshed: bool = False
    error: str | None = None

    @property
    def is_authenticated(self) -> bool:
        """Whether a usable access token was produced."""
        return self.status == ResolutionStatus.AUTHENTICATED


class RefreshResponse(BaseModel):
    """Body returned by the backend refresh endpoint."""

    access_token: str = Field(..., min_length=1)


class SessionResponse(BaseModel):
    """Session status reported to the browser."""

    authenticated: bool
    refreshed: bool = False


class ForgotPasswordRequest(BaseModel):
    """Password reset request."""

    email: EmailStr


class ValidateResetTokenRequest(BaseModel):
    """Reset token validation request."""

    token: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    """Password reset with a reset token."""

    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=8, description="At least 8 characters")


class PasswordResetResponse(BaseModel):
    """Backend acknowledgement of a password reset step."""

    message: str
    success: bool = True


class TokenValidationResponse(BaseModel):
    """Backend answer for a valid reset token."""

    message: str
    expires_at: str | None = None
