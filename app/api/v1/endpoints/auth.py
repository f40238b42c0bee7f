"""Session and password reset endpoints."""

from fastapi import APIRouter, Response, status

from app.core.exceptions import TransientBackendException
from app.core.security import clear_session_cookies
from app.dependencies import AuthServiceDep, Resolution
from app.schemas.auth import (
    ForgotPasswordRequest,
    PasswordResetResponse,
    ResetPasswordRequest,
    ResolutionStatus,
    SessionResponse,
    TokenValidationResponse,
    ValidateResetTokenRequest,
)

router = APIRouter()


@router.get(
    "/session",
    response_model=SessionResponse,
    status_code=status.HTTP_200_OK,
    summary="Resolve the current session",
)
async def get_session_status(resolution: Resolution) -> SessionResponse:
    """
    Report whether the browser holds a usable session.

    A missing access token is refreshed once; the new token comes back as a
    cookie on this response.

    Raises:
        TransientBackendException: If the refresh call could not reach the backend
    """
    if resolution.status == ResolutionStatus.TRANSIENT_ERROR:
        raise TransientBackendException(resolution.error or "Backend API unavailable")

    return SessionResponse(
        authenticated=resolution.is_authenticated,
        refreshed=resolution.refreshed,
    )


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT, summary="Clear session cookies")
async def logout() -> Response:
    """Drop the access and refresh cookies."""
    response = Response(status_code=status.HTTP_204_NO_CONTENT)
    clear_session_cookies(response)
    return response


@router.post(
    "/forgot-password",
    response_model=PasswordResetResponse,
    status_code=status.HTTP_200_OK,
    summary="Request a password reset email",
)
async def forgot_password(
    data: ForgotPasswordRequest,
    auth_service: AuthServiceDep,
) -> PasswordResetResponse:
    """Ask the backend to email a reset link."""
    return await auth_service.request_password_reset(data.email)


@router.post(
    "/validate-reset-token",
    response_model=TokenValidationResponse,
    status_code=status.HTTP_200_OK,
    summary="Validate a password reset token",
)
async def validate_reset_token(
    data: ValidateResetTokenRequest,
    auth_service: AuthServiceDep,
) -> TokenValidationResponse:
    """Check that a reset token is still usable."""
    return await auth_service.validate_reset_token(data.token)


@router.post(
    "/reset-password",
    response_model=PasswordResetResponse,
    status_code=status.HTTP_200_OK,
    summary="Reset password",
)
async def reset_password(
    data: ResetPasswordRequest,
    auth_service: AuthServiceDep,
) -> PasswordResetResponse:
    """
    Set a new password.

    Args:
        data: Reset token and new password (at least 8 characters)
        auth_service: Auth service

    Returns:
        Backend acknowledgement
    """
    return await auth_service.reset_password(data.token, data.new_password)
