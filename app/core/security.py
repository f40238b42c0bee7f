"""Session cookie and token claim helpers."""

from typing import Any

from fastapi import Response
from jose import JWTError, jwt

from app.config import settings

ACCESS_TOKEN_COOKIE = "access_token"
REFRESH_TOKEN_COOKIE = "refresh_token"
DEVICE_ID_COOKIE = "device_id"


def set_access_token_cookie(response: Response, access_token: str) -> None:
    """
    Persist a freshly minted access token on the outgoing response.

    Args:
        response: Response to attach the cookie to
        access_token: Token returned by the refresh endpoint
    """
    response.set_cookie(
        key=ACCESS_TOKEN_COOKIE,
        value=access_token,
        max_age=settings.access_token_cookie_max_age,
        path="/",
        secure=settings.is_production,
        httponly=True,
        samesite="lax",
    )


def clear_session_cookies(response: Response) -> None:
    """Remove both session cookies from the browser."""
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(
            key=name,
            path="/",
            secure=settings.is_production,
            httponly=True,
            samesite="lax",
        )


def get_unverified_claims(token: str) -> dict[str, Any] | None:
    """
    Read the claims of a JWT access token without verifying it.

    The backend owns the signing key; claims are only used to identify the
    viewer, never to authorize anything.

    Args:
        token: Access token

    Returns:
        Claims or None if the token is not a JWT
    """
    try:
        return jwt.get_unverified_claims(token)
    except JWTError:
        return None


def get_token_subject(token: str) -> str | None:
    """Extract the subject claim of an access token as a string."""
    claims = get_unverified_claims(token)
    if not claims:
        return None

    subject = claims.get("sub")
    if subject is None:
        return None
    return str(subject)
