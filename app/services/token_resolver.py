"""Access token resolution from session cookies."""

import httpx
import structlog
from pydantic import ValidationError

from app.core.security import REFRESH_TOKEN_COOKIE
from app.core.session import SessionContext
from app.schemas.auth import RefreshResponse, ResolutionStatus, TokenResolution

logger = structlog.get_logger()

REFRESH_ENDPOINT = "/auth/refresh"


class TokenResolver:
    """Produce a usable access token for a session, refreshing at most once."""

    def __init__(self, client: httpx.AsyncClient):
        """Initialize resolver with the backend HTTP client."""
        self.client = client

    async def resolve(self, session: SessionContext) -> TokenResolution:
        """
        Resolve a valid access token for the session.

        An access token already present is returned as-is; its expiry is only
        discovered by a downstream 401. Without one, a single refresh call is
        issued when a refresh token exists. Expected failures are reported in
        the result, never raised.

        Args:
            session: Caller session; adopts the new token on a successful refresh

        Returns:
            Token resolution outcome
        """
        if session.access_token:
            return TokenResolution(
                status=ResolutionStatus.AUTHENTICATED,
                access_token=session.access_token,
                refreshed=session.refreshed,
            )

        if not session.refresh_token:
            return TokenResolution(status=ResolutionStatus.UNAUTHENTICATED)

        resolution = await self._refresh(session.refresh_token)
        if resolution.is_authenticated and resolution.access_token:
            session.adopt_refreshed_token(resolution.access_token)
        return resolution

    async def _refresh(self, refresh_token: str) -> TokenResolution:
        """Issue exactly one refresh call."""
        try:
            response = await self.client.post(
                REFRESH_ENDPOINT,
                headers={
                    "Content-Type": "application/json",
                    "Cache-Control": "no-store",
                    "Cookie": f"{REFRESH_TOKEN_COOKIE}={refresh_token}",
                },
            )
        except httpx.TransportError as e:
            logger.warning("token_refresh_transport_error", error=str(e))
            return TokenResolution(status=ResolutionStatus.TRANSIENT_ERROR, error=str(e))

        if not response.is_success:
            logger.info("token_refresh_rejected", status_code=response.status_code)
            return TokenResolution(
                status=ResolutionStatus.UNAUTHENTICATED,
                error=response.reason_phrase,
            )

        try:
            body = RefreshResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.warning("token_refresh_malformed_body", error=str(e))
            return TokenResolution(
                status=ResolutionStatus.UNAUTHENTICATED,
                error="Malformed refresh response",
            )

        logger.info("token_refreshed")
        return TokenResolution(
            status=ResolutionStatus.AUTHENTICATED,
            access_token=body.access_token,
            refreshed=True,
        )
