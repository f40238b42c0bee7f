"""Authenticated request gateway to the backend API."""

import json
from collections.abc import Mapping
from typing import Any

import httpx
import structlog

from app.core.exceptions import (
    BackendRejectedException,
    TransientBackendException,
    UnauthorizedException,
)
from app.core.session import SessionContext
from app.schemas.auth import ResolutionStatus
from app.services.token_resolver import TokenResolver

logger = structlog.get_logger()

QueryParams = Mapping[str, Any] | list[tuple[str, Any]] | None


class BackendGateway:
    """
    Forward calls to the backend with resolved credentials.

    Mutating calls (hold, book, cancel) are never retried here; retrying
    them is the caller's decision.
    """

    def __init__(self, client: httpx.AsyncClient, resolver: TokenResolver):
        """Initialize gateway with the backend HTTP client and token resolver."""
        self.client = client
        self.resolver = resolver

    async def call(
        self,
        session: SessionContext,
        endpoint: str,
        method: str = "GET",
        params: QueryParams = None,
        json_body: Any = None,
    ) -> Any:
        """
        Call the backend on behalf of an authenticated session.

        Args:
            session: Caller session
            endpoint: Backend path, e.g. "/appointments/my-appointments"
            method: HTTP method
            params: Query parameters
            json_body: JSON request body

        Returns:
            Parsed JSON body, or None for an empty response

        Raises:
            UnauthorizedException: If no usable access token could be resolved
            TransientBackendException: On transport failures or unreadable bodies
            BackendRejectedException: If the backend answered with a non-2xx status
        """
        resolution = await self.resolver.resolve(session)

        if resolution.status == ResolutionStatus.TRANSIENT_ERROR:
            raise TransientBackendException(resolution.error or "Token refresh failed")
        if not resolution.is_authenticated:
            raise UnauthorizedException()

        headers = {
            "Content-Type": "application/json",
            "Cache-Control": "no-store",
            "Authorization": f"Bearer {resolution.access_token}",
        }
        if session.cookie_header:
            headers["Cookie"] = session.cookie_header

        return await self._send(method, endpoint, headers, params, json_body)

    async def call_public(
        self,
        endpoint: str,
        method: str = "GET",
        params: QueryParams = None,
        json_body: Any = None,
    ) -> Any:
        """Call a backend endpoint that needs no credentials."""
        headers = {
            "Content-Type": "application/json",
            "Cache-Control": "no-store",
        }
        return await self._send(method, endpoint, headers, params, json_body)

    async def _send(
        self,
        method: str,
        endpoint: str,
        headers: dict[str, str],
        params: QueryParams,
        json_body: Any,
    ) -> Any:
        try:
            response = await self.client.request(
                method,
                endpoint,
                headers=headers,
                params=params,
                json=json_body,
            )
        except httpx.TransportError as e:
            logger.error(
                "backend_request_failed",
                method=method,
                endpoint=endpoint,
                error=str(e),
            )
            raise TransientBackendException(str(e) or "Backend API unavailable") from e

        if not response.is_success:
            message, data = _error_details(response)
            logger.info(
                "backend_request_rejected",
                method=method,
                endpoint=endpoint,
                status_code=response.status_code,
                detail=message,
            )
            raise BackendRejectedException(response.status_code, message, data)

        if not response.content:
            return None

        try:
            return response.json()
        except ValueError as e:
            logger.error("backend_response_unreadable", method=method, endpoint=endpoint)
            raise TransientBackendException("Malformed response from backend API") from e


def _error_details(response: httpx.Response) -> tuple[str, Any]:
    """Extract a human-readable reason from a backend error response."""
    fallback = response.reason_phrase or f"HTTP {response.status_code}"
    try:
        data = response.json()
    except ValueError:
        return fallback, None

    if not isinstance(data, dict):
        return fallback, data

    detail = data.get("detail") or data.get("error")
    if detail is None:
        return fallback, data
    if isinstance(detail, str):
        return detail, data
    return json.dumps(detail, default=str), data
