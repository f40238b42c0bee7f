"""Shared HTTP client for the backend API."""

import httpx

from app.config import settings

# Global HTTP client instance
_http_client: httpx.AsyncClient | None = None


def get_http_client() -> httpx.AsyncClient:
    """
    Get or create the backend HTTP client.

    Returns:
        Async HTTP client bound to the backend base URL
    """
    global _http_client

    if _http_client is None:
        _http_client = httpx.AsyncClient(
            base_url=settings.backend_api_url,
            timeout=settings.backend_timeout_seconds,
        )

    return _http_client


async def check_backend_connection() -> bool:
    """
    Check if the backend API is reachable.

    Returns:
        True if the backend answered without a server error, False otherwise
    """
    try:
        client = get_http_client()
        response = await client.get("/", headers={"Cache-Control": "no-store"})
        return response.status_code < 500
    except httpx.HTTPError:
        return False


async def close_http_client() -> None:
    """Close the backend HTTP client."""
    global _http_client

    if _http_client is not None:
        await _http_client.aclose()
        _http_client = None
