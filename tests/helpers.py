"""Test doubles for the backend API and Redis."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import httpx
from jose import jwt

NOW = datetime(2026, 3, 2, 9, 0, tzinfo=UTC)

Route = Callable[[httpx.Request], httpx.Response]


class FakeBackend:
    """Answers backend calls from registered routes and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Route] = {}
        self.requests: list[httpx.Request] = []

    def on(
        self,
        method: str,
        path: str,
        json: Any = None,
        status_code: int = 200,
        handler: Route | None = None,
    ) -> None:
        """Register the answer for one method and path."""

        def respond(request: httpx.Request) -> httpx.Response:
            return httpx.Response(status_code, json=json)

        self.routes[(method.upper(), path)] = handler or respond

    def fail(self, method: str, path: str) -> None:
        """Make a route fail at the transport level."""

        def raise_connect_error(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        self.on(method, path, handler=raise_connect_error)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        """Requests received for one method and path."""
        return [r for r in self.requests if r.method == method.upper() and r.url.path == path]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        route = self.routes.get((request.method, request.url.path))
        if route is None:
            return httpx.Response(404, json={"detail": "Not Found"})
        return route(request)


class FakeRedis:
    """In-memory stand-in for the handful of Redis commands the app uses."""

    def __init__(self) -> None:
        self.store: dict[str, str] = {}
        self.ttls: dict[str, int] = {}

    def get(self, key: str) -> str | None:
        return self.store.get(key)

    def set(self, key: str, value: str) -> bool:
        self.store[key] = value
        return True

    def setex(self, key: str, ttl: int, value: str) -> bool:
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def ping(self) -> bool:
        return True


def make_token(subject: str | int = "42", **claims: Any) -> str:
    """JWT access token signed with a throwaway key; only its claims are read."""
    return jwt.encode({"sub": str(subject), **claims}, "test-secret", algorithm="HS256")


def cookie_header(**cookies: str) -> dict[str, str]:
    """Request headers carrying the given cookies."""
    return {"Cookie": "; ".join(f"{name}={value}" for name, value in cookies.items())}
