"""Edge guard: gate protected pages on a usable session."""

import re
from collections.abc import Callable, Sequence

import structlog
from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from app.core.http_client import get_http_client
from app.core.security import set_access_token_cookie
from app.core.session import SessionContext
from app.services.token_resolver import TokenResolver

logger = structlog.get_logger()

STATIC_ASSET = re.compile(r".*\.(?:svg|png|jpg|jpeg|gif|webp|ico|css|js)$")


class EdgeGuardMiddleware(BaseHTTPMiddleware):
    """
    Single-pass gate run before every page request.

    1. An access token cookie lets the request through unchanged.
    2. Without one, a refresh token triggers exactly one refresh; on success
       the new token is handed to the request and set as a cookie.
    3. Still without a token, protected paths redirect to the login page.
    4. Anything else passes through.
    """

    def __init__(
        self,
        app: ASGIApp,
        protected_prefixes: Sequence[str],
        login_path: str,
        excluded_prefixes: Sequence[str] = (),
        resolver_factory: Callable[[], TokenResolver] | None = None,
    ):
        """Initialize guard with protected and excluded path prefixes."""
        super().__init__(app)
        self.protected_prefixes = tuple(protected_prefixes)
        self.login_path = login_path
        self.excluded_prefixes = tuple(excluded_prefixes)
        self.resolver_factory = resolver_factory or (lambda: TokenResolver(get_http_client()))

    def is_excluded(self, path: str) -> bool:
        """Paths the guard never inspects: API, docs, metrics, static assets."""
        if STATIC_ASSET.match(path):
            return True
        return any(_under(path, prefix) for prefix in self.excluded_prefixes)

    def is_protected(self, path: str) -> bool:
        """Paths that require a session."""
        return any(_under(path, prefix) for prefix in self.protected_prefixes)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """
        Apply the guard to one request.

        Args:
            request: Request object
            call_next: Next middleware in chain

        Returns:
            Downstream response, or a redirect to the login page
        """
        path = request.url.path
        if self.is_excluded(path):
            return await call_next(request)

        session = SessionContext.from_cookies(request.cookies, request.headers.get("cookie"))
        if session.access_token:
            return await call_next(request)

        if session.refresh_token:
            resolution = await self.resolver_factory().resolve(session)
            if resolution.is_authenticated and resolution.access_token:
                request.state.access_token = resolution.access_token
                response = await call_next(request)
                set_access_token_cookie(response, resolution.access_token)
                return response

        if self.is_protected(path):
            logger.info("edge_guard_redirect", path=path)
            login_url = str(request.base_url).rstrip("/") + self.login_path
            return RedirectResponse(url=login_url, status_code=307)

        return await call_next(request)


def _under(path: str, prefix: str) -> bool:
    prefix = prefix.rstrip("/")
    return path == prefix or path.startswith(prefix + "/")
