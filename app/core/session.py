"""Per-request session context."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from datetime import UTC, datetime

from app.core.security import (
    ACCESS_TOKEN_COOKIE,
    DEVICE_ID_COOKIE,
    REFRESH_TOKEN_COOKIE,
    get_token_subject,
)


def utc_now() -> datetime:
    """Current time in UTC."""
    return datetime.now(UTC)


@dataclass
class SessionContext:
    """
    Credentials and cookies of the caller for one request.

    Built from the inbound request and passed explicitly to every operation,
    so tests can construct any session state without a browser.
    """

    access_token: str | None = None
    refresh_token: str | None = None
    cookies: Mapping[str, str] = field(default_factory=dict)
    cookie_header: str = ""
    refreshed: bool = False
    clock: Callable[[], datetime] = utc_now

    @classmethod
    def from_cookies(
        cls,
        cookies: Mapping[str, str],
        cookie_header: str | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> "SessionContext":
        """
        Build a session from a cookie mapping.

        Args:
            cookies: Parsed request cookies
            cookie_header: Raw Cookie header, forwarded verbatim to the backend
            clock: Time source

        Returns:
            Session context
        """
        if cookie_header is None:
            cookie_header = "; ".join(f"{name}={value}" for name, value in cookies.items())

        return cls(
            access_token=cookies.get(ACCESS_TOKEN_COOKIE) or None,
            refresh_token=cookies.get(REFRESH_TOKEN_COOKIE) or None,
            cookies=dict(cookies),
            cookie_header=cookie_header,
            clock=clock,
        )

    def now(self) -> datetime:
        """Current time as seen by this session."""
        return self.clock()

    def adopt_refreshed_token(self, access_token: str) -> None:
        """Use a token minted by the refresh endpoint for the rest of the request."""
        self.access_token = access_token
        self.refreshed = True

    @property
    def subject(self) -> str | None:
        """Identity of the viewer, if it can be determined."""
        if self.access_token:
            subject = get_token_subject(self.access_token)
            if subject:
                return subject
        return self.cookies.get(DEVICE_ID_COOKIE) or None
