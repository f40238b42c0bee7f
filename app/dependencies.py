"""FastAPI dependencies."""

from datetime import timedelta
from typing import Annotated

import httpx
import redis
from fastapi import Depends, Request, Response

from app.config import settings
from app.core.exceptions import TransientBackendException, UnauthorizedException
from app.core.http_client import get_http_client
from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import set_access_token_cookie
from app.core.session import SessionContext
from app.schemas.auth import ResolutionStatus, TokenResolution
from app.services.analytics_service import AnalyticsService
from app.services.appointment_service import AppointmentService
from app.services.auth_service import AuthService
from app.services.doctor_service import DoctorService
from app.services.gateway import BackendGateway
from app.services.notification_service import NotificationMarkerStore, NotificationService
from app.services.profile_service import ProfileService
from app.services.slot_service import SlotService
from app.services.slot_state_machine import SlotStateMachine
from app.services.token_resolver import TokenResolver

HttpClient = Annotated[httpx.AsyncClient, Depends(get_http_client)]
RedisClient = Annotated[redis.Redis, Depends(get_redis_client)]


def get_token_resolver(client: HttpClient) -> TokenResolver:
    """Token resolver bound to the backend client."""
    return TokenResolver(client)


def get_gateway(
    client: HttpClient,
    resolver: Annotated[TokenResolver, Depends(get_token_resolver)],
) -> BackendGateway:
    """Authenticated gateway to the backend API."""
    return BackendGateway(client, resolver)


def get_session(request: Request) -> SessionContext:
    """
    Build the caller's session from request cookies.

    A token refreshed by the edge guard earlier in this request takes the
    place of the missing access cookie.
    """
    session = SessionContext.from_cookies(request.cookies, request.headers.get("cookie"))
    edge_token = getattr(request.state, "access_token", None)
    if edge_token and not session.access_token:
        session.access_token = edge_token
    return session


async def get_token_resolution(
    session: Annotated[SessionContext, Depends(get_session)],
    response: Response,
    resolver: Annotated[TokenResolver, Depends(get_token_resolver)],
) -> TokenResolution:
    """
    Resolve the session's access token once per request.

    A token minted by a silent refresh is written back as a cookie.
    """
    resolution = await resolver.resolve(session)
    if resolution.refreshed and resolution.access_token:
        set_access_token_cookie(response, resolution.access_token)
    return resolution


async def get_authenticated_session(
    session: Annotated[SessionContext, Depends(get_session)],
    resolution: Annotated[TokenResolution, Depends(get_token_resolution)],
) -> SessionContext:
    """
    Require a usable access token.

    Raises:
        TransientBackendException: If the refresh call could not reach the backend
        UnauthorizedException: If no token could be produced
    """
    if resolution.status == ResolutionStatus.TRANSIENT_ERROR:
        raise TransientBackendException(resolution.error or "Backend API unavailable")
    if not resolution.is_authenticated:
        raise UnauthorizedException()
    return session


async def get_optional_session(
    session: Annotated[SessionContext, Depends(get_session)],
    resolution: Annotated[TokenResolution, Depends(get_token_resolution)],
) -> SessionContext:
    """Session after a refresh attempt, authenticated or not."""
    return session


def get_slot_state_machine() -> SlotStateMachine:
    """Slot state machine with the configured hold duration."""
    return SlotStateMachine(timedelta(minutes=settings.slot_hold_minutes))


def get_cache_manager(redis_client: RedisClient) -> CacheManager:
    """Cache manager over the shared Redis client."""
    return CacheManager(redis_client)


Gateway = Annotated[BackendGateway, Depends(get_gateway)]


def get_slot_service(
    gateway: Gateway,
    machine: Annotated[SlotStateMachine, Depends(get_slot_state_machine)],
) -> SlotService:
    return SlotService(gateway, machine)


def get_appointment_service(gateway: Gateway) -> AppointmentService:
    return AppointmentService(gateway)


def get_doctor_service(gateway: Gateway) -> DoctorService:
    return DoctorService(gateway)


def get_profile_service(gateway: Gateway) -> ProfileService:
    return ProfileService(gateway)


def get_auth_service(gateway: Gateway) -> AuthService:
    return AuthService(gateway)


def get_analytics_service(gateway: Gateway) -> AnalyticsService:
    return AnalyticsService(gateway)


def get_notification_service(
    appointments: Annotated[AppointmentService, Depends(get_appointment_service)],
    cache: Annotated[CacheManager, Depends(get_cache_manager)],
) -> NotificationService:
    """Notification service with Redis-backed last-seen markers."""
    store = NotificationMarkerStore(cache, settings.notification_marker_ttl_days * 86400)
    return NotificationService(appointments, store)


# Type aliases for dependency injection
AuthenticatedSession = Annotated[SessionContext, Depends(get_authenticated_session)]
OptionalSession = Annotated[SessionContext, Depends(get_optional_session)]
Resolution = Annotated[TokenResolution, Depends(get_token_resolution)]
SlotServiceDep = Annotated[SlotService, Depends(get_slot_service)]
AppointmentServiceDep = Annotated[AppointmentService, Depends(get_appointment_service)]
DoctorServiceDep = Annotated[DoctorService, Depends(get_doctor_service)]
ProfileServiceDep = Annotated[ProfileService, Depends(get_profile_service)]
AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
AnalyticsServiceDep = Annotated[AnalyticsService, Depends(get_analytics_service)]
NotificationServiceDep = Annotated[NotificationService, Depends(get_notification_service)]
