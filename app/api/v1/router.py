"""API v1 router configuration."""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    analytics,
    appointments,
    auth,
    doctors,
    health,
    notifications,
    profile,
    slots,
)

api_router = APIRouter()

# Include routers
api_router.include_router(health.router, tags=["Health"])
api_router.include_router(auth.router, prefix="/auth", tags=["Authentication"])
api_router.include_router(doctors.router, tags=["Doctors"])
api_router.include_router(appointments.router, prefix="/appointments", tags=["Appointments"])
api_router.include_router(slots.router, tags=["Slots"])
api_router.include_router(profile.router, prefix="/profile", tags=["Profile"])
api_router.include_router(notifications.router, tags=["Notifications"])
api_router.include_router(analytics.router, tags=["Analytics"])
