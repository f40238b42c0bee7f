"""Doctor analytics endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Query

from app.dependencies import AnalyticsServiceDep, AuthenticatedSession
from app.schemas.analytics import (
    DailyRevenueQuery,
    LeaveStatsQuery,
    MonthlyRevenueQuery,
    RevenueOverviewQuery,
    SlotPreferenceView,
    StatusPeriod,
    WeeklyRevenueQuery,
)

router = APIRouter(prefix="/doctor/analytics")


@router.get("/dashboard", summary="Dashboard overview")
async def get_dashboard(session: AuthenticatedSession, analytics: AnalyticsServiceDep) -> Any:
    return await analytics.dashboard(session)


@router.get("/dashboard/quick-stats", summary="Quick statistics")
async def get_quick_stats(session: AuthenticatedSession, analytics: AnalyticsServiceDep) -> Any:
    return await analytics.quick_stats(session)


# ============================================================================
# Revenue
# ============================================================================


@router.get("/revenue/daily", summary="Daily revenue")
async def get_daily_revenue(
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
    query: Annotated[DailyRevenueQuery, Query()],
) -> Any:
    """
    Revenue per day.

    - **start_date** / **end_date**: optional window
    - **days**: or the last N days, 1 to 365
    """
    return await analytics.daily_revenue(session, query)


@router.get("/revenue/weekly", summary="Weekly revenue")
async def get_weekly_revenue(
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
    query: Annotated[WeeklyRevenueQuery, Query()],
) -> Any:
    return await analytics.weekly_revenue(session, query)


@router.get("/revenue/monthly", summary="Monthly revenue")
async def get_monthly_revenue(
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
    query: Annotated[MonthlyRevenueQuery, Query()],
) -> Any:
    return await analytics.monthly_revenue(session, query)


@router.get("/revenue/all", summary="Revenue for every timeframe")
async def get_revenue_overview(
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
    query: Annotated[RevenueOverviewQuery, Query()],
) -> Any:
    return await analytics.revenue_overview(session, query)


# ============================================================================
# Appointments, leave and slots
# ============================================================================


@router.get("/appointments/status/{period}", summary="Appointment status breakdown")
async def get_appointment_status(
    period: StatusPeriod,
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
) -> Any:
    return await analytics.appointment_status(session, period)


@router.get("/leave", summary="Leave statistics")
async def get_leave_stats(
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
    query: Annotated[LeaveStatsQuery, Query()],
) -> Any:
    """Leave for ``month``/``year``, or the current month when both are omitted."""
    return await analytics.leave_stats(session, query)


@router.get("/slots/preferences/{view}", summary="Slot preferences")
async def get_slot_preferences(
    view: SlotPreferenceView,
    session: AuthenticatedSession,
    analytics: AnalyticsServiceDep,
) -> Any:
    return await analytics.slot_preferences(session, view)
