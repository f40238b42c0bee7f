"""Doctor analytics: read-only dashboard figures computed by the backend."""

from typing import Any

from app.core.session import SessionContext
from app.schemas.analytics import (
    DailyRevenueQuery,
    LeaveStatsQuery,
    MonthlyRevenueQuery,
    RevenueOverviewQuery,
    SlotPreferenceView,
    StatusPeriod,
    WeeklyRevenueQuery,
)
from app.services.gateway import BackendGateway

ANALYTICS_PREFIX = "/doctor/analytics"


class AnalyticsService:
    """
    Service for the doctor dashboard.

    Every figure is computed by the backend; bodies are passed through
    unchanged and never cached, so the dashboard always shows live data.
    """

    def __init__(self, gateway: BackendGateway):
        """Initialize service with the backend gateway."""
        self.gateway = gateway

    async def _get(
        self,
        session: SessionContext,
        path: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        return await self.gateway.call(session, f"{ANALYTICS_PREFIX}{path}", params=params or None)

    async def dashboard(self, session: SessionContext) -> Any:
        """Dashboard overview."""
        return await self._get(session, "/dashboard")

    async def quick_stats(self, session: SessionContext) -> Any:
        return await self._get(session, "/dashboard/quick-stats")

    async def daily_revenue(self, session: SessionContext, query: DailyRevenueQuery) -> Any:
        return await self._get(session, "/revenue/daily", query.to_query())

    async def weekly_revenue(self, session: SessionContext, query: WeeklyRevenueQuery) -> Any:
        return await self._get(session, "/revenue/weekly", query.to_query())

    async def monthly_revenue(self, session: SessionContext, query: MonthlyRevenueQuery) -> Any:
        return await self._get(session, "/revenue/monthly", query.to_query())

    async def revenue_overview(self, session: SessionContext, query: RevenueOverviewQuery) -> Any:
        """Daily, weekly and monthly revenue in one backend call."""
        return await self._get(session, "/revenue/all", query.to_query())

    async def appointment_status(self, session: SessionContext, period: StatusPeriod) -> Any:
        """
        Breakdown of appointments by status.

        Args:
            session: Caller session
            period: ``all`` returns every window; the others return one

        Returns:
            Backend breakdown
        """
        return await self._get(session, f"/appointments/status/{period.value}")

    async def leave_stats(self, session: SessionContext, query: LeaveStatsQuery) -> Any:
        """Leave taken in a month, the current one when no month is given."""
        if query.month is None:
            return await self._get(session, "/leave/current-month")
        return await self._get(session, "/leave/month", query.to_query())

    async def slot_preferences(self, session: SessionContext, view: SlotPreferenceView) -> Any:
        """Which time slots patients book most."""
        return await self._get(session, f"/slots/preferences/{view.value}")
