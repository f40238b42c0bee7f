"""Query parameters for the doctor analytics dashboard."""

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


class StatusPeriod(str, Enum):
    """Windows of the appointment status breakdown."""

    ALL = "all"
    TODAY = "today"
    THIS_WEEK = "this-week"
    THIS_MONTH = "this-month"


class SlotPreferenceView(str, Enum):
    """Views of the slot preference statistics."""

    ALL = "all"
    MOST_POPULAR = "most-popular"


class AnalyticsQuery(BaseModel):
    """Base for analytics filters; unset fields are not forwarded."""

    def to_query(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class DateWindowQuery(AnalyticsQuery):
    start_date: date | None = None
    end_date: date | None = None

    @model_validator(mode="after")
    def check_order(self) -> "DateWindowQuery":
        if self.start_date and self.end_date and self.start_date > self.end_date:
            raise ValueError("start_date must not be after end_date")
        return self


class DailyRevenueQuery(DateWindowQuery):
    """Daily revenue, either a date window or the last ``days`` days."""

    days: int | None = Field(None, ge=1, le=365)


class WeeklyRevenueQuery(DateWindowQuery):
    weeks: int | None = Field(None, ge=1, le=52)


class MonthlyRevenueQuery(AnalyticsQuery):
    year: int | None = Field(None, ge=2000, le=2100)
    months: int | None = Field(None, ge=1, le=24)


class RevenueOverviewQuery(AnalyticsQuery):
    """All revenue timeframes in one call."""

    daily_days: int | None = Field(None, ge=1, le=365)
    weekly_weeks: int | None = Field(None, ge=1, le=52)
    monthly_months: int | None = Field(None, ge=1, le=24)


class LeaveStatsQuery(AnalyticsQuery):
    """Leave statistics for a month; both fields unset means the current month."""

    month: int | None = Field(None, ge=1, le=12)
    year: int | None = Field(None, ge=2000, le=2100)

    @model_validator(mode="after")
    def check_pair(self) -> "LeaveStatsQuery":
        if (self.month is None) != (self.year is None):
            raise ValueError("month and year must be given together")
        return self
