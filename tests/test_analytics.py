"""Tests for the doctor analytics endpoints."""

import pytest
from httpx import AsyncClient

from app.schemas.analytics import DailyRevenueQuery, LeaveStatsQuery
from tests.helpers import FakeBackend, cookie_header, make_token

DOCTOR = cookie_header(access_token=make_token(3, role="doctor"))


def test_unset_filters_are_not_forwarded():
    assert DailyRevenueQuery(days=7).to_query() == {"days": 7}
    assert LeaveStatsQuery().to_query() == {}


@pytest.mark.asyncio
async def test_dashboard_is_passed_through(client: AsyncClient, backend: FakeBackend):
    overview = {"today_appointments": 4, "pending_requests": 1, "revenue_today": 1600.0}
    backend.on("GET", "/doctor/analytics/dashboard", json=overview)

    response = await client.get("/api/v1/doctor/analytics/dashboard", headers=DOCTOR)

    assert response.status_code == 200
    assert response.json() == overview
    request = backend.calls("GET", "/doctor/analytics/dashboard")[0]
    assert request.headers["Authorization"].startswith("Bearer ")
    assert request.headers["Cache-Control"] == "no-store"


@pytest.mark.asyncio
async def test_daily_revenue_forwards_filters(client: AsyncClient, backend: FakeBackend):
    backend.on("GET", "/doctor/analytics/revenue/daily", json=[])

    response = await client.get(
        "/api/v1/doctor/analytics/revenue/daily",
        params={"start_date": "2026-02-01", "end_date": "2026-02-28"},
        headers=DOCTOR,
    )

    assert response.status_code == 200
    params = backend.calls("GET", "/doctor/analytics/revenue/daily")[0].url.params
    assert params["start_date"] == "2026-02-01"
    assert params["end_date"] == "2026-02-28"
    assert "days" not in params


@pytest.mark.asyncio
async def test_revenue_filters_are_validated(client: AsyncClient, backend: FakeBackend):
    response = await client.get(
        "/api/v1/doctor/analytics/revenue/weekly",
        params={"weeks": 0},
        headers=DOCTOR,
    )
    assert response.status_code == 422

    response = await client.get(
        "/api/v1/doctor/analytics/revenue/daily",
        params={"start_date": "2026-02-28", "end_date": "2026-02-01"},
        headers=DOCTOR,
    )
    assert response.status_code == 422

    assert backend.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("period", ["all", "today", "this-week", "this-month"])
async def test_appointment_status_periods(
    client: AsyncClient,
    backend: FakeBackend,
    period: str,
):
    backend.on("GET", f"/doctor/analytics/appointments/status/{period}", json={"total": 0})

    response = await client.get(
        f"/api/v1/doctor/analytics/appointments/status/{period}",
        headers=DOCTOR,
    )

    assert response.status_code == 200
    assert response.json() == {"total": 0}


@pytest.mark.asyncio
async def test_unknown_status_period(client: AsyncClient, backend: FakeBackend):
    response = await client.get(
        "/api/v1/doctor/analytics/appointments/status/yesterday",
        headers=DOCTOR,
    )

    assert response.status_code == 422
    assert backend.requests == []


@pytest.mark.asyncio
async def test_leave_stats_current_and_given_month(client: AsyncClient, backend: FakeBackend):
    backend.on("GET", "/doctor/analytics/leave/current-month", json={"leave_days": 2})
    backend.on("GET", "/doctor/analytics/leave/month", json={"leave_days": 5})

    response = await client.get("/api/v1/doctor/analytics/leave", headers=DOCTOR)
    assert response.json() == {"leave_days": 2}

    response = await client.get(
        "/api/v1/doctor/analytics/leave",
        params={"month": 1, "year": 2026},
        headers=DOCTOR,
    )
    assert response.json() == {"leave_days": 5}
    params = backend.calls("GET", "/doctor/analytics/leave/month")[0].url.params
    assert params["month"] == "1"
    assert params["year"] == "2026"


@pytest.mark.asyncio
async def test_leave_month_needs_year(client: AsyncClient, backend: FakeBackend):
    response = await client.get(
        "/api/v1/doctor/analytics/leave",
        params={"month": 1},
        headers=DOCTOR,
    )

    assert response.status_code == 422
    assert backend.requests == []


@pytest.mark.asyncio
async def test_most_popular_slot(client: AsyncClient, backend: FakeBackend):
    backend.on(
        "GET",
        "/doctor/analytics/slots/preferences/most-popular",
        json={"time_slot": "10:00-11:00", "total_bookings": 12},
    )

    response = await client.get(
        "/api/v1/doctor/analytics/slots/preferences/most-popular",
        headers=DOCTOR,
    )

    assert response.status_code == 200
    assert response.json()["time_slot"] == "10:00-11:00"


@pytest.mark.asyncio
async def test_analytics_require_session(client: AsyncClient, backend: FakeBackend):
    response = await client.get("/api/v1/doctor/analytics/dashboard")

    assert response.status_code == 401
    assert backend.requests == []
