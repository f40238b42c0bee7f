"""Tests for appointment listings and lifecycle actions."""

import json

import pytest
from httpx import AsyncClient

from app.core.exceptions import TransientBackendException
from app.schemas.appointments import AppointmentStatus, Role
from app.services.appointment_service import AppointmentService
from app.services.gateway import BackendGateway
from tests.helpers import FakeBackend, cookie_header, make_token

DOCTOR_TOKEN = make_token(3, role="doctor")
PATIENT_TOKEN = make_token(7, role="patient")


@pytest.fixture
def appointment_service(gateway: BackendGateway) -> AppointmentService:
    return AppointmentService(gateway)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("PENDING", AppointmentStatus.PENDING),
        ("confirmed", AppointmentStatus.CONFIRMED),
        ("REQUESTED", AppointmentStatus.PENDING),
        ("APPROVED", AppointmentStatus.CONFIRMED),
        ("PAID", AppointmentStatus.COMPLETED),
    ],
)
def test_status_accepts_legacy_names(raw: str, expected: AppointmentStatus):
    assert AppointmentStatus(raw) == expected


def test_unknown_status_is_rejected():
    with pytest.raises(ValueError):
        AppointmentStatus("ARCHIVED")


@pytest.mark.asyncio
async def test_list_appointments_parses_listing(
    appointment_service: AppointmentService,
    backend: FakeBackend,
    make_session,
):
    backend.on(
        "GET",
        "/appointments/doctor-appointments",
        json={
            "total": 2,
            "page": 1,
            "page_size": 100,
            "total_pages": 1,
            "appointments": [
                {"id": 1, "status": "REQUESTED", "created_at": "2026-03-01T08:00:00"},
                {"id": 2, "status": "CANCELLED", "patient_name": "Asha"},
            ],
        },
    )

    listing = await appointment_service.list_appointments(
        make_session(access_token=DOCTOR_TOKEN),
        Role.DOCTOR,
        {"page": 1, "page_size": 100},
    )

    assert listing.total == 2
    assert [a.status for a in listing.appointments] == [
        AppointmentStatus.PENDING,
        AppointmentStatus.CANCELLED,
    ]
    # Naive backend timestamps are read as UTC
    assert listing.appointments[0].created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_list_appointments_accepts_bare_list(
    appointment_service: AppointmentService,
    backend: FakeBackend,
    make_session,
):
    backend.on("GET", "/appointments/my-appointments", json=[{"id": 5, "status": "CONFIRMED"}])

    listing = await appointment_service.list_appointments(
        make_session(access_token=PATIENT_TOKEN),
        Role.PATIENT,
    )

    assert listing.total == 1
    assert listing.appointments[0].id == 5


@pytest.mark.asyncio
async def test_malformed_listing_is_transient(
    appointment_service: AppointmentService,
    backend: FakeBackend,
    make_session,
):
    backend.on("GET", "/appointments/my-appointments", json={"appointments": [{"status": "?"}]})

    with pytest.raises(TransientBackendException):
        await appointment_service.list_appointments(
            make_session(access_token=PATIENT_TOKEN),
            Role.PATIENT,
        )


@pytest.mark.asyncio
async def test_doctor_listing_forwards_query_verbatim(client: AsyncClient, backend: FakeBackend):
    """Query parameters reach the backend untouched and its body comes back as-is."""
    body = {"total": 0, "appointments": [], "page": 2, "page_size": 5}
    backend.on("GET", "/appointments/doctor-appointments", json=body)

    response = await client.get(
        "/api/v1/appointments/doctor",
        params=[("page", "2"), ("page_size", "5"), ("status", "PENDING"), ("status", "CONFIRMED")],
        headers=cookie_header(access_token=DOCTOR_TOKEN),
    )

    assert response.status_code == 200
    assert response.json() == body

    request = backend.calls("GET", "/appointments/doctor-appointments")[0]
    assert request.url.params.get_list("status") == ["PENDING", "CONFIRMED"]
    assert request.url.params["page_size"] == "5"
    assert request.headers["Authorization"] == f"Bearer {DOCTOR_TOKEN}"


@pytest.mark.asyncio
async def test_doctor_listing_after_refresh(client: AsyncClient, backend: FakeBackend):
    """Refresh token only: the listing fetch carries the refreshed bearer token."""
    backend.on("POST", "/auth/refresh", json={"access_token": "abc"})
    backend.on("GET", "/appointments/doctor-appointments", json={"appointments": []})

    response = await client.get(
        "/api/v1/appointments/doctor",
        headers=cookie_header(refresh_token="r1"),
    )

    assert response.status_code == 200
    request = backend.calls("GET", "/appointments/doctor-appointments")[0]
    assert request.headers["Authorization"] == "Bearer abc"
    assert response.cookies.get("access_token") == "abc"


@pytest.mark.asyncio
async def test_patient_listing_without_session(client: AsyncClient, backend: FakeBackend):
    response = await client.get("/api/v1/appointments/patient")

    assert response.status_code == 401
    assert response.headers["WWW-Authenticate"] == "Bearer"
    assert backend.requests == []


@pytest.mark.asyncio
async def test_approve_appointment(client: AsyncClient, backend: FakeBackend):
    backend.on(
        "POST",
        "/appointments/9/approve",
        json={
            "appointment_id": 9,
            "status": "CONFIRMED",
            "message": "Appointment approved",
            "payment_url": "https://pay.example/9",
        },
    )

    response = await client.post(
        "/api/v1/appointments/9/approve",
        params={"token": "link-token"},
        headers=cookie_header(access_token=DOCTOR_TOKEN),
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "CONFIRMED"
    assert data["payment_url"] == "https://pay.example/9"
    assert backend.calls("POST", "/appointments/9/approve")[0].url.params["token"] == "link-token"


@pytest.mark.asyncio
async def test_reject_appointment_sends_reason(client: AsyncClient, backend: FakeBackend):
    backend.on("POST", "/appointments/9/reject")

    response = await client.post(
        "/api/v1/appointments/9/reject",
        json={"reason": "Out of office"},
        headers=cookie_header(access_token=DOCTOR_TOKEN),
    )

    assert response.status_code == 200
    assert response.json()["status"] == "REJECTED"
    assert response.json()["reason"] == "Out of office"
    request = backend.calls("POST", "/appointments/9/reject")[0]
    assert json.loads(request.content) == {"reason": "Out of office"}


@pytest.mark.asyncio
async def test_reject_requires_reason(client: AsyncClient, backend: FakeBackend):
    response = await client.post(
        "/api/v1/appointments/9/reject",
        json={"reason": ""},
        headers=cookie_header(access_token=DOCTOR_TOKEN),
    )

    assert response.status_code == 422
    assert response.json()["error"] == "ValidationError"
    assert backend.calls("POST", "/appointments/9/reject") == []


@pytest.mark.asyncio
async def test_cancel_appointment(client: AsyncClient, backend: FakeBackend):
    backend.on("POST", "/appointments/4/cancel-patient", json={"id": 4, "status": "CANCELLED"})

    response = await client.post(
        "/api/v1/appointments/4/cancel",
        headers=cookie_header(access_token=PATIENT_TOKEN),
    )

    assert response.status_code == 200
    assert response.json()["appointment_id"] == 4
    assert len(backend.calls("POST", "/appointments/4/cancel-patient")) == 1


@pytest.mark.asyncio
async def test_backend_rejection_is_passed_through(client: AsyncClient, backend: FakeBackend):
    backend.on(
        "POST",
        "/appointments/4/cancel-patient",
        json={"detail": "Appointment already completed"},
        status_code=400,
    )

    response = await client.post(
        "/api/v1/appointments/4/cancel",
        headers=cookie_header(access_token=PATIENT_TOKEN),
    )

    assert response.status_code == 400
    assert response.json()["error"] == "BackendRejectedException"
    assert response.json()["detail"] == "Appointment already completed"
