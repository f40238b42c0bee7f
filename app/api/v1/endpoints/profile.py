"""Profile endpoints."""

from typing import Any

from fastapi import APIRouter, status

from app.dependencies import AuthenticatedSession, ProfileServiceDep
from app.schemas.appointments import Role
from app.schemas.profile import DoctorProfileUpdate, PatientProfileUpdate

router = APIRouter()


@router.get("/doctor", status_code=status.HTTP_200_OK, summary="Get doctor profile")
async def get_doctor_profile(
    session: AuthenticatedSession,
    profile_service: ProfileServiceDep,
) -> Any:
    """Get the calling doctor's profile."""
    return await profile_service.get_profile(session, Role.DOCTOR)


@router.patch("/doctor", status_code=status.HTTP_200_OK, summary="Update doctor profile")
async def update_doctor_profile(
    data: DoctorProfileUpdate,
    session: AuthenticatedSession,
    profile_service: ProfileServiceDep,
) -> Any:
    """Update the calling doctor's profile; omitted fields are left unchanged."""
    return await profile_service.update_profile(session, Role.DOCTOR, data)


@router.get("/patient", status_code=status.HTTP_200_OK, summary="Get patient profile")
async def get_patient_profile(
    session: AuthenticatedSession,
    profile_service: ProfileServiceDep,
) -> Any:
    """Get the calling patient's profile."""
    return await profile_service.get_profile(session, Role.PATIENT)


@router.patch("/patient", status_code=status.HTTP_200_OK, summary="Update patient profile")
async def update_patient_profile(
    data: PatientProfileUpdate,
    session: AuthenticatedSession,
    profile_service: ProfileServiceDep,
) -> Any:
    """Update the calling patient's profile."""
    return await profile_service.update_profile(session, Role.PATIENT, data)
