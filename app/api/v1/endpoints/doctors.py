"""Doctor directory endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Query, status

from app.dependencies import AuthenticatedSession, DoctorServiceDep
from app.schemas.doctors import DoctorSearchParams

router = APIRouter()


@router.get("/doctors", status_code=status.HTTP_200_OK, summary="Search doctors")
async def search_doctors(
    session: AuthenticatedSession,
    doctor_service: DoctorServiceDep,
    params: Annotated[DoctorSearchParams, Query()],
) -> Any:
    """
    Search doctors by name, address or speciality.

    - **skip** / **limit**: pagination, defaults 0 and 10
    - **sort_by** / **sort_order**: defaults name, asc
    - **search_name**, **search_address**, **filter_speciality**: optional filters
    """
    return await doctor_service.search(session, params)


@router.get("/doctors/{doctor_id}", status_code=status.HTTP_200_OK, summary="Get a doctor")
async def get_doctor(
    doctor_id: int,
    session: AuthenticatedSession,
    doctor_service: DoctorServiceDep,
) -> Any:
    return await doctor_service.get_doctor(session, doctor_id)
