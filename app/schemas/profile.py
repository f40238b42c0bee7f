"""Profile schemas."""

from pydantic import BaseModel, EmailStr, Field


class DoctorProfileUpdate(BaseModel):
    """Editable doctor profile fields."""

    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=7, max_length=20)
    speciality: str | None = Field(None, min_length=1, max_length=200)
    address: str | None = None
    opd_fees: float | None = Field(None, ge=0)
    experience_years: int | None = Field(None, ge=0)
    bio: str | None = None

    model_config = {"extra": "allow"}


class PatientProfileUpdate(BaseModel):
    """Editable patient profile fields."""

    name: str | None = Field(None, min_length=1, max_length=200)
    email: EmailStr | None = None
    phone: str | None = Field(None, min_length=7, max_length=20)
    address: str | None = None
    date_of_birth: str | None = None
    gender: str | None = None
    blood_group: str | None = None

    model_config = {"extra": "allow"}
