from pydantic import Field, field_validator
from datetime import datetime
from uuid import UUID

from app.models.doctor import SPECIALIZATIONS, WEEKDAYS
from app.schemas.common import APIModel
from app.schemas.user import EMAIL_PATTERN


def _check_specialization(value: str | None) -> str | None:
    if value is not None and value not in SPECIALIZATIONS:
        raise ValueError("Invalid specialization")
    return value


def _check_days(value: list[str] | None) -> list[str] | None:
    if value is None:
        return value
    unknown = [day for day in value if day not in WEEKDAYS]
    if unknown:
        raise ValueError(f"Unknown day(s): {', '.join(unknown)}")
    return value


class DoctorBase(APIModel):
    """Base doctor schema."""
    name: str = Field(..., min_length=2, max_length=100)
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    phone: str = Field(..., min_length=5, max_length=20)
    specialization: str
    experience: int = Field(..., ge=0, le=60, description="Years of experience")
    qualification: str = Field(..., min_length=1, max_length=200)
    consultation_fee: float = Field(..., ge=0)
    available_days: list[str] | None = None
    about: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=500)


class DoctorCreate(DoctorBase):
    """Schema for creating a doctor."""

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("specialization")
    @classmethod
    def known_specialization(cls, value: str) -> str:
        return _check_specialization(value)

    @field_validator("available_days")
    @classmethod
    def known_days(cls, value: list[str] | None) -> list[str] | None:
        return _check_days(value)


class DoctorUpdate(APIModel):
    """Schema for updating a doctor. Every field is optional."""
    name: str | None = Field(None, min_length=2, max_length=100)
    email: str | None = Field(None, pattern=EMAIL_PATTERN, max_length=255)
    phone: str | None = Field(None, min_length=5, max_length=20)
    specialization: str | None = None
    experience: int | None = Field(None, ge=0, le=60)
    qualification: str | None = Field(None, min_length=1, max_length=200)
    consultation_fee: float | None = Field(None, ge=0)
    available_days: list[str] | None = None
    about: str | None = Field(None, max_length=500)
    image_url: str | None = Field(None, max_length=500)
    is_active: bool | None = None

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str | None) -> str | None:
        return value.strip().lower() if value else value

    @field_validator("specialization")
    @classmethod
    def known_specialization(cls, value: str | None) -> str | None:
        return _check_specialization(value)

    @field_validator("available_days")
    @classmethod
    def known_days(cls, value: list[str] | None) -> list[str] | None:
        return _check_days(value)


class DoctorResponse(DoctorBase):
    """Schema for doctor response."""
    id: UUID
    available_days: list[str]
    image_url: str
    is_active: bool
    created_at: datetime
    updated_at: datetime


class DoctorSummary(APIModel):
    """Doctor details attached to appointments."""
    id: UUID
    name: str
    specialization: str
    consultation_fee: float
    image_url: str


class DoctorStats(APIModel):
    """Appointment counts for a single doctor."""
    doctor: DoctorSummary
    appointments: dict[str, int]
    upcoming: int
