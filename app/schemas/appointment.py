from pydantic import Field, field_validator
import datetime as dt
from datetime import datetime
from uuid import UUID

from app.schemas.common import APIModel
from app.schemas.doctor import DoctorSummary
from app.schemas.user import PatientSummary
from app.utils.time_labels import normalize_time_label


class AppointmentCreate(APIModel):
    """Schema for booking an appointment."""
    doctor_id: UUID = Field(..., description="Doctor ID")
    slot_id: UUID = Field(..., description="Slot ID")
    date: dt.date = Field(..., description="Appointment date (YYYY-MM-DD)")
    time: str = Field(..., description='Slot label, e.g. "10:00 AM"')
    reason: str | None = Field(None, max_length=500, description="Optional reason for visit")

    @field_validator("time")
    @classmethod
    def canonical_time(cls, value: str) -> str:
        return normalize_time_label(value)


class AppointmentConfirm(APIModel):
    """Schema for confirming an appointment."""
    notes: str | None = Field(None, max_length=1000)


class AppointmentCancel(APIModel):
    """Schema for cancelling an appointment."""
    cancellation_reason: str | None = Field(None, max_length=500)


class AppointmentComplete(APIModel):
    """Schema for completing an appointment."""
    notes: str | None = Field(None, max_length=1000)


class AppointmentResponse(APIModel):
    """Schema for appointment response."""
    id: UUID
    patient_id: UUID
    doctor_id: UUID | None
    slot_id: UUID | None
    date: dt.date
    time: str
    status: str
    reason: str | None = None
    notes: str | None = None
    cancelled_by: str | None = None
    cancellation_reason: str | None = None
    cancelled_at: datetime | None = None
    confirmed_at: datetime | None = None
    completed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime
    patient: PatientSummary | None = None
    doctor: DoctorSummary | None = None


class AppointmentStats(APIModel):
    """Aggregate counts for the admin dashboard."""
    total: int
    by_status: dict[str, int]
    today: int
    upcoming: int
