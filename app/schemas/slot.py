from pydantic import Field, field_validator
import datetime as dt
from datetime import datetime
from uuid import UUID

from app.models.doctor import WEEKDAYS
from app.schemas.common import APIModel
from app.utils.time_labels import normalize_time_label


def _normalize_labels(value: list[str]) -> list[str]:
    return [normalize_time_label(label) for label in value]


class SlotCreate(APIModel):
    """Schema for creating a day's slots for a doctor."""
    doctor_id: UUID
    date: dt.date = Field(..., description="Slot date (YYYY-MM-DD)")
    time_slots: list[str] = Field(..., min_length=1, description='Labels such as "09:00 AM"')

    @field_validator("time_slots")
    @classmethod
    def canonical_labels(cls, value: list[str]) -> list[str]:
        return _normalize_labels(value)


class BulkSlotCreate(APIModel):
    """Schema for generating slots over a date range."""
    doctor_id: UUID
    start_date: dt.date
    end_date: dt.date
    time_slots: list[str] = Field(..., min_length=1)
    exclude_days: list[str] = Field(default_factory=list, description="Weekday names to skip")

    @field_validator("time_slots")
    @classmethod
    def canonical_labels(cls, value: list[str]) -> list[str]:
        return _normalize_labels(value)

    @field_validator("exclude_days")
    @classmethod
    def known_days(cls, value: list[str]) -> list[str]:
        unknown = [day for day in value if day not in WEEKDAYS]
        if unknown:
            raise ValueError(f"Unknown day(s): {', '.join(unknown)}")
        return value


class BlockDates(APIModel):
    """Schema for blocking every open slot of a doctor on some dates."""
    doctor_id: UUID
    dates: list[dt.date] = Field(..., min_length=1)


class SlotResponse(APIModel):
    """Schema for slot response."""
    id: UUID
    doctor_id: UUID
    date: dt.date
    time: str
    is_booked: bool
    is_blocked: bool
    appointment_id: UUID | None = None
    created_at: datetime
