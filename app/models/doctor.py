import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, Boolean, Integer, Float, Text, JSON
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


SPECIALIZATIONS = [
    "General Dentistry",
    "Orthodontics",
    "Periodontics",
    "Endodontics",
    "Prosthodontics",
    "Oral Surgery",
    "Pediatric Dentistry",
    "Cosmetic Dentistry",
]

WEEKDAYS = [
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
]

DEFAULT_AVAILABLE_DAYS = WEEKDAYS[:5]

DEFAULT_IMAGE_URL = (
    "https://images.unsplash.com/photo-1612349317453-3ad32c4a0b7d?w=500&h=500&fit=crop"
)


class Doctor(Base):
    """Doctor model - profile and weekly availability."""

    __tablename__ = "doctors"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        nullable=False,
        index=True,
    )
    phone: Mapped[str] = mapped_column(String(20), nullable=False)
    specialization: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        index=True,
    )
    experience: Mapped[int] = mapped_column(Integer, default=0)
    qualification: Mapped[str] = mapped_column(String(200), nullable=False)
    consultation_fee: Mapped[float] = mapped_column(Float, default=0.0)
    available_days: Mapped[list[str]] = mapped_column(
        JSON,
        default=lambda: list(DEFAULT_AVAILABLE_DAYS),
    )
    about: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str] = mapped_column(
        String(500),
        default=DEFAULT_IMAGE_URL,
    )
    is_active: Mapped[bool] = mapped_column(Boolean, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    def is_available_on(self, day_name: str) -> bool:
        return day_name in (self.available_days or [])

    def __repr__(self) -> str:
        return f"<Doctor {self.name} ({self.specialization})>"
