import uuid
import datetime as dt
from datetime import datetime
from sqlalchemy import String, DateTime, Date, Boolean, Integer, ForeignKey, Index, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from app.database import Base


class Slot(Base):
    """Bookable (doctor, date, time) unit.

    ``time`` is the canonical "HH:MM AM" label shown to patients and
    ``minutes`` the matching minute-of-day, used for chronological ordering.
    ``is_booked`` is true exactly when ``appointment_id`` is set.
    """

    __tablename__ = "slots"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )
    doctor_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("doctors.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(8), nullable=False)
    minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    is_booked: Mapped[bool] = mapped_column(Boolean, default=False)
    is_blocked: Mapped[bool] = mapped_column(Boolean, default=False)
    # Plain reference: appointments point back at slots, so no FK cycle here
    appointment_id: Mapped[uuid.UUID | None] = mapped_column(
        nullable=True,
        default=None,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # A doctor cannot have duplicate time slots for the same date
    __table_args__ = (
        UniqueConstraint(
            "doctor_id",
            "date",
            "time",
            name="unique_doctor_slot",
        ),
        Index("ix_slots_doctor_date", "doctor_id", "date"),
    )

    def __repr__(self) -> str:
        return f"<Slot {self.date} {self.time} booked={self.is_booked} blocked={self.is_blocked}>"
