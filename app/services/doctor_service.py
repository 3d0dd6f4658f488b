"""Doctor service - Business logic for doctor profiles."""

import logging
from datetime import date
from sqlalchemy import select, delete, func, or_, update
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.exceptions import Conflict, InvalidState, NotFound
from app.models.appointment import Appointment, ACTIVE_STATUSES
from app.models.doctor import Doctor, DEFAULT_AVAILABLE_DAYS, DEFAULT_IMAGE_URL
from app.models.slot import Slot
from app.schemas.doctor import DoctorCreate, DoctorUpdate

logger = logging.getLogger(__name__)


class DoctorService:
    """Service class for doctor operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_doctors(
        self,
        specialization: str | None = None,
        search: str | None = None,
        is_active: bool | None = None,
    ) -> list[Doctor]:
        """List doctors, newest first, with optional filters."""
        query = select(Doctor)

        if specialization:
            query = query.where(Doctor.specialization == specialization)

        if search:
            pattern = f"%{search.strip()}%"
            query = query.where(
                or_(Doctor.name.ilike(pattern), Doctor.specialization.ilike(pattern))
            )

        if is_active is not None:
            query = query.where(Doctor.is_active == is_active)

        query = query.order_by(Doctor.created_at.desc())

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_doctor_by_id(self, doctor_id: UUID) -> Doctor | None:
        """Get a doctor by ID."""
        return await self.db.get(Doctor, doctor_id)

    async def require_doctor(self, doctor_id: UUID) -> Doctor:
        """Get a doctor by ID or raise NotFound."""
        doctor = await self.get_doctor_by_id(doctor_id)
        if not doctor:
            raise NotFound("Doctor not found")
        return doctor

    async def get_doctor_by_email(self, email: str) -> Doctor | None:
        result = await self.db.execute(select(Doctor).where(Doctor.email == email))
        return result.scalar_one_or_none()

    async def create_doctor(self, doctor_data: DoctorCreate) -> Doctor:
        """Create a new doctor."""
        if await self.get_doctor_by_email(doctor_data.email):
            raise Conflict("Doctor with this email already exists")

        values = doctor_data.model_dump()
        values["available_days"] = values["available_days"] or list(DEFAULT_AVAILABLE_DAYS)
        values["image_url"] = values["image_url"] or DEFAULT_IMAGE_URL

        doctor = Doctor(**values)
        self.db.add(doctor)
        await self.db.flush()
        await self.db.refresh(doctor)
        logger.info(f"Created doctor {doctor.name} ({doctor.specialization})")
        return doctor

    async def update_doctor(self, doctor: Doctor, doctor_data: DoctorUpdate) -> Doctor:
        """Update a doctor."""
        update_data = doctor_data.model_dump(exclude_unset=True, exclude_none=True)

        new_email = update_data.get("email")
        if new_email and new_email != doctor.email and await self.get_doctor_by_email(new_email):
            raise Conflict("Doctor with this email already exists")

        for field, value in update_data.items():
            setattr(doctor, field, value)
        await self.db.flush()
        await self.db.refresh(doctor)
        return doctor

    async def count_upcoming_appointments(self, doctor_id: UUID) -> int:
        """Pending or confirmed appointments from today onwards."""
        result = await self.db.execute(
            select(func.count(Appointment.id)).where(
                Appointment.doctor_id == doctor_id,
                Appointment.date >= date.today(),
                Appointment.status.in_(ACTIVE_STATUSES),
            )
        )
        return result.scalar_one()

    async def delete_doctor(self, doctor: Doctor) -> None:
        """Delete a doctor and all their slots, keeping past appointments."""
        upcoming = await self.count_upcoming_appointments(doctor.id)
        if upcoming > 0:
            raise InvalidState(
                f"Cannot delete doctor with {upcoming} upcoming appointments. "
                "Please cancel or complete them first."
            )

        detached = await self.db.execute(
            update(Appointment)
            .where(Appointment.doctor_id == doctor.id)
            .values(doctor_id=None, slot_id=None)
        )
        await self.db.execute(delete(Slot).where(Slot.doctor_id == doctor.id))
        await self.db.delete(doctor)
        await self.db.flush()
        logger.info(
            f"Deleted doctor {doctor.id} and their slots, kept {detached.rowcount or 0} past appointment(s)"
        )

    async def get_stats(self, doctor: Doctor) -> dict:
        """Appointment counts by status for one doctor."""
        result = await self.db.execute(
            select(Appointment.status, func.count(Appointment.id))
            .where(Appointment.doctor_id == doctor.id)
            .group_by(Appointment.status)
        )

        counts = {"total": 0, "pending": 0, "confirmed": 0, "completed": 0, "cancelled": 0}
        for status, count in result.all():
            counts[status] = count
            counts["total"] += count

        return {
            "doctor": doctor,
            "appointments": counts,
            "upcoming": await self.count_upcoming_appointments(doctor.id),
        }
