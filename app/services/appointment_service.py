"""Appointment service - Business logic for appointment records."""

import logging
from sqlalchemy import select, and_, func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID
from datetime import date, datetime, time

import logfire

from app.exceptions import Conflict, InvalidState, NotFound
from app.models.appointment import Appointment, AppointmentStatus, ACTIVE_STATUSES
from app.models.slot import Slot
from app.models.user import User


# Allowed moves between statuses; anything missing is rejected
TRANSITIONS = {
    AppointmentStatus.PENDING: {
        AppointmentStatus.CONFIRMED,
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    },
    AppointmentStatus.CONFIRMED: {
        AppointmentStatus.CANCELLED,
        AppointmentStatus.COMPLETED,
    },
    AppointmentStatus.CANCELLED: set(),
    AppointmentStatus.COMPLETED: set(),
    AppointmentStatus.NO_SHOW: set(),
}

# Messages for the rejected moves callers actually hit
_REJECTIONS = {
    (AppointmentStatus.CONFIRMED, AppointmentStatus.CONFIRMED): "Appointment is already confirmed",
    (AppointmentStatus.CANCELLED, AppointmentStatus.CONFIRMED): "Cannot confirm a cancelled appointment",
    (AppointmentStatus.COMPLETED, AppointmentStatus.CONFIRMED): "Cannot confirm a completed appointment",
    (AppointmentStatus.CANCELLED, AppointmentStatus.CANCELLED): "Appointment is already cancelled",
    (AppointmentStatus.COMPLETED, AppointmentStatus.CANCELLED): "Cannot cancel a completed appointment",
    (AppointmentStatus.COMPLETED, AppointmentStatus.COMPLETED): "Appointment is already marked as completed",
    (AppointmentStatus.CANCELLED, AppointmentStatus.COMPLETED): "Cannot complete a cancelled appointment",
}

logger = logging.getLogger(__name__)


def check_transition(current: str, new: str) -> None:
    """Raise InvalidState unless ``current -> new`` is a legal move."""
    current_status = AppointmentStatus(current)
    new_status = AppointmentStatus(new)

    if new_status in TRANSITIONS[current_status]:
        return

    message = _REJECTIONS.get(
        (current_status, new_status),
        f"Cannot change appointment from {current_status.value} to {new_status.value}",
    )
    raise InvalidState(message)


class AppointmentService:
    """Service class for appointment operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_appointment_by_id(self, appointment_id: UUID) -> Appointment | None:
        """Get an appointment by ID."""
        return await self.db.get(Appointment, appointment_id)

    async def require_appointment(self, appointment_id: UUID) -> Appointment:
        """Get an appointment by ID or raise NotFound."""
        appointment = await self.get_appointment_by_id(appointment_id)
        if not appointment:
            raise NotFound("Appointment not found")
        return appointment

    async def has_active_appointment(
        self, patient_id: UUID, doctor_id: UUID, appointment_date: date
    ) -> bool:
        """Check for a pending/confirmed appointment with this doctor on this day."""
        result = await self.db.execute(
            select(Appointment.id).where(
                and_(
                    Appointment.patient_id == patient_id,
                    Appointment.doctor_id == doctor_id,
                    Appointment.date == appointment_date,
                    Appointment.status.in_(ACTIVE_STATUSES),
                )
            ).limit(1)
        )
        return result.scalar_one_or_none() is not None

    async def create_appointment(
        self,
        patient_id: UUID,
        doctor_id: UUID,
        slot_id: UUID,
        appointment_date: date,
        appointment_time: str,
        reason: str | None = None,
    ) -> Appointment:
        """Create a pending appointment."""
        if await self.has_active_appointment(patient_id, doctor_id, appointment_date):
            raise Conflict("You already have an appointment with this doctor on this date")

        appointment = Appointment(
            patient_id=patient_id,
            doctor_id=doctor_id,
            slot_id=slot_id,
            date=appointment_date,
            time=appointment_time,
            reason=reason,
            status=AppointmentStatus.PENDING.value,
        )
        self.db.add(appointment)
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning(f"Duplicate active appointment for patient {patient_id} on {appointment_date}")
            raise Conflict("You already have an appointment with this doctor on this date") from e
        await self.db.refresh(appointment)

        logfire.info(
            "appointment_created",
            appointment_id=str(appointment.id),
            patient_id=str(patient_id),
            doctor_id=str(doctor_id),
            date=str(appointment_date),
            time=appointment_time,
        )
        return appointment

    async def get_patient_appointments(
        self,
        patient_id: UUID,
        status: AppointmentStatus | None = None,
        upcoming: bool = False,
    ) -> list[Appointment]:
        """Get all appointments for a patient, most recent date first."""
        query = select(Appointment).where(Appointment.patient_id == patient_id)

        if status:
            query = query.where(Appointment.status == status.value)

        if upcoming:
            query = query.where(
                Appointment.date >= date.today(),
                Appointment.status.in_(ACTIVE_STATUSES),
            )

        query = self._ordered(query)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_appointments(
        self,
        status: AppointmentStatus | None = None,
        doctor_id: UUID | None = None,
        patient_id: UUID | None = None,
        appointment_date: date | None = None,
    ) -> list[Appointment]:
        """Get appointments across all patients (admin view)."""
        query = select(Appointment)

        if status:
            query = query.where(Appointment.status == status.value)

        if doctor_id:
            query = query.where(Appointment.doctor_id == doctor_id)

        if patient_id:
            query = query.where(Appointment.patient_id == patient_id)

        if appointment_date:
            query = query.where(Appointment.date == appointment_date)

        query = self._ordered(query)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    @staticmethod
    def _ordered(query):
        # Latest day first, then clock order within the day
        return query.outerjoin(Slot, Slot.id == Appointment.slot_id).order_by(
            Appointment.date.desc(),
            Slot.minutes,
            Appointment.created_at,
        )

    async def transition(
        self,
        appointment: Appointment,
        new_status: AppointmentStatus,
        actor: User,
        notes: str | None = None,
        reason: str | None = None,
    ) -> Appointment:
        """Move an appointment to a new status and stamp the change."""
        previous = appointment.status
        check_transition(previous, new_status.value)

        now = datetime.utcnow()
        appointment.status = new_status.value

        if new_status == AppointmentStatus.CONFIRMED:
            appointment.confirmed_at = now
        elif new_status == AppointmentStatus.COMPLETED:
            appointment.completed_at = now
        elif new_status == AppointmentStatus.CANCELLED:
            appointment.cancelled_at = now
            appointment.cancelled_by = actor.role
            appointment.cancellation_reason = reason

        if notes:
            appointment.notes = notes

        await self.db.flush()
        await self.db.refresh(appointment)

        logfire.info(
            "appointment_transition",
            appointment_id=str(appointment.id),
            from_status=previous,
            to_status=new_status.value,
            actor_role=actor.role,
        )
        return appointment

    async def delete_appointment(self, appointment: Appointment) -> None:
        """Hard delete an appointment record."""
        await self.db.delete(appointment)
        await self.db.flush()

    async def get_stats(
        self, start_date: datetime | None = None, end_date: datetime | None = None
    ) -> dict:
        """Counts by status for appointments created in a window, plus today/upcoming."""
        start = start_date or datetime(1970, 1, 1)
        end = end_date or datetime.utcnow()
        created_window = and_(Appointment.created_at >= start, Appointment.created_at <= end)

        result = await self.db.execute(
            select(Appointment.status, func.count(Appointment.id))
            .where(created_window)
            .group_by(Appointment.status)
        )
        by_status = {status: count for status, count in result.all()}

        today = date.today()
        today_count = await self.db.execute(
            select(func.count(Appointment.id)).where(Appointment.date == today)
        )
        upcoming_count = await self.db.execute(
            select(func.count(Appointment.id)).where(
                Appointment.date >= today,
                Appointment.status.in_(ACTIVE_STATUSES),
            )
        )

        return {
            "total": sum(by_status.values()),
            "by_status": by_status,
            "today": today_count.scalar_one(),
            "upcoming": upcoming_count.scalar_one(),
        }


def end_of_day(value: date) -> datetime:
    """Last representable instant of a calendar day."""
    return datetime.combine(value, time.max)
