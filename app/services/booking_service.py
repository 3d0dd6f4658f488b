"""Booking service - books appointments against slots.

A booking touches two rows: the appointment is inserted first and then the
slot is claimed. If the claim fails the appointment is removed again before
the error goes back to the caller.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import AppError, InvalidState
from app.models.appointment import Appointment, AppointmentStatus
from app.models.user import User
from app.schemas.appointment import AppointmentCreate
from app.services.appointment_service import AppointmentService
from app.services.doctor_service import DoctorService
from app.services.notification_service import NotificationDispatcher
from app.services.slot_service import SlotService
from app.services.transitions import StatusTransitionHandler

logger = logging.getLogger(__name__)


class BookingService:
    """Coordinates doctors, slots and appointments for a booking."""

    def __init__(self, db: AsyncSession, notifier: NotificationDispatcher | None = None):
        self.db = db
        self.notifier = notifier
        self.doctors = DoctorService(db)
        self.slots = SlotService(db)
        self.appointments = AppointmentService(db)
        self.transitions = StatusTransitionHandler(db)

    async def book_appointment(self, patient: User, booking: AppointmentCreate) -> Appointment:
        """Book a slot for a patient and return the pending appointment."""
        doctor = await self.doctors.require_doctor(booking.doctor_id)
        if not doctor.is_active:
            raise InvalidState("This doctor is not available for appointments")

        slot = await self.slots.require_slot(booking.slot_id)
        if slot.doctor_id != doctor.id:
            raise InvalidState("This time slot does not belong to the selected doctor")
        if slot.is_blocked:
            raise InvalidState("This time slot is blocked")
        if slot.is_booked:
            raise InvalidState("This time slot is already booked")
        if slot.date != booking.date or slot.time != booking.time:
            raise InvalidState("Requested date and time do not match the selected slot")

        appointment = await self.appointments.create_appointment(
            patient_id=patient.id,
            doctor_id=doctor.id,
            slot_id=slot.id,
            appointment_date=slot.date,
            appointment_time=slot.time,
            reason=booking.reason,
        )

        try:
            await self.slots.book(slot.id, appointment.id)
        except AppError:
            logger.warning(f"Slot {slot.id} was taken before appointment {appointment.id} could claim it")
            await self.appointments.delete_appointment(appointment)
            raise

        logger.info(f"Booked {doctor.name} on {slot.date} {slot.time} for {patient.email}")
        if self.notifier:
            self.notifier.booking_created(appointment)
        return appointment

    async def confirm_appointment(
        self, appointment_id: UUID, actor: User, notes: str | None = None
    ) -> Appointment:
        appointment = await self.transitions.confirm(appointment_id, actor, notes=notes)
        if self.notifier:
            self.notifier.status_changed(appointment, AppointmentStatus.CONFIRMED)
        return appointment

    async def cancel_appointment(
        self, appointment_id: UUID, actor: User, reason: str | None = None
    ) -> Appointment:
        appointment = await self.transitions.cancel(appointment_id, actor, reason=reason)
        if self.notifier:
            self.notifier.status_changed(appointment, AppointmentStatus.CANCELLED)
        return appointment

    async def complete_appointment(
        self, appointment_id: UUID, actor: User, notes: str | None = None
    ) -> Appointment:
        return await self.transitions.complete(appointment_id, actor, notes=notes)

    async def delete_appointment(self, appointment_id: UUID) -> None:
        """Delete an appointment, freeing its slot if it still holds one."""
        appointment = await self.appointments.require_appointment(appointment_id)
        if appointment.slot_id:
            slot = await self.slots.get_slot_by_id(appointment.slot_id)
            if slot and slot.is_booked and slot.appointment_id == appointment.id:
                await self.slots.release(slot.id)
        await self.appointments.delete_appointment(appointment)
        logger.info(f"Deleted appointment {appointment_id}")
