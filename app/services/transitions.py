"""Status transitions - who may move an appointment, and what moves with it.

The state machine itself lives in ``check_transition``; this module adds
role and ownership rules and keeps the slot in step with the appointment.
"""

import logging
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import Unauthorized
from app.models.appointment import Appointment, AppointmentStatus
from app.models.user import User
from app.services.appointment_service import AppointmentService
from app.services.slot_service import SlotService

logger = logging.getLogger(__name__)


class StatusTransitionHandler:
    """Applies confirm / cancel / complete on behalf of a user."""

    def __init__(self, db: AsyncSession):
        self.db = db
        self.appointments = AppointmentService(db)
        self.slots = SlotService(db)

    async def confirm(
        self, appointment_id: UUID, actor: User, notes: str | None = None
    ) -> Appointment:
        """Admin confirms a pending appointment."""
        self._require_admin(actor, "confirm")
        appointment = await self.appointments.require_appointment(appointment_id)
        return await self.appointments.transition(
            appointment, AppointmentStatus.CONFIRMED, actor, notes=notes
        )

    async def cancel(
        self, appointment_id: UUID, actor: User, reason: str | None = None
    ) -> Appointment:
        """Owner or admin cancels; the slot is freed afterwards."""
        appointment = await self.appointments.require_appointment(appointment_id)
        if not actor.is_admin and appointment.patient_id != actor.id:
            raise Unauthorized("Not authorized to cancel this appointment")

        appointment = await self.appointments.transition(
            appointment, AppointmentStatus.CANCELLED, actor, reason=reason
        )

        if appointment.slot_id:
            await self.slots.release(appointment.slot_id)
        else:
            logger.warning(f"Cancelled appointment {appointment.id} has no slot to release")
        return appointment

    async def complete(
        self, appointment_id: UUID, actor: User, notes: str | None = None
    ) -> Appointment:
        """Admin marks an appointment as completed. The slot stays booked."""
        self._require_admin(actor, "complete")
        appointment = await self.appointments.require_appointment(appointment_id)
        return await self.appointments.transition(
            appointment, AppointmentStatus.COMPLETED, actor, notes=notes
        )

    @staticmethod
    def _require_admin(actor: User, action: str) -> None:
        if not actor.is_admin:
            raise Unauthorized(f"Only admins can {action} appointments")
