"""Notification dispatch - best-effort patient emails.

Emails go out as background tasks after the response is sent. A failed
delivery is logged and dropped; it never affects the booking itself.
"""

import logging
from typing import Callable

import logfire
from fastapi import BackgroundTasks

from app import email_service
from app.models.appointment import Appointment, AppointmentStatus

logger = logging.getLogger(__name__)

# Status changes the patient hears about
NOTIFIED_STATUSES = (AppointmentStatus.CONFIRMED, AppointmentStatus.CANCELLED)


def _deliver(kind: str, appointment_id: str, send: Callable[..., bool], **kwargs) -> None:
    try:
        send(**kwargs)
    except Exception as e:
        logger.error(f"Failed to send {kind} email for appointment {appointment_id}: {e}")
        logfire.error(
            "notification_failed",
            kind=kind,
            appointment_id=appointment_id,
            error=str(e),
        )


class NotificationDispatcher:
    """Schedules emails on the request's background task queue."""

    def __init__(self, background_tasks: BackgroundTasks):
        self.background_tasks = background_tasks

    def booking_created(self, appointment: Appointment) -> None:
        """Queue the 'booking received' email."""
        self.background_tasks.add_task(
            _deliver,
            "booking",
            str(appointment.id),
            email_service.send_appointment_confirmation,
            **self._details(appointment),
        )

    def status_changed(self, appointment: Appointment, status: AppointmentStatus) -> None:
        """Queue a status update email for confirm and cancel."""
        if status not in NOTIFIED_STATUSES:
            return
        self.background_tasks.add_task(
            _deliver,
            status.value,
            str(appointment.id),
            email_service.send_appointment_status_update,
            status=status.value,
            **self._details(appointment),
        )

    @staticmethod
    def _details(appointment: Appointment) -> dict:
        # Plain values only, the session is gone by the time the task runs
        return {
            "to": appointment.patient.email,
            "patient_name": appointment.patient.name,
            "doctor_name": appointment.doctor.name if appointment.doctor else "the clinic",
            "appointment_date": appointment.date,
            "appointment_time": appointment.time,
        }
