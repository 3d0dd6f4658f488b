"""Services package - Business logic layer."""

from app.services.user_service import UserService
from app.services.doctor_service import DoctorService
from app.services.slot_service import SlotService
from app.services.appointment_service import AppointmentService
from app.services.transitions import StatusTransitionHandler
from app.services.notification_service import NotificationDispatcher
from app.services.booking_service import BookingService

__all__ = [
    "UserService",
    "DoctorService",
    "SlotService",
    "AppointmentService",
    "StatusTransitionHandler",
    "NotificationDispatcher",
    "BookingService",
]
