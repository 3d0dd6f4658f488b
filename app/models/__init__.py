from app.models.user import User, UserRole
from app.models.doctor import Doctor
from app.models.slot import Slot
from app.models.appointment import Appointment, AppointmentStatus

__all__ = [
    "User",
    "UserRole",
    "Doctor",
    "Slot",
    "Appointment",
    "AppointmentStatus",
]
