from app.schemas.common import APIResponse, ok
from app.schemas.user import (
    UserRegister,
    UserLogin,
    UserUpdate,
    PasswordChange,
    UserResponse,
    AuthResponse,
)
from app.schemas.doctor import DoctorCreate, DoctorUpdate, DoctorResponse, DoctorStats
from app.schemas.slot import SlotCreate, BulkSlotCreate, BlockDates, SlotResponse
from app.schemas.appointment import (
    AppointmentCreate,
    AppointmentConfirm,
    AppointmentCancel,
    AppointmentComplete,
    AppointmentResponse,
    AppointmentStats,
)

__all__ = [
    "APIResponse",
    "ok",
    "UserRegister",
    "UserLogin",
    "UserUpdate",
    "PasswordChange",
    "UserResponse",
    "AuthResponse",
    "DoctorCreate",
    "DoctorUpdate",
    "DoctorResponse",
    "DoctorStats",
    "SlotCreate",
    "BulkSlotCreate",
    "BlockDates",
    "SlotResponse",
    "AppointmentCreate",
    "AppointmentConfirm",
    "AppointmentCancel",
    "AppointmentComplete",
    "AppointmentResponse",
    "AppointmentStats",
]
