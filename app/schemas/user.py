import re
from pydantic import Field, field_validator
from datetime import datetime
from uuid import UUID

from app.schemas.common import APIModel

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$"


def _check_password_strength(value: str) -> str:
    if not (re.search(r"[a-z]", value) and re.search(r"[A-Z]", value) and re.search(r"\d", value)):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, and one number"
        )
    return value


class UserRegister(APIModel):
    """Schema for patient self-registration."""
    name: str = Field(..., min_length=2, max_length=100, description="Full name")
    email: str = Field(..., pattern=EMAIL_PATTERN, max_length=255)
    password: str = Field(..., min_length=6, max_length=72)
    phone: str | None = Field(None, max_length=20, description="Phone number")

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()

    @field_validator("password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return _check_password_strength(value)


class UserLogin(APIModel):
    """Schema for login (patient or admin)."""
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, value: str) -> str:
        return value.strip().lower()


class UserUpdate(APIModel):
    """Schema for updating the caller's profile."""
    name: str | None = Field(None, min_length=2, max_length=100)
    phone: str | None = Field(None, max_length=20)


class PasswordChange(APIModel):
    """Schema for changing the caller's password."""
    current_password: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=6, max_length=72)

    @field_validator("new_password")
    @classmethod
    def strong_password(cls, value: str) -> str:
        return _check_password_strength(value)


class UserResponse(APIModel):
    """Schema for user response."""
    id: UUID
    name: str
    email: str
    phone: str | None = None
    role: str
    created_at: datetime


class PatientSummary(APIModel):
    """Patient details attached to appointments."""
    id: UUID
    name: str
    email: str
    phone: str | None = None


class AuthResponse(APIModel):
    """User plus bearer token returned by register/login."""
    user: UserResponse
    token: str
