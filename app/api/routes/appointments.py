"""Appointment routes - API endpoints for appointment operations."""

import datetime as dt
from datetime import datetime
from fastapi import APIRouter, Query
from uuid import UUID

from app.api.deps import AdminUser, CurrentUser, DBSession, Notifier, PatientUser
from app.exceptions import Unauthorized
from app.models.appointment import AppointmentStatus
from app.schemas.appointment import (
    AppointmentCancel,
    AppointmentComplete,
    AppointmentConfirm,
    AppointmentCreate,
    AppointmentResponse,
    AppointmentStats,
)
from app.schemas.common import APIResponse, ok
from app.services.appointment_service import AppointmentService, end_of_day
from app.services.booking_service import BookingService

router = APIRouter()


def _appointments(appointments) -> list[AppointmentResponse]:
    return [AppointmentResponse.model_validate(a) for a in appointments]


@router.post("", response_model=APIResponse[AppointmentResponse], status_code=201)
async def book_appointment(
    booking: AppointmentCreate, db: DBSession, patient: PatientUser, notifier: Notifier
):
    """Book an open slot. The appointment starts out pending."""
    service = BookingService(db, notifier)
    appointment = await service.book_appointment(patient, booking)
    return ok(
        AppointmentResponse.model_validate(appointment),
        message="Appointment booked successfully",
    )


@router.get("/my-appointments", response_model=APIResponse[list[AppointmentResponse]])
async def get_my_appointments(
    db: DBSession,
    patient: PatientUser,
    status: AppointmentStatus | None = None,
    upcoming: bool = False,
):
    """The logged-in patient's appointments."""
    service = AppointmentService(db)
    appointments = await service.get_patient_appointments(patient.id, status, upcoming)
    data = _appointments(appointments)
    return ok(data, count=len(data))


@router.get("", response_model=APIResponse[list[AppointmentResponse]])
async def get_all_appointments(
    db: DBSession,
    admin: AdminUser,
    status: AppointmentStatus | None = None,
    doctor_id: UUID | None = Query(None, alias="doctorId"),
    patient_id: UUID | None = Query(None, alias="patientId"),
    date: dt.date | None = None,
):
    """All appointments, optionally filtered."""
    service = AppointmentService(db)
    appointments = await service.get_appointments(status, doctor_id, patient_id, date)
    data = _appointments(appointments)
    return ok(data, count=len(data))


@router.get("/stats/overview", response_model=APIResponse[AppointmentStats])
async def get_appointment_stats(
    db: DBSession,
    admin: AdminUser,
    start_date: dt.date | None = Query(None, alias="startDate"),
    end_date: dt.date | None = Query(None, alias="endDate"),
):
    """Dashboard counts for appointments created in a date window."""
    service = AppointmentService(db)
    stats = await service.get_stats(
        datetime.combine(start_date, dt.time.min) if start_date else None,
        end_of_day(end_date) if end_date else None,
    )
    return ok(AppointmentStats(**stats))


@router.get("/{appointment_id}", response_model=APIResponse[AppointmentResponse])
async def get_appointment(appointment_id: UUID, db: DBSession, user: CurrentUser):
    """Get an appointment. Patients only see their own."""
    service = AppointmentService(db)
    appointment = await service.require_appointment(appointment_id)

    if not user.is_admin and appointment.patient_id != user.id:
        raise Unauthorized("Not authorized to access this appointment")

    return ok(AppointmentResponse.model_validate(appointment))


@router.put("/{appointment_id}/confirm", response_model=APIResponse[AppointmentResponse])
async def confirm_appointment(
    appointment_id: UUID,
    db: DBSession,
    admin: AdminUser,
    notifier: Notifier,
    body: AppointmentConfirm | None = None,
):
    """Confirm a pending appointment."""
    service = BookingService(db, notifier)
    appointment = await service.confirm_appointment(
        appointment_id, admin, notes=body.notes if body else None
    )
    return ok(
        AppointmentResponse.model_validate(appointment),
        message="Appointment confirmed successfully",
    )


@router.put("/{appointment_id}/cancel", response_model=APIResponse[AppointmentResponse])
async def cancel_appointment(
    appointment_id: UUID,
    db: DBSession,
    user: CurrentUser,
    notifier: Notifier,
    body: AppointmentCancel | None = None,
):
    """Cancel an appointment and free its slot."""
    service = BookingService(db, notifier)
    appointment = await service.cancel_appointment(
        appointment_id, user, reason=body.cancellation_reason if body else None
    )
    return ok(
        AppointmentResponse.model_validate(appointment),
        message="Appointment cancelled successfully",
    )


@router.put("/{appointment_id}/complete", response_model=APIResponse[AppointmentResponse])
async def complete_appointment(
    appointment_id: UUID,
    db: DBSession,
    admin: AdminUser,
    body: AppointmentComplete | None = None,
):
    """Mark an appointment as completed."""
    service = BookingService(db)
    appointment = await service.complete_appointment(
        appointment_id, admin, notes=body.notes if body else None
    )
    return ok(
        AppointmentResponse.model_validate(appointment),
        message="Appointment marked as completed",
    )


@router.delete("/{appointment_id}", response_model=APIResponse[None])
async def delete_appointment(appointment_id: UUID, db: DBSession, admin: AdminUser):
    """Delete an appointment record."""
    service = BookingService(db)
    await service.delete_appointment(appointment_id)
    return ok(message="Appointment deleted successfully")
