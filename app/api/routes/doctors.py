"""Doctor routes - public directory and admin management."""

from fastapi import APIRouter, Query
from uuid import UUID

from app.api.deps import AdminUser, DBSession
from app.models.doctor import SPECIALIZATIONS
from app.schemas.common import APIResponse, ok
from app.schemas.doctor import (
    DoctorCreate,
    DoctorResponse,
    DoctorStats,
    DoctorSummary,
    DoctorUpdate,
)
from app.services.doctor_service import DoctorService

router = APIRouter()


@router.get("", response_model=APIResponse[list[DoctorResponse]])
async def list_doctors(
    db: DBSession,
    specialization: str | None = None,
    search: str | None = None,
    is_active: bool | None = Query(None, alias="isActive"),
):
    """List doctors with optional filters."""
    service = DoctorService(db)
    doctors = await service.list_doctors(specialization, search, is_active)
    data = [DoctorResponse.model_validate(doctor) for doctor in doctors]
    return ok(data, count=len(data))


@router.get("/specializations/list", response_model=APIResponse[list[str]])
async def list_specializations():
    """Get the specializations a doctor can have."""
    return ok(list(SPECIALIZATIONS))


@router.get("/{doctor_id}", response_model=APIResponse[DoctorResponse])
async def get_doctor(doctor_id: UUID, db: DBSession):
    """Get a doctor by ID."""
    service = DoctorService(db)
    doctor = await service.require_doctor(doctor_id)
    return ok(DoctorResponse.model_validate(doctor))


@router.post("", response_model=APIResponse[DoctorResponse], status_code=201)
async def create_doctor(doctor_data: DoctorCreate, db: DBSession, admin: AdminUser):
    """Create a new doctor."""
    service = DoctorService(db)
    doctor = await service.create_doctor(doctor_data)
    return ok(DoctorResponse.model_validate(doctor), message="Doctor created successfully")


@router.put("/{doctor_id}", response_model=APIResponse[DoctorResponse])
async def update_doctor(
    doctor_id: UUID, doctor_data: DoctorUpdate, db: DBSession, admin: AdminUser
):
    """Update a doctor."""
    service = DoctorService(db)
    doctor = await service.require_doctor(doctor_id)
    doctor = await service.update_doctor(doctor, doctor_data)
    return ok(DoctorResponse.model_validate(doctor), message="Doctor updated successfully")


@router.delete("/{doctor_id}", response_model=APIResponse[None])
async def delete_doctor(doctor_id: UUID, db: DBSession, admin: AdminUser):
    """Delete a doctor and their slots (refused while appointments are upcoming)."""
    service = DoctorService(db)
    doctor = await service.require_doctor(doctor_id)
    await service.delete_doctor(doctor)
    return ok(message="Doctor deleted successfully")


@router.get("/{doctor_id}/stats", response_model=APIResponse[DoctorStats])
async def get_doctor_stats(doctor_id: UUID, db: DBSession, admin: AdminUser):
    """Appointment counts for a doctor."""
    service = DoctorService(db)
    doctor = await service.require_doctor(doctor_id)
    stats = await service.get_stats(doctor)
    return ok(
        DoctorStats(
            doctor=DoctorSummary.model_validate(stats["doctor"]),
            appointments=stats["appointments"],
            upcoming=stats["upcoming"],
        )
    )
