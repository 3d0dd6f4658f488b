"""Slot routes - public availability and admin slot management."""

import datetime as dt
from fastapi import APIRouter, Query
from uuid import UUID

from app.api.deps import AdminUser, DBSession
from app.schemas.common import APIResponse, ok
from app.schemas.slot import BlockDates, BulkSlotCreate, SlotCreate, SlotResponse
from app.services.doctor_service import DoctorService
from app.services.slot_service import DEFAULT_TIME_SLOTS, SlotService

router = APIRouter()


def _slots(slots) -> list[SlotResponse]:
    return [SlotResponse.model_validate(slot) for slot in slots]


@router.get("/available/{doctor_id}", response_model=APIResponse[list[SlotResponse]])
async def get_available_slots(
    doctor_id: UUID,
    db: DBSession,
    date: dt.date = Query(..., description="Day to list (YYYY-MM-DD)"),
):
    """Open slots of a doctor on a date, in clock order."""
    await DoctorService(db).require_doctor(doctor_id)
    slots = await SlotService(db).list_available(doctor_id, date)
    data = _slots(slots)
    return ok(data, count=len(data))


@router.get("/generate-times", response_model=APIResponse[list[str]])
async def generate_time_slots(admin: AdminUser):
    """The standard clinic day as slot labels."""
    return ok(list(DEFAULT_TIME_SLOTS))


@router.post("", response_model=APIResponse[list[SlotResponse]], status_code=201)
async def create_slots(slot_data: SlotCreate, db: DBSession, admin: AdminUser):
    """Create slots for one doctor and day. Existing labels are skipped."""
    doctor = await DoctorService(db).require_doctor(slot_data.doctor_id)
    created = await SlotService(db).create_slots(doctor, slot_data.date, slot_data.time_slots)
    data = _slots(created)
    return ok(data, message=f"{len(data)} slots created successfully", count=len(data))


@router.post("/bulk-create", response_model=APIResponse[None], status_code=201)
async def bulk_create_slots(bulk_data: BulkSlotCreate, db: DBSession, admin: AdminUser):
    """Create slots for each available day in a date range."""
    doctor = await DoctorService(db).require_doctor(bulk_data.doctor_id)
    total = await SlotService(db).bulk_create_slots(
        doctor,
        bulk_data.start_date,
        bulk_data.end_date,
        bulk_data.time_slots,
        bulk_data.exclude_days,
    )
    return ok(message=f"{total} slots created successfully", count=total)


@router.get("/doctor/{doctor_id}", response_model=APIResponse[list[SlotResponse]])
async def get_doctor_slots(
    doctor_id: UUID,
    db: DBSession,
    admin: AdminUser,
    date: dt.date | None = None,
    is_booked: bool | None = Query(None, alias="isBooked"),
    is_blocked: bool | None = Query(None, alias="isBlocked"),
):
    """All slots of a doctor, optionally filtered."""
    await DoctorService(db).require_doctor(doctor_id)
    slots = await SlotService(db).list_for_doctor(doctor_id, date, is_booked, is_blocked)
    data = _slots(slots)
    return ok(data, count=len(data))


@router.put("/{slot_id}/block", response_model=APIResponse[SlotResponse])
async def toggle_block_slot(slot_id: UUID, db: DBSession, admin: AdminUser):
    """Block an open slot, or unblock a blocked one."""
    service = SlotService(db)
    slot = await service.require_slot(slot_id)
    slot = await service.toggle_block(slot)
    state = "blocked" if slot.is_blocked else "unblocked"
    return ok(SlotResponse.model_validate(slot), message=f"Slot {state} successfully")


@router.post("/block-dates", response_model=APIResponse[None])
async def block_dates(block_data: BlockDates, db: DBSession, admin: AdminUser):
    """Block every unbooked slot of a doctor on the given dates."""
    doctor = await DoctorService(db).require_doctor(block_data.doctor_id)
    blocked = await SlotService(db).block_dates(doctor, block_data.dates)
    return ok(
        message=f"{blocked} slots blocked for {len(block_data.dates)} date(s)",
        count=blocked,
    )


@router.delete("/{slot_id}", response_model=APIResponse[None])
async def delete_slot(slot_id: UUID, db: DBSession, admin: AdminUser):
    """Delete an unbooked slot."""
    service = SlotService(db)
    slot = await service.require_slot(slot_id)
    await service.delete(slot)
    return ok(message="Slot deleted successfully")
