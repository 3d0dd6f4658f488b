"""Slot service - Business logic for bookable time slots.

Slots are generated in bulk by admins and then flipped between open,
booked and blocked. Booking goes through a single conditional UPDATE so
two requests racing for one slot cannot both win.
"""

import logging
import uuid
from datetime import date, datetime, timedelta

import logfire
from sqlalchemy import select, update, and_
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from uuid import UUID

from app.exceptions import InvalidState, NotFound, ValidationError
from app.models.doctor import Doctor
from app.models.slot import Slot
from app.utils.time_labels import label_to_minutes, normalize_time_label


# Standard clinic day: 9 AM to 5 PM every 30 minutes, lunch after noon
DEFAULT_TIME_SLOTS = [
    "09:00 AM", "09:30 AM", "10:00 AM", "10:30 AM", "11:00 AM", "11:30 AM",
    "12:00 PM",
    "02:00 PM", "02:30 PM", "03:00 PM", "03:30 PM", "04:00 PM", "04:30 PM",
    "05:00 PM",
]

_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

logger = logging.getLogger(__name__)


class SlotService:
    """Service class for slot operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_slot_by_id(self, slot_id: UUID) -> Slot | None:
        """Get a slot by ID."""
        return await self.db.get(Slot, slot_id)

    async def require_slot(self, slot_id: UUID) -> Slot:
        """Get a slot by ID or raise NotFound."""
        slot = await self.get_slot_by_id(slot_id)
        if not slot:
            raise NotFound("Time slot not found")
        return slot

    async def create_slots(
        self, doctor: Doctor, slot_date: date, time_labels: list[str]
    ) -> list[Slot]:
        """Create one slot per label, skipping any that already exist.

        Returns only the newly created slots, so running the same generation
        twice is harmless.
        """
        if slot_date < date.today():
            raise ValidationError("Cannot create slots for past dates")

        now = datetime.utcnow()
        rows = []
        seen = set()
        for label in time_labels:
            label = normalize_time_label(label)
            if label in seen:
                continue
            seen.add(label)
            rows.append(
                {
                    "id": uuid.uuid4(),
                    "doctor_id": doctor.id,
                    "date": slot_date,
                    "time": label,
                    "minutes": label_to_minutes(label),
                    "is_booked": False,
                    "is_blocked": False,
                    "appointment_id": None,
                    "created_at": now,
                    "updated_at": now,
                }
            )

        if not rows:
            return []

        insert = _INSERTS.get(self.db.get_bind().dialect.name)
        if insert is None:
            created = await self._create_missing(doctor.id, slot_date, rows)
        else:
            stmt = (
                insert(Slot)
                .values(rows)
                .on_conflict_do_nothing(index_elements=["doctor_id", "date", "time"])
                .returning(Slot)
            )
            result = await self.db.scalars(stmt)
            created = list(result.all())

        skipped = len(rows) - len(created)
        if skipped:
            logger.info(f"{skipped} slot(s) already exist for doctor {doctor.id} on {slot_date}, skipped")
        return sorted(created, key=lambda slot: slot.minutes)

    async def _create_missing(self, doctor_id: UUID, slot_date: date, rows: list[dict]) -> list[Slot]:
        """Portable fallback for dialects without ON CONFLICT."""
        result = await self.db.execute(
            select(Slot.time).where(Slot.doctor_id == doctor_id, Slot.date == slot_date)
        )
        existing = set(result.scalars().all())
        created = [Slot(**row) for row in rows if row["time"] not in existing]
        self.db.add_all(created)
        await self.db.flush()
        return created

    async def bulk_create_slots(
        self,
        doctor: Doctor,
        start_date: date,
        end_date: date,
        time_labels: list[str],
        exclude_days: list[str] | None = None,
    ) -> int:
        """Create slots for every working day in an inclusive date range."""
        if start_date > end_date:
            raise ValidationError("Start date must be before end date")

        excluded = set(exclude_days or [])
        total_created = 0
        current = max(start_date, date.today())

        while current <= end_date:
            day_name = current.strftime("%A")
            if day_name not in excluded and doctor.is_available_on(day_name):
                created = await self.create_slots(doctor, current, time_labels)
                total_created += len(created)
            current += timedelta(days=1)

        logfire.info(
            "slots_bulk_created",
            doctor_id=str(doctor.id),
            start_date=str(start_date),
            end_date=str(end_date),
            created=total_created,
        )
        return total_created

    async def list_available(self, doctor_id: UUID, slot_date: date) -> list[Slot]:
        """Open slots for a doctor on a date, in clock order."""
        result = await self.db.execute(
            select(Slot)
            .where(
                and_(
                    Slot.doctor_id == doctor_id,
                    Slot.date == slot_date,
                    Slot.is_booked.is_(False),
                    Slot.is_blocked.is_(False),
                )
            )
            .order_by(Slot.minutes)
        )
        return list(result.scalars().all())

    async def list_for_doctor(
        self,
        doctor_id: UUID,
        slot_date: date | None = None,
        is_booked: bool | None = None,
        is_blocked: bool | None = None,
    ) -> list[Slot]:
        """All slots of a doctor with optional filters (admin view)."""
        query = select(Slot).where(Slot.doctor_id == doctor_id)

        if slot_date:
            query = query.where(Slot.date == slot_date)

        if is_booked is not None:
            query = query.where(Slot.is_booked.is_(is_booked))

        if is_blocked is not None:
            query = query.where(Slot.is_blocked.is_(is_blocked))

        query = query.order_by(Slot.date, Slot.minutes)

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def book(self, slot_id: UUID, appointment_id: UUID) -> None:
        """Mark a slot booked for an appointment.

        The open-slot check and the write happen in one statement; if
        another request got there first no row matches.
        """
        result = await self.db.execute(
            update(Slot)
            .where(
                Slot.id == slot_id,
                Slot.is_booked.is_(False),
                Slot.is_blocked.is_(False),
            )
            .values(is_booked=True, appointment_id=appointment_id, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )

        if result.rowcount != 1:
            slot = await self._reload(slot_id)
            if slot is None:
                raise NotFound("Time slot not found")
            if slot.is_blocked:
                raise InvalidState("This time slot is blocked")
            raise InvalidState("This time slot is already booked")

        await self._reload(slot_id)
        logfire.info("slot_booked", slot_id=str(slot_id), appointment_id=str(appointment_id))

    async def release(self, slot_id: UUID) -> None:
        """Free a slot. Releasing an open slot is a no-op."""
        await self.db.execute(
            update(Slot)
            .where(Slot.id == slot_id)
            .values(is_booked=False, appointment_id=None, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        await self._reload(slot_id)
        logfire.info("slot_released", slot_id=str(slot_id))

    async def toggle_block(self, slot: Slot) -> Slot:
        """Block an open slot or unblock a blocked one."""
        if slot.is_booked:
            raise InvalidState("Cannot block a booked slot")

        slot.is_blocked = not slot.is_blocked
        await self.db.flush()
        await self.db.refresh(slot)
        return slot

    async def block_dates(self, doctor: Doctor, dates: list[date]) -> int:
        """Block every unbooked slot of a doctor on the given dates."""
        result = await self.db.execute(
            update(Slot)
            .where(
                Slot.doctor_id == doctor.id,
                Slot.date.in_(dates),
                Slot.is_booked.is_(False),
                Slot.is_blocked.is_(False),
            )
            .values(is_blocked=True, updated_at=datetime.utcnow())
            .execution_options(synchronize_session=False)
        )
        blocked = result.rowcount or 0
        # Bring slots this session already holds up to date
        refreshed = await self.db.execute(
            select(Slot)
            .where(Slot.doctor_id == doctor.id, Slot.date.in_(dates))
            .execution_options(populate_existing=True)
        )
        refreshed.scalars().all()
        logger.info(f"Blocked {blocked} slot(s) for doctor {doctor.id} on {len(dates)} date(s)")
        return blocked

    async def delete(self, slot: Slot) -> None:
        """Delete an unbooked slot."""
        if slot.is_booked:
            raise InvalidState("Cannot delete a booked slot")
        await self.db.delete(slot)
        await self.db.flush()

    async def _reload(self, slot_id: UUID) -> Slot | None:
        """Re-read a slot after a bulk UPDATE so the session copy is current."""
        return await self.db.get(Slot, slot_id, populate_existing=True)
