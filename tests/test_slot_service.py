import uuid
from datetime import date, timedelta

import pytest

from app.exceptions import InvalidState, NotFound, ValidationError
from app.services.slot_service import DEFAULT_TIME_SLOTS, SlotService


async def test_creating_the_same_label_twice_keeps_one_slot(db_session, doctor, future_day):
    service = SlotService(db_session)

    first = await service.create_slots(doctor, future_day, ["10:00 AM"])
    second = await service.create_slots(doctor, future_day, ["10:00 am", "10:00 AM"])

    assert len(first) == 1
    assert second == []
    slots = await service.list_for_doctor(doctor.id, future_day)
    assert [slot.time for slot in slots] == ["10:00 AM"]


async def test_new_slots_start_open(db_session, doctor, future_day):
    service = SlotService(db_session)
    [slot] = await service.create_slots(doctor, future_day, ["09:00 AM"])

    assert slot.doctor_id == doctor.id
    assert slot.date == future_day
    assert slot.is_booked is False
    assert slot.is_blocked is False
    assert slot.appointment_id is None


async def test_cannot_create_slots_in_the_past(db_session, doctor):
    service = SlotService(db_session)
    with pytest.raises(ValidationError, match="past dates"):
        await service.create_slots(doctor, date.today() - timedelta(days=1), ["09:00 AM"])


async def test_available_slots_are_in_clock_order(db_session, doctor, future_day):
    service = SlotService(db_session)
    await service.create_slots(doctor, future_day, ["02:00 PM", "10:00 AM", "12:00 PM", "09:30 AM"])

    available = await service.list_available(doctor.id, future_day)

    assert [slot.time for slot in available] == ["09:30 AM", "10:00 AM", "12:00 PM", "02:00 PM"]


async def test_availability_skips_blocked_slots(db_session, doctor, future_day):
    service = SlotService(db_session)
    blocked, open_slot = await service.create_slots(doctor, future_day, ["09:00 AM", "09:30 AM"])
    await service.toggle_block(blocked)

    available = await service.list_available(doctor.id, future_day)

    assert [slot.id for slot in available] == [open_slot.id]


async def test_second_booking_of_a_slot_is_rejected(db_session, doctor, future_day):
    service = SlotService(db_session)
    [slot] = await service.create_slots(doctor, future_day, ["10:00 AM"])
    first_appointment, second_appointment = uuid.uuid4(), uuid.uuid4()

    await service.book(slot.id, first_appointment)
    with pytest.raises(InvalidState, match="already booked"):
        await service.book(slot.id, second_appointment)

    assert slot.is_booked is True
    assert slot.appointment_id == first_appointment


async def test_booking_a_blocked_slot_is_rejected(db_session, doctor, future_day):
    service = SlotService(db_session)
    [slot] = await service.create_slots(doctor, future_day, ["10:00 AM"])
    await service.toggle_block(slot)

    with pytest.raises(InvalidState, match="blocked"):
        await service.book(slot.id, uuid.uuid4())


async def test_booking_an_unknown_slot(db_session):
    with pytest.raises(NotFound):
        await SlotService(db_session).book(uuid.uuid4(), uuid.uuid4())


async def test_release_is_idempotent(db_session, doctor, future_day):
    service = SlotService(db_session)
    [slot] = await service.create_slots(doctor, future_day, ["10:00 AM"])
    await service.book(slot.id, uuid.uuid4())

    await service.release(slot.id)
    await service.release(slot.id)

    assert slot.is_booked is False
    assert slot.appointment_id is None


async def test_toggle_block_round_trip_and_booked_guard(db_session, doctor, future_day):
    service = SlotService(db_session)
    first, second = await service.create_slots(doctor, future_day, ["10:00 AM", "10:30 AM"])

    assert (await service.toggle_block(first)).is_blocked is True
    assert (await service.toggle_block(first)).is_blocked is False

    await service.book(second.id, uuid.uuid4())
    with pytest.raises(InvalidState, match="Cannot block a booked slot"):
        await service.toggle_block(second)


async def test_block_dates_leaves_booked_slots_alone(db_session, doctor, future_day):
    service = SlotService(db_session)
    booked, *rest = await service.create_slots(doctor, future_day, ["09:00 AM", "09:30 AM", "10:00 AM"])
    await service.book(booked.id, uuid.uuid4())

    count = await service.block_dates(doctor, [future_day])

    assert count == 2
    assert all(slot.is_blocked for slot in rest)
    assert booked.is_blocked is False
    assert await service.list_available(doctor.id, future_day) == []


async def test_block_dates_updates_slots_already_held_in_session(
    db_session, doctor, add_doctor, future_day
):
    service = SlotService(db_session)
    other_doctor = await add_doctor(name="Dr. Shaw", email="shaw@clinic.test")
    next_day = future_day + timedelta(days=1)
    [target] = await service.create_slots(doctor, future_day, ["09:00 AM"])
    [later] = await service.create_slots(doctor, next_day, ["09:00 AM"])
    [elsewhere] = await service.create_slots(other_doctor, future_day, ["09:00 AM"])

    await service.block_dates(doctor, [future_day])

    assert target.is_blocked is True
    assert later.is_blocked is False
    assert elsewhere.is_blocked is False


async def test_delete_refuses_booked_slots(db_session, doctor, future_day):
    service = SlotService(db_session)
    booked, free = await service.create_slots(doctor, future_day, ["09:00 AM", "09:30 AM"])
    await service.book(booked.id, uuid.uuid4())

    with pytest.raises(InvalidState, match="Cannot delete a booked slot"):
        await service.delete(booked)

    await service.delete(free)
    assert await service.get_slot_by_id(free.id) is None


async def test_bulk_create_follows_available_and_excluded_days(db_session, add_doctor, future_day):
    doctor = await add_doctor(email="mon@clinic.test", available_days=["Monday", "Tuesday"])
    service = SlotService(db_session)
    week_end = future_day + timedelta(days=6)

    created = await service.bulk_create_slots(
        doctor, future_day, week_end, ["09:00 AM", "09:30 AM"], exclude_days=["Tuesday"]
    )

    # one Monday in any seven consecutive days, Tuesday excluded
    assert created == 2
    slots = await service.list_for_doctor(doctor.id)
    assert {slot.date.strftime("%A") for slot in slots} == {"Monday"}


async def test_bulk_create_rejects_reversed_range(db_session, doctor, future_day):
    with pytest.raises(ValidationError, match="Start date must be before end date"):
        await SlotService(db_session).bulk_create_slots(
            doctor, future_day, future_day - timedelta(days=1), ["09:00 AM"]
        )


def test_default_day_runs_nine_to_five():
    assert DEFAULT_TIME_SLOTS[0] == "09:00 AM"
    assert DEFAULT_TIME_SLOTS[-1] == "05:00 PM"
    assert len(DEFAULT_TIME_SLOTS) == 14
