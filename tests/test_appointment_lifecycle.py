import pytest

from app.exceptions import Conflict, InvalidState, NotFound, Unauthorized
from app.models.appointment import AppointmentStatus
from app.schemas.appointment import AppointmentCreate
from app.services.appointment_service import AppointmentService, check_transition
from app.services.booking_service import BookingService
from app.services.slot_service import SlotService


def booking_for(slot, reason=None):
    return AppointmentCreate(
        doctor_id=slot.doctor_id,
        slot_id=slot.id,
        date=slot.date,
        time=slot.time,
        reason=reason,
    )


@pytest.fixture
async def slots(db_session, doctor, future_day):
    return await SlotService(db_session).create_slots(
        doctor, future_day, ["10:00 AM", "10:30 AM", "11:00 AM"]
    )


async def test_book_confirm_cancel_scenario(db_session, patient, admin, slots):
    booking = BookingService(db_session)
    slot = slots[0]

    appointment = await booking.book_appointment(patient, booking_for(slot, "Cleaning"))

    assert appointment.status == AppointmentStatus.PENDING.value
    assert appointment.date == slot.date
    assert appointment.time == "10:00 AM"
    assert appointment.doctor.name == "Dr. Lee"
    assert appointment.patient.email == patient.email
    assert slot.is_booked is True
    assert slot.appointment_id == appointment.id

    appointment = await booking.confirm_appointment(appointment.id, admin, notes="See you soon")
    assert appointment.status == AppointmentStatus.CONFIRMED.value
    assert appointment.confirmed_at is not None
    assert appointment.notes == "See you soon"

    appointment = await booking.cancel_appointment(appointment.id, patient, reason="Travelling")
    assert appointment.status == AppointmentStatus.CANCELLED.value
    assert appointment.cancelled_by == "patient"
    assert appointment.cancellation_reason == "Travelling"
    assert appointment.cancelled_at is not None
    assert slot.is_booked is False
    assert slot.appointment_id is None


async def test_two_patients_racing_for_one_slot(db_session, patient, other_patient, slots):
    booking = BookingService(db_session)
    slot = slots[0]

    winner = await booking.book_appointment(patient, booking_for(slot))
    with pytest.raises(InvalidState, match="already booked"):
        await booking.book_appointment(other_patient, booking_for(slot))

    assert slot.appointment_id == winner.id
    assert len(await AppointmentService(db_session).get_appointments()) == 1


async def test_stale_session_loses_the_slot_to_a_committed_booking(
    session_factory, doctor, patient, other_patient, create_slots
):
    [slot] = await create_slots(doctor, ["09:00 AM"])

    async with session_factory() as late, session_factory() as early:
        # late has the slot cached as open before early books it
        cached = await SlotService(late).require_slot(slot.id)
        assert cached.is_booked is False

        winner = await BookingService(early).book_appointment(patient, booking_for(slot))
        await early.commit()

        with pytest.raises(InvalidState, match="already booked"):
            await BookingService(late).book_appointment(other_patient, booking_for(slot))
        await late.rollback()

    async with session_factory() as fresh:
        stored = await SlotService(fresh).require_slot(slot.id)
        appointments = await AppointmentService(fresh).get_appointments()

    assert stored.appointment_id == winner.id
    assert [a.id for a in appointments] == [winner.id]


async def test_second_active_booking_same_doctor_same_day_conflicts(db_session, patient, slots):
    booking = BookingService(db_session)
    await booking.book_appointment(patient, booking_for(slots[0]))

    with pytest.raises(Conflict, match="already have an appointment"):
        await booking.book_appointment(patient, booking_for(slots[1]))

    assert slots[1].is_booked is False


async def test_rebooking_after_cancellation_is_allowed(db_session, patient, slots):
    booking = BookingService(db_session)
    first = await booking.book_appointment(patient, booking_for(slots[0]))
    await booking.cancel_appointment(first.id, patient)

    second = await booking.book_appointment(patient, booking_for(slots[1]))

    assert second.status == AppointmentStatus.PENDING.value


async def test_failed_slot_claim_removes_the_appointment(db_session, patient, slots, monkeypatch):
    async def slot_taken(self, slot_id, appointment_id):
        raise InvalidState("This time slot is already booked")

    monkeypatch.setattr(SlotService, "book", slot_taken)

    with pytest.raises(InvalidState):
        await BookingService(db_session).book_appointment(patient, booking_for(slots[0]))

    assert await AppointmentService(db_session).get_appointments() == []


async def test_requested_time_must_match_the_slot(db_session, patient, slots):
    request = booking_for(slots[0]).model_copy(update={"time": "03:00 PM"})

    with pytest.raises(InvalidState, match="do not match"):
        await BookingService(db_session).book_appointment(patient, request)


async def test_slot_must_belong_to_the_doctor(db_session, patient, slots, add_doctor):
    other = await add_doctor(name="Dr. Kim", email="kim@clinic.test")
    request = booking_for(slots[0]).model_copy(update={"doctor_id": other.id})

    with pytest.raises(InvalidState, match="does not belong"):
        await BookingService(db_session).book_appointment(patient, request)


async def test_inactive_doctor_cannot_be_booked(db_session, patient, add_doctor, future_day):
    retired = await add_doctor(name="Dr. Old", email="old@clinic.test", is_active=False)
    [slot] = await SlotService(db_session).create_slots(retired, future_day, ["10:00 AM"])

    with pytest.raises(InvalidState, match="not available"):
        await BookingService(db_session).book_appointment(patient, booking_for(slot))


async def test_unknown_slot_is_not_found(db_session, patient, slots):
    await SlotService(db_session).delete(slots[2])
    with pytest.raises(NotFound, match="Time slot not found"):
        await BookingService(db_session).book_appointment(patient, booking_for(slots[2]))


async def test_complete_on_cancelled_is_rejected(db_session, patient, admin, slots):
    booking = BookingService(db_session)
    appointment = await booking.book_appointment(patient, booking_for(slots[0]))
    await booking.cancel_appointment(appointment.id, admin, reason="Doctor unavailable")

    with pytest.raises(InvalidState, match="Cannot complete a cancelled appointment"):
        await booking.complete_appointment(appointment.id, admin)


async def test_complete_keeps_the_slot_booked(db_session, patient, admin, slots):
    booking = BookingService(db_session)
    appointment = await booking.book_appointment(patient, booking_for(slots[0]))

    appointment = await booking.complete_appointment(appointment.id, admin)

    assert appointment.status == AppointmentStatus.COMPLETED.value
    assert appointment.completed_at is not None
    assert slots[0].is_booked is True


@pytest.mark.parametrize("terminal", ["cancel", "complete"])
async def test_no_transition_leaves_a_terminal_state(db_session, patient, admin, slots, terminal):
    booking = BookingService(db_session)
    appointment = await booking.book_appointment(patient, booking_for(slots[0]))
    if terminal == "cancel":
        await booking.cancel_appointment(appointment.id, admin)
    else:
        await booking.complete_appointment(appointment.id, admin)

    with pytest.raises(InvalidState):
        await booking.confirm_appointment(appointment.id, admin)
    with pytest.raises(InvalidState):
        await booking.cancel_appointment(appointment.id, admin)
    with pytest.raises(InvalidState):
        await booking.complete_appointment(appointment.id, admin)


async def test_only_admins_confirm_and_complete(db_session, patient, slots):
    booking = BookingService(db_session)
    appointment = await booking.book_appointment(patient, booking_for(slots[0]))

    with pytest.raises(Unauthorized):
        await booking.confirm_appointment(appointment.id, patient)
    with pytest.raises(Unauthorized):
        await booking.complete_appointment(appointment.id, patient)


async def test_patients_cancel_only_their_own(db_session, patient, other_patient, slots):
    booking = BookingService(db_session)
    appointment = await booking.book_appointment(patient, booking_for(slots[0]))

    with pytest.raises(Unauthorized, match="Not authorized to cancel"):
        await booking.cancel_appointment(appointment.id, other_patient)


async def test_delete_frees_the_slot(db_session, patient, slots):
    booking = BookingService(db_session)
    appointment = await booking.book_appointment(patient, booking_for(slots[0]))

    await booking.delete_appointment(appointment.id)

    assert slots[0].is_booked is False
    assert await AppointmentService(db_session).get_appointment_by_id(appointment.id) is None


async def test_patient_listing_upcoming_hides_cancelled(db_session, patient, slots):
    booking = BookingService(db_session)
    cancelled = await booking.book_appointment(patient, booking_for(slots[0]))
    await booking.cancel_appointment(cancelled.id, patient)
    kept = await booking.book_appointment(patient, booking_for(slots[1]))

    service = AppointmentService(db_session)
    everything = await service.get_patient_appointments(patient.id)
    upcoming = await service.get_patient_appointments(patient.id, upcoming=True)

    assert {a.id for a in everything} == {cancelled.id, kept.id}
    assert [a.id for a in upcoming] == [kept.id]


def test_state_machine_messages():
    with pytest.raises(InvalidState, match="Appointment is already confirmed"):
        check_transition("confirmed", "confirmed")
    with pytest.raises(InvalidState, match="Cannot cancel a completed appointment"):
        check_transition("completed", "cancelled")
    with pytest.raises(InvalidState, match="Cannot change appointment from no-show"):
        check_transition("no-show", "confirmed")

    check_transition("pending", "confirmed")
    check_transition("confirmed", "completed")
    check_transition("pending", "cancelled")
