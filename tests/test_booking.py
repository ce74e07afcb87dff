"""Class and private session booking, cancellation refunds and attendance."""
from datetime import timedelta

import pytest
from sqlalchemy import select, func

from app.enums import BookingStatus, BookingType, SessionStatus, UserRole
from app.exceptions.errors import (
    AlreadyBookedError, ClassFullError, InsufficientCreditError, InvalidStateError,
    NotFoundError, OnboardingIncompleteError, PermissionDeniedError, SlotTakenError
)
from app.models import Booking
from app.services.booking_service import BookingService
from app.services.credit_ledger_service import CreditLedgerService
from app.services.schedule_service import ScheduleService


async def _booking_count(db, class_id):
    result = await db.execute(select(func.count(Booking.id)).where(Booking.entity_id == class_id))
    return result.scalar_one()


async def test_book_class_redeems_credits_and_claims_seat(db, client_user, make_class, grant):
    scheduled_class = await make_class(capacity=4, credit_cost=2)
    await grant(client_user.id, 5)

    booking = await BookingService.book_class(db, client_user, scheduled_class.id)

    assert booking.status == BookingStatus.BOOKED
    assert booking.booking_type == BookingType.SELF
    assert booking.credit_amount == 2
    assert booking.session_name == "EMS Group"
    assert booking.starts_at == scheduled_class.starts_at
    assert await CreditLedgerService.get_balance(db, client_user.id) == 3

    await db.refresh(scheduled_class)
    assert scheduled_class.booked_count == 1
    assert scheduled_class.spots_left == 3


async def test_book_class_without_credits_leaves_no_trace(db, client_user, make_class):
    scheduled_class = await make_class(capacity=4, credit_cost=1)
    class_id = scheduled_class.id

    with pytest.raises(InsufficientCreditError):
        await BookingService.book_class(db, client_user, class_id)

    assert await _booking_count(db, class_id) == 0
    await db.refresh(scheduled_class)
    assert scheduled_class.booked_count == 0


async def test_book_class_twice_is_rejected(db, client_user, make_class, grant):
    scheduled_class = await make_class()
    class_id = scheduled_class.id
    await grant(client_user.id, 5)

    await BookingService.book_class(db, client_user, class_id)
    with pytest.raises(AlreadyBookedError):
        await BookingService.book_class(db, client_user, class_id)

    await db.refresh(client_user)
    assert await CreditLedgerService.get_balance(db, client_user.id) == 4
    assert await _booking_count(db, class_id) == 1


async def test_book_full_class_raises_class_full(db, make_user, make_class, grant):
    scheduled_class = await make_class(capacity=1)
    first = await make_user()
    second = await make_user()
    second_id = second.id
    await grant(first.id, 1)
    await grant(second_id, 1)

    await BookingService.book_class(db, first, scheduled_class.id)
    with pytest.raises(ClassFullError):
        await BookingService.book_class(db, second, scheduled_class.id)

    # The loser keeps their credit
    assert await CreditLedgerService.get_balance(db, second_id) == 1


async def test_book_unknown_class_is_not_found(db, client_user):
    with pytest.raises(NotFoundError):
        await BookingService.book_class(db, client_user, "missing-class")


async def test_book_started_class_is_rejected(db, client_user, make_class, grant):
    scheduled_class = await make_class(starts_in=timedelta(minutes=-5))
    await grant(client_user.id, 2)

    with pytest.raises(InvalidStateError):
        await BookingService.book_class(db, client_user, scheduled_class.id)


async def test_rebooking_after_cancellation_is_allowed(db, client_user, make_class, grant):
    scheduled_class = await make_class(credit_cost=1)
    await grant(client_user.id, 2)

    booking = await BookingService.book_class(db, client_user, scheduled_class.id)
    await BookingService.cancel_booking(db, booking.id, client_user)
    rebooked = await BookingService.book_class(db, client_user, scheduled_class.id)

    assert rebooked.id != booking.id
    assert await CreditLedgerService.get_balance(db, client_user.id) == 1

    # Cancelling the second booking only refunds what the second booking took
    _, refunded = await BookingService.cancel_booking(db, rebooked.id, client_user)
    assert refunded == 1
    assert await CreditLedgerService.get_balance(db, client_user.id) == 2


async def test_cancel_before_cutoff_refunds(db, client_user, make_class, grant):
    scheduled_class = await make_class(credit_cost=2, starts_in=timedelta(days=2))
    await grant(client_user.id, 2)
    booking = await BookingService.book_class(db, client_user, scheduled_class.id)
    assert await CreditLedgerService.get_balance(db, client_user.id) == 0

    cancelled, refunded = await BookingService.cancel_booking(db, booking.id, client_user, "Can't make it")

    assert refunded == 2
    assert cancelled.status == BookingStatus.CANCELLED
    assert cancelled.refunded is True
    assert cancelled.cancellation_reason == "Can't make it"
    assert await CreditLedgerService.get_balance(db, client_user.id) == 2

    await db.refresh(scheduled_class)
    assert scheduled_class.booked_count == 0


async def test_late_cancel_by_client_forfeits_credits(db, client_user, make_class, grant):
    scheduled_class = await make_class(credit_cost=1, starts_in=timedelta(hours=2))
    await grant(client_user.id, 1)
    booking = await BookingService.book_class(db, client_user, scheduled_class.id)

    cancelled, refunded = await BookingService.cancel_booking(db, booking.id, client_user)

    assert refunded == 0
    assert cancelled.refunded is False
    assert await CreditLedgerService.get_balance(db, client_user.id) == 0
    await db.refresh(scheduled_class)
    assert scheduled_class.booked_count == 0


async def test_late_cancel_by_staff_refunds(db, client_user, trainer, make_class, grant):
    scheduled_class = await make_class(credit_cost=1, starts_in=timedelta(hours=2))
    await grant(client_user.id, 1)
    booking = await BookingService.book_class(db, client_user, scheduled_class.id)

    _, refunded = await BookingService.cancel_booking(db, booking.id, trainer)

    assert refunded == 1
    assert await CreditLedgerService.get_balance(db, client_user.id) == 1


async def test_cancel_someone_elses_booking_is_denied(db, make_user, make_class, grant):
    owner = await make_user()
    other = await make_user()
    scheduled_class = await make_class()
    await grant(owner.id, 1)
    booking = await BookingService.book_class(db, owner, scheduled_class.id)

    with pytest.raises(PermissionDeniedError):
        await BookingService.cancel_booking(db, booking.id, other)


async def test_cancel_twice_is_rejected(db, client_user, make_class, grant):
    scheduled_class = await make_class()
    await grant(client_user.id, 1)
    booking = await BookingService.book_class(db, client_user, scheduled_class.id)
    booking_id = booking.id
    await BookingService.cancel_booking(db, booking_id, client_user)

    with pytest.raises(InvalidStateError):
        await BookingService.cancel_booking(db, booking_id, client_user)


async def test_admin_booking_charges_no_credits(db, trainer, client_user, make_class):
    scheduled_class = await make_class(capacity=2)

    booking = await BookingService.admin_book_class(db, trainer, client_user.id, scheduled_class.id)

    assert booking.booking_type == BookingType.ADMIN
    assert booking.credit_amount == 0
    assert booking.created_by == trainer.id
    await db.refresh(scheduled_class)
    assert scheduled_class.booked_count == 1

    # Staff cancelling an admin booking has nothing to refund
    _, refunded = await BookingService.cancel_booking(db, booking.id, trainer)
    assert refunded == 0


async def test_admin_booking_requires_staff(db, make_user, client_user, make_class):
    other_client = await make_user()
    scheduled_class = await make_class()
    with pytest.raises(PermissionDeniedError):
        await BookingService.admin_book_class(db, other_client, client_user.id, scheduled_class.id)


async def test_cancel_class_refunds_every_booking(db, admin, make_user, make_class, grant):
    scheduled_class = await make_class(capacity=3, credit_cost=2, starts_in=timedelta(hours=1))
    class_id = scheduled_class.id
    members = [await make_user() for _ in range(3)]
    for member in members:
        await grant(member.id, 2)
        await BookingService.book_class(db, member, class_id)

    result = await ScheduleService.cancel_class(db, admin, class_id, "Instructor ill")

    assert result == {"class_id": class_id, "cancelled_bookings": 3, "credits_refunded": 6}
    for member in members:
        assert await CreditLedgerService.get_balance(db, member.id) == 2

    bookings = (await db.execute(select(Booking).where(Booking.entity_id == class_id))).scalars().all()
    assert {booking.status for booking in bookings} == {BookingStatus.CANCELLED}
    assert all(booking.refunded for booking in bookings)

    await db.refresh(scheduled_class)
    assert scheduled_class.status == SessionStatus.CANCELLED
    assert scheduled_class.booked_count == 0


async def test_booking_cancelled_class_is_rejected(db, admin, client_user, make_class, grant):
    scheduled_class = await make_class()
    class_id = scheduled_class.id
    await grant(client_user.id, 1)
    await ScheduleService.cancel_class(db, admin, class_id)

    with pytest.raises(InvalidStateError):
        await BookingService.book_class(db, client_user, class_id)


async def test_mark_attendance(db, trainer, client_user, make_class, grant):
    scheduled_class = await make_class()
    await grant(client_user.id, 1)
    booking = await BookingService.book_class(db, client_user, scheduled_class.id)
    booking_id = booking.id

    attended = await BookingService.mark_attendance(db, booking_id, trainer, BookingStatus.ATTENDED)
    assert attended.status == BookingStatus.ATTENDED

    with pytest.raises(InvalidStateError):
        await BookingService.mark_attendance(db, booking_id, trainer, BookingStatus.NO_SHOW)
    await db.refresh(trainer)
    with pytest.raises(InvalidStateError):
        await BookingService.cancel_booking(db, booking_id, trainer)
    await db.refresh(attended)
    assert attended.status == BookingStatus.ATTENDED


async def test_cancel_on_completed_class_is_rejected(db, trainer, client_user, make_class, grant):
    scheduled_class = await make_class()
    await grant(client_user.id, 1)
    booking = await BookingService.book_class(db, client_user, scheduled_class.id)
    booking_id = booking.id
    await ScheduleService.complete_class(db, trainer, scheduled_class.id)

    with pytest.raises(InvalidStateError):
        await BookingService.cancel_booking(db, booking_id, trainer)


async def test_private_session_second_client_gets_slot_taken(db, make_user, make_private_session, grant):
    session = await make_private_session(credit_cost=2)
    first = await make_user()
    second = await make_user()
    second_id = second.id
    await grant(first.id, 2)
    await grant(second_id, 2)

    booking = await BookingService.book_private_session(db, first, session.id)
    assert booking.credit_amount == 2
    assert booking.session_name == "Private session"

    with pytest.raises(SlotTakenError):
        await BookingService.book_private_session(db, second, session.id)
    assert await CreditLedgerService.get_balance(db, second_id) == 2


async def test_private_session_cancel_reopens_slot(db, make_user, make_private_session, grant):
    session = await make_private_session(credit_cost=1)
    first = await make_user()
    second = await make_user()
    await grant(first.id, 1)
    await grant(second.id, 1)

    booking = await BookingService.book_private_session(db, first, session.id)
    _, refunded = await BookingService.cancel_booking(db, booking.id, first)
    assert refunded == 1

    rebooked = await BookingService.book_private_session(db, second, session.id)
    assert rebooked.user_id == second.id
    await db.refresh(session)
    assert session.client_id == second.id


async def test_trainer_cannot_book_own_private_session(db, trainer, make_private_session):
    session = await make_private_session()
    with pytest.raises(InvalidStateError):
        await BookingService.book_private_session(db, trainer, session.id)


async def test_cancel_private_session_refunds_client(db, admin, client_user, make_private_session, grant):
    # Inside the cutoff window: a studio cancellation still refunds
    session = await make_private_session(credit_cost=2, starts_in=timedelta(hours=1))
    session_id = session.id
    await grant(client_user.id, 2)
    booking = await BookingService.book_private_session(db, client_user, session_id)
    assert await CreditLedgerService.get_balance(db, client_user.id) == 0

    result = await ScheduleService.cancel_private_session(db, admin, session_id, "Trainer ill")

    assert result == {"session_id": session_id, "cancelled_bookings": 1, "credits_refunded": 2}
    assert await CreditLedgerService.get_balance(db, client_user.id) == 2
    await db.refresh(booking)
    assert booking.status == BookingStatus.CANCELLED
    assert booking.refunded is True
    await db.refresh(session)
    assert session.status == SessionStatus.CANCELLED
    assert session.client_id is None

    with pytest.raises(InvalidStateError):
        await BookingService.book_private_session(db, client_user, session_id)
    await db.refresh(admin)
    with pytest.raises(InvalidStateError):
        await ScheduleService.cancel_private_session(db, admin, session_id)


async def test_cancel_open_private_session(db, trainer, make_private_session):
    session = await make_private_session()

    result = await ScheduleService.cancel_private_session(db, trainer, session.id)

    assert result["cancelled_bookings"] == 0
    assert result["credits_refunded"] == 0


async def test_cancel_private_session_requires_staff(db, client_user, make_private_session):
    session = await make_private_session()
    with pytest.raises(PermissionDeniedError):
        await ScheduleService.cancel_private_session(db, client_user, session.id)


async def test_complete_private_session(db, trainer, client_user, make_private_session, grant):
    session = await make_private_session(credit_cost=1)
    session_id = session.id
    await grant(client_user.id, 1)
    booking = await BookingService.book_private_session(db, client_user, session_id)
    booking_id = booking.id

    completed = await ScheduleService.complete_private_session(db, trainer, session_id)
    assert completed.status == SessionStatus.COMPLETED

    with pytest.raises(InvalidStateError):
        await BookingService.cancel_booking(db, booking_id, trainer)
    await db.refresh(trainer)
    with pytest.raises(InvalidStateError):
        await ScheduleService.complete_private_session(db, trainer, session_id)
    with pytest.raises(InvalidStateError):
        await ScheduleService.cancel_private_session(db, trainer, session_id)
    await db.refresh(trainer)

    attended = await BookingService.mark_attendance(db, booking_id, trainer, BookingStatus.ATTENDED)
    assert attended.status == BookingStatus.ATTENDED


async def test_admin_private_booking_charges_no_credits(db, trainer, client_user, make_user, make_private_session):
    session = await make_private_session(credit_cost=3)
    session_id = session.id

    booking = await BookingService.admin_book_private_session(db, trainer, client_user.id, session_id)

    assert booking.booking_type == BookingType.ADMIN
    assert booking.credit_amount == 0
    assert booking.created_by == trainer.id
    assert await CreditLedgerService.get_balance(db, client_user.id) == 0
    await db.refresh(session)
    assert session.client_id == client_user.id

    other = await make_user()
    with pytest.raises(SlotTakenError):
        await BookingService.admin_book_private_session(db, trainer, other.id, session_id)


async def test_admin_private_booking_rules(db, trainer, client_user, make_private_session):
    session = await make_private_session()
    session_id = session.id
    trainer_id = trainer.id

    with pytest.raises(PermissionDeniedError):
        await BookingService.admin_book_private_session(db, client_user, client_user.id, session_id)
    with pytest.raises(InvalidStateError):
        await BookingService.admin_book_private_session(db, trainer, trainer_id, session_id)
    await db.refresh(trainer)
    with pytest.raises(NotFoundError):
        await BookingService.admin_book_private_session(db, trainer, "missing", session_id)


async def test_home_user_must_finish_onboarding(db, home_user, make_class, grant):
    scheduled_class = await make_class()
    await grant(home_user.id, 2)

    with pytest.raises(OnboardingIncompleteError):
        await BookingService.book_class(db, home_user, scheduled_class.id)


async def test_list_user_bookings_filters(db, client_user, make_class, grant):
    first = await make_class(name="Morning EMS")
    second = await make_class(name="Evening EMS", starts_in=timedelta(days=4))
    await grant(client_user.id, 2)
    kept = await BookingService.book_class(db, client_user, first.id)
    dropped = await BookingService.book_class(db, client_user, second.id)
    await BookingService.cancel_booking(db, dropped.id, client_user)

    everything = await BookingService.list_user_bookings(db, client_user.id)
    booked = await BookingService.list_user_bookings(db, client_user.id, status=BookingStatus.BOOKED)

    assert [booking.session_name for booking in everything] == ["Evening EMS", "Morning EMS"]
    assert [booking.id for booking in booked] == [kept.id]


async def test_class_availability(db, client_user, make_class, grant):
    scheduled_class = await make_class(capacity=3)
    await grant(client_user.id, 1)
    await BookingService.book_class(db, client_user, scheduled_class.id)
    await db.refresh(scheduled_class)

    availability = await BookingService.get_class_availability(db, scheduled_class.id)

    assert availability["capacity"] == 3
    assert availability["booked_count"] == 1
    assert availability["spots_left"] == 2
    assert availability["status"] == SessionStatus.SCHEDULED


async def test_staff_roles_are_staff(admin, trainer, client_user, home_user):
    assert admin.is_staff and admin.is_admin
    assert trainer.is_staff and not trainer.is_admin
    assert not client_user.is_staff
    assert home_user.role == UserRole.HOME_USER and not home_user.is_staff
