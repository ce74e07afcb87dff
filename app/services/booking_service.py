from datetime import timedelta
from typing import List, Optional, Tuple

from sqlalchemy import select, update, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
import cuid

from app.models import Booking, ScheduledClass, PrivateSession, User
from app.enums import (
    BookableType, BookingStatus, BookingType, SessionStatus,
    RelatedEntityType, UserRole, can_transition_booking
)
from app.exceptions.errors import (
    ApplicationException, NotFoundError, ClassFullError, SlotTakenError,
    AlreadyBookedError, InvalidStateError, PermissionDeniedError
)
from app.services.credit_ledger_service import CreditLedgerService
from app.services.onboarding_service import OnboardingService
from app.core.config import settings
from app.utils.dates import utc_now
from app.utils.retry import retry_read
from app.core.logger import get_logger

logger = get_logger("booking_service")


class BookingService:
    """Books, cancels and checks in class seats and private sessions.

    Each command is one transaction: the seat claim, the credit redemption and
    the booking row commit together or not at all.
    """

    @staticmethod
    async def _find_active_booking(
        db: AsyncSession, user_id: str, bookable_type: BookableType, entity_id: str
    ) -> Optional[Booking]:
        result = await db.execute(
            select(Booking).where(
                Booking.user_id == user_id,
                Booking.bookable_type == bookable_type,
                Booking.entity_id == entity_id,
                Booking.status != BookingStatus.CANCELLED,
            )
        )
        return result.scalars().first()

    @staticmethod
    async def _claim_class_seat(db: AsyncSession, class_id: str) -> None:
        # Single conditional statement; concurrent claims cannot push the count past capacity
        result = await db.execute(
            update(ScheduledClass)
            .where(
                ScheduledClass.id == class_id,
                ScheduledClass.status == SessionStatus.SCHEDULED,
                ScheduledClass.booked_count < ScheduledClass.capacity,
            )
            .values(booked_count=ScheduledClass.booked_count + 1, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise ClassFullError()

    @staticmethod
    async def _release_class_seat(db: AsyncSession, class_id: str) -> None:
        await db.execute(
            update(ScheduledClass)
            .where(ScheduledClass.id == class_id, ScheduledClass.booked_count > 0)
            .values(booked_count=ScheduledClass.booked_count - 1, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )

    @staticmethod
    async def _get_bookable_class(db: AsyncSession, class_id: str) -> ScheduledClass:
        scheduled_class = await db.get(ScheduledClass, class_id)
        if not scheduled_class:
            raise NotFoundError("Class not found")
        if scheduled_class.status != SessionStatus.SCHEDULED:
            raise InvalidStateError(f"Class is {scheduled_class.status.value.lower()}")
        if scheduled_class.starts_at <= utc_now():
            raise InvalidStateError("Class has already started")
        return scheduled_class

    @staticmethod
    async def _get_bookable_session(db: AsyncSession, session_id: str) -> PrivateSession:
        session = await db.get(PrivateSession, session_id)
        if not session:
            raise NotFoundError("Private session not found")
        if session.status != SessionStatus.SCHEDULED:
            raise InvalidStateError(f"Session is {session.status.value.lower()}")
        if session.starts_at <= utc_now():
            raise InvalidStateError("Session has already started")
        return session

    @staticmethod
    async def _claim_private_slot(db: AsyncSession, session_id: str, client_id: str) -> None:
        result = await db.execute(
            update(PrivateSession)
            .where(
                PrivateSession.id == session_id,
                PrivateSession.client_id.is_(None),
                PrivateSession.status == SessionStatus.SCHEDULED,
            )
            .values(client_id=client_id, updated_at=utc_now())
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            raise SlotTakenError()

    @staticmethod
    async def _insert_booking(db: AsyncSession, booking: Booking) -> Booking:
        db.add(booking)
        try:
            await db.flush()
        except IntegrityError:
            # Partial unique index on live bookings caught a concurrent duplicate
            raise AlreadyBookedError()
        return booking

    @staticmethod
    async def book_class(db: AsyncSession, user: User, class_id: str) -> Booking:
        user_id = user.id
        try:
            scheduled_class = await BookingService._get_bookable_class(db, class_id)

            if user.role == UserRole.HOME_USER:
                await OnboardingService.assert_booking_eligible(db, user.id)

            if await BookingService._find_active_booking(db, user.id, BookableType.CLASS, class_id):
                raise AlreadyBookedError()

            await BookingService._claim_class_seat(db, class_id)

            booking_id = cuid.cuid()
            await CreditLedgerService.redeem(
                db, user.id, scheduled_class.credit_cost,
                related_entity_type=RelatedEntityType.CLASS,
                related_entity_id=class_id,
                booking_id=booking_id,
                actor_id=user.id,
            )

            booking = await BookingService._insert_booking(db, Booking(
                id=booking_id,
                user_id=user.id,
                bookable_type=BookableType.CLASS,
                entity_id=class_id,
                status=BookingStatus.BOOKED,
                booking_type=BookingType.SELF,
                credit_amount=scheduled_class.credit_cost,
                session_name=scheduled_class.name,
                starts_at=scheduled_class.starts_at,
                ends_at=scheduled_class.ends_at,
                created_by=user.id,
            ))
            await db.commit()
        except ApplicationException as e:
            await db.rollback()
            logger.warning(f"Class booking rejected for {user_id} on {class_id}: {type(e).__name__}")
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error booking class {class_id} for {user_id}: {e}")
            raise

        logger.info(f"User {user.id} booked class {class_id} (booking {booking.id}, {booking.credit_amount} credits)")
        return booking

    @staticmethod
    async def admin_book_class(
        db: AsyncSession, actor: User, user_id: str, class_id: str,
        booking_type: BookingType = BookingType.ADMIN
    ) -> Booking:
        """Staff booking on behalf of a user: no credits charged, capacity still enforced."""
        if not actor.is_staff:
            raise PermissionDeniedError()
        try:
            target = await db.get(User, user_id)
            if not target or not target.is_active:
                raise NotFoundError("User not found")

            scheduled_class = await BookingService._get_bookable_class(db, class_id)

            if await BookingService._find_active_booking(db, user_id, BookableType.CLASS, class_id):
                raise AlreadyBookedError("User has already booked this class")

            await BookingService._claim_class_seat(db, class_id)

            booking = await BookingService._insert_booking(db, Booking(
                user_id=user_id,
                bookable_type=BookableType.CLASS,
                entity_id=class_id,
                status=BookingStatus.BOOKED,
                booking_type=booking_type,
                credit_amount=0,
                session_name=scheduled_class.name,
                starts_at=scheduled_class.starts_at,
                ends_at=scheduled_class.ends_at,
                created_by=actor.id,
            ))
            await db.commit()
        except ApplicationException as e:
            await db.rollback()
            logger.warning(f"Admin booking rejected for {user_id} on {class_id}: {type(e).__name__}")
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error creating admin booking on {class_id} for {user_id}: {e}")
            raise

        logger.info(f"{actor.id} booked class {class_id} for {user_id} (booking {booking.id})")
        return booking

    @staticmethod
    async def book_private_session(db: AsyncSession, user: User, session_id: str) -> Booking:
        user_id = user.id
        try:
            session = await BookingService._get_bookable_session(db, session_id)
            if session.trainer_id == user.id:
                raise InvalidStateError("Trainers cannot book their own sessions")
            if session.client_id == user.id:
                raise AlreadyBookedError()

            if user.role == UserRole.HOME_USER:
                await OnboardingService.assert_booking_eligible(db, user.id)

            await BookingService._claim_private_slot(db, session_id, user.id)

            booking_id = cuid.cuid()
            await CreditLedgerService.redeem(
                db, user.id, session.credit_cost,
                related_entity_type=RelatedEntityType.PRIVATE_SESSION,
                related_entity_id=session_id,
                booking_id=booking_id,
                actor_id=user.id,
            )

            booking = await BookingService._insert_booking(db, Booking(
                id=booking_id,
                user_id=user.id,
                bookable_type=BookableType.PRIVATE_SESSION,
                entity_id=session_id,
                status=BookingStatus.BOOKED,
                booking_type=BookingType.SELF,
                credit_amount=session.credit_cost,
                session_name=session.service_type.name if session.service_type else "Private session",
                starts_at=session.starts_at,
                ends_at=session.ends_at,
                created_by=user.id,
            ))
            await db.commit()
        except ApplicationException as e:
            await db.rollback()
            logger.warning(f"Private session booking rejected for {user_id} on {session_id}: {type(e).__name__}")
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error booking private session {session_id} for {user_id}: {e}")
            raise

        logger.info(f"User {user.id} booked private session {session_id} (booking {booking.id})")
        return booking

    @staticmethod
    async def admin_book_private_session(
        db: AsyncSession, actor: User, user_id: str, session_id: str
    ) -> Booking:
        """Staff assigns an open private slot to a client. No credits are charged."""
        if not actor.is_staff:
            raise PermissionDeniedError()
        actor_id = actor.id
        try:
            target = await db.get(User, user_id)
            if not target or not target.is_active:
                raise NotFoundError("User not found")

            session = await BookingService._get_bookable_session(db, session_id)
            if session.trainer_id == user_id:
                raise InvalidStateError("Trainers cannot book their own sessions")

            await BookingService._claim_private_slot(db, session_id, user_id)

            booking = await BookingService._insert_booking(db, Booking(
                user_id=user_id,
                bookable_type=BookableType.PRIVATE_SESSION,
                entity_id=session_id,
                status=BookingStatus.BOOKED,
                booking_type=BookingType.ADMIN,
                credit_amount=0,
                session_name=session.service_type.name if session.service_type else "Private session",
                starts_at=session.starts_at,
                ends_at=session.ends_at,
                created_by=actor_id,
            ))
            await db.commit()
        except ApplicationException as e:
            await db.rollback()
            logger.warning(f"Admin private booking rejected for {user_id} on {session_id}: {type(e).__name__}")
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error creating admin booking on private session {session_id} for {user_id}: {e}")
            raise

        logger.info(f"{actor_id} booked private session {session_id} for {user_id} (booking {booking.id})")
        return booking

    @staticmethod
    def _refund_allowed(booking: Booking, actor: User) -> bool:
        if booking.credit_amount <= 0:
            return False
        if actor.is_staff:
            return True
        cutoff = timedelta(hours=settings.BOOKING_CANCELLATION_CUTOFF_HOURS)
        return booking.starts_at - utc_now() >= cutoff

    @staticmethod
    async def _cancel_locked(
        db: AsyncSession, booking: Booking, actor: User, reason: Optional[str], force_refund: bool = False
    ) -> int:
        """Cancel a booking already loaded in this transaction. Returns credits refunded."""
        if not can_transition_booking(booking.status, BookingStatus.CANCELLED):
            raise InvalidStateError(f"Cannot cancel a booking that is {booking.status.value.lower()}")

        if booking.bookable_type == BookableType.CLASS:
            scheduled_class = await db.get(ScheduledClass, booking.entity_id)
            if scheduled_class and scheduled_class.status == SessionStatus.COMPLETED:
                raise InvalidStateError("Class is already completed")
            await BookingService._release_class_seat(db, booking.entity_id)
        else:
            session = await db.get(PrivateSession, booking.entity_id)
            if session and session.status == SessionStatus.COMPLETED:
                raise InvalidStateError("Session is already completed")
            await db.execute(
                update(PrivateSession)
                .where(PrivateSession.id == booking.entity_id, PrivateSession.client_id == booking.user_id)
                .values(client_id=None, updated_at=utc_now())
                .execution_options(synchronize_session=False)
            )

        refunded = 0
        if booking.credit_amount > 0 and (force_refund or BookingService._refund_allowed(booking, actor)):
            refunded = await CreditLedgerService.refund_redemption(
                db, booking.user_id, booking.id, actor_id=actor.id, note=reason
            )

        booking.status = BookingStatus.CANCELLED
        booking.cancelled_at = utc_now()
        booking.cancellation_reason = reason
        booking.refunded = refunded > 0
        await db.flush()
        return refunded

    @staticmethod
    async def cancel_booking(
        db: AsyncSession, booking_id: str, actor: User, reason: Optional[str] = None
    ) -> Tuple[Booking, int]:
        actor_id = actor.id
        try:
            result = await db.execute(
                select(Booking).where(Booking.id == booking_id).with_for_update()
            )
            booking = result.scalar_one_or_none()
            if not booking:
                raise NotFoundError("Booking not found")
            if booking.user_id != actor.id and not actor.is_staff:
                raise PermissionDeniedError("You can only cancel your own bookings")

            refunded = await BookingService._cancel_locked(db, booking, actor, reason)
            await db.commit()
        except ApplicationException as e:
            await db.rollback()
            logger.warning(f"Cancellation of {booking_id} by {actor_id} rejected: {type(e).__name__}")
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error cancelling booking {booking_id}: {e}")
            raise

        logger.info(f"Booking {booking_id} cancelled by {actor.id} ({refunded} credits refunded)")
        return booking, refunded

    @staticmethod
    async def mark_attendance(
        db: AsyncSession, booking_id: str, actor: User, status: BookingStatus
    ) -> Booking:
        if not actor.is_staff:
            raise PermissionDeniedError()
        if status not in (BookingStatus.ATTENDED, BookingStatus.NO_SHOW):
            raise InvalidStateError("Attendance must be ATTENDED or NO_SHOW")

        actor_id = actor.id
        try:
            booking = await db.get(Booking, booking_id)
            if not booking:
                raise NotFoundError("Booking not found")
            if not can_transition_booking(booking.status, status):
                raise InvalidStateError(
                    f"Cannot mark a {booking.status.value.lower()} booking as {status.value.lower()}"
                )

            booking.status = status
            await db.commit()
        except ApplicationException as e:
            await db.rollback()
            logger.warning(f"Attendance update on {booking_id} by {actor_id} rejected: {type(e).__name__}")
            raise
        except Exception as e:
            await db.rollback()
            logger.error(f"Error marking attendance on {booking_id}: {e}")
            raise

        logger.info(f"Booking {booking_id} marked {status.value} by {actor_id}")
        return booking

    @staticmethod
    @retry_read
    async def list_user_bookings(
        db: AsyncSession, user_id: str, status: Optional[BookingStatus] = None,
        upcoming_only: bool = False, limit: int = 100
    ) -> List[Booking]:
        stmt = select(Booking).where(Booking.user_id == user_id)
        if status is not None:
            stmt = stmt.where(Booking.status == status)
        if upcoming_only:
            stmt = stmt.where(Booking.starts_at > utc_now())
        result = await db.execute(stmt.order_by(desc(Booking.starts_at)).limit(limit))
        return result.scalars().all()

    @staticmethod
    @retry_read
    async def get_class_availability(db: AsyncSession, class_id: str) -> dict:
        scheduled_class = await db.get(ScheduledClass, class_id)
        if not scheduled_class:
            raise NotFoundError("Class not found")
        return {
            "class_id": scheduled_class.id,
            "name": scheduled_class.name,
            "capacity": scheduled_class.capacity,
            "booked_count": scheduled_class.booked_count,
            "spots_left": scheduled_class.spots_left,
            "status": scheduled_class.status,
            "starts_at": scheduled_class.starts_at,
        }
