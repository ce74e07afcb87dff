from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import ServiceType, ScheduledClass, PrivateSession, Booking, User
from app.enums import BookableType, BookingStatus, SessionStatus, UserRole
from app.exceptions.errors import InvalidStateError, NotFoundError, PermissionDeniedError
from app.services.booking_service import BookingService
from app.utils.dates import utc_now, to_naive_utc
from app.utils.retry import retry_read
from app.core.logger import get_logger

logger = get_logger("schedule_service")


def _validate_window(starts_at: datetime, ends_at: Optional[datetime], duration_minutes: int) -> tuple:
    starts_at = to_naive_utc(starts_at)
    ends_at = to_naive_utc(ends_at) if ends_at else starts_at + timedelta(minutes=duration_minutes)
    if ends_at <= starts_at:
        raise InvalidStateError("End time must be after start time")
    if starts_at <= utc_now():
        raise InvalidStateError("Sessions must be scheduled in the future")
    return starts_at, ends_at


class ScheduleService:
    """Service types, class and private session slots, and the class lifecycle."""

    @staticmethod
    async def list_service_types(db: AsyncSession, include_inactive: bool = False) -> List[ServiceType]:
        stmt = select(ServiceType)
        if not include_inactive:
            stmt = stmt.where(ServiceType.is_active.is_(True))
        result = await db.execute(stmt.order_by(ServiceType.name))
        return result.scalars().all()

    @staticmethod
    async def create_service_type(db: AsyncSession, actor: User, data: dict) -> ServiceType:
        if not actor.is_admin:
            raise PermissionDeniedError()
        service_type = ServiceType(**data)
        db.add(service_type)
        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise InvalidStateError(f"Service type '{data.get('name')}' already exists")
        logger.info(f"Service type {service_type.name} created by {actor.id}")
        return service_type

    @staticmethod
    async def create_class(db: AsyncSession, actor: User, data: dict) -> ScheduledClass:
        if not actor.is_staff:
            raise PermissionDeniedError()

        service_type = None
        if data.get("service_type_id"):
            service_type = await db.get(ServiceType, data["service_type_id"])
            if not service_type:
                raise NotFoundError("Service type not found")

        duration = service_type.duration_minutes if service_type else 60
        starts_at, ends_at = _validate_window(data["starts_at"], data.get("ends_at"), duration)

        capacity = data.get("capacity") or (service_type.default_capacity if service_type else None)
        if not capacity or capacity <= 0:
            raise InvalidStateError("Capacity must be positive")
        credit_cost = data.get("credit_cost")
        if credit_cost is None:
            credit_cost = service_type.credit_cost if service_type else 1

        instructor_id = data.get("instructor_id") or actor.id
        instructor = await db.get(User, instructor_id)
        if not instructor or instructor.role not in (UserRole.ADMIN, UserRole.TRAINER):
            raise InvalidStateError("Instructor must be a trainer or admin")

        scheduled_class = ScheduledClass(
            name=data.get("name") or (service_type.name if service_type else "Class"),
            service_type_id=service_type.id if service_type else None,
            instructor_id=instructor_id,
            starts_at=starts_at,
            ends_at=ends_at,
            capacity=capacity,
            booked_count=0,
            credit_cost=credit_cost,
            location=data.get("location"),
            status=SessionStatus.SCHEDULED,
        )
        db.add(scheduled_class)
        await db.commit()
        logger.info(f"Class {scheduled_class.id} ({scheduled_class.name}) scheduled by {actor.id}")
        return scheduled_class

    @staticmethod
    async def create_private_session(db: AsyncSession, actor: User, data: dict) -> PrivateSession:
        if not actor.is_staff:
            raise PermissionDeniedError()

        trainer_id = data.get("trainer_id") or actor.id
        trainer = await db.get(User, trainer_id)
        if not trainer or trainer.role not in (UserRole.ADMIN, UserRole.TRAINER):
            raise InvalidStateError("Trainer must be a trainer or admin")

        service_type = None
        if data.get("service_type_id"):
            service_type = await db.get(ServiceType, data["service_type_id"])
            if not service_type:
                raise NotFoundError("Service type not found")

        duration = service_type.duration_minutes if service_type else 60
        starts_at, ends_at = _validate_window(data["starts_at"], data.get("ends_at"), duration)
        credit_cost = data.get("credit_cost")
        if credit_cost is None:
            credit_cost = service_type.credit_cost if service_type else 1

        session = PrivateSession(
            trainer_id=trainer_id,
            service_type_id=service_type.id if service_type else None,
            starts_at=starts_at,
            ends_at=ends_at,
            credit_cost=credit_cost,
            location=data.get("location"),
            notes=data.get("notes"),
            status=SessionStatus.SCHEDULED,
        )
        db.add(session)
        await db.commit()
        logger.info(f"Private session {session.id} created for trainer {trainer_id}")
        return session

    @staticmethod
    async def cancel_class(db: AsyncSession, actor: User, class_id: str, reason: Optional[str] = None) -> dict:
        """Cancel a class; every live booking is cancelled and refunded in the same transaction."""
        if not actor.is_staff:
            raise PermissionDeniedError()
        actor_id = actor.id
        try:
            result = await db.execute(
                select(ScheduledClass)
                .where(ScheduledClass.id == class_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            scheduled_class = result.scalar_one_or_none()
            if not scheduled_class:
                raise NotFoundError("Class not found")
            if scheduled_class.status != SessionStatus.SCHEDULED:
                raise InvalidStateError(f"Class is already {scheduled_class.status.value.lower()}")

            bookings = (await db.execute(
                select(Booking).where(
                    Booking.bookable_type == BookableType.CLASS,
                    Booking.entity_id == class_id,
                    Booking.status == BookingStatus.BOOKED,
                )
            )).scalars().all()

            refunded = 0
            for booking in bookings:
                refunded += await BookingService._cancel_locked(
                    db, booking, actor, reason or "Class cancelled by studio", force_refund=True
                )

            scheduled_class.status = SessionStatus.CANCELLED
            scheduled_class.booked_count = 0
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(f"Class {class_id} cancelled by {actor_id}: {len(bookings)} bookings, {refunded} credits refunded")
        return {"class_id": class_id, "cancelled_bookings": len(bookings), "credits_refunded": refunded}

    @staticmethod
    async def complete_class(db: AsyncSession, actor: User, class_id: str) -> ScheduledClass:
        if not actor.is_staff:
            raise PermissionDeniedError()
        scheduled_class = await db.get(ScheduledClass, class_id)
        if not scheduled_class:
            raise NotFoundError("Class not found")
        if scheduled_class.status != SessionStatus.SCHEDULED:
            raise InvalidStateError(f"Class is already {scheduled_class.status.value.lower()}")
        scheduled_class.status = SessionStatus.COMPLETED
        await db.commit()
        logger.info(f"Class {class_id} completed by {actor.id}")
        return scheduled_class

    @staticmethod
    async def cancel_private_session(
        db: AsyncSession, actor: User, session_id: str, reason: Optional[str] = None
    ) -> dict:
        """Cancel a private slot; a client's booking on it is cancelled and refunded in the same transaction."""
        if not actor.is_staff:
            raise PermissionDeniedError()
        actor_id = actor.id
        try:
            result = await db.execute(
                select(PrivateSession)
                .where(PrivateSession.id == session_id)
                .with_for_update()
                .execution_options(populate_existing=True)
            )
            session = result.scalar_one_or_none()
            if not session:
                raise NotFoundError("Private session not found")
            if session.status != SessionStatus.SCHEDULED:
                raise InvalidStateError(f"Session is already {session.status.value.lower()}")

            bookings = (await db.execute(
                select(Booking).where(
                    Booking.bookable_type == BookableType.PRIVATE_SESSION,
                    Booking.entity_id == session_id,
                    Booking.status == BookingStatus.BOOKED,
                )
            )).scalars().all()

            refunded = 0
            for booking in bookings:
                refunded += await BookingService._cancel_locked(
                    db, booking, actor, reason or "Session cancelled by studio", force_refund=True
                )

            session.status = SessionStatus.CANCELLED
            session.client_id = None
            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info(
            f"Private session {session_id} cancelled by {actor_id}: {len(bookings)} bookings, {refunded} credits refunded"
        )
        return {"session_id": session_id, "cancelled_bookings": len(bookings), "credits_refunded": refunded}

    @staticmethod
    async def complete_private_session(db: AsyncSession, actor: User, session_id: str) -> PrivateSession:
        if not actor.is_staff:
            raise PermissionDeniedError()
        session = await db.get(PrivateSession, session_id)
        if not session:
            raise NotFoundError("Private session not found")
        if session.status != SessionStatus.SCHEDULED:
            raise InvalidStateError(f"Session is already {session.status.value.lower()}")
        session.status = SessionStatus.COMPLETED
        await db.commit()
        logger.info(f"Private session {session_id} completed by {actor.id}")
        return session

    @staticmethod
    @retry_read
    async def list_upcoming_events(db: AsyncSession, days: int = 14) -> dict:
        now = utc_now()
        horizon = now + timedelta(days=days)

        classes = (await db.execute(
            select(ScheduledClass)
            .where(
                ScheduledClass.status == SessionStatus.SCHEDULED,
                ScheduledClass.starts_at > now,
                ScheduledClass.starts_at <= horizon,
            )
            .order_by(ScheduledClass.starts_at)
        )).scalars().unique().all()

        sessions = (await db.execute(
            select(PrivateSession)
            .where(
                PrivateSession.status == SessionStatus.SCHEDULED,
                PrivateSession.client_id.is_(None),
                PrivateSession.starts_at > now,
                PrivateSession.starts_at <= horizon,
            )
            .order_by(PrivateSession.starts_at)
        )).scalars().unique().all()

        return {"classes": classes, "private_sessions": sessions}
