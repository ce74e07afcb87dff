from typing import Dict

from sqlalchemy import select, func, desc
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Booking, User
from app.enums import BookingStatus, UserRole
from app.exceptions.errors import NotFoundError
from app.services.credit_ledger_service import CreditLedgerService
from app.services.membership_service import MembershipService
from app.services.messaging_service import MessagingService
from app.services.onboarding_service import OnboardingService
from app.utils.dates import utc_now, start_of_month
from app.core.logger import get_logger

logger = get_logger("profile_service")


class ProfileService:

    @staticmethod
    async def client_profile(db: AsyncSession, user_id: str) -> Dict:
        """Everything the client dashboard (or staff looking at a client) needs in one call."""
        user = await db.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")

        live = Booking.status != BookingStatus.CANCELLED
        total_sessions = (await db.execute(
            select(func.count(Booking.id)).where(Booking.user_id == user_id, live)
        )).scalar_one()
        sessions_this_month = (await db.execute(
            select(func.count(Booking.id)).where(
                Booking.user_id == user_id, live, Booking.starts_at >= start_of_month(utc_now())
            )
        )).scalar_one()
        recent = (await db.execute(
            select(Booking).where(Booking.user_id == user_id).order_by(desc(Booking.starts_at)).limit(5)
        )).scalars().all()

        profile = {
            "user": user,
            "credit_balance": await CreditLedgerService.get_balance(db, user_id),
            "next_credit_expiry": await CreditLedgerService.next_expiry(db, user_id),
            "active_membership": await MembershipService.get_active_membership(db, user_id),
            "total_sessions": int(total_sessions),
            "sessions_this_month": int(sessions_this_month),
            "recent_bookings": recent,
            "unread_messages": await MessagingService.count_unread(db, user_id),
            "onboarding": None,
        }

        if user.role == UserRole.HOME_USER:
            profile["onboarding"] = await OnboardingService.get_onboarding(db, user_id)

        # Persist any lazy expiry the balance read applied
        await db.commit()
        return profile
