"""
Admin reporting. Every figure is recomputed from bookings on each call.
"""
from collections import defaultdict, OrderedDict
from datetime import datetime, timedelta
from decimal import Decimal
from typing import Dict, List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.models import Booking, ScheduledClass, User, HomeUserOnboarding, HomeUserPostureAssessment
from app.enums import BookableType, BookingStatus, OnboardingStepStatus, UserRole
from app.core.config import settings
from app.utils.dates import utc_now
from app.utils.retry import retry_read
from app.core.logger import get_logger

logger = get_logger("reporting_service")

MAX_TREND_DAYS = 30


def _revenue(credits: int) -> Decimal:
    return Decimal(credits) * settings.REVENUE_PER_CREDIT


def _growth(current, previous) -> float:
    if not previous:
        return 0.0
    return round((float(current) - float(previous)) / float(previous) * 100, 2)


def _onboarding_stage(onboarding, assessment) -> str:
    if onboarding is None:
        return "registration"
    if onboarding.parq_status != OnboardingStepStatus.COMPLETED:
        return "medical_review" if onboarding.requires_medical_clearance else "parq"
    if onboarding.posture_status == OnboardingStepStatus.NOT_STARTED:
        return "media_upload"
    if onboarding.posture_status != OnboardingStepStatus.COMPLETED:
        return "analysis_pending"
    if onboarding.safety_video_status != OnboardingStepStatus.COMPLETED:
        return "safety_video"
    return "active"


class ReportingService:
    """Read-only aggregates for the admin dashboard."""

    @staticmethod
    async def _bookings_between(db: AsyncSession, start: datetime, end: datetime) -> List[Booking]:
        result = await db.execute(
            select(Booking).where(
                Booking.created_at >= start,
                Booking.created_at < end,
                Booking.status != BookingStatus.CANCELLED,
            )
        )
        return result.scalars().all()

    @staticmethod
    def _summarise(bookings: List[Booking]) -> Dict:
        credits = sum(b.credit_amount for b in bookings)
        durations = [(b.ends_at - b.starts_at).total_seconds() / 60 for b in bookings]
        return {
            "bookings": len(bookings),
            "active_users": len({b.user_id for b in bookings}),
            "credits": credits,
            "revenue": _revenue(credits),
            "avg_session_minutes": round(sum(durations) / len(durations), 1) if durations else 0.0,
        }

    @staticmethod
    @retry_read
    async def booking_stats(db: AsyncSession, days: int) -> Dict:
        now = utc_now()
        period = timedelta(days=days)
        current = ReportingService._summarise(
            await ReportingService._bookings_between(db, now - period, now)
        )
        previous = ReportingService._summarise(
            await ReportingService._bookings_between(db, now - 2 * period, now - period)
        )
        return {
            "period_days": days,
            "total_bookings": current["bookings"],
            "active_users": current["active_users"],
            "credits_redeemed": current["credits"],
            "revenue": current["revenue"],
            "avg_session_minutes": current["avg_session_minutes"],
            "booking_growth": _growth(current["bookings"], previous["bookings"]),
            "user_growth": _growth(current["active_users"], previous["active_users"]),
            "revenue_growth": _growth(current["revenue"], previous["revenue"]),
        }

    @staticmethod
    @retry_read
    async def top_classes(db: AsyncSession, days: int, limit: int = 10) -> List[Dict]:
        since = utc_now() - timedelta(days=days)
        result = await db.execute(
            select(Booking, ScheduledClass)
            .join(ScheduledClass, ScheduledClass.id == Booking.entity_id)
            .where(
                Booking.bookable_type == BookableType.CLASS,
                Booking.status != BookingStatus.CANCELLED,
                Booking.created_at >= since,
            )
        )

        bookings_by_name = defaultdict(int)
        capacity_by_class = defaultdict(dict)
        for booking, scheduled_class in result.unique().all():
            bookings_by_name[scheduled_class.name] += 1
            capacity_by_class[scheduled_class.name][scheduled_class.id] = scheduled_class.capacity

        rows = []
        for name, count in bookings_by_name.items():
            capacity = sum(capacity_by_class[name].values())
            rows.append({
                "class_name": name,
                "bookings": count,
                "capacity": capacity,
                "utilization_rate": round(count / capacity * 100, 1) if capacity else 0.0,
            })
        rows.sort(key=lambda row: (-row["bookings"], row["class_name"]))
        return rows[:limit]

    @staticmethod
    @retry_read
    async def attendance_trends(db: AsyncSession, days: int) -> List[Dict]:
        now = utc_now()
        result = await db.execute(
            select(Booking).where(
                Booking.starts_at >= now - timedelta(days=days),
                Booking.starts_at <= now,
                Booking.status != BookingStatus.CANCELLED,
            )
        )

        per_day = defaultdict(lambda: {"bookings": 0, "attended": 0, "no_show": 0})
        for booking in result.scalars().all():
            day = per_day[booking.starts_at.date()]
            day["bookings"] += 1
            if booking.status == BookingStatus.ATTENDED:
                day["attended"] += 1
            elif booking.status == BookingStatus.NO_SHOW:
                day["no_show"] += 1

        ordered = sorted(per_day.items(), key=lambda item: item[0], reverse=True)[:MAX_TREND_DAYS]
        return [{"date": day, **counts} for day, counts in ordered]

    @staticmethod
    @retry_read
    async def revenue_trends(db: AsyncSession, days: int) -> List[Dict]:
        now = utc_now()
        bookings = await ReportingService._bookings_between(db, now - timedelta(days=days), now)

        credits_per_day = OrderedDict()
        for booking in sorted(bookings, key=lambda b: b.created_at):
            day = booking.created_at.date()
            credits_per_day[day] = credits_per_day.get(day, 0) + booking.credit_amount

        return [
            {"date": day, "credits": credits, "revenue": _revenue(credits)}
            for day, credits in credits_per_day.items()
        ]

    @staticmethod
    @retry_read
    async def home_user_overview(db: AsyncSession) -> List[Dict]:
        result = await db.execute(
            select(User, HomeUserOnboarding, HomeUserPostureAssessment)
            .outerjoin(HomeUserOnboarding, HomeUserOnboarding.user_id == User.id)
            .outerjoin(HomeUserPostureAssessment, HomeUserPostureAssessment.user_id == User.id)
            .where(User.role == UserRole.HOME_USER, User.is_active.is_(True))
            .order_by(User.created_at.desc())
        )

        clients = []
        for user, onboarding, assessment in result.unique().all():
            timestamps = [ts for ts in (
                user.updated_at,
                onboarding.updated_at if onboarding else None,
                assessment.updated_at if assessment else None,
            ) if ts]
            clients.append({
                "user_id": user.id,
                "email": user.email,
                "name": user.full_name,
                "stage": _onboarding_stage(onboarding, assessment),
                "parq_completed": bool(onboarding and onboarding.parq_status == OnboardingStepStatus.COMPLETED),
                "requires_medical_clearance": bool(onboarding and onboarding.requires_medical_clearance),
                "images_uploaded": bool(assessment and assessment.has_images),
                "videos_uploaded": bool(assessment and assessment.has_videos),
                "analysis_completed": bool(assessment and assessment.analysed_at),
                "safety_video_completed": bool(
                    onboarding and onboarding.safety_video_status == OnboardingStepStatus.COMPLETED
                ),
                "is_eligible_for_booking": bool(onboarding and onboarding.is_eligible_for_booking),
                "last_activity": max(timestamps) if timestamps else None,
            })
        return clients
