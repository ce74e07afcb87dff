"""Admin reporting aggregates computed from bookings."""
from datetime import timedelta
from decimal import Decimal

import pytest

from app.enums import BookableType, BookingStatus, UserRole
from app.models import Booking
from app.services.booking_service import BookingService
from app.services.onboarding_service import OnboardingService
from app.services.reporting_service import ReportingService
from app.utils.dates import utc_now


@pytest.fixture
def add_booking(db):
    async def _add_booking(user_id, entity_id, credits=1, status=BookingStatus.BOOKED,
                           created_ago=timedelta(hours=1), starts_ago=timedelta(hours=-24), minutes=30):
        starts_at = utc_now() - starts_ago
        booking = Booking(
            user_id=user_id,
            bookable_type=BookableType.CLASS,
            entity_id=entity_id,
            status=status,
            credit_amount=credits,
            session_name="EMS Group",
            starts_at=starts_at,
            ends_at=starts_at + timedelta(minutes=minutes),
            created_at=utc_now() - created_ago,
        )
        db.add(booking)
        await db.commit()
        return booking

    return _add_booking


async def test_booking_stats_empty_store(db):
    stats = await ReportingService.booking_stats(db, 30)

    assert stats["total_bookings"] == 0
    assert stats["revenue"] == Decimal(0)
    assert stats["avg_session_minutes"] == 0.0
    assert stats["booking_growth"] == 0.0


async def test_booking_stats_counts_current_period_and_growth(db, make_user, add_booking):
    alice = await make_user()
    bob = await make_user()
    await add_booking(alice.id, "class-a", credits=2, minutes=30)
    await add_booking(bob.id, "class-a", credits=1, minutes=60)
    await add_booking(bob.id, "class-b", credits=1, status=BookingStatus.CANCELLED)
    # Previous 7-day window
    await add_booking(alice.id, "class-c", credits=1, created_ago=timedelta(days=10))

    stats = await ReportingService.booking_stats(db, 7)

    assert stats["total_bookings"] == 2
    assert stats["active_users"] == 2
    assert stats["credits_redeemed"] == 3
    assert stats["revenue"] == Decimal(30)
    assert stats["avg_session_minutes"] == 45.0
    assert stats["booking_growth"] == 100.0
    assert stats["user_growth"] == 100.0
    assert stats["revenue_growth"] == 200.0


async def test_top_classes_by_bookings(db, make_user, make_class, grant):
    popular = await make_class(name="EMS Power", capacity=4)
    quiet = await make_class(name="EMS Stretch", capacity=4)
    members = [await make_user() for _ in range(3)]
    for member in members:
        await grant(member.id, 2)
        await BookingService.book_class(db, member, popular.id)
    await BookingService.book_class(db, members[0], quiet.id)

    rows = await ReportingService.top_classes(db, 7)

    assert [row["class_name"] for row in rows] == ["EMS Power", "EMS Stretch"]
    assert rows[0]["bookings"] == 3
    assert rows[0]["capacity"] == 4
    assert rows[0]["utilization_rate"] == 75.0
    assert len(await ReportingService.top_classes(db, 7, limit=1)) == 1


async def test_attendance_trends_by_day(db, client_user, add_booking):
    await add_booking(client_user.id, "class-a", status=BookingStatus.ATTENDED, starts_ago=timedelta(days=1))
    await add_booking(client_user.id, "class-b", status=BookingStatus.NO_SHOW, starts_ago=timedelta(days=1))
    await add_booking(client_user.id, "class-c", status=BookingStatus.ATTENDED, starts_ago=timedelta(days=3))

    trends = await ReportingService.attendance_trends(db, 7)

    assert len(trends) == 2
    newest, oldest = trends
    assert newest["date"] > oldest["date"]
    assert newest["bookings"] == 2
    assert newest["attended"] == 1
    assert newest["no_show"] == 1
    assert oldest["attended"] == 1


async def test_revenue_trends(db, client_user, add_booking):
    await add_booking(client_user.id, "class-a", credits=2, created_ago=timedelta(days=2))
    await add_booking(client_user.id, "class-b", credits=1, created_ago=timedelta(minutes=5))

    trends = await ReportingService.revenue_trends(db, 7)

    assert [row["credits"] for row in trends] == [2, 1]
    assert [row["revenue"] for row in trends] == [Decimal(20), Decimal(10)]


async def test_home_user_overview_stages(db, make_user):
    fresh = await make_user(UserRole.HOME_USER, first_name="Fresh")
    on_hold = await make_user(UserRole.HOME_USER, first_name="Held")
    uploaded = await make_user(UserRole.HOME_USER, first_name="Uploaded")
    await make_user(UserRole.CLIENT)

    await OnboardingService.submit_parq(db, on_hold.id, {"heart_condition": True})
    await OnboardingService.submit_parq(db, uploaded.id, {})
    await OnboardingService.submit_posture_media(db, uploaded.id, {
        "anterior_squat_video_url": "https://cdn.studio.test/squat.mp4",
    })

    overview = {row["user_id"]: row for row in await ReportingService.home_user_overview(db)}

    assert len(overview) == 3
    assert overview[fresh.id]["stage"] == "registration"
    assert overview[on_hold.id]["stage"] == "medical_review"
    assert overview[on_hold.id]["requires_medical_clearance"] is True
    assert overview[uploaded.id]["stage"] == "analysis_pending"
    assert overview[uploaded.id]["videos_uploaded"] is True
    assert overview[uploaded.id]["images_uploaded"] is False
