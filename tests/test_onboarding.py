"""Home EMS onboarding: PAR-Q screening, medical hold, posture review, safety video."""
import pytest
from sqlalchemy import select

from app.enums import OnboardingStage, OnboardingStepStatus
from app.exceptions.errors import (
    InvalidStateError, NotFoundError, OnboardingIncompleteError, PermissionDeniedError
)
from app.models import UserNotification
from app.services.booking_service import BookingService
from app.services.onboarding_service import OnboardingService

CLEAR_PARQ = {"heart_condition": False, "chest_pain": False}
MEDIA = {
    "front_image_url": "https://cdn.studio.test/front.jpg",
    "side_image_url": "https://cdn.studio.test/side.jpg",
}


async def _complete_onboarding(db, staff, user_id):
    await OnboardingService.submit_parq(db, user_id, CLEAR_PARQ)
    await OnboardingService.submit_posture_media(db, user_id, MEDIA)
    await OnboardingService.record_posture_analysis(db, staff, user_id, "Good alignment", "Start at level 2")
    await OnboardingService.log_safety_video_progress(db, user_id, "ems-safety", 300, 300)
    return await OnboardingService.get_status(db, user_id)


async def test_status_creates_record_with_everything_not_started(db, home_user):
    onboarding = await OnboardingService.get_status(db, home_user.id)

    assert onboarding.parq_status == OnboardingStepStatus.NOT_STARTED
    assert onboarding.posture_status == OnboardingStepStatus.NOT_STARTED
    assert onboarding.safety_video_status == OnboardingStepStatus.NOT_STARTED
    assert onboarding.current_stage == OnboardingStage.PARQ
    assert onboarding.is_eligible_for_booking is False


async def test_clear_parq_completes_stage(db, home_user):
    await OnboardingService.start_parq(db, home_user.id)
    onboarding = await OnboardingService.submit_parq(db, home_user.id, CLEAR_PARQ)

    assert onboarding.parq_status == OnboardingStepStatus.COMPLETED
    assert onboarding.parq_completed_at is not None
    assert onboarding.requires_medical_clearance is False
    assert onboarding.current_stage == OnboardingStage.POSTURE


async def test_heart_condition_places_medical_hold(db, admin, home_user, make_class, grant):
    user_id = home_user.id
    scheduled_class = await make_class()
    await grant(user_id, 2)

    onboarding = await OnboardingService.submit_parq(db, user_id, {"heart_condition": True})

    assert onboarding.parq_status == OnboardingStepStatus.PENDING_MEDICAL_REVIEW
    assert onboarding.requires_medical_clearance is True
    assert onboarding.can_proceed is False
    assert onboarding.parq_responses == {"heart_condition": True}

    with pytest.raises(OnboardingIncompleteError):
        await BookingService.book_class(db, home_user, scheduled_class.id)

    with pytest.raises(InvalidStateError):
        await OnboardingService.submit_posture_media(db, user_id, MEDIA)


async def test_parq_cannot_be_resubmitted_to_escape_hold(db, home_user):
    await OnboardingService.submit_parq(db, home_user.id, {"chest_pain": True})

    with pytest.raises(InvalidStateError):
        await OnboardingService.submit_parq(db, home_user.id, CLEAR_PARQ)


async def test_admin_clears_medical_hold(db, admin, home_user):
    user_id = home_user.id
    await OnboardingService.submit_parq(db, user_id, {"medications": True})

    onboarding = await OnboardingService.clear_medical_review(db, admin, user_id, "GP letter received")

    assert onboarding.parq_status == OnboardingStepStatus.COMPLETED
    assert onboarding.requires_medical_clearance is False
    assert onboarding.medical_cleared_by == admin.id
    assert onboarding.medical_clearance_notes == "GP letter received"

    notifications = (await db.execute(
        select(UserNotification).where(UserNotification.user_id == user_id)
    )).scalars().all()
    assert [n.type for n in notifications] == ["medical_clearance"]


async def test_trainer_cannot_clear_medical_hold(db, trainer, home_user):
    await OnboardingService.submit_parq(db, home_user.id, {"heart_condition": True})
    with pytest.raises(PermissionDeniedError):
        await OnboardingService.clear_medical_review(db, trainer, home_user.id)


async def test_clearing_without_pending_review_is_rejected(db, admin, home_user):
    await OnboardingService.submit_parq(db, home_user.id, CLEAR_PARQ)
    with pytest.raises(InvalidStateError):
        await OnboardingService.clear_medical_review(db, admin, home_user.id)


async def test_stages_must_complete_in_order(db, home_user):
    user_id = home_user.id
    with pytest.raises(InvalidStateError):
        await OnboardingService.submit_posture_media(db, user_id, MEDIA)
    with pytest.raises(InvalidStateError):
        await OnboardingService.log_safety_video_progress(db, user_id, "ems-safety", 300, 300)


async def test_posture_media_requires_images_or_videos(db, home_user):
    await OnboardingService.submit_parq(db, home_user.id, CLEAR_PARQ)
    with pytest.raises(InvalidStateError):
        await OnboardingService.submit_posture_media(db, home_user.id, {"notes": "No media yet"})


async def test_posture_analysis_requires_submitted_media(db, trainer, home_user):
    await OnboardingService.submit_parq(db, home_user.id, CLEAR_PARQ)
    with pytest.raises(NotFoundError):
        await OnboardingService.record_posture_analysis(db, trainer, home_user.id, "notes")


async def test_partial_safety_video_keeps_stage_in_progress(db, trainer, home_user):
    user_id = home_user.id
    await OnboardingService.submit_parq(db, user_id, CLEAR_PARQ)
    await OnboardingService.submit_posture_media(db, user_id, MEDIA)
    await OnboardingService.record_posture_analysis(db, trainer, user_id)

    log = await OnboardingService.log_safety_video_progress(db, user_id, "ems-safety", 120, 300)
    onboarding = await OnboardingService.get_onboarding(db, user_id)

    assert log.percentage_watched == 40.0
    assert log.completed is False
    assert onboarding.safety_video_status == OnboardingStepStatus.IN_PROGRESS
    assert onboarding.is_eligible_for_booking is False


async def test_full_onboarding_makes_home_user_eligible(db, trainer, home_user, make_class, grant):
    user_id = home_user.id
    scheduled_class = await make_class()
    await grant(user_id, 1)

    onboarding = await _complete_onboarding(db, trainer, user_id)

    assert onboarding.is_eligible_for_booking is True
    assert onboarding.current_stage is None
    booking = await BookingService.book_class(db, home_user, scheduled_class.id)
    assert booking.user_id == user_id


async def test_posture_analysis_notifies_user(db, trainer, home_user):
    user_id = home_user.id
    await OnboardingService.submit_parq(db, user_id, CLEAR_PARQ)
    await OnboardingService.submit_posture_media(db, user_id, MEDIA)

    assessment = await OnboardingService.record_posture_analysis(db, trainer, user_id, "Slight pelvic tilt")

    assert assessment.analysed_by == trainer.id
    assert assessment.analysis_notes == "Slight pelvic tilt"
    notifications = (await db.execute(
        select(UserNotification).where(UserNotification.user_id == user_id)
    )).scalars().all()
    assert [n.type for n in notifications] == ["posture_analysis"]


async def test_reset_posture_rolls_back_later_stages(db, admin, trainer, home_user):
    user_id = home_user.id
    await _complete_onboarding(db, trainer, user_id)

    onboarding = await OnboardingService.reset_stage(db, admin, user_id, OnboardingStage.POSTURE)

    assert onboarding.parq_status == OnboardingStepStatus.COMPLETED
    assert onboarding.posture_status == OnboardingStepStatus.NOT_STARTED
    assert onboarding.posture_completed_at is None
    assert onboarding.safety_video_status == OnboardingStepStatus.NOT_STARTED
    assert onboarding.is_eligible_for_booking is False

    assessment = await OnboardingService.get_posture_assessment(db, user_id)
    assert assessment.analysed_at is None
    assert assessment.front_image_url == MEDIA["front_image_url"]


async def test_reset_parq_clears_hold(db, admin, home_user):
    user_id = home_user.id
    await OnboardingService.submit_parq(db, user_id, {"heart_condition": True})

    onboarding = await OnboardingService.reset_stage(db, admin, user_id, OnboardingStage.PARQ)

    assert onboarding.parq_status == OnboardingStepStatus.NOT_STARTED
    assert onboarding.requires_medical_clearance is False
    assert onboarding.parq_responses is None


async def test_reset_requires_admin(db, trainer, home_user):
    await OnboardingService.get_status(db, home_user.id)
    with pytest.raises(PermissionDeniedError):
        await OnboardingService.reset_stage(db, trainer, home_user.id, OnboardingStage.PARQ)
