from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from typing import Optional

from app.models import HomeUserOnboarding, HomeUserPostureAssessment, SafetyVideoLog, User
from app.enums import OnboardingStage, OnboardingStepStatus, STAGE_ORDER, can_transition_stage
from app.exceptions.errors import (
    InvalidStateError, NotFoundError, OnboardingIncompleteError, PermissionDeniedError
)
from app.services.messaging_service import MessagingService
from app.core.config import settings
from app.utils.dates import utc_now
from app.core.logger import get_logger

logger = get_logger("onboarding_service")

# Any of these answered "yes" puts the user on medical hold
PARQ_RISK_FLAGS = (
    "heart_condition",
    "chest_pain",
    "lose_balance",
    "bone_problems",
    "medications",
    "other_reasons",
)

POSTURE_MEDIA_FIELDS = (
    "front_image_url",
    "side_image_url",
    "anterior_squat_video_url",
    "posterior_squat_video_url",
    "side_squat_video_url",
    "notes",
)


class OnboardingService:
    """Home EMS onboarding: PAR-Q, posture assessment, safety video, in that order."""

    @staticmethod
    async def get_onboarding(db: AsyncSession, user_id: str) -> Optional[HomeUserOnboarding]:
        result = await db.execute(
            select(HomeUserOnboarding).where(HomeUserOnboarding.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def get_or_create(db: AsyncSession, user_id: str) -> HomeUserOnboarding:
        onboarding = await OnboardingService.get_onboarding(db, user_id)
        if not onboarding:
            onboarding = HomeUserOnboarding(
                user_id=user_id,
                parq_status=OnboardingStepStatus.NOT_STARTED,
                posture_status=OnboardingStepStatus.NOT_STARTED,
                safety_video_status=OnboardingStepStatus.NOT_STARTED,
                requires_medical_clearance=False,
            )
            db.add(onboarding)
            await db.flush()
            logger.info(f"Created onboarding record for {user_id}")
        return onboarding

    @staticmethod
    async def get_status(db: AsyncSession, user_id: str) -> HomeUserOnboarding:
        onboarding = await OnboardingService.get_or_create(db, user_id)
        await db.commit()
        return onboarding

    @staticmethod
    async def assert_booking_eligible(db: AsyncSession, user_id: str) -> None:
        onboarding = await OnboardingService.get_onboarding(db, user_id)
        if not onboarding or not onboarding.is_eligible_for_booking:
            if onboarding and onboarding.requires_medical_clearance:
                raise OnboardingIncompleteError("Medical clearance is required before booking")
            raise OnboardingIncompleteError()

    @staticmethod
    def _transition(onboarding: HomeUserOnboarding, stage: OnboardingStage, target: OnboardingStepStatus) -> None:
        current = onboarding.stage_status(stage)
        if not can_transition_stage(stage, current, target):
            raise InvalidStateError(
                f"{stage.value} cannot move from {current.value} to {target.value}"
            )
        onboarding.set_stage_status(stage, target)
        logger.info(f"Onboarding {onboarding.user_id}: {stage.value} {current.value} -> {target.value}")

    @staticmethod
    def _require_completed(onboarding: HomeUserOnboarding, stage: OnboardingStage) -> None:
        for previous in STAGE_ORDER[:STAGE_ORDER.index(stage)]:
            if onboarding.stage_status(previous) != OnboardingStepStatus.COMPLETED:
                raise InvalidStateError(f"{previous.value} must be completed first")
        if onboarding.requires_medical_clearance:
            raise InvalidStateError("Medical clearance is pending")

    @staticmethod
    async def start_parq(db: AsyncSession, user_id: str) -> HomeUserOnboarding:
        onboarding = await OnboardingService.get_or_create(db, user_id)
        if onboarding.parq_status != OnboardingStepStatus.IN_PROGRESS:
            OnboardingService._transition(onboarding, OnboardingStage.PARQ, OnboardingStepStatus.IN_PROGRESS)
        await db.commit()
        return onboarding

    @staticmethod
    async def submit_parq(db: AsyncSession, user_id: str, answers: dict) -> HomeUserOnboarding:
        onboarding = await OnboardingService.get_or_create(db, user_id)
        if onboarding.parq_status in (OnboardingStepStatus.PENDING_MEDICAL_REVIEW, OnboardingStepStatus.COMPLETED):
            raise InvalidStateError(f"PAR-Q already submitted ({onboarding.parq_status.value})")

        flagged = [flag for flag in PARQ_RISK_FLAGS if answers.get(flag)]
        target = OnboardingStepStatus.PENDING_MEDICAL_REVIEW if flagged else OnboardingStepStatus.COMPLETED
        OnboardingService._transition(onboarding, OnboardingStage.PARQ, target)

        onboarding.parq_responses = answers
        onboarding.requires_medical_clearance = bool(flagged)
        if flagged:
            logger.warning(f"PAR-Q for {user_id} flagged {', '.join(flagged)}: medical review required")

        await db.commit()
        return onboarding

    @staticmethod
    async def clear_medical_review(
        db: AsyncSession, actor: User, user_id: str, notes: Optional[str] = None
    ) -> HomeUserOnboarding:
        if not actor.is_admin:
            raise PermissionDeniedError("Only admins can clear a medical hold")
        onboarding = await OnboardingService.get_onboarding(db, user_id)
        if not onboarding:
            raise NotFoundError("Onboarding record not found")
        if onboarding.parq_status != OnboardingStepStatus.PENDING_MEDICAL_REVIEW:
            raise InvalidStateError("No medical review is pending for this user")

        OnboardingService._transition(onboarding, OnboardingStage.PARQ, OnboardingStepStatus.COMPLETED)
        onboarding.requires_medical_clearance = False
        onboarding.medical_cleared_by = actor.id
        onboarding.medical_cleared_at = utc_now()
        onboarding.medical_clearance_notes = notes

        await MessagingService.create_notification(
            db, user_id,
            type="medical_clearance",
            title="Medical clearance approved",
            body="You have been cleared to continue your home onboarding.",
        )
        await db.commit()
        logger.info(f"Medical hold for {user_id} cleared by {actor.id}")
        return onboarding

    @staticmethod
    async def get_posture_assessment(db: AsyncSession, user_id: str) -> Optional[HomeUserPostureAssessment]:
        result = await db.execute(
            select(HomeUserPostureAssessment).where(HomeUserPostureAssessment.user_id == user_id)
        )
        return result.scalar_one_or_none()

    @staticmethod
    async def submit_posture_media(db: AsyncSession, user_id: str, media: dict) -> HomeUserPostureAssessment:
        onboarding = await OnboardingService.get_or_create(db, user_id)
        OnboardingService._require_completed(onboarding, OnboardingStage.POSTURE)
        if onboarding.posture_status == OnboardingStepStatus.COMPLETED:
            raise InvalidStateError("Posture assessment has already been analysed")

        assessment = await OnboardingService.get_posture_assessment(db, user_id)
        if not assessment:
            assessment = HomeUserPostureAssessment(user_id=user_id)
            db.add(assessment)

        for field in POSTURE_MEDIA_FIELDS:
            value = media.get(field)
            if value is not None:
                setattr(assessment, field, value)

        if not (assessment.has_images or assessment.has_videos):
            raise InvalidStateError("At least posture images or squat videos are required")

        OnboardingService._transition(onboarding, OnboardingStage.POSTURE, OnboardingStepStatus.IN_PROGRESS)
        await db.commit()
        return assessment

    @staticmethod
    async def record_posture_analysis(
        db: AsyncSession, actor: User, user_id: str,
        analysis_notes: Optional[str] = None, training_plan: Optional[str] = None
    ) -> HomeUserPostureAssessment:
        if not actor.is_staff:
            raise PermissionDeniedError()
        onboarding = await OnboardingService.get_onboarding(db, user_id)
        assessment = await OnboardingService.get_posture_assessment(db, user_id)
        if not onboarding or not assessment:
            raise NotFoundError("No posture assessment submitted for this user")
        if onboarding.posture_status != OnboardingStepStatus.IN_PROGRESS:
            raise InvalidStateError("Posture assessment is not awaiting analysis")

        assessment.analysis_notes = analysis_notes
        assessment.training_plan = training_plan
        assessment.analysed_by = actor.id
        assessment.analysed_at = utc_now()
        OnboardingService._transition(onboarding, OnboardingStage.POSTURE, OnboardingStepStatus.COMPLETED)

        await MessagingService.create_notification(
            db, user_id,
            type="posture_analysis",
            title="Your posture analysis is ready",
            body="Your trainer has reviewed your posture assessment. Next step: the safety video.",
            action_url="/home/onboarding",
        )
        await db.commit()
        return assessment

    @staticmethod
    async def log_safety_video_progress(
        db: AsyncSession, user_id: str, video_id: str, watched_seconds: int, total_seconds: int
    ) -> SafetyVideoLog:
        if total_seconds <= 0:
            raise InvalidStateError("Video duration must be positive")
        onboarding = await OnboardingService.get_or_create(db, user_id)
        OnboardingService._require_completed(onboarding, OnboardingStage.SAFETY_VIDEO)

        percentage = min(100.0, round(watched_seconds / total_seconds * 100, 2))
        completed = percentage >= settings.SAFETY_VIDEO_COMPLETION_PERCENT

        log = SafetyVideoLog(
            user_id=user_id,
            video_id=video_id,
            watched_seconds=min(watched_seconds, total_seconds),
            total_seconds=total_seconds,
            percentage_watched=percentage,
            completed=completed,
        )
        db.add(log)

        # Re-watching after completion only adds a log entry
        if onboarding.safety_video_status != OnboardingStepStatus.COMPLETED:
            target = OnboardingStepStatus.COMPLETED if completed else OnboardingStepStatus.IN_PROGRESS
            OnboardingService._transition(onboarding, OnboardingStage.SAFETY_VIDEO, target)

        await db.commit()
        return log

    @staticmethod
    async def reset_stage(db: AsyncSession, actor: User, user_id: str, stage: OnboardingStage) -> HomeUserOnboarding:
        """Admin regression: the stage and every later one go back to NOT_STARTED."""
        if not actor.is_admin:
            raise PermissionDeniedError("Only admins can reset onboarding")
        onboarding = await OnboardingService.get_onboarding(db, user_id)
        if not onboarding:
            raise NotFoundError("Onboarding record not found")

        for later in STAGE_ORDER[STAGE_ORDER.index(stage):]:
            onboarding.set_stage_status(later, OnboardingStepStatus.NOT_STARTED)

        if stage == OnboardingStage.PARQ:
            onboarding.parq_responses = None
            onboarding.requires_medical_clearance = False
            onboarding.medical_cleared_by = None
            onboarding.medical_cleared_at = None

        if stage in (OnboardingStage.PARQ, OnboardingStage.POSTURE):
            assessment = await OnboardingService.get_posture_assessment(db, user_id)
            if assessment:
                assessment.analysis_notes = None
                assessment.training_plan = None
                assessment.analysed_by = None
                assessment.analysed_at = None

        await db.commit()
        logger.info(f"{actor.id} reset onboarding for {user_id} from {stage.value}")
        return onboarding
