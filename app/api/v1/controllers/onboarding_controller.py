from fastapi import HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List, Optional

from app.models import User, HomeUserOnboarding
from app.enums import OnboardingStage
from app.exceptions.errors import NotFoundError
from app.exceptions.handlers import EXPECTED_ERRORS
from app.services.onboarding_service import OnboardingService
from app.services.reporting_service import ReportingService
from app.schemas.home_onboarding_schemas import (
    ParqSubmission, OnboardingStatusResponse, PostureMediaSubmission, PostureAssessmentResponse,
    SafetyVideoProgressRequest, SafetyVideoProgressResponse, HomeUserOverviewResponse
)
from app.core.logger import get_logger

logger = get_logger("onboarding_controller")


def _status(onboarding: HomeUserOnboarding) -> OnboardingStatusResponse:
    return OnboardingStatusResponse.model_validate(onboarding)


class OnboardingController:
    """Controller for the home EMS onboarding flow."""

    @staticmethod
    async def get_status(db: AsyncSession, user: User) -> OnboardingStatusResponse:
        try:
            return _status(await OnboardingService.get_status(db, user.id))
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Error getting onboarding status for {user.id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to get onboarding status"
            )

    @staticmethod
    async def start_parq(db: AsyncSession, user: User) -> OnboardingStatusResponse:
        return _status(await OnboardingService.start_parq(db, user.id))

    @staticmethod
    async def submit_parq(db: AsyncSession, user: User, submission: ParqSubmission) -> OnboardingStatusResponse:
        try:
            onboarding = await OnboardingService.submit_parq(db, user.id, submission.model_dump())
            return _status(onboarding)
        except EXPECTED_ERRORS:
            raise
        except Exception as e:
            logger.error(f"Error submitting PAR-Q for {user.id}: {e}")
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to submit PAR-Q"
            )

    @staticmethod
    async def get_posture_assessment(db: AsyncSession, user: User) -> PostureAssessmentResponse:
        assessment = await OnboardingService.get_posture_assessment(db, user.id)
        if not assessment:
            raise NotFoundError("No posture assessment submitted yet")
        return PostureAssessmentResponse.model_validate(assessment)

    @staticmethod
    async def submit_posture_media(
        db: AsyncSession, user: User, media: PostureMediaSubmission
    ) -> PostureAssessmentResponse:
        assessment = await OnboardingService.submit_posture_media(
            db, user.id, media.model_dump(exclude_none=True)
        )
        return PostureAssessmentResponse.model_validate(assessment)

    @staticmethod
    async def log_safety_video(
        db: AsyncSession, user: User, progress: SafetyVideoProgressRequest
    ) -> SafetyVideoProgressResponse:
        log = await OnboardingService.log_safety_video_progress(
            db, user.id, progress.video_id, progress.watched_seconds, progress.total_seconds
        )
        onboarding = await OnboardingService.get_onboarding(db, user.id)
        return SafetyVideoProgressResponse(
            video_id=log.video_id,
            percentage_watched=log.percentage_watched,
            completed=log.completed,
            safety_video_status=onboarding.safety_video_status,
            is_eligible_for_booking=onboarding.is_eligible_for_booking,
        )

    @staticmethod
    async def record_posture_analysis(
        db: AsyncSession, actor: User, user_id: str,
        analysis_notes: Optional[str], training_plan: Optional[str]
    ) -> PostureAssessmentResponse:
        assessment = await OnboardingService.record_posture_analysis(
            db, actor, user_id, analysis_notes, training_plan
        )
        return PostureAssessmentResponse.model_validate(assessment)

    @staticmethod
    async def clear_medical_review(
        db: AsyncSession, actor: User, user_id: str, notes: Optional[str]
    ) -> OnboardingStatusResponse:
        return _status(await OnboardingService.clear_medical_review(db, actor, user_id, notes))

    @staticmethod
    async def reset_stage(
        db: AsyncSession, actor: User, user_id: str, stage: OnboardingStage
    ) -> OnboardingStatusResponse:
        return _status(await OnboardingService.reset_stage(db, actor, user_id, stage))

    @staticmethod
    async def list_home_users(db: AsyncSession) -> List[HomeUserOverviewResponse]:
        return [HomeUserOverviewResponse(**row) for row in await ReportingService.home_user_overview(db)]
