from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from typing import List

from app.database.connection import get_db
from app.middlewares.clerk_auth import get_authenticated_user, require_staff, require_admin
from app.api.v1.controllers.onboarding_controller import OnboardingController
from app.models.user import User
from app.schemas.home_onboarding_schemas import (
    ParqSubmission, OnboardingStatusResponse, PostureMediaSubmission, PostureAssessmentResponse,
    PostureAnalysisRequest, SafetyVideoProgressRequest, SafetyVideoProgressResponse,
    MedicalClearanceRequest, OnboardingResetRequest, HomeUserOverviewResponse
)
from app.core.logger import get_logger
import os

logger = get_logger("onboarding_routes")

router = APIRouter(tags=["Home Onboarding"])

# Development mode detection
IS_DEVELOPMENT = os.getenv("ENVIRONMENT", "development") == "development"


@router.get(
    "/home/onboarding/status",
    response_model=OnboardingStatusResponse,
    summary="Get Onboarding Status",
    description="PAR-Q, posture assessment and safety video progress, plus booking eligibility." +
                (" **Development Mode**: use the X-Development-User header." if IS_DEVELOPMENT else "")
)
async def get_onboarding_status(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await OnboardingController.get_status(db, user)


@router.post("/home/onboarding/parq/start", response_model=OnboardingStatusResponse, summary="Start PAR-Q")
async def start_parq(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await OnboardingController.start_parq(db, user)


@router.post(
    "/home/onboarding/parq",
    response_model=OnboardingStatusResponse,
    summary="Submit PAR-Q",
    description="Any risk answer places the user on medical hold until an admin clears them."
)
async def submit_parq(
    submission: ParqSubmission,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    logger.info(f"POST /home/onboarding/parq - User: {user.id}")
    return await OnboardingController.submit_parq(db, user, submission)


@router.get("/home/onboarding/posture-assessment", response_model=PostureAssessmentResponse)
async def get_posture_assessment(
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await OnboardingController.get_posture_assessment(db, user)


@router.post(
    "/home/onboarding/posture-assessment",
    response_model=PostureAssessmentResponse,
    summary="Submit Posture Media",
    description="Upload references for posture photos and squat videos. Requires a completed PAR-Q."
)
async def submit_posture_assessment(
    media: PostureMediaSubmission,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await OnboardingController.submit_posture_media(db, user, media)


@router.post(
    "/home/onboarding/safety-video/progress",
    response_model=SafetyVideoProgressResponse,
    summary="Log Safety Video Progress"
)
async def log_safety_video_progress(
    progress: SafetyVideoProgressRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(get_authenticated_user)
):
    return await OnboardingController.log_safety_video(db, user, progress)


@router.get("/admin/home-users", response_model=List[HomeUserOverviewResponse], tags=["Admin"])
async def list_home_users(
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await OnboardingController.list_home_users(db)


@router.post(
    "/admin/home-users/{user_id}/posture-analysis",
    response_model=PostureAssessmentResponse,
    tags=["Admin"]
)
async def record_posture_analysis(
    user_id: str,
    request: PostureAnalysisRequest,
    db: AsyncSession = Depends(get_db),
    staff: User = Depends(require_staff)
):
    return await OnboardingController.record_posture_analysis(
        db, staff, user_id, request.analysis_notes, request.training_plan
    )


@router.post(
    "/admin/home-users/{user_id}/medical-clearance",
    response_model=OnboardingStatusResponse,
    tags=["Admin"],
    summary="Clear Medical Hold"
)
async def clear_medical_review(
    user_id: str,
    request: MedicalClearanceRequest = MedicalClearanceRequest(),
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await OnboardingController.clear_medical_review(db, admin, user_id, request.notes)


@router.post(
    "/admin/home-users/{user_id}/onboarding/reset",
    response_model=OnboardingStatusResponse,
    tags=["Admin"],
    summary="Reset Onboarding Stage",
    description="Moves the given stage and every later stage back to NOT_STARTED."
)
async def reset_onboarding_stage(
    user_id: str,
    request: OnboardingResetRequest,
    db: AsyncSession = Depends(get_db),
    admin: User = Depends(require_admin)
):
    return await OnboardingController.reset_stage(db, admin, user_id, request.stage)
