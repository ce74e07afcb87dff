from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime

from app.enums import OnboardingStage, OnboardingStepStatus


class ParqSubmission(BaseModel):
    heart_condition: bool = Field(False, alias="heartCondition")
    chest_pain: bool = Field(False, alias="chestPain")
    lose_balance: bool = Field(False, alias="loseBalance")
    bone_problems: bool = Field(False, alias="boneProblems")
    medications: bool = False
    other_reasons: bool = Field(False, alias="otherReasons")
    other_reasons_details: Optional[str] = Field(None, max_length=1000, alias="otherReasonsDetails")
    signature: Optional[str] = Field(None, max_length=200)

    class Config:
        # snake_case or the client app's camelCase names; any other key is a 422
        extra = "forbid"
        populate_by_name = True


class OnboardingStatusResponse(BaseModel):
    user_id: str
    parq_status: OnboardingStepStatus
    parq_completed_at: Optional[datetime] = None
    posture_status: OnboardingStepStatus
    posture_completed_at: Optional[datetime] = None
    safety_video_status: OnboardingStepStatus
    safety_video_completed_at: Optional[datetime] = None
    requires_medical_clearance: bool
    can_proceed: bool
    current_stage: Optional[OnboardingStage] = None
    is_eligible_for_booking: bool

    class Config:
        from_attributes = True


class PostureMediaSubmission(BaseModel):
    front_image_url: Optional[str] = Field(None, max_length=2000)
    side_image_url: Optional[str] = Field(None, max_length=2000)
    anterior_squat_video_url: Optional[str] = Field(None, max_length=2000)
    posterior_squat_video_url: Optional[str] = Field(None, max_length=2000)
    side_squat_video_url: Optional[str] = Field(None, max_length=2000)
    notes: Optional[str] = Field(None, max_length=2000)

    @validator(
        "front_image_url", "side_image_url", "anterior_squat_video_url",
        "posterior_squat_video_url", "side_squat_video_url"
    )
    def must_be_url(cls, v):
        if v is not None and not v.startswith(("https://", "http://", "/")):
            raise ValueError("Media must be an http(s) URL or an uploaded file path")
        return v


class PostureAssessmentResponse(BaseModel):
    id: str
    user_id: str
    front_image_url: Optional[str] = None
    side_image_url: Optional[str] = None
    anterior_squat_video_url: Optional[str] = None
    posterior_squat_video_url: Optional[str] = None
    side_squat_video_url: Optional[str] = None
    notes: Optional[str] = None
    analysis_notes: Optional[str] = None
    training_plan: Optional[str] = None
    analysed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class PostureAnalysisRequest(BaseModel):
    analysis_notes: Optional[str] = Field(None, max_length=5000)
    training_plan: Optional[str] = Field(None, max_length=5000)


class SafetyVideoProgressRequest(BaseModel):
    video_id: str = Field(..., min_length=1, max_length=100)
    watched_seconds: int = Field(..., ge=0)
    total_seconds: int = Field(..., gt=0)


class SafetyVideoProgressResponse(BaseModel):
    video_id: str
    percentage_watched: float
    completed: bool
    safety_video_status: OnboardingStepStatus
    is_eligible_for_booking: bool


class MedicalClearanceRequest(BaseModel):
    notes: Optional[str] = Field(None, max_length=2000)


class OnboardingResetRequest(BaseModel):
    stage: OnboardingStage


class HomeUserOverviewResponse(BaseModel):
    user_id: str
    email: str
    name: str
    stage: str
    parq_completed: bool
    requires_medical_clearance: bool
    images_uploaded: bool
    videos_uploaded: bool
    analysis_completed: bool
    safety_video_completed: bool
    is_eligible_for_booking: bool
    last_activity: Optional[datetime] = None
