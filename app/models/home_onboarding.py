from sqlalchemy import Column, String, DateTime, Integer, Boolean, Text, Float, ForeignKey, JSON, Enum as SQLEnum
from sqlalchemy.orm import relationship
from app.database.base import Base
from app.enums import OnboardingStepStatus, OnboardingStage, STAGE_ORDER
from app.utils.dates import utc_now
import cuid


def _step_status_column():
    return Column(
        SQLEnum(OnboardingStepStatus, native_enum=False, length=30),
        nullable=False,
        default=OnboardingStepStatus.NOT_STARTED
    )


class HomeUserOnboarding(Base):
    """Per-user home EMS onboarding progress (PAR-Q, posture assessment, safety video)."""

    __tablename__ = "home_user_onboarding"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, unique=True, index=True)

    parq_status = _step_status_column()
    parq_completed_at = Column(DateTime, nullable=True)
    parq_responses = Column(JSON, nullable=True)
    requires_medical_clearance = Column(Boolean, nullable=False, default=False)
    medical_cleared_by = Column(String(25), ForeignKey("users.id"), nullable=True)
    medical_cleared_at = Column(DateTime, nullable=True)
    medical_clearance_notes = Column(Text, nullable=True)

    posture_status = _step_status_column()
    posture_completed_at = Column(DateTime, nullable=True)

    safety_video_status = _step_status_column()
    safety_video_completed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    user = relationship("User", back_populates="home_onboarding", foreign_keys=[user_id])

    _STATUS_FIELDS = {
        OnboardingStage.PARQ: ("parq_status", "parq_completed_at"),
        OnboardingStage.POSTURE: ("posture_status", "posture_completed_at"),
        OnboardingStage.SAFETY_VIDEO: ("safety_video_status", "safety_video_completed_at"),
    }

    def stage_status(self, stage: OnboardingStage) -> OnboardingStepStatus:
        value = getattr(self, self._STATUS_FIELDS[stage][0])
        return OnboardingStepStatus(value or OnboardingStepStatus.NOT_STARTED)

    def set_stage_status(self, stage: OnboardingStage, status: OnboardingStepStatus, at=None):
        status_field, completed_field = self._STATUS_FIELDS[stage]
        setattr(self, status_field, status)
        if status == OnboardingStepStatus.COMPLETED:
            setattr(self, completed_field, at or utc_now())
        elif status == OnboardingStepStatus.NOT_STARTED:
            setattr(self, completed_field, None)

    @property
    def can_proceed(self) -> bool:
        return not self.requires_medical_clearance

    @property
    def current_stage(self):
        """First stage that is not completed yet, or None once everything is done."""
        for stage in STAGE_ORDER:
            if self.stage_status(stage) != OnboardingStepStatus.COMPLETED:
                return stage
        return None

    @property
    def is_eligible_for_booking(self) -> bool:
        # Derived on every read; never stored
        return (
            all(self.stage_status(stage) == OnboardingStepStatus.COMPLETED for stage in STAGE_ORDER)
            and not self.requires_medical_clearance
        )


class HomeUserPostureAssessment(Base):
    __tablename__ = "home_user_posture_assessment"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, unique=True, index=True)
    front_image_url = Column(Text, nullable=True)
    side_image_url = Column(Text, nullable=True)
    anterior_squat_video_url = Column(Text, nullable=True)
    posterior_squat_video_url = Column(Text, nullable=True)
    side_squat_video_url = Column(Text, nullable=True)
    notes = Column(Text, nullable=True)
    analysis_notes = Column(Text, nullable=True)
    training_plan = Column(Text, nullable=True)
    analysed_by = Column(String(25), ForeignKey("users.id"), nullable=True)
    analysed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=utc_now)
    updated_at = Column(DateTime, default=utc_now, onupdate=utc_now)

    @property
    def has_images(self) -> bool:
        return bool(self.front_image_url and self.side_image_url)

    @property
    def has_videos(self) -> bool:
        return bool(self.anterior_squat_video_url or self.posterior_squat_video_url or self.side_squat_video_url)


class SafetyVideoLog(Base):
    __tablename__ = "user_safety_video_logs"

    id = Column(String(25), primary_key=True, index=True, default=lambda: cuid.cuid())
    user_id = Column(String(25), ForeignKey("users.id"), nullable=False, index=True)
    video_id = Column(String(100), nullable=False)
    watched_seconds = Column(Integer, nullable=False, default=0)
    total_seconds = Column(Integer, nullable=False)
    percentage_watched = Column(Float, nullable=False, default=0)
    completed = Column(Boolean, nullable=False, default=False)
    watched_at = Column(DateTime, default=utc_now, nullable=False)
