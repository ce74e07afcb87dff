"""
Home EMS onboarding enums.

Each stage moves NOT_STARTED -> IN_PROGRESS -> COMPLETED. The PAR-Q stage can
also park in PENDING_MEDICAL_REVIEW, which only an admin clearance leaves.
"""

from enum import Enum


class OnboardingStepStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    PENDING_MEDICAL_REVIEW = "PENDING_MEDICAL_REVIEW"


class OnboardingStage(str, Enum):
    PARQ = "PARQ"
    POSTURE = "POSTURE"
    SAFETY_VIDEO = "SAFETY_VIDEO"


# Stages in the order they must be completed
STAGE_ORDER = (OnboardingStage.PARQ, OnboardingStage.POSTURE, OnboardingStage.SAFETY_VIDEO)

STAGE_TRANSITIONS = {
    OnboardingStepStatus.NOT_STARTED: frozenset({
        OnboardingStepStatus.IN_PROGRESS,
        OnboardingStepStatus.COMPLETED,
        OnboardingStepStatus.PENDING_MEDICAL_REVIEW,
    }),
    OnboardingStepStatus.IN_PROGRESS: frozenset({
        OnboardingStepStatus.IN_PROGRESS,
        OnboardingStepStatus.COMPLETED,
        OnboardingStepStatus.PENDING_MEDICAL_REVIEW,
    }),
    OnboardingStepStatus.PENDING_MEDICAL_REVIEW: frozenset({
        OnboardingStepStatus.COMPLETED,
    }),
    OnboardingStepStatus.COMPLETED: frozenset(),
}

# PENDING_MEDICAL_REVIEW only exists on the PAR-Q stage
MEDICAL_REVIEW_STAGES = frozenset({OnboardingStage.PARQ})


def can_transition_stage(stage: OnboardingStage, current: OnboardingStepStatus, target: OnboardingStepStatus) -> bool:
    if target == OnboardingStepStatus.PENDING_MEDICAL_REVIEW and stage not in MEDICAL_REVIEW_STAGES:
        return False
    return target in STAGE_TRANSITIONS.get(OnboardingStepStatus(current), frozenset())
