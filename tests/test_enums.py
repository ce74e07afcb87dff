"""Allowed status transitions."""
import pytest

from app.enums import (
    BookingStatus, OnboardingStage, OnboardingStepStatus, can_transition_booking, can_transition_stage
)


@pytest.mark.parametrize("target", [BookingStatus.CANCELLED, BookingStatus.ATTENDED, BookingStatus.NO_SHOW])
def test_booked_can_move_to_any_final_status(target):
    assert can_transition_booking(BookingStatus.BOOKED, target)


@pytest.mark.parametrize("current", [BookingStatus.CANCELLED, BookingStatus.ATTENDED, BookingStatus.NO_SHOW])
def test_final_booking_statuses_are_terminal(current):
    assert not any(can_transition_booking(current, target) for target in BookingStatus)


def test_medical_review_only_exists_on_parq():
    pending = OnboardingStepStatus.PENDING_MEDICAL_REVIEW
    assert can_transition_stage(OnboardingStage.PARQ, OnboardingStepStatus.NOT_STARTED, pending)
    assert not can_transition_stage(OnboardingStage.POSTURE, OnboardingStepStatus.IN_PROGRESS, pending)


def test_pending_review_only_leads_to_completed():
    pending = OnboardingStepStatus.PENDING_MEDICAL_REVIEW
    assert can_transition_stage(OnboardingStage.PARQ, pending, OnboardingStepStatus.COMPLETED)
    assert not can_transition_stage(OnboardingStage.PARQ, pending, OnboardingStepStatus.IN_PROGRESS)


def test_completed_stage_is_terminal():
    for target in OnboardingStepStatus:
        assert not can_transition_stage(OnboardingStage.SAFETY_VIDEO, OnboardingStepStatus.COMPLETED, target)
