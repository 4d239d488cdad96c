"""
User router.
Subscription tier, daily usage, quiz history, profile record and stats
for the signed-in user. Path user ids must match the token subject.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from auth.security import get_current_claims, get_current_user_id, require_same_user
from database import crud
from database.database import get_db
from database.schemas import (
    ProfileResponse, QuizResultCreate, QuizResultResponse, SubscriptionResponse,
    UserProfileResponse, UserProfileUpdate, UserStatsResponse,
)
from generation.usage_tracker import get_usage_status

router = APIRouter(prefix="/api", tags=["users"])

log = logging.getLogger(__name__)

RECENT_QUIZZES_LIMIT = 5


def _stats_response(stats) -> UserStatsResponse:
    response = UserStatsResponse.model_validate(stats)
    response.total_time_spent_display = crud.format_time(response.total_time_spent_seconds)
    return response


# ─── Subscription & usage ──────────────────────────────────────────────────────

@router.get("/user/subscription/{user_id}")
def get_subscription(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    require_same_user(user_id, current_user_id)
    subscription = crud.get_subscription(db, user_id)
    return {
        "success": True,
        "subscription": SubscriptionResponse.model_validate(subscription).model_dump(mode="json"),
    }


@router.get("/user/usage/{user_id}")
def get_usage(
    user_id: str,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    require_same_user(user_id, current_user_id)
    return {"success": True, "usage": get_usage_status(db, user_id).to_wire()}


# ─── Quiz results & profile ────────────────────────────────────────────────────

@router.post("/quiz-results", response_model=QuizResultResponse, status_code=status.HTTP_201_CREATED)
def save_quiz_result(
    result: QuizResultCreate,
    current_user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """Record a completed quiz and update the user's stats and streak."""
    try:
        saved = crud.save_quiz_result(db, current_user_id, result)
    except Exception as e:
        log.error(f"Error saving quiz result for {current_user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to save quiz result")
    return saved


@router.get("/user/profile/{user_id}", response_model=ProfileResponse)
def get_profile(
    user_id: str,
    claims: dict = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """
    Profile record, aggregate stats and the five most recent quizzes.
    The profile is created from the token on first read; last_active_at is refreshed.
    """
    require_same_user(user_id, get_current_user_id(claims))
    profile = crud.get_user_profile(db, user_id, claims=claims)
    crud.update_last_active(db, user_id)
    db.refresh(profile)

    stats = crud.get_user_stats(db, user_id)
    recent = crud.get_recent_quizzes(db, user_id, limit=RECENT_QUIZZES_LIMIT)
    return ProfileResponse(
        success=True,
        profile=UserProfileResponse.model_validate(profile),
        stats=_stats_response(stats),
        recent_quizzes=[QuizResultResponse.model_validate(r) for r in recent],
    )


@router.patch("/user/profile/{user_id}")
def update_profile(
    user_id: str,
    updates: UserProfileUpdate,
    claims: dict = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    """Change name, avatar, locale, contact or notification preferences."""
    require_same_user(user_id, get_current_user_id(claims))
    crud.get_user_profile(db, user_id, claims=claims)
    profile = crud.update_user_profile(db, user_id, updates)
    return {
        "success": True,
        "profile": UserProfileResponse.model_validate(profile).model_dump(mode="json"),
    }


@router.post("/user/profile/{user_id}/onboarding")
def complete_onboarding(
    user_id: str,
    claims: dict = Depends(get_current_claims),
    db: Session = Depends(get_db),
):
    require_same_user(user_id, get_current_user_id(claims))
    crud.get_user_profile(db, user_id, claims=claims)
    profile = crud.complete_onboarding(db, user_id)
    return {
        "success": True,
        "profile": UserProfileResponse.model_validate(profile).model_dump(mode="json"),
    }
