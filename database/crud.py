"""
CRUD operations for subscriptions, quiz results and user stats
All database operations go through these functions
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import models, schemas

log = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=timezone.utc) if value.tzinfo is None else value


# ==========================================
# SUBSCRIPTION CRUD
# ==========================================

def _find_subscription(db: Session, user_id: str) -> Optional[models.UserSubscription]:
    return db.query(models.UserSubscription).filter(models.UserSubscription.user_id == user_id).first()


def get_subscription(db: Session, user_id: str, now: Optional[datetime] = None) -> models.UserSubscription:
    """
    Get or create the subscription for a user.
    New users get the free tier; expired pro subscriptions are downgraded.
    """
    now = now or _utc_now()
    subscription = _find_subscription(db, user_id)

    if subscription is not None:
        if (
            subscription.tier == models.UserTier.PRO.value
            and subscription.expires_at is not None
            and _as_utc(subscription.expires_at) < now
        ):
            log.info(f"Pro subscription for {user_id} expired, downgrading to free")
            subscription.tier = models.UserTier.FREE.value
            subscription.status = models.SubscriptionStatus.EXPIRED.value
            db.commit()
            db.refresh(subscription)
        return subscription

    subscription = models.UserSubscription(
        user_id=user_id,
        tier=models.UserTier.FREE.value,
        status=models.SubscriptionStatus.ACTIVE.value,
    )
    db.add(subscription)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent first request for the same user already inserted the row
        db.rollback()
        existing = _find_subscription(db, user_id)
        if existing is not None:
            return existing
        log.error(f"Error creating subscription for {user_id}")
        return models.UserSubscription(
            user_id=user_id,
            tier=models.UserTier.FREE.value,
            status=models.SubscriptionStatus.ACTIVE.value,
            started_at=now,
        )
    db.refresh(subscription)
    return subscription


def get_user_tier(db: Session, user_id: str) -> str:
    """Get user's current tier"""
    return get_subscription(db, user_id).tier


# ==========================================
# PROFILE CRUD
# ==========================================

def _find_profile(db: Session, user_id: str) -> Optional[models.UserProfile]:
    return db.query(models.UserProfile).filter(models.UserProfile.user_id == user_id).first()


def get_user_profile(
    db: Session,
    user_id: str,
    claims: Optional[dict] = None,
) -> Optional[models.UserProfile]:
    """
    Get a user's profile, creating it from the token claims if missing.
    Returns None when there is no profile and no claims to build one from.
    """
    profile = _find_profile(db, user_id)
    if profile is not None or claims is None:
        return profile
    return create_profile_from_claims(db, user_id, claims)


def create_profile_from_claims(db: Session, user_id: str, claims: dict) -> models.UserProfile:
    """
    Build a profile from a Supabase access token.
    Name falls back to full_name, name, then the email local part;
    signup_source is the auth provider ("email", "google", ...).
    """
    email = claims.get("email") or None
    user_metadata = claims.get("user_metadata") or {}
    app_metadata = claims.get("app_metadata") or {}

    full_name = user_metadata.get("full_name") or user_metadata.get("name")
    if not full_name and email:
        full_name = email.split("@")[0]

    profile = models.UserProfile(
        user_id=user_id,
        email=email,
        full_name=full_name,
        avatar_url=user_metadata.get("avatar_url") or user_metadata.get("picture"),
        is_email_verified=bool(user_metadata.get("email_verified")),
        signup_source=str(app_metadata.get("provider") or "email").lower(),
        language="en",
        email_notifications=True,
        marketing_emails=False,
        product_updates=True,
        onboarding_completed=False,
        profile_metadata={},
    )
    db.add(profile)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = _find_profile(db, user_id)
        if existing is None:
            raise
        return existing
    db.refresh(profile)
    log.info(f"Created profile for {user_id} (source={profile.signup_source})")
    return profile


def update_user_profile(
    db: Session,
    user_id: str,
    updates: schemas.UserProfileUpdate,
) -> Optional[models.UserProfile]:
    """Apply the fields that were sent. Returns None if the user has no profile."""
    profile = _find_profile(db, user_id)
    if profile is None:
        return None

    for field, value in updates.model_dump(exclude_unset=True, exclude_none=True).items():
        setattr(profile, "profile_metadata" if field == "metadata" else field, value)
    profile.updated_at = _utc_now()
    db.commit()
    db.refresh(profile)
    return profile


def update_last_active(db: Session, user_id: str, now: Optional[datetime] = None) -> None:
    now = now or _utc_now()
    (
        db.query(models.UserProfile)
        .filter(models.UserProfile.user_id == user_id)
        .update(
            {models.UserProfile.last_active_at: now, models.UserProfile.updated_at: now},
            synchronize_session=False,
        )
    )
    db.commit()


def complete_onboarding(db: Session, user_id: str) -> Optional[models.UserProfile]:
    return update_user_profile(db, user_id, schemas.UserProfileUpdate(onboarding_completed=True))


# ==========================================
# QUIZ RESULT CRUD
# ==========================================

def calculate_score_percentage(correct: int, total: int) -> float:
    if total == 0:
        return 0.0
    return round(correct / total * 100, 2)


def save_quiz_result(
    db: Session,
    user_id: str,
    result: schemas.QuizResultCreate,
    now: Optional[datetime] = None,
) -> models.QuizResult:
    """Store a quiz result and fold it into the user's aggregate stats."""
    now = now or _utc_now()
    db_result = models.QuizResult(
        user_id=user_id,
        topic=result.topic,
        difficulty=result.difficulty,
        total_questions=result.total_questions,
        correct_answers=result.correct_answers,
        score_percentage=calculate_score_percentage(result.correct_answers, result.total_questions),
        time_taken_seconds=result.time_taken_seconds,
        completed_at=now,
    )
    try:
        db.add(db_result)
        db.flush()
        _update_stats(db, db_result, now)
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(db_result)
    return db_result


def get_recent_quizzes(db: Session, user_id: str, limit: int = 5) -> List[models.QuizResult]:
    """Get recent quiz results for a user, newest first"""
    return (
        db.query(models.QuizResult)
        .filter(models.QuizResult.user_id == user_id)
        .order_by(models.QuizResult.completed_at.desc(), models.QuizResult.id.desc())
        .limit(limit)
        .all()
    )


# ==========================================
# USER STATS
# ==========================================

def get_user_stats(db: Session, user_id: str) -> models.UserStats:
    """Get user stats. Returns an unsaved all-zero row if the user has none."""
    stats = db.query(models.UserStats).filter(models.UserStats.user_id == user_id).first()
    if stats is not None:
        return stats
    return models.UserStats(
        user_id=user_id,
        total_quizzes=0,
        total_questions_answered=0,
        total_correct_answers=0,
        average_score=0.0,
        best_score=0.0,
        worst_score=0.0,
        current_streak=0,
        longest_streak=0,
        last_quiz_date=None,
        favorite_topic=None,
        favorite_difficulty=None,
        total_time_spent_seconds=0,
    )


def _most_frequent(db: Session, user_id: str, column) -> Optional[str]:
    row = (
        db.query(column, func.count(models.QuizResult.id).label("n"))
        .filter(models.QuizResult.user_id == user_id)
        .group_by(column)
        .order_by(func.count(models.QuizResult.id).desc(), func.max(models.QuizResult.completed_at).desc())
        .first()
    )
    return row[0] if row else None


def _update_stats(db: Session, result: models.QuizResult, now: datetime) -> models.UserStats:
    stats = db.query(models.UserStats).filter(models.UserStats.user_id == result.user_id).first()
    if stats is None:
        stats = models.UserStats(
            user_id=result.user_id,
            total_quizzes=0,
            total_questions_answered=0,
            total_correct_answers=0,
            average_score=0.0,
            best_score=result.score_percentage,
            worst_score=result.score_percentage,
            current_streak=0,
            longest_streak=0,
            total_time_spent_seconds=0,
        )
        db.add(stats)

    previous_total = stats.total_quizzes
    stats.total_quizzes = previous_total + 1
    stats.total_questions_answered += result.total_questions
    stats.total_correct_answers += result.correct_answers
    stats.average_score = round(
        (stats.average_score * previous_total + result.score_percentage) / stats.total_quizzes, 2
    )
    stats.best_score = max(stats.best_score, result.score_percentage)
    stats.worst_score = min(stats.worst_score, result.score_percentage)
    stats.total_time_spent_seconds += result.time_taken_seconds or 0

    # Day streak
    today = now.date()
    if stats.last_quiz_date == today:
        pass
    elif stats.last_quiz_date == today - timedelta(days=1):
        stats.current_streak += 1
    else:
        stats.current_streak = 1
    stats.longest_streak = max(stats.longest_streak, stats.current_streak)
    stats.last_quiz_date = today

    stats.favorite_topic = _most_frequent(db, result.user_id, models.QuizResult.topic)
    stats.favorite_difficulty = _most_frequent(db, result.user_id, models.QuizResult.difficulty)
    return stats


# ==========================================
# HELPERS
# ==========================================

def format_time(seconds: int) -> str:
    """Format seconds as '45s', '12m' or '2h 5m'."""
    if seconds < 60:
        return f"{seconds}s"
    if seconds < 3600:
        return f"{seconds // 60}m"
    hours = seconds // 3600
    mins = (seconds % 3600) // 60
    return f"{hours}h {mins}m"
