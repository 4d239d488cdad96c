"""
Usage / Tier Gate

Per-user daily quiz counter checked before generation and incremented
only after a quiz has been generated and validated.
Days are UTC calendar days.
"""

import logging
from datetime import date, datetime, timezone
from typing import Dict, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from database import crud
from database.models import DailyUsage
from database.schemas import GateDecision, UsageStatus

log = logging.getLogger("generation.pipeline")

# None = unlimited
TIER_LIMITS: Dict[str, Optional[int]] = {
    "free": 5,
    "pro": None,
    "enterprise": None,
}


def _today(now: Optional[datetime] = None) -> date:
    return (now or datetime.now(timezone.utc)).date()


def _usage_row(db: Session, user_id: str, usage_date: date) -> Optional[DailyUsage]:
    return (
        db.query(DailyUsage)
        .filter(DailyUsage.user_id == user_id, DailyUsage.usage_date == usage_date)
        .first()
    )


def get_today_usage(db: Session, user_id: str, now: Optional[datetime] = None) -> int:
    """Quizzes generated today; 0 if the user has no row for today."""
    row = _usage_row(db, user_id, _today(now))
    return row.quiz_count if row else 0


def increment_usage(db: Session, user_id: str, now: Optional[datetime] = None) -> int:
    """
    Increment today's counter for a user.

    Returns:
        The new count
    """
    usage_date = _today(now)

    if not _bump_usage(db, user_id, usage_date):
        db.add(DailyUsage(user_id=user_id, usage_date=usage_date, quiz_count=1))
        try:
            db.commit()
        except IntegrityError:
            # Another request created today's row between our read and insert
            db.rollback()
            _bump_usage(db, user_id, usage_date)

    return get_today_usage(db, user_id, now=now)


def _bump_usage(db: Session, user_id: str, usage_date: date) -> bool:
    """
    quiz_count = quiz_count + 1 in SQL, so overlapping requests never
    overwrite each other's increment. False when today's row does not exist yet.
    """
    updated = (
        db.query(DailyUsage)
        .filter(DailyUsage.user_id == user_id, DailyUsage.usage_date == usage_date)
        .update({DailyUsage.quiz_count: DailyUsage.quiz_count + 1}, synchronize_session=False)
    )
    if not updated:
        return False
    db.commit()
    return True


def get_usage_status(db: Session, user_id: str, now: Optional[datetime] = None) -> UsageStatus:
    """Tier, today's count and remaining quota for a user."""
    tier = crud.get_subscription(db, user_id, now=now).tier
    quizzes_today = get_today_usage(db, user_id, now=now)

    limit = TIER_LIMITS.get(tier, TIER_LIMITS["free"])
    if limit is None:
        return UsageStatus(
            tier=tier,
            quizzes_today=quizzes_today,
            daily_limit=-1,
            remaining=-1,
            can_generate=True,
            is_unlimited=True,
        )

    remaining = max(0, limit - quizzes_today)
    return UsageStatus(
        tier=tier,
        quizzes_today=quizzes_today,
        daily_limit=limit,
        remaining=remaining,
        can_generate=remaining > 0,
        is_unlimited=False,
    )


def can_generate_quiz(db: Session, user_id: str, now: Optional[datetime] = None) -> GateDecision:
    status = get_usage_status(db, user_id, now=now)
    if status.can_generate:
        return GateDecision(allowed=True, status=status)

    return GateDecision(
        allowed=False,
        reason=f"Daily limit reached ({status.daily_limit} quizzes). Upgrade to Pro for unlimited access.",
        status=status,
    )
