from datetime import datetime, timedelta, timezone

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from database import models
from database.database import Base
from generation.usage_tracker import (
    can_generate_quiz, get_today_usage, get_usage_status, increment_usage,
)

USER = "user-usage-1"
NOON = datetime(2026, 3, 14, 12, 0, tzinfo=timezone.utc)


def _set_tier(db, tier, expires_at=None):
    db.add(models.UserSubscription(user_id=USER, tier=tier, status="active", expires_at=expires_at))
    db.commit()


def test_new_user_is_free_with_full_quota(db_session):
    status = get_usage_status(db_session, USER, now=NOON)

    assert status.tier == "free"
    assert status.quizzes_today == 0
    assert status.daily_limit == 5
    assert status.remaining == 5
    assert status.can_generate is True
    assert status.to_wire() == {
        "tier": "free",
        "quizzesToday": 0,
        "dailyLimit": 5,
        "remaining": 5,
        "canGenerate": True,
        "isUnlimited": False,
    }


def test_increment_returns_running_count(db_session):
    assert increment_usage(db_session, USER, now=NOON) == 1
    assert increment_usage(db_session, USER, now=NOON) == 2
    assert get_today_usage(db_session, USER, now=NOON) == 2
    assert db_session.query(models.DailyUsage).count() == 1


def test_counter_resets_on_next_utc_day(db_session):
    increment_usage(db_session, USER, now=NOON)

    assert get_today_usage(db_session, USER, now=NOON + timedelta(days=1)) == 0


def test_free_tier_blocked_after_five(db_session):
    for _ in range(5):
        increment_usage(db_session, USER, now=NOON)

    decision = can_generate_quiz(db_session, USER, now=NOON)

    assert decision.allowed is False
    assert decision.reason == "Daily limit reached (5 quizzes). Upgrade to Pro for unlimited access."
    assert decision.status.remaining == 0


def test_pro_tier_is_unlimited(db_session):
    _set_tier(db_session, "pro")
    for _ in range(12):
        increment_usage(db_session, USER, now=NOON)

    decision = can_generate_quiz(db_session, USER, now=NOON)

    assert decision.allowed is True
    assert decision.status.is_unlimited is True
    assert decision.status.daily_limit == -1
    assert decision.status.remaining == -1
    assert decision.status.quizzes_today == 12


def test_enterprise_tier_is_unlimited(db_session):
    _set_tier(db_session, "enterprise")

    assert get_usage_status(db_session, USER, now=NOON).is_unlimited is True


def test_expired_pro_falls_back_to_free_limit(db_session):
    _set_tier(db_session, "pro", expires_at=NOON - timedelta(days=1))
    for _ in range(5):
        increment_usage(db_session, USER, now=NOON)

    decision = can_generate_quiz(db_session, USER, now=NOON)

    assert decision.status.tier == "free"
    assert decision.allowed is False


def test_overlapping_sessions_do_not_lose_increments(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'usage.db'}")
    Base.metadata.create_all(bind=engine)
    Session = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    first, second = Session(), Session()
    try:
        increment_usage(first, USER, now=NOON)

        # Both requests have already loaded today's row (count 1)
        assert get_today_usage(first, USER, now=NOON) == 1
        assert get_today_usage(second, USER, now=NOON) == 1

        assert increment_usage(first, USER, now=NOON) == 2
        assert increment_usage(second, USER, now=NOON) == 3

        fresh = Session()
        assert get_today_usage(fresh, USER, now=NOON) == 3
        assert fresh.query(models.DailyUsage).count() == 1
        fresh.close()
    finally:
        first.close()
        second.close()
        engine.dispose()
