"""
SQLAlchemy models for quota tracking and quiz history

user_subscriptions → tier per user
daily_usage        → one counter row per user per UTC day
quiz_results       → one row per completed quiz
user_stats         → aggregates maintained on every saved result
user_profiles      → name, avatar, locale and notification preferences

user_id is the Supabase auth user UUID, stored as text.
"""

from sqlalchemy import Column, Integer, String, Boolean, Date, DateTime, Float, JSON, UniqueConstraint
from sqlalchemy.sql import func
import enum
from database.database import Base


class UserTier(str, enum.Enum):
    FREE = "free"
    PRO = "pro"
    ENTERPRISE = "enterprise"


class SubscriptionStatus(str, enum.Enum):
    ACTIVE = "active"
    EXPIRED = "expired"
    CANCELLED = "cancelled"


# ==========================================
# SUBSCRIPTIONS
# ==========================================

class UserSubscription(Base):
    """
    Subscription tier for a user.
    New users get a free/active row on first lookup; an expired pro row is
    downgraded to free/expired on read.
    """
    __tablename__ = "user_subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), unique=True, nullable=False, index=True)
    tier = Column(String(20), nullable=False, default=UserTier.FREE.value)
    status = Column(String(20), nullable=False, default=SubscriptionStatus.ACTIVE.value)
    started_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    expires_at = Column(DateTime(timezone=True), nullable=True)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<UserSubscription(user_id='{self.user_id}', tier='{self.tier}', status='{self.status}')>"


# ==========================================
# PROFILES
# ==========================================

class UserProfile(Base):
    """
    Account profile for a Supabase user.
    Seeded from the access token claims (email, user_metadata, provider)
    the first time the profile is read.
    """
    __tablename__ = "user_profiles"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), unique=True, nullable=False, index=True)
    email = Column(String(320), nullable=True)
    full_name = Column(String(200), nullable=True)
    avatar_url = Column(String(1000), nullable=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    signup_source = Column(String(50), nullable=True)

    country = Column(String(100), nullable=True)
    country_code = Column(String(2), nullable=True)
    timezone = Column(String(64), nullable=True)
    language = Column(String(10), nullable=False, default="en")
    phone = Column(String(32), nullable=True)

    email_notifications = Column(Boolean, nullable=False, default=True)
    marketing_emails = Column(Boolean, nullable=False, default=False)
    product_updates = Column(Boolean, nullable=False, default=True)
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    # "metadata" is reserved on declarative classes
    profile_metadata = Column("metadata", JSON, nullable=False, default=dict)

    last_active_at = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<UserProfile(user_id='{self.user_id}', email='{self.email}')>"


# ==========================================
# USAGE
# ==========================================

class DailyUsage(Base):
    """Quizzes generated by a user on one UTC calendar day."""
    __tablename__ = "daily_usage"
    __table_args__ = (
        UniqueConstraint("user_id", "usage_date", name="uq_daily_usage_user_date"),
    )

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    usage_date = Column(Date, nullable=False)
    quiz_count = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<DailyUsage(user_id='{self.user_id}', date={self.usage_date}, count={self.quiz_count})>"


# ==========================================
# RESULTS & STATS
# ==========================================

class QuizResult(Base):
    __tablename__ = "quiz_results"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(64), nullable=False, index=True)
    topic = Column(String(500), nullable=False)
    difficulty = Column(String(10), nullable=False)
    total_questions = Column(Integer, nullable=False)
    correct_answers = Column(Integer, nullable=False)
    score_percentage = Column(Float, nullable=False)
    time_taken_seconds = Column(Integer, nullable=True)
    completed_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<QuizResult(id={self.id}, user_id='{self.user_id}', score={self.score_percentage})>"


class UserStats(Base):
    """Per-user aggregates, updated in the same transaction as each QuizResult insert."""
    __tablename__ = "user_stats"

    user_id = Column(String(64), primary_key=True)
    total_quizzes = Column(Integer, nullable=False, default=0)
    total_questions_answered = Column(Integer, nullable=False, default=0)
    total_correct_answers = Column(Integer, nullable=False, default=0)
    average_score = Column(Float, nullable=False, default=0.0)
    best_score = Column(Float, nullable=False, default=0.0)
    worst_score = Column(Float, nullable=False, default=0.0)
    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_quiz_date = Column(Date, nullable=True)
    favorite_topic = Column(String(500), nullable=True)
    favorite_difficulty = Column(String(10), nullable=True)
    total_time_spent_seconds = Column(Integer, nullable=False, default=0)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
