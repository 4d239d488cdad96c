"""
Pydantic schemas for request/response validation
Separate from SQLAlchemy models for clean API contracts
"""

from pydantic import AliasChoices, BaseModel, Field, ConfigDict, model_validator
from typing import Any, Dict, Optional, List, Literal
from datetime import date, datetime


# ==========================================
# SUBSCRIPTION SCHEMAS
# ==========================================

class SubscriptionResponse(BaseModel):
    """Schema for a user's subscription row"""
    user_id: str
    tier: Literal["free", "pro", "enterprise"]
    status: Literal["active", "expired", "cancelled"]
    started_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================================
# USAGE SCHEMAS
# ==========================================

class UsageStatus(BaseModel):
    """Daily quota snapshot. -1 in daily_limit / remaining means unlimited."""
    tier: str
    quizzes_today: int = Field(..., alias="quizzesToday")
    daily_limit: int = Field(..., alias="dailyLimit")
    remaining: int
    can_generate: bool = Field(..., alias="canGenerate")
    is_unlimited: bool = Field(..., alias="isUnlimited")

    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True)


class GateDecision(BaseModel):
    allowed: bool
    reason: Optional[str] = None
    status: UsageStatus


# ==========================================
# QUIZ RESULT SCHEMAS
# ==========================================

class QuizResultCreate(BaseModel):
    """Schema for recording a completed quiz"""
    topic: str = Field(..., min_length=1, max_length=500)
    difficulty: Literal["Easy", "Medium", "Hard", "Mix"]
    total_questions: int = Field(..., ge=0, alias="totalQuestions")
    correct_answers: int = Field(..., ge=0, alias="correctAnswers")
    time_taken_seconds: Optional[int] = Field(None, ge=0, alias="timeTakenSeconds")

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def _correct_within_total(self):
        if self.correct_answers > self.total_questions:
            raise ValueError("correctAnswers cannot exceed totalQuestions")
        return self


class QuizResultResponse(BaseModel):
    """Schema for a stored quiz result (recent quizzes list)"""
    id: int
    topic: str
    difficulty: str
    score_percentage: float
    total_questions: int
    correct_answers: int
    time_taken_seconds: Optional[int] = None
    completed_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


# ==========================================
# STATS SCHEMAS
# ==========================================

class UserStatsResponse(BaseModel):
    user_id: str
    total_quizzes: int = 0
    total_questions_answered: int = 0
    total_correct_answers: int = 0
    average_score: float = 0.0
    best_score: float = 0.0
    worst_score: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    last_quiz_date: Optional[date] = None
    favorite_topic: Optional[str] = None
    favorite_difficulty: Optional[str] = None
    total_time_spent_seconds: int = 0
    total_time_spent_display: str = "0s"

    model_config = ConfigDict(from_attributes=True)


# ==========================================
# PROFILE SCHEMAS
# ==========================================

class UserProfileResponse(BaseModel):
    """Schema for a user_profiles row"""
    user_id: str
    email: Optional[str] = None
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    is_email_verified: bool = False
    signup_source: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    timezone: Optional[str] = None
    language: str = "en"
    phone: Optional[str] = None
    email_notifications: bool = True
    marketing_emails: bool = False
    product_updates: bool = True
    onboarding_completed: bool = False
    metadata: Dict[str, Any] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("profile_metadata", "metadata"),
    )
    last_active_at: Optional[datetime] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class UserProfileUpdate(BaseModel):
    """Editable profile fields. Only the fields sent are changed."""
    full_name: Optional[str] = Field(None, max_length=200)
    avatar_url: Optional[str] = Field(None, max_length=1000)
    country: Optional[str] = Field(None, max_length=100)
    country_code: Optional[str] = Field(None, min_length=2, max_length=2)
    timezone: Optional[str] = Field(None, max_length=64)
    language: Optional[str] = Field(None, min_length=2, max_length=10)
    phone: Optional[str] = Field(None, max_length=32)
    email_notifications: Optional[bool] = None
    marketing_emails: Optional[bool] = None
    product_updates: Optional[bool] = None
    onboarding_completed: Optional[bool] = None
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="forbid")


class ProfileResponse(BaseModel):
    success: bool = True
    profile: Optional[UserProfileResponse] = None
    stats: UserStatsResponse
    recent_quizzes: List[QuizResultResponse] = Field(default_factory=list, alias="recentQuizzes")

    model_config = ConfigDict(populate_by_name=True)
