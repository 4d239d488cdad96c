"""
Pydantic schemas for the quiz generation pipeline.

Wire format is camelCase (what the frontend and the LLM prompt use);
Python attributes are snake_case with aliases.
"""

from typing import Any, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

Difficulty = Literal["Easy", "Medium", "Hard", "Mix"]
DIFFICULTIES = ("Easy", "Medium", "Hard", "Mix")


class CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


# ─── Request / response ────────────────────────────────────────────────────────

class GenerateQuizRequest(CamelModel):
    """Body of POST /api/generate. Validated by hand in the route to keep 400 codes."""
    prompt: Optional[str] = Field(None, description="Topic name (any topic in the world)")
    difficulty: Optional[str] = Field(None, description="Easy | Medium | Hard | Mix")
    # Raw JSON value; parsed by the route like an integer prefix of its text
    number_of_questions: Any = Field(None, alias="numberOfQuestions")


class GenerateQuizResponse(BaseModel):
    success: bool = True
    response: str  # quiz JSON string, kept as text for frontend compatibility
    usage: Optional[dict] = None


# ─── Phase 1: syllabus ─────────────────────────────────────────────────────────

class SyllabusResult(CamelModel):
    topic: str
    identified_as: str = Field("academic subject", alias="identifiedAs")
    subjects: List[str]


# ─── Phase 2: quiz ─────────────────────────────────────────────────────────────

class QuizParams(BaseModel):
    topic: str
    difficulty: Difficulty
    number_of_questions: int = Field(..., ge=1, le=20)
    subjects: List[str]
    identified_as: str


class QuizOptions(BaseModel):
    A: str
    B: str
    C: str
    D: str


class QuizQuestion(CamelModel):
    question_number: int = Field(..., alias="questionNumber")
    question: str
    options: QuizOptions
    correct_answer: Literal["A", "B", "C", "D"] = Field(..., alias="correctAnswer")
    explanation: Optional[str] = None


class QuizOutput(CamelModel):
    topic: str
    difficulty: str
    total_questions: int = Field(..., alias="totalQuestions")
    questions: List[QuizQuestion]

    def to_response_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2, exclude_none=True)
