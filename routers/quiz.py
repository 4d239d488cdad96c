"""
Quiz Router — /api

Orchestrates the quiz pipeline for one request.
Endpoints:
  POST /api/generate — usage gate → syllabus inference → generation + validation (≤ 2 attempts)
"""

import logging
import re
from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from auth.security import get_current_user_id
from database.database import get_db
from generation import llm_client
from generation.quiz_generator import generate_quiz
from generation.schemas import (
    DIFFICULTIES, GenerateQuizRequest, GenerateQuizResponse, QuizOutput, QuizParams,
)
from generation.syllabus_inference import infer_syllabus
from generation.usage_tracker import can_generate_quiz, get_usage_status, increment_usage
from generation.validator import find_forbidden_questions

router = APIRouter(prefix="/api", tags=["quiz"])

# Use Python's standard logger so output appears in the uvicorn console
log = logging.getLogger("generation.pipeline")
logging.basicConfig(level=logging.INFO, format="%(asctime)s  %(levelname)s  %(message)s")

MAX_GENERATION_ATTEMPTS = 2
DEFAULT_QUESTION_COUNT = 10
MIN_QUESTIONS, MAX_QUESTIONS = 1, 20

_INT_PREFIX = re.compile(r"\s*([+-]?\d+)")


def parse_question_count(value: Any) -> Optional[int]:
    """
    Integer prefix of the value's text ("12", 12, 5.5, " 7 questions").
    Falsy values (missing, 0, "", false) mean the default count;
    None is returned when nothing parses, including `true`.
    """
    if not value:
        return DEFAULT_QUESTION_COUNT
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    match = _INT_PREFIX.match(str(value))
    return int(match.group(1)) if match else None


def _error(status_code: int, error: str, message: Optional[str] = None) -> HTTPException:
    detail = {"error": error}
    if message is not None:
        detail["message"] = message
    return HTTPException(status_code=status_code, detail=detail)


# ─── Generate ──────────────────────────────────────────────────────────────────

@router.post("/generate", response_model=GenerateQuizResponse)
async def generate(
    request: GenerateQuizRequest,
    user_id: str = Depends(get_current_user_id),
    db: Session = Depends(get_db),
):
    """
    **Generate a validated multiple-choice quiz for any topic.**

    Body: `{"prompt": "UPSC", "difficulty": "Easy|Medium|Hard|Mix", "numberOfQuestions": 1-20}`

    The quiz comes back as a JSON string in `response`.
    The user's daily counter is only incremented when a valid quiz is returned.
    """
    prompt = (request.prompt or "").strip()
    if not prompt or not request.difficulty:
        raise _error(400, "Prompt and difficulty are required")

    if request.difficulty not in DIFFICULTIES:
        raise _error(400, f"difficulty must be one of {', '.join(DIFFICULTIES)}")

    num_questions = parse_question_count(request.number_of_questions)
    if num_questions is None or not MIN_QUESTIONS <= num_questions <= MAX_QUESTIONS:
        raise _error(400, f"numberOfQuestions must be a number between {MIN_QUESTIONS} and {MAX_QUESTIONS}")

    if not llm_client.is_configured():
        log.error("OPEN_ROUTER_API_KEY not found in environment variables")
        raise _error(500, "OpenRouter API key is not configured")

    # ── Usage gate ─────────────────────────────────────────────────────────────
    decision = can_generate_quiz(db, user_id)
    if not decision.allowed:
        log.info(f"[GATE] user={user_id} blocked: {decision.reason}")
        raise HTTPException(
            status_code=429,
            detail={
                "error": "Daily limit reached",
                "message": decision.reason,
                "usage": decision.status.to_wire(),
            },
        )

    try:
        # ── Phase 1: syllabus inference ───────────────────────────────────────
        log.info(f"Phase 1: Inferring syllabus for '{prompt}'...")
        try:
            syllabus = await infer_syllabus(prompt)
        except Exception as e:
            log.error(f"Syllabus inference failed: {e}")
            raise _error(400, "Failed to infer syllabus for this topic", str(e))
        log.info(
            f"Syllabus inferred: identifiedAs={syllabus.identified_as}, "
            f"subjects={len(syllabus.subjects)} {syllabus.subjects}"
        )

        # ── Phase 2: generation with validation and retry ─────────────────────
        log.info(f"Phase 2: Generating {num_questions} questions at {request.difficulty} difficulty...")
        params = QuizParams(
            topic=prompt,
            difficulty=request.difficulty,
            number_of_questions=num_questions,
            subjects=syllabus.subjects,
            identified_as=syllabus.identified_as,
        )

        quiz: Optional[QuizOutput] = None
        for attempt in range(1, MAX_GENERATION_ATTEMPTS + 1):
            try:
                candidate = await generate_quiz(params)
            except Exception as e:
                log.error(f"Quiz generation failed on attempt {attempt}: {e}")
                if attempt >= MAX_GENERATION_ATTEMPTS:
                    raise _error(500, "Failed to generate quiz", str(e))
                continue

            rejected = find_forbidden_questions(candidate)
            if not rejected:
                log.info(f"Valid quiz generated on attempt {attempt}")
                quiz = candidate
                break

            log.warning(f"Invalid quiz on attempt {attempt} (forbidden content in questions {rejected}), regenerating...")
            if attempt >= MAX_GENERATION_ATTEMPTS:
                log.error(f"Failed to generate valid quiz after {MAX_GENERATION_ATTEMPTS} attempts")
                raise _error(
                    500,
                    "Failed to generate valid questions",
                    "Generated questions contained forbidden content. Please try again.",
                )

        # ── Count the quiz against today's quota ──────────────────────────────
        new_count = increment_usage(db, user_id)
        log.info(f"[USAGE] user={user_id} quizzes today={new_count}")

        return GenerateQuizResponse(
            success=True,
            response=quiz.to_response_json(),
            usage=get_usage_status(db, user_id).to_wire(),
        )
    except HTTPException:
        raise
    except Exception as e:
        log.exception(f"Error in quiz pipeline: {e}")
        raise _error(500, "Internal server error", str(e))
