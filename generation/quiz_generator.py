"""
Phase 2 — Quiz Generation

Generates MCQs strictly from the subjects found in Phase 1.
Difficulty only changes question complexity, never the subject scope.

Output: QuizOutput with exactly the requested number of questions.
"""

import logging
from typing import Dict, List

from pydantic import ValidationError

from generation.json_utils import parse_json_object, remove_control_chars, strip_code_fences
from generation.llm_client import QUIZ_MODEL, call_llm
from generation.schemas import QuizOutput, QuizParams

log = logging.getLogger("generation.pipeline")

MAX_EXPLANATION_LINES = 4
MAX_EXPLANATION_CHARS = 300


class QuizGenerationError(ValueError):
    pass


DIFFICULTY_DESCRIPTIONS: Dict[str, str] = {
    "Easy": "basic/fundamental questions (simple concepts, straightforward problems)",
    "Medium": "standard exam-level questions (moderate complexity, typical difficulty)",
    "Hard": "advanced exam-level questions (complex multi-step problems, analytical thinking)",
    "Mix": "balanced combination of Easy, Medium, and Hard questions",
}


# ─── Prompt ───────────────────────────────────────────────────────────────────

QUIZ_PROMPT = """Generate exactly {n} Multiple Choice Questions (MCQ) for: "{topic}"

TOPIC TYPE: {identified_as}

SYLLABUS SUBJECTS (Generate questions ONLY from these subjects - DO NOT deviate):
{subjects_list}

DIFFICULTY: {difficulty}
{difficulty_description}

ABSOLUTE REQUIREMENTS:

1. SYLLABUS LOCK:
   - Generate questions STRICTLY from the subjects listed above
   - Do NOT add subjects not in the list
   - Do NOT generate questions about topics outside these subjects
   - For technical topics: Generate scenario-based, hands-on practical questions
   - For competitive exams: Generate questions that appear in actual written exam papers
   - For academic: Generate questions from the specified curriculum

2. QUESTION STYLE:
   - Scenario-based questions (real-world problems, practical applications)
   - Questions that test understanding and problem-solving
   - Questions requiring calculation, reasoning, or analysis
   - Questions that would appear in actual exam papers or textbooks

   ABSOLUTELY FORBIDDEN - NEVER generate:
   - Questions containing: eligibility, age limit, exam date, conducted by, training academy, application process, exam pattern, marking scheme, cut-off, motto
   - Full forms or "what does X stand for"
   - "Where is X located" or "What is the location of X"
   - Questions about the exam/institution itself
   - Definitions without problem-solving context

3. DIFFICULTY HANDLING:
   - Difficulty ONLY affects complexity: {difficulty_description}
   - ALL difficulty levels use the SAME subjects listed above
   - Easy = simpler versions of syllabus questions, NOT different topics
   - Medium = standard syllabus questions
   - Hard = advanced syllabus questions
   - Mix = combination of all difficulty levels from the same subjects

4. EXPLANATION REQUIREMENTS:
   - Keep explanations CONCISE and BRIEF
   - Maximum 4 lines per explanation
   - For math/technical questions: Provide only key steps or hints, not full derivations
   - Focus on: "Why this answer is correct" or "Key concept/approach"
   - DO NOT write lengthy step-by-step solutions

5. OUTPUT FORMAT (STRICT JSON, no markdown):
{{
  "topic": "{topic}",
  "difficulty": "{difficulty}",
  "totalQuestions": {n},
  "questions": [
    {{
      "questionNumber": 1,
      "question": "Scenario-based question text here",
      "options": {{
        "A": "Option A",
        "B": "Option B",
        "C": "Option C",
        "D": "Option D"
      }},
      "correctAnswer": "A",
      "explanation": "Brief 2-4 line explanation with key hint or approach only"
    }}
  ]
}}

Generate EXACTLY {n} questions from the subjects above.
"""


def build_quiz_prompt(params: QuizParams) -> str:
    subjects_list = "\n".join(f"{idx}. {sub}" for idx, sub in enumerate(params.subjects, start=1))
    return QUIZ_PROMPT.format(
        n=params.number_of_questions,
        topic=params.topic,
        identified_as=params.identified_as,
        subjects_list=subjects_list,
        difficulty=params.difficulty,
        difficulty_description=DIFFICULTY_DESCRIPTIONS[params.difficulty],
    )


# ─── Post-processing ──────────────────────────────────────────────────────────

def shorten_explanation(explanation: str) -> str:
    """Keep the first 4 non-blank lines on one line, capped at 300 chars."""
    lines: List[str] = [line for line in explanation.split("\n") if line.strip()]
    text = " ".join(lines[:MAX_EXPLANATION_LINES]).strip()
    if len(text) > MAX_EXPLANATION_CHARS:
        text = text[: MAX_EXPLANATION_CHARS - 3] + "..."
    return text


def _parse_quiz(raw: str, params: QuizParams) -> QuizOutput:
    data = parse_json_object(remove_control_chars(strip_code_fences(raw)))

    questions = data.get("questions")
    if not isinstance(questions, list) or len(questions) != params.number_of_questions:
        got = len(questions) if isinstance(questions, list) else 0
        raise ValueError(
            f"Invalid quiz: expected {params.number_of_questions} questions, got {got}"
        )

    data.setdefault("topic", params.topic)
    data.setdefault("difficulty", params.difficulty)
    data.setdefault("totalQuestions", params.number_of_questions)
    quiz = QuizOutput.model_validate(data)

    for q in quiz.questions:
        if q.explanation:
            q.explanation = shorten_explanation(q.explanation)
    return quiz


async def generate_quiz(params: QuizParams) -> QuizOutput:
    """
    Phase 2: generate the quiz for an inferred syllabus.

    Raises:
        QuizGenerationError: unparseable response or wrong question count
    """
    raw = await call_llm(build_quiz_prompt(params), model=QUIZ_MODEL)

    try:
        return _parse_quiz(raw, params)
    except (ValueError, ValidationError) as e:
        log.error(f"[QUIZ] Error parsing quiz generation: {e}")
        raise QuizGenerationError(
            f"Failed to generate quiz. LLM response was invalid: {e}"
        ) from e
