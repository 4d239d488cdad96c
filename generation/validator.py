"""
Output Validator

Rejects quizzes whose questions look like exam-metadata trivia
(acronym expansions, dates, eligibility, cut-offs) instead of subject matter.
"""

import re
from typing import List, Optional

from generation.schemas import QuizOutput

FORBIDDEN_PATTERNS = [
    re.compile(p, re.IGNORECASE)
    for p in (
        r"what does \w+ stand for",
        r"what is the full form",
        r"where is \w+ located",
        r"what is the age limit",
        r"what is the eligibility",
        r"when is \w+ exam conducted",
        r"when is \w+ exam held",
        r"exam date",
        r"conducted by",
        r"training academy",
        r"training center",
        r"admission process",
        r"application process",
        r"exam pattern",
        r"marking scheme",
        r"cut-off",
        r"cutoff",
        r"motto of",
        r"motto is",
    )
]


def contains_forbidden_content(text: str) -> bool:
    return any(pattern.search(text) for pattern in FORBIDDEN_PATTERNS)


def find_forbidden_questions(quiz: QuizOutput) -> List[int]:
    """Question numbers whose text matches a forbidden pattern."""
    return [
        q.question_number
        for q in quiz.questions
        if q.question and contains_forbidden_content(q.question)
    ]


def validate_quiz(quiz: Optional[QuizOutput]) -> bool:
    if quiz is None:
        return False
    return not find_forbidden_questions(quiz)
