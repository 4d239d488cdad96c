"""
Phase 1 — Syllabus Inference

Maps a free-text topic ("NDA", "MERN", "B.Tech Chemical Engineering 2nd Year")
to the curriculum subjects that are actually studied or examined for it.
Only identifies subjects; no questions are generated here.
"""

import logging
import os

from generation.json_utils import parse_json_object, strip_code_fences
from generation.llm_client import SYLLABUS_MODEL, call_llm
from generation.schemas import SyllabusResult
from generation.syllabus_map import IDENTIFIED_AS, resolve_syllabus

log = logging.getLogger("generation.pipeline")

USE_CURATED_SYLLABUS = os.getenv("USE_CURATED_SYLLABUS", "true").lower() in ("1", "true", "yes")


class SyllabusInferenceError(ValueError):
    pass


SYLLABUS_PROMPT = """You are a syllabus expert. Your task is to identify what subjects/topics are studied or tested for: "{topic}"

CRITICAL RULES:
1. Identify ONLY the academic/technical subjects that students actually STUDY or that appear in exams
2. DO NOT mention:
   - Exam eligibility, age limits, dates
   - Exam centers, application process
   - Training academies, institutions
   - Exam pattern, marking scheme
   - Full forms or acronym meanings
3. Focus on SUBJECTS/TOPICS that are part of the curriculum or exam syllabus

EXAMPLES:
- "NDA" → ["Mathematics", "General Knowledge (History, Geography, Current Affairs)", "General Science (Physics, Chemistry, Biology)", "English (Grammar, Vocabulary, Comprehension)"]
- "CSAT" → ["Quantitative Aptitude", "Logical Reasoning", "Reading Comprehension"]
- "MERN" → ["MongoDB", "Express.js", "React", "Node.js"]
- "B.Tech Chemical Engineering 2nd Year" → ["Chemical Thermodynamics", "Mass Transfer", "Chemical Reaction Engineering", "Process Control", "Fluid Mechanics"]
- "UPSC" → ["History", "Geography", "Polity", "Economics", "Environment", "Science and Technology", "Current Affairs"]

OUTPUT FORMAT (JSON only, no markdown):
{{
  "topic": "{topic}",
  "identifiedAs": "competitive exam" | "technical topic" | "academic subject" | "professional course",
  "subjects": ["Subject 1", "Subject 2", "Subject 3", ...]
}}

Now identify the subjects for: "{topic}"
"""


def _from_curated_map(topic: str) -> SyllabusResult | None:
    mapping = resolve_syllabus(topic)
    if mapping is None:
        return None
    return SyllabusResult(
        topic=topic,
        identified_as=IDENTIFIED_AS[mapping["type"]],
        subjects=list(mapping["subjects"]),
    )


def _parse_syllabus(raw: str, topic: str) -> SyllabusResult:
    data = parse_json_object(strip_code_fences(raw))

    subjects = data.get("subjects")
    if not subjects or not isinstance(subjects, list):
        raise ValueError("Invalid syllabus inference: missing or empty subjects array")

    return SyllabusResult(
        topic=data.get("topic") or topic,
        identified_as=data.get("identifiedAs") or "academic subject",
        subjects=[str(s) for s in subjects],
    )


async def infer_syllabus(topic: str) -> SyllabusResult:
    """
    Phase 1: infer the syllabus subjects for any topic.

    Args:
        topic: Free-text topic as typed by the user

    Returns:
        SyllabusResult with a non-empty subjects list

    Raises:
        SyllabusInferenceError: if the LLM response is unusable
    """
    if USE_CURATED_SYLLABUS:
        curated = _from_curated_map(topic)
        if curated is not None:
            log.info(f"[SYLLABUS] '{topic}' resolved from curated map")
            return curated

    raw = await call_llm(SYLLABUS_PROMPT.format(topic=topic), model=SYLLABUS_MODEL)

    try:
        return _parse_syllabus(raw, topic)
    except ValueError as e:
        log.error(f"[SYLLABUS] Error parsing syllabus inference: {e}")
        raise SyllabusInferenceError(
            f'Failed to infer syllabus for "{topic}". LLM response was invalid.'
        ) from e
