"""
JSON extraction helpers for raw LLM responses.
"""

import re

import json_repair

_CONTROL_CHARS = re.compile(r"[\x00-\x1F\x7F]")


def strip_code_fences(raw: str) -> str:
    """Return the payload of a ```json / ``` fenced block, or the trimmed text."""
    text = raw.strip()
    if "```json" in text:
        return text.split("```json", 1)[1].split("```", 1)[0].strip()
    if "```" in text:
        return text.split("```")[1].strip()
    return text


def remove_control_chars(text: str) -> str:
    return _CONTROL_CHARS.sub("", text)


def parse_json_object(text: str) -> dict:
    """Parse (and repair) a JSON object. Raises ValueError for anything else."""
    if not text.strip():
        raise ValueError("Empty LLM response")
    data = json_repair.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"No JSON object in LLM response: {text[:300]}")
    return data
