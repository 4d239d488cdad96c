"""
Shared OpenRouter LLM helper for the quiz pipeline.

Used by:
  - syllabus_inference.py  (Phase 1)
  - quiz_generator.py      (Phase 2)

OpenRouter speaks the OpenAI chat-completions protocol, so the OpenAI SDK
is pointed at its base URL.
"""

import json
import os
from typing import Optional

from openai import AsyncOpenAI

# ── Model config ───────────────────────────────────────────────────────────────
OPENROUTER_BASE_URL = os.getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1")
SYLLABUS_MODEL = os.getenv("SYLLABUS_MODEL", "google/gemini-2.5-flash-lite")
QUIZ_MODEL = os.getenv("QUIZ_MODEL", "google/gemini-2.5-flash")

# Lazy singleton
_client: AsyncOpenAI | None = None


def _api_key() -> Optional[str]:
    return os.getenv("OPEN_ROUTER_API_KEY")


def is_configured() -> bool:
    """True when an OpenRouter API key is available."""
    return bool(_api_key())


def _get_client() -> AsyncOpenAI:
    global _client
    if _client is None:
        api_key = _api_key()
        if not api_key:
            raise RuntimeError(
                "OPEN_ROUTER_API_KEY is not set. Add it to your .env file."
            )
        _client = AsyncOpenAI(api_key=api_key, base_url=OPENROUTER_BASE_URL)
    return _client


async def call_llm(
    prompt: str,
    model: str,
    temperature: Optional[float] = None,
    max_tokens: Optional[int] = None,
) -> str:
    """
    Send a single user-turn prompt and return the assistant message text.

    Args:
        prompt:      User-turn message
        model:       OpenRouter model slug, e.g. "google/gemini-2.5-flash"
        temperature: Sampling temperature (provider default when None)
        max_tokens:  Max response tokens (provider default when None)

    Returns:
        Raw string content of the first choice, "" if the model sent nothing
    """
    client = _get_client()
    kwargs = {}
    if temperature is not None:
        kwargs["temperature"] = temperature
    if max_tokens is not None:
        kwargs["max_tokens"] = max_tokens

    response = await client.chat.completions.create(
        model=model,
        messages=[{"role": "user", "content": prompt}],
        stream=False,
        **kwargs,
    )
    if not response.choices:
        return ""
    content = response.choices[0].message.content
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return json.dumps(content)
