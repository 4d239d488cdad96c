from __future__ import annotations

import json
import os
import socket
import time
from typing import Any, Callable, Iterable, List, Optional

import pytest
from jose import jwt
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("USE_CURATED_SYLLABUS", "true")

from auth import security  # noqa: E402
from database.database import Base, get_db  # noqa: E402
from database import models  # noqa: E402,F401

TEST_JWT_SECRET = "test-supabase-jwt-secret"
TEST_USER_ID = "7d4c1f0e-0000-4000-8000-000000000001"


class OutboundCallError(RuntimeError):
    """A unit test tried to reach OpenRouter or the Supabase database."""


def _refuse_socket(*_args: Any, **_kwargs: Any) -> Any:
    raise OutboundCallError(
        "Unit tests run offline: patch call_llm with FakeLLM and use the db_session fixture. "
        "Tests that really hit OpenRouter or Supabase need @pytest.mark.integration "
        "(or @pytest.mark.network), or run with ALLOW_NETWORK=1."
    )


@pytest.fixture(autouse=True)
def _offline(monkeypatch: pytest.MonkeyPatch, request: pytest.FixtureRequest) -> None:
    live = request.node.get_closest_marker("integration") or request.node.get_closest_marker("network")
    if live or os.getenv("ALLOW_NETWORK") == "1":
        return

    # openai goes through httpx, which resolves hosts with getaddrinfo
    monkeypatch.setattr(socket, "getaddrinfo", _refuse_socket)
    monkeypatch.setattr(socket, "create_connection", _refuse_socket)


# ─── Database ──────────────────────────────────────────────────────────────────

@pytest.fixture
def db_session():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSession = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSession()
    try:
        yield session
    finally:
        session.close()
        engine.dispose()


# ─── Auth ──────────────────────────────────────────────────────────────────────

def make_token(
    user_id: str = TEST_USER_ID,
    secret: str = TEST_JWT_SECRET,
    audience: str = "authenticated",
    expires_in: int = 3600,
    **extra: Any,
) -> str:
    now = int(time.time())
    claims = {"sub": user_id, "aud": audience, "role": "authenticated", "iat": now, "exp": now + expires_in}
    claims.update(extra)
    return jwt.encode(claims, secret, algorithm="HS256")


def auth_headers(user_id: str = TEST_USER_ID, **extra: Any) -> dict:
    return {"Authorization": f"Bearer {make_token(user_id, **extra)}"}


@pytest.fixture
def jwt_secret(monkeypatch: pytest.MonkeyPatch) -> str:
    monkeypatch.setattr(security, "SUPABASE_JWT_SECRET", TEST_JWT_SECRET)
    return TEST_JWT_SECRET


# ─── App ───────────────────────────────────────────────────────────────────────

@pytest.fixture
def client(db_session, jwt_secret, monkeypatch: pytest.MonkeyPatch):
    from fastapi.testclient import TestClient

    from quiz_api import app

    monkeypatch.setenv("OPEN_ROUTER_API_KEY", "test-key")

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


# ─── Fake LLM ──────────────────────────────────────────────────────────────────

def quiz_payload(
    n: int,
    topic: str = "Organic Chemistry",
    difficulty: str = "Medium",
    question_text: Optional[Callable[[int], str]] = None,
    explanation: str = "Markovnikov addition puts H on the carbon with more H atoms.",
) -> dict:
    question_text = question_text or (lambda i: f"Which product forms in reaction scenario {i}?")
    return {
        "topic": topic,
        "difficulty": difficulty,
        "totalQuestions": n,
        "questions": [
            {
                "questionNumber": i,
                "question": question_text(i),
                "options": {"A": "Option A", "B": "Option B", "C": "Option C", "D": "Option D"},
                "correctAnswer": "B",
                "explanation": explanation,
            }
            for i in range(1, n + 1)
        ],
    }


def fenced(data: dict) -> str:
    return "Here you go:\n```json\n" + json.dumps(data, indent=2) + "\n```"


class FakeLLM:
    """Async stand-in for call_llm that replays canned responses in order."""

    def __init__(self, responses: Iterable[Any]):
        self.responses: List[Any] = list(responses)
        self.calls: List[dict] = []

    async def __call__(self, prompt: str, model: str, **kwargs: Any) -> str:
        self.calls.append({"prompt": prompt, "model": model})
        if not self.responses:
            raise AssertionError("FakeLLM ran out of responses")
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response
