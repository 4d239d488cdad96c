"""
Quizethic AI API — Main Application
FastAPI application that generates multiple-choice quizzes on any topic
through OpenRouter and tracks per-user quotas, tiers and results in Supabase.
"""

from dotenv import load_dotenv
load_dotenv()

from fastapi import FastAPI, Request
from fastapi.exceptions import HTTPException as FastAPIHTTPException
from fastapi.exception_handlers import http_exception_handler
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
import logging
import os

from database.database import engine, Base
from database import models  # noqa: F401  (registers tables on Base.metadata)
from routers import quiz, users

log = logging.getLogger("generation.pipeline")

CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup: create tables."""
    Base.metadata.create_all(bind=engine)
    log.info("Quizethic AI backend ready")
    yield


app = FastAPI(
    title="Quizethic AI API",
    description="Topic-to-quiz generation with syllabus inference, content validation and daily quotas",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(FastAPIHTTPException)
async def error_body_handler(request: Request, exc: FastAPIHTTPException):
    """Dict details ({"error", "message"}) are sent as the body itself, not under "detail"."""
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content=exc.detail, headers=exc.headers)
    return await http_exception_handler(request, exc)


# ─── Routers ───────────────────────────────────────────────────────────────────

app.include_router(quiz.router)    # /api/generate
app.include_router(users.router)   # /api/user/*, /api/quiz-results


@app.get("/")
def root():
    return {"message": "Quizethic AI Backend API is running!"}


@app.get("/health")
def health_check():
    return {"status": "healthy", "service": "quizethic-api"}


if __name__ == "__main__":
    import uvicorn
    port = int(os.getenv("PORT", "3000"))
    log.info(f"Server is running on http://localhost:{port}")
    log.info(f"Test endpoint: POST http://localhost:{port}/api/generate")
    uvicorn.run(app, host="0.0.0.0", port=port)
