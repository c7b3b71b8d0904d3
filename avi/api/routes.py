"""
avi/api/routes.py
==================
API Endpoints - AVI Interview Engine

Responsibility:
    - Expose the interview engine over HTTP:
        POST /api/v1/sessions
        POST /api/v1/sessions/{session_id}/responses
        GET  /api/v1/sessions/{session_id}/report
        GET  /api/v1/sessions/{session_id}/financial-coherence
        GET  /api/v1/sessions/{session_id}/summary
        GET  /api/v1/sessions/{session_id}/export
        GET  /api/v1/sessions/{session_id}/next-questions
        DELETE /api/v1/sessions/{session_id}
        GET  /api/v1/questions/{question_id}
        GET  /api/v1/catalog/stats
    - Keep sessions in an in-process store, one lock per session
    - Map engine errors to HTTP status codes (404 / 409 / 422 / 500)

Configuration (environment, loaded by main.py via python-dotenv):
    AVI_TARGET_QUESTIONS  - default target per session (55)
    AVI_MOCK_MODE         - attach a seeded placeholder noise source
    AVI_MOCK_SEED         - seed for that noise source

This module does NOT:
    - Persist sessions (a restart loses them; clients DELETE finished ones)
    - Score anything itself (delegates to avi.pipeline)
"""

import logging
import os
import threading
from typing import Any, Optional

from fastapi import FastAPI, HTTPException, Query, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field

from avi.analysis.signals import SignalValidationError
from avi.analysis.simulation import NoiseSource, SeededNoise
from avi.catalog.avi_questions import load_default_catalog
from avi.catalog.questions import Category, QuestionNotFound
from avi.catalog.stats import catalog_stats
from avi.contract_validator import ContractVerificationError
from avi.pipeline import analyze_and_record, session_report, session_summary
from avi.session.aggregator import (
    DEFAULT_TARGET_QUESTIONS,
    InterviewSession,
    QuestionAlreadyAnswered,
)
from avi.session.summary import (
    DEFAULT_RECOMMENDATION_COUNT,
    export_results,
    recommend_adaptive_questions,
)

logger = logging.getLogger("avi.api.routes")


def _env_flag(name: str) -> bool:
    return os.getenv(name, "").strip().lower() in ("1", "true", "yes", "on")


TARGET_QUESTIONS: int = int(os.getenv("AVI_TARGET_QUESTIONS", str(DEFAULT_TARGET_QUESTIONS)))
MOCK_MODE: bool = _env_flag("AVI_MOCK_MODE")
MOCK_SEED: int | None = (
    int(os.environ["AVI_MOCK_SEED"]) if os.getenv("AVI_MOCK_SEED") else None
)


# ---------------------------------------------------------------------------
# Session store
# ---------------------------------------------------------------------------


class SessionNotFound(KeyError):
    """Raised when a session id is not present in the store."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(session_id)

    def __str__(self) -> str:
        return f"Session {self.session_id!r} not found"


class _SessionEntry:
    __slots__ = ("session", "lock", "noise")

    def __init__(self, session: InterviewSession, noise: NoiseSource | None) -> None:
        self.session = session
        self.lock = threading.Lock()
        self.noise = noise


class SessionStore:
    """In-process session registry. Each session has its own writer lock."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._entries: dict[str, _SessionEntry] = {}

    def create(
        self,
        session: InterviewSession,
        noise: NoiseSource | None = None,
    ) -> _SessionEntry:
        with self._lock:
            if session.session_id in self._entries:
                raise ValueError(f"Session {session.session_id!r} already exists")
            entry = _SessionEntry(session, noise)
            self._entries[session.session_id] = entry
        return entry

    def get(self, session_id: str) -> _SessionEntry:
        with self._lock:
            entry = self._entries.get(session_id)
        if entry is None:
            raise SessionNotFound(session_id)
        return entry

    def delete(self, session_id: str) -> None:
        """Drop a session. Requests already holding its entry finish on it."""
        with self._lock:
            entry = self._entries.pop(session_id, None)
        if entry is None:
            raise SessionNotFound(session_id)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class CreateSessionRequest(BaseModel):
    total_questions: Optional[int] = Field(default=None, ge=1)
    session_id: Optional[str] = Field(default=None, min_length=1)


class ResponseSubmission(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_id: str = Field(alias="questionId", min_length=1)
    transcript: Optional[str] = None
    words: Optional[list[str]] = None
    response_time_seconds: Optional[float] = Field(default=None, alias="responseTimeSeconds")
    acoustic_features: Optional[dict[str, Any]] = Field(default=None, alias="acousticFeatures")

    def signal_payload(self) -> dict[str, Any]:
        return self.model_dump(exclude={"question_id"}, exclude_none=True)


# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

app = FastAPI(
    title="AVI Interview Engine",
    description="Voice interview risk scoring - per-answer analysis, "
    "cross-question consistency and session reports.",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

catalog = load_default_catalog()
store = SessionStore()


def _get_entry(session_id: str) -> _SessionEntry:
    try:
        return store.get(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@app.post("/api/v1/sessions", status_code=201)
def create_session(request: Optional[CreateSessionRequest] = None):
    """Open a new interview session."""
    request = request or CreateSessionRequest()
    session = InterviewSession(
        catalog,
        total_questions=request.total_questions or TARGET_QUESTIONS,
        session_id=request.session_id,
    )
    noise = SeededNoise(MOCK_SEED) if MOCK_MODE else None

    try:
        store.create(session, noise)
    except ValueError as exc:
        raise HTTPException(status_code=409, detail=str(exc))

    logger.info(
        "Session created: %s (target=%d, mock=%s)",
        session.session_id, session.total_questions, MOCK_MODE,
    )
    return {
        "session_id": session.session_id,
        "total_questions": session.total_questions,
        "next_questions": [q.id for q in session.next_question_recommendations],
    }


@app.post("/api/v1/sessions/{session_id}/responses")
def submit_response(session_id: str, submission: ResponseSubmission):
    """
    Score one answer and append it to the session.

    Returns the answer's VoiceAnalysisResult, its MicroLocalAnalysis and
    the session progress.
    """
    entry = _get_entry(session_id)

    with entry.lock:
        try:
            result, analysis = analyze_and_record(
                entry.session,
                submission.question_id,
                submission.signal_payload(),
                noise=entry.noise,
            )
        except SignalValidationError as exc:
            raise HTTPException(status_code=422, detail=str(exc))
        except QuestionNotFound as exc:
            raise HTTPException(status_code=404, detail=str(exc))
        except QuestionAlreadyAnswered as exc:
            raise HTTPException(status_code=409, detail=str(exc))
        except ContractVerificationError as exc:
            logger.error("Stage verification failed: %s", exc)
            raise HTTPException(
                status_code=500,
                detail=f"Verification error in stage {exc.stage}: {exc.message}",
            )
        progress = f"{entry.session.completed_questions}/{entry.session.total_questions}"

    return {
        "result": result.to_dict(),
        "micro_analysis": analysis.to_dict(),
        "progress": progress,
    }


@app.get("/api/v1/sessions/{session_id}/report")
def get_report(session_id: str):
    """Return the structured report for a session."""
    entry = _get_entry(session_id)
    with entry.lock:
        try:
            return session_report(entry.session)
        except ContractVerificationError as exc:
            logger.error("Report verification failed: %s", exc)
            raise HTTPException(
                status_code=500,
                detail=f"Verification error in stage {exc.stage}: {exc.message}",
            )


@app.get("/api/v1/sessions/{session_id}/financial-coherence")
def get_financial_coherence(session_id: str):
    """Run the income / expense arithmetic checks for a session."""
    entry = _get_entry(session_id)
    with entry.lock:
        outcome = entry.session.financial_coherence()
    return outcome.to_dict()


@app.get("/api/v1/sessions/{session_id}/summary")
def get_summary(session_id: str):
    """Voice-only verdict: weighted score, risk level, flags and decision."""
    entry = _get_entry(session_id)
    with entry.lock:
        try:
            return session_summary(entry.session)
        except ContractVerificationError as exc:
            logger.error("Summary verification failed: %s", exc)
            raise HTTPException(
                status_code=500,
                detail=f"Verification error in stage {exc.stage}: {exc.message}",
            )


@app.get("/api/v1/sessions/{session_id}/export")
def get_export(session_id: str):
    """Every answer with its question metadata, plus totals."""
    entry = _get_entry(session_id)
    with entry.lock:
        return export_results(
            entry.session.results, entry.session.catalog, entry.session.session_id
        )


@app.get("/api/v1/sessions/{session_id}/next-questions")
def get_next_questions(
    session_id: str,
    category: Optional[Category] = None,
    count: int = Query(default=DEFAULT_RECOMMENDATION_COUNT, ge=0),
):
    """Risk-adaptive next questions, optionally within one category."""
    entry = _get_entry(session_id)
    with entry.lock:
        questions = recommend_adaptive_questions(
            entry.session.catalog, entry.session.results, category=category, count=count
        )
    return {"next_questions": [q.to_dict() for q in questions]}


@app.delete("/api/v1/sessions/{session_id}", status_code=204)
def delete_session(session_id: str):
    """Drop a session and everything recorded in it."""
    try:
        store.delete(session_id)
    except SessionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
    logger.info("Session deleted: %s", session_id)
    return Response(status_code=204)


@app.get("/api/v1/catalog/stats")
def get_catalog_stats():
    """Question distribution of the served catalog."""
    return catalog_stats(catalog)


@app.get("/api/v1/questions/{question_id}")
def get_question(question_id: str):
    """Return one catalog question."""
    try:
        return catalog.get(question_id).to_dict()
    except QuestionNotFound as exc:
        raise HTTPException(status_code=404, detail=str(exc))
