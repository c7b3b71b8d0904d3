"""
avi/session/aggregator.py
==========================
Session Aggregator - AVI Interview Engine

Responsibility:
    - Hold one interview as an append-only, single-writer InterviewSession
    - Fold each new VoiceAnalysisResult into a MicroLocalAnalysis computed
      against every earlier result (a replay reproduces the same session)
    - Keep the session-level view current: consistency checks, overall
      coherence, risk areas and next-question recommendations

Session rules:
    - Analyses are appended in answer order and never edited or removed
    - A question id is answered at most once per session; corrections need
      a new session
    - A failed analysis (unknown id, repeated id) leaves the session
      exactly as it was
    - evaluate() computes an answer's analysis and checks without touching
      the session; commit() appends it. Callers that verify outputs do so
      in between, so a rejected answer is never written

This module does NOT:
    - Score raw signals or single answers
    - Serialize reports (that is report.py)
    - Persist sessions
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from avi.analysis.analyzer import VoiceAnalysisResult
from avi.catalog.questions import Category, Question, QuestionCatalog
from avi.risk.consistency import (
    CONSISTENCY_PAIRS,
    ConsistencyCheck,
    perform_consistency_checks,
)
from avi.risk.micro_local import MicroLocalAnalysis, perform_micro_local_analysis
from avi.session.financial import FinancialCoherence, validate_financial_coherence

logger = logging.getLogger("avi.session.aggregator")


DEFAULT_TARGET_QUESTIONS: int = 55
MAX_RECOMMENDATIONS: int = 10
FAILED_CHECK_PENALTY: float = 0.1
RISK_AREA_THRESHOLD: float = 0.5


class QuestionAlreadyAnswered(ValueError):
    """Raised when a session receives a second answer for the same question."""

    def __init__(self, session_id: str, question_id: str):
        self.session_id = session_id
        self.question_id = question_id
        super().__init__(
            f"Question {question_id!r} was already answered in session {session_id}"
        )


@dataclass(frozen=True)
class PendingAnswer:
    """An evaluated answer that has not been appended to its session yet."""

    result: VoiceAnalysisResult
    analysis: MicroLocalAnalysis
    consistency_checks: tuple[ConsistencyCheck, ...]
    history_size: int  # answers recorded when it was evaluated


# ---------------------------------------------------------------------------
# Aggregate calculators
# ---------------------------------------------------------------------------


def calculate_overall_coherence(
    analyses: Sequence[MicroLocalAnalysis],
    checks: Sequence[ConsistencyCheck],
    failed_check_penalty: float = FAILED_CHECK_PENALTY,
) -> float:
    """
    Mean of (average local risk, average cross-validation), minus a flat
    penalty per failed consistency check, clamped to [0, 1].
    """
    if not analyses:
        return 0.0

    avg_local = sum(a.local_risk_score for a in analyses) / len(analyses)
    avg_cross = sum(a.cross_validation_score for a in analyses) / len(analyses)

    score = (avg_local + avg_cross) / 2.0
    failed = sum(1 for c in checks if c.failed)
    score -= failed * failed_check_penalty
    return max(0.0, min(1.0, score))


def identify_risk_areas(
    analyses: Sequence[MicroLocalAnalysis],
    threshold: float = RISK_AREA_THRESHOLD,
) -> list[Category]:
    """Categories whose mean local risk score falls below the threshold."""
    by_category: dict[Category, list[float]] = {}
    for a in analyses:
        by_category.setdefault(a.category, []).append(a.local_risk_score)

    return [
        category
        for category, scores in by_category.items()
        if sum(scores) / len(scores) < threshold
    ]


def recommend_next_questions(
    catalog: QuestionCatalog,
    answered_ids: Iterable[str],
    target_total: int,
    max_recommendations: int = MAX_RECOMMENDATIONS,
) -> list[Question]:
    """
    Unanswered questions, critical or high-stress ones first.

    Both groups keep catalog order. The list is truncated to
    min(max_recommendations, target_total - answered).
    """
    answered = set(answered_ids)
    remaining = [q for q in catalog if q.id not in answered]

    prioritized = [q for q in remaining if q.is_critical or q.is_high_stress]
    others = [q for q in remaining if not (q.is_critical or q.is_high_stress)]

    limit = max(0, min(max_recommendations, target_total - len(answered)))
    return (prioritized + others)[:limit]


# ---------------------------------------------------------------------------
# Session
# ---------------------------------------------------------------------------


class InterviewSession:
    """
    Append-only record of one interview.

    Attributes:
        session_id:                     Unique session identifier
        total_questions:                Target number of questions
        consistency_checks:             Checks for fully answered pairs
        overall_coherence_score:        Session coherence in [0, 1]
        risk_areas:                     Categories with low mean local risk
        next_question_recommendations:  Ordered unanswered questions
    """

    def __init__(
        self,
        catalog: QuestionCatalog,
        total_questions: int = DEFAULT_TARGET_QUESTIONS,
        session_id: str | None = None,
        consistency_pairs: Sequence[tuple[str, str]] = CONSISTENCY_PAIRS,
    ) -> None:
        if total_questions < 1:
            raise ValueError(f"total_questions must be >= 1, got {total_questions}")

        self.session_id = session_id or f"micro_local_{uuid.uuid4().hex[:12]}"
        self.catalog = catalog
        self.total_questions = total_questions
        self._pairs = tuple(consistency_pairs)

        self._results: list[VoiceAnalysisResult] = []
        self._analyses: list[MicroLocalAnalysis] = []

        self.consistency_checks: list[ConsistencyCheck] = []
        self.overall_coherence_score: float = 0.0
        self.risk_areas: list[Category] = []
        self.next_question_recommendations: list[Question] = recommend_next_questions(
            catalog, (), total_questions
        )

    # ---- read-only views -------------------------------------------------

    @property
    def results(self) -> tuple[VoiceAnalysisResult, ...]:
        return tuple(self._results)

    @property
    def micro_analyses(self) -> tuple[MicroLocalAnalysis, ...]:
        return tuple(self._analyses)

    @property
    def completed_questions(self) -> int:
        return len(self._results)

    def answered_ids(self) -> list[str]:
        return [r.question_id for r in self._results]

    def __repr__(self) -> str:
        return (
            f"InterviewSession(id={self.session_id!r}, "
            f"progress={self.completed_questions}/{self.total_questions})"
        )

    # ---- mutation --------------------------------------------------------

    def evaluate(self, result: VoiceAnalysisResult) -> PendingAnswer:
        """
        Compute what recording one answer would produce, without appending it.

        The micro-local analysis is computed against the results recorded
        so far; consistency checks include the new answer.

        Raises:
            QuestionNotFound: Unknown question id.
            QuestionAlreadyAnswered: Repeated question id.
        """
        if any(r.question_id == result.question_id for r in self._results):
            raise QuestionAlreadyAnswered(self.session_id, result.question_id)

        analysis = perform_micro_local_analysis(result, tuple(self._results), self.catalog)
        checks = perform_consistency_checks(self._results + [result], self._pairs)
        return PendingAnswer(
            result=result,
            analysis=analysis,
            consistency_checks=tuple(checks),
            history_size=len(self._results),
        )

    def commit(self, pending: PendingAnswer) -> MicroLocalAnalysis:
        """
        Append an evaluated answer and refresh the session-level view.

        Raises:
            RuntimeError: If the session changed after `pending` was evaluated.
        """
        if pending.history_size != len(self._results):
            raise RuntimeError(
                f"Session {self.session_id} changed since "
                f"{pending.result.question_id!r} was evaluated"
            )

        self._results.append(pending.result)
        self._analyses.append(pending.analysis)
        self._refresh(pending.consistency_checks)

        logger.info(
            "Session %s: recorded %s (%d/%d), coherence=%.3f, risk_areas=%s",
            self.session_id,
            pending.result.question_id,
            self.completed_questions,
            self.total_questions,
            self.overall_coherence_score,
            [c.value for c in self.risk_areas],
        )
        return pending.analysis

    def record(self, result: VoiceAnalysisResult) -> MicroLocalAnalysis:
        """
        Evaluate and append one answer.

        Returns:
            The MicroLocalAnalysis produced for this answer.

        Raises:
            QuestionNotFound: Unknown question id (session unchanged).
            QuestionAlreadyAnswered: Repeated question id (session unchanged).
        """
        return self.commit(self.evaluate(result))

    def _refresh(self, checks: Sequence[ConsistencyCheck]) -> None:
        self.consistency_checks = list(checks)
        self.overall_coherence_score = calculate_overall_coherence(
            self._analyses, self.consistency_checks
        )
        self.risk_areas = identify_risk_areas(self._analyses)
        self.next_question_recommendations = recommend_next_questions(
            self.catalog, self.answered_ids(), self.total_questions
        )

    # ---- derived checks --------------------------------------------------

    def financial_coherence(self) -> FinancialCoherence:
        return validate_financial_coherence(self._results, self.catalog)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "total_questions": self.total_questions,
            "completed_questions": self.completed_questions,
            "micro_analyses": [a.to_dict() for a in self._analyses],
            "consistency_checks": [c.to_dict() for c in self.consistency_checks],
            "overall_coherence_score": self.overall_coherence_score,
            "risk_areas": [c.value for c in self.risk_areas],
            "next_question_recommendations": [
                q.id for q in self.next_question_recommendations
            ],
        }


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_session(
    results: Iterable[VoiceAnalysisResult],
    catalog: QuestionCatalog,
    target_total: int = DEFAULT_TARGET_QUESTIONS,
    session_id: str | None = None,
) -> InterviewSession:
    """
    Replay an ordered list of results into a fresh session.

    Raises:
        QuestionNotFound: If any result references an unknown question.
        QuestionAlreadyAnswered: If a question id appears twice.
    """
    session = InterviewSession(catalog, total_questions=target_total, session_id=session_id)
    for result in results:
        session.record(result)
    return session
