"""
avi/session/summary.py
=======================
Response Summary & Export - AVI Interview Engine

Responsibility:
    - Summarize a set of answers from voice evidence alone: a voice score
      averaged by question weight, a risk level from that score and the
      average risk-flag count, the consolidated risk flags, and a
      GO / REVIEW / NO-GO decision
    - Export every answer with its question metadata, plus totals
    - Recommend next questions adaptively: once any answer looks risky,
      only critical or high-stress questions are offered

Unlike report.py, nothing here reads micro-local analyses or consistency
checks. Inputs are VoiceAnalysisResults and the catalog they came from.

This module does NOT:
    - Mutate sessions
    - Re-score answers
"""

import logging
from typing import Any, Sequence

from avi.analysis.analyzer import VoiceAnalysisResult
from avi.catalog.questions import Category, Question, QuestionCatalog

logger = logging.getLogger("avi.session.summary")


# ---------------------------------------------------------------------------
# Tunable constants
# ---------------------------------------------------------------------------

HIGH_RISK_SCORE: float = 0.4
MEDIUM_RISK_SCORE: float = 0.6
HIGH_RISK_AVG_FLAGS: float = 2.0
MEDIUM_RISK_AVG_FLAGS: float = 1.0

# An answer below this score, or with more flags than this, turns on
# adaptive prioritization
ADAPTIVE_SCORE_TRIGGER: float = 0.6
ADAPTIVE_FLAG_TRIGGER: int = 2
ADAPTIVE_MIN_WEIGHT: int = 8
ADAPTIVE_MIN_STRESS: int = 4
DEFAULT_RECOMMENDATION_COUNT: int = 5

DECISION_BY_RISK_LEVEL: dict[str, str] = {
    "LOW": "GO",
    "MEDIUM": "REVIEW",
    "HIGH": "NO-GO",
}


# ---------------------------------------------------------------------------
# Component calculators
# ---------------------------------------------------------------------------


def weighted_voice_score(
    results: Sequence[VoiceAnalysisResult],
    catalog: QuestionCatalog,
) -> float:
    """Voice score averaged by question weight (0.0 with no answers)."""
    total_weighted = 0.0
    total_weight = 0
    for r in results:
        weight = catalog.get(r.question_id).weight
        total_weighted += r.voice_score * weight
        total_weight += weight
    return total_weighted / total_weight if total_weight else 0.0


def classify_response_risk(
    overall_score: float,
    results: Sequence[VoiceAnalysisResult],
    high_risk_score: float = HIGH_RISK_SCORE,
    medium_risk_score: float = MEDIUM_RISK_SCORE,
) -> str:
    """
    HIGH / MEDIUM / LOW from the weighted score and average flag count.

    With no answers the score is 0.0, so the level is HIGH.
    """
    avg_flags = (
        sum(len(r.risk_flags) for r in results) / len(results) if results else 0.0
    )
    if overall_score < high_risk_score or avg_flags >= HIGH_RISK_AVG_FLAGS:
        return "HIGH"
    if overall_score < medium_risk_score or avg_flags >= MEDIUM_RISK_AVG_FLAGS:
        return "MEDIUM"
    return "LOW"


def consolidate_flags(results: Sequence[VoiceAnalysisResult]) -> list[str]:
    """Distinct risk flags in first-seen order."""
    flags: list[str] = []
    for r in results:
        for flag in r.risk_flags:
            if flag not in flags:
                flags.append(flag)
    return flags


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def summarize_responses(
    results: Sequence[VoiceAnalysisResult],
    catalog: QuestionCatalog,
    high_risk_score: float = HIGH_RISK_SCORE,
    medium_risk_score: float = MEDIUM_RISK_SCORE,
) -> dict[str, Any]:
    """
    Session-level verdict from the answers' voice scores and risk flags.

    Args:
        results:           Answers in any order.
        catalog:           Catalog used to resolve question weights.
        high_risk_score:   Weighted score below which the level is HIGH.
        medium_risk_score: Weighted score below which the level is MEDIUM.

    Returns:
        {
            "responses": int,
            "overall_score": float (0-1, 4 decimals),
            "risk_level": "LOW" | "MEDIUM" | "HIGH",
            "decision": "GO" | "REVIEW" | "NO-GO",
            "flags": [str],
            "decisions": {"GO": int, "REVIEW": int, "NO-GO": int}
        }

    Raises:
        QuestionNotFound: If a result references an unknown question.
        ValueError: If high_risk_score exceeds medium_risk_score.
    """
    if high_risk_score > medium_risk_score:
        raise ValueError(
            f"high_risk_score ({high_risk_score}) must not exceed "
            f"medium_risk_score ({medium_risk_score})"
        )

    overall = weighted_voice_score(results, catalog)
    risk_level = classify_response_risk(
        overall, results, high_risk_score, medium_risk_score
    )

    per_answer = {"GO": 0, "REVIEW": 0, "NO-GO": 0}
    for r in results:
        per_answer[r.decision] += 1

    summary = {
        "responses": len(results),
        "overall_score": round(overall, 4),
        "risk_level": risk_level,
        "decision": DECISION_BY_RISK_LEVEL[risk_level],
        "flags": consolidate_flags(results),
        "decisions": per_answer,
    }

    logger.info(
        "Response summary: %d answer(s), score=%.3f, risk_level=%s, decision=%s",
        len(results), overall, risk_level, summary["decision"],
    )
    return summary


def export_results(
    results: Sequence[VoiceAnalysisResult],
    catalog: QuestionCatalog,
    session_id: str | None = None,
) -> dict[str, Any]:
    """
    Per-answer export for external analysis.

    The "session" block repeats summarize_responses(); "responses" lists
    each answer with its question metadata in answer order; "summary"
    holds totals.

    Raises:
        QuestionNotFound: If a result references an unknown question.
    """
    verdict = summarize_responses(results, catalog)
    questions = [catalog.get(r.question_id) for r in results]

    responses = []
    for r, q in zip(results, questions):
        responses.append({
            "question_id": r.question_id,
            "question": q.question,
            "category": q.category.value,
            "weight": q.weight,
            "stress_level": q.stress_level,
            "voice_score": r.voice_score,
            "response_time": r.response_time,
            "stress_indicators": list(r.stress_indicators),
            "risk_flags": list(r.risk_flags),
            "analysis_metrics": r.analysis_metrics.to_dict(),
            "decision": r.decision,
        })

    coverage = {c.value: 0 for c in Category}
    for q in questions:
        coverage[q.category.value] += 1

    average = sum(r.voice_score for r in results) / len(results) if results else 0.0

    return {
        "session": {
            "id": session_id,
            "total_questions": len(results),
            "overall_score": verdict["overall_score"],
            "risk_level": verdict["risk_level"],
            "decision": verdict["decision"],
            "flags": verdict["flags"],
        },
        "responses": responses,
        "summary": {
            "average_score": round(average, 4),
            "total_stress_indicators": sum(len(r.stress_indicators) for r in results),
            "total_risk_flags": sum(len(r.risk_flags) for r in results),
            "category_coverage": coverage,
            "critical_questions_asked": sum(1 for q in questions if q.is_critical),
        },
    }


def recommend_adaptive_questions(
    catalog: QuestionCatalog,
    results: Sequence[VoiceAnalysisResult],
    category: Category | None = None,
    count: int = DEFAULT_RECOMMENDATION_COUNT,
    score_trigger: float = ADAPTIVE_SCORE_TRIGGER,
    flag_trigger: int = ADAPTIVE_FLAG_TRIGGER,
) -> list[Question]:
    """
    Unanswered questions, heaviest first, narrowed once risk shows up.

    If any answer scored below `score_trigger` or carries more than
    `flag_trigger` risk flags, only questions with weight >= 8 or stress
    level >= 4 are offered. An optional category narrows further. Ties in
    weight keep catalog order.

    Raises:
        ValueError: If count is negative.
    """
    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")

    answered = {r.question_id for r in results}
    available = [q for q in catalog if q.id not in answered]

    risky = any(
        r.voice_score < score_trigger or len(r.risk_flags) > flag_trigger
        for r in results
    )
    if risky:
        available = [
            q for q in available
            if q.weight >= ADAPTIVE_MIN_WEIGHT or q.stress_level >= ADAPTIVE_MIN_STRESS
        ]
    if category is not None:
        available = [q for q in available if q.category == category]

    ranked = sorted(available, key=lambda q: -q.weight)[:count]
    logger.debug(
        "Adaptive recommendations: risky=%s category=%s -> %s",
        risky, category.value if category else None, [q.id for q in ranked],
    )
    return ranked
