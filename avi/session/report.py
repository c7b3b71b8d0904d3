"""
avi/session/report.py
======================
Report Builder - AVI Interview Engine

Responsibility:
    - Serialize an InterviewSession into a structured, JSON-compatible
      report for downstream consumers
    - Derive the session risk level and per-category risk levels
    - Collect urgent flags, investigation areas and the top next questions

This module ONLY assembles. Every value is derived from the session's
existing analyses and checks. Scores are rounded to 4 decimals.

Report schema:
    {
        "session": {"id", "progress", "overall_coherence", "risk_level"},
        "category_analysis": {<category>: {"questions_completed",
            "avg_risk_score", "total_flags", "risk_level"}},
        "risk_areas": [<category>],
        "consistency_issues": [{"question_pair", "score", "flags"}],
        "recommendations": {"next_questions", "investigation_areas",
            "urgent_flags"},
        "summary": {"total_risk_flags", "avg_local_risk_score",
            "critical_questions_completed"}
    }
"""

import json
import logging
from typing import Any, Sequence

from avi.catalog.questions import Category, QuestionCatalog
from avi.risk.micro_local import MicroLocalAnalysis
from avi.session.aggregator import InterviewSession

logger = logging.getLogger("avi.session.report")


TOP_NEXT_QUESTIONS: int = 5
URGENT_RISK_THRESHOLD: float = 0.4
INVESTIGATION_RISK_THRESHOLD: float = 0.5
_INVESTIGATION_FLAG_MARKERS: tuple[str, ...] = ("inconsistency", "suspicious")


def determine_risk_level(coherence: float, risk_areas: Sequence[Any]) -> str:
    """Session risk level from coherence and number of risk areas."""
    if coherence < 0.4 or len(risk_areas) >= 3:
        return "HIGH"
    if coherence < 0.6 or len(risk_areas) >= 2:
        return "MEDIUM"
    return "LOW"


def categorize_risk_level(avg_risk_score: float) -> str:
    """Category risk level from its mean local risk score."""
    if avg_risk_score < 0.4:
        return "HIGH"
    if avg_risk_score < 0.6:
        return "MEDIUM"
    return "LOW"


def _category_performance(
    analyses: Sequence[MicroLocalAnalysis],
) -> dict[str, dict[str, Any]]:
    performance: dict[str, dict[str, Any]] = {}
    for category in Category:
        in_category = [a for a in analyses if a.category == category]
        if not in_category:
            continue
        avg = sum(a.local_risk_score for a in in_category) / len(in_category)
        performance[category.value] = {
            "questions_completed": len(in_category),
            "avg_risk_score": round(avg, 4),
            "total_flags": sum(len(a.coherency_flags) for a in in_category),
            "risk_level": categorize_risk_level(avg),
        }
    return performance


def _investigation_areas(analyses: Sequence[MicroLocalAnalysis]) -> list[str]:
    areas: list[str] = []
    for a in analyses:
        if a.local_risk_score < INVESTIGATION_RISK_THRESHOLD and a.category.value not in areas:
            areas.append(a.category.value)
        for flag in a.coherency_flags:
            tag = f"investigate_{a.question_id}"
            if any(m in flag for m in _INVESTIGATION_FLAG_MARKERS) and tag not in areas:
                areas.append(tag)
    return areas


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def build_report(
    session: InterviewSession,
    catalog: QuestionCatalog | None = None,
) -> dict[str, Any]:
    """
    Assemble the structured report for a session.

    Args:
        session: The session to snapshot.
        catalog: Catalog used to resolve question metadata. Defaults to
                 the catalog the session was built with.

    Returns:
        JSON-compatible report dict (see module docstring).
    """
    analyses = session.micro_analyses
    if catalog is None:
        catalog = session.catalog

    avg_local = (
        sum(a.local_risk_score for a in analyses) / len(analyses) if analyses else 0.0
    )
    critical_completed = 0
    for a in analyses:
        question = catalog.find(a.question_id)
        if question is not None and question.is_critical:
            critical_completed += 1

    report = {
        "session": {
            "id": session.session_id,
            "progress": f"{session.completed_questions}/{session.total_questions}",
            "overall_coherence": round(session.overall_coherence_score, 4),
            "risk_level": determine_risk_level(
                session.overall_coherence_score, session.risk_areas
            ),
        },
        "category_analysis": _category_performance(analyses),
        "risk_areas": [c.value for c in session.risk_areas],
        "consistency_issues": [
            {
                "question_pair": list(check.question_pair),
                "score": round(check.consistency_score, 4),
                "flags": list(check.inconsistency_flags),
            }
            for check in session.consistency_checks
            if check.failed
        ],
        "recommendations": {
            "next_questions": [
                {
                    "id": q.id,
                    "question": q.question,
                    "priority": q.weight,
                    "category": q.category.value,
                }
                for q in session.next_question_recommendations[:TOP_NEXT_QUESTIONS]
            ],
            "investigation_areas": _investigation_areas(analyses),
            "urgent_flags": [
                a.question_id for a in analyses
                if a.local_risk_score < URGENT_RISK_THRESHOLD
            ],
        },
        "summary": {
            "total_risk_flags": sum(len(a.coherency_flags) for a in analyses),
            "avg_local_risk_score": round(avg_local, 4),
            "critical_questions_completed": critical_completed,
        },
    }

    logger.info(
        "Report built for session %s: risk_level=%s, progress=%s",
        session.session_id,
        report["session"]["risk_level"],
        report["session"]["progress"],
    )
    return report


def render_report_json(report: dict[str, Any]) -> str:
    """Render a report as indented JSON text."""
    return json.dumps(report, indent=2, ensure_ascii=False)
