"""
avi/risk/micro_local.py
========================
Micro-Local Risk Engine - AVI Interview Engine

Responsibility:
    - Accept the VoiceAnalysisResult of the current answer and the ordered
      results of every answer given before it in the same session
    - Compute a local risk score (voice score adjusted for criticality,
      stress and risk flags)
    - Cross-validate against related prior answers (same category or a
      shared verification trigger)
    - Raise coherency flags for sudden score swings, stress that does not
      fit the question's difficulty, and timing anomalies
    - Recommend follow-ups (predefined + dynamic)

Ordering matters: the same answer scores differently depending on what was
said before it. Callers pass history as an ordered, read-only sequence and
never edit it afterwards.

This module does NOT:
    - Score raw signals (that is analysis/analyzer.py)
    - Evaluate fixed question pairs (that is consistency.py)
    - Store or mutate session state
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from avi.analysis.analyzer import VoiceAnalysisResult
from avi.catalog.questions import Category, Question, QuestionCatalog

logger = logging.getLogger("avi.risk.micro_local")


# ---------------------------------------------------------------------------
# Tunable constants
# ---------------------------------------------------------------------------

CRITICAL_LOW_SCORE: float = 0.6
CRITICAL_PENALTY_FACTOR: float = 0.7
STRESS_PENALTY_SCALE: float = 0.2
FLAG_PENALTY: float = 0.1

NEUTRAL_CROSS_VALIDATION: float = 0.8
CROSS_VALIDATION_FLOOR: float = 0.2
DEVIATION_WEIGHT: float = 0.5
RECURRING_STRESS_FACTOR: float = 0.9

DRASTIC_CHANGE_THRESHOLD: float = 0.4
RECENT_WINDOW: int = 3
EXCESSIVE_TIME_FACTOR: float = 3.0
TOO_FAST_FACTOR: float = 0.2


# ---------------------------------------------------------------------------
# Result structure
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class MicroLocalAnalysis:
    """Per-answer risk assessment relative to the session history."""

    question_id: str
    category: Category
    local_risk_score: float
    cross_validation_score: float
    coherency_flags: tuple[str, ...]
    recommended_follow_up: tuple[str, ...]
    verification_triggers: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "category": self.category.value,
            "local_risk_score": self.local_risk_score,
            "cross_validation_score": self.cross_validation_score,
            "coherency_flags": list(self.coherency_flags),
            "recommended_follow_up": list(self.recommended_follow_up),
            "verification_triggers": list(self.verification_triggers),
        }


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


# ---------------------------------------------------------------------------
# Component calculators
# ---------------------------------------------------------------------------


def _local_risk_score(
    result: VoiceAnalysisResult,
    question: Question,
    flag_penalty: float = FLAG_PENALTY,
) -> float:
    """
    Voice score adjusted for criticality, stress and flags.

    Lower is riskier. Critical questions answered poorly take a
    multiplicative penalty, repeated stress scales with the question's
    stress level, and every risk flag subtracts a flat amount.
    """
    score = result.voice_score

    if question.is_critical and result.voice_score < CRITICAL_LOW_SCORE:
        score *= CRITICAL_PENALTY_FACTOR

    if len(result.stress_indicators) >= 2:
        stress_factor = question.stress_level / 5.0
        score *= 1.0 - stress_factor * STRESS_PENALTY_SCALE

    score -= len(result.risk_flags) * flag_penalty
    return _clamp(score)


def _is_related(current: Question, other: Question) -> bool:
    if other.category == current.category:
        return True
    return any(t in other.verification_triggers for t in current.verification_triggers)


def _cross_validation_score(
    result: VoiceAnalysisResult,
    question: Question,
    previous: Sequence[VoiceAnalysisResult],
    catalog: QuestionCatalog,
    neutral: float = NEUTRAL_CROSS_VALIDATION,
) -> float:
    if not previous:
        return neutral

    related: list[VoiceAnalysisResult] = []
    for prev in previous:
        prev_question = catalog.find(prev.question_id)
        if prev_question is not None and _is_related(question, prev_question):
            related.append(prev)

    if not related:
        return neutral

    avg_related = sum(r.voice_score for r in related) / len(related)
    score = neutral - abs(result.voice_score - avg_related) * DEVIATION_WEIGHT

    recurring = sum(
        1
        for indicator in result.stress_indicators
        if any(indicator in r.stress_indicators for r in related)
    )
    if recurring >= 2:
        score *= RECURRING_STRESS_FACTOR

    return _clamp(score, CROSS_VALIDATION_FLOOR, 1.0)


def _coherency_flags(
    result: VoiceAnalysisResult,
    question: Question,
    previous: Sequence[VoiceAnalysisResult],
    drastic_change_threshold: float = DRASTIC_CHANGE_THRESHOLD,
) -> tuple[str, ...]:
    flags: list[str] = []

    if previous:
        recent = previous[-RECENT_WINDOW:]
        recent_avg = sum(r.voice_score for r in recent) / len(recent)
        if abs(result.voice_score - recent_avg) > drastic_change_threshold:
            flags.append("drastic_score_change")

    indicator_count = len(result.stress_indicators)
    if question.stress_level <= 2 and indicator_count >= 2:
        flags.append("unexpected_stress_on_easy_question")
    if question.is_high_stress and indicator_count == 0:
        flags.append("suspicious_calm_on_stressful_question")

    # response_time == 0 means the timing was not captured
    expected = question.analytics.expected_response_time
    if result.response_time > expected * EXCESSIVE_TIME_FACTOR:
        flags.append("excessive_response_time")
    elif 0.0 < result.response_time < expected * TOO_FAST_FACTOR:
        flags.append("suspiciously_fast_response")

    return tuple(flags)


def _follow_up_recommendations(
    result: VoiceAnalysisResult,
    question: Question,
) -> tuple[str, ...]:
    recommendations: list[str] = list(question.follow_up_questions)

    if "low_score" in result.risk_flags:
        recommendations.append("Ask for the reasons behind the evasive answer")
        recommendations.append("Verify the information with external sources")

    if len(result.stress_indicators) >= 2:
        recommendations.append("Repeat the question in a more casual way")
        recommendations.append("Ask cross-verification questions")

    if question.is_critical and result.voice_score < CRITICAL_LOW_SCORE:
        recommendations.append("Critical question: consider re-evaluation")
        recommendations.append("Request supporting documentation")

    return tuple(recommendations)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def perform_micro_local_analysis(
    result: VoiceAnalysisResult,
    previous: Sequence[VoiceAnalysisResult],
    catalog: QuestionCatalog,
    neutral_cross_validation: float = NEUTRAL_CROSS_VALIDATION,
    drastic_change_threshold: float = DRASTIC_CHANGE_THRESHOLD,
    flag_penalty: float = FLAG_PENALTY,
) -> MicroLocalAnalysis:
    """
    Assess one answer against the answers that came before it.

    Args:
        result:
            The current answer's VoiceAnalysisResult.
        previous:
            Every earlier result in the same session, in answer order.
        catalog:
            Question catalog used to resolve ids.
        neutral_cross_validation:
            Cross-validation score when no related answer exists yet.
            Must lie in [CROSS_VALIDATION_FLOOR, 1].
        drastic_change_threshold:
            Gap from the recent average that raises drastic_score_change.
        flag_penalty:
            Local risk deducted per risk flag.

    Returns:
        MicroLocalAnalysis for the current answer.

    Raises:
        QuestionNotFound: If result.question_id is not in the catalog.
        ValueError: If neutral_cross_validation is out of range.
    """
    if not CROSS_VALIDATION_FLOOR <= neutral_cross_validation <= 1.0:
        raise ValueError(
            f"neutral_cross_validation must be in [{CROSS_VALIDATION_FLOOR}, 1], "
            f"got {neutral_cross_validation}"
        )

    question = catalog.get(result.question_id)

    analysis = MicroLocalAnalysis(
        question_id=result.question_id,
        category=question.category,
        local_risk_score=_local_risk_score(result, question, flag_penalty),
        cross_validation_score=_cross_validation_score(
            result, question, previous, catalog, neutral_cross_validation
        ),
        coherency_flags=_coherency_flags(
            result, question, previous, drastic_change_threshold
        ),
        recommended_follow_up=_follow_up_recommendations(result, question),
        verification_triggers=question.verification_triggers,
    )

    logger.info(
        "Micro-local analysis: question=%s local=%.3f cross=%.3f flags=%s",
        analysis.question_id,
        analysis.local_risk_score,
        analysis.cross_validation_score,
        list(analysis.coherency_flags),
    )
    return analysis
