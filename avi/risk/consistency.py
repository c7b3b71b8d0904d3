"""
avi/risk/consistency.py
========================
Consistency Checker - AVI Interview Engine

Responsibility:
    - Evaluate a fixed list of question pairs whose answers are expected
      to agree (e.g. age vs. years in the route)
    - Score pairwise agreement from voice-score similarity and shared
      stress indicators, independent of interview order
    - Flag severe / moderate inconsistencies and contradictory stress
      patterns, and suggest how to investigate them

A pair is checked only once both of its questions have been answered.

This module does NOT:
    - Look up catalog metadata (pairs are defined here, outside the catalog)
    - Compute per-answer risk (that is micro_local.py)
    - Compare declared numeric amounts (that is session/financial.py)
"""

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Sequence

from avi.analysis.analyzer import VoiceAnalysisResult

logger = logging.getLogger("avi.risk.consistency")


# ---------------------------------------------------------------------------
# Question pairs expected to correlate
# ---------------------------------------------------------------------------

CONSISTENCY_PAIRS: tuple[tuple[str, str], ...] = (
    ("ingresos_promedio_diarios", "vueltas_por_dia"),
    ("gasto_diario_gasolina", "vueltas_por_tanque"),
    ("edad", "anos_en_ruta"),
    ("tipo_operacion", "valor_unidad_transporte"),
    ("creditos_anteriores", "problemas_pagos"),
)

SCORE_DIFF_WEIGHT: float = 0.8
SHARED_STRESS_BONUS: float = 0.1
CONSISTENCY_FLOOR: float = 0.2

SEVERE_THRESHOLD: float = 0.4
MODERATE_THRESHOLD: float = 0.6
INVESTIGATION_THRESHOLD: float = 0.5
HIGH_STRESS_INDICATORS: int = 2

_FAILURE_FLAGS: tuple[str, ...] = ("severe_inconsistency", "moderate_inconsistency")


@dataclass(frozen=True)
class ConsistencyCheck:
    """Agreement assessment for one answered question pair."""

    question_pair: tuple[str, str]
    consistency_score: float
    inconsistency_flags: tuple[str, ...]
    suggested_investigation: tuple[str, ...]

    @property
    def failed(self) -> bool:
        return any(f in _FAILURE_FLAGS for f in self.inconsistency_flags)

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_pair": list(self.question_pair),
            "consistency_score": self.consistency_score,
            "inconsistency_flags": list(self.inconsistency_flags),
            "suggested_investigation": list(self.suggested_investigation),
        }


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _pair_consistency(first: VoiceAnalysisResult, second: VoiceAnalysisResult) -> float:
    base = 1.0 - abs(first.voice_score - second.voice_score) * SCORE_DIFF_WEIGHT
    shared = [s for s in first.stress_indicators if s in second.stress_indicators]
    bonus = len(shared) * SHARED_STRESS_BONUS
    return max(CONSISTENCY_FLOOR, min(1.0, base + bonus))


def _consistency_flags(
    first: VoiceAnalysisResult,
    second: VoiceAnalysisResult,
    score: float,
    severe_threshold: float = SEVERE_THRESHOLD,
    moderate_threshold: float = MODERATE_THRESHOLD,
) -> tuple[str, ...]:
    flags: list[str] = []

    if score < severe_threshold:
        flags.append("severe_inconsistency")
    elif score < moderate_threshold:
        flags.append("moderate_inconsistency")

    high_stress_first = len(first.stress_indicators) >= HIGH_STRESS_INDICATORS
    high_stress_second = len(second.stress_indicators) >= HIGH_STRESS_INDICATORS
    if high_stress_first != high_stress_second:
        flags.append("contradictory_stress_pattern")

    return tuple(flags)


def _suggest_investigation(
    pair: tuple[str, str],
    score: float,
    flags: tuple[str, ...],
) -> tuple[str, ...]:
    suggestions: list[str] = []

    if score < INVESTIGATION_THRESHOLD:
        suggestions.append(f"Investigate the discrepancy between {pair[0]} and {pair[1]}")
        suggestions.append("Request clarification or supporting documentation")

    if "contradictory_stress_pattern" in flags:
        suggestions.append("Re-ask both questions in a different order to verify consistency")

    return tuple(suggestions)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def check_pair(
    pair: tuple[str, str],
    first: VoiceAnalysisResult,
    second: VoiceAnalysisResult,
    severe_threshold: float = SEVERE_THRESHOLD,
    moderate_threshold: float = MODERATE_THRESHOLD,
) -> ConsistencyCheck:
    """Score the agreement of two answers forming a consistency pair."""
    if severe_threshold > moderate_threshold:
        raise ValueError(
            f"severe_threshold ({severe_threshold}) must not exceed "
            f"moderate_threshold ({moderate_threshold})"
        )
    score = _pair_consistency(first, second)
    flags = _consistency_flags(first, second, score, severe_threshold, moderate_threshold)
    return ConsistencyCheck(
        question_pair=(pair[0], pair[1]),
        consistency_score=score,
        inconsistency_flags=flags,
        suggested_investigation=_suggest_investigation(pair, score, flags),
    )


def perform_consistency_checks(
    results: Sequence[VoiceAnalysisResult],
    pairs: Iterable[tuple[str, str]] = CONSISTENCY_PAIRS,
    severe_threshold: float = SEVERE_THRESHOLD,
    moderate_threshold: float = MODERATE_THRESHOLD,
) -> list[ConsistencyCheck]:
    """
    Check every configured pair whose questions have both been answered.

    Args:
        results:            All results gathered so far (order is irrelevant).
        pairs:              Question-id pairs expected to correlate.
        severe_threshold:   Score below which a pair is a severe inconsistency.
        moderate_threshold: Score below which a pair counts as failed.

    Raises:
        ValueError: If severe_threshold exceeds moderate_threshold.

    Returns:
        One ConsistencyCheck per fully answered pair, in pair order.
    """
    by_id: dict[str, VoiceAnalysisResult] = {}
    for r in results:
        by_id.setdefault(r.question_id, r)

    checks: list[ConsistencyCheck] = []
    for pair in pairs:
        first = by_id.get(pair[0])
        second = by_id.get(pair[1])
        if first is None or second is None:
            continue
        check = check_pair(pair, first, second, severe_threshold, moderate_threshold)
        checks.append(check)

        if check.inconsistency_flags:
            logger.info(
                "Consistency pair %s/%s: score=%.3f flags=%s",
                pair[0], pair[1], check.consistency_score,
                list(check.inconsistency_flags),
            )

    logger.debug("%d consistency check(s) performed.", len(checks))
    return checks
