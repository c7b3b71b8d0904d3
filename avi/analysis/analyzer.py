"""
avi/analysis/analyzer.py
=========================
Response Analyzer - AVI Interview Engine

Responsibility:
    - Accept a validated ResponseSignal (from signals.py) and the id of the
      question it answers
    - Compute five normalized metrics (latency, pitch variability, energy
      stability, disfluency, honesty lexicon)
    - Detect stress indicators from timing outliers and transcript patterns
    - Combine everything into a single voice score in [0, 1]
    - Derive risk flags from fixed score / indicator thresholds
    - Map score and flags to a GO / REVIEW / NO-GO decision

Scoring philosophy:
    - Start from a fixed baseline, subtract for stress and disfluency,
      add for truth keywords, honest language and steady energy
    - Scale down by question weight: critical questions are harder to
      score well on
    - Every metric and the final score are clamped to [0, 1]
    - Same question + same signal -> same result; the only randomness is
      an optional caller-supplied NoiseSource (see simulation.py)

This module does NOT:
    - Look at other answers in the session (that is risk/micro_local.py)
    - Perform real acoustic processing or speech-to-text
    - Store results
"""

import logging
import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import numpy as np

from avi.analysis.signals import ResponseSignal
from avi.analysis.simulation import NoiseSource
from avi.catalog.questions import Question, QuestionCatalog

logger = logging.getLogger("avi.analysis.analyzer")


# ---------------------------------------------------------------------------
# Tunable constants
# ---------------------------------------------------------------------------

# Seconds of delay beyond the expected time that saturate the latency index
LATENCY_SATURATION_SECONDS: float = 5.0

# Coefficient-of-variation ceilings used to normalize acoustic features
PITCH_CV_CEILING: float = 0.25
ENERGY_CV_CEILING: float = 1.0
DISFLUENCY_DENSITY_CEILING: float = 0.25

# Questions at or above this weight carry a disfluency bias
DISFLUENCY_WEIGHT_BIAS_MIN: int = 8

HONESTY_NO_TRANSCRIPT: float = 0.5
HONESTY_BASELINE: float = 0.7
HONESTY_STEP: float = 0.1

VOICE_SCORE_BASELINE: float = 0.8

# Response-time multiples of the expected time
SLOW_RESPONSE_FACTOR: float = 2.0
DELAYED_RESPONSE_FACTOR: float = 1.5
FAST_RESPONSE_FACTOR: float = 0.3

# Simulated nervousness (only with an injected NoiseSource)
NERVOUSNESS_MIN_STRESS: int = 4
NERVOUSNESS_DRAW_THRESHOLD: float = 0.6

EVASIVE_PHRASES: tuple[str, ...] = (
    "no_se",
    "tal_vez",
    "creo_que",
    "posiblemente",
    "quizas",
)

FILLER_WORDS: frozenset[str] = frozenset({
    "eh", "ehh", "em", "emm", "mm", "mmm", "este", "pues", "ah",
})

# Per-answer decision bands
DECISION_GO_MIN_SCORE: float = 0.75
DECISION_NO_GO_BELOW: float = 0.5
_NO_GO_FLAGS: tuple[str, ...] = ("critical_question_low_score", "evasion_detected")

# Catalog stress patterns that escalate into their own risk flag
_PATTERN_FLAGS: dict[str, str] = {
    "nerviosismo_extremo": "extreme_nervousness",
    "evasion_total": "evasion_detected",
}


# ---------------------------------------------------------------------------
# Result structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class AnalysisMetrics:
    """Normalized per-response metrics, each in [0, 1]."""

    latency_index: float
    pitch_variability: float
    energy_stability: float
    disfluency_rate: float
    honesty_lexicon: float

    def to_dict(self) -> dict[str, float]:
        return {
            "latency_index": self.latency_index,
            "pitch_variability": self.pitch_variability,
            "energy_stability": self.energy_stability,
            "disfluency_rate": self.disfluency_rate,
            "honesty_lexicon": self.honesty_lexicon,
        }


@dataclass(frozen=True)
class VoiceAnalysisResult:
    """Scored answer to one catalog question."""

    question_id: str
    voice_score: float
    stress_indicators: tuple[str, ...]
    truth_verification_keywords: tuple[str, ...]
    risk_flags: tuple[str, ...]
    response_time: float
    analysis_metrics: AnalysisMetrics
    declared_value: float | None = None  # first amount spoken, if any

    @property
    def decision(self) -> str:
        return decide_response(self.voice_score, self.risk_flags)

    def to_dict(self) -> dict[str, Any]:
        return {
            "question_id": self.question_id,
            "voice_score": self.voice_score,
            "stress_indicators": list(self.stress_indicators),
            "truth_verification_keywords": list(self.truth_verification_keywords),
            "risk_flags": list(self.risk_flags),
            "response_time": self.response_time,
            "analysis_metrics": self.analysis_metrics.to_dict(),
            "declared_value": self.declared_value,
            "decision": self.decision,
        }


# ---------------------------------------------------------------------------
# Text helpers
# ---------------------------------------------------------------------------


def _clamp(value: float, low: float = 0.0, high: float = 1.0) -> float:
    return max(low, min(high, value))


def _normalize_text(text: str) -> str:
    """Lowercase and strip accents so 'Quizás' matches 'quizas'."""
    decomposed = unicodedata.normalize("NFKD", text.lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))


@lru_cache(maxsize=1024)
def _tag_pattern(tag: str) -> re.Pattern[str]:
    """Compile a snake_case tag into a word-bounded phrase regex."""
    parts = [re.escape(p) for p in _normalize_text(tag).split("_") if p]
    return re.compile(r"\b" + r"\s+".join(parts) + r"\b")


def _matching_tags(tags: tuple[str, ...], normalized_text: str) -> list[str]:
    """Tags whose phrase occurs in the text, in tag order, deduplicated."""
    matched: list[str] = []
    for tag in tags:
        if tag not in matched and _tag_pattern(tag).search(normalized_text):
            matched.append(tag)
    return matched


_AMOUNT_PATTERN = re.compile(r"(\d+(?:[.,]\d+)*)\s*(mil\b)?")
_AMOUNT_SEPARATOR = re.compile(r"[.,]")


def _parse_amount(token: str) -> float:
    """
    Read a number written with either separator convention.

    A '.' or ',' followed by exactly three digits groups thousands
    ('2.500', '1,500', '1.250.000'). Otherwise the last separator is the
    decimal mark ('12,50', '2.5', '1.250,50').
    """
    groups = _AMOUNT_SEPARATOR.split(token)
    if len(groups) == 1:
        return float(token)
    if len(groups[-1]) == 3:
        return float("".join(groups))
    return float("".join(groups[:-1]) + "." + groups[-1])


def _extract_declared_value(normalized_text: str | None) -> float | None:
    """First numeric amount in the transcript ('2 mil' -> 2000.0)."""
    if not normalized_text:
        return None
    match = _AMOUNT_PATTERN.search(normalized_text)
    if match is None:
        return None
    value = _parse_amount(match.group(1))
    if match.group(2):
        value *= 1000.0
    return value


# ---------------------------------------------------------------------------
# Metric calculators - each returns a value in [0, 1]
# ---------------------------------------------------------------------------


def _latency_index(
    question: Question,
    response_time: float | None,
    saturation: float = LATENCY_SATURATION_SECONDS,
) -> float:
    if not response_time:
        return 0.0
    excess = max(0.0, response_time - question.analytics.expected_response_time)
    return _clamp(excess / saturation)


def _coefficient_of_variation(samples: np.ndarray) -> float | None:
    if samples.size < 2:
        return None
    mean = float(np.mean(samples))
    if mean <= 0.0:
        return None
    return float(np.std(samples)) / mean


def _pitch_variability(
    question: Question,
    signal: ResponseSignal,
    noise: NoiseSource | None,
) -> float:
    """
    Stress-level bias plus measured pitch jitter.

    Higher configured stress pushes variability up. Jitter comes from the
    coefficient of variation of voiced pitch samples; without usable pitch
    data it falls back to the noise source (or zero).
    """
    pitch = np.asarray(signal.pitch_series, dtype=float)
    cv = _coefficient_of_variation(pitch[pitch > 0.0])
    if cv is not None:
        jitter = _clamp(cv / PITCH_CV_CEILING)
    elif noise is not None:
        jitter = noise.draw()
    else:
        jitter = 0.0
    return _clamp(question.stress_level * 0.1 + jitter * 0.3)


def _energy_stability(question: Question, signal: ResponseSignal) -> float:
    base = max(0.2, 1.0 - question.stress_level * 0.15)
    cv = _coefficient_of_variation(np.asarray(signal.energy_series, dtype=float))
    if cv is None:
        return _clamp(base)
    measured = 1.0 - _clamp(cv / ENERGY_CV_CEILING)
    return _clamp(0.5 * base + 0.5 * measured)


def _disfluency_rate(
    question: Question,
    signal: ResponseSignal,
    normalized_text: str | None,
    noise: NoiseSource | None,
) -> float:
    if signal.words:
        tokens = [_normalize_text(w) for w in signal.words]
    elif normalized_text:
        tokens = re.findall(r"\w+", normalized_text)
    else:
        tokens = []

    if tokens:
        if signal.disfluency_count is not None:
            count = signal.disfluency_count
        else:
            count = sum(1 for t in tokens if t in FILLER_WORDS)
        density = count / len(tokens)
        measured = _clamp(density / DISFLUENCY_DENSITY_CEILING)
    elif noise is not None:
        measured = noise.draw()
    else:
        measured = 0.0

    bias = 0.1 if question.weight >= DISFLUENCY_WEIGHT_BIAS_MIN else 0.0
    return _clamp(measured * 0.2 + bias)


def _honesty_lexicon(
    question: Question,
    normalized_text: str | None,
    evasive_phrases: tuple[str, ...] = EVASIVE_PHRASES,
) -> float:
    if not normalized_text:
        return HONESTY_NO_TRANSCRIPT

    truth_matches = len(
        _matching_tags(question.analytics.truth_verification_keywords, normalized_text)
    )
    evasive_matches = len(_matching_tags(tuple(evasive_phrases), normalized_text))

    score = HONESTY_BASELINE + truth_matches * HONESTY_STEP - evasive_matches * HONESTY_STEP
    return _clamp(score)


# ---------------------------------------------------------------------------
# Indicators, score, flags
# ---------------------------------------------------------------------------


def _detect_stress_indicators(
    question: Question,
    response_time: float | None,
    normalized_text: str | None,
    noise: NoiseSource | None,
) -> tuple[str, ...]:
    indicators: list[str] = []
    expected = question.analytics.expected_response_time

    if response_time:
        if response_time > expected * SLOW_RESPONSE_FACTOR:
            indicators.append("response_too_slow")
        elif response_time > expected * DELAYED_RESPONSE_FACTOR:
            indicators.append("response_delayed")
        elif response_time < expected * FAST_RESPONSE_FACTOR:
            indicators.append("response_suspiciously_fast")

    if normalized_text:
        for tag in _matching_tags(
            question.analytics.stress_indicator_patterns, normalized_text
        ):
            if tag not in indicators:
                indicators.append(tag)

    if (
        noise is not None
        and question.stress_level >= NERVOUSNESS_MIN_STRESS
        and noise.draw() > NERVOUSNESS_DRAW_THRESHOLD
    ):
        indicators.append("nervousness_detected")

    return tuple(indicators)


def _compute_voice_score(
    question: Question,
    metrics: AnalysisMetrics,
    stress_count: int,
    truth_count: int,
    baseline: float = VOICE_SCORE_BASELINE,
) -> float:
    score = baseline
    score -= stress_count * 0.1
    score += truth_count * 0.05
    score -= metrics.latency_index * 0.2
    score -= metrics.disfluency_rate * 0.3
    score += metrics.honesty_lexicon * 0.2
    score -= metrics.pitch_variability * 0.1
    score += metrics.energy_stability * 0.1

    weight_factor = question.weight / 10.0
    score *= 1.0 - weight_factor * 0.2
    return _clamp(score)


def _generate_risk_flags(
    question: Question,
    voice_score: float,
    stress_indicators: tuple[str, ...],
) -> tuple[str, ...]:
    flags: list[str] = []

    if voice_score < 0.3:
        flags.append("very_low_score")
    if voice_score < 0.5:
        flags.append("low_score")
    if len(stress_indicators) >= 3:
        flags.append("multiple_stress_indicators")

    for pattern, flag in _PATTERN_FLAGS.items():
        if pattern in stress_indicators:
            flags.append(flag)

    if question.is_critical and voice_score < 0.6:
        flags.append("critical_question_low_score")
    if question.is_high_stress and len(stress_indicators) >= 2:
        flags.append("high_tension_on_stressful_question")

    return tuple(flags)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def decide_response(voice_score: float, risk_flags: tuple[str, ...]) -> str:
    """
    GO / REVIEW / NO-GO for a single answer.

    NO-GO below DECISION_NO_GO_BELOW or on a blocking flag; GO from
    DECISION_GO_MIN_SCORE with no risk flags; REVIEW otherwise.
    """
    if voice_score < DECISION_NO_GO_BELOW or any(f in _NO_GO_FLAGS for f in risk_flags):
        return "NO-GO"
    if voice_score >= DECISION_GO_MIN_SCORE and not risk_flags:
        return "GO"
    return "REVIEW"


def analyze_response(
    question_id: str,
    signal: ResponseSignal,
    catalog: QuestionCatalog,
    noise: NoiseSource | None = None,
    score_baseline: float = VOICE_SCORE_BASELINE,
    latency_saturation: float = LATENCY_SATURATION_SECONDS,
    evasive_phrases: tuple[str, ...] = EVASIVE_PHRASES,
) -> VoiceAnalysisResult:
    """
    Score one spoken answer against its catalog question.

    Steps:
        1. Resolve the question (fail fast on unknown ids)
        2. Compute the five normalized metrics
        3. Detect stress indicators and truth keywords
        4. Compute the weight-scaled voice score
        5. Derive risk flags

    Args:
        question_id:
            Id of the answered question.
        signal:
            Validated raw signal of the answer.
        catalog:
            Question catalog to resolve the id against.
        noise:
            Optional placeholder noise source. When omitted the result is
            fully determined by the inputs.
        score_baseline:
            Starting voice score before adjustments.
        latency_saturation:
            Seconds of delay beyond the expected time that give a latency
            index of 1.0. Must be positive.
        evasive_phrases:
            Snake_case phrases that lower the honesty lexicon.

    Returns:
        VoiceAnalysisResult.

    Raises:
        QuestionNotFound: If question_id is not in the catalog.
        ValueError: If latency_saturation is not positive.
    """
    if latency_saturation <= 0:
        raise ValueError(f"latency_saturation must be > 0, got {latency_saturation}")

    question = catalog.get(question_id)
    normalized_text = _normalize_text(signal.transcript) if signal.transcript else None

    metrics = AnalysisMetrics(
        latency_index=_latency_index(question, signal.response_time, latency_saturation),
        pitch_variability=_pitch_variability(question, signal, noise),
        energy_stability=_energy_stability(question, signal),
        disfluency_rate=_disfluency_rate(question, signal, normalized_text, noise),
        honesty_lexicon=_honesty_lexicon(question, normalized_text, evasive_phrases),
    )

    stress_indicators = _detect_stress_indicators(
        question, signal.response_time, normalized_text, noise
    )
    truth_keywords = (
        tuple(_matching_tags(question.analytics.truth_verification_keywords, normalized_text))
        if normalized_text
        else ()
    )

    voice_score = _compute_voice_score(
        question, metrics, len(stress_indicators), len(truth_keywords), score_baseline
    )
    risk_flags = _generate_risk_flags(question, voice_score, stress_indicators)

    result = VoiceAnalysisResult(
        question_id=question.id,
        voice_score=voice_score,
        stress_indicators=stress_indicators,
        truth_verification_keywords=truth_keywords,
        risk_flags=risk_flags,
        response_time=signal.response_time or 0.0,
        analysis_metrics=metrics,
        declared_value=_extract_declared_value(normalized_text),
    )

    logger.info(
        "Response analyzed: question=%s score=%.3f indicators=%s flags=%s",
        question.id, voice_score, list(stress_indicators), list(risk_flags),
    )
    return result
