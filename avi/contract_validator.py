"""
avi/contract_validator.py
==========================
Stage Output Validator - AVI Interview Engine

Responsibility:
    - Validate the output of each engine stage (analysis -> micro-local
      -> consistency -> report, plus the voice-only summary)
    - Ensure stage outputs conform to their declared ranges and keys
    - FAIL FAST with clear errors if any stage output is invalid
    - NO auto-correction - if something is out of range, raise an error

This module does NOT:
    - Execute any stage logic
    - Modify stage outputs
    - Infer missing values
"""

import logging
from typing import Any

from avi.analysis.analyzer import VoiceAnalysisResult
from avi.risk.consistency import ConsistencyCheck
from avi.risk.micro_local import MicroLocalAnalysis

logger = logging.getLogger("avi.contract_validator")


# =====================================================================
# Custom exception for stage verification failures
# =====================================================================


class ContractVerificationError(Exception):
    """Raised when a stage output fails verification."""

    def __init__(self, stage: str, message: str):
        self.stage = stage
        self.message = message
        super().__init__(f"Stage {stage} verification failed: {message}")


_VALID_RISK_LEVELS: set[str] = {"LOW", "MEDIUM", "HIGH"}
_VALID_DECISIONS: set[str] = {"GO", "REVIEW", "NO-GO"}


def _check_unit_range(stage: str, name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ContractVerificationError(
            stage, f"{name} is not numeric: {type(value).__name__}"
        )
    if value < 0.0 or value > 1.0:
        raise ContractVerificationError(stage, f"{name} out of range [0, 1]: {value}")


def _check_str_tuple(stage: str, name: str, value: Any) -> None:
    if not isinstance(value, tuple) or not all(isinstance(v, str) for v in value):
        raise ContractVerificationError(stage, f"{name} must be a tuple of strings")


# =====================================================================
# Response analysis
# =====================================================================


def verify_voice_result(result: VoiceAnalysisResult) -> None:
    """
    Verify a VoiceAnalysisResult.

    Checks:
        - voice_score and all five metrics are in [0, 1]
        - response_time is non-negative
        - indicator, keyword and flag collections are string tuples
        - decision is GO, REVIEW or NO-GO

    Raises:
        ContractVerificationError: If any check fails.
    """
    if not isinstance(result, VoiceAnalysisResult):
        raise ContractVerificationError(
            "analysis", f"Expected VoiceAnalysisResult, got {type(result).__name__}"
        )

    _check_unit_range("analysis", "voice_score", result.voice_score)
    for name, value in result.analysis_metrics.to_dict().items():
        _check_unit_range("analysis", name, value)

    if result.response_time < 0.0:
        raise ContractVerificationError(
            "analysis", f"response_time is negative: {result.response_time}"
        )

    _check_str_tuple("analysis", "stress_indicators", result.stress_indicators)
    _check_str_tuple(
        "analysis", "truth_verification_keywords", result.truth_verification_keywords
    )
    _check_str_tuple("analysis", "risk_flags", result.risk_flags)

    if result.decision not in _VALID_DECISIONS:
        raise ContractVerificationError(
            "analysis", f"Invalid decision: {result.decision!r}"
        )

    logger.debug(
        "Analysis verification passed: question=%s score=%.3f",
        result.question_id, result.voice_score,
    )


# =====================================================================
# Micro-local analysis
# =====================================================================


def verify_micro_analysis(analysis: MicroLocalAnalysis) -> None:
    """
    Verify a MicroLocalAnalysis.

    Checks:
        - local_risk_score is in [0, 1]
        - cross_validation_score is in [0.2, 1]
        - flag and follow-up collections are string tuples

    Raises:
        ContractVerificationError: If any check fails.
    """
    if not isinstance(analysis, MicroLocalAnalysis):
        raise ContractVerificationError(
            "micro_local", f"Expected MicroLocalAnalysis, got {type(analysis).__name__}"
        )

    _check_unit_range("micro_local", "local_risk_score", analysis.local_risk_score)
    _check_unit_range(
        "micro_local", "cross_validation_score", analysis.cross_validation_score
    )
    if analysis.cross_validation_score < 0.2:
        raise ContractVerificationError(
            "micro_local",
            f"cross_validation_score below floor 0.2: {analysis.cross_validation_score}",
        )

    _check_str_tuple("micro_local", "coherency_flags", analysis.coherency_flags)
    _check_str_tuple("micro_local", "recommended_follow_up", analysis.recommended_follow_up)

    logger.debug(
        "Micro-local verification passed: question=%s local=%.3f cross=%.3f",
        analysis.question_id,
        analysis.local_risk_score,
        analysis.cross_validation_score,
    )


# =====================================================================
# Consistency checks
# =====================================================================


def verify_consistency_check(check: ConsistencyCheck) -> None:
    """
    Verify a ConsistencyCheck.

    Checks:
        - question_pair holds two distinct ids
        - consistency_score is in [0.2, 1]

    Raises:
        ContractVerificationError: If any check fails.
    """
    if not isinstance(check, ConsistencyCheck):
        raise ContractVerificationError(
            "consistency", f"Expected ConsistencyCheck, got {type(check).__name__}"
        )

    if len(check.question_pair) != 2 or check.question_pair[0] == check.question_pair[1]:
        raise ContractVerificationError(
            "consistency", f"Invalid question pair: {check.question_pair!r}"
        )

    _check_unit_range("consistency", "consistency_score", check.consistency_score)
    if check.consistency_score < 0.2:
        raise ContractVerificationError(
            "consistency",
            f"consistency_score below floor 0.2: {check.consistency_score}",
        )

    _check_str_tuple("consistency", "inconsistency_flags", check.inconsistency_flags)


# =====================================================================
# Report
# =====================================================================

_REPORT_SECTIONS: tuple[str, ...] = (
    "session",
    "category_analysis",
    "risk_areas",
    "consistency_issues",
    "recommendations",
    "summary",
)


def verify_report(report: dict[str, Any]) -> None:
    """
    Verify a session report.

    Checks:
        - All top-level sections are present
        - session has id, progress, overall_coherence and risk_level
        - overall_coherence is in [0, 1]
        - every risk level is LOW, MEDIUM or HIGH

    Raises:
        ContractVerificationError: If any check fails.
    """
    if not isinstance(report, dict):
        raise ContractVerificationError(
            "report", f"Expected dict, got {type(report).__name__}"
        )

    for key in _REPORT_SECTIONS:
        if key not in report:
            raise ContractVerificationError("report", f"Missing section '{key}'")

    session = report["session"]
    for key in ("id", "progress", "overall_coherence", "risk_level"):
        if key not in session:
            raise ContractVerificationError("report", f"session missing key '{key}'")

    _check_unit_range("report", "overall_coherence", session["overall_coherence"])

    if session["risk_level"] not in _VALID_RISK_LEVELS:
        raise ContractVerificationError(
            "report", f"Invalid risk_level: {session['risk_level']!r}"
        )

    for category, perf in report["category_analysis"].items():
        if perf.get("risk_level") not in _VALID_RISK_LEVELS:
            raise ContractVerificationError(
                "report", f"Invalid risk_level for category {category!r}: "
                f"{perf.get('risk_level')!r}"
            )

    logger.info(
        "Report verification passed: session=%s risk_level=%s",
        session["id"], session["risk_level"],
    )


# =====================================================================
# Response summary
# =====================================================================


def verify_summary(summary: dict[str, Any]) -> None:
    """
    Verify a voice-only response summary.

    Checks:
        - overall_score is in [0, 1]
        - risk_level is LOW, MEDIUM or HIGH
        - decision is GO, REVIEW or NO-GO

    Raises:
        ContractVerificationError: If any check fails.
    """
    if not isinstance(summary, dict):
        raise ContractVerificationError(
            "summary", f"Expected dict, got {type(summary).__name__}"
        )

    for key in ("overall_score", "risk_level", "decision", "flags"):
        if key not in summary:
            raise ContractVerificationError("summary", f"Missing key '{key}'")

    _check_unit_range("summary", "overall_score", summary["overall_score"])

    if summary["risk_level"] not in _VALID_RISK_LEVELS:
        raise ContractVerificationError(
            "summary", f"Invalid risk_level: {summary['risk_level']!r}"
        )
    if summary["decision"] not in _VALID_DECISIONS:
        raise ContractVerificationError(
            "summary", f"Invalid decision: {summary['decision']!r}"
        )
