"""
avi/pipeline.py
================
Interview Pipeline Orchestrator - AVI Interview Engine

Responsibility:
    1. Run each engine stage for one answer, in order
    2. Verify every stage output against its contract
    3. Record the answer in its session once its outputs have passed
    4. Replay a full interview and assemble the final report

This layer MUST NOT:
    - Score, cross-validate or aggregate anything itself
    - Modify stage outputs
    - Infer missing values
    - If something is invalid -> FAIL FAST

Stage execution order (per answer):
    Stage 1: Signal validation   -> ResponseSignal
    Stage 2: Response analysis   -> VoiceAnalysisResult
    Stage 3: Session recording   -> MicroLocalAnalysis + refreshed checks
    Stage 4: Report (on demand)  -> report dict
"""

import logging
from typing import Any, Iterable

from avi.analysis.analyzer import VoiceAnalysisResult, analyze_response
from avi.analysis.signals import build_response_signal
from avi.analysis.simulation import NoiseSource
from avi.catalog.avi_questions import load_default_catalog
from avi.catalog.questions import QuestionCatalog
from avi.contract_validator import (
    verify_consistency_check,
    verify_micro_analysis,
    verify_report,
    verify_summary,
    verify_voice_result,
)
from avi.risk.micro_local import MicroLocalAnalysis
from avi.session.aggregator import DEFAULT_TARGET_QUESTIONS, InterviewSession
from avi.session.report import build_report
from avi.session.summary import summarize_responses

logger = logging.getLogger("avi.pipeline")


def analyze_and_record(
    session: InterviewSession,
    question_id: str,
    payload: dict[str, Any],
    noise: NoiseSource | None = None,
) -> tuple[VoiceAnalysisResult, MicroLocalAnalysis]:
    """
    Run one answer through every stage and append it to the session.

    Args:
        session:     Session receiving the answer.
        question_id: Id of the answered question.
        payload:     Raw answer payload from the transcription layer.
        noise:       Optional placeholder noise source for the analyzer.

    Returns:
        (VoiceAnalysisResult, MicroLocalAnalysis) for the answer.

    Raises:
        SignalValidationError: Malformed payload.
        QuestionNotFound: Unknown question id.
        QuestionAlreadyAnswered: Question already answered in this session.
        ContractVerificationError: A stage output violates its contract.
    """

    # ==================================================================
    # STAGE 1 - Signal validation
    # ==================================================================
    logger.info("=" * 60)
    logger.info("STAGE 1: Signal validation (question=%s)", question_id)
    logger.info("=" * 60)

    signal = build_response_signal(payload)

    # ==================================================================
    # STAGE 2 - Response analysis
    # ==================================================================
    logger.info("=" * 60)
    logger.info("STAGE 2: Response analysis")
    logger.info("=" * 60)

    result = analyze_response(question_id, signal, session.catalog, noise=noise)
    verify_voice_result(result)

    # ==================================================================
    # STAGE 3 - Session recording (micro-local + consistency)
    # ==================================================================
    logger.info("=" * 60)
    logger.info("STAGE 3: Session recording (session=%s)", session.session_id)
    logger.info("=" * 60)

    # Verify before committing: a rejected answer never reaches the session
    pending = session.evaluate(result)
    verify_micro_analysis(pending.analysis)
    for check in pending.consistency_checks:
        verify_consistency_check(check)
    analysis = session.commit(pending)

    logger.info(
        "Answer %s recorded: voice_score=%.3f local_risk=%.3f progress=%d/%d",
        question_id,
        result.voice_score,
        analysis.local_risk_score,
        session.completed_questions,
        session.total_questions,
    )
    return result, analysis


def session_report(session: InterviewSession) -> dict[str, Any]:
    """Build and verify the report for a session (Stage 4)."""
    logger.info("=" * 60)
    logger.info("STAGE 4: Report assembly (session=%s)", session.session_id)
    logger.info("=" * 60)

    report = build_report(session)
    verify_report(report)
    return report


def session_summary(session: InterviewSession) -> dict[str, Any]:
    """Build and verify the voice-only summary for a session."""
    summary = summarize_responses(session.results, session.catalog)
    verify_summary(summary)
    return summary


def run_interview(
    answers: Iterable[tuple[str, dict[str, Any]]],
    catalog: QuestionCatalog | None = None,
    target_total: int = DEFAULT_TARGET_QUESTIONS,
    noise: NoiseSource | None = None,
    session_id: str | None = None,
) -> dict[str, Any]:
    """
    Replay a full interview and return its verified report.

    Args:
        answers:      Ordered (question_id, payload) pairs.
        catalog:      Question catalog. Defaults to the 55-question set.
        target_total: Target number of questions for the session.
        noise:        Optional placeholder noise source for the analyzer.
        session_id:   Optional fixed session id.

    Returns:
        The final report dict.
    """
    if catalog is None:
        catalog = load_default_catalog()

    session = InterviewSession(catalog, total_questions=target_total, session_id=session_id)
    for question_id, payload in answers:
        analyze_and_record(session, question_id, payload, noise=noise)

    report = session_report(session)
    logger.info(
        "Interview complete: %d answer(s), risk_level=%s",
        session.completed_questions,
        report["session"]["risk_level"],
    )
    return report
