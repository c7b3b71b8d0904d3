"""
tests/test_pipeline.py
=======================
Pipeline Orchestrator & Contract Validator Tests

Test categories:
    1. Contract validator (fail fast on out-of-range stage outputs)
    2. Single-answer pipeline (analyze_and_record)
    3. Full interview replay (run_interview)
    4. Voice-only response summary (session_summary)
"""

import os
import sys
import unittest
from dataclasses import replace
from unittest.mock import patch

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from avi.analysis import FixedNoise, SignalValidationError
from avi.catalog import QuestionNotFound, load_default_catalog
from avi.contract_validator import (
    ContractVerificationError,
    verify_consistency_check,
    verify_micro_analysis,
    verify_report,
    verify_summary,
    verify_voice_result,
)
from avi.pipeline import analyze_and_record, run_interview, session_report, session_summary
from avi.session import DECISION_BY_RISK_LEVEL, InterviewSession, QuestionAlreadyAnswered


CATALOG = load_default_catalog()


def _payload(transcript: str = "Unos 2 mil pesos diarios", response_time: float = 6.0) -> dict:
    return {
        "transcript": transcript,
        "response_time_seconds": response_time,
        "acoustic_features": {
            "pitch_series": [120.0, 130.0, 125.0],
            "energy_series": [0.5, 0.6, 0.55],
        },
    }


def _interview() -> list[tuple[str, dict]]:
    return [
        ("nombre_completo", _payload("Me llamo Juan Pérez", 4.0)),
        ("edad", _payload("Tengo 42 años", 3.0)),
        ("anos_en_ruta", _payload("Desde hace 12 años, empecé joven", 5.0)),
        ("vueltas_por_dia", _payload("Hago 10 vueltas", 5.0)),
        ("pasajeros_por_vuelta", _payload("Unos 20 pasajeros", 5.0)),
        ("tarifa_por_pasajero", _payload("10 pesos la tarifa", 3.0)),
        ("ingresos_promedio_diarios", _payload("Como 2 mil pesos al día", 7.0)),
    ]


# ===================================================================
# 1. Contract validator
# ===================================================================

class TestContractValidator(unittest.TestCase):

    def setUp(self):
        self.session = InterviewSession(CATALOG)
        self.result, self.analysis = analyze_and_record(
            self.session, "edad", _payload("Tengo 42 años", 3.0)
        )

    def test_valid_outputs_pass(self):
        verify_voice_result(self.result)
        verify_micro_analysis(self.analysis)
        verify_report(session_report(self.session))

    def test_voice_score_out_of_range(self):
        with self.assertRaises(ContractVerificationError) as ctx:
            verify_voice_result(replace(self.result, voice_score=1.2))
        self.assertEqual(ctx.exception.stage, "analysis")

    def test_negative_response_time(self):
        with self.assertRaises(ContractVerificationError):
            verify_voice_result(replace(self.result, response_time=-1.0))

    def test_wrong_type(self):
        with self.assertRaises(ContractVerificationError):
            verify_voice_result({"voice_score": 0.5})

    def test_cross_validation_below_floor(self):
        with self.assertRaises(ContractVerificationError) as ctx:
            verify_micro_analysis(replace(self.analysis, cross_validation_score=0.1))
        self.assertEqual(ctx.exception.stage, "micro_local")

    def test_consistency_pair_must_be_distinct(self):
        session = InterviewSession(CATALOG)
        analyze_and_record(session, "edad", _payload("Tengo 42 años", 3.0))
        analyze_and_record(session, "anos_en_ruta", _payload("12 años", 5.0))
        check = session.consistency_checks[0]
        verify_consistency_check(check)
        with self.assertRaises(ContractVerificationError):
            verify_consistency_check(replace(check, question_pair=("edad", "edad")))

    def test_report_missing_section(self):
        report = session_report(self.session)
        del report["summary"]
        with self.assertRaises(ContractVerificationError) as ctx:
            verify_report(report)
        self.assertEqual(ctx.exception.stage, "report")

    def test_report_invalid_risk_level(self):
        report = session_report(self.session)
        report["session"]["risk_level"] = "EXTREME"
        with self.assertRaises(ContractVerificationError):
            verify_report(report)


# ===================================================================
# 2. Single answer
# ===================================================================

class TestAnalyzeAndRecord(unittest.TestCase):

    def test_records_answer(self):
        session = InterviewSession(CATALOG)
        result, analysis = analyze_and_record(
            session, "ingresos_promedio_diarios", _payload()
        )
        self.assertEqual(result.question_id, "ingresos_promedio_diarios")
        self.assertEqual(result.declared_value, 2000.0)
        self.assertEqual(analysis.cross_validation_score, 0.8)
        self.assertEqual(session.completed_questions, 1)

    def test_invalid_payload(self):
        session = InterviewSession(CATALOG)
        with self.assertRaises(SignalValidationError):
            analyze_and_record(session, "edad", {"response_time_seconds": -3})
        self.assertEqual(session.completed_questions, 0)

    def test_unknown_question(self):
        session = InterviewSession(CATALOG)
        with self.assertRaises(QuestionNotFound):
            analyze_and_record(session, "no_existe", _payload())
        self.assertEqual(session.completed_questions, 0)

    def test_repeated_question(self):
        session = InterviewSession(CATALOG)
        analyze_and_record(session, "edad", _payload())
        with self.assertRaises(QuestionAlreadyAnswered):
            analyze_and_record(session, "edad", _payload())
        self.assertEqual(session.completed_questions, 1)

    def test_noise_is_passed_through(self):
        session = InterviewSession(CATALOG)
        result, _ = analyze_and_record(
            session, "ingresos_promedio_diarios", {}, noise=FixedNoise(0.9)
        )
        self.assertIn("nervousness_detected", result.stress_indicators)

    @patch("avi.pipeline.verify_micro_analysis")
    def test_rejected_analysis_is_not_recorded(self, mock_verify):
        mock_verify.side_effect = ContractVerificationError("micro_local", "out of range")
        session = InterviewSession(CATALOG)

        with self.assertRaises(ContractVerificationError):
            analyze_and_record(session, "edad", _payload("Tengo 42 años", 3.0))

        mock_verify.assert_called_once()
        self.assertEqual(session.completed_questions, 0)
        self.assertEqual(session.micro_analyses, ())

    def test_rejected_consistency_check_is_not_recorded(self):
        session = InterviewSession(CATALOG)
        analyze_and_record(session, "edad", _payload("Tengo 42 años", 3.0))
        before = session.to_dict()

        with patch(
            "avi.pipeline.verify_consistency_check",
            side_effect=ContractVerificationError("consistency", "bad pair"),
        ):
            with self.assertRaises(ContractVerificationError):
                analyze_and_record(session, "anos_en_ruta", _payload("12 años", 5.0))

        self.assertEqual(session.to_dict(), before)
        self.assertEqual(session.completed_questions, 1)


# ===================================================================
# 3. Full interview
# ===================================================================

class TestRunInterview(unittest.TestCase):

    def test_report_shape(self):
        report = run_interview(_interview(), session_id="replay")
        self.assertEqual(report["session"]["id"], "replay")
        self.assertEqual(report["session"]["progress"], "7/55")
        self.assertIn(report["session"]["risk_level"], ("LOW", "MEDIUM", "HIGH"))

    def test_deterministic(self):
        first = run_interview(_interview(), session_id="same")
        second = run_interview(_interview(), session_id="same")
        self.assertEqual(first, second)

    def test_custom_catalog_and_target(self):
        report = run_interview(_interview()[:2], catalog=CATALOG, target_total=10)
        self.assertEqual(report["session"]["progress"], "2/10")

    def test_financial_answers_are_coherent(self):
        session = InterviewSession(CATALOG)
        for qid, payload in _interview():
            analyze_and_record(session, qid, payload)
        outcome = session.financial_coherence()
        self.assertEqual(outcome.checks_performed, ("income_vs_operation",))
        self.assertTrue(outcome.coherent)

    def test_dotted_thousands_income_is_coherent(self):
        # 10 trips * 25 passengers * 10 fare = 2.500
        session = InterviewSession(CATALOG)
        for qid, payload in (
            ("vueltas_por_dia", _payload("Hago 10 vueltas", 5.0)),
            ("pasajeros_por_vuelta", _payload("Unos 25 pasajeros", 5.0)),
            ("tarifa_por_pasajero", _payload("10 pesos la tarifa", 3.0)),
            ("ingresos_promedio_diarios", _payload("Gano 2.500 pesos al dia", 7.0)),
        ):
            analyze_and_record(session, qid, payload)
        self.assertEqual(session.results[-1].declared_value, 2500.0)

        outcome = session.financial_coherence()
        self.assertEqual(outcome.checks_performed, ("income_vs_operation",))
        self.assertTrue(outcome.coherent)
        self.assertEqual(outcome.inconsistencies, ())


# ===================================================================
# 4. Response summary
# ===================================================================

class TestSessionSummary(unittest.TestCase):

    def setUp(self):
        self.session = InterviewSession(CATALOG)
        for qid, payload in _interview():
            analyze_and_record(self.session, qid, payload)

    def test_summary_shape(self):
        summary = session_summary(self.session)
        self.assertEqual(summary["responses"], 7)
        self.assertIn(summary["risk_level"], ("LOW", "MEDIUM", "HIGH"))
        self.assertEqual(summary["decision"], DECISION_BY_RISK_LEVEL[summary["risk_level"]])
        self.assertEqual(sum(summary["decisions"].values()), 7)

    def test_empty_session_summary(self):
        summary = session_summary(InterviewSession(CATALOG))
        self.assertEqual(summary["decision"], "NO-GO")

    def test_invalid_decision(self):
        summary = session_summary(self.session)
        summary["decision"] = "MAYBE"
        with self.assertRaises(ContractVerificationError) as ctx:
            verify_summary(summary)
        self.assertEqual(ctx.exception.stage, "summary")

    def test_score_out_of_range(self):
        summary = session_summary(self.session)
        summary["overall_score"] = 1.5
        with self.assertRaises(ContractVerificationError):
            verify_summary(summary)

    def test_missing_key(self):
        summary = session_summary(self.session)
        del summary["flags"]
        with self.assertRaises(ContractVerificationError):
            verify_summary(summary)


if __name__ == "__main__":
    unittest.main()
