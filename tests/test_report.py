"""
tests/test_report.py
=====================
Report Builder Tests

Test categories:
    1. Risk level classification
    2. Report sections for the five-answer scenario
    3. JSON rendering and empty sessions
"""

import json
import os
import sys
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from avi.analysis.analyzer import AnalysisMetrics, VoiceAnalysisResult
from avi.catalog import load_default_catalog
from avi.session import (
    InterviewSession,
    build_report,
    build_session,
    categorize_risk_level,
    determine_risk_level,
    render_report_json,
)


CATALOG = load_default_catalog()


def _result(qid: str, score: float, flags: tuple = ()) -> VoiceAnalysisResult:
    return VoiceAnalysisResult(
        question_id=qid,
        voice_score=score,
        stress_indicators=(),
        truth_verification_keywords=(),
        risk_flags=flags,
        response_time=0.0,
        analysis_metrics=AnalysisMetrics(0.0, 0.1, 0.8, 0.0, 0.7),
    )


def _scenario_session() -> InterviewSession:
    low = ("low_score", "critical_question_low_score")
    return build_session(
        [
            _result("nombre_completo", 0.9),
            _result("edad", 0.9),
            _result("vueltas_por_tanque", 0.9),
            _result("gasto_diario_gasolina", 0.3, flags=low),
            _result("pago_semanal_tarjeta", 0.3, flags=low),
        ],
        CATALOG,
        session_id="report_test",
    )


# ===================================================================
# 1. Risk levels
# ===================================================================

class TestRiskLevels(unittest.TestCase):

    def test_session_risk_level(self):
        self.assertEqual(determine_risk_level(0.3, []), "HIGH")
        self.assertEqual(determine_risk_level(0.9, ["a", "b", "c"]), "HIGH")
        self.assertEqual(determine_risk_level(0.5, []), "MEDIUM")
        self.assertEqual(determine_risk_level(0.9, ["a", "b"]), "MEDIUM")
        self.assertEqual(determine_risk_level(0.9, ["a"]), "LOW")

    def test_category_risk_level(self):
        self.assertEqual(categorize_risk_level(0.39), "HIGH")
        self.assertEqual(categorize_risk_level(0.4), "MEDIUM")
        self.assertEqual(categorize_risk_level(0.59), "MEDIUM")
        self.assertEqual(categorize_risk_level(0.6), "LOW")


# ===================================================================
# 2. Scenario report
# ===================================================================

class TestScenarioReport(unittest.TestCase):

    def setUp(self):
        self.report = build_report(_scenario_session())

    def test_session_section(self):
        s = self.report["session"]
        self.assertEqual(s["id"], "report_test")
        self.assertEqual(s["progress"], "5/55")
        self.assertAlmostEqual(s["overall_coherence"], 0.527)
        self.assertEqual(s["risk_level"], "MEDIUM")

    def test_category_analysis(self):
        cats = self.report["category_analysis"]
        self.assertEqual(set(cats), {"basic_info", "operational_costs"})
        self.assertEqual(cats["basic_info"]["questions_completed"], 2)
        self.assertEqual(cats["basic_info"]["risk_level"], "LOW")
        self.assertEqual(cats["operational_costs"]["questions_completed"], 3)
        self.assertAlmostEqual(cats["operational_costs"]["avg_risk_score"], 0.3067)
        self.assertEqual(cats["operational_costs"]["risk_level"], "HIGH")

    def test_risk_areas(self):
        self.assertEqual(self.report["risk_areas"], ["operational_costs"])

    def test_consistency_issues(self):
        issues = self.report["consistency_issues"]
        self.assertEqual(len(issues), 1)
        self.assertEqual(issues[0]["question_pair"], ["gasto_diario_gasolina", "vueltas_por_tanque"])
        self.assertAlmostEqual(issues[0]["score"], 0.52)
        self.assertEqual(issues[0]["flags"], ["moderate_inconsistency"])

    def test_recommendations(self):
        recs = self.report["recommendations"]
        self.assertEqual(len(recs["next_questions"]), 5)
        self.assertEqual(recs["next_questions"][0]["id"], "vueltas_por_dia")
        self.assertEqual(recs["next_questions"][0]["priority"], 9)
        self.assertEqual(recs["next_questions"][0]["category"], "daily_operation")
        self.assertEqual(recs["urgent_flags"], ["gasto_diario_gasolina", "pago_semanal_tarjeta"])
        self.assertEqual(
            recs["investigation_areas"],
            ["operational_costs", "investigate_pago_semanal_tarjeta"],
        )

    def test_summary(self):
        summary = self.report["summary"]
        self.assertEqual(summary["critical_questions_completed"], 2)
        self.assertAlmostEqual(summary["avg_local_risk_score"], 0.544)
        self.assertGreaterEqual(summary["total_risk_flags"], 2)

    def test_explicit_catalog_argument(self):
        self.assertEqual(build_report(_scenario_session(), CATALOG), self.report)


# ===================================================================
# 3. Rendering and empty sessions
# ===================================================================

class TestRendering(unittest.TestCase):

    def test_empty_session(self):
        report = build_report(InterviewSession(CATALOG, session_id="empty"))
        self.assertEqual(report["session"]["progress"], "0/55")
        self.assertEqual(report["session"]["overall_coherence"], 0.0)
        self.assertEqual(report["session"]["risk_level"], "HIGH")
        self.assertEqual(report["category_analysis"], {})
        self.assertEqual(report["summary"]["avg_local_risk_score"], 0.0)
        self.assertEqual(report["recommendations"]["urgent_flags"], [])

    def test_render_json(self):
        report = build_report(_scenario_session())
        text = render_report_json(report)
        self.assertEqual(json.loads(text), report)
        self.assertIn("\n  ", text)


if __name__ == "__main__":
    unittest.main()
