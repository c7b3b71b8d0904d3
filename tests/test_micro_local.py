"""
tests/test_micro_local.py
==========================
Micro-Local Risk Engine Tests

Test categories:
    1. Local risk score (critical penalty, stress scaling, flag penalty)
    2. Cross validation against related prior answers
    3. Coherency flags (score swings, stress mismatch, timing)
    4. Follow-up recommendations
    5. Tuning constant overrides
"""

import os
import sys
import unittest

# Ensure project root is on sys.path
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from avi.analysis.analyzer import AnalysisMetrics, VoiceAnalysisResult
from avi.catalog import Category, QuestionNotFound, load_default_catalog
from avi.risk import NEUTRAL_CROSS_VALIDATION, perform_micro_local_analysis


CATALOG = load_default_catalog()


def _metrics() -> AnalysisMetrics:
    return AnalysisMetrics(
        latency_index=0.0,
        pitch_variability=0.1,
        energy_stability=0.8,
        disfluency_rate=0.0,
        honesty_lexicon=0.7,
    )


def _result(
    qid: str,
    score: float,
    indicators: tuple = (),
    flags: tuple = (),
    response_time: float = 0.0,
) -> VoiceAnalysisResult:
    return VoiceAnalysisResult(
        question_id=qid,
        voice_score=score,
        stress_indicators=indicators,
        truth_verification_keywords=(),
        risk_flags=flags,
        response_time=response_time,
        analysis_metrics=_metrics(),
    )


# ===================================================================
# 1. Local risk score
# ===================================================================

class TestLocalRiskScore(unittest.TestCase):

    def test_plain_score_passes_through(self):
        a = perform_micro_local_analysis(_result("nombre_completo", 0.9), (), CATALOG)
        self.assertAlmostEqual(a.local_risk_score, 0.9)
        self.assertEqual(a.category, Category.BASIC_INFO)

    def test_critical_low_score_penalty(self):
        # 0.5 * 0.7 on a weight-9 question
        a = perform_micro_local_analysis(_result("gasto_diario_gasolina", 0.5), (), CATALOG)
        self.assertAlmostEqual(a.local_risk_score, 0.35)

    def test_stress_scaling(self):
        # vueltas_por_tanque: stress 2 -> 0.8 * (1 - 0.4 * 0.2)
        a = perform_micro_local_analysis(
            _result("vueltas_por_tanque", 0.8, indicators=("a", "b")), (), CATALOG
        )
        self.assertAlmostEqual(a.local_risk_score, 0.736)

    def test_flag_penalty_and_floor(self):
        a = perform_micro_local_analysis(
            _result("gasto_diario_gasolina", 0.3,
                    flags=("low_score", "critical_question_low_score")),
            (),
            CATALOG,
        )
        self.assertAlmostEqual(a.local_risk_score, 0.01)

        a = perform_micro_local_analysis(
            _result("nombre_completo", 0.1, flags=("a", "b", "c")), (), CATALOG
        )
        self.assertEqual(a.local_risk_score, 0.0)

    def test_unknown_question(self):
        with self.assertRaises(QuestionNotFound):
            perform_micro_local_analysis(_result("no_existe", 0.5), (), CATALOG)


# ===================================================================
# 2. Cross validation
# ===================================================================

class TestCrossValidation(unittest.TestCase):

    def test_first_answer_is_neutral(self):
        a = perform_micro_local_analysis(_result("edad", 0.1), (), CATALOG)
        self.assertEqual(a.cross_validation_score, NEUTRAL_CROSS_VALIDATION)
        self.assertEqual(a.cross_validation_score, 0.8)

    def test_no_related_history_is_neutral(self):
        previous = (_result("nombre_completo", 0.9),)
        a = perform_micro_local_analysis(_result("vueltas_por_tanque", 0.2), previous, CATALOG)
        self.assertEqual(a.cross_validation_score, 0.8)

    def test_same_category_deviation(self):
        previous = (_result("vueltas_por_tanque", 0.9),)
        a = perform_micro_local_analysis(_result("gasto_diario_gasolina", 0.3), previous, CATALOG)
        self.assertAlmostEqual(a.cross_validation_score, 0.5)

    def test_shared_trigger_counts_as_related(self):
        # confirmacion_datos_criticos shares "ingresos" with ingresos_promedio_diarios;
        # nombre_completo is unrelated and ignored
        previous = (
            _result("nombre_completo", 0.1),
            _result("ingresos_promedio_diarios", 0.9),
        )
        a = perform_micro_local_analysis(
            _result("confirmacion_datos_criticos", 0.5), previous, CATALOG
        )
        self.assertAlmostEqual(a.cross_validation_score, 0.6)

    def test_recurring_stress_penalty(self):
        previous = (_result("vueltas_por_tanque", 0.5, indicators=("x", "y")),)
        a = perform_micro_local_analysis(
            _result("gasto_diario_gasolina", 0.5, indicators=("x", "y")), previous, CATALOG
        )
        self.assertAlmostEqual(a.cross_validation_score, 0.72)

    def test_maximum_deviation(self):
        previous = tuple(
            _result(qid, 1.0)
            for qid in ("vueltas_por_tanque", "gasto_mantenimiento_mensual")
        )
        a = perform_micro_local_analysis(
            _result("gasto_diario_gasolina", 0.0), previous, CATALOG
        )
        self.assertAlmostEqual(a.cross_validation_score, 0.3)
        self.assertGreaterEqual(a.cross_validation_score, 0.2)

    def test_order_dependence(self):
        """The same answer scores differently depending on what preceded it."""
        current = _result("gasto_diario_gasolina", 0.3)
        alone = perform_micro_local_analysis(current, (), CATALOG)
        after = perform_micro_local_analysis(
            current, (_result("vueltas_por_tanque", 0.9),), CATALOG
        )
        self.assertNotEqual(alone.cross_validation_score, after.cross_validation_score)


# ===================================================================
# 3. Coherency flags
# ===================================================================

class TestCoherencyFlags(unittest.TestCase):

    def test_drastic_score_change(self):
        previous = (_result("nombre_completo", 0.9), _result("edad", 0.9))
        a = perform_micro_local_analysis(_result("estado_civil", 0.3), previous, CATALOG)
        self.assertIn("drastic_score_change", a.coherency_flags)

    def test_drastic_change_uses_recent_window(self):
        previous = (
            _result("nombre_completo", 0.1),
            _result("edad", 0.6),
            _result("estado_civil", 0.6),
            _result("domicilio_actual", 0.6),
        )
        a = perform_micro_local_analysis(_result("anos_en_ruta", 0.6), previous, CATALOG)
        self.assertNotIn("drastic_score_change", a.coherency_flags)

    def test_unexpected_stress_on_easy_question(self):
        a = perform_micro_local_analysis(
            _result("nombre_completo", 0.7, indicators=("a", "b")), (), CATALOG
        )
        self.assertIn("unexpected_stress_on_easy_question", a.coherency_flags)

    def test_suspicious_calm_on_stressful_question(self):
        a = perform_micro_local_analysis(_result("problemas_pagos", 0.8), (), CATALOG)
        self.assertIn("suspicious_calm_on_stressful_question", a.coherency_flags)

    def test_excessive_response_time(self):
        # expected 5s for nombre_completo
        a = perform_micro_local_analysis(
            _result("nombre_completo", 0.8, response_time=16.0), (), CATALOG
        )
        self.assertIn("excessive_response_time", a.coherency_flags)

    def test_suspiciously_fast_response(self):
        a = perform_micro_local_analysis(
            _result("nombre_completo", 0.8, response_time=0.5), (), CATALOG
        )
        self.assertIn("suspiciously_fast_response", a.coherency_flags)

    def test_unknown_timing_not_flagged(self):
        a = perform_micro_local_analysis(
            _result("nombre_completo", 0.8, response_time=0.0), (), CATALOG
        )
        self.assertEqual(a.coherency_flags, ())


# ===================================================================
# 4. Follow-ups
# ===================================================================

class TestFollowUps(unittest.TestCase):

    def test_predefined_follow_ups_first(self):
        a = perform_micro_local_analysis(_result("vueltas_por_dia", 0.8), (), CATALOG)
        self.assertEqual(
            a.recommended_follow_up[:2], ("pasajeros_por_vuelta", "vueltas_por_tanque")
        )

    def test_low_score_and_critical_recommendations(self):
        a = perform_micro_local_analysis(
            _result("gasto_diario_gasolina", 0.3, indicators=("a", "b"),
                    flags=("low_score",)),
            (),
            CATALOG,
        )
        self.assertEqual(a.recommended_follow_up[0], "vueltas_por_tanque")
        # predefined + low score (2) + stress (2) + critical (2)
        self.assertEqual(len(a.recommended_follow_up), 7)

    def test_verification_triggers_copied(self):
        a = perform_micro_local_analysis(_result("edad", 0.8), (), CATALOG)
        self.assertEqual(a.verification_triggers, ("identidad", "experiencia"))

    def test_to_dict(self):
        d = perform_micro_local_analysis(_result("edad", 0.8), (), CATALOG).to_dict()
        self.assertEqual(d["category"], "basic_info")
        self.assertEqual(d["cross_validation_score"], 0.8)
        self.assertIsInstance(d["coherency_flags"], list)


# ===================================================================
# 5. Tuning overrides
# ===================================================================

class TestTuningOverrides(unittest.TestCase):
    """Keyword overrides of the module-level tuning constants."""

    def test_neutral_cross_validation(self):
        a = perform_micro_local_analysis(
            _result("edad", 0.9), (), CATALOG, neutral_cross_validation=0.5
        )
        self.assertEqual(a.cross_validation_score, 0.5)

        # deviation is measured from the overridden neutral: 0.6 - 0.6 * 0.5
        previous = (_result("vueltas_por_tanque", 0.9),)
        a = perform_micro_local_analysis(
            _result("gasto_diario_gasolina", 0.3), previous, CATALOG,
            neutral_cross_validation=0.6,
        )
        self.assertAlmostEqual(a.cross_validation_score, 0.3)

    def test_neutral_out_of_range_rejected(self):
        for bad in (0.1, 1.2):
            with self.assertRaises(ValueError):
                perform_micro_local_analysis(
                    _result("edad", 0.9), (), CATALOG, neutral_cross_validation=bad
                )

    def test_flag_penalty(self):
        result = _result("nombre_completo", 0.5, flags=("a", "b"))
        default = perform_micro_local_analysis(result, (), CATALOG)
        self.assertAlmostEqual(default.local_risk_score, 0.3)
        lenient = perform_micro_local_analysis(result, (), CATALOG, flag_penalty=0.0)
        self.assertAlmostEqual(lenient.local_risk_score, 0.5)

    def test_drastic_change_threshold(self):
        previous = (_result("nombre_completo", 0.9), _result("edad", 0.9))
        current = _result("estado_civil", 0.6)

        a = perform_micro_local_analysis(current, previous, CATALOG)
        self.assertNotIn("drastic_score_change", a.coherency_flags)
        a = perform_micro_local_analysis(
            current, previous, CATALOG, drastic_change_threshold=0.2
        )
        self.assertIn("drastic_score_change", a.coherency_flags)


if __name__ == "__main__":
    unittest.main()
