"""
avi/session/financial.py
=========================
Financial Coherence Check - AVI Interview Engine

Responsibility:
    - Inspect the income / expense questions of a session
    - Check that declared daily income matches the declared operation
      (trips per day x passengers per trip x fare per passenger)
    - Check that declared expenses, normalized to a daily amount, do not
      exceed declared daily income
    - Suggest the validation questions still pending

Amounts come from VoiceAnalysisResult.declared_value (the first number
spoken in the transcript). A check whose inputs were not declared is
skipped rather than failed.

This module does NOT:
    - Parse transcripts (the analyzer extracts declared values)
    - Score voice or stress signals
"""

import logging
from dataclasses import dataclass
from typing import Any, Sequence

from avi.analysis.analyzer import VoiceAnalysisResult
from avi.catalog.questions import Question, QuestionCatalog

logger = logging.getLogger("avi.session.financial")


INCOME_ID: str = "ingresos_promedio_diarios"
TRIPS_ID: str = "vueltas_por_dia"
PASSENGERS_ID: str = "pasajeros_por_vuelta"
FARE_ID: str = "tarifa_por_pasajero"

# Expense question id -> number of days the declared amount covers
EXPENSE_PERIOD_DAYS: dict[str, float] = {
    "gasto_diario_gasolina": 1.0,
    "pago_semanal_tarjeta": 7.0,
    "gastos_mordidas_cuotas": 7.0,
}

FINANCIAL_QUESTION_IDS: tuple[str, ...] = (
    INCOME_ID,
    "gasto_diario_gasolina",
    TRIPS_ID,
    PASSENGERS_ID,
    FARE_ID,
    "pago_semanal_tarjeta",
    "gastos_mordidas_cuotas",
)

FINANCIAL_VALIDATION_IDS: tuple[str, ...] = (
    "coherencia_ingresos_gastos",
    "confirmacion_datos_criticos",
    "compromisos_existentes",
    "ahorros_emergencia",
)

MIN_FINANCIAL_ANSWERS: int = 3
MIN_EXPENSE_ANSWERS: int = 2

# Allowed relative gap between declared income and the operational estimate
INCOME_TOLERANCE: float = 0.35


@dataclass(frozen=True)
class FinancialCoherence:
    """Outcome of the income / expense arithmetic checks."""

    coherent: bool
    inconsistencies: tuple[str, ...]
    suggested_questions: tuple[Question, ...]
    checks_performed: tuple[str, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "coherent": self.coherent,
            "inconsistencies": list(self.inconsistencies),
            "suggested_questions": [q.id for q in self.suggested_questions],
            "checks_performed": list(self.checks_performed),
        }


def _income_matches_operation(
    income: float,
    trips: float,
    passengers: float,
    fare: float,
    tolerance: float,
) -> bool:
    estimate = trips * passengers * fare
    if estimate <= 0:
        return income <= 0
    return abs(income - estimate) <= tolerance * estimate


def validate_financial_coherence(
    results: Sequence[VoiceAnalysisResult],
    catalog: QuestionCatalog,
    tolerance: float = INCOME_TOLERANCE,
) -> FinancialCoherence:
    """
    Cross-check declared income against declared operation and expenses.

    Fewer than three financial answers short-circuit to a coherent result
    with no checks performed.

    Args:
        results:   Results gathered so far.
        catalog:   Catalog used to resolve suggested validation questions.
        tolerance: Relative income gap accepted by the operation check.

    Returns:
        FinancialCoherence.
    """
    relevant: dict[str, VoiceAnalysisResult] = {}
    for r in results:
        if r.question_id in FINANCIAL_QUESTION_IDS:
            relevant.setdefault(r.question_id, r)

    inconsistencies: list[str] = []
    performed: list[str] = []

    if len(relevant) >= MIN_FINANCIAL_ANSWERS:
        income = relevant.get(INCOME_ID)
        operation = [relevant.get(qid) for qid in (TRIPS_ID, PASSENGERS_ID, FARE_ID)]

        # --- Income vs. operation ---
        if income is not None and all(r is not None for r in operation):
            values = [income.declared_value] + [r.declared_value for r in operation]
            if all(v is not None for v in values):
                performed.append("income_vs_operation")
                if not _income_matches_operation(*values, tolerance=tolerance):
                    inconsistencies.append("income_inconsistent_with_operations")

        # --- Expenses vs. income ---
        expenses = [relevant[qid] for qid in EXPENSE_PERIOD_DAYS if qid in relevant]
        if len(expenses) >= MIN_EXPENSE_ANSWERS and income is not None:
            daily = [
                r.declared_value / EXPENSE_PERIOD_DAYS[r.question_id]
                for r in expenses
                if r.declared_value is not None
            ]
            if income.declared_value is not None and len(daily) >= MIN_EXPENSE_ANSWERS:
                performed.append("expenses_vs_income")
                if sum(daily) > income.declared_value:
                    inconsistencies.append("expenses_exceed_declared_income")

    answered = {r.question_id for r in results}
    suggested: list[Question] = []
    for qid in FINANCIAL_VALIDATION_IDS:
        question = catalog.find(qid)
        if question is not None and qid not in answered:
            suggested.append(question)

    outcome = FinancialCoherence(
        coherent=not inconsistencies,
        inconsistencies=tuple(inconsistencies),
        suggested_questions=tuple(suggested),
        checks_performed=tuple(performed),
    )

    logger.info(
        "Financial coherence: %d financial answer(s), checks=%s, inconsistencies=%s",
        len(relevant), performed, inconsistencies,
    )
    return outcome
