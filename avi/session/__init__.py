# avi/session/__init__.py
# ========================
# Session Aggregator & Report Builder - AVI Interview Engine
#
# Responsibility:
#   - Append-only interview sessions folded from ordered results
#   - Overall coherence, risk areas, next-question recommendations
#   - Financial coherence arithmetic over declared amounts
#   - JSON-compatible session reports
#
# Public API:
#   - InterviewSession / build_session()  - session fold
#   - validate_financial_coherence()      - income / expense checks
#   - build_report() / render_report_json()
#   - summarize_responses()               - voice-only verdict and decision
#   - export_results()                    - per-answer export with totals
#   - recommend_adaptive_questions()      - risk-adaptive next questions

from avi.session.financial import (  # noqa: F401
    FINANCIAL_QUESTION_IDS,
    FinancialCoherence,
    validate_financial_coherence,
)
from avi.session.aggregator import (  # noqa: F401
    DEFAULT_TARGET_QUESTIONS,
    InterviewSession,
    PendingAnswer,
    QuestionAlreadyAnswered,
    build_session,
    calculate_overall_coherence,
    identify_risk_areas,
    recommend_next_questions,
)
from avi.session.report import (  # noqa: F401
    build_report,
    categorize_risk_level,
    determine_risk_level,
    render_report_json,
)
from avi.session.summary import (  # noqa: F401
    DECISION_BY_RISK_LEVEL,
    export_results,
    recommend_adaptive_questions,
    summarize_responses,
)
