# avi/risk/__init__.py
# =====================
# Micro-Local Risk Engine & Consistency Checker - AVI Interview Engine
#
# Responsibility:
#   - Per-answer local risk, cross-validation against related prior
#     answers, coherency flags and follow-up recommendations
#   - Pairwise agreement of fixed question pairs
#
# Public API:
#   - perform_micro_local_analysis() - order-dependent per-answer assessment
#   - perform_consistency_checks()   - order-independent pair assessment

from avi.risk.micro_local import (  # noqa: F401
    MicroLocalAnalysis,
    NEUTRAL_CROSS_VALIDATION,
    perform_micro_local_analysis,
)
from avi.risk.consistency import (  # noqa: F401
    CONSISTENCY_PAIRS,
    ConsistencyCheck,
    check_pair,
    perform_consistency_checks,
)
