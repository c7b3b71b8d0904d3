# avi/catalog/__init__.py
# ========================
# Question Catalog - AVI Interview Engine
#
# Responsibility:
#   - Immutable question reference data (weight, category, stress level,
#     expected timing, verification vocabulary, follow-ups)
#   - Explicit, injectable QuestionCatalog lookups (no hidden global)
#
# Public API:
#   - QuestionCatalog        - read-only lookup object
#   - load_default_catalog() - the 55-question AVI dataset
#   - QuestionNotFound       - unknown question id
#   - catalog_stats()        - distribution by category, weight and stress

from avi.catalog.questions import (  # noqa: F401
    CRITICAL_WEIGHT,
    HIGH_STRESS_LEVEL,
    Category,
    Question,
    QuestionAnalytics,
    QuestionCatalog,
    QuestionNotFound,
    RiskImpact,
)
from avi.catalog.avi_questions import (  # noqa: F401
    AVI_QUESTIONS,
    CATALOG_VERSION,
    load_default_catalog,
)
from avi.catalog.stats import WEIGHT_BANDS, catalog_stats  # noqa: F401
