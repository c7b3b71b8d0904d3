"""
avi/catalog/stats.py
=====================
Catalog Statistics - AVI Interview Engine

Responsibility:
    - Describe how a QuestionCatalog is distributed: question counts by
      category, by weight band and by stress level
    - Count critical and high-stress questions
    - Estimate the length of a full interview from per-question
      estimated times

This module does NOT:
    - Score answers or look at sessions
    - Validate the catalog (construction already does)
"""

import logging
import math
from typing import Any

from avi.catalog.questions import Category, QuestionCatalog

logger = logging.getLogger("avi.catalog.stats")


# (label, lowest weight, highest weight), most critical first
WEIGHT_BANDS: tuple[tuple[str, int, int], ...] = (
    ("9-10", 9, 10),
    ("7-8", 7, 8),
    ("5-6", 5, 6),
    ("3-4", 3, 4),
    ("1-2", 1, 2),
)

STRESS_LEVELS: tuple[int, ...] = (5, 4, 3, 2, 1)


def catalog_stats(catalog: QuestionCatalog) -> dict[str, Any]:
    """
    Summarize the question distribution of a catalog.

    Returns:
        {
            "version": str,
            "total_questions": int,
            "critical_questions": int,
            "high_stress_questions": int,
            "estimated_duration_minutes": int,
            "questions_by_category": {<category>: int},
            "questions_by_weight": {"9-10" | "7-8" | ...: int},
            "questions_by_stress_level": {"5" | ... | "1": int}
        }

    Every category, weight band and stress level is present, with 0 when
    the catalog has none.
    """
    questions = list(catalog)

    by_category = {c.value: 0 for c in Category}
    for q in questions:
        by_category[q.category.value] += 1

    by_weight = {
        label: sum(1 for q in questions if low <= q.weight <= high)
        for label, low, high in WEIGHT_BANDS
    }
    by_stress = {
        str(level): sum(1 for q in questions if q.stress_level == level)
        for level in STRESS_LEVELS
    }

    total_seconds = sum(q.estimated_time for q in questions)

    stats = {
        "version": catalog.version,
        "total_questions": len(questions),
        "critical_questions": sum(1 for q in questions if q.is_critical),
        "high_stress_questions": sum(1 for q in questions if q.is_high_stress),
        "estimated_duration_minutes": int(math.ceil(total_seconds / 60.0)),
        "questions_by_category": by_category,
        "questions_by_weight": by_weight,
        "questions_by_stress_level": by_stress,
    }

    logger.debug(
        "Catalog %s stats: %d question(s), %d critical, %d high-stress",
        catalog.version,
        stats["total_questions"],
        stats["critical_questions"],
        stats["high_stress_questions"],
    )
    return stats
