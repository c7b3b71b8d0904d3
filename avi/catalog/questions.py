"""
avi/catalog/questions.py
=========================
Question Catalog - AVI Interview Engine

Responsibility:
    - Define the immutable Question structure and its analytics block
    - Define the category and risk-impact enums
    - Provide QuestionCatalog: an explicit, read-only lookup object passed
      into every engine component
    - Fail fast with QuestionNotFound for unknown question ids

This module does NOT:
    - Score responses or inspect transcripts
    - Hold a process-wide catalog instance (see avi_questions.py for the
      default dataset, which callers construct explicitly)
    - Mutate questions after construction
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Iterator

logger = logging.getLogger("avi.catalog.questions")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class Category(str, Enum):
    """Interview question categories."""

    BASIC_INFO = "basic_info"
    DAILY_OPERATION = "daily_operation"
    OPERATIONAL_COSTS = "operational_costs"
    BUSINESS_STRUCTURE = "business_structure"
    ASSETS_PATRIMONY = "assets_patrimony"
    CREDIT_HISTORY = "credit_history"
    PAYMENT_INTENTION = "payment_intention"
    RISK_EVALUATION = "risk_evaluation"


class RiskImpact(str, Enum):
    """How strongly a bad answer moves the applicant's risk."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"


# Questions at or above these values drive prioritization and penalties
CRITICAL_WEIGHT: int = 9
HIGH_STRESS_LEVEL: int = 4


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class QuestionNotFound(KeyError):
    """Raised when a question id is not present in the catalog."""

    def __init__(self, question_id: str):
        self.question_id = question_id
        super().__init__(question_id)

    def __str__(self) -> str:
        return f"Question {self.question_id!r} not found in catalog"


# ---------------------------------------------------------------------------
# Question structures
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class QuestionAnalytics:
    """Per-question scoring hints used by the response analyzer."""

    expected_response_time: float  # seconds
    stress_indicator_patterns: tuple[str, ...] = ()
    truth_verification_keywords: tuple[str, ...] = ()


@dataclass(frozen=True)
class Question:
    """A single catalog question with its scoring metadata."""

    id: str
    category: Category
    question: str
    weight: int          # 1 (minor) .. 10 (critical)
    stress_level: int    # 1 (relaxed) .. 5 (maximum stress)
    estimated_time: float
    risk_impact: RiskImpact
    analytics: QuestionAnalytics
    verification_triggers: tuple[str, ...] = ()
    follow_up_questions: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Question id must be a non-empty string")
        if not 1 <= self.weight <= 10:
            raise ValueError(
                f"Question {self.id!r}: weight must be in [1, 10], got {self.weight}"
            )
        if not 1 <= self.stress_level <= 5:
            raise ValueError(
                f"Question {self.id!r}: stress_level must be in [1, 5], "
                f"got {self.stress_level}"
            )
        if self.analytics.expected_response_time <= 0:
            raise ValueError(
                f"Question {self.id!r}: expected_response_time must be positive"
            )

    @property
    def is_critical(self) -> bool:
        return self.weight >= CRITICAL_WEIGHT

    @property
    def is_high_stress(self) -> bool:
        return self.stress_level >= HIGH_STRESS_LEVEL

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible mapping."""
        return {
            "id": self.id,
            "category": self.category.value,
            "question": self.question,
            "weight": self.weight,
            "stress_level": self.stress_level,
            "estimated_time": self.estimated_time,
            "risk_impact": self.risk_impact.value,
            "verification_triggers": list(self.verification_triggers),
            "follow_up_questions": list(self.follow_up_questions),
            "analytics": {
                "expected_response_time": self.analytics.expected_response_time,
                "stress_indicator_patterns": list(
                    self.analytics.stress_indicator_patterns
                ),
                "truth_verification_keywords": list(
                    self.analytics.truth_verification_keywords
                ),
            },
        }


# ---------------------------------------------------------------------------
# Catalog
# ---------------------------------------------------------------------------


class QuestionCatalog:
    """
    Read-only, ordered collection of interview questions.

    The catalog preserves insertion order; next-question recommendations
    rely on it as the tie-breaking order.

    Raises:
        ValueError: On construction, if two questions share an id.
    """

    def __init__(self, questions: Iterable[Question], version: str = "custom"):
        ordered = tuple(questions)
        by_id: dict[str, Question] = {}
        for q in ordered:
            if q.id in by_id:
                raise ValueError(f"Duplicate question id in catalog: {q.id!r}")
            by_id[q.id] = q

        self._questions = ordered
        self._by_id = by_id
        self.version = version

        logger.debug(
            "QuestionCatalog %s built with %d question(s).", version, len(ordered)
        )

    def __len__(self) -> int:
        return len(self._questions)

    def __iter__(self) -> Iterator[Question]:
        return iter(self._questions)

    def __contains__(self, question_id: object) -> bool:
        return question_id in self._by_id

    def __repr__(self) -> str:
        return f"QuestionCatalog(version={self.version!r}, size={len(self)})"

    def get(self, question_id: str) -> Question:
        """
        Look up a question by id.

        Raises:
            QuestionNotFound: If the id is not in the catalog.
        """
        try:
            return self._by_id[question_id]
        except KeyError:
            raise QuestionNotFound(question_id) from None

    def find(self, question_id: str) -> Question | None:
        """Look up a question by id, returning None when absent."""
        return self._by_id.get(question_id)

    def by_category(self, category: Category) -> list[Question]:
        return [q for q in self._questions if q.category == category]

    def critical_questions(self) -> list[Question]:
        return [q for q in self._questions if q.is_critical]

    def high_stress_questions(self) -> list[Question]:
        return [q for q in self._questions if q.is_high_stress]
