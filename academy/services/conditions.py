"""Badge condition descriptors and the eligibility check.

A stored descriptor such as ``{"type": "lessons_completed", "value": 10}`` is
parsed into either a ``KnownCondition`` or an ``UnknownCondition``. Unknown or
malformed descriptors are never an error for the award pipeline: they are
logged and evaluate to ineligible.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any

from academy.core.errors import ConditionEvaluationWarning
from academy.models.student import Student

logger = logging.getLogger(__name__)


class ConditionKind(str, Enum):
    LESSONS_COMPLETED = "lessons_completed"
    ASSIGNMENTS_SUBMITTED = "assignments_submitted"
    ASSIGNMENTS_ON_TIME = "assignments_on_time"
    EARLY_SUBMISSION = "early_submission"
    QUIZZES_PASSED = "quizzes_passed"
    QUIZZES_HIGH_SCORE = "quizzes_high_score"
    PERFECT_QUIZ_SCORE = "perfect_quiz_score"
    CERTIFICATES_EARNED = "certificates_earned"
    PERFECT_ATTENDANCE_MONTH = "perfect_attendance_month"
    XP_TOTAL = "xp_total"


@dataclass(frozen=True)
class KnownCondition:
    kind: ConditionKind
    value: int


@dataclass(frozen=True)
class UnknownCondition:
    raw: Any
    problem: str


BadgeCondition = KnownCondition | UnknownCondition


def _parse(raw: Any) -> KnownCondition:
    if not isinstance(raw, Mapping):
        raise ConditionEvaluationWarning("condition is not an object")
    try:
        kind = ConditionKind(raw.get("type"))
    except ValueError as exc:
        raise ConditionEvaluationWarning(f"unknown condition type {raw.get('type')!r}") from exc
    value = raw.get("value")
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConditionEvaluationWarning(f"threshold {value!r} is not an integer")
    return KnownCondition(kind=kind, value=value)


def parse_condition(raw: Any) -> BadgeCondition:
    if isinstance(raw, (KnownCondition, UnknownCondition)):
        return raw
    try:
        return _parse(raw)
    except ConditionEvaluationWarning as exc:
        return UnknownCondition(raw=raw, problem=exc.detail)


def is_eligible(student: Student, condition: Any, facts: Mapping[str, Any]) -> bool:
    """Return True when ``facts`` meet the condition's threshold (``fact >= value``).

    ``xp_total`` reads the post-transaction total from ``facts`` and falls back
    to the student's stored total. Missing count facts are treated as zero.
    """
    parsed = parse_condition(condition)
    if isinstance(parsed, UnknownCondition):
        logger.warning(
            "Badge condition %r for student %s is not evaluable (%s); treating as ineligible.",
            parsed.raw,
            student.id,
            parsed.problem,
        )
        return False

    if parsed.kind is ConditionKind.XP_TOTAL:
        current = facts.get(ConditionKind.XP_TOTAL.value, student.xp_total)
    else:
        current = facts.get(parsed.kind.value, 0)

    if isinstance(current, bool):
        current = int(current)
    if not isinstance(current, (int, float)):
        logger.warning(
            "Fact %s=%r for student %s is not a number; treating as ineligible.",
            parsed.kind.value,
            current,
            student.id,
        )
        return False
    return current >= parsed.value
