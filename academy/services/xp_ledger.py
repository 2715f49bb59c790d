"""Append-only XP ledger.

Every XP change is an ``XPTransaction`` row; ``Student.xp_total`` is the
denormalized running sum and is only touched here, in the same database
transaction as the ledger insert.
"""

import logging
from enum import Enum

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from academy.core.errors import NotFound, ValidationError
from academy.models.student import Student
from academy.models.xp_transaction import XPTransaction

logger = logging.getLogger(__name__)


class XPReason(str, Enum):
    LESSON_COMPLETED = "lesson_completed"
    ASSIGNMENT_SUBMITTED = "assignment_submitted"
    ASSIGNMENT_HIGH_GRADE = "assignment_high_grade"
    QUIZ_COMPLETED = "quiz_completed"
    QUIZ_HIGH_SCORE = "quiz_high_score"
    ATTENDANCE_PRESENT = "attendance_present"
    FIRST_MESSAGE = "first_message"
    CERTIFICATE_ISSUED = "certificate_issued"
    AI_SURVEY_COMPLETED = "ai_survey_completed"
    AI_FEEDBACK = "ai_feedback"
    AI_TUTOR_QUESTION = "ai_tutor_question"
    MANUAL_ADJUSTMENT = "manual_adjustment"
    BADGE_EARNED = "badge_earned"


def coerce_reason(reason: XPReason | str) -> XPReason:
    try:
        return XPReason(reason)
    except ValueError as exc:
        raise ValidationError(f"Unknown XP reason: {reason!r}") from exc


# Bounds of the Integer columns backing amount and xp_total.
MIN_AMOUNT = -(2**31)
MAX_AMOUNT = 2**31 - 1


def validate_amount(amount: object) -> int:
    if isinstance(amount, bool) or not isinstance(amount, int):
        raise ValidationError(f"XP amount must be an integer, got {amount!r}")
    if not MIN_AMOUNT <= amount <= MAX_AMOUNT:
        raise ValidationError(f"XP amount {amount} is outside [{MIN_AMOUNT}, {MAX_AMOUNT}]")
    return amount


def _lock_student(db: Session, student_id: str) -> Student:
    student = db.scalar(select(Student).where(Student.id == student_id).with_for_update())
    if student is None:
        raise NotFound(f"Student {student_id} not found")
    return student


def record_transaction(
    db: Session,
    student_id: str,
    amount: int,
    reason: XPReason | str,
    source_id: str | None = None,
    *,
    commit: bool = True,
) -> XPTransaction:
    """Append one ledger row and move the student's running total by ``amount``.

    With ``commit=False`` the writes are only flushed, so the caller's
    transaction (or savepoint) decides whether both land or neither does.
    """
    amount = validate_amount(amount)
    reason = coerce_reason(reason)
    student = _lock_student(db, student_id)

    transaction = XPTransaction(student_id=student.id, amount=amount, reason=reason.value, source_id=source_id)
    db.add(transaction)
    db.execute(
        update(Student)
        .where(Student.id == student.id)
        .values(xp_total=Student.xp_total + amount)
        .execution_options(synchronize_session=False)
    )
    try:
        db.flush()
        if commit:
            db.commit()
    except Exception:
        if commit:
            db.rollback()
        raise
    db.expire(student, ["xp_total"])

    logger.info("Recorded %+d XP for student %s reason=%s.", amount, student_id, reason.value)
    return transaction


def get_recent_transactions(db: Session, student_id: str, limit: int) -> list[XPTransaction]:
    if db.get(Student, student_id) is None:
        raise NotFound(f"Student {student_id} not found")
    if limit <= 0:
        return []
    rows = db.scalars(
        select(XPTransaction)
        .where(XPTransaction.student_id == student_id)
        .order_by(XPTransaction.created_at.desc(), XPTransaction.id.desc())
        .limit(limit)
    ).all()
    return list(rows)


def get_total(db: Session, student_id: str) -> int:
    total = db.scalar(select(Student.xp_total).where(Student.id == student_id))
    if total is None:
        raise NotFound(f"Student {student_id} not found")
    return total


def ledger_sum(db: Session, student_id: str) -> int:
    return db.scalar(
        select(func.coalesce(func.sum(XPTransaction.amount), 0)).where(XPTransaction.student_id == student_id)
    )


def rebuild_total(db: Session, student_id: str) -> tuple[int, int]:
    """Re-derive ``xp_total`` from the ledger. Returns ``(previous, rebuilt)``."""
    student = _lock_student(db, student_id)
    previous = student.xp_total
    rebuilt = ledger_sum(db, student_id)
    if previous != rebuilt:
        db.execute(
            update(Student)
            .where(Student.id == student.id)
            .values(xp_total=rebuilt)
            .execution_options(synchronize_session=False)
        )
        logger.warning("Student %s xp_total drifted from ledger: %d -> %d.", student_id, previous, rebuilt)
    db.commit()
    return previous, rebuilt
