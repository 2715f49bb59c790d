"""Aggregate progress facts read from the learning services' tables."""

import calendar
from collections.abc import Callable, Iterable
from datetime import UTC, date, datetime, timedelta

from sqlalchemy import and_, func, select
from sqlalchemy.orm import Session

from academy.models.learning_record import (
    Assignment,
    AssignmentSubmission,
    AttendanceRecord,
    Certificate,
    LessonProgress,
    QuizAttempt,
)
from academy.services.conditions import ConditionKind

FINISHED_QUIZ_STATUSES = ("COMPLETED", "GRADED")
TURNED_IN_STATUSES = ("SUBMITTED", "GRADED")
QUIZ_PASS_SCORE = 60
QUIZ_HIGH_SCORE = 90
QUIZ_PERFECT_SCORE = 100
EARLY_SUBMISSION_WINDOW = timedelta(hours=24)
PERFECT_MONTH_MIN_CLASSES = 4


def _count(db: Session, stmt) -> int:
    return db.scalar(select(func.count()).select_from(stmt.subquery())) or 0


def _same_awareness(value: datetime, reference: datetime) -> datetime:
    # SQLite hands back naive datetimes; compare them as UTC.
    if value.tzinfo is None and reference.tzinfo is not None:
        return value.replace(tzinfo=UTC)
    return value


class SqlFactSource:
    """Counts a student's history for the condition kinds the engine asks for."""

    def __init__(self, clock: Callable[[], datetime] | None = None) -> None:
        self._clock = clock or (lambda: datetime.now(UTC))
        self._counters: dict[ConditionKind, Callable[[Session, str], int]] = {
            ConditionKind.LESSONS_COMPLETED: self._lessons_completed,
            ConditionKind.QUIZZES_PASSED: lambda db, sid: self._quizzes_scoring(db, sid, QUIZ_PASS_SCORE),
            ConditionKind.QUIZZES_HIGH_SCORE: lambda db, sid: self._quizzes_scoring(db, sid, QUIZ_HIGH_SCORE),
            ConditionKind.PERFECT_QUIZ_SCORE: lambda db, sid: self._quizzes_scoring(db, sid, QUIZ_PERFECT_SCORE),
            ConditionKind.ASSIGNMENTS_SUBMITTED: self._assignments_submitted,
            ConditionKind.ASSIGNMENTS_ON_TIME: self._assignments_on_time,
            ConditionKind.EARLY_SUBMISSION: self._early_submissions,
            ConditionKind.CERTIFICATES_EARNED: self._certificates_earned,
            ConditionKind.PERFECT_ATTENDANCE_MONTH: self._perfect_attendance_month,
        }

    def collect(self, db: Session, student_id: str, kinds: Iterable[ConditionKind]) -> dict[str, int]:
        facts: dict[str, int] = {}
        for kind in kinds:
            counter = self._counters.get(kind)
            if counter is not None:
                facts[kind.value] = counter(db, student_id)
        return facts

    def _lessons_completed(self, db: Session, student_id: str) -> int:
        return _count(
            db,
            select(LessonProgress.id).where(
                LessonProgress.student_id == student_id,
                LessonProgress.status == "COMPLETED",
            ),
        )

    def _quizzes_scoring(self, db: Session, student_id: str, min_score: int) -> int:
        return _count(
            db,
            select(QuizAttempt.id).where(
                QuizAttempt.student_id == student_id,
                QuizAttempt.status.in_(FINISHED_QUIZ_STATUSES),
                QuizAttempt.score >= min_score,
            ),
        )

    def _assignments_submitted(self, db: Session, student_id: str) -> int:
        return _count(
            db,
            select(AssignmentSubmission.id).where(
                AssignmentSubmission.student_id == student_id,
                AssignmentSubmission.status.in_(TURNED_IN_STATUSES),
            ),
        )

    def _submission_lead_times(self, db: Session, student_id: str) -> list[timedelta]:
        rows = db.execute(
            select(AssignmentSubmission.submitted_at, Assignment.due_date)
            .join(Assignment, Assignment.id == AssignmentSubmission.assignment_id)
            .where(
                and_(
                    AssignmentSubmission.student_id == student_id,
                    AssignmentSubmission.status.in_(TURNED_IN_STATUSES),
                    AssignmentSubmission.submitted_at.is_not(None),
                    Assignment.due_date.is_not(None),
                )
            )
        ).all()
        return [
            _same_awareness(due_date, submitted_at) - _same_awareness(submitted_at, due_date)
            for submitted_at, due_date in rows
        ]

    def _assignments_on_time(self, db: Session, student_id: str) -> int:
        return sum(1 for lead in self._submission_lead_times(db, student_id) if lead >= timedelta(0))

    def _early_submissions(self, db: Session, student_id: str) -> int:
        return sum(1 for lead in self._submission_lead_times(db, student_id) if lead >= EARLY_SUBMISSION_WINDOW)

    def _certificates_earned(self, db: Session, student_id: str) -> int:
        return _count(
            db,
            select(Certificate.id).where(Certificate.student_id == student_id, Certificate.status == "ACTIVE"),
        )

    def _perfect_attendance_month(self, db: Session, student_id: str) -> int:
        # Current calendar month only: at least four classes, every one attended.
        today = self._clock().date()
        first_day = date(today.year, today.month, 1)
        last_day = date(today.year, today.month, calendar.monthrange(today.year, today.month)[1])
        in_month = and_(
            AttendanceRecord.student_id == student_id,
            AttendanceRecord.attended_on >= first_day,
            AttendanceRecord.attended_on <= last_day,
        )
        total = _count(db, select(AttendanceRecord.id).where(in_month))
        present = _count(db, select(AttendanceRecord.id).where(in_month, AttendanceRecord.status == "PRESENT"))
        return int(total >= PERFECT_MONTH_MIN_CLASSES and present == total)
