"""Read-only XP rankings.

Students are ordered by ``xp_total`` descending with ``student_id`` as the
tie-breaker, and ranks are positional: equal totals still get distinct,
successive ranks.
"""

from dataclasses import dataclass

from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session

from academy.core.errors import NotFound
from academy.models.course import Course, Enrollment
from academy.models.student import Student
from academy.models.student_badge import StudentBadge


@dataclass(frozen=True)
class LeaderboardEntry:
    rank: int
    student_id: str
    name: str
    xp_total: int
    badge_count: int


def _ranking_query():
    badge_counts = (
        select(StudentBadge.student_id, func.count(StudentBadge.id).label("badge_count"))
        .group_by(StudentBadge.student_id)
        .subquery()
    )
    return (
        select(
            Student.id,
            Student.name,
            Student.xp_total,
            func.coalesce(badge_counts.c.badge_count, 0),
        )
        .outerjoin(badge_counts, badge_counts.c.student_id == Student.id)
        .where(Student.is_active.is_(True))
        .order_by(Student.xp_total.desc(), Student.id.asc())
    )


def _entries(db: Session, stmt, n: int) -> list[LeaderboardEntry]:
    if n <= 0:
        return []
    rows = db.execute(stmt.limit(n)).all()
    return [
        LeaderboardEntry(rank=position, student_id=student_id, name=name, xp_total=xp_total, badge_count=badge_count)
        for position, (student_id, name, xp_total, badge_count) in enumerate(rows, start=1)
    ]


def global_top(db: Session, n: int) -> list[LeaderboardEntry]:
    return _entries(db, _ranking_query(), n)


def course_top(db: Session, course_id: str, n: int) -> tuple[Course, list[LeaderboardEntry]]:
    course = db.get(Course, course_id)
    if course is None:
        raise NotFound(f"Course {course_id} not found")

    enrolled = select(Enrollment.student_id).where(Enrollment.course_id == course_id, Enrollment.status == "ACTIVE")
    stmt = _ranking_query().where(Student.id.in_(enrolled))
    return course, _entries(db, stmt, n)


def student_rank(db: Session, student_id: str) -> int:
    """Global position of an active student under the leaderboard ordering."""
    student = db.get(Student, student_id)
    if student is None or not student.is_active:
        raise NotFound(f"Student {student_id} not found")

    ahead = db.scalar(
        select(func.count(Student.id)).where(
            Student.is_active.is_(True),
            Student.id != student.id,
            or_(
                Student.xp_total > student.xp_total,
                and_(Student.xp_total == student.xp_total, Student.id < student.id),
            ),
        )
    )
    return (ahead or 0) + 1
