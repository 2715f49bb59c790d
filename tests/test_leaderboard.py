import pytest
from sqlalchemy import func, select

from academy.core.errors import NotFound
from academy.models.badge import Badge
from academy.models.course import Course, Enrollment
from academy.models.student_badge import StudentBadge
from academy.models.xp_transaction import XPTransaction
from academy.services import badge_catalog, leaderboard, xp_ledger
from academy.services.xp_ledger import XPReason
from tests.conftest import create_student


def _student_with_xp(db, student_id: str, xp: int, *, is_active: bool = True) -> str:
    student = create_student(db, student_id.title(), student_id=student_id, is_active=is_active)
    if xp:
        xp_ledger.record_transaction(db, student.id, xp, XPReason.MANUAL_ADJUSTMENT)
    return student.id


def test_global_top_orders_by_xp_then_id(db):
    _student_with_xp(db, "student-d", 100)
    _student_with_xp(db, "student-c", 300)
    _student_with_xp(db, "student-b", 300)
    _student_with_xp(db, "student-a", 500)

    entries = leaderboard.global_top(db, 10)

    assert [(entry.rank, entry.student_id, entry.xp_total) for entry in entries] == [
        (1, "student-a", 500),
        (2, "student-b", 300),
        (3, "student-c", 300),
        (4, "student-d", 100),
    ]


def test_global_top_respects_limit(db):
    for index, xp in enumerate([50, 40, 30]):
        _student_with_xp(db, f"student-{index}", xp)

    assert [entry.student_id for entry in leaderboard.global_top(db, 2)] == ["student-0", "student-1"]
    assert leaderboard.global_top(db, 0) == []


def test_inactive_students_are_hidden(db):
    _student_with_xp(db, "student-active", 10)
    _student_with_xp(db, "student-gone", 900, is_active=False)

    entries = leaderboard.global_top(db, 10)

    assert [entry.student_id for entry in entries] == ["student-active"]
    assert entries[0].rank == 1


def test_entries_carry_badge_count(db):
    badge_catalog.seed_default_badges(db)
    student_id = _student_with_xp(db, "student-badges", 20)
    _student_with_xp(db, "student-none", 10)
    for code in ("FIRST_LESSON", "FIRST_QUIZ"):
        badge = db.scalar(select(Badge).where(Badge.code == code))
        db.add(StudentBadge(student_id=student_id, badge_id=badge.id))
    db.commit()

    counts = {entry.student_id: entry.badge_count for entry in leaderboard.global_top(db, 10)}

    assert counts == {"student-badges": 2, "student-none": 0}


def test_course_top_only_active_enrollments(db):
    course = Course(title="Data Science 101")
    other = Course(title="Art History")
    db.add_all([course, other])
    db.commit()
    enrolled = _student_with_xp(db, "student-enrolled", 40)
    dropped = _student_with_xp(db, "student-dropped", 400)
    outsider = _student_with_xp(db, "student-outsider", 4000)
    db.add_all(
        [
            Enrollment(student_id=enrolled, course_id=course.id, status="ACTIVE"),
            Enrollment(student_id=dropped, course_id=course.id, status="DROPPED"),
            Enrollment(student_id=outsider, course_id=other.id, status="ACTIVE"),
        ]
    )
    db.commit()

    found, entries = leaderboard.course_top(db, course.id, 10)

    assert found.title == "Data Science 101"
    assert [(entry.rank, entry.student_id) for entry in entries] == [(1, "student-enrolled")]


def test_inactive_student_has_no_rank(db):
    _student_with_xp(db, "student-a", 50)
    _student_with_xp(db, "student-gone", 900, is_active=False)

    with pytest.raises(NotFound):
        leaderboard.student_rank(db, "student-gone")
    assert leaderboard.student_rank(db, "student-a") == 1


def test_course_top_unknown_course(db):
    with pytest.raises(NotFound):
        leaderboard.course_top(db, "missing", 10)


def test_student_rank_matches_global_order(db):
    for student_id, xp in [("student-a", 500), ("student-b", 300), ("student-c", 300), ("student-d", 100)]:
        _student_with_xp(db, student_id, xp)
    _student_with_xp(db, "student-0", 1000, is_active=False)

    ranks = {entry.student_id: entry.rank for entry in leaderboard.global_top(db, 10)}

    for student_id, rank in ranks.items():
        assert leaderboard.student_rank(db, student_id) == rank
    with pytest.raises(NotFound):
        leaderboard.student_rank(db, "missing")


def test_queries_do_not_write(db):
    _student_with_xp(db, "student-a", 75)
    before = db.scalar(select(func.count()).select_from(XPTransaction))

    leaderboard.global_top(db, 5)
    leaderboard.student_rank(db, "student-a")

    assert db.scalar(select(func.count()).select_from(XPTransaction)) == before
    assert xp_ledger.get_total(db, "student-a") == 75
