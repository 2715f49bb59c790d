from __future__ import annotations

from datetime import UTC, datetime, timedelta
from pathlib import Path
import sys

from sqlalchemy import select

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from academy.db.session import get_session_factory
from academy.models.course import Course, Enrollment
from academy.models.learning_record import Assignment, AssignmentSubmission, LessonProgress, QuizAttempt
from academy.models.student import Student
from academy.services.awards import grant_xp
from academy.services.badge_catalog import seed_default_badges
from academy.services.xp_ledger import XPReason


DEMO_DOMAIN = "demo.academy.local"
DEMO_COURSE_TITLE = "[DEMO] Python Foundations"

# name, lessons completed, quiz scores, assignments handed in (hours before due)
DEMO_STUDENTS = [
    ("Aysel Mammadova", 12, [100, 95, 92, 90, 91], [30, 30, 2, 5, 1]),
    ("Rauf Aliyev", 6, [88, 72], [3, 1]),
    ("Nigar Huseynova", 6, [64], [26]),
    ("Elvin Guliyev", 1, [], []),
]


def main() -> None:
    session_factory = get_session_factory()
    with session_factory() as db:
        seed_default_badges(db)

        existing = db.scalar(select(Student.id).where(Student.email.like(f"%@{DEMO_DOMAIN}")).limit(1))
        if existing:
            print("Demo data already present.")
            return

        course = Course(title=DEMO_COURSE_TITLE)
        db.add(course)
        now = datetime.now(UTC)

        students: list[tuple[Student, int, list[int], list[int]]] = []
        for index, (name, lessons, scores, lead_hours) in enumerate(DEMO_STUDENTS):
            student = Student(name=name, email=f"student{index + 1}@{DEMO_DOMAIN}")
            db.add(student)
            db.flush()
            db.add(Enrollment(student_id=student.id, course_id=course.id, status="ACTIVE"))
            for lesson_number in range(lessons):
                db.add(LessonProgress(student_id=student.id, lesson_id=f"lesson-{lesson_number}", status="COMPLETED"))
            for quiz_number, score in enumerate(scores):
                db.add(QuizAttempt(student_id=student.id, quiz_id=f"quiz-{quiz_number}", status="GRADED", score=score))
            for hours in lead_hours:
                assignment = Assignment(course_id=course.id, due_date=now + timedelta(days=7))
                db.add(assignment)
                db.flush()
                db.add(
                    AssignmentSubmission(
                        student_id=student.id,
                        assignment_id=assignment.id,
                        status="SUBMITTED",
                        submitted_at=assignment.due_date - timedelta(hours=hours),
                    )
                )
            students.append((student, lessons, scores, lead_hours))
        db.commit()

        for student, lessons, scores, lead_hours in students:
            for _ in range(lessons):
                grant_xp(db, student.id, XPReason.LESSON_COMPLETED, 10)
            for score in scores:
                grant_xp(db, student.id, XPReason.QUIZ_COMPLETED, 20)
                if score >= 90:
                    grant_xp(db, student.id, XPReason.QUIZ_HIGH_SCORE, 10)
            for _ in lead_hours:
                grant_xp(db, student.id, XPReason.ASSIGNMENT_SUBMITTED, 15)

        print(f"Demo course {course.id} with {len(students)} students created.")


if __name__ == "__main__":
    main()
