from academy.models.admin import Admin
from academy.models.badge import Badge
from academy.models.course import Course, Enrollment
from academy.models.learning_record import (
    Assignment,
    AssignmentSubmission,
    AttendanceRecord,
    Certificate,
    LessonProgress,
    QuizAttempt,
)
from academy.models.student import Student
from academy.models.student_badge import StudentBadge
from academy.models.xp_transaction import XPTransaction

__all__ = [
    "Admin",
    "Student",
    "XPTransaction",
    "Badge",
    "StudentBadge",
    "Course",
    "Enrollment",
    "LessonProgress",
    "QuizAttempt",
    "Assignment",
    "AssignmentSubmission",
    "AttendanceRecord",
    "Certificate",
]
