import argparse
from pathlib import Path
import sys

from sqlalchemy import select

if __package__ is None or __package__ == "":
    sys.path.append(str(Path(__file__).resolve().parents[1]))

from academy.db.session import get_session_factory
from academy.models.student import Student
from academy.services.awards import award_engine
from academy.services.xp_ledger import ledger_sum, rebuild_total


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Check student XP totals against the ledger and repair drift.")
    parser.add_argument("--student", help="Only reconcile this student id.")
    parser.add_argument("--dry-run", action="store_true", help="Report drift without writing.")
    parser.add_argument("--evaluate", action="store_true", help="Re-run badge evaluation after reconciling.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    session_factory = get_session_factory()
    drifted = 0
    with session_factory() as db:
        stmt = select(Student.id, Student.xp_total).order_by(Student.id)
        if args.student:
            stmt = stmt.where(Student.id == args.student)
        students = db.execute(stmt).all()
        db.rollback()

        for student_id, stored_total in students:
            if args.dry_run:
                actual = ledger_sum(db, student_id)
                if actual != stored_total:
                    drifted += 1
                    print(f"{student_id}: stored={stored_total} ledger={actual}")
                db.rollback()
                continue

            previous, rebuilt = rebuild_total(db, student_id)
            if previous != rebuilt:
                drifted += 1
                print(f"{student_id}: {previous} -> {rebuilt}")
            if args.evaluate:
                awarded = award_engine.evaluate_badges(db, student_id)
                for badge in awarded:
                    print(f"{student_id}: awarded {badge.code}")

    print(f"Students checked: {len(students)}, drifted: {drifted}")


if __name__ == "__main__":
    main()
