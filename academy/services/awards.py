"""Award engine: turns a domain event into XP and badges.

One external event produces exactly one evaluation pass:

1. the triggering XP transaction is written and committed on its own;
2. facts are gathered once (stored counts merged with the event's facts,
   keeping the larger value per kind, and ``xp_total`` taken after the
   triggering transaction);
3. every active badge the student does not hold yet is checked in catalog
   order;
4. each eligible badge is inserted together with its bonus XP inside its own
   savepoint.

Bonus XP is written straight to the ledger and never re-enters step 2. This is
the anti-cascade guard: a badge that only becomes reachable through bonus XP
from the same pass is picked up on the student's next event.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Protocol

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

from academy.core.errors import NotFound, ValidationError
from academy.models.badge import Badge
from academy.models.student import Student
from academy.models.student_badge import StudentBadge
from academy.models.xp_transaction import XPTransaction
from academy.services.badge_catalog import list_active_badges
from academy.services.conditions import ConditionKind, KnownCondition, is_eligible, parse_condition
from academy.services.facts import SqlFactSource
from academy.services.xp_ledger import XPReason, coerce_reason, record_transaction

logger = logging.getLogger(__name__)


class FactSource(Protocol):
    def collect(self, db: Session, student_id: str, kinds) -> dict[str, int]: ...


@dataclass
class AwardResult:
    transaction: XPTransaction
    awarded: list[Badge] = field(default_factory=list)


class AwardEngine:
    def __init__(self, fact_source: FactSource | None = None) -> None:
        self.fact_source = fact_source or SqlFactSource()

    def process_event(
        self,
        db: Session,
        student_id: str,
        reason: XPReason | str,
        amount: int,
        facts: Mapping[str, int] | None = None,
        source_id: str | None = None,
    ) -> AwardResult:
        reason = coerce_reason(reason)
        if reason is XPReason.BADGE_EARNED:
            raise ValidationError("badge_earned is reserved for badge bonus awards")

        # A failed ledger write propagates before any badge is looked at.
        transaction = record_transaction(db, student_id, amount, reason, source_id=source_id)

        try:
            awarded = self.evaluate_badges(db, student_id, facts)
        except SQLAlchemyError:
            db.rollback()
            logger.exception(
                "Badge evaluation failed for student %s after %s; XP transaction %s is kept.",
                student_id,
                reason.value,
                transaction.id,
            )
            awarded = []
        return AwardResult(transaction=transaction, awarded=awarded)

    def grant_xp(
        self,
        db: Session,
        student_id: str,
        reason: XPReason | str,
        amount: int,
        facts: Mapping[str, int] | None = None,
        source_id: str | None = None,
    ) -> XPTransaction:
        return self.process_event(db, student_id, reason, amount, facts=facts, source_id=source_id).transaction

    def evaluate_badges(
        self,
        db: Session,
        student_id: str,
        facts: Mapping[str, int] | None = None,
    ) -> list[Badge]:
        """Run one evaluation pass for the student and return the badges it awarded."""
        # The row lock serializes award cycles for the same student.
        student = db.scalar(
            select(Student)
            .where(Student.id == student_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        if student is None:
            raise NotFound(f"Student {student_id} not found")

        earned = set(db.scalars(select(StudentBadge.badge_id).where(StudentBadge.student_id == student_id)))
        candidates = [badge for badge in list_active_badges(db) if badge.id not in earned]
        if not candidates:
            db.commit()
            return []

        conditions = {badge.id: parse_condition(badge.condition) for badge in candidates}
        snapshot = self._gather_facts(db, student, conditions.values(), facts or {})

        awarded: list[Badge] = []
        for badge in candidates:
            if not is_eligible(student, conditions[badge.id], snapshot):
                continue
            try:
                if self._award(db, student_id, badge):
                    awarded.append(badge)
            except SQLAlchemyError:
                logger.exception("Failed to award badge %s to student %s; continuing.", badge.code, student_id)
        db.commit()
        return awarded

    def _gather_facts(self, db: Session, student: Student, conditions, event_facts: Mapping[str, int]):
        needed = {
            condition.kind
            for condition in conditions
            if isinstance(condition, KnownCondition) and condition.kind is not ConditionKind.XP_TOTAL
        }
        facts = dict(self.fact_source.collect(db, student.id, needed)) if needed else {}
        for kind, value in event_facts.items():
            stored = facts.get(kind)
            if stored is None:
                facts[kind] = value
            elif isinstance(value, (int, float)) and not isinstance(value, bool):
                # Event facts can only raise a stored count, never hide history.
                facts[kind] = max(stored, value)
        facts[ConditionKind.XP_TOTAL.value] = student.xp_total
        return MappingProxyType(facts)

    def _award(self, db: Session, student_id: str, badge: Badge) -> bool:
        try:
            with db.begin_nested():
                db.add(StudentBadge(student_id=student_id, badge_id=badge.id))
                db.flush()
                if badge.xp_reward > 0:
                    # Ledger only: bonus XP must not trigger another evaluation pass.
                    record_transaction(
                        db,
                        student_id,
                        badge.xp_reward,
                        XPReason.BADGE_EARNED,
                        source_id=badge.id,
                        commit=False,
                    )
        except IntegrityError:
            logger.info("Badge %s already held by student %s; skipping duplicate award.", badge.code, student_id)
            return False

        logger.info("Awarded badge %s (+%d XP) to student %s.", badge.code, badge.xp_reward, student_id)
        return True


def list_awards(db: Session, student_id: str) -> list[StudentBadge]:
    """Earned badges, newest first."""
    if db.get(Student, student_id) is None:
        raise NotFound(f"Student {student_id} not found")
    rows = db.scalars(
        select(StudentBadge)
        .where(StudentBadge.student_id == student_id)
        .options(selectinload(StudentBadge.badge))
        .order_by(StudentBadge.awarded_at.desc(), StudentBadge.id.desc())
    ).all()
    return list(rows)


award_engine = AwardEngine()


def grant_xp(
    db: Session,
    student_id: str,
    reason: XPReason | str,
    amount: int,
    facts: Mapping[str, int] | None = None,
    source_id: str | None = None,
) -> XPTransaction:
    """Entry point for the lesson, assignment, quiz, attendance and messaging services.

    Call it after the triggering action has committed. XP is best effort for the
    caller: a failure here should not roll back the primary action.
    """
    return award_engine.grant_xp(db, student_id, reason, amount, facts=facts, source_id=source_id)
