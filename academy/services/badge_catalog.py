import logging
from dataclasses import dataclass, field

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.core.errors import Conflict, NotFound, ValidationError
from academy.models.badge import Badge
from academy.models.student_badge import StudentBadge
from academy.schemas.gamification import BadgeCreate, BadgeUpdate

logger = logging.getLogger(__name__)

DEFAULT_BADGES: tuple[dict, ...] = (
    {
        "code": "FIRST_LESSON",
        "name": "First Steps",
        "description": "Complete your first lesson",
        "icon": "🎯",
        "category": "learning",
        "condition": {"type": "lessons_completed", "value": 1},
        "xp_reward": 50,
    },
    {
        "code": "LESSON_MASTER",
        "name": "Lesson Master",
        "description": "Complete 10 lessons",
        "icon": "📚",
        "category": "learning",
        "condition": {"type": "lessons_completed", "value": 10},
        "xp_reward": 200,
    },
    {
        "code": "FIRST_QUIZ",
        "name": "Quiz Taker",
        "description": "Pass your first quiz",
        "icon": "✏️",
        "category": "quiz",
        "condition": {"type": "quizzes_passed", "value": 1},
        "xp_reward": 50,
    },
    {
        "code": "QUIZ_MASTER",
        "name": "Quiz Master",
        "description": "Score 90%+ on 5 quizzes",
        "icon": "🏆",
        "category": "quiz",
        "condition": {"type": "quizzes_high_score", "value": 5},
        "xp_reward": 300,
    },
    {
        "code": "PERFECT_SCORE",
        "name": "Perfect Score",
        "description": "Score 100% on a quiz",
        "icon": "💯",
        "category": "quiz",
        "condition": {"type": "perfect_quiz_score", "value": 1},
        "xp_reward": 100,
    },
    {
        "code": "FIRST_ASSIGNMENT",
        "name": "Homework Hero",
        "description": "Submit your first assignment",
        "icon": "📝",
        "category": "learning",
        "condition": {"type": "assignments_submitted", "value": 1},
        "xp_reward": 50,
    },
    {
        "code": "ASSIGNMENT_STREAK",
        "name": "Streak Master",
        "description": "Submit 5 assignments on time",
        "icon": "🔥",
        "category": "learning",
        "condition": {"type": "assignments_on_time", "value": 5},
        "xp_reward": 200,
    },
    {
        "code": "PERFECT_ATTENDANCE",
        "name": "Always Present",
        "description": "Perfect attendance for a month",
        "icon": "⭐",
        "category": "attendance",
        "condition": {"type": "perfect_attendance_month", "value": 1},
        "xp_reward": 150,
    },
    {
        "code": "EARLY_BIRD",
        "name": "Early Bird",
        "description": "Submit an assignment 24 hours early",
        "icon": "🐦",
        "category": "learning",
        "condition": {"type": "early_submission", "value": 1},
        "xp_reward": 75,
    },
    {
        "code": "FIRST_CERT",
        "name": "Certified",
        "description": "Earn your first certificate",
        "icon": "🎓",
        "category": "learning",
        "condition": {"type": "certificates_earned", "value": 1},
        "xp_reward": 250,
    },
    {
        "code": "TOP_STUDENT",
        "name": "Top Student",
        "description": "Reach 500 XP",
        "icon": "👑",
        "category": "social",
        "condition": {"type": "xp_total", "value": 500},
        "xp_reward": 0,
    },
    {
        "code": "XP_1000",
        "name": "Legend",
        "description": "Reach 1000 XP",
        "icon": "🌟",
        "category": "social",
        "condition": {"type": "xp_total", "value": 1000},
        "xp_reward": 0,
    },
)


@dataclass
class SeedResult:
    created: list[str] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)


def get_badge(db: Session, badge_id: str) -> Badge:
    badge = db.get(Badge, badge_id)
    if badge is None:
        raise NotFound(f"Badge {badge_id} not found")
    return badge


def list_active_badges(db: Session) -> list[Badge]:
    rows = db.scalars(
        select(Badge).where(Badge.is_active.is_(True)).order_by(Badge.sort_order.asc(), Badge.id.asc())
    ).all()
    return list(rows)


def next_sort_order(db: Session) -> int:
    current = db.scalar(select(func.max(Badge.sort_order)))
    return (current or 0) + 1


def _code_taken(db: Session, code: str) -> bool:
    return db.scalar(select(Badge.id).where(Badge.code == code)) is not None


def _commit_catalog_change(db: Session, badge: Badge) -> Badge:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict(f'Badge with code "{badge.code}" already exists') from exc
    db.refresh(badge)
    return badge


def create_badge(db: Session, definition: BadgeCreate) -> Badge:
    if _code_taken(db, definition.code):
        raise Conflict(f'Badge with code "{definition.code}" already exists')

    badge = Badge(
        code=definition.code,
        name=definition.name,
        description=definition.description,
        icon=definition.icon,
        category=definition.category,
        condition=definition.condition.model_dump(),
        xp_reward=definition.xp_reward,
        sort_order=definition.sort_order if definition.sort_order is not None else next_sort_order(db),
        is_active=definition.is_active,
    )
    db.add(badge)
    badge = _commit_catalog_change(db, badge)
    logger.info("Created badge %s (order=%d).", badge.code, badge.sort_order)
    return badge


def update_badge(db: Session, badge_id: str, changes: BadgeUpdate) -> Badge:
    badge = get_badge(db, badge_id)
    values = changes.model_dump(exclude_unset=True)

    nulls = sorted(key for key, value in values.items() if value is None)
    if nulls:
        raise ValidationError(f"Fields cannot be null: {', '.join(nulls)}")

    new_code = values.get("code")
    if new_code is not None and new_code != badge.code:
        if _code_taken(db, new_code):
            raise Conflict(f'Badge with code "{new_code}" already exists')
        awarded = db.scalar(select(StudentBadge.id).where(StudentBadge.badge_id == badge.id).limit(1))
        if awarded is not None:
            raise Conflict(f'Badge "{badge.code}" has already been awarded; its code cannot change')

    for key, value in values.items():
        setattr(badge, key, value)
    db.add(badge)
    badge = _commit_catalog_change(db, badge)
    logger.info("Updated badge %s fields=%s.", badge.code, sorted(values))
    return badge


def seed_default_badges(db: Session) -> SeedResult:
    """Insert the default catalog; codes that already exist are left untouched."""
    result = SeedResult()
    order = next_sort_order(db)
    for definition in DEFAULT_BADGES:
        if _code_taken(db, definition["code"]):
            result.skipped.append(definition["code"])
            continue
        payload = BadgeCreate.model_validate({**definition, "sort_order": order})
        db.add(
            Badge(
                code=payload.code,
                name=payload.name,
                description=payload.description,
                icon=payload.icon,
                category=payload.category,
                condition=payload.condition.model_dump(),
                xp_reward=payload.xp_reward,
                sort_order=order,
                is_active=True,
            )
        )
        result.created.append(payload.code)
        order += 1

    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise Conflict("Default badges were seeded concurrently; retry the request") from exc
    logger.info("Seeded %d badges, skipped %d existing.", len(result.created), len(result.skipped))
    return result
