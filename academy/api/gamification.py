from collections import defaultdict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from academy.api.deps import get_current_admin, get_current_principal, get_current_student
from academy.core.config import get_settings
from academy.db.session import get_db
from academy.models.admin import Admin
from academy.models.student import Student
from academy.schemas.gamification import (
    BadgeCreate,
    BadgeOut,
    BadgeUpdate,
    CourseLeaderboardResponse,
    CourseOut,
    EvaluateRequest,
    EvaluateResponse,
    LeaderboardEntryOut,
    LevelOut,
    MyBadgesResponse,
    MySummaryResponse,
    MyXPResponse,
    SeedBadgesResponse,
    StudentBadgeOut,
    XPGrantRequest,
    XPGrantResponse,
    XPTransactionOut,
)
from academy.services import badge_catalog, leaderboard, xp_ledger
from academy.services.awards import award_engine, list_awards
from academy.services.levels import level_for

router = APIRouter(prefix="/gamification", tags=["gamification"])


@router.get("/badges", response_model=list[BadgeOut], dependencies=[Depends(get_current_principal)])
def list_badges(db: Session = Depends(get_db)):
    return badge_catalog.list_active_badges(db)


@router.get("/leaderboard/global", response_model=list[LeaderboardEntryOut], dependencies=[Depends(get_current_principal)])
def global_leaderboard(db: Session = Depends(get_db)):
    return leaderboard.global_top(db, get_settings().leaderboard_size)


@router.get(
    "/leaderboard/{course_id}",
    response_model=CourseLeaderboardResponse,
    dependencies=[Depends(get_current_principal)],
)
def course_leaderboard(course_id: str, db: Session = Depends(get_db)):
    course, entries = leaderboard.course_top(db, course_id, get_settings().leaderboard_size)
    return CourseLeaderboardResponse(
        course=CourseOut.model_validate(course),
        entries=[LeaderboardEntryOut.model_validate(entry) for entry in entries],
    )


@router.get("/my/badges", response_model=MyBadgesResponse)
def my_badges(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
    awards = [StudentBadgeOut.model_validate(award) for award in list_awards(db, student.id)]
    by_category: dict[str, list[StudentBadgeOut]] = defaultdict(list)
    for award in awards:
        by_category[award.badge.category].append(award)
    return MyBadgesResponse(badges=awards, by_category=dict(by_category))


@router.get("/my/xp", response_model=MyXPResponse)
def my_xp(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
    settings = get_settings()
    xp_total = xp_ledger.get_total(db, student.id)
    transactions = xp_ledger.get_recent_transactions(db, student.id, settings.recent_transactions_limit)
    return MyXPResponse(
        xp_total=xp_total,
        recent_transactions=[XPTransactionOut.model_validate(row) for row in transactions],
        rank=leaderboard.student_rank(db, student.id),
        level=LevelOut.model_validate(level_for(xp_total)),
    )


@router.get("/my/summary", response_model=MySummaryResponse)
def my_summary(student: Student = Depends(get_current_student), db: Session = Depends(get_db)):
    limit = get_settings().summary_badges_limit
    xp_total = xp_ledger.get_total(db, student.id)
    awards = list_awards(db, student.id)
    earned_ids = {award.badge_id for award in awards}
    active = badge_catalog.list_active_badges(db)
    next_badges = [badge for badge in active if badge.id not in earned_ids][:limit]

    return MySummaryResponse(
        xp_total=xp_total,
        rank=leaderboard.student_rank(db, student.id),
        level=LevelOut.model_validate(level_for(xp_total)),
        total_badges=len(active),
        earned_badges=len(awards),
        recent_badges=[StudentBadgeOut.model_validate(award) for award in awards[:limit]],
        next_badges=[BadgeOut.model_validate(badge) for badge in next_badges],
    )


@router.post("/admin/badges", response_model=BadgeOut, status_code=status.HTTP_201_CREATED)
def create_badge(
    payload: BadgeCreate,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    return badge_catalog.create_badge(db, payload)


@router.put("/admin/badges/{badge_id}", response_model=BadgeOut)
def update_badge(
    badge_id: str,
    payload: BadgeUpdate,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    return badge_catalog.update_badge(db, badge_id, payload)


@router.post("/admin/seed-badges", response_model=SeedBadgesResponse)
def seed_badges(db: Session = Depends(get_db), _: Admin = Depends(get_current_admin)):
    result = badge_catalog.seed_default_badges(db)
    return SeedBadgesResponse(created=result.created, skipped=result.skipped)


@router.post("/admin/students/{student_id}/xp", response_model=XPGrantResponse)
def grant_student_xp(
    student_id: str,
    payload: XPGrantRequest,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    result = award_engine.process_event(
        db,
        student_id,
        payload.reason,
        payload.amount,
        facts=payload.facts,
        source_id=payload.source_id,
    )
    return XPGrantResponse(
        transaction=XPTransactionOut.model_validate(result.transaction),
        xp_total=xp_ledger.get_total(db, student_id),
        awarded_badges=[BadgeOut.model_validate(badge) for badge in result.awarded],
    )


@router.post("/admin/students/{student_id}/evaluate", response_model=EvaluateResponse)
def evaluate_student(
    student_id: str,
    payload: EvaluateRequest | None = None,
    db: Session = Depends(get_db),
    _: Admin = Depends(get_current_admin),
):
    facts = payload.facts if payload else {}
    awarded = award_engine.evaluate_badges(db, student_id, facts)
    return EvaluateResponse(
        xp_total=xp_ledger.get_total(db, student_id),
        awarded_badges=[BadgeOut.model_validate(badge) for badge in awarded],
    )
