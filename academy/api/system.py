from fastapi import APIRouter, Depends
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from academy.core.config import get_settings
from academy.db.session import get_db
from academy.models.badge import Badge
from academy.models.student import Student
from academy.models.xp_transaction import XPTransaction

router = APIRouter(tags=["system"])


@router.get("/health")
def health():
    settings = get_settings()
    return {"status": "ok", "version": settings.app_version}


@router.get("/system/info")
def system_info(db: Session = Depends(get_db)):
    settings = get_settings()
    active_students = db.scalar(select(func.count()).select_from(Student).where(Student.is_active.is_(True))) or 0
    active_badges = db.scalar(select(func.count()).select_from(Badge).where(Badge.is_active.is_(True))) or 0
    transactions = db.scalar(select(func.count()).select_from(XPTransaction)) or 0
    return {
        "app_name": settings.app_name,
        "app_env": settings.app_env,
        "app_version": settings.app_version,
        "active_students": active_students,
        "active_badges": active_badges,
        "xp_transactions": transactions,
    }
