from typing import Any

from sqlalchemy import JSON, Boolean, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.db.base import Base
from academy.models.common import CreatedAtMixin, UUIDPrimaryKeyMixin


class Badge(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "badges"
    __table_args__ = (CheckConstraint("xp_reward >= 0", name="ck_badges_xp_reward_nonneg"),)

    code: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(String(1024), nullable=False)
    icon: Mapped[str] = mapped_column(String(64), nullable=False)
    category: Mapped[str] = mapped_column(String(32), nullable=False, index=True)  # learning | quiz | attendance | social
    condition: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False)
    xp_reward: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    sort_order: Mapped[int] = mapped_column(Integer, nullable=False, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)

    student_badges = relationship("StudentBadge", back_populates="badge", passive_deletes="all")
