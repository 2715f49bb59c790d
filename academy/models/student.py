from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from academy.core.errors import ValidationError
from academy.db.base import Base
from academy.models.common import CreatedAtMixin, UUIDPrimaryKeyMixin


class Student(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "students"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True, index=True)
    # Running sum of xp_transactions.amount; written only by the ledger.
    xp_total: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0", index=True)

    xp_transactions = relationship("XPTransaction", back_populates="student", passive_deletes="all")
    student_badges = relationship("StudentBadge", back_populates="student", passive_deletes="all")

    @validates("xp_total")
    def _reject_direct_total(self, _key, _value):
        raise ValidationError("xp_total is derived from the XP ledger and cannot be assigned")
