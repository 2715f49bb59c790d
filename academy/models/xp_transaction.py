from sqlalchemy import ForeignKey, Integer, String, event
from sqlalchemy.orm import Mapped, mapped_column, relationship

from academy.core.errors import ValidationError
from academy.db.base import Base
from academy.models.common import CreatedAtMixin, UUIDPrimaryKeyMixin


class XPTransaction(UUIDPrimaryKeyMixin, CreatedAtMixin, Base):
    __tablename__ = "xp_transactions"

    student_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("students.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    reason: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    source_id: Mapped[str | None] = mapped_column(String(36), nullable=True)

    student = relationship("Student", back_populates="xp_transactions")


@event.listens_for(XPTransaction, "before_update")
def _reject_update(_mapper, _connection, target: XPTransaction) -> None:
    raise ValidationError(f"XP transaction {target.id} is append-only")


@event.listens_for(XPTransaction, "before_delete")
def _reject_delete(_mapper, _connection, target: XPTransaction) -> None:
    raise ValidationError(f"XP transaction {target.id} is append-only")
