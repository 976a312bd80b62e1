"""SQLAlchemy ORM model for the expenses table."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import BigInteger, CheckConstraint, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db.schemas.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from core.db.schemas.trip import Trip


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    # Payer. Not a foreign key to trip_members: expenses outlive the payer's membership.
    user_id: Mapped[str] = mapped_column(String(255), nullable=False)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    category: Mapped[str | None] = mapped_column(String(50))
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow, onupdate=utcnow)

    trip: Mapped["Trip"] = relationship(back_populates="expenses")

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="chk_expenses_amount_positive"),
        Index("idx_expenses_trip_id", "trip_id"),
        Index("idx_expenses_trip_category", "trip_id", "category"),
    )
