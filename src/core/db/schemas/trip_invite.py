"""SQLAlchemy ORM model for the trip_invites table."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Uuid, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from core.db.schemas.base import Base, UTCDateTime, utcnow

if TYPE_CHECKING:
    from core.db.schemas.trip import Trip


class InviteStatus(str, Enum):
    PENDING = "pending"
    ACCEPTED = "accepted"
    EXPIRED = "expired"


class TripInvite(Base):
    __tablename__ = "trip_invites"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    trip_id: Mapped[uuid.UUID] = mapped_column(Uuid, ForeignKey("trips.id", ondelete="CASCADE"), nullable=False)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    token: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default=InviteStatus.PENDING.value)
    invited_by: Mapped[str] = mapped_column(String(255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False, default=utcnow)
    expires_at: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    accepted_at: Mapped[datetime | None] = mapped_column(UTCDateTime)
    accepted_by: Mapped[str | None] = mapped_column(String(255))

    trip: Mapped["Trip"] = relationship(back_populates="invites")

    __table_args__ = (
        CheckConstraint("status IN ('pending', 'accepted', 'expired')", name="chk_trip_invites_status"),
        Index("idx_trip_invites_trip_id", "trip_id"),
        Index("idx_trip_invites_email", "email"),
        Index(
            "uq_trip_invites_pending_email",
            "trip_id",
            "email",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Expiry is derived from expires_at; the stored status may lag behind."""
        return (now or utcnow()) > self.expires_at

    def effective_status(self, now: datetime | None = None) -> InviteStatus:
        if self.status == InviteStatus.ACCEPTED.value:
            return InviteStatus.ACCEPTED
        if self.status == InviteStatus.EXPIRED.value or self.is_expired(now):
            return InviteStatus.EXPIRED
        return InviteStatus.PENDING

    def is_actionable(self, now: datetime | None = None) -> bool:
        return self.effective_status(now) is InviteStatus.PENDING
