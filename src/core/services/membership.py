"""Membership Store: the single source of truth for "is user X a member of trip T".

Every function works inside the caller's session; the caller owns the transaction.
"""

import logging
import uuid

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.orm import Session

from core.db.schemas.base import utcnow
from core.db.schemas.trip_member import TripMember
from core.errors import ErrorCode, NotFoundError

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {"postgresql": postgresql.insert, "sqlite": sqlite.insert}


def is_member(session: Session, trip_id: uuid.UUID, user_id: str) -> bool:
    stmt = select(TripMember.id).where(TripMember.trip_id == trip_id, TripMember.user_id == user_id)
    return session.execute(stmt).first() is not None


def get_membership(session: Session, trip_id: uuid.UUID, user_id: str) -> TripMember | None:
    stmt = select(TripMember).where(TripMember.trip_id == trip_id, TripMember.user_id == user_id)
    return session.execute(stmt).scalar_one_or_none()


def add_member(session: Session, trip_id: uuid.UUID, user_id: str, email: str | None = None) -> tuple[TripMember, bool]:
    """Insert a membership row, or return the existing one.

    Relies on the (trip_id, user_id) unique constraint, so two concurrent adds
    converge on a single row. Returns ``(row, created)``.
    """
    dialect = session.get_bind().dialect.name
    insert = _UPSERT_DIALECTS.get(dialect)
    if insert is None:
        raise NotImplementedError(f"add_member does not support the {dialect} dialect")

    stmt = (
        insert(TripMember.__table__)
        .values(
            id=uuid.uuid4(),
            trip_id=trip_id,
            user_id=user_id,
            email=email.strip().lower() if email else None,
            added_at=utcnow(),
        )
        .on_conflict_do_nothing(index_elements=["trip_id", "user_id"])
    )
    created = session.execute(stmt).rowcount == 1

    membership = get_membership(session, trip_id, user_id)
    if membership is None:
        raise NotFoundError(f"Membership {trip_id}/{user_id} vanished after insert", code=ErrorCode.PARTICIPANT_NOT_FOUND)
    if created:
        logger.info("Added member %s to trip %s", user_id, trip_id)
    return membership, created


def remove_member(session: Session, trip_id: uuid.UUID, user_id: str) -> None:
    """Delete a membership row. Does not know about ownership; callers must guard the owner."""
    stmt = delete(TripMember).where(TripMember.trip_id == trip_id, TripMember.user_id == user_id)
    if session.execute(stmt).rowcount == 0:
        raise NotFoundError(
            f"User {user_id} is not a member of trip {trip_id}",
            code=ErrorCode.PARTICIPANT_NOT_FOUND,
        )
    logger.info("Removed member %s from trip %s", user_id, trip_id)


def count_members(session: Session, trip_id: uuid.UUID) -> int:
    stmt = select(func.count()).select_from(TripMember).where(TripMember.trip_id == trip_id)
    return session.execute(stmt).scalar_one()


def list_members(session: Session, trip_id: uuid.UUID) -> list[TripMember]:
    stmt = select(TripMember).where(TripMember.trip_id == trip_id).order_by(TripMember.added_at, TripMember.user_id)
    return list(session.execute(stmt).scalars().all())


def list_member_ids(session: Session, trip_id: uuid.UUID) -> list[str]:
    stmt = select(TripMember.user_id).where(TripMember.trip_id == trip_id)
    return list(session.execute(stmt).scalars().all())


def has_member_with_email(session: Session, trip_id: uuid.UUID, email: str) -> bool:
    normalized = email.strip().lower()
    if not normalized:
        return False
    stmt = select(TripMember.id).where(TripMember.trip_id == trip_id, TripMember.email == normalized)
    return session.execute(stmt).first() is not None
