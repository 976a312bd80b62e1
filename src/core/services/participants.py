"""Participant listing, removal by the owner, and self-removal ("leave trip")."""

import logging
import uuid

from sqlalchemy.orm import Session

from core.auth.interface import AuthUser
from core.db.database import Database
from core.errors import NotFoundError
from core.models.participant import ParticipantRead, RemovalResult
from core.services.membership import list_members, remove_member
from core.services.permissions import (
    can_act_as_member,
    can_leave_trip,
    can_remove_participant,
    load_trip_facts,
)

logger = logging.getLogger(__name__)


def list_participants(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> list[ParticipantRead]:
    def work(session: Session) -> list[ParticipantRead]:
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_member(facts).enforce(f"{principal.user_id} cannot view trip {trip_id}")
        return [
            ParticipantRead(
                trip_id=m.trip_id,
                user_id=m.user_id,
                email=m.email,
                added_at=m.added_at,
                is_owner=m.user_id == facts.owner_user_id,
            )
            for m in list_members(session, trip_id)
        ]

    return db.run_in_transaction(work)


def remove_participant(db: Database, principal: AuthUser, trip_id: uuid.UUID, user_id: str) -> RemovalResult:
    """Owner removes anyone but themselves; members may remove themselves.

    A target that is already gone yields ``removed=False`` instead of an error,
    so a leave racing an owner removal converges quietly.
    """

    def work(session: Session) -> RemovalResult:
        facts = load_trip_facts(session, trip_id, principal.user_id)
        if user_id == principal.user_id and not facts.has_access:
            logger.info("Self-removal of %s from trip %s: already removed", user_id, trip_id)
            return RemovalResult(trip_id=trip_id, user_id=user_id, removed=False)

        can_remove_participant(facts, user_id).enforce(
            f"{principal.user_id} cannot remove {user_id} from trip {trip_id}"
        )
        try:
            remove_member(session, trip_id, user_id)
        except NotFoundError:
            logger.info("Participant %s already removed from trip %s", user_id, trip_id)
            return RemovalResult(trip_id=trip_id, user_id=user_id, removed=False)
        return RemovalResult(trip_id=trip_id, user_id=user_id, removed=True)

    result = db.run_in_transaction(work)
    if result.removed:
        logger.info("Participant %s removed from trip %s by %s", user_id, trip_id, principal.user_id)
    return result


def leave_trip(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> RemovalResult:
    """Self-removal. The owner has no leave path and is rejected explicitly."""

    def work(session: Session) -> RemovalResult:
        facts = load_trip_facts(session, trip_id, principal.user_id)
        if not facts.has_access:
            return RemovalResult(trip_id=trip_id, user_id=principal.user_id, removed=False)

        can_leave_trip(facts).enforce(f"{principal.user_id} cannot leave trip {trip_id}")
        try:
            remove_member(session, trip_id, principal.user_id)
        except NotFoundError:
            return RemovalResult(trip_id=trip_id, user_id=principal.user_id, removed=False)
        return RemovalResult(trip_id=trip_id, user_id=principal.user_id, removed=True)

    result = db.run_in_transaction(work)
    logger.info("User %s left trip %s (removed=%s)", principal.user_id, trip_id, result.removed)
    return result
