"""
Permission evaluation for trip-scoped actions.

Every check is a pure function of facts (who is acting, who owns the trip,
whether the actor is a member, who authored the resource) and returns a
``Verdict`` carrying one of three decisions: ALLOWED, FORBIDDEN or NOT_FOUND.
Only ``load_trip_facts`` touches the database, and it asks the Membership
Store rather than inferring membership from other tables.

Precedence:
    1. The trip owner may perform owner-only actions and override resource
       ownership on expenses and documents.
    2. Any member may perform member-level actions (create, invite, view).
    3. Non-owners may change only resources they authored, except todos and
       itinerary items, which every member may change.
    4. The owner can never be removed through the member-removal path.
    5. Non-owners may leave; the owner may not.

Non-members get the same denial whether or not the trip exists, so trip
existence does not leak.
"""

import uuid
from dataclasses import dataclass
from enum import Enum

from sqlalchemy import select
from sqlalchemy.orm import Session

from core.db.schemas.trip import Trip
from core.errors import ErrorCode, ForbiddenError, NotFoundError
from core.services.membership import is_member


class Decision(str, Enum):
    ALLOWED = "allowed"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"


class ResourceKind(str, Enum):
    EXPENSE = "expense"
    DOCUMENT = "document"
    TODO = "todo"
    ITINERARY_ITEM = "itinerary_item"


# Any member may change these regardless of who created them.
COLLABORATIVE_KINDS = frozenset({ResourceKind.TODO, ResourceKind.ITINERARY_ITEM})

_NOT_FOUND_CODES = {ResourceKind.EXPENSE: ErrorCode.EXPENSE_NOT_FOUND}


@dataclass(frozen=True)
class TripFacts:
    trip_id: uuid.UUID
    actor_id: str
    owner_user_id: str | None
    actor_is_member: bool

    @property
    def trip_exists(self) -> bool:
        return self.owner_user_id is not None

    @property
    def actor_is_owner(self) -> bool:
        return self.trip_exists and self.owner_user_id == self.actor_id

    @property
    def has_access(self) -> bool:
        return self.trip_exists and self.actor_is_member


@dataclass(frozen=True)
class Verdict:
    decision: Decision
    code: ErrorCode | None = None

    @property
    def allowed(self) -> bool:
        return self.decision is Decision.ALLOWED

    def enforce(self, message: str) -> None:
        """Raise the exception matching this verdict; no-op when allowed."""
        if self.decision is Decision.ALLOWED:
            return
        if self.decision is Decision.NOT_FOUND:
            raise NotFoundError(message, code=self.code or ErrorCode.NOT_FOUND)
        raise ForbiddenError(message, code=self.code or ErrorCode.FORBIDDEN)


ALLOW = Verdict(Decision.ALLOWED)
_NO_ACCESS = Verdict(Decision.FORBIDDEN, ErrorCode.TRIP_ACCESS_DENIED)


def load_trip_facts(session: Session, trip_id: uuid.UUID, actor_id: str) -> TripFacts:
    owner_user_id = session.execute(select(Trip.owner_user_id).where(Trip.id == trip_id)).scalar_one_or_none()
    member = owner_user_id is not None and is_member(session, trip_id, actor_id)
    return TripFacts(trip_id=trip_id, actor_id=actor_id, owner_user_id=owner_user_id, actor_is_member=member)


def can_act_as_member(facts: TripFacts) -> Verdict:
    """View trip data, create expenses/documents/todos/itinerary items, invite."""
    return ALLOW if facts.has_access else _NO_ACCESS


def can_act_as_owner(facts: TripFacts) -> Verdict:
    """Update or delete the trip."""
    if not facts.has_access:
        return _NO_ACCESS
    if facts.actor_is_owner:
        return ALLOW
    return Verdict(Decision.FORBIDDEN, ErrorCode.OWNER_ONLY)


def resource_not_found(kind: ResourceKind) -> Verdict:
    """A trip resource that does not exist. Its trip is unknown, so no access check applies."""
    return Verdict(Decision.NOT_FOUND, _NOT_FOUND_CODES.get(kind, ErrorCode.NOT_FOUND))


def can_mutate_resource(facts: TripFacts, kind: ResourceKind, resource_owner_id: str | None) -> Verdict:
    if not facts.has_access:
        return _NO_ACCESS
    if facts.actor_is_owner or kind in COLLABORATIVE_KINDS:
        return ALLOW
    if resource_owner_id is not None and resource_owner_id == facts.actor_id:
        return ALLOW
    return Verdict(Decision.FORBIDDEN, ErrorCode.NOT_RESOURCE_OWNER)


def can_remove_participant(facts: TripFacts, target_user_id: str) -> Verdict:
    if not facts.has_access:
        return _NO_ACCESS
    if target_user_id == facts.owner_user_id:
        return Verdict(Decision.FORBIDDEN, ErrorCode.OWNER_PROTECTED)
    if facts.actor_is_owner or target_user_id == facts.actor_id:
        return ALLOW
    return Verdict(Decision.FORBIDDEN, ErrorCode.OWNER_ONLY)


def can_leave_trip(facts: TripFacts) -> Verdict:
    if facts.actor_is_owner:
        return Verdict(Decision.FORBIDDEN, ErrorCode.OWNER_CANNOT_LEAVE)
    return ALLOW if facts.has_access else _NO_ACCESS


def can_cancel_invite(facts: TripFacts, invited_by: str) -> Verdict:
    """The trip owner or whoever sent the invitation."""
    if facts.actor_is_owner or (facts.trip_exists and invited_by == facts.actor_id):
        return ALLOW
    if not facts.has_access:
        return _NO_ACCESS
    return Verdict(Decision.FORBIDDEN, ErrorCode.FORBIDDEN)
