"""Trip creation and owner-only trip maintenance."""

import logging
import uuid

from sqlalchemy.orm import Session

from core.auth.interface import AuthUser
from core.db.database import Database
from core.db.schemas.trip import Trip
from core.errors import ValidationError
from core.models.trip import TripCreate, TripRead, TripUpdate
from core.services.membership import add_member
from core.services.permissions import can_act_as_member, can_act_as_owner, load_trip_facts

logger = logging.getLogger(__name__)


def create_trip(db: Database, principal: AuthUser, data: TripCreate) -> TripRead:
    """Create a trip owned by the caller. The owner's membership row is written in the same transaction."""

    def work(session: Session) -> TripRead:
        trip = Trip(owner_user_id=principal.user_id, **data.model_dump())
        session.add(trip)
        session.flush()
        add_member(session, trip.id, principal.user_id, principal.normalized_email)
        return TripRead.model_validate(trip)

    trip = db.run_in_transaction(work)
    logger.info("Trip %s created by %s", trip.id, principal.user_id)
    return trip


def get_trip(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> TripRead:
    def work(session: Session) -> TripRead:
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_member(facts).enforce(f"{principal.user_id} cannot view trip {trip_id}")
        return TripRead.model_validate(session.get(Trip, trip_id))

    return db.run_in_transaction(work)


def update_trip(db: Database, principal: AuthUser, trip_id: uuid.UUID, data: TripUpdate) -> TripRead:
    def work(session: Session) -> TripRead:
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_owner(facts).enforce(f"{principal.user_id} cannot update trip {trip_id}")
        trip = session.get(Trip, trip_id)
        for field, value in data.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(trip, field, value)
        # A PATCH may carry only one of the dates; check the merged row.
        if trip.start_date and trip.end_date and trip.end_date < trip.start_date:
            raise ValidationError(f"Trip {trip_id} would end before it starts")
        session.flush()
        return TripRead.model_validate(trip)

    return db.run_in_transaction(work)


def delete_trip(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> None:
    """Owner only. Memberships, invitations and expenses go with the trip."""

    def work(session: Session) -> None:
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_owner(facts).enforce(f"{principal.user_id} cannot delete trip {trip_id}")
        session.delete(session.get(Trip, trip_id))

    db.run_in_transaction(work)
    logger.info("Trip %s deleted by %s", trip_id, principal.user_id)
