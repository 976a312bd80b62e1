"""
Invitation lifecycle: create, resend, cancel and accept trip invitations.

An invitation is a single-use, time-limited token that turns into a
membership row when accepted. Expiry is derived from ``expires_at`` at read
time; the stored ``status`` is only flipped to ``expired`` lazily (when a new
invitation is created for the same address, or by the purge job), so both
must be consulted. A ``pending`` row past its expiry is never actionable.

Acceptance consumes the token and inserts the membership in one transaction.
The status update is conditional on the row still being ``pending``, so of
two concurrent accepts exactly one succeeds and the other sees the token as
already consumed.

Cancelled invitations are deleted outright; their token can never be used.
"""

import logging
import secrets
import uuid
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.auth.interface import AuthUser
from core.config import Config
from core.db.database import Database
from core.db.schemas.base import utcnow
from core.db.schemas.trip import Trip
from core.db.schemas.trip_invite import InviteStatus, TripInvite
from core.errors import (
    ConflictError,
    EmailMismatchError,
    ErrorCode,
    ExpiredError,
    InviteEmailError,
    NotFoundError,
)
from core.models.invite import InviteAccepted, InviteCreate, InviteCreated, InviteRead
from core.services.membership import add_member, has_member_with_email
from core.services.notifications import EmailDeliveryError, send_invite_email
from core.services.permissions import can_act_as_member, can_cancel_invite, load_trip_facts

logger = logging.getLogger(__name__)

TOKEN_BYTES = 24


def generate_token() -> str:
    """192 bits from the OS CSPRNG, hex encoded."""
    return secrets.token_hex(TOKEN_BYTES)


def build_invite_link(base_url: str, token: str) -> str:
    return f"{base_url.rstrip('/')}/invite/{token}"


def _expire_stale_pending(session: Session, trip_id: uuid.UUID, email: str, now: datetime) -> int:
    stmt = (
        update(TripInvite.__table__)
        .where(
            TripInvite.trip_id == trip_id,
            TripInvite.email == email,
            TripInvite.status == InviteStatus.PENDING.value,
            TripInvite.expires_at < now,
        )
        .values(status=InviteStatus.EXPIRED.value)
    )
    return session.execute(stmt).rowcount


def _find_pending_invite(session: Session, trip_id: uuid.UUID, email: str, now: datetime) -> TripInvite | None:
    stmt = select(TripInvite).where(
        TripInvite.trip_id == trip_id,
        TripInvite.email == email,
        TripInvite.status == InviteStatus.PENDING.value,
        TripInvite.expires_at >= now,
    )
    return session.execute(stmt).scalars().first()


def _insert_invite(
    session: Session,
    trip_id: uuid.UUID,
    email: str,
    invited_by: str,
    now: datetime,
    ttl_days: int,
) -> TripInvite:
    invite = TripInvite(
        trip_id=trip_id,
        email=email,
        token=generate_token(),
        status=InviteStatus.PENDING.value,
        invited_by=invited_by,
        created_at=now,
        expires_at=now + timedelta(days=ttl_days),
    )
    session.add(invite)
    try:
        session.flush()
    except IntegrityError as e:
        # Lost a race with a concurrent invite for the same address.
        raise ConflictError(f"{email} already has a pending invitation to trip {trip_id}") from e
    return invite


def _trip_name(session: Session, trip_id: uuid.UUID) -> str:
    return session.execute(select(Trip.name).where(Trip.id == trip_id)).scalar_one()


def _deliver(
    result: InviteCreated,
    trip_name: str,
    principal: AuthUser,
    config: Config,
    ses_client: Any,
) -> None:
    try:
        send_invite_email(
            ses_client,
            config.email_sender,
            result.invite.email,
            result.invite_link,
            trip_name,
            principal.email,
            config.invite_ttl_days,
        )
    except EmailDeliveryError as e:
        raise InviteEmailError(
            f"Invite {result.invite.id} created but email to {result.invite.email} failed: {e}",
            result=result,
        ) from e


def create_invite(
    db: Database,
    principal: AuthUser,
    trip_id: uuid.UUID,
    data: InviteCreate,
    *,
    config: Config,
    ses_client: Any,
) -> InviteCreated:
    """Invite an email address to a trip. Any member may invite.

    Raises:
        ForbiddenError: caller is not a member.
        ConflictError: ALREADY_MEMBER, or ALREADY_INVITED when a live pending invite exists.
        InviteEmailError: the invite exists but the email could not be sent.
    """
    email = data.email

    def work(session: Session) -> tuple[InviteCreated, str]:
        now = utcnow()
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_member(facts).enforce(f"{principal.user_id} cannot invite to trip {trip_id}")

        if has_member_with_email(session, trip_id, email):
            raise ConflictError(f"{email} is already a member of trip {trip_id}", code=ErrorCode.ALREADY_MEMBER)

        _expire_stale_pending(session, trip_id, email, now)
        if _find_pending_invite(session, trip_id, email, now) is not None:
            raise ConflictError(f"{email} already has a pending invitation to trip {trip_id}")

        invite = _insert_invite(session, trip_id, email, principal.user_id, now, config.invite_ttl_days)
        link = build_invite_link(config.app_base_url, invite.token)
        return InviteCreated(invite=InviteRead.from_row(invite, now), invite_link=link), _trip_name(session, trip_id)

    result, trip_name = db.run_in_transaction(work)
    logger.info("Invite %s created for %s on trip %s by %s", result.invite.id, email, trip_id, principal.user_id)

    _deliver(result, trip_name, principal, config, ses_client)
    return result


def resend_invite(
    db: Database,
    principal: AuthUser,
    invite_id: uuid.UUID,
    *,
    config: Config,
    ses_client: Any,
) -> InviteCreated:
    """Replace an invitation with a fresh token and expiry. The old token stops working immediately."""

    def work(session: Session) -> tuple[InviteCreated, str]:
        now = utcnow()
        old = session.get(TripInvite, invite_id, with_for_update=True)
        if old is None or old.status == InviteStatus.ACCEPTED.value:
            raise NotFoundError(f"Invite {invite_id} not found", code=ErrorCode.INVITE_NOT_FOUND)

        trip_id, email = old.trip_id, old.email
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_member(facts).enforce(f"{principal.user_id} cannot resend invites for trip {trip_id}")

        if has_member_with_email(session, trip_id, email):
            raise ConflictError(f"{email} is already a member of trip {trip_id}", code=ErrorCode.ALREADY_MEMBER)

        session.delete(old)
        session.flush()
        invite = _insert_invite(session, trip_id, email, principal.user_id, now, config.invite_ttl_days)
        link = build_invite_link(config.app_base_url, invite.token)
        return InviteCreated(invite=InviteRead.from_row(invite, now), invite_link=link), _trip_name(session, trip_id)

    result, trip_name = db.run_in_transaction(work)
    logger.info("Invite %s resent as %s by %s", invite_id, result.invite.id, principal.user_id)

    _deliver(result, trip_name, principal, config, ses_client)
    return result


def cancel_invite(db: Database, principal: AuthUser, invite_id: uuid.UUID) -> None:
    """Delete a pending invitation. Allowed for the trip owner and the original inviter."""

    def work(session: Session) -> None:
        invite = session.get(TripInvite, invite_id, with_for_update=True)
        if invite is None:
            raise NotFoundError(f"Invite {invite_id} not found", code=ErrorCode.INVITE_NOT_FOUND)
        if invite.status == InviteStatus.ACCEPTED.value:
            raise NotFoundError(f"Invite {invite_id} already accepted", code=ErrorCode.INVITE_ALREADY_CONSUMED)

        facts = load_trip_facts(session, invite.trip_id, principal.user_id)
        can_cancel_invite(facts, invite.invited_by).enforce(f"{principal.user_id} cannot cancel invite {invite_id}")
        session.delete(invite)

    db.run_in_transaction(work)
    logger.info("Invite %s cancelled by %s", invite_id, principal.user_id)


def accept_invite(db: Database, principal: AuthUser, token: str) -> InviteAccepted:
    """Consume an invitation token and make the caller a member, atomically.

    Raises:
        NotFoundError: unknown token, or already consumed.
        ExpiredError: past expires_at; a fresh invite must be requested.
        EmailMismatchError: the caller's verified email is not the invited address.
    """

    def work(session: Session) -> InviteAccepted:
        now = utcnow()
        invite = None
        if token:
            stmt = select(TripInvite).where(TripInvite.token == token).with_for_update()
            invite = session.execute(stmt).scalar_one_or_none()
        if invite is None:
            raise NotFoundError("Invite token not found", code=ErrorCode.INVITE_NOT_FOUND)
        if invite.status == InviteStatus.ACCEPTED.value:
            raise NotFoundError(f"Invite {invite.id} already consumed", code=ErrorCode.INVITE_ALREADY_CONSUMED)
        if invite.effective_status(now) is InviteStatus.EXPIRED:
            raise ExpiredError(f"Invite {invite.id} expired at {invite.expires_at.isoformat()}")
        if not principal.email_verified or principal.normalized_email != invite.email:
            raise EmailMismatchError(f"Invite {invite.id} was not issued to {principal.user_id}")

        consumed = session.execute(
            update(TripInvite.__table__)
            .where(TripInvite.id == invite.id, TripInvite.status == InviteStatus.PENDING.value)
            .values(status=InviteStatus.ACCEPTED.value, accepted_at=now, accepted_by=principal.user_id)
        )
        if consumed.rowcount != 1:
            raise NotFoundError(f"Invite {invite.id} already consumed", code=ErrorCode.INVITE_ALREADY_CONSUMED)

        add_member(session, invite.trip_id, principal.user_id, principal.normalized_email)
        return InviteAccepted(trip_id=invite.trip_id)

    result = db.run_in_transaction(work)
    logger.info("User %s joined trip %s via invitation", principal.user_id, result.trip_id)
    return result


def get_invite_link(db: Database, principal: AuthUser, invite_id: uuid.UUID, *, config: Config) -> str:
    """Share an existing invitation again without rotating its token."""

    def work(session: Session) -> str:
        invite = session.get(TripInvite, invite_id)
        if invite is None or invite.status == InviteStatus.ACCEPTED.value:
            raise NotFoundError(f"Invite {invite_id} not found", code=ErrorCode.INVITE_NOT_FOUND)
        facts = load_trip_facts(session, invite.trip_id, principal.user_id)
        can_act_as_member(facts).enforce(f"{principal.user_id} cannot view invites for trip {invite.trip_id}")
        if invite.is_expired(utcnow()):
            raise ExpiredError(f"Invite {invite_id} expired; resend it to get a new link")
        return build_invite_link(config.app_base_url, invite.token)

    return db.run_in_transaction(work)


def list_pending_invites(db: Database, principal: AuthUser, trip_id: uuid.UUID) -> list[InviteRead]:
    def work(session: Session) -> list[InviteRead]:
        now = utcnow()
        facts = load_trip_facts(session, trip_id, principal.user_id)
        can_act_as_member(facts).enforce(f"{principal.user_id} cannot view invites for trip {trip_id}")
        stmt = (
            select(TripInvite)
            .where(
                TripInvite.trip_id == trip_id,
                TripInvite.status == InviteStatus.PENDING.value,
                TripInvite.expires_at >= now,
            )
            .order_by(TripInvite.created_at.desc())
        )
        return [InviteRead.from_row(i, now) for i in session.execute(stmt).scalars()]

    return db.run_in_transaction(work)


def list_my_invites(db: Database, principal: AuthUser) -> list[InviteRead]:
    """Live invitations addressed to the caller's email."""
    email = principal.normalized_email
    if not email:
        return []

    def work(session: Session) -> list[InviteRead]:
        now = utcnow()
        stmt = (
            select(TripInvite)
            .where(
                TripInvite.email == email,
                TripInvite.status == InviteStatus.PENDING.value,
                TripInvite.expires_at >= now,
            )
            .order_by(TripInvite.created_at.desc())
        )
        return [InviteRead.from_row(i, now) for i in session.execute(stmt).scalars()]

    return db.run_in_transaction(work)


def purge_expired_invites(db: Database, retention_days: int) -> dict[str, int]:
    """Storage hygiene only: correctness never depends on this running."""

    def work(session: Session) -> dict[str, int]:
        now = utcnow()
        flipped = session.execute(
            update(TripInvite.__table__)
            .where(TripInvite.status == InviteStatus.PENDING.value, TripInvite.expires_at < now)
            .values(status=InviteStatus.EXPIRED.value)
        ).rowcount
        cutoff = now - timedelta(days=retention_days)
        deleted = session.execute(
            delete(TripInvite.__table__).where(
                TripInvite.expires_at < cutoff,
                TripInvite.status == InviteStatus.EXPIRED.value,
            )
        ).rowcount
        return {"expired": flipped, "deleted": deleted}

    result = db.run_in_transaction(work)
    logger.info("Invite purge: %d marked expired, %d deleted", result["expired"], result["deleted"])
    return result
