"""Invitation lifecycle against an in-memory database. SES is a MagicMock."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from core.auth import AuthUser
from core.db import InviteStatus, TripInvite
from core.db.schemas.base import utcnow
from core.errors import (
    ConflictError,
    EmailMismatchError,
    ErrorCode,
    ExpiredError,
    ForbiddenError,
    InviteEmailError,
    NotFoundError,
)
from core.models import InviteCreate
from core.services.invites import (
    accept_invite,
    build_invite_link,
    cancel_invite,
    create_invite,
    generate_token,
    get_invite_link,
    list_my_invites,
    list_pending_invites,
    purge_expired_invites,
    resend_invite,
)
from core.services.membership import add_member, count_members, is_member

GUEST_EMAIL = "guest@example.com"


def _user(user_id: str, email: str, verified: bool = True) -> AuthUser:
    return AuthUser(user_id=user_id, email=email, email_verified=verified, name="Guest", metadata={})


@pytest.fixture
def guest():
    return _user("user_guest", GUEST_EMAIL)


@pytest.fixture
def invite(db, trip, owner, app_config, ses_client):
    return create_invite(db, owner, trip.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client)


def _token(db, invite_id) -> str:
    with db.session() as session:
        return session.get(TripInvite, invite_id).token


def _stored_status(db, invite_id) -> str | None:
    with db.session() as session:
        row = session.get(TripInvite, invite_id)
        return row.status if row else None


# --- tokens and links ---


def test_generate_token_is_long_and_unique():
    tokens = {generate_token() for _ in range(100)}
    assert len(tokens) == 100
    assert all(len(t) == 48 for t in tokens)


def test_build_invite_link():
    assert build_invite_link("https://app.example.com/", "abc") == "https://app.example.com/invite/abc"


# --- create ---


def test_create_invite(invite, trip, owner, ses_client, db):
    assert invite.invite.email == GUEST_EMAIL
    assert invite.invite.status is InviteStatus.PENDING
    assert invite.invite.invited_by == owner.user_id
    assert invite.invite.expires_at - invite.invite.created_at == timedelta(days=7)
    assert invite.invite_link == f"https://app.tripcrew.test/invite/{_token(db, invite.invite.id)}"

    kwargs = ses_client.send_email.call_args.kwargs
    assert kwargs["Destination"] == {"ToAddresses": [GUEST_EMAIL]}
    assert kwargs["Source"] == "noreply@tripcrew.test"
    assert invite.invite_link in kwargs["Message"]["Body"]["Text"]["Data"]
    assert "Lisbon 2026" in kwargs["Message"]["Subject"]["Data"]


def test_invite_wire_format_hides_token(invite):
    wire = invite.to_wire()
    assert set(wire) == {"invite", "inviteLink"}
    assert "token" not in wire["invite"]
    assert wire["invite"]["status"] == "pending"


def test_create_invite_normalizes_email(db, trip, owner, app_config, ses_client):
    result = create_invite(
        db, owner, trip.id, InviteCreate(email="  Guest@Example.COM "), config=app_config, ses_client=ses_client
    )
    assert result.invite.email == GUEST_EMAIL


def test_duplicate_pending_invite_is_rejected(db, trip, owner, invite, app_config, ses_client):
    with pytest.raises(ConflictError) as exc_info:
        create_invite(db, owner, trip.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client)
    assert exc_info.value.code is ErrorCode.ALREADY_INVITED


def test_inviting_existing_member_is_a_distinct_conflict(db, trip_with_member, owner, app_config, ses_client):
    with pytest.raises(ConflictError) as exc_info:
        create_invite(
            db,
            owner,
            trip_with_member.id,
            InviteCreate(email="member@example.com"),
            config=app_config,
            ses_client=ses_client,
        )
    assert exc_info.value.code is ErrorCode.ALREADY_MEMBER
    ses_client.send_email.assert_not_called()


def test_any_member_can_invite(db, trip_with_member, member, app_config, ses_client):
    result = create_invite(
        db, member, trip_with_member.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client
    )
    assert result.invite.invited_by == member.user_id


def test_non_member_cannot_invite(db, trip, outsider, app_config, ses_client):
    with pytest.raises(ForbiddenError) as exc_info:
        create_invite(db, outsider, trip.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client)
    assert exc_info.value.code is ErrorCode.TRIP_ACCESS_DENIED


def test_expired_invite_does_not_block_new_one(db, trip, owner, invite, app_config, ses_client):
    later = utcnow() + timedelta(days=8)
    with patch("core.services.invites.utcnow", return_value=later):
        fresh = create_invite(
            db, owner, trip.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client
        )
    assert fresh.invite.id != invite.invite.id
    assert _stored_status(db, invite.invite.id) == InviteStatus.EXPIRED.value


def test_email_failure_keeps_invite_and_reports_link(db, trip, owner, app_config, ses_client):
    ses_client.send_email.side_effect = ClientError(
        {"Error": {"Code": "MessageRejected", "Message": "Email address is not verified."}}, "SendEmail"
    )
    with pytest.raises(InviteEmailError) as exc_info:
        create_invite(db, owner, trip.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client)

    result = exc_info.value.result
    assert exc_info.value.code is ErrorCode.EMAIL_DELIVERY_FAILED
    assert result.invite_link.endswith(_token(db, result.invite.id))
    assert _stored_status(db, result.invite.id) == InviteStatus.PENDING.value


# --- accept ---


def test_accept_invite_adds_member(db, trip, invite, guest):
    result = accept_invite(db, guest, _token(db, invite.invite.id))

    assert result.trip_id == trip.id
    with db.session() as session:
        assert is_member(session, trip.id, guest.user_id)
        row = session.get(TripInvite, invite.invite.id)
        assert row.status == InviteStatus.ACCEPTED.value
        assert row.accepted_by == guest.user_id
        assert row.accepted_at is not None


def test_accept_is_case_insensitive_on_email(db, trip, invite):
    shouty = _user("user_guest", "GUEST@Example.com")
    assert accept_invite(db, shouty, _token(db, invite.invite.id)).trip_id == trip.id


def test_second_accept_sees_consumed_token(db, invite, guest):
    token = _token(db, invite.invite.id)
    accept_invite(db, guest, token)

    with pytest.raises(NotFoundError) as exc_info:
        accept_invite(db, guest, token)
    assert exc_info.value.code is ErrorCode.INVITE_ALREADY_CONSUMED


def test_accept_unknown_token(db, guest):
    with pytest.raises(NotFoundError) as exc_info:
        accept_invite(db, guest, "deadbeef")
    assert exc_info.value.code is ErrorCode.INVITE_NOT_FOUND


def test_accept_empty_token(db, guest):
    with pytest.raises(NotFoundError):
        accept_invite(db, guest, "")


def test_accept_past_expiry_fails_even_if_stored_pending(db, invite, guest):
    token = _token(db, invite.invite.id)
    assert _stored_status(db, invite.invite.id) == InviteStatus.PENDING.value

    later = utcnow() + timedelta(days=7, seconds=1)
    with patch("core.services.invites.utcnow", return_value=later):
        with pytest.raises(ExpiredError):
            accept_invite(db, guest, token)


def test_accept_just_before_expiry(db, trip, invite, guest):
    token = _token(db, invite.invite.id)
    just_before = invite.invite.expires_at - timedelta(seconds=1)
    with patch("core.services.invites.utcnow", return_value=just_before):
        assert accept_invite(db, guest, token).trip_id == trip.id


def test_accept_with_other_email_is_rejected(db, trip, invite, outsider):
    with pytest.raises(EmailMismatchError) as exc_info:
        accept_invite(db, outsider, _token(db, invite.invite.id))
    assert exc_info.value.code is ErrorCode.EMAIL_MISMATCH
    assert _stored_status(db, invite.invite.id) == InviteStatus.PENDING.value


def test_accept_requires_verified_email(db, invite):
    unverified = _user("user_guest", GUEST_EMAIL, verified=False)
    with pytest.raises(EmailMismatchError):
        accept_invite(db, unverified, _token(db, invite.invite.id))


def test_accept_by_existing_member_consumes_token(db, trip, owner, member, app_config, ses_client):
    # Invite sent before the member joined through another invitation
    result = create_invite(
        db, owner, trip.id, InviteCreate(email=member.email), config=app_config, ses_client=ses_client
    )
    with db.session() as session:
        add_member(session, trip.id, member.user_id, member.email)

    accept_invite(db, member, _token(db, result.invite.id))
    with db.session() as session:
        assert count_members(session, trip.id) == 2


# --- resend ---


def test_resend_rotates_token(db, trip, owner, invite, guest, app_config, ses_client):
    old_token = _token(db, invite.invite.id)
    resent = resend_invite(db, owner, invite.invite.id, config=app_config, ses_client=ses_client)
    new_token = _token(db, resent.invite.id)

    assert new_token != old_token
    assert _stored_status(db, invite.invite.id) is None
    assert ses_client.send_email.call_count == 2

    with pytest.raises(NotFoundError):
        accept_invite(db, guest, old_token)
    assert accept_invite(db, guest, new_token).trip_id == trip.id


def test_resend_revives_expired_invite(db, owner, invite, guest, app_config, ses_client):
    later = utcnow() + timedelta(days=10)
    with patch("core.services.invites.utcnow", return_value=later):
        resent = resend_invite(db, owner, invite.invite.id, config=app_config, ses_client=ses_client)
    assert resent.invite.expires_at == later + timedelta(days=7)


def test_resend_accepted_invite_is_not_found(db, owner, invite, guest, app_config, ses_client):
    accept_invite(db, guest, _token(db, invite.invite.id))
    with pytest.raises(NotFoundError):
        resend_invite(db, owner, invite.invite.id, config=app_config, ses_client=ses_client)


def test_resend_by_outsider_is_denied(db, outsider, invite, app_config, ses_client):
    with pytest.raises(ForbiddenError):
        resend_invite(db, outsider, invite.invite.id, config=app_config, ses_client=ses_client)


# --- cancel ---


def test_owner_cancels_invite(db, owner, invite, guest):
    token = _token(db, invite.invite.id)
    cancel_invite(db, owner, invite.invite.id)

    assert _stored_status(db, invite.invite.id) is None
    with pytest.raises(NotFoundError):
        accept_invite(db, guest, token)


def test_inviter_cancels_own_invite(db, trip_with_member, member, app_config, ses_client):
    result = create_invite(
        db, member, trip_with_member.id, InviteCreate(email=GUEST_EMAIL), config=app_config, ses_client=ses_client
    )
    cancel_invite(db, member, result.invite.id)
    assert _stored_status(db, result.invite.id) is None


def test_other_member_cannot_cancel(db, trip_with_member, member, invite):
    with pytest.raises(ForbiddenError):
        cancel_invite(db, member, invite.invite.id)


def test_cancel_accepted_invite_fails(db, owner, invite, guest):
    accept_invite(db, guest, _token(db, invite.invite.id))
    with pytest.raises(NotFoundError) as exc_info:
        cancel_invite(db, owner, invite.invite.id)
    assert exc_info.value.code is ErrorCode.INVITE_ALREADY_CONSUMED


# --- listing and links ---


def test_list_pending_invites_hides_expired(db, trip, owner, invite):
    assert [i.id for i in list_pending_invites(db, owner, trip.id)] == [invite.invite.id]

    later = utcnow() + timedelta(days=8)
    with patch("core.services.invites.utcnow", return_value=later):
        assert list_pending_invites(db, owner, trip.id) == []


def test_list_my_invites(db, invite, guest, outsider):
    assert [i.id for i in list_my_invites(db, guest)] == [invite.invite.id]
    assert list_my_invites(db, outsider) == []


def test_get_invite_link_reuses_token(db, owner, invite, app_config):
    assert get_invite_link(db, owner, invite.invite.id, config=app_config) == invite.invite_link


def test_get_invite_link_for_expired_invite(db, owner, invite, app_config):
    later = utcnow() + timedelta(days=8)
    with patch("core.services.invites.utcnow", return_value=later):
        with pytest.raises(ExpiredError):
            get_invite_link(db, owner, invite.invite.id, config=app_config)


# --- purge ---


def test_purge_marks_then_deletes(db, invite):
    later = utcnow() + timedelta(days=8)
    with patch("core.services.invites.utcnow", return_value=later):
        assert purge_expired_invites(db, retention_days=30) == {"expired": 1, "deleted": 0}
    assert _stored_status(db, invite.invite.id) == InviteStatus.EXPIRED.value

    much_later = utcnow() + timedelta(days=60)
    with patch("core.services.invites.utcnow", return_value=much_later):
        assert purge_expired_invites(db, retention_days=30) == {"expired": 0, "deleted": 1}
    assert _stored_status(db, invite.invite.id) is None


def test_purge_leaves_live_and_accepted_invites(db, invite, guest):
    accept_invite(db, guest, _token(db, invite.invite.id))
    assert purge_expired_invites(db, retention_days=0) == {"expired": 0, "deleted": 0}
    assert _stored_status(db, invite.invite.id) == InviteStatus.ACCEPTED.value
