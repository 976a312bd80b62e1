import uuid

import pytest

from core.errors import ErrorCode, NotFoundError
from core.services.membership import (
    add_member,
    count_members,
    has_member_with_email,
    is_member,
    list_member_ids,
    list_members,
    remove_member,
)


def test_owner_is_first_member(db, trip, owner):
    with db.session() as session:
        assert is_member(session, trip.id, owner.user_id)
        assert list_member_ids(session, trip.id) == [owner.user_id]


def test_add_member_creates_row(db, trip):
    with db.session() as session:
        row, created = add_member(session, trip.id, "user_new", "New@Example.com ")
        assert created is True
        assert row.user_id == "user_new"
        assert row.email == "new@example.com"


def test_add_member_is_idempotent(db, trip):
    with db.session() as session:
        first, created_first = add_member(session, trip.id, "user_new")
        second, created_second = add_member(session, trip.id, "user_new")
        assert created_first is True
        assert created_second is False
        assert first.id == second.id
        assert count_members(session, trip.id) == 2


def test_remove_member(db, trip_with_member, member):
    with db.session() as session:
        remove_member(session, trip_with_member.id, member.user_id)
    with db.session() as session:
        assert not is_member(session, trip_with_member.id, member.user_id)


def test_remove_absent_member_raises_not_found(db, trip):
    with db.session() as session:
        with pytest.raises(NotFoundError) as exc_info:
            remove_member(session, trip.id, "user_ghost")
    assert exc_info.value.code is ErrorCode.PARTICIPANT_NOT_FOUND


def test_is_member_unknown_trip(db, owner):
    with db.session() as session:
        assert not is_member(session, uuid.uuid4(), owner.user_id)


def test_has_member_with_email_normalizes(db, trip_with_member):
    with db.session() as session:
        assert has_member_with_email(session, trip_with_member.id, "  MEMBER@example.com")
        assert not has_member_with_email(session, trip_with_member.id, "someone@example.com")
        assert not has_member_with_email(session, trip_with_member.id, "")


def test_list_members_returns_all_rows(db, trip_with_member, owner, member):
    with db.session() as session:
        ids = {m.user_id for m in list_members(session, trip_with_member.id)}
    assert ids == {owner.user_id, member.user_id}
