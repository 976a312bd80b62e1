import uuid

import pytest

from core.errors import ErrorCode, ForbiddenError, NotFoundError
from core.services.permissions import (
    Decision,
    ResourceKind,
    TripFacts,
    can_act_as_member,
    can_act_as_owner,
    can_cancel_invite,
    can_leave_trip,
    can_mutate_resource,
    can_remove_participant,
    load_trip_facts,
    resource_not_found,
)

TRIP_ID = uuid.uuid4()
OWNER = "user_owner"
MEMBER = "user_member"
OTHER_MEMBER = "user_other"
OUTSIDER = "user_outsider"


def facts(actor: str, member: bool = True, owner: str | None = OWNER) -> TripFacts:
    return TripFacts(trip_id=TRIP_ID, actor_id=actor, owner_user_id=owner, actor_is_member=member)


# --- member / owner actions ---


def test_member_can_act_as_member():
    assert can_act_as_member(facts(MEMBER)).allowed


def test_non_member_denied_with_collapsed_code():
    verdict = can_act_as_member(facts(OUTSIDER, member=False))
    assert verdict.decision is Decision.FORBIDDEN
    assert verdict.code is ErrorCode.TRIP_ACCESS_DENIED


def test_missing_trip_looks_like_non_member():
    missing = can_act_as_member(facts(OUTSIDER, member=False, owner=None))
    existing = can_act_as_member(facts(OUTSIDER, member=False))
    assert missing == existing


def test_owner_only_actions():
    assert can_act_as_owner(facts(OWNER)).allowed
    verdict = can_act_as_owner(facts(MEMBER))
    assert verdict.decision is Decision.FORBIDDEN
    assert verdict.code is ErrorCode.OWNER_ONLY


def test_owner_without_membership_row_has_no_access():
    assert not can_act_as_owner(facts(OWNER, member=False)).allowed


# --- resources ---


def test_author_can_mutate_own_expense():
    assert can_mutate_resource(facts(MEMBER), ResourceKind.EXPENSE, MEMBER).allowed


def test_member_cannot_mutate_someone_elses_expense():
    verdict = can_mutate_resource(facts(MEMBER), ResourceKind.EXPENSE, OTHER_MEMBER)
    assert verdict.code is ErrorCode.NOT_RESOURCE_OWNER


@pytest.mark.parametrize("kind", list(ResourceKind))
def test_owner_overrides_resource_ownership(kind):
    assert can_mutate_resource(facts(OWNER), kind, MEMBER).allowed


@pytest.mark.parametrize("kind", [ResourceKind.TODO, ResourceKind.ITINERARY_ITEM])
def test_collaborative_resources_any_member(kind):
    assert can_mutate_resource(facts(MEMBER), kind, OTHER_MEMBER).allowed


def test_document_is_author_only_for_non_owners():
    assert not can_mutate_resource(facts(MEMBER), ResourceKind.DOCUMENT, OTHER_MEMBER).allowed


def test_missing_expense_is_not_found():
    verdict = resource_not_found(ResourceKind.EXPENSE)
    assert verdict.decision is Decision.NOT_FOUND
    assert verdict.code is ErrorCode.EXPENSE_NOT_FOUND


def test_missing_todo_is_generic_not_found():
    assert resource_not_found(ResourceKind.TODO).code is ErrorCode.NOT_FOUND


# --- removal and leave ---


@pytest.mark.parametrize("actor", [OWNER, MEMBER, OTHER_MEMBER])
def test_owner_is_never_removable(actor):
    verdict = can_remove_participant(facts(actor), OWNER)
    assert verdict.decision is Decision.FORBIDDEN
    assert verdict.code is ErrorCode.OWNER_PROTECTED


def test_owner_can_remove_member():
    assert can_remove_participant(facts(OWNER), MEMBER).allowed


def test_member_can_remove_self():
    assert can_remove_participant(facts(MEMBER), MEMBER).allowed


def test_member_cannot_remove_other_member():
    assert can_remove_participant(facts(MEMBER), OTHER_MEMBER).code is ErrorCode.OWNER_ONLY


def test_owner_cannot_leave():
    assert can_leave_trip(facts(OWNER)).code is ErrorCode.OWNER_CANNOT_LEAVE


def test_member_can_leave():
    assert can_leave_trip(facts(MEMBER)).allowed


# --- invitations ---


def test_inviter_can_cancel_own_invite():
    assert can_cancel_invite(facts(MEMBER), MEMBER).allowed


def test_owner_can_cancel_any_invite():
    assert can_cancel_invite(facts(OWNER), MEMBER).allowed


def test_other_member_cannot_cancel():
    assert can_cancel_invite(facts(OTHER_MEMBER), MEMBER).code is ErrorCode.FORBIDDEN


# --- enforce ---


def test_enforce_raises_matching_exception():
    with pytest.raises(ForbiddenError) as exc_info:
        can_act_as_owner(facts(MEMBER)).enforce("nope")
    assert exc_info.value.code is ErrorCode.OWNER_ONLY

    with pytest.raises(NotFoundError):
        resource_not_found(ResourceKind.EXPENSE).enforce("gone")


# --- loading facts ---


def test_load_trip_facts(db, trip_with_member, owner, member, outsider):
    with db.session() as session:
        owner_facts = load_trip_facts(session, trip_with_member.id, owner.user_id)
        member_facts = load_trip_facts(session, trip_with_member.id, member.user_id)
        outsider_facts = load_trip_facts(session, trip_with_member.id, outsider.user_id)
        missing = load_trip_facts(session, uuid.uuid4(), owner.user_id)

    assert owner_facts.actor_is_owner and owner_facts.has_access
    assert member_facts.has_access and not member_facts.actor_is_owner
    assert outsider_facts.trip_exists and not outsider_facts.has_access
    assert not missing.trip_exists and not missing.has_access
