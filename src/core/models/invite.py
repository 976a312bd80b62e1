"""Pydantic models for the invitation lifecycle."""

import uuid
from datetime import datetime

from pydantic import EmailStr, field_validator

from core.db.schemas.trip_invite import InviteStatus, TripInvite
from core.models.base import ApiModel


class InviteCreate(ApiModel):
    email: EmailStr

    @field_validator("email")
    @classmethod
    def normalize(cls, value: str) -> str:
        return value.strip().lower()


class InviteRead(ApiModel):
    id: uuid.UUID
    trip_id: uuid.UUID
    email: str
    status: InviteStatus
    invited_by: str
    created_at: datetime
    expires_at: datetime

    @classmethod
    def from_row(cls, invite: TripInvite, now: datetime | None = None) -> "InviteRead":
        return cls(
            id=invite.id,
            trip_id=invite.trip_id,
            email=invite.email,
            status=invite.effective_status(now),
            invited_by=invite.invited_by,
            created_at=invite.created_at,
            expires_at=invite.expires_at,
        )


class InviteCreated(ApiModel):
    invite: InviteRead
    invite_link: str


class InviteAccepted(ApiModel):
    trip_id: uuid.UUID
