import uuid
from datetime import datetime

from core.models.base import ApiModel


class ParticipantRead(ApiModel):
    trip_id: uuid.UUID
    user_id: str
    email: str | None
    added_at: datetime
    is_owner: bool


class RemovalResult(ApiModel):
    """``removed`` is False when the member was already gone (a lost leave/remove race)."""

    trip_id: uuid.UUID
    user_id: str
    removed: bool
