"""
Pydantic models for Trip Crew.
"""

from core.models.expense import (
    EXPENSE_CATEGORIES,
    UNCATEGORIZED,
    ExpenseCreate,
    ExpenseRead,
    ExpenseStats,
    ExpenseUpdate,
)
from core.models.invite import InviteAccepted, InviteCreate, InviteCreated, InviteRead
from core.models.participant import ParticipantRead, RemovalResult
from core.models.trip import TripCreate, TripRead, TripUpdate

__all__ = [
    "EXPENSE_CATEGORIES",
    "UNCATEGORIZED",
    "ExpenseCreate",
    "ExpenseRead",
    "ExpenseStats",
    "ExpenseUpdate",
    "InviteAccepted",
    "InviteCreate",
    "InviteCreated",
    "InviteRead",
    "ParticipantRead",
    "RemovalResult",
    "TripCreate",
    "TripRead",
    "TripUpdate",
]
