"""
Database ORM models and clients for Trip Crew.

Importing this package registers all models on Base.metadata,
which Alembic needs for autogenerate.
"""

from core.db.database import Database
from core.db.schemas.base import Base
from core.db.schemas.expense import Expense
from core.db.schemas.trip import Trip
from core.db.schemas.trip_invite import InviteStatus, TripInvite
from core.db.schemas.trip_member import TripMember

__all__ = ["Base", "Database", "Expense", "InviteStatus", "Trip", "TripInvite", "TripMember"]
