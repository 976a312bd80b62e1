"""create_trip_crew_tables

Revision ID: 4b7e2a91c0d5
Revises: 
Create Date: 2026-03-02 10:14:37.118204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '4b7e2a91c0d5'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""
    op.execute("""
        CREATE TABLE trips (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            name VARCHAR(150) NOT NULL,
            description TEXT,
            owner_user_id VARCHAR(255) NOT NULL,
            start_date DATE,
            end_date DATE,
            city VARCHAR(100),
            country VARCHAR(100),
            latitude DOUBLE PRECISION,
            longitude DOUBLE PRECISION,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute("CREATE INDEX idx_trips_owner_user_id ON trips (owner_user_id)")

    # One row per (trip, user); the owner has a row like everyone else
    op.execute("""
        CREATE TABLE trip_members (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            trip_id UUID NOT NULL REFERENCES trips (id) ON DELETE CASCADE,
            user_id VARCHAR(255) NOT NULL,
            email VARCHAR(320),
            added_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_trip_members_trip_user UNIQUE (trip_id, user_id)
        )
    """)
    op.execute("CREATE INDEX idx_trip_members_user_id ON trip_members (user_id)")
    op.execute("CREATE INDEX idx_trip_members_trip_email ON trip_members (trip_id, email)")

    op.execute("""
        CREATE TABLE trip_invites (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            trip_id UUID NOT NULL REFERENCES trips (id) ON DELETE CASCADE,
            email VARCHAR(320) NOT NULL,
            token VARCHAR(128) NOT NULL UNIQUE,
            status VARCHAR(20) NOT NULL DEFAULT 'pending',
            invited_by VARCHAR(255) NOT NULL,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            expires_at TIMESTAMPTZ NOT NULL,
            accepted_at TIMESTAMPTZ,
            accepted_by VARCHAR(255),
            CONSTRAINT chk_trip_invites_status CHECK (status IN ('pending', 'accepted', 'expired'))
        )
    """)
    op.execute("CREATE INDEX idx_trip_invites_trip_id ON trip_invites (trip_id)")
    op.execute("CREATE INDEX idx_trip_invites_email ON trip_invites (email)")
    # At most one pending invitation per (trip, email)
    op.execute("""
        CREATE UNIQUE INDEX uq_trip_invites_pending_email
        ON trip_invites (trip_id, email)
        WHERE status = 'pending'
    """)

    op.execute("""
        CREATE TABLE expenses (
            id UUID PRIMARY KEY DEFAULT gen_random_uuid(),
            trip_id UUID NOT NULL REFERENCES trips (id) ON DELETE CASCADE,
            user_id VARCHAR(255) NOT NULL,
            title VARCHAR(200) NOT NULL,
            amount_cents BIGINT NOT NULL,
            category VARCHAR(50),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT chk_expenses_amount_positive CHECK (amount_cents > 0)
        )
    """)
    op.execute("CREATE INDEX idx_expenses_trip_id ON expenses (trip_id)")
    op.execute("CREATE INDEX idx_expenses_trip_category ON expenses (trip_id, category)")


def downgrade() -> None:
    """Downgrade schema."""
    op.execute("DROP TABLE IF EXISTS expenses")
    op.execute("DROP TABLE IF EXISTS trip_invites")
    op.execute("DROP TABLE IF EXISTS trip_members")
    op.execute("DROP TABLE IF EXISTS trips")
