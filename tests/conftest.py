"""Shared test fixtures for Trip Crew."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from dotenv import load_dotenv
from sqlalchemy import event
from sqlalchemy.pool import StaticPool

# Load .env file for test configuration
load_dotenv()

# Unset AWS_PROFILE for local testing (SES and Secrets Manager are mocked)
if "AWS_PROFILE" in os.environ:
    del os.environ["AWS_PROFILE"]

# Add src directory to Python path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from core.auth import AuthUser  # noqa: E402
from core.config import Config  # noqa: E402
from core.db import Base, Database  # noqa: E402
from core.models import TripCreate  # noqa: E402


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_user(user_id: str, email: str, verified: bool = True) -> AuthUser:
    return AuthUser(user_id=user_id, email=email, email_verified=verified, name=user_id.title(), metadata={})


# SQLite fixtures
@pytest.fixture
def db():
    """In-memory SQLite database with the full schema. One shared connection."""
    database = Database(
        "sqlite+pysqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
        retry_backoff_seconds=0,
    )
    event.listen(database.engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(database.engine)
    yield database
    database.dispose()


@pytest.fixture
def owner() -> AuthUser:
    return make_user("user_owner", "owner@example.com")


@pytest.fixture
def member() -> AuthUser:
    return make_user("user_member", "member@example.com")


@pytest.fixture
def outsider() -> AuthUser:
    return make_user("user_outsider", "outsider@example.com")


@pytest.fixture
def trip(db, owner):
    from core.services.trips import create_trip

    return create_trip(db, owner, TripCreate(name="Lisbon 2026", city="Lisbon", country="Portugal"))


@pytest.fixture
def trip_with_member(db, trip, member):
    """The trip from ``trip`` with ``member`` already joined."""
    from core.services.membership import add_member

    with db.session() as session:
        add_member(session, trip.id, member.user_id, member.email)
    return trip


@pytest.fixture
def app_config() -> Config:
    return Config(
        aws_region="us-east-1",
        aurora_host="localhost",
        aurora_port=5432,
        aurora_database="tripcrew",
        aurora_user="tripcrew",
        aurora_password="localdev",
        environment="test",
        app_base_url="https://app.tripcrew.test",
        email_sender="noreply@tripcrew.test",
    )


@pytest.fixture
def ses_client():
    client = MagicMock()
    client.send_email.return_value = {"MessageId": "msg-0001"}
    return client


# PostgreSQL fixtures
@pytest.fixture
def pg_database():
    """Database against the local Postgres from .env, schema created fresh and dropped afterwards."""
    from core.config import _reset_config, get_config

    _reset_config()
    database = Database.from_config(get_config())
    Base.metadata.drop_all(database.engine)
    Base.metadata.create_all(database.engine)
    yield database
    Base.metadata.drop_all(database.engine)
    database.dispose()
