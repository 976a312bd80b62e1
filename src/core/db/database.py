"""Aurora PostgreSQL access: engine construction, sessions and transactions."""

import json
import logging
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

import boto3
from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from core.config import Config
from core.errors import PersistenceError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# serialization_failure, deadlock_detected
_RETRYABLE_SQLSTATES = frozenset({"40001", "40P01"})


def _is_transient(exc: DBAPIError) -> bool:
    if exc.connection_invalidated:
        return True
    sqlstate = getattr(exc.orig, "sqlstate", None)
    if sqlstate in _RETRYABLE_SQLSTATES:
        return True
    return isinstance(exc, OperationalError) and sqlstate is None


class Database:
    """Owns the SQLAlchemy engine and the transaction boundary for every service call."""

    def __init__(
        self,
        url: str | URL,
        *,
        max_retries: int = 1,
        retry_backoff_seconds: float = 0.1,
        **engine_options: Any,
    ) -> None:
        self._engine = create_engine(url, **engine_options)
        self._sessionmaker = sessionmaker(bind=self._engine, expire_on_commit=False)
        self._max_retries = max_retries
        self._retry_backoff = retry_backoff_seconds

    @classmethod
    def from_config(cls, config: Config) -> "Database":
        return cls(
            database_url(config),
            max_retries=config.db_max_retries,
            retry_backoff_seconds=config.db_retry_backoff_seconds,
            pool_pre_ping=True,
        )

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def dialect_name(self) -> str:
        return self._engine.dialect.name

    @contextmanager
    def session(self, *, snapshot: bool = False) -> Iterator[Session]:
        """Open a session inside one transaction; commit on success, roll back on error.

        With ``snapshot=True`` every read in the block sees the same committed state.
        """
        with self._sessionmaker() as session, session.begin():
            if snapshot and self.dialect_name == "postgresql":
                # Must be the first use of the connection in this transaction.
                session.connection(execution_options={"isolation_level": "REPEATABLE READ"})
            yield session

    def run_in_transaction(self, work: Callable[[Session], T], *, snapshot: bool = False) -> T:
        """Run ``work`` in a transaction, retrying transient failures with backoff.

        Application errors raised by ``work`` roll back and propagate unchanged.
        """
        attempt = 0
        while True:
            try:
                with self.session(snapshot=snapshot) as session:
                    return work(session)
            except DBAPIError as e:
                if not _is_transient(e):
                    raise
                if attempt >= self._max_retries:
                    raise PersistenceError(f"Transaction failed after {attempt + 1} attempts: {e}") from e
                attempt += 1
                logger.warning("Transient database error, retrying (attempt %d): %s", attempt, e)
                time.sleep(self._retry_backoff * attempt)

    def health_check(self) -> bool:
        try:
            with self._engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except Exception:
            return False

    def dispose(self) -> None:
        self._engine.dispose()


def database_url(config: Config) -> str | URL:
    """Explicit DATABASE_URL wins; otherwise build a psycopg URL for Aurora."""
    return config.database_url or _aurora_url(config)


def _aurora_url(config: Config) -> URL:
    creds = _get_credentials(config)
    return URL.create(
        "postgresql+psycopg",
        host=creds.get("host", config.aurora_host),
        port=int(creds.get("port", config.aurora_port)),
        database=creds.get("dbname", config.aurora_database),
        username=creds.get("username", creds.get("user", config.aurora_user)),
        password=creds.get("password", config.aurora_password),
    )


def _get_credentials(config: Config) -> dict[str, str]:
    if config.aurora_secret_arn:
        client = boto3.client("secretsmanager", region_name=config.aws_region)
        secret = client.get_secret_value(SecretId=config.aurora_secret_arn)
        return json.loads(secret["SecretString"])
    return {
        "host": config.aurora_host,
        "port": str(config.aurora_port),
        "dbname": config.aurora_database,
        "user": config.aurora_user,
        "password": config.aurora_password,
    }
