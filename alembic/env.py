"""Alembic environment. The database URL comes from core.config, never from alembic.ini."""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context
from core.config import get_config
from core.db import Base
from core.db.database import database_url

config = context.config

# Skip when invoked programmatically; the Lambda runtime owns logging there
if config.config_file_name is not None and config.attributes.get("configure_logger", True):
    fileConfig(config.config_file_name)

target_metadata = Base.metadata


def run_migrations_offline() -> None:
    url = database_url(get_config())
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = create_engine(database_url(get_config()), poolclass=pool.NullPool)
    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)
        with context.begin_transaction():
            context.run_migrations()
    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
