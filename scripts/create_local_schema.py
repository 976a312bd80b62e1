#!/usr/bin/env python3
"""Create the Trip Crew schema in a local database.

Uses the ORM metadata directly, so it also works against SQLite for quick
experiments. Against Postgres, prefer `alembic upgrade head`; this script is
for throwaway local databases.

Usage:
    python scripts/create_local_schema.py            # DATABASE_URL or local Aurora settings
    python scripts/create_local_schema.py --drop     # drop everything first
"""

import sys
from pathlib import Path

from sqlalchemy import inspect

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config
from core.db import Base, Database


def main():
    """Create all tables."""
    drop = "--drop" in sys.argv[1:]
    db = Database.from_config(get_config())

    print(f"Creating schema on {db.engine.url.render_as_string(hide_password=True)}...")
    print()

    if drop:
        Base.metadata.drop_all(db.engine)
        print("✓ Dropped existing tables")

    existing = set(inspect(db.engine).get_table_names())
    Base.metadata.create_all(db.engine)
    for table in Base.metadata.sorted_tables:
        if table.name in existing:
            print(f"✓ {table.name} table already exists")
        else:
            print(f"✓ Created {table.name} table")

    db.dispose()
    print()
    print("✅ Schema ready")


if __name__ == "__main__":
    main()
