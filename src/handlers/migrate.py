"""Run database migrations on deploy."""

from typing import Any

from core.services.migration import run_migrations
from handlers.common import configure_logging


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    configure_logging()
    revision = (event or {}).get("revision", "head")
    result = run_migrations(revision)
    return {"statusCode": 200, "body": result}
