"""Scheduled invitation cleanup (EventBridge). Storage hygiene only."""

from typing import Any

from core.clients import get_database
from core.config import get_config
from core.services.invites import purge_expired_invites
from handlers.common import configure_logging


def handler(event: dict[str, Any], context: object) -> dict[str, Any]:
    configure_logging()
    config = get_config()
    result = purge_expired_invites(get_database(), config.invite_retention_days)
    return {"statusCode": 200, "body": result}
