"""Lazy-initialized clients, reused across warm Lambda invocations."""

from functools import lru_cache
from typing import Any

import boto3

from core.config import get_config
from core.db.database import Database


@lru_cache(maxsize=1)
def get_database() -> Database:
    return Database.from_config(get_config())


@lru_cache(maxsize=1)
def get_ses_client() -> Any:
    config = get_config()
    return boto3.client("ses", region_name=config.aws_region)
