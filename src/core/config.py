from os import environ

import boto3
from pydantic import BaseModel, ConfigDict

_cached_clerk_secret: str | None = None


def _resolve_clerk_secret() -> str:
    """Fetch Clerk secret from Secrets Manager at runtime, with caching."""
    global _cached_clerk_secret
    if _cached_clerk_secret is not None:
        return _cached_clerk_secret

    # Local dev: use env var directly
    direct = environ.get("CLERK_SECRET_KEY", "")
    if direct:
        _cached_clerk_secret = direct
        return direct

    # Deployed: fetch from Secrets Manager by ARN
    arn = environ.get("CLERK_SECRET_ARN", "")
    if not arn:
        return ""

    client = boto3.client("secretsmanager")
    _cached_clerk_secret = client.get_secret_value(SecretId=arn)["SecretString"]
    return _cached_clerk_secret


class Config(BaseModel):
    model_config = ConfigDict(frozen=True)

    aws_region: str
    aurora_host: str
    aurora_port: int
    aurora_database: str
    aurora_user: str
    aurora_password: str
    aurora_secret_arn: str | None = None
    database_url: str | None = None
    db_max_retries: int = 1
    db_retry_backoff_seconds: float = 0.1
    clerk_secret_key: str = ""
    environment: str
    app_base_url: str
    invite_ttl_days: int = 7
    invite_retention_days: int = 30
    email_sender: str
    log_level: str = "INFO"


_cached_config: Config | None = None


def _reset_config() -> None:
    """Reset cached config. For testing only."""
    global _cached_config, _cached_clerk_secret
    _cached_config = None
    _cached_clerk_secret = None


def get_config() -> Config:
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    _cached_config = Config(
        aws_region=environ.get("AWS_REGION", "us-east-1"),
        aurora_host=environ.get("AURORA_HOST", "localhost"),
        aurora_port=int(environ.get("AURORA_PORT", "5432")),
        aurora_database=environ.get("AURORA_DATABASE", "tripcrew"),
        aurora_user=environ.get("AURORA_USER", "tripcrew"),
        aurora_password=environ.get("AURORA_PASSWORD", "localdev"),
        aurora_secret_arn=environ.get("AURORA_SECRET_ARN"),
        database_url=environ.get("DATABASE_URL"),
        db_max_retries=int(environ.get("DB_MAX_RETRIES", "1")),
        db_retry_backoff_seconds=float(environ.get("DB_RETRY_BACKOFF_SECONDS", "0.1")),
        clerk_secret_key=_resolve_clerk_secret(),
        environment=environ.get("ENVIRONMENT", "local"),
        app_base_url=environ.get("APP_BASE_URL", "http://localhost:4200").rstrip("/"),
        invite_ttl_days=int(environ.get("INVITE_TTL_DAYS", "7")),
        invite_retention_days=int(environ.get("INVITE_RETENTION_DAYS", "30")),
        email_sender=environ.get("EMAIL_SENDER", "noreply@tripcrew.app"),
        log_level=environ.get("LOG_LEVEL", "INFO").upper(),
    )
    return _cached_config
