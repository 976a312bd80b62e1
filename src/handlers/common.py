"""Shared plumbing for the HTTP handlers (API Gateway proxy integration)."""

import asyncio
import base64
import binascii
import functools
import json
import logging
import uuid
from collections.abc import Callable
from typing import Any, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from core.auth import AuthUser, get_auth_provider
from core.config import get_config
from core.errors import AuthenticationError, ErrorCode, InviteEmailError, TripCrewError, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

Response = dict[str, Any]


def configure_logging() -> None:
    # The Lambda runtime installs the handler; only the level is ours.
    logging.getLogger().setLevel(get_config().log_level)


def authenticate(event: dict[str, Any]) -> AuthUser:
    headers = {k.lower(): v for k, v in (event.get("headers") or {}).items()}
    scheme, _, token = (headers.get("authorization") or "").partition(" ")
    token = token.strip()
    if scheme.lower() != "bearer" or not token:
        raise AuthenticationError("Missing bearer token")
    # ClerkAuthProvider's SDK calls are synchronous; asyncio.run() bridges the async interface.
    return asyncio.run(get_auth_provider().verify_token(token))


def path_param(event: dict[str, Any], name: str) -> str:
    value = (event.get("pathParameters") or {}).get(name)
    if not value:
        raise ValidationError(f"Missing path parameter {name}", code=ErrorCode.INVALID_REQUEST)
    return value


def path_uuid(event: dict[str, Any], name: str) -> uuid.UUID:
    raw = path_param(event, name)
    try:
        return uuid.UUID(raw)
    except ValueError as e:
        raise ValidationError(f"Path parameter {name} is not a UUID: {raw!r}", code=ErrorCode.INVALID_REQUEST) from e


def query_param(event: dict[str, Any], name: str) -> str | None:
    return (event.get("queryStringParameters") or {}).get(name) or None


def parse_body(event: dict[str, Any], model: type[M]) -> M:
    raw = event.get("body")
    if raw and event.get("isBase64Encoded"):
        try:
            raw = base64.b64decode(raw, validate=True).decode("utf-8")
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValidationError(f"Undecodable request body: {e}", code=ErrorCode.INVALID_REQUEST) from e
    try:
        return model.model_validate_json(raw or "{}")
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid {model.__name__}: {e.errors(include_url=False)}") from e


def json_response(status_code: int, body: Any = None) -> Response:
    if body is None:
        return {"statusCode": status_code, "body": ""}
    if isinstance(body, BaseModel):
        body = body.model_dump(mode="json", by_alias=True)
    elif isinstance(body, list):
        body = [b.model_dump(mode="json", by_alias=True) if isinstance(b, BaseModel) else b for b in body]
    return {
        "statusCode": status_code,
        "headers": {"Content-Type": "application/json"},
        "body": json.dumps(body),
    }


def error_response(error: TripCrewError, **extra: Any) -> Response:
    body: dict[str, Any] = {"error": {"code": error.code.value, "message": error.user_message}}
    body.update(extra)
    return json_response(error.status_code, body)


def api_handler(fn: Callable[[dict[str, Any], AuthUser], Response]) -> Callable[[dict[str, Any], object], Response]:
    """Authenticate the caller, run ``fn`` and translate domain errors into responses."""

    @functools.wraps(fn)
    def wrapper(event: dict[str, Any], context: object) -> Response:
        configure_logging()
        try:
            principal = authenticate(event)
            return fn(event, principal)
        except InviteEmailError as e:
            logger.warning("%s", e.message)
            return error_response(e, **e.result.to_wire())
        except TripCrewError as e:
            log = logger.warning if e.status_code >= 500 else logger.info
            log("%s %s: %s", e.status_code, e.code.value, e.message)
            return error_response(e)
        except Exception:
            logger.exception("Unhandled error in %s", fn.__module__)
            return error_response(TripCrewError("Unhandled error"))

    return wrapper
