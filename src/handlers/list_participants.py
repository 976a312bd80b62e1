"""GET /trips/{tripId}/participants"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.participants import list_participants
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    return json_response(200, list_participants(get_database(), principal, path_uuid(event, "tripId")))
