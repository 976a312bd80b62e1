"""POST /trips/{tripId}/leave"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.participants import leave_trip
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    return json_response(200, leave_trip(get_database(), principal, path_uuid(event, "tripId")))
