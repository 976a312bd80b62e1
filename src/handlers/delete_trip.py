"""DELETE /trips/{tripId}: owner only; members, invites and expenses go with it."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.trips import delete_trip
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    delete_trip(get_database(), principal, path_uuid(event, "tripId"))
    return json_response(204)
