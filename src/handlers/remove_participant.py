"""DELETE /trips/{tripId}/participants/{userId}"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.participants import remove_participant
from handlers.common import Response, api_handler, json_response, path_param, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    result = remove_participant(
        get_database(),
        principal,
        path_uuid(event, "tripId"),
        path_param(event, "userId"),
    )
    return json_response(200, result)
