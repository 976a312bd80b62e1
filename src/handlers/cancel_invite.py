"""DELETE /invites/{inviteId}"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.invites import cancel_invite
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    cancel_invite(get_database(), principal, path_uuid(event, "inviteId"))
    return json_response(204)
