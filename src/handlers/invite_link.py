"""GET /invites/{inviteId}/link: share an existing invitation again."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.config import get_config
from core.services.invites import get_invite_link
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    link = get_invite_link(get_database(), principal, path_uuid(event, "inviteId"), config=get_config())
    return json_response(200, {"inviteLink": link})
