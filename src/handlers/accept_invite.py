"""POST /invite/{token}/accept"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.invites import accept_invite
from handlers.common import Response, api_handler, json_response, path_param


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    return json_response(200, accept_invite(get_database(), principal, path_param(event, "token")))
