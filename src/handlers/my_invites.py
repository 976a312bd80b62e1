"""GET /me/invites"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.invites import list_my_invites
from handlers.common import Response, api_handler, json_response


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    return json_response(200, list_my_invites(get_database(), principal))
