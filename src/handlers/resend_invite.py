"""POST /invites/{inviteId}/resend: new token and expiry; the old link stops working."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database, get_ses_client
from core.config import get_config
from core.services.invites import resend_invite
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    result = resend_invite(
        get_database(),
        principal,
        path_uuid(event, "inviteId"),
        config=get_config(),
        ses_client=get_ses_client(),
    )
    return json_response(201, result)
