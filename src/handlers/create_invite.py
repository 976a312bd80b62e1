"""POST /trips/{tripId}/invites"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database, get_ses_client
from core.config import get_config
from core.models import InviteCreate
from core.services.invites import create_invite
from handlers.common import Response, api_handler, json_response, parse_body, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    trip_id = path_uuid(event, "tripId")
    data = parse_body(event, InviteCreate)
    result = create_invite(
        get_database(),
        principal,
        trip_id,
        data,
        config=get_config(),
        ses_client=get_ses_client(),
    )
    return json_response(201, result)
