"""DELETE /expenses/{expenseId}: payer or trip owner."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.expenses import delete_expense
from handlers.common import Response, api_handler, json_response, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    delete_expense(get_database(), principal, path_uuid(event, "expenseId"))
    return json_response(204)
