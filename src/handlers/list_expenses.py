"""GET /trips/{tripId}/expenses[?category=]"""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.services.expenses import list_expenses
from handlers.common import Response, api_handler, json_response, path_uuid, query_param


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    expenses = list_expenses(
        get_database(),
        principal,
        path_uuid(event, "tripId"),
        category=query_param(event, "category"),
    )
    return json_response(200, expenses)
