"""POST /trips/{tripId}/expenses: the caller is recorded as payer."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.models import ExpenseCreate
from core.services.expenses import create_expense
from handlers.common import Response, api_handler, json_response, parse_body, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    trip_id = path_uuid(event, "tripId")
    expense = create_expense(get_database(), principal, trip_id, parse_body(event, ExpenseCreate))
    return json_response(201, expense)
