"""PATCH /expenses/{expenseId}: payer or trip owner."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.models import ExpenseUpdate
from core.services.expenses import update_expense
from handlers.common import Response, api_handler, json_response, parse_body, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    expense_id = path_uuid(event, "expenseId")
    expense = update_expense(get_database(), principal, expense_id, parse_body(event, ExpenseUpdate))
    return json_response(200, expense)
