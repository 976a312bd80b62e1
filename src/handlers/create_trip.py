"""POST /trips: the caller becomes owner and first member."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.models import TripCreate
from core.services.trips import create_trip
from handlers.common import Response, api_handler, json_response, parse_body


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    trip = create_trip(get_database(), principal, parse_body(event, TripCreate))
    return json_response(201, trip)
