"""PATCH /trips/{tripId}: owner only."""

from typing import Any

from core.auth import AuthUser
from core.clients import get_database
from core.models import TripUpdate
from core.services.trips import update_trip
from handlers.common import Response, api_handler, json_response, parse_body, path_uuid


@api_handler
def handler(event: dict[str, Any], principal: AuthUser) -> Response:
    trip_id = path_uuid(event, "tripId")
    trip = update_trip(get_database(), principal, trip_id, parse_body(event, TripUpdate))
    return json_response(200, trip)
