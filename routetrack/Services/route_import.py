# routetrack/Services/route_import.py
"""
Route Import
============
Stores a route that was recorded elsewhere (finished, with its points) in
one transaction: either the trip and every ping are committed, or nothing
is.

The imported trip is closed from the start, so it never competes with the
owner's open trip and the owner lock is not needed.
"""

import logging
from typing import Any, Mapping, Union

from pydantic import ValidationError as PydanticValidationError

from routetrack.Schemas.trip import Route_create, Trip_get
from routetrack.Services.errors import IdentityNotFound, ValidationError
from routetrack.Services.identity import IdentityResolver
from routetrack.Services.ingestion import format_pydantic_errors
from routetrack.Services.trip_store import TripStore

logger = logging.getLogger(__name__)


def parse_route(route: Union[Route_create, Mapping[str, Any]]) -> Route_create:
    if isinstance(route, Route_create):
        return route
    if not isinstance(route, Mapping):
        raise ValidationError("Route must be an object")
    try:
        return Route_create.model_validate(route)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid route data: {format_pydantic_errors(e)}") from e


class RouteImporter:

    def __init__(self, store: TripStore, identities: IdentityResolver):
        self.store = store
        self.identities = identities

    def import_route(self, route: Union[Route_create, Mapping[str, Any]]) -> Trip_get:
        """
        Raises:
            ValidationError: Missing fields, out-of-range times or points,
            endTime before startTime
            IdentityNotFound: userId is not a registered user
            PersistenceFailure: Storage error; nothing is kept
        """
        route = parse_route(route)
        if not self.identities.user_exists(route.owner_id):
            raise IdentityNotFound(route.owner_id)

        try:
            trip = self.store.create_closed_trip(route)
            self.store.insert_pings(route.pings, trip.id)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.info(
            "[TRIP] Route imported: %s (owner: %s, %d points)",
            trip.id, route.owner_id, len(route.pings)
        )
        trip = self.store.refresh(trip)
        return Trip_get.from_trip(trip, self.store.pings_for_trip(trip.id))
