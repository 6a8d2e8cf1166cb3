# routetrack/Services/navigation.py

from routetrack.Schemas.ping import Ping_get
from routetrack.Schemas.trip import Coordinates, NavigationInfo
from routetrack.Services.errors import EmptyTrip, TripNotFound
from routetrack.Services.geo import distance_meters, initial_bearing_degrees
from routetrack.Services.trip_store import TripStore


class NavigationAdvisor:
    """
    Distance and heading from a trip's most recently received ping back to
    its earliest observed ping. Read-only; works on open and closed trips.
    """

    def __init__(self, store: TripStore):
        self.store = store

    def return_to_start(self, trip_id: str) -> NavigationInfo:
        trip = self.store.get_trip(trip_id)
        if trip is None:
            raise TripNotFound(trip_id)

        start = self.store.first_ping(trip_id)
        current = self.store.last_ping(trip_id)
        if start is None or current is None:
            raise EmptyTrip(trip_id)

        return NavigationInfo(
            distance_to_start=distance_meters(current, start),
            bearing_to_start=initial_bearing_degrees(current, start),
            start_coordinates=Coordinates(latitude=start.latitude, longitude=start.longitude),
            starting_point=Ping_get.model_validate(start),
            current_point=Ping_get.model_validate(current),
        )
