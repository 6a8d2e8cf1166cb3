# routetrack/Services/distance_accumulator.py
"""
Distance Accumulator
====================
Adds the leg between a newly inserted ping and the previously inserted ping
of the same trip to the trip's cumulative distance.

Known limitation: "previous" means previous by arrival (highest id), not by
observation time. Pings that arrive out of order add the legs in arrival
order, which can overstate the distance travelled.
"""

import logging

from routetrack.Models.ping import Ping
from routetrack.Services.geo import distance_meters
from routetrack.Services.trip_store import TripStore

logger = logging.getLogger(__name__)


class DistanceAccumulator:

    def __init__(self, store: TripStore):
        self.store = store

    def accumulate(self, trip_id: str, new_ping: Ping) -> float:
        """
        Returns:
            float: The delta added in meters (0.0 for a trip's first ping)
        """
        prior = self.store.last_inserted_ping(trip_id, excluding_ping_id=new_ping.id)
        if prior is None:
            return 0.0

        delta = distance_meters(prior, new_ping)
        if delta > 0:
            self.store.increment_distance(trip_id, delta)
            logger.debug("[DISTANCE] %s += %.2f m (ping %s -> %s)", trip_id, delta, prior.id, new_ping.id)
        return delta
