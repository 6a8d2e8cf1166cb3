# routetrack/Services/session_manager.py
"""
Session Manager
===============
Trip lifecycle per owner: open-or-create on the first ping, close on
request.

- get_or_open_trip(): returns the owner's open trip, creating one if none
- close_trip(): stamps end time and duration on the owner's open trip

Neither method commits or takes the owner's lock; the engine wraps both in
owner_locks.hold() and a single commit.
"""

import logging
import math
from datetime import datetime
from typing import Callable

from routetrack.Core.timeutils import ensure_utc, utc_now
from routetrack.Models.trip import Trip
from routetrack.Services.errors import NoActiveTrip
from routetrack.Services.trip_store import TripStore

logger = logging.getLogger(__name__)


class SessionManager:

    def __init__(self, store: TripStore, clock: Callable[[], datetime] = utc_now):
        self.store = store
        self.clock = clock

    def get_or_open_trip(self, owner_id: str, observed_at: datetime) -> str:
        """
        Return the id of the owner's open trip, opening one at ``observed_at``
        if the owner has none.

        The caller must hold the owner's lock: the lookup and the insert are
        two statements.
        """
        trip = self.store.find_open_trip(owner_id)
        if trip is not None:
            return trip.id

        trip = self.store.create_trip(owner_id, ensure_utc(observed_at))
        logger.info("[TRIP] Trip opened: %s (owner: %s)", trip.id, owner_id)
        return trip.id

    def close_trip(self, owner_id: str) -> Trip:
        """
        Close the owner's open trip at the current clock time.

        Raises:
            NoActiveTrip: The owner has no open trip (including a second close)
        """
        trip = self.store.find_open_trip(owner_id)
        if trip is None:
            raise NoActiveTrip(owner_id)

        closed_at = ensure_utc(self.clock())
        started_at = ensure_utc(trip.started_at)
        # a ping observed after "now" (device clock ahead) must not yield a negative duration
        ended_at = max(closed_at, started_at)
        duration_seconds = math.floor((ended_at - started_at).total_seconds())

        closed = self.store.close_trip(trip.id, ended_at, duration_seconds)
        if closed is None:
            raise NoActiveTrip(owner_id)

        logger.info(
            "[TRIP] Trip closed: %s (owner: %s, %ds, %.1f m)",
            closed.id, owner_id, duration_seconds, closed.cumulative_distance_meters or 0.0
        )
        return closed
