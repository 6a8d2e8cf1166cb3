# routetrack/Services/tracking_engine.py
"""
Tracking Engine
===============
Single entry point used by the API: wires the store, the identity resolver,
the session manager, the distance accumulator and the navigation advisor
around one database session.

Operaciones:
- ingest(report, identity) -> IngestResult
- close_trip(owner_id) -> Trip_get
- return_to_start(trip_id) -> NavigationInfo
- record_location(report) -> IngestResult
- import_route(route) -> Trip_get

No domain state is kept between calls; the only shared object is the
process-wide owner lock registry.
"""

from datetime import datetime
from typing import Any, Callable, Mapping, Optional, Union

from sqlalchemy.orm import Session

from routetrack.Core.timeutils import utc_now
from routetrack.Schemas.ping import Identity, IngestResult, RawReport
from routetrack.Schemas.trip import NavigationInfo, Route_create, Trip_get
from routetrack.Services.distance_accumulator import DistanceAccumulator
from routetrack.Services.errors import IdentityNotFound
from routetrack.Services.identity import IdentityResolver
from routetrack.Services.ingestion import IngestionPipeline
from routetrack.Services.navigation import NavigationAdvisor
from routetrack.Services.owner_locks import OwnerLockRegistry, owner_locks
from routetrack.Services.route_import import RouteImporter
from routetrack.Services.session_manager import SessionManager
from routetrack.Services.trip_store import TripStore


class TrackingEngine:

    def __init__(
        self,
        store: TripStore,
        identities: IdentityResolver,
        clock: Callable[[], datetime] = utc_now,
        locks: OwnerLockRegistry = owner_locks
    ):
        self.store = store
        self.identities = identities
        self.locks = locks
        self.sessions = SessionManager(store, clock=clock)
        self.accumulator = DistanceAccumulator(store)
        self.pipeline = IngestionPipeline(store, identities, self.sessions, self.accumulator, locks=locks)
        self.navigation = NavigationAdvisor(store)
        self.importer = RouteImporter(store, identities)

    def ingest(
        self,
        report: Union[RawReport, Mapping[str, Any]],
        identity: Optional[Identity] = None
    ) -> IngestResult:
        return self.pipeline.ingest(report, identity)

    def close_trip(self, owner_id: str) -> Trip_get:
        """
        Close the owner's open trip.

        Returns:
            Trip_get: Finalized trip with its pings ordered by observation time

        Raises:
            IdentityNotFound: Unknown owner
            NoActiveTrip: The owner has no open trip
        """
        if not self.identities.user_exists(owner_id):
            raise IdentityNotFound(owner_id)

        with self.locks.hold(owner_id):
            try:
                self.store.lock_owner(owner_id)
                trip = self.sessions.close_trip(owner_id)
                self.store.commit()
            except Exception:
                self.store.rollback()
                raise

            trip = self.store.refresh(trip)
            pings = self.store.pings_for_trip(trip.id)
            return Trip_get.from_trip(trip, pings)

    def return_to_start(self, trip_id: str) -> NavigationInfo:
        return self.navigation.return_to_start(trip_id)

    def record_location(self, report: Union[RawReport, Mapping[str, Any]]) -> IngestResult:
        """Store one point outside any trip; no identity required."""
        return self.pipeline.record_unassigned(report)

    def import_route(self, route: Union[Route_create, Mapping[str, Any]]) -> Trip_get:
        return self.importer.import_route(route)


def build_tracking_engine(
    DB: Session,
    clock: Optional[Callable[[], datetime]] = None,
    locks: OwnerLockRegistry = owner_locks
) -> TrackingEngine:
    """Engine bound to one session; one per request."""
    return TrackingEngine(
        TripStore(DB),
        IdentityResolver(DB),
        clock=clock or utc_now,
        locks=locks,
    )
