# routetrack/Services/trip_store.py
"""
Trip Store
==========
Persistence collaborator of the tracking engine, bound to one SQLAlchemy
session (one unit of work).

Arquitectura:
- Input: owner ids, trip ids, validated RawReport objects
- Output: ORM Trip / Ping objects
- Repositories flush; this store owns commit() and rollback()
- Every SQLAlchemyError surfaces as PersistenceFailure (chained)

Funciones:
- find_open_trip(), create_trip(), create_closed_trip(), close_trip(), get_trip()
- insert_ping(), insert_pings(), last_inserted_ping(), first_ping(), last_ping(), pings_for_trip()
- increment_distance(), lock_owner()
- commit(), rollback()
"""

import logging
from datetime import datetime
from functools import wraps
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from routetrack.Models.ping import Ping
from routetrack.Models.trip import Trip
from routetrack.Repositories import ping as ping_repo
from routetrack.Repositories import trip as trip_repo
from routetrack.Repositories.user import lock_user_row
from routetrack.Schemas.ping import RawReport
from routetrack.Schemas.trip import Route_create
from routetrack.Services.errors import PersistenceFailure

logger = logging.getLogger(__name__)


def _storage_call(func):
    @wraps(func)
    def wrapper(self, *args, **kwargs):
        try:
            return func(self, *args, **kwargs)
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Database error in {func.__name__}: {e}") from e
    return wrapper


class TripStore:

    def __init__(self, DB: Session):
        self.DB = DB

    # ==========================================================
    # Trips
    # ==========================================================
    @_storage_call
    def find_open_trip(self, owner_id: str) -> Optional[Trip]:
        return trip_repo.get_open_trip_by_owner(self.DB, owner_id)

    @_storage_call
    def create_trip(self, owner_id: str, started_at: datetime) -> Trip:
        return trip_repo.create_trip(self.DB, owner_id, started_at)

    @_storage_call
    def close_trip(self, trip_id: str, ended_at: datetime, duration_seconds: int) -> Optional[Trip]:
        return trip_repo.close_trip(self.DB, trip_id, ended_at, duration_seconds)

    @_storage_call
    def create_closed_trip(self, route: Route_create) -> Trip:
        return trip_repo.create_closed_trip(
            self.DB,
            route.owner_id,
            route.calendar_date,
            route.started_at,
            route.ended_at,
            route.duration_seconds,
            route.cumulative_distance_meters,
        )

    @_storage_call
    def get_trip(self, trip_id: str) -> Optional[Trip]:
        return trip_repo.get_trip_by_id(self.DB, trip_id)

    @_storage_call
    def increment_distance(self, trip_id: str, delta_meters: float) -> bool:
        return trip_repo.increment_distance(self.DB, trip_id, delta_meters)

    @_storage_call
    def refresh(self, trip: Trip) -> Trip:
        """Reload column values changed by bulk updates."""
        self.DB.refresh(trip)
        return trip

    # ==========================================================
    # Pings
    # ==========================================================
    @_storage_call
    def insert_ping(
        self,
        report: RawReport,
        trip_id: Optional[str],
        device_id: Optional[str] = None
    ) -> Ping:
        return ping_repo.create_ping(self.DB, report, trip_id=trip_id, device_id=device_id)

    @_storage_call
    def insert_pings(self, reports: list[RawReport], trip_id: Optional[str]) -> list[Ping]:
        return ping_repo.create_pings(self.DB, reports, trip_id=trip_id)

    @_storage_call
    def last_inserted_ping(self, trip_id: str, excluding_ping_id: Optional[int] = None) -> Optional[Ping]:
        return ping_repo.get_last_inserted_ping(self.DB, trip_id, excluding_ping_id)

    @_storage_call
    def first_ping(self, trip_id: str) -> Optional[Ping]:
        return ping_repo.get_first_ping_by_trip(self.DB, trip_id)

    @_storage_call
    def last_ping(self, trip_id: str) -> Optional[Ping]:
        return ping_repo.get_last_inserted_ping(self.DB, trip_id)

    @_storage_call
    def pings_for_trip(self, trip_id: str) -> list[Ping]:
        return ping_repo.get_pings_by_trip(self.DB, trip_id)

    # ==========================================================
    # Transaction control
    # ==========================================================
    @_storage_call
    def lock_owner(self, owner_id: str) -> bool:
        """Row-lock the owner for the rest of the transaction."""
        return lock_user_row(self.DB, owner_id)

    @_storage_call
    def commit(self) -> None:
        self.DB.commit()

    def rollback(self) -> None:
        try:
            self.DB.rollback()
        except SQLAlchemyError:
            # the original failure is what the caller must see
            logger.exception("[STORE] Rollback failed")
