# routetrack/Repositories/trip.py
"""
Trip Repository - Database operations for trip (route) management.

Responsibilities:
- Create open trips and look up the open trip of an owner
- Close trips with their final duration
- Atomically increment the cumulative distance
- Historical queries over closed trips

Write functions only flush: the tracking engine commits the ping insert
and the distance increment as one unit of work.

Usage:
    from routetrack.Repositories.trip import create_trip, get_open_trip_by_owner

    trip = get_open_trip_by_owner(db, "test-user-id")
    if trip is None:
        trip = create_trip(db, "test-user-id", started_at)
    db.commit()
"""

import logging
import uuid
from datetime import date, datetime
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from routetrack.Models.ping import Ping
from routetrack.Models.trip import (
    OPEN_TRIP_SENTINEL,
    Trip,
    closed_trip_clause,
    open_trip_clause,
)

logger = logging.getLogger(__name__)


# ==========================================================
# ID GENERATION
# ==========================================================

def generate_trip_id(owner_id: str, started_at: datetime) -> str:
    """
    Build a trip id of the form TRIP_YYYYMMDD_OWNER_XXXXXXXX.

    The random suffix keeps ids unique when one owner closes and reopens a
    trip within the same second.
    """
    date_str = started_at.strftime("%Y%m%d")
    safe_owner = owner_id.replace('-', '').replace('_', '')[:20]
    return f"TRIP_{date_str}_{safe_owner}_{uuid.uuid4().hex[:8]}"


# ==========================================================
# CREATE OPERATIONS
# ==========================================================

def create_trip(DB: Session, owner_id: str, started_at: datetime) -> Trip:
    """
    Insert a new open trip for an owner.

    Args:
        DB: SQLAlchemy session
        owner_id: User that owns the trip
        started_at: Observation time of the ping opening the trip (UTC)

    Returns:
        Trip: Flushed trip with ended_at at the open marker, zero duration
        and zero distance

    Notes:
        - Does not commit
        - Callers must hold the owner's lock; this function does not check
          for an existing open trip
    """
    new_trip = Trip(
        id=generate_trip_id(owner_id, started_at),
        owner_id=owner_id,
        calendar_date=started_at.date(),
        started_at=started_at,
        ended_at=OPEN_TRIP_SENTINEL,
        duration_seconds=0,
        cumulative_distance_meters=0.0,
    )
    DB.add(new_trip)
    DB.flush()

    logger.debug("[REPO] Trip created: %s (owner: %s)", new_trip.id, owner_id)
    return new_trip


def create_closed_trip(
    DB: Session,
    owner_id: str,
    calendar_date: date,
    started_at: datetime,
    ended_at: datetime,
    duration_seconds: int,
    distance_meters: float
) -> Trip:
    """
    Insert an already finished trip (bulk route import).

    Notes:
        - Does not commit
        - The stored distance is taken as given, not recomputed from pings
    """
    new_trip = Trip(
        id=generate_trip_id(owner_id, started_at),
        owner_id=owner_id,
        calendar_date=calendar_date,
        started_at=started_at,
        ended_at=ended_at,
        duration_seconds=duration_seconds,
        cumulative_distance_meters=distance_meters,
    )
    DB.add(new_trip)
    DB.flush()

    logger.debug("[REPO] Closed trip imported: %s (owner: %s)", new_trip.id, owner_id)
    return new_trip


# ==========================================================
# READ OPERATIONS - SINGLE TRIP
# ==========================================================

def get_trip_by_id(DB: Session, trip_id: str) -> Optional[Trip]:
    return DB.query(Trip).filter(Trip.id == trip_id).first()


def get_open_trip_by_owner(DB: Session, owner_id: str) -> Optional[Trip]:
    """
    Get the trip currently in progress for an owner.

    Returns:
        Trip or None: The open trip if one exists

    Notes:
        - An owner has at most ONE open trip; the engine guarantees it by
          serializing open-or-create per owner
        - Ordered by started_at so the result is deterministic even on a
          database that was written before that guarantee existed
    """
    return (
        DB.query(Trip)
        .filter(
            Trip.owner_id == owner_id,
            open_trip_clause()
        )
        .order_by(Trip.started_at.desc())
        .first()
    )


# ==========================================================
# READ OPERATIONS - MULTIPLE TRIPS
# ==========================================================

def get_trips_by_calendar_date(DB: Session, day: date) -> list[Trip]:
    """All trips (open or closed, any owner) opened on a UTC calendar date, earliest first."""
    return (
        DB.query(Trip)
        .filter(Trip.calendar_date == day)
        .order_by(Trip.started_at.asc(), Trip.id.asc())
        .all()
    )


def _closed_trips_query(
    DB: Session,
    owner_id: str,
    start_date: Optional[date],
    end_date: Optional[date],
):
    query = DB.query(Trip).filter(
        Trip.owner_id == owner_id,
        closed_trip_clause()
    )

    if start_date:
        query = query.filter(Trip.calendar_date >= start_date)

    if end_date:
        query = query.filter(Trip.calendar_date <= end_date)

    return query


def get_closed_trips_by_owner(
    DB: Session,
    owner_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    limit: int = 10,
    offset: int = 0
) -> list[tuple[Trip, int]]:
    """
    Page through an owner's completed trips, most recent first.

    Args:
        DB: SQLAlchemy session
        owner_id: Trip owner
        start_date: Only trips opened on or after this calendar date
        end_date: Only trips opened on or before this calendar date
        limit: Page size
        offset: Rows to skip

    Returns:
        list[tuple[Trip, int]]: Each trip with its number of pings
    """
    ping_counts = (
        DB.query(Ping.trip_id, func.count(Ping.id).label('location_count'))
        .group_by(Ping.trip_id)
        .subquery()
    )

    rows = (
        _closed_trips_query(DB, owner_id, start_date, end_date)
        .outerjoin(ping_counts, ping_counts.c.trip_id == Trip.id)
        .add_columns(func.coalesce(ping_counts.c.location_count, 0))
        .order_by(Trip.calendar_date.desc(), Trip.started_at.desc())
        .offset(offset)
        .limit(limit)
        .all()
    )
    return [(trip, int(count)) for trip, count in rows]


def count_closed_trips_by_owner(
    DB: Session,
    owner_id: str,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
) -> int:
    return _closed_trips_query(DB, owner_id, start_date, end_date).count()


# ==========================================================
# UPDATE OPERATIONS
# ==========================================================

def close_trip(
    DB: Session,
    trip_id: str,
    ended_at: datetime,
    duration_seconds: int
) -> Optional[Trip]:
    """
    Stamp a trip's end time and final duration.

    Args:
        DB: SQLAlchemy session
        trip_id: Trip identifier
        ended_at: Close time (UTC)
        duration_seconds: Whole seconds since started_at

    Returns:
        Trip or None: Closed trip if found, None otherwise

    Notes:
        - Does not commit
        - cumulative_distance_meters is left as accumulated
    """
    db_trip = DB.query(Trip).filter(Trip.id == trip_id).first()

    if not db_trip:
        logger.warning("[REPO] Cannot close trip - not found: %s", trip_id)
        return None

    setattr(db_trip, 'ended_at', ended_at)
    setattr(db_trip, 'duration_seconds', duration_seconds)
    DB.flush()

    return db_trip


def increment_distance(DB: Session, trip_id: str, delta_meters: float) -> bool:
    """
    Add delta_meters to a trip's cumulative distance.

    Returns:
        bool: True if updated, False if trip not found

    Notes:
        - Single SQL UPDATE (distance = distance + delta), no read-modify-write
        - Does not commit
    """
    result = (
        DB.query(Trip)
        .filter(Trip.id == trip_id)
        .update(
            {Trip.cumulative_distance_meters: Trip.cumulative_distance_meters + delta_meters},
            synchronize_session=False
        )
    )

    if result > 0:
        logger.debug("[REPO] Trip %s: distance += %.2f m", trip_id, delta_meters)
        return True

    logger.warning("[REPO] Cannot increment distance - trip not found: %s", trip_id)
    return False
