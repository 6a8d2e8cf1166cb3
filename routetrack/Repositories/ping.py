# routetrack/Repositories/ping.py

from datetime import datetime
from typing import Iterable, Optional

from sqlalchemy.orm import Session

from routetrack.Models.ping import Ping
from routetrack.Models.trip import Trip
from routetrack.Schemas.ping import RawReport


# ==========================================================
# Insert
# ==========================================================
def create_ping(
    DB: Session,
    report: RawReport,
    trip_id: Optional[str] = None,
    device_id: Optional[str] = None
) -> Ping:
    """
    Insert a position report. Flushes to obtain the id, does not commit.
    """
    new_ping = Ping(
        trip_id=trip_id,
        device_id=device_id,
        latitude=report.latitude,
        longitude=report.longitude,
        altitude=report.altitude,
        speed_over_ground=report.speed_over_ground,
        observed_at=report.observed_at,
    )
    DB.add(new_ping)
    DB.flush()
    return new_ping


# ==========================================================
# Per-trip lookups
# ==========================================================
def get_last_inserted_ping(
    DB: Session,
    trip_id: str,
    excluding_ping_id: Optional[int] = None
) -> Optional[Ping]:
    """
    Most recently inserted ping of a trip, by id (arrival order), not by
    observation time.
    """
    query = DB.query(Ping).filter(Ping.trip_id == trip_id)
    if excluding_ping_id is not None:
        query = query.filter(Ping.id != excluding_ping_id)
    return query.order_by(Ping.id.desc()).first()


def get_first_ping_by_trip(DB: Session, trip_id: str) -> Optional[Ping]:
    """Earliest observed ping of a trip; ties broken by arrival order."""
    return (
        DB.query(Ping)
        .filter(Ping.trip_id == trip_id)
        .order_by(Ping.observed_at.asc(), Ping.id.asc())
        .first()
    )


def get_pings_by_trip(DB: Session, trip_id: str) -> list[Ping]:
    return (
        DB.query(Ping)
        .filter(Ping.trip_id == trip_id)
        .order_by(Ping.observed_at.asc(), Ping.id.asc())
        .all()
    )


# ==========================================================
# Latest positions
# ==========================================================
def get_latest_ping_by_owner(DB: Session, owner_id: str) -> Optional[Ping]:
    """Most recent observed ping on any trip of the owner."""
    return (
        DB.query(Ping)
        .join(Trip, Trip.id == Ping.trip_id)
        .filter(Trip.owner_id == owner_id)
        .order_by(Ping.observed_at.desc(), Ping.id.desc())
        .first()
    )


def get_latest_ping_by_device(DB: Session, device_id: str) -> Optional[Ping]:
    """Most recent observed ping reported by a device, assigned or not."""
    return (
        DB.query(Ping)
        .filter(Ping.device_id == device_id)
        .order_by(Ping.observed_at.desc(), Ping.id.desc())
        .first()
    )


def get_latest_pings(DB: Session, limit: int = 10) -> list[tuple[Ping, Optional[str]]]:
    """
    Most recent pings across all owners and devices.

    Returns:
        list[tuple[Ping, Optional[str]]]: Each ping with the owner of its
        trip (None for unassigned pings)
    """
    rows = (
        DB.query(Ping, Trip.owner_id)
        .outerjoin(Trip, Trip.id == Ping.trip_id)
        .order_by(Ping.observed_at.desc(), Ping.id.desc())
        .limit(limit)
        .all()
    )
    return [(ping, owner_id) for ping, owner_id in rows]


# ==========================================================
# Bulk insert and time range
# ==========================================================
def create_pings(DB: Session, reports: Iterable[RawReport], trip_id: Optional[str] = None) -> list[Ping]:
    """Insert several reports in one flush, keeping their order as arrival order. Does not commit."""
    new_pings = [
        Ping(
            trip_id=trip_id,
            device_id=report.device_id,
            latitude=report.latitude,
            longitude=report.longitude,
            altitude=report.altitude,
            speed_over_ground=report.speed_over_ground,
            observed_at=report.observed_at,
        )
        for report in reports
    ]
    DB.add_all(new_pings)
    DB.flush()
    return new_pings


def get_pings_between(DB: Session, start: datetime, end: datetime) -> list[Ping]:
    """Every ping observed within [start, end], assigned or not, oldest first."""
    return (
        DB.query(Ping)
        .filter(Ping.observed_at >= start, Ping.observed_at <= end)
        .order_by(Ping.observed_at.asc(), Ping.id.asc())
        .all()
    )


def get_pings_by_trips(DB: Session, trip_ids: list[str]) -> dict[str, list[Ping]]:
    """Pings of several trips in one query, grouped by trip and ordered by observation time."""
    grouped: dict[str, list[Ping]] = {trip_id: [] for trip_id in trip_ids}
    if not trip_ids:
        return grouped

    rows = (
        DB.query(Ping)
        .filter(Ping.trip_id.in_(trip_ids))
        .order_by(Ping.observed_at.asc(), Ping.id.asc())
        .all()
    )
    for ping in rows:
        grouped[ping.trip_id].append(ping)
    return grouped
