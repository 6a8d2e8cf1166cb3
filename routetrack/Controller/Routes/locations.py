# routetrack/Controller/Routes/locations.py
from datetime import date, datetime
from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, Query
from pydantic import TypeAdapter
from sqlalchemy.orm import Session

from routetrack.Controller.deps import get_DB, get_engine
from routetrack.Core.timeutils import ensure_utc
from routetrack.Repositories import ping as ping_repo
from routetrack.Repositories import trip as trip_repo
from routetrack.Schemas import ping as ping_schema
from routetrack.Schemas import trip as trip_schema
from routetrack.Services.errors import ValidationError
from routetrack.Services.tracking_engine import TrackingEngine

router = APIRouter()

_datetime_adapter = TypeAdapter(datetime)


def _query_time(name: str, raw: str) -> datetime:
    """Epoch milliseconds ("1735689600000") or ISO-8601 from a query string."""
    value = raw.strip()
    try:
        if value.isdigit():
            return ping_schema.coerce_timestamp(int(value))
        return ensure_utc(_datetime_adapter.validate_python(value))
    except (ValueError, OverflowError):
        raise ValidationError(f"{name} must be epoch milliseconds or an ISO-8601 timestamp")


# ==========================================================
# 📌 Raw points
# ==========================================================

@router.get("/locations", response_model=List[ping_schema.Ping_get])
def get_locations(
    start_time: str = Query(..., alias="startTime", description="Range start, epoch ms or ISO-8601"),
    end_time: str = Query(..., alias="endTime", description="Range end (inclusive), epoch ms or ISO-8601"),
    DB: Session = Depends(get_DB)
):
    """
    Every ping observed in [startTime, endTime], with or without a trip,
    oldest first.

    Example:
        GET /api/locations?startTime=1735689600000&endTime=1735693200000

    Raises:
        400: Missing or unparseable bound, or startTime after endTime
    """
    start = _query_time("startTime", start_time)
    end = _query_time("endTime", end_time)
    if start > end:
        raise ValidationError("startTime must be on or before endTime")

    return ping_repo.get_pings_between(DB, start, end)


@router.post("/locations", response_model=ping_schema.Ping_get, status_code=201)
def create_location(
    report: Dict[str, Any] = Body(..., description="latitude, longitude, timestamp, altitude?, speed?, deviceId?"),
    engine: TrackingEngine = Depends(get_engine)
):
    """
    Store one point outside any trip. No user or device identity is
    required, and no distance is accumulated.

    Raises:
        400: Missing/out-of-range coordinates or timestamp
    """
    return engine.record_location(report).ping


# ==========================================================
# 📌 Routes by day and bulk import
# ==========================================================

@router.get("/routes", response_model=List[trip_schema.Trip_get])
def get_routes(
    day: date = Query(..., alias="date", description="UTC calendar date (YYYY-MM-DD)"),
    DB: Session = Depends(get_DB)
):
    """
    Every trip opened on a calendar date, open or closed and for any user,
    each with its pings ordered by observation time.

    Example:
        GET /api/routes?date=2025-01-02
    """
    trips = trip_repo.get_trips_by_calendar_date(DB, day)
    pings = ping_repo.get_pings_by_trips(DB, [trip.id for trip in trips])
    return [trip_schema.Trip_get.from_trip(trip, pings[trip.id]) for trip in trips]


@router.post("/routes", response_model=trip_schema.Trip_get, status_code=201)
def create_route(
    route: Dict[str, Any] = Body(..., description="date, startTime, endTime, duration, distance, userId, locations?"),
    engine: TrackingEngine = Depends(get_engine)
):
    """
    Import a finished route and its points in one transaction.

    Example:
        POST /api/routes
        {"date": "2025-01-02", "startTime": 1735812000000, "endTime": 1735815600000,
         "duration": 3600, "distance": 5230.5, "userId": "test-user-id",
         "locations": [{"latitude": 37.7749, "longitude": -122.4194, "timestamp": 1735812000000}]}

    Raises:
        400: Missing fields, bad times or points
        404: Unknown user
    """
    return engine.import_route(route)
