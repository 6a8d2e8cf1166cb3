# routetrack/Controller/Routes/users.py
import math
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from routetrack.Controller.deps import get_DB
from routetrack.Core.config import settings
from routetrack.Repositories import ping as ping_repo
from routetrack.Repositories import trip as trip_repo
from routetrack.Repositories.user import user_exists
from routetrack.Schemas import ping as ping_schema
from routetrack.Schemas import trip as trip_schema
from routetrack.Services.errors import IdentityNotFound, TripNotFound, ValidationError

router = APIRouter()

# ==========================================================
# ✅ SPECIAL GET ROUTES (no path parameters first)
# ==========================================================


@router.get("/latest-locations", response_model=List[ping_schema.LatestLocation])
def get_latest_locations(
    limit: int = Query(settings.LATEST_LOCATIONS_DEFAULT_LIMIT, ge=1, le=settings.HISTORY_MAX_LIMIT),
    DB: Session = Depends(get_DB)
):
    """
    Most recent pings across every user and device, newest first.

    Example:
        GET /api/user/latest-locations?limit=5
    """
    rows = ping_repo.get_latest_pings(DB, limit=limit)
    return [
        ping_schema.LatestLocation.model_validate(ping).model_copy(update={"owner_id": owner_id})
        for ping, owner_id in rows
    ]


# ==========================================================
# READ-ONLY QUERIES
# ==========================================================

@router.get("/location/{user_id}", response_model=ping_schema.Ping_get)
def get_user_location(user_id: str, DB: Session = Depends(get_DB)):
    """
    Latest ping recorded on any of the user's trips.

    Raises:
        404: Unknown user, or the user has no pings
    """
    if not user_exists(DB, user_id):
        raise IdentityNotFound(user_id)

    latest = ping_repo.get_latest_ping_by_owner(DB, user_id)
    if latest is None:
        raise HTTPException(status_code=404, detail="No location found for this user")
    return latest


@router.get("/device-location/{device_id}", response_model=ping_schema.Ping_get)
def get_device_location(device_id: str, DB: Session = Depends(get_DB)):
    """
    Latest ping reported by a device, assigned to a trip or not.

    Raises:
        404: The device never reported
    """
    latest = ping_repo.get_latest_ping_by_device(DB, device_id)
    if latest is None:
        raise HTTPException(status_code=404, detail="No location found for this device")
    return latest


@router.get("/history/{user_id}", response_model=trip_schema.TripHistoryPage)
def get_user_history(
    user_id: str,
    start_date: Optional[date] = Query(None, description="Only trips opened on or after this date (YYYY-MM-DD)"),
    end_date: Optional[date] = Query(None, description="Only trips opened on or before this date (YYYY-MM-DD)"),
    limit: int = Query(settings.HISTORY_DEFAULT_LIMIT, ge=1, le=settings.HISTORY_MAX_LIMIT),
    page: int = Query(1, ge=1),
    DB: Session = Depends(get_DB)
):
    """
    Completed trips of a user, most recent first, paginated.

    Open trips are never listed. Each entry carries the number of pings
    recorded on the trip.

    Example:
        GET /api/user/history/test-user-id?start_date=2025-01-01&limit=20&page=2

    Raises:
        400: start_date after end_date
        404: Unknown user
    """
    if start_date and end_date and start_date > end_date:
        raise ValidationError("start_date must be on or before end_date")

    if not user_exists(DB, user_id):
        raise IdentityNotFound(user_id)

    total = trip_repo.count_closed_trips_by_owner(DB, user_id, start_date, end_date)
    rows = trip_repo.get_closed_trips_by_owner(
        DB, user_id, start_date, end_date,
        limit=limit,
        offset=(page - 1) * limit
    )

    data = [
        trip_schema.Trip_summary.model_validate(trip).model_copy(update={"location_count": count})
        for trip, count in rows
    ]
    return trip_schema.TripHistoryPage(
        data=data,
        pagination=trip_schema.Pagination(
            total=total,
            page=page,
            limit=limit,
            pages=math.ceil(total / limit),
        ),
    )


@router.get("/route-details/{route_id}", response_model=trip_schema.Trip_get)
def get_route_details(route_id: str, DB: Session = Depends(get_DB)):
    """
    A trip (open or closed) with all its pings ordered by observation time.

    Raises:
        404: Unknown trip
    """
    trip = trip_repo.get_trip_by_id(DB, route_id)
    if trip is None:
        raise TripNotFound(route_id)

    return trip_schema.Trip_get.from_trip(trip, ping_repo.get_pings_by_trip(DB, route_id))
