# routetrack/Controller/Routes/tracking.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Header

from routetrack.Controller.deps import get_engine
from routetrack.Schemas import ping as ping_schema
from routetrack.Schemas import trip as trip_schema
from routetrack.Services.tracking_engine import TrackingEngine

router = APIRouter()

# ==========================================================
# ENGINE OPERATIONS
# ==========================================================
# Errors raised by the engine (ValidationError, IdentityNotFound,
# NoActiveTrip, ...) are rendered by the TrackingError handler in main.py.
# ==========================================================


@router.post("/trace-movement", response_model=ping_schema.TrackedMovement, status_code=201)
def trace_movement(
    report: Dict[str, Any] = Body(..., description="latitude, longitude, timestamp, altitude?, speed?, deviceId?"),
    user_id: Optional[str] = Header(None, description="Registered user the ping belongs to"),
    device_id: Optional[str] = Header(None, description="Reporting device (overrides body deviceId)"),
    engine: TrackingEngine = Depends(get_engine)
):
    """
    Record one position report.

    With a ``user-id`` header the ping is attached to the user's open trip
    (a trip is opened on the first ping) and the trip's cumulative distance
    is updated. With only a device id the ping is stored unassigned.

    Example:
        POST /api/user/trace-movement
        user-id: test-user-id
        {"latitude": 37.7749, "longitude": -122.4194, "timestamp": 1735689600000}

    Raises:
        400: Missing/out-of-range coordinates or timestamp, or no identity
        404: Unknown user
    """
    result = engine.ingest(
        report,
        ping_schema.Identity(user_id=user_id, device_id=device_id)
    )
    return ping_schema.TrackedMovement(
        location=result.ping,
        route_id=result.trip_id,
        cumulative_distance_meters=result.cumulative_distance_meters,
    )


@router.post("/complete-route/{user_id}", response_model=trip_schema.CompletedRoute)
def complete_route(user_id: str, engine: TrackingEngine = Depends(get_engine)):
    """
    Close the user's open trip and return it with its pings.

    Raises:
        404: Unknown user, or the user has no open trip
    """
    return trip_schema.CompletedRoute(route=engine.close_trip(user_id))


@router.get("/return-to-start/{route_id}", response_model=trip_schema.NavigationInfo)
def return_to_start(route_id: str, engine: TrackingEngine = Depends(get_engine)):
    """
    Distance (meters) and bearing (degrees from true north) from the latest
    ping of a trip back to its first one.

    Raises:
        404: Unknown trip, or trip without pings
    """
    return engine.return_to_start(route_id)
