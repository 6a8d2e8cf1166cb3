# routetrack/Schemas/ping.py

from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime, timezone
from typing import Optional

from routetrack.Core.timeutils import ensure_utc, from_epoch_ms
from routetrack.Models.trip import OPEN_TRIP_THRESHOLD

EARLIEST_OBSERVATION = datetime(1970, 1, 1, tzinfo=timezone.utc)


def coerce_timestamp(value):
    """
    Before-validator shared by every observation time field: epoch
    milliseconds become an aware datetime, anything else goes on to
    pydantic's datetime parsing.
    """
    # bool is an int subclass; a JSON true/false is not a timestamp
    if isinstance(value, bool):
        raise ValueError("timestamp must be epoch milliseconds or an ISO-8601 string")
    if isinstance(value, (int, float)):
        if value < 0:
            raise ValueError("timestamp out of range")
        try:
            return from_epoch_ms(value)
        except (OverflowError, OSError, ValueError):
            raise ValueError("timestamp out of range")
    return value


def bounded_utc(value: datetime) -> datetime:
    """
    Normalize to UTC and keep the value inside
    [1970-01-01, OPEN_TRIP_THRESHOLD). Later times would read as the
    open-trip marker.
    """
    try:
        value = ensure_utc(value)
    except OverflowError:
        raise ValueError("timestamp out of range")
    if value < EARLIEST_OBSERVATION or value >= OPEN_TRIP_THRESHOLD:
        raise ValueError(
            f"timestamp out of range, must be between {EARLIEST_OBSERVATION.date()} "
            f"and {OPEN_TRIP_THRESHOLD.date()} (exclusive)"
        )
    return value


class RawReport(BaseModel):
    """
    Position report as sent by a device or app.

    ``timestamp`` accepts epoch milliseconds (``Date.now()`` on the device)
    or an ISO-8601 string. Coordinates outside their valid range are
    rejected, never clamped; so are observation times before 1970 or on
    or after 2099-01-01.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    latitude: float = Field(..., ge=-90, le=90, description="Latitude in decimal degrees")
    longitude: float = Field(..., ge=-180, le=180, description="Longitude in decimal degrees")
    altitude: Optional[float] = Field(None, description="Altitude in meters above sea level")
    speed_over_ground: Optional[float] = Field(None, alias="speed", description="Speed reported by the device")
    observed_at: datetime = Field(..., alias="timestamp", description="Observation time")
    device_id: Optional[str] = Field(None, alias="deviceId", min_length=1, max_length=100)

    @field_validator("observed_at", mode="before")
    @classmethod
    def _parse_timestamp(cls, value):
        return coerce_timestamp(value)

    @field_validator("observed_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return bounded_utc(value)


class Identity(BaseModel):
    """Who a report is attributed to. The ingestion pipeline requires at least one field."""
    user_id: Optional[str] = None
    device_id: Optional[str] = None


class Ping_get(BaseModel):
    """Stored ping as returned by the engine and the API."""
    model_config = ConfigDict(from_attributes=True)

    id: int
    trip_id: Optional[str] = None
    device_id: Optional[str] = None
    latitude: float
    longitude: float
    altitude: Optional[float] = None
    speed_over_ground: Optional[float] = None
    observed_at: datetime
    created_at: Optional[datetime] = None

    @field_validator("observed_at", "created_at")
    @classmethod
    def _as_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class IngestResult(BaseModel):
    """
    Outcome of one ingestion call.

    ``trip_id`` and ``cumulative_distance_meters`` are None for unassigned
    device pings.
    """
    ping: Ping_get
    trip_id: Optional[str] = None
    cumulative_distance_meters: Optional[float] = None


class TrackedMovement(BaseModel):
    """Response of POST /api/user/trace-movement."""
    message: str = "Movement tracked successfully"
    location: Ping_get
    route_id: Optional[str] = None
    cumulative_distance_meters: Optional[float] = None


class LatestLocation(Ping_get):
    """Ping with the owner of its trip, None for unassigned device pings."""
    owner_id: Optional[str] = None
