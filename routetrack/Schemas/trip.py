# routetrack/Schemas/trip.py
from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator, model_validator
from datetime import date, datetime
from typing import List

from routetrack.Core.timeutils import ensure_utc
from routetrack.Models.trip import is_open as trip_is_open
from routetrack.Schemas.ping import Ping_get, RawReport, bounded_utc, coerce_timestamp


# ============================================
# BASE SCHEMA
# ============================================
class Trip_base(BaseModel):
    """
    Common trip attributes read from the ORM object.

    ``ended_at`` carries the far-future open marker while the trip is in
    progress; ``is_open`` exposes the same information as a flag.
    """
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Unique trip identifier")
    calendar_date: date = Field(..., description="UTC date on which the trip was opened")
    started_at: datetime = Field(..., description="Observation time of the first ping")
    ended_at: datetime = Field(..., description="Close time, far-future marker while open")
    duration_seconds: int = Field(0, ge=0, description="Whole seconds from start to close")
    cumulative_distance_meters: float = Field(0.0, ge=0, description="Distance accumulated so far")

    @field_validator("started_at", "ended_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @computed_field
    @property
    def is_open(self) -> bool:
        return trip_is_open(self)


# ============================================
# GET SCHEMA
# ============================================
class Trip_get(Trip_base):
    """Trip returned by the engine; pings are attached on close and in details."""
    owner_id: str = Field(..., description="User that owns this trip")
    pings: List[Ping_get] = Field(default_factory=list, description="Pings ordered by observation time")

    @classmethod
    def from_trip(cls, trip, pings=()) -> "Trip_get":
        """Build from an ORM Trip plus its pings (the model has no relationship attribute)."""
        data = cls.model_validate(trip)
        data.pings = [Ping_get.model_validate(p) for p in pings]
        return data


# ============================================
# SPECIALIZED SCHEMA: Trip Summary
# ============================================
class Trip_summary(Trip_base):
    """
    Lightweight schema for the route history list.
    """
    location_count: int = Field(0, ge=0, description="Number of pings recorded on the trip")


# ============================================
# CREATE SCHEMA: bulk route import
# ============================================
class Route_create(BaseModel):
    """
    A finished route recorded elsewhere and uploaded in one request,
    optionally with its points.

    Times accept epoch milliseconds or ISO-8601 strings, like ping
    timestamps. The trip is stored closed, with the given duration and
    distance.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    calendar_date: date = Field(..., alias="date", description="Calendar date of the route (YYYY-MM-DD)")
    started_at: datetime = Field(..., alias="startTime")
    ended_at: datetime = Field(..., alias="endTime")
    duration_seconds: int = Field(..., alias="duration", ge=0)
    cumulative_distance_meters: float = Field(..., alias="distance", ge=0)
    owner_id: str = Field(..., alias="userId", min_length=1, max_length=100)
    pings: List[RawReport] = Field(default_factory=list, alias="locations")

    @field_validator("started_at", "ended_at", mode="before")
    @classmethod
    def _parse_time(cls, value):
        return coerce_timestamp(value)

    @field_validator("started_at", "ended_at")
    @classmethod
    def _as_utc(cls, value: datetime) -> datetime:
        return bounded_utc(value)

    @model_validator(mode="after")
    def _check_time_order(self):
        if self.ended_at < self.started_at:
            raise ValueError("endTime must not be before startTime")
        return self


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


class TripHistoryPage(BaseModel):
    data: List[Trip_summary]
    pagination: Pagination


# ============================================
# NAVIGATION
# ============================================
class Coordinates(BaseModel):
    latitude: float
    longitude: float


class NavigationInfo(BaseModel):
    """
    Distance and bearing from a trip's latest ping back to its first one.
    """
    distance_to_start: float = Field(..., ge=0, description="Great-circle distance in meters")
    bearing_to_start: float = Field(..., ge=0, lt=360, description="Initial bearing in degrees from true north")
    start_coordinates: Coordinates
    starting_point: Ping_get
    current_point: Ping_get


class CompletedRoute(BaseModel):
    """Response of POST /api/user/complete-route/{user_id}."""
    message: str = "Route completed successfully"
    route: Trip_get
