# routetrack/Models/trip.py
from datetime import datetime, timezone

from sqlalchemy import Column, String, Float, Integer, Date, DateTime, ForeignKey, CheckConstraint, Index
from sqlalchemy.sql import func
from sqlalchemy.orm import declared_attr

from routetrack.Core.timeutils import ensure_utc
from routetrack.DB.base_class import Base


# ========================================
# OPEN-TRIP MARKER
# ========================================
# An open trip stores a far-future end time instead of NULL so that range
# queries separate open and closed trips with a plain comparison. Call
# sites go through is_open() / open_trip_clause() only.
OPEN_TRIP_SENTINEL = datetime(2099, 12, 31, 23, 59, 59, tzinfo=timezone.utc)
OPEN_TRIP_THRESHOLD = datetime(2099, 1, 1, 0, 0, 0, tzinfo=timezone.utc)


class Trip(Base):
    """
    SQLAlchemy model for a trip (route): one continuous tracked journey.

    Responsibilities:
    - Owns the pings attached to it through pings.trip_id
    - Keeps the running cumulative distance while open
    - Freezes ended_at and duration_seconds when closed

    Related models:
    - User (1:N) - one user owns many trips, at most one open
    - Ping (1:N) - one trip contains many pings
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "trips"

    # ========================================
    # PRIMARY KEY
    # ========================================
    id = Column(
        String(100),
        primary_key=True,
        doc="Unique trip identifier (format: TRIP_YYYYMMDD_OWNER_XXXXXXXX)"
    )

    # ========================================
    # FOREIGN KEY
    # ========================================
    owner_id = Column(
        String(100),
        ForeignKey('users.id', ondelete='CASCADE'),
        nullable=False,
        index=True,
        doc="User identity that owns this trip"
    )

    # ========================================
    # TEMPORAL BOUNDS
    # ========================================
    calendar_date = Column(
        Date,
        nullable=False,
        doc="UTC calendar date on which the trip was opened"
    )

    started_at = Column(
        DateTime(timezone=True),
        nullable=False,
        doc="Observation time of the ping that opened the trip"
    )

    ended_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=OPEN_TRIP_SENTINEL,
        doc="Close time, or OPEN_TRIP_SENTINEL while the trip is in progress"
    )

    # ========================================
    # METRICS
    # ========================================
    duration_seconds = Column(
        Integer,
        nullable=False,
        default=0,
        server_default='0',
        doc="Whole seconds between started_at and ended_at (0 while open)"
    )

    cumulative_distance_meters = Column(
        Float,
        nullable=False,
        default=0.0,
        server_default='0',
        doc="Sum of great-circle distances between consecutively inserted pings"
    )

    # ========================================
    # AUDIT FIELDS
    # ========================================
    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Timestamp when trip record was created"
    )

    updated_at = Column(
        DateTime(timezone=True),
        onupdate=func.now(),
        nullable=True,
        doc="Timestamp of last update"
    )

    # ========================================
    # TABLE CONSTRAINTS
    # ========================================
    __table_args__ = (
        Index('idx_trips_owner_ended_at', 'owner_id', 'ended_at'),
        Index('idx_trips_owner_calendar_date', 'owner_id', 'calendar_date'),

        CheckConstraint(
            "ended_at >= started_at",
            name='check_trip_time_order'
        ),
        CheckConstraint(
            "duration_seconds >= 0",
            name='check_trip_duration'
        ),
        CheckConstraint(
            "cumulative_distance_meters >= 0",
            name='check_trip_distance'
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Trip(id={self.id!r}, owner_id={self.owner_id!r}, "
            f"open={is_open(self)}, distance={self.cumulative_distance_meters})>"
        )


def is_open(trip: Trip) -> bool:
    """True while the trip has not been closed."""
    ended_at = ensure_utc(trip.ended_at)
    return ended_at is not None and ended_at >= OPEN_TRIP_THRESHOLD


def open_trip_clause():
    """SQL predicate selecting open trips."""
    return Trip.ended_at >= OPEN_TRIP_THRESHOLD


def closed_trip_clause():
    """SQL predicate selecting closed trips."""
    return Trip.ended_at < OPEN_TRIP_THRESHOLD
