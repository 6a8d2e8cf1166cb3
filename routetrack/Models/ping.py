# routetrack/Models/ping.py
from sqlalchemy.orm import declared_attr
from sqlalchemy import (
    Column, BigInteger, Integer, String, Float, DateTime,
    CheckConstraint, ForeignKey, Index, func
)
from routetrack.DB.base_class import Base


class Ping(Base):
    """
    SQLAlchemy model for a single position report.

    Rows are written once and never updated. The auto-increment id is the
    arrival order; distance accumulation pairs pings by it.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "pings"

    # BIGINT in PostgreSQL, INTEGER in SQLite so the rowid alias autoincrements
    id = Column(BigInteger().with_variant(Integer, "sqlite"), primary_key=True, autoincrement=True)

    trip_id = Column(
        String(100),
        ForeignKey('trips.id', ondelete='SET NULL'),
        nullable=True,
        index=True,
        doc="Trip this ping belongs to (NULL for unassigned device pings)"
    )

    device_id = Column(
        String(100),
        nullable=True,
        index=True,
        doc="Hardware identifier of the reporting device, if known"
    )

    # Position fields
    latitude = Column(Float, nullable=False)
    longitude = Column(Float, nullable=False)
    altitude = Column(Float, nullable=True)
    speed_over_ground = Column(Float, nullable=True)

    observed_at = Column(
        DateTime(timezone=True),
        nullable=False,
        doc="UTC time at which the device observed this position"
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )

    __table_args__ = (
        Index('idx_pings_trip_id_desc', 'trip_id', id.desc()),
        Index('idx_pings_trip_observed_at', 'trip_id', 'observed_at'),
        Index('idx_pings_device_id_desc', 'device_id', id.desc()),
        Index('idx_pings_observed_at', 'observed_at'),

        CheckConstraint(
            "latitude >= -90 AND latitude <= 90",
            name='check_ping_lat_range'
        ),
        CheckConstraint(
            "longitude >= -180 AND longitude <= 180",
            name='check_ping_lon_range'
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<Ping(id={self.id}, device_id={self.device_id!r}, "
            f"lat={self.latitude:.5f}, lon={self.longitude:.5f}, trip_id={self.trip_id!r})>"
        )
