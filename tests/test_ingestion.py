"""
Ping Ingestion Pipeline Tests
=============================
Trip opening, attachment, unassigned device pings and input validation.
"""

import pytest

from routetrack.Core.timeutils import ensure_utc
from routetrack.Models.ping import Ping
from routetrack.Models.trip import Trip, is_open
from routetrack.Schemas.ping import Identity, RawReport
from routetrack.Services.errors import IdentityNotFound, NoActiveTrip, ValidationError

from conftest import OTHER_USER_ID, USER_ID, report


class TestOwnerIngestion:

    def test_first_ping_opens_trip(self, engine, db):
        result = engine.ingest(report(37.7749, -122.4194, 1000), Identity(user_id=USER_ID))

        assert result.trip_id is not None
        assert result.trip_id.startswith("TRIP_19700101_testuserid_")
        assert result.cumulative_distance_meters == 0.0
        assert result.ping.trip_id == result.trip_id

        trip = db.query(Trip).filter(Trip.id == result.trip_id).one()
        assert is_open(trip)
        assert trip.owner_id == USER_ID
        assert trip.duration_seconds == 0
        assert ensure_utc(trip.started_at) == result.ping.observed_at

    def test_second_ping_attaches_and_accumulates(self, engine):
        first = engine.ingest(report(37.7749, -122.4194, 1000), Identity(user_id=USER_ID))
        second = engine.ingest(report(37.7849, -122.4194, 2000), Identity(user_id=USER_ID))

        assert second.trip_id == first.trip_id
        assert second.cumulative_distance_meters == pytest.approx(1111.95, abs=0.5)

    def test_owners_get_separate_trips(self, engine):
        mine = engine.ingest(report(10.0, 10.0, 1000), Identity(user_id=USER_ID))
        theirs = engine.ingest(report(10.0, 10.0, 1000), Identity(user_id=OTHER_USER_ID))
        assert mine.trip_id != theirs.trip_id

    def test_device_id_recorded_on_owner_ping(self, engine):
        result = engine.ingest(
            report(10.0, 10.0, 1000),
            Identity(user_id=USER_ID, device_id="ESP32_001")
        )
        assert result.ping.device_id == "ESP32_001"
        assert result.trip_id is not None

    def test_accepts_validated_report(self, engine):
        raw = RawReport.model_validate({"latitude": 1.0, "longitude": 2.0, "timestamp": "2025-01-01T10:00:00Z"})
        result = engine.ingest(raw, Identity(user_id=USER_ID))
        assert result.ping.observed_at.isoformat() == "2025-01-01T10:00:00+00:00"

    def test_optional_fields_persisted(self, engine):
        result = engine.ingest(
            report(10.0, 10.0, 1000, altitude=12.5, speed=3.2),
            Identity(user_id=USER_ID)
        )
        assert result.ping.altitude == 12.5
        assert result.ping.speed_over_ground == 3.2

    def test_zero_coordinates_are_valid(self, engine):
        result = engine.ingest(report(0.0, 0.0, 1000), Identity(user_id=USER_ID))
        assert result.ping.latitude == 0.0
        assert result.ping.longitude == 0.0


class TestDeviceOnlyIngestion:

    def test_device_only_ping_is_unassigned(self, engine, db):
        result = engine.ingest(report(10.0, 10.0, 1000), Identity(device_id="ESP32_001"))

        assert result.trip_id is None
        assert result.cumulative_distance_meters is None
        assert result.ping.trip_id is None
        assert result.ping.device_id == "ESP32_001"
        assert db.query(Trip).count() == 0

    def test_body_device_id_used_without_header(self, engine):
        result = engine.ingest(report(10.0, 10.0, 1000, deviceId="BODY_DEV"), Identity())
        assert result.ping.device_id == "BODY_DEV"

    def test_header_device_id_wins_over_body(self, engine):
        result = engine.ingest(
            report(10.0, 10.0, 1000, deviceId="BODY_DEV"),
            Identity(device_id="HEADER_DEV")
        )
        assert result.ping.device_id == "HEADER_DEV"


class TestIngestionErrors:

    def test_latitude_out_of_range(self, engine, db):
        with pytest.raises(ValidationError):
            engine.ingest(report(95.0, -122.4194, 1000), Identity(user_id=USER_ID))

        assert db.query(Trip).count() == 0
        assert db.query(Ping).count() == 0

    def test_longitude_out_of_range(self, engine):
        with pytest.raises(ValidationError):
            engine.ingest(report(10.0, 181.0, 1000), Identity(user_id=USER_ID))

    @pytest.mark.parametrize("missing", ["latitude", "longitude", "timestamp"])
    def test_missing_required_field(self, engine, db, missing):
        body = report(10.0, 10.0, 1000)
        del body[missing]

        with pytest.raises(ValidationError):
            engine.ingest(body, Identity(user_id=USER_ID))
        assert db.query(Ping).count() == 0

    def test_boolean_timestamp_rejected(self, engine):
        with pytest.raises(ValidationError):
            engine.ingest(report(10.0, 10.0, True), Identity(user_id=USER_ID))

    def test_no_identity(self, engine, db):
        with pytest.raises(ValidationError):
            engine.ingest(report(10.0, 10.0, 1000), Identity())
        assert db.query(Ping).count() == 0

    def test_blank_identity(self, engine):
        with pytest.raises(ValidationError):
            engine.ingest(report(10.0, 10.0, 1000), Identity(user_id="  ", device_id=""))

    def test_unknown_user_has_no_device_fallback(self, engine, db):
        with pytest.raises(IdentityNotFound):
            engine.ingest(report(10.0, 10.0, 1000), Identity(user_id="ghost", device_id="ESP32_001"))

        assert db.query(Ping).count() == 0
        assert db.query(Trip).count() == 0


class TestTimestampBounds:

    @pytest.mark.parametrize("timestamp", [
        1e22,                      # past the largest datetime
        float("inf"),
        -1000,                     # before 1970
        4070908800000,             # 2099-01-01T00:00:00Z, start of the open-trip marker range
        4090000000000,             # 2099-08-09
        4102444800000,             # 2100-01-01
        "2099-06-01T00:00:00Z",
        "1969-12-31T23:59:59Z",
        "9999-12-31T23:59:59-14:00",
    ])
    def test_out_of_range_rejected(self, engine, db, timestamp):
        with pytest.raises(ValidationError):
            engine.ingest(report(10.0, 10.0, timestamp), Identity(user_id=USER_ID))

        assert db.query(Trip).count() == 0
        assert db.query(Ping).count() == 0

    def test_device_only_out_of_range_rejected(self, engine, db):
        with pytest.raises(ValidationError):
            engine.ingest(report(10.0, 10.0, 1e22), Identity(device_id="ESP32_001"))
        assert db.query(Ping).count() == 0

    def test_epoch_zero_accepted(self, engine):
        result = engine.ingest(report(10.0, 10.0, 0), Identity(user_id=USER_ID))
        assert result.ping.observed_at.isoformat() == "1970-01-01T00:00:00+00:00"

    def test_latest_accepted_time_still_closes(self, engine):
        # device clock far ahead: ended_at is clamped to started_at, which must not read as open
        engine.ingest(report(10.0, 10.0, "2098-12-31T23:59:59Z"), Identity(user_id=USER_ID))

        closed = engine.close_trip(USER_ID)
        assert not closed.is_open
        assert closed.ended_at == closed.started_at
        assert closed.duration_seconds == 0

        with pytest.raises(NoActiveTrip):
            engine.close_trip(USER_ID)
