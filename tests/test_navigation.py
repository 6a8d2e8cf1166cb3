"""
Navigation Advisor Tests
========================
"""

import pytest

from routetrack.Schemas.ping import Identity
from routetrack.Services.errors import EmptyTrip, TripNotFound
from routetrack.Services.trip_store import TripStore
from routetrack.Core.timeutils import from_epoch_ms

from conftest import USER_ID, report


class TestReturnToStart:

    def test_closed_trip_points_south(self, engine, clock):
        ident = Identity(user_id=USER_ID)
        first = engine.ingest(report(37.7749, -122.4194, 1000), ident)
        engine.ingest(report(37.7849, -122.4194, 2000), ident)
        clock.set_epoch_ms(5000)
        engine.close_trip(USER_ID)

        info = engine.return_to_start(first.trip_id)

        assert info.distance_to_start == pytest.approx(1111.95, abs=0.5)
        assert info.bearing_to_start == pytest.approx(180.0, abs=1e-6)
        assert info.start_coordinates.latitude == 37.7749
        assert info.start_coordinates.longitude == -122.4194
        assert info.starting_point.id == first.ping.id
        assert info.current_point.latitude == 37.7849

    def test_open_trip_supported(self, engine):
        ident = Identity(user_id=USER_ID)
        first = engine.ingest(report(0.0, 0.0, 1000), ident)
        engine.ingest(report(0.0, 1.0, 2000), ident)

        info = engine.return_to_start(first.trip_id)
        assert info.bearing_to_start == pytest.approx(270.0)

    def test_single_ping_is_zero(self, engine):
        first = engine.ingest(report(10.0, 10.0, 1000), Identity(user_id=USER_ID))

        info = engine.return_to_start(first.trip_id)
        assert info.distance_to_start == 0.0
        assert info.bearing_to_start == 0.0

    def test_start_is_earliest_observed_current_is_last_received(self, engine):
        ident = Identity(user_id=USER_ID)
        engine.ingest(report(1.0, 1.0, 5000), ident)
        engine.ingest(report(2.0, 2.0, 1000), ident)
        last = engine.ingest(report(3.0, 3.0, 3000), ident)

        info = engine.return_to_start(last.trip_id)
        assert info.starting_point.latitude == 2.0
        assert info.current_point.id == last.ping.id

    def test_unknown_trip(self, engine):
        with pytest.raises(TripNotFound):
            engine.return_to_start("TRIP_19700101_nobody_00000000")

    def test_trip_without_pings(self, engine, db):
        store = TripStore(db)
        trip = store.create_trip(USER_ID, from_epoch_ms(1000))
        store.commit()

        with pytest.raises(EmptyTrip):
            engine.return_to_start(trip.id)
