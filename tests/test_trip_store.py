"""
Trip Store Tests
================
Storage errors surface as PersistenceFailure and roll the unit back.
"""

import pytest
from sqlalchemy.exc import OperationalError

from routetrack.Models.ping import Ping
from routetrack.Models.trip import Trip
from routetrack.Schemas.ping import Identity
from routetrack.Services.errors import PersistenceFailure
from routetrack.Services.trip_store import TripStore

from conftest import USER_ID, report


class TestPersistenceFailure:

    def test_sqlalchemy_error_is_wrapped(self, db, users, monkeypatch):
        store = TripStore(db)

        def broken(*args, **kwargs):
            raise OperationalError("SELECT 1", {}, Exception("connection lost"))

        monkeypatch.setattr("routetrack.Repositories.trip.get_open_trip_by_owner", broken)

        with pytest.raises(PersistenceFailure) as exc_info:
            store.find_open_trip(USER_ID)
        assert isinstance(exc_info.value.__cause__, OperationalError)
        assert exc_info.value.status_code == 500

    def test_failed_increment_rolls_back_ping_and_trip(self, engine, db, monkeypatch):
        ident = Identity(user_id=USER_ID)
        first = engine.ingest(report(0.0, 0.0, 1000), ident)

        def broken(*args, **kwargs):
            raise OperationalError("UPDATE trips", {}, Exception("disk I/O error"))

        monkeypatch.setattr("routetrack.Repositories.trip.increment_distance", broken)

        with pytest.raises(PersistenceFailure):
            engine.ingest(report(0.01, 0.0, 2000), ident)

        assert db.query(Ping).count() == 1
        trip = db.query(Trip).filter(Trip.id == first.trip_id).one()
        assert trip.cumulative_distance_meters == 0.0
