"""
Concurrent Ingestion Tests
==========================
Many threads reporting for the same owner against a file-backed SQLite
database, each thread with its own session.
"""

import threading

import pytest

from routetrack.DB.base import Base
from routetrack.DB.session import build_engine, build_session_factory
from routetrack.Models.ping import Ping
from routetrack.Models.trip import Trip, is_open
from routetrack.Repositories.user import create_user
from routetrack.Schemas.ping import Identity
from routetrack.Schemas.user import User_create
from routetrack.Services.geo import distance_meters
from routetrack.Services.owner_locks import OwnerLockRegistry
from routetrack.Services.tracking_engine import build_tracking_engine

from conftest import USER_ID, report

THREADS = 8
PINGS_PER_THREAD = 5


@pytest.fixture
def file_session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'tracking.db'}")
    Base.metadata.create_all(bind=engine)
    factory = build_session_factory(engine)

    with factory() as DB:
        create_user(DB, User_create(id=USER_ID))

    yield factory
    engine.dispose()


class TestConcurrentIngestion:

    def test_single_open_trip_and_arrival_order_distance(self, file_session_factory):
        locks = OwnerLockRegistry()
        barrier = threading.Barrier(THREADS)
        errors = []

        def worker(n):
            try:
                barrier.wait()
                for i in range(PINGS_PER_THREAD):
                    with file_session_factory() as DB:
                        engine = build_tracking_engine(DB, locks=locks)
                        engine.ingest(
                            report(0.001 * n, 0.001 * i, 1000 + n * 100 + i),
                            Identity(user_id=USER_ID)
                        )
            except Exception as e:
                errors.append(e)

        threads = [threading.Thread(target=worker, args=(n,)) for n in range(THREADS)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        assert errors == []
        assert locks.active_owner_count() == 0

        with file_session_factory() as DB:
            trips = DB.query(Trip).filter(Trip.owner_id == USER_ID).all()
            assert len(trips) == 1
            assert is_open(trips[0])

            pings = DB.query(Ping).filter(Ping.trip_id == trips[0].id).order_by(Ping.id).all()
            assert len(pings) == THREADS * PINGS_PER_THREAD

            expected = sum(distance_meters(a, b) for a, b in zip(pings, pings[1:]))
            assert trips[0].cumulative_distance_meters == pytest.approx(expected, rel=1e-9)
