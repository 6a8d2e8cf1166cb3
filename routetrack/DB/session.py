"""
routetrack/DB/session.py
======================================
Database Session Configuration Module
======================================

Creates the SQLAlchemy engine and the session factory used by the HTTP
layer and the tracking engine.

Usage Example:
-------------
    from routetrack.DB.session import SessionLocal

    with SessionLocal() as db:
        trips = db.query(Trip).all()

Session Configuration:
---------------------
- autocommit=False: The tracking engine commits one unit of work per call
  (ping insert + distance increment together)
- autoflush=False: Repositories flush explicitly when they need generated ids
- expire_on_commit=False: Objects returned by the engine stay readable after
  the commit that produced them
"""

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from routetrack.Core.config import settings


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """
    Create an engine for ``database_url``.

    SQLite connections are shared across FastAPI worker threads, so
    ``check_same_thread`` is disabled; in-memory SQLite additionally needs a
    StaticPool to keep a single connection (and therefore a single database).
    """
    if database_url.startswith("sqlite"):
        kwargs = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url in ("sqlite://", "sqlite+pysqlite://"):
            kwargs["poolclass"] = StaticPool
        return create_engine(database_url, echo=echo, **kwargs)

    return create_engine(database_url, echo=echo, pool_pre_ping=True)


def build_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=bind,
    )


# ============================================================
# DATABASE ENGINE / SESSION FACTORY
# ============================================================
engine = build_engine(settings.DATABASE_URL, echo=settings.DATABASE_ECHO)

SessionLocal = build_session_factory(engine)
