# routetrack/Controller/deps.py

from typing import Generator

from fastapi import Depends
from sqlalchemy.orm import Session

from routetrack.DB.session import SessionLocal
from routetrack.Services.tracking_engine import TrackingEngine, build_tracking_engine


def get_DB() -> Generator:
    DB = SessionLocal()
    try:
        yield DB
    finally:
        DB.close()


def get_engine(DB: Session = Depends(get_DB)) -> TrackingEngine:
    return build_tracking_engine(DB)
