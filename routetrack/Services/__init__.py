# routetrack/Services/__init__.py
"""
Tracking Engine Services
========================
Ciclo de vida de trips y acumulación geoespacial.

Componentes:
- geo: distancia haversine y rumbo inicial
- session_manager: abrir-o-crear / cerrar el trip de un owner
- distance_accumulator: incremento atómico de la distancia acumulada
- ingestion: validación, identidad y persistencia de cada ping
- navigation: distancia y rumbo de regreso al inicio
- route_import: importación transaccional de rutas terminadas
- tracking_engine: fachada usada por la API
"""

from .errors import (
    EmptyTrip,
    IdentityNotFound,
    NoActiveTrip,
    PersistenceFailure,
    TrackingError,
    TripNotFound,
    ValidationError,
)
from .geo import Coordinate, distance_meters, initial_bearing_degrees
from .owner_locks import OwnerLockRegistry, owner_locks
from .tracking_engine import TrackingEngine, build_tracking_engine

__all__ = [
    # Errors
    'TrackingError',
    'ValidationError',
    'IdentityNotFound',
    'TripNotFound',
    'NoActiveTrip',
    'EmptyTrip',
    'PersistenceFailure',

    # Geo
    'Coordinate',
    'distance_meters',
    'initial_bearing_degrees',

    # Engine
    'OwnerLockRegistry',
    'owner_locks',
    'TrackingEngine',
    'build_tracking_engine',
]
