"""
routetrack/DB/base.py
==========================
SQLAlchemy Model Registry
==========================

Imports every model so that ``Base.metadata`` is complete before Alembic
autogenerates migrations or ``create_all()`` runs.

Models Registered:
-----------------
- User: Identities that own trips
- Trip: One continuous tracked journey (route)
- Ping: Individual position reports

Any new model MUST be imported here.
"""

from routetrack.DB.base_class import Base

# ============================================================
# MODEL IMPORTS - DO NOT REMOVE
# ============================================================
from routetrack.Models.user import User
from routetrack.Models.trip import Trip
from routetrack.Models.ping import Ping

__all__ = ["Base", "User", "Trip", "Ping"]
