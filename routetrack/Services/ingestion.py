# routetrack/Services/ingestion.py
"""
Ping Ingestion Pipeline
=======================
Validates a raw position report, resolves who it belongs to and persists it.

Arquitectura:
- Input: RawReport (or the raw request body) + Identity
- Output: IngestResult (stored ping, trip id, cumulative distance)
- User reports: owner lock → open-or-create trip → insert → accumulate → commit
- Device-only reports: insert unassigned → commit

Filosofía de errores:
- Invalid report or missing identity → ValidationError, nothing persisted
- Unknown user → IdentityNotFound, no device-only fallback
- Any storage error → rollback of the whole unit, PersistenceFailure
"""

import logging
from typing import Any, Mapping, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from routetrack.Schemas.ping import Identity, IngestResult, Ping_get, RawReport
from routetrack.Services.distance_accumulator import DistanceAccumulator
from routetrack.Services.errors import IdentityNotFound, ValidationError
from routetrack.Services.identity import IdentityResolver
from routetrack.Services.owner_locks import OwnerLockRegistry, owner_locks
from routetrack.Services.session_manager import SessionManager
from routetrack.Services.trip_store import TripStore

logger = logging.getLogger(__name__)


def format_pydantic_errors(exc: PydanticValidationError) -> str:
    parts = []
    for error in exc.errors():
        field = ".".join(str(loc) for loc in error.get("loc", ()))
        parts.append(f"{field}: {error.get('msg')}" if field else error.get("msg", ""))
    return "; ".join(parts)


def parse_report(report: Union[RawReport, Mapping[str, Any]]) -> RawReport:
    """
    Validate a raw report.

    Raises:
        ValidationError: Missing coordinates or timestamp, out-of-range
        coordinates, unparseable timestamp
    """
    if isinstance(report, RawReport):
        return report
    if not isinstance(report, Mapping):
        raise ValidationError("Report must be an object")
    try:
        return RawReport.model_validate(report)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid location data: {format_pydantic_errors(e)}") from e


def _clean(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    return value or None


class IngestionPipeline:

    def __init__(
        self,
        store: TripStore,
        identities: IdentityResolver,
        sessions: SessionManager,
        accumulator: DistanceAccumulator,
        locks: OwnerLockRegistry = owner_locks
    ):
        self.store = store
        self.identities = identities
        self.sessions = sessions
        self.accumulator = accumulator
        self.locks = locks

    def ingest(
        self,
        report: Union[RawReport, Mapping[str, Any]],
        identity: Optional[Identity] = None
    ) -> IngestResult:
        report = parse_report(report)
        identity = identity or Identity()

        user_id = _clean(identity.user_id)
        # header identity wins over the device id carried in the body
        device_id = _clean(identity.device_id) or _clean(report.device_id)

        if user_id is None and device_id is None:
            raise ValidationError("User ID or Device ID is required")

        if user_id is not None:
            if not self.identities.user_exists(user_id):
                raise IdentityNotFound(user_id)
            return self._ingest_for_owner(report, user_id, device_id)

        return self._ingest_unassigned(report, device_id)

    def record_unassigned(self, report: Union[RawReport, Mapping[str, Any]]) -> IngestResult:
        """
        Store a point outside any trip. Unlike ingest(), no identity is
        required; the body deviceId is kept when present.
        """
        report = parse_report(report)
        return self._ingest_unassigned(report, _clean(report.device_id))

    def _ingest_for_owner(self, report: RawReport, owner_id: str, device_id: Optional[str]) -> IngestResult:
        with self.locks.hold(owner_id):
            try:
                if not self.store.lock_owner(owner_id):
                    raise IdentityNotFound(owner_id)

                trip_id = self.sessions.get_or_open_trip(owner_id, report.observed_at)
                ping = self.store.insert_ping(report, trip_id, device_id)
                self.accumulator.accumulate(trip_id, ping)
                self.store.commit()
            except Exception:
                self.store.rollback()
                raise

            trip = self.store.refresh(self.store.get_trip(trip_id))
            result = IngestResult(
                ping=Ping_get.model_validate(ping),
                trip_id=trip_id,
                cumulative_distance_meters=trip.cumulative_distance_meters,
            )

        logger.debug("[INGEST] Ping %s stored on %s (owner: %s)", ping.id, trip_id, owner_id)
        return result

    def _ingest_unassigned(self, report: RawReport, device_id: Optional[str]) -> IngestResult:
        try:
            ping = self.store.insert_ping(report, None, device_id)
            self.store.commit()
        except Exception:
            self.store.rollback()
            raise

        logger.debug("[INGEST] Unassigned ping %s stored (device: %s)", ping.id, device_id)
        return IngestResult(ping=Ping_get.model_validate(ping))
