# routetrack/Services/errors.py
"""
Error taxonomy of the tracking engine.

Every error is scoped to the single operation that raised it and is
returned to the caller as-is. ``status_code`` is the HTTP status the API
layer answers with.
"""


class TrackingError(Exception):
    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(TrackingError):
    """Malformed or out-of-range input. Caller's fault, never retried."""
    status_code = 400


class IdentityNotFound(TrackingError):
    status_code = 404

    def __init__(self, user_id: str):
        super().__init__("User not found")
        self.user_id = user_id


class TripNotFound(TrackingError):
    status_code = 404

    def __init__(self, trip_id: str):
        super().__init__("Route not found")
        self.trip_id = trip_id


class NoActiveTrip(TrackingError):
    status_code = 404

    def __init__(self, owner_id: str):
        super().__init__("No active route found for this user")
        self.owner_id = owner_id


class EmptyTrip(TrackingError):
    status_code = 404

    def __init__(self, trip_id: str):
        super().__init__("No locations found for this route")
        self.trip_id = trip_id


class PersistenceFailure(TrackingError):
    """Storage error; raised from the underlying SQLAlchemyError."""
    status_code = 500
