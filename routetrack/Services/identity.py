# routetrack/Services/identity.py

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from routetrack.Repositories.user import user_exists
from routetrack.Services.errors import PersistenceFailure


class IdentityResolver:
    """Answers whether a user identity is registered."""

    def __init__(self, DB: Session):
        self.DB = DB

    def user_exists(self, user_id: str) -> bool:
        try:
            return user_exists(self.DB, user_id)
        except SQLAlchemyError as e:
            raise PersistenceFailure(f"Database error resolving user {user_id}: {e}") from e
