# routetrack/Repositories/user.py
"""
User Repository - Identity lookups for the tracking engine.

Usage:
    from routetrack.Repositories.user import user_exists, lock_user_row

    if user_exists(db, "test-user-id"):
        lock_user_row(db, "test-user-id")
"""

import logging

from sqlalchemy.orm import Session

from routetrack.Models.user import User
from routetrack.Schemas.user import User_create

logger = logging.getLogger(__name__)


def create_user(DB: Session, user_data: User_create) -> User:
    """
    Register a user and commit.

    Args:
        DB: SQLAlchemy session
        user_data: Validated User_create schema

    Returns:
        User: The persisted user
    """
    new_user = User(**user_data.model_dump(exclude_unset=True))
    DB.add(new_user)
    DB.commit()
    DB.refresh(new_user)

    logger.info("[REPO] User created: %s", new_user.id)
    return new_user


def user_exists(DB: Session, user_id: str) -> bool:
    return DB.query(User.id).filter(User.id == user_id).first() is not None


def lock_user_row(DB: Session, user_id: str) -> bool:
    """
    Lock the user's row until the current transaction ends.

    Serializes trip-state changes for one owner across processes that share
    a PostgreSQL database. SQLite ignores FOR UPDATE; the in-process owner
    lock covers that case.

    Returns:
        bool: False if the user does not exist
    """
    row = (
        DB.query(User.id)
        .filter(User.id == user_id)
        .with_for_update()
        .first()
    )
    return row is not None
