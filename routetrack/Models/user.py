# routetrack/Models/user.py

"""
User Model - Identity Registry

Users are the owners of trips. The tracking engine only needs to know
whether a user id exists; the row is also locked (SELECT ... FOR UPDATE)
while a user's trip state is being changed.

Database Table: users
Primary Key: id (String)
"""

from sqlalchemy.orm import declared_attr
from sqlalchemy import Column, String, DateTime
from sqlalchemy.sql import func
from routetrack.DB.base_class import Base


class User(Base):
    """
    SQLAlchemy model representing a tracked user.

    Schema:
    - id (PK): External identity (e.g., "test-user-id")
    - email: Contact address (optional, unique)
    - name: Display name (optional)
    - created_at: Registration timestamp
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return "users"

    id = Column(
        String(100),
        primary_key=True,
        doc="Unique user identifier"
    )

    email = Column(
        String(255),
        nullable=True,
        unique=True,
    )

    name = Column(
        String(200),
        nullable=True,
    )

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id!r}, email={self.email!r})>"
