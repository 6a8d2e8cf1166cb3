"""
routetrack/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base for every model of the route tracking service
(SQLAlchemy 2.0 style). Models that need a specific table name override
``__tablename__``; the default is the lowercase class name.

Note:
    All models must inherit from this Base to be registered in
    ``Base.metadata`` and discovered by Alembic.
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.

    Example:
        class UserAccount(Base):
            # Table name will be 'useraccount'
            id = Column(Integer, primary_key=True)
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
