"""
SQLAlchemy declarative base.

All ORM models inherit from Base so that a single metadata object
describes the schema for create_all() and the tests.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Declarative base for all Sportsbook models."""

    pass
