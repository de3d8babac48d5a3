"""SQLAlchemy declarative base for the message archive tables."""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base for archive ORM models."""

    pass
