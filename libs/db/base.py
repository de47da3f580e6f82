"""Declarative base shared by every service model."""

from sqlalchemy.orm import DeclarativeBase

# Upper bound of an ``Integer`` primary key (32-bit on Postgres).
MAX_ROW_ID = 2**31 - 1


class Base(DeclarativeBase):
    """Base class for all SQLAlchemy models."""

    pass


def is_row_id(value: int) -> bool:
    """True when ``value`` can be stored in an ``Integer`` primary key column."""
    return 1 <= value <= MAX_ROW_ID
