"""SQLAlchemy Declarative Base - shared base class for all ORM models.

Kept in its own module so models never import each other through it.
"""

from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class for all verimail ORM models."""
    pass
