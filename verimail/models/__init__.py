"""ORM Models - SQLAlchemy declarative models for the tables this service reads and writes.

Invariants:
    - All models inherit from Base (db/base.py)
    - Imported here so Base.metadata is complete for migrations and test fixtures
"""

from verimail.models.user import User  # noqa: F401
from verimail.models.config_entry import ConfigEntry  # noqa: F401
