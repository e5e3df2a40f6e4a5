"""User ORM - the rows behind the user store collaborator.

Invariants:
    - email is unique ignoring case (uq_users_email_lower on lower(email)), so
      get_by_unique("email", ...) matches at most one row
    - email_verified only ever moves false -> true (see SqlUserStore.update guard)
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Index, String, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from verimail.db.base import Base


class User(Base):
    __tablename__ = "users"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, default=uuid.uuid4,
    )
    email: Mapped[str] = mapped_column(
        String(320), nullable=False,
    )
    firstname: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    lastname: Mapped[str] = mapped_column(String(120), nullable=False, default="")
    email_verified: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def to_dict(self) -> dict:
        """Wire shape of the user collaborator."""
        return {
            "id": str(self.id),
            "email": self.email,
            "firstname": self.firstname,
            "lastname": self.lastname,
            "emailVerified": self.email_verified,
        }


Index("uq_users_email_lower", func.lower(User.email), unique=True)
