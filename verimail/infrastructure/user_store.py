"""SQL User Store - UserStore collaborator backed by the users table.

Invariants:
    - Reads and writes use the wire field names (emailVerified), never column names
    - update() with `expected` is a single conditional UPDATE; a guard miss
      answers 409 USER_UPDATE_CONFLICT and commits nothing
    - Email lookups are case-insensitive and succeed only on exactly one match

Design Decisions:
    - Conditional UPDATE instead of SELECT ... FOR UPDATE: works on every backend
      and makes the verified transition atomic without holding a lock across awaits
"""

import logging
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from verimail.core.envelope import Envelope
from verimail.core.repository_protocols import UPDATE_CONFLICT_CODE, UPDATE_CONFLICT_I18N
from verimail.models.user import User

logger = logging.getLogger(__name__)

# wire name -> column attribute
_UPDATABLE = {
    "firstname": "firstname",
    "lastname": "lastname",
    "emailVerified": "email_verified",
}
_UNIQUE = ("id", "email")


def _parse_id(user_id: Any) -> UUID | None:
    if isinstance(user_id, UUID):
        return user_id
    try:
        return UUID(str(user_id))
    except ValueError:
        return None


def _not_found(**data: Any) -> Envelope:
    return Envelope(code=400, i18n="USER_NOT_FOUND", data=data)


class SqlUserStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_by_unique(self, field: str, value: Any) -> Envelope:
        if field not in _UNIQUE:
            return Envelope(code=400, i18n="UNKNOWN_UNIQUE_FIELD", data={"field": field})
        if field == "id":
            return await self.get_by_id(value)
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == str(value).lower()).limit(2),
        )
        matches = result.scalars().all()
        if len(matches) != 1:
            if matches:
                logger.warning("Ambiguous email lookup", extra={"user_id": str(matches[0].id)})
            return _not_found(email=value)
        return Envelope.success(data=matches[0].to_dict())

    async def get_by_id(self, user_id: str) -> Envelope:
        uid = _parse_id(user_id)
        user = await self.db.get(User, uid) if uid else None
        if user is None:
            return _not_found(id=str(user_id))
        return Envelope.success(data=user.to_dict())

    async def update(
        self,
        user_id: str,
        fields: dict[str, Any],
        expected: dict[str, Any] | None = None,
    ) -> Envelope:
        uid = _parse_id(user_id)
        if uid is None:
            return _not_found(id=str(user_id))
        unknown = [name for name in {**fields, **(expected or {})} if name not in _UPDATABLE]
        if unknown:
            return Envelope(code=400, i18n="UNKNOWN_USER_FIELD", data={"fields": unknown})

        stmt = update(User).where(User.id == uid)
        for name, value in (expected or {}).items():
            stmt = stmt.where(getattr(User, _UPDATABLE[name]) == value)
        stmt = stmt.values(**{_UPDATABLE[name]: value for name, value in fields.items()})

        result = await self.db.execute(stmt)
        if result.rowcount == 0:
            await self.db.rollback()
            if await self.db.get(User, uid) is None:
                return _not_found(id=str(user_id))
            logger.info("Conditional user update lost", extra={"user_id": str(uid)})
            return Envelope(
                code=UPDATE_CONFLICT_CODE, i18n=UPDATE_CONFLICT_I18N,
                data={"id": str(uid)},
            )
        await self.db.commit()

        user = await self.db.get(User, uid, populate_existing=True)
        return Envelope.success(data=user.to_dict() if user else None)
