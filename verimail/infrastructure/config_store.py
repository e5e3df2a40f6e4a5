"""SQL Config Store - ConfigStore collaborator backed by the config_entries table.

Invariants:
    - multiplex answers every requested key, existing or not
    - get answers 400 CONFIG_NOT_FOUND for an unknown key
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from verimail.core.envelope import Envelope
from verimail.models.config_entry import ConfigEntry


class SqlConfigStore:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def multiplex(self, keys: Iterable[str]) -> Envelope:
        keys = list(keys)
        result = await self.db.execute(
            select(ConfigEntry).where(ConfigEntry.key.in_(keys)),
        )
        found = {entry.key: entry for entry in result.scalars().all()}
        return Envelope.success(data={
            key: {
                "exists": key in found,
                "key": key,
                "value": found[key].value if key in found else None,
            }
            for key in keys
        })

    async def get(self, key: str) -> Envelope:
        entry = await self.db.get(ConfigEntry, key)
        if entry is None:
            return Envelope(code=400, i18n="CONFIG_NOT_FOUND", data={"key": key})
        return Envelope.success(data={"key": key, "value": entry.value})
