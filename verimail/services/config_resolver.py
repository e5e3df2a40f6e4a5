"""Config Resolver - fetch named config entries from the config store and merge them.

Invariants:
    - Each requested key resolves independently (exists=False per key, no bundle fault)
    - A non-200 store envelope is forwarded verbatim as DownstreamError
    - resolve_bundle stops at the first non-existent key, in caller order
    - Holds no state between calls
"""

import logging
from collections.abc import Sequence

from verimail.core.config_bundle import ConfigBundle, ConfigLookup, merge_bundle
from verimail.core.errors import ConfigNotFoundError, DownstreamError
from verimail.core.repository_protocols import ConfigStore

logger = logging.getLogger(__name__)


class ConfigResolver:
    """Thin adapter over a ConfigStore."""

    def __init__(self, store: ConfigStore):
        self.store = store

    async def multiplex(self, keys: Sequence[str]) -> dict[str, ConfigLookup]:
        response = await self.store.multiplex(list(keys))
        if not response.ok:
            raise DownstreamError(response, "config.multiplex")
        entries = response.data or {}
        return {
            key: ConfigLookup.from_mapping(key, entries.get(key))
            for key in keys
        }

    async def get(self, key: str) -> ConfigLookup:
        response = await self.store.get(key)
        if not response.ok:
            raise DownstreamError(response, "config.get")
        data = response.data or {}
        return ConfigLookup(key=key, exists=True, value=data.get("value"))

    async def resolve_bundle(self, keys: Sequence[str]) -> ConfigBundle:
        """Multiplex keys, require each to exist, merge in the given order."""
        lookups = await self.multiplex(keys)
        ordered = []
        for key in keys:
            lookup = lookups[key]
            if not lookup.exists:
                logger.warning(f"Config entry missing: {lookup.key}")
                raise ConfigNotFoundError(lookup.key)
            ordered.append(lookup)
        return merge_bundle(ordered)
