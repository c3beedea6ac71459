"""Alias resolver (ANS).

Maps human-chosen short names to identity handles and back. Names are
case-insensitive. Binding a name that is already taken replaces the previous
handle; no history is kept.
"""

import logging
from typing import List, Optional

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.store.aliases import AliasTable

logger = logging.getLogger(__name__)


class AliasResolver:
    def __init__(self, table: AliasTable) -> None:
        self.table = table

    async def resolve(self, name: str) -> Optional[ID]:
        if not name or not name.strip():
            return None
        return await self.table.record(name)

    async def names(self, identifier: ID) -> List[str]:
        return await self.table.names(identifier)

    async def bind(self, name: str, identifier: ID) -> bool:
        if not name or not name.strip():
            logger.info("Rejecting empty alias for %s", identifier)
            return False
        if identifier.is_broadcast:
            logger.info("Rejecting alias %r for broadcast handle %s", name, identifier)
            return False
        return await self.table.save_record(name, identifier)
