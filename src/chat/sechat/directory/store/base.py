import logging
from typing import Any, Iterable, List, Optional

import sentry_sdk
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from chat.sechat.directory.mkm.identifier import ID

logger = logging.getLogger(__name__)


def address_key(identifier: ID) -> str:
    """Row key of a handle. Handles equal by address share one row."""
    return str(identifier.address)


def identifier_key(identifier: ID) -> str:
    """Stored form of a handle that is returned to callers: ``name@address`` without terminal."""
    return str(ID(identifier.name, identifier.address))


def parse_identifiers(values: Iterable[Optional[str]]) -> List[ID]:
    identifiers = []
    for value in values:
        identifier = ID.parse(value)
        if identifier is None:
            logger.warning("Skipping malformed stored identifier %r", value)
            continue
        identifiers.append(identifier)
    return identifiers


def report_failure(e: Exception, action: str, subject: Any) -> None:
    """Log and report a storage failure that is being turned into a False/None result."""
    logger.error("Credential store failed to %s for %s: %s", action, subject, e)
    sentry_sdk.capture_exception(e)


class Table:
    """Base for credential store tables.

    Every method opens its own session; a single write is a single transaction.
    """

    def __init__(
        self, session_maker: async_sessionmaker[AsyncSession], dialect_name: str
    ) -> None:
        self.session_maker = session_maker
        self.dialect_name = dialect_name
