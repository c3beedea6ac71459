import logging
from enum import Enum
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.meta import Meta, MetaVersion
from chat.sechat.directory.model.meta import MetaRecord, insert_meta_stmt
from chat.sechat.directory.store.base import Table, address_key, report_failure

logger = logging.getLogger(__name__)


class MetaSave(Enum):
    """Outcome of a Meta write."""

    saved = "saved"
    conflict = "conflict"
    failed = "failed"


def meta_from_record(record: MetaRecord) -> Meta:
    return Meta(
        version=MetaVersion(record.version),
        key=record.key or {},
        seed=record.seed,
        fingerprint=record.fingerprint,
    )


class MetaTable(Table):
    """Write-once Meta storage keyed by address.

    Once a non-empty Meta is stored for an address, only an identical Meta can be
    saved again.
    """

    async def get_meta(self, identifier: ID) -> Optional[Meta]:
        try:
            async with self.session_maker() as session:
                record = await session.get(MetaRecord, address_key(identifier))
        except SQLAlchemyError as e:
            report_failure(e, "load meta", identifier)
            return None
        if record is None:
            return None
        return meta_from_record(record)

    async def save_meta(self, meta: Meta, identifier: ID) -> MetaSave:
        """Store a Meta unless a different one is already stored.

        Returns:
            MetaSave.saved when the stored Meta equals ``meta`` afterwards,
            MetaSave.conflict when a different Meta is kept, and MetaSave.failed
            when the database could not be written or read back
        """
        key = address_key(identifier)
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    existing = await session.get(MetaRecord, key)
                    if existing is not None and not existing.key:
                        existing.version = int(meta.version)
                        existing.key = meta.key
                        existing.seed = meta.seed
                        existing.fingerprint = meta.fingerprint
                    elif existing is None:
                        await session.execute(
                            insert_meta_stmt(
                                self.dialect_name,
                                key,
                                int(meta.version),
                                meta.key,
                                meta.seed,
                                meta.fingerprint,
                            )
                        )
                    stored = await session.get(MetaRecord, key)
                    if stored is None:
                        logger.error("Meta for %s missing after write", identifier)
                        return MetaSave.failed
                    if meta_from_record(stored) != meta:
                        logger.warning(
                            "Refusing to replace stored meta for %s", identifier
                        )
                        return MetaSave.conflict
        except SQLAlchemyError as e:
            report_failure(e, "save meta", identifier)
            return MetaSave.failed
        return MetaSave.saved
