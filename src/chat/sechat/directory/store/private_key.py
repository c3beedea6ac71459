from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.keys import PrivateKey
from chat.sechat.directory.model.private_key import (
    PrivateKeyRecord,
    clear_signing_key_stmt,
    upsert_private_key_stmt,
)
from chat.sechat.directory.store.base import Table, address_key, report_failure


class PrivateKeyTable(Table):
    """Private keys of local identities. Keys never leave this table except to sign or decrypt."""

    async def save_private_key(
        self,
        private_key: PrivateKey,
        identifier: ID,
        sign: bool = True,
        decrypt: bool = False,
    ) -> bool:
        key = address_key(identifier)
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    if sign:
                        await session.execute(clear_signing_key_stmt(key))
                    await session.execute(
                        upsert_private_key_stmt(
                            self.dialect_name,
                            key,
                            private_key.thumbprint(),
                            private_key.to_dict(),
                            sign,
                            decrypt,
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "save private key", identifier)
            return False
        return True

    async def get_private_key_for_signature(self, identifier: ID) -> Optional[PrivateKey]:
        try:
            async with self.session_maker() as session:
                record = (
                    await session.scalars(
                        select(PrivateKeyRecord)
                        .where(
                            PrivateKeyRecord.address == address_key(identifier),
                            PrivateKeyRecord.sign.is_(True),
                        )
                        .limit(1)
                    )
                ).first()
        except SQLAlchemyError as e:
            report_failure(e, "load signing key", identifier)
            return None
        if record is None:
            return None
        return PrivateKey.from_dict(record.jwk)

    async def get_private_keys_for_decryption(self, identifier: ID) -> List[PrivateKey]:
        try:
            async with self.session_maker() as session:
                records = (
                    await session.scalars(
                        select(PrivateKeyRecord).where(
                            PrivateKeyRecord.address == address_key(identifier),
                            PrivateKeyRecord.decrypt.is_(True),
                        )
                    )
                ).all()
        except SQLAlchemyError as e:
            report_failure(e, "load decryption keys", identifier)
            return []
        return [PrivateKey.from_dict(record.jwk) for record in records]
