from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.model.aliases import Alias, upsert_alias_stmt
from chat.sechat.directory.store.base import (
    Table,
    address_key,
    identifier_key,
    report_failure,
)


def normalize_name(name: str) -> str:
    return name.strip().lower()


class AliasTable(Table):
    """Alias records: at most one handle per name, latest write wins."""

    async def record(self, name: str) -> Optional[ID]:
        try:
            async with self.session_maker() as session:
                value = (
                    await session.scalars(
                        select(Alias.identifier).where(
                            Alias.name == normalize_name(name)
                        )
                    )
                ).first()
        except SQLAlchemyError as e:
            report_failure(e, "resolve alias", name)
            return None
        return ID.parse(value)

    async def names(self, identifier: ID) -> List[str]:
        try:
            async with self.session_maker() as session:
                values = (
                    await session.scalars(
                        select(Alias.name)
                        .where(Alias.address == address_key(identifier))
                        .order_by(Alias.name)
                    )
                ).all()
        except SQLAlchemyError as e:
            report_failure(e, "list aliases", identifier)
            return []
        return list(values)

    async def save_record(self, name: str, identifier: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        upsert_alias_stmt(
                            self.dialect_name,
                            normalize_name(name),
                            identifier_key(identifier),
                            address_key(identifier),
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "bind alias", name)
            return False
        return True
