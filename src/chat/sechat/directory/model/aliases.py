"""Alias (short name) to identity handle mapping model.

Provides the SQLAlchemy model backing the alias resolver. A name maps to at most
one handle; rebinding a name replaces the previous handle. Reverse lookups go
through the bound handle's address.
"""

from sqlalchemy.orm import Mapped
from sqlalchemy import Index
from ulid import ULID

from chat.sechat.directory.model.base import Base, str512, guidpk, insert_for


class Alias(Base):
    """Short name bound to an identity handle."""

    __tablename__ = "aliases"

    guid: Mapped[guidpk]
    name: Mapped[str512]
    identifier: Mapped[str512]
    address: Mapped[str512]

    __table_args__ = (
        Index("idx_aliases_name", "name", unique=True),
        Index("idx_aliases_address", "address"),
    )


def upsert_alias_stmt(dialect_name: str, name: str, identifier: str, address: str):
    """Create an upsert statement binding a name to a handle.

    Rebinds the handle for an existing name or inserts a new record,
    returning the GUID of the alias record.
    """
    return (
        insert_for(dialect_name)(Alias)
        .values(
            [
                {
                    "guid": str(ULID()),
                    "name": name,
                    "identifier": identifier,
                    "address": address,
                }
            ]
        )
        .on_conflict_do_update(
            index_elements=["name"],
            set_={
                "identifier": identifier,
                "address": address,
            },
        )
        .returning(Alias.guid)
    )
