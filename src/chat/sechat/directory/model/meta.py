"""Identity certificate storage model.

One row per address. Rows are written once and never updated in place.
"""

from typing import Any, Optional

from sqlalchemy import JSON, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chat.sechat.directory.model.base import Base, insert_for


class MetaRecord(Base):
    """Stored Meta for a single identity address."""

    __tablename__ = "metas"

    address: Mapped[str] = mapped_column(String(512), primary_key=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    key: Mapped[Any] = mapped_column(JSON, nullable=False)
    seed: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    fingerprint: Mapped[Optional[str]] = mapped_column(String(1024), nullable=True)


def insert_meta_stmt(
    dialect_name: str,
    address: str,
    version: int,
    key: Any,
    seed: Optional[str],
    fingerprint: Optional[str],
):
    """Create an insert statement that leaves an existing Meta untouched."""
    return (
        insert_for(dialect_name)(MetaRecord)
        .values(
            [
                {
                    "address": address,
                    "version": version,
                    "key": key,
                    "seed": seed,
                    "fingerprint": fingerprint,
                }
            ]
        )
        .on_conflict_do_nothing(index_elements=["address"])
    )
