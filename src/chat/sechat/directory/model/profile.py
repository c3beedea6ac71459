"""Signed profile storage model.

Profiles are replaced wholesale on save. Rows are keyed by address; ``identifier``
keeps the handle the profile was signed for. The ``expires`` column holds the
freshness horizon (epoch seconds) stamped on first read and is cleared by every
save.
"""

from typing import Optional

from sqlalchemy import BigInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from chat.sechat.directory.model.base import Base, str512, str1024, insert_for


class ProfileRecord(Base):
    """Stored Profile for a single identity address."""

    __tablename__ = "profiles"

    address: Mapped[str] = mapped_column(String(512), primary_key=True)
    identifier: Mapped[str512]
    data: Mapped[str] = mapped_column(Text, nullable=False)
    signature: Mapped[str1024]
    expires: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)


def upsert_profile_stmt(
    dialect_name: str, address: str, identifier: str, data: str, signature: str
):
    """Create an upsert statement replacing the stored profile and its expiry."""
    return (
        insert_for(dialect_name)(ProfileRecord)
        .values(
            [
                {
                    "address": address,
                    "identifier": identifier,
                    "data": data,
                    "signature": signature,
                    "expires": None,
                }
            ]
        )
        .on_conflict_do_update(
            index_elements=["address"],
            set_={
                "identifier": identifier,
                "data": data,
                "signature": signature,
                "expires": None,
            },
        )
    )
