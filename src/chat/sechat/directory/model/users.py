"""Local user storage model."""

from sqlalchemy import Boolean, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from chat.sechat.directory.model.base import Base, str512, insert_for


class LocalUserRecord(Base):
    """Identity whose private keys live on this device.

    Unique per address. At most one row is flagged as the current user.
    """

    __tablename__ = "local_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    address: Mapped[str512]
    identifier: Mapped[str512]
    current: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        Index("idx_local_users_address", "address", unique=True),
    )


def insert_local_user_stmt(dialect_name: str, address: str, identifier: str):
    """Create an insert statement that ignores an already-registered user."""
    return (
        insert_for(dialect_name)(LocalUserRecord)
        .values([{"address": address, "identifier": identifier, "current": False}])
        .on_conflict_do_nothing(index_elements=["address"])
    )
