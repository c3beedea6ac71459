"""Group founder/owner and membership storage models."""

from typing import Optional

from sqlalchemy import Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from chat.sechat.directory.model.base import Base, str512, insert_for


class GroupRecord(Base):
    """Founder and owner of a group, keyed by the group address.

    The founder is set once; the owner may change hands.
    """

    __tablename__ = "groups"

    address: Mapped[str] = mapped_column(String(512), primary_key=True)
    founder: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)
    owner: Mapped[Optional[str]] = mapped_column(String(512), nullable=True)


class MemberRecord(Base):
    """Membership of a handle in a group, in insertion order."""

    __tablename__ = "group_members"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    group_address: Mapped[str512]
    member_address: Mapped[str512]
    member_id: Mapped[str512]

    __table_args__ = (
        Index(
            "idx_group_members_group_member",
            "group_address",
            "member_address",
            unique=True,
        ),
    )


def insert_member_stmt(
    dialect_name: str,
    group_address: str,
    member_address: str,
    member_id: str,
    named: bool,
):
    """Create an insert statement for a member; a named handle replaces a bare one."""
    stmt = insert_for(dialect_name)(MemberRecord).values(
        [
            {
                "group_address": group_address,
                "member_address": member_address,
                "member_id": member_id,
            }
        ]
    )
    if named:
        return stmt.on_conflict_do_update(
            index_elements=["group_address", "member_address"],
            set_={"member_id": member_id},
        )
    return stmt.on_conflict_do_nothing(
        index_elements=["group_address", "member_address"]
    )
