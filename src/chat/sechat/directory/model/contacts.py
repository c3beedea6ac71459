"""Contact list storage model."""

from sqlalchemy import Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from chat.sechat.directory.model.base import Base, str512, insert_for


class ContactRecord(Base):
    """Membership of a contact in a local user's contact list.

    Rows are unique per (user address, contact address); ``contact_id`` keeps the
    most specific handle seen for the contact. The autoincrement id keeps the list
    in insertion order.
    """

    __tablename__ = "contacts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_address: Mapped[str512]
    contact_address: Mapped[str512]
    contact_id: Mapped[str512]

    __table_args__ = (
        Index(
            "idx_contacts_user_contact",
            "user_address",
            "contact_address",
            unique=True,
        ),
    )


def insert_contact_stmt(
    dialect_name: str,
    user_address: str,
    contact_address: str,
    contact_id: str,
    named: bool,
):
    """Create an insert statement for a contact.

    An already-listed contact keeps its position; a named handle replaces a bare
    one that was stored before.
    """
    stmt = insert_for(dialect_name)(ContactRecord).values(
        [
            {
                "user_address": user_address,
                "contact_address": contact_address,
                "contact_id": contact_id,
            }
        ]
    )
    if named:
        return stmt.on_conflict_do_update(
            index_elements=["user_address", "contact_address"],
            set_={"contact_id": contact_id},
        )
    return stmt.on_conflict_do_nothing(
        index_elements=["user_address", "contact_address"]
    )
