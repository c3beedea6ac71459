from typing import List

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.model.contacts import ContactRecord, insert_contact_stmt
from chat.sechat.directory.store.base import (
    Table,
    address_key,
    identifier_key,
    parse_identifiers,
    report_failure,
)


class ContactTable(Table):
    """Ordered, duplicate-free contact lists keyed by local user address."""

    def _insert(self, user: ID, contact: ID):
        return insert_contact_stmt(
            self.dialect_name,
            address_key(user),
            address_key(contact),
            identifier_key(contact),
            named=contact.name is not None,
        )

    async def get_contacts(self, user: ID) -> List[ID]:
        try:
            async with self.session_maker() as session:
                values = (
                    await session.scalars(
                        select(ContactRecord.contact_id)
                        .where(ContactRecord.user_address == address_key(user))
                        .order_by(ContactRecord.id)
                    )
                ).all()
        except SQLAlchemyError as e:
            report_failure(e, "load contacts", user)
            return []
        return parse_identifiers(values)

    async def add_contact(self, contact: ID, user: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(self._insert(user, contact))
        except SQLAlchemyError as e:
            report_failure(e, "add contact", user)
            return False
        return True

    async def remove_contact(self, contact: ID, user: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        delete(ContactRecord).where(
                            ContactRecord.user_address == address_key(user),
                            ContactRecord.contact_address == address_key(contact),
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "remove contact", user)
            return False
        return True

    async def save_contacts(self, contacts: List[ID], user: ID) -> bool:
        """Replace a user's whole contact list, keeping the given order."""
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        delete(ContactRecord).where(
                            ContactRecord.user_address == address_key(user)
                        )
                    )
                    for contact in contacts:
                        await session.execute(self._insert(user, contact))
        except SQLAlchemyError as e:
            report_failure(e, "save contacts", user)
            return False
        return True
