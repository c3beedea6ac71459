from typing import List, Optional

from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.model.users import LocalUserRecord, insert_local_user_stmt
from chat.sechat.directory.store.base import (
    Table,
    address_key,
    identifier_key,
    parse_identifiers,
    report_failure,
)


class UserTable(Table):
    """Local users of this device, unique per address; the current user is listed first."""

    async def all_users(self) -> List[ID]:
        try:
            async with self.session_maker() as session:
                values = (
                    await session.scalars(
                        select(LocalUserRecord.identifier).order_by(
                            LocalUserRecord.current.desc(), LocalUserRecord.id
                        )
                    )
                ).all()
        except SQLAlchemyError as e:
            report_failure(e, "load local users", "device")
            return []
        return parse_identifiers(values)

    async def get_current_user(self) -> Optional[ID]:
        try:
            async with self.session_maker() as session:
                value = (
                    await session.scalars(
                        select(LocalUserRecord.identifier)
                        .where(LocalUserRecord.current.is_(True))
                        .limit(1)
                    )
                ).first()
        except SQLAlchemyError as e:
            report_failure(e, "load current user", "device")
            return None
        return ID.parse(value)

    async def set_current_user(self, user: ID) -> bool:
        """Flag a user as current, registering it first when unknown."""
        key = address_key(user)
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        insert_local_user_stmt(
                            self.dialect_name, key, identifier_key(user)
                        )
                    )
                    await session.execute(
                        update(LocalUserRecord).values(current=False)
                    )
                    await session.execute(
                        update(LocalUserRecord)
                        .where(LocalUserRecord.address == key)
                        .values(current=True)
                    )
        except SQLAlchemyError as e:
            report_failure(e, "set current user", user)
            return False
        return True

    async def add_user(self, user: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        insert_local_user_stmt(
                            self.dialect_name, address_key(user), identifier_key(user)
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "add local user", user)
            return False
        return True

    async def remove_user(self, user: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        delete(LocalUserRecord).where(
                            LocalUserRecord.address == address_key(user)
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "remove local user", user)
            return False
        return True
