import logging
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.model.groups import (
    GroupRecord,
    MemberRecord,
    insert_member_stmt,
)
from chat.sechat.directory.store.base import (
    Table,
    address_key,
    identifier_key,
    parse_identifiers,
    report_failure,
)

logger = logging.getLogger(__name__)


class GroupTable(Table):
    """Group founder/owner records and ordered member lists, keyed by group address."""

    def _insert(self, group: ID, member: ID):
        return insert_member_stmt(
            self.dialect_name,
            address_key(group),
            address_key(member),
            identifier_key(member),
            named=member.name is not None,
        )

    async def _get_record(self, group: ID) -> Optional[GroupRecord]:
        async with self.session_maker() as session:
            return await session.get(GroupRecord, address_key(group))

    async def get_founder(self, group: ID) -> Optional[ID]:
        try:
            record = await self._get_record(group)
        except SQLAlchemyError as e:
            report_failure(e, "load founder", group)
            return None
        if record is None:
            return None
        return ID.parse(record.founder)

    async def get_owner(self, group: ID) -> Optional[ID]:
        try:
            record = await self._get_record(group)
        except SQLAlchemyError as e:
            report_failure(e, "load owner", group)
            return None
        if record is None:
            return None
        return ID.parse(record.owner)

    async def save_founder(self, founder: ID, group: ID) -> bool:
        """Record the founder of a group. A different founder cannot replace it."""
        key = address_key(group)
        value = identifier_key(founder)
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    record = await session.get(GroupRecord, key)
                    if record is None:
                        session.add(GroupRecord(address=key, founder=value))
                    elif record.founder is None:
                        record.founder = value
                    elif ID.parse(record.founder) != founder:
                        logger.warning(
                            "Refusing to replace founder %s of group %s with %s",
                            record.founder,
                            group,
                            founder,
                        )
                        return False
        except SQLAlchemyError as e:
            report_failure(e, "save founder", group)
            return False
        return True

    async def save_owner(self, owner: ID, group: ID) -> bool:
        key = address_key(group)
        value = identifier_key(owner)
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    record = await session.get(GroupRecord, key)
                    if record is None:
                        session.add(GroupRecord(address=key, owner=value))
                    else:
                        record.owner = value
        except SQLAlchemyError as e:
            report_failure(e, "save owner", group)
            return False
        return True

    async def get_members(self, group: ID) -> List[ID]:
        try:
            async with self.session_maker() as session:
                values = (
                    await session.scalars(
                        select(MemberRecord.member_id)
                        .where(MemberRecord.group_address == address_key(group))
                        .order_by(MemberRecord.id)
                    )
                ).all()
        except SQLAlchemyError as e:
            report_failure(e, "load members", group)
            return []
        return parse_identifiers(values)

    async def save_members(self, members: List[ID], group: ID) -> bool:
        """Replace the member list of a group, keeping the given order."""
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        delete(MemberRecord).where(
                            MemberRecord.group_address == address_key(group)
                        )
                    )
                    for member in members:
                        await session.execute(self._insert(group, member))
        except SQLAlchemyError as e:
            report_failure(e, "save members", group)
            return False
        return True

    async def add_member(self, member: ID, group: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(self._insert(group, member))
        except SQLAlchemyError as e:
            report_failure(e, "add member", group)
            return False
        return True

    async def remove_member(self, member: ID, group: ID) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        delete(MemberRecord).where(
                            MemberRecord.group_address == address_key(group),
                            MemberRecord.member_address == address_key(member),
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "remove member", group)
            return False
        return True
