from dataclasses import dataclass
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import SQLAlchemyError

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.profile import Profile
from chat.sechat.directory.model.profile import ProfileRecord, upsert_profile_stmt
from chat.sechat.directory.store.base import (
    Table,
    address_key,
    identifier_key,
    report_failure,
)


@dataclass(frozen=True)
class StoredProfile:
    """A profile as persisted, with its expiry marker (epoch seconds, if stamped)."""

    profile: Profile
    expires: Optional[int] = None


class ProfileTable(Table):
    async def get_profile(self, identifier: ID) -> Optional[StoredProfile]:
        try:
            async with self.session_maker() as session:
                record = await session.get(ProfileRecord, address_key(identifier))
        except SQLAlchemyError as e:
            report_failure(e, "load profile", identifier)
            return None
        if record is None:
            return None
        profile = Profile(
            identifier=record.identifier, data=record.data, signature=record.signature
        )
        return StoredProfile(profile=profile, expires=record.expires)

    async def save_profile(self, profile: Profile) -> bool:
        """Replace the stored profile wholesale, clearing its expiry marker."""
        identifier = profile.id
        if identifier is None:
            return False
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        upsert_profile_stmt(
                            self.dialect_name,
                            address_key(identifier),
                            identifier_key(identifier),
                            profile.data,
                            profile.signature,
                        )
                    )
        except SQLAlchemyError as e:
            report_failure(e, "save profile", identifier)
            return False
        return True

    async def set_expires(self, identifier: ID, expires: Optional[int]) -> bool:
        try:
            async with self.session_maker() as session:
                async with session.begin():
                    await session.execute(
                        update(ProfileRecord)
                        .where(ProfileRecord.address == address_key(identifier))
                        .values(expires=expires)
                    )
        except SQLAlchemyError as e:
            report_failure(e, "stamp profile expiry", identifier)
            return False
        return True
