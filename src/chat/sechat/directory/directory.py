"""Identity directory.

The single point of truth for "what do we know about handle X". Every lookup goes
through the credential store first and falls back to the built-in record set for
handles on the main network, back-filling the store on a hit. Writes are verified
before they are persisted and verification failures are reported as rejected
writes, never raised.

Known limitation: profile freshness uses wall-clock time. A clock rollback can make
a stale profile look fresh, or a fresh one look stale, until its expiry is
restamped by the next save.
"""

import asyncio
import logging
from dataclasses import dataclass
from time import time
from typing import Callable, Dict, List, Optional

from chat.sechat.directory import display
from chat.sechat.directory.ans import AliasResolver
from chat.sechat.directory.app.metrics import MetricsClient, NoOpMetricsClient
from chat.sechat.directory.errors import DirectoryException
from chat.sechat.directory.immortals import Immortals
from chat.sechat.directory.mkm.identifier import ID, NetworkType
from chat.sechat.directory.mkm.keys import PrivateKey, PublicKey
from chat.sechat.directory.mkm.meta import Meta, verify_meta
from chat.sechat.directory.mkm.profile import Profile, verify_profile
from chat.sechat.directory.policy import default_founder, default_owner
from chat.sechat.directory.queries import ProfileQueryQueue
from chat.sechat.directory.store.credentials import CredentialStore
from chat.sechat.directory.store.meta import MetaSave

logger = logging.getLogger(__name__)

PROFILE_EXPIRES = 3600


@dataclass(frozen=True, eq=False)
class User:
    """A loadable user: a user-type handle together with its resolved Meta."""

    identifier: ID
    meta: Meta

    @property
    def public_key(self) -> PublicKey:
        return self.meta.public_key

    def __eq__(self, other: object) -> bool:
        if isinstance(other, User):
            return self.identifier == other.identifier
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.identifier)


class IdentityDirectory:
    """
    Façade composing the credential store, the alias resolver and the built-in
    record set.

    The local-user cache is shared mutable state; it is rebuilt lazily and every
    access or invalidation is serialised by a lock.
    """

    def __init__(
        self,
        store: CredentialStore,
        immortals: Immortals,
        ans: Optional[AliasResolver] = None,
        queries: Optional[ProfileQueryQueue] = None,
        metrics: Optional[MetricsClient] = None,
        profile_expires: int = PROFILE_EXPIRES,
        clock: Callable[[], float] = time,
    ) -> None:
        self.store = store
        self.immortals = immortals
        self.ans = ans if ans is not None else AliasResolver(store.aliases)
        self.queries = queries
        self.metrics = metrics if metrics is not None else NoOpMetricsClient()
        self.profile_expires = profile_expires
        self.clock = clock

        self._users: Optional[List[User]] = None
        self._users_lock = asyncio.Lock()

    def _rejected(self, kind: str, subject: object) -> bool:
        logger.info("Rejected %s for %s", kind, subject)
        self.metrics.increment("directory.save.rejected", 1, tag_dict={"kind": kind})
        return False

    #
    # Meta
    #

    async def resolve_meta(self, identifier: ID) -> Optional[Meta]:
        if identifier.is_broadcast:
            # broadcast handles have no meta
            return None
        meta = await self.store.metas.get_meta(identifier)
        if meta is not None and not meta.is_empty:
            self.metrics.increment(
                "directory.meta.resolve", 1, tag_dict={"source": "store"}
            )
            return meta
        if identifier.type == NetworkType.main:
            meta = self.immortals.get_meta(identifier)
            if meta is not None:
                await self.store.metas.save_meta(meta, identifier)
                self.metrics.increment(
                    "directory.meta.resolve", 1, tag_dict={"source": "immortals"}
                )
                return meta
        self.metrics.increment(
            "directory.meta.resolve", 1, tag_dict={"source": "missing"}
        )
        return None

    async def save_meta(self, meta: Meta, identifier: ID) -> bool:
        """Persist a Meta that generates ``identifier``. A stored Meta is never replaced by a different one."""
        if not verify_meta(meta, identifier):
            return self._rejected("meta", identifier)
        result = await self.store.metas.save_meta(meta, identifier)
        if result == MetaSave.conflict:
            return self._rejected("meta_conflict", identifier)
        return result == MetaSave.saved

    #
    # Profile
    #

    async def resolve_profile(self, identifier: ID) -> Optional[Profile]:
        """
        Return a fresh, non-empty profile for a handle.

        A stored profile without an expiry marker is stamped ``now + profile_expires``
        and treated as fresh; a stamped one is fresh while ``now < expires``. A stale
        or missing profile is queued for a network query and, for main-network
        handles, replaced by the built-in profile when there is one.
        """
        stored = await self.store.profiles.get_profile(identifier)
        if stored is not None:
            now = int(self.clock())
            if stored.expires is None:
                await self.store.profiles.set_expires(
                    identifier, now + self.profile_expires
                )
                fresh = True
            else:
                fresh = now < stored.expires
            if fresh and stored.profile.property_names:
                self.metrics.increment(
                    "directory.profile.resolve", 1, tag_dict={"source": "store"}
                )
                return stored.profile

        if self.queries is not None and not identifier.is_broadcast:
            await self.queries.request(identifier)

        if identifier.type == NetworkType.main:
            profile = self.immortals.get_profile(identifier)
            if profile is not None:
                await self.store.profiles.save_profile(profile)
                self.metrics.increment(
                    "directory.profile.resolve", 1, tag_dict={"source": "immortals"}
                )
                return profile

        source = "missing" if stored is None else "stale"
        self.metrics.increment(
            "directory.profile.resolve", 1, tag_dict={"source": source}
        )
        return None

    async def save_profile(self, profile: Profile) -> bool:
        """Persist a profile signed by its owner, replacing any stored one."""
        identifier = profile.id
        if identifier is None:
            return self._rejected("profile", profile.identifier)
        meta = await self.resolve_meta(identifier)
        if not verify_profile(profile, meta):
            return self._rejected("profile", identifier)
        if not await self.store.profiles.save_profile(profile):
            return False
        if self.queries is not None:
            await self.queries.complete(identifier)
        return True

    #
    # Private keys
    #

    async def save_private_key(
        self,
        private_key: PrivateKey,
        user: ID,
        sign: bool = True,
        decrypt: bool = False,
    ) -> bool:
        assert user.is_user, f"user ID error: {user}"
        return await self.store.private_keys.save_private_key(
            private_key, user, sign=sign, decrypt=decrypt
        )

    async def get_private_key_for_signature(self, user: ID) -> Optional[PrivateKey]:
        assert user.is_user, f"user ID error: {user}"
        key = await self.store.private_keys.get_private_key_for_signature(user)
        if key is None:
            key = self.immortals.get_private_key_for_signature(user)
        return key

    async def get_private_keys_for_decryption(self, user: ID) -> List[PrivateKey]:
        assert user.is_user, f"user ID error: {user}"
        keys = await self.store.private_keys.get_private_keys_for_decryption(user)
        if keys:
            return keys
        keys = self.immortals.get_private_keys_for_decryption(user)
        if keys:
            return keys
        # legacy rule: the signing key doubles as the decryption key
        key = await self.get_private_key_for_signature(user)
        if key is not None and key.can_decrypt:
            return [key]
        return []

    async def public_key_for_encryption(self, identifier: ID) -> Optional[PublicKey]:
        meta = await self.resolve_meta(identifier)
        if meta is None:
            return None
        return meta.public_key

    #
    # Contacts
    #

    async def get_contacts(self, user: ID) -> List[ID]:
        contacts = await self.store.contacts.get_contacts(user)
        if not contacts:
            contacts = self.immortals.get_contacts(user)
        return contacts

    async def add_contact(self, contact: ID, user: ID) -> bool:
        return await self.store.contacts.add_contact(contact, user)

    async def remove_contact(self, contact: ID, user: ID) -> bool:
        return await self.store.contacts.remove_contact(contact, user)

    async def save_contacts(self, contacts: List[ID], user: ID) -> bool:
        return await self.store.contacts.save_contacts(contacts, user)

    #
    # Groups
    #

    async def get_founder(self, group: ID) -> Optional[ID]:
        founder = await self.store.groups.get_founder(group)
        if founder is not None:
            return founder
        group_meta = await self.resolve_meta(group)
        members = await self.get_members(group)
        member_metas: Dict[ID, Meta] = {}
        for member in members:
            meta = await self.resolve_meta(member)
            if meta is not None:
                member_metas[member] = meta
        return default_founder(group, group_meta, members, member_metas)

    async def get_owner(self, group: ID) -> Optional[ID]:
        owner = await self.store.groups.get_owner(group)
        if owner is not None:
            return owner
        return default_owner(group, await self.get_founder(group))

    async def get_members(self, group: ID) -> List[ID]:
        return await self.store.groups.get_members(group)

    async def save_founder(self, founder: ID, group: ID) -> bool:
        return await self.store.groups.save_founder(founder, group)

    async def save_owner(self, owner: ID, group: ID) -> bool:
        return await self.store.groups.save_owner(owner, group)

    async def save_members(self, members: List[ID], group: ID) -> bool:
        return await self.store.groups.save_members(members, group)

    async def add_member(self, member: ID, group: ID) -> bool:
        return await self.store.groups.add_member(member, group)

    async def remove_member(self, member: ID, group: ID) -> bool:
        return await self.store.groups.remove_member(member, group)

    #
    # Local users
    #

    async def get_user(self, identifier: ID) -> Optional[User]:
        if not identifier.is_user:
            return None
        meta = await self.resolve_meta(identifier)
        if meta is None:
            return None
        return User(identifier=identifier, meta=meta)

    async def get_local_users(self) -> List[User]:
        """
        Return the local users, current user first.

        Raises:
            DirectoryException: If a recorded local user cannot be loaded, which
                means the local user list and the credential tables have diverged
        """
        async with self._users_lock:
            if self._users is None:
                users = []
                for identifier in await self.store.users.all_users():
                    user = await self.get_user(identifier)
                    if user is None:
                        raise DirectoryException.local_user_unresolved(identifier)
                    users.append(user)
                self._users = users
                self.metrics.increment("directory.users.rebuild", 1)
            return list(self._users)

    async def get_current_user(self) -> Optional[ID]:
        return await self.store.users.get_current_user()

    async def set_current_user(self, user: ID) -> bool:
        async with self._users_lock:
            ok = await self.store.users.set_current_user(user)
            self._users = None
        return ok

    async def add_user(self, user: ID) -> bool:
        async with self._users_lock:
            ok = await self.store.users.add_user(user)
            self._users = None
        return ok

    async def remove_user(self, user: ID) -> bool:
        async with self._users_lock:
            ok = await self.store.users.remove_user(user)
            self._users = None
        return ok

    #
    # Aliases
    #

    async def resolve_alias(self, name: str) -> Optional[ID]:
        return await self.ans.resolve(name)

    async def bind_alias(self, name: str, identifier: ID) -> bool:
        return await self.ans.bind(name, identifier)

    async def alias_names(self, identifier: ID) -> List[str]:
        return await self.ans.names(identifier)

    #
    # Display
    #

    async def nickname(self, identifier: ID) -> Optional[str]:
        profile = await self.resolve_profile(identifier)
        return profile.name if profile is not None else None

    def username(self, identifier: ID) -> Optional[str]:
        return identifier.name

    async def display_name(self, identifier: ID) -> str:
        return display.display_name(identifier, await self.resolve_profile(identifier))

    def number_string(self, identifier: ID) -> str:
        return display.number_string(identifier)
