"""
Unit tests for the credential store tables over SQLite.

Tests cover write-once Meta storage, profile replacement and expiry markers,
signing and decryption key flags, ordered contact and member lists, group
founder/owner records, local users and alias records.
"""

from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.meta import Meta
from chat.sechat.directory.mkm.profile import Profile
from chat.sechat.directory.model.meta import MetaRecord
from chat.sechat.directory.store.base import (
    address_key,
    identifier_key,
    parse_identifiers,
)
from chat.sechat.directory.store.meta import MetaSave
from tests.helpers import ATLAS, NOVA


class TestHelpers:
    """Test storage key helpers."""

    def test_identifier_key_drops_terminal(self):
        """The stored handle form omits the terminal."""
        assert identifier_key(ID.parse(f"{ATLAS}/phone")) == ATLAS

    def test_address_key_ignores_name_and_terminal(self):
        """Named, bare and terminal forms of a handle share one row key."""
        atlas = ID.parse(ATLAS)
        assert address_key(atlas) == str(atlas.address)
        assert address_key(ID(None, atlas.address)) == address_key(atlas)
        assert address_key(ID.parse(f"{ATLAS}/phone")) == address_key(atlas)

    def test_parse_identifiers_skips_malformed(self):
        """Malformed stored values are skipped."""
        assert parse_identifiers([ATLAS, "bad@value", None, NOVA]) == [
            ID.parse(ATLAS),
            ID.parse(NOVA),
        ]


class TestMetaTable:
    """Test write-once Meta storage."""

    async def test_save_and_get(self, store, alice):
        """A saved Meta loads back equal."""
        assert await store.metas.save_meta(alice.meta, alice.identifier) == MetaSave.saved
        assert await store.metas.get_meta(alice.identifier) == alice.meta

    async def test_get_missing(self, store, alice):
        """Unknown handles have no Meta."""
        assert await store.metas.get_meta(alice.identifier) is None

    async def test_identical_resave(self, store, alice):
        """Saving the same Meta twice succeeds."""
        assert await store.metas.save_meta(alice.meta, alice.identifier) == MetaSave.saved
        assert await store.metas.save_meta(alice.meta, alice.identifier) == MetaSave.saved

    async def test_differing_meta_rejected(self, store, alice, bob):
        """A different Meta never replaces a stored one."""
        await store.metas.save_meta(alice.meta, alice.identifier)
        result = await store.metas.save_meta(bob.meta, alice.identifier)
        assert result == MetaSave.conflict
        assert await store.metas.get_meta(alice.identifier) == alice.meta

    async def test_empty_meta_replaced(self, store, alice):
        """An empty stored Meta may be replaced."""
        async with store.metas.session_maker() as session:
            async with session.begin():
                session.add(
                    MetaRecord(address=str(alice.identifier.address), version=1, key={})
                )
        assert (await store.metas.get_meta(alice.identifier)).is_empty
        assert await store.metas.save_meta(alice.meta, alice.identifier) == MetaSave.saved
        assert await store.metas.get_meta(alice.identifier) == alice.meta

    async def test_bare_handle_shares_row(self, store, alice, bob):
        """A Meta saved under a named handle is found and guarded under the bare one."""
        bare = ID(None, alice.identifier.address)
        await store.metas.save_meta(alice.meta, alice.identifier)
        assert await store.metas.get_meta(bare) == alice.meta
        assert await store.metas.save_meta(bob.meta, bare) == MetaSave.conflict

    async def test_read_back_failure_is_not_a_conflict(self, store, alice, monkeypatch):
        """A failed read after the write reports a failure, not a conflict."""
        original_get = AsyncSession.get
        calls = []

        async def flaky_get(session, *args, **kwargs):
            calls.append(args)
            if len(calls) > 1:
                raise OperationalError("SELECT", {}, Exception("disk I/O error"))
            return await original_get(session, *args, **kwargs)

        monkeypatch.setattr(AsyncSession, "get", flaky_get)
        assert await store.metas.save_meta(alice.meta, alice.identifier) == MetaSave.failed


class TestProfileTable:
    """Test profile storage and expiry markers."""

    async def test_save_and_get(self, store, alice):
        """A saved profile loads back without an expiry marker."""
        profile = Profile.sign(alice.identifier, {"name": "Alice"}, alice.private_key)
        assert await store.profiles.save_profile(profile)
        stored = await store.profiles.get_profile(alice.identifier)
        assert stored.profile == profile
        assert stored.expires is None

    async def test_save_replaces_and_clears_expiry(self, store, alice):
        """Saving replaces the profile wholesale and clears the expiry marker."""
        first = Profile.sign(alice.identifier, {"name": "Alice"}, alice.private_key)
        second = Profile.sign(alice.identifier, {"name": "Al"}, alice.private_key)
        await store.profiles.save_profile(first)
        await store.profiles.set_expires(alice.identifier, 1234)
        assert (await store.profiles.get_profile(alice.identifier)).expires == 1234
        await store.profiles.save_profile(second)
        stored = await store.profiles.get_profile(alice.identifier)
        assert stored.profile.name == "Al"
        assert stored.expires is None

    async def test_get_missing(self, store, alice):
        """Unknown handles have no profile."""
        assert await store.profiles.get_profile(alice.identifier) is None

    async def test_bare_handle_loads_named_profile(self, store, alice):
        """Profiles are keyed by address and keep the handle they were signed for."""
        profile = Profile.sign(alice.identifier, {"name": "Alice"}, alice.private_key)
        await store.profiles.save_profile(profile)
        bare = ID(None, alice.identifier.address)
        assert await store.profiles.set_expires(bare, 99)
        stored = await store.profiles.get_profile(bare)
        assert stored.profile == profile
        assert stored.expires == 99


class TestPrivateKeyTable:
    """Test signing and decryption key flags."""

    async def test_signing_key(self, store, alice):
        """A saved signing key is returned for signature."""
        assert await store.private_keys.save_private_key(alice.private_key, alice.identifier)
        key = await store.private_keys.get_private_key_for_signature(alice.identifier)
        assert key == alice.private_key

    async def test_new_signing_key_wins(self, store, alice, bob):
        """Saving another signing key clears the flag on the previous one."""
        await store.private_keys.save_private_key(alice.private_key, alice.identifier)
        await store.private_keys.save_private_key(bob.private_key, alice.identifier)
        key = await store.private_keys.get_private_key_for_signature(alice.identifier)
        assert key == bob.private_key

    async def test_decryption_keys(self, store, alice, bob):
        """Only keys flagged for decryption are returned for decryption."""
        await store.private_keys.save_private_key(
            alice.private_key, alice.identifier, sign=True, decrypt=False
        )
        await store.private_keys.save_private_key(
            bob.private_key, alice.identifier, sign=False, decrypt=True
        )
        keys = await store.private_keys.get_private_keys_for_decryption(alice.identifier)
        assert keys == [bob.private_key]
        signing = await store.private_keys.get_private_key_for_signature(alice.identifier)
        assert signing == alice.private_key

    async def test_missing(self, store, alice):
        """Unknown handles have no keys."""
        assert await store.private_keys.get_private_key_for_signature(alice.identifier) is None
        assert await store.private_keys.get_private_keys_for_decryption(alice.identifier) == []

    async def test_bare_handle(self, store, alice):
        """Keys saved under a named handle are found under the bare one."""
        await store.private_keys.save_private_key(
            alice.private_key, alice.identifier, sign=True, decrypt=True
        )
        bare = ID(None, alice.identifier.address)
        assert await store.private_keys.get_private_key_for_signature(bare) == alice.private_key
        assert await store.private_keys.get_private_keys_for_decryption(bare) == [
            alice.private_key
        ]


class TestContactTable:
    """Test ordered, duplicate-free contact lists."""

    async def test_insertion_order(self, store, atlas_id, nova_id, alice, bob):
        """Contacts keep insertion order."""
        await store.contacts.add_contact(bob.identifier, alice.identifier)
        await store.contacts.add_contact(atlas_id, alice.identifier)
        await store.contacts.add_contact(nova_id, alice.identifier)
        assert await store.contacts.get_contacts(alice.identifier) == [
            bob.identifier,
            atlas_id,
            nova_id,
        ]

    async def test_duplicate_ignored(self, store, alice, bob):
        """Adding a contact twice keeps a single entry."""
        assert await store.contacts.add_contact(bob.identifier, alice.identifier)
        assert await store.contacts.add_contact(bob.identifier, alice.identifier)
        assert await store.contacts.get_contacts(alice.identifier) == [bob.identifier]

    async def test_remove_is_idempotent(self, store, alice, bob):
        """Removing an absent contact succeeds."""
        await store.contacts.add_contact(bob.identifier, alice.identifier)
        assert await store.contacts.remove_contact(bob.identifier, alice.identifier)
        assert await store.contacts.remove_contact(bob.identifier, alice.identifier)
        assert await store.contacts.get_contacts(alice.identifier) == []

    async def test_save_replaces(self, store, atlas_id, nova_id, alice, bob):
        """Saving a contact list replaces the previous one."""
        await store.contacts.add_contact(bob.identifier, alice.identifier)
        assert await store.contacts.save_contacts([nova_id, atlas_id], alice.identifier)
        assert await store.contacts.get_contacts(alice.identifier) == [nova_id, atlas_id]

    async def test_lists_are_per_user(self, store, alice, bob, atlas_id):
        """Contact lists of different users are independent."""
        await store.contacts.add_contact(atlas_id, alice.identifier)
        assert await store.contacts.get_contacts(bob.identifier) == []

    async def test_named_and_bare_forms_share_entry(self, store, alice, bob):
        """Equal handles are one contact; removing by the bare form removes it."""
        bare = ID(None, bob.identifier.address)
        await store.contacts.add_contact(bob.identifier, alice.identifier)
        await store.contacts.add_contact(bare, alice.identifier)
        contacts = await store.contacts.get_contacts(alice.identifier)
        assert [str(c) for c in contacts] == [identifier_key(bob.identifier)]
        assert await store.contacts.remove_contact(bare, alice.identifier)
        assert await store.contacts.get_contacts(alice.identifier) == []

    async def test_named_form_replaces_bare(self, store, alice, bob, atlas_id):
        """A named handle replaces a stored bare one without moving it."""
        await store.contacts.add_contact(ID(None, bob.identifier.address), alice.identifier)
        await store.contacts.add_contact(atlas_id, alice.identifier)
        await store.contacts.add_contact(bob.identifier, alice.identifier)
        contacts = await store.contacts.get_contacts(ID(None, alice.identifier.address))
        assert [str(c) for c in contacts] == [identifier_key(bob.identifier), ATLAS]

    async def test_save_collapses_equal_handles(self, store, alice, bob):
        """A saved list holds each address once."""
        bare = ID(None, bob.identifier.address)
        assert await store.contacts.save_contacts([bare, bob.identifier], alice.identifier)
        assert await store.contacts.get_contacts(alice.identifier) == [bob.identifier]


class TestGroupTable:
    """Test founder/owner records and member lists."""

    async def test_founder_is_write_once(self, store, chatroom, alice, bob):
        """A different founder cannot replace the recorded one."""
        assert await store.groups.save_founder(alice.identifier, chatroom)
        assert await store.groups.save_founder(alice.identifier, chatroom)
        assert not await store.groups.save_founder(bob.identifier, chatroom)
        assert await store.groups.get_founder(chatroom) == alice.identifier

    async def test_owner_replaces(self, store, chatroom, alice, bob):
        """The owner may change hands."""
        assert await store.groups.save_owner(alice.identifier, chatroom)
        assert await store.groups.save_owner(bob.identifier, chatroom)
        assert await store.groups.get_owner(chatroom) == bob.identifier

    async def test_owner_then_founder(self, store, chatroom, alice, bob):
        """A founder can be recorded after the owner."""
        await store.groups.save_owner(bob.identifier, chatroom)
        assert await store.groups.save_founder(alice.identifier, chatroom)
        assert await store.groups.get_founder(chatroom) == alice.identifier
        assert await store.groups.get_owner(chatroom) == bob.identifier

    async def test_missing(self, store, chatroom):
        """Unknown groups have no founder, owner or members."""
        assert await store.groups.get_founder(chatroom) is None
        assert await store.groups.get_owner(chatroom) is None
        assert await store.groups.get_members(chatroom) == []

    async def test_members(self, store, chatroom, alice, bob, atlas_id):
        """Members keep order, ignore duplicates and can be removed."""
        await store.groups.add_member(alice.identifier, chatroom)
        await store.groups.add_member(bob.identifier, chatroom)
        await store.groups.add_member(alice.identifier, chatroom)
        assert await store.groups.get_members(chatroom) == [alice.identifier, bob.identifier]
        assert await store.groups.remove_member(alice.identifier, chatroom)
        assert await store.groups.get_members(chatroom) == [bob.identifier]
        assert await store.groups.save_members([atlas_id, alice.identifier], chatroom)
        assert await store.groups.get_members(chatroom) == [atlas_id, alice.identifier]

    async def test_bare_handles(self, store, chatroom, alice):
        """Group records and members are shared by equal handles."""
        bare_group = ID(None, chatroom.address)
        bare_alice = ID(None, alice.identifier.address)
        await store.groups.save_founder(alice.identifier, chatroom)
        assert await store.groups.get_founder(bare_group) == alice.identifier
        assert await store.groups.save_founder(bare_alice, bare_group)
        await store.groups.add_member(alice.identifier, chatroom)
        await store.groups.add_member(bare_alice, bare_group)
        members = await store.groups.get_members(bare_group)
        assert [str(m) for m in members] == [identifier_key(alice.identifier)]
        assert await store.groups.remove_member(bare_alice, chatroom)
        assert await store.groups.get_members(chatroom) == []


class TestUserTable:
    """Test local users and the current user flag."""

    async def test_add_and_list(self, store, alice, bob):
        """Users are listed in insertion order when none is current."""
        await store.users.add_user(alice.identifier)
        await store.users.add_user(bob.identifier)
        await store.users.add_user(alice.identifier)
        assert await store.users.all_users() == [alice.identifier, bob.identifier]
        assert await store.users.get_current_user() is None

    async def test_current_user_listed_first(self, store, alice, bob):
        """The current user is listed first."""
        await store.users.add_user(alice.identifier)
        await store.users.add_user(bob.identifier)
        assert await store.users.set_current_user(bob.identifier)
        assert await store.users.get_current_user() == bob.identifier
        assert await store.users.all_users() == [bob.identifier, alice.identifier]

    async def test_set_current_adds_user(self, store, alice, bob):
        """Setting an unknown user as current registers it; only one user is current."""
        await store.users.set_current_user(alice.identifier)
        await store.users.set_current_user(bob.identifier)
        assert await store.users.get_current_user() == bob.identifier
        assert await store.users.all_users() == [bob.identifier, alice.identifier]

    async def test_remove(self, store, alice):
        """Removed users are no longer listed."""
        await store.users.set_current_user(alice.identifier)
        assert await store.users.remove_user(alice.identifier)
        assert await store.users.all_users() == []
        assert await store.users.get_current_user() is None

    async def test_bare_handle_is_same_user(self, store, alice):
        """A user added twice under equal handles is listed once, by its named form."""
        bare = ID(None, alice.identifier.address)
        await store.users.add_user(alice.identifier)
        await store.users.add_user(bare)
        assert await store.users.set_current_user(bare)
        users = await store.users.all_users()
        assert [str(u) for u in users] == [identifier_key(alice.identifier)]
        assert await store.users.get_current_user() == alice.identifier
        assert await store.users.remove_user(bare)
        assert await store.users.all_users() == []


class TestAliasTable:
    """Test alias records."""

    async def test_save_and_resolve(self, store, atlas_id):
        """Names are case-insensitive."""
        assert await store.aliases.save_record("Atlas", atlas_id)
        assert await store.aliases.record("atlas") == atlas_id
        assert await store.aliases.record(" ATLAS ") == atlas_id

    async def test_rebind(self, store, atlas_id, nova_id):
        """Rebinding a name replaces its handle."""
        await store.aliases.save_record("moderator", atlas_id)
        await store.aliases.save_record("moderator", nova_id)
        assert await store.aliases.record("moderator") == nova_id
        assert await store.aliases.names(atlas_id) == []
        assert await store.aliases.names(nova_id) == ["moderator"]

    async def test_names_sorted(self, store, atlas_id):
        """All names bound to a handle are listed alphabetically."""
        await store.aliases.save_record("support", atlas_id)
        await store.aliases.save_record("bootstrap", atlas_id)
        assert await store.aliases.names(atlas_id) == ["bootstrap", "support"]

    async def test_unknown(self, store):
        """Unknown names resolve to nothing."""
        assert await store.aliases.record("nobody") is None

    async def test_names_by_address(self, store, atlas_id):
        """Names bound to a handle are listed for any equal handle."""
        await store.aliases.save_record("support", atlas_id)
        assert await store.aliases.names(ID(None, atlas_id.address)) == ["support"]
        assert str(await store.aliases.record("support")) == ATLAS
