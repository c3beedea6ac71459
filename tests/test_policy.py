"""
Unit tests for the default group policy and display helpers.

Both are pure functions over already-resolved data, so no storage is involved.
"""

from chat.sechat.directory.display import display_name, number_string
from chat.sechat.directory.mkm.identifier import EVERYONE, EVERYWHERE, ID
from chat.sechat.directory.mkm.profile import Profile
from chat.sechat.directory.policy import default_founder, default_owner
from tests.helpers import NOVA


class TestDefaultFounder:
    """Test founder derivation."""

    def test_broadcast_everyone(self):
        """The everyone group is founded by founder@anywhere."""
        founder = default_founder(EVERYONE, None, [], {})
        assert founder.name == "founder"
        assert founder.is_broadcast

    def test_broadcast_prefixed(self):
        """Prefixed broadcast groups keep their prefix."""
        group = ID("vip.everyone", EVERYWHERE)
        assert str(default_founder(group, None, [], {})) == "vip.founder@anywhere"
        other = ID("staff", EVERYWHERE)
        assert str(default_founder(other, None, [], {})) == "staff.founder@anywhere"

    def test_member_with_group_key(self, alice, bob, chatroom):
        """The first member holding the group Meta key is the founder."""
        members = [bob.identifier, alice.identifier]
        metas = {bob.identifier: bob.meta, alice.identifier: alice.meta}
        assert default_founder(chatroom, alice.meta, members, metas) == alice.identifier

    def test_members_without_metas(self, alice, chatroom):
        """Members without a resolved Meta are skipped."""
        assert default_founder(chatroom, alice.meta, [alice.identifier], {}) is None

    def test_without_group_meta(self, alice, chatroom):
        """No group Meta means no founder."""
        metas = {alice.identifier: alice.meta}
        assert default_founder(chatroom, None, [alice.identifier], metas) is None


class TestDefaultOwner:
    """Test owner derivation."""

    def test_broadcast(self):
        """Broadcast groups are owned by owner@anywhere."""
        assert str(default_owner(EVERYONE, None)) == "owner@anywhere"

    def test_group_defaults_to_founder(self, alice, chatroom):
        """A group's owner defaults to its founder."""
        assert default_owner(chatroom, alice.identifier) == alice.identifier
        assert default_owner(chatroom, None) is None

    def test_user_has_no_owner(self, alice, bob):
        """User handles have no owner."""
        assert default_owner(alice.identifier, bob.identifier) is None


class TestDisplay:
    """Test display-name precedence and number formatting."""

    def test_nickname_and_username(self, alice):
        """Users with a nickname show both names."""
        profile = Profile.sign(alice.identifier, {"name": "Alice"}, alice.private_key)
        assert display_name(alice.identifier, profile) == "Alice (alice)"

    def test_group_nickname_only(self, alice, chatroom):
        """Groups show the nickname alone."""
        profile = Profile.sign(chatroom, {"name": "Chat Room"}, alice.private_key)
        assert display_name(chatroom, profile) == "Chat Room"

    def test_username_only(self, alice):
        """Without a nickname the username is shown."""
        assert display_name(alice.identifier) == "alice"

    def test_address_only(self, alice):
        """Without any name the address is shown."""
        bare = ID(None, alice.identifier.address)
        assert display_name(bare) == str(alice.identifier.address)

    def test_number_string(self):
        """Numbers are zero-padded to ten digits and grouped."""
        assert number_string(ID.parse(NOVA)) == "412-479-7083"
        assert number_string(EVERYONE) == "000-000-0000"
