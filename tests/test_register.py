"""
Tests for local user registration.
"""

import pytest

from chat.sechat.directory.errors import DirectoryException
from chat.sechat.directory.register import register_user


class TestRegisterUser:
    """Test generating and persisting new local users."""

    async def test_register_rsa_user(self, directory):
        """A registered user has a Meta, keys, a profile and is a local user."""
        identifier = await register_user(directory, "dave", nickname="Dave")

        assert identifier.name == "dave"
        assert identifier.is_user
        meta = await directory.resolve_meta(identifier)
        assert meta is not None and meta.seed == "dave"

        key = await directory.get_private_key_for_signature(identifier)
        assert meta.public_key.matches(key)
        assert await directory.get_private_keys_for_decryption(identifier) == [key]

        assert await directory.nickname(identifier) == "Dave"
        users = await directory.get_local_users()
        assert [u.identifier for u in users] == [identifier]

    async def test_register_ec_user_without_profile(self, directory):
        """EC users get no decryption keys; no nickname means no profile."""
        identifier = await register_user(directory, "erin", kty="EC")
        assert await directory.get_private_key_for_signature(identifier) is not None
        assert await directory.get_private_keys_for_decryption(identifier) == []
        assert await directory.resolve_profile(identifier) is None

    async def test_rejected_meta_raises(self, directory, monkeypatch):
        """Registration fails loudly when the new Meta is not accepted."""

        async def reject(meta, identifier):
            return False

        monkeypatch.setattr(directory, "save_meta", reject)
        with pytest.raises(DirectoryException, match="error-directory-1002"):
            await register_user(directory, "frank")
