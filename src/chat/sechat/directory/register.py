"""Local user registration.

Creates a brand-new identity on this device: a private key, the Meta derived from
it, an optional signed profile, and an entry in the local user list.
"""

import logging
from typing import Optional

from chat.sechat.directory.directory import IdentityDirectory
from chat.sechat.directory.errors import DirectoryException
from chat.sechat.directory.mkm.identifier import ID, NetworkType
from chat.sechat.directory.mkm.keys import PrivateKey
from chat.sechat.directory.mkm.meta import Meta
from chat.sechat.directory.mkm.profile import Profile

logger = logging.getLogger(__name__)


async def register_user(
    directory: IdentityDirectory,
    seed: str,
    nickname: Optional[str] = None,
    kty: str = "RSA",
) -> ID:
    """
    Generate and persist a new local user.

    Args:
        directory: Directory the new credentials are written through
        seed: Handle name of the new user
        nickname: Optional display name, published in a signed profile
        kty: Key type, "RSA" or "EC"

    Returns:
        ID: The handle of the registered user

    Raises:
        DirectoryException: If the freshly generated credentials are not accepted
    """
    private_key = PrivateKey.generate(kty=kty)
    meta = Meta.generate(private_key, seed=seed)
    identifier = meta.generate_identifier(NetworkType.main)

    if not await directory.save_meta(meta, identifier):
        raise DirectoryException.registration_failed(identifier, "meta rejected")
    if not await directory.save_private_key(
        private_key, identifier, sign=True, decrypt=private_key.can_decrypt
    ):
        raise DirectoryException.registration_failed(identifier, "private key not saved")

    if nickname:
        profile = Profile.sign(identifier, {"name": nickname}, private_key)
        if not await directory.save_profile(profile):
            raise DirectoryException.registration_failed(identifier, "profile rejected")

    await directory.add_user(identifier)
    logger.info("Registered local user %s", identifier)
    return identifier
