"""
Identity Primitives

This package defines the value types the directory resolves and verifies.

Key Components:
- identifier.py: Network types, addresses and identity handles (ID)
- keys.py: Private/public key wrappers around JSON Web Keys
- meta.py: Meta certificates binding a handle to a public key
- profile.py: Signed, mutable profile documents

Verification predicates (`verify_meta`, `verify_profile`) are pure functions and are
the only place signatures are checked.
"""

from chat.sechat.directory.mkm.identifier import (
    ANYONE,
    ANYWHERE,
    EVERYONE,
    EVERYWHERE,
    ID,
    Address,
    NetworkType,
)
from chat.sechat.directory.mkm.keys import PrivateKey, PublicKey
from chat.sechat.directory.mkm.meta import Meta, MetaVersion, verify_meta
from chat.sechat.directory.mkm.profile import Profile, verify_profile

__all__ = [
    "ANYONE",
    "ANYWHERE",
    "EVERYONE",
    "EVERYWHERE",
    "ID",
    "Address",
    "NetworkType",
    "PrivateKey",
    "PublicKey",
    "Meta",
    "MetaVersion",
    "verify_meta",
    "Profile",
    "verify_profile",
]
