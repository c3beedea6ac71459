"""Built-in record set.

A handful of identities ship with the application together with their Meta,
signed Profile, private key and contacts. They bootstrap a fresh install, back the
self-tests, and serve as the offline fallback when the credential store has
nothing for one of these handles.

The set is loaded and verified once at start-up and is read-only afterwards.
"""

import json
import logging
from importlib import resources
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel

from chat.sechat.directory.errors import DirectoryException
from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.keys import PrivateKey
from chat.sechat.directory.mkm.meta import Meta, verify_meta
from chat.sechat.directory.mkm.profile import Profile, verify_profile

logger = logging.getLogger(__name__)

BUNDLED_RECORDS = "immortals.json"


class ImmortalRecord(BaseModel):
    """One bundled identity. ``private_key`` is a PKCS#8 PEM string."""

    identifier: str
    meta: Meta
    profile: Optional[Profile] = None
    private_key: Optional[str] = None
    contacts: List[str] = []


class ImmortalBundle(BaseModel):
    records: List[ImmortalRecord]


class Immortals:
    """Read-only, pre-verified identities bundled with the application."""

    def __init__(self, records: Iterable[ImmortalRecord]) -> None:
        self._metas: Dict[ID, Meta] = {}
        self._profiles: Dict[ID, Profile] = {}
        self._keys: Dict[ID, PrivateKey] = {}
        self._contacts: Dict[ID, List[ID]] = {}
        self._identifiers: List[ID] = []

        for record in records:
            identifier = ID.parse(record.identifier)
            if identifier is None:
                raise DirectoryException.immortals_invalid(
                    record.identifier, "malformed identifier"
                )
            if not verify_meta(record.meta, identifier):
                raise DirectoryException.immortals_invalid(
                    identifier, "meta does not match identifier"
                )
            self._identifiers.append(identifier)
            self._metas[identifier] = record.meta

            if record.profile is not None:
                if not verify_profile(record.profile, record.meta):
                    raise DirectoryException.immortals_invalid(
                        identifier, "profile signature mismatch"
                    )
                self._profiles[identifier] = record.profile

            if record.private_key is not None:
                key = PrivateKey.from_pem(record.private_key)
                if not record.meta.public_key.matches(key):
                    raise DirectoryException.immortals_invalid(
                        identifier, "private key does not match meta"
                    )
                self._keys[identifier] = key

            contacts = []
            for value in record.contacts:
                contact = ID.parse(value)
                if contact is None:
                    raise DirectoryException.immortals_invalid(
                        identifier, f"malformed contact {value!r}"
                    )
                contacts.append(contact)
            self._contacts[identifier] = contacts

        logger.debug("Loaded %d built-in identities", len(self._identifiers))

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Immortals":
        """Load the record set from ``path`` or from the bundled resource."""
        if path:
            with open(path) as fd:
                data = fd.read()
        else:
            data = (
                resources.files("chat.sechat.directory")
                .joinpath(BUNDLED_RECORDS)
                .read_text(encoding="utf-8")
            )
        bundle = ImmortalBundle.model_validate(json.loads(data))
        return cls(bundle.records)

    @property
    def identifiers(self) -> List[ID]:
        return list(self._identifiers)

    def get_meta(self, identifier: ID) -> Optional[Meta]:
        return self._metas.get(identifier)

    def get_profile(self, identifier: ID) -> Optional[Profile]:
        return self._profiles.get(identifier)

    def get_private_key_for_signature(self, identifier: ID) -> Optional[PrivateKey]:
        return self._keys.get(identifier)

    def get_private_keys_for_decryption(self, identifier: ID) -> List[PrivateKey]:
        key = self._keys.get(identifier)
        if key is None or not key.can_decrypt:
            return []
        return [key]

    def get_contacts(self, identifier: ID) -> List[ID]:
        return list(self._contacts.get(identifier, []))
