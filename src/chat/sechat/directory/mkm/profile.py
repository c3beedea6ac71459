"""Signed profile documents.

A profile is the mutable, human-readable side of an identity. The property map is
serialised once into ``data`` and the owner signs exactly those bytes, so a profile
can be stored and relayed as-is and re-verified anywhere.
"""

import base64
import binascii
import json
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict

from chat.sechat.directory.mkm.identifier import ID
from chat.sechat.directory.mkm.keys import PrivateKey
from chat.sechat.directory.mkm.meta import Meta


class Profile(BaseModel):
    """Signed key-value document owned by an identity."""

    model_config = ConfigDict(frozen=True)

    identifier: str
    data: str
    signature: str

    @classmethod
    def sign(
        cls, identifier: ID, properties: Dict[str, Any], private_key: PrivateKey
    ) -> "Profile":
        data = json.dumps(properties, separators=(",", ":"), ensure_ascii=False)
        signature = private_key.sign(data.encode("utf-8"))
        return cls(
            identifier=str(identifier),
            data=data,
            signature=base64.b64encode(signature).decode("ascii"),
        )

    @property
    def id(self) -> Optional[ID]:
        return ID.parse(self.identifier)

    @property
    def properties(self) -> Dict[str, Any]:
        try:
            value = json.loads(self.data)
        except ValueError:
            return {}
        if not isinstance(value, dict):
            return {}
        return value

    @property
    def property_names(self) -> List[str]:
        return list(self.properties.keys())

    def get_property(self, name: str, default: Any = None) -> Any:
        return self.properties.get(name, default)

    @property
    def name(self) -> Optional[str]:
        """Nickname declared by the owner."""
        return self.get_property("name")

    def verify(self, meta: Meta) -> bool:
        try:
            signature = base64.b64decode(self.signature, validate=True)
        except (binascii.Error, ValueError):
            return False
        return meta.public_key.verify(self.data.encode("utf-8"), signature)


def verify_profile(profile: Optional[Profile], meta: Optional[Meta]) -> bool:
    """Check a profile's signature against its owner's Meta key.

    Args:
        profile: Candidate profile
        meta: Resolved Meta of the profile owner

    Returns:
        True if the signature over ``data`` verifies with the Meta key
    """
    if profile is None or meta is None or meta.is_empty:
        return False
    return profile.verify(meta)
