"""Meta: the write-once identity certificate.

A Meta binds an identity handle to a public key. For MKM metas the key signs the
seed (the handle's name) and the resulting fingerprint is what the address is
derived from, so the handle itself proves which key owns it.
"""

import base64
import binascii
import logging
from enum import IntEnum
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict

from chat.sechat.directory.mkm.identifier import ID, Address, NetworkType
from chat.sechat.directory.mkm.keys import PrivateKey, PublicKey

logger = logging.getLogger(__name__)


class MetaVersion(IntEnum):
    """Meta algorithm version.

    - mkm: seed and fingerprint are required, address derives from the fingerprint
    - btc: key only, address derives from the key thumbprint
    """

    mkm = 1
    btc = 2


class Meta(BaseModel):
    """Identity certificate binding a handle to a public signing key."""

    model_config = ConfigDict(frozen=True)

    version: MetaVersion = MetaVersion.mkm
    key: Dict[str, Any]
    seed: Optional[str] = None
    fingerprint: Optional[str] = None

    @classmethod
    def generate(
        cls,
        private_key: PrivateKey,
        seed: Optional[str] = None,
        version: MetaVersion = MetaVersion.mkm,
    ) -> "Meta":
        """Create a Meta for a freshly generated key.

        Args:
            private_key: Key that will own the identity
            seed: Handle name, required for MKM metas
            version: Meta algorithm version

        Returns:
            Meta: A valid, self-consistent certificate
        """
        fingerprint = None
        if version == MetaVersion.mkm:
            if not seed:
                raise ValueError("MKM meta requires a seed")
            fingerprint = base64.b64encode(
                private_key.sign(seed.encode("utf-8"))
            ).decode("ascii")
        return cls(
            version=version,
            key=private_key.public_key.to_dict(),
            seed=seed,
            fingerprint=fingerprint,
        )

    @property
    def is_empty(self) -> bool:
        return not self.key

    @property
    def public_key(self) -> PublicKey:
        return PublicKey.from_dict(self.key)

    def _fingerprint_bytes(self) -> Optional[bytes]:
        if self.fingerprint is None:
            return None
        try:
            return base64.b64decode(self.fingerprint, validate=True)
        except (binascii.Error, ValueError):
            return None

    def is_valid(self) -> bool:
        """Check the fingerprint signs the seed (MKM) or that the key loads (BTC)."""
        if self.is_empty:
            return False
        try:
            public_key = self.public_key
        except Exception as e:
            logger.debug("meta key failed to load: %s", e)
            return False
        if self.version == MetaVersion.btc:
            return True
        fingerprint = self._fingerprint_bytes()
        if not self.seed or fingerprint is None:
            return False
        return public_key.verify(self.seed.encode("utf-8"), fingerprint)

    def generate_address(self, network: NetworkType) -> Address:
        if self.version == MetaVersion.mkm:
            data = self._fingerprint_bytes()
            if data is None:
                raise ValueError("meta has no fingerprint")
        else:
            data = self.public_key.thumbprint_bytes()
        return Address.from_data(data, network)

    def generate_identifier(self, network: NetworkType = NetworkType.main) -> ID:
        return ID(self.seed, self.generate_address(network))

    def match_identifier(self, identifier: ID) -> bool:
        if identifier.is_broadcast or not self.is_valid():
            return False
        if self.version == MetaVersion.mkm and identifier.name != self.seed:
            return False
        return self.generate_address(identifier.type) == identifier.address

    def match_key(self, public_key: PublicKey) -> bool:
        if self.is_empty:
            return False
        return self.public_key == public_key


def verify_meta(meta: Optional[Meta], identifier: ID) -> bool:
    """Check that a Meta is valid and generates the given handle.

    This is the derivation check applied before any Meta is persisted.

    Args:
        meta: Candidate certificate
        identifier: Handle the Meta claims to belong to

    Returns:
        True if the Meta is valid and its derived address matches the handle
    """
    if meta is None:
        return False
    return meta.match_identifier(identifier)
