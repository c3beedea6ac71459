"""Asymmetric key wrappers for identity certificates and profiles.

Keys are held as JSON Web Keys so they serialise into JSON columns unchanged. The raw
signing, verification and encryption operations are delegated to the `cryptography`
key objects that jwcrypto exposes.
"""

import base64
from typing import Any, Dict, Optional

from cryptography.exceptions import InvalidSignature
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec, padding
from jwcrypto import jwk


def _oaep() -> padding.OAEP:
    return padding.OAEP(
        mgf=padding.MGF1(algorithm=hashes.SHA256()),
        algorithm=hashes.SHA256(),
        label=None,
    )


def _thumbprint_bytes(key: jwk.JWK) -> bytes:
    thumbprint = key.thumbprint()
    return base64.urlsafe_b64decode(thumbprint + "=" * (-len(thumbprint) % 4))


class PublicKey:
    """Public half of an identity key.

    Used to verify Meta fingerprints and Profile signatures, and to encrypt
    payloads for RSA keys.
    """

    def __init__(self, key: jwk.JWK) -> None:
        self._key = key
        self.kty: str = key.export_public(as_dict=True)["kty"]

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> "PublicKey":
        return cls(jwk.JWK(**value))

    def to_dict(self) -> Dict[str, Any]:
        return self._key.export_public(as_dict=True)

    def thumbprint(self) -> str:
        return self._key.thumbprint()

    def thumbprint_bytes(self) -> bytes:
        return _thumbprint_bytes(self._key)

    def verify(self, data: bytes, signature: bytes) -> bool:
        # only RSA and EC identity keys are accepted
        if self.kty not in ("RSA", "EC"):
            return False
        try:
            key = self._key.get_op_key("verify")
            if self.kty == "RSA":
                key.verify(signature, data, padding.PKCS1v15(), hashes.SHA256())
            else:
                key.verify(signature, data, ec.ECDSA(hashes.SHA256()))
        except (InvalidSignature, TypeError, ValueError):
            return False
        return True

    def encrypt(self, plaintext: bytes) -> bytes:
        if self.kty != "RSA":
            raise ValueError(f"{self.kty} keys do not support encryption")
        return self._key.get_op_key("encrypt").encrypt(plaintext, _oaep())

    def matches(self, private_key: "PrivateKey") -> bool:
        return self.thumbprint() == private_key.thumbprint()

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PublicKey):
            return NotImplemented
        return self.thumbprint() == other.thumbprint()

    def __hash__(self) -> int:
        return hash(self.thumbprint())


class PrivateKey:
    """Private identity key.

    RSA keys sign and decrypt; EC keys only sign.
    """

    def __init__(self, key: jwk.JWK) -> None:
        if not key.has_private:
            raise ValueError("JWK does not contain private key material")
        self._key = key
        self.kty: str = key.export_public(as_dict=True)["kty"]

    @classmethod
    def generate(cls, kty: str = "RSA", size: int = 2048) -> "PrivateKey":
        if kty == "RSA":
            return cls(jwk.JWK.generate(kty="RSA", size=size))
        if kty == "EC":
            return cls(jwk.JWK.generate(kty="EC", crv="P-256"))
        raise ValueError(f"unsupported key type: {kty}")

    @classmethod
    def from_dict(cls, value: Dict[str, Any]) -> "PrivateKey":
        return cls(jwk.JWK(**value))

    @classmethod
    def from_pem(cls, pem: str, password: Optional[bytes] = None) -> "PrivateKey":
        return cls(jwk.JWK.from_pem(pem.encode("ascii"), password=password))

    def to_dict(self) -> Dict[str, Any]:
        return self._key.export_private(as_dict=True)

    @property
    def public_key(self) -> PublicKey:
        return PublicKey(jwk.JWK(**self._key.export_public(as_dict=True)))

    @property
    def can_decrypt(self) -> bool:
        return self.kty == "RSA"

    def thumbprint(self) -> str:
        return self._key.thumbprint()

    def sign(self, data: bytes) -> bytes:
        key = self._key.get_op_key("sign")
        if self.kty == "RSA":
            return key.sign(data, padding.PKCS1v15(), hashes.SHA256())
        return key.sign(data, ec.ECDSA(hashes.SHA256()))

    def decrypt(self, ciphertext: bytes) -> bytes:
        if not self.can_decrypt:
            raise ValueError(f"{self.kty} keys do not support decryption")
        return self._key.get_op_key("decrypt").decrypt(ciphertext, _oaep())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, PrivateKey):
            return NotImplemented
        return self.thumbprint() == other.thumbprint()

    def __hash__(self) -> int:
        return hash(self.thumbprint())

    def __repr__(self) -> str:
        return f"PrivateKey(kty={self.kty!r}, thumbprint={self.thumbprint()!r})"
