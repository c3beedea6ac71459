"""Identity handles and addresses.

An address is derived from a fingerprint and a network type and carries a checksum,
so a handle can be validated without any lookup. Handles compare equal when their
addresses are equal, regardless of name or terminal.
"""

import base64
import binascii
import hashlib
from enum import IntEnum
from typing import Optional, Union


class NetworkType(IntEnum):
    """Network type tag stored in the first byte of an address.

    Bit 0x08 marks a user, bit 0x10 marks a group.
    """

    main = 0x08
    group = 0x10
    station = 0x88
    robot = 0xC8

    def is_user(self) -> bool:
        return (self.value & NetworkType.main) == NetworkType.main

    def is_group(self) -> bool:
        return (self.value & NetworkType.group) == NetworkType.group


ADDRESS_DIGEST_LENGTH = 20
ADDRESS_CHECKSUM_LENGTH = 4
ADDRESS_LENGTH = 1 + ADDRESS_DIGEST_LENGTH + ADDRESS_CHECKSUM_LENGTH


def _checksum(data: bytes) -> bytes:
    return hashlib.sha256(hashlib.sha256(data).digest()).digest()[:ADDRESS_CHECKSUM_LENGTH]


class Address:
    """Checksummed, network-tagged address.

    The string form is the lowercase base32 encoding of
    ``network || SHA256(fingerprint)[:20] || checksum``.
    """

    __slots__ = ("_string", "network", "number")

    def __init__(self, string: str, network: NetworkType, number: int) -> None:
        self._string = string
        self.network = network
        self.number = number

    @classmethod
    def from_data(cls, data: bytes, network: NetworkType) -> "Address":
        """Derive an address from fingerprint bytes for the given network."""
        body = bytes([network]) + hashlib.sha256(data).digest()[:ADDRESS_DIGEST_LENGTH]
        checksum = _checksum(body)
        string = base64.b32encode(body + checksum).decode("ascii").lower()
        return cls(string, network, int.from_bytes(checksum, "big"))

    @classmethod
    def parse(cls, value: str) -> Optional["Address"]:
        """Parse an address string, returning None when it is malformed."""
        if value is None:
            return None
        value = value.strip().lower()
        if value == ANYWHERE._string:
            return ANYWHERE
        if value == EVERYWHERE._string:
            return EVERYWHERE
        try:
            raw = base64.b32decode(value.upper())
        except (binascii.Error, ValueError):
            return None
        if len(raw) != ADDRESS_LENGTH:
            return None
        body, checksum = raw[:-ADDRESS_CHECKSUM_LENGTH], raw[-ADDRESS_CHECKSUM_LENGTH:]
        if _checksum(body) != checksum:
            return None
        try:
            network = NetworkType(body[0])
        except ValueError:
            return None
        return cls(value, network, int.from_bytes(checksum, "big"))

    @property
    def is_broadcast(self) -> bool:
        return self is ANYWHERE or self is EVERYWHERE

    def __str__(self) -> str:
        return self._string

    def __repr__(self) -> str:
        return f"Address({self._string!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Address):
            return self._string == other._string
        if isinstance(other, str):
            return self._string == other.strip().lower()
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._string)


ANYWHERE = Address("anywhere", NetworkType.main, 0)
EVERYWHERE = Address("everywhere", NetworkType.group, 0)


class ID:
    """Identity handle: ``name@address/terminal``.

    Immutable. Equality and hashing use the address only.
    """

    __slots__ = ("name", "address", "terminal")

    def __init__(
        self, name: Optional[str], address: Address, terminal: Optional[str] = None
    ) -> None:
        self.name = name or None
        self.address = address
        self.terminal = terminal or None

    @classmethod
    def parse(cls, value: Union[str, "ID", None]) -> Optional["ID"]:
        """Parse a handle string, returning None when the address is invalid."""
        if value is None:
            return None
        if isinstance(value, ID):
            return value
        value = value.strip()
        terminal = None
        if "/" in value:
            value, terminal = value.split("/", 1)
        name = None
        if "@" in value:
            name, value = value.split("@", 1)
        address = Address.parse(value)
        if address is None:
            return None
        return cls(name, address, terminal)

    @property
    def type(self) -> NetworkType:
        return self.address.network

    @property
    def number(self) -> int:
        return self.address.number

    @property
    def is_user(self) -> bool:
        return self.type.is_user()

    @property
    def is_group(self) -> bool:
        return self.type.is_group()

    @property
    def is_broadcast(self) -> bool:
        return self.address.is_broadcast

    def __str__(self) -> str:
        string = str(self.address)
        if self.name:
            string = f"{self.name}@{string}"
        if self.terminal:
            string = f"{string}/{self.terminal}"
        return string

    def __repr__(self) -> str:
        return f"ID({str(self)!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, str):
            other = ID.parse(other)
            if other is None:
                return False
        if isinstance(other, ID):
            return self.address == other.address
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self.address)


ANYONE = ID("anyone", ANYWHERE)
EVERYONE = ID("everyone", EVERYWHERE)
