"""Local private key storage model."""

from typing import Any

from sqlalchemy import JSON, Boolean, String, update
from sqlalchemy.orm import Mapped, mapped_column

from chat.sechat.directory.model.base import Base, insert_for


class PrivateKeyRecord(Base):
    """Private key owned by a local identity, keyed by its address.

    A key may be flagged for signing, decryption, or both. At most one key per
    identity carries the signing flag.
    """

    __tablename__ = "private_keys"

    address: Mapped[str] = mapped_column(String(512), primary_key=True)
    thumbprint: Mapped[str] = mapped_column(String(128), primary_key=True)
    jwk: Mapped[Any] = mapped_column(JSON, nullable=False)
    sign: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    decrypt: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)


def clear_signing_key_stmt(address: str):
    """Create a statement that drops the signing flag from every key of an identity."""
    return (
        update(PrivateKeyRecord)
        .where(PrivateKeyRecord.address == address)
        .values(sign=False)
    )


def upsert_private_key_stmt(
    dialect_name: str,
    address: str,
    thumbprint: str,
    jwk: Any,
    sign: bool,
    decrypt: bool,
):
    """Create an upsert statement for a private key."""
    return (
        insert_for(dialect_name)(PrivateKeyRecord)
        .values(
            [
                {
                    "address": address,
                    "thumbprint": thumbprint,
                    "jwk": jwk,
                    "sign": sign,
                    "decrypt": decrypt,
                }
            ]
        )
        .on_conflict_do_update(
            index_elements=["address", "thumbprint"],
            set_={
                "jwk": jwk,
                "sign": sign,
                "decrypt": decrypt,
            },
        )
    )
