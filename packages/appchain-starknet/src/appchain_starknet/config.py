"""Pydantic configuration models for appchain-starknet.

This module provides:
- NodeConfig: Node endpoint configuration
- AccountConfig: Signing account credentials
- DeclareReceipt: Result of a successful declare transaction
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

DEFAULT_NODE_URL = "http://localhost:9944"


class NodeConfig(BaseModel):
    """Appchain node connection configuration.

    Attributes:
        url: JSON-RPC endpoint of the node (default: local Madara node).
        chain_id: Chain id as an integer. Fetched from the node on first
            use when not set.

    Example:
        >>> config = NodeConfig(url="http://localhost:9944/")
        >>> config.url
        'http://localhost:9944'
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    url: str = Field(
        default=DEFAULT_NODE_URL,
        min_length=1,
        description="Node JSON-RPC endpoint URL",
    )
    chain_id: int | None = Field(
        default=None,
        ge=0,
        description="Chain id; fetched from the node when not set",
    )

    @field_validator("url")
    @classmethod
    def validate_url_format(cls, v: str) -> str:
        """Validate URL format (must be http:// or https://)."""
        if not v.startswith(("http://", "https://")):
            msg = f"URL must start with http:// or https://, got: {v}"
            raise ValueError(msg)
        return v.rstrip("/")

    @field_validator("chain_id", mode="before")
    @classmethod
    def parse_chain_id(cls, v: object) -> object:
        """Accept hex strings ("0x4d4144415241") or short strings ("MADARA")."""
        if not isinstance(v, str):
            return v
        if v.startswith("0x"):
            return int(v, 16)
        if v.isdigit():
            return int(v)
        # Short string encoding, e.g. "SN_SEPOLIA"
        return int.from_bytes(v.encode("ascii"), "big")


class AccountConfig(BaseModel):
    """Signing account credentials.

    Address and key are treated as opaque: a malformed value only surfaces
    when a transaction is signed or submitted.

    Attributes:
        address: Account contract address (hex string).
        private_key: Signing key. Never logged or included in errors.
        cairo_version: Cairo version of the account contract ("0" or "1").
            Descriptive only: starknet-py reads the version from the class
            deployed at the address when it encodes calldata, so this value
            is logged with the bound account and not passed to the signer.

    Example:
        >>> account = AccountConfig(address="0x4", private_key="0x1")
        >>> account.private_key
        SecretStr('**********')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(
        ...,
        min_length=1,
        description="Account contract address",
    )
    private_key: SecretStr = Field(
        ...,
        description="Account signing key",
    )
    cairo_version: Literal["0", "1"] = Field(
        default="1",
        description="Cairo version of the account contract (logged; starknet-py infers it)",
    )

    @field_validator("private_key")
    @classmethod
    def private_key_not_empty(cls, v: SecretStr) -> SecretStr:
        """Reject an empty key without echoing its value."""
        if not v.get_secret_value():
            raise ValueError("private_key must not be empty")
        return v


class DeclareReceipt(BaseModel):
    """Outcome of a submitted declare transaction.

    Hashes are kept as the strings the chain layer produced and are not
    re-parsed.

    Attributes:
        transaction_hash: Hash of the declare transaction.
        class_hash: Hash of the declared contract class.
        accepted: Whether the transaction was accepted. None when acceptance
            was not awaited.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    transaction_hash: str = Field(..., description="Declare transaction hash")
    class_hash: str = Field(..., description="Declared class hash")
    accepted: bool | None = Field(default=None, description="Acceptance status")

    def __str__(self) -> str:
        parts = [f"transaction_hash={self.transaction_hash}", f"class_hash={self.class_hash}"]
        if self.accepted is not None:
            parts.append(f"accepted={self.accepted}")
        return " ".join(parts)
