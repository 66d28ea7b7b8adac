"""Signing account factory.

This module provides create_signing_account() for building a configured
StarknetSigningAccount from either native configuration objects or an
appchain.yaml profile.
"""

from __future__ import annotations

from pydantic import SecretStr

from appchain_starknet.account import StarknetSigningAccount, create_client
from appchain_starknet.config import AccountConfig, NodeConfig
from appchain_starknet.errors import SecretNotFoundError
from appchain_starknet.observability import get_logger
from appchain_starknet.profile import AppchainProfile


def create_signing_account(
    node: NodeConfig,
    account: AccountConfig,
) -> StarknetSigningAccount:
    """Create a signing account bound to a node client.

    This is the primary entry point for building the declare collaborators.
    No network request is made here.

    Args:
        node: Node endpoint configuration.
        account: Account credentials.

    Returns:
        StarknetSigningAccount ready to declare.

    Example:
        >>> signer = create_signing_account(
        ...     NodeConfig(url="http://localhost:9944"),
        ...     AccountConfig(address="0x4", private_key="0x00c1..."),
        ... )
    """
    get_logger().info(
        "creating_signing_account",
        node_url=node.url,
        address=account.address,
        chain_id=hex(node.chain_id) if node.chain_id is not None else None,
    )
    client = create_client(node)
    return StarknetSigningAccount(
        client,
        account,
        chain_id=node.chain_id,
        node_url=node.url,
    )


def account_config_from_profile(
    profile: AppchainProfile,
    *,
    address: str | None = None,
    private_key: str | None = None,
) -> AccountConfig:
    """Build AccountConfig from a profile plus optional overrides.

    Overrides come from the command line or its environment variables and
    take precedence over the profile.

    Raises:
        SecretNotFoundError: If no address or no private key is available,
            or the profile's key reference cannot be resolved.
    """
    key = SecretStr(private_key) if private_key else None
    section = profile.account

    if section is None:
        if not address:
            raise SecretNotFoundError("No account address configured")
        if key is None:
            raise SecretNotFoundError("No private key configured for account")
        return AccountConfig(address=address, private_key=key)

    if address:
        section = section.model_copy(update={"address": address})
    return section.to_config(private_key=key)
