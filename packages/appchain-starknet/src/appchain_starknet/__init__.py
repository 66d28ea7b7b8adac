"""appchain-starknet: Starknet appchain integration for appchain-deploy.

This package provides a thin layer over starknet-py with:
- Pydantic configuration for the node endpoint and signing account
- appchain.yaml profiles with secret references
- Contract artifact loading (Sierra and CASM JSON)
- Structured logging via structlog and OpenTelemetry spans

Example:
    >>> from appchain_starknet import (
    ...     AccountConfig, NodeConfig, create_signing_account, load_contract_class,
    ... )
    >>> account = create_signing_account(
    ...     NodeConfig(url="http://localhost:9944"),
    ...     AccountConfig(address="0x4", private_key="0x00c1..."),
    ... )
    >>> receipt = await account.declare(
    ...     load_contract_class("build/token.sierra.json"),
    ...     compiled_class_hash=0x1234,
    ... )
"""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = [
    # Factory functions
    "create_signing_account",
    "create_client",
    # Account
    "StarknetSigningAccount",
    "SigningAccount",
    # Configuration models
    "NodeConfig",
    "AccountConfig",
    "DeclareReceipt",
    "AppchainProfile",
    "SecretReference",
    # Artifacts
    "ContractArtifact",
    "CompiledClassArtifact",
    "load_contract_class",
    "load_compiled_class",
    "find_compiled_class",
    # Exceptions
    "AppchainError",
    "ArtifactLoadError",
    "DeclareSubmissionError",
    "SecretNotFoundError",
    "ProfileError",
]

_MODULES = {
    "create_signing_account": "factory",
    "create_client": "account",
    "StarknetSigningAccount": "account",
    "SigningAccount": "account",
    "NodeConfig": "config",
    "AccountConfig": "config",
    "DeclareReceipt": "config",
    "AppchainProfile": "profile",
    "SecretReference": "profile",
    "ContractArtifact": "artifacts",
    "CompiledClassArtifact": "artifacts",
    "load_contract_class": "artifacts",
    "load_compiled_class": "artifacts",
    "find_compiled_class": "artifacts",
    "AppchainError": "errors",
    "ArtifactLoadError": "errors",
    "DeclareSubmissionError": "errors",
    "SecretNotFoundError": "errors",
    "ProfileError": "errors",
}


def __getattr__(name: str) -> object:
    """Lazy import of public API members.

    Keeps starknet-py out of the import path until an account is needed.
    """
    if name in _MODULES:
        import importlib

        module = importlib.import_module(f"appchain_starknet.{_MODULES[name]}")
        return getattr(module, name)
    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
