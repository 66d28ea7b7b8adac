"""Custom exceptions for appchain-starknet.

This module defines the exception hierarchy:
- AppchainError (base)
- ArtifactLoadError
- DeclareSubmissionError
- SecretNotFoundError
- ProfileError
"""

from __future__ import annotations


class AppchainError(Exception):
    """Base exception for all appchain operations.

    Attributes:
        message: Human-readable error description.
        details: Optional additional context about the error.

    Example:
        >>> try:
        ...     await account.declare(artifact)
        ... except AppchainError as e:
        ...     print(f"Appchain error: {e}")
    """

    def __init__(self, message: str, *, details: dict[str, str] | None = None) -> None:
        """Initialize AppchainError.

        Args:
            message: Human-readable error description.
            details: Optional additional context about the error.
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation with details if present."""
        if self.details:
            detail_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.message} ({detail_str})"
        return self.message


class ArtifactLoadError(AppchainError):
    """A contract artifact could not be loaded.

    Raised when:
    - The path is empty or does not exist
    - The file cannot be read
    - The content is not valid JSON
    - The document is not a contract class (e.g. no ``sierra_program``)

    No declaration is attempted once this is raised.

    Example:
        >>> try:
        ...     load_contract_class("./missing.json")
        ... except ArtifactLoadError as e:
        ...     print(e.path)
    """

    def __init__(self, path: str, reason: str) -> None:
        """Initialize ArtifactLoadError.

        Args:
            path: The artifact path as given or resolved.
            reason: Why loading failed.
        """
        super().__init__(f"Failed to load contract artifact {path}: {reason}")
        self.path = path
        self.reason = reason


class DeclareSubmissionError(AppchainError):
    """The declare transaction could not be submitted or was rejected.

    Raised when:
    - The node is unreachable
    - Credentials are invalid or the signature is rejected
    - The node rejects the transaction (nonce, fee, duplicate class, ...)
    - No compiled class hash is available for a Sierra class
    - The transaction was submitted but waiting for acceptance failed; the
      transaction and class hashes are then kept in ``details``

    Security:
        The message never includes the private key. Node error messages are
        passed through as-is since they only reference public data.

    Example:
        >>> try:
        ...     await account.declare(artifact)
        ... except DeclareSubmissionError as e:
        ...     print(e.message)
    """

    def __init__(
        self,
        message: str,
        *,
        code: int | None = None,
        transaction_hash: str | None = None,
        class_hash: str | None = None,
    ) -> None:
        """Initialize DeclareSubmissionError.

        Args:
            message: Human-readable reason, usually the node's error message.
            code: JSON-RPC error code when the node reported one.
            transaction_hash: Set when the transaction was already submitted,
                e.g. waiting for acceptance failed.
            class_hash: Class hash of the submitted transaction.
        """
        details: dict[str, str] = {}
        if code is not None:
            details["code"] = str(code)
        if transaction_hash is not None:
            details["transaction_hash"] = transaction_hash
        if class_hash is not None:
            details["class_hash"] = class_hash
        super().__init__(message, details=details)
        self.code = code
        self.transaction_hash = transaction_hash
        self.class_hash = class_hash

    @property
    def submitted(self) -> bool:
        """Whether a transaction reached the node despite the error."""
        return self.transaction_hash is not None


class SecretNotFoundError(AppchainError):
    """A secret reference could not be resolved from env or a secret mount."""


class ProfileError(AppchainError):
    """An appchain.yaml profile is unreadable or malformed.

    Pydantic validation errors are not wrapped; they propagate as-is so the
    CLI can format field paths.
    """

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Invalid profile {path}: {reason}")
        self.path = path
