"""appchain.yaml profile models.

A profile names the node to talk to and the account to sign with. Secrets
are never stored in the file; the private key is a reference resolved at
runtime from the environment or a mounted secret file.

Example appchain.yaml:

    node:
      url: http://localhost:9944
    account:
      address: "0x4"
      private_key:
        secret_ref: appchain-account-key   # APPCHAIN_ACCOUNT_KEY
      cairo_version: "1"
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator

from appchain_starknet.config import AccountConfig, NodeConfig
from appchain_starknet.errors import ProfileError, SecretNotFoundError

# Environment variable / K8s secret name pattern
SECRET_REF_PATTERN = r"^[A-Za-z0-9][A-Za-z0-9_.-]*$"
SECRET_MOUNT_DIR = Path("/var/run/secrets")


class SecretReference(BaseModel):
    """Reference to an external secret (environment variable or secret mount).

    Resolution order:
        1. Environment variable {SECRET_REF_UPPER_SNAKE_CASE}
        2. Secret mount: /var/run/secrets/{secret_ref}
        3. Fail with SecretNotFoundError

    Example:
        >>> ref = SecretReference(secret_ref="appchain-account-key")
        >>> ref.resolve()  # reads APPCHAIN_ACCOUNT_KEY
        SecretStr('**********')
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    secret_ref: str = Field(
        ...,
        pattern=SECRET_REF_PATTERN,
        min_length=1,
        max_length=253,
        description="Environment variable or secret mount name",
    )

    @property
    def env_var_name(self) -> str:
        return self.secret_ref.upper().replace("-", "_").replace(".", "_")

    def resolve(self) -> SecretStr:
        """Resolve the secret at runtime.

        Raises:
            SecretNotFoundError: If the secret is in neither location.
        """
        value = os.environ.get(self.env_var_name)
        if value:
            return SecretStr(value)

        secret_path = SECRET_MOUNT_DIR / self.secret_ref
        if secret_path.exists():
            return SecretStr(secret_path.read_text().strip())

        raise SecretNotFoundError(
            f"Secret '{self.secret_ref}' not found. "
            f"Expected in environment variable '{self.env_var_name}' "
            f"or secret mount at '{secret_path}'"
        )

    def __str__(self) -> str:
        return f"SecretReference(secret_ref='{self.secret_ref}')"


class AccountProfile(BaseModel):
    """Account section of appchain.yaml."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    address: str = Field(..., min_length=1)
    private_key: SecretReference | None = None
    cairo_version: Literal["0", "1"] = "1"

    @field_validator("address", mode="before")
    @classmethod
    def address_from_yaml_int(cls, v: object) -> object:
        """YAML reads an unquoted 0x4 as the integer 4."""
        if isinstance(v, int) and not isinstance(v, bool):
            return hex(v)
        return v

    def to_config(self, private_key: SecretStr | None = None) -> AccountConfig:
        """Resolve the key reference into a runtime AccountConfig.

        Args:
            private_key: Key supplied out of band; takes precedence over
                the profile reference.

        Raises:
            SecretNotFoundError: If no key is supplied and the reference
                is missing or cannot be resolved.
        """
        if private_key is None:
            if self.private_key is None:
                raise SecretNotFoundError("No private key configured for account")
            private_key = self.private_key.resolve()
        return AccountConfig(
            address=self.address,
            private_key=private_key,
            cairo_version=self.cairo_version,
        )


class AppchainProfile(BaseModel):
    """Root model of appchain.yaml.

    Attributes:
        node: Node endpoint configuration.
        account: Signing account; may be omitted when supplied on the
            command line.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    node: NodeConfig = Field(default_factory=NodeConfig)
    account: AccountProfile | None = None

    @classmethod
    def from_yaml(cls, path: str | Path) -> AppchainProfile:
        """Load and validate a profile from a YAML file.

        Raises:
            FileNotFoundError: If file doesn't exist.
            yaml.YAMLError: If YAML syntax is invalid.
            ProfileError: If the top level is not a mapping.
            pydantic.ValidationError: If schema validation fails.

        Example:
            >>> profile = AppchainProfile.from_yaml("appchain.yaml")
            >>> profile.node.url
            'http://localhost:9944'
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")

        with path.open("r") as f:
            data = yaml.safe_load(f)

        if data is None:
            raise ProfileError(str(path), "file is empty")
        if not isinstance(data, dict):
            raise ProfileError(str(path), "top level must be a mapping")

        return cls.model_validate(data)
