"""appchain validate command - Validate an appchain.yaml profile."""

from __future__ import annotations

from pathlib import Path

import click

from appchain_cli.errors import EXIT_USER_ERROR
from appchain_cli.output import error, success, warning


@click.command()
@click.option(
    "-f",
    "--file",
    "file_path",
    type=click.Path(exists=False),
    default="./appchain.yaml",
    help="Path to appchain.yaml [default: ./appchain.yaml]",
)
def validate(file_path: str) -> None:
    """Validate an appchain.yaml profile.

    Checks the profile against its schema and reports whether the account's
    private key reference can be resolved in the current environment.

    Examples:

        appchain validate

        appchain validate --file deploy/appchain.yaml
    """
    path = Path(file_path)

    if not path.exists():
        error(f"File not found: {file_path}")
        raise SystemExit(EXIT_USER_ERROR)

    try:
        # Import here to avoid heavy imports at CLI startup
        from appchain_starknet.profile import AppchainProfile

        profile = AppchainProfile.from_yaml(path)
    except Exception as e:
        from pydantic import ValidationError as PydanticValidationError

        from appchain_cli.errors import format_pydantic_error, handle_yaml_error

        if "yaml" in type(e).__module__.lower():
            handle_yaml_error(e, file_path)
        elif isinstance(e, PydanticValidationError):
            formatted = format_pydantic_error(e)
            error(f"Invalid configuration in {file_path}:\n{formatted}")
            raise SystemExit(EXIT_USER_ERROR) from None
        else:
            error(f"Validation failed: {e}")
            raise SystemExit(EXIT_USER_ERROR) from None

    success(f"Profile valid (node: {profile.node.url})")

    if profile.account is None:
        warning("No account section; pass --address and --private-key when declaring")
    elif profile.account.private_key is None:
        warning("No private key reference; pass --private-key when declaring")
    else:
        from appchain_starknet.errors import SecretNotFoundError

        try:
            profile.account.private_key.resolve()
        except SecretNotFoundError as e:
            warning(str(e))
