"""appchain declare command - Declare a contract class on the appchain.

Loads a Sierra contract class (and its CASM, when available), submits a
single declare transaction through the configured signing account and
reports the outcome as one line on standard output.

Exit codes:
    0: declared
    1: configuration error (profile, address, key)
    2: artifact missing or malformed; nothing was submitted
    3: declare transaction failed or was rejected
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import TYPE_CHECKING

import click
import yaml
from pydantic import ValidationError as PydanticValidationError

from appchain_cli.errors import (
    EXIT_ARTIFACT_ERROR,
    EXIT_DECLARE_ERROR,
    EXIT_SUCCESS,
    CLIError,
    format_pydantic_error,
    handle_file_not_found,
    handle_validation_error,
    handle_yaml_error,
)
from appchain_cli.output import error, print_json, success
from appchain_starknet.artifacts import (
    find_compiled_class,
    load_compiled_class,
    load_contract_class,
)
from appchain_starknet.config import NodeConfig
from appchain_starknet.errors import ArtifactLoadError, ProfileError, SecretNotFoundError
from appchain_starknet.factory import account_config_from_profile, create_signing_account
from appchain_starknet.observability import configure_logging, get_logger
from appchain_starknet.profile import AppchainProfile

if TYPE_CHECKING:
    from appchain_starknet.account import SigningAccount
    from appchain_starknet.artifacts import CompiledClassArtifact

DEFAULT_PROFILE = "appchain.yaml"
SUCCESS_LABEL = "Declare result:"
ERROR_LABEL = "Error during declaration:"


async def declare_from_path(
    sierra_path: str,
    account: SigningAccount,
    *,
    cwd: str | Path | None = None,
    casm_path: str | None = None,
    compiled_class_hash: int | None = None,
    wait: bool = False,
    json_output: bool = False,
) -> int:
    """Declare the contract class at sierra_path and report the outcome.

    Exactly one declare call is made when the artifact loads, none when it
    does not. Failures are reported, never raised or retried.

    Args:
        sierra_path: Sierra artifact path, relative to cwd.
        account: Signing account to declare with.
        cwd: Base directory for relative paths (default: process cwd).
        casm_path: CASM artifact path. When omitted, a CASM file written by
            the compiler next to the Sierra file is used if present.
        compiled_class_hash: Explicit compiled class hash; skips CASM lookup.
        wait: Wait for the transaction to be accepted.
        json_output: Print the receipt as JSON instead of a result line.

    Returns:
        Exit code: EXIT_SUCCESS, EXIT_ARTIFACT_ERROR or EXIT_DECLARE_ERROR.
    """
    logger = get_logger()

    try:
        artifact = load_contract_class(sierra_path, cwd=cwd)
        compiled_class: CompiledClassArtifact | None = None
        if compiled_class_hash is None:
            casm = casm_path if casm_path is not None else find_compiled_class(artifact.path)
            if casm is not None:
                compiled_class = load_compiled_class(casm, cwd=cwd)
    except ArtifactLoadError as exc:
        logger.warning("artifact_load_failed", path=exc.path, reason=exc.reason)
        error(str(exc))
        return EXIT_ARTIFACT_ERROR

    try:
        receipt = await account.declare(
            artifact,
            compiled_class=compiled_class,
            compiled_class_hash=compiled_class_hash,
            wait=wait,
        )
    except Exception as exc:
        error(f"{ERROR_LABEL} {str(exc) or type(exc).__name__}")
        return EXIT_DECLARE_ERROR

    if json_output:
        print_json(receipt.model_dump(mode="json"))
    else:
        success(f"{SUCCESS_LABEL} {receipt}")
    return EXIT_SUCCESS


def _load_profile(config_path: str | None) -> AppchainProfile:
    """Load the profile; a missing default profile means "use defaults"."""
    if config_path is None:
        if not Path(DEFAULT_PROFILE).exists():
            return AppchainProfile()
        config_path = DEFAULT_PROFILE

    try:
        return AppchainProfile.from_yaml(config_path)
    except FileNotFoundError:
        handle_file_not_found(config_path)
    except yaml.YAMLError as e:
        handle_yaml_error(e, config_path)
    except PydanticValidationError as e:
        handle_validation_error(e, config_path)
    except ProfileError as e:
        raise CLIError(str(e)) from None


def _parse_felt(value: str | None, option: str) -> int | None:
    if value is None:
        return None
    try:
        return int(value, 0)
    except ValueError:
        raise CLIError(f"{option} must be an integer or 0x-prefixed hex, got: {value}") from None


@click.command()
@click.argument("sierra_path", type=str)
@click.option(
    "--casm",
    "casm_path",
    type=str,
    default=None,
    help="Path to the CASM compiled class [default: found next to SIERRA_PATH]",
)
@click.option(
    "--compiled-class-hash",
    type=str,
    default=None,
    help="Compiled class hash, instead of a CASM file",
)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=False),
    default=None,
    envvar="APPCHAIN_CONFIG",
    help=f"Path to profile [default: ./{DEFAULT_PROFILE} if present]",
)
@click.option("--node-url", envvar="APPCHAIN_NODE_URL", default=None, help="Node RPC URL")
@click.option("--chain-id", envvar="APPCHAIN_CHAIN_ID", default=None, help="Chain id")
@click.option(
    "--address", envvar="APPCHAIN_ACCOUNT_ADDRESS", default=None, help="Account address"
)
@click.option(
    "--private-key",
    envvar="APPCHAIN_PRIVATE_KEY",
    default=None,
    help="Account private key (prefer the APPCHAIN_PRIVATE_KEY variable)",
)
@click.option("--wait/--no-wait", default=False, help="Wait for the transaction to be accepted")
@click.option("--json", "json_output", is_flag=True, default=False, help="Print receipt as JSON")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="WARNING",
    help="Log level for diagnostics on stderr",
)
def declare(
    sierra_path: str,
    casm_path: str | None,
    compiled_class_hash: str | None,
    config_path: str | None,
    node_url: str | None,
    chain_id: str | None,
    address: str | None,
    private_key: str | None,
    wait: bool,
    json_output: bool,
    log_level: str,
) -> None:
    """Declare a contract class on the appchain.

    SIERRA_PATH is the compiled Sierra contract class, relative to the
    current directory.

    Examples:

        appchain declare target/dev/token_Token.contract_class.json

        appchain declare token.sierra.json --casm token.casm.json --wait

        appchain declare token.sierra.json --compiled-class-hash 0x1234 --json
    """
    configure_logging(log_level=log_level)

    profile = _load_profile(config_path)
    class_hash = _parse_felt(compiled_class_hash, "--compiled-class-hash")

    overrides: dict[str, object] = {}
    if node_url is not None:
        overrides["url"] = node_url
    if chain_id is not None:
        overrides["chain_id"] = chain_id

    try:
        node = NodeConfig.model_validate({**profile.node.model_dump(), **overrides})
        account_config = account_config_from_profile(
            profile, address=address, private_key=private_key
        )
    except PydanticValidationError as e:
        raise CLIError(f"Invalid configuration:\n{format_pydantic_error(e)}") from None
    except SecretNotFoundError as e:
        raise CLIError(str(e)) from None

    account = create_signing_account(node, account_config)

    exit_code = asyncio.run(
        declare_from_path(
            sierra_path,
            account,
            casm_path=casm_path,
            compiled_class_hash=class_hash,
            wait=wait,
            json_output=json_output,
        )
    )
    if exit_code != EXIT_SUCCESS:
        raise SystemExit(exit_code)
