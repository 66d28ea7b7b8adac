"""Signing account over starknet-py.

This module provides StarknetSigningAccount, which binds AccountConfig
credentials to a FullNodeClient and submits declare transactions with
structured logging and OpenTelemetry spans.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from starknet_py.contract import Contract
from starknet_py.net.account.account import Account
from starknet_py.net.client_errors import ClientError
from starknet_py.net.full_node_client import FullNodeClient
from starknet_py.net.signer.stark_curve_signer import KeyPair

from appchain_starknet.config import AccountConfig, DeclareReceipt, NodeConfig
from appchain_starknet.errors import DeclareSubmissionError
from appchain_starknet.observability import chain_operation, get_logger, record_declare

if TYPE_CHECKING:
    from structlog.stdlib import BoundLogger

    from appchain_starknet.artifacts import CompiledClassArtifact, ContractArtifact


class SigningAccount(Protocol):
    """What the declare workflow needs from an account."""

    @property
    def address(self) -> str: ...

    async def declare(
        self,
        artifact: ContractArtifact,
        *,
        compiled_class: CompiledClassArtifact | None = None,
        compiled_class_hash: int | None = None,
        wait: bool = False,
    ) -> DeclareReceipt: ...


def create_client(node: NodeConfig) -> FullNodeClient:
    """Create a JSON-RPC client bound to a node endpoint.

    No request is made until the client is used.
    """
    return FullNodeClient(node_url=node.url)


class StarknetSigningAccount:
    """Account credentials bound to a node client.

    The underlying starknet-py Account is built on first use, since it
    needs the chain id and that may have to be fetched from the node.
    Construction itself performs no network I/O.

    Attributes:
        config: Account credentials.
        node_url: Endpoint the client is bound to, for logging.

    Note:
        Use create_signing_account() instead of direct instantiation.

    Example:
        >>> account = StarknetSigningAccount(create_client(node), account_config)
        >>> receipt = await account.declare(load_contract_class("token.sierra.json"),
        ...                                 compiled_class_hash=0x1234)
    """

    def __init__(
        self,
        client: FullNodeClient,
        config: AccountConfig,
        *,
        chain_id: int | None = None,
        node_url: str | None = None,
        logger: BoundLogger | None = None,
    ) -> None:
        self.config = config
        self.node_url = node_url
        self._client = client
        self._chain_id = chain_id
        self._logger = logger or get_logger()
        self._account: Account | None = None

    @property
    def address(self) -> str:
        return self.config.address

    async def _resolve_chain_id(self) -> int:
        if self._chain_id is None:
            with chain_operation("get_chain_id", node_url=self.node_url):
                self._chain_id = int(await self._client.get_chain_id(), 16)
        return self._chain_id

    async def _get_account(self) -> Account:
        if self._account is None:
            chain_id = await self._resolve_chain_id()
            key_pair = KeyPair.from_private_key(self.config.private_key.get_secret_value())
            self._account = Account(
                address=self.config.address,
                client=self._client,
                key_pair=key_pair,
                chain=chain_id,
            )
            self._logger.debug(
                "account_bound",
                address=self.config.address,
                chain_id=hex(chain_id),
                cairo_version=self.config.cairo_version,
            )
        return self._account

    async def declare(
        self,
        artifact: ContractArtifact,
        *,
        compiled_class: CompiledClassArtifact | None = None,
        compiled_class_hash: int | None = None,
        wait: bool = False,
    ) -> DeclareReceipt:
        """Sign and submit a declare transaction for a Sierra class.

        Fees are estimated by the node. Each call submits a new transaction;
        nothing is deduplicated or retried.

        Args:
            artifact: Loaded Sierra contract class.
            compiled_class: CASM artifact used to derive the compiled class hash.
            compiled_class_hash: Explicit compiled class hash. Takes
                precedence over compiled_class.
            wait: If True, wait until the transaction is accepted.

        Returns:
            DeclareReceipt with transaction and class hashes.

        Raises:
            DeclareSubmissionError: On any signing, submission or acceptance
                failure, or when no compiled class hash is available. When the
                transaction was submitted but not accepted, the error carries
                its transaction and class hashes.
        """
        if compiled_class is None and compiled_class_hash is None:
            raise DeclareSubmissionError(
                "Compiled class hash unavailable: provide the CASM artifact "
                "or an explicit compiled class hash"
            )

        with chain_operation(
            "declare",
            node_url=self.node_url,
            account=self.config.address,
            artifact=str(artifact.path),
        ) as s:
            try:
                account = await self._get_account()
                result = await Contract.declare_v3(
                    account,
                    compiled_contract=artifact.source,
                    compiled_contract_casm=(
                        compiled_class.source
                        if compiled_class is not None and compiled_class_hash is None
                        else None
                    ),
                    compiled_class_hash=compiled_class_hash,
                    auto_estimate=True,
                )
            except Exception as exc:
                raise _to_submission_error(exc) from exc

            receipt = DeclareReceipt(
                transaction_hash=hex(result.hash),
                class_hash=hex(result.class_hash),
            )
            record_declare(s, receipt)
            self._logger.info(
                "declare_submitted",
                transaction_hash=receipt.transaction_hash,
                class_hash=receipt.class_hash,
            )

            if wait:
                try:
                    await result.wait_for_acceptance()
                except Exception as exc:
                    # Submitted already; the error keeps the hashes
                    raise _to_submission_error(
                        exc, receipt=receipt, prefix="Declare transaction not accepted"
                    ) from exc
                receipt = receipt.model_copy(update={"accepted": True})
                record_declare(s, receipt)

        return receipt


def _to_submission_error(
    exc: Exception,
    *,
    receipt: DeclareReceipt | None = None,
    prefix: str | None = None,
) -> DeclareSubmissionError:
    """Convert starknet-py and transport exceptions into DeclareSubmissionError."""
    code: int | None = None
    if isinstance(exc, ClientError) and isinstance(exc.code, int):
        code = exc.code
    message = str(getattr(exc, "message", None) or str(exc) or type(exc).__name__)
    if prefix:
        message = f"{prefix}: {message}"
    return DeclareSubmissionError(
        message,
        code=code,
        transaction_hash=receipt.transaction_hash if receipt else None,
        class_hash=receipt.class_hash if receipt else None,
    )
