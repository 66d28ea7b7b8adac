"""Unit tests for StarknetSigningAccount.

starknet-py is mocked at the module boundary; no node is contacted.
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from pathlib import Path
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from starknet_py.net.client_errors import ClientError

from appchain_starknet.account import StarknetSigningAccount, create_client
from appchain_starknet.artifacts import load_compiled_class, load_contract_class
from appchain_starknet.config import AccountConfig, DeclareReceipt, NodeConfig
from appchain_starknet.errors import DeclareSubmissionError

SEPOLIA_CHAIN_ID = "0x534e5f5345504f4c4941"


@pytest.fixture
def account_config() -> AccountConfig:
    return AccountConfig(address="0x4", private_key="0x00c1cf14")


@pytest.fixture
def client() -> MagicMock:
    """Create a mock FullNodeClient."""
    mock = MagicMock()
    mock.get_chain_id = AsyncMock(return_value=SEPOLIA_CHAIN_ID)
    return mock


@pytest.fixture
def artifacts(tmp_path: Path) -> tuple[Path, Path]:
    sierra = tmp_path / "token.sierra.json"
    casm = tmp_path / "token.casm.json"
    sierra.write_text(json.dumps({"sierra_program": ["0x1"]}))
    casm.write_text(json.dumps({"bytecode": ["0x2"]}))
    return sierra, casm


@pytest.fixture
def declare_result() -> MagicMock:
    result = MagicMock()
    result.hash = 0x10
    result.class_hash = 0xABC
    result.wait_for_acceptance = AsyncMock()
    return result


@pytest.fixture
def starknet(declare_result: MagicMock) -> Iterator[dict[str, MagicMock]]:
    """Patch starknet-py's Account, KeyPair and Contract in the account module."""
    with (
        patch("appchain_starknet.account.Account") as account_cls,
        patch("appchain_starknet.account.KeyPair") as key_pair_cls,
        patch("appchain_starknet.account.Contract") as contract_cls,
    ):
        contract_cls.declare_v3 = AsyncMock(return_value=declare_result)
        yield {"Account": account_cls, "KeyPair": key_pair_cls, "Contract": contract_cls}


class TestCreateClient:
    """Tests for create_client."""

    @patch("appchain_starknet.account.FullNodeClient")
    def test_binds_node_url(self, client_cls: MagicMock) -> None:
        """Test client is created for the node URL."""
        create_client(NodeConfig(url="http://localhost:9944"))

        client_cls.assert_called_once_with(node_url="http://localhost:9944")


class TestConstruction:
    """Tests for StarknetSigningAccount construction."""

    def test_no_network_on_construction(
        self, client: MagicMock, account_config: AccountConfig
    ) -> None:
        """Test constructing the account makes no request."""
        signer = StarknetSigningAccount(client, account_config)

        assert signer.address == "0x4"
        client.get_chain_id.assert_not_called()


class TestDeclare:
    """Tests for StarknetSigningAccount.declare."""

    def test_declare_with_casm(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test declare submits Sierra and CASM sources and returns hex hashes."""
        sierra, casm = artifacts
        artifact = load_contract_class(sierra)
        compiled = load_compiled_class(casm)
        signer = StarknetSigningAccount(client, account_config)

        receipt = asyncio.run(signer.declare(artifact, compiled_class=compiled))

        assert receipt == DeclareReceipt(transaction_hash="0x10", class_hash="0xabc")
        kwargs = starknet["Contract"].declare_v3.call_args.kwargs
        assert kwargs["compiled_contract"] == artifact.source
        assert kwargs["compiled_contract_casm"] == compiled.source
        assert kwargs["compiled_class_hash"] is None
        assert kwargs["auto_estimate"] is True

    def test_declare_binds_account_to_chain(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test the chain id is fetched once and the key pair is derived from config."""
        signer = StarknetSigningAccount(client, account_config)
        artifact = load_contract_class(artifacts[0])

        asyncio.run(signer.declare(artifact, compiled_class_hash=0x1))
        asyncio.run(signer.declare(artifact, compiled_class_hash=0x1))

        client.get_chain_id.assert_awaited_once()
        starknet["KeyPair"].from_private_key.assert_called_once_with("0x00c1cf14")
        starknet["Account"].assert_called_once_with(
            address="0x4",
            client=client,
            key_pair=starknet["KeyPair"].from_private_key.return_value,
            chain=int(SEPOLIA_CHAIN_ID, 16),
        )

    def test_configured_chain_id_skips_fetch(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test a configured chain id is used as-is."""
        signer = StarknetSigningAccount(client, account_config, chain_id=0x4D)

        asyncio.run(signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1))

        client.get_chain_id.assert_not_called()
        assert starknet["Account"].call_args.kwargs["chain"] == 0x4D

    def test_each_call_submits(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test repeated declares are independent submissions."""
        signer = StarknetSigningAccount(client, account_config)
        artifact = load_contract_class(artifacts[0])

        asyncio.run(signer.declare(artifact, compiled_class_hash=0x1))
        asyncio.run(signer.declare(artifact, compiled_class_hash=0x1))

        assert starknet["Contract"].declare_v3.await_count == 2

    def test_explicit_hash_wins_over_casm(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test an explicit compiled class hash suppresses the CASM source."""
        sierra, casm = artifacts
        signer = StarknetSigningAccount(client, account_config)

        asyncio.run(
            signer.declare(
                load_contract_class(sierra),
                compiled_class=load_compiled_class(casm),
                compiled_class_hash=0x99,
            )
        )

        kwargs = starknet["Contract"].declare_v3.call_args.kwargs
        assert kwargs["compiled_class_hash"] == 0x99
        assert kwargs["compiled_contract_casm"] is None

    def test_wait_for_acceptance(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
        declare_result: MagicMock,
    ) -> None:
        """Test wait=True awaits acceptance and marks the receipt."""
        signer = StarknetSigningAccount(client, account_config)

        receipt = asyncio.run(
            signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1, wait=True)
        )

        declare_result.wait_for_acceptance.assert_awaited_once()
        assert receipt.accepted is True

    def test_missing_compiled_class_fails_before_network(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test declare without CASM or hash never reaches the node."""
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError, match="Compiled class hash unavailable"):
            asyncio.run(signer.declare(load_contract_class(artifacts[0])))

        client.get_chain_id.assert_not_called()
        starknet["Contract"].declare_v3.assert_not_called()


class TestDeclareErrors:
    """Tests for error conversion in declare."""

    def test_client_error_keeps_message_and_code(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test node errors surface their message and JSON-RPC code."""
        starknet["Contract"].declare_v3.side_effect = ClientError(
            message="Invalid transaction nonce", code=52
        )
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError) as exc_info:
            asyncio.run(
                signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1)
            )

        assert "Invalid transaction nonce" in exc_info.value.message
        assert exc_info.value.code == 52
        assert "code=52" in str(exc_info.value)

    def test_transport_error(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test an unreachable node is a submission error."""
        client.get_chain_id.side_effect = ConnectionRefusedError("connection refused")
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError, match="connection refused"):
            asyncio.run(
                signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1)
            )

        starknet["Contract"].declare_v3.assert_not_called()

    def test_empty_message_uses_type_name(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test exceptions without text still produce a message."""
        starknet["Contract"].declare_v3.side_effect = TimeoutError()
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError, match="TimeoutError"):
            asyncio.run(
                signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1)
            )

    def test_private_key_not_in_error(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test the key never appears in a submission error."""
        starknet["Account"].side_effect = ValueError("bad account")
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError) as exc_info:
            asyncio.run(
                signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1)
            )

        assert "0x00c1cf14" not in str(exc_info.value)

    def test_acceptance_failure_keeps_hashes(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
        declare_result: MagicMock,
    ) -> None:
        """Test a submitted but unaccepted transaction is identifiable from the error."""
        declare_result.wait_for_acceptance.side_effect = TimeoutError("poll timed out")
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError) as exc_info:
            asyncio.run(
                signer.declare(
                    load_contract_class(artifacts[0]), compiled_class_hash=0x1, wait=True
                )
            )

        err = exc_info.value
        assert err.submitted is True
        assert err.transaction_hash == "0x10"
        assert err.class_hash == "0xabc"
        assert "poll timed out" in str(err)
        assert "transaction_hash=0x10" in str(err)
        assert "not accepted" in err.message
        assert starknet["Contract"].declare_v3.await_count == 1

    def test_rejected_submission_has_no_hashes(
        self,
        client: MagicMock,
        account_config: AccountConfig,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test a failure before submission does not claim a transaction exists."""
        starknet["Contract"].declare_v3.side_effect = ClientError(message="Fee too low", code=53)
        signer = StarknetSigningAccount(client, account_config)

        with pytest.raises(DeclareSubmissionError) as exc_info:
            asyncio.run(
                signer.declare(
                    load_contract_class(artifacts[0]), compiled_class_hash=0x1, wait=True
                )
            )

        assert exc_info.value.submitted is False
        assert "transaction_hash" not in str(exc_info.value)


class TestCairoVersion:
    """Tests for the account's Cairo version setting."""

    def test_not_passed_to_starknet_py(
        self,
        client: MagicMock,
        artifacts: tuple[Path, Path],
        starknet: dict[str, MagicMock],
    ) -> None:
        """Test the Cairo version is descriptive; starknet-py infers it."""
        config = AccountConfig(address="0x4", private_key="0x00c1cf14", cairo_version="0")
        signer = StarknetSigningAccount(client, config, chain_id=0x4D)

        asyncio.run(signer.declare(load_contract_class(artifacts[0]), compiled_class_hash=0x1))

        kwargs = starknet["Account"].call_args.kwargs
        assert set(kwargs) == {"address", "client", "key_pair", "chain"}
