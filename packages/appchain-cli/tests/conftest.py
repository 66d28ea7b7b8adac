"""Shared test fixtures for appchain-cli tests.

Provides CliRunner fixtures, artifact helpers and a recording stand-in
for the signing account.
"""

from __future__ import annotations

import shutil
from collections.abc import Generator
from pathlib import Path
from typing import Any

import pytest
from click.testing import CliRunner

from appchain_starknet.config import DeclareReceipt
from appchain_starknet.observability import configure_logging

SIERRA_FILENAME = "token.sierra.json"
CASM_FILENAME = "token.casm.json"
PROFILE_FILENAME = "appchain.yaml"


class StubAccount:
    """Signing account double that records declare calls.

    Returns ``receipt`` on success, or raises ``failure`` when set.
    """

    def __init__(
        self,
        receipt: DeclareReceipt | None = None,
        failure: Exception | None = None,
        address: str = "0x4",
    ) -> None:
        self.receipt = receipt or DeclareReceipt(transaction_hash="0x1", class_hash="0xABC")
        self.failure = failure
        self.address = address
        self.calls: list[dict[str, Any]] = []

    async def declare(self, artifact: Any, **kwargs: Any) -> DeclareReceipt:
        self.calls.append({"artifact": artifact, **kwargs})
        if self.failure is not None:
            raise self.failure
        return self.receipt


@pytest.fixture
def cli_runner() -> CliRunner:
    """Create a Click test runner."""
    return CliRunner()


@pytest.fixture
def isolated_runner(cli_runner: CliRunner) -> Generator[CliRunner, None, None]:
    """Create a Click test runner inside a temporary working directory.

    Yields:
        CliRunner instance with isolated filesystem.
    """
    with cli_runner.isolated_filesystem():
        yield cli_runner


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def project_dir(tmp_path: Path, fixtures_dir: Path) -> Path:
    """Lay out build/token.sierra.json (no CASM) under tmp_path.

    Returns:
        The project root, to be used as the working directory.
    """
    build = tmp_path / "build"
    build.mkdir()
    shutil.copy(fixtures_dir / SIERRA_FILENAME, build / SIERRA_FILENAME)
    return tmp_path


@pytest.fixture
def stub_account() -> StubAccount:
    """Create a succeeding stub account."""
    return StubAccount()


@pytest.fixture
def account_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Provide address and key through the CLI's environment variables."""
    monkeypatch.setenv("APPCHAIN_ACCOUNT_ADDRESS", "0x4")
    monkeypatch.setenv("APPCHAIN_PRIVATE_KEY", "0x00c1cf14")
    for name in ("APPCHAIN_CONFIG", "APPCHAIN_NODE_URL", "APPCHAIN_CHAIN_ID"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def make_account() -> type[StubAccount]:
    """Return the StubAccount class for tests that need custom doubles."""
    return StubAccount


@pytest.fixture(autouse=True)
def stderr_logging() -> None:
    """Route structlog to stderr so stdout only carries command output."""
    configure_logging(log_level="WARNING")
