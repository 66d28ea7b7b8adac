"""Unit tests for logging and span helpers."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock, call

import pytest

from appchain_starknet.config import DeclareReceipt
from appchain_starknet.observability import (
    chain_operation,
    configure_logging,
    get_logger,
    record_declare,
)


class TestConfigureLogging:
    """Tests for configure_logging."""

    def test_sets_root_level(self) -> None:
        configure_logging(log_level="DEBUG")

        assert logging.getLogger().level == logging.DEBUG

        configure_logging(log_level="WARNING")

        assert logging.getLogger().level == logging.WARNING

    def test_logs_go_to_stderr(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test log records never reach stdout."""
        configure_logging(log_level="INFO")

        get_logger().info("artifact_loaded", path="token.json")

        captured = capsys.readouterr()
        assert "artifact_loaded" in captured.err
        assert "artifact_loaded" not in captured.out


class TestChainOperation:
    """Tests for chain_operation."""

    def test_yields_span(self) -> None:
        with chain_operation("declare", node_url="http://localhost:9944") as span:
            assert span is not None

    def test_reraises(self) -> None:
        """Test failures inside the span propagate unchanged."""
        with pytest.raises(RuntimeError, match="boom"):
            with chain_operation("declare", account="0x4"):
                raise RuntimeError("boom")

    def test_failure_logged_as_warning(self, capsys: pytest.CaptureFixture[str]) -> None:
        """Test a failing request is logged on stderr with its error."""
        configure_logging(log_level="WARNING")

        with pytest.raises(TimeoutError):
            with chain_operation("get_chain_id", node_url="http://localhost:9944"):
                raise TimeoutError()

        err = capsys.readouterr().err
        assert "chain_request_failed" in err
        assert "TimeoutError" in err


class TestRecordDeclare:
    """Tests for record_declare."""

    def test_sets_hash_attributes(self) -> None:
        span = MagicMock()

        record_declare(span, DeclareReceipt(transaction_hash="0x10", class_hash="0xabc"))

        span.set_attribute.assert_has_calls(
            [call("chain.transaction_hash", "0x10"), call("chain.class_hash", "0xabc")]
        )
        assert span.set_attribute.call_count == 2

    def test_sets_acceptance_when_known(self) -> None:
        span = MagicMock()

        record_declare(
            span, DeclareReceipt(transaction_hash="0x10", class_hash="0xabc", accepted=True)
        )

        span.set_attribute.assert_any_call("chain.accepted", True)
