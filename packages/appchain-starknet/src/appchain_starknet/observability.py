"""Diagnostics for appchain-starknet.

structlog events go to standard error, which keeps standard output free
for the one-line command result. Requests to the node are traced as
OpenTelemetry CLIENT spans; without an SDK configured they are no-ops.
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

import structlog
from opentelemetry import trace
from opentelemetry.trace import SpanKind, Status, StatusCode

if TYPE_CHECKING:
    from opentelemetry.trace import Span, Tracer
    from structlog.stdlib import BoundLogger

    from appchain_starknet.config import DeclareReceipt

_logger: BoundLogger | None = None
_tracer: Tracer | None = None

TRACER_NAME = "appchain.starknet"


def get_logger() -> BoundLogger:
    """Get the module logger, creating it if necessary.

    Returns:
        Configured structlog BoundLogger instance.

    Example:
        >>> logger = get_logger()
        >>> logger.info("artifact_loaded", path="build/token.sierra.json")
    """
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(TRACER_NAME)
    assert _logger is not None  # Type narrowing for mypy
    return _logger


def get_tracer() -> Tracer:
    """Get the OpenTelemetry tracer for appchain-starknet."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(TRACER_NAME)
    return _tracer


def configure_logging(
    *,
    log_level: str = "WARNING",
    json_format: bool = False,
    add_timestamp: bool = True,
) -> None:
    """Configure structured logging on standard error.

    Standard output is reserved for command results, so log records are
    always routed to stderr.

    Args:
        log_level: Minimum log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        json_format: If True, output JSON format. If False, output human-readable.
        add_timestamp: If True, add ISO timestamp to log entries.

    Example:
        >>> configure_logging(log_level="DEBUG")
    """
    processors: list[Any] = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if add_timestamp:
        processors.insert(1, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=False,
    )

    # force=True rebinds the handler to the current sys.stderr
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=getattr(logging, log_level.upper()),
        force=True,
    )


@contextmanager
def chain_operation(
    operation: str,
    *,
    node_url: str | None = None,
    account: str | None = None,
    artifact: str | None = None,
) -> Iterator[Span]:
    """Trace a request made to the node as a CLIENT span named ``chain.<operation>``.

    The tracer records an exception that escapes the block on the span;
    the exception is also logged at warning level and propagates unchanged.
    Results are attached to the yielded span with record_declare().

    Args:
        operation: Operation name (e.g., "declare", "get_chain_id").
        node_url: Node endpoint URL.
        account: Account address performing the operation.
        artifact: Artifact path involved in the operation.

    Yields:
        OpenTelemetry Span instance.

    Example:
        >>> with chain_operation("declare", node_url="http://localhost:9944") as s:
        ...     receipt = await account.declare(artifact)
        ...     record_declare(s, receipt)
    """
    attrs: dict[str, Any] = {"chain.operation": operation}
    for key, value in (("node_url", node_url), ("account", account), ("artifact", artifact)):
        if value:
            attrs[f"chain.{key}"] = value

    logger = get_logger().bind(operation=operation)
    tracer = get_tracer()
    with tracer.start_as_current_span(
        f"chain.{operation}", kind=SpanKind.CLIENT, attributes=attrs
    ) as s:
        logger.debug("chain_request_started", node_url=node_url)
        try:
            yield s
        except Exception as exc:
            logger.warning("chain_request_failed", error=str(exc) or type(exc).__name__)
            raise
        s.set_status(Status(StatusCode.OK))
        logger.debug("chain_request_completed")


def record_declare(s: Span, receipt: DeclareReceipt) -> None:
    """Attach the hashes of a submitted declare transaction to its span."""
    s.set_attribute("chain.transaction_hash", receipt.transaction_hash)
    s.set_attribute("chain.class_hash", receipt.class_hash)
    if receipt.accepted is not None:
        s.set_attribute("chain.accepted", receipt.accepted)
