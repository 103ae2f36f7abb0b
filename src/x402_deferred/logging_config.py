"""Structured logging configuration using structlog.

JSON lines in production, colored console output in development. Every
entry emitted while serving a request carries the request_id bound by the
API middleware, so a single voucher can be traced through field validation,
signer recovery and both ledger reads.

Usage:
    from x402_deferred.logging_config import setup_logging, get_logger
    setup_logging(log_level="INFO", json_logs=True)
    logger = get_logger(__name__)
    logger.info("verifier.deferred.valid", payer="0xabc...")
"""

from __future__ import annotations

import logging
import sys

import structlog

# Longer than a bytes32 id: signatures, calldata
_MAX_HEX_LENGTH = 66


def abbreviate_long_hex(
    _logger: object, _method_name: str, event_dict: structlog.types.EventDict
) -> structlog.types.EventDict:
    """Shorten hex blobs such as 65-byte signatures to head...tail in log entries."""
    for key, value in event_dict.items():
        if isinstance(value, str) and value.startswith("0x") and len(value) > _MAX_HEX_LENGTH:
            event_dict[key] = f"{value[:10]}...{value[-8:]}"
    return event_dict


def setup_logging(log_level: str = "DEBUG", json_logs: bool = False) -> None:
    """Configure structlog on top of the stdlib logging machinery.

    Args:
        log_level: Standard Python log level string (DEBUG, INFO, WARNING, etc.)
        json_logs: If True, output JSON (for production). If False, colored console.
    """
    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        abbreviate_long_hex,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, log_level.upper(), logging.DEBUG))

    # web3 logs every JSON-RPC request at DEBUG
    for noisy_logger in ("uvicorn.access", "web3", "urllib3", "httpx", "httpcore", "aiohttp"):
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance.

    Args:
        name: Optional logger name. If None, uses the calling module's name.
    """
    return structlog.get_logger(name)
