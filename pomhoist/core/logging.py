"""Structured logging for the CLI: structlog rendered through stdlib logging."""

from __future__ import annotations

import logging
import os
import sys

import structlog


def setup_logging(level: str | None = None) -> None:
    """Route ``pomhoist.*`` loggers to stderr via structlog.

    ``POMHOIST_LOG_LEVEL`` (default INFO) is used unless *level* is given;
    ``POMHOIST_LOG_FORMAT=json`` switches the console renderer to JSON lines.
    stdout is left to command output.
    """
    log_level = (level or os.environ.get("POMHOIST_LOG_LEVEL", "INFO")).upper()
    as_json = os.environ.get("POMHOIST_LOG_FORMAT", "console").lower() == "json"

    pre_chain: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if as_json:
        pre_chain.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=pre_chain
        + [
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )
    logger = logging.getLogger("pomhoist")
    logger.handlers[:] = [handler]
    logger.setLevel(log_level)
    logger.propagate = False
