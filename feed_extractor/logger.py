"""Logging setup — structlog console stream and the per-run ``errorlog.txt``."""

from __future__ import annotations

import logging
import sys

import structlog

DIAGNOSTICS_LOGGER = "feed_extractor.diagnostics"


def setup_logging(level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog for console output.

    Args:
        level: Log level string (DEBUG, INFO, WARNING, ERROR).
        json_output: If True, output JSON lines; else human-readable console.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                renderer,
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level)

    # bs4 warns about markup that looks like a filename or URL
    for noisy in ("asyncio", "aiohttp", "chardet", "charset_normalizer", "bs4"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def attach_error_log(path: str) -> structlog.stdlib.BoundLogger:
    """Point the diagnostics channel at *path* and return a logger for it.

    Each event becomes one ``key=value`` line led by its ISO timestamp, level
    and event name. The file is opened on the first event, so a clean run
    leaves no ``errorlog.txt`` behind. A handler left by an earlier run is
    closed and replaced.

    The diagnostics logger does not propagate; callers mirror events to the
    console through their own module logger.
    """
    detach_error_log()
    diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)
    handler = logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                structlog.processors.KeyValueRenderer(
                    key_order=["timestamp", "level", "event"], drop_missing=True,
                ),
            ],
        )
    )
    diagnostics.addHandler(handler)
    diagnostics.setLevel(logging.WARNING)
    diagnostics.propagate = False

    # Bound explicitly so the file format does not depend on setup_logging()
    return structlog.wrap_logger(
        diagnostics,
        processors=[
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


def detach_error_log() -> None:
    """Close the diagnostics file handler, if any."""
    diagnostics = logging.getLogger(DIAGNOSTICS_LOGGER)
    for old in list(diagnostics.handlers):
        diagnostics.removeHandler(old)
        old.close()
