"""Structured logging for the CLI and MCP server: structlog over stdlib logging, on stderr."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

DEFAULT_LEVEL = "WARNING"
FORMATS = ("console", "json")

# Third-party loggers that only add noise at INFO.
_QUIET = ("httpx", "httpcore", "mcp")


def resolve_level(level: str | None = None) -> str:
    """*level* if given, else ``DOCPLS_LOG_LEVEL``, else WARNING."""
    return (level or os.environ.get("DOCPLS_LOG_LEVEL") or DEFAULT_LEVEL).upper()


def resolve_format() -> str:
    fmt = os.environ.get("DOCPLS_LOG_FORMAT", "console").strip().lower()
    return fmt if fmt in FORMATS else "console"


def build_processors(log_format: str) -> list[structlog.types.Processor]:
    """Pre-render chain shared by structlog and foreign stdlib records.

    Timestamps are only added for json output; console lines go to a
    terminal next to the command's own output.
    """
    processors: list[structlog.types.Processor] = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
    ]
    if log_format == "json":
        processors.append(structlog.processors.TimeStamper(fmt="iso", utc=True))
    processors.append(structlog.processors.format_exc_info)
    return processors


def setup_logging(level: str | None = None) -> None:
    """Configure logging once per process.

    ``DOCPLS_LOG_FORMAT`` selects ``console`` (default) or ``json``. Output
    always goes to stderr since stdout carries command output and the MCP
    stdio transport.
    """
    log_level = resolve_level(level)
    log_format = resolve_format()
    processors = build_processors(log_format)

    if log_format == "json":
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "docpls": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": processors,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        renderer,
                    ],
                },
            },
            "handlers": {
                "stderr": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stderr",
                    "formatter": "docpls",
                },
            },
            "root": {"handlers": ["stderr"], "level": log_level},
            "loggers": {name: {"level": "WARNING"} for name in _QUIET},
        }
    )
