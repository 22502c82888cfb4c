"""
Structured logging setup.

All modules log through structlog bound loggers so every event carries
a snake_case name plus keyword context (file_id, status, counts).
"""

import logging
import sys

import structlog

from verification_worker import config

_configured = False


def configure_logging(level: str = None, json_output: bool = None) -> None:
    """Configure structlog and stdlib logging once per process."""
    global _configured

    if _configured:
        return

    level_name = (level or config.LOG_LEVEL).upper()
    use_json = config.LOG_JSON if json_output is None else json_output

    renderer = structlog.processors.JSONRenderer() if use_json else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(message)s",
        stream=sys.stdout,
    )

    _configured = True


def get_logger(name: str):
    return structlog.get_logger(name)
