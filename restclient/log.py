"""
structlog setup shared by applications embedding the client.
"""
import logging
import sys
from typing import Union

import structlog


def configure_logging(level: Union[str, int] = "INFO", stream=None, json: bool = True) -> None:
    """Route structlog through stdlib logging, rendering one event per line."""
    if isinstance(level, str):
        level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(
        format="%(message)s",
        stream=stream or sys.stdout,
        level=level,
    )

    renderer = structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer()

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
        cache_logger_on_first_use=True,
    )


def configure_from(config) -> None:
    """Configure logging from the `logging` section of a Config."""
    log_config = config.logging
    configure_logging(
        level=log_config.get('level', 'INFO'),
        json=log_config.get('format', 'json') == 'json',
    )
