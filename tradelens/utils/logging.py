"""structlog setup for the data stores.

Every component logs through :func:`get_logger`, passing the name of the
store or provider it serves as bound context so a line such as
``refresh_failed`` can be traced back to ``store=snapshot``.

Output is human-readable by default and JSON when ``json_output`` is set
(the composition root sets it in production).  Records from the standard
``logging`` module, httpx's in particular, are rendered through the same
processor chain.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

# Libraries that log every request at INFO.
_CHATTY_LIBRARIES = ("httpx", "httpcore")


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]


def _renderer(json_output: bool) -> structlog.types.Processor:
    if json_output:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> None:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: Minimum level (DEBUG, INFO, WARNING, ERROR).
        json_output: Render JSON lines instead of console output.
    """
    level = logging.getLevelName(log_level.upper())
    shared = _shared_processors()
    renderer = _renderer(json_output)

    structlog.configure(
        processors=[*shared, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    # Request lines only at DEBUG.
    library_level = logging.DEBUG if level <= logging.DEBUG else logging.WARNING
    for name in _CHATTY_LIBRARIES:
        logging.getLogger(name).setLevel(library_level)


def get_logger(name: str, **context: Any) -> structlog.BoundLogger:
    """Return a logger named *name* with *context* bound to every event.

    Falls back to default settings if logging has not been configured yet.
    """
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name, **context)
