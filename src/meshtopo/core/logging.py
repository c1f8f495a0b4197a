"""
Structured logging for meshtopo.

Built on structlog (https://www.structlog.org/). Library modules only ever
call ``get_logger``; applications (the CLI, a host pipeline) decide how the
events are rendered by calling ``configure_logging`` once.

Usage::

    from meshtopo.core.logging import configure_logging, get_logger

    configure_logging(level="DEBUG")
    logger = get_logger(__name__)
    logger.info("weld_complete", merged=16, removed_faces=0)

Events are snake_case names with key/value context. ``mesh_context`` binds
mesh size information to every event emitted inside a ``with`` block.
"""

import logging
import sys
from contextlib import contextmanager
from typing import Any, Iterator, Optional

import structlog


def configure_logging(
    level: str = "INFO",
    json_output: bool = False,
    log_file: Optional[str] = None,
) -> None:
    """
    Route structlog events through stdlib logging with a single renderer.

    Args:
        level: Minimum log level name (DEBUG, INFO, WARNING, ...).
        json_output: Emit JSON lines instead of the colored console format.
        log_file: Optional file receiving the same records as stderr.
    """
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(format="%(message)s", level=log_level, handlers=handlers, force=True)

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
    ]

    renderer: structlog.types.Processor
    if json_output:
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    )
    for handler in logging.root.handlers:
        handler.setFormatter(formatter)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger named after the calling module."""
    return structlog.get_logger(name)


@contextmanager
def mesh_context(**values: Any) -> Iterator[None]:
    """
    Bind key/value pairs (e.g. ``vertices=8, faces=12``) to all events
    logged inside the block.
    """
    tokens = structlog.contextvars.bind_contextvars(**values)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)
