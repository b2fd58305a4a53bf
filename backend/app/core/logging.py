import logging
from contextlib import contextmanager
from typing import Iterator

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = True) -> None:
    """Route structlog events through one processor chain.

    JSON lines for deployed environments, the colored console renderer for local work.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        structlog.processors.format_exc_info,
    ]
    renderer = structlog.processors.JSONRenderer() if json_logs else structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
        cache_logger_on_first_use=False,
    )
    logging.basicConfig(level=level.upper())


@contextmanager
def log_context(**values) -> Iterator[None]:
    """Bind ``values`` to every event logged inside the block."""
    tokens = structlog.contextvars.bind_contextvars(**values)
    try:
        yield
    finally:
        structlog.contextvars.reset_contextvars(**tokens)


def get_logger(name: str) -> structlog.BoundLogger:
    return structlog.get_logger(name)
