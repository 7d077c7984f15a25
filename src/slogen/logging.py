"""
Logging setup.

slogen logs through structlog over the stdlib ``logging`` module. Only the
``slogen`` logger tree is touched, so applications embedding the generator
keep their own root handlers.
"""

import logging
from typing import Any

import structlog

LOGGER_NAME = "slogen"


def configure_logging(level: int | str = logging.INFO, json_output: bool = True) -> None:
    """Configure structlog and a single handler on the ``slogen`` logger."""

    renderer: Any = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root = logging.getLogger(LOGGER_NAME)
    root.setLevel(level)
    if not any(h.get_name() == LOGGER_NAME for h in root.handlers):
        handler = logging.StreamHandler()
        handler.set_name(LOGGER_NAME)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)
        root.propagate = False


def plugin_logger(plugin_id: str, **kwargs: Any) -> structlog.stdlib.BoundLogger:
    """Logger handed to plugin factories, tagged with the plugin ID."""

    return structlog.get_logger(f"{LOGGER_NAME}.plugins").bind(plugin=plugin_id, **kwargs)
