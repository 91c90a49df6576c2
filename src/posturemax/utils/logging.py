"""Logging setup for the posturemax process.

Every module logs through ``logging.getLogger(__name__)`` under the
``posturemax`` namespace; this module attaches the handlers once at
startup from :class:`LoggingConfig`.
"""

from __future__ import annotations

import logging
import sys

from posturemax.config.settings import LoggingConfig

# Chatty per-request loggers of the control endpoint and its client.
NOISY_LOGGERS = ("uvicorn.access", "httpx", "httpcore")


def setup_logging(config: LoggingConfig | None = None) -> logging.Logger:
    """Configure the ``posturemax`` logger.

    Calling this again replaces the handlers it installed earlier, so
    ``-v`` can raise the level after settings are loaded.

    Args:
        config: Logging configuration. If None, uses defaults
                (INFO level, stderr output).

    Returns:
        The configured ``posturemax`` logger.
    """
    if config is None:
        config = LoggingConfig()

    level = getattr(logging, config.level.upper(), logging.INFO)
    app_logger = logging.getLogger("posturemax")
    app_logger.setLevel(level)

    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()

    formatter = logging.Formatter(config.format)

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    app_logger.addHandler(console_handler)

    if config.file:
        file_handler = logging.FileHandler(config.file)
        file_handler.setFormatter(formatter)
        app_logger.addHandler(file_handler)

    if level > logging.DEBUG:
        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    app_logger.debug("Logging initialized at %s level", config.level)
    return app_logger
