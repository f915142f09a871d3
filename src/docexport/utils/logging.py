"""
Logging Setup.

Installs handlers on the ``docexport`` logger hierarchy: a Rich console
handler on stderr and an optional plain-text file handler.
"""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

from docexport.config.models import LoggingConfig

LOGGER_NAME = "docexport"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return a logger under the docexport hierarchy.

    Args:
        name: Dotted suffix, e.g. ``"export.orchestrator"``

    Returns:
        The ``docexport`` logger or one of its children
    """
    full_name = f"{LOGGER_NAME}.{name}" if name else LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    config: Optional[LoggingConfig] = None,
    verbose: bool = False,
    console: Optional[Console] = None,
) -> logging.Logger:
    """Configure the docexport logger.

    Handlers installed by an earlier call are replaced, so the CLI can be
    invoked repeatedly in one process without duplicate output.

    Args:
        config: Logging configuration (defaults if omitted)
        verbose: Force DEBUG level regardless of config
        console: Rich console for the stream handler (stderr if omitted)

    Returns:
        The configured ``docexport`` logger
    """
    config = config or LoggingConfig()
    level = logging.DEBUG if verbose else getattr(logging, config.level.value)

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
    )
    stream_handler.setLevel(level)
    logger.addHandler(stream_handler)

    if config.file:
        log_path = Path(config.file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(config.format))
        logger.addHandler(file_handler)

    return logger
