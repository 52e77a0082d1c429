"""Logging setup for paramgen.

Modules obtain loggers through :func:`get_logger`; the CLI calls
:func:`setup_logging` once to route records to a rich console handler
and, optionally, a log file.
"""

import logging
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER_NAME = "paramgen"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def get_logger(name: str) -> logging.Logger:
    """Return a logger under the ``paramgen`` hierarchy.

    Args:
        name: Usually ``__name__`` of the calling module.

    Returns:
        The configured logger.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def setup_logging(
    level: str = "WARNING",
    log_file: str | Path | None = None,
    console: Console | None = None,
) -> logging.Logger:
    """Configure the ``paramgen`` logger.

    Args:
        level: Log level name for the console handler.
        log_file: Optional file that receives DEBUG and above.
        console: Rich console to log to (stderr by default).

    Returns:
        The root ``paramgen`` logger.
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(logging.DEBUG)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        rich_tracebacks=True,
    )
    console_handler.setLevel(getattr(logging, str(level).upper(), logging.WARNING))
    logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(str(log_path), encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(file_handler)

    logger.debug("Logging configured (level=%s, file=%s)", level, log_file)
    return logger
