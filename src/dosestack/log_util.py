"""Package logging for dosestack.

Modules log through children of the ``dosestack`` logger. Nothing is
shown until an application attaches a handler, which the command line
does with ``enable_console_logging``.
"""

import logging
from logging import Logger

from rich.logging import RichHandler

PACKAGE_LOGGER_NAME = "dosestack"

root_logger = logging.getLogger(PACKAGE_LOGGER_NAME)
logger_registry: dict[str, Logger] = {}


def get_logger(name: str) -> Logger:
    """Return the package child logger for a module, created on first use.

    Args:
        name (str): Relative name such as ``"arrays.volume"`` or a full
            module name such as ``"dosestack.arrays.volume"``.

    Returns:
        logging.Logger: Child of the package root logger.
    """
    prefix = f"{PACKAGE_LOGGER_NAME}."
    if name.startswith(prefix):
        name = name[len(prefix):]
    if name not in logger_registry:
        logger_registry[name] = root_logger.getChild(name)
    return logger_registry[name]


def _resolve_level(level: int | str) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown logging level: {level!r}")
    return resolved


def set_logging_level(level: int | str) -> None:
    """Set the level of the package logger, its children and their handlers.

    Args:
        level: Numeric level (``logging.DEBUG``) or level name (``"debug"``).

    Raises:
        ValueError: If a level name is not known to logging.
    """
    level = _resolve_level(level)
    for logger in (root_logger, *logger_registry.values()):
        logger.setLevel(level)
        for handler in logger.handlers:
            handler.setLevel(level)


def enable_console_logging(verbose: bool = False) -> RichHandler:
    """Send package log records to the console through rich.

    The handler is attached once; later calls only change the level,
    DEBUG when verbose and WARNING otherwise.

    Returns:
        RichHandler: The handler attached to the package logger.
    """
    handler = next(
        (h for h in root_logger.handlers if isinstance(h, RichHandler)), None
    )
    if handler is None:
        handler = RichHandler(show_path=False)
        root_logger.addHandler(handler)
    set_logging_level(logging.DEBUG if verbose else logging.WARNING)
    return handler
