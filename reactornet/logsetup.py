"""Package-wide logging: a default logger that may be replaced or sent to a file."""

from __future__ import annotations

import logging
import logging.handlers
import sys
from dataclasses import dataclass, field
from typing import Any

_LOGGER_NAME = "reactornet"
_MAX_BYTES = 100 * 1024 * 1024
_BACKUP_COUNT = 3
_FILE_FORMAT = "%(asctime)s\t%(levelname)s\t%(filename)s:%(lineno)d\t%(message)s"
_CONSOLE_FORMAT = "%(asctime)s\t%(levelname)s\t%(message)s"
_ISO8601 = "%Y-%m-%dT%H:%M:%S%z"


@dataclass
class _State:
    logger: Any = field(default_factory=lambda: logging.getLogger(_LOGGER_NAME))
    level: int = logging.INFO
    handlers: list = field(default_factory=list)


_state = _State()


def _own_logger(handler: logging.Handler, lvl: int) -> logging.Logger:
    logger = logging.getLogger(_LOGGER_NAME)
    for old in _state.handlers:
        logger.removeHandler(old)
        old.close()
    handler.setLevel(lvl)
    logger.addHandler(handler)
    logger.setLevel(lvl)
    logger.propagate = False
    _state.handlers = [handler]
    return logger


def init(level: int) -> None:
    """Log to standard error at ``level`` and above."""
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(_CONSOLE_FORMAT, _ISO8601))
    _state.level = level
    _state.logger = _own_logger(handler, level)


def setup_logger_with_path(local_path: str, level: int) -> None:
    """Log to a size-rotated file at ``local_path`` at ``level`` and above."""
    if not local_path:
        raise ValueError("invalid local logger path")
    handler = logging.handlers.RotatingFileHandler(
        local_path, maxBytes=_MAX_BYTES, backupCount=_BACKUP_COUNT, encoding="utf-8"
    )
    handler.setFormatter(logging.Formatter(_FILE_FORMAT, _ISO8601))
    _state.level = level
    _state.logger = _own_logger(handler, level)


def setup_logger(logger: Any, level: int) -> None:
    """Use a caller-supplied logger; ``None`` leaves the current one in place."""
    if logger is None:
        return
    _state.level = level
    _state.logger = logger


def cleanup() -> None:
    """Flush the handlers installed by this module."""
    for handler in _state.handlers:
        handler.flush()


def log_err(err: BaseException | None) -> None:
    """Log ``err`` at error level unless it is None."""
    if err is not None:
        _state.logger.error("error occurs during runtime, %s", err)


def level() -> int:
    """Return the configured logging level."""
    return _state.level


def debug(msg: str, *args: Any) -> None:
    _state.logger.debug(msg, *args)


def info(msg: str, *args: Any) -> None:
    _state.logger.info(msg, *args)


def warning(msg: str, *args: Any) -> None:
    _state.logger.warning(msg, *args)


def error(msg: str, *args: Any) -> None:
    _state.logger.error(msg, *args)


def fatal(msg: str, *args: Any) -> None:
    """Log at error level; the process is not terminated."""
    _state.logger.error(msg, *args)