# === FILE: webgrep/logger.py ===
"""Logging setup shared by every WebGrep module.

* One named logger, ``"WebGrep"``; modules import :data:`logger` directly::

      from webgrep.logger import logger
      logger.warning("Failed %s", url)

* The console handler writes to *stderr*, so reports printed to stdout
  stay machine-readable (``webgrep search -o json | jq``).
* An optional log file is rotated at 5 MiB, three backups kept.
* The CLI calls :func:`init_logging` once options are parsed; until then
  the logger runs at WARNING.
"""
from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Final, List, Union

# --------------------------------------------------------------------------- #
# Defaults                                                                    #
# --------------------------------------------------------------------------- #

_LOGGER_NAME: Final[str] = "WebGrep"
_DEFAULT_FORMAT: Final[str] = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ROTATE_BYTES: Final[int] = 5 * 1024 * 1024
_ROTATE_BACKUPS: Final[int] = 3

LevelT = Union[int, str]


# --------------------------------------------------------------------------- #
# Handlers                                                                    #
# --------------------------------------------------------------------------- #


def _build_handlers(log_file: Union[str, Path, None], formatter: logging.Formatter) -> List[logging.Handler]:
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stderr)]
    if log_file is not None:
        path = Path(log_file)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                filename=str(path),
                maxBytes=_ROTATE_BYTES,
                backupCount=_ROTATE_BACKUPS,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def _resolve_level(level: LevelT) -> int:
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


# --------------------------------------------------------------------------- #
# Public API                                                                  #
# --------------------------------------------------------------------------- #


def configure(
    *,
    level: LevelT = "WARNING",
    log_file: Union[str, Path, None] = None,
    log_format: str = _DEFAULT_FORMAT,
    replace_handlers: bool = True,
) -> logging.Logger:
    """Apply level, format and destinations to the WebGrep logger.

    Parameters
    ----------
    level
        ``logging`` constant or its name, case-insensitive (``"debug"``).
    log_file
        Also write to this file; parent directories are created.
    log_format
        :class:`logging.Formatter` format string used by all handlers.
    replace_handlers
        Drop handlers from an earlier call first; with *False* the new
        handlers are added next to the old ones.
    """
    lg = logging.getLogger(_LOGGER_NAME)
    lg.setLevel(_resolve_level(level))

    if replace_handlers:
        for old in list(lg.handlers):
            lg.removeHandler(old)
            old.close()

    for handler in _build_handlers(log_file, logging.Formatter(log_format)):
        lg.addHandler(handler)

    # records never reach the root logger
    lg.propagate = False
    return lg


def init_logging(
    level: LevelT = "WARNING",
    log_file: Union[str, Path, None] = None,
    log_format: str = _DEFAULT_FORMAT,
) -> logging.Logger:
    """Configure from CLI options, replacing whatever was set before."""
    return configure(level=level, log_file=log_file, log_format=log_format)


logger: logging.Logger = init_logging()

__all__ = ["logger", "configure", "init_logging"]
