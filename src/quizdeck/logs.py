"""JSON-lines run log for quizdeck.

Every ``quizdeck`` invocation appends to ``<log_dir>/quizdeck.log``. Records
are single JSON objects; the quiz context passed through ``extra=`` (quiz id,
totals, bank and config paths) is copied onto the object so a session can be
reconstructed with ``jq``. ``--verbose`` also echoes records to stderr through
Rich.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

LOGGER_NAME = "quizdeck"
LOG_FILENAME = "quizdeck.log"

_ROTATE_BYTES = 512 * 1024
_ROTATE_KEEP = 3
_CONTEXT_FIELDS = ("quiz_id", "total", "quizzes", "state", "path", "config_path")


class SessionLogFormatter(logging.Formatter):
    """Render a record and its quiz context as one JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": datetime.fromtimestamp(
                record.created, tz=timezone.utc
            ).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for field in _CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is None:
                continue
            if not isinstance(value, (str, int, float, bool)):
                value = str(value)
            entry[field] = value
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=True)


def setup_logging(
    log_dir: Path, *, level: str = "INFO", verbose: bool = False
) -> Path:
    """Point the ``quizdeck`` logger at ``log_dir`` and return the log path.

    Repeated calls keep a single file handler. When ``log_dir`` changes the
    old handler is closed and replaced. Unwritable directories fall back to
    a ``quizdeck-logs`` folder under the system temp dir.
    """

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG)
    logger.propagate = False

    handler = _swap_file_handler(logger, _usable_dir(log_dir) / LOG_FILENAME)
    handler.setLevel(logging.DEBUG if verbose else _level_number(level))

    echo = [h for h in logger.handlers if isinstance(h, RichHandler)]
    if verbose and not echo:
        logger.addHandler(
            RichHandler(
                console=Console(stderr=True),
                level=logging.DEBUG,
                show_path=False,
            )
        )
    elif not verbose:
        for stale in echo:
            logger.removeHandler(stale)
    return Path(handler.baseFilename)


def fallback_log_dir() -> Path:
    return Path(tempfile.gettempdir()) / "quizdeck-logs"


def _level_number(level: str) -> int:
    number = logging.getLevelName(level.upper())
    return number if isinstance(number, int) else logging.INFO


def _usable_dir(log_dir: Path) -> Path:
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        log_dir = fallback_log_dir()
        log_dir.mkdir(parents=True, exist_ok=True)
    return log_dir


def _swap_file_handler(
    logger: logging.Logger, target: Path
) -> RotatingFileHandler:
    current = next(
        (h for h in logger.handlers if isinstance(h, RotatingFileHandler)),
        None,
    )
    if current is not None:
        if current.baseFilename == os.path.abspath(target):
            return current
        logger.removeHandler(current)
        current.close()

    try:
        handler = _open_handler(target)
    except OSError:
        handler = _open_handler(_usable_dir(fallback_log_dir()) / LOG_FILENAME)
    logger.addHandler(handler)
    return handler


def _open_handler(path: Path) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        path,
        maxBytes=_ROTATE_BYTES,
        backupCount=_ROTATE_KEEP,
        encoding="utf-8",
    )
    handler.setFormatter(SessionLogFormatter())
    return handler
