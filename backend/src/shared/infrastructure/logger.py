"""Process-wide log sink and the injectable ``AppLogger`` capability.

Every component logs through an ``AppLogger`` obtained from ``get_logger``. Lines
carry the call site (``file:line``), a level tag, the calling function and the
message, followed by ``key=value`` attributes in the order they were passed::

    2026/10/19 13:50:02 database.py:88	[WARN]	[connect]	Database ping failed attempt=1 max_retries=5

Request lines use a denser fixed layout::

    2026/10/19 13:50:07 main.py:61	[INFO]	[log_requests] GET /api/users status=200 duration=1.204ms
"""

from __future__ import annotations

import inspect
import logging
import sys
import time
from pathlib import Path
from typing import Any, TextIO

from loguru import logger

from shared.config import Settings

_LEVEL_TAGS = {"WARNING": "WARN"}
_LEVEL_NAMES = {"WARN": "WARNING"}
_TIME = "{time:YYYY/MM/DD HH:mm:ss}"

_handler_ids: list[int] = []
_initialized = False


def _format(record: dict) -> str:
    tag = _LEVEL_TAGS.get(record["level"].name, record["level"].name)
    if record["extra"].get("request"):
        return _TIME + " {file.name}:{line}\t[" + tag + "]\t[{function}] {message}\n{exception}"
    return _TIME + " {file.name}:{line}\t[" + tag + "]\t[{function}]\t{message}\n{exception}"


def retention_policy(max_backups: int, max_age_days: int, active: Path):
    """Keep at most ``max_backups`` rotated segments, none older than ``max_age_days``.

    ``active`` is the live log file; it is never pruned or counted.
    """
    active = active.resolve()

    def prune(files: list[str]) -> None:
        cutoff = time.time() - max_age_days * 86400
        segments = sorted(
            (p for p in map(Path, files) if p.resolve() != active),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        for index, segment in enumerate(segments):
            if index >= max_backups or segment.stat().st_mtime < cutoff:
                segment.unlink(missing_ok=True)

    return prune


class InterceptHandler(logging.Handler):
    """Redirect standard ``logging`` records (uvicorn, SQLAlchemy) into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        # The request middleware writes the access log.
        if record.name == "uvicorn.access":
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = inspect.currentframe(), 0
        while frame and (depth == 0 or frame.f_code.co_filename == logging.__file__):
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def init_logging(settings: Settings, console: TextIO | None = None) -> None:
    """Install the console and rotating file sinks. Later calls are no-ops."""
    global _initialized
    if _initialized:
        return

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()
    _handler_ids.append(
        logger.add(
            console or sys.stdout,
            level=settings.LOG_LEVEL,
            format=_format,
            colorize=False,
            backtrace=False,
        )
    )
    log_file = log_dir / settings.LOG_FILE
    _handler_ids.append(
        logger.add(
            str(log_file),
            level=settings.LOG_LEVEL,
            format=_format,
            rotation=f"{settings.LOG_MAX_SIZE_MB} MB",
            retention=retention_policy(settings.LOG_MAX_BACKUPS, settings.LOG_MAX_AGE_DAYS, log_file),
            compression=settings.LOG_COMPRESSION,
            enqueue=True,
            backtrace=False,
        )
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in list(logging.root.manager.loggerDict.keys()):
        stdlog = logging.getLogger(name)
        stdlog.handlers = []
        stdlog.propagate = True

    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.pool").setLevel(logging.WARNING)

    _initialized = True
    get_logger("logging").info("Logger initialized", path=log_dir, level=settings.LOG_LEVEL)


def close_logging() -> None:
    """Flush and detach the sinks installed by ``init_logging``."""
    global _initialized
    if not _initialized:
        return

    get_logger("logging").info("Logger shutting down")
    while _handler_ids:
        logger.remove(_handler_ids.pop())
    _initialized = False


class AppLogger:
    """Leveled logger bound to a component name.

    Components take one at construction so callers decide the name they log under.
    """

    def __init__(self, name: str):
        self.name = name
        self._logger = logger.bind(component=name)

    def _log(self, level: str, message: str, attrs: dict[str, Any]) -> None:
        line = message + "".join(f" {key}={value}" for key, value in attrs.items())
        # depth=2 skips _log and the public level method
        self._logger.opt(depth=2).log(level, line)

    def debug(self, message: str, **attrs: Any) -> None:
        self._log("DEBUG", message, attrs)

    def info(self, message: str, **attrs: Any) -> None:
        self._log("INFO", message, attrs)

    def warn(self, message: str, **attrs: Any) -> None:
        self._log("WARNING", message, attrs)

    def error(self, message: str, **attrs: Any) -> None:
        self._log("ERROR", message, attrs)

    def request(self, level: str, method: str, path: str, status: int, duration: str) -> None:
        self._logger.bind(request=True).opt(depth=1).log(
            _LEVEL_NAMES.get(level, level),
            f"{method} {path} status={status} duration={duration}",
        )


def get_logger(name: str) -> AppLogger:
    return AppLogger(name)
