from __future__ import annotations

import logging
import os
from collections import deque
from logging.handlers import RotatingFileHandler

_FORMAT = "%(asctime)sZ %(levelname)s %(name)s %(message)s"
_DATEFMT = "%Y-%m-%dT%H:%M:%S"


def _int_env(key: str, default: int, minimum: int = 1) -> int:
    raw = os.getenv(key, str(default))
    try:
        value = int((raw or "").strip())
    except ValueError:
        value = int(default)
    return max(int(minimum), value)


_PROBLEMS: deque[tuple[str, str, str]] = deque(maxlen=_int_env("LOG_PROBLEM_BUFFER", 20, minimum=5))


class _ProblemBufferHandler(logging.Handler):
    """Keeps the last warnings/errors (skipped entries, rejected uploads, dead sources)."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            _PROBLEMS.append((record.levelname, record.name, record.getMessage()))
        except Exception:
            self.handleError(record)


def recent_problems(limit: int = 10) -> list[tuple[str, str, str]]:
    lim = max(1, min(int(limit), 50))
    return list(_PROBLEMS)[-lim:]


def clear_problems() -> None:
    _PROBLEMS.clear()


def setup_logging(level_name: str | None = None) -> None:
    level = getattr(logging, (level_name or os.getenv("LOG_LEVEL", "INFO")).upper(), logging.INFO)

    root = logging.getLogger()
    root.setLevel(level)
    if getattr(root, "_mechcatalog_logging_initialized", False):
        return

    fmt = logging.Formatter(fmt=_FORMAT, datefmt=_DATEFMT)

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(fmt)
    root.addHandler(console)

    try:
        file_handler = RotatingFileHandler(
            os.getenv("LOG_PATH", "mechcatalog.log"),
            maxBytes=_int_env("LOG_MAX_BYTES", 1_000_000),
            backupCount=_int_env("LOG_BACKUP_COUNT", 5),
            encoding="utf-8",
        )
    except OSError:
        # No writable log path: console logging only.
        file_handler = None
    if file_handler is not None:
        file_handler.setLevel(level)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    problems = _ProblemBufferHandler()
    problems.setLevel(logging.WARNING)
    root.addHandler(problems)

    logging.getLogger("aiohttp").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    root._mechcatalog_logging_initialized = True  # type: ignore[attr-defined]
