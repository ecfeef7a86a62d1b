"""Logging setup with an optional rotating log file and crash reporting."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
import os
import platform
import sys
import time
import traceback

from typing import Callable, Dict, List


_context_providers: List[Callable[[], Dict[str, object]]] = []
_installed_handlers: List[logging.Handler] = []

FILE_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(funcName)s:%(lineno)d - %(message)s"
CONSOLE_FORMAT = "%(levelname)s: %(message)s"


def add_context_provider(func: Callable[[], Dict[str, object]]) -> None:
    """Register a callable returning additional context for crash logs."""

    _context_providers.append(func)


def install(log_path: str | None = None, *, level: int = logging.INFO) -> None:
    """Install global logging.

    Parameters
    ----------
    log_path:
        File path for the rotating log. ``None`` logs to the console only.
    level:
        Logging level for the root logger. Can be changed later via
        :func:`toggle_debug_mode`.
    """

    logger = logging.getLogger()
    logger.setLevel(level)
    for old in _installed_handlers:
        logger.removeHandler(old)
        old.close()
    _installed_handlers.clear()

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.WARNING)
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    logger.addHandler(console)
    _installed_handlers.append(console)

    if log_path:
        handler = RotatingFileHandler(
            log_path, maxBytes=1_000_000, backupCount=5, encoding="utf-8"
        )
        handler.setFormatter(logging.Formatter(FILE_FORMAT))
        logger.addHandler(handler)
        _installed_handlers.append(handler)
        _log_startup_context(logger)

    def _handle(exc_type, exc_value, exc_tb):
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc_value, exc_tb)
            return

        stack = "".join(traceback.format_exception(exc_type, exc_value, exc_tb))
        ts = time.strftime("%Y-%m-%d %H:%M:%S")
        context = _gather_context()
        logger.critical(f"{ts} Unhandled exception:\n{stack}\nContext: {context}")

    sys.excepthook = _handle


def toggle_debug_mode() -> None:
    """Raise logging level to DEBUG at runtime."""

    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for handler in root.handlers:
        if isinstance(handler, logging.StreamHandler) and not isinstance(
            handler, logging.FileHandler
        ):
            handler.setLevel(logging.DEBUG)


def _gather_context() -> Dict[str, object]:
    """Collect runtime context information."""

    ctx: Dict[str, object] = {
        "argv": sys.argv,
        "cwd": os.getcwd(),
        "python": sys.version.replace("\n", " "),
        "platform": platform.platform(),
    }
    for fn in _context_providers:
        try:
            ctx.update(fn())
        except Exception:
            pass
    return ctx


def _log_startup_context(logger: logging.Logger) -> None:
    ctx = _gather_context()
    logger.info("Application start")
    for k, v in ctx.items():
        logger.info("%s: %s", k, v)
