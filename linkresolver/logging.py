"""Logging setup and call tracing for the link resolver."""

from __future__ import annotations

import functools
import inspect
import logging
import platform
import sys
import threading
import time
from pathlib import Path
from typing import Any, Optional, TextIO

from .config import get_user_config_dir

LOG_FILENAME = "linkresolver.log"

_EXCEPTION_HOOK_INSTALLED = False
_HOOK_LOCK = threading.Lock()


def setup_logging(
    *,
    level: int = logging.INFO,
    log_dir: Path | None = None,
) -> logging.Logger:
    """Send records to ``linkresolver.log`` and warnings to the console.

    Handlers are attached to the root logger once. The console only shows
    warnings and above so log lines stay out of the interactive prompts.
    """

    root_logger = logging.getLogger()
    logger = logging.getLogger("linkresolver")
    if root_logger.handlers:
        return logger

    formatter = logging.Formatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    log_path = Path(log_dir or get_user_config_dir()) / LOG_FILENAME

    file_handler = logging.FileHandler(log_path, encoding="utf-8")
    file_handler.setFormatter(formatter)
    file_handler.setLevel(level)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(max(level, logging.WARNING))

    logging.basicConfig(level=level, handlers=[console_handler, file_handler])
    root_logger.log_path = log_path  # type: ignore[attr-defined]

    logger.info("Logging to %s", log_path)
    logger.debug(
        "Runtime environment",
        extra={"python": platform.python_version(), "platform": platform.platform()},
    )
    return logger


def get_log_file_path(logger: logging.Logger) -> Optional[Path]:
    """Return the log file recorded by :func:`setup_logging`, if any."""

    log_path = getattr(logger, "log_path", None)
    if log_path is None:
        log_path = getattr(logging.getLogger(), "log_path", None)
    return log_path if isinstance(log_path, Path) else None


def install_exception_hook(
    logger: logging.Logger, *, stream: TextIO | None = None
) -> None:
    """Log unhandled exceptions and tell the user where the log file lives."""

    global _EXCEPTION_HOOK_INSTALLED
    with _HOOK_LOCK:
        if _EXCEPTION_HOOK_INSTALLED:
            return
        _EXCEPTION_HOOK_INSTALLED = True

    default_hook = sys.excepthook

    def handle_exception(exc_type, exc_value, exc_traceback):
        if issubclass(exc_type, KeyboardInterrupt):
            default_hook(exc_type, exc_value, exc_traceback)
            return

        logger.critical(
            "Unhandled exception", exc_info=(exc_type, exc_value, exc_traceback)
        )
        for handler in logging.getLogger().handlers:
            handler.flush()
        log_path = get_log_file_path(logger)
        if log_path is not None:
            print(
                f"Unexpected error; details were written to {log_path}",
                file=stream or sys.stderr,
            )
        default_hook(exc_type, exc_value, exc_traceback)

    sys.excepthook = handle_exception


def _short_repr(value: Any, limit: int = 300) -> str:
    text = repr(value)
    return text if len(text) <= limit else text[: limit - 1] + "…"


def _describe_call(signature: inspect.Signature, args: tuple, kwargs: dict) -> str:
    try:
        bound = signature.bind_partial(*args, **kwargs)
    except TypeError:
        return "?"
    return ", ".join(
        f"{name}={_short_repr(value)}"
        for name, value in bound.arguments.items()
        if name != "self"
    )


def log_call(
    *,
    logger: logging.Logger,
    level: int = logging.DEBUG,
    include_result: bool = False,
):
    """Log each call of the decorated function with its arguments and timing.

    Failures are logged with their traceback at ERROR and re-raised.
    """

    def decorator(func):
        signature = inspect.signature(func)
        name = func.__qualname__

        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            logger.log(level, "Calling %s(%s)", name, _describe_call(signature, args, kwargs))
            start = time.perf_counter()
            try:
                result = func(*args, **kwargs)
            except Exception:
                logger.exception("%s failed after %.3fs", name, time.perf_counter() - start)
                raise
            elapsed = time.perf_counter() - start
            if include_result:
                logger.log(level, "%s returned %s (%.3fs)", name, _short_repr(result), elapsed)
            else:
                logger.log(level, "%s finished in %.3fs", name, elapsed)
            return result

        return wrapper

    return decorator


__all__ = [
    "get_log_file_path",
    "install_exception_hook",
    "log_call",
    "setup_logging",
]
