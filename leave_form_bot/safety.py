"""Process-wide last-resort logging for failures nothing else handled."""

from __future__ import annotations

import sys
import threading
from concurrent.futures import Future

import structlog

_INSTALLED = False


def _log_unhandled(source: str, exc_type, exc_value, exc_traceback) -> None:
    structlog.get_logger().error(
        "unhandled_exception",
        source=source,
        error_type=getattr(exc_type, "__name__", str(exc_type)),
        error=str(exc_value),
        exc_info=(exc_type, exc_value, exc_traceback),
    )


def _excepthook(exc_type, exc_value, exc_traceback) -> None:
    if issubclass(exc_type, KeyboardInterrupt):
        sys.__excepthook__(exc_type, exc_value, exc_traceback)
        return
    _log_unhandled("main", exc_type, exc_value, exc_traceback)


def _thread_excepthook(args: threading.ExceptHookArgs) -> None:
    if args.exc_type is SystemExit:
        return
    thread_name = args.thread.name if args.thread is not None else "unknown"
    _log_unhandled(f"thread:{thread_name}", args.exc_type, args.exc_value, args.exc_traceback)


def log_future_exception(future: Future) -> None:
    """Done-callback that logs the exception of a failed background future."""

    if future.cancelled():
        return
    exc = future.exception()
    if exc is None:
        return
    _log_unhandled("background", type(exc), exc, exc.__traceback__)


def install_safety_net() -> None:
    """Route uncaught exceptions from every thread through structlog.

    Idempotent; only the first call replaces the interpreter hooks.
    """

    global _INSTALLED
    if _INSTALLED:
        return
    sys.excepthook = _excepthook
    threading.excepthook = _thread_excepthook
    _INSTALLED = True
