"""
Diagnostics for the native bridge.

Every record carries a ``scope`` (``ffi`` for library loading and native
calls, ``client`` for the public client) and may carry the bridge fields
listed in ``BRIDGE_FIELDS``. Payloads and tokens are never logged.

Usage::

    from ._logging import scoped_logger

    log = scoped_logger("ffi")
    log.debug("Native call", extra={"symbol": "dbx_get_aggregate"})

Environment::

    EVENTDBX_LOG_LEVEL=trace|debug|info|warn|error|fatal|off (default: warn)
    EVENTDBX_LOG_FORMAT=json|human (default: human if tty, json if piped)

JSON output is one object per line::

    {"time":"2026-01-09T11:10:47.008Z","level":"debug","scope":"ffi",
     "message":"Native call","symbol":"dbx_get_aggregate"}
"""

from __future__ import annotations

import json
import logging
import os
import sys
from collections.abc import MutableMapping
from datetime import datetime, timezone
from typing import Any

__all__ = ["logger", "setup_logging", "scoped_logger"]

logger = logging.getLogger("eventdbx_native")

# Extra attributes the bridge attaches, in display order
BRIDGE_FIELDS = ("operation", "symbol", "path", "library", "operations", "error")

_LEVELS = {
    "trace": logging.DEBUG,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "fatal": logging.CRITICAL,
    "critical": logging.CRITICAL,
    "off": logging.CRITICAL + 1,
}


def _level_name(levelno: int) -> str:
    if levelno >= logging.CRITICAL:
        return "fatal"
    if levelno >= logging.ERROR:
        return "error"
    if levelno >= logging.WARNING:
        return "warn"
    if levelno >= logging.INFO:
        return "info"
    return "debug"


def _scope(record: logging.LogRecord) -> str:
    scope = getattr(record, "scope", None)
    if scope:
        return scope
    # Records from loggers not created via scoped_logger()
    return record.name.rsplit(".", 1)[-1].lstrip("_") or "eventdbx"


def _bridge_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {name: getattr(record, name) for name in BRIDGE_FIELDS if hasattr(record, name)}


class JsonFormatter(logging.Formatter):
    """One flat JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        entry: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds").replace("+00:00", "Z"),
            "level": _level_name(record.levelno),
            "scope": _scope(record),
            "message": record.getMessage(),
        }
        entry.update(_bridge_fields(record))
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, separators=(",", ":"), default=str)


class HumanFormatter(logging.Formatter):
    """
    Single-line terminal output.

    ``12:00:01.204 DEBUG [ffi] Native call symbol=dbx_get_aggregate``
    """

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        line = (
            f"{created:%H:%M:%S}.{created.microsecond // 1000:03d} "
            f"{_level_name(record.levelno).upper():<5} "
            f"[{_scope(record)}] {record.getMessage()}"
        )
        fields = " ".join(f"{key}={value}" for key, value in _bridge_fields(record).items())
        if fields:
            line = f"{line} {fields}"
        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def _get_log_level() -> int:
    """Level from EVENTDBX_LOG_LEVEL; unknown names mean warn."""
    return _LEVELS.get(os.environ.get("EVENTDBX_LOG_LEVEL", "warn").lower(), logging.WARNING)


def _get_log_format() -> str:
    """Format from EVENTDBX_LOG_FORMAT, else human on a terminal."""
    fmt = os.environ.get("EVENTDBX_LOG_FORMAT")
    if fmt:
        return fmt.lower()
    return "human" if sys.stderr.isatty() else "json"


def _install_handler(fmt: str) -> None:
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(JsonFormatter() if fmt == "json" else HumanFormatter())
    logger.addHandler(handler)


def setup_logging(level: str | int = "INFO", format: str | None = None) -> None:
    """
    Reconfigure the ``eventdbx_native`` logger.

    Parameters
    ----------
    level : str or int, default "INFO"
        A name accepted by ``EVENTDBX_LOG_LEVEL`` or a ``logging`` constant.
    format : str, optional
        ``"json"`` or ``"human"``. Defaults to ``EVENTDBX_LOG_FORMAT`` or
        TTY detection.

    Examples
    --------
    Trace every native call::

        >>> import eventdbx_native
        >>> eventdbx_native.setup_logging("DEBUG", format="human")
    """
    if isinstance(level, str):
        level = _LEVELS.get(level.lower(), logging.INFO)
    _install_handler((format or _get_log_format()).lower())
    logger.setLevel(level)


class _ScopedAdapter(logging.LoggerAdapter):
    """Adds a fixed scope while keeping per-call extras."""

    def process(
        self, msg: str, kwargs: MutableMapping[str, Any]
    ) -> tuple[str, MutableMapping[str, Any]]:
        kwargs["extra"] = {**(self.extra or {}), **kwargs.get("extra", {})}
        return msg, kwargs


def scoped_logger(scope: str) -> logging.LoggerAdapter:
    """Return an adapter on the package logger tagging records with ``scope``."""
    return _ScopedAdapter(logger, {"scope": scope})


# Leave application-configured handlers alone
if not logger.handlers:
    _install_handler(_get_log_format())
    logger.setLevel(_get_log_level())
