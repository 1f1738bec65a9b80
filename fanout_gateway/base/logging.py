"""Structured logging for the gateway core and demo service.

Every component logs through a child of the ``gateway`` logger. Only the base
logger owns handlers: a stderr handler installed on first use and, when
configured, a rotating JSON file. Child loggers propagate to it.

Event names emitted by the core are stable:
``call.started``, ``call.completed``, ``call.failed``, ``call.cancelled``,
``call.discarded``, ``loop.started``, ``loop.unit.completed``,
``loop.stopped``, ``aggregation.started``, ``aggregation.completed``,
``request.started``, ``request.completed``.

``normalized_log_event`` always writes ``phase``, ``elapsed_ms`` and
``cancelled_by`` (``null`` when unknown) so a cancelled call, a stopped loop
and a timed-out request can be filtered with the same query.
"""
from __future__ import annotations

import contextlib
import json
import logging
import os
import sys
from enum import Enum
from logging.handlers import RotatingFileHandler
from typing import Any, Dict, Optional

from .log_support import JsonFormatter, LogContext


BASE_LOGGER_NAME = "gateway"
_READY_ATTR = "_gateway_ready"
_MANAGED_FILE_ATTR = "_gateway_file"
_PLAIN_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
_LOG_FILE_MAX_BYTES = 10 * 1024 * 1024
_LOG_FILE_BACKUPS = 5


def _parse_level(value: int | str | None, default: int = logging.INFO) -> int:
    """Resolve ``value`` (a level number or name such as ``"warn"``) to a level."""
    if value is None or value == "":
        return default
    if isinstance(value, int):
        return value
    name = value.strip().upper()
    if name == "WARN":
        name = "WARNING"
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else default


def _formatter(json_mode: bool) -> logging.Formatter:
    return JsonFormatter() if json_mode else logging.Formatter(_PLAIN_FORMAT)


def _base_logger(json_mode: bool, level: int) -> logging.Logger:
    logger = logging.getLogger(BASE_LOGGER_NAME)
    if getattr(logger, _READY_ATTR, False):
        return logger
    logger.setLevel(_parse_level(os.getenv("GATEWAY_LOG_LEVEL"), default=level))
    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_formatter(json_mode))
    logger.handlers[:] = [console]
    logger.propagate = False
    setattr(logger, _READY_ATTR, True)
    return logger


def get_logger(name: str = BASE_LOGGER_NAME, json_mode: bool = True, level: int = logging.INFO) -> logging.Logger:
    """Return ``name`` inside the ``gateway`` tree, installing the base handler once."""
    base = _base_logger(json_mode=json_mode, level=level)
    if name == BASE_LOGGER_NAME:
        return base
    logger = logging.getLogger(name)
    logger.setLevel(logging.NOTSET)
    logger.propagate = True
    return logger


def _drop_handler(logger: logging.Logger, handler: logging.Handler) -> None:
    logger.removeHandler(handler)
    with contextlib.suppress(OSError):
        handler.close()


def configure_logger(
    *,
    level: int | str | None = None,
    file_path: Optional[str] = None,
    json_mode: bool = True,
) -> logging.Logger:
    """Set the gateway log level and (de)attach the rotating log file.

    ``file_path=None`` removes a previously attached file; a new path replaces
    the old file handler, the same path reuses it. Returns the base logger.
    """
    logger = get_logger(json_mode=json_mode)
    if level is not None:
        logger.setLevel(_parse_level(level, default=logger.level))

    target = os.path.abspath(os.path.expanduser(file_path)) if file_path else None
    current = None
    for handler in [h for h in logger.handlers if getattr(h, _MANAGED_FILE_ATTR, False)]:
        if target is not None and getattr(handler, "baseFilename", None) == target:
            current = handler
        else:
            _drop_handler(logger, handler)
    if target is None:
        return logger

    if current is None:
        os.makedirs(os.path.dirname(target), exist_ok=True)
        current = RotatingFileHandler(
            target,
            maxBytes=_LOG_FILE_MAX_BYTES,
            backupCount=_LOG_FILE_BACKUPS,
            encoding="utf-8",
        )
        setattr(current, _MANAGED_FILE_ATTR, True)
        logger.addHandler(current)
    current.setFormatter(_formatter(json_mode))
    return logger


def log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    level: int = logging.INFO,
    keep_none: bool = False,
    **fields: Any,
) -> None:
    """Emit a structured log event as a single JSON line.

    Keys whose values are ``None`` are dropped unless ``keep_none`` is set.
    Enum values are written by value.
    """
    payload: Dict[str, Any] = {"event": event}
    if ctx:
        payload |= ctx.to_dict()
    for key, value in fields.items():
        if value is None and not keep_none:
            continue
        payload[key] = value.value if isinstance(value, Enum) else value
    logger.log(level, json.dumps(payload, ensure_ascii=False, default=str))


REQUIRED_NORMALIZED_KEYS = ("phase", "elapsed_ms", "cancelled_by")


def normalized_log_event(
    logger: logging.Logger,
    event: str,
    ctx: LogContext | None = None,
    *,
    phase: str,
    elapsed_ms: int | None = None,
    cancelled_by: Any = None,
    error_code: str | None = None,
    level: int = logging.INFO,
    **extra_fields: Any,
) -> None:
    """Emit an event carrying the normalized key set.

    ``error_code`` is omitted when ``None``; the other normalized keys are
    always present (``null`` when unknown). Extra fields never overwrite the
    normalized values.
    """
    base_fields: Dict[str, Any] = {
        "phase": phase,
        "elapsed_ms": elapsed_ms,
        "cancelled_by": cancelled_by.value if isinstance(cancelled_by, Enum) else cancelled_by,
    }
    if error_code is not None:
        base_fields["error_code"] = error_code
    for k, v in extra_fields.items():
        if v is None or k in base_fields:
            continue
        base_fields[k] = v
    log_event(logger, event, ctx, level=level, keep_none=True, **base_fields)


__all__ = [
    "LogContext",
    "get_logger",
    "configure_logger",
    "log_event",
    "normalized_log_event",
    "REQUIRED_NORMALIZED_KEYS",
    "BASE_LOGGER_NAME",
]
