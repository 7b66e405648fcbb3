# SPDX-License-Identifier: Apache-2.0
# Copyright 2025 Vova Orig

"""loguru setup shared by the web app and its background helpers.

Every record carries the correlation id of the request that produced it and
passes through :func:`sanitize_record` before it is written anywhere.
"""

from __future__ import annotations

import logging
import os
import sys
from contextvars import ContextVar
from pathlib import Path
from typing import Any

from loguru import logger as _logger

from .sensitive_filter import sanitize_record

_NO_CORRELATION = "-"

_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<lvl>{level:<8}</lvl> | "
    "<magenta>{extra[correlation_id]}</magenta> | "
    "<cyan>{name}</cyan>:<cyan>{line}</cyan> | "
    "<lvl>{message}</lvl>"
)

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default=_NO_CORRELATION)

# stdlib loggers that talk too much at DEBUG
_QUIET_LOGGERS = {"sqlalchemy.engine": logging.WARNING, "werkzeug": logging.INFO}


def _default_log_file() -> Path:
    configured = os.getenv("LOG_FILE")
    if configured:
        return Path(configured)
    return Path(__file__).resolve().parents[2] / "instance" / "inventory.log"


class _StdlibBridge(logging.Handler):
    """Forward records from libraries using :mod:`logging` into loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = _logger.level(record.levelname).name
        except ValueError:
            level = record.levelno
        _logger.bind(correlation_id=_correlation_id.get()).opt(
            depth=6, exception=record.exc_info
        ).log(level, record.getMessage())


class _CorrelatedLogger:
    def __getattr__(self, name: str) -> Any:
        return getattr(_logger.bind(correlation_id=_correlation_id.get()), name)


def set_correlation_id(value: str | None) -> None:
    _correlation_id.set(value or _NO_CORRELATION)


def get_correlation_id() -> str:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(_NO_CORRELATION)


def setup_logging(*, debug_mode: bool = False, level: str | None = None) -> None:
    level = (level or os.getenv("LOG_LEVEL") or ("DEBUG" if debug_mode else "INFO")).upper()
    log_file = _default_log_file()
    log_file.parent.mkdir(parents=True, exist_ok=True)

    common: dict[str, Any] = {
        "level": level,
        "format": _FORMAT,
        "filter": sanitize_record,
        "backtrace": False,
        # locals may hold passwords
        "diagnose": False,
    }

    _logger.remove()
    _logger.configure(extra={"correlation_id": _NO_CORRELATION})
    _logger.add(sys.stderr, colorize=True, **common)
    _logger.add(
        str(log_file),
        colorize=False,
        enqueue=True,
        encoding="utf-8",
        rotation="10 MB",
        retention=5,
        **common,
    )

    logging.basicConfig(handlers=[_StdlibBridge()], level=0, force=True)
    for name, quiet_level in _QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)


logger = _CorrelatedLogger()

__all__ = [
    "clear_correlation_id",
    "get_correlation_id",
    "logger",
    "set_correlation_id",
    "setup_logging",
]
