"""
Process-wide logging on loguru.

Every record carries ``request_id`` (from the middleware context) and
``operation_id`` (bound by the service for single-operation calls). Records
emitted through the stdlib ``logging`` module, e.g. by uvicorn or
SQLAlchemy, are rerouted into the same sinks.
"""

from __future__ import annotations

import logging
import sys
from contextvars import ContextVar, Token
from functools import lru_cache
from pathlib import Path
from typing import cast

from loguru import logger as loguru_logger

from .settings import Settings, load_settings

_REQUEST_ID: ContextVar[str] = ContextVar("familybudget_request_id", default="-")
_LOGGING_CONFIGURED = False

_STDLIB_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "fastapi",
    "starlette",
    "asyncio",
    "sqlalchemy",
    "alembic",
)

_CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "rid=<yellow>{extra[request_id]}</yellow> "
    "op=<cyan>{extra[operation_id]}</cyan> | "
    "{message}"
)


def current_request_id() -> str:
    return str(_REQUEST_ID.get() or "").strip() or "-"


def set_request_id(request_id: str) -> Token[str]:
    return _REQUEST_ID.set(str(request_id or "").strip() or "-")


def reset_request_id(token: Token[str]) -> None:
    _REQUEST_ID.reset(token)


class _InterceptHandler(logging.Handler):
    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = loguru_logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # walk out of the logging module so loguru reports the real caller
        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        loguru_logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def _patch_record(record: dict[str, object]) -> None:
    extra = cast(dict[str, object], record["extra"])
    extra["operation_id"] = str(extra.get("operation_id") or "-").strip() or "-"
    request_id = str(extra.get("request_id") or "").strip()
    extra["request_id"] = request_id if request_id not in ("", "-") else current_request_id()


def _add_file_sink(config: Settings) -> None:
    path = Path(cast(str, config.log_path))
    path.parent.mkdir(parents=True, exist_ok=True)
    loguru_logger.add(
        str(path),
        level=config.log_level,
        serialize=True,
        enqueue=True,
        backtrace=True,
        diagnose=False,
        rotation=f"{config.log_rotation_mb} MB",
        retention=f"{config.log_retention_days} days",
        compression="gz",
    )


def _route_stdlib_logging(level: str) -> None:
    intercept = _InterceptHandler()
    root_logger = logging.getLogger()
    root_logger.handlers = [intercept]
    root_logger.setLevel(level)

    for name in _STDLIB_LOGGERS:
        named = logging.getLogger(name)
        named.handlers = [intercept]
        named.propagate = False
        named.setLevel(level)
    # statement echo stays off unless explicitly asked for
    logging.getLogger("sqlalchemy.engine").setLevel(max(logging.WARNING, root_logger.level))


def setup_logging(settings: Settings | None = None) -> None:
    global _LOGGING_CONFIGURED
    if _LOGGING_CONFIGURED:
        return

    config = settings or load_settings()

    loguru_logger.remove()
    loguru_logger.configure(patcher=_patch_record)
    loguru_logger.add(
        sys.stdout,
        level=config.log_level,
        format=_CONSOLE_FORMAT,
        colorize=not config.log_json,
        serialize=config.log_json,
        enqueue=True,
        backtrace=True,
        diagnose=False,
    )
    if config.log_path:
        _add_file_sink(config)

    _route_stdlib_logging(config.log_level)
    _LOGGING_CONFIGURED = True


@lru_cache(maxsize=1)
def get_logger():
    setup_logging(load_settings())
    return loguru_logger.bind(operation_id="-", request_id="-")
