"""Logging for the storefront.

Every record goes through the standard library root logger: stdout plus a
rotating ``<prefix>.log`` and ``<prefix>_error.log`` pair. structlog formats
on top of it. Production and staging emit JSON lines, everything else gets
the colored console renderer.

Guest tokens are the only credential an anonymous shopper has, so they are
masked down to their last four characters before any renderer sees them.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LOG_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
JSON_ENVIRONMENTS = ("production", "staging")
MAX_LOG_BYTES = 10 * 1024 * 1024
LOG_BACKUPS = 5
QUIET_LOGGERS = ("protean", "uvicorn.access", "asyncio")
MASKED_KEYS = ("guest_token",)


def current_environment() -> str:
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment name."""
    return os.getenv("LOG_LEVEL", LOG_LEVELS.get(current_environment(), "INFO"))


def _rotating(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_LOG_BYTES,
        backupCount=LOG_BACKUPS,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def setup_stdlib_logging(log_dir: str = "logs", log_file_prefix: str = "storefront") -> None:
    level = get_log_level()
    directory = Path(os.getenv("STOREFRONT_LOG_DIR", log_dir))
    directory.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = [
        console,
        _rotating(directory / f"{log_file_prefix}.log", level),
        _rotating(directory / f"{log_file_prefix}_error.log", logging.ERROR),
    ]

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def mask_guest_token(_logger, _method_name, event_dict):
    """structlog processor replacing guest tokens with ``****<last four>``."""
    for key in MASKED_KEYS:
        value = event_dict.get(key)
        if value:
            event_dict[key] = f"****{str(value)[-4:]}"
    return event_dict


def _renderer(env: str):
    if env in JSON_ENVIRONMENTS:
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(
        colors=True,
        exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=2),
    )


def setup_structlog() -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            mask_guest_token,
            _renderer(current_environment()),
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_logging(log_dir: str = "logs", log_file_prefix: str = "storefront") -> None:
    setup_stdlib_logging(log_dir=log_dir, log_file_prefix=log_file_prefix)
    setup_structlog()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request_context(**kwargs: Any) -> None:
    """Attach key/values to every log line emitted for the current request."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
