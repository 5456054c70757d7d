"""Logging for the storefront.

structlog renders every record. Standard library handlers carry them: stdout
always, plus a rotating ``storefront.log`` and an errors-only
``storefront_error.log`` under ``logs/``. Production and staging render JSON
lines; other environments get the coloured console renderer with rich
tracebacks.

Request-scoped fields (request id, method, path) live in structlog
contextvars and are merged into every line logged while handling a request.
"""

import logging
import logging.handlers
import os
import sys
import uuid
from pathlib import Path

import structlog

DEFAULT_LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
JSON_ENVIRONMENTS = {"production", "staging"}
QUIET_LIBRARIES = ("protean", "sqlalchemy.engine", "urllib3", "asyncio")

_MAX_BYTES = 10 * 1024 * 1024
_BACKUPS = 5


def current_environment() -> str:
    """``ENVIRONMENT``, else ``PROTEAN_ENV``, else ``development``; lower-cased."""
    return (os.getenv("ENVIRONMENT") or os.getenv("PROTEAN_ENV") or "development").lower()


def get_log_level(env: str | None = None) -> str:
    env = env or current_environment()
    return os.getenv("LOG_LEVEL", DEFAULT_LEVELS.get(env, "INFO")).upper()


def _rotating_handler(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path, maxBytes=_MAX_BYTES, backupCount=_BACKUPS, encoding="utf-8"
    )
    handler.setLevel(level)
    return handler


def build_handlers(log_dir: str, level: str) -> list[logging.Handler]:
    log_path = Path(log_dir)
    log_path.mkdir(parents=True, exist_ok=True)

    console = logging.StreamHandler(sys.stdout)
    console.setLevel(level)
    return [
        console,
        _rotating_handler(log_path / "storefront.log", level),
        _rotating_handler(log_path / "storefront_error.log", logging.ERROR),
    ]


def build_processors(env: str) -> list:
    """Processor chain for ``env``; the renderer is always last."""
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if env in JSON_ENVIRONMENTS:
        processors += [
            structlog.processors.CallsiteParameterAdder(
                parameters=[
                    structlog.processors.CallsiteParameter.MODULE,
                    structlog.processors.CallsiteParameter.LINENO,
                ]
            ),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors.append(
            structlog.dev.ConsoleRenderer(
                colors=True,
                exception_formatter=structlog.dev.RichTracebackFormatter(show_locals=False, max_frames=4),
            )
        )
    return processors


def configure_logging(log_dir: str = "logs", env: str | None = None) -> None:
    """Wire stdlib handlers and structlog for the given (or current) environment."""
    env = env or current_environment()
    level = get_log_level(env)

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers = build_handlers(log_dir, level)
    for name in QUIET_LIBRARIES:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=build_processors(env),
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind_request(method: str, path: str, request_id: str | None = None) -> str:
    """Start a fresh request scope; returns the request id that was bound."""
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id, method=method, path=path)
    return request_id


def unbind_request() -> None:
    structlog.contextvars.clear_contextvars()
