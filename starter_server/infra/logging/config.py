"""Logging setup shared by the API server and the CLI.

The root logger gets a single ``QueueHandler``; the real console/file handlers
run on a ``QueueListener`` thread so request handling never blocks on I/O.
The root level is applied through ``logging.config.dictConfig``; request
context is attached by a filter on the queue handler.
"""

from __future__ import annotations

import atexit
import logging
import logging.config
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path
from queue import Queue
from typing import TYPE_CHECKING, Any

from starter_server.infra.logging.context import ContextInjectingFilter
from starter_server.infra.logging.formatters import JSONFormatter

if TYPE_CHECKING:
    from starter_server.core.settings.logs import LoggingSettings

logger = logging.getLogger(__name__)

TEXT_FORMAT = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"

_listener: QueueListener | None = None
_configured = False
_atexit_registered = False


def shutdown() -> None:
    """Flush queued records and stop the listener thread."""
    global _listener

    if _listener is not None:
        _listener.stop()
        _listener = None


def setup_logging(
    log_settings: LoggingSettings | None = None,
    *,
    force: bool = False,
    **overrides: Any,
) -> None:
    """Configure logging from ``LoggingSettings`` once per process.

    Args:
        log_settings: Settings to use; loaded from the environment when omitted.
        force: Reconfigure even when logging was already set up.
        **overrides: Keyword arguments passed through to ``configure_logging``.
    """
    global _configured

    if _configured and not force:
        return

    if log_settings is None:
        from starter_server.core.settings import get_logging_settings

        log_settings = get_logging_settings()

    configure_logging(**{**log_settings.to_logging_kwargs(), **overrides})
    _configured = True


def _build_handlers(
    formatter: logging.Formatter,
    *,
    console_enabled: bool,
    file_path: Path | None,
    file_max_bytes: int,
    file_backup_count: int,
) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if console_enabled:
        handlers.append(logging.StreamHandler())
    if file_path is not None:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(
            RotatingFileHandler(
                file_path,
                maxBytes=file_max_bytes,
                backupCount=file_backup_count,
                encoding="utf-8",
            )
        )
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


def configure_logging(
    log_level: str = "INFO",
    service_name: str = "starter-server",
    file_path: str | Path | None = None,
    json_logs: bool = True,
    console_enabled: bool = True,
    include_context: bool = True,
    capture_warnings: bool = True,
    file_max_bytes: int = 10 * 1024 * 1024,
    file_backup_count: int = 5,
) -> None:
    """Replace the root logger's handlers with a queue-backed set."""
    global _listener, _atexit_registered

    shutdown()
    logging.captureWarnings(capture_warnings)

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "root": {"level": log_level.upper(), "handlers": []},
        }
    )

    if json_logs:
        formatter: logging.Formatter = JSONFormatter(static={"service": service_name})
    else:
        formatter = logging.Formatter(fmt=TEXT_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    path = Path(file_path) if file_path else None
    handlers = _build_handlers(
        formatter,
        console_enabled=console_enabled,
        file_path=path,
        file_max_bytes=file_max_bytes,
        file_backup_count=file_backup_count,
    )

    queue: Queue[logging.LogRecord] = Queue()
    if handlers:
        _listener = QueueListener(queue, *handlers, respect_handler_level=True)
        _listener.start()
        if not _atexit_registered:
            atexit.register(shutdown)
            _atexit_registered = True

    # Sees records propagated from every logger
    queue_handler = QueueHandler(queue)
    if include_context:
        queue_handler.addFilter(ContextInjectingFilter())
    logging.getLogger().addHandler(queue_handler)
    logger.debug(
        "Logging configured",
        extra={"json_logs": json_logs, "log_file": str(path) if path else None},
    )
