"""
Logging for Panic Relay Backend.

structlog renders on top of stdlib logging. Output goes to:

- stdout, always
- ``logs/app_*.log`` and ``logs/error_*.log`` when file logging is on
- ``logs/realtime_*.log`` for the socket lifecycle and panic fan-out loggers
- ``logs/requests_*.log`` for the HTTP request middleware, kept out of the app log
"""

import logging
import os
import sys
import time
from datetime import datetime
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory

from core.config import settings

LOGS_DIR = "logs"

# Loggers whose lines also go to the realtime log
REALTIME_LOGGERS = (
    "services.realtime",
    "services.connection_registry",
    "services.notifier",
    "services.panic_alert",
)


def _file_handler(kind: str, formatter: logging.Formatter, level: Optional[int] = None) -> logging.Handler:
    today = datetime.now().strftime('%Y%m%d')
    handler = logging.FileHandler(os.path.join(LOGS_DIR, f"{kind}_{today}.log"), encoding='utf-8')
    handler.setFormatter(formatter)
    if level is not None:
        handler.setLevel(level)
    return handler


def _init_sentry(logger) -> None:
    import sentry_sdk
    from sentry_sdk.integrations.fastapi import FastApiIntegration
    from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

    sentry_sdk.init(
        dsn=settings.SENTRY_DSN,
        environment=settings.SENTRY_ENVIRONMENT,
        integrations=[FastApiIntegration(), SqlalchemyIntegration()],
        traces_sample_rate=0.1 if settings.ENV == "production" else 1.0,
    )
    logger.info("Sentry integration enabled", environment=settings.SENTRY_ENVIRONMENT)


def setup_logging() -> structlog.stdlib.BoundLogger:
    """Configure structlog and the stdlib handlers behind it."""

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer() if not settings.DEBUG else structlog.dev.ConsoleRenderer(),
        ],
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, settings.LOG_LEVEL.upper()))
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.ENABLE_FILE_LOGGING or settings.ENABLE_REQUEST_LOGGING:
        os.makedirs(LOGS_DIR, exist_ok=True)

    if settings.ENABLE_FILE_LOGGING:
        root_logger.addHandler(_file_handler("app", formatter, logging.INFO))
        root_logger.addHandler(_file_handler("error", formatter, logging.ERROR))

        realtime_handler = _file_handler("realtime", formatter)
        for name in REALTIME_LOGGERS:
            channel = logging.getLogger(name)
            channel.handlers.clear()
            channel.addHandler(realtime_handler)

    if settings.ENABLE_REQUEST_LOGGING:
        request_logger = logging.getLogger("requests")
        request_logger.setLevel(logging.INFO)
        request_logger.propagate = False
        request_logger.addHandler(_file_handler("requests", formatter))

    # python-socketio and engineio log every packet at INFO
    transport_level = logging.DEBUG if settings.DEBUG else logging.WARNING
    logging.getLogger("socketio").setLevel(transport_level)
    logging.getLogger("engineio").setLevel(transport_level)

    logger = structlog.get_logger()

    if settings.SENTRY_DSN and settings.SENTRY_DSN.strip():
        _init_sentry(logger)

    return logger


def get_logger(name: str = None) -> structlog.stdlib.BoundLogger:
    """Get a logger instance."""
    return structlog.get_logger(name)


async def log_request_middleware(request, call_next):
    """Log each HTTP request with its status and duration."""
    logger = get_logger("requests")
    started = time.perf_counter()

    response = await call_next(request)

    logger.info(
        "Request completed",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        duration_ms=round((time.perf_counter() - started) * 1000, 1),
        client_ip=request.client.host if request.client else None,
    )
    return response
