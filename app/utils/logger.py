"""Loguru setup shared by the API, the workers and the scripts.

Standard-library loggers (uvicorn, gunicorn, SQLAlchemy) are routed into
loguru, email addresses are masked in every message before any sink sees
them, and an OpenTelemetry log sink is added when an OTLP endpoint is
configured.
"""

import logging
import os
import re
import sys
from types import FrameType
from typing import Any

from loguru import logger
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry._logs import set_logger_provider

from app.core.config import Settings, get_settings
from app.core.telemetry import SERVICE_NAME
from app.utils.validation import mask_email

# Skips addresses already masked by mask_email ("v***r@example.com")
EMAIL_PATTERN = re.compile(r"(?<![\w.+*-])[\w.+-]+@[\w-]+(?:\.[\w-]+)+")

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> <level>{level}</level>: "
    "<cyan>[{name}:{line}]</cyan> - <level>{message}</level>"
)

HIJACKED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "gunicorn.error",
    "gunicorn.access",
    "fastapi",
    "sqlalchemy.engine",
)


def mask_emails(text: str) -> str:
    """Replace every email address in `text` with its masked form."""
    return EMAIL_PATTERN.sub(lambda match: mask_email(match.group(0)), text)


def mask_record(record: dict[str, Any]) -> None:
    """Loguru patcher: mask addresses in the formatted message."""
    record["message"] = mask_emails(record["message"])


class InterceptHandler(logging.Handler):
    """
    Redirects standard logging to Loguru.
    OTel's own records are dropped to avoid feeding the OTel sink with itself.
    """

    def emit(self, record: logging.LogRecord) -> None:
        if record.name.startswith("opentelemetry"):
            return

        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where originated the logged message
        frame: FrameType | None = logging.currentframe()
        depth = 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def _add_otel_sink(endpoint: str, settings: Settings) -> None:
    resource = Resource.create(
        {
            "service.name": os.getenv("OTEL_SERVICE_NAME", SERVICE_NAME),
            "deployment.environment": settings.ENVIRONMENT,
        }
    )
    logger_provider = LoggerProvider(resource=resource)
    set_logger_provider(logger_provider)

    insecure = os.getenv("OTEL_EXPORTER_OTLP_INSECURE", "false").lower() == "true"
    exporter = OTLPLogExporter(endpoint=endpoint, insecure=insecure)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(exporter))

    otel_handler = LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    logger.add(otel_handler, level=settings.LOG_LEVEL, serialize=True)


def setup_logging(settings: Settings | None = None):
    """
    Configure loguru for the process.

    - `LOG_LEVEL` sets the level of every sink and of the root logger.
    - SQLAlchemy statements are only logged when `LOG_SQL` is on.
    - Production writes JSON lines to stderr; other environments get
      colored console output.
    - With `OTEL_EXPORTER_OTLP_ENDPOINT` set, records are also exported
      over OTLP. A failing exporter is reported on stderr and skipped.

    Returns:
        The configured loguru logger.
    """
    settings = settings or get_settings()
    level = settings.LOG_LEVEL.upper()

    logging.root.handlers = [InterceptHandler()]
    logging.root.setLevel(level)

    for name in HIJACKED_LOGGERS:
        log = logging.getLogger(name)
        log.handlers = []
        log.propagate = False
        log.addHandler(InterceptHandler())
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOG_SQL else logging.WARNING
    )

    logger.remove()
    logger.configure(patcher=mask_record)
    production = settings.ENVIRONMENT == "production"
    logger.add(
        sys.stderr,
        level=level,
        format=CONSOLE_FORMAT,
        colorize=not production,
        serialize=production,
        enqueue=True,
    )

    endpoint = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT")
    if endpoint:
        try:
            _add_otel_sink(endpoint, settings)
            logger.info(f"Logs exported to {endpoint}")
        except Exception as e:
            print(f"Log Setup Failed: {e}", file=sys.stderr)

    return logger
