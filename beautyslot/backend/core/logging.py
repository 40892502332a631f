"""
Structured Logging.

Every module logs through structlog configured here; settings come from
config/settings/logging.yaml. Records are rendered as JSON (file, and
console unless ``format: console``) with these fields:

    timestamp   - ISO 8601 UTC timestamp
    level       - debug, info, warning, error, critical
    logger      - Module path (e.g., beautyslot.backend.services.sync)
    event       - Log message
    func_name   - Function that emitted the record
    lineno      - Line number in source file
    source      - Origin context: web, telegram, sync, tasks, yclients, ...
    request_id  - Request correlation ID (inside an HTTP request)

Client phone numbers are masked before rendering: any field listed in
``masked_fields`` keeps only its last four digits.

Usage:
    from beautyslot.backend.core.logging import get_logger, setup_logging

    setup_logging()                                   # values from logging.yaml
    setup_logging(level="DEBUG", format_type="console")

    logger = get_logger(__name__)
    logger.info("Booking request received", extra={"client_phone": "+79161234567"})

    # Background work has no request context; name the source explicitly
    from beautyslot.backend.core.logging import log_with_source
    log_with_source(logger, "sync", "info", "Clients page loaded", page=3)
"""

import logging
import sys
from collections.abc import Iterable
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

from beautyslot.backend.core.config import find_project_root, load_yaml_config
from beautyslot.backend.core.utils import mask_phone

VALID_SOURCES = frozenset({
    "web",
    "cli",
    "telegram",
    "sync",
    "tasks",
    "yclients",
    "realtime",
    "unknown",
})
"""Recognized values of the ``source`` field. Callers set it explicitly."""

_logging_config: dict[str, Any] | None = None


def _load_logging_config() -> dict[str, Any]:
    """
    Read logging.yaml once per process.

    Raises:
        FileNotFoundError: If logging.yaml does not exist
    """
    global _logging_config
    if _logging_config is None:
        _logging_config = load_yaml_config("logging.yaml")
    return _logging_config


def _resolve_log_path(configured_path: str) -> Path:
    return find_project_root() / configured_path


def mask_fields_processor(fields: Iterable[str]) -> Processor:
    """
    Build a processor that masks phone-like values of the given fields.

    Fields are looked up at the top level and inside the ``extra`` dict.
    Values that are not strings are left alone; masking an already
    masked phone returns it unchanged.
    """
    masked = frozenset(fields)

    def _mask(values: dict[str, Any]) -> None:
        for key in masked & values.keys():
            if isinstance(values[key], str):
                values[key] = mask_phone(values[key])

    def processor(logger: WrappedLogger, method_name: str, event_dict: EventDict) -> EventDict:
        _mask(event_dict)
        extra = event_dict.get("extra")
        if isinstance(extra, dict):
            _mask(extra)
        return event_dict

    return processor


def _shared_processors(masked_fields: Iterable[str]) -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        mask_fields_processor(masked_fields),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def _file_handler(file_config: dict[str, Any], formatter: logging.Formatter) -> RotatingFileHandler:
    log_path = _resolve_log_path(file_config["path"])
    log_path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(
        filename=str(log_path),
        maxBytes=file_config["max_bytes"],
        backupCount=file_config["backup_count"],
        encoding="utf-8",
    )
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
    enable_console: bool | None = None,
    enable_file_logging: bool | None = None,
) -> None:
    """
    Configure structlog and the stdlib root logger.

    Arguments override the matching logging.yaml values.

    Args:
        level: DEBUG, INFO, WARNING, ERROR or CRITICAL
        format_type: 'json' or 'console' (console output only; the file is always JSON)
        enable_console: Write to stdout
        enable_file_logging: Write to the rotating JSONL file
    """
    config = _load_logging_config()
    handlers = config["handlers"]

    level = level if level is not None else config["level"]
    format_type = format_type if format_type is not None else config["format"]
    if enable_console is None:
        enable_console = handlers["console"]["enabled"]
    if enable_file_logging is None:
        enable_file_logging = handlers["file"]["enabled"]

    processors = _shared_processors(config["masked_fields"])

    structlog.configure(
        processors=processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    json_formatter = structlog.stdlib.ProcessorFormatter(
        processor=structlog.processors.JSONRenderer(ensure_ascii=False),
        foreign_pre_chain=processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if enable_console:
        console_handler = logging.StreamHandler(sys.stdout)
        if format_type == "console":
            console_handler.setFormatter(
                structlog.stdlib.ProcessorFormatter(
                    processor=structlog.dev.ConsoleRenderer(colors=True),
                    foreign_pre_chain=processors,
                )
            )
        else:
            console_handler.setFormatter(json_formatter)
        root_logger.addHandler(console_handler)

    if enable_file_logging:
        root_logger.addHandler(_file_handler(handlers["file"], json_formatter))

    for name, quiet_level in config["quiet_loggers"].items():
        logging.getLogger(name).setLevel(getattr(logging, quiet_level.upper()))


def get_logger(name: str) -> Any:
    """Return a structlog logger; pass ``__name__``."""
    return structlog.get_logger(name)


def log_with_source(logger: Any, source: str, level: str, message: str, **kwargs: Any) -> None:
    """
    Log with an explicit ``source`` field.

    For code running outside a request: Telegram handlers, the
    background sync, scheduled jobs.

    Raises:
        AttributeError: If level is not a valid log level

    Example:
        log_with_source(logger, "tasks", "info", "Reminders sent", sent=4)
    """
    log_method = getattr(logger, level.lower())
    log_method(message, source=source, **kwargs)
