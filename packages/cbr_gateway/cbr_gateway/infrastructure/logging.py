"""Logging setup for the CBR Gateway.

Call lifecycle lines carry a ``category`` tag (``cbr`` by default) so gateway
traffic can be told apart from other output of the host application. Records
emitted without one get the default category from :class:`CategoryFilter`.
"""

import json
import logging
import logging.handlers
import sys
from datetime import UTC, datetime
from enum import Enum
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

DEFAULT_CATEGORY = "cbr"

# Attributes every LogRecord has; anything else arrived through ``extra=``
_RECORD_ATTRIBUTES = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}


class LogLevel(str, Enum):
    """Valid log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LoggingConfig(BaseModel):
    """Handler and format settings applied by :func:`setup_logging`."""

    level: LogLevel = Field(default=LogLevel.INFO, description="Root log level")
    format: str = Field(
        default="%(asctime)s [%(category)s] %(levelname)s %(name)s: %(message)s",
        description="Text log line format; may use %(category)s",
    )
    date_format: str = Field(default="%Y-%m-%d %H:%M:%S", description="Timestamp format")
    category: str = Field(
        default=DEFAULT_CATEGORY, description="Category stamped on records that carry none"
    )
    console_enabled: bool = Field(default=True, description="Write log lines to the console")
    console_stream: Literal["stdout", "stderr"] = Field(
        default="stderr", description="Console stream, stderr keeps stdout free for results"
    )
    file_enabled: bool = Field(default=False, description="Also write a rotating log file")
    file_path: Path | None = Field(default=None, description="Rotating log file path")
    max_bytes: int = Field(default=10_485_760, description="Log file size before rotation")  # 10MB
    backup_count: int = Field(default=5, description="Rotated log files to keep")
    json_format: bool = Field(default=False, description="Emit one JSON object per line")

    @field_validator("file_path")
    @classmethod
    def validate_file_path(cls, v: Path | None) -> Path | None:
        """Create the log directory up front."""
        if v is not None:
            v.parent.mkdir(parents=True, exist_ok=True)
        return v


class CategoryFilter(logging.Filter):
    """Stamps a default ``category`` on records emitted without one."""

    def __init__(self, category: str = DEFAULT_CATEGORY) -> None:
        super().__init__()
        self.category = category

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "category"):
            record.category = self.category
        return True


class StructuredFormatter(logging.Formatter):
    """Renders a record and its ``extra=`` context as one JSON object."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)

        payload.update(
            (key, value) for key, value in vars(record).items() if key not in _RECORD_ATTRIBUTES
        )
        # Cyrillic currency names stay readable
        return json.dumps(payload, default=str, ensure_ascii=False)


def _build_handlers(config: LoggingConfig) -> list[logging.Handler]:
    handlers: list[logging.Handler] = []
    if config.console_enabled:
        stream = sys.stdout if config.console_stream == "stdout" else sys.stderr
        handlers.append(logging.StreamHandler(stream))
    if config.file_enabled and config.file_path:
        handlers.append(
            logging.handlers.RotatingFileHandler(
                filename=config.file_path,
                maxBytes=config.max_bytes,
                backupCount=config.backup_count,
                encoding="utf-8",
            )
        )
    return handlers


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Replace the root logger's handlers according to ``config``.

    Args:
        config: Logging configuration; defaults if None
    """
    config = config or LoggingConfig()

    if config.json_format:
        formatter: logging.Formatter = StructuredFormatter()
    else:
        formatter = logging.Formatter(config.format, datefmt=config.date_format)
    category_filter = CategoryFilter(config.category)

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(config.level.value)
    for handler in _build_handlers(config):
        handler.setFormatter(formatter)
        handler.addFilter(category_filter)
        root_logger.addHandler(handler)

    logging.getLogger(__name__).debug(
        "Logging configured", extra={"logging_config": config.model_dump(mode="json")}
    )


def get_logger(name: str) -> logging.Logger:
    """Get the logger for a module (usually ``__name__``)."""
    return logging.getLogger(name)


def log_call_event(
    logger: logging.Logger,
    level: int,
    message: str,
    category: str,
    **context: Any,
) -> None:
    """Emit a call lifecycle line.

    Errors raised by the logging sink are dropped so they never change the
    outcome of the call being logged.

    Args:
        logger: Logger receiving the line
        level: Severity
        message: Log message
        category: Category tag attached to the record
        **context: Additional record attributes
    """
    try:
        logger.log(level, message, extra={"category": category, **context})
    except Exception:  # noqa: BLE001
        pass
