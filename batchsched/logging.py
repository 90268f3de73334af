"""
Structured Logging for batchsched

This module wires structlog on top of the standard library so scheduler
components can emit key/value events (allocations, failures, pass
boundaries) that render either as colored console lines or as JSON.
"""

import json
import logging
import logging.handlers
import sys
import time
from datetime import datetime
from functools import wraps

import structlog

from .config import get_config


def trace_operation(operation_name: str):
    """Decorator to log start, completion and failure of an operation."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            logger = get_logger(f"batchsched.trace.{func.__module__}")
            start_time = time.time()

            logger.debug(
                f"Starting operation: {operation_name}",
                operation=operation_name,
                function=func.__name__,
            )

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"Failed operation: {operation_name}",
                    operation=operation_name,
                    function=func.__name__,
                    duration_seconds=time.time() - start_time,
                    success=False,
                    error=str(e),
                )
                raise

            logger.debug(
                f"Completed operation: {operation_name}",
                operation=operation_name,
                function=func.__name__,
                duration_seconds=time.time() - start_time,
                success=True,
            )
            return result

        return wrapper

    return decorator


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    # Attributes every LogRecord carries; anything else is an extra field
    _RESERVED = {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
    }

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.utcnow().isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in self._RESERVED:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class ConsoleFormatter(logging.Formatter):
    """Console formatter with color support."""

    # ANSI color codes
    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
        "RESET": "\033[0m",
        "GRAY": "\033[90m",
    }

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.COLORS.get(record.levelname, "")
        reset_color = self.COLORS["RESET"]
        gray_color = self.COLORS["GRAY"]

        timestamp = datetime.utcnow().strftime("%H:%M:%S.%f")[:-3]

        message = record.getMessage()
        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return (
            f"{gray_color}{timestamp}{reset_color} "
            f"{level_color}{record.levelname:8}{reset_color} "
            f"{record.name:28} "
            f"{message}"
        )


def setup_logging():
    """Setup structured logging for batchsched."""
    config = get_config()

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.TimeStamper(fmt="ISO"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            (
                structlog.processors.JSONRenderer()
                if config.logging.log_format == "json"
                else structlog.dev.ConsoleRenderer(colors=False)
            ),
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, config.logging.log_level))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    # stderr keeps stdout free for reports piped by the CLI
    console_handler = logging.StreamHandler(sys.stderr)

    if config.logging.log_format == "json":
        console_handler.setFormatter(JSONFormatter())
    else:
        console_handler.setFormatter(ConsoleFormatter())

    root_logger.addHandler(console_handler)

    if config.logging.log_file:
        file_handler = logging.handlers.RotatingFileHandler(
            config.logging.log_file, maxBytes=10 * 1024 * 1024, backupCount=5
        )
        file_handler.setFormatter(JSONFormatter())
        root_logger.addHandler(file_handler)

    logging.getLogger("batchsched.setup").debug(
        f"Logging initialized - log_level={config.logging.log_level}, "
        f"log_format={config.logging.log_format}"
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


# Initialize logging on module import
setup_logging()
