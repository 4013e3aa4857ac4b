"""
Logging utilities for the Feature Flag API
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Extra record attributes copied into JSON log entries
EXTRA_FIELDS = (
    "request_id",
    "feature_key",
    "operation",
    "client_ip",
    "method",
    "path",
    "route",
    "status_code",
    "duration_ms",
    "component",
    "event",
    "error_type",
)


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging"""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON"""

        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        for field in EXTRA_FIELDS:
            if hasattr(record, field):
                log_entry[field] = getattr(record, field)

        return json.dumps(log_entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Colored formatter for console output"""

    COLORS = {
        'DEBUG': '\033[36m',    # Cyan
        'INFO': '\033[32m',     # Green
        'WARNING': '\033[33m',  # Yellow
        'ERROR': '\033[31m',    # Red
        'CRITICAL': '\033[35m', # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with colors"""

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']

        timestamp = datetime.fromtimestamp(record.created).strftime('%Y-%m-%d %H:%M:%S')

        message = f"{color}[{timestamp}] {record.levelname:8} {record.name}: {record.getMessage()}{reset}"

        if record.exc_info:
            message += f"\n{self.formatException(record.exc_info)}"

        return message


def setup_logging(
    level: str = "INFO",
    format_type: str = "json",
    log_file: Optional[str] = None
) -> None:
    """Setup logging configuration"""

    numeric_level = getattr(logging, level.upper(), logging.INFO)

    if format_type.lower() == "json":
        formatter = JSONFormatter()
    else:
        formatter = ColoredFormatter()

    handlers = []

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.setLevel(numeric_level)
    handlers.append(console_handler)

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(JSONFormatter())  # Always use JSON for files
        file_handler.setLevel(numeric_level)
        handlers.append(file_handler)

    logging.basicConfig(
        level=numeric_level,
        handlers=handlers,
        force=True
    )

    # Requests are logged by our own middleware
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("fastapi").setLevel(logging.WARNING)

    logger = logging.getLogger("feature_flag_api")
    logger.info("Logging configured", extra={"event": "logging_configured"})


class ContextLogger:
    """Logger with context information"""

    def __init__(self, name: str, context: Dict[str, Any] = None):
        self.logger = logging.getLogger(name)
        self.context = context or {}

    def _log(self, level: int, message: str, *args, **kwargs):
        """Log with context"""
        extra = dict(self.context)
        extra.update(kwargs.get('extra') or {})
        kwargs['extra'] = extra

        self.logger.log(level, message, *args, **kwargs)

    def debug(self, message: str, *args, **kwargs):
        self._log(logging.DEBUG, message, *args, **kwargs)

    def info(self, message: str, *args, **kwargs):
        self._log(logging.INFO, message, *args, **kwargs)

    def warning(self, message: str, *args, **kwargs):
        self._log(logging.WARNING, message, *args, **kwargs)

    def error(self, message: str, *args, **kwargs):
        self._log(logging.ERROR, message, *args, **kwargs)

    def exception(self, message: str, *args, **kwargs):
        kwargs['exc_info'] = True
        self._log(logging.ERROR, message, *args, **kwargs)

    def with_context(self, **context) -> 'ContextLogger':
        """Create new logger with additional context"""
        new_context = self.context.copy()
        new_context.update(context)
        return ContextLogger(self.logger.name, new_context)


def get_logger(name: str, **context) -> ContextLogger:
    """Get context logger"""
    return ContextLogger(name, context)


def log_request(
    logger: logging.Logger,
    client_ip: str,
    method: str,
    path: str,
    route: str,
    status_code: int,
    duration_ms: float,
):
    """Log a served request"""
    logger.info(
        f"{client_ip}\t{method}\t{path}\t{route}\t{duration_ms:.3f}ms",
        extra={
            "client_ip": client_ip,
            "method": method,
            "path": path,
            "route": route,
            "status_code": status_code,
            "duration_ms": round(duration_ms, 3),
            "event": "request"
        }
    )


def log_error(
    logger: logging.Logger,
    error: Exception,
    context: Dict[str, Any] = None,
):
    """Log error with context"""
    extra = {
        "error_type": type(error).__name__,
        "event": "error"
    }

    if context:
        extra.update(context)

    logger.error(
        f"Error occurred: {type(error).__name__}: {error}",
        extra=extra,
        exc_info=True
    )
