"""
Logging Configuration for MentorHub
Provides structured logging with colors for console and JSON for production
"""
import json
import logging
import sys
from datetime import datetime
from typing import Optional
from pathlib import Path

from mentorhub.core.config import Settings, settings as default_settings


# ANSI color codes for console output
class Colors:
    RESET = "\033[0m"
    RED = "\033[91m"
    GREEN = "\033[92m"
    YELLOW = "\033[93m"
    BLUE = "\033[94m"
    MAGENTA = "\033[95m"
    CYAN = "\033[96m"
    WHITE = "\033[97m"
    BOLD = "\033[1m"
    DIM = "\033[2m"


class ColoredFormatter(logging.Formatter):
    """Console formatter with a color per log level"""

    LEVEL_COLORS = {
        logging.DEBUG: Colors.DIM + Colors.CYAN,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        level_color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        timestamp = datetime.fromtimestamp(record.created).strftime("%Y-%m-%d %H:%M:%S")

        level_name = f"{level_color}{record.levelname:8}{Colors.RESET}"
        logger_name = f"{Colors.CYAN}{record.name}{Colors.RESET}"

        extra_info = ""
        if hasattr(record, 'request_id'):
            extra_info += f" {Colors.DIM}[{record.request_id}]{Colors.RESET}"
        if hasattr(record, 'user_id'):
            extra_info += f" {Colors.MAGENTA}user={record.user_id}{Colors.RESET}"
        if hasattr(record, 'booking_id'):
            extra_info += f" {Colors.BLUE}booking={record.booking_id}{Colors.RESET}"

        formatted = f"{Colors.DIM}{timestamp}{Colors.RESET} | {level_name} | {logger_name}{extra_info} | {record.getMessage()}"

        if record.exc_info:
            formatted += f"\n{Colors.RED}{self.formatException(record.exc_info)}{Colors.RESET}"

        return formatted


class JSONFormatter(logging.Formatter):
    """JSON formatter for production logs"""

    EXTRA_KEYS = (
        'request_id', 'user_id', 'endpoint', 'method', 'status_code',
        'duration_ms', 'ip_address', 'error_code', 'booking_id',
        'from_status', 'to_status',
    )

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        for key in self.EXTRA_KEYS:
            if hasattr(record, key):
                log_data[key] = getattr(record, key)

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_data, default=str)


def setup_logging(
    log_level: Optional[str] = None,
    log_file: Optional[str] = None,
    json_format: Optional[bool] = None,
    app_settings: Optional[Settings] = None
) -> logging.Logger:
    """
    Configure application logging

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_file: Path to log file (optional)
        json_format: Use JSON format for console logs
        app_settings: Settings to read defaults from

    Returns:
        Root logger configured for the application
    """
    cfg = app_settings or default_settings

    log_level = log_level or cfg.LOG_LEVEL
    log_file = log_file or cfg.LOG_FILE
    if json_format is None:
        json_format = cfg.LOG_JSON or cfg.APP_ENV == "production"

    if log_level:
        level = getattr(logging, log_level.upper(), logging.INFO)
    else:
        level = logging.DEBUG if cfg.DEBUG else logging.INFO

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(JSONFormatter() if json_format else ColoredFormatter())
    root_logger.addHandler(console_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(level)
        file_handler.setFormatter(JSONFormatter())  # Always JSON for files
        root_logger.addHandler(file_handler)

    # Set levels for noisy libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    """Get a logger instance with the given name"""
    return logging.getLogger(name)


def log_api_request(
    logger: logging.Logger,
    method: str,
    path: str,
    status_code: int,
    duration_ms: float,
    request_id: Optional[str] = None,
    user_id: Optional[int] = None,
    ip_address: Optional[str] = None,
    error: Optional[str] = None
):
    """Log an API request with all relevant details"""
    extra = {
        'method': method,
        'endpoint': path,
        'status_code': status_code,
        'duration_ms': round(duration_ms, 2),
    }
    if request_id:
        extra['request_id'] = request_id
    if user_id:
        extra['user_id'] = user_id
    if ip_address:
        extra['ip_address'] = ip_address

    if status_code >= 500:
        level = logging.ERROR
        msg = f"{method} {path} -> {status_code} ({duration_ms:.2f}ms) ERROR: {error or 'Internal Server Error'}"
    elif status_code >= 400:
        level = logging.WARNING
        msg = f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)"
    else:
        level = logging.INFO
        msg = f"{method} {path} -> {status_code} ({duration_ms:.2f}ms)"

    logger.log(level, msg, extra=extra)


def log_status_change(
    logger: logging.Logger,
    booking_id: int,
    from_status: str,
    to_status: str,
    actor_id: Optional[int] = None,
    reason: Optional[str] = None
):
    """Log a booking lifecycle transition for auditing"""
    extra = {
        'booking_id': booking_id,
        'from_status': from_status,
        'to_status': to_status,
    }
    if actor_id:
        extra['user_id'] = actor_id

    actor = f"user {actor_id}" if actor_id else "system"
    msg = f"BOOKING: {booking_id} {from_status} -> {to_status} by {actor}"
    if reason:
        msg += f" ({reason})"
    logger.info(msg, extra=extra)


def log_error(
    logger: logging.Logger,
    error: Exception,
    context: Optional[dict] = None,
    request_id: Optional[str] = None
):
    """Log an error with full context"""
    extra = dict(context or {})
    if request_id:
        extra['request_id'] = request_id
    if hasattr(error, 'error_code'):
        extra['error_code'] = error.error_code

    logger.error(
        f"{type(error).__name__}: {str(error)}",
        exc_info=True,
        extra=extra
    )
