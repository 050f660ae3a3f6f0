#!/usr/bin/env python3
"""
🔍 Centralized Logging System for LetsFocus
Console logging with colors in development, rotating log files,
and optional structured JSON output for log aggregation
"""

import json
import logging
import logging.handlers
import os
import platform
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict

IS_DEV_MODE = '--dev' in sys.argv or os.getenv('LETSFOCUS_DEV') == '1'
IS_PRODUCTION = os.getenv('LETSFOCUS_ENV') == 'production'

ENABLE_JSON_LOGS = os.getenv('LETSFOCUS_JSON_LOGS', '0') == '1'

if IS_PRODUCTION and not IS_DEV_MODE:
    LOG_LEVEL = logging.WARNING
    MAX_LOG_SIZE = 1 * 1024 * 1024
    BACKUP_COUNT = 1
else:
    LOG_LEVEL = logging.INFO
    MAX_LOG_SIZE = 5 * 1024 * 1024
    BACKUP_COUNT = 3

ENABLE_FILE_LOGGING = os.getenv('LETSFOCUS_FILE_LOGS', '1') != '0'
ENABLE_ERROR_LOGS = ENABLE_FILE_LOGGING


def _get_app_log_dir() -> Path:
    """Get application log directory path-agnostically"""
    env_log_dir = os.getenv('LETSFOCUS_LOG_DIR')
    if env_log_dir:
        return Path(env_log_dir)
    app_name = os.getenv("LETSFOCUS_APP_NAME", "letsfocus")
    return Path.home() / f".{app_name}" / "logs"


LOG_DIR = _get_app_log_dir()

_env_level = os.getenv('LETSFOCUS_LOG_LEVEL')
if _env_level:
    LOG_LEVEL = getattr(logging, _env_level.upper(), LOG_LEVEL)

if ENABLE_FILE_LOGGING:
    try:
        LOG_DIR.mkdir(parents=True, exist_ok=True)
    except OSError:
        # Console-only logging if the directory is not writable
        ENABLE_FILE_LOGGING = False
        ENABLE_ERROR_LOGS = False

FILE_FORMAT = '%(asctime)s | %(name)s | %(levelname)s | %(filename)s:%(lineno)d | %(message)s'

# LogRecord attributes that are not "extra" fields
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'message', 'pathname', 'process', 'processName', 'relativeCreated',
    'thread', 'threadName', 'exc_info', 'exc_text', 'stack_info',
    'taskName', 'no_color',
))


class ColoredFormatter(logging.Formatter):
    """Custom formatter with colors for console output."""

    COLORS = {
        'DEBUG': '\033[36m',     # Cyan
        'INFO': '\033[32m',      # Green
        'WARNING': '\033[33m',   # Yellow
        'ERROR': '\033[31m',     # Red
        'CRITICAL': '\033[35m',  # Magenta
        'RESET': '\033[0m'
    }

    def format(self, record: logging.LogRecord) -> str:
        if getattr(record, 'no_color', False):
            return super().format(record)

        color = self.COLORS.get(record.levelname, self.COLORS['RESET'])
        reset = self.COLORS['RESET']
        original = record.levelname
        record.levelname = f"{color}{original}{reset}"
        try:
            return super().format(record)
        finally:
            record.levelname = original


class JSONFormatter(logging.Formatter):
    """Structured JSON formatter.

    Example output:
        {"timestamp": "2026-10-18T10:30:00.123Z", "level": "WARNING",
         "logger": "playlist", "message": "Audio output failed to play: ..."}
    """

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc)
                                 .isoformat(timespec='milliseconds').replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.levelno >= logging.WARNING:
            log_data['source'] = f"{record.filename}:{record.lineno}"
            log_data['function'] = record.funcName

        if record.exc_info:
            log_data['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key in _RESERVED_ATTRS or key in log_data:
                continue
            try:
                json.dumps(value)
                log_data[key] = value
            except (TypeError, ValueError):
                log_data[key] = str(value)

        return json.dumps(log_data, ensure_ascii=True, sort_keys=True, default=str)


def _file_formatter() -> logging.Formatter:
    return JSONFormatter() if ENABLE_JSON_LOGS else logging.Formatter(FILE_FORMAT)


def setup_logging() -> logging.Logger:
    """Initialize logging for the application.

    Handlers go on the root logger so module loggers (``countdown``,
    ``playlist``, ...) share them.
    """
    root = logging.getLogger()
    if getattr(root, "_letsfocus_configured", False):
        return setup_logger("letsfocus")

    root.setLevel(LOG_LEVEL)
    console_handler = logging.StreamHandler()
    console_handler.setLevel(LOG_LEVEL)
    if ENABLE_JSON_LOGS:
        console_handler.setFormatter(JSONFormatter())
    elif IS_PRODUCTION and not IS_DEV_MODE:
        console_handler.setFormatter(logging.Formatter('%(asctime)s | %(levelname)s | %(message)s'))
    else:
        console_handler.setFormatter(ColoredFormatter('%(asctime)s | %(name)s | %(levelname)s | %(message)s'))
    root.addHandler(console_handler)

    if ENABLE_FILE_LOGGING:
        try:
            file_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "letsfocus.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setLevel(LOG_LEVEL)
            file_handler.setFormatter(_file_formatter())
            root.addHandler(file_handler)
        except OSError:
            pass

    if ENABLE_ERROR_LOGS:
        try:
            error_handler = logging.handlers.RotatingFileHandler(
                LOG_DIR / "letsfocus_errors.log",
                maxBytes=MAX_LOG_SIZE,
                backupCount=BACKUP_COUNT,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(_file_formatter())
            root.addHandler(error_handler)
        except OSError:
            pass

    root._letsfocus_configured = True  # type: ignore[attr-defined]
    return setup_logger("letsfocus")


def setup_logger(name: str) -> logging.Logger:
    """
    Return a named logger using the configured level.

    Args:
        name: Logger name (usually module name)
    """
    logger = logging.getLogger(name)
    logger.setLevel(LOG_LEVEL)
    return logger


def log_startup(logger: logging.Logger) -> None:
    """Log runtime information once at startup."""
    logger.info(f"🚀 Starting LetsFocus on Python {platform.python_version()} ({platform.system()})")
    if ENABLE_FILE_LOGGING:
        logger.info(f"📂 Logs: {LOG_DIR}")


def log_shutdown(logger: logging.Logger, component_name: str) -> None:
    """Log component shutdown and flush handlers."""
    logger.info(f"🛑 Shutting down {component_name}")
    for handler in logging.getLogger().handlers:
        handler.flush()
