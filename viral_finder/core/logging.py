"""Logging setup with structured output and operation timing"""

import json
import logging
import logging.handlers
import time
from datetime import datetime
from pathlib import Path
from functools import wraps

from .settings import get_settings


# LogRecord attributes that are not user supplied ``extra`` fields
_RESERVED_ATTRS = {
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname',
    'filename', 'module', 'exc_info', 'exc_text', 'stack_info',
    'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'taskName', 'message', 'asctime'
}


class StructuredFormatter(logging.Formatter):
    """
    Formatter emitting one JSON object per record.

    Used for production console output and for the rotating log files.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as structured JSON"""
        log_data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
        }

        if record.exc_info:
            log_data['exception'] = {
                'type': record.exc_info[0].__name__,
                'message': str(record.exc_info[1]),
                'traceback': self.formatException(record.exc_info)
            }

        extra_fields = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS
        }
        if extra_fields:
            log_data['extra'] = extra_fields

        return json.dumps(log_data, default=str, ensure_ascii=False)


class LoggingManager:
    """
    Centralized logging configuration.

    Console output is human readable in development and JSON in
    production. File logging is opt-in through ``LOG_TO_FILE``.
    """

    def __init__(self):
        self.configured = False
        self.loggers = {}

    def setup_logging(self):
        """Configure logging system"""
        if self.configured:
            return

        settings = get_settings()
        level = self.resolve_level(settings)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        console_handler = logging.StreamHandler()
        console_handler.setLevel(level)
        if settings.is_production:
            console_handler.setFormatter(StructuredFormatter())
        else:
            console_format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
            console_handler.setFormatter(logging.Formatter(console_format))
        root_logger.addHandler(console_handler)

        if settings.log_to_file:
            log_dir = Path("logs")
            log_dir.mkdir(exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                log_dir / "viral_finder.log",
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=3,
                encoding="utf-8"
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(StructuredFormatter())
            root_logger.addHandler(file_handler)

        # httpx logs every request URL, which includes the API key
        logging.getLogger("httpx").setLevel(logging.WARNING)

        self.configured = True

        logging.getLogger(__name__).debug(
            "Logging system initialized",
            extra={
                'environment': settings.environment,
                'log_level': logging.getLevelName(level),
                'log_to_file': settings.log_to_file
            }
        )

    @staticmethod
    def resolve_level(settings) -> int:
        """DEBUG mode overrides the configured log level"""
        if settings.debug:
            return logging.DEBUG
        return getattr(logging, settings.log_level)

    def get_logger(self, name: str) -> logging.Logger:
        """Get a configured logger instance"""
        if not self.configured:
            self.setup_logging()

        if name not in self.loggers:
            self.loggers[name] = logging.getLogger(name)

        return self.loggers[name]


# Global logging manager
logging_manager = LoggingManager()


def get_logger(name: str) -> logging.Logger:
    """Get a configured logger instance"""
    return logging_manager.get_logger(name)


def setup_logging():
    """Initialize the logging system"""
    logging_manager.setup_logging()


def log_performance(operation: str):
    """
    Decorator logging start, completion and failure of a coroutine.

    Args:
        operation: Name of the operation recorded in the log extras
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__)
            start_time = time.perf_counter()
            success = True

            logger.debug(f"Starting {operation}", extra={'operation': operation})

            try:
                return await func(*args, **kwargs)
            except Exception as e:
                success = False
                logger.warning(
                    f"Operation {operation} failed: {e}",
                    extra={
                        'operation': operation,
                        'error_type': type(e).__name__,
                    }
                )
                raise
            finally:
                duration = time.perf_counter() - start_time
                logger.info(
                    f"Completed {operation} in {duration:.2f}s",
                    extra={
                        'operation': operation,
                        'duration': duration,
                        'success': success,
                    }
                )

        return wrapper

    return decorator
