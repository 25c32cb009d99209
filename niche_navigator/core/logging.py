"""Logging setup: readable console output, JSON files, and an async timing decorator"""

import json
import logging
import logging.handlers
import time
from datetime import datetime, timezone
from pathlib import Path
from functools import wraps
from typing import List

from .settings import Settings, get_settings


CONSOLE_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Third-party loggers that log every HTTP exchange at INFO
NOISY_LOGGERS = ("httpx", "httpcore")

# Attributes every LogRecord carries; anything else came in through ``extra``
_RECORD_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class StructuredFormatter(logging.Formatter):
    """One JSON object per line, with ``extra`` fields merged in at the top level."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            'timestamp': datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'location': f"{record.module}:{record.funcName}:{record.lineno}",
        }

        for key, value in vars(record).items():
            if key not in _RECORD_ATTRS and key not in entry:
                entry[key] = value

        if record.exc_info:
            entry['error_type'] = record.exc_info[0].__name__
            entry['traceback'] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str, ensure_ascii=False)


class EnvironmentFilter(logging.Filter):
    """Stamps every record with the deployment environment"""

    def __init__(self, environment: str):
        super().__init__()
        self.environment = environment

    def filter(self, record: logging.LogRecord) -> bool:
        record.environment = self.environment
        return True


def _rotating_file(path: Path, level: int, max_mb: int, backups: int) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        path, maxBytes=max_mb * 1024 * 1024, backupCount=backups, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(StructuredFormatter())
    return handler


class LoggingManager:
    """
    Configures the root logger once per process.

    Console output is human-readable except in production, where it is JSON.
    When ``log_dir`` is set, ``application.log`` (INFO and up) and
    ``errors.log`` (ERROR and up) are written there as JSON and rotated.
    """

    def __init__(self):
        self.configured = False

    def build_handlers(self, settings: Settings) -> List[logging.Handler]:
        level = getattr(logging, settings.log_level)

        console = logging.StreamHandler()
        console.setLevel(level)
        if settings.is_production:
            console.setFormatter(StructuredFormatter())
        else:
            console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
        handlers = [console]

        if settings.log_dir:
            log_dir = Path(settings.log_dir)
            log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(_rotating_file(log_dir / "application.log", logging.INFO, 50, 5))
            handlers.append(_rotating_file(log_dir / "errors.log", logging.ERROR, 10, 3))

        env_filter = EnvironmentFilter(settings.environment)
        for handler in handlers:
            handler.addFilter(env_filter)
        return handlers

    def setup_logging(self, force: bool = False):
        if self.configured and not force:
            return

        settings = get_settings()
        root_logger = logging.getLogger()
        root_logger.setLevel(getattr(logging, settings.log_level))

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)
            handler.close()
        for handler in self.build_handlers(settings):
            root_logger.addHandler(handler)

        for name in NOISY_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

        self.configured = True
        logging.getLogger(__name__).debug(
            "Logging configured",
            extra={'log_level': settings.log_level, 'log_dir': settings.log_dir or None}
        )


# Global logging manager
logging_manager = LoggingManager()


def setup_logging(force: bool = False):
    """Initialize the logging system"""
    logging_manager.setup_logging(force=force)


def log_performance(operation: str):
    """
    Log how long an async service operation took.

    Failures are logged with their exception type and re-raised.

    Args:
        operation: Name recorded in the ``operation`` field
    """
    def decorator(func):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__)
            started = time.perf_counter()
            try:
                result = await func(*args, **kwargs)
            except Exception as e:
                logger.error(
                    f"{operation} failed after {time.perf_counter() - started:.3f}s: {e}",
                    extra={'operation': operation, 'error_type': type(e).__name__}
                )
                raise

            elapsed = time.perf_counter() - started
            logger.info(
                f"{operation} finished in {elapsed:.3f}s",
                extra={'operation': operation, 'duration_ms': round(elapsed * 1000, 1)}
            )
            return result

        return wrapper

    return decorator
