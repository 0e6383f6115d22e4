#!/usr/bin/env python3
"""
GrammarCheck Logging & Error Module
===================================
Centralized logging configuration, structured logging, and the error
taxonomy shared by every grammarcheck component.

Version: module v1.0
"""

import os
import sys
import json
import logging
import uuid
import time
import contextvars
from datetime import datetime, timezone
from typing import Optional, Dict, Any
from pathlib import Path
from dataclasses import dataclass, field
from contextlib import contextmanager

# =============================================================================
# CONFIGURATION CONSTANTS
# =============================================================================
LOG_FILE_MAX_BYTES = 5 * 1024 * 1024  # 5MB max per log file
LOG_BACKUP_COUNT = 5                # Number of log backup files to keep
ENV_PREFIX = "GCS_"

__version__ = "1.0.0"

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================

@dataclass
class LogConfig:
    """Logging configuration with quiet library defaults."""

    log_level: str = "WARNING"
    log_format: str = "json"  # Options: json, text
    log_to_file: bool = False
    log_to_console: bool = True
    log_dir: Path = field(default_factory=lambda: Path.cwd() / 'logs')

    def __post_init__(self):
        if self.log_format not in ('json', 'text'):
            self.log_format = 'json'
        if not hasattr(logging, self.log_level.upper()):
            self.log_level = 'WARNING'
        if self.log_to_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)

    @classmethod
    def from_env(cls) -> 'LogConfig':
        """Load logging configuration from environment variables."""
        log_dir = os.environ.get(f'{ENV_PREFIX}LOG_DIR')
        return cls(
            log_level=os.environ.get(f'{ENV_PREFIX}LOG_LEVEL', 'WARNING'),
            log_format=os.environ.get(f'{ENV_PREFIX}LOG_FORMAT', 'json'),
            log_to_file=os.environ.get(f'{ENV_PREFIX}LOG_TO_FILE', 'false').lower() == 'true',
            log_to_console=os.environ.get(f'{ENV_PREFIX}LOG_TO_CONSOLE', 'true').lower() == 'true',
            log_dir=Path(log_dir) if log_dir else Path.cwd() / 'logs',
        )


# Global config instance
_config: Optional[LogConfig] = None


def get_config() -> LogConfig:
    """Get or create the global logging configuration."""
    global _config
    if _config is None:
        _config = LogConfig.from_env()
    return _config


def reset_config():
    """Reset the global logging configuration (for testing)."""
    global _config
    _config = None


# =============================================================================
# STRUCTURED LOGGING
# =============================================================================

_correlation_id: contextvars.ContextVar = contextvars.ContextVar('correlation_id', default=None)

# LogRecord attributes that extra fields must not shadow
_RESERVED_ATTRS = frozenset((
    'name', 'msg', 'args', 'created', 'filename', 'funcName',
    'levelname', 'levelno', 'lineno', 'module', 'msecs',
    'pathname', 'process', 'processName', 'relativeCreated',
    'stack_info', 'thread', 'threadName', 'exc_info', 'exc_text',
    'message', 'taskName', 'asctime',
))


class StructuredLogger:
    """Task-safe structured JSON logger with correlation IDs."""

    def __init__(self, name: str, config: Optional[LogConfig] = None):
        self.name = name
        self.config = config or get_config()
        self._setup_logger()

    def _setup_logger(self):
        """Configure the underlying Python logger."""
        self.logger = logging.getLogger(self.name)
        self.logger.setLevel(getattr(logging, self.config.log_level.upper()))
        self.logger.handlers.clear()
        self.logger.propagate = False

        if self.config.log_format == 'json':
            formatter = JsonFormatter()
        else:
            formatter = logging.Formatter(
                '%(asctime)s [%(levelname)s] %(name)s - %(message)s'
            )

        if self.config.log_to_console:
            console_handler = logging.StreamHandler(sys.stderr)
            console_handler.setFormatter(formatter)
            self.logger.addHandler(console_handler)

        # File handler with rotation
        if self.config.log_to_file:
            from logging.handlers import RotatingFileHandler
            log_file = self.config.log_dir / f"{self.name.lower()}.log"
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=LOG_FILE_MAX_BYTES,
                backupCount=LOG_BACKUP_COUNT,
                encoding='utf-8'
            )
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

        if not self.logger.handlers:
            self.logger.addHandler(logging.NullHandler())

    @classmethod
    def set_correlation_id(cls, correlation_id: str):
        """Set correlation ID for the current task or thread."""
        _correlation_id.set(correlation_id)

    @classmethod
    def get_correlation_id(cls) -> str:
        """Get correlation ID for the current task or thread."""
        return _correlation_id.get() or str(uuid.uuid4())[:8]

    @classmethod
    def new_correlation_id(cls) -> str:
        """Generate and set a new correlation ID."""
        correlation_id = str(uuid.uuid4())[:12]
        cls.set_correlation_id(correlation_id)
        return correlation_id

    def _extra(self, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        """Build the extra mapping for a record, renaming reserved keys."""
        extra = {'correlation_id': self.get_correlation_id()}
        for key, value in kwargs.items():
            extra[f'ctx_{key}' if key in _RESERVED_ATTRS else key] = value
        return extra

    def _log(self, level: int, message: str, exc_info: bool = False, **kwargs):
        if not self.logger.isEnabledFor(level):
            return
        self.logger.log(level, message, exc_info=exc_info, extra=self._extra(kwargs))

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self._log(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self._log(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self._log(logging.WARNING, message, **kwargs)

    def error(self, message: str, exc_info: bool = False, **kwargs):
        """Log error message with optional exception info."""
        self._log(logging.ERROR, message, exc_info=exc_info, **kwargs)

    def exception(self, message: str, **kwargs):
        """Log exception with full traceback."""
        self.error(message, exc_info=True, **kwargs)

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self._log(logging.CRITICAL, message, **kwargs)

    @contextmanager
    def log_operation(self, operation: str, **context):
        """Context manager for logging operation start/end with timing."""
        start_time = time.perf_counter()
        self.debug(f"{operation} started", operation=operation, status='started', **context)
        try:
            yield
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.info(f"{operation} completed", operation=operation, status='completed',
                      duration_ms=round(duration_ms, 2), **context)
        except Exception as e:
            duration_ms = (time.perf_counter() - start_time) * 1000
            self.error(f"{operation} failed: {e}", operation=operation, status='failed',
                       duration_ms=round(duration_ms, 2), exc_info=True, **context)
            raise


class JsonFormatter(logging.Formatter):
    """JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
        }

        if record.exc_info:
            log_data['traceback'] = self.formatException(record.exc_info)

        # Add extra fields
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS:
                log_data[key] = value

        return json.dumps(log_data, default=str)


# Factory function for getting loggers
def get_logger(name: str) -> StructuredLogger:
    """Get a structured logger instance."""
    return StructuredLogger(name, get_config())


# =============================================================================
# ERROR HANDLING
# =============================================================================

class GrammarServiceError(Exception):
    """Base exception for grammarcheck."""

    def __init__(self, message: str, code: str = "UNKNOWN_ERROR",
                 details: Optional[Dict] = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a serializable error dict."""
        return {
            'success': False,
            'error': {
                'code': self.code,
                'message': self.message,
                'details': self.details
            }
        }


class AdapterError(GrammarServiceError):
    """An engine adapter failed to initialize or analyze."""
    def __init__(self, message: str, engine: Optional[str] = None, **kwargs):
        super().__init__(message, code="ADAPTER_ERROR",
                         details={'engine': engine, **kwargs})
        self.engine = engine


class AdapterTimeoutError(AdapterError):
    """An engine adapter exceeded its time budget."""
    def __init__(self, engine: str, timeout_ms: float, **kwargs):
        super().__init__(f"{engine} timed out after {timeout_ms:.0f}ms", engine=engine,
                         timeout_ms=timeout_ms, **kwargs)
        self.code = "ADAPTER_TIMEOUT"


class NormalizationError(GrammarServiceError):
    """A raw engine issue could not be mapped onto the analyzed text."""
    def __init__(self, message: str, engine: Optional[str] = None, **kwargs):
        super().__init__(message, code="NORMALIZATION_ERROR",
                         details={'engine': engine, **kwargs})


class ConfigurationError(GrammarServiceError):
    """Invalid configuration key or value."""
    def __init__(self, message: str, key: Optional[str] = None, **kwargs):
        super().__init__(message, code="CONFIG_ERROR",
                         details={'key': key, **kwargs})


class ClassificationError(GrammarServiceError):
    """Suggestion classification failed."""
    def __init__(self, message: str, **kwargs):
        super().__init__(message, code="CLASSIFICATION_ERROR", details=kwargs)
