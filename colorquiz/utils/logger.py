"""Logging configuration for Color Quiz.

This module provides structured logging with different handlers for development,
test and production environments, including JSON formatting for log shipping.
"""

import logging
import logging.handlers
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from pythonjsonlogger import jsonlogger


class ColorQuizFormatter(jsonlogger.JsonFormatter):
    """Custom JSON formatter for Color Quiz application logs."""

    def add_fields(self, log_record: Dict[str, Any], record: logging.LogRecord, message_dict: Dict[str, Any]) -> None:
        """Add custom fields to log record.

        Args:
            log_record: The log record dictionary to modify
            record: The original logging record
            message_dict: Additional message data
        """
        super().add_fields(log_record, record, message_dict)

        log_record['timestamp'] = datetime.now(timezone.utc).isoformat()
        log_record['level'] = record.levelname
        log_record['logger'] = record.name
        log_record['function'] = record.funcName
        log_record['line'] = record.lineno

        log_record['application'] = 'colorquiz'
        log_record['service'] = 'quiz-api'

        if record.exc_info:
            log_record['exception'] = self.formatException(record.exc_info)


class ContextFilter(logging.Filter):
    """Filter to add contextual information to log records."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        """Initialize context filter.

        Args:
            context: Additional context to add to all log records
        """
        super().__init__()
        self.context = context or {}

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.items():
            setattr(record, key, value)
        return True


class RequestContextFilter(logging.Filter):
    """Filter to stamp the current request id onto log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        # Imported lazily: the middleware module itself logs through this package
        from colorquiz.api.middleware.request_id import request_id_var

        request_id = request_id_var.get()
        if request_id and not hasattr(record, 'request_id'):
            record.request_id = request_id
        return True


class LoggerConfig:
    """Logger configuration manager."""

    COMPONENTS = {
        'api': 'colorquiz.api',
        'database': 'colorquiz.database',
        'cache': 'colorquiz.cache',
        'scoring': 'colorquiz.scoring',
        'business': 'colorquiz.business',
    }

    def __init__(self, environment: str = 'development', log_level: str = 'INFO', log_dir: str = 'logs'):
        """Initialize logger configuration.

        Args:
            environment: Environment name (development, staging, production, test)
            log_level: Default log level
            log_dir: Directory for file handlers (unused in test)
        """
        self.environment = environment
        self.log_level = getattr(logging, log_level.upper())
        self.log_dir = Path(log_dir)
        if self.environment != 'test':
            self.log_dir.mkdir(exist_ok=True)

        self._configure_root_logger()
        self._configure_component_loggers()

    def _configure_root_logger(self) -> None:
        """Configure the root logger."""
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level)
        root_logger.handlers.clear()

        if self.environment in ('production', 'staging'):
            self._add_production_handlers(root_logger)
        elif self.environment == 'test':
            self._add_test_handlers(root_logger)
        else:
            self._add_development_handlers(root_logger)

    def _add_production_handlers(self, logger: logging.Logger) -> None:
        """Add JSON console and rotating file handlers.

        Args:
            logger: Logger to configure
        """
        json_formatter = ColorQuizFormatter(
            fmt='%(timestamp)s %(level)s %(logger)s %(message)s'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.INFO)
        console_handler.setFormatter(json_formatter)
        console_handler.addFilter(RequestContextFilter())
        logger.addHandler(console_handler)

        error_handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / "error.log",
            maxBytes=10 * 1024 * 1024,  # 10MB
            backupCount=5,
            encoding='utf-8'
        )
        error_handler.setLevel(logging.ERROR)
        error_handler.setFormatter(json_formatter)
        error_handler.addFilter(RequestContextFilter())
        logger.addHandler(error_handler)

        app_handler = logging.handlers.RotatingFileHandler(
            filename=self.log_dir / "application.log",
            maxBytes=50 * 1024 * 1024,  # 50MB
            backupCount=10,
            encoding='utf-8'
        )
        app_handler.setLevel(logging.INFO)
        app_handler.setFormatter(json_formatter)
        app_handler.addFilter(RequestContextFilter())
        logger.addHandler(app_handler)

    def _add_development_handlers(self, logger: logging.Logger) -> None:
        """Add readable console and debug file handlers.

        Args:
            logger: Logger to configure
        """
        dev_formatter = logging.Formatter(
            fmt='%(asctime)s | %(levelname)-8s | %(name)-25s | %(funcName)-15s:%(lineno)-3d | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(dev_formatter)
        logger.addHandler(console_handler)

        debug_handler = logging.FileHandler(
            filename=self.log_dir / "debug.log",
            mode='a',
            encoding='utf-8'
        )
        debug_handler.setLevel(logging.DEBUG)
        debug_handler.setFormatter(dev_formatter)
        logger.addHandler(debug_handler)

    def _add_test_handlers(self, logger: logging.Logger) -> None:
        """Add test environment handlers.

        Args:
            logger: Logger to configure
        """
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(logging.WARNING)
        console_handler.setFormatter(logging.Formatter(
            fmt='TEST | %(levelname)s | %(name)s | %(message)s'
        ))
        logger.addHandler(console_handler)

    def _configure_component_loggers(self) -> None:
        """Configure individual component loggers."""
        for component, logger_name in self.COMPONENTS.items():
            logger = logging.getLogger(logger_name)
            logger.setLevel(self.log_level)
            logger.addFilter(ContextFilter({'component': component}))

    def get_logger(self, name: str) -> logging.Logger:
        return logging.getLogger(name)

    def get_component_logger(self, component: str) -> logging.Logger:
        """Get a component-specific logger.

        Args:
            component: Component name (api, database, cache, scoring, business)

        Returns:
            logging.Logger: Component logger

        Raises:
            ValueError: If component is not recognized
        """
        if component not in self.COMPONENTS:
            raise ValueError(f"Unknown component: {component}. Available: {list(self.COMPONENTS.keys())}")

        return logging.getLogger(self.COMPONENTS[component])


_logger_config: Optional[LoggerConfig] = None


def setup_logging(environment: str = 'development', log_level: str = 'INFO', log_dir: str = 'logs') -> LoggerConfig:
    """Setup application logging.

    Args:
        environment: Environment name
        log_level: Log level
        log_dir: Directory for log files

    Returns:
        LoggerConfig: Configured logger instance
    """
    global _logger_config
    _logger_config = LoggerConfig(environment, log_level, log_dir)
    return _logger_config


def _ensure_configured() -> LoggerConfig:
    if _logger_config is None:
        # Auto-setup before settings are loaded
        setup_logging(environment=os.environ.get('APP_ENV', 'development'))
    return _logger_config


def get_logger(name: str = __name__) -> logging.Logger:
    """Get a logger instance.

    Args:
        name: Logger name, defaults to caller's module name

    Returns:
        logging.Logger: Logger instance
    """
    return _ensure_configured().get_logger(name)


def get_component_logger(component: str) -> logging.Logger:
    return _ensure_configured().get_component_logger(component)


def get_api_logger() -> logging.Logger:
    """Get API component logger."""
    return get_component_logger('api')


def get_database_logger() -> logging.Logger:
    """Get database component logger."""
    return get_component_logger('database')


def get_cache_logger() -> logging.Logger:
    """Get cache component logger."""
    return get_component_logger('cache')


def get_scoring_logger() -> logging.Logger:
    """Get scoring component logger."""
    return get_component_logger('scoring')


def get_business_logger() -> logging.Logger:
    """Get business logic logger."""
    return get_component_logger('business')


def log_api_request(method: str, path: str, resource_id: Optional[str] = None, logger: Optional[logging.Logger] = None) -> None:
    """Log API request.

    Args:
        method: HTTP method
        path: Request path
        resource_id: Attempt or session id the request targets
        logger: Logger instance
    """
    if logger is None:
        logger = get_api_logger()

    logger.info(f"{method} {path}", extra={
        'http_method': method,
        'request_path': path,
        'resource_id': resource_id,
        'event_type': 'api_request'
    })


def log_api_response(method: str, path: str, status_code: int, duration_ms: float, logger: Optional[logging.Logger] = None) -> None:
    """Log API response.

    Args:
        method: HTTP method
        path: Request path
        status_code: HTTP status code
        duration_ms: Request duration in milliseconds
        logger: Logger instance
    """
    if logger is None:
        logger = get_api_logger()

    level = logging.WARNING if status_code >= 400 else logging.INFO

    logger.log(level, f"{method} {path} - {status_code}", extra={
        'http_method': method,
        'request_path': path,
        'status_code': status_code,
        'duration_ms': duration_ms,
        'event_type': 'api_response'
    })


class PerformanceLogger:
    """Context manager for performance logging."""

    def __init__(self, operation: str, logger: Optional[logging.Logger] = None, extra: Optional[Dict[str, Any]] = None):
        """Initialize performance logger.

        Args:
            operation: Operation name
            logger: Logger instance
            extra: Additional fields to log
        """
        self.operation = operation
        self.logger = logger or get_logger()
        self.extra = extra or {}
        self.start_time: Optional[datetime] = None
        self.duration_ms: Optional[float] = None

    def __enter__(self) -> 'PerformanceLogger':
        self.start_time = datetime.now(timezone.utc)
        self.logger.debug(f"Starting {self.operation}", extra={
            'operation': self.operation,
            'event_type': 'performance_start',
            **self.extra
        })
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        if self.start_time:
            duration = datetime.now(timezone.utc) - self.start_time
            self.duration_ms = duration.total_seconds() * 1000

            level = logging.WARNING if self.duration_ms > 5000 else logging.INFO  # Warn if > 5 seconds

            self.logger.log(level, f"Completed {self.operation}", extra={
                'operation': self.operation,
                'duration_ms': self.duration_ms,
                'event_type': 'performance_end',
                'success': exc_type is None,
                **self.extra
            })
