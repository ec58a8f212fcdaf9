"""
Unified Logger System.

Structured logging for the bootstrap client. Every component gets a
typed logger from LoggerFactory; output is either human-readable console
lines (default) or JSON lines for log shippers.

Design Principles:
    - Strong typing with dataclasses (stdlib only)
    - Enum safety for categories
    - Component-specific loggers
    - Clean factory pattern

Environment:
    LOG_FORMAT: "console" (default) or "json"
    DEBUG_LOGGING: "true" lowers every component to DEBUG

Exports:
    ComponentType: Enum for component types
    LogLevel: Enum for log levels
    LogContext: Logging context dataclass
    ContextLoggerAdapter: Per-instance run context over a shared logger
    ComponentConfig: Per-component logger settings
    JSONFormatter: JSON line formatter
    ConsoleFormatter: Severity-tagged console formatter
    LoggerFactory: Factory for creating loggers
    log_exceptions: Exception logging decorator
"""

from enum import Enum
from typing import Optional, Dict, Any
from datetime import datetime, timezone
from dataclasses import dataclass
import logging
import sys
import os
import json
import traceback
from functools import wraps


# ============================================================================
# COMPONENT TYPES - Aligned with bootstrap layers
# ============================================================================

class ComponentType(Enum):
    """
    Component types aligned with the bootstrap layers.

    Each layer has specific logging needs and levels.
    """
    CONTROLLER = "controller"  # Run controller (state machine)
    SERVICE = "service"        # Reporting / rendering
    REPOSITORY = "repository"  # Schema, loader, reader (SQL)
    ADAPTER = "adapter"        # Connection acquisition (network)
    VALIDATOR = "validator"    # Environment validation
    TRIGGER = "trigger"        # Command line entry point


# ============================================================================
# LOG LEVELS - Standard Python levels with enum safety
# ============================================================================

class LogLevel(Enum):
    """
    Standard Python log levels as enum for type safety.
    """
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"

    def to_python_level(self) -> int:
        """Convert to Python logging level constant."""
        return getattr(logging, self.value)

    @classmethod
    def from_string(cls, level: str) -> 'LogLevel':
        """Create from string, case-insensitive."""
        return cls[level.upper()]


# ============================================================================
# LOG CONTEXT - Correlation and tracking
# ============================================================================

@dataclass
class LogContext:
    """
    Context for correlating log lines of one bootstrap run.
    """
    run_id: Optional[str] = None      # Short id of the run
    host: Optional[str] = None        # Target database host
    namespace: Optional[str] = None   # Target schema
    collection: Optional[str] = None  # Target table

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            k: v for k, v in {
                'run_id': self.run_id,
                'host': self.host,
                'namespace': self.namespace,
                'collection': self.collection,
            }.items() if v is not None
        }


# ============================================================================
# COMPONENT CONFIGURATION - Per-component settings
# ============================================================================

@dataclass
class ComponentConfig:
    """
    Configuration for component-specific logging.

    Each component type can have different settings.
    """
    component_type: ComponentType
    log_level: LogLevel = LogLevel.INFO


# ============================================================================
# FORMATTERS
# ============================================================================

class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging.
    One JSON object per line, suitable for log shippers.
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON.

        Args:
            record: Python LogRecord to format

        Returns:
            JSON string with structured log data
        """
        log_obj = {
            'timestamp': datetime.now(timezone.utc).isoformat(),
            'level': record.levelname,
            'message': record.getMessage(),
            'logger': record.name,
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno
        }

        if hasattr(record, 'custom_dimensions'):
            log_obj['customDimensions'] = record.custom_dimensions

        if record.exc_info:
            log_obj['exception'] = {
                'type': record.exc_info[0].__name__ if record.exc_info[0] else None,
                'message': str(record.exc_info[1]) if record.exc_info[1] else None,
                'traceback': self.formatException(record.exc_info)
            }

        return json.dumps(log_obj, default=str)


class ConsoleFormatter(logging.Formatter):
    """
    Human-readable progress lines tagged by severity.

    Example:
        2026-10-19 09:12:44 INFO  [adapter.ConnectionAcquirer] Connected on attempt 3/10
    """

    # Console tags the operator reads; WARNING is shortened
    LEVEL_TAGS = {
        'DEBUG': 'DEBUG',
        'INFO': 'INFO',
        'WARNING': 'WARN',
        'ERROR': 'ERROR',
        'CRITICAL': 'FATAL',
    }

    def __init__(self):
        super().__init__(datefmt="%Y-%m-%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        tag = self.LEVEL_TAGS.get(record.levelname, record.levelname)
        line = (
            f"{self.formatTime(record, self.datefmt)} {tag:<5} "
            f"[{record.name}] {record.getMessage()}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def _make_formatter(log_format: str) -> logging.Formatter:
    """JSON lines for 'json', severity-tagged console lines otherwise."""
    if log_format.lower() == 'json':
        return JSONFormatter()
    return ConsoleFormatter()


# ============================================================================
# CONTEXT ADAPTER - Run context per instance
# ============================================================================

class ContextLoggerAdapter(logging.LoggerAdapter):
    """
    Attaches one run's LogContext to every record it emits.

    Component loggers are process-wide; the adapter is not. Two controllers
    sharing "controller.BootstrapRunController" each log their own run_id.
    """

    def __init__(self, logger: logging.Logger, context: LogContext):
        super().__init__(logger, {})
        self.context = context

    def process(self, msg, kwargs):
        extra = dict(kwargs.get('extra') or {})
        custom_dims = self.context.to_dict()
        custom_dims.update(extra.get('custom_dimensions', {}))
        extra['custom_dimensions'] = custom_dims
        kwargs['extra'] = extra
        return msg, kwargs


# ============================================================================
# LOGGER FACTORY - Creates component-specific loggers
# ============================================================================

class LoggerFactory:
    """
    Factory for creating component-specific loggers.

    This factory creates Python loggers configured for each
    component type with appropriate settings and context.

    Example:
        logger = LoggerFactory.create_logger(
            ComponentType.ADAPTER,
            "ConnectionAcquirer"
        )
        logger.info("Connecting")
    """

    # Environment seeds the defaults; configure() overrides them for a run
    _log_format = os.getenv('LOG_FORMAT', 'console').lower()
    _default_level = LogLevel.DEBUG if os.getenv('DEBUG_LOGGING', '').lower() == 'true' else LogLevel.INFO
    _created: Dict[str, logging.Logger] = {}

    DEFAULT_CONFIGS = {
        ComponentType.CONTROLLER: ComponentConfig(
            component_type=ComponentType.CONTROLLER,
            log_level=_default_level,
        ),
        ComponentType.SERVICE: ComponentConfig(
            component_type=ComponentType.SERVICE,
            log_level=_default_level
        ),
        ComponentType.REPOSITORY: ComponentConfig(
            component_type=ComponentType.REPOSITORY,
            log_level=_default_level,
        ),
        ComponentType.ADAPTER: ComponentConfig(
            component_type=ComponentType.ADAPTER,
            log_level=_default_level
        ),
        ComponentType.VALIDATOR: ComponentConfig(
            component_type=ComponentType.VALIDATOR,
            log_level=_default_level
        ),
        ComponentType.TRIGGER: ComponentConfig(
            component_type=ComponentType.TRIGGER,
            log_level=_default_level
        ),
    }

    @classmethod
    def create_logger(
        cls,
        component_type: ComponentType,
        name: str,
        config: Optional[ComponentConfig] = None
    ) -> logging.Logger:
        """
        Create a logger for a specific component.

        Args:
            component_type: Type of component
            name: Component name (e.g., "ConnectionAcquirer")
            config: Optional custom configuration

        Returns:
            Configured Python logger
        """
        if config is None:
            config = cls.DEFAULT_CONFIGS.get(
                component_type,
                ComponentConfig(component_type=component_type)
            )

        # Hierarchical logger name
        logger_name = f"{component_type.value}.{name}"
        logger = logging.getLogger(logger_name)

        if isinstance(config.log_level, str):
            log_level = LogLevel.from_string(config.log_level).to_python_level()
        else:
            log_level = config.log_level.to_python_level()
        logger.setLevel(log_level)

        # One console handler per logger, even when create_logger is called repeatedly
        has_own_handler = any(
            getattr(h, '_bootstrap_handler', False) for h in logger.handlers
        )
        if not has_own_handler:
            # stdout is reserved for the report table or JSON result
            handler = logging.StreamHandler(sys.stderr)
            handler.setLevel(log_level)
            handler.setFormatter(_make_formatter(cls._log_format))
            handler._bootstrap_handler = True
            logger.addHandler(handler)

        # Propagate so host applications (and pytest caplog) see the records too
        logger.propagate = True

        if not hasattr(logger, '_context_wrapped'):
            original_log = logger._log

            def log_with_context(level, msg, args, exc_info=None, extra=None, stack_info=False, stacklevel=1):
                """Wrapper to inject context as custom dimensions."""
                if extra is None:
                    extra = {}

                custom_dims = {'component_type': component_type.value}
                custom_dims['component_name'] = name

                if 'custom_dimensions' in extra:
                    custom_dims.update(extra['custom_dimensions'])

                extra['custom_dimensions'] = custom_dims

                # +1 to account for this wrapper function
                original_log(level, msg, args, exc_info=exc_info, extra=extra,
                             stack_info=stack_info, stacklevel=stacklevel + 1)

            logger._log = log_with_context
            logger._context_wrapped = True

        cls._created[logger_name] = logger
        return logger

    @classmethod
    def configure(cls, log_format: str = 'console', debug: bool = False) -> None:
        """
        Apply a run's logging settings to every component logger.

        Loggers created earlier are updated in place; later ones pick the
        settings up at creation.

        Args:
            log_format: 'console' or 'json'
            debug: Lower every component to DEBUG
        """
        level = LogLevel.DEBUG if debug else LogLevel.INFO
        cls._log_format = log_format.lower()
        cls._default_level = level
        for config in cls.DEFAULT_CONFIGS.values():
            config.log_level = level

        for logger in cls._created.values():
            logger.setLevel(level.to_python_level())
            for handler in logger.handlers:
                if getattr(handler, '_bootstrap_handler', False):
                    handler.setLevel(level.to_python_level())
                    handler.setFormatter(_make_formatter(cls._log_format))

    @classmethod
    def create_with_context(
        cls,
        component_type: ComponentType,
        name: str,
        run_id: Optional[str] = None,
        host: Optional[str] = None,
        namespace: Optional[str] = None,
        collection: Optional[str] = None
    ) -> ContextLoggerAdapter:
        """
        Create logger with run context.

        Convenience method for creating loggers with common context fields.
        The context lives on the returned adapter, not on the shared logger.
        """
        context = LogContext(
            run_id=run_id,
            host=host,
            namespace=namespace,
            collection=collection
        )
        logger = cls.create_logger(component_type=component_type, name=name)
        return ContextLoggerAdapter(logger, context)


# ============================================================================
# EXCEPTION DECORATOR - Automatic exception logging with context
# ============================================================================

def log_exceptions(component_type: Optional[ComponentType] = None,
                   component_name: Optional[str] = None,
                   logger: Optional[logging.Logger] = None):
    """
    Decorator to log exceptions with full context, then re-raise.

    Args:
        component_type: Optional component type for creating logger
        component_name: Optional component name for creating logger
        logger: Optional existing logger to use

    Example:
        @log_exceptions(ComponentType.TRIGGER, "BootstrapCLI")
        def main(argv=None):
            ...
    """
    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if logger:
                log = logger
            elif component_type and component_name:
                log = LoggerFactory.create_logger(component_type, component_name)
            else:
                log = LoggerFactory.create_logger(
                    ComponentType.SERVICE,
                    func.__module__ or "unknown"
                )

            try:
                return func(*args, **kwargs)
            except Exception as e:
                log.error(
                    f"Exception in {func.__name__}: {e}",
                    exc_info=True,
                    extra={
                        'custom_dimensions': {
                            'function_name': func.__name__,
                            'exception_type': type(e).__name__,
                            'traceback': traceback.format_exc()
                        }
                    }
                )
                raise
        return wrapper
    return decorator
