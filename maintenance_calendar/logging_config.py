"""Logging and monitoring configuration module.

- Root logger setup with console and rotating file output
- Simple, detailed, JSON and structured record formats
- psutil based timing of the pipeline stages in debug mode
"""

import functools
import json
import logging
import logging.handlers
import sys
import time
import traceback
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional

import psutil


class LogLevel(Enum):
    """Log levels accepted on the command line"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


class LogFormat(Enum):
    """Log record formats"""
    SIMPLE = "simple"
    DETAILED = "detailed"
    JSON = "json"
    STRUCTURED = "structured"


@dataclass
class PerformanceMetric:
    """Resource usage of one pipeline stage"""
    operation: str
    duration: float
    memory_before: float
    memory_after: float
    cpu_percent: float
    success: bool
    error_message: Optional[str] = None
    context: Optional[Dict[str, Any]] = None

    @property
    def memory_delta(self) -> float:
        return self.memory_after - self.memory_before

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['memory_delta'] = self.memory_delta
        return data


class StructuredFormatter(logging.Formatter):
    """Render records in one of the LogFormat styles"""

    # Attributes attached through ``extra=`` by the error handler and the monitor
    EXTRA_FIELDS = ('error_context', 'performance_metric', 'operation')

    def __init__(self, format_type: LogFormat = LogFormat.STRUCTURED):
        super().__init__()
        self.format_type = format_type

    def _record_data(self, record: logging.LogRecord) -> Dict[str, Any]:
        data = {
            'timestamp': datetime.fromtimestamp(record.created).isoformat(),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'function': record.funcName,
            'line': record.lineno,
        }
        for name in self.EXTRA_FIELDS:
            if hasattr(record, name):
                data[name] = getattr(record, name)

        if record.exc_info:
            exc_type, exc_value, _ = record.exc_info
            data['exception'] = {
                'type': exc_type.__name__ if exc_type else None,
                'message': str(exc_value) if exc_value else None,
                'traceback': traceback.format_exception(*record.exc_info)
            }
        return data

    def format(self, record: logging.LogRecord) -> str:
        data = self._record_data(record)

        if self.format_type == LogFormat.SIMPLE:
            return f"{data['timestamp']} [{data['level']}] {data['message']}"
        if self.format_type == LogFormat.DETAILED:
            return (f"{data['timestamp']} [{data['level']}] "
                    f"{data['logger']}:{data['function']}:{data['line']} - {data['message']}")

        indent = 2 if self.format_type == LogFormat.STRUCTURED else None
        return json.dumps(data, ensure_ascii=False, default=str, indent=indent)


class PerformanceMonitor:
    """Collects a PerformanceMetric for every monitored stage"""

    def __init__(self):
        self.metrics: List[PerformanceMetric] = []
        self.process = psutil.Process()
        self.logger = logging.getLogger(__name__)

    def _memory_mb(self) -> float:
        return self.process.memory_info().rss / 1024 / 1024

    @contextmanager
    def monitor_operation(self, operation_name: str, context: Optional[Dict[str, Any]] = None):
        started = time.time()
        memory_before = self._memory_mb()
        cpu_before = self.process.cpu_percent()
        error_message = None

        try:
            yield operation_name
        except Exception as e:
            error_message = str(e)
            raise
        finally:
            metric = PerformanceMetric(
                operation=operation_name,
                duration=time.time() - started,
                memory_before=memory_before,
                memory_after=self._memory_mb(),
                cpu_percent=(cpu_before + self.process.cpu_percent()) / 2,
                success=error_message is None,
                error_message=error_message,
                context=context
            )
            self.metrics.append(metric)

            self.logger.log(
                logging.INFO if metric.success else logging.WARNING,
                f"Operation '{metric.operation}' took {metric.duration:.3f}s "
                f"(Memory: {metric.memory_delta:+.2f}MB, CPU: {metric.cpu_percent:.1f}%)",
                extra={'performance_metric': metric.to_dict(), 'operation': metric.operation}
            )

    def get_metrics_summary(self) -> Dict[str, Any]:
        if not self.metrics:
            return {'total_operations': 0}

        durations = [m.duration for m in self.metrics]
        failed = sum(1 for m in self.metrics if not m.success)
        return {
            'total_operations': len(self.metrics),
            'success_count': len(self.metrics) - failed,
            'error_count': failed,
            'duration_stats': {
                'min': min(durations),
                'max': max(durations),
                'avg': sum(durations) / len(durations),
                'total': sum(durations)
            }
        }


class LoggingManager:
    """Configures the root logger and owns the performance monitor"""

    MAX_LOG_SIZE = 10 * 1024 * 1024  # 10MB
    BACKUP_COUNT = 5

    def __init__(self,
                 log_dir: Optional[str] = None,
                 log_level: LogLevel = LogLevel.INFO,
                 log_format: LogFormat = LogFormat.SIMPLE,
                 enable_console: bool = True,
                 enable_file: bool = True,
                 enable_performance_monitoring: bool = True):

        self.log_dir = Path(log_dir) if log_dir else Path.home() / '.aws-health-calendar' / 'logs'
        self.log_level = log_level
        self.log_format = log_format
        self.enable_console = enable_console
        self.enable_file = enable_file
        self.performance_monitor = PerformanceMonitor() if enable_performance_monitoring else None

        self._setup_logging()

    def _rotating_handler(self, filename: str, level: int) -> logging.Handler:
        handler = logging.handlers.RotatingFileHandler(
            self.log_dir / filename,
            maxBytes=self.MAX_LOG_SIZE,
            backupCount=self.BACKUP_COUNT,
            encoding='utf-8'
        )
        handler.setLevel(level)
        return handler

    def _setup_logging(self):
        root_logger = logging.getLogger()
        root_logger.setLevel(self.log_level.value)
        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        handlers = []
        if self.enable_console:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(self.log_level.value)
            handlers.append(console_handler)

        if self.enable_file:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            handlers.append(self._rotating_handler('application.log', self.log_level.value))
            handlers.append(self._rotating_handler('errors.log', logging.ERROR))

        formatter = StructuredFormatter(self.log_format)
        for handler in handlers:
            handler.setFormatter(formatter)
            root_logger.addHandler(handler)

        # botocore is very chatty at DEBUG
        for noisy in ('botocore', 'boto3', 'urllib3'):
            logging.getLogger(noisy).setLevel(max(self.log_level.value, logging.INFO))

    def monitor_operation(self, operation_name: str, context: Optional[Dict[str, Any]] = None):
        """Context manager timing one pipeline stage (no-op when monitoring is off)"""
        if self.performance_monitor:
            return self.performance_monitor.monitor_operation(operation_name, context)
        return self._unmonitored()

    @contextmanager
    def _unmonitored(self):
        yield None

    def get_performance_summary(self) -> Dict[str, Any]:
        if self.performance_monitor:
            return self.performance_monitor.get_metrics_summary()
        return {'performance_monitoring': 'disabled'}

    def cleanup(self):
        if self.performance_monitor:
            self.performance_monitor.metrics.clear()
        for handler in logging.getLogger().handlers:
            handler.flush()


def log_function_call(log_args: bool = False):
    """Decorator logging entry, exit and failure of a call at DEBUG/ERROR"""
    def decorator(func):
        name = f"{func.__module__}.{func.__name__}"
        logger = logging.getLogger(func.__module__)

        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            extra = {'operation': name}
            if log_args:
                # 'args' is a reserved LogRecord attribute
                extra['call_args'] = str(args)
                extra['call_kwargs'] = str(kwargs)
            logger.debug(f"Function call started: {name}", extra=extra)

            try:
                result = func(*args, **kwargs)
            except Exception as e:
                logger.error(f"Function call failed: {name}",
                             extra={'operation': name, 'error': str(e), 'error_type': type(e).__name__})
                raise

            logger.debug(f"Function call completed: {name}", extra={'operation': name})
            return result

        return wrapper
    return decorator


_global_logging_manager: Optional[LoggingManager] = None


def get_logging_manager() -> LoggingManager:
    """Get the global logging manager"""
    global _global_logging_manager
    if _global_logging_manager is None:
        _global_logging_manager = LoggingManager(enable_file=False)
    return _global_logging_manager


def setup_logging(log_dir: Optional[str] = None,
                  log_level: LogLevel = LogLevel.INFO,
                  log_format: LogFormat = LogFormat.SIMPLE,
                  enable_performance_monitoring: bool = True,
                  debug_mode: bool = False) -> LoggingManager:
    """Configure logging for the process"""
    global _global_logging_manager

    _global_logging_manager = LoggingManager(
        log_dir=log_dir,
        log_level=LogLevel.DEBUG if debug_mode else log_level,
        log_format=log_format,
        enable_performance_monitoring=enable_performance_monitoring
    )
    return _global_logging_manager


def cleanup_logging():
    """Flush handlers and drop collected metrics"""
    if _global_logging_manager:
        _global_logging_manager.cleanup()
