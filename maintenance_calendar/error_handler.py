"""Error handling framework module.

- Custom exception classes for each error category
- Severity-aware logging of handled errors
- Error history and statistics for the end-of-run summary
"""

import logging
import traceback
import sys
from typing import Dict, Any, Optional, List, Union
from enum import Enum
from dataclasses import dataclass
from datetime import datetime

from botocore.exceptions import BotoCoreError, ClientError


class ErrorSeverity(Enum):
    """Error severity levels"""
    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    INFO = "info"


class ErrorCategory(Enum):
    """Error categories"""
    NETWORK = "network"
    AWS = "aws"
    DATA = "data"
    FILE_SYSTEM = "file_system"
    AUTHENTICATION = "authentication"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    PARSING = "parsing"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Error context information"""
    timestamp: datetime
    severity: ErrorSeverity
    category: ErrorCategory
    operation: str
    user_message: str
    technical_message: str
    recovery_suggestions: List[str]
    context_data: Dict[str, Any]
    stack_trace: Optional[str] = None


class BaseApplicationError(Exception):
    """Base class for all application errors"""

    def __init__(
        self,
        message: str,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.UNKNOWN,
        operation: str = "",
        recovery_suggestions: Optional[List[str]] = None,
        context_data: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message)
        self.severity = severity
        self.category = category
        self.operation = operation
        self.recovery_suggestions = recovery_suggestions or []
        self.context_data = context_data or {}
        self.cause = cause
        self.timestamp = datetime.now()

    def get_user_message(self) -> str:
        """Get a user friendly error message"""
        return str(self)

    def get_technical_message(self) -> str:
        """Get a detailed technical message"""
        technical_msg = f"{self.__class__.__name__}: {str(self)}"
        if self.cause:
            technical_msg += f" (Caused by: {type(self.cause).__name__}: {str(self.cause)})"
        return technical_msg

    def to_error_context(self) -> ErrorContext:
        """Convert to an ErrorContext object"""
        return ErrorContext(
            timestamp=self.timestamp,
            severity=self.severity,
            category=self.category,
            operation=self.operation,
            user_message=self.get_user_message(),
            technical_message=self.get_technical_message(),
            recovery_suggestions=self.recovery_suggestions,
            context_data=self.context_data,
            stack_trace=traceback.format_exc() if sys.exc_info()[0] else None
        )


# AWS errors
class AWSError(BaseApplicationError):
    """AWS API error"""

    def __init__(self, message: str, service: str = "", operation: str = "",
                 severity: ErrorSeverity = ErrorSeverity.HIGH,
                 recovery_suggestions: Optional[List[str]] = None,
                 context_data: Optional[Dict[str, Any]] = None, **kwargs):
        data = {"service": service, "operation": operation}
        data.update(context_data or {})
        super().__init__(
            message,
            severity=severity,
            category=ErrorCategory.AWS,
            operation=operation,
            recovery_suggestions=recovery_suggestions or [
                "Check your AWS credentials",
                "Check the IAM permissions of the caller",
                "Check the AWS service health dashboard"
            ],
            context_data=data,
            **kwargs
        )


class AWSPermissionError(AWSError):
    """AWS permission error"""

    def __init__(self, action: str, resource: str = "", **kwargs):
        super().__init__(
            f"Not authorized to perform AWS action: {action}" + (f" on {resource}" if resource else ""),
            recovery_suggestions=[
                f"Allow '{action}' in the IAM policy of the caller",
                "Check that the policy is attached to the user or role in use"
            ],
            context_data={"action": action, "resource": resource},
            **kwargs
        )


class EventDetailError(AWSError):
    """Detail or affected entities of a single health event could not be read"""

    def __init__(self, event_arn: str, reason: str, **kwargs):
        super().__init__(
            f"Cannot read health event {event_arn}: {reason}",
            service="health",
            severity=ErrorSeverity.MEDIUM,
            context_data={"event_arn": event_arn},
            **kwargs
        )
        self.event_arn = event_arn
        self.reason = reason


class IncompleteFetchError(AWSError):
    """Some health events could not be read and partial output was refused"""

    def __init__(self, failed_event_arns: List[str], **kwargs):
        super().__init__(
            f"{len(failed_event_arns)} health event(s) could not be read",
            service="health",
            recovery_suggestions=[
                "Re-run the command once the Health API is reachable",
                "Omit --strict to write the calendar without the skipped events"
            ],
            context_data={"failed_event_arns": failed_event_arns},
            **kwargs
        )
        self.failed_event_arns = failed_event_arns


# Data errors
class DataError(BaseApplicationError):
    """Data error"""

    def __init__(self, message: str, severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                 category: ErrorCategory = ErrorCategory.DATA, **kwargs):
        super().__init__(
            message,
            severity=severity,
            category=category,
            **kwargs
        )


class MaintenanceWindowFormatError(DataError):
    """Maintenance window string is not in ddd:hh24:mi-ddd:hh24:mi form"""

    def __init__(self, window: str, reason: str = "", **kwargs):
        super().__init__(
            f"Invalid maintenance window '{window}'" + (f": {reason}" if reason else ""),
            category=ErrorCategory.PARSING,
            recovery_suggestions=[
                "Maintenance windows must look like 'mon:02:00-mon:04:00'"
            ],
            context_data={"window": window},
            **kwargs
        )


class UnsupportedMaintenanceWindowError(DataError):
    """Maintenance window spans more than one day boundary"""

    def __init__(self, window: str, **kwargs):
        super().__init__(
            f"Maintenance window '{window}' spans more than 24 hours and cannot be resolved",
            recovery_suggestions=[
                "Only windows ending on the same or the following weekday are supported"
            ],
            context_data={"window": window},
            **kwargs
        )


class ResourceIdentifierError(DataError):
    """Affected resource id does not have the expected structure"""

    def __init__(self, resource_id: str, reason: str, **kwargs):
        super().__init__(
            f"Malformed resource id '{resource_id}': {reason}",
            category=ErrorCategory.PARSING,
            context_data={"resource_id": resource_id},
            **kwargs
        )


# File system errors
class FileSystemError(BaseApplicationError):
    """File system error"""

    def __init__(self, message: str, file_path: str = "", **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.FILE_SYSTEM,
            recovery_suggestions=[
                "Check the output file path",
                "Check the permissions of the output directory",
                "Check the available disk space"
            ],
            context_data={"file_path": file_path},
            **kwargs
        )


# Configuration errors
class ConfigurationError(BaseApplicationError):
    """Configuration error"""

    def __init__(self, message: str, config_key: str = "", **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.HIGH,
            category=ErrorCategory.CONFIGURATION,
            recovery_suggestions=[
                "Check the configuration file",
                "Check the environment variables",
                "Check the command line options"
            ],
            context_data={"config_key": config_key},
            **kwargs
        )


# Validation errors
class ValidationError(BaseApplicationError):
    """Input validation error"""

    def __init__(self, message: str, field: str = "", value: Any = None, **kwargs):
        super().__init__(
            message,
            severity=ErrorSeverity.MEDIUM,
            category=ErrorCategory.VALIDATION,
            recovery_suggestions=[
                "Check the input value",
                "Use the documented format"
            ],
            context_data={"field": field, "value": value},
            **kwargs
        )


PERMISSION_ERROR_CODES = frozenset({
    'AccessDenied',
    'AccessDeniedException',
    'UnauthorizedOperation',
    'UnauthorizedException',
})


def translate_aws_error(error: Union[ClientError, BotoCoreError], service: str,
                        operation: str, resource: str = "") -> AWSError:
    """Convert a botocore exception into an AWSError.

    Args:
        error: Exception raised by a boto3 client
        service: Service name used for the call
        operation: API operation name
        resource: Resource the call was about (optional)

    Returns:
        AWSError or AWSPermissionError wrapping the original error
    """
    if isinstance(error, ClientError):
        error_code = error.response.get('Error', {}).get('Code', '')
        if error_code in PERMISSION_ERROR_CODES:
            return AWSPermissionError(f"{service}:{operation}", resource,
                                      service=service, operation=operation, cause=error)
        message = error.response.get('Error', {}).get('Message', str(error))
        return AWSError(f"{service} {operation} failed ({error_code}): {message}",
                        service=service, operation=operation, cause=error)

    return AWSError(f"{service} {operation} failed: {error}",
                    service=service, operation=operation, cause=error)


class ErrorHandler:
    """Central error handler"""

    def __init__(self):
        self.logger = logging.getLogger(__name__)
        self.error_history: List[ErrorContext] = []

    def handle_error(
        self,
        error: Union[BaseApplicationError, Exception],
        context: Optional[Dict[str, Any]] = None
    ) -> ErrorContext:
        """Record and log an error.

        Args:
            error: Error to handle
            context: Additional context merged into the error context data

        Returns:
            ErrorContext: error context information
        """
        if not isinstance(error, BaseApplicationError):
            error = self._convert_to_application_error(error)

        error_context = error.to_error_context()
        if context:
            error_context.context_data.update(context)

        self.error_history.append(error_context)
        self._log_error(error_context)

        return error_context

    def _convert_to_application_error(self, error: Exception) -> BaseApplicationError:
        """Convert a plain exception into a BaseApplicationError"""
        if isinstance(error, (ClientError, BotoCoreError)):
            return translate_aws_error(error, "unknown", "unknown")
        elif isinstance(error, (ConnectionError, TimeoutError)):
            return BaseApplicationError(
                str(error),
                severity=ErrorSeverity.HIGH,
                category=ErrorCategory.NETWORK,
                cause=error
            )
        elif isinstance(error, OSError):
            return FileSystemError(str(error), file_path=getattr(error, 'filename', '') or '', cause=error)
        else:
            return BaseApplicationError(
                str(error),
                severity=ErrorSeverity.MEDIUM,
                category=ErrorCategory.UNKNOWN,
                cause=error
            )

    def _log_error(self, error_context: ErrorContext):
        """Log an error at the level matching its severity"""
        log_level = {
            ErrorSeverity.CRITICAL: logging.CRITICAL,
            ErrorSeverity.HIGH: logging.ERROR,
            ErrorSeverity.MEDIUM: logging.WARNING,
            ErrorSeverity.LOW: logging.INFO,
            ErrorSeverity.INFO: logging.INFO
        }.get(error_context.severity, logging.ERROR)

        log_message = f"[{error_context.category.value.upper()}] {error_context.user_message}"

        self.logger.log(log_level, log_message, extra={
            'error_context': error_context,
            'technical_message': error_context.technical_message,
            'recovery_suggestions': error_context.recovery_suggestions
        })

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get error statistics"""
        if not self.error_history:
            return {'total_errors': 0}

        category_counts = {}
        severity_counts = {}

        for error_context in self.error_history:
            category = error_context.category.value
            severity = error_context.severity.value

            category_counts[category] = category_counts.get(category, 0) + 1
            severity_counts[severity] = severity_counts.get(severity, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'category_distribution': category_counts,
            'severity_distribution': severity_counts,
            'recent_errors': [
                {
                    'timestamp': ec.timestamp.isoformat(),
                    'category': ec.category.value,
                    'severity': ec.severity.value,
                    'message': ec.user_message
                }
                for ec in self.error_history[-10:]
            ]
        }

    def clear_error_history(self):
        """Clear the error history"""
        self.error_history.clear()


_global_error_handler: Optional[ErrorHandler] = None


def get_error_handler() -> ErrorHandler:
    """Get the global error handler"""
    global _global_error_handler
    if _global_error_handler is None:
        _global_error_handler = ErrorHandler()
    return _global_error_handler


def handle_error(
    error: Union[BaseApplicationError, Exception],
    context: Optional[Dict[str, Any]] = None
) -> ErrorContext:
    """Handle an error with the global error handler"""
    return get_error_handler().handle_error(error, context)
