# app/core/exceptions.py
from typing import Optional, Dict, Any
from dataclasses import dataclass
from enum import Enum


class ErrorSeverity(Enum):
    LOW = "low"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    AUTHENTICATION = "authentication"
    NETWORK = "network"
    VALIDATION = "validation"
    SERVER = "server"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Rich error context for logging and user-facing messages"""
    code: str
    message: str
    details: Optional[Any] = None
    severity: ErrorSeverity = ErrorSeverity.ERROR
    category: ErrorCategory = ErrorCategory.SYSTEM


class BoardException(Exception):
    """Base exception for all LineItemBoard errors"""

    def __init__(self,
                 message: str,
                 severity: ErrorSeverity = ErrorSeverity.ERROR,
                 details: Optional[Any] = None,
                 category: ErrorCategory = ErrorCategory.SYSTEM,
                 code: str = "BOARD_ERROR"):
        self.context = ErrorContext(
            code=code,
            message=message,
            details=details,
            severity=severity,
            category=category,
        )
        super().__init__(message)

    @property
    def message(self) -> str:
        return self.context.message

    @property
    def details(self) -> Optional[Any]:
        return self.context.details

    @property
    def severity(self) -> ErrorSeverity:
        return self.context.severity


class AuthenticationError(BoardException):
    """Authentication-related errors"""

    def __init__(self, message: str, details: Optional[Dict] = None):
        super().__init__(
            message,
            severity=ErrorSeverity.CRITICAL,
            details=details,
            category=ErrorCategory.AUTHENTICATION,
            code="AUTH_ERROR",
        )


class APIError(BoardException):
    """Remote endpoint or transport errors"""

    def __init__(self, message: str, status_code: Optional[int] = None, details: Optional[Dict] = None):
        self.status_code = status_code
        super().__init__(
            message,
            severity=ErrorSeverity.ERROR,
            details={"status_code": status_code, **(details or {})},
            category=ErrorCategory.SERVER if status_code else ErrorCategory.NETWORK,
            code=f"API_ERROR_{status_code}" if status_code else "API_ERROR",
        )


class ValidationError(BoardException):
    """Data validation errors"""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        super().__init__(
            f"Validation failed for {field}: {message}",
            severity=ErrorSeverity.LOW,
            details={"field": field, "value": value},
            category=ErrorCategory.VALIDATION,
            code="VALIDATION_ERROR",
        )
