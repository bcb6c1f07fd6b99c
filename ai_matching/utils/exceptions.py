"""
Exception hierarchy for the AI matching engine.

Every error raised by the scoring pipeline derives from MatchingError so
callers can tell "disabled" apart from "failed" apart from "missing".
"""

from typing import Any, Optional


class MatchingError(Exception):
    """Base exception for the matching engine."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
        cause: Optional[BaseException] = None,
    ):
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        self.cause = cause
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for logging/response."""
        result = {
            "error_type": self.__class__.__name__,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }
        if self.cause:
            result["cause"] = str(self.cause)
        return result


class ConfigurationError(MatchingError):
    """Raised when scoring is disabled or required configuration is missing."""

    def __init__(self, message: str, setting: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if setting:
            details["setting"] = setting
        super().__init__(message, error_code="CONFIGURATION_ERROR", details=details, **kwargs)


class NotFoundError(MatchingError):
    """Raised when an application, candidate or job record is missing."""

    def __init__(
        self,
        message: str,
        resource_type: Optional[str] = None,
        resource_id: Optional[str] = None,
        **kwargs,
    ):
        details = kwargs.pop("details", None) or {}
        if resource_type:
            details["resource_type"] = resource_type
        if resource_id:
            details["resource_id"] = resource_id
        super().__init__(message, error_code="NOT_FOUND", details=details, **kwargs)


class ExternalServiceError(MatchingError):
    """Raised when a model call fails or returns unusable output."""

    def __init__(self, message: str, service: Optional[str] = None, model: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if service:
            details["service"] = service
        if model:
            details["model"] = model
        super().__init__(message, error_code="EXTERNAL_SERVICE_ERROR", details=details, **kwargs)


class PersistenceError(MatchingError):
    """Raised when a database write or read fails."""

    def __init__(self, message: str, operation: Optional[str] = None, collection: Optional[str] = None, **kwargs):
        details = kwargs.pop("details", None) or {}
        if operation:
            details["operation"] = operation
        if collection:
            details["collection"] = collection
        super().__init__(message, error_code="PERSISTENCE_ERROR", details=details, **kwargs)
