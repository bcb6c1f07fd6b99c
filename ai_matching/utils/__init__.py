"""
Utility modules for the AI matching engine.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants and scoring formula parameters
- exceptions: Error hierarchy surfaced by the scoring pipeline
"""

from ai_matching.utils.config import (
    AppSettings,
    get_settings,
    reload_settings,
    ROOT_DIR,
    DATA_DIR,
)
from ai_matching.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    DEFAULT_SCORING_WEIGHTS,
    Recommendation,
    AuditAction,
)
from ai_matching.utils.exceptions import (
    MatchingError,
    ConfigurationError,
    NotFoundError,
    ExternalServiceError,
    PersistenceError,
)
from ai_matching.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    LoggerMixin,
    redact,
)

__all__ = [
    # Config
    "AppSettings",
    "get_settings",
    "reload_settings",
    "ROOT_DIR",
    "DATA_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "DEFAULT_SCORING_WEIGHTS",
    "Recommendation",
    "AuditAction",
    # Exceptions
    "MatchingError",
    "ConfigurationError",
    "NotFoundError",
    "ExternalServiceError",
    "PersistenceError",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "LoggerMixin",
    "redact",
]
