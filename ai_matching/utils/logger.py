"""
Logging infrastructure for the AI matching engine.

Everything logs through Loguru. ``setup_logging`` installs a console sink,
a rotating application log and a separate audit log that receives one JSON
line per scoring decision, batch and configuration change.
"""

import json
import sys
from enum import Enum
from typing import Any, Optional

from loguru import logger

from ai_matching.utils.config import AppSettings, LoggingSettings, get_settings

CONSOLE_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<level>{message}</level>"
)
AUDIT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {extra[audit_type]} | {extra[action]} | {message}"

# Field names whose values never reach the audit log
REDACTED_KEYS = frozenset(
    {
        "api_key",
        "password",
        "secret",
        "token",
        "email",
        "phone",
        "resume_text",
    }
)
REDACTED = "***REDACTED***"

logger.configure(extra={"component": "ai_matching"})


def setup_logging(settings: Optional[AppSettings] = None) -> None:
    """Replace Loguru's default handler with the configured sinks."""
    settings = settings or get_settings()
    log_settings = settings.logging

    logger.remove()

    # Variable values stay out of tracebacks unless debugging locally
    diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format=CONSOLE_FORMAT,
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=diagnose,
        )

    if log_settings.file_output:
        _add_file_sinks(log_settings, diagnose)

    logger.debug(
        f"Logging initialized (level={log_settings.level}, environment={settings.environment})"
    )


def _add_file_sinks(log_settings: LoggingSettings, diagnose: bool) -> None:
    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=diagnose,
        enqueue=True,
        filter=lambda record: "audit_type" not in record["extra"],
    )
    logger.add(
        log_file.with_name("audit.log"),
        format=AUDIT_FORMAT,
        level="INFO",
        filter=lambda record: "audit_type" in record["extra"],
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )


def get_logger(name: str) -> Any:
    """Logger bound to a component name (typically ``__name__``)."""
    return logger.bind(component=name)


def redact(data: Any) -> Any:
    """Copy of ``data`` with secret and contact fields masked, recursively."""
    if isinstance(data, dict):
        return {
            key: REDACTED if str(key).lower() in REDACTED_KEYS else redact(value)
            for key, value in data.items()
        }
    if isinstance(data, (list, tuple)):
        return [redact(item) for item in data]
    return data


def audit_log(
    action: Enum | str,
    details: dict[str, Any],
    audit_type: str = "DECISION",
) -> None:
    """
    Record an auditable event.

    Args:
        action: What happened, usually an ``AuditAction``.
        details: Identifiers and outcome of the event; serialized as JSON.
        audit_type: Audit stream (DECISION, BATCH or CONFIG).
    """
    action_name = action.value if isinstance(action, Enum) else str(action)
    payload = json.dumps(redact(details), default=str, sort_keys=True)
    logger.bind(audit_type=audit_type, action=action_name).info(payload)


class LoggerMixin:
    """Gives a class a ``logger`` bound to its own name."""

    @property
    def logger(self) -> Any:
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger
