"""
Structured logging setup using structlog.
Provides JSON or console output and an audit logger for privileged actions.
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import structlog
from structlog.stdlib import LoggerFactory


def setup_logging(
    log_level: str = "INFO",
    log_format: str = "json",
    log_file: Optional[str] = None,
    debug: bool = False
) -> None:
    """
    Set up structured logging with configurable output formats.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Output format (json or console)
        log_file: Optional log file path
        debug: Add call-site information to every event
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper()),
    )

    processors = [
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if debug:
        processors.append(structlog.processors.CallsiteParameterAdder())

    if log_format == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=LoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(getattr(logging, log_level.upper()))
        file_handler.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger().addHandler(file_handler)

    structlog.get_logger(__name__).info(
        "Logging system initialized",
        level=log_level,
        format=log_format,
        file=str(log_file) if log_file else None,
        debug=debug
    )


class AuditLogger:
    """
    Logger for privileged actions. Records who acted on whom, never secrets.
    """

    def __init__(self, operation: str):
        self.operation = operation
        self.logger = structlog.get_logger("audit").bind(operation=operation)

    def log_account_deleted(
        self,
        actor_id: str,
        actor_email: Optional[str],
        target_id: str
    ) -> None:
        """Log a completed account deletion."""
        self.logger.info(
            "Account deleted",
            actor_id=actor_id,
            actor_email=actor_email,
            target_id=target_id
        )

    def log_denied(self, reason: str, actor_id: Optional[str] = None, **context) -> None:
        """Log a refused request."""
        self.logger.warning(
            "Request denied",
            reason=reason,
            actor_id=actor_id,
            **context
        )

    def log_rate_limited(self, actor_id: str, key: str) -> None:
        """Log a rate-limit rejection."""
        self.logger.warning(
            "Rate limit exceeded",
            actor_id=actor_id,
            key=key
        )

    def log_notification_failed(self, error: str, **context) -> None:
        """Log a failed best-effort notification."""
        self.logger.error(
            "Notification failed",
            error=error,
            **context
        )
