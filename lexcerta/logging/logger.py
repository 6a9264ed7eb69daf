"""
Logging infrastructure for LexCerta.

Provides structured logging with:
- Component-specific log files
- Outbound API call tracking
- Resilience (rate limit / circuit breaker) monitoring
- Verification outcome logging
"""

import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from loguru import logger

DEFAULT_LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[component]}</cyan> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level>"
)


class LexCertaLogger:
    """
    Logger for LexCerta with component-specific sinks.

    Features:
    - Structured logging with context
    - Separate files for client, resilience and verification events
    - Log rotation and retention
    """

    def __init__(
        self,
        log_dir: Optional[Path] = None,
        rotation: str = "100 MB",
        retention: str = "1 month",
        level: str = "INFO",
        format_string: Optional[str] = None,
        enable_file_logging: bool = True,
        enable_console_logging: bool = True,
    ):
        """
        Initialize the LexCerta logger.

        Args:
            log_dir: Directory for log files
            rotation: When to rotate log files
            retention: How long to keep old logs
            level: Default log level
            format_string: Custom format string
            enable_file_logging: Whether to log to files
            enable_console_logging: Whether to log to stderr
        """
        self.log_dir = log_dir or Path("logs")
        self.rotation = rotation
        self.retention = retention
        self.level = level

        self.format_string = format_string or DEFAULT_LOG_FORMAT

        # Records logged through the plain loguru logger carry no component
        logger.configure(extra={"component": "system"})
        logger.remove()

        # Console output goes to stderr; stdout is reserved for results
        if enable_console_logging:
            logger.add(
                sys.stderr,
                format=self.format_string,
                level=level,
                colorize=True,
            )

        if enable_file_logging:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            self._add_file_handlers()

        self.logger = logger.bind(component="system")

    def _add_file_handlers(self) -> None:
        """Add file handlers for the main log, each component and errors."""
        logger.add(
            self.log_dir / "lexcerta.log",
            format=self.format_string,
            level=self.level,
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )

        for component in ("client", "resilience", "verification"):
            logger.add(
                self.log_dir / f"{component}.log",
                format=self.format_string,
                level="DEBUG",
                rotation=self.rotation,
                retention=self.retention,
                compression="zip",
                filter=lambda record, name=component: record["extra"].get("component")
                == name,
            )

        logger.add(
            self.log_dir / "errors.log",
            format=self.format_string,
            level="ERROR",
            rotation=self.rotation,
            retention=self.retention,
            compression="zip",
        )


def get_lexcerta_logger(component: str = "system") -> Any:
    """
    Get a component-specific logger.

    Example:
        >>> log = get_lexcerta_logger("client")
        >>> log.info("Looking up citation", citation="347 U.S. 483")
    """
    return logger.bind(component=component)


def log_api_call(
    logger_instance: Any, endpoint: str, status: Any, elapsed_ms: float, **kwargs: Any
) -> None:
    """
    Log an outbound CourtListener call.

    Args:
        logger_instance: Logger to use
        endpoint: Endpoint path or URL
        status: HTTP status code or outcome name
        elapsed_ms: Wall-clock duration of the call
        **kwargs: Additional context
    """
    logger_instance.debug(
        f"API call {endpoint} -> {status} ({elapsed_ms:.0f}ms)",
        endpoint=endpoint,
        status=status,
        elapsed_ms=elapsed_ms,
        timestamp=datetime.utcnow().isoformat(),
        **kwargs,
    )


def log_verification_outcome(
    logger_instance: Any, operation: str, valid: bool, code: Optional[str] = None, **kwargs: Any
) -> None:
    """
    Log the outcome of a verification workflow.

    Args:
        logger_instance: Logger to use
        operation: Workflow name (e.g., "verify_citation")
        valid: Whether the envelope reported a valid result
        code: Error code when not valid
        **kwargs: Additional context
    """
    level = "info" if valid else "warning"
    getattr(logger_instance, level)(
        f"{operation}: {'VALID' if valid else code or 'INVALID'}",
        operation=operation,
        valid=valid,
        code=code,
        timestamp=datetime.utcnow().isoformat(),
        **kwargs,
    )


# Global logger instance
_lexcerta_logger: Optional[LexCertaLogger] = None


def initialize_logging(
    log_dir: Optional[Path] = None, level: str = "INFO", **kwargs: Any
) -> LexCertaLogger:
    """
    Initialize the LexCerta logging system.

    This should be called once at application startup.

    Args:
        log_dir: Directory for log files
        level: Default log level
        **kwargs: Additional configuration for LexCertaLogger

    Returns:
        Configured LexCertaLogger instance
    """
    global _lexcerta_logger
    _lexcerta_logger = LexCertaLogger(log_dir=log_dir, level=level, **kwargs)
    return _lexcerta_logger


def get_logger_instance() -> Optional[LexCertaLogger]:
    """Get the global logger instance."""
    return _lexcerta_logger
