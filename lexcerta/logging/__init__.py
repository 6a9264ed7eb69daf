"""
Logging infrastructure for LexCerta.

Provides structured, component-bound logging and timing decorators.
"""

from .logger import (
    DEFAULT_LOG_FORMAT,
    LexCertaLogger,
    get_lexcerta_logger,
    initialize_logging,
    get_logger_instance,
    log_api_call,
    log_verification_outcome,
)

from .decorators import performance_monitor

__all__ = [
    "DEFAULT_LOG_FORMAT",
    "LexCertaLogger",
    "get_lexcerta_logger",
    "initialize_logging",
    "get_logger_instance",
    "log_api_call",
    "log_verification_outcome",
    "performance_monitor",
]
