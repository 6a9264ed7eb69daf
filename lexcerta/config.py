"""
Configuration management for LexCerta.

This module provides centralized configuration for all system components:
- CourtListener API settings
- Rate limiting, retry and circuit breaker settings
- Cache sizes
- Logging settings
"""

import os
from typing import List, Literal, cast

from dotenv import load_dotenv
from loguru import logger
from pydantic import BaseModel, Field

from lexcerta.logging.logger import DEFAULT_LOG_FORMAT

# Load environment variables from .env file
load_dotenv()


class LexCertaError(Exception):
    """Base exception for LexCerta errors."""

    pass


class ConfigurationError(LexCertaError):
    """Raised when required configuration is missing or invalid."""

    pass


class CourtListenerConfig(BaseModel):
    """Configuration for the CourtListener API."""

    api_key: str = Field(
        default_factory=lambda: os.getenv("COURTLISTENER_API_KEY", ""),
        description="CourtListener API token",
    )
    base_url: str = Field(
        default="https://www.courtlistener.com/api/rest/v4",
        description="Base URL for CourtListener REST endpoints",
    )
    timeout_seconds: float = Field(
        default=5.0, gt=0.0, description="Per-request timeout in seconds"
    )


class ResilienceConfig(BaseModel):
    """Configuration for rate limiting, retries and circuit breaking."""

    max_tokens: int = Field(
        default=4500,
        gt=0,
        description="Token bucket capacity (90% of CourtListener's 5,000/hr)",
    )
    refill_interval_seconds: float = Field(
        default=3600.0, gt=0.0, description="Time to refill the whole bucket"
    )
    max_retries: int = Field(
        default=2, ge=0, description="Retries after the first attempt on 5xx"
    )
    initial_backoff_seconds: float = Field(
        default=0.5, ge=0.0, description="First retry delay"
    )
    max_backoff_seconds: float = Field(
        default=3.0, ge=0.0, description="Upper bound on retry delay"
    )
    failure_threshold: int = Field(
        default=5, gt=0, description="Consecutive failures that open the breaker"
    )
    half_open_after_seconds: float = Field(
        default=30.0, ge=0.0, description="Cooldown before a half-open trial call"
    )


class CacheConfig(BaseModel):
    """Configuration for in-memory LRU caches."""

    citation_cache_size: int = Field(
        default=1000, gt=0, description="Entries kept in the citation cache"
    )
    opinion_cache_size: int = Field(
        default=200, gt=0, description="Entries kept in the opinion text cache"
    )


class LogConfig(BaseModel):
    """Configuration for logging system."""

    level: Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO", description="Logging level"
    )
    format: str = Field(default=DEFAULT_LOG_FORMAT, description="Log message format")
    rotation: str = Field(default="100 MB", description="Log file rotation size")
    retention: str = Field(default="1 month", description="Log file retention period")
    log_dir: str = Field(default="logs", description="Directory for log files")
    enable_file_logging: bool = Field(
        default=False, description="Whether to enable file logging"
    )
    enable_console_logging: bool = Field(
        default=True, description="Whether to enable console logging"
    )


class Config(BaseModel):
    """Main configuration object for LexCerta."""

    courtlistener: CourtListenerConfig = Field(default_factory=CourtListenerConfig)
    resilience: ResilienceConfig = Field(default_factory=ResilienceConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LogConfig = Field(default_factory=LogConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Create configuration from environment variables."""
        return cls(
            courtlistener=CourtListenerConfig(
                api_key=os.getenv("COURTLISTENER_API_KEY", ""),
                base_url=os.getenv(
                    "COURTLISTENER_BASE_URL",
                    "https://www.courtlistener.com/api/rest/v4",
                ),
                timeout_seconds=float(os.getenv("COURTLISTENER_TIMEOUT", "5")),
            ),
            resilience=ResilienceConfig(
                max_tokens=int(os.getenv("LEXCERTA_RATE_LIMIT_TOKENS", "4500")),
                refill_interval_seconds=float(
                    os.getenv("LEXCERTA_RATE_LIMIT_INTERVAL", "3600")
                ),
                max_retries=int(os.getenv("LEXCERTA_MAX_RETRIES", "2")),
                failure_threshold=int(os.getenv("LEXCERTA_BREAKER_THRESHOLD", "5")),
                half_open_after_seconds=float(
                    os.getenv("LEXCERTA_BREAKER_COOLDOWN", "30")
                ),
            ),
            cache=CacheConfig(
                citation_cache_size=int(os.getenv("LEXCERTA_CITATION_CACHE_SIZE", "1000")),
                opinion_cache_size=int(os.getenv("LEXCERTA_OPINION_CACHE_SIZE", "200")),
            ),
            logging=LogConfig(
                level=cast(
                    Literal["TRACE", "DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
                    os.getenv("LOG_LEVEL", "INFO"),
                ),
                enable_file_logging=os.getenv("LEXCERTA_LOG_TO_FILE", "false").lower()
                == "true",
            ),
        )

    def validate_required(self) -> List[str]:
        """
        Check settings that have no usable default.

        Returns:
            List of human-readable problems (empty when valid)
        """
        problems = []

        if not self.courtlistener.api_key:
            problems.append("COURTLISTENER_API_KEY is required")

        if self.resilience.initial_backoff_seconds > self.resilience.max_backoff_seconds:
            problems.append("initial backoff exceeds maximum backoff")

        return problems


def load_config() -> Config:
    """
    Load and validate configuration from the environment.

    Returns:
        Validated Config

    Raises:
        ConfigurationError: If settings are missing or malformed
    """
    try:
        loaded = Config.from_env()
    except ValueError as e:
        message = f"Invalid configuration: {e}"
        logger.error(message)
        raise ConfigurationError(message) from e

    problems = loaded.validate_required()
    if problems:
        message = f"Invalid configuration: {', '.join(problems)}"
        logger.error(message)
        raise ConfigurationError(message)
    return loaded

