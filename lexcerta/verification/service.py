"""
Verification service.

Owns the process-wide shared state (rate limiter, circuit breaker, caches,
HTTP client) and exposes the verification operations over validated input.
The hosting application constructs one instance and keeps it for the life of
the process.
"""

import threading
from typing import Any, Dict, Optional

from loguru import logger
from pydantic import BaseModel, Field, ValidationError

from lexcerta.cache.citation_cache import CitationCache
from lexcerta.cache.opinion_cache import OpinionCache
from lexcerta.config import Config
from lexcerta.external.courtlistener import CourtListenerClient
from lexcerta.resilience.policy import ExecutionPolicy, build_execution_policy
from lexcerta.resilience.rate_limiter import TokenBucketRateLimiter
from lexcerta.verification.citation import parse_citation_envelope, verify_citation
from lexcerta.verification.envelope import PARSE_ERROR, ToolResponseEnvelope, failure
from lexcerta.verification.quote import verify_quote_integrity

log = logger.bind(component="verification")


class CitationInput(BaseModel):
    """Input for citation operations."""

    citation: str = Field(min_length=1, description="Citation, e.g. '347 U.S. 483'")


class QuoteInput(CitationInput):
    """Input for quote integrity checks."""

    text: str = Field(min_length=1, description="Quoted passage to verify")


def _invalid_input(error: ValidationError) -> ToolResponseEnvelope:
    problems = ", ".join(
        f"{'.'.join(str(part) for part in issue['loc'])}: {issue['msg']}"
        for issue in error.errors()
    )
    return failure(PARSE_ERROR, f"Invalid input: {problems}")


class VerificationService:
    """
    Entry point for citation and quote verification.

    Example:
        >>> service = VerificationService.from_config(load_config())
        >>> envelope = service.verify_citation("347 U.S. 483")
        >>> envelope.valid
        True
    """

    def __init__(
        self,
        client: CourtListenerClient,
        citation_cache: Optional[CitationCache] = None,
        opinion_cache: Optional[OpinionCache] = None,
    ):
        self.client = client
        self.citation_cache = citation_cache or CitationCache()
        self.opinion_cache = opinion_cache or OpinionCache()

    @classmethod
    def from_config(cls, config: Config) -> "VerificationService":
        """Build the service and its shared collaborators from configuration."""
        resilience = config.resilience
        policy: ExecutionPolicy = build_execution_policy(
            timeout_seconds=config.courtlistener.timeout_seconds,
            max_retries=resilience.max_retries,
            initial_backoff_seconds=resilience.initial_backoff_seconds,
            max_backoff_seconds=resilience.max_backoff_seconds,
            failure_threshold=resilience.failure_threshold,
            half_open_after_seconds=resilience.half_open_after_seconds,
        )
        rate_limiter = TokenBucketRateLimiter(
            max_tokens=resilience.max_tokens,
            refill_interval_seconds=resilience.refill_interval_seconds,
        )
        client = CourtListenerClient(
            api_key=config.courtlistener.api_key,
            policy=policy,
            rate_limiter=rate_limiter,
            base_url=config.courtlistener.base_url,
        )
        return cls(
            client=client,
            citation_cache=CitationCache(config.cache.citation_cache_size),
            opinion_cache=OpinionCache(config.cache.opinion_cache_size),
        )

    def parse_citation(self, citation: str) -> ToolResponseEnvelope:
        try:
            request = CitationInput(citation=citation)
        except ValidationError as e:
            return _invalid_input(e)
        return parse_citation_envelope(request.citation)

    def verify_citation(
        self, citation: str, cancel_event: Optional[threading.Event] = None
    ) -> ToolResponseEnvelope:
        try:
            request = CitationInput(citation=citation)
        except ValidationError as e:
            return _invalid_input(e)
        return verify_citation(request.citation, self.client, self.citation_cache, cancel_event)

    def verify_quote_integrity(
        self, citation: str, text: str, cancel_event: Optional[threading.Event] = None
    ) -> ToolResponseEnvelope:
        try:
            request = QuoteInput(citation=citation, text=text)
        except ValidationError as e:
            return _invalid_input(e)
        return verify_quote_integrity(
            request.citation,
            request.text,
            self.client,
            self.citation_cache,
            self.opinion_cache,
            cancel_event,
        )

    def cache_stats(self) -> Dict[str, Any]:
        """Occupancy and hit rates of both caches."""
        return {
            "citations": self.citation_cache.stats().to_dict(),
            "opinions": self.opinion_cache.stats().to_dict(),
        }

    def reset(self) -> None:
        """Clear caches and reset breaker and rate limiter state."""
        self.citation_cache.clear()
        self.opinion_cache.clear()
        self.client.policy.reset()
        self.client.rate_limiter.reset()
        log.info("Verification service state reset")

    def close(self) -> None:
        self.client.close()
