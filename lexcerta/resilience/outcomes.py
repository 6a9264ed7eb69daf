"""
Tagged outcomes for a single outbound call.

The raw call site translates HTTP results into one of these variants, and the
policy layer branches on the variant instead of on exception types. Only
server errors and timeouts count against retry budgets and the circuit
breaker; rate limits and not-found responses pass straight through.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union


@dataclass(frozen=True)
class Success:
    """The call completed and produced a value."""

    value: Any


@dataclass(frozen=True)
class RateLimited:
    """Upstream answered 429 (or the local budget is exhausted)."""

    retry_after_ms: int


@dataclass(frozen=True)
class NotFound:
    """Upstream answered 404 for the requested resource."""

    pass


@dataclass(frozen=True)
class ServerError:
    """5xx response or transport failure."""

    message: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class ClientError:
    """Non-retryable 4xx response (other than 404 and 429)."""

    message: str
    status_code: Optional[int] = None


@dataclass(frozen=True)
class TimedOut:
    """The attempt exceeded its time budget."""

    timeout_seconds: float

    @property
    def message(self) -> str:
        return f"Request timed out after {self.timeout_seconds:g}s"


@dataclass(frozen=True)
class BreakerOpen:
    """The circuit breaker rejected the call without any I/O."""

    cooldown_remaining_seconds: float

    @property
    def message(self) -> str:
        return "Circuit breaker is open; CourtListener calls are temporarily suspended"


@dataclass(frozen=True)
class Cancelled:
    """The caller abandoned the request."""

    @property
    def message(self) -> str:
        return "Request cancelled"


CallOutcome = Union[
    Success, RateLimited, NotFound, ServerError, ClientError, TimedOut, BreakerOpen, Cancelled
]


def is_breaker_failure(outcome: CallOutcome) -> bool:
    """True for failures that trip retries and the circuit breaker."""
    return isinstance(outcome, (ServerError, TimedOut))
