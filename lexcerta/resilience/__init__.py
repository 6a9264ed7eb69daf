"""
Rate limiting and fault tolerance for outbound API calls.
"""

from lexcerta.resilience.outcomes import (
    Success,
    RateLimited,
    NotFound,
    ServerError,
    ClientError,
    TimedOut,
    BreakerOpen,
    Cancelled,
    CallOutcome,
    is_breaker_failure,
)
from lexcerta.resilience.rate_limiter import TokenBucketRateLimiter
from lexcerta.resilience.policy import (
    CallContext,
    TimeoutPolicy,
    CircuitBreaker,
    RetryPolicy,
    ExecutionPolicy,
    build_execution_policy,
)

__all__ = [
    "Success",
    "RateLimited",
    "NotFound",
    "ServerError",
    "ClientError",
    "TimedOut",
    "BreakerOpen",
    "Cancelled",
    "CallOutcome",
    "is_breaker_failure",
    "TokenBucketRateLimiter",
    "CallContext",
    "TimeoutPolicy",
    "CircuitBreaker",
    "RetryPolicy",
    "ExecutionPolicy",
    "build_execution_policy",
]
