"""
Execution policy for outbound CourtListener calls.

Composes, from the outside in:
    retry -> circuit breaker -> timeout -> raw call

so every retry re-enters the breaker and every attempt is individually
time-bounded. Policies consume tagged outcomes (see outcomes.py).
"""

import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from lexcerta.resilience.outcomes import (
    BreakerOpen,
    CallOutcome,
    Cancelled,
    TimedOut,
    is_breaker_failure,
)

log = logger.bind(component="resilience")


@dataclass
class CallContext:
    """Time budget and cancellation signal handed to the raw call."""

    timeout_seconds: float
    deadline: float
    clock: Callable[[], float] = time.monotonic
    cancel_event: Optional[threading.Event] = None

    def remaining(self) -> float:
        """Seconds left before the deadline (never negative)."""
        return max(0.0, self.deadline - self.clock())

    def expired(self) -> bool:
        return self.clock() >= self.deadline

    @property
    def cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


RawCall = Callable[[CallContext], CallOutcome]


class TimeoutPolicy:
    """Gives each attempt a fixed time budget."""

    def __init__(self, timeout_seconds: float = 5.0, clock: Optional[Callable[[], float]] = None):
        self.timeout_seconds = timeout_seconds
        self._clock = clock or time.monotonic

    def execute(self, fn: RawCall, cancel_event: Optional[threading.Event] = None) -> CallOutcome:
        context = CallContext(
            timeout_seconds=self.timeout_seconds,
            deadline=self._clock() + self.timeout_seconds,
            clock=self._clock,
            cancel_event=cancel_event,
        )
        if context.cancelled:
            return Cancelled()
        outcome = fn(context)
        if isinstance(outcome, TimedOut):
            log.warning(f"Attempt exceeded {self.timeout_seconds:g}s timeout")
        return outcome


class CircuitBreaker:
    """
    Consecutive-failure circuit breaker.

    States: CLOSED (normal), OPEN (fail fast), HALF_OPEN (single trial call)
    """

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"

    def __init__(
        self,
        failure_threshold: int = 5,
        half_open_after_seconds: float = 30.0,
        clock: Optional[Callable[[], float]] = None,
    ):
        self.failure_threshold = failure_threshold
        self.half_open_after_seconds = half_open_after_seconds
        self._clock = clock or time.monotonic
        self._lock = threading.Lock()
        self.state = self.CLOSED
        self.failure_count = 0
        self.opened_at = 0.0
        self._trial_in_flight = False
        self._listeners: Dict[str, List[Callable[[], None]]] = {
            "break": [],
            "half_open": [],
            "reset": [],
        }

    def on_break(self, callback: Callable[[], None]) -> None:
        self._listeners["break"].append(callback)

    def on_half_open(self, callback: Callable[[], None]) -> None:
        self._listeners["half_open"].append(callback)

    def on_reset(self, callback: Callable[[], None]) -> None:
        self._listeners["reset"].append(callback)

    def execute(self, inner: Callable[[], CallOutcome]) -> CallOutcome:
        """Run `inner` if the circuit admits it, and record the outcome."""
        admitted, events = self._admit()
        self._emit(events)
        if not admitted:
            return BreakerOpen(cooldown_remaining_seconds=self.cooldown_remaining())

        try:
            outcome = inner()
        except Exception:
            self._emit(self._record(failed=True))
            raise

        if isinstance(outcome, Cancelled):
            self._emit(self._release())
        else:
            self._emit(self._record(failed=is_breaker_failure(outcome)))
        return outcome

    def cooldown_remaining(self) -> float:
        with self._lock:
            if self.state != self.OPEN:
                return 0.0
            return max(0.0, self.half_open_after_seconds - (self._clock() - self.opened_at))

    def get_state(self) -> Dict[str, Any]:
        """Get current circuit breaker state."""
        remaining = self.cooldown_remaining()
        with self._lock:
            return {
                "state": self.state,
                "failure_count": self.failure_count,
                "cooldown_remaining": remaining,
            }

    def reset(self) -> None:
        with self._lock:
            self.state = self.CLOSED
            self.failure_count = 0
            self.opened_at = 0.0
            self._trial_in_flight = False

    def _cooldown_elapsed(self) -> bool:
        return self._clock() - self.opened_at >= self.half_open_after_seconds

    def _admit(self):
        with self._lock:
            if self.state == self.CLOSED:
                return True, []
            if self.state == self.OPEN:
                if not self._cooldown_elapsed():
                    return False, []
                self.state = self.HALF_OPEN
                self._trial_in_flight = True
                return True, ["half_open"]
            # HALF_OPEN: exactly one trial at a time
            if self._trial_in_flight:
                return False, []
            self._trial_in_flight = True
            return True, []

    def _release(self):
        with self._lock:
            self._trial_in_flight = False
        return []

    def _record(self, failed: bool):
        with self._lock:
            self._trial_in_flight = False
            if not failed:
                self.failure_count = 0
                if self.state == self.HALF_OPEN:
                    self.state = self.CLOSED
                    return ["reset"]
                return []

            self.failure_count += 1
            if self.state == self.HALF_OPEN:
                self.state = self.OPEN
                self.opened_at = self._clock()
                return ["break"]
            if self.state == self.CLOSED and self.failure_count >= self.failure_threshold:
                self.state = self.OPEN
                self.opened_at = self._clock()
                return ["break"]
            return []

    def _emit(self, events: List[str]) -> None:
        # Listeners run outside the lock
        for event in events:
            for callback in self._listeners[event]:
                callback()


class RetryPolicy:
    """Bounded retries with exponential backoff for breaker-eligible failures."""

    def __init__(
        self,
        max_retries: int = 2,
        initial_delay: float = 0.5,
        max_delay: float = 3.0,
        exponential_base: float = 2.0,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        """
        Args:
            max_retries: Retries after the first attempt
            initial_delay: Delay before the first retry in seconds
            max_delay: Maximum delay in seconds
            exponential_base: Base for exponential growth
            sleep: Sleep function (injectable for tests)
        """
        self.max_retries = max_retries
        self.initial_delay = initial_delay
        self.max_delay = max_delay
        self.exponential_base = exponential_base
        self._sleep = sleep or time.sleep

    def delay_for(self, retry_number: int) -> float:
        """Backoff before retry `retry_number` (1-based)."""
        return min(self.initial_delay * self.exponential_base ** (retry_number - 1), self.max_delay)

    def execute(self, attempt: Callable[[], CallOutcome]) -> CallOutcome:
        retries = 0
        while True:
            outcome = attempt()
            if not is_breaker_failure(outcome):
                return outcome

            if retries >= self.max_retries:
                log.error(f"Max retries ({self.max_retries}) exceeded: {outcome.message}")
                return outcome

            retries += 1
            delay = self.delay_for(retries)
            log.warning(
                f"{outcome.message}, retrying in {delay}s (attempt {retries}/{self.max_retries})"
            )
            self._sleep(delay)


class ExecutionPolicy:
    """retry -> circuit breaker -> timeout, applied to one raw call."""

    def __init__(
        self,
        retry: Optional[RetryPolicy] = None,
        breaker: Optional[CircuitBreaker] = None,
        timeout: Optional[TimeoutPolicy] = None,
    ):
        self.retry = retry or RetryPolicy()
        self.breaker = breaker or CircuitBreaker()
        self.timeout = timeout or TimeoutPolicy()

    def execute(self, fn: RawCall, cancel_event: Optional[threading.Event] = None) -> CallOutcome:
        """
        Run `fn` under the composed policy.

        Args:
            fn: Raw call taking a CallContext and returning a tagged outcome
            cancel_event: Set by the caller to abandon the request

        Returns:
            Final outcome after retries
        """
        return self.retry.execute(
            lambda: self.breaker.execute(lambda: self.timeout.execute(fn, cancel_event))
        )

    def reset(self) -> None:
        self.breaker.reset()


def _log_breaker_transitions(breaker: CircuitBreaker) -> None:
    breaker.on_break(lambda: log.error("[CIRCUIT] CourtListener circuit breaker OPENED"))
    breaker.on_half_open(lambda: log.info("[CIRCUIT] CourtListener circuit breaker HALF-OPEN"))
    breaker.on_reset(lambda: log.info("[CIRCUIT] CourtListener circuit breaker CLOSED"))


def build_execution_policy(
    timeout_seconds: float = 5.0,
    max_retries: int = 2,
    initial_backoff_seconds: float = 0.5,
    max_backoff_seconds: float = 3.0,
    failure_threshold: int = 5,
    half_open_after_seconds: float = 30.0,
    clock: Optional[Callable[[], float]] = None,
    sleep: Optional[Callable[[float], None]] = None,
) -> ExecutionPolicy:
    """
    Build the standard CourtListener policy with breaker transitions logged.

    Returns:
        ExecutionPolicy owning a fresh circuit breaker
    """
    breaker = CircuitBreaker(
        failure_threshold=failure_threshold,
        half_open_after_seconds=half_open_after_seconds,
        clock=clock,
    )
    _log_breaker_transitions(breaker)
    return ExecutionPolicy(
        retry=RetryPolicy(
            max_retries=max_retries,
            initial_delay=initial_backoff_seconds,
            max_delay=max_backoff_seconds,
            sleep=sleep,
        ),
        breaker=breaker,
        timeout=TimeoutPolicy(timeout_seconds=timeout_seconds, clock=clock),
    )
