"""
CourtListener API client.

Resolves citations through the citation-lookup endpoint and retrieves
opinion text for a cluster. Every call is gated by the token bucket first and
only then run through the execution policy (retry -> breaker -> timeout).

API Documentation: https://www.courtlistener.com/help/api/rest/
"""

import re
import threading
import time
from typing import Any, Dict, List, Optional

import requests
from loguru import logger

from lexcerta.external.base import (
    CitationMatch,
    LookupResponse,
    OpinionText,
    OpinionTextResponse,
)
from lexcerta.logging.logger import log_api_call
from lexcerta.resilience.outcomes import (
    CallOutcome,
    Cancelled,
    ClientError,
    NotFound,
    RateLimited,
    ServerError,
    Success,
    TimedOut,
)
from lexcerta.resilience.policy import CallContext, ExecutionPolicy, build_execution_policy
from lexcerta.resilience.rate_limiter import TokenBucketRateLimiter

log = logger.bind(component="client")

DEFAULT_BASE_URL = "https://www.courtlistener.com/api/rest/v4"
DEFAULT_RETRY_AFTER_MS = 60_000

_HTML_TAG = re.compile(r"<[^>]*>")
_HTML_ENTITY = re.compile(r"&[^;\s]+;")
_WHITESPACE = re.compile(r"\s+")


def strip_html(html: str) -> str:
    """Reduce opinion HTML to plain text: drop tags and entities, collapse spaces."""
    text = _HTML_TAG.sub("", html)
    text = _HTML_ENTITY.sub(" ", text)
    return _WHITESPACE.sub(" ", text).strip()


def retry_after_ms(response: requests.Response) -> int:
    """Read the Retry-After header (seconds) as milliseconds, default 60s."""
    header = response.headers.get("Retry-After")
    if header:
        try:
            return int(float(header) * 1000)
        except ValueError:
            log.warning(f"Unparseable Retry-After header: {header!r}")
    return DEFAULT_RETRY_AFTER_MS


class CourtListenerClient:
    """
    Client for CourtListener citation lookup and opinion text.

    Provides access to:
    - Citation lookup (does this citation name a real case?)
    - Opinion clusters and their sub-opinions (lead, dissent, concurrence)
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        policy: Optional[ExecutionPolicy] = None,
        rate_limiter: Optional[TokenBucketRateLimiter] = None,
        base_url: str = DEFAULT_BASE_URL,
        session: Optional[requests.Session] = None,
    ):
        """
        Initialize CourtListener client.

        Args:
            api_key: CourtListener API token
            policy: Execution policy wrapping each outbound call
            rate_limiter: Token bucket checked before every call
            base_url: REST API root
            session: HTTP session (created if None)
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.policy = policy or build_execution_policy()
        self.rate_limiter = rate_limiter or TokenBucketRateLimiter()

        self.session = session or requests.Session()
        if api_key:
            self.session.headers.update({"Authorization": f"Token {api_key}"})

        log.info(f"Initialized {self.__class__.__name__} ({self.base_url})")

    def close(self) -> None:
        """Release pooled HTTP connections."""
        self.session.close()

    def lookup_citation(
        self, normalized_citation: str, cancel_event: Optional[threading.Event] = None
    ) -> LookupResponse:
        """
        Look up a normalized citation (e.g., "347 U.S. 483").

        Args:
            normalized_citation: Canonical "volume reporter page" string
            cancel_event: Set by the caller to abandon the request

        Returns:
            LookupResponse with status "ok", "rate_limited" or "error"
        """
        # Token is taken outside the policy: exhaustion is never retried or counted
        if not self.rate_limiter.try_consume():
            log.warning("Rate limit exhausted, blocking citation lookup")
            return LookupResponse.rate_limited(self.rate_limiter.ms_until_next_token())

        url = f"{self.base_url}/citation-lookup/"

        def call(context: CallContext) -> CallOutcome:
            response = self._send(context, "POST", url, data={"text": normalized_citation})
            if not isinstance(response, requests.Response):
                return response

            failure = self._classify_status(response)
            if isinstance(failure, NotFound):
                return ClientError("Citation lookup endpoint not found", status_code=404)
            if failure is not None:
                return failure

            try:
                payload = response.json()
            except ValueError as e:
                return ServerError(f"Malformed citation-lookup response: {e}")

            return Success([CitationMatch.from_dict(item) for item in payload or []])

        outcome = self.policy.execute(call, cancel_event)

        if isinstance(outcome, Success):
            matches: List[CitationMatch] = outcome.value
            log.info(f"Citation lookup for {normalized_citation!r} returned {len(matches)} matches")
            return LookupResponse.ok(matches)
        if isinstance(outcome, RateLimited):
            log.warning(f"CourtListener rate limited lookup, retry after {outcome.retry_after_ms}ms")
            return LookupResponse.rate_limited(outcome.retry_after_ms)

        return LookupResponse.error(self._failure_message(outcome))

    def fetch_cluster_opinions(
        self, cluster_id: int, cancel_event: Optional[threading.Event] = None
    ) -> OpinionTextResponse:
        """
        Fetch the text of every sub-opinion in a cluster.

        Sub-opinions that fail or carry no text are skipped; a cluster with no
        retrievable text still returns "ok" with an empty list.

        Args:
            cluster_id: CourtListener cluster id
            cancel_event: Set by the caller to abandon the request

        Returns:
            OpinionTextResponse with status "ok", "rate_limited", "error" or "not_found"
        """
        if not self.rate_limiter.try_consume():
            log.warning("Rate limit exhausted, blocking opinion fetch")
            return OpinionTextResponse.rate_limited(self.rate_limiter.ms_until_next_token())

        url = f"{self.base_url}/clusters/{cluster_id}/"

        def call(context: CallContext) -> CallOutcome:
            response = self._send(context, "GET", url)
            if not isinstance(response, requests.Response):
                return response

            # 404 on the cluster is an answer, not a breaker failure
            failure = self._classify_status(response)
            if failure is not None:
                return failure

            try:
                cluster = response.json()
            except ValueError as e:
                return ServerError(f"Malformed cluster response: {e}")

            # Sub-opinion fetches share the cluster call's token and time budget
            opinions: List[OpinionText] = []
            for opinion_url in cluster.get("sub_opinions") or []:
                fetched = self._fetch_sub_opinion(context, opinion_url, cluster_id)
                if isinstance(fetched, OpinionText):
                    opinions.append(fetched)
                elif fetched is not None:
                    return fetched

            return Success(opinions)

        outcome = self.policy.execute(call, cancel_event)

        if isinstance(outcome, Success):
            opinions: List[OpinionText] = outcome.value
            log.info(f"Retrieved {len(opinions)} opinions for cluster {cluster_id}")
            return OpinionTextResponse.ok(opinions)
        if isinstance(outcome, NotFound):
            log.info(f"Cluster {cluster_id} not found")
            return OpinionTextResponse.not_found()
        if isinstance(outcome, RateLimited):
            log.warning(f"CourtListener rate limited opinion fetch, retry after {outcome.retry_after_ms}ms")
            return OpinionTextResponse.rate_limited(outcome.retry_after_ms)

        return OpinionTextResponse.error(self._failure_message(outcome))

    def _fetch_sub_opinion(self, context: CallContext, url: str, cluster_id: int) -> Any:
        """
        Fetch one sub-opinion.

        Returns:
            OpinionText, None when the opinion is skipped, or a failure
            outcome that aborts the whole cluster fetch
        """
        response = self._send(context, "GET", url)
        if not isinstance(response, requests.Response):
            return response

        if not response.ok:
            log.warning(f"Failed to fetch sub-opinion {url}: {response.status_code}")
            return None

        try:
            data: Dict[str, Any] = response.json()
        except ValueError as e:
            log.warning(f"Malformed sub-opinion {url}: {e}")
            return None

        text = data.get("plain_text") or ""
        if not text and data.get("html"):
            text = strip_html(data["html"])

        if not text:
            log.debug(f"Sub-opinion {url} has no extractable text, skipping")
            return None

        return OpinionText(
            opinion_id=int(data.get("id", 0)),
            type=data.get("type", ""),
            plain_text=text,
            cluster_id=cluster_id,
        )

    def _send(self, context: CallContext, method: str, url: str, **kwargs: Any) -> Any:
        """
        Issue one HTTP request within the attempt's time budget.

        Returns:
            requests.Response, or a failure outcome for transport problems
        """
        if context.cancelled:
            return Cancelled()
        if context.expired():
            return TimedOut(context.timeout_seconds)

        start_time = time.time()
        try:
            response = self.session.request(method, url, timeout=context.remaining(), **kwargs)
        except requests.Timeout:
            return TimedOut(context.timeout_seconds)
        except requests.RequestException as e:
            return ServerError(f"Request failed: {e}")

        log_api_call(log, url, response.status_code, (time.time() - start_time) * 1000)

        # requests bounds each socket read, not the whole exchange
        if context.expired():
            return TimedOut(context.timeout_seconds)
        return response

    def _classify_status(self, response: requests.Response) -> Optional[CallOutcome]:
        """Map non-success status codes to outcomes (None for 2xx)."""
        status = response.status_code

        # 429 must NOT be retried or counted as a breaker failure
        if status == 429:
            return RateLimited(retry_after_ms(response))

        # 5xx IS retried and DOES count toward the breaker
        if status >= 500:
            return ServerError(f"Server error: {status}", status_code=status)

        if status == 404:
            return NotFound()

        if status >= 400:
            return ClientError(f"Client error: {status}", status_code=status)

        return None

    @staticmethod
    def _failure_message(outcome: CallOutcome) -> str:
        return getattr(outcome, "message", None) or "Unknown error"
