"""
Unit tests for VerificationService.

Tests input validation, delegation to the workflows, shared state
construction from configuration, and reset.
"""

import threading
from unittest.mock import Mock, patch

import pytest

from lexcerta.cache import CachedLookup, CachedOpinions
from lexcerta.config import CacheConfig, Config, CourtListenerConfig, ResilienceConfig
from lexcerta.external.base import CitationMatch, ClusterData, LookupResponse
from lexcerta.external.courtlistener import CourtListenerClient
from lexcerta.resilience import CircuitBreaker, build_execution_policy
from lexcerta.verification import VerificationService

BROWN_MATCH = CitationMatch(
    citation="347 U.S. 483",
    status=200,
    clusters=[
        ClusterData(
            absolute_url="/opinion/105221/brown-v-board-of-education/",
            case_name="Brown v. Board of Education",
        )
    ],
)


@pytest.fixture
def client():
    mock = Mock()
    mock.lookup_citation.return_value = LookupResponse.ok([BROWN_MATCH])
    return mock


@pytest.fixture
def service(client):
    return VerificationService(client=client)


class TestInputValidation:
    """Test malformed input is rejected before any workflow runs."""

    def test_empty_citation(self, service, client):
        envelope = service.verify_citation("")

        assert envelope.valid is False
        assert envelope.error.code == "PARSE_ERROR"
        assert envelope.error.message.startswith("Invalid input: citation")
        client.lookup_citation.assert_not_called()

    def test_empty_quote_text(self, service, client):
        envelope = service.verify_quote_integrity("347 U.S. 483", "")

        assert envelope.error.code == "PARSE_ERROR"
        assert "text" in envelope.error.message
        client.lookup_citation.assert_not_called()

    def test_non_string_citation(self, service):
        envelope = service.parse_citation(None)

        assert envelope.error.code == "PARSE_ERROR"


class TestDelegation:
    """Test the service wires its state into each workflow."""

    def test_parse_citation(self, service, client):
        envelope = service.parse_citation("1 F.3d 1")

        assert envelope.valid is True
        assert envelope.metadata["reporter"] == "F.3d"
        client.lookup_citation.assert_not_called()

    def test_verify_citation(self, service):
        envelope = service.verify_citation("347 U.S. 483")

        assert envelope.valid is True
        assert envelope.metadata["caseName"] == "Brown v. Board of Education"

    def test_cache_shared_between_operations(self, service, client):
        """Test a citation verified once is served from cache for quote checks."""
        client.fetch_cluster_opinions.return_value = Mock(status="ok", opinions=[])

        service.verify_citation("347 U.S. 483")
        service.verify_quote_integrity("347 U.S. 483", "some quote text")

        assert client.lookup_citation.call_count == 1
        client.fetch_cluster_opinions.assert_called_once_with(105221, cancel_event=None)

    def test_cancel_event_forwarded(self, service, client):
        client.fetch_cluster_opinions.return_value = Mock(status="ok", opinions=[])
        event = threading.Event()

        service.verify_quote_integrity("347 U.S. 483", "some quote text", cancel_event=event)

        client.lookup_citation.assert_called_once_with("347 U.S. 483", cancel_event=event)
        client.fetch_cluster_opinions.assert_called_once_with(105221, cancel_event=event)


class TestCancellation:
    """Test a caller-set cancel event stops requests before any I/O."""

    @pytest.fixture
    def live_service(self):
        client = CourtListenerClient(
            api_key="test-key",
            policy=build_execution_policy(sleep=lambda seconds: None),
        )
        yield VerificationService(client=client)
        client.close()

    @pytest.fixture
    def cancelled(self):
        event = threading.Event()
        event.set()
        return event

    def test_cancelled_citation_lookup(self, live_service, cancelled):
        with patch("requests.Session.request") as mock_request:
            envelope = live_service.verify_citation("347 U.S. 483", cancel_event=cancelled)

        assert envelope.valid is False
        assert envelope.error.code == "API_ERROR"
        assert envelope.error.details == {"message": "Request cancelled"}
        mock_request.assert_not_called()

    def test_cancelled_opinion_fetch(self, live_service, cancelled):
        live_service.citation_cache.set("347 U.S. 483", CachedLookup(matches=[BROWN_MATCH]))

        with patch("requests.Session.request") as mock_request:
            envelope = live_service.verify_quote_integrity(
                "347 U.S. 483", "separate but equal", cancel_event=cancelled
            )

        assert envelope.error.code == "API_ERROR"
        assert envelope.error.details == {"message": "Request cancelled"}
        mock_request.assert_not_called()

    def test_cancellation_not_cached(self, live_service, cancelled):
        """Test a cancelled lookup leaves the cache untouched."""
        with patch("requests.Session.request"):
            live_service.verify_citation("347 U.S. 483", cancel_event=cancelled)

        assert live_service.cache_stats()["citations"]["size"] == 0
        assert live_service.client.policy.breaker.failure_count == 0


class TestServiceState:
    """Test statistics, reset and construction."""

    def test_cache_stats(self, service):
        service.verify_citation("347 U.S. 483")
        service.verify_citation("347 U.S. 483")

        stats = service.cache_stats()

        assert stats["citations"] == {"size": 1, "maxSize": 1000, "hits": 1, "misses": 1}
        assert stats["opinions"] == {"size": 0, "maxSize": 200, "hits": 0, "misses": 0}

    def test_reset(self, service, client):
        service.citation_cache.set("347 U.S. 483", CachedLookup())
        service.opinion_cache.set(1, CachedOpinions())

        service.reset()

        assert service.cache_stats()["citations"]["size"] == 0
        assert service.cache_stats()["opinions"]["size"] == 0
        client.policy.reset.assert_called_once()
        client.rate_limiter.reset.assert_called_once()

    def test_close(self, service, client):
        service.close()

        client.close.assert_called_once()

    def test_from_config(self):
        config = Config(
            courtlistener=CourtListenerConfig(
                api_key="token", base_url="http://localhost:9000/v4", timeout_seconds=2.0
            ),
            resilience=ResilienceConfig(
                max_tokens=10, refill_interval_seconds=60.0, max_retries=1, failure_threshold=3
            ),
            cache=CacheConfig(citation_cache_size=5, opinion_cache_size=2),
        )

        service = VerificationService.from_config(config)

        assert service.client.base_url == "http://localhost:9000/v4"
        assert service.client.session.headers["Authorization"] == "Token token"
        assert service.client.rate_limiter.max_tokens == 10
        assert service.client.policy.retry.max_retries == 1
        assert service.client.policy.timeout.timeout_seconds == 2.0
        assert service.client.policy.breaker.failure_threshold == 3
        assert service.client.policy.breaker.state == CircuitBreaker.CLOSED
        assert service.cache_stats()["citations"]["maxSize"] == 5
        assert service.cache_stats()["opinions"]["maxSize"] == 2
        service.close()
