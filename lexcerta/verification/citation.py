"""
Citation verification workflow.

parse -> citation cache -> CourtListener lookup -> classify.
"""

import threading
from typing import Any, Dict, List, Optional, Tuple

from lexcerta.cache.citation_cache import CachedLookup, CitationCache
from lexcerta.external.base import CitationMatch, ClusterData
from lexcerta.external.courtlistener import CourtListenerClient
from lexcerta.parser import parse_citation
from lexcerta.verification.envelope import (
    HALLUCINATION_DETECTED,
    PARSE_ERROR,
    ToolResponseEnvelope,
    api_error,
    envelope_guard,
    failure,
    rate_limited,
)

COURTLISTENER_WEB = "https://www.courtlistener.com"


def parse_error(message: str) -> ToolResponseEnvelope:
    return failure(PARSE_ERROR, message)


def find_verified_match(matches: List[CitationMatch]) -> Optional[CitationMatch]:
    """First match with status 200 and at least one cluster."""
    return next((match for match in matches if match.verified), None)


def resolve_matches(
    normalized: str,
    client: CourtListenerClient,
    cache: CitationCache,
    cancel_event: Optional[threading.Event] = None,
) -> Tuple[Optional[List[CitationMatch]], Optional[ToolResponseEnvelope]]:
    """
    Get lookup matches cache-first.

    Returns:
        (matches, None) on success, or (None, envelope) when the lookup was
        rate limited or failed. Only successful lookups are cached.
    """
    cached = cache.get(normalized)
    if cached is not None:
        return cached.matches, None

    lookup = client.lookup_citation(normalized, cancel_event=cancel_event)

    if lookup.status == "rate_limited":
        return None, rate_limited(lookup.retry_after_ms)

    if lookup.status == "error":
        return None, api_error(
            "CourtListener API is currently unavailable. "
            "This is NOT a citation verification failure.",
            lookup.message,
        )

    cache.set(normalized, CachedLookup(matches=lookup.matches))
    return lookup.matches, None


def describe_cluster(cluster: ClusterData) -> Dict[str, Any]:
    return {
        "caseName": cluster.case_name,
        "court": cluster.court,
        "dateFiled": cluster.date_filed,
        "citations": cluster.citations,
        "courtListenerUrl": f"{COURTLISTENER_WEB}{cluster.absolute_url}",
    }


def classify_matches(
    matches: List[CitationMatch], citation: str, normalized: str
) -> ToolResponseEnvelope:
    """Turn lookup matches into a verified or hallucination envelope."""
    verified_match = find_verified_match(matches)

    if verified_match is None:
        return failure(
            HALLUCINATION_DETECTED,
            f'Citation "{citation}" not found in CourtListener database. '
            "This citation may be fabricated.",
            metadata={"status": "not_found"},
            details={"queriedCitation": citation, "normalized": normalized},
        )

    clusters = [describe_cluster(cluster) for cluster in verified_match.clusters]
    metadata: Dict[str, Any] = {"status": "verified", **clusters[0]}
    if len(clusters) > 1:
        metadata["allMatches"] = clusters

    return ToolResponseEnvelope(valid=True, metadata=metadata, error=None)


@envelope_guard("verify_citation")
def verify_citation(
    citation: str,
    client: CourtListenerClient,
    cache: CitationCache,
    cancel_event: Optional[threading.Event] = None,
) -> ToolResponseEnvelope:
    """
    Verify that a citation names a real case.

    Args:
        citation: Citation as asserted, e.g. "347 U.S. 483"
        client: CourtListener client
        cache: Citation cache
        cancel_event: Set by the caller to abandon outstanding requests

    Returns:
        Envelope: verified case metadata, or PARSE_ERROR, RATE_LIMITED,
        API_ERROR or HALLUCINATION_DETECTED
    """
    # Parse locally; malformed input never reaches the network
    parsed = parse_citation(citation)
    if not parsed.ok:
        return parse_error(parsed.error.message)

    normalized = parsed.citation.normalized
    matches, problem = resolve_matches(normalized, client, cache, cancel_event)
    if problem is not None:
        return problem

    return classify_matches(matches, citation, normalized)


@envelope_guard("parse_citation")
def parse_citation_envelope(citation: str) -> ToolResponseEnvelope:
    """Parse a citation and report its canonical parts."""
    parsed = parse_citation(citation)
    if parsed.ok:
        return ToolResponseEnvelope(valid=True, metadata=parsed.citation.to_dict(), error=None)
    return failure(parsed.error.code, parsed.error.message)
