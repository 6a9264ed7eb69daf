"""
Quote integrity workflow.

parse -> verify citation -> fetch opinion text -> fuzzy match.
"""

import threading
from typing import Any, Dict, List, Optional

from lexcerta.cache.citation_cache import CitationCache
from lexcerta.cache.opinion_cache import CachedOpinions, OpinionCache
from lexcerta.external.base import OpinionText, cluster_id_from_url
from lexcerta.external.courtlistener import CourtListenerClient
from lexcerta.matching.fuzzy import MEDIUM_THRESHOLD, match_quote_across_opinions
from lexcerta.parser import parse_citation
from lexcerta.verification.citation import find_verified_match, parse_error, resolve_matches
from lexcerta.verification.envelope import (
    CITATION_NOT_FOUND,
    QUOTE_NOT_FOUND,
    TEXT_UNAVAILABLE,
    ToolError,
    ToolResponseEnvelope,
    api_error,
    envelope_guard,
    failure,
    rate_limited,
)

SHORT_QUOTE_WARNING = "Quote is very short (<20 chars). Match score may be unreliable."


def _text_unavailable() -> ToolResponseEnvelope:
    return failure(
        TEXT_UNAVAILABLE,
        "Opinion text not available for this citation.",
        metadata={"status": "text_unavailable"},
    )


def _resolve_opinions(
    cluster_id: int,
    client: CourtListenerClient,
    cache: OpinionCache,
    cancel_event: Optional[threading.Event] = None,
):
    """
    Get a cluster's opinions cache-first.

    Returns:
        (opinions, None) or (None, envelope) for rate limits, API errors and
        clusters with no text.
    """
    cached = cache.get(cluster_id)
    if cached is not None:
        opinions: List[OpinionText] = cached.opinions
    else:
        fetched = client.fetch_cluster_opinions(cluster_id, cancel_event=cancel_event)

        if fetched.status == "rate_limited":
            return None, rate_limited(fetched.retry_after_ms)
        if fetched.status == "error":
            return None, api_error(
                "CourtListener API is currently unavailable. "
                "This is NOT a quote verification failure.",
                fetched.message,
            )
        if fetched.status == "not_found":
            return None, _text_unavailable()

        opinions = fetched.opinions
        cache.set(cluster_id, CachedOpinions(opinions=opinions))

    if not opinions:
        return None, _text_unavailable()
    return opinions, None


@envelope_guard("verify_quote_integrity")
def verify_quote_integrity(
    citation: str,
    text: str,
    client: CourtListenerClient,
    citation_cache: CitationCache,
    opinion_cache: OpinionCache,
    cancel_event: Optional[threading.Event] = None,
) -> ToolResponseEnvelope:
    """
    Verify that a quoted passage appears in the cited opinion.

    Args:
        citation: Citation the quote is attributed to
        text: Quoted passage
        client: CourtListener client
        citation_cache: Cache of citation lookups
        opinion_cache: Cache of opinion text
        cancel_event: Set by the caller to abandon outstanding requests

    Returns:
        Envelope with match score, classification and best excerpt; valid
        when the score is at least 70
    """
    parsed = parse_citation(citation)
    if not parsed.ok:
        return parse_error(parsed.error.message)

    normalized = parsed.citation.normalized
    matches, problem = resolve_matches(normalized, client, citation_cache, cancel_event)
    if problem is not None:
        return problem

    verified_match = find_verified_match(matches)
    if verified_match is None:
        return failure(
            CITATION_NOT_FOUND,
            "Cannot verify quote: citation not found in CourtListener database.",
            metadata={"status": "citation_not_found"},
            details={"queriedCitation": citation, "normalized": normalized},
        )

    cluster = verified_match.clusters[0]
    cluster_id: Optional[int] = cluster_id_from_url(cluster.absolute_url)
    if cluster_id is None:
        return api_error(
            "Could not extract cluster ID from CourtListener URL.", cluster.absolute_url
        )

    opinions, problem = _resolve_opinions(cluster_id, client, opinion_cache, cancel_event)
    if problem is not None:
        return problem

    result = match_quote_across_opinions(text, opinions)

    metadata: Dict[str, Any] = {
        "status": "quote_verified",
        "matchScore": result.score,
        "classification": result.classification,
        "bestMatchExcerpt": result.best_match_excerpt,
        "matchedOpinionType": result.matched_opinion_type,
        "matchedOpinionId": result.matched_opinion_id,
        "caseName": cluster.case_name,
        "court": cluster.court,
    }
    if result.short_quote_warning:
        metadata["warning"] = SHORT_QUOTE_WARNING

    valid = result.score >= MEDIUM_THRESHOLD
    error = None
    if not valid:
        error = ToolError(
            code=QUOTE_NOT_FOUND,
            message=(
                "Quote does not appear to match the cited opinion "
                f"(score: {result.score}/100)."
            ),
            details={"bestMatchExcerpt": result.best_match_excerpt, "matchScore": result.score},
        )

    return ToolResponseEnvelope(valid=valid, metadata=metadata, error=error)
