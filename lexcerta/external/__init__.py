"""
CourtListener integration.

Provides rate-limited, fault-tolerant access to the CourtListener citation
lookup and opinion text endpoints.
"""

from lexcerta.external.base import (
    ClusterData,
    CitationMatch,
    OpinionText,
    LookupResponse,
    OpinionTextResponse,
    cluster_id_from_url,
)
from lexcerta.external.courtlistener import CourtListenerClient, strip_html

__all__ = [
    "ClusterData",
    "CitationMatch",
    "OpinionText",
    "LookupResponse",
    "OpinionTextResponse",
    "cluster_id_from_url",
    "CourtListenerClient",
    "strip_html",
]
