"""
Data structures for CourtListener lookups.

Normalizes the JSON returned by the citation-lookup, cluster and opinion
endpoints into typed records, and defines the typed responses returned by
the client.
"""

import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ClusterData:
    """
    One case record (an opinion cluster).

    Read-only once built; owned by whichever cache entry holds it.
    """

    absolute_url: str
    case_name: str
    case_name_short: str = ""
    date_filed: str = ""
    court: str = ""
    court_id: str = ""
    citations: List[Dict[str, Any]] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClusterData":
        """Build from API JSON; court fields may be nested under "docket"."""
        docket = data.get("docket") if isinstance(data.get("docket"), dict) else {}
        return cls(
            absolute_url=data.get("absolute_url", ""),
            case_name=data.get("case_name", ""),
            case_name_short=data.get("case_name_short", ""),
            date_filed=data.get("date_filed", "") or "",
            court=docket.get("court", data.get("court", "")) or "",
            court_id=docket.get("court_id", data.get("court_id", "")) or "",
            citations=list(data.get("citations") or []),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "absolute_url": self.absolute_url,
            "case_name": self.case_name,
            "case_name_short": self.case_name_short,
            "date_filed": self.date_filed,
            "court": self.court,
            "court_id": self.court_id,
            "citations": self.citations,
        }


@dataclass(frozen=True)
class CitationMatch:
    """Citation-lookup result for one citation found in the queried text."""

    citation: str
    status: int  # 200 = found, 404 = not found
    normalized_citations: List[str] = field(default_factory=list)
    start_index: int = 0
    end_index: int = 0
    error_message: str = ""
    clusters: List[ClusterData] = field(default_factory=list)

    @property
    def verified(self) -> bool:
        return self.status == 200 and len(self.clusters) > 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CitationMatch":
        """Build from citation-lookup JSON."""
        return cls(
            citation=data.get("citation", ""),
            status=int(data.get("status", 0)),
            normalized_citations=list(data.get("normalized_citations") or []),
            start_index=int(data.get("start_index", 0) or 0),
            end_index=int(data.get("end_index", 0) or 0),
            error_message=data.get("error_message", "") or "",
            clusters=[ClusterData.from_dict(c) for c in data.get("clusters") or []],
        )


@dataclass(frozen=True)
class OpinionText:
    """Extracted text of one sub-opinion (lead, dissent, concurrence, ...)."""

    opinion_id: int
    type: str  # "010combined", "020lead", "030concurrence", "040dissent", ...
    plain_text: str
    cluster_id: int


@dataclass
class LookupResponse:
    """Result of a citation lookup: "ok", "rate_limited" or "error"."""

    status: str
    matches: List[CitationMatch] = field(default_factory=list)
    retry_after_ms: int = 0
    code: str = ""
    message: str = ""

    @classmethod
    def ok(cls, matches: List[CitationMatch]) -> "LookupResponse":
        return cls(status="ok", matches=matches)

    @classmethod
    def rate_limited(cls, retry_after_ms: int) -> "LookupResponse":
        return cls(status="rate_limited", retry_after_ms=retry_after_ms)

    @classmethod
    def error(cls, message: str, code: str = "API_ERROR") -> "LookupResponse":
        return cls(status="error", code=code, message=message)


@dataclass
class OpinionTextResponse:
    """Result of an opinion fetch: "ok", "rate_limited", "error" or "not_found"."""

    status: str
    opinions: List[OpinionText] = field(default_factory=list)
    retry_after_ms: int = 0
    code: str = ""
    message: str = ""

    @classmethod
    def ok(cls, opinions: List[OpinionText]) -> "OpinionTextResponse":
        return cls(status="ok", opinions=opinions)

    @classmethod
    def rate_limited(cls, retry_after_ms: int) -> "OpinionTextResponse":
        return cls(status="rate_limited", retry_after_ms=retry_after_ms)

    @classmethod
    def error(cls, message: str, code: str = "API_ERROR") -> "OpinionTextResponse":
        return cls(status="error", code=code, message=message)

    @classmethod
    def not_found(cls) -> "OpinionTextResponse":
        return cls(status="not_found")


def cluster_id_from_url(absolute_url: str) -> Optional[int]:
    """Extract the cluster id from "/opinion/<id>/<slug>/"."""
    match = re.search(r"/opinion/(\d+)/", absolute_url or "")
    return int(match.group(1)) if match else None
