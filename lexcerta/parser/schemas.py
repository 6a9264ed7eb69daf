"""
Data structures produced by the citation parser.
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class ParsedCitation:
    """A citation split into its canonical parts."""

    volume: int
    reporter: str  # Canonical Bluebook form
    page: int
    raw: str  # Original input
    normalized: str  # "volume reporter page"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "volume": self.volume,
            "reporter": self.reporter,
            "page": self.page,
            "normalized": self.normalized,
        }


@dataclass(frozen=True)
class CitationParseError:
    """Why a string could not be parsed as a citation."""

    message: str
    input: str
    code: str = "PARSE_ERROR"


@dataclass(frozen=True)
class ParseResult:
    """Either a parsed citation or a parse error, never both."""

    citation: Optional[ParsedCitation] = None
    error: Optional[CitationParseError] = None

    @property
    def ok(self) -> bool:
        return self.citation is not None
