"""
Citation parsing and reporter normalization.
"""

from lexcerta.parser.schemas import ParsedCitation, CitationParseError, ParseResult
from lexcerta.parser.reporters import REPORTER_MAP, normalize_reporter
from lexcerta.parser.citation import parse_citation

__all__ = [
    "ParsedCitation",
    "CitationParseError",
    "ParseResult",
    "REPORTER_MAP",
    "normalize_reporter",
    "parse_citation",
]
