"""
Citation parsing.

Splits strings like "347 U.S. 483" into volume, reporter and page, mapping
loose reporter spellings to canonical Bluebook abbreviations.
"""

import re
from typing import Optional

from lexcerta.parser.reporters import normalize_reporter
from lexcerta.parser.schemas import CitationParseError, ParsedCitation, ParseResult

VOLUME_PREFIX = re.compile(r"^(\d+)\s+")
PAGE_CANDIDATE = re.compile(r"\b(\d+)\b")

# Volume + text + number, used only to word the error message
BASIC_CITATION = re.compile(r"^(\d+)\s+(.+)\s+(\d+)")


def _match_citation(text: str) -> Optional[ParsedCitation]:
    """
    Try each standalone number after the volume as the page, left to right.

    Everything between the volume and the candidate is the reporter; the first
    candidate whose reporter normalizes wins. Series suffixes such as the "2d"
    in "F. Supp. 2d" are not standalone numbers, and in a pin cite like
    "483, 490" the first number is accepted.
    """
    volume_match = VOLUME_PREFIX.match(text)
    if not volume_match:
        return None

    volume = int(volume_match.group(1))
    rest = text[volume_match.end():]

    for candidate in PAGE_CANDIDATE.finditer(rest):
        raw_reporter = rest[: candidate.start()].strip()
        if not raw_reporter:
            continue

        reporter = normalize_reporter(raw_reporter)
        if reporter:
            page = int(candidate.group(1))
            return ParsedCitation(
                volume=volume,
                reporter=reporter,
                page=page,
                raw=text,
                normalized=f"{volume} {reporter} {page}",
            )

    return None


def parse_citation(raw: str) -> ParseResult:
    """
    Parse a legal citation string into a structured citation.

    Args:
        raw: Citation text, e.g. "347 U.S. 483" or "123 f supp 2d 456"

    Returns:
        ParseResult holding either a ParsedCitation or a CitationParseError
    """
    trimmed = raw.strip()
    if not trimmed:
        return ParseResult(error=CitationParseError(message="Empty input", input=raw))

    citation = _match_citation(trimmed)
    if citation:
        return ParseResult(citation=citation)

    loose = BASIC_CITATION.match(trimmed)
    if loose:
        raw_reporter = loose.group(2).strip()
        return ParseResult(
            error=CitationParseError(
                message=f'Unrecognized reporter: "{raw_reporter}"',
                input=trimmed,
            )
        )

    return ParseResult(
        error=CitationParseError(
            message=(
                f'Could not parse "{trimmed}" as a legal citation. '
                'Expected format: <volume> <reporter> <page> (e.g., "347 U.S. 483")'
            ),
            input=trimmed,
        )
    )
