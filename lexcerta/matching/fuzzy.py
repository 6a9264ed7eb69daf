"""
Fuzzy matching of quoted passages against opinion text.

Scores are 0-100 similarity ratios built on difflib.SequenceMatcher with the
junk heuristic disabled.
"""

import re
from dataclasses import dataclass
from difflib import SequenceMatcher
from typing import Any, Dict, List, Optional

from lexcerta.external.base import OpinionText
from lexcerta.logging.decorators import performance_monitor

HIGH_THRESHOLD = 90
MEDIUM_THRESHOLD = 70
SHORT_QUOTE_CHARS = 20
LARGE_TEXT_CHARS = 50_000
MIN_PARAGRAPH_CHARS = 10
CONTEXT_CHARS = 50

_SINGLE_QUOTES = re.compile("[\u2018\u2019\u201a\u201b]")
_DOUBLE_QUOTES = re.compile("[\u201c\u201d\u201e\u201f]")
_DASHES = re.compile("[\u2013\u2014]")
_WHITESPACE = re.compile(r"\s+")
_PARAGRAPH_BREAK = re.compile(r"\n\s*\n+")


@dataclass
class MatchResult:
    """Similarity of a quote to one opinion."""

    score: int  # 0-100
    classification: str  # "high" (90+), "medium" (70-89), "low" (<70)
    best_match_excerpt: str
    short_quote_warning: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result: Dict[str, Any] = {
            "score": self.score,
            "classification": self.classification,
            "bestMatchExcerpt": self.best_match_excerpt,
        }
        if self.short_quote_warning:
            result["shortQuoteWarning"] = True
        return result


@dataclass
class BestMatchResult(MatchResult):
    """Best match across several opinions, naming the opinion that produced it."""

    matched_opinion_id: Optional[int] = None
    matched_opinion_type: str = ""


def normalize_text(text: str) -> str:
    """
    Normalize typography so it never affects scoring.

    Smart quotes become straight quotes, en/em dashes become hyphens,
    non-breaking spaces become spaces, and whitespace runs collapse.
    """
    text = _SINGLE_QUOTES.sub("'", text)
    text = _DOUBLE_QUOTES.sub('"', text)
    text = _DASHES.sub("-", text)
    text = text.replace("\u00a0", " ")
    return _WHITESPACE.sub(" ", text).strip()


def ratio(a: str, b: str) -> int:
    """Whole-string similarity, 0-100."""
    if not a or not b:
        return 0
    return round(100 * SequenceMatcher(None, a, b, autojunk=False).ratio())


def partial_ratio(a: str, b: str) -> int:
    """
    Best similarity of the shorter string to an equal-length slice of the longer.

    Candidate slices are anchored at each matching block found between the two
    strings, so an exact substring scores 100.
    """
    if not a or not b:
        return 0

    shorter, longer = (a, b) if len(a) <= len(b) else (b, a)
    blocks = SequenceMatcher(None, shorter, longer, autojunk=False).get_matching_blocks()

    best = 0.0
    for short_start, long_start, _size in blocks:
        start = max(0, long_start - short_start)
        window = longer[start:start + len(shorter)]
        score = SequenceMatcher(None, shorter, window, autojunk=False).ratio()
        if score > 0.995:
            return 100
        best = max(best, score)

    return round(100 * best)


def classify(score: int) -> str:
    if score >= HIGH_THRESHOLD:
        return "high"
    if score >= MEDIUM_THRESHOLD:
        return "medium"
    return "low"


def _excerpt_from_chunk(quote: str, chunk: str) -> str:
    """Slide a quote-sized window over the chunk and return the best one with context."""
    window_size = min(len(quote), len(chunk))
    if window_size == 0:
        return chunk[: 2 * CONTEXT_CHARS]

    step = max(1, window_size // 4)
    best_score = -1
    best_pos = 0

    for i in range(0, len(chunk) - window_size + 1, step):
        score = ratio(quote, chunk[i:i + window_size])
        if score > best_score:
            best_score = score
            best_pos = i

    # Refine around the coarse winner one character at a time
    refine_start = max(0, best_pos - step)
    refine_end = min(len(chunk) - window_size, best_pos + step)
    for i in range(refine_start, refine_end + 1):
        score = ratio(quote, chunk[i:i + window_size])
        if score > best_score:
            best_score = score
            best_pos = i

    start = max(0, best_pos - CONTEXT_CHARS)
    end = min(len(chunk), best_pos + window_size + CONTEXT_CHARS)
    return chunk[start:end]


def extract_excerpt(normalized_quote: str, opinion_text: str) -> str:
    """
    Find the passage of the opinion that best matches the quote.

    Very long opinions are narrowed to their best paragraph first to bound
    the cost of the sliding window.
    """
    chunk = opinion_text
    if len(opinion_text) > LARGE_TEXT_CHARS:
        paragraphs = _PARAGRAPH_BREAK.split(opinion_text)
        best_score = -1
        chunk = paragraphs[0] if paragraphs else ""
        for paragraph in paragraphs:
            if len(paragraph.strip()) < MIN_PARAGRAPH_CHARS:
                continue
            score = partial_ratio(normalized_quote, normalize_text(paragraph))
            if score > best_score:
                best_score = score
                chunk = paragraph

    return _excerpt_from_chunk(normalized_quote, normalize_text(chunk))


def match_quote_in_opinion(quote: str, opinion_text: str) -> MatchResult:
    """
    Match a quote against a single opinion's text.

    Args:
        quote: Quoted passage as asserted
        opinion_text: Full text of the opinion

    Returns:
        MatchResult with 0-100 score, classification and best excerpt
    """
    normalized_quote = normalize_text(quote)
    normalized_opinion = normalize_text(opinion_text)

    score = partial_ratio(normalized_quote, normalized_opinion)
    # Paragraph breaks only survive in the raw text
    excerpt = extract_excerpt(normalized_quote, opinion_text)

    return MatchResult(
        score=score,
        classification=classify(score),
        best_match_excerpt=excerpt,
        short_quote_warning=len(normalized_quote) < SHORT_QUOTE_CHARS,
    )


@performance_monitor(threshold_ms=500.0, component="verification")
def match_quote_across_opinions(quote: str, opinions: List[OpinionText]) -> BestMatchResult:
    """
    Match a quote against every opinion in a cluster and keep the best.

    Ties keep the first opinion seen.
    """
    best: Optional[MatchResult] = None
    best_opinion: Optional[OpinionText] = opinions[0] if opinions else None

    for opinion in opinions:
        result = match_quote_in_opinion(quote, opinion.plain_text)
        if best is None or result.score > best.score:
            best = result
            best_opinion = opinion

    if best is None:
        best = MatchResult(
            score=0,
            classification="low",
            best_match_excerpt="",
            short_quote_warning=len(normalize_text(quote)) < SHORT_QUOTE_CHARS,
        )

    return BestMatchResult(
        score=best.score,
        classification=best.classification,
        best_match_excerpt=best.best_match_excerpt,
        short_quote_warning=best.short_quote_warning,
        matched_opinion_id=best_opinion.opinion_id if best_opinion else None,
        matched_opinion_type=best_opinion.type if best_opinion else "",
    )
