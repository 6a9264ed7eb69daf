"""
Approximate matching of quoted passages against opinion text.
"""

from lexcerta.matching.fuzzy import (
    MatchResult,
    BestMatchResult,
    normalize_text,
    ratio,
    partial_ratio,
    classify,
    extract_excerpt,
    match_quote_in_opinion,
    match_quote_across_opinions,
)

__all__ = [
    "MatchResult",
    "BestMatchResult",
    "normalize_text",
    "ratio",
    "partial_ratio",
    "classify",
    "extract_excerpt",
    "match_quote_in_opinion",
    "match_quote_across_opinions",
]
