"""
Citation and quote verification workflows.
"""

from lexcerta.verification.envelope import (
    ToolError,
    ToolResponseEnvelope,
    create_tool_response,
    PARSE_ERROR,
    RATE_LIMITED,
    API_ERROR,
    HALLUCINATION_DETECTED,
    CITATION_NOT_FOUND,
    TEXT_UNAVAILABLE,
    QUOTE_NOT_FOUND,
)
from lexcerta.verification.citation import verify_citation, parse_citation_envelope
from lexcerta.verification.quote import verify_quote_integrity
from lexcerta.verification.service import VerificationService

__all__ = [
    "ToolError",
    "ToolResponseEnvelope",
    "create_tool_response",
    "PARSE_ERROR",
    "RATE_LIMITED",
    "API_ERROR",
    "HALLUCINATION_DETECTED",
    "CITATION_NOT_FOUND",
    "TEXT_UNAVAILABLE",
    "QUOTE_NOT_FOUND",
    "verify_citation",
    "parse_citation_envelope",
    "verify_quote_integrity",
    "VerificationService",
]
