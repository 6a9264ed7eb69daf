"""
Response envelope shared by every verification operation.

An envelope always has exactly three fields: valid, metadata and error.
"""

import functools
import json
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

from loguru import logger

from lexcerta.logging.logger import log_verification_outcome

log = logger.bind(component="verification")

# Error codes
PARSE_ERROR = "PARSE_ERROR"
RATE_LIMITED = "RATE_LIMITED"
API_ERROR = "API_ERROR"
HALLUCINATION_DETECTED = "HALLUCINATION_DETECTED"
CITATION_NOT_FOUND = "CITATION_NOT_FOUND"
TEXT_UNAVAILABLE = "TEXT_UNAVAILABLE"
QUOTE_NOT_FOUND = "QUOTE_NOT_FOUND"


@dataclass(frozen=True)
class ToolError:
    """Error half of an envelope."""

    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary (details omitted when absent)."""
        result: Dict[str, Any] = {"code": self.code, "message": self.message}
        if self.details is not None:
            result["details"] = self.details
        return result


@dataclass(frozen=True)
class ToolResponseEnvelope:
    """{valid, metadata, error} result of a verification operation."""

    valid: bool
    metadata: Optional[Dict[str, Any]] = None
    error: Optional[ToolError] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "valid": self.valid,
            "metadata": self.metadata,
            "error": self.error.to_dict() if self.error else None,
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def create_tool_response(envelope: ToolResponseEnvelope) -> Dict[str, Any]:
    """Frame an envelope as the single text content item of a tool response."""
    return {"content": [{"type": "text", "text": envelope.to_json()}]}


def failure(
    code: str,
    message: str,
    metadata: Optional[Dict[str, Any]] = None,
    details: Optional[Dict[str, Any]] = None,
) -> ToolResponseEnvelope:
    return ToolResponseEnvelope(
        valid=False, metadata=metadata, error=ToolError(code=code, message=message, details=details)
    )


def rate_limited(retry_after_ms: int) -> ToolResponseEnvelope:
    return failure(
        RATE_LIMITED,
        "CourtListener API rate limit reached. Try again later.",
        metadata={"status": "rate_limited"},
        details={"retryAfterMs": retry_after_ms},
    )


def api_error(message: str, detail: Optional[str] = None) -> ToolResponseEnvelope:
    return failure(
        API_ERROR,
        message,
        metadata={"status": "error"},
        details={"message": detail} if detail is not None else None,
    )


def envelope_guard(operation: str) -> Callable:
    """
    Decorator keeping exceptions from escaping a verification operation.

    Unexpected errors are logged and reported as API_ERROR; every envelope
    produced is logged as an outcome.
    """

    def decorator(func: Callable[..., ToolResponseEnvelope]) -> Callable[..., ToolResponseEnvelope]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> ToolResponseEnvelope:
            try:
                envelope = func(*args, **kwargs)
            except Exception as e:
                log.exception(f"{operation} failed unexpectedly: {e}")
                envelope = api_error(
                    "Internal error while verifying. This is NOT a citation verification failure.",
                    str(e),
                )

            log_verification_outcome(
                log,
                operation,
                envelope.valid,
                envelope.error.code if envelope.error else None,
            )
            return envelope

        return wrapper

    return decorator
