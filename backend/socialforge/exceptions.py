"""
SocialForge Backend — Custom Exception Hierarchy
=================================================

What:  Application-specific exceptions for AI generation failures and bad input.
How:   Each exception carries a message and an optional context dict. The AI
       invocation layer normalizes every third-party failure into an
       AIServiceError tagged with an ErrorKind.
Who:   Raised by services and the resilient invoker; caught by whatever
       outer layer presents errors to users.

Exception Hierarchy:
    SocialForgeError (base)
    ├── ValidationError   → caller-fixable input problem
    └── AIServiceError    → generative AI call failed (tagged with ErrorKind)

ErrorKind → presentation:
    TIMEOUT              → AI_SERVICE_TIMEOUT      504  (transient)
    RATE_LIMITED         → RATE_LIMIT_EXCEEDED     429  (transient, retried)
    QUOTA_EXCEEDED       → QUOTA_EXCEEDED          402  (billing-actionable, fatal)
    SERVICE_UNAVAILABLE  → AI_SERVICE_UNAVAILABLE  503  (transient)
    CLIENT_ERROR         → AI_SERVICE_ERROR        502  (caller-fixable, fatal)
    UNKNOWN              → AI_SERVICE_ERROR        502  (retried)
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """Failure taxonomy produced by error classification."""

    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"
    QUOTA_EXCEEDED = "quota_exceeded"
    SERVICE_UNAVAILABLE = "service_unavailable"
    CLIENT_ERROR = "client_error"
    UNKNOWN = "unknown"


# Kinds that terminate an invocation on first occurrence
NON_RETRYABLE_KINDS = frozenset({ErrorKind.CLIENT_ERROR, ErrorKind.QUOTA_EXCEEDED})

_ERROR_CODES = {
    ErrorKind.TIMEOUT: "AI_SERVICE_TIMEOUT",
    ErrorKind.RATE_LIMITED: "RATE_LIMIT_EXCEEDED",
    ErrorKind.QUOTA_EXCEEDED: "QUOTA_EXCEEDED",
    ErrorKind.SERVICE_UNAVAILABLE: "AI_SERVICE_UNAVAILABLE",
    ErrorKind.CLIENT_ERROR: "AI_SERVICE_ERROR",
    ErrorKind.UNKNOWN: "AI_SERVICE_ERROR",
}

_STATUS_CODES = {
    ErrorKind.TIMEOUT: 504,
    ErrorKind.RATE_LIMITED: 429,
    ErrorKind.QUOTA_EXCEEDED: 402,
    ErrorKind.SERVICE_UNAVAILABLE: 503,
    ErrorKind.CLIENT_ERROR: 502,
    ErrorKind.UNKNOWN: 502,
}


class SocialForgeError(Exception):
    """
    Base exception for all SocialForge application errors.

    Attributes:
        message:  User-facing error description (safe to return in API response)
        context:  Additional debug info (logged but NOT returned to client)
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        context: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.context = context or {}
        super().__init__(self.message)


class ValidationError(SocialForgeError):
    """
    Raised when caller input fails a business rule.

    Pydantic already rejects malformed request schemas; this covers rules
    that only a service can check (e.g. an unsupported platform/ratio pair).
    """

    def __init__(
        self,
        message: str = "Validation failed",
        field: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        ctx = context or {}
        if field:
            ctx["field"] = field
        super().__init__(message=message, context=ctx)
        self.field = field


class AIServiceError(SocialForgeError):
    """
    A classified failure of a generative AI call.

    What:    The normalized failure representation surfaced by the resilient
             invoker. A fresh instance is created for every failed attempt;
             only the last one reaches the caller.
    How:     Callers branch on ``kind`` (or ``retryable``) rather than on
             message text.

    Attributes:
        kind:     ErrorKind tag
        service:  Originating service label (e.g. "gemini", "imagen")
        details:  Structured extras: status, retry_after, original_error, timeout
    """

    def __init__(
        self,
        kind: ErrorKind,
        service: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.kind = kind
        self.service = service
        self.details = details or {}
        super().__init__(
            message=message,
            context={"service": service, "kind": kind.value, **self.details},
        )

    @property
    def retryable(self) -> bool:
        """False for client errors and quota/billing failures."""
        return self.kind not in NON_RETRYABLE_KINDS

    @property
    def error_code(self) -> str:
        return _ERROR_CODES[self.kind]

    @property
    def status_code(self) -> int:
        """Suggested HTTP status for an outer API layer."""
        return _STATUS_CODES[self.kind]

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize for an error response body.

        ``original_error`` is dropped: it may carry raw SDK text that should
        stay in server-side logs.
        """
        public = {k: v for k, v in self.details.items() if k != "original_error"}
        return {
            "error": self.error_code,
            "kind": self.kind.value,
            "service": self.service,
            "message": self.message,
            "details": public,
        }

    def __repr__(self) -> str:
        return f"AIServiceError(kind={self.kind.value!r}, service={self.service!r}, message={self.message!r})"
