"""Exception hierarchy for colocated.

Every error raised by the package inherits from ColocatedError and carries:
- error_code: an ErrorCode enum for programmatic handling
- context: ErrorContext naming the document/fragment involved
- suggestions: actionable steps to fix the declaration or setup

Example:
    try:
        render_query(HomeQuery, session.registry.snapshot())
    except DocumentStructureError as e:
        print(f"Error [{e.error_code.value}]: {e.message}")
        for suggestion in e.suggestions:
            print(f"  - {suggestion}")
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(Enum):
    """Standardized error codes.

    - E0xx: Transport errors
    - E2xx: Document structure errors
    - E3xx: Session and configuration errors
    - E9xx: Unknown/internal errors
    """

    # Transport errors (E0xx)
    CONNECTION_FAILED = "E001"
    REQUEST_TIMEOUT = "E002"
    REQUEST_FAILED = "E003"

    # Document errors (E2xx)
    INVALID_DOCUMENT = "E201"
    QUERY_ROOT_SKIPPED = "E202"
    TYPES_OUTPUT_FAILED = "E203"

    # Session/config errors (E3xx)
    SESSION_CLOSED = "E301"
    INVALID_CONFIG = "E302"

    UNKNOWN = "E999"

    @property
    def category(self) -> str:
        """Get the error category name."""
        code_num = int(self.value[1:])
        if code_num < 100:
            return "transport"
        elif code_num < 300:
            return "document"
        elif code_num < 400:
            return "session"
        else:
            return "unknown"


@dataclass
class ErrorContext:
    """Structured context describing where an error happened.

    Attributes:
        document: Name of the document (query or fragment) being processed.
        fragment: Name of the fragment involved, if any.
        origin: Declaring source file of the document, when known.
        extra: Additional context-specific information.
    """

    document: str | None = None
    fragment: str | None = None
    origin: str | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert context to dictionary for serialization."""
        result = {
            "document": self.document,
            "fragment": self.fragment,
            "origin": self.origin,
            "extra": self.extra or None,
        }
        return {k: v for k, v in result.items() if v is not None}

    def format_location(self) -> str:
        """Format the error location as a readable string."""
        parts = []
        if self.document:
            parts.append(f"document={self.document}")
        if self.fragment:
            parts.append(f"fragment={self.fragment}")
        if self.origin:
            parts.append(f"origin={self.origin}")
        return " > ".join(parts) if parts else "unknown location"


class ColocatedError(Exception):
    """Base exception for all colocated errors.

    Attributes:
        error_code: Unique ErrorCode for this error type
        message: Human-readable error description
        context: ErrorContext with document details
        suggestions: List of actionable steps to resolve the issue
        recoverable: Whether retrying can succeed
        cause: The underlying exception (if any)
    """

    error_code: ErrorCode = ErrorCode.UNKNOWN
    default_message: str = "An unexpected error occurred"
    default_suggestions: list[str] = []
    recoverable: bool = False

    def __init__(
        self,
        message: str | None = None,
        error_code: ErrorCode | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
        recoverable: bool | None = None,
        suggestions: list[str] | None = None,
        **extra_context: Any,
    ) -> None:
        self.message = message or self.default_message
        self.error_code = error_code or self.error_code
        self.context = context or ErrorContext()
        self.cause = cause
        if recoverable is not None:
            self.recoverable = recoverable
        self._suggestions = suggestions

        if extra_context:
            self.context.extra.update(extra_context)

        super().__init__(self.message)

    @property
    def suggestions(self) -> list[str]:
        """Get actionable suggestions for resolving this error."""
        if self._suggestions is not None:
            return self._suggestions
        return self.default_suggestions.copy()

    def __str__(self) -> str:
        parts = [f"[{self.error_code.value}] {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            parts.append(f"at {location}")

        return " | ".join(parts)

    def format_verbose(self) -> str:
        """Format error with full details including suggestions."""
        lines = [f"Error [{self.error_code.value}]: {self.message}"]

        location = self.context.format_location()
        if location != "unknown location":
            lines.append(f"Location: {location}")

        if self.suggestions:
            lines.append("")
            lines.append("Suggestions:")
            for suggestion in self.suggestions:
                lines.append(f"  - {suggestion}")

        return "\n".join(lines)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for serialization."""
        return {
            "error_code": self.error_code.value,
            "error_type": self.__class__.__name__,
            "message": self.message,
            "recoverable": self.recoverable,
            "suggestions": self.suggestions,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
        }


class DocumentStructureError(ColocatedError):
    """A document node violates a structural invariant.

    Raised for declaration bugs: mismatched segment/child counts, a value
    that is not a document node, or a fragment consumer handed a document
    that does not start with a fragment reference.
    """

    error_code = ErrorCode.INVALID_DOCUMENT
    default_message = "Malformed document"
    default_suggestions = [
        "Build documents with graphql(...) instead of instantiating Part directly",
        "Start fragment documents with fragment(...) or lazy_fragment(...)",
    ]


class QueryRootSkippedError(ColocatedError):
    """The root of a rendered query was gated by lazy-fragment visibility."""

    error_code = ErrorCode.QUERY_ROOT_SKIPPED
    default_message = "Cannot render a fragment as a query"
    default_suggestions = [
        "Pass a document declared with query(...) to render_query",
        "Compose lazy fragments inside a query instead of rendering them directly",
    ]


class TypesOutputError(ColocatedError):
    """The exhaustive for-types document could not be written."""

    error_code = ErrorCode.TYPES_OUTPUT_FAILED
    default_message = "Failed to write types document"
    default_suggestions = [
        "Check that COLOCATED_TYPES_DIR points to a writable directory",
        "Unset COLOCATED_TYPES_DIR to disable types output",
    ]


class SessionClosedError(ColocatedError):
    """A closed session was used."""

    error_code = ErrorCode.SESSION_CLOSED
    default_message = "Session is closed"
    default_suggestions = [
        "Create one Session per top-level session and keep it open while consumers are mounted",
    ]


class ConfigError(ColocatedError):
    """Settings failed to load or validate."""

    error_code = ErrorCode.INVALID_CONFIG
    default_message = "Invalid configuration"
    default_suggestions = [
        "Check the YAML settings file for typos",
        "Check COLOCATED_* environment variables",
    ]


class TransportError(ColocatedError):
    """Base class for errors raised while executing a rendered document."""

    recoverable = True


class TransportConnectionError(TransportError):
    """Could not reach the GraphQL endpoint."""

    error_code = ErrorCode.CONNECTION_FAILED
    default_message = "Failed to connect to GraphQL endpoint"
    default_suggestions = [
        "Verify the endpoint URL (COLOCATED_ENDPOINT)",
        "Verify the GraphQL server is running",
    ]


class RequestTimeoutError(TransportError):
    """The GraphQL endpoint did not answer in time."""

    error_code = ErrorCode.REQUEST_TIMEOUT
    default_message = "GraphQL request timed out"
    default_suggestions = [
        "Increase COLOCATED_TIMEOUT",
        "Check whether the query selects more data than needed",
    ]


class RequestFailedError(TransportError):
    """The GraphQL endpoint answered with an HTTP error or GraphQL errors."""

    error_code = ErrorCode.REQUEST_FAILED
    default_message = "GraphQL request failed"

    def __init__(
        self,
        message: str | None = None,
        status_code: int | None = None,
        **kwargs: Any,
    ) -> None:
        self.status_code = status_code
        if status_code:
            kwargs.setdefault("suggestions", self._suggestions_for_status(status_code))
        super().__init__(message=message, **kwargs)

    def _suggestions_for_status(self, status_code: int) -> list[str]:
        """Generate suggestions based on HTTP status code."""
        if status_code == 400:
            return [
                "Check the rendered document is valid GraphQL",
                "Check fragment names are unique (COLOCATED_DEDUPE_FRAGMENTS)",
            ]
        elif status_code in (401, 403):
            return [
                "Verify the authorization headers passed to GraphQLTransport",
            ]
        elif 500 <= status_code < 600:
            return [
                "Check server logs for error details",
            ]
        else:
            return [
                f"Received HTTP {status_code} response",
                "Check response body for error details",
            ]

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result["status_code"] = self.status_code
        return result


__all__ = [
    "ColocatedError",
    "ConfigError",
    "DocumentStructureError",
    "ErrorCode",
    "ErrorContext",
    "QueryRootSkippedError",
    "RequestFailedError",
    "RequestTimeoutError",
    "SessionClosedError",
    "TransportConnectionError",
    "TransportError",
    "TypesOutputError",
]
