"""
RestGate — Exception Hierarchy
================================

What:  The uniform error carried through the pipeline and the structured
       validation failure produced by request-schema validation.
How:   Route handlers and stages raise these (or anything else); the
       error-normalization stage turns every failure into an APIError and
       the terminal responder serializes it.

Exception Hierarchy:
    RestGateError (base)
    ├── APIError              uniform error: message, status, is_public, stack
    │   └── NotFoundError     404 "API not found!" for unmatched routes
    └── ValidationFailure     per-field message lists, public, status 400

Failure kinds (assigned during normalization):
    VALIDATION   ValidationFailure or framework request validation
    APPLICATION  APIError or HTTPException raised by handler code
    UNHANDLED    anything else; internal, status 500 unless it carries one
"""

from dataclasses import dataclass, field
from enum import Enum
from http import HTTPStatus
from typing import Any, Dict, List, Mapping, Optional

DEFAULT_STATUS = HTTPStatus.INTERNAL_SERVER_ERROR.value


class FailureKind(str, Enum):
    VALIDATION = "validation"
    APPLICATION = "application"
    UNHANDLED = "unhandled"


def resolve_status(status: Any) -> int:
    """
    Return `status` if it is an integer error status (400-599), else 500.

    Booleans are rejected even though they are ints.
    """
    if isinstance(status, bool) or not isinstance(status, int):
        return DEFAULT_STATUS
    if 400 <= status <= 599:
        return status
    return DEFAULT_STATUS


def status_phrase(status: int) -> str:
    """Standard reason phrase for `status` ("Internal Server Error" for 500)."""
    try:
        return HTTPStatus(status).phrase
    except ValueError:
        return "Unknown Error"


class RestGateError(Exception):
    """Base exception for all RestGate errors."""


class APIError(RestGateError):
    """
    The uniform error.

    Attributes:
        message:    Human-readable description.
        status:     HTTP status code, always resolved to 400-599.
        is_public:  Whether `message` may be shown to the caller. When false
                    the caller only sees the reason phrase of `status`.
        stack:      Formatted traceback, surfaced only in development.
        headers:    Extra response headers (e.g. WWW-Authenticate).
        kind:       FailureKind of the failure this error was built from.
    """

    def __init__(
        self,
        message: str = "",
        status: Optional[int] = None,
        is_public: bool = False,
        stack: Optional[str] = None,
        headers: Optional[Mapping[str, str]] = None,
        kind: FailureKind = FailureKind.APPLICATION,
    ):
        self.message = message or ""
        self.status = resolve_status(status)
        self.is_public = bool(is_public)
        self.stack = stack
        self.headers: Dict[str, str] = dict(headers or {})
        self.kind = kind
        super().__init__(self.message)

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(message={self.message!r}, status={self.status}, "
            f"is_public={self.is_public}, kind={self.kind.value})"
        )


class NotFoundError(APIError):
    """Raised when no route matches the request."""

    def __init__(self, message: str = "API not found!"):
        super().__init__(
            message=message,
            status=HTTPStatus.NOT_FOUND.value,
            is_public=True,
        )


@dataclass
class FieldErrors:
    """All validation messages reported for one field."""

    field: str
    messages: List[str] = field(default_factory=list)


class ValidationFailure(RestGateError):
    """
    Structured validation failure: one FieldErrors group per field.

    Raised by handler code directly, or built from a FastAPI
    RequestValidationError by `from_pydantic_errors`.
    """

    def __init__(
        self,
        errors: List[FieldErrors],
        status: int = HTTPStatus.BAD_REQUEST.value,
    ):
        self.errors = list(errors)
        self.status = status
        super().__init__(self.unified_message())

    def unified_message(self) -> str:
        """Messages joined by '. ' within a field and ' and ' across fields."""
        return " and ".join(". ".join(group.messages) for group in self.errors)

    @classmethod
    def from_pydantic_errors(
        cls,
        errors: List[Dict[str, Any]],
        status: int = HTTPStatus.BAD_REQUEST.value,
    ) -> "ValidationFailure":
        """
        Group pydantic error dicts by field and prefix each message with it.

        The field is the dotted location without its leading request part
        (body, query, path, header, cookie), so
        ``{"loc": ("body", "name"), "msg": "Field required"}`` becomes
        ``name: Field required``. Undecodable JSON is reported on ``body``.
        Groups keep the order in which their field first appears.
        """
        groups: Dict[str, FieldErrors] = {}
        for error in errors:
            name = _field_name(error)
            group = groups.setdefault(name, FieldErrors(field=name))
            group.messages.append(f"{name}: {error.get('msg', 'Invalid value')}")
        return cls(list(groups.values()), status=status)


# Leading loc entries FastAPI uses to say where a value came from
_LOCATION_SOURCES = frozenset({"body", "query", "path", "header", "cookie"})


def _field_name(error: Dict[str, Any]) -> str:
    if error.get("type") == "json_invalid":
        return "body"
    loc = [str(part) for part in error.get("loc") or ()]
    if len(loc) > 1 and loc[0] in _LOCATION_SOURCES:
        loc = loc[1:]
    return ".".join(loc) or "request"
