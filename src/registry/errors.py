"""Error kinds and response conventions for registry operations.

Every operation either commits completely or raises one of the
``RegistryError`` subclasses below before touching any state. Callers that
prefer plain dicts (the CLI, ``StoryLedger.invoke``) convert exceptions with
``to_dict()``, which follows the same response shape as the factory helpers.

Usage:
    from src.registry.errors import NotFound, ErrorCode

    try:
        ledger.get_universe(999)
    except NotFound as e:
        assert e.code == ErrorCode.NOT_FOUND
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class ErrorCategory(str, Enum):
    """Categories for error classification.

    - VALIDATION: Caller provided bad input
    - PERMISSION: Caller not registered or not authorized
    - RESOURCE: Record not found, already exists, already liked
    """

    VALIDATION = "validation"
    PERMISSION = "permission"
    RESOURCE = "resource"


class ErrorCode(str, Enum):
    """Specific error codes for programmatic handling."""

    # Validation errors
    INVALID_ARGUMENT = "invalid_argument"

    # Permission errors
    NOT_REGISTERED = "not_registered"
    NOT_OWNER = "not_owner"
    NOT_AUTHORIZED = "not_authorized"

    # Resource errors
    NOT_FOUND = "not_found"
    ALREADY_EXISTS = "already_exists"
    ALREADY_LIKED = "already_liked"


@dataclass
class ErrorResponse:
    """Standardized error response.

    All error responses include:
    - success: Always False
    - error: Human-readable message
    - code: Machine-readable error code
    - category: Error category (validation, permission, resource)
    - retriable: Always False here, every failure is a local validation
    - details: Optional additional context
    """

    success: bool = False
    error: str = ""
    code: str = ""
    category: str = ""
    retriable: bool = False
    details: dict[str, object] | None = None

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary for serialization."""
        result: dict[str, object] = {
            "success": self.success,
            "error": self.error,
            "code": self.code,
            "category": self.category,
            "retriable": self.retriable,
        }
        if self.details:
            result["details"] = self.details
        return result


class RegistryError(Exception):
    """Base class for all registry failures.

    Subclasses fix the category and default code. ``details`` carries the
    identifiers involved so the caller can correct input and resubmit.
    """

    category: ErrorCategory = ErrorCategory.VALIDATION
    default_code: ErrorCode = ErrorCode.INVALID_ARGUMENT

    def __init__(
        self,
        message: str,
        code: ErrorCode | None = None,
        **details: object,
    ) -> None:
        self.message = message
        self.code = code or self.default_code
        self.details = dict(details)
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(
            error=self.message,
            code=self.code.value,
            category=self.category.value,
            retriable=False,
            details=self.details or None,
        )

    def to_dict(self) -> dict[str, object]:
        """Convert to the standard error response dict."""
        return self.to_response().to_dict()


class InvalidInput(RegistryError):
    """A required text field was empty or too long."""

    category = ErrorCategory.VALIDATION
    default_code = ErrorCode.INVALID_ARGUMENT


class NotRegistered(RegistryError):
    """The identity has no Author record."""

    category = ErrorCategory.PERMISSION
    default_code = ErrorCode.NOT_REGISTERED


class AlreadyRegistered(RegistryError):
    """The identity already registered as an author."""

    category = ErrorCategory.RESOURCE
    default_code = ErrorCode.ALREADY_EXISTS


class NotFound(RegistryError):
    """The id is outside the allocated range for its entity kind."""

    category = ErrorCategory.RESOURCE
    default_code = ErrorCode.NOT_FOUND


class Forbidden(RegistryError):
    """An authorization or ownership check failed."""

    category = ErrorCategory.PERMISSION
    default_code = ErrorCode.NOT_AUTHORIZED


class AlreadyLiked(RegistryError):
    """The identity already liked this story."""

    category = ErrorCategory.RESOURCE
    default_code = ErrorCode.ALREADY_LIKED


# Factory function for creating error responses without raising


def validation_error(
    message: str,
    code: ErrorCode = ErrorCode.INVALID_ARGUMENT,
    **details: object,
) -> dict[str, object]:
    """Create a validation error response.

    Use when the caller provided invalid input.

    Args:
        message: Human-readable error message
        code: Specific error code (default: INVALID_ARGUMENT)
        **details: Additional context (e.g., field="title")

    Returns:
        Error response dict with success=False
    """
    return InvalidInput(message, code, **details).to_dict()

