"""Unit tests for registry error kinds and response conventions."""

import pytest

from src.registry.errors import (
    AlreadyLiked,
    AlreadyRegistered,
    ErrorCategory,
    ErrorCode,
    ErrorResponse,
    Forbidden,
    InvalidInput,
    NotFound,
    NotRegistered,
    RegistryError,
    validation_error,
)


class TestErrorEnums:
    """Tests for ErrorCategory and ErrorCode enums."""

    def test_error_category_values(self) -> None:
        """All error categories have string values."""
        assert ErrorCategory.VALIDATION.value == "validation"
        assert ErrorCategory.PERMISSION.value == "permission"
        assert ErrorCategory.RESOURCE.value == "resource"

    def test_error_code_values(self) -> None:
        assert ErrorCode.INVALID_ARGUMENT.value == "invalid_argument"
        assert ErrorCode.NOT_REGISTERED.value == "not_registered"
        assert ErrorCode.NOT_OWNER.value == "not_owner"
        assert ErrorCode.NOT_AUTHORIZED.value == "not_authorized"
        assert ErrorCode.NOT_FOUND.value == "not_found"
        assert ErrorCode.ALREADY_EXISTS.value == "already_exists"
        assert ErrorCode.ALREADY_LIKED.value == "already_liked"


class TestErrorKinds:
    """Each exception class carries a fixed category and default code."""

    @pytest.mark.parametrize(
        "error_cls, category, code",
        [
            (InvalidInput, ErrorCategory.VALIDATION, ErrorCode.INVALID_ARGUMENT),
            (NotRegistered, ErrorCategory.PERMISSION, ErrorCode.NOT_REGISTERED),
            (AlreadyRegistered, ErrorCategory.RESOURCE, ErrorCode.ALREADY_EXISTS),
            (NotFound, ErrorCategory.RESOURCE, ErrorCode.NOT_FOUND),
            (Forbidden, ErrorCategory.PERMISSION, ErrorCode.NOT_AUTHORIZED),
            (AlreadyLiked, ErrorCategory.RESOURCE, ErrorCode.ALREADY_LIKED),
        ],
    )
    def test_defaults(
        self, error_cls: type[RegistryError], category: ErrorCategory, code: ErrorCode
    ) -> None:
        error = error_cls("boom")
        assert isinstance(error, RegistryError)
        assert error.category == category
        assert error.code == code
        assert str(error) == "boom"

    def test_code_override(self) -> None:
        error = Forbidden("not yours", ErrorCode.NOT_OWNER)
        assert error.code == ErrorCode.NOT_OWNER
        assert error.category == ErrorCategory.PERMISSION

    def test_to_dict_includes_details(self) -> None:
        result = NotFound("Universe 9 does not exist", universe_id=9).to_dict()
        assert result == {
            "success": False,
            "error": "Universe 9 does not exist",
            "code": "not_found",
            "category": "resource",
            "retriable": False,
            "details": {"universe_id": 9},
        }

    def test_to_dict_omits_empty_details(self) -> None:
        assert "details" not in InvalidInput("empty").to_dict()


class TestErrorResponse:
    """Tests for ErrorResponse dataclass."""

    def test_error_to_dict(self) -> None:
        """ErrorResponse serializes correctly."""
        response = ErrorResponse(error="x", code="not_found", category="resource")
        assert response.to_dict() == {
            "success": False,
            "error": "x",
            "code": "not_found",
            "category": "resource",
            "retriable": False,
        }


class TestFactories:
    """The factory helper builds the same dict without raising."""

    def test_validation_error(self) -> None:
        result = validation_error("title must not be empty", field="title")
        assert result["category"] == "validation"
        assert result["details"] == {"field": "title"}

