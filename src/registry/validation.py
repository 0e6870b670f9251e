"""Input checks shared by the registry components."""

from __future__ import annotations

from .errors import InvalidInput


def require_text(value: object, field: str, max_length: int | None = None) -> str:
    """Check a required text field.

    Empty means zero length; whitespace is accepted as content.

    Args:
        value: The supplied value
        field: Field name for the error details
        max_length: Optional upper bound in characters

    Returns:
        The value, typed as str

    Raises:
        InvalidInput: If value is not a string, is empty, or is too long
    """
    if not isinstance(value, str):
        raise InvalidInput(f"{field} must be a string", field=field)
    if len(value) == 0:
        raise InvalidInput(f"{field} must not be empty", field=field)
    if max_length is not None and len(value) > max_length:
        raise InvalidInput(
            f"{field} exceeds {max_length} characters",
            field=field,
            max_length=max_length,
            length=len(value),
        )
    return value


def require_identity(value: object, field: str = "identity") -> str:
    """Check a caller or target identity (any non-empty string)."""
    if not isinstance(value, str) or not value:
        raise InvalidInput(f"{field} must be a non-empty string", field=field)
    return value


def require_id(value: object, field: str) -> int:
    """Check an entity id is an int (bools rejected)."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInput(f"{field} must be an integer", field=field)
    return value
