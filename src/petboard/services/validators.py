"""Input checks shared by the content services.

Every helper raises :class:`~petboard.core.errors.ValidationError` before any
store access so invalid input never produces a partial write.
"""
from __future__ import annotations

from petboard.core.errors import ValidationError
from petboard.models.post import Category, PostStatus


def require_text(value: str | None, field_name: str, *, max_length: int | None = None) -> str:
    """Return ``value`` stripped, rejecting blanks and over-long input."""
    if value is None or not value.strip():
        raise ValidationError(f"{field_name} is required")
    stripped = value.strip()
    if max_length is not None and len(stripped) > max_length:
        raise ValidationError(f"{field_name} must be at most {max_length} characters")
    return stripped


def parse_category(value: Category | str | None) -> Category:
    """Return the category for ``value`` or fail if it is outside the closed set."""
    if isinstance(value, Category):
        return value
    try:
        return Category(value)
    except ValueError as err:
        allowed = ", ".join(member.value for member in Category)
        raise ValidationError(f"category must be one of: {allowed}") from err


def parse_status(value: PostStatus | str | None) -> PostStatus:
    """Return the moderation status for ``value``; only the three known states pass."""
    if isinstance(value, PostStatus):
        return value
    try:
        return PostStatus(value)
    except ValueError as err:
        raise ValidationError(
            "Invalid status. Must be pending, approved, or rejected."
        ) from err


def check_page(limit: int | None, offset: int | None = None) -> None:
    """Reject negative pagination values; ``None`` means unbounded / no offset."""
    if limit is not None and limit < 0:
        raise ValidationError("limit must be a non-negative integer")
    if offset is not None and offset < 0:
        raise ValidationError("offset must be a non-negative integer")


def clean_image_url(value: str | None) -> str | None:
    """Treat blank image references as absent."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None
