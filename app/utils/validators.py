"""
Validators
==========

Field validation for todo payloads. Each validator returns the
normalized value or raises ``ValidationError``.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional, Type

from app.config import settings
from app.core.errors import ValidationError
from app.models.todo import TodoCategory, TodoPriority
from app.utils.helpers import parse_datetime


def _allowed(enum_cls: Type[Enum]) -> str:
    return ", ".join(member.value for member in enum_cls)


def validate_title(title: Any) -> str:
    """
    Validate and trim a todo title.

    Raises:
        ValidationError: If title is missing, not a string or blank.
    """
    if not isinstance(title, str) or not title.strip():
        raise ValidationError(
            error="Validation failed",
            details="Title is required",
        )
    return title.strip()


def _validate_member(value: Any, enum_cls: Type[Enum], label: str) -> Optional[str]:
    # None and "" both mean "no value"
    if value is None or value == "":
        return None
    try:
        return enum_cls(value).value
    except ValueError:
        raise ValidationError(
            error=f"Invalid {label.lower()}",
            details=f"{label} must be one of: {_allowed(enum_cls)}",
        )


def validate_category(category: Any) -> Optional[str]:
    """
    Validate an optional category.

    Returns:
        The category value, or None when empty.

    Raises:
        ValidationError: If the value is not one of the known categories.
    """
    return _validate_member(category, TodoCategory, "Category")


def validate_priority(priority: Any) -> Optional[str]:
    """Validate an optional priority; see ``validate_category``."""
    return _validate_member(priority, TodoPriority, "Priority")


def validate_deadline(deadline: Any) -> Optional[datetime]:
    """
    Parse an optional deadline.

    Empty values yield None. Date-only strings become midnight UTC.

    Raises:
        ValidationError: If the value cannot be parsed as a date.
    """
    if deadline is None or deadline == "":
        return None
    if not isinstance(deadline, str):
        raise ValidationError(
            error="Invalid deadline",
            details="Could not parse deadline date",
        )
    try:
        return parse_datetime(deadline)
    except ValueError:
        raise ValidationError(
            error="Invalid deadline",
            details="Could not parse deadline date",
        )


def validate_image_url(image_url: Any) -> Optional[str]:
    """
    Validate an optional image URL produced by the blob store.

    Raises:
        ValidationError: If the value is not an http(s) URL.
    """
    if image_url is None or image_url == "":
        return None
    if not isinstance(image_url, str) or not image_url.startswith(("http://", "https://")):
        raise ValidationError(
            error="Invalid image URL",
            details="imageUrl must be an http(s) URL",
        )
    return image_url


def validate_image_upload(filename: str, content: bytes) -> str:
    """
    Validate an image before it is uploaded to the blob store.

    Returns:
        The lowercased file extension.

    Raises:
        ValidationError: If the format is not allowed or the file is too large/empty.
    """
    extension = filename.rsplit(".", 1)[-1].lower() if "." in filename else ""
    if extension not in settings.allowed_image_formats_list:
        raise ValidationError(
            error="Invalid image",
            details=f"Image format must be one of: {', '.join(settings.allowed_image_formats_list)}",
        )
    if not content:
        raise ValidationError(
            error="Invalid image",
            details="Image file is empty",
        )
    if len(content) > settings.max_image_upload_bytes:
        raise ValidationError(
            error="Invalid image",
            details=f"Image must be at most {settings.MAX_IMAGE_UPLOAD_SIZE_MB}MB",
        )
    return extension
