"""
Todo Service
============

Business logic for todos: validation, ownership checks, and translation
between stored documents and the API representation.

Every call re-reads the store; nothing is cached between requests.
Validation and not-found checks always run before any write.
"""

import logging
from datetime import datetime
from typing import Optional

from app.core.errors import ForbiddenError, NotFoundError, ValidationError
from app.schemas.todo import TodoCreate, TodoEdit
from app.services.document_store import DocumentStore
from app.utils.helpers import format_datetime, utc_now
from app.utils.validators import (
    validate_category,
    validate_deadline,
    validate_image_url,
    validate_priority,
    validate_title,
)

logger = logging.getLogger(__name__)

# Optional document fields, in API order
_OPTIONAL_FIELDS = ("category", "priority", "imageUrl", "updatedAt", "userId")


def todo_to_api(document: dict) -> dict:
    """
    Serialize a stored document to the API response format.

    ``deadline`` and ``createdAt`` are always present (null when unset);
    the remaining optional fields appear only when set.
    """
    data = {
        "id": document["id"],
        "title": document.get("title", ""),
        "completed": bool(document.get("completed", False)),
        "deadline": _api_value(document.get("deadline")),
        "createdAt": _api_value(document.get("createdAt")),
    }
    for field in _OPTIONAL_FIELDS:
        value = document.get(field)
        if value is not None:
            data[field] = _api_value(value)
    return data


def _api_value(value):
    if isinstance(value, datetime):
        return format_datetime(value)
    return value


class TodoService:
    """Service for todo operations."""

    def __init__(self, store: DocumentStore):
        self.store = store

    # =========================================================================
    # Helpers
    # =========================================================================

    async def _get_owned(self, todo_id: str, user_id: str) -> dict:
        """Fetch a todo, ensuring it exists and belongs to ``user_id``."""
        if not todo_id or not todo_id.strip():
            raise ValidationError(error="Invalid request", details="Todo ID is required")

        document = await self.store.get(todo_id)
        if document is None:
            raise NotFoundError(details=f"No todo found with ID: {todo_id}")

        if document.get("userId") != user_id:
            logger.warning(
                "todo_ownership_denied id=%s user=%s", todo_id, user_id,
            )
            raise ForbiddenError(details="You do not own this todo")

        return document

    # =========================================================================
    # Operations
    # =========================================================================

    async def list_todos(
        self,
        user_id: Optional[str] = None,
        completed: Optional[bool] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict]:
        """
        List todos newest first.

        Args:
            user_id: When given, only that user's todos are returned.
            completed: Optional completion filter.
            category: Optional category filter (validated).
            search: Optional case-insensitive title substring.
        """
        filters = []
        if user_id is not None:
            filters.append(("userId", user_id))
        if completed is not None:
            filters.append(("completed", completed))
        if category is not None:
            category_value = validate_category(category)
            if category_value is not None:
                filters.append(("category", category_value))

        documents = await self.store.query(filters, order_by=("createdAt", "desc"))

        if search:
            needle = search.strip().lower()
            documents = [d for d in documents if needle in (d.get("title") or "").lower()]

        return [todo_to_api(d) for d in documents]

    async def create_todo(self, payload: TodoCreate, user_id: str) -> str:
        """
        Create a todo owned by ``user_id`` and return its id.

        Optional fields are written only when they carry a value;
        ``deadline`` is always written, as null when not supplied.
        """
        title = validate_title(payload.title)
        category = validate_category(payload.category)
        priority = validate_priority(payload.priority)
        deadline = validate_deadline(payload.deadline)
        image_url = validate_image_url(payload.image_url)

        fields: dict = {
            "title": title,
            "completed": False,
            "deadline": deadline,
            "createdAt": utc_now(),
            "userId": user_id,
        }
        if category is not None:
            fields["category"] = category
        if priority is not None:
            fields["priority"] = priority
        if image_url is not None:
            fields["imageUrl"] = image_url

        todo_id = await self.store.add(fields)
        logger.info("todo_created id=%s user=%s", todo_id, user_id)
        return todo_id

    async def edit_todo(self, todo_id: str, payload: TodoEdit, user_id: str) -> str:
        """
        Edit a todo's title and optional fields.

        Keys absent from the payload are left alone; keys present with
        an empty value clear the stored field. ``updatedAt`` is always
        refreshed.
        """
        await self._get_owned(todo_id, user_id)

        updates: dict = {
            "title": validate_title(payload.title),
        }
        if payload.provided("category"):
            updates["category"] = validate_category(payload.category)
        if payload.provided("priority"):
            updates["priority"] = validate_priority(payload.priority)
        if payload.provided("deadline"):
            updates["deadline"] = validate_deadline(payload.deadline)
        if payload.provided("image_url"):
            updates["imageUrl"] = validate_image_url(payload.image_url)
        updates["updatedAt"] = utc_now()

        await self.store.update(todo_id, updates)
        logger.info(
            "todo_updated id=%s user=%s fields=%s",
            todo_id, user_id, ",".join(sorted(updates)),
        )
        return todo_id

    async def toggle_todo(self, todo_id: str, user_id: str) -> bool:
        """
        Flip a todo's completion flag and return the new value.

        ``updatedAt`` is not touched.
        """
        document = await self._get_owned(todo_id, user_id)
        completed = not bool(document.get("completed", False))

        await self.store.update(todo_id, {"completed": completed})
        logger.info("todo_toggled id=%s user=%s completed=%s", todo_id, user_id, completed)
        return completed

    async def delete_todo(self, todo_id: str, user_id: str) -> None:
        """Permanently delete a todo."""
        await self._get_owned(todo_id, user_id)

        await self.store.delete(todo_id)
        logger.info("todo_deleted id=%s user=%s", todo_id, user_id)
