"""
Todo Schemas
============

Pydantic schemas for the todo endpoints.

Request fields are typed ``Any``. Field rules and their
error messages live in ``app.utils.validators`` so that an unknown id is
reported before the body is judged.
"""

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Request Schemas
# =============================================================================

class TodoCreate(BaseModel):
    """Request schema for creating a todo."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Pay rent",
                "category": "personal",
                "priority": "high",
                "deadline": "2025-01-01",
                "imageUrl": None,
            }
        },
    )

    title: Any = Field(None, description="Required, non-empty after trimming")
    category: Any = Field(None, description="work | personal | shopping | health | other")
    priority: Any = Field(None, description="low | medium | high")
    deadline: Any = Field(None, description="ISO 8601 date or datetime")
    image_url: Any = Field(None, alias="imageUrl", description="URL returned by the blob store")


class TodoEdit(BaseModel):
    """
    Request schema for editing a todo.

    Keys left out of the body keep their stored value; keys sent as
    null (or "") clear it.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "title": "Pay rent (transfer)",
                "priority": "medium",
                "deadline": None,
            }
        },
    )

    title: Any = Field(None, description="Required, non-empty after trimming")
    category: Any = Field(None, description="work | personal | shopping | health | other")
    priority: Any = Field(None, description="low | medium | high")
    deadline: Any = Field(None, description="ISO 8601 date or datetime; null clears")
    image_url: Any = Field(None, alias="imageUrl", description="URL returned by the blob store; null clears")

    def provided(self, field: str) -> bool:
        """True when the client sent ``field`` in the body."""
        return field in self.model_fields_set


# =============================================================================
# Response Schemas
# =============================================================================

class TodoOut(BaseModel):
    """A todo as returned by the API."""

    id: str
    title: str
    completed: bool
    deadline: Optional[str] = None
    createdAt: Optional[str] = None
    category: Optional[str] = None
    priority: Optional[str] = None
    imageUrl: Optional[str] = None
    updatedAt: Optional[str] = None
    userId: Optional[str] = None


class TodoListResponse(BaseModel):
    todos: list[TodoOut]


class CreateTodoResponse(BaseModel):
    id: str


class EditTodoResponse(BaseModel):
    success: bool = True
    message: str = "Todo updated successfully"
    id: str


class SuccessResponse(BaseModel):
    success: bool = True


class ErrorResponse(BaseModel):
    """Standard error response."""

    error: str
    details: Optional[str] = None
