"""
Pydantic Schemas
================

Request/response schemas for API validation.
"""

from app.schemas.todo import (
    CreateTodoResponse,
    EditTodoResponse,
    ErrorResponse,
    SuccessResponse,
    TodoCreate,
    TodoEdit,
    TodoListResponse,
    TodoOut,
)

__all__ = [
    "CreateTodoResponse",
    "EditTodoResponse",
    "ErrorResponse",
    "SuccessResponse",
    "TodoCreate",
    "TodoEdit",
    "TodoListResponse",
    "TodoOut",
]
