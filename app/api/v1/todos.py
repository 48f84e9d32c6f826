"""
Todos API Endpoints
===================

Route prefix: /todos (also mounted at /api/todos)

Endpoints:
    GET    /todos                 - List todos (caller's own when authenticated)
    POST   /todos                 - Create a todo
    PUT    /todos/{todo_id}/edit  - Edit title and optional fields
    PUT    /todos/{todo_id}/toggle - Flip completion
    DELETE /todos/{todo_id}       - Delete a todo
"""

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Path, Query

from app.dependencies import CurrentIdentity, CurrentIdentityOptional, Todos
from app.schemas.todo import (
    CreateTodoResponse,
    EditTodoResponse,
    ErrorResponse,
    SuccessResponse,
    TodoCreate,
    TodoEdit,
    TodoListResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter()

TodoId = Annotated[str, Path(description="The todo's document id")]

_ERRORS = {
    400: {"model": ErrorResponse, "description": "Validation error"},
    401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
    403: {"model": ErrorResponse, "description": "Todo belongs to another user"},
    404: {"model": ErrorResponse, "description": "Todo not found"},
    500: {"model": ErrorResponse, "description": "Store or server failure"},
}


def _errors(*codes: int) -> dict:
    return {code: _ERRORS[code] for code in codes}


@router.get(
    "",
    summary="List todos",
    description="Todos ordered by creation time, newest first.",
    responses={200: {"model": TodoListResponse}, **_errors(400, 500)},
)
async def list_todos(
    service: Todos,
    user_id: CurrentIdentityOptional,
    completed: Optional[bool] = Query(default=None, description="Filter by completion"),
    category: Optional[str] = Query(default=None, description="Filter by category"),
    q: Optional[str] = Query(default=None, description="Case-insensitive title search"),
):
    """
    GET /todos

    With a valid bearer token only the caller's todos are returned.
    """
    todos = await service.list_todos(
        user_id=user_id,
        completed=completed,
        category=category,
        search=q,
    )
    return {"todos": todos}


@router.post(
    "",
    summary="Create a todo",
    response_model=CreateTodoResponse,
    responses=_errors(400, 401, 500),
)
async def create_todo(
    body: TodoCreate,
    service: Todos,
    user_id: CurrentIdentity,
):
    """
    POST /todos

    Any image must already be in the blob store; send its URL as imageUrl.
    """
    todo_id = await service.create_todo(body, user_id)
    return {"id": todo_id}


@router.put(
    "/{todo_id}/edit",
    summary="Edit a todo",
    response_model=EditTodoResponse,
    responses=_errors(400, 401, 403, 404, 500),
)
async def edit_todo(
    todo_id: TodoId,
    body: TodoEdit,
    service: Todos,
    user_id: CurrentIdentity,
):
    """PUT /todos/{todo_id}/edit"""
    await service.edit_todo(todo_id, body, user_id)
    return {
        "success": True,
        "message": "Todo updated successfully",
        "id": todo_id,
    }


@router.put(
    "/{todo_id}/toggle",
    summary="Toggle completion",
    response_model=SuccessResponse,
    responses=_errors(401, 403, 404, 500),
)
async def toggle_todo(
    todo_id: TodoId,
    service: Todos,
    user_id: CurrentIdentity,
):
    """PUT /todos/{todo_id}/toggle"""
    await service.toggle_todo(todo_id, user_id)
    return {"success": True}


@router.delete(
    "/{todo_id}",
    summary="Delete a todo",
    response_model=SuccessResponse,
    responses=_errors(401, 403, 404, 500),
)
async def delete_todo(
    todo_id: TodoId,
    service: Todos,
    user_id: CurrentIdentity,
):
    """DELETE /todos/{todo_id}"""
    await service.delete_todo(todo_id, user_id)
    return {"success": True}
