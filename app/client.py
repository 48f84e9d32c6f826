"""
Todo Client
===========

Async HTTP client for the Todo Tracker API, used by front ends and
scripts. It holds no authoritative state: every call goes to the
server and a failed call raises without side effects on the caller.

Images use a two-phase upload. The bytes go to the blob store first and
only the resulting URL is sent with create/edit, so a failed upload
never creates or changes a todo.

Usage:
    async with TodoClient("http://localhost:8000", token=token) as client:
        todo_id = await client.add_todo("Buy milk", category="shopping")
        await client.toggle_todo(todo_id)
"""

import logging
from datetime import date
from typing import Any, Optional, Union

import httpx

from app.config import settings
from app.services.blob_store import BlobStore, get_blob_store
from app.utils.validators import validate_image_upload

logger = logging.getLogger(__name__)

# (bytes, filename)
Image = tuple[bytes, str]
Deadline = Union[str, date, None]


class _Unset:
    def __repr__(self) -> str:
        return "UNSET"


# Marks an edit field the caller did not pass
UNSET: Any = _Unset()


class TodoApiError(Exception):
    """A non-2xx response (or no response) from the API."""

    def __init__(self, status_code: int, error: str, details: Optional[str] = None):
        self.status_code = status_code
        self.error = error
        self.details = details
        message = f"{status_code} {error}"
        if details:
            message = f"{message}: {details}"
        super().__init__(message)


def _deadline_value(deadline: Deadline) -> Optional[str]:
    if deadline is None or isinstance(deadline, str):
        return deadline
    return deadline.isoformat()


class TodoClient:
    """Client for the /todos and /auth endpoints."""

    def __init__(
        self,
        base_url: str,
        token: Optional[str] = None,
        blob_store: Optional[BlobStore] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.token = token
        self.blob_store = blob_store
        self._http = httpx.AsyncClient(
            base_url=base_url,
            timeout=timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS,
            transport=transport,
        )

    async def __aenter__(self) -> "TodoClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -------------------------------------------------------------------------
    # Transport
    # -------------------------------------------------------------------------

    def _headers(self) -> dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> dict:
        try:
            response = await self._http.request(
                method, path, json=json, params=params, headers=self._headers(),
            )
        except httpx.TimeoutException:
            logger.error("todo_api_timeout method=%s path=%s", method, path)
            raise TodoApiError(0, "Request timed out")
        except httpx.HTTPError as exc:
            logger.error("todo_api_unreachable method=%s path=%s error=%s", method, path, exc)
            raise TodoApiError(0, "Network error", str(exc))

        if response.is_success:
            return response.json()

        try:
            body = response.json()
        except ValueError:
            body = {}
        if not isinstance(body, dict):
            body = {}

        error = TodoApiError(
            response.status_code,
            body.get("error") or response.reason_phrase,
            body.get("details"),
        )
        logger.warning(
            "todo_api_error method=%s path=%s status=%d error=%s",
            method, path, error.status_code, error.error,
        )
        raise error

    # -------------------------------------------------------------------------
    # Images
    # -------------------------------------------------------------------------

    async def upload_image(self, data: bytes, filename: str) -> str:
        """
        Upload an image to the blob store and return its URL.

        Raises:
            ValidationError: If the format or size is not allowed.
            UploadError: If the blob store failed.
        """
        validate_image_upload(filename, data)
        store = self.blob_store or get_blob_store()
        return await store.put(data, filename)

    # -------------------------------------------------------------------------
    # Todos
    # -------------------------------------------------------------------------

    async def list_todos(
        self,
        completed: Optional[bool] = None,
        category: Optional[str] = None,
        search: Optional[str] = None,
    ) -> list[dict]:
        """List todos newest first, optionally filtered."""
        params: dict[str, Any] = {}
        if completed is not None:
            params["completed"] = "true" if completed else "false"
        if category is not None:
            params["category"] = category
        if search:
            params["q"] = search

        body = await self._request("GET", "/todos", params=params or None)
        return body["todos"]

    async def add_todo(
        self,
        title: str,
        category: Optional[str] = None,
        priority: Optional[str] = None,
        deadline: Deadline = None,
        image: Optional[Image] = None,
    ) -> str:
        """
        Create a todo and return its id.

        With ``image``, the upload happens first and the todo is created
        only if it succeeds.
        """
        payload: dict[str, Any] = {"title": title}
        if category:
            payload["category"] = category
        if priority:
            payload["priority"] = priority
        if deadline is not None:
            payload["deadline"] = _deadline_value(deadline)
        if image is not None:
            payload["imageUrl"] = await self.upload_image(*image)

        body = await self._request("POST", "/todos", json=payload)
        return body["id"]

    async def edit_todo(
        self,
        todo_id: str,
        title: str,
        category: Any = UNSET,
        priority: Any = UNSET,
        deadline: Any = UNSET,
        image_url: Any = UNSET,
        image: Optional[Image] = None,
    ) -> str:
        """
        Edit a todo.

        Fields left as ``UNSET`` are not sent and stay as they are;
        ``None`` clears them. A new ``image`` is uploaded first and
        replaces ``image_url``.
        """
        payload: dict[str, Any] = {"title": title}
        if category is not UNSET:
            payload["category"] = category
        if priority is not UNSET:
            payload["priority"] = priority
        if deadline is not UNSET:
            payload["deadline"] = _deadline_value(deadline)
        if image is not None:
            payload["imageUrl"] = await self.upload_image(*image)
        elif image_url is not UNSET:
            payload["imageUrl"] = image_url

        body = await self._request("PUT", f"/todos/{todo_id}/edit", json=payload)
        return body["id"]

    async def toggle_todo(self, todo_id: str) -> None:
        await self._request("PUT", f"/todos/{todo_id}/toggle")

    async def delete_todo(self, todo_id: str) -> None:
        await self._request("DELETE", f"/todos/{todo_id}")

    # -------------------------------------------------------------------------
    # Session
    # -------------------------------------------------------------------------

    async def start_session(self) -> None:
        """Exchange the bearer token for a session cookie."""
        await self._request("POST", "/auth/session")

    async def end_session(self) -> None:
        await self._request("DELETE", "/auth/session")
        self._http.cookies.clear()
