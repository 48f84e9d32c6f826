"""
Blob Store
==========

Stores image attachments and returns a URL the client can embed in a
todo's ``imageUrl``.

Container layout:
    {container}/
    └── todo-images/
        └── {epoch_ms}-{short_uuid}-{filename}
"""

import asyncio
import logging
import re
import time
import uuid
from abc import ABC, abstractmethod
from typing import Optional

from azure.core.exceptions import AzureError
from azure.storage.blob import BlobServiceClient, ContentSettings

from app.config import settings
from app.core.errors import UploadError, one_line
from app.utils.helpers import call_with_timeout

logger = logging.getLogger(__name__)

CONTENT_TYPES = {
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "png": "image/png",
    "gif": "image/gif",
    "webp": "image/webp",
}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def generate_key(filename: str, prefix: Optional[str] = None) -> str:
    """
    Build a collision-free blob key from an uploaded filename.

    The millisecond timestamp keeps keys roughly time ordered; the random
    component separates uploads landing in the same millisecond.
    """
    prefix = settings.BLOB_KEY_PREFIX if prefix is None else prefix
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    name = _UNSAFE_CHARS.sub("-", name).strip("-.") or "image"
    key = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}-{name}"
    return f"{prefix.strip('/')}/{key}" if prefix else key


def content_type_for(key: str) -> str:
    extension = key.rsplit(".", 1)[-1].lower() if "." in key else ""
    return CONTENT_TYPES.get(extension, "application/octet-stream")


class BlobStore(ABC):
    """Contract for image storage."""

    @abstractmethod
    async def put(
        self,
        data: bytes,
        suggested_key: str,
        content_type: Optional[str] = None,
    ) -> str:
        """
        Store ``data`` under a key derived from ``suggested_key``.

        Returns:
            A URL from which the bytes can be fetched.

        Raises:
            UploadError: If the backend rejected or did not complete the upload.
        """


class InMemoryBlobStore(BlobStore):
    """Process-local blob store for development and tests."""

    def __init__(self, base_url: str = "http://localhost:8000/blobs"):
        self.base_url = base_url.rstrip("/")
        self.blobs: dict[str, tuple[bytes, str]] = {}

    async def put(
        self,
        data: bytes,
        suggested_key: str,
        content_type: Optional[str] = None,
    ) -> str:
        key = generate_key(suggested_key)
        self.blobs[key] = (bytes(data), content_type or content_type_for(key))
        return f"{self.base_url}/{key}"


class AzureBlobStore(BlobStore):
    """Azure Blob Storage backend."""

    def __init__(self, timeout: Optional[float] = None):
        self.connection_string = settings.AZURE_STORAGE_CONNECTION_STRING
        self.account_name = settings.AZURE_STORAGE_ACCOUNT_NAME
        self.container_name = settings.AZURE_STORAGE_CONTAINER
        self.timeout = timeout or settings.EXTERNAL_CALL_TIMEOUT_SECONDS

        self._client: Optional[BlobServiceClient] = None

    @property
    def client(self) -> BlobServiceClient:
        """Get or create blob service client."""
        if self._client is None:
            if not self.connection_string:
                raise UploadError(
                    details="Azure Storage not configured. "
                    "Set AZURE_STORAGE_CONNECTION_STRING environment variable."
                )
            self._client = BlobServiceClient.from_connection_string(
                self.connection_string
            )
        return self._client

    def _upload(self, key: str, data: bytes, content_type: str) -> str:
        blob_client = self.client.get_blob_client(
            container=self.container_name,
            blob=key,
        )
        blob_client.upload_blob(
            data,
            overwrite=False,
            content_settings=ContentSettings(content_type=content_type),
            timeout=int(self.timeout),
        )
        return blob_client.url

    async def put(
        self,
        data: bytes,
        suggested_key: str,
        content_type: Optional[str] = None,
    ) -> str:
        key = generate_key(suggested_key)
        content_type = content_type or content_type_for(key)

        try:
            url = await call_with_timeout(
                asyncio.to_thread(self._upload, key, data, content_type),
                self.timeout,
            )
        except asyncio.TimeoutError:
            logger.error("blob_upload_timeout key=%s", key)
            raise UploadError(details="Image upload timed out")
        except (AzureError, ValueError) as exc:
            logger.error("blob_upload_failed key=%s error=%s", key, one_line(exc))
            raise UploadError(details="Image upload failed")

        logger.info("blob_uploaded key=%s size=%d", key, len(data))
        return url


# Singleton instance
_blob_store: Optional[BlobStore] = None


def get_blob_store() -> BlobStore:
    """Get or create the configured blob store."""
    global _blob_store

    if _blob_store is None:
        if settings.BLOB_STORE_BACKEND == "azure":
            _blob_store = AzureBlobStore()
        else:
            _blob_store = InMemoryBlobStore()

    return _blob_store
