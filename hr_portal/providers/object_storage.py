"""Supabase Storage REST client for uploaded employee documents."""

import logging
from urllib.parse import quote

import httpx

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    """Raised when an object cannot be stored."""


class ObjectStorageClient:
    def __init__(
        self,
        base_url: str,
        service_key: str,
        bucket: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the storage client.

        Args:
            base_url: Project URL (e.g., https://xyz.supabase.co)
            service_key: Service role key with write access to the bucket
            bucket: Bucket that holds employee documents
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used to stub the service
        """
        self.base_url = base_url.rstrip("/")
        self.service_key = service_key
        self.bucket = bucket
        self.timeout = timeout
        self.transport = transport

    @property
    def configured(self) -> bool:
        return bool(self.base_url and self.service_key)

    def public_url(self, path: str) -> str:
        return f"{self.base_url}/storage/v1/object/public/{self.bucket}/{quote(path)}"

    def upload(self, path: str, content: bytes, content_type: str) -> str:
        """Store ``content`` under ``path``, replacing any existing object.

        Returns:
            Public URL of the stored object
        """
        headers = {
            "Authorization": f"Bearer {self.service_key}",
            "apikey": self.service_key,
            "Content-Type": content_type,
            "cache-control": "3600",
            "x-upsert": "true",
        }
        url = f"{self.base_url}/storage/v1/object/{self.bucket}/{quote(path)}"
        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(url, content=content, headers=headers)
        except httpx.HTTPError as exc:
            logger.error("Upload of %s failed: %s", path, exc)
            raise StorageError(f"Storage unreachable: {exc}") from exc

        if response.status_code == 404:
            raise StorageError("Storage bucket not found")
        if response.status_code in (401, 403):
            raise StorageError("Not authorized to upload files")
        if response.status_code >= 400:
            logger.error("Storage returned %s for %s: %s", response.status_code, path, response.text)
            raise StorageError(f"Storage returned HTTP {response.status_code}")
        return self.public_url(path)
