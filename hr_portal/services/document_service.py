from __future__ import annotations

from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from fastapi import HTTPException

from hr_portal.core.config import settings
from hr_portal.models.documents import DocumentKind, UploadResult
from hr_portal.providers.object_storage import ObjectStorageClient, StorageError
from hr_portal.services.analytics_service import EventLogger
from hr_portal.services.employee_service import EmployeeService

ALLOWED_EXACT_TYPES = frozenset({"application/pdf"})
ALLOWED_TYPE_PREFIXES = ("image/",)


def validate_upload(content_type: str | None, size: int, max_bytes: int = settings.max_upload_bytes) -> None:
    if size <= 0:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")
    if size > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File size must be less than {max_bytes // (1024 * 1024)}MB",
        )
    content_type = (content_type or "").lower()
    if content_type not in ALLOWED_EXACT_TYPES and not content_type.startswith(ALLOWED_TYPE_PREFIXES):
        raise HTTPException(status_code=400, detail="Only images and PDF files are allowed")


def file_extension(file_name: str | None) -> str:
    if not file_name or "." not in file_name:
        return "bin"
    extension = file_name.rsplit(".", 1)[1].lower()
    return "".join(ch for ch in extension if ch.isalnum()) or "bin"


def receipt_path(employee_id: str, extension: str) -> str:
    return f"employees/{employee_id}/expenses/{uuid4().hex[:12]}.{extension}"


def medical_certificate_path(employee_id: str, extension: str, timestamp_ms: int | None = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(datetime.now(timezone.utc).timestamp() * 1000)
    return f"medical-certificates/{employee_id}-{timestamp_ms}.{extension}"


class DocumentService:
    def __init__(
        self,
        storage: ObjectStorageClient,
        employee_service: EmployeeService,
        event_logger: EventLogger,
    ) -> None:
        self.storage = storage
        self.employee_service = employee_service
        self.event_logger = event_logger

    def upload(
        self,
        user: dict[str, Any],
        kind: DocumentKind,
        file_name: str | None,
        content_type: str | None,
        content: bytes,
    ) -> UploadResult:
        employee = self.employee_service.require_linked_employee(user)
        validate_upload(content_type, len(content))
        if not self.storage.configured:
            raise HTTPException(status_code=503, detail="Document storage is not configured")

        extension = file_extension(file_name)
        if kind == DocumentKind.RECEIPT:
            path = receipt_path(employee["employee_id"], extension)
        else:
            path = medical_certificate_path(employee["employee_id"], extension)

        try:
            url = self.storage.upload(path, content, content_type or "application/octet-stream")
        except StorageError as exc:
            raise HTTPException(status_code=502, detail=f"Upload failed: {exc}") from exc

        self.event_logger.log_event(
            event_type="document_event",
            actor_id=user["user_id"],
            actor_role=user["role"],
            details={"action": "document_uploaded", "kind": kind.value, "path": path},
        )
        return UploadResult(
            kind=kind,
            path=path,
            url=url,
            file_name=file_name or path.rsplit("/", 1)[-1],
            content_type=content_type or "application/octet-stream",
            size=len(content),
        )
