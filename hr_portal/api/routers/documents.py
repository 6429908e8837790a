from fastapi import APIRouter, Depends, File, UploadFile

from hr_portal.api.deps import get_current_user
from hr_portal.core.config import settings
from hr_portal.models.documents import DocumentKind, UploadResult
from hr_portal.services.container import document_service


router = APIRouter(prefix="/documents", tags=["Documents"])


@router.post("/receipts", response_model=UploadResult, status_code=201)
def upload_receipt(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
) -> UploadResult:
    return document_service.upload(
        current_user,
        DocumentKind.RECEIPT,
        file.filename,
        file.content_type,
        file.file.read(settings.max_upload_bytes + 1),
    )


@router.post("/medical-certificates", response_model=UploadResult, status_code=201)
def upload_medical_certificate(
    file: UploadFile = File(...),
    current_user: dict = Depends(get_current_user),
) -> UploadResult:
    return document_service.upload(
        current_user,
        DocumentKind.MEDICAL_CERTIFICATE,
        file.filename,
        file.content_type,
        file.file.read(settings.max_upload_bytes + 1),
    )
