from enum import Enum

from pydantic import BaseModel


class DocumentKind(str, Enum):
    RECEIPT = "receipt"
    MEDICAL_CERTIFICATE = "medical_certificate"


class UploadResult(BaseModel):
    kind: DocumentKind
    path: str
    url: str
    file_name: str
    content_type: str
    size: int
