"""
Upload and file metadata schemas.
"""
from datetime import datetime

from navigator.schemas.base import CamelModel


class UploadedFile(CamelModel):
    id: int
    filename: str
    original_name: str
    url: str
    size: int
    mime_type: str


class FileUploadResponse(CamelModel):
    message: str
    file: UploadedFile


class FileInfoResponse(CamelModel):
    id: int
    filename: str
    original_name: str
    mime_type: str
    size: int
    created_at: datetime | None = None
