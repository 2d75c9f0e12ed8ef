"""
Files API: upload (multipart, token required), serve bytes by id, metadata by id.
Ids are parsed by hand so a non-numeric id is a 400, not a validation error.
"""
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from fastapi.responses import Response
from sqlalchemy.orm import Session

from navigator.config import Settings
from navigator.database import get_db
from navigator.errors import InvalidInput
from navigator.schemas.file import FileInfoResponse, FileUploadResponse, UploadedFile
from navigator.services import files as file_service
from navigator.services.auth import TokenPayload
from navigator.api.deps import get_settings, require_auth

router = APIRouter(prefix="/api", tags=["files"])
logger = logging.getLogger(__name__)


def _content_disposition(original_name: str) -> str:
    # header values must stay latin-1 and must not break out of the quoted string
    safe = original_name.replace('"', "'").replace("\r", " ").replace("\n", " ")
    safe = safe.encode("latin-1", "replace").decode("latin-1")
    return f'inline; filename="{safe}"'


@router.post("/upload", response_model=FileUploadResponse)
def upload_file(
    file: UploadFile | None = File(None),
    payload: TokenPayload = Depends(require_auth),
    cfg: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    """Store an upload; images are resized and re-encoded to JPEG first."""
    if file is None:
        raise InvalidInput("No file uploaded")
    contents = file.file.read(cfg.max_upload_bytes + 1)
    record = file_service.store_upload(
        db,
        cfg,
        contents,
        original_name=file.filename or "upload",
        mime_type=file.content_type,
        uploaded_by=payload.user_id,
    )
    return FileUploadResponse(
        message="File uploaded successfully",
        file=UploadedFile(
            id=record.id,
            filename=record.filename,
            original_name=record.original_name,
            url=f"/api/files/{record.id}",
            size=record.size,
            mime_type=record.mime_type,
        ),
    )


@router.get("/files/{file_id}/info", response_model=FileInfoResponse)
def file_info(file_id: str, db: Session = Depends(get_db)):
    row = file_service.get_file_info(db, file_id)
    return FileInfoResponse.model_validate(row)


@router.get("/files/{file_id}")
def serve_file(
    file_id: str,
    cfg: Settings = Depends(get_settings),
    db: Session = Depends(get_db),
):
    record = file_service.get_file(db, file_id)
    return Response(
        content=record.data,
        media_type=record.mime_type,
        headers={
            "Content-Length": str(record.size),
            "Cache-Control": f"public, max-age={cfg.file_cache_max_age}",
            "Content-Disposition": _content_disposition(record.original_name),
        },
    )
