"""
File storage: uploads go into the files table as bytes.
Images are shrunk to fit the configured bounds and re-encoded as progressive JPEG to cap row size.
"""
import io
import logging
import secrets
import string
import time
from pathlib import PurePosixPath

from PIL import Image, ImageOps, UnidentifiedImageError
from sqlalchemy import select
from sqlalchemy.orm import Session

from navigator.config import Settings
from navigator.errors import InvalidInput, NotFound
from navigator.models.file import File

logger = logging.getLogger(__name__)

_SUFFIX_ALPHABET = string.ascii_lowercase + string.digits


def generate_filename(original_name: str, now_ms: int | None = None) -> str:
    """file-<epoch ms>-<6 random chars><original extension>."""
    stamp = now_ms if now_ms is not None else int(time.time() * 1000)
    suffix = "".join(secrets.choice(_SUFFIX_ALPHABET) for _ in range(6))
    extension = PurePosixPath(original_name or "").suffix
    return f"file-{stamp}-{suffix}{extension}"


def transcode_image(
    data: bytes,
    max_width: int,
    max_height: int,
    quality: int,
    max_pixels: int | None = None,
) -> bytes:
    """Fit inside max_width x max_height (never enlarge) and encode as progressive JPEG."""
    try:
        with Image.open(io.BytesIO(data)) as img:
            if max_pixels and img.width * img.height > max_pixels:
                logger.warning("Image rejected: %sx%s exceeds %s pixels", img.width, img.height, max_pixels)
                raise InvalidInput("Uploaded image could not be processed")
            img = ImageOps.exif_transpose(img)
            if img.mode not in ("RGB", "L"):
                # JPEG has no alpha; flatten onto white
                rgba = img.convert("RGBA")
                background = Image.new("RGB", rgba.size, (255, 255, 255))
                background.paste(rgba, mask=rgba.getchannel("A"))
                img = background
            # thumbnail only shrinks, preserving aspect ratio
            img.thumbnail((max_width, max_height), Image.Resampling.LANCZOS)
            out = io.BytesIO()
            img.save(out, format="JPEG", quality=quality, progressive=True, optimize=True)
            return out.getvalue()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        logger.warning("Image transcode failed: %s", e)
        raise InvalidInput("Uploaded image could not be processed")


def store_upload(
    db: Session,
    settings: Settings,
    data: bytes,
    original_name: str,
    mime_type: str | None,
    uploaded_by: int | None,
) -> File:
    if not data:
        raise InvalidInput("No file uploaded")
    if len(data) > settings.max_upload_bytes:
        raise InvalidInput(f"File too large (max {settings.max_upload_bytes} bytes)")
    mime_type = (mime_type or "application/octet-stream").strip().lower()
    if mime_type.startswith("image/"):
        data = transcode_image(
            data,
            settings.image_max_width,
            settings.image_max_height,
            settings.image_jpeg_quality,
            max_pixels=settings.image_max_pixels,
        )
        mime_type = "image/jpeg"
    record = File(
        filename=generate_filename(original_name),
        original_name=original_name or "upload",
        mime_type=mime_type,
        size=len(data),
        data=data,
        uploaded_by=uploaded_by,
    )
    db.add(record)
    db.commit()
    db.refresh(record)
    logger.info("Stored file id=%s name=%s size=%s mime=%s", record.id, record.filename, record.size, record.mime_type)
    return record


def parse_file_id(raw: str) -> int:
    """Path ids arrive as text; only plain positive integers are accepted."""
    raw = (raw or "").strip()
    if not (raw.isascii() and raw.isdigit()):
        raise InvalidInput("Invalid file ID")
    return int(raw)


def get_file(db: Session, raw_id: str) -> File:
    record = db.get(File, parse_file_id(raw_id))
    if record is None:
        raise NotFound("File not found")
    return record


def get_file_info(db: Session, raw_id: str):
    """Metadata only; the data column is never loaded."""
    row = db.execute(
        select(
            File.id,
            File.filename,
            File.original_name,
            File.mime_type,
            File.size,
            File.created_at,
        ).where(File.id == parse_file_id(raw_id))
    ).first()
    if row is None:
        raise NotFound("File not found")
    return row
