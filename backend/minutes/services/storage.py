"""
Audio storage

Validates uploaded recordings and keeps them under UPLOAD_DIR. The meeting
row's ``storage_path`` is the only reference to a stored file.
"""
import asyncio
import logging
import os
import secrets
from dataclasses import dataclass
from typing import Optional

from ..config import settings

logger = logging.getLogger(__name__)

ALLOWED_MIME_TYPES = (
    "audio/mpeg",
    "audio/mp4",
    "audio/x-m4a",
    "audio/wav",
    "audio/wave",
)
DEFAULT_EXTENSION = "m4a"
READ_CHUNK_SIZE = 1024 * 1024


class InvalidUploadError(ValueError):
    """Rejected upload; the message is shown to the user."""


@dataclass
class StoredFile:
    path: str
    size: int


def _too_large() -> InvalidUploadError:
    return InvalidUploadError(f"File is too large. Maximum size is {settings.max_file_size_mb}MB.")


def validate_upload(filename: Optional[str], mime_type: Optional[str], size: int, title: Optional[str]) -> str:
    """
    Check an upload before anything is written. Returns the trimmed title.
    """
    if not filename:
        raise InvalidUploadError("No file provided")
    if mime_type not in ALLOWED_MIME_TYPES:
        raise InvalidUploadError("Invalid file type. Please upload an m4a, mp3, or wav file.")
    if size > settings.max_file_size_bytes:
        raise _too_large()
    if not title or not title.strip():
        raise InvalidUploadError("Title is required")
    return title.strip()


def storage_name(original_name: str) -> str:
    """``<random id>.<ext>``; the extension comes from the original name."""
    _, dot, ext = original_name.rpartition(".")
    extension = ext if dot and ext.isalnum() else DEFAULT_EXTENSION
    return f"{secrets.token_urlsafe(16)}.{extension}"


async def read_upload(upload, limit: Optional[int] = None) -> bytes:
    """
    Read an uploaded file in chunks, stopping as soon as it passes ``limit``
    bytes (MAX_FILE_SIZE_MB by default).
    """
    limit = settings.max_file_size_bytes if limit is None else limit
    chunks, total = [], 0
    while True:
        chunk = await upload.read(READ_CHUNK_SIZE)
        if not chunk:
            break
        total += len(chunk)
        if total > limit:
            raise _too_large()
        chunks.append(chunk)
    return b"".join(chunks)


def _write(path: str, data: bytes) -> None:
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "wb") as f:
        f.write(data)


async def save_audio(original_name: str, data: bytes, upload_dir: Optional[str] = None) -> StoredFile:
    path = os.path.join(upload_dir or settings.upload_dir, storage_name(original_name))
    await asyncio.to_thread(_write, path, data)
    return StoredFile(path=path, size=len(data))


async def delete_audio(path: Optional[str]) -> bool:
    """Remove a stored file. A file that is already gone is only a warning."""
    if not path:
        return False
    try:
        await asyncio.to_thread(os.remove, path)
    except FileNotFoundError:
        logger.warning("Audio file already missing: %s", path)
        return False
    return True
