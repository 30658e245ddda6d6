# minutes/api/v1/routers/upload.py
from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from minutes.api.v1.deps import get_current_user
from minutes.core import logging as log
from minutes.core.rate_limit import RateLimiter, enforce, get_rate_limiter
from minutes.models import Meeting
from minutes.models.user import User
from minutes.services.storage import InvalidUploadError, read_upload, save_audio, validate_upload

router = APIRouter(prefix="/upload", tags=["upload"])

def _clean(value: str | None) -> str | None:
    return (value.strip() or None) if value else None

@router.post("")
async def upload_meeting(
    file: UploadFile | None = File(default=None),
    title: str | None = Form(default=None),
    description: str | None = Form(default=None),
    aiInstructions: str | None = Form(default=None),
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Store an audio recording and create a PENDING meeting for it.

    Processing is not started here; the client calls POST /process/{id}.

    Raises:
        HTTPException (400): Missing file, unsupported type, too large, or no title
        HTTPException (429): Upload limit reached
    """
    await enforce(limiter, "upload", str(user.id), message="Too many uploads.")

    try:
        # Declared size first; the bounded read catches parts without one
        clean_title = validate_upload(
            file.filename if file is not None else None,
            file.content_type if file is not None else None,
            (file.size or 0) if file is not None else 0,
            title,
        )
        data = await read_upload(file)
    except InvalidUploadError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    stored = await save_audio(file.filename, data)
    meeting = await Meeting.create(
        user=user,
        title=clean_title,
        description=_clean(description),
        ai_instructions=_clean(aiInstructions),
        original_file_name=file.filename,
        storage_path=stored.path,
        file_size=stored.size,
        mime_type=file.content_type,
    )
    log.file_upload(file.filename, stored.size, str(user.id))

    return {"success": True, "data": {"id": str(meeting.id), "message": "File uploaded successfully"}}
