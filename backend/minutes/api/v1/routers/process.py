# minutes/api/v1/routers/process.py
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status

from minutes.api.v1.deps import get_current_user, get_owned_meeting
from minutes.core.rate_limit import RateLimiter, enforce, get_rate_limiter
from minutes.models import ProcessingStatus
from minutes.models.user import User
from minutes.services.errors import AlreadyProcessedError, AlreadyProcessingError, MeetingNotFoundError
from minutes.services.processing import get_processing_status, start_processing

router = APIRouter(prefix="/process", tags=["process"])

@router.post("/{meeting_id}", response_model=dict)
async def trigger_processing(
    meeting_id: UUID,
    user: User = Depends(get_current_user),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Start transcription + analysis in the background and return immediately.

    Poll GET /process/{id} for progress.

    Raises:
        HTTPException (400): Meeting already processed or being processed
        HTTPException (404): Meeting not found
        HTTPException (429): Too many processing requests
    """
    await enforce(limiter, "process", str(user.id), message="Too many processing requests.")
    meeting = await get_owned_meeting(meeting_id, user)

    try:
        await start_processing(meeting.id)
    except (AlreadyProcessedError, AlreadyProcessingError) as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except MeetingNotFoundError:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Meeting not found")

    return {"success": True, "data": {"message": "Processing started", "status": ProcessingStatus.TRANSCRIBING.value}}

@router.get("/{meeting_id}", response_model=dict)
async def processing_status(meeting_id: UUID, user: User = Depends(get_current_user)):
    meeting = await get_owned_meeting(meeting_id, user)
    return {"success": True, "data": get_processing_status(meeting)}
