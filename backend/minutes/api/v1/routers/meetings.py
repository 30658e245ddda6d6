# minutes/api/v1/routers/meetings.py
import math
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from tortoise.transactions import in_transaction

from minutes.api.v1.deps import get_current_user, get_owned_meeting
from minutes.core import logging as log
from minutes.models import Analysis, Meeting, ProcessingStatus, Project, Speaker, Tag, Transcript, Utterance
from minutes.models.user import User
from minutes.schemas.meeting import MeetingUpdate, meeting_detail, meeting_list_item
from minutes.services import export
from minutes.services.processing import purge_results
from minutes.services.storage import delete_audio

router = APIRouter(prefix="/meetings", tags=["meetings"])

@router.get("", response_model=dict)
async def list_meetings(
    user: User = Depends(get_current_user),
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    status_filter: str | None = Query(None, alias="status"),
    project: UUID | None = Query(None),
    tag: UUID | None = Query(None),
):
    """
    Paginated list of the user's meetings, newest first.

    Filters: ``status`` (processing status), ``project`` (project id),
    ``tag`` (tag id). Returns ``{meetings, pagination}``.
    """
    qs = Meeting.filter(user_id=user.id)
    if status_filter:
        try:
            qs = qs.filter(status=ProcessingStatus(status_filter))
        except ValueError:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid status")
    if project:
        qs = qs.filter(project_id=project)
    if tag:
        qs = qs.filter(tags__id=tag)

    total = await qs.count()
    rows = await (
        qs.order_by("-created_at")
        .offset((page - 1) * limit)
        .limit(limit)
        .prefetch_related("project", "tags")
    )
    return {
        "success": True,
        "data": {
            "meetings": [meeting_list_item(m) for m in rows],
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "totalPages": math.ceil(total / limit),
            },
        },
    }

async def _load_results(meeting: Meeting):
    speakers = await Speaker.filter(meeting_id=meeting.id).order_by("speaker_index")
    transcript = await Transcript.get_or_none(meeting_id=meeting.id)
    utterances = (
        await Utterance.filter(transcript_id=transcript.id).order_by("order_index") if transcript else []
    )
    analysis = await Analysis.get_or_none(meeting_id=meeting.id)
    return speakers, transcript, utterances, analysis

@router.get("/{meeting_id}", response_model=dict)
async def get_meeting(meeting_id: UUID, user: User = Depends(get_current_user)):
    """
    Meeting with its transcript (utterances in order), speakers, analysis,
    project and tags.
    """
    meeting = await get_owned_meeting(meeting_id, user)
    await meeting.fetch_related("project", "tags")
    speakers, transcript, utterances, analysis = await _load_results(meeting)
    return {"success": True, "data": meeting_detail(meeting, speakers, transcript, utterances, analysis)}

@router.patch("/{meeting_id}", response_model=dict)
async def update_meeting(meeting_id: UUID, body: MeetingUpdate, user: User = Depends(get_current_user)):
    """
    Edit title, description, favorite, project, tags and speaker labels.

    Only fields present in the body are touched. ``tagIds`` replaces the
    whole tag set. Project and tags must belong to the user (400 otherwise).
    """
    meeting = await get_owned_meeting(meeting_id, user)
    fields = body.model_fields_set

    tags = None
    if "tagIds" in fields:
        tag_ids = set(body.tagIds or [])
        tags = await Tag.filter(id__in=list(tag_ids), user_id=user.id) if tag_ids else []
        if len(tags) != len(tag_ids):
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid tag")

    if "projectId" in fields and body.projectId is not None:
        if not await Project.filter(id=body.projectId, user_id=user.id).exists():
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid project")

    async with in_transaction() as conn:
        if "title" in fields and body.title is not None:
            meeting.title = body.title
        if "description" in fields:
            meeting.description = body.description
        if "favorite" in fields and body.favorite is not None:
            meeting.favorite = body.favorite
        if "projectId" in fields:
            meeting.project_id = body.projectId
        await meeting.save(using_db=conn)

        if tags is not None:
            await meeting.tags.clear(using_db=conn)
            if tags:
                await meeting.tags.add(*tags, using_db=conn)

        for speaker in body.speakers or []:
            # Scoped to this meeting, foreign speaker ids are ignored
            await Speaker.filter(id=speaker.id, meeting_id=meeting.id).using_db(conn).update(label=speaker.label)

    await meeting.fetch_related("project", "tags")
    return {"success": True, "data": meeting_list_item(meeting)}

@router.delete("/{meeting_id}", response_model=dict)
async def delete_meeting(meeting_id: UUID, user: User = Depends(get_current_user)):
    """
    Delete the meeting, every result row that belongs to it and its audio file.
    """
    meeting = await get_owned_meeting(meeting_id, user)
    async with in_transaction() as conn:
        await purge_results(meeting.id, conn)
        await meeting.tags.clear(using_db=conn)
        await meeting.delete(using_db=conn)

    if await delete_audio(meeting.storage_path):
        log.file_delete(meeting.storage_path, str(user.id))
    return {"success": True}

@router.get("/{meeting_id}/export")
async def export_meeting(
    meeting_id: UUID,
    format: str = Query("markdown", pattern="^(markdown|html)$"),
    user: User = Depends(get_current_user),
):
    """
    Download a completed meeting as Markdown (``text/markdown``) or HTML.
    """
    meeting = await get_owned_meeting(meeting_id, user)
    if meeting.status != ProcessingStatus.COMPLETED:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Meeting has not been processed yet")

    speakers, _, utterances, analysis = await _load_results(meeting)
    data = export.collect_export_data(meeting, speakers, utterances, analysis)
    content = export.render(data, format)
    log.export_generated(str(meeting.id), format)

    filename = export.export_filename(meeting.title, format)
    return Response(
        content=content,
        media_type=export.MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
