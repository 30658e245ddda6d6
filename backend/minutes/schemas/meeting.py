# minutes/schemas/meeting.py
"""
Pydantic schemas for meeting endpoints, plus the serializers that turn
ORM rows into the JSON shapes the API returns.
"""
from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, Field, field_validator

from minutes.models import Analysis, Meeting, Speaker, Transcript, Utterance
from .organization import project_out, tag_out


class SpeakerLabelIn(BaseModel):
    """Rename one speaker; an empty label clears it back to "Speaker N"."""
    id: UUID
    label: Optional[str] = Field(default=None, max_length=128)

    @field_validator("label", mode="before")
    @classmethod
    def blank_to_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
        return v or None


class MeetingUpdate(BaseModel):
    """
    Partial meeting update. Only fields present in the request are applied,
    so ``{"projectId": null}`` removes the project while omitting it keeps it.
    """
    title: Optional[str] = Field(default=None, max_length=255)
    description: Optional[str] = None
    favorite: Optional[bool] = None
    projectId: Optional[UUID] = None
    tagIds: Optional[List[UUID]] = None  # Replaces the whole tag set
    speakers: Optional[List[SpeakerLabelIn]] = None

    @field_validator("title", mode="before")
    @classmethod
    def title_not_blank(cls, v):
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Title cannot be empty")
        return v


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def meeting_list_item(meeting: Meeting) -> dict:
    """Requires ``project`` and ``tags`` to be prefetched."""
    return {
        "id": str(meeting.id),
        "title": meeting.title,
        "description": meeting.description,
        "language": meeting.language.value,
        "status": meeting.status.value,
        "duration": meeting.duration,
        "favorite": meeting.favorite,
        "uploadedAt": _iso(meeting.uploaded_at),
        "processedAt": _iso(meeting.processed_at),
        "createdAt": _iso(meeting.created_at),
        "projectId": str(meeting.project_id) if meeting.project_id else None,
        "project": project_out(meeting.project) if meeting.project_id else None,
        "tags": [tag_out(t) for t in meeting.tags],
    }


def speaker_out(speaker: Speaker) -> dict:
    return {
        "id": str(speaker.id),
        "speakerIndex": speaker.speaker_index,
        "label": speaker.label,
        "color": speaker.color,
    }


def utterance_out(utterance: Utterance) -> dict:
    return {
        "id": utterance.id,
        "speakerId": str(utterance.speaker_id),
        "text": utterance.text,
        "startTime": utterance.start_time,
        "endTime": utterance.end_time,
        "confidence": utterance.confidence,
    }


def analysis_out(analysis: Analysis) -> dict:
    return {
        "id": str(analysis.id),
        "summary": analysis.summary,
        "topics": analysis.topics or [],
        "keyPoints": analysis.key_points or [],
        "actionItems": analysis.action_items or [],
        "speakerNames": analysis.speaker_names or [],
        "meetingDocument": analysis.meeting_document,
        "createdAt": _iso(analysis.created_at),
    }


def meeting_detail(
    meeting: Meeting,
    speakers: List[Speaker],
    transcript: Optional[Transcript],
    utterances: List[Utterance],
    analysis: Optional[Analysis],
) -> dict:
    data = meeting_list_item(meeting)
    data.update({
        "originalFileName": meeting.original_file_name,
        "fileSize": meeting.file_size,
        "mimeType": meeting.mime_type,
        "processingError": meeting.processing_error,
        "aiInstructions": meeting.ai_instructions,
        "updatedAt": _iso(meeting.updated_at),
        "speakers": [speaker_out(s) for s in speakers],
        "transcript": None,
        "analysis": analysis_out(analysis) if analysis else None,
    })
    if transcript is not None:
        data["transcript"] = {
            "id": str(transcript.id),
            "fullText": transcript.full_text,
            "utterances": [utterance_out(u) for u in utterances],
        }
    return data
