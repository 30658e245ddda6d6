# minutes/models/meeting.py
"""
Database model for meetings.
A meeting is one uploaded recording plus the state of its processing run.
Transcript, speakers and analysis hang off it and are deleted with it.
"""
import uuid
from enum import Enum
from tortoise import fields, models


class ProcessingStatus(str, Enum):
    PENDING = "PENDING"
    TRANSCRIBING = "TRANSCRIBING"
    ANALYZING = "ANALYZING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"


# Statuses a new processing run may start from
STARTABLE_STATUSES = (ProcessingStatus.PENDING, ProcessingStatus.FAILED)


class Language(str, Enum):
    ENGLISH = "ENGLISH"
    PORTUGUESE_BR = "PORTUGUESE_BR"
    SPANISH = "SPANISH"


class Meeting(models.Model):
    """
    Meeting database model.

    Relationships:
    - Belongs to a User (many-to-one, cascade delete)
    - Optionally belongs to a Project (many-to-one, SET NULL when the project goes away)
    - Has many Tags (many-to-many through "meeting_tags")
    - Has one Transcript and one Analysis, many Speakers (reverse relations)

    ``storage_path`` owns the audio file on disk: deleting the meeting deletes the file.
    """
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="meetings", on_delete=fields.CASCADE)
    project = fields.ForeignKeyField(
        "models.Project", related_name="meetings", null=True, on_delete=fields.SET_NULL
    )
    tags = fields.ManyToManyField("models.Tag", related_name="meetings", through="meeting_tags")

    title = fields.CharField(max_length=255)
    description = fields.TextField(null=True)
    language = fields.CharEnumField(Language, default=Language.ENGLISH)  # Replaced by the detected language
    status = fields.CharEnumField(ProcessingStatus, default=ProcessingStatus.PENDING, index=True)
    duration = fields.IntField(null=True)  # Seconds, set when processing completes
    favorite = fields.BooleanField(default=False)

    original_file_name = fields.CharField(max_length=512)
    storage_path = fields.CharField(max_length=1024)
    file_size = fields.BigIntField()
    mime_type = fields.CharField(max_length=64)

    processing_error = fields.TextField(null=True)
    ai_instructions = fields.TextField(null=True)  # Free text steering for the analysis prompt

    uploaded_at = fields.DatetimeField(auto_now_add=True)
    processed_at = fields.DatetimeField(null=True)
    created_at = fields.DatetimeField(auto_now_add=True)
    updated_at = fields.DatetimeField(auto_now=True)

    class Meta:
        table = "meetings"
        ordering = ["-created_at"]
