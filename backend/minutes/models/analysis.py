# minutes/models/analysis.py
"""
Database model for the AI analysis of a meeting.
Structured lists are stored as JSON exactly as normalized by the analysis
service (camelCase keys, same shape the API returns).
"""
import uuid
from tortoise import fields, models

class Analysis(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    meeting = fields.OneToOneField("models.Meeting", related_name="analysis", on_delete=fields.CASCADE)

    summary = fields.TextField()
    topics = fields.JSONField(default=list)         # [{title, description, importance 1-5}]
    key_points = fields.JSONField(default=list)     # [{point, context?, speakerIndex?}]
    action_items = fields.JSONField(default=list)   # [{item, assignee?, priority}]
    speaker_names = fields.JSONField(default=list)  # [{speakerIndex, name}]
    meeting_document = fields.TextField(null=True)
    raw_response = fields.JSONField(null=True)

    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "analyses"
