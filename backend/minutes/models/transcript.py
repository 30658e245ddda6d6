# minutes/models/transcript.py
import uuid
from tortoise import fields, models

class Transcript(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    meeting = fields.OneToOneField("models.Meeting", related_name="transcript", on_delete=fields.CASCADE)
    full_text = fields.TextField()
    raw_response = fields.JSONField(null=True)  # Untouched provider payload, kept for debugging
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "transcripts"


class Speaker(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    meeting = fields.ForeignKeyField("models.Meeting", related_name="speakers", on_delete=fields.CASCADE)
    speaker_index = fields.IntField()         # Dense index, first-appearance order within one transcription
    label = fields.CharField(max_length=128, null=True)  # AI-inferred or user-supplied name
    color = fields.CharField(max_length=16)   # Palette entry for speaker_index

    class Meta:
        table = "speakers"
        unique_together = (("meeting", "speaker_index"),)


class Utterance(models.Model):
    id = fields.IntField(pk=True)
    transcript = fields.ForeignKeyField("models.Transcript", related_name="utterances", on_delete=fields.CASCADE)
    speaker = fields.ForeignKeyField("models.Speaker", related_name="utterances", on_delete=fields.CASCADE)

    order_index = fields.IntField()  # Position in the provider result, not wall-clock
    text = fields.TextField()
    start_time = fields.FloatField()  # Seconds from audio start
    end_time = fields.FloatField()
    confidence = fields.FloatField(null=True)

    class Meta:
        table = "utterances"
        ordering = ["order_index"]
