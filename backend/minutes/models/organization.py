# minutes/models/organization.py
"""
User-scoped organization entities.
- Project: meetings belong to at most one project
- Tag: meetings carry any number of tags
Names are unique per user.
"""
import uuid
from tortoise import fields, models

DEFAULT_COLOR = "#71717a"

class Project(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="projects", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=128)
    color = fields.CharField(max_length=16, default=DEFAULT_COLOR)
    icon = fields.CharField(max_length=64, null=True)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "projects"
        unique_together = (("user", "name"),)
        ordering = ["name"]


class Tag(models.Model):
    id = fields.UUIDField(pk=True, default=uuid.uuid4)
    user = fields.ForeignKeyField("models.User", related_name="tags", on_delete=fields.CASCADE)
    name = fields.CharField(max_length=64)
    color = fields.CharField(max_length=16, default=DEFAULT_COLOR)
    created_at = fields.DatetimeField(auto_now_add=True)

    class Meta:
        table = "tags"
        unique_together = (("user", "name"),)
        ordering = ["name"]
