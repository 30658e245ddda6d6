# minutes/schemas/organization.py
"""
Pydantic schemas for projects and tags.
"""
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from minutes.models.organization import DEFAULT_COLOR, Project, Tag

HEX_COLOR = r"^#[0-9a-fA-F]{6}$"


def _strip_name(v):
    if isinstance(v, str):
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
    return v


class ProjectIn(BaseModel):
    name: str = Field(max_length=128)
    color: str = Field(default=DEFAULT_COLOR, pattern=HEX_COLOR)
    icon: Optional[str] = Field(default=None, max_length=64)

    strip_name = field_validator("name", mode="before")(_strip_name)


class ProjectUpdate(BaseModel):
    """Partial update; omitted fields keep their value."""
    name: Optional[str] = Field(default=None, max_length=128)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)
    icon: Optional[str] = Field(default=None, max_length=64)

    strip_name = field_validator("name", mode="before")(_strip_name)


class TagIn(BaseModel):
    name: str = Field(max_length=64)
    color: str = Field(default=DEFAULT_COLOR, pattern=HEX_COLOR)

    strip_name = field_validator("name", mode="before")(_strip_name)


class TagUpdate(BaseModel):
    name: Optional[str] = Field(default=None, max_length=64)
    color: Optional[str] = Field(default=None, pattern=HEX_COLOR)

    strip_name = field_validator("name", mode="before")(_strip_name)


def project_out(project: Project, meeting_count: Optional[int] = None) -> dict:
    data = {
        "id": str(project.id),
        "name": project.name,
        "color": project.color,
        "icon": project.icon,
    }
    if meeting_count is not None:
        data["meetingCount"] = meeting_count
    return data


def tag_out(tag: Tag, meeting_count: Optional[int] = None) -> dict:
    data = {"id": str(tag.id), "name": tag.name, "color": tag.color}
    if meeting_count is not None:
        data["meetingCount"] = meeting_count
    return data
