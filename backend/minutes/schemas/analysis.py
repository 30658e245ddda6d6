# minutes/schemas/analysis.py
"""
Pydantic schemas for the meeting analysis produced by the language model.

Model output is untrusted: every field has a default, numeric fields are
clamped, and entries that cannot be salvaged are dropped instead of failing
the whole analysis.
"""
import math
from typing import Any, List, Literal, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError, field_validator

M = TypeVar("M", bound=BaseModel)

DEFAULT_SUMMARY = "No summary available."
DEFAULT_TOPIC_TITLE = "Untitled Topic"
DEFAULT_IMPORTANCE = 3
DEFAULT_PRIORITY = "medium"
PRIORITIES = ("high", "medium", "low")


def _text_or_none(value: Any) -> Optional[str]:
    if value is None or value == "":
        return None
    return value if isinstance(value, str) else str(value)


def _finite_int(value: Any) -> Optional[int]:
    """int() of a JSON number or numeric string; None for anything else, inf and nan included."""
    if isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return int(number)


def _entries(model: Type[M], value: Any) -> List[M]:
    """Validate each list entry on its own; drop the ones that don't fit."""
    if not isinstance(value, list):
        return []
    entries = []
    for raw in value:
        if not isinstance(raw, dict):
            continue
        try:
            entries.append(model.model_validate(raw))
        except ValidationError:
            continue
    return entries


class Topic(BaseModel):
    title: str = DEFAULT_TOPIC_TITLE
    description: str = ""
    importance: int = DEFAULT_IMPORTANCE  # 1 (minor) .. 5 (critical)

    @field_validator("title", mode="before")
    @classmethod
    def _title(cls, v):
        return _text_or_none(v) or DEFAULT_TOPIC_TITLE

    @field_validator("description", mode="before")
    @classmethod
    def _description(cls, v):
        return _text_or_none(v) or ""

    @field_validator("importance", mode="before")
    @classmethod
    def _importance(cls, v):
        value = _finite_int(v)
        if not value:
            return DEFAULT_IMPORTANCE
        return min(5, max(1, value))


class KeyPoint(BaseModel):
    point: str = ""
    context: Optional[str] = None
    speakerIndex: Optional[int] = None

    @field_validator("point", mode="before")
    @classmethod
    def _point(cls, v):
        return _text_or_none(v) or ""

    @field_validator("context", mode="before")
    @classmethod
    def _context(cls, v):
        return _text_or_none(v)

    @field_validator("speakerIndex", mode="before")
    @classmethod
    def _speaker_index(cls, v):
        if not isinstance(v, (int, float)):
            return None
        return _finite_int(v)


class ActionItem(BaseModel):
    item: str = ""
    assignee: Optional[str] = None
    priority: Literal["high", "medium", "low"] = DEFAULT_PRIORITY

    @field_validator("item", mode="before")
    @classmethod
    def _item(cls, v):
        return _text_or_none(v) or ""

    @field_validator("assignee", mode="before")
    @classmethod
    def _assignee(cls, v):
        return _text_or_none(v)

    @field_validator("priority", mode="before")
    @classmethod
    def _priority(cls, v):
        value = str(v).strip().lower() if v is not None else ""
        return value if value in PRIORITIES else DEFAULT_PRIORITY


class SpeakerName(BaseModel):
    """Both fields are required; entries missing either are dropped."""
    speakerIndex: int
    name: str

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v):
        if not isinstance(v, str) or not v.strip():
            raise ValueError("speaker name missing")
        return v.strip()

    @field_validator("speakerIndex", mode="before")
    @classmethod
    def _speaker_index(cls, v):
        index = _finite_int(v) if isinstance(v, (int, float)) else None
        if index is None:
            raise ValueError("speaker index missing")
        return index


class AnalysisPayload(BaseModel):
    """The JSON object the model is asked to return."""
    summary: str = DEFAULT_SUMMARY
    topics: List[Topic] = []
    keyPoints: List[KeyPoint] = []
    actionItems: List[ActionItem] = []
    speakerNames: List[SpeakerName] = []
    meetingDocument: str = ""

    @field_validator("summary", mode="before")
    @classmethod
    def _summary(cls, v):
        return _text_or_none(v) or DEFAULT_SUMMARY

    @field_validator("meetingDocument", mode="before")
    @classmethod
    def _document(cls, v):
        return _text_or_none(v) or ""

    @field_validator("topics", mode="before")
    @classmethod
    def _topics(cls, v):
        return _entries(Topic, v)

    @field_validator("keyPoints", mode="before")
    @classmethod
    def _key_points(cls, v):
        return _entries(KeyPoint, v)

    @field_validator("actionItems", mode="before")
    @classmethod
    def _action_items(cls, v):
        return _entries(ActionItem, v)

    @field_validator("speakerNames", mode="before")
    @classmethod
    def _speaker_names(cls, v):
        return _entries(SpeakerName, v)
