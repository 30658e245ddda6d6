# minutes/models/__init__.py
"""
Database models module initialization.
Exports all database models for convenient imports throughout the application.

Models exported:
- User: User account and authentication model
- Meeting: Uploaded recording and its processing state
- Transcript / Speaker / Utterance: Diarized transcription of a meeting
- Analysis: AI summary, topics, key points and action items
- Project / Tag: User-scoped organization
- Setting: Encrypted third-party API keys
"""
from .user import User
from .organization import Project, Tag
from .meeting import Meeting, ProcessingStatus, Language
from .transcript import Transcript, Speaker, Utterance
from .analysis import Analysis
from .setting import Setting, ApiKey
