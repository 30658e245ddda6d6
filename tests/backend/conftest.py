import os
import uuid

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from tortoise import Tortoise

from minutes.config import settings
from minutes.core import db as db_module
from minutes.core.rate_limit import InMemoryRateLimiter
from minutes.core.security import hash_password
from minutes.main import app
from minutes.models import Language, Meeting, ProcessingStatus
from minutes.models.user import User
from minutes.services.analysis import AnalysisResult
from minutes.services.transcription_base import (
    TranscriptionResult,
    TranscriptionService,
    Utterance,
    format_full_text,
)


TEST_DB_URL = "sqlite://:memory:?cache=shared"
os.environ["DATABASE_URL"] = TEST_DB_URL
db_module.DB_URL = TEST_DB_URL
db_module.TORTOISE_ORM["connections"]["default"] = TEST_DB_URL


async def _init_test_db() -> None:
    """
    Initialize a clean in-memory SQLite database for every test.
    Ensures tables are recreated from scratch.
    """
    if Tortoise._inited:
        await Tortoise.close_connections()
    await Tortoise.init(config=db_module.TORTOISE_ORM)
    await Tortoise.generate_schemas()


@pytest.fixture(autouse=True)
def upload_dir(tmp_path, monkeypatch):
    """Store uploaded audio in a per-test directory."""
    path = tmp_path / "uploads"
    monkeypatch.setattr(settings, "upload_dir", str(path))
    return path


@pytest_asyncio.fixture
async def db():
    await _init_test_db()
    yield
    await Tortoise.close_connections()


@pytest_asyncio.fixture
async def client(db):
    """
    Provide an HTTPX AsyncClient bound to the FastAPI app with a fresh DB
    and fresh rate limit counters.
    """
    app.state.rate_limiter = InMemoryRateLimiter()
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as async_client:
        yield async_client


@pytest_asyncio.fixture
async def create_admin():
    """
    Factory fixture to create admin users directly via ORM for privileged endpoints.
    """

    async def _create_admin(password: str = "AdminPass!23") -> tuple[User, str]:
        user = await User.create(
            username=f"admin_{uuid.uuid4().hex[:6]}",
            email="admin@example.com",
            password_hash=hash_password(password),
            role="admin",
        )
        return user, password

    return _create_admin


@pytest_asyncio.fixture
async def create_user():
    """
    Factory fixture to create regular users directly.
    """

    async def _create_user(password: str = "UserPass!23") -> tuple[User, str]:
        user = await User.create(
            username=f"user_{uuid.uuid4().hex[:6]}",
            email=f"{uuid.uuid4().hex[:6]}@example.com",
            password_hash=hash_password(password),
            role="user",
        )
        return user, password

    return _create_user


@pytest_asyncio.fixture
async def auth_header_factory(client):
    """
    Helper fixture to obtain Authorization headers via the login endpoint.
    """

    async def _get_headers(username: str, password: str) -> dict[str, str]:
        resp = await client.post(
            "/api/v1/auth/login",
            json={"username": username, "password": password},
        )
        assert resp.status_code == 200, resp.text
        token = resp.json()["data"]["accessToken"]
        return {"Authorization": f"Bearer {token}"}

    return _get_headers


@pytest_asyncio.fixture
async def create_meeting(upload_dir):
    """
    Factory fixture creating a meeting row with a small audio file on disk.
    """

    async def _create_meeting(user: User, status: ProcessingStatus = ProcessingStatus.PENDING, **fields) -> Meeting:
        upload_dir.mkdir(parents=True, exist_ok=True)
        audio = upload_dir / f"{uuid.uuid4().hex}.m4a"
        audio.write_bytes(b"fake-audio")
        defaults = dict(
            title="Weekly sync",
            original_file_name="sync.m4a",
            storage_path=str(audio),
            file_size=audio.stat().st_size,
            mime_type="audio/x-m4a",
        )
        defaults.update(fields)
        return await Meeting.create(user=user, status=status, **defaults)

    return _create_meeting


# -------- fake pipeline clients --------

def sample_transcription(speaker_labels=("A", "B", "A"), duration=125.6, language=Language.ENGLISH) -> TranscriptionResult:
    indices = {}
    utterances = []
    for i, label in enumerate(speaker_labels):
        speaker = indices.setdefault(label, len(indices))
        utterances.append(Utterance(speaker=speaker, text=f"line {i}", start=i * 2.0, end=i * 2.0 + 1.5, confidence=0.9))
    return TranscriptionResult(
        utterances=utterances,
        speakers=sorted(set(indices.values())),
        duration=duration,
        full_text=format_full_text(utterances),
        detected_language=language,
        raw_response={"id": "job-1"},
    )


def sample_analysis(speaker_names=None) -> AnalysisResult:
    return AnalysisResult(
        summary="Team agreed on the launch date.",
        topics=[{"title": "Launch", "description": "Release planning", "importance": 5}],
        key_points=[{"point": "Launch on Friday", "speakerIndex": 0}],
        action_items=[{"item": "Prepare release notes", "assignee": "Ana", "priority": "high"}],
        speaker_names=speaker_names if speaker_names is not None else [{"speakerIndex": 0, "name": "Ana"}],
        meeting_document="Full document.",
        raw_response={"response": "{}"},
    )


class FakeTranscriber(TranscriptionService):
    """Returns a canned result (or raises) and records the meeting status it ran under."""

    def __init__(self, result=None, error: Exception | None = None):
        self.result = result or sample_transcription()
        self.error = error
        self.observed_statuses = []
        self.calls = []

    @property
    def name(self) -> str:
        return "fake"

    async def transcribe(self, audio_path: str) -> TranscriptionResult:
        self.calls.append(audio_path)
        meeting = await Meeting.get(storage_path=audio_path)
        self.observed_statuses.append(meeting.status)
        if self.error:
            raise self.error
        return self.result


class FakeAnalyzer:
    def __init__(self, result=None, error: Exception | None = None, meeting_id=None):
        self.result = result or sample_analysis()
        self.error = error
        self.meeting_id = meeting_id
        self.observed_statuses = []
        self.calls = []

    async def analyze(self, transcript, language, custom_instructions=None):
        self.calls.append((transcript, language, custom_instructions))
        if self.meeting_id is not None:
            meeting = await Meeting.get(id=self.meeting_id)
            self.observed_statuses.append(meeting.status)
        if self.error:
            raise self.error
        return self.result
