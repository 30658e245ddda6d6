import os

import pytest

from conftest import FakeAnalyzer, FakeTranscriber, sample_transcription
from minutes.config import settings
from minutes.models import Meeting, ProcessingStatus
from minutes.services.processing import process_meeting


pytestmark = pytest.mark.asyncio


async def _upload(client, headers, filename="call.mp3", content=b"ID3audio", mime="audio/mpeg", **form):
    form.setdefault("title", "Kickoff")
    files = {"file": (filename, content, mime)} if filename is not None else None
    return await client.post("/api/v1/upload", headers=headers, files=files, data=form)


async def test_upload_creates_pending_meeting(client, create_user, auth_header_factory, upload_dir):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    resp = await _upload(
        client, headers, title="  Kickoff  ", description="First call", aiInstructions="  "
    )
    body = resp.json()
    assert resp.status_code == 200
    assert body["data"]["message"] == "File uploaded successfully"

    meeting = await Meeting.get(id=body["data"]["id"])
    assert meeting.user_id == user.id
    assert meeting.title == "Kickoff"
    assert meeting.description == "First call"
    assert meeting.ai_instructions is None
    assert meeting.status == ProcessingStatus.PENDING
    assert meeting.original_file_name == "call.mp3"
    assert meeting.mime_type == "audio/mpeg"
    assert meeting.file_size == len(b"ID3audio")
    assert os.path.dirname(meeting.storage_path) == str(upload_dir)
    assert meeting.storage_path.endswith(".mp3")
    with open(meeting.storage_path, "rb") as f:
        assert f.read() == b"ID3audio"


async def test_upload_validation_errors(client, create_user, auth_header_factory, upload_dir, monkeypatch):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    no_file = await _upload(client, headers, filename=None)
    assert no_file.status_code == 400
    assert no_file.json()["detail"] == "No file provided"

    bad_type = await _upload(client, headers, filename="notes.pdf", mime="application/pdf")
    assert bad_type.status_code == 400
    assert "Invalid file type" in bad_type.json()["detail"]

    no_title = await _upload(client, headers, title="   ")
    assert no_title.status_code == 400
    assert no_title.json()["detail"] == "Title is required"

    monkeypatch.setattr(settings, "max_file_size_mb", 0)
    too_big = await _upload(client, headers)
    assert too_big.status_code == 400
    assert "File is too large" in too_big.json()["detail"]

    assert await Meeting.all().count() == 0
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []


async def test_oversized_upload_is_rejected_without_writing(client, create_user, auth_header_factory, upload_dir, monkeypatch):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)
    monkeypatch.setattr(settings, "max_file_size_mb", 1)

    resp = await _upload(client, headers, filename="long.wav", content=b"\x00" * (2 * 1024 * 1024 + 7), mime="audio/wav")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "File is too large. Maximum size is 1MB."
    assert await Meeting.all().count() == 0
    assert not upload_dir.exists() or list(upload_dir.iterdir()) == []

    # Exactly at the limit is still accepted
    ok = await _upload(client, headers, filename="edge.wav", content=b"\x00" * (1024 * 1024), mime="audio/wav")
    assert ok.status_code == 200


async def test_upload_is_rate_limited(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    for _ in range(10):
        assert (await _upload(client, headers)).status_code == 200
    blocked = await _upload(client, headers)
    assert blocked.status_code == 429
    assert await Meeting.filter(user_id=user.id).count() == 10


async def test_upload_requires_auth(client):
    assert (await _upload(client, {})).status_code == 401


async def test_stats_counts_completed_meetings(client, create_user, create_meeting, auth_header_factory):
    user, password = await create_user()
    other, _ = await create_user()
    headers = await auth_header_factory(user.username, password)

    for duration in (126.0, 3474.0):
        meeting = await create_meeting(user)
        await process_meeting(
            meeting.id,
            transcriber=FakeTranscriber(sample_transcription(duration=duration)),
            analyzer=FakeAnalyzer(),
        )
    for i in range(4):
        await create_meeting(user, title=f"pending {i}")
    await create_meeting(user, status=ProcessingStatus.FAILED, title="broken")

    # Another user's completed meeting is not counted
    foreign = await create_meeting(other)
    await process_meeting(foreign.id, transcriber=FakeTranscriber(), analyzer=FakeAnalyzer())

    resp = await client.get("/api/v1/stats", headers=headers)
    data = resp.json()["data"]
    assert resp.status_code == 200
    assert data["stats"] == {"totalMeetings": 2, "totalHours": 1.0, "totalActionItems": 2}
    assert len(data["recentMeetings"]) == 5
    assert data["recentMeetings"][0]["title"] == "broken"


async def test_stats_empty(client, create_user, auth_header_factory):
    user, password = await create_user()
    headers = await auth_header_factory(user.username, password)

    data = (await client.get("/api/v1/stats", headers=headers)).json()["data"]
    assert data == {"stats": {"totalMeetings": 0, "totalHours": 0.0, "totalActionItems": 0}, "recentMeetings": []}
