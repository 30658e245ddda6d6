"""
Unit tests for services.storage module.
"""
import os

import pytest

from minutes.config import settings
from minutes.services.storage import (
    InvalidUploadError,
    delete_audio,
    read_upload,
    save_audio,
    storage_name,
    validate_upload,
)


class TestValidateUpload:
    def test_valid_upload_returns_trimmed_title(self):
        assert validate_upload("call.mp3", "audio/mpeg", 1024, "  Kickoff  ") == "Kickoff"

    @pytest.mark.parametrize("mime", ["audio/mpeg", "audio/mp4", "audio/x-m4a", "audio/wav", "audio/wave"])
    def test_allowed_types(self, mime):
        assert validate_upload("a", mime, 1, "t") == "t"

    @pytest.mark.parametrize("filename", [None, ""])
    def test_missing_file(self, filename):
        with pytest.raises(InvalidUploadError, match="No file provided"):
            validate_upload(filename, "audio/mpeg", 1, "t")

    @pytest.mark.parametrize("mime", ["video/mp4", "application/pdf", None])
    def test_rejected_type(self, mime):
        with pytest.raises(InvalidUploadError, match="Invalid file type"):
            validate_upload("a.mp4", mime, 1, "t")

    def test_too_large(self, monkeypatch):
        monkeypatch.setattr(settings, "max_file_size_mb", 1)
        validate_upload("a.wav", "audio/wav", 1024 * 1024, "t")  # exactly at the limit
        with pytest.raises(InvalidUploadError, match="Maximum size is 1MB"):
            validate_upload("a.wav", "audio/wav", 1024 * 1024 + 1, "t")

    @pytest.mark.parametrize("title", [None, "", "   "])
    def test_title_required(self, title):
        with pytest.raises(InvalidUploadError, match="Title is required"):
            validate_upload("a.wav", "audio/wav", 1, title)


class TestStorageName:
    def test_keeps_extension(self):
        assert storage_name("My Meeting.final.MP3").endswith(".MP3")

    def test_default_extension(self):
        assert storage_name("recording").endswith(".m4a")
        assert storage_name("trailing.").endswith(".m4a")

    @pytest.mark.parametrize("name", ["a./sub/x", "clip.m4a/../../etc", "x.mp 3", "y.wav\\evil"])
    def test_unsafe_extension_falls_back(self, name):
        stored = storage_name(name)
        assert stored.endswith(".m4a")
        assert "/" not in stored and "\\" not in stored

    def test_names_are_unique(self):
        assert storage_name("a.wav") != storage_name("a.wav")

    def test_original_name_not_used(self):
        assert "secret" not in storage_name("secret-plans.wav")


@pytest.mark.asyncio
async def test_save_and_delete(upload_dir):
    stored = await save_audio("call.wav", b"RIFF....WAVE")
    assert stored.size == 12
    assert os.path.dirname(stored.path) == str(upload_dir)
    with open(stored.path, "rb") as f:
        assert f.read() == b"RIFF....WAVE"

    assert await delete_audio(stored.path) is True
    assert not os.path.exists(stored.path)


@pytest.mark.asyncio
async def test_delete_missing_file_is_not_an_error(tmp_path):
    assert await delete_audio(str(tmp_path / "gone.m4a")) is False
    assert await delete_audio(None) is False


class ChunkedUpload:
    """Stands in for UploadFile.read(size) and records how much was pulled."""

    def __init__(self, data: bytes):
        self.data = data
        self.offset = 0

    async def read(self, size: int = -1) -> bytes:
        end = len(self.data) if size < 0 else self.offset + size
        chunk = self.data[self.offset:end]
        self.offset += len(chunk)
        return chunk


@pytest.mark.asyncio
async def test_read_upload_within_limit():
    assert await read_upload(ChunkedUpload(b"abc" * 10), limit=30) == b"abc" * 10


@pytest.mark.asyncio
async def test_read_upload_stops_past_limit(monkeypatch):
    monkeypatch.setattr(settings, "max_file_size_mb", 1)
    upload = ChunkedUpload(b"\x00" * (5 * 1024 * 1024))
    with pytest.raises(InvalidUploadError, match="Maximum size is 1MB"):
        await read_upload(upload)
    assert upload.offset <= 2 * 1024 * 1024
