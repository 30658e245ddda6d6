"""
AssemblyAI Transcription Adapter

Implements the transcription interface on top of the AssemblyAI v2 REST API:
upload the audio, create a job with speaker labels and language detection,
poll until the job finishes, then map the result.
"""
import asyncio
import logging
from pathlib import Path
from typing import Awaitable, Callable, Optional

import httpx

from .errors import CredentialError, JobCreationError, TranscriptionError, TranscriptionTimeoutError, UploadError
from .settings_store import get_api_key
from .transcription_base import (
    SpeakerIndex,
    TranscriptionResult,
    TranscriptionService,
    Utterance,
    format_full_text,
    map_language_code,
)
from ..config import settings
from ..models.setting import ApiKey

logger = logging.getLogger(__name__)

ApiKeyProvider = Callable[[], Awaitable[Optional[str]]]


async def _stored_assemblyai_key() -> Optional[str]:
    return await get_api_key(ApiKey.ASSEMBLYAI)


def _error_detail(resp: httpx.Response) -> str:
    """Provider error message if the body carries one, else the HTTP reason."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("error"):
        return str(body["error"])
    return f"{resp.status_code} {resp.reason_phrase}".strip()


class AssemblyAIService(TranscriptionService):
    """AssemblyAI speech-to-text with diarization"""

    def __init__(
        self,
        api_key_provider: ApiKeyProvider = _stored_assemblyai_key,
        base_url: Optional[str] = None,
        poll_interval: Optional[float] = None,
        max_wait: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key_provider = api_key_provider
        self.base_url = (base_url or settings.assemblyai_base_url).rstrip("/")
        self.poll_interval = settings.transcription_poll_interval if poll_interval is None else poll_interval
        self.max_wait = settings.transcription_max_wait if max_wait is None else max_wait
        self.transport = transport

    @property
    def name(self) -> str:
        return "AssemblyAI"

    async def _require_api_key(self) -> str:
        api_key = await self.api_key_provider()
        if not api_key:
            raise CredentialError("AssemblyAI API key not configured. Please add it in Settings.")
        return api_key

    def _client(self, api_key: str) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers={"authorization": api_key},
            timeout=settings.transcription_http_timeout,
            transport=self.transport,
        )

    async def upload(self, client: httpx.AsyncClient, audio: bytes) -> str:
        resp = await client.post(
            "/v2/upload",
            content=audio,
            headers={"Content-Type": "application/octet-stream"},
        )
        if not resp.is_success:
            raise UploadError(f"AssemblyAI upload failed: {_error_detail(resp)}")
        return resp.json()["upload_url"]

    async def create_job(self, client: httpx.AsyncClient, audio_url: str) -> str:
        resp = await client.post(
            "/v2/transcript",
            json={
                "audio_url": audio_url,
                "language_detection": True,
                "speaker_labels": True,
                "punctuate": True,
                "format_text": True,
            },
        )
        if not resp.is_success:
            raise JobCreationError(f"AssemblyAI transcript creation failed: {_error_detail(resp)}")
        return resp.json()["id"]

    async def poll(self, client: httpx.AsyncClient, transcript_id: str) -> dict:
        """
        Poll the job every ``poll_interval`` seconds until it completes.

        Raises TranscriptionError when the job errors and
        TranscriptionTimeoutError once ``max_wait`` seconds have passed.
        """
        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.max_wait
        attempts = 0

        while True:
            attempts += 1
            resp = await client.get(f"/v2/transcript/{transcript_id}")
            if not resp.is_success:
                raise TranscriptionError(f"AssemblyAI polling failed: {_error_detail(resp)}")

            result = resp.json()
            job_status = result.get("status")
            if job_status == "completed":
                return result
            if job_status == "error":
                raise TranscriptionError(f"AssemblyAI transcription failed: {result.get('error')}")

            if loop.time() + self.poll_interval > deadline:
                raise TranscriptionTimeoutError(
                    f"AssemblyAI transcription timed out after {int(self.max_wait)} seconds "
                    f"({attempts} status checks, last status: {job_status})"
                )
            await asyncio.sleep(self.poll_interval)

    @staticmethod
    def map_result(result: dict) -> TranscriptionResult:
        """Convert a completed AssemblyAI transcript into a TranscriptionResult."""
        speaker_index = SpeakerIndex()
        utterances = [
            Utterance(
                speaker=speaker_index(u.get("speaker")),
                text=u.get("text") or "",
                start=(u.get("start") or 0) / 1000,  # ms -> s
                end=(u.get("end") or 0) / 1000,
                confidence=u.get("confidence"),
            )
            for u in (result.get("utterances") or [])
        ]
        speakers = sorted({u.speaker for u in utterances})

        return TranscriptionResult(
            utterances=utterances,
            speakers=speakers,
            duration=float(result.get("audio_duration") or 0),
            full_text=format_full_text(utterances),
            detected_language=map_language_code(result.get("language_code")),
            raw_response=result,
        )

    async def transcribe(self, audio_path: str) -> TranscriptionResult:
        api_key = await self._require_api_key()
        audio = await asyncio.to_thread(Path(audio_path).read_bytes)

        async with self._client(api_key) as client:
            logger.info("[AssemblyAI] Uploading audio file (%d bytes)...", len(audio))
            audio_url = await self.upload(client, audio)

            logger.info("[AssemblyAI] Starting transcription with language detection...")
            transcript_id = await self.create_job(client, audio_url)

            logger.info("[AssemblyAI] Waiting for transcription %s to complete...", transcript_id)
            result = await self.poll(client, transcript_id)

        mapped = self.map_result(result)
        logger.info(
            "[AssemblyAI] Transcription complete. %d utterances, %d speakers. Language: %s",
            len(mapped.utterances), len(mapped.speakers), mapped.detected_language.value,
        )
        return mapped


# Global singleton
assemblyai_service = AssemblyAIService()
