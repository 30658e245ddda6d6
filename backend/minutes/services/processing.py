"""
Processing Orchestrator

Drives a meeting through PENDING -> TRANSCRIBING -> ANALYZING -> COMPLETED,
or FAILED on any error. Results are written in one transaction together with
the flip to COMPLETED, replacing whatever a previous run left behind.

Runs are plain asyncio tasks on the server loop; there is no queue.
"""
import asyncio
import logging
import math
import time
from datetime import datetime, timezone
from typing import Optional, Set

from tortoise.transactions import in_transaction

from minutes.core import logging as log
from minutes.models import Analysis, Meeting, ProcessingStatus, Speaker, Transcript, Utterance
from minutes.models.meeting import STARTABLE_STATUSES
from .analysis import AnalysisResult, GeminiAnalysisService, gemini_analysis_service
from .errors import AlreadyProcessedError, AlreadyProcessingError, MeetingNotFoundError
from .transcription_assemblyai import assemblyai_service
from .transcription_base import TranscriptionResult, TranscriptionService, get_speaker_color

logger = logging.getLogger(__name__)

# Strong references to running pipelines; the event loop only keeps weak ones
_background_tasks: Set[asyncio.Task] = set()


async def _set_status(meeting_id, status: ProcessingStatus, **extra) -> None:
    await Meeting.filter(id=meeting_id).update(status=status, **extra)


async def purge_results(meeting_id, conn) -> None:
    """Delete every row a previous run produced for this meeting."""
    transcript_ids = await Transcript.filter(meeting_id=meeting_id).using_db(conn).values_list("id", flat=True)
    if transcript_ids:
        await Utterance.filter(transcript_id__in=list(transcript_ids)).using_db(conn).delete()
    await Transcript.filter(meeting_id=meeting_id).using_db(conn).delete()
    await Speaker.filter(meeting_id=meeting_id).using_db(conn).delete()
    await Analysis.filter(meeting_id=meeting_id).using_db(conn).delete()


async def save_results(meeting_id, transcription: TranscriptionResult, analysis: AnalysisResult) -> None:
    """Replace prior results and mark the meeting COMPLETED, atomically."""
    names = {entry["speakerIndex"]: entry["name"] for entry in analysis.speaker_names}
    speaker_indices = sorted(set(transcription.speakers) | {u.speaker for u in transcription.utterances})

    async with in_transaction() as conn:
        await purge_results(meeting_id, conn)

        speakers = {}
        for index in speaker_indices:
            speakers[index] = await Speaker.create(
                meeting_id=meeting_id,
                speaker_index=index,
                label=names.get(index),
                color=get_speaker_color(index),
                using_db=conn,
            )

        transcript = await Transcript.create(
            meeting_id=meeting_id,
            full_text=transcription.full_text,
            raw_response=transcription.raw_response,
            using_db=conn,
        )
        await Utterance.bulk_create(
            [
                Utterance(
                    transcript=transcript,
                    speaker=speakers[u.speaker],
                    order_index=position,
                    text=u.text,
                    start_time=u.start,
                    end_time=u.end,
                    confidence=u.confidence,
                )
                for position, u in enumerate(transcription.utterances)
            ],
            using_db=conn,
        )

        await Analysis.create(
            meeting_id=meeting_id,
            summary=analysis.summary,
            topics=analysis.topics,
            key_points=analysis.key_points,
            action_items=analysis.action_items,
            speaker_names=analysis.speaker_names,
            meeting_document=analysis.meeting_document,
            raw_response=analysis.raw_response,
            using_db=conn,
        )

        await Meeting.filter(id=meeting_id).using_db(conn).update(
            status=ProcessingStatus.COMPLETED,
            duration=math.floor(transcription.duration + 0.5),
            language=transcription.detected_language,
            processed_at=datetime.now(timezone.utc),
            processing_error=None,
        )


async def process_meeting(
    meeting_id,
    transcriber: Optional[TranscriptionService] = None,
    analyzer: Optional[GeminiAnalysisService] = None,
) -> None:
    """
    Run the full pipeline for one meeting.

    Any failure marks the meeting FAILED with the error message and is then
    re-raised to the caller.
    """
    transcriber = transcriber or assemblyai_service
    analyzer = analyzer or gemini_analysis_service

    meeting = await Meeting.get_or_none(id=meeting_id)
    if meeting is None:
        raise MeetingNotFoundError(f"Meeting {meeting_id} not found")

    mid = str(meeting.id)
    started = time.perf_counter()
    log.processing_start(mid, meeting.title)

    try:
        await _set_status(meeting.id, ProcessingStatus.TRANSCRIBING, processing_error=None)
        log.transcription_start(mid)
        transcription = await transcriber.transcribe(meeting.storage_path)
        log.transcription_complete(mid, len(transcription.utterances), len(transcription.speakers))

        await _set_status(meeting.id, ProcessingStatus.ANALYZING)
        log.analysis_start(mid)
        analysis = await analyzer.analyze(
            transcription.full_text,
            transcription.detected_language,
            meeting.ai_instructions,
        )
        log.analysis_complete(mid, len(analysis.topics), len(analysis.action_items))

        await save_results(meeting.id, transcription, analysis)
    except Exception as e:
        log.processing_error(mid, e)
        await _set_status(meeting.id, ProcessingStatus.FAILED, processing_error=str(e) or "Unknown error")
        raise

    log.processing_complete(mid, meeting.title, round((time.perf_counter() - started) * 1000))


async def _run_in_background(meeting_id, transcriber, analyzer) -> None:
    try:
        await process_meeting(meeting_id, transcriber=transcriber, analyzer=analyzer)
    except Exception:
        # Already recorded on the meeting row; nobody awaits this task
        logger.exception("Background processing failed for meeting %s", meeting_id)


async def start_processing(
    meeting_id,
    transcriber: Optional[TranscriptionService] = None,
    analyzer: Optional[GeminiAnalysisService] = None,
) -> asyncio.Task:
    """
    Claim the meeting and schedule a pipeline run.

    The claim is one conditional UPDATE (PENDING/FAILED -> TRANSCRIBING), so
    two concurrent triggers can never both start a run.
    Raises MeetingNotFoundError, AlreadyProcessedError or AlreadyProcessingError.
    """
    claimed = await Meeting.filter(
        id=meeting_id, status__in=[s.value for s in STARTABLE_STATUSES]
    ).update(status=ProcessingStatus.TRANSCRIBING, processing_error=None)

    if not claimed:
        meeting = await Meeting.get_or_none(id=meeting_id)
        if meeting is None:
            raise MeetingNotFoundError(f"Meeting {meeting_id} not found")
        if meeting.status == ProcessingStatus.COMPLETED:
            raise AlreadyProcessedError()
        raise AlreadyProcessingError()

    task = asyncio.create_task(_run_in_background(meeting_id, transcriber, analyzer))
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


def get_processing_status(meeting: Meeting) -> dict:
    return {
        "status": meeting.status.value,
        "error": meeting.processing_error,
        "processedAt": meeting.processed_at.isoformat() if meeting.processed_at else None,
    }


async def wait_for_background_tasks() -> None:
    """Wait for every in-flight pipeline run to settle."""
    if _background_tasks:
        await asyncio.gather(*list(_background_tasks), return_exceptions=True)
