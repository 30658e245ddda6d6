# minutes/core/logging.py
"""
Logging setup and event helpers.

Every helper emits one human readable message and attaches the same values
as structured ``extra`` fields (``event``, ``meeting_id``, ...) so a JSON
formatter or log shipper can pick them up without parsing the message.
"""
import logging

from minutes.config import settings

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"

logger = logging.getLogger("minutes")


def configure_logging(level: str | None = None) -> None:
    """Configure the root logger once (idempotent)."""
    root = logging.getLogger()
    if not root.handlers:
        logging.basicConfig(format=LOG_FORMAT)
    logger.setLevel((level or settings.log_level).upper())


def _emit(level: int, event: str, message: str, **fields) -> None:
    logger.log(level, message, extra={"event": event, **fields})


# -------- processing pipeline --------
def processing_start(meeting_id: str, title: str) -> None:
    _emit(logging.INFO, "processing_start", f"Processing started: {title}",
          meeting_id=meeting_id, title=title)


def processing_complete(meeting_id: str, title: str, duration_ms: int) -> None:
    _emit(logging.INFO, "processing_complete", f"Processing completed: {title} ({duration_ms}ms)",
          meeting_id=meeting_id, title=title, duration_ms=duration_ms)


def processing_error(meeting_id: str, error: BaseException | str) -> None:
    message = str(error) or type(error).__name__
    _emit(logging.ERROR, "processing_error", f"Processing failed: {message}",
          meeting_id=meeting_id, error=message)


def transcription_start(meeting_id: str) -> None:
    _emit(logging.INFO, "transcription_start", "Transcription started", meeting_id=meeting_id)


def transcription_complete(meeting_id: str, utterance_count: int, speaker_count: int) -> None:
    _emit(logging.INFO, "transcription_complete",
          f"Transcription completed: {utterance_count} utterances, {speaker_count} speakers",
          meeting_id=meeting_id, utterance_count=utterance_count, speaker_count=speaker_count)


def analysis_start(meeting_id: str) -> None:
    _emit(logging.INFO, "analysis_start", "AI analysis started", meeting_id=meeting_id)


def analysis_complete(meeting_id: str, topic_count: int, action_item_count: int) -> None:
    _emit(logging.INFO, "analysis_complete",
          f"Analysis completed: {topic_count} topics, {action_item_count} action items",
          meeting_id=meeting_id, topic_count=topic_count, action_item_count=action_item_count)


# -------- auth / admission --------
def auth_login(username: str, success: bool, ip: str | None = None) -> None:
    _emit(logging.INFO if success else logging.WARNING, "auth_login",
          f"Login {'successful' if success else 'failed'}: {username}",
          username=username, success=success, ip=ip)


def rate_limit_exceeded(key: str, endpoint: str) -> None:
    _emit(logging.WARNING, "rate_limit_exceeded", f"Rate limit exceeded: {key} on {endpoint}",
          rate_key=key, endpoint=endpoint)


# -------- files / exports --------
def file_upload(filename: str, size: int, user_id: str) -> None:
    _emit(logging.INFO, "file_upload", f"File uploaded: {filename} ({round(size / 1024)}KB)",
          file_name=filename, size=size, user_id=user_id)


def file_delete(filename: str, user_id: str) -> None:
    _emit(logging.INFO, "file_delete", f"File deleted: {filename}", file_name=filename, user_id=user_id)


def export_generated(meeting_id: str, fmt: str) -> None:
    _emit(logging.INFO, "export_generated", f"Export generated: {fmt}", meeting_id=meeting_id, format=fmt)
