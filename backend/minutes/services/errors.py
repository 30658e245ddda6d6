"""
Processing error taxonomy.

Every failure the pipeline can hit derives from ``ProcessingError``; the
orchestrator catches anything (these or unexpected exceptions) and records
``str(exc)`` as the meeting's processing error, so messages here are written
for the end user.
"""


class ProcessingError(Exception):
    """Base class for pipeline errors."""


class CredentialError(ProcessingError):
    """A third-party API key is not configured."""


class UploadError(ProcessingError):
    """The transcription provider rejected the audio upload."""


class JobCreationError(ProcessingError):
    """The transcription provider refused to create a job."""


class TranscriptionError(ProcessingError):
    """The transcription job failed or could not be polled."""


class TranscriptionTimeoutError(TranscriptionError):
    """The transcription job did not finish within the configured deadline."""


class AnalysisError(ProcessingError):
    """The analysis provider returned a non-success response."""


class AnalysisParseError(ProcessingError):
    """The analysis response did not contain a parseable JSON object."""


class MeetingNotFoundError(ProcessingError):
    pass


class AlreadyProcessedError(ProcessingError):
    def __init__(self, message: str = "Meeting already processed"):
        super().__init__(message)


class AlreadyProcessingError(ProcessingError):
    def __init__(self, message: str = "Meeting is already being processed"):
        super().__init__(message)
