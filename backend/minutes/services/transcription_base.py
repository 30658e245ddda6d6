"""
Transcription Service Abstract Interface

Provides a unified interface for speech-to-text providers with speaker
diarization, plus the pure helpers shared by every provider (speaker index
mapping, language mapping, speaker colors).
"""
from abc import ABC, abstractmethod
from typing import Dict, List, Optional
from dataclasses import dataclass, field

from minutes.models.meeting import Language


# Fixed, ordered palette; a speaker's color is palette[index % len(palette)]
SPEAKER_COLORS = [
    "#3b82f6",  # blue-500
    "#10b981",  # emerald-500
    "#f59e0b",  # amber-500
    "#8b5cf6",  # violet-500
    "#ec4899",  # pink-500
    "#06b6d4",  # cyan-500
    "#f97316",  # orange-500
    "#6366f1",  # indigo-500
]

# Provider language code -> internal language
LANGUAGE_CODES: Dict[str, Language] = {
    "en": Language.ENGLISH,
    "en_us": Language.ENGLISH,
    "en_uk": Language.ENGLISH,
    "en_au": Language.ENGLISH,
    "pt": Language.PORTUGUESE_BR,
    "pt_br": Language.PORTUGUESE_BR,
    "es": Language.SPANISH,
}
DEFAULT_LANGUAGE = Language.ENGLISH


@dataclass
class Utterance:
    """
    One diarized speech segment.

    Note: Timestamps are relative to audio start, in seconds
    """
    speaker: int  # Dense speaker index (see SpeakerIndex)
    text: str
    start: float
    end: float
    confidence: Optional[float] = None

    def __repr__(self):
        return f"Utterance(speaker={self.speaker}, text='{self.text[:30]}...', start={self.start:.2f}s, end={self.end:.2f}s)"


@dataclass
class TranscriptionResult:
    """Complete transcription result"""
    utterances: List[Utterance]
    speakers: List[int]  # Sorted distinct speaker indices
    duration: float  # Seconds
    full_text: str
    detected_language: Language
    raw_response: dict = field(default_factory=dict)


class SpeakerIndex:
    """
    Maps opaque provider speaker labels to 0, 1, 2, ... in order of first
    appearance. Only stable within one transcription.
    """

    def __init__(self):
        self._indices: Dict[str, int] = {}

    def __call__(self, label) -> int:
        key = str(label)
        if key not in self._indices:
            self._indices[key] = len(self._indices)
        return self._indices[key]

    def __len__(self) -> int:
        return len(self._indices)


def map_speakers(labels: List) -> List[int]:
    """``["A", "B", "A"] -> [0, 1, 0]``"""
    index = SpeakerIndex()
    return [index(label) for label in labels]


def map_language_code(code: Optional[str]) -> Language:
    if not code:
        return DEFAULT_LANGUAGE
    normalized = code.lower().replace("-", "_")
    return LANGUAGE_CODES.get(normalized, DEFAULT_LANGUAGE)


def get_speaker_color(speaker_index: int) -> str:
    return SPEAKER_COLORS[speaker_index % len(SPEAKER_COLORS)]


def format_full_text(utterances: List[Utterance]) -> str:
    """Speaker-prefixed transcript, the form the analysis prompt expects."""
    return "\n\n".join(f"[Speaker {u.speaker}]: {u.text}" for u in utterances)


class TranscriptionService(ABC):
    """Transcription Service Abstract Base Class"""

    @abstractmethod
    async def transcribe(self, audio_path: str) -> TranscriptionResult:
        """
        Transcribe an audio file with speaker labels and language detection

        Parameters:
        - audio_path: Path of the uploaded audio file

        Returns:
        - TranscriptionResult: Utterances, speakers, duration, text and language
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """Service name (e.g., "AssemblyAI")"""
        pass
