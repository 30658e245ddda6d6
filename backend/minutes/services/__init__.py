"""
Services Module

Provides the processing pipeline and the clients it coordinates:
- Transcription (speech-to-text with diarization): AssemblyAI
- Analysis (summary, topics, action items): Google Gemini
- Orchestrator: runs transcription + analysis for a meeting in the background
- Settings store, audio storage and export helpers
"""

# Transcription
from .transcription_base import (
    TranscriptionService,
    TranscriptionResult,
    Utterance,
    map_speakers,
    map_language_code,
    get_speaker_color,
)
from .transcription_assemblyai import AssemblyAIService, assemblyai_service

# Analysis
from .analysis import (
    AnalysisResult,
    GeminiAnalysisService,
    gemini_analysis_service,
    parse_analysis_response,
)

# Orchestrator
from .processing import (
    process_meeting,
    start_processing,
    get_processing_status,
)

__all__ = [
    # Transcription
    "TranscriptionService",
    "TranscriptionResult",
    "Utterance",
    "map_speakers",
    "map_language_code",
    "get_speaker_color",
    "AssemblyAIService",
    "assemblyai_service",
    # Analysis
    "AnalysisResult",
    "GeminiAnalysisService",
    "gemini_analysis_service",
    "parse_analysis_response",
    # Orchestrator
    "process_meeting",
    "start_processing",
    "get_processing_status",
]
