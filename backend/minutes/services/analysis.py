"""
Meeting Analysis Service

Uses the Google Gemini generateContent API to turn a speaker-labelled
transcript into:
1. An executive summary
2. Topics, key points and action items
3. Speaker names inferred from the conversation
4. A long-form meeting document
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional

import httpx

from .errors import AnalysisError, AnalysisParseError, CredentialError
from .settings_store import get_api_key
from ..config import settings
from ..models.meeting import Language
from ..models.setting import ApiKey
from ..schemas.analysis import AnalysisPayload

logger = logging.getLogger(__name__)

ApiKeyProvider = Callable[[], Awaitable[Optional[str]]]

LANGUAGE_NAMES = {
    Language.ENGLISH: "English",
    Language.PORTUGUESE_BR: "Portuguese (Brazil)",
    Language.SPANISH: "Spanish",
}


@dataclass
class AnalysisResult:
    """Normalized analysis, ready to persist (JSON fields use camelCase keys)"""
    summary: str
    topics: List[Dict[str, Any]] = field(default_factory=list)
    key_points: List[Dict[str, Any]] = field(default_factory=list)
    action_items: List[Dict[str, Any]] = field(default_factory=list)
    speaker_names: List[Dict[str, Any]] = field(default_factory=list)
    meeting_document: str = ""
    raw_response: Dict[str, Any] = field(default_factory=dict)


def extract_json_object(text: str) -> dict:
    """
    Return the first JSON object embedded in ``text``.

    Tolerates surrounding prose and markdown code fences. Raises
    AnalysisParseError when no object can be decoded.
    """
    decoder = json.JSONDecoder()
    start = text.find("{")
    while start != -1:
        try:
            obj, _ = decoder.raw_decode(text, start)
        except json.JSONDecodeError:
            start = text.find("{", start + 1)
            continue
        if isinstance(obj, dict):
            return obj
        start = text.find("{", start + 1)
    raise AnalysisParseError("No JSON found in response")


def parse_analysis_response(text: str) -> AnalysisResult:
    """
    Normalize raw model text into an AnalysisResult.

    Never raises: unparseable output degrades to the raw text as summary and
    empty lists, with the parse error recorded in raw_response.
    """
    try:
        data = extract_json_object(text)
    except AnalysisParseError as e:
        logger.error("Failed to parse Gemini response: %s", e)
        return AnalysisResult(
            summary=text,
            raw_response={"response": text, "parseError": str(e)},
        )

    payload = AnalysisPayload.model_validate(data)
    return AnalysisResult(
        summary=payload.summary,
        topics=[t.model_dump() for t in payload.topics],
        key_points=[k.model_dump(exclude_none=True) for k in payload.keyPoints],
        action_items=[a.model_dump(exclude_none=True) for a in payload.actionItems],
        speaker_names=[s.model_dump() for s in payload.speakerNames],
        meeting_document=payload.meetingDocument,
        raw_response={"response": text},
    )


def build_prompt(transcript: str, language: Language, custom_instructions: Optional[str] = None) -> str:
    """Build the single analysis prompt"""
    language_name = LANGUAGE_NAMES.get(language, LANGUAGE_NAMES[Language.ENGLISH])

    custom_section = ""
    if custom_instructions and custom_instructions.strip():
        custom_section = f"""
CUSTOM INSTRUCTIONS FROM USER:
{custom_instructions.strip()}

Please incorporate these instructions into your analysis. Adjust the summary, topics, and key points according to what the user requested.
"""

    return f"""You are an expert meeting analyst. Analyze the following meeting transcript and provide a comprehensive analysis.

IMPORTANT: Respond in {language_name}.
{custom_section}
Provide your response in this exact JSON format (and ONLY this JSON, no other text):
{{
  "summary": "A 2-3 paragraph executive summary of the meeting, highlighting the main discussion points and outcomes",
  "topics": [
    {{
      "title": "Topic title",
      "description": "Brief description of what was discussed",
      "importance": 1-5 (5 being most important)
    }}
  ],
  "keyPoints": [
    {{
      "point": "Key insight or decision",
      "context": "Optional context about when/how this came up",
      "speakerIndex": null or speaker number if identifiable
    }}
  ],
  "actionItems": [
    {{
      "item": "Action item description",
      "assignee": "Person responsible (if mentioned)",
      "priority": "high" | "medium" | "low"
    }}
  ],
  "speakerNames": [
    {{
      "speakerIndex": 0,
      "name": "Name of the speaker if mentioned"
    }}
  ],
  "meetingDocument": "A comprehensive formal document about the meeting: introduction with context and participants, each topic discussed in detail, key decisions and their rationale, action items with context, and a conclusion. Someone who wasn't present should fully understand what happened."
}}

Guidelines:
- Extract ALL relevant topics discussed, as many as necessary for complete understanding
- Identify ALL key points and decisions, do not limit the number
- List ALL action items mentioned (who needs to do what)
- Speakers are labelled [Speaker 0], [Speaker 1], ...; attribute key points to them where possible
- Identify speaker names ONLY from the transcript:
  * Self-introductions: "My name is X", "I'm X", "This is X speaking"
  * Direct address: "X, what do you think?", "As X said..."
  * Never guess; only include speakers whose names you can identify with confidence

Meeting Transcript:
{transcript}"""


async def _stored_gemini_key() -> Optional[str]:
    return await get_api_key(ApiKey.GEMINI)


class GeminiAnalysisService:
    """Gemini meeting analysis"""

    def __init__(
        self,
        api_key_provider: ApiKeyProvider = _stored_gemini_key,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_key_provider = api_key_provider
        self.model = model or settings.gemini_model
        self.base_url = (base_url or settings.gemini_base_url).rstrip("/")
        self.transport = transport

    @property
    def api_url(self) -> str:
        return f"{self.base_url}/v1beta/models/{self.model}:generateContent"

    async def generate(self, api_key: str, prompt: str) -> str:
        """Call generateContent and return the first candidate's text"""
        payload = {"contents": [{"parts": [{"text": prompt}]}]}
        headers = {"x-goog-api-key": api_key, "Content-Type": "application/json"}

        async with httpx.AsyncClient(timeout=settings.gemini_http_timeout, transport=self.transport) as client:
            resp = await client.post(self.api_url, headers=headers, json=payload)

        if not resp.is_success:
            try:
                message = resp.json().get("error", {}).get("message")
            except (ValueError, AttributeError):
                message = None
            raise AnalysisError(f"Gemini request failed: {message or f'{resp.status_code} {resp.reason_phrase}'}")

        result = resp.json()
        candidates = result.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    async def analyze(
        self,
        transcript: str,
        language: Language,
        custom_instructions: Optional[str] = None,
    ) -> AnalysisResult:
        api_key = await self.api_key_provider()
        if not api_key:
            raise CredentialError("Gemini API key not configured. Please add it in Settings.")

        prompt = build_prompt(transcript, language, custom_instructions)
        logger.info("[Gemini] Calling %s to analyze meeting (%d chars)...", self.model, len(transcript))
        text = await self.generate(api_key, prompt)
        return parse_analysis_response(text)


# Global singleton
gemini_analysis_service = GeminiAnalysisService()
