"""
Meeting export

Renders a completed meeting (metadata, analysis and the speaker-labelled
transcript) as Markdown or as a standalone HTML page.
"""
from dataclasses import dataclass, field
from html import escape
from typing import Any, Dict, List, Optional

from minutes.models import Analysis, Meeting, Speaker, Utterance
from minutes.models.meeting import Language

EXPORT_FORMATS = ("markdown", "html")

MEDIA_TYPES = {
    "markdown": "text/markdown; charset=utf-8",
    "html": "text/html; charset=utf-8",
}

EXTENSIONS = {"markdown": "md", "html": "html"}

LANGUAGE_LABELS = {
    Language.ENGLISH: "English",
    Language.PORTUGUESE_BR: "Portuguese (Brazil)",
    Language.SPANISH: "Spanish",
}


@dataclass
class ExportLine:
    speaker: str
    start: float
    text: str


@dataclass
class ExportData:
    title: str
    date: str
    duration: Optional[int]
    language: str
    description: Optional[str] = None
    summary: str = ""
    topics: List[Dict[str, Any]] = field(default_factory=list)
    key_points: List[Dict[str, Any]] = field(default_factory=list)
    action_items: List[Dict[str, Any]] = field(default_factory=list)
    meeting_document: str = ""
    transcript: List[ExportLine] = field(default_factory=list)


def format_timestamp(seconds: float) -> str:
    """``mm:ss`` below an hour, ``h:mm:ss`` from there on."""
    total = int(seconds or 0)
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes:02d}:{secs:02d}"


def format_duration(seconds: Optional[int]) -> str:
    if not seconds:
        return "-"
    hours, rest = divmod(int(seconds), 3600)
    minutes, secs = divmod(rest, 60)
    if hours:
        return f"{hours}h {minutes}m"
    if minutes:
        return f"{minutes}m {secs}s"
    return f"{secs}s"


def speaker_name(speaker: Speaker) -> str:
    return speaker.label or f"Speaker {speaker.speaker_index}"


def collect_export_data(
    meeting: Meeting,
    speakers: List[Speaker],
    utterances: List[Utterance],
    analysis: Optional[Analysis],
) -> ExportData:
    names = {s.id: speaker_name(s) for s in speakers}
    when = meeting.processed_at or meeting.uploaded_at
    data = ExportData(
        title=meeting.title,
        description=meeting.description,
        date=when.strftime("%Y-%m-%d %H:%M") if when else "-",
        duration=meeting.duration,
        language=LANGUAGE_LABELS.get(meeting.language, str(meeting.language)),
        transcript=[
            ExportLine(speaker=names.get(u.speaker_id, "Unknown"), start=u.start_time, text=u.text)
            for u in utterances
        ],
    )
    if analysis is not None:
        data.summary = analysis.summary
        data.topics = analysis.topics or []
        data.key_points = analysis.key_points or []
        data.action_items = analysis.action_items or []
        data.meeting_document = analysis.meeting_document or ""
    return data


def _action_suffix(item: Dict[str, Any]) -> str:
    parts = [f"priority: {item.get('priority', 'medium')}"]
    if item.get("assignee"):
        parts.append(f"assignee: {item['assignee']}")
    return f" ({', '.join(parts)})"


def render_markdown(data: ExportData) -> str:
    lines = [f"# {data.title}", ""]
    lines.append(f"- **Date:** {data.date}")
    lines.append(f"- **Duration:** {format_duration(data.duration)}")
    lines.append(f"- **Language:** {data.language}")
    lines.append("")
    if data.description:
        lines += [data.description, ""]

    lines += ["## Summary", "", data.summary or "No summary available.", ""]

    if data.topics:
        lines += ["## Topics", ""]
        for topic in data.topics:
            lines.append(f"### {topic.get('title')} (importance {topic.get('importance')}/5)")
            if topic.get("description"):
                lines += ["", topic["description"]]
            lines.append("")

    if data.key_points:
        lines += ["## Key Points", ""]
        for kp in data.key_points:
            line = f"- {kp.get('point', '')}"
            if kp.get("context"):
                line += f" _{kp['context']}_"
            lines.append(line)
        lines.append("")

    if data.action_items:
        lines += ["## Action Items", ""]
        for item in data.action_items:
            lines.append(f"- [ ] {item.get('item', '')}{_action_suffix(item)}")
        lines.append("")

    if data.meeting_document:
        lines += ["## Meeting Document", "", data.meeting_document, ""]

    if data.transcript:
        lines += ["## Transcript", ""]
        for line in data.transcript:
            lines += [f"**[{format_timestamp(line.start)}] {line.speaker}:** {line.text}", ""]

    return "\n".join(lines).rstrip() + "\n"


def _paragraphs(text: str) -> str:
    return "".join(f"<p>{escape(p)}</p>" for p in text.split("\n\n") if p.strip())


def render_html(data: ExportData) -> str:
    body = [f"<h1>{escape(data.title)}</h1>"]
    body.append(
        "<ul class=\"meta\">"
        f"<li><strong>Date:</strong> {escape(data.date)}</li>"
        f"<li><strong>Duration:</strong> {escape(format_duration(data.duration))}</li>"
        f"<li><strong>Language:</strong> {escape(data.language)}</li>"
        "</ul>"
    )
    if data.description:
        body.append(_paragraphs(data.description))

    body.append("<h2>Summary</h2>")
    body.append(_paragraphs(data.summary or "No summary available."))

    if data.topics:
        body.append("<h2>Topics</h2>")
        for topic in data.topics:
            body.append(
                f"<h3>{escape(str(topic.get('title', '')))} "
                f"<small>(importance {escape(str(topic.get('importance', '')))}/5)</small></h3>"
            )
            if topic.get("description"):
                body.append(_paragraphs(str(topic["description"])))

    if data.key_points:
        items = []
        for kp in data.key_points:
            context = f" <em>{escape(str(kp['context']))}</em>" if kp.get("context") else ""
            items.append(f"<li>{escape(str(kp.get('point', '')))}{context}</li>")
        body.append("<h2>Key Points</h2><ul>" + "".join(items) + "</ul>")

    if data.action_items:
        items = [
            f"<li>{escape(str(item.get('item', '')))}{escape(_action_suffix(item))}</li>"
            for item in data.action_items
        ]
        body.append("<h2>Action Items</h2><ul>" + "".join(items) + "</ul>")

    if data.meeting_document:
        body.append("<h2>Meeting Document</h2>")
        body.append(_paragraphs(data.meeting_document))

    if data.transcript:
        body.append("<h2>Transcript</h2>")
        for line in data.transcript:
            body.append(
                f"<p><span class=\"ts\">[{format_timestamp(line.start)}]</span> "
                f"<strong>{escape(line.speaker)}:</strong> {escape(line.text)}</p>"
            )

    return (
        "<!DOCTYPE html>\n<html><head><meta charset=\"utf-8\">"
        f"<title>{escape(data.title)}</title></head>\n<body>\n"
        + "\n".join(body)
        + "\n</body></html>\n"
    )


def render(data: ExportData, fmt: str) -> str:
    if fmt == "html":
        return render_html(data)
    return render_markdown(data)


def export_filename(title: str, fmt: str) -> str:
    safe = "".join(c if c.isalnum() or c in "-_ " else "_" for c in title).strip().replace(" ", "_")
    return f"{safe or 'meeting'}.{EXTENSIONS[fmt]}"
