"""Data models for report and podcast generation."""

from dataclasses import dataclass, field

from archive_audio.constants import (
    DEFAULT_SIMILARITY_BOOST,
    DEFAULT_STABILITY,
    DEFAULT_TARGET_SECONDS,
    DEFAULT_INVESTIGATION,
    DEFAULT_INVESTIGATORS,
    DEFAULT_HOSTS,
)


@dataclass(frozen=True)
class Voice:
    id: str
    name: str
    voice_id: str                      # ElevenLabs voice id
    stability: float = DEFAULT_STABILITY
    similarity_boost: float = DEFAULT_SIMILARITY_BOOST
    edge_voice: str = ""               # edge-tts voice for the "edge" provider


@dataclass(frozen=True)
class Persona:
    key: str
    name: str
    alias: str
    tone: str
    humor_style: str
    interests: tuple[str, ...]
    voice: Voice
    opening_lines: tuple[str, ...]
    closing_lines: tuple[str, ...]


@dataclass
class DialogueTurn:
    speaker: str       # persona key
    text: str
    audio_file: str | None = None


@dataclass
class GenerationProgress:
    status: str
    message: str
    current_step: int | None = None
    total_steps: int | None = None

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "message": self.message,
            "currentStep": self.current_step,
            "totalSteps": self.total_steps,
        }


@dataclass
class GenerationResult:
    success: bool
    audio_file: str | None = None
    audio_url: str | None = None
    title: str | None = None
    tags: list[str] = field(default_factory=list)
    error: str | None = None

    def to_dict(self) -> dict:
        return {
            "success": self.success,
            "audioFile": self.audio_file,
            "audioUrl": self.audio_url,
            "title": self.title,
            "tags": list(self.tags),
            "error": self.error,
        }


@dataclass
class FalseRedactions:
    """Text recovered from behind redaction boxes by the document analyzer."""

    found: bool = False
    page_count: int = 0
    total_hidden_words: int = 0
    hidden_words: list[str] = field(default_factory=list)
    hidden_phrases: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict | None) -> "FalseRedactions | None":
        if not data:
            return None
        return cls(
            found=bool(data.get("found", False)),
            page_count=data.get("pageCount") or 0,
            total_hidden_words=data.get("totalHiddenWords") or 0,
            hidden_words=list(data.get("hiddenWords") or []),
            hidden_phrases=list(data.get("hiddenPhrases") or []),
        )


@dataclass
class DocumentInput:
    document_id: str = ""
    url: str = ""
    summary: str = ""
    page_summary: str = ""
    content: str = ""
    names: list[str] = field(default_factory=list)
    dates: list[str] = field(default_factory=list)
    places: list[str] = field(default_factory=list)
    objects: list[str] = field(default_factory=list)
    page_number: int | None = None
    date: str = ""
    false_redactions: FalseRedactions | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "DocumentInput":
        """Build from the camelCase JSON the document browser sends."""
        return cls(
            document_id=data.get("documentId") or "",
            url=data.get("url") or "",
            summary=data.get("summary") or "",
            page_summary=data.get("pageSummary") or "",
            content=data.get("content") or "",
            names=list(data.get("names") or []),
            dates=list(data.get("dates") or []),
            places=list(data.get("places") or []),
            objects=list(data.get("objects") or []),
            page_number=data.get("pageNumber"),
            date=data.get("date") or "",
            false_redactions=FalseRedactions.from_dict(data.get("falseRedactions")),
        )


@dataclass
class Article:
    id: str
    content: str
    title: str = ""
    url: str = ""
    summary: str = ""

    @classmethod
    def from_dict(cls, data: dict) -> "Article":
        return cls(
            id=str(data.get("id") or ""),
            content=data.get("content") or "",
            title=data.get("title") or "",
            url=data.get("url") or "",
            summary=data.get("summary") or "",
        )


@dataclass
class ReportRequest:
    documents: list[DocumentInput]
    investigation: str = DEFAULT_INVESTIGATION
    selected_investigators: list[str] = field(default_factory=lambda: list(DEFAULT_INVESTIGATORS))
    target_length_seconds: int = DEFAULT_TARGET_SECONDS


@dataclass
class PodcastRequest:
    articles: list[Article]
    selected_hosts: list[str] = field(default_factory=lambda: list(DEFAULT_HOSTS))
    target_length_seconds: int = DEFAULT_TARGET_SECONDS
