"""Canonical document hierarchy: Document -> Chapter -> Paragraph -> Sentence."""

from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator

from docstruct.models.raw import DocumentMetadata

ParagraphKind = Literal["text", "code", "list_item", "quote", "heading", "table"]


class CharRange(BaseModel):
    """Half-open ``[start, end)`` offsets into the original source text."""

    model_config = ConfigDict(frozen=True)

    start: int = Field(ge=0)
    end: int = Field(ge=0)

    @model_validator(mode="after")
    def _check_order(self) -> CharRange:
        if self.end < self.start:
            raise ValueError(f"range end {self.end} precedes start {self.start}")
        return self

    @property
    def length(self) -> int:
        return self.end - self.start

    def contains(self, other: CharRange) -> bool:
        return self.start <= other.start and other.end <= self.end


class Sentence(BaseModel):
    """Smallest tracked text unit."""

    model_config = ConfigDict(frozen=True)

    id: str
    text: str
    position: int  # 0-based within the paragraph
    char_range: CharRange
    word_count: int = 0
    estimated_duration: float = 0.0  # seconds
    has_formatting: bool = False


class Paragraph(BaseModel):
    """A contiguous content block within a chapter."""

    model_config = ConfigDict(frozen=True)

    id: str
    kind: ParagraphKind = "text"
    sentences: list[Sentence] = Field(default_factory=list)
    position: int
    char_range: CharRange
    word_count: int = 0
    estimated_duration: float = 0.0
    raw_text: str = ""
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    include_in_narration: bool = True


class Chapter(BaseModel):
    """Top-level structural unit of a document."""

    model_config = ConfigDict(frozen=True)

    id: str
    title: str = ""
    level: int = 1
    depth: int = 0
    paragraphs: list[Paragraph] = Field(default_factory=list)
    position: int
    char_range: CharRange
    word_count: int = 0
    estimated_duration: float = 0.0
    confidence: float | None = Field(default=None, ge=0.0, le=1.0)
    # Structural elements found in the chapter text ("table", "code", "list",
    # "quote", "link", "image") mapped to how many were seen.
    element_counts: dict[str, int] = Field(default_factory=dict)


class TocEntry(BaseModel):
    """A table-of-contents line derived from the chapter list."""

    model_config = ConfigDict(frozen=True)

    title: str
    level: int
    chapter_position: int


class ProcessingMetrics(BaseModel):
    """Timing and bookkeeping for one normalization pass."""

    model_config = ConfigDict(frozen=True)

    parse_start_time: datetime
    parse_end_time: datetime
    parse_duration_ms: float = 0.0
    source_length: int = 0
    processing_errors: list[str] = Field(default_factory=list)


class DocumentStructure(BaseModel):
    """The normalized document, built once and read-only afterwards."""

    model_config = ConfigDict(frozen=True)

    metadata: DocumentMetadata = Field(default_factory=DocumentMetadata)
    chapters: list[Chapter] = Field(default_factory=list)
    table_of_contents: list[TocEntry] = Field(default_factory=list)
    total_paragraphs: int = 0
    total_sentences: int = 0
    total_word_count: int = 0
    estimated_total_duration: float = 0.0
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    processing_metrics: ProcessingMetrics | None = None

    @property
    def total_chapters(self) -> int:
        return len(self.chapters)
